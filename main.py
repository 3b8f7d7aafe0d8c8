"""
Variant evolution pipeline.
Loads a variability dataset, sequences its history and generates variants
with ground truth for every commit.
"""
import argparse
import sys

from varevo.pipeline.orchestrator import Pipeline
from varevo.utils import get_logger

logger = get_logger(__name__)


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Generate product-line variants and ground truth along the evolution history"
    )
    parser.add_argument(
        "--config",
        type=str,
        default="configs/pipeline.yaml",
        help="Path to configuration file"
    )
    parser.add_argument(
        "--skip-generation",
        action="store_true",
        help="Only load the dataset and sequence its history"
    )
    parser.add_argument(
        "--max-commits",
        type=int,
        default=None,
        help="Generate variants for at most this many commits"
    )
    return parser.parse_args(argv)


def main(argv=None) -> int:
    """Main pipeline execution."""
    args = parse_args(argv)

    try:
        pipeline = Pipeline(args.config)
    except FileNotFoundError as e:
        logger.error(str(e))
        return 2

    summary = pipeline.run(args)
    failed = [name for name, result in summary["steps"].items() if result.get("status") == "failed"]
    if failed:
        logger.error(f"Failed steps: {', '.join(failed)}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
