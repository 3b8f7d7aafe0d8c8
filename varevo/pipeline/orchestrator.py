"""
Pipeline orchestrator for variant evolution generation.
"""
from datetime import datetime
from pathlib import Path
from typing import Any

from varevo.io.file_ops import write_json
from varevo.pipeline.helpers import get_repo_commit
from varevo.pipeline.steps import (
    LoadDatasetStep,
    SequenceHistoryStep,
    VariantGenerationStep,
)
from varevo.utils import get_logger
from varevo.utils.config import Config

logger = get_logger(__name__)


class Pipeline:
    """Main pipeline orchestrator."""

    def __init__(self, config_path: str | Path | None = None):
        """
        Initialize pipeline.

        Args:
            config_path: Path to configuration file (default configs/pipeline.yaml)
        """
        self.config_path = config_path

        logger.info("=" * 70)
        logger.info(" Variant Evolution Pipeline")
        logger.info("=" * 70)
        logger.info(f"Loading configuration from {config_path or 'default location'}")

        self.config = Config()
        self.config.reload(config_path)

        self.paths = self._init_paths()

        self.summary = {
            "start_time": datetime.now().isoformat(),
            "config_file": str(config_path) if config_path else None,
            "steps": {}
        }

    def _init_paths(self) -> dict:
        """Initialize and create all directory paths."""
        variants = Path(self.config.get("output.variants", "data/variants"))
        reports = Path(self.config.get("output.reports", "data/reports"))

        for directory in [variants, reports]:
            directory.mkdir(parents=True, exist_ok=True)

        return {
            "variants": variants,
            "reports": reports,
            "dataset_summary_json": reports / "dataset_summary.json",
            "history_json": reports / "history.json",
            "generation_report_jsonl": reports / "generation_report.jsonl",
            "pipeline_summary_json": reports / "pipeline_summary.json",
        }

    def run(self, args: Any) -> dict:
        """
        Run the complete pipeline.

        Args:
            args: Command line arguments

        Returns:
            Pipeline summary
        """
        spl_repo = Path(self.config.spl_repo_path)
        spl_head = get_repo_commit(spl_repo)

        logger.info(f"Dataset: {self.config.dataset_path}")
        logger.info(f"Product line repository: {spl_repo} (HEAD {spl_head or 'n/a'})")

        self.summary["dataset_path"] = str(self.config.dataset_path)
        self.summary["spl_repo_path"] = str(spl_repo)
        self.summary["spl_repo_head"] = spl_head

        steps = [
            LoadDatasetStep(self.config, args, self.paths),
            SequenceHistoryStep(self.config, args, self.paths),
            VariantGenerationStep(self.config, args, self.paths),
        ]

        for step in steps:
            result = step.run()
            self.summary["steps"][step.name] = result

        self.write_summary()
        return self.summary

    def write_summary(self):
        """Write pipeline summary to file."""
        self.summary["end_time"] = datetime.now().isoformat()
        self.summary["output_files"] = {
            "variants": str(self.paths["variants"]),
            "history": str(self.paths["history_json"]),
            "generation_report": str(self.paths["generation_report_jsonl"]),
            "reports": str(self.paths["reports"])
        }

        write_json(self.paths["pipeline_summary_json"], self.summary)

        logger.info("=" * 70)
        logger.info(" Pipeline Completed")
        logger.info("=" * 70)
        logger.info(f"Summary written to: {self.paths['pipeline_summary_json']}")
        logger.info(f"Variants: {self.paths['variants']}")
        logger.info("=" * 70)
