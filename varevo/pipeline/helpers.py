"""
Helper functions for pipeline operations.
"""
import subprocess
from pathlib import Path

from varevo.history.dataset import VariabilityDataset
from varevo.history.sequencer import extractor_from_name
from varevo.io.file_ops import read_json
from varevo.schemas.history import Commit, VariabilityHistory
from varevo.utils import get_logger

logger = get_logger(__name__)


def get_repo_commit(repo_path: Path | str) -> str | None:
    """
    Get the checked out commit of a git repository.

    Args:
        repo_path: Path to repository

    Returns:
        Commit hash, or None if ``repo_path`` is not a git repository
    """
    repo_path = Path(repo_path)
    if not (repo_path / ".git").exists():
        return None

    try:
        result = subprocess.run(
            ["git", "-C", str(repo_path), "rev-parse", "HEAD"],
            capture_output=True,
            text=True,
            timeout=10
        )
    except (OSError, subprocess.TimeoutExpired) as e:
        logger.warning(f"Failed to get git commit: {e}")
        return None

    if result.returncode != 0:
        logger.warning(f"git rev-parse failed: {result.stderr.strip()}")
        return None
    return result.stdout.strip()


def load_history(history_path: Path, dataset: VariabilityDataset, strategy: str | None = None) -> VariabilityHistory:
    """
    Load the sequenced history written by the sequencing step, or sequence
    the dataset now if there is none.

    Args:
        history_path: Path to history.json
        dataset: Loaded variability dataset
        strategy: Sequencing strategy used when sequencing now

    Returns:
        VariabilityHistory
    """
    data = read_json(history_path)
    if data is not None:
        logger.info(f"Using sequenced history from {history_path}")
        return VariabilityHistory.from_dict(data)
    return dataset.variability_history(extractor_from_name(strategy))


def commit_chains(history: VariabilityHistory, dataset: VariabilityDataset) -> list[tuple[Commit, ...]]:
    """
    Chains of commits to replay.

    An empty history falls back to every usable commit on its own, in
    dataset order.
    """
    if not history.is_empty:
        return list(history.sequences)
    logger.warning("History is empty; generating usable commits one by one")
    return [(commit.commit,) for commit in dataset.usable_commits()]
