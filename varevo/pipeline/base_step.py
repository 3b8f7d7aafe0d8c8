"""
Pipeline step contract for variant evolution runs.

Each step reads the dataset and product-line locations from ``Config``,
writes its artefacts to the report/variant paths prepared by the
``Pipeline`` and returns a JSON-serializable result dict that ends up in
``pipeline_summary.json``. A step that raises is reported as ``failed``;
later steps still run and decide on their own whether their inputs exist.
"""
from abc import ABC, abstractmethod
from typing import Any

from varevo.utils import Config, get_logger


class BaseStep(ABC):
    """One stage of a run: load dataset, sequence history, or generate variants."""

    def __init__(self, config: Config, args: Any, paths: dict):
        """
        Initialize step.

        Args:
            config: Pipeline configuration
            args: Command line arguments
            paths: Output locations (variants dir, reports dir and the report files)
        """
        self.config = config
        self.args = args
        self.paths = paths
        self.logger = get_logger(self.__class__.__name__)

    @property
    @abstractmethod
    def name(self) -> str:
        """Step name for logging and summary."""
        pass

    @property
    @abstractmethod
    def display_name(self) -> str:
        """Display name for console output."""
        pass

    def should_skip(self) -> tuple[bool, str]:
        """
        Check if this step should be skipped.

        Returns:
            Tuple of (should_skip: bool, reason: str)
        """
        return False, ""

    @abstractmethod
    def execute(self) -> dict:
        """
        Execute the step.

        Returns:
            Result dict with ``status`` plus step-specific counts
        """
        pass

    def run(self) -> dict:
        """
        Run the step with skip check and error handling.

        Returns:
            Step result dictionary
        """
        should_skip, reason = self.should_skip()
        if should_skip:
            self.logger.info(f"Skipping {self.display_name}: {reason}")
            return {"status": "skipped", "reason": reason}

        self.logger.info("=" * 70)
        self.logger.info(f" {self.display_name}")
        self.logger.info("=" * 70)

        try:
            result = self.execute()
            result.setdefault("status", "success")
            return result
        except Exception as e:
            self.logger.error(f"{self.display_name} failed: {e}", exc_info=True)
            return {"status": "failed", "error": str(e)}
