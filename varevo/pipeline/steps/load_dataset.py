"""
Step 1: Load Variability Dataset
"""
from varevo.history.dataset import VariabilityDataset
from varevo.io.file_ops import write_json
from varevo.pipeline.base_step import BaseStep
from varevo.schemas.base import now_iso
from varevo.schemas.history import ExtractionStatus


class LoadDatasetStep(BaseStep):
    """Load the dataset index and summarize the extraction status of its commits."""

    @property
    def name(self) -> str:
        return "load_dataset"

    @property
    def display_name(self) -> str:
        return "Step 1: Loading Variability Dataset"

    def execute(self) -> dict:
        """Execute dataset loading."""
        dataset_path = self.config.dataset_path
        dataset = VariabilityDataset.load(dataset_path)

        counts = {status.value: len(dataset.commits(status)) for status in ExtractionStatus}
        missing_trees = [
            commit.id for commit in dataset.usable_commits()
            if commit.presence_conditions is None
        ]
        steps = dataset.steps

        summary = {
            "dataset_path": str(dataset_path),
            "loaded_at": now_iso(),
            "total_commits": len(dataset),
            "commits_by_status": counts,
            "evolution_steps": len(steps),
            "usable_without_presence_conditions": missing_trees,
        }
        write_json(self.paths["dataset_summary_json"], summary)

        self.logger.info(f"Commits: {len(dataset)} {counts}")
        self.logger.info(f"Evolution steps: {len(steps)}")
        if missing_trees:
            self.logger.warning(f"{len(missing_trees)} usable commits have no presence conditions")

        return {
            "status": "success",
            "total_commits": len(dataset),
            "commits_by_status": counts,
            "evolution_steps": len(steps),
        }
