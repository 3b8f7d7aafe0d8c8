"""
Step 2: Sequence Variability History
"""
from pathlib import Path

from varevo.history.dataset import VariabilityDataset
from varevo.history.sequencer import extractor_from_name
from varevo.io.file_ops import write_json
from varevo.pipeline.base_step import BaseStep


class SequenceHistoryStep(BaseStep):
    """Order the dataset's commits into chains and write history.json."""

    @property
    def name(self) -> str:
        return "sequence_history"

    @property
    def display_name(self) -> str:
        return "Step 2: Sequencing Variability History"

    def execute(self) -> dict:
        """Execute history sequencing."""
        # a history left by an earlier run must not outlive a failed sequencing
        Path(self.paths["history_json"]).unlink(missing_ok=True)

        dataset = VariabilityDataset.load(self.config.dataset_path)
        strategy = self.config.get("history.strategy", "longest")
        history = dataset.variability_history(extractor_from_name(strategy))

        write_json(self.paths["history_json"], history.to_dict())

        lengths = [len(sequence) for sequence in history.sequences]
        self.logger.info(f"Strategy: {strategy}")
        self.logger.info(f"Chains: {len(lengths)}, commits: {sum(lengths)}")

        return {
            "status": "success",
            "strategy": strategy,
            "chains": len(lengths),
            "commits": sum(lengths),
            "longest_chain": max(lengths, default=0),
        }
