"""
Ground truth assembly and persistence.
"""
from pathlib import Path

from varevo.io.configuration import write_configuration
from varevo.io.file_ops import write_jsonl
from varevo.io.kernelhaven import VariantPresenceConditionIO
from varevo.schemas.annotations import DirectoryNode
from varevo.schemas.ground_truth import AnnotationGroundTruth, GroundTruth, SkippedFile
from varevo.schemas.variants import Variant
from varevo.variability.presence import render_condition

GROUND_TRUTH_FILE = "ground_truth.variant.csv"
MATCHING_FILE = "ground_truth.matching.jsonl"
CONFIGURATION_FILE = "configuration.json"


class GroundTruthAssembler:
    """Collects per-file results of one (commit, variant) generation."""

    def __init__(self, variant_name: str):
        self.variant_name = variant_name
        self._files: dict[str, AnnotationGroundTruth] = {}
        self._skipped: list[SkippedFile] = []

    def add(self, file_truth: AnnotationGroundTruth) -> None:
        self._files[file_truth.path] = file_truth

    def skip(self, path: str, reason: str) -> None:
        self._skipped.append(SkippedFile(path=path, reason=reason))

    def assemble(self) -> GroundTruth:
        return GroundTruth(
            variant_name=self.variant_name,
            variant=DirectoryNode(children=tuple(truth.variant_file for truth in self._files.values())),
            files=dict(self._files),
            skipped_files=tuple(self._skipped),
        )


def matching_rows(ground_truth: GroundTruth) -> list[dict]:
    """One JSON row per generated file with its line runs and block matches"""
    rows = []
    for path, truth in ground_truth.files.items():
        rows.append({
            "path": path,
            "lines": truth.line_count,
            "runs": [run.to_dict() for run in truth.runs],
            "blocks": [
                {
                    "condition": render_condition(match.condition),
                    "source": [match.source_start, match.source_end],
                    "variant": [match.variant_start, match.variant_end],
                }
                for match in truth.block_matches
            ],
        })
    return rows


def write_ground_truth(ground_truth: GroundTruth, variant: Variant, variant_dir: Path | str) -> dict[str, Path]:
    """
    Persist the ground truth next to the generated variant.

    Returns:
        dict: written artefact name -> path
    """
    variant_dir = Path(variant_dir)
    written = {
        "presence_conditions": variant_dir / GROUND_TRUTH_FILE,
        "matching": variant_dir / MATCHING_FILE,
        "configuration": variant_dir / CONFIGURATION_FILE,
    }
    VariantPresenceConditionIO().write(ground_truth.variant, written["presence_conditions"])
    write_jsonl(written["matching"], matching_rows(ground_truth))
    write_configuration(variant, written["configuration"])
    return written
