"""
Variability datasets - the extracted presence conditions of a product line's history.

Layout of a dataset directory::

    success_commits.txt            one commit id per line
    partial_success_commits.txt
    error_commits.txt
    data/<commit>/PARENTS.txt      parent commit ids
    data/<commit>/code-variability.spl.csv
"""
from pathlib import Path

from varevo.io.file_ops import read_id_list
from varevo.io.kernelhaven import SplPresenceConditionIO
from varevo.schemas.history import Commit, EvolutionStep, ExtractionStatus, VariabilityHistory
from varevo.utils.logger import get_logger

from .cache import LazyTree
from .sequencer import SequenceExtractor, sequence_history

logger = get_logger(__name__)

STATUS_FILES = {
    ExtractionStatus.SUCCESS: "success_commits.txt",
    ExtractionStatus.PARTIAL_SUCCESS: "partial_success_commits.txt",
    ExtractionStatus.ERROR: "error_commits.txt",
}
DATA_DIR = "data"
PARENTS_FILE = "PARENTS.txt"
SPL_PRESENCE_CONDITIONS_FILE = "code-variability.spl.csv"


class VariabilityCommit:
    """A commit together with its extraction status and lazily loaded annotation tree."""

    def __init__(self, commit: Commit, status: ExtractionStatus,
                 parents: tuple[Commit, ...] = (), presence_conditions: LazyTree | None = None):
        self.commit = commit
        self.status = status
        self.parents = parents
        self.presence_conditions = presence_conditions

    @property
    def id(self) -> str:
        return self.commit.id

    def __repr__(self) -> str:
        return f"VariabilityCommit({self.commit.id}, {self.status.value})"


class VariabilityDataset:
    """All commits of a dataset, indexed by id."""

    def __init__(self, root: Path | str, commits: dict[str, VariabilityCommit]):
        self.root = Path(root)
        self._commits = commits

    @classmethod
    def load(cls, root: Path | str) -> "VariabilityDataset":
        """
        Raises:
            FileNotFoundError: ``root`` is not a directory
        """
        root = Path(root)
        if not root.is_dir():
            raise FileNotFoundError(f"Dataset not found: {root}")

        reader = SplPresenceConditionIO()
        commits: dict[str, VariabilityCommit] = {}
        for status, file_name in STATUS_FILES.items():
            for commit_id in read_id_list(root / file_name):
                if commit_id in commits:
                    logger.warning(
                        f"Commit {commit_id} listed as {commits[commit_id].status.value} "
                        f"and {status.value}; keeping the first"
                    )
                    continue
                commit_dir = root / DATA_DIR / commit_id
                parents = tuple(Commit(id=parent) for parent in read_id_list(commit_dir / PARENTS_FILE))
                presence_conditions = None
                pcs_path = commit_dir / SPL_PRESENCE_CONDITIONS_FILE
                if status.is_usable:
                    if pcs_path.exists():
                        presence_conditions = LazyTree.from_file(pcs_path, reader)
                    else:
                        logger.warning(f"No presence conditions for {status.value} commit {commit_id}")
                commits[commit_id] = VariabilityCommit(
                    Commit(id=commit_id), status, parents, presence_conditions
                )

        logger.info(
            f"Loaded dataset {root}: "
            + ", ".join(f"{len(cls._of_status(commits, s))} {s.value}" for s in ExtractionStatus)
        )
        return cls(root, commits)

    @staticmethod
    def _of_status(commits: dict[str, VariabilityCommit], status: ExtractionStatus) -> list[VariabilityCommit]:
        return [commit for commit in commits.values() if commit.status == status]

    def __len__(self) -> int:
        return len(self._commits)

    def __contains__(self, commit_id: str) -> bool:
        return commit_id in self._commits

    def get(self, commit_id: str) -> VariabilityCommit:
        """
        Raises:
            KeyError: unknown commit
        """
        return self._commits[commit_id]

    def commits(self, status: ExtractionStatus | None = None) -> list[VariabilityCommit]:
        if status is None:
            return list(self._commits.values())
        return self._of_status(self._commits, status)

    def usable_commits(self) -> list[VariabilityCommit]:
        return [commit for commit in self._commits.values() if commit.status.is_usable]

    @property
    def statuses(self) -> dict[str, ExtractionStatus]:
        return {commit_id: commit.status for commit_id, commit in self._commits.items()}

    @property
    def steps(self) -> list[EvolutionStep]:
        """Every recorded parent -> child step, in dataset order"""
        return [
            EvolutionStep(parent=parent, child=commit.commit)
            for commit in self._commits.values()
            for parent in commit.parents
        ]

    def variability_history(self, extractor: SequenceExtractor | None = None) -> VariabilityHistory:
        return sequence_history(self.steps, self.statuses, extractor)
