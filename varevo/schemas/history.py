from enum import Enum

from pydantic import BaseModel, Field


class ExtractionStatus(str, Enum):
    """Outcome of the variability extraction of a commit"""
    SUCCESS = "success"
    PARTIAL_SUCCESS = "partial_success"
    ERROR = "error"

    @property
    def is_usable(self) -> bool:
        """Only (partially) successful commits take part in variant generation"""
        return self is not ExtractionStatus.ERROR


class Commit(BaseModel):
    """A commit of the product line's repository"""
    id: str = Field(..., min_length=1, description="Commit hash")

    def __str__(self) -> str:
        return self.id

    def __lt__(self, other: "Commit") -> bool:
        return self.id < other.id

    class Config:
        frozen = True


class EvolutionStep(BaseModel):
    """One recorded parent -> child transition"""
    parent: Commit
    child: Commit

    def __str__(self) -> str:
        return f"({self.parent}, {self.child})"

    class Config:
        frozen = True


class VariabilityHistory(BaseModel):
    """Disjoint commit chains; consecutive commits of a chain form a recorded step"""
    sequences: tuple[tuple[Commit, ...], ...] = Field(default_factory=tuple)

    @property
    def is_empty(self) -> bool:
        return not self.sequences

    def commits(self) -> list[Commit]:
        """All commits in chain order"""
        return [commit for sequence in self.sequences for commit in sequence]

    def steps(self) -> list[EvolutionStep]:
        """Steps realised by the chains"""
        return [
            EvolutionStep(parent=sequence[i], child=sequence[i + 1])
            for sequence in self.sequences
            for i in range(len(sequence) - 1)
        ]

    def to_dict(self) -> dict:
        return {"sequences": [[commit.id for commit in sequence] for sequence in self.sequences]}

    @classmethod
    def from_dict(cls, data: dict) -> "VariabilityHistory":
        return cls(sequences=tuple(
            tuple(Commit(id=commit_id) for commit_id in sequence)
            for sequence in data.get("sequences", [])
        ))

    class Config:
        frozen = True
