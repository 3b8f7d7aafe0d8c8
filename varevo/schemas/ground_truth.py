from pydantic import BaseModel, Field, computed_field
from sympy.logic.boolalg import Boolean

from .annotations import DirectoryNode, FileNode


class LineRun(BaseModel):
    """Maximal contiguous run of kept lines: product-line range <-> variant range"""
    source_start: int = Field(..., ge=1, description="First kept product-line line")
    source_end: int = Field(..., ge=1, description="Last kept product-line line")
    variant_start: int = Field(..., ge=1, description="First line in the generated file")
    variant_end: int = Field(..., ge=1, description="Last line in the generated file")
    skipped_source_lines: tuple[int, ...] = Field(
        default_factory=tuple,
        description="Dropped annotation lines inside the source range"
    )

    def source_lines(self) -> list[int]:
        """Product-line lines that were actually copied"""
        skipped = set(self.skipped_source_lines)
        return [line for line in range(self.source_start, self.source_end + 1) if line not in skipped]

    def variant_line_of(self, source_line: int) -> int | None:
        """Line in the generated file that ``source_line`` was copied to"""
        if source_line in self.skipped_source_lines:
            return None
        if not self.source_start <= source_line <= self.source_end:
            return None
        shift = sum(1 for line in self.skipped_source_lines if line < source_line)
        return self.variant_start + (source_line - self.source_start) - shift

    def to_dict(self) -> dict:
        return {
            "source": [self.source_start, self.source_end],
            "variant": [self.variant_start, self.variant_end],
            "skipped": list(self.skipped_source_lines),
        }

    class Config:
        frozen = True


class BlockMatch(BaseModel):
    """A kept product-line block and the variant block it became"""
    condition: Boolean
    source_start: int
    source_end: int
    variant_start: int
    variant_end: int

    class Config:
        frozen = True
        arbitrary_types_allowed = True


class AnnotationGroundTruth(BaseModel):
    """Provenance of one generated file"""
    path: str
    runs: tuple[LineRun, ...] = Field(default_factory=tuple)
    block_matches: tuple[BlockMatch, ...] = Field(default_factory=tuple)
    variant_file: FileNode

    @computed_field
    @property
    def line_count(self) -> int:
        """Number of lines in the generated file"""
        return self.runs[-1].variant_end if self.runs else 0

    def variant_line_of(self, source_line: int) -> int | None:
        for run in self.runs:
            if run.source_start <= source_line <= run.source_end:
                return run.variant_line_of(source_line)
        return None

    def source_line_of(self, variant_line: int) -> int | None:
        for run in self.runs:
            if run.variant_start <= variant_line <= run.variant_end:
                lines = run.source_lines()
                return lines[variant_line - run.variant_start]
        return None

    class Config:
        frozen = True
        arbitrary_types_allowed = True


class SkippedFile(BaseModel):
    """A file left out of a variant under a tolerant error policy"""
    path: str
    reason: str

    class Config:
        frozen = True


class GroundTruth(BaseModel):
    """Ground truth of one generated variant"""
    variant_name: str
    variant: DirectoryNode = Field(..., description="Presence conditions of the generated code")
    files: dict[str, AnnotationGroundTruth] = Field(default_factory=dict)
    skipped_files: tuple[SkippedFile, ...] = Field(default_factory=tuple)

    @property
    def is_complete(self) -> bool:
        return not self.skipped_files

    class Config:
        frozen = True
        arbitrary_types_allowed = True
