from enum import Enum
from typing import Literal, Union

from pydantic import BaseModel, Field
from sympy.logic.boolalg import Boolean

from varevo.variability.presence import TRUE


class AnnotationStyle(str, Enum):
    """Whether a block's condition is literal annotation syntax in the text."""
    INTERNAL = "internal"  # first and last line are #if / #endif directives
    EXTERNAL = "external"  # imposed by the extractor, every line is content


class BlockNode(BaseModel):
    """Line-based annotation: a contiguous line range guarded by a presence condition"""
    kind: Literal["block"] = "block"
    condition: Boolean = Field(..., description="Block condition (without ancestors)")
    start: int = Field(..., description="First line, 1-based, inclusive")
    end: int = Field(..., description="Last line, 1-based, inclusive")
    style: AnnotationStyle = Field(default=AnnotationStyle.INTERNAL)
    children: tuple["BlockNode", ...] = Field(default_factory=tuple, description="Nested blocks in line order")

    @property
    def line_count(self) -> int:
        return self.end - self.start + 1

    @property
    def content_start(self) -> int:
        """First content line (skips the opening directive of INTERNAL blocks)"""
        return self.start + 1 if self.style == AnnotationStyle.INTERNAL else self.start

    @property
    def content_end(self) -> int:
        """Last content line (skips the closing directive of INTERNAL blocks)"""
        return self.end - 1 if self.style == AnnotationStyle.INTERNAL else self.end

    def contains_line(self, line: int) -> bool:
        return self.start <= line <= self.end

    class Config:
        frozen = True
        arbitrary_types_allowed = True


class FileNode(BaseModel):
    """One source file and its top-level annotation blocks"""
    kind: Literal["file"] = "file"
    path: str = Field(..., description="Case-sensitive relative POSIX path")
    condition: Boolean = Field(default=TRUE, description="File presence condition")
    children: tuple[BlockNode, ...] = Field(default_factory=tuple)

    @property
    def last_line(self) -> int:
        """Last line covered by any block (0 for files without blocks)"""
        return self.children[-1].end if self.children else 0

    class Config:
        frozen = True
        arbitrary_types_allowed = True


class DirectoryNode(BaseModel):
    """Group of files and nested groups, used for whole-tree traversal"""
    kind: Literal["directory"] = "directory"
    children: tuple[Union[FileNode, "DirectoryNode"], ...] = Field(default_factory=tuple)

    class Config:
        frozen = True
        arbitrary_types_allowed = True


AnnotationNode = Union[DirectoryNode, FileNode, BlockNode]

BlockNode.model_rebuild()
DirectoryNode.model_rebuild()
