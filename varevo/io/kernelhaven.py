"""
KernelHaven presence-condition tables.

One semicolon separated row per annotated line range::

    Path;File Condition;Block Condition;Presence Condition;start;end
    src/FooFoo.cpp;True;True;True;1;21
    src/FooFoo.cpp;True;A;A;4;11

Product-line tables (``*.spl.csv``) count annotation directive lines;
variant tables (``*.variant.csv``) describe generated files, which contain
no directives, so all their blocks are EXTERNAL. The ``Presence Condition``
column is derived on write and ignored on read.
"""
import csv
import io
from abc import ABC, abstractmethod
from pathlib import Path

from sympy.logic.boolalg import Boolean

from varevo.errors import DataIntegrityError
from varevo.schemas.annotations import AnnotationNode, AnnotationStyle, BlockNode, FileNode
from varevo.utils.logger import get_logger
from varevo.variability.presence import conjunction, is_true, parse_condition, render_condition
from varevo.variability.tree import TreeBuilder, iter_files

logger = get_logger(__name__)

HEADER = ["Path", "File Condition", "Block Condition", "Presence Condition", "start", "end"]
DELIMITER = ";"


class PresenceConditionIO(ABC):
    """Reads and writes annotation trees as KernelHaven tables"""

    suffix: str = ".csv"

    def can_load(self, path: Path | str) -> bool:
        return str(path).endswith(self.suffix)

    def can_write(self, path: Path | str) -> bool:
        return str(path).endswith(self.suffix)

    @abstractmethod
    def style_of(self, condition: Boolean, start: int, end: int) -> AnnotationStyle:
        """Annotation style of a row read from this kind of table"""
        raise NotImplementedError

    def load(self, path: Path | str) -> AnnotationNode:
        """
        Raises:
            FileNotFoundError: the table does not exist
            DataIntegrityError: malformed rows, formulas or nesting
        """
        path = Path(path)
        logger.debug(f"Loading presence conditions from {path}")
        with open(path, 'r', encoding='utf-8', newline='') as f:
            return self.parse(f.read(), source=str(path))

    def parse(self, text: str, source: str = "<text>") -> AnnotationNode:
        """Parse table text into a directory of file nodes."""
        builder = TreeBuilder()
        reader = csv.reader(io.StringIO(text), delimiter=DELIMITER)
        header_seen = False
        for row_number, row in enumerate(reader, 1):
            if not row or all(not cell.strip() for cell in row):
                continue
            if not header_seen:
                header_seen = True
                if [cell.strip() for cell in row] == HEADER:
                    continue
            if len(row) != len(HEADER):
                raise DataIntegrityError(
                    f"{source}:{row_number}: expected {len(HEADER)} columns, got {len(row)}"
                )
            file_path, file_condition_text, block_condition_text, _, start_text, end_text = (
                cell.strip() for cell in row
            )
            file_condition = parse_condition(file_condition_text) if file_condition_text else None
            if not block_condition_text and not start_text and not end_text:
                builder.add_file(file_path, file_condition)
                continue
            try:
                start = int(start_text)
                end = int(end_text)
            except ValueError as e:
                raise DataIntegrityError(f"{source}:{row_number}: invalid line range") from e
            block_condition = parse_condition(block_condition_text)
            builder.add_block(
                file_path,
                block_condition,
                start,
                end,
                style=self.style_of(block_condition, start, end),
                file_condition=file_condition,
            )
        return builder.build()

    def render(self, tree: AnnotationNode) -> str:
        """Render ``tree`` as table text, rows in document order."""
        out = io.StringIO()
        writer = csv.writer(out, delimiter=DELIMITER, lineterminator='\n')
        writer.writerow(HEADER)
        for file_node in iter_files(tree):
            file_condition = render_condition(file_node.condition)
            if not file_node.children:
                writer.writerow([file_node.path, file_condition, "", "", "", ""])
                continue
            self._render_blocks(writer, file_node, file_node.children, [file_node.condition])
        return out.getvalue()

    def _render_blocks(self, writer, file_node: FileNode, blocks: tuple[BlockNode, ...],
                       enclosing: list[Boolean]) -> None:
        for block in blocks:
            if self.style_of(block.condition, block.start, block.end) != block.style:
                logger.warning(
                    f"{file_node.path}:{block.start}-{block.end}: {block.style.value} style "
                    f"is not preserved by {type(self).__name__}"
                )
            conditions = enclosing + [block.condition]
            writer.writerow([
                file_node.path,
                render_condition(file_node.condition),
                render_condition(block.condition),
                render_condition(conjunction(*conditions)),
                block.start,
                block.end,
            ])
            self._render_blocks(writer, file_node, block.children, conditions)

    def write(self, tree: AnnotationNode, path: Path | str) -> None:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w', encoding='utf-8', newline='') as f:
            f.write(self.render(tree))


class SplPresenceConditionIO(PresenceConditionIO):
    """
    Product-line tables.

    KernelHaven adds a TRUE block over the whole file; that is the only
    EXTERNAL block. A TRUE block at line 1 cannot be told apart from a literal
    ``#if 1`` on the first line, so both are read as EXTERNAL.
    """

    suffix = ".spl.csv"

    def style_of(self, condition: Boolean, start: int, end: int) -> AnnotationStyle:
        if start == 1 and is_true(condition):
            return AnnotationStyle.EXTERNAL
        return AnnotationStyle.INTERNAL


class VariantPresenceConditionIO(PresenceConditionIO):
    """Tables of generated variants: every block is EXTERNAL."""

    suffix = ".variant.csv"

    def style_of(self, condition: Boolean, start: int, end: int) -> AnnotationStyle:
        return AnnotationStyle.EXTERNAL


def io_for(path: Path | str) -> PresenceConditionIO:
    """Pick the table reader/writer from the file name."""
    for candidate in (SplPresenceConditionIO(), VariantPresenceConditionIO()):
        if candidate.can_load(path):
            return candidate
    raise ValueError(f"Unsupported presence condition file: {path}")
