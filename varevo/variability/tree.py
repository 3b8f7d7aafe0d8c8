"""
Annotation tree operations.

Trees are the tagged union ``DirectoryNode | FileNode | BlockNode`` from
``varevo.schemas.annotations``. Everything here is a plain function over that
union; nodes are immutable and only ever built bottom-up by ``TreeBuilder``.
"""
from typing import Iterator

from sympy.logic.boolalg import Boolean

from varevo.errors import IllFormedTraceError, NotFoundError
from varevo.schemas.annotations import (
    AnnotationNode,
    AnnotationStyle,
    BlockNode,
    DirectoryNode,
    FileNode,
)
from varevo.utils.logger import get_logger
from varevo.variability.presence import conjunction, features_of, render_condition

logger = get_logger(__name__)


def check_well_formed(node: AnnotationNode, path: str | None = None) -> None:
    """
    Verify the nesting invariants of ``node`` and everything below it.

    Every block satisfies ``1 <= start <= end``; children lie inside their
    parent (inside the content lines if the parent is INTERNAL) and siblings
    are increasing and non-overlapping.

    Raises:
        IllFormedTraceError: first violation found, in document order
    """
    if isinstance(node, DirectoryNode):
        seen: set[str] = set()
        for child in node.children:
            if isinstance(child, FileNode):
                if child.path in seen:
                    raise IllFormedTraceError("File listed twice", child.path)
                seen.add(child.path)
            check_well_formed(child)
    elif isinstance(node, FileNode):
        _check_blocks(node.children, node.path, lower=1, upper=None)
    elif isinstance(node, BlockNode):
        _check_blocks((node,), path, lower=1, upper=None)
    else:
        raise TypeError(f"Not an annotation node: {type(node).__name__}")


def _check_blocks(blocks: tuple[BlockNode, ...], path: str | None, lower: int, upper: int | None) -> None:
    previous_end = lower - 1
    for block in blocks:
        if block.start < 1 or block.start > block.end:
            raise IllFormedTraceError("Block starts after it ends", path, block.start, block.end)
        if block.start <= previous_end:
            raise IllFormedTraceError("Block overlaps its predecessor or parent", path, block.start, block.end)
        if upper is not None and block.end > upper:
            raise IllFormedTraceError("Block exceeds its parent", path, block.start, block.end)
        _check_blocks(block.children, path, lower=block.content_start, upper=block.content_end)
        previous_end = block.end


class _BlockBuilder:
    def __init__(self, condition: Boolean, start: int, end: int, style: AnnotationStyle):
        self.condition = condition
        self.start = start
        self.end = end
        self.style = style
        self.children: list["_BlockBuilder"] = []

    @property
    def content_start(self) -> int:
        return self.start + 1 if self.style == AnnotationStyle.INTERNAL else self.start

    @property
    def content_end(self) -> int:
        return self.end - 1 if self.style == AnnotationStyle.INTERNAL else self.end

    def build(self) -> BlockNode:
        return BlockNode(
            condition=self.condition,
            start=self.start,
            end=self.end,
            style=self.style,
            children=tuple(child.build() for child in self.children),
        )


class _FileBuilder:
    def __init__(self, path: str, condition: Boolean):
        self.path = path
        self.condition = condition
        self.blocks: list[tuple[int, int, int, Boolean, AnnotationStyle]] = []

    def build(self) -> FileNode:
        # outer blocks first: by start, then longest first, then input order
        rows = sorted(self.blocks, key=lambda row: (row[0], -row[1], row[2]))
        roots: list[_BlockBuilder] = []
        stack: list[_BlockBuilder] = []
        for start, end, _, condition, style in rows:
            if start < 1 or start > end:
                raise IllFormedTraceError("Block starts after it ends", self.path, start, end)
            while stack and stack[-1].end < start:
                stack.pop()
            block = _BlockBuilder(condition, start, end, style)
            if stack:
                parent = stack[-1]
                if end > parent.end:
                    raise IllFormedTraceError(
                        f"Block overlaps block {parent.start}-{parent.end}", self.path, start, end
                    )
                if start < parent.content_start or end > parent.content_end:
                    raise IllFormedTraceError(
                        f"Block shares a directive line with block {parent.start}-{parent.end}",
                        self.path, start, end
                    )
                parent.children.append(block)
            else:
                roots.append(block)
            stack.append(block)
        return FileNode(
            path=self.path,
            condition=self.condition,
            children=tuple(root.build() for root in roots),
        )


class TreeBuilder:
    """
    Collects annotation records in any order and finalizes an immutable tree.

    Files keep the order in which they were first mentioned; blocks are nested
    by line range.

    Example:
        >>> builder = TreeBuilder()
        >>> builder.add_file("src/a.c")
        >>> builder.add_block("src/a.c", feature("A"), 3, 7)
        >>> tree = builder.build()
    """

    def __init__(self):
        self._files: dict[str, _FileBuilder] = {}
        self._counter = 0

    def add_file(self, path: str, condition: Boolean | None = None) -> None:
        """Register a file; a file condition given twice must not change."""
        existing = self._files.get(path)
        if existing is None:
            self._files[path] = _FileBuilder(path, condition if condition is not None else conjunction())
        elif condition is not None and existing.condition != condition:
            raise IllFormedTraceError(
                f"Conflicting file conditions {render_condition(existing.condition)!r} "
                f"and {render_condition(condition)!r}",
                path,
            )

    def add_block(
        self,
        path: str,
        condition: Boolean,
        start: int,
        end: int,
        style: AnnotationStyle = AnnotationStyle.INTERNAL,
        file_condition: Boolean | None = None,
    ) -> None:
        self.add_file(path, file_condition)
        self._files[path].blocks.append((start, end, self._counter, condition, style))
        self._counter += 1

    def build(self) -> DirectoryNode:
        """
        Raises:
            IllFormedTraceError: overlapping ranges or ``start > end``
        """
        return DirectoryNode(children=tuple(builder.build() for builder in self._files.values()))


def iter_files(node: AnnotationNode) -> Iterator[FileNode]:
    """All file nodes below ``node`` in document order."""
    stack: list[AnnotationNode] = [node]
    while stack:
        current = stack.pop()
        if isinstance(current, FileNode):
            yield current
        elif isinstance(current, DirectoryNode):
            stack.extend(reversed(current.children))


def iter_blocks(blocks: tuple[BlockNode, ...]) -> Iterator[tuple[BlockNode, int]]:
    """Pre-order walk yielding ``(block, depth)``."""
    stack = [(block, 0) for block in reversed(blocks)]
    while stack:
        block, depth = stack.pop()
        yield block, depth
        stack.extend((child, depth + 1) for child in reversed(block.children))


def find_file(node: AnnotationNode, path: str) -> FileNode:
    """
    Raises:
        NotFoundError: no file with exactly this (case-sensitive) path
    """
    for file_node in iter_files(node):
        if file_node.path == path:
            return file_node
    raise NotFoundError(f"File not found in annotation tree: {path}")


def presence_condition_of(node: AnnotationNode, path: str, line: int) -> Boolean:
    """
    Presence condition of ``line`` in file ``path``.

    The result is the conjunction of the file condition and the conditions of
    all blocks containing the line. Lines covered by no block get the file
    condition alone.

    Raises:
        NotFoundError: the file is absent or the line lies outside its recorded range
    """
    file_node = find_file(node, path)
    if line < 1 or (file_node.children and line > file_node.last_line):
        raise NotFoundError(f"Line {line} is outside the annotated range of {path}")
    return conjunction(file_node.condition, *_enclosing_conditions(file_node.children, line))


def _enclosing_conditions(blocks: tuple[BlockNode, ...], line: int) -> list[Boolean]:
    for block in blocks:
        if block.contains_line(line):
            return [block.condition] + _enclosing_conditions(block.children, line)
        if block.start > line:
            break
    return []


def features_of_tree(node: AnnotationNode) -> set[str]:
    """Names of all features used anywhere in the tree."""
    names: set[str] = set()
    if isinstance(node, DirectoryNode):
        for child in node.children:
            names |= features_of_tree(child)
    elif isinstance(node, FileNode):
        names |= features_of(node.condition)
        for child in node.children:
            names |= features_of_tree(child)
    else:
        names |= features_of(node.condition)
        for child in node.children:
            names |= features_of_tree(child)
    return names


def count_blocks(node: AnnotationNode) -> int:
    if isinstance(node, BlockNode):
        return 1 + sum(count_blocks(child) for child in node.children)
    return sum(count_blocks(child) for child in node.children)


def pretty_print(node: AnnotationNode, indent: str = "  ") -> str:
    """Deterministic rendering in document order, used for diagnostics and golden files."""
    lines: list[str] = []
    _pretty_print(node, 0, indent, lines)
    return "\n".join(lines) + "\n"


def _pretty_print(node: AnnotationNode, depth: int, indent: str, lines: list[str]) -> None:
    prefix = indent * depth
    if isinstance(node, DirectoryNode):
        lines.append(f"{prefix}directory")
    elif isinstance(node, FileNode):
        lines.append(f"{prefix}file {node.path} if {render_condition(node.condition)}")
    else:
        lines.append(
            f"{prefix}block [{node.start}, {node.end}] {node.style.value} "
            f"if {render_condition(node.condition)}"
        )
    for child in node.children:
        _pretty_print(child, depth + 1, indent, lines)
