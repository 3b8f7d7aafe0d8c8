"""
Annotation tree building, nesting checks and presence condition queries
"""
from __future__ import annotations

import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

import pytest
from sympy import And, Or

from varevo.errors import IllFormedTraceError, NotFoundError
from varevo.io.kernelhaven import SplPresenceConditionIO
from varevo.schemas.annotations import AnnotationStyle, BlockNode, DirectoryNode, FileNode
from varevo.variability.presence import FALSE, TRUE, equivalent, feature
from varevo.variability.tree import (
    TreeBuilder,
    check_well_formed,
    count_blocks,
    features_of_tree,
    find_file,
    iter_files,
    presence_condition_of,
    pretty_print,
)

RESOURCES = Path(__file__).parent / "resources" / "variantgeneration"
A, B, C, D, E = (feature(name) for name in "ABCDE")


def _expected_tree() -> DirectoryNode:
    foofoo = FileNode(
        path="src/FooFoo.cpp",
        condition=TRUE,
        children=(
            BlockNode(
                condition=TRUE, start=1, end=21, style=AnnotationStyle.EXTERNAL,
                children=(
                    BlockNode(condition=A, start=4, end=11, children=(
                        BlockNode(condition=B, start=6, end=8),
                    )),
                    BlockNode(condition=Or(And(C, D), E), start=16, end=18),
                ),
            ),
        ),
    )
    # a FALSE block at line 1 is a real "#if 0", not the file block
    bar = FileNode(
        path="src/foo/bar.cpp",
        condition=A,
        children=(BlockNode(condition=FALSE, start=1, end=4),),
    )
    return DirectoryNode(children=(foofoo, bar))


@pytest.fixture
def tree() -> DirectoryNode:
    return SplPresenceConditionIO().load(RESOURCES / "KernelHavenPCs.spl.csv")


def test_load_builds_expected_tree(tree: DirectoryNode) -> None:
    assert tree == _expected_tree()
    check_well_formed(tree)


def test_ill_formed_table_is_rejected() -> None:
    with pytest.raises(IllFormedTraceError) as excinfo:
        SplPresenceConditionIO().load(RESOURCES / "KernelHavenPCs_illformed.spl.csv")
    assert excinfo.value.path == "src/FooFoo.cpp"


def test_line_query_conjoins_enclosing_blocks(tree: DirectoryNode) -> None:
    assert equivalent(presence_condition_of(tree, "src/FooFoo.cpp", 7), And(A, B))
    assert equivalent(presence_condition_of(tree, "src/FooFoo.cpp", 5), A)
    assert equivalent(presence_condition_of(tree, "src/FooFoo.cpp", 17), Or(And(C, D), E))
    assert equivalent(presence_condition_of(tree, "src/FooFoo.cpp", 13), TRUE)
    assert equivalent(presence_condition_of(tree, "src/foo/bar.cpp", 2), FALSE)


def test_uncovered_line_gets_file_condition() -> None:
    builder = TreeBuilder()
    builder.add_block("src/a.c", B, 3, 5, file_condition=A)
    builder.add_block("src/a.c", C, 8, 10)
    tree = builder.build()
    assert presence_condition_of(tree, "src/a.c", 6) == A
    assert equivalent(presence_condition_of(tree, "src/a.c", 4), And(A, B))


def test_line_query_outside_range_raises(tree: DirectoryNode) -> None:
    with pytest.raises(NotFoundError):
        presence_condition_of(tree, "src/FooFoo.cpp", 0)
    with pytest.raises(NotFoundError):
        presence_condition_of(tree, "src/FooFoo.cpp", 22)
    with pytest.raises(NotFoundError):
        presence_condition_of(tree, "src/Missing.cpp", 1)
    with pytest.raises(NotFoundError):
        presence_condition_of(tree, "src/foofoo.cpp", 1)


def test_file_without_blocks_answers_any_positive_line() -> None:
    builder = TreeBuilder()
    builder.add_file("README", A)
    tree = builder.build()
    assert presence_condition_of(tree, "README", 100) == A


def test_builder_nests_rows_in_any_order() -> None:
    builder = TreeBuilder()
    builder.add_block("src/a.c", B, 6, 8)
    builder.add_block("src/a.c", TRUE, 1, 20, style=AnnotationStyle.EXTERNAL)
    builder.add_block("src/a.c", A, 4, 11)
    file_node = find_file(builder.build(), "src/a.c")
    assert len(file_node.children) == 1
    root = file_node.children[0]
    assert [(b.start, b.end) for b in root.children] == [(4, 11)]
    assert [(b.start, b.end) for b in root.children[0].children] == [(6, 8)]


@pytest.mark.parametrize("rows", [
    [(4, 11), (8, 14)],
    [(5, 3)],
    [(0, 2)],
    [(4, 11), (4, 6)],
    [(4, 11), (6, 11)],
])
def test_builder_rejects_bad_ranges(rows: list[tuple[int, int]]) -> None:
    builder = TreeBuilder()
    for start, end in rows:
        builder.add_block("src/a.c", A, start, end)
    with pytest.raises(IllFormedTraceError):
        builder.build()


def test_conflicting_file_conditions_are_rejected() -> None:
    builder = TreeBuilder()
    builder.add_file("src/a.c", A)
    with pytest.raises(IllFormedTraceError):
        builder.add_file("src/a.c", B)


def test_check_well_formed_finds_overlapping_siblings() -> None:
    file_node = FileNode(path="src/a.c", children=(
        BlockNode(condition=A, start=1, end=5),
        BlockNode(condition=B, start=5, end=9),
    ))
    with pytest.raises(IllFormedTraceError):
        check_well_formed(DirectoryNode(children=(file_node,)))


def test_check_well_formed_finds_child_on_directive_line() -> None:
    block = BlockNode(condition=A, start=1, end=10, children=(
        BlockNode(condition=B, start=1, end=4),
    ))
    with pytest.raises(IllFormedTraceError):
        check_well_formed(FileNode(path="src/a.c", children=(block,)))


def test_traversal_helpers(tree: DirectoryNode) -> None:
    assert [f.path for f in iter_files(tree)] == ["src/FooFoo.cpp", "src/foo/bar.cpp"]
    assert features_of_tree(tree) == {"A", "B", "C", "D", "E"}
    assert count_blocks(tree) == 5


def test_pretty_print_is_deterministic(tree: DirectoryNode) -> None:
    text = pretty_print(tree)
    assert text == pretty_print(_expected_tree())
    lines = text.splitlines()
    assert lines[0] == "directory"
    assert lines[1] == "  file src/FooFoo.cpp if True"
    assert lines[2] == "    block [1, 21] external if True"
    assert lines[3] == "      block [4, 11] internal if A"
