"""
KernelHaven presence condition tables: reading, writing and idempotence
"""
from __future__ import annotations

import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

import pytest

from varevo.errors import ConditionSyntaxError, DataIntegrityError
from varevo.io.kernelhaven import (
    HEADER,
    SplPresenceConditionIO,
    VariantPresenceConditionIO,
    io_for,
)
from varevo.schemas.annotations import AnnotationStyle, BlockNode, DirectoryNode, FileNode
from varevo.variability.presence import TRUE, feature

RESOURCES = Path(__file__).parent / "resources" / "variantgeneration"


def test_read_write_is_idempotent(tmp_path: Path) -> None:
    io = SplPresenceConditionIO()
    intermediate = tmp_path / "KernelHavenPCs.spl.csv"
    output = tmp_path / "KernelHavenPCs.spl.csv.idempotent.spl.csv"

    io.write(io.load(RESOURCES / "KernelHavenPCs.spl.csv"), intermediate)
    io.write(io.load(intermediate), output)

    assert intermediate.read_text(encoding="utf-8") == output.read_text(encoding="utf-8")
    assert io.load(intermediate) == io.load(RESOURCES / "KernelHavenPCs.spl.csv")


def test_render_writes_header_and_derived_presence_conditions() -> None:
    io = SplPresenceConditionIO()
    text = io.render(io.load(RESOURCES / "KernelHavenPCs.spl.csv"))
    lines = text.splitlines()
    assert lines[0] == ";".join(HEADER)
    assert lines[1] == "src/FooFoo.cpp;True;True;True;1;21"
    assert lines[2] == "src/FooFoo.cpp;True;A;A;4;11"
    assert lines[3] == "src/FooFoo.cpp;True;B;A && B;6;8"
    assert lines[-1] == "src/foo/bar.cpp;A;False;False;1;4"
    assert len(lines) == 6


def test_presence_condition_column_is_ignored_on_read() -> None:
    text = (
        "Path;File Condition;Block Condition;Presence Condition;start;end\n"
        "src/a.c;True;A;garbage that is never parsed;2;5\n"
    )
    tree = SplPresenceConditionIO().parse(text)
    block = tree.children[0].children[0]
    assert block.condition == feature("A")
    assert block.style == AnnotationStyle.INTERNAL


def test_file_without_blocks_round_trips() -> None:
    io = VariantPresenceConditionIO()
    tree = DirectoryNode(children=(FileNode(path="docs/README", condition=feature("A")),))
    text = io.render(tree)
    assert text.splitlines()[1] == "docs/README;A;;;;"
    assert io.parse(text) == tree


def test_variant_tables_read_every_block_as_external() -> None:
    text = (
        "Path;File Condition;Block Condition;Presence Condition;start;end\n"
        "src/a.c;True;True;True;1;10\n"
        "src/a.c;True;A;A;3;4\n"
    )
    tree = VariantPresenceConditionIO().parse(text)
    root = tree.children[0].children[0]
    assert root.style == AnnotationStyle.EXTERNAL
    assert root.children[0].style == AnnotationStyle.EXTERNAL
    # an EXTERNAL parent has no directive lines, so children may start on its first line
    text = (
        "Path;File Condition;Block Condition;Presence Condition;start;end\n"
        "src/a.c;True;True;True;1;10\n"
        "src/a.c;True;A;A;1;4\n"
    )
    assert VariantPresenceConditionIO().parse(text).children[0].children[0].children[0].start == 1


def test_variant_round_trip_is_byte_identical() -> None:
    io = VariantPresenceConditionIO()
    tree = DirectoryNode(children=(
        FileNode(path="src/FooFoo.cpp", children=(
            BlockNode(condition=TRUE, start=1, end=13, style=AnnotationStyle.EXTERNAL, children=(
                BlockNode(condition=feature("A"), start=4, end=6, style=AnnotationStyle.EXTERNAL),
            )),
        )),
    ))
    text = io.render(tree)
    assert io.parse(text) == tree
    assert io.render(io.parse(text)) == text


@pytest.mark.parametrize("row", [
    "src/a.c;True;A;A;4",
    "src/a.c;True;A;A;four;11",
])
def test_malformed_rows_are_rejected(row: str) -> None:
    text = ";".join(HEADER) + "\n" + row + "\n"
    with pytest.raises(DataIntegrityError):
        SplPresenceConditionIO().parse(text)


def test_malformed_formula_is_rejected() -> None:
    text = ";".join(HEADER) + "\nsrc/a.c;True;A &&;A;4;11\n"
    with pytest.raises(ConditionSyntaxError):
        SplPresenceConditionIO().parse(text)


def test_io_is_chosen_by_suffix() -> None:
    assert isinstance(io_for("data/x/code-variability.spl.csv"), SplPresenceConditionIO)
    assert isinstance(io_for("ground_truth.variant.csv"), VariantPresenceConditionIO)
    assert SplPresenceConditionIO().can_load("a.spl.csv")
    assert not SplPresenceConditionIO().can_load("a.variant.csv")
    with pytest.raises(ValueError):
        io_for("pcs.csv")
