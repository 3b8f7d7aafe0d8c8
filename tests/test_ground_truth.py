"""
Ground truth persistence: variant presence conditions, line matching and configurations
"""
from __future__ import annotations

import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

import pytest

from varevo.engine.generator import VariantGenerator
from varevo.engine.ground_truth import (
    CONFIGURATION_FILE,
    GROUND_TRUTH_FILE,
    MATCHING_FILE,
    GroundTruthAssembler,
    matching_rows,
    write_ground_truth,
)
from varevo.io.configuration import read_configuration, write_configuration
from varevo.io.file_ops import read_jsonl
from varevo.io.kernelhaven import SplPresenceConditionIO, VariantPresenceConditionIO
from varevo.schemas.ground_truth import LineRun
from varevo.schemas.variants import Configuration, Variant

RESOURCES = Path(__file__).parent / "resources" / "variantgeneration"


@pytest.fixture
def just_a() -> Variant:
    return Variant(name="justA", configuration=Configuration(selected=["A"]))


def test_write_ground_truth_artefacts(tmp_path: Path, just_a: Variant) -> None:
    tree = SplPresenceConditionIO().load(RESOURCES / "KernelHavenPCs.spl.csv")
    variant_dir = tmp_path / "justA"
    ground_truth = VariantGenerator().generate(tree, RESOURCES / "tinySPLRepo", variant_dir, just_a)

    written = write_ground_truth(ground_truth, just_a, variant_dir)

    assert written["presence_conditions"] == variant_dir / GROUND_TRUTH_FILE
    assert written["matching"] == variant_dir / MATCHING_FILE
    assert written["configuration"] == variant_dir / CONFIGURATION_FILE

    reloaded = VariantPresenceConditionIO().load(written["presence_conditions"])
    assert reloaded == ground_truth.variant

    rows = read_jsonl(written["matching"])
    assert [row["path"] for row in rows] == ["src/FooFoo.cpp", "src/foo/bar.cpp"]
    assert rows[0]["lines"] == 13
    assert rows[0]["runs"][0] == {"source": [1, 5], "variant": [1, 4], "skipped": [4]}
    assert {"condition": "A", "source": [4, 11], "variant": [4, 6]} in rows[0]["blocks"]

    assert read_configuration(written["configuration"]) == just_a


def test_variant_table_rows(tmp_path: Path, just_a: Variant) -> None:
    tree = SplPresenceConditionIO().load(RESOURCES / "KernelHavenPCs.spl.csv")
    ground_truth = VariantGenerator().generate(tree, RESOURCES / "tinySPLRepo", tmp_path, just_a)
    lines = VariantPresenceConditionIO().render(ground_truth.variant).splitlines()
    assert lines[1:] == [
        "src/FooFoo.cpp;True;True;True;1;13",
        "src/FooFoo.cpp;True;A;A;4;6",
        "src/foo/bar.cpp;A;;;;",
    ]


def test_assembler_collects_skipped_files() -> None:
    assembler = GroundTruthAssembler("v")
    assembler.skip("src/gone.c", "Missing product-line file")
    ground_truth = assembler.assemble()
    assert ground_truth.variant_name == "v"
    assert ground_truth.files == {}
    assert not ground_truth.is_complete
    assert ground_truth.variant.children == ()
    assert matching_rows(ground_truth) == []


def test_line_run_mapping() -> None:
    run = LineRun(source_start=9, source_end=15, variant_start=5, variant_end=10, skipped_source_lines=(11,))
    assert run.source_lines() == [9, 10, 12, 13, 14, 15]
    assert run.variant_line_of(9) == 5
    assert run.variant_line_of(12) == 7
    assert run.variant_line_of(11) is None
    assert run.variant_line_of(16) is None


def test_configuration_round_trip(tmp_path: Path) -> None:
    variant = Variant(name="all", configuration=Configuration.all_selected())
    path = tmp_path / "configuration.json"
    write_configuration(variant, path)
    assert read_configuration(path) == variant

    sorted_variant = Variant(name="cb", configuration=Configuration(selected=["C", "B"]))
    write_configuration(sorted_variant, path)
    assert '"B",' in path.read_text(encoding="utf-8")
    assert read_configuration(path).configuration.selected == frozenset({"B", "C"})


def test_missing_configuration_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        read_configuration(tmp_path / "nope.json")
