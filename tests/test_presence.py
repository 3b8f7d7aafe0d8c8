"""
Presence condition parsing, rendering and evaluation
"""
from __future__ import annotations

import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

import pytest
from sympy import And, Not, Or

from varevo.errors import ConditionSyntaxError, DataIntegrityError
from varevo.variability.presence import (
    FALSE,
    TRUE,
    conjunction,
    equivalent,
    evaluate,
    feature,
    features_of,
    is_satisfiable,
    parse_condition,
    render_condition,
    simplify,
)

A, B, C, D, E = (feature(name) for name in "ABCDE")


def test_parse_respects_operator_precedence() -> None:
    assert parse_condition("A && B") == And(A, B)
    assert parse_condition("!A || B && C") == Or(Not(A), And(B, C))
    assert parse_condition("!(A || B)") == Not(Or(A, B))
    assert parse_condition("(C && D) || E") == Or(And(C, D), E)


@pytest.mark.parametrize("text", ["True", "true", "TRUE", "1"])
def test_parse_true_constants(text: str) -> None:
    assert parse_condition(text) == TRUE


@pytest.mark.parametrize("text", ["False", "false", "FALSE", "0"])
def test_parse_false_constants(text: str) -> None:
    assert parse_condition(text) == FALSE


@pytest.mark.parametrize("text", ["", "A &&", "(A || B", "A B", "&& A", "A @ B"])
def test_malformed_conditions_are_rejected(text: str) -> None:
    with pytest.raises(ConditionSyntaxError) as excinfo:
        parse_condition(text)
    assert isinstance(excinfo.value, DataIntegrityError)


def test_feature_names_may_contain_config_prefixes() -> None:
    condition = parse_condition("CONFIG_X86_64 && !CONFIG_MODULE_SIG")
    assert features_of(condition) == {"CONFIG_X86_64", "CONFIG_MODULE_SIG"}


@pytest.mark.parametrize("text", [
    "A",
    "!A",
    "A && B",
    "(C && D) || E",
    "!(A || B) && C",
    "True",
    "False",
])
def test_render_is_stable(text: str) -> None:
    rendered = render_condition(parse_condition(text))
    assert render_condition(parse_condition(rendered)) == rendered
    assert parse_condition(rendered) == parse_condition(text)


def test_render_parenthesizes_nested_operators() -> None:
    assert render_condition(And(A, Or(B, C))) in ("A && (B || C)", "(B || C) && A")
    assert render_condition(Not(And(A, B))) == "!(A && B)"


def test_unassigned_features_are_false() -> None:
    assert evaluate(parse_condition("A && !B"), {"A"})
    assert not evaluate(A, set())
    assert evaluate(Not(A), [])
    assert evaluate(TRUE, None)
    assert not evaluate(FALSE, {"A"})


def test_select_all_sets_every_feature() -> None:
    assert evaluate(And(A, B, C), [], select_all=True)
    assert not evaluate(Not(A), [], select_all=True)


def test_equivalence_is_semantic() -> None:
    assert equivalent(parse_condition("A && B"), parse_condition("B && A"))
    assert equivalent(parse_condition("!(A || B)"), parse_condition("!A && !B"))
    assert equivalent(conjunction(TRUE, TRUE, A, B), And(A, B))
    assert not equivalent(A, B)
    assert not equivalent(Or(A, B), And(A, B))


def test_conjunction_and_satisfiability() -> None:
    assert conjunction() == TRUE
    assert conjunction(A) == A
    assert not is_satisfiable(conjunction(A, Not(A)))
    assert is_satisfiable(Or(A, B))


def test_simplify_preserves_meaning() -> None:
    condition = parse_condition("(A && B) || (A && !B)")
    simplified = simplify(condition)
    assert equivalent(simplified, condition)
    assert simplified == A
