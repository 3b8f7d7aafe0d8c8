"""
Presence conditions - boolean formulas over feature names.

Formulas are sympy boolean expressions, so they are immutable and hashable.
Structural equality (``==``) is only a syntactic check; use ``equivalent``
wherever two conditions must behave the same.

The textual syntax is the one used by KernelHaven exports::

    (C && D) || E
    !A && B
    True
"""
import re
from typing import Iterable

from sympy import Not, Symbol, Xor, false, true
from sympy.logic.boolalg import And, Boolean, BooleanFalse, BooleanTrue, Or, simplify_logic
from sympy.logic.inference import satisfiable

from varevo.errors import ConditionSyntaxError

TRUE = true
FALSE = false

_TRUE_NAMES = {"True", "true", "TRUE", "1"}
_FALSE_NAMES = {"False", "false", "FALSE", "0"}

_TOKEN_RE = re.compile(r"\s*(?:(&&|\|\||[!()])|([A-Za-z0-9_.$=\-]+))")


def feature(name: str) -> Symbol:
    """Literal for the feature ``name``."""
    return Symbol(name)


def _tokenize(text: str) -> list[tuple[str, int]]:
    tokens = []
    pos = 0
    length = len(text)
    while pos < length:
        match = _TOKEN_RE.match(text, pos)
        if match is None:
            if text[pos:].strip() == "":
                break
            raise ConditionSyntaxError("Unexpected character", text, pos)
        token = match.group(1) or match.group(2)
        tokens.append((token, match.start(match.lastindex)))
        pos = match.end()
    return tokens


class _Parser:
    """Recursive descent parser; ``!`` binds tighter than ``&&``, which binds tighter than ``||``."""

    def __init__(self, text: str):
        self.text = text
        self.tokens = _tokenize(text)
        self.index = 0

    def _peek(self) -> str | None:
        if self.index < len(self.tokens):
            return self.tokens[self.index][0]
        return None

    def _position(self) -> int:
        if self.index < len(self.tokens):
            return self.tokens[self.index][1]
        return len(self.text)

    def _take(self) -> str:
        token = self.tokens[self.index][0]
        self.index += 1
        return token

    def parse(self) -> Boolean:
        if not self.tokens:
            raise ConditionSyntaxError("Empty presence condition", self.text)
        expr = self._disjunction()
        if self._peek() is not None:
            raise ConditionSyntaxError("Trailing input", self.text, self._position())
        return expr

    def _disjunction(self) -> Boolean:
        operands = [self._conjunction()]
        while self._peek() == "||":
            self._take()
            operands.append(self._conjunction())
        return operands[0] if len(operands) == 1 else Or(*operands)

    def _conjunction(self) -> Boolean:
        operands = [self._negation()]
        while self._peek() == "&&":
            self._take()
            operands.append(self._negation())
        return operands[0] if len(operands) == 1 else And(*operands)

    def _negation(self) -> Boolean:
        if self._peek() == "!":
            self._take()
            return Not(self._negation())
        return self._atom()

    def _atom(self) -> Boolean:
        token = self._peek()
        if token is None:
            raise ConditionSyntaxError("Unexpected end of input", self.text, self._position())
        if token == "(":
            self._take()
            expr = self._disjunction()
            if self._peek() != ")":
                raise ConditionSyntaxError("Missing closing parenthesis", self.text, self._position())
            self._take()
            return expr
        if token in ("&&", "||", ")"):
            raise ConditionSyntaxError(f"Unexpected '{token}'", self.text, self._position())
        self._take()
        if token in _TRUE_NAMES:
            return TRUE
        if token in _FALSE_NAMES:
            return FALSE
        return Symbol(token)


def parse_condition(text: str) -> Boolean:
    """
    Parse a presence condition from its textual form.

    Raises:
        ConditionSyntaxError: the text is not a well-formed formula
    """
    return _Parser(text).parse()


def render_condition(condition: Boolean) -> str:
    """Render ``condition`` in the syntax accepted by ``parse_condition``."""
    if isinstance(condition, BooleanTrue) or condition is True:
        return "True"
    if isinstance(condition, BooleanFalse) or condition is False:
        return "False"
    if isinstance(condition, Symbol):
        return condition.name
    if isinstance(condition, Not):
        return "!" + _render_operand(condition.args[0])
    if isinstance(condition, And):
        return " && ".join(_render_operand(arg) for arg in condition.args)
    if isinstance(condition, Or):
        return " || ".join(_render_operand(arg) for arg in condition.args)
    # Implies, Equivalent, ... only appear after simplification by hand
    return render_condition(simplify_logic(condition, form="dnf", force=True))


def _render_operand(condition: Boolean) -> str:
    text = render_condition(condition)
    if isinstance(condition, (And, Or)):
        return f"({text})"
    return text


def evaluate(condition: Boolean, selected: Iterable[str] | None, select_all: bool = False) -> bool:
    """
    Evaluate ``condition`` with the features in ``selected`` set to true.

    Features that are not selected are false. With ``select_all`` every
    feature is true.
    """
    chosen = selected if isinstance(selected, (set, frozenset)) else frozenset(selected or ())
    return _evaluate(condition, chosen, select_all)


def _evaluate(condition: Boolean, selected: frozenset | set, select_all: bool) -> bool:
    if isinstance(condition, BooleanTrue) or condition is True:
        return True
    if isinstance(condition, BooleanFalse) or condition is False:
        return False
    if isinstance(condition, Symbol):
        return select_all or condition.name in selected
    if isinstance(condition, Not):
        return not _evaluate(condition.args[0], selected, select_all)
    if isinstance(condition, And):
        return all(_evaluate(arg, selected, select_all) for arg in condition.args)
    if isinstance(condition, Or):
        return any(_evaluate(arg, selected, select_all) for arg in condition.args)
    assignment = {
        symbol: select_all or symbol.name in selected
        for symbol in condition.free_symbols
    }
    return bool(condition.xreplace(assignment))


def equivalent(a: Boolean, b: Boolean) -> bool:
    """Check semantic equivalence with the SAT oracle: ``a XOR b`` must be unsatisfiable."""
    if a == b:
        return True
    return satisfiable(Xor(a, b)) is False


def is_satisfiable(condition: Boolean) -> bool:
    return satisfiable(condition) is not False


def conjunction(*conditions: Boolean) -> Boolean:
    """AND of ``conditions``; TRUE for no operands."""
    if not conditions:
        return TRUE
    return And(*conditions)


def simplify(condition: Boolean) -> Boolean:
    """Minimal DNF of ``condition``. Never run unless explicitly requested."""
    return simplify_logic(condition, form="dnf", force=True)


def features_of(condition: Boolean) -> set[str]:
    """Names of all features mentioned in ``condition``."""
    return {symbol.name for symbol in condition.free_symbols}


def is_true(condition: Boolean) -> bool:
    """Syntactic check for the constant TRUE."""
    return isinstance(condition, BooleanTrue) or condition is True
