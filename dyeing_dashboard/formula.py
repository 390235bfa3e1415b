"""
Manual-override values: spreadsheet-style formulas ("=12+5-3") or plain numbers.

Formulas are sanitised to digits, '.', '+', '-', '*', '/' and evaluated by a
whitelist walker over the expression AST. Nothing is ever passed to eval().
"""

import ast
import logging
import math
import operator
import re
from dataclasses import dataclass

logger = logging.getLogger(__name__)

_DISALLOWED = re.compile(r"[^-+/*0-9.]")
_LEADING_ZEROS = re.compile(r"(?<![\d.])0+(?=\d)")
_LEADING_FLOAT = re.compile(r"^\s*[-+]?(\d+\.?\d*|\.\d+)([eE][-+]?\d+)?")
# "--" and "++" read as increment/decrement operators, never as two signs
_REPEATED_SIGN = re.compile(r"\+\+|--")

_BINARY_OPS = {
    ast.Add: operator.add,
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.Div: operator.truediv,
}
_UNARY_OPS = {
    ast.UAdd: operator.pos,
    ast.USub: operator.neg,
}


def sanitize_expression(expr: str) -> str:
    """Drop every character outside the arithmetic whitelist.

    Leading zeros on integer parts are removed ("=08+1" -> "8+1") since the
    parser rejects them.
    """
    return _LEADING_ZEROS.sub("", _DISALLOWED.sub("", expr))


def _evaluate_node(node: ast.AST) -> float:
    if isinstance(node, ast.Expression):
        return _evaluate_node(node.body)
    if isinstance(node, ast.Constant) and type(node.value) in (int, float):
        return float(node.value)
    if isinstance(node, ast.BinOp) and type(node.op) in _BINARY_OPS:
        return _BINARY_OPS[type(node.op)](_evaluate_node(node.left), _evaluate_node(node.right))
    if isinstance(node, ast.UnaryOp) and type(node.op) in _UNARY_OPS:
        return _UNARY_OPS[type(node.op)](_evaluate_node(node.operand))
    raise ValueError(f"Unsupported expression element: {type(node).__name__}")


def parse_leading_float(text: str) -> float:
    """Parse the numeric prefix of text ("12.5kg" -> 12.5); 0 if none."""
    match = _LEADING_FLOAT.match(text)
    if not match:
        return 0.0
    return float(match.group(0))


def evaluate_formula(text: str | None) -> float:
    """Evaluate a manual-override input.

    "=<expr>" evaluates the sanitised arithmetic expression; an expression
    that does not end in a digit, repeats a sign ("--5", "5--3"), fails to
    parse, divides by zero or gives a non-finite result yields 0. Any other
    input is parsed as a number (numeric prefix), defaulting to 0.
    """
    if text is None:
        return 0.0
    text = str(text)
    if not text:
        return 0.0

    if text.startswith("="):
        expr = sanitize_expression(text[1:])
        if not expr or not expr[-1].isdigit() or _REPEATED_SIGN.search(expr):
            return 0.0
        try:
            result = _evaluate_node(ast.parse(expr, mode="eval"))
        except (SyntaxError, ValueError, ZeroDivisionError, OverflowError) as exc:
            logger.debug("Formula %r evaluated to 0: %s", text, exc)
            return 0.0
        if math.isnan(result) or math.isinf(result):
            return 0.0
        return result

    return parse_leading_float(text)


@dataclass(frozen=True)
class ManualValue:
    """A manually entered number, optionally backed by a formula.

    The evaluated value is cached alongside the formula so the two can never
    drift apart: the only way to build a formula-backed value is parse().
    """

    value: float
    formula: str | None = None

    @classmethod
    def literal(cls, value: float) -> "ManualValue":
        return cls(value=float(value or 0))

    @classmethod
    def parse(cls, text: str | float | None) -> "ManualValue":
        """Build from user input, evaluating formulas eagerly."""
        if isinstance(text, (int, float)) and not isinstance(text, bool):
            return cls.literal(text)
        text = "" if text is None else str(text)
        if text.startswith("="):
            return cls(value=evaluate_formula(text), formula=text)
        return cls(value=evaluate_formula(text))

    @classmethod
    def from_record(
        cls,
        record: dict | None,
        field: str,
        shift: str,
        default: str = "0",
    ) -> "ManualValue":
        """Read <field>Formula[shift], then <field>[shift], then default.

        An empty formula string falls through to the stored number; a stored
        zero is kept.
        """
        record = record or {}
        formula = (record.get(f"{field}Formula") or {}).get(shift)
        if formula:
            return cls.parse(formula)
        stored = (record.get(field) or {}).get(shift)
        if stored is not None:
            return cls.parse(stored)
        return cls.parse(default)

    @property
    def text(self) -> str:
        """What the edit grid shows: the formula, or the number."""
        if self.formula is not None:
            return self.formula
        if float(self.value).is_integer():
            return str(int(self.value))
        return repr(float(self.value))

    def to_store(self) -> tuple[float, str]:
        """(numeric cache, formula-or-text) pair persisted on a record."""
        return self.value, self.text
