"""Inline calculator results for arithmetic queries."""

from __future__ import annotations

import ast
import operator
from collections.abc import Callable

from result import Err, Ok, Result

from lumina.models.search import ActionType, SearchResult

_MATH_CHARS = frozenset("0123456789+-*/(). ")
_OPERATORS = frozenset("+-*/")

_BINARY: dict[type[ast.operator], Callable[[float, float], float]] = {
    ast.Add: operator.add,
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.Div: operator.truediv,
}
_UNARY: dict[type[ast.unaryop], Callable[[float], float]] = {
    ast.UAdd: operator.pos,
    ast.USub: operator.neg,
}


def is_math_expression(query: str) -> bool:
    """Only digits, operators, parens, dots and spaces, with at least one operator."""
    return bool(query) and set(query) <= _MATH_CHARS and any(c in _OPERATORS for c in query)


def evaluate(expression: str) -> float:
    """Evaluate a plain arithmetic expression without ``eval``."""
    tree = ast.parse(expression.strip(), mode="eval")
    return _eval_node(tree.body)


def _eval_node(node: ast.expr) -> float:
    if isinstance(node, ast.Constant) and isinstance(node.value, int | float):
        return node.value
    if isinstance(node, ast.BinOp) and type(node.op) in _BINARY:
        return _BINARY[type(node.op)](_eval_node(node.left), _eval_node(node.right))
    if isinstance(node, ast.UnaryOp) and type(node.op) in _UNARY:
        return _UNARY[type(node.op)](_eval_node(node.operand))
    msg = f"Unsupported expression element: {type(node).__name__}"
    raise ValueError(msg)


def format_number(value: float) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def calculate(query: str) -> Result[SearchResult, str]:
    if not is_math_expression(query):
        return Err("Not a math expression")
    try:
        value = evaluate(query)
    except (SyntaxError, ValueError, ZeroDivisionError, OverflowError):
        return Err("Invalid math expression")
    text = format_number(value)
    return Ok(
        SearchResult(
            id="calculator",
            title=f"{query} = {text}",
            description="Press Enter to copy result to clipboard",
            icon="🧮",
            action_type=ActionType.COPY_TO_CLIPBOARD,
            action_data=text,
            score=0.9,
        )
    )
