"""Guard compilation and evaluation for Decree rules.

A guard is a compiled boolean predicate over a World. The engine only relies
on the contract below; the condition language is pluggable:

    compile(condition_text) -> Guard        (raises GuardCompileError)
    guard(world) -> bool                    (raises GuardEvaluationError)

Guards must be pure and deterministic for a fixed world.

The shipped language is a small Python-expression subset, parsed with the
standard library `ast` module and checked against a whitelist at compile
time. Supported:

    - Field references: World.Resources.<name>, World.Powers.<name>
      (absent names read as 0)
    - Literals: integers, floats, true/false (True/False also accepted)
    - Boolean: and, or, not (operands must be booleans)
    - Comparison: ==, !=, <, <=, >, >= (chaining allowed)
    - Arithmetic: +, -, *, /, //, % and unary -, +

Example:
    guard = compile_guard("World.Resources.Money > 1000 and World.Powers.Military >= 90")
    guard(world)  # -> True / False
"""

from __future__ import annotations

import ast
import operator
from dataclasses import dataclass, field
from typing import Any, Callable, Protocol

from decree.errors import GuardCompileError, GuardEvaluationError
from decree.models.world import World

Evaluator = Callable[[World], Any]

WORLD_ROOT = "World"
NAMESPACES: dict[str, Callable[[World, str], int]] = {
    "Resources": World.resource,
    "Powers": World.power,
}
BOOLEAN_NAMES = {"true": True, "false": False, "True": True, "False": False}

_ARITHMETIC = {
    ast.Add: operator.add,
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.Div: operator.truediv,
    ast.FloorDiv: operator.floordiv,
    ast.Mod: operator.mod,
}

_EQUALITY = {
    ast.Eq: operator.eq,
    ast.NotEq: operator.ne,
}

_ORDERING = {
    ast.Lt: operator.lt,
    ast.LtE: operator.le,
    ast.Gt: operator.gt,
    ast.GtE: operator.ge,
}


class Guard(Protocol):
    """A compiled predicate over a World."""

    def __call__(self, world: World) -> bool: ...


class GuardCompiler(Protocol):
    """Turns condition text into a Guard."""

    def __call__(self, condition: str) -> Guard: ...


@dataclass(frozen=True)
class ExpressionGuard:
    """Guard compiled from a condition expression.

    Attributes:
        condition: Original condition text
    """

    condition: str
    _evaluate: Evaluator = field(repr=False, compare=False)

    def __call__(self, world: World) -> bool:
        try:
            result = self._evaluate(world)
        except (ArithmeticError, TypeError, GuardEvaluationError) as e:
            raise GuardEvaluationError(f"Guard '{self.condition}' failed: {e}") from e
        if not isinstance(result, bool):
            raise GuardEvaluationError(
                f"Guard '{self.condition}' must evaluate to a boolean, got {type(result).__name__}"
            )
        return result


def compile_guard(condition: str) -> ExpressionGuard:
    """Compile condition text into a guard.

    Args:
        condition: Condition expression over World fields

    Returns:
        Compiled ExpressionGuard.

    Raises:
        GuardCompileError: On syntax errors, unknown names or unsupported constructs.
    """
    if not isinstance(condition, str) or not condition.strip():
        raise GuardCompileError(f"Condition must be a non-empty string, got {condition!r}")
    try:
        tree = ast.parse(condition.strip(), mode="eval")
    except SyntaxError as e:
        raise GuardCompileError(f"Invalid condition '{condition}': {e.msg}") from e
    return ExpressionGuard(condition=condition, _evaluate=_compile(tree.body, condition))


# =============================================================================
# Compilation
# =============================================================================


def _compile(node: ast.AST, condition: str) -> Evaluator:
    if isinstance(node, ast.Constant):
        value = node.value
        if not isinstance(value, (bool, int, float)):
            raise GuardCompileError(f"Unsupported literal {value!r} in '{condition}'")
        return lambda world: value

    if isinstance(node, ast.Name):
        if node.id not in BOOLEAN_NAMES:
            raise GuardCompileError(
                f"Unknown name '{node.id}' in '{condition}'. "
                f"Use World.Resources.<name> or World.Powers.<name>"
            )
        value = BOOLEAN_NAMES[node.id]
        return lambda world: value

    if isinstance(node, ast.Attribute):
        return _compile_field(node, condition)

    if isinstance(node, ast.BoolOp):
        return _compile_bool_op(node, condition)

    if isinstance(node, ast.UnaryOp):
        return _compile_unary(node, condition)

    if isinstance(node, ast.BinOp):
        op = _ARITHMETIC.get(type(node.op))
        if op is None:
            raise GuardCompileError(
                f"Unsupported operator {type(node.op).__name__} in '{condition}'"
            )
        left = _compile(node.left, condition)
        right = _compile(node.right, condition)
        return lambda world: op(_number(left(world)), _number(right(world)))

    if isinstance(node, ast.Compare):
        return _compile_compare(node, condition)

    raise GuardCompileError(f"Unsupported expression {type(node).__name__} in '{condition}'")


def _compile_field(node: ast.Attribute, condition: str) -> Evaluator:
    namespace = node.value
    if (
        isinstance(namespace, ast.Attribute)
        and isinstance(namespace.value, ast.Name)
        and namespace.value.id == WORLD_ROOT
        and namespace.attr in NAMESPACES
    ):
        read = NAMESPACES[namespace.attr]
        name = node.attr
        return lambda world: read(world, name)
    raise GuardCompileError(
        f"Unknown field '{ast.unparse(node)}' in '{condition}'. "
        f"Use World.Resources.<name> or World.Powers.<name>"
    )


def _compile_bool_op(node: ast.BoolOp, condition: str) -> Evaluator:
    operands = [_compile(value, condition) for value in node.values]

    if isinstance(node.op, ast.And):
        def evaluate_and(world: World) -> bool:
            for operand in operands:
                if not _boolean(operand(world), "and"):
                    return False
            return True
        return evaluate_and

    def evaluate_or(world: World) -> bool:
        for operand in operands:
            if _boolean(operand(world), "or"):
                return True
        return False
    return evaluate_or


def _compile_unary(node: ast.UnaryOp, condition: str) -> Evaluator:
    operand = _compile(node.operand, condition)
    if isinstance(node.op, ast.Not):
        return lambda world: not _boolean(operand(world), "not")
    if isinstance(node.op, ast.USub):
        return lambda world: -_number(operand(world))
    if isinstance(node.op, ast.UAdd):
        return lambda world: +_number(operand(world))
    raise GuardCompileError(f"Unsupported operator {type(node.op).__name__} in '{condition}'")


def _compile_compare(node: ast.Compare, condition: str) -> Evaluator:
    steps: list[tuple[Callable[[Any, Any], bool], bool, Evaluator]] = []
    for op, comparator in zip(node.ops, node.comparators):
        if type(op) in _EQUALITY:
            steps.append((_EQUALITY[type(op)], False, _compile(comparator, condition)))
        elif type(op) in _ORDERING:
            steps.append((_ORDERING[type(op)], True, _compile(comparator, condition)))
        else:
            raise GuardCompileError(
                f"Unsupported comparison {type(op).__name__} in '{condition}'"
            )
    first = _compile(node.left, condition)

    def evaluate_compare(world: World) -> bool:
        left = first(world)
        for op, ordering, right_eval in steps:
            right = right_eval(world)
            if ordering and not op(_number(left), _number(right)):
                return False
            if not ordering and not op(left, right):
                return False
            left = right
        return True
    return evaluate_compare


# =============================================================================
# Run-time operand checks
# =============================================================================


def _number(value: Any) -> int | float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise GuardEvaluationError(f"Expected a number, got {value!r}")
    return value


def _boolean(value: Any, op: str) -> bool:
    if not isinstance(value, bool):
        raise GuardEvaluationError(f"Operand of '{op}' must be a boolean, got {value!r}")
    return value
