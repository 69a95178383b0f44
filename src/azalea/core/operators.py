"""
Operator semantics for Azalea.

Pure functions over Values. Arithmetic coerces both operands with
``to_number()``; equality compares text when both operands are text and
numbers (within ``EPSILON``) otherwise; ordering is always numeric.
Division and modulo by zero give 0.
"""

from __future__ import annotations

import math

from azalea.core.keywords import Canonical
from azalea.core.values import Value, ValueKind

EPSILON = 0.0001

ARITHMETIC = frozenset({Canonical.ADD, Canonical.SUB, Canonical.MUL, Canonical.DIV, Canonical.MOD})
LOGICAL = frozenset({Canonical.AND, Canonical.OR})
DIVISIONS = frozenset({Canonical.DIV, Canonical.MOD})


class OperatorError(Exception):
    """An operator name with no semantics; indicates a parser bug."""


def values_equal(left: Value, right: Value) -> bool:
    if left.kind == ValueKind.TEXT and right.kind == ValueKind.TEXT:
        return left.payload == right.payload
    return abs(left.to_number() - right.to_number()) < EPSILON


def apply_binary(op: Canonical, left: Value, right: Value) -> Value:
    """Apply a binary operator to two already-evaluated operands."""
    match op:
        case Canonical.ADD:
            return Value.number(left.to_number() + right.to_number())
        case Canonical.SUB:
            return Value.number(left.to_number() - right.to_number())
        case Canonical.MUL:
            return Value.number(left.to_number() * right.to_number())
        case Canonical.DIV:
            divisor = right.to_number()
            if divisor == 0.0:
                return Value.number(0)
            return Value.number(left.to_number() / divisor)
        case Canonical.MOD:
            divisor = right.to_number()
            if divisor == 0.0:
                return Value.number(0)
            dividend = left.to_number()
            if not math.isfinite(dividend):
                return Value.number(math.nan)
            return Value.number(math.fmod(dividend, divisor))
        case Canonical.EQ:
            return Value.boolean(values_equal(left, right))
        case Canonical.NE:
            return Value.boolean(not values_equal(left, right))
        case Canonical.GT:
            return Value.boolean(left.to_number() > right.to_number())
        case Canonical.LT:
            return Value.boolean(left.to_number() < right.to_number())
        case Canonical.GE:
            return Value.boolean(left.to_number() >= right.to_number())
        case Canonical.LE:
            return Value.boolean(left.to_number() <= right.to_number())
        case Canonical.AND:
            return Value.boolean(left.to_bool() and right.to_bool())
        case Canonical.OR:
            return Value.boolean(left.to_bool() or right.to_bool())
    raise OperatorError(f"Unknown binary operator: {op}")


def apply_unary(op: Canonical, operand: Value) -> Value:
    """Apply a prefix operator."""
    match op:
        case Canonical.NOT:
            return Value.boolean(not operand.to_bool())
        case Canonical.SUB:
            return Value.number(-operand.to_number())
    raise OperatorError(f"Unknown unary operator: {op}")


def short_circuit(op: Canonical, left: Value) -> Value | None:
    """Result of a logical operator decided by its left operand alone, if any."""
    if op == Canonical.AND and not left.to_bool():
        return Value.boolean(False)
    if op == Canonical.OR and left.to_bool():
        return Value.boolean(True)
    return None
