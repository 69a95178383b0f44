"""Tests for operator semantics."""

import math

import pytest

from azalea.core.keywords import Canonical
from azalea.core.operators import (
    OperatorError,
    apply_binary,
    apply_unary,
    short_circuit,
    values_equal,
)
from azalea.core.values import FALSE, TRUE, VOID, Value

num = Value.number
text = Value.text


class TestArithmetic:
    @pytest.mark.parametrize(
        ("op", "left", "right", "expected"),
        [
            (Canonical.ADD, 2, 3, 5),
            (Canonical.SUB, 2, 3, -1),
            (Canonical.MUL, 4, 2.5, 10),
            (Canonical.DIV, 7, 2, 3.5),
            (Canonical.MOD, 7, 3, 1),
            (Canonical.MOD, -7, 3, -1),
        ],
    )
    def test_numbers(self, op: Canonical, left: float, right: float, expected: float) -> None:
        assert apply_binary(op, num(left), num(right)) == num(expected)

    def test_text_operands_are_coerced(self) -> None:
        assert apply_binary(Canonical.ADD, text("2"), text("3")) == num(5)
        assert apply_binary(Canonical.ADD, text("two"), TRUE) == num(3)

    def test_add_does_not_concatenate(self) -> None:
        assert apply_binary(Canonical.ADD, text("a"), text("b")) == num(0)

    @pytest.mark.parametrize("op", [Canonical.DIV, Canonical.MOD])
    def test_division_by_zero_is_zero(self, op: Canonical) -> None:
        assert apply_binary(op, num(5), num(0)) == num(0)
        assert apply_binary(op, num(5), text("abc")) == num(0)

    def test_void_is_zero(self) -> None:
        assert apply_binary(Canonical.MUL, VOID, num(9)) == num(0)

    def test_mod_of_infinity_is_nan(self) -> None:
        result = apply_binary(Canonical.MOD, num(math.inf), num(2))
        assert math.isnan(result.payload)


class TestComparison:
    def test_text_equality_is_exact(self) -> None:
        assert values_equal(text("abc"), text("abc"))
        assert not values_equal(text("abc"), text("ABC"))

    def test_numeric_equality_within_epsilon(self) -> None:
        assert values_equal(num(0.1 + 0.2), num(0.3))
        assert not values_equal(num(1), num(1.001))

    def test_mixed_equality_is_numeric(self) -> None:
        assert values_equal(text("5"), num(5))
        assert values_equal(TRUE, num(1))
        assert values_equal(text("abc"), num(0))

    def test_not_equal(self) -> None:
        assert apply_binary(Canonical.NE, num(1), num(2)) is TRUE

    def test_ordering_is_numeric(self) -> None:
        assert apply_binary(Canonical.GT, text("10"), text("9")) is TRUE
        assert apply_binary(Canonical.LT, num(1), num(1)) is FALSE
        assert apply_binary(Canonical.LE, num(1), num(1)) is TRUE
        assert apply_binary(Canonical.GE, num(0), TRUE) is FALSE


class TestLogic:
    def test_and_or(self) -> None:
        assert apply_binary(Canonical.AND, num(1), text("x")) is TRUE
        assert apply_binary(Canonical.AND, num(1), text("")) is FALSE
        assert apply_binary(Canonical.OR, VOID, num(2)) is TRUE
        assert apply_binary(Canonical.OR, VOID, FALSE) is FALSE

    def test_short_circuit_decides_from_left(self) -> None:
        assert short_circuit(Canonical.AND, FALSE) is FALSE
        assert short_circuit(Canonical.OR, TRUE) is TRUE
        assert short_circuit(Canonical.AND, TRUE) is None
        assert short_circuit(Canonical.OR, FALSE) is None


class TestUnary:
    def test_not(self) -> None:
        assert apply_unary(Canonical.NOT, num(0)) is TRUE
        assert apply_unary(Canonical.NOT, text("x")) is FALSE

    def test_negate(self) -> None:
        assert apply_unary(Canonical.SUB, text("4")) == num(-4)


class TestUnknownOperators:
    def test_binary(self) -> None:
        with pytest.raises(OperatorError):
            apply_binary(Canonical.OUTPUT, num(1), num(2))

    def test_unary(self) -> None:
        with pytest.raises(OperatorError):
            apply_unary(Canonical.ADD, num(1))
