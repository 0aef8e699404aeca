from __future__ import annotations

import math

import pytest

from dxfscene.rounding import round10, round_decimal


@pytest.mark.parametrize(
    ("value", "exponent", "expected"),
    [
        (123.456, None, 123),
        (123.5, None, 124),
        (123.4, None, 123),
        (123.456, 0, 123),
        (123.5, 0, 124),
        (-123.5, 0, -123),
        (2.5, 0, 3),
        (3.5, 0, 4),
    ],
)
def test_round10_rounds_half_up_to_integer(value, exponent, expected) -> None:
    assert round10(value, exponent) == expected


@pytest.mark.parametrize(
    ("value", "exponent", "expected"),
    [
        (123.456, 1, 120),
        (123.456, 2, 100),
        (123.456, 3, 0),
        (123.454, 2, 100),
        (-123.456, 1, -120),
        (-123.456, 2, -100),
        (123456789, 6, 123000000),
        (0.00123, 4, 0),
    ],
)
def test_round10_positive_exponent_rounds_to_powers_of_ten(value, exponent, expected) -> None:
    assert round10(value, exponent) == expected


@pytest.mark.parametrize(
    ("value", "exponent"),
    [
        (1234, -1),
        (1234, -2),
        (1234, -3),
        (5678, -2),
        (-1234, -1),
        (999, -1),
        (949, -1),
        (944, -1),
        (123456789, -6),
        (1e10, -10),
    ],
)
def test_round10_negative_exponent_keeps_integers(value, exponent) -> None:
    assert round10(value, exponent) == value


def test_round10_zero_and_tiny_values() -> None:
    assert round10(0, 2) == 0
    assert round10(0, -2) == 0
    assert round10(1e-10, 10) == pytest.approx(0.0, abs=1e-15)


def test_round10_fraction_digits() -> None:
    assert round10(1.2345, -2) == pytest.approx(1.23)
    assert round10(-0.0015, -3) == pytest.approx(-0.001)


@pytest.mark.parametrize(("value", "exponent"), [("invalid", 1), (123, 1.5), (123, "abc")])
def test_round10_returns_nan_for_invalid_input(value, exponent) -> None:
    assert math.isnan(round10(value, exponent))


def test_round_decimal_is_exact() -> None:
    assert round_decimal(123.456, -2) == 123.46
    assert round_decimal(1.005, -2) == 1.01
    assert round_decimal(2.5) == 3.0
    assert round_decimal(-2.5) == -3.0
    assert round_decimal(1234, 2) == 1200.0


def test_round_decimal_returns_nan_for_invalid_input() -> None:
    assert math.isnan(round_decimal("invalid", 1))
    assert math.isnan(round_decimal(1.0, 0.5))
    assert math.isnan(round_decimal(float("inf"), 0))
