"""Rounding helpers for displayed values.

``round10`` keeps the legacy shift-round-unshift behavior so already
displayed numbers stay identical. ``round_decimal`` rounds exactly in decimal
arithmetic. Both return NaN instead of raising on invalid input.
"""

from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

_NAN = float("nan")


def round10(value: Any, exponent: Any = None) -> float:
    """Round ``value`` to the nearest multiple of ``10 ** exponent``.

    Halves round toward positive infinity, so ``round10(-123.5) == -123``.
    The shift goes through the shortest decimal string of the value, which
    reproduces the legacy results exactly.
    """
    number = _to_float(value)
    if exponent is None:
        return _round_half_up(number)
    exp = _to_integer_exponent(exponent)
    if exp is None:
        return _NAN
    if exp == 0:
        return _round_half_up(number)
    if not math.isfinite(number):
        return _NAN

    shifted = _shift(number, -exp)
    rounded = _round_half_up(shifted)
    return _shift(rounded, exp)


def round_decimal(value: Any, exponent: Any = 0) -> float:
    number = _to_float(value)
    exp = _to_integer_exponent(0 if exponent is None else exponent)
    if exp is None or not math.isfinite(number):
        return _NAN
    try:
        quantum = Decimal(1).scaleb(exp)
        result = Decimal(repr(number)).quantize(quantum, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        return _NAN
    return float(result)


def _round_half_up(number: float) -> float:
    if not math.isfinite(number):
        return number
    return float(math.floor(number + 0.5))


def _shift(number: float, places: int) -> float:
    mantissa, _, exp_text = repr(number).partition("e")
    current = int(exp_text) if exp_text else 0
    return float(f"{mantissa}e{current + places}")


def _to_float(value: Any) -> float:
    if isinstance(value, bool):
        return float(value)
    try:
        return float(value)
    except (TypeError, ValueError):
        return _NAN


def _to_integer_exponent(exponent: Any) -> int | None:
    try:
        exp = float(exponent)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(exp) or not exp.is_integer():
        return None
    return int(exp)
