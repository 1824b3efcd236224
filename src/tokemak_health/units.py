"""Fixed-point decimal helpers for ledger amounts."""

from __future__ import annotations

from decimal import (
    ROUND_HALF_UP,
    Context,
    Decimal,
    DecimalException,
    DivisionByZero,
    InvalidOperation,
    Overflow,
)
from typing import Iterable

from .exceptions import DecimalScaleError

REPORT_SCALE = 6
AMOUNT_DISPLAY_SCALE = 2
RATIO_DISPLAY_SCALE = 3

# uint256 needs 78 digits; products of two of them still fit comfortably.
LEDGER_CONTEXT = Context(
    prec=160,
    rounding=ROUND_HALF_UP,
    traps=[InvalidOperation, DivisionByZero, Overflow],
)

ZERO = Decimal(0).quantize(Decimal(1).scaleb(-REPORT_SCALE))


def _quantum(scale: int) -> Decimal:
    return Decimal(1).scaleb(-scale)


def from_raw(raw: int, decimals: int) -> Decimal:
    """Pair a raw integer ledger amount with its decimal places.

    The result is exact: ``from_raw(1_500_000, 6) == Decimal("1.500000")``.

    Raises:
        DecimalScaleError: If the amount or the decimals are negative, or
            the value is not an integer.
    """
    if isinstance(raw, bool) or not isinstance(raw, int):
        raise DecimalScaleError(f"Raw amount must be an integer, got {raw!r}")
    if raw < 0:
        raise DecimalScaleError(f"Raw amount must be non-negative, got {raw}")
    if decimals < 0:
        raise DecimalScaleError(f"Decimals must be non-negative, got {decimals}")
    return Decimal(raw).scaleb(-decimals, context=LEDGER_CONTEXT)


def rescale(value: Decimal, scale: int = REPORT_SCALE) -> Decimal:
    """Rescale ``value`` to exactly ``scale`` decimal places.

    Rounds half away from zero when digits are dropped; scaling up only
    appends zeros.
    """
    try:
        return value.quantize(_quantum(scale), context=LEDGER_CONTEXT)
    except DecimalException as e:
        raise DecimalScaleError(f"Cannot rescale {value} to {scale} places") from e


def to_report_scale(raw: int, decimals: int) -> Decimal:
    """Convert a raw ledger amount to the canonical report scale."""
    return rescale(from_raw(raw, decimals), REPORT_SCALE)


def ratio(numerator: Decimal, denominator: Decimal) -> Decimal:
    """Full-precision quotient. Callers must short-circuit zero denominators."""
    try:
        return LEDGER_CONTEXT.divide(numerator, denominator)
    except DecimalException as e:
        raise DecimalScaleError(
            f"Cannot divide {numerator} by {denominator}"
        ) from e


def multiply(left: Decimal, right: Decimal) -> Decimal:
    try:
        return LEDGER_CONTEXT.multiply(left, right)
    except DecimalException as e:
        raise DecimalScaleError(f"Cannot multiply {left} by {right}") from e


def total(values: Iterable[Decimal]) -> Decimal:
    """Sum amounts at report scale."""
    result = ZERO
    try:
        for value in values:
            result = LEDGER_CONTEXT.add(result, value)
    except DecimalException as e:
        raise DecimalScaleError("Cannot sum amounts") from e
    return rescale(result, REPORT_SCALE)


def display(value: Decimal, scale: int = AMOUNT_DISPLAY_SCALE) -> str:
    """Render an amount for humans; never feed the result back into sums."""
    return f"{rescale(value, scale):,.{scale}f}"
