"""Unit conversion between smallest network units, tokens and fiat.

All arithmetic is done with ``decimal.Decimal`` under a local context wide
enough that quotes up to 2**63 smallest units keep every digit. IEEE
doubles never see the integer numerator.

Examples:
    >>> to_native_unit(3_000_000_000, DEFAULT_UNITS_PER_TOKEN)
    Decimal('3')
    >>> to_fiat(Decimal("0.6"), Decimal("2.5"))
    Decimal('1.50')

Tests:
    - tests/unit/test_units.py
"""

from __future__ import annotations

from decimal import Decimal, localcontext

# 1 SUI = 10**9 MIST (and 1 WAL = 10**9 FROST).
DEFAULT_UNITS_PER_TOKEN = 1_000_000_000

# Digits kept by every conversion. 2**63 has 19 digits, so 50 leaves room
# for the divisor and the fiat multiplication without rounding.
CONVERSION_PRECISION = 50


def _as_decimal(value: Decimal | int | float | str) -> Decimal:
    """Coerce a rate or amount to Decimal.

    Floats go through ``repr`` so 0.1 becomes Decimal('0.1') rather than
    its binary expansion.
    """
    if isinstance(value, bool):
        raise TypeError("Boolean is not a numeric amount")
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(repr(value))
    return Decimal(value)


def to_native_unit(amount: int, units_per_native: int = DEFAULT_UNITS_PER_TOKEN) -> Decimal:
    """Convert an amount in smallest units to display tokens.

    Args:
        amount: Integer amount in smallest units (e.g. MIST).
        units_per_native: Smallest units per token.

    Returns:
        Exact decimal quotient.

    Raises:
        TypeError: If either argument is not an int.
        ValueError: If units_per_native is not positive.
    """
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise TypeError(f"amount must be an int, got {type(amount).__name__}")
    if isinstance(units_per_native, bool) or not isinstance(units_per_native, int):
        raise TypeError(
            f"units_per_native must be an int, got {type(units_per_native).__name__}"
        )
    if units_per_native <= 0:
        raise ValueError("units_per_native must be positive")

    with localcontext() as ctx:
        ctx.prec = CONVERSION_PRECISION
        return Decimal(amount) / Decimal(units_per_native)


def to_fiat(native_amount: Decimal | int | float | str, rate: Decimal | int | float | str) -> Decimal:
    """Convert a token amount to fiat.

    Args:
        native_amount: Amount in display tokens.
        rate: Fiat price of one token.

    Returns:
        native_amount * rate.

    Raises:
        ValueError: If the rate is negative.
    """
    amount = _as_decimal(native_amount)
    price = _as_decimal(rate)
    if price < 0:
        raise ValueError("rate must not be negative")

    with localcontext() as ctx:
        ctx.prec = CONVERSION_PRECISION
        return amount * price


def format_native(amount: Decimal) -> str:
    """Render a token amount without exponent notation.

    Examples:
        >>> format_native(Decimal("1E-9"))
        '0.000000001'
        >>> format_native(Decimal("3"))
        '3'
    """
    text = format(amount, "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text or "0"
