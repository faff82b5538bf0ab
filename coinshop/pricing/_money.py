"""
Money helpers — normalization, rounding and display of cents and coins.

Every coercion here is total: malformed catalog values degrade to a
default instead of raising, so a bad product record never blocks checkout.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation, ROUND_FLOOR, ROUND_HALF_UP

from coinshop._types import Cents, Coins, CENTS_PER_UNIT

_HUNDRED = Decimal(100)


# ═══════════════════════════════════════════════════════════════════════════════
# Normalization
# ═══════════════════════════════════════════════════════════════════════════════


def to_decimal(value: object) -> Decimal | None:
    """
    Coerce a loosely typed numeric value to Decimal.

    Returns None for None, booleans, NaN, infinities and anything unparsable.
    Floats go through str() so 2.5 stays 2.5 instead of its binary expansion.
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        if isinstance(value, Decimal):
            number = value
        elif isinstance(value, int):
            number = Decimal(value)
        elif isinstance(value, float):
            number = Decimal(str(value))
        elif isinstance(value, str):
            number = Decimal(value.strip().replace(",", "."))
        else:
            return None
    except (InvalidOperation, ValueError):
        return None
    if not number.is_finite():
        return None
    return number


def percent(value: object, default: Decimal | int = 0) -> Decimal:
    """Normalize a percentage: missing/invalid → default, negative → 0, above 100 → 100."""
    number = to_decimal(value)
    if number is None:
        number = Decimal(default)
    if number < 0:
        return Decimal(0)
    if number > _HUNDRED:
        return _HUNDRED
    return number


def whole(value: object) -> int:
    """Normalize a count or cent amount: invalid or negative → 0, fractions round half-up."""
    number = to_decimal(value)
    if number is None or number <= 0:
        return 0
    return round_half_up(number)


# ═══════════════════════════════════════════════════════════════════════════════
# Rounding
# ═══════════════════════════════════════════════════════════════════════════════


def round_half_up(value: Decimal) -> int:
    """Nearest integer, halves away from zero (matches Math.round for positives)."""
    return int(value.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def floor_int(value: Decimal) -> int:
    return int(value.to_integral_value(rounding=ROUND_FLOOR))


def ceil_units(amount: Cents) -> int:
    """Round a cent amount UP to whole currency units: 39999 → 400."""
    return -(-amount // CENTS_PER_UNIT)


def apply_percent(amount: Cents, pct: Decimal) -> Cents:
    """amount × pct / 100, rounded half-up to the cent."""
    return round_half_up(Decimal(amount) * pct / _HUNDRED)


# ═══════════════════════════════════════════════════════════════════════════════
# Conversion & display
# ═══════════════════════════════════════════════════════════════════════════════


def coins_to_cents(coins: Coins) -> Cents:
    """1 coin is worth exactly 1 cent."""
    return coins


def cents_to_coins(cents: Cents) -> Coins:
    return cents


def units_to_cents(value: object) -> Cents:
    """Catalog prices are stored in currency units (399.99); convert to cents."""
    number = to_decimal(value)
    if number is None or number <= 0:
        return 0
    return round_half_up(number * _HUNDRED)


def format_currency(amount: Cents) -> str:
    """39999 → '399,99' (storefront display style)."""
    sign = "-" if amount < 0 else ""
    units, cents = divmod(abs(amount), CENTS_PER_UNIT)
    return f"{sign}{units},{cents:02d}"


def format_coins(coins: Coins) -> str:
    """12345 → '12.345'."""
    return f"{coins:,}".replace(",", ".")


__all__ = (
    "to_decimal",
    "percent",
    "whole",
    "round_half_up",
    "floor_int",
    "ceil_units",
    "apply_percent",
    "coins_to_cents",
    "cents_to_coins",
    "units_to_cents",
    "format_currency",
    "format_coins",
)
