"""
Per-line pricing — one cart line + its product config → PricedLine.

Pure and total: identical inputs always give identical output, and no input
can make it raise. Malformed numbers degrade to the defaults.

Rounding:
    1. discount is rounded half-up to the cent
    2. the discounted amount is rounded UP to a whole currency unit
    3. cashback coins = round(ceil × pct)    (nearest)
       max redeemable = floor(ceil × cap)    (never over-promise)

Example:
    priced = price_line(39999, 1, cashback_pct=2)
    priced.cashback_coins  # 800
"""

from __future__ import annotations

from collections.abc import Iterable
from decimal import Decimal

from coinshop._types import Cents
from coinshop.pricing._money import (
    apply_percent,
    ceil_units,
    floor_int,
    percent,
    round_half_up,
    whole,
)
from coinshop.pricing._types import (
    DEFAULT_CASHBACK_PERCENTAGE,
    CartLine,
    PricedLine,
)


def price_line(
    unit_price: Cents | object,
    quantity: int | object,
    discount_pct: object = None,
    cashback_pct: object = None,
    redemption_cap_pct: object = None,
    *,
    line: CartLine | None = None,
) -> PricedLine:
    """
    Price one line.

    None cashback falls back to 2%, None discount and cap to 0.
    Negative percentages become 0; above 100 becomes 100.
    """
    price = whole(unit_price)
    qty = whole(quantity)
    discount = percent(discount_pct)
    cashback = percent(cashback_pct, Decimal(str(DEFAULT_CASHBACK_PERCENTAGE)))
    cap = percent(redemption_cap_pct)

    original = price * qty
    discount_amount = min(original, apply_percent(original, discount))
    discounted = original - discount_amount

    units = Decimal(ceil_units(discounted))

    return PricedLine(
        unit_price=price,
        quantity=qty,
        discount_percentage=float(discount),
        cashback_percentage=float(cashback),
        redemption_cap_percentage=float(cap),
        original_amount=original,
        discount_amount=discount_amount,
        discounted_amount=discounted,
        cashback_coins=round_half_up(units * cashback),
        max_redeemable_coins=floor_int(units * cap),
        line=line,
    )


def price_cart_line(line: CartLine) -> PricedLine:
    product = line.product
    return price_line(
        product.unit_price,
        line.quantity,
        product.discount_percentage,
        product.cashback_percentage,
        product.redemption_cap_percentage,
        line=line,
    )


def price_cart(lines: Iterable[CartLine]) -> tuple[PricedLine, ...]:
    """Price every line, keeping cart order."""
    return tuple(price_cart_line(line) for line in lines)


__all__ = ("price_line", "price_cart_line", "price_cart")
