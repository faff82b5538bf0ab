"""
Pricing — per-line discount, cashback and redemption-cap calculation.

    from coinshop.pricing import ProductPricing, CartLine, price_cart_line

    product = ProductPricing.from_record({"id": "gpu-1", "name": "RTX", "price": 399.99})
    priced = price_cart_line(CartLine(product, quantity=1))
    priced.cashback_coins  # 800
"""

from coinshop.pricing._money import (
    apply_percent,
    ceil_units,
    cents_to_coins,
    coins_to_cents,
    floor_int,
    format_coins,
    format_currency,
    percent,
    round_half_up,
    to_decimal,
    units_to_cents,
    whole,
)
from coinshop.pricing._types import (
    DEFAULT_CASHBACK_PERCENTAGE,
    DEFAULT_DISCOUNT_PERCENTAGE,
    DEFAULT_REDEMPTION_CAP_PERCENTAGE,
    CartLine,
    PricedLine,
    ProductPricing,
)
from coinshop.pricing._line import price_cart, price_cart_line, price_line

__all__ = (
    # Types
    "ProductPricing",
    "CartLine",
    "PricedLine",
    "DEFAULT_DISCOUNT_PERCENTAGE",
    "DEFAULT_CASHBACK_PERCENTAGE",
    "DEFAULT_REDEMPTION_CAP_PERCENTAGE",
    # Operations
    "price_line",
    "price_cart_line",
    "price_cart",
    # Money
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
