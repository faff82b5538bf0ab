"""
Cart — aggregate priced lines into totals, redemption and shipping.

    from coinshop.cart import CoinSettings, price_and_aggregate

    totals = price_and_aggregate(cart, CoinSettings(enabled=True, balance=500))
    totals.grand_total, totals.coins_to_debit
"""

from coinshop.cart._types import (
    DEFAULT_FREE_SHIPPING_THRESHOLD,
    DEFAULT_INSTALLMENTS,
    DEFAULT_SHIPPING_FEE,
    CartTotals,
    CoinSettings,
    RedemptionMode,
    ShippingPolicy,
)
from coinshop.cart._aggregate import aggregate, price_and_aggregate

__all__ = (
    "CoinSettings",
    "RedemptionMode",
    "ShippingPolicy",
    "CartTotals",
    "DEFAULT_FREE_SHIPPING_THRESHOLD",
    "DEFAULT_SHIPPING_FEE",
    "DEFAULT_INSTALLMENTS",
    "aggregate",
    "price_and_aggregate",
)
