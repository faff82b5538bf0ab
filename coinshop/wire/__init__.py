"""
Wire — HTTP surface for quotes and the daily bonus.

    from coinshop.wire import create_app

    app = create_app(ledger, settings)
"""

from coinshop.wire._models import (
    CartLineIn,
    ClaimOut,
    PricedLineOut,
    ProductIn,
    QuoteIn,
    QuoteOut,
    SettleIn,
    SettleOut,
    StreakOut,
    TotalsOut,
)
from coinshop.wire._app import create_app

__all__ = (
    "create_app",
    "ProductIn",
    "CartLineIn",
    "QuoteIn",
    "SettleIn",
    "QuoteOut",
    "SettleOut",
    "PricedLineOut",
    "TotalsOut",
    "StreakOut",
    "ClaimOut",
)
