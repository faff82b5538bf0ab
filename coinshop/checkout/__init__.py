"""
Checkout — the quote graph: balance + priced lines → totals → message.

    from coinshop.checkout import QuoteContext, QuoteRequest, quote

    result = await quote(QuoteRequest(user, lines, use_coins=True), QuoteContext(snapshots))
"""

from coinshop.checkout._types import Quote, QuoteContext, QuoteRequest
from coinshop.checkout._nodes import (
    BalanceNode,
    PreviewNode,
    PricedLinesNode,
    QuoteInput,
    TotalsNode,
)
from coinshop.checkout._run import quote

__all__ = (
    "QuoteRequest",
    "QuoteContext",
    "Quote",
    "QuoteInput",
    "BalanceNode",
    "PricedLinesNode",
    "TotalsNode",
    "PreviewNode",
    "quote",
)
