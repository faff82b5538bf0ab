"""
Checkout types — quote input, collaborators and output.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field

from coinshop._types import UserId
from coinshop.cart import CartTotals, RedemptionMode, ShippingPolicy
from coinshop.ledger import BalanceSnapshots, CoinBalance
from coinshop.pricing import CartLine


@dataclass(frozen=True, slots=True)
class QuoteRequest:
    """A cart snapshot plus the coin toggle, for one user."""

    user: UserId
    lines: tuple[CartLine, ...]
    use_coins: bool = False
    destination: str | None = None


@dataclass(frozen=True, slots=True)
class QuoteContext:
    snapshots: BalanceSnapshots
    shipping: ShippingPolicy = ShippingPolicy()
    mode: RedemptionMode = RedemptionMode.PER_LINE
    installments: int = 12
    labels: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class Quote:
    """
    Priced checkout view.

    balance is None when coins are off and the balance fetch failed; the
    quote is still valid because nothing in it depends on the balance.
    """

    totals: CartTotals
    balance: CoinBalance | None
    installment: int
    message: str


__all__ = ("QuoteRequest", "QuoteContext", "Quote")
