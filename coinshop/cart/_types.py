"""
Cart types — coin settings, shipping policy and cart totals.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from coinshop._types import Cents, Coins
from coinshop.pricing import PricedLine

DEFAULT_FREE_SHIPPING_THRESHOLD: Cents = 15000
DEFAULT_SHIPPING_FEE: Cents = 1500
DEFAULT_INSTALLMENTS: int = 12


# ═══════════════════════════════════════════════════════════════════════════════
# Coin Settings
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class CoinSettings:
    """Global redemption toggle + the balance snapshot it caps against."""

    enabled: bool = False
    balance: Coins = 0

    def __post_init__(self) -> None:
        if self.balance < 0:
            object.__setattr__(self, "balance", 0)


class RedemptionMode(str, Enum):
    """
    How lines draw coins from the balance.

    PER_LINE: every line caps against the FULL balance, so two lines with a
        cap of 400 each use 800 coins from a balance of 500. This is how the
        storefront has always behaved; the ledger is the final arbiter.
    SHARED_BALANCE: lines draw from a running balance in cart order.
    """

    PER_LINE = "per_line"
    SHARED_BALANCE = "shared_balance"


# ═══════════════════════════════════════════════════════════════════════════════
# Shipping
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class ShippingPolicy:
    """Flat fee unless the final amount reaches the free-shipping threshold."""

    free_threshold: Cents = DEFAULT_FREE_SHIPPING_THRESHOLD
    flat_fee: Cents = DEFAULT_SHIPPING_FEE

    def __post_init__(self) -> None:
        if self.free_threshold < 0 or self.flat_fee < 0:
            raise ValueError("shipping threshold and fee must be >= 0")

    def fee_for(self, final_amount: Cents) -> Cents:
        return 0 if final_amount >= self.free_threshold else self.flat_fee

    def missing_for_free(self, final_amount: Cents) -> Cents:
        """How much more the customer must add to ship for free."""
        return max(0, self.free_threshold - final_amount)


# ═══════════════════════════════════════════════════════════════════════════════
# Cart Totals
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class CartTotals:
    """
    Cart-level totals. Derived on every recomputation, never persisted.

    total_coins_earned is the cashback the cart would generate. Switching
    redemption on forfeits it, even when nothing ends up redeemed (zero
    balance or zero caps): coins_to_credit is 0 and only coins_to_debit moves.
    """

    lines: tuple[PricedLine, ...]
    subtotal: Cents
    total_discount: Cents
    total_coins_earned: Coins
    total_coins_needed: Coins
    total_coins_used: Coins
    total_coins_discount: Cents
    final_amount: Cents
    shipping_fee: Cents
    grand_total: Cents
    items_count: int
    coins_enabled: bool

    @property
    def is_empty(self) -> bool:
        return not self.lines

    @property
    def coins_to_credit(self) -> Coins:
        return 0 if self.coins_enabled else self.total_coins_earned

    @property
    def coins_to_debit(self) -> Coins:
        return self.total_coins_used if self.coins_enabled else 0

    def installment(self, count: int = DEFAULT_INSTALLMENTS) -> Cents:
        """Presentation only: grand total split in `count`, rounded down to the cent."""
        if count < 1:
            raise ValueError("installment count must be >= 1")
        return self.grand_total // count


__all__ = (
    "DEFAULT_FREE_SHIPPING_THRESHOLD",
    "DEFAULT_SHIPPING_FEE",
    "DEFAULT_INSTALLMENTS",
    "CoinSettings",
    "RedemptionMode",
    "ShippingPolicy",
    "CartTotals",
)
