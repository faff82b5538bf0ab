"""
HTTP models — pydantic in/out with to_domain() / from_domain().
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from coinshop._types import UserId
from coinshop.cart import CartTotals
from coinshop.checkout import Quote, QuoteRequest
from coinshop.ledger import ClaimResult
from coinshop.pricing import CartLine, PricedLine, ProductPricing, whole
from coinshop.settlement import SettlementReceipt
from coinshop.streak import StreakView


# ═══════════════════════════════════════════════════════════════════════════════
# Quote
# ═══════════════════════════════════════════════════════════════════════════════


class ProductIn(BaseModel):
    """Catalog record as the storefront sends it. Loose on purpose: bad numbers become defaults."""

    id: str = ""
    name: str = ""
    price: Any = None
    discount_percentage: Any = None
    uti_coins_cashback_percentage: Any = None
    uti_coins_discount_percentage: Any = None

    def to_domain(self) -> ProductPricing:
        return ProductPricing.from_record(self.model_dump())


class CartLineIn(BaseModel):
    product: ProductIn
    quantity: Any = 1
    size: str | None = None
    color: str | None = None

    def to_domain(self) -> CartLine:
        return CartLine(
            product=self.product.to_domain(),
            quantity=whole(self.quantity),
            size=self.size or None,
            color=self.color or None,
        )


class QuoteIn(BaseModel):
    user_id: str = Field(min_length=1)
    lines: list[CartLineIn] = Field(default_factory=list)
    use_coins: bool = False

    def to_domain(self) -> QuoteRequest:
        return QuoteRequest(
            user=UserId(self.user_id),
            lines=tuple(line.to_domain() for line in self.lines),
            use_coins=self.use_coins,
        )


class SettleIn(QuoteIn):
    destination: str | None = None
    verification_code: str | None = None


class PricedLineOut(BaseModel):
    product_id: str
    name: str
    quantity: int
    original_amount: int
    discount_amount: int
    discounted_amount: int
    cashback_coins: int
    max_redeemable_coins: int
    coins_used: int
    final_amount: int

    @classmethod
    def from_domain(cls, line: PricedLine) -> PricedLineOut:
        return cls(
            product_id=line.product_id,
            name=line.product_name,
            quantity=line.quantity,
            original_amount=line.original_amount,
            discount_amount=line.discount_amount,
            discounted_amount=line.discounted_amount,
            cashback_coins=line.cashback_coins,
            max_redeemable_coins=line.max_redeemable_coins,
            coins_used=line.coins_used,
            final_amount=line.final_amount,
        )


class TotalsOut(BaseModel):
    subtotal: int
    total_discount: int
    total_coins_earned: int
    total_coins_needed: int
    total_coins_used: int
    total_coins_discount: int
    final_amount: int
    shipping_fee: int
    grand_total: int
    items_count: int
    coins_to_credit: int
    coins_to_debit: int

    @classmethod
    def from_domain(cls, totals: CartTotals) -> TotalsOut:
        return cls(
            subtotal=totals.subtotal,
            total_discount=totals.total_discount,
            total_coins_earned=totals.total_coins_earned,
            total_coins_needed=totals.total_coins_needed,
            total_coins_used=totals.total_coins_used,
            total_coins_discount=totals.total_coins_discount,
            final_amount=totals.final_amount,
            shipping_fee=totals.shipping_fee,
            grand_total=totals.grand_total,
            items_count=totals.items_count,
            coins_to_credit=totals.coins_to_credit,
            coins_to_debit=totals.coins_to_debit,
        )


class QuoteOut(BaseModel):
    lines: list[PricedLineOut]
    totals: TotalsOut
    balance: int | None
    installment: int
    message: str

    @classmethod
    def from_domain(cls, q: Quote) -> QuoteOut:
        return cls(
            lines=[PricedLineOut.from_domain(line) for line in q.totals.lines],
            totals=TotalsOut.from_domain(q.totals),
            balance=q.balance.balance if q.balance is not None else None,
            installment=q.installment,
            message=q.message,
        )


class SettleOut(BaseModel):
    reference: str
    link: str
    message: str
    redeemed_coins: int
    credited_coins: int
    balance_after: int
    totals: TotalsOut

    @classmethod
    def from_domain(cls, receipt: SettlementReceipt) -> SettleOut:
        commit = receipt.commit
        return cls(
            reference=commit.reference,
            link=receipt.link,
            message=receipt.message,
            redeemed_coins=commit.movement.redeem_coins,
            credited_coins=commit.movement.credit_coins,
            balance_after=commit.balance_after,
            totals=TotalsOut.from_domain(receipt.totals),
        )


# ═══════════════════════════════════════════════════════════════════════════════
# Streak
# ═══════════════════════════════════════════════════════════════════════════════


class StreakOut(BaseModel):
    phase: str
    can_claim: bool
    current_streak: int | None
    next_bonus_amount: int | None
    seconds_until_next_claim: int
    next_reset: datetime | None
    last_claim: datetime | None

    @classmethod
    def from_domain(cls, view: StreakView) -> StreakOut:
        state = view.state
        return cls(
            phase=view.phase.value,
            can_claim=view.can_claim,
            current_streak=view.current_streak,
            next_bonus_amount=view.next_bonus_amount,
            seconds_until_next_claim=view.countdown,
            next_reset=state.next_reset if state is not None else None,
            last_claim=state.last_claim if state is not None else None,
        )


class ClaimOut(BaseModel):
    new_streak: int
    bonus_amount: int
    streak: StreakOut

    @classmethod
    def from_domain(cls, claimed: ClaimResult, view: StreakView) -> ClaimOut:
        return cls(
            new_streak=claimed.new_streak,
            bonus_amount=claimed.bonus_amount,
            streak=StreakOut.from_domain(view),
        )


__all__ = (
    "ProductIn",
    "CartLineIn",
    "QuoteIn",
    "SettleIn",
    "PricedLineOut",
    "TotalsOut",
    "QuoteOut",
    "SettleOut",
    "StreakOut",
    "ClaimOut",
)
