"""
Cart aggregation — fold priced lines into CartTotals.

Pure fold: no counters, no I/O. Re-running with the same lines, settings
and policy returns an equal CartTotals.

Example:
    totals = aggregate(price_cart(cart), CoinSettings(enabled=True, balance=500))
    totals.grand_total
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import replace

from coinshop._types import Coins
from coinshop.cart._types import CartTotals, CoinSettings, RedemptionMode, ShippingPolicy
from coinshop.pricing import CartLine, PricedLine, coins_to_cents, price_cart


def _redeem(
    lines: tuple[PricedLine, ...],
    balance: Coins,
    mode: RedemptionMode,
) -> tuple[PricedLine, ...]:
    redeemed: list[PricedLine] = []
    remaining = balance
    for line in lines:
        available = balance if mode is RedemptionMode.PER_LINE else remaining
        coins = min(line.max_redeemable_coins, available)
        remaining = max(0, remaining - coins)
        redeemed.append(
            replace(line, coins_used=coins, applied_redemption_amount=coins_to_cents(coins))
        )
    return tuple(redeemed)


def aggregate(
    lines: Iterable[PricedLine],
    coin_settings: CoinSettings,
    *,
    shipping: ShippingPolicy = ShippingPolicy(),
    mode: RedemptionMode = RedemptionMode.PER_LINE,
) -> CartTotals:
    """
    Fold priced lines into cart totals.

    With coins enabled every line uses min(max_redeemable_coins, balance)
    coins in PER_LINE mode, or draws from what earlier lines left in
    SHARED_BALANCE mode. The result is advisory; the ledger decides.
    """
    priced = tuple(lines)
    if coin_settings.enabled:
        priced = _redeem(priced, coin_settings.balance, mode)
    else:
        priced = tuple(
            replace(line, coins_used=0, applied_redemption_amount=0) for line in priced
        )

    subtotal = sum(line.original_amount for line in priced)
    total_discount = sum(line.discount_amount for line in priced)
    total_coins_used = sum(line.coins_used for line in priced)
    total_coins_discount = sum(line.applied_redemption_amount for line in priced)

    final_amount = max(0, subtotal - total_discount - total_coins_discount)
    shipping_fee = shipping.fee_for(final_amount)

    return CartTotals(
        lines=priced,
        subtotal=subtotal,
        total_discount=total_discount,
        total_coins_earned=sum(line.cashback_coins for line in priced),
        total_coins_needed=sum(line.max_redeemable_coins for line in priced),
        total_coins_used=total_coins_used,
        total_coins_discount=total_coins_discount,
        final_amount=final_amount,
        shipping_fee=shipping_fee,
        grand_total=final_amount + shipping_fee,
        items_count=sum(line.quantity for line in priced),
        coins_enabled=coin_settings.enabled,
    )


def price_and_aggregate(
    cart: Iterable[CartLine],
    coin_settings: CoinSettings,
    *,
    shipping: ShippingPolicy = ShippingPolicy(),
    mode: RedemptionMode = RedemptionMode.PER_LINE,
) -> CartTotals:
    return aggregate(price_cart(cart), coin_settings, shipping=shipping, mode=mode)


__all__ = ("aggregate", "price_and_aggregate")
