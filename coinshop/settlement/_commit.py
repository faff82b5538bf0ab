"""
Settlement — commit the coin movement, then hand the order over.

Two steps with compensation:

    1. ledger.commit_settlement      compensate: ledger.revert_settlement
    2. channel.deliver               (no compensation, last step)

If step 2 fails, step 1 is reverted. If the ledger rejects step 1, the
balance snapshot is dropped, a fresh balance is fetched and the totals are
recomputed; the caller gets those instead of its optimistic ones.

Example:
    settlement = Settlement(ledger, snapshots, LinkChannel())

    match await settlement.settle(user, cart, coins, "5527996882090"):
        case Ok(receipt):
            redirect(receipt.link)
        case Error(e) if e.refreshed_totals is not None:
            rerender(e.refreshed_totals)
        case Error(e):
            show(e.message)
"""

from __future__ import annotations

import uuid
from collections.abc import Awaitable, Callable, Iterable, Mapping
from dataclasses import dataclass
from enum import Enum, auto

import structlog
from kungfu import Error, Ok, Result

from coinshop._types import UserId
from coinshop.cart import (
    CartTotals,
    CoinSettings,
    RedemptionMode,
    ShippingPolicy,
    price_and_aggregate,
)
from coinshop.ledger import (
    BalanceSnapshots,
    CoinMovement,
    CommitReceipt,
    Ledger,
    LedgerError,
)
from coinshop.lift import from_result_call
from coinshop.pricing import CartLine
from coinshop.settlement._channel import DeliveryError, OrderChannel
from coinshop.settlement._message import build_settlement_message

log = structlog.get_logger(__name__)

# ═══════════════════════════════════════════════════════════════════════════════
# Result Types
# ═══════════════════════════════════════════════════════════════════════════════


class SettlementErrorKind(Enum):
    EMPTY_CART = auto()
    REJECTED = auto()
    LEDGER_UNAVAILABLE = auto()
    DELIVERY_FAILED = auto()


@dataclass(frozen=True, slots=True)
class SettlementError:
    """
    Settlement failure.

    refreshed_totals is set only on REJECTED: totals recomputed from the
    balance fetched after the rejection (None if that fetch failed too).
    rollback_complete is False only when a revert was needed and failed.
    """

    kind: SettlementErrorKind
    message: str
    ledger_error: LedgerError | None = None
    delivery_error: DeliveryError | None = None
    refreshed_totals: CartTotals | None = None
    rollback_complete: bool = True


@dataclass(frozen=True, slots=True)
class SettlementReceipt:
    totals: CartTotals
    message: str
    link: str
    commit: CommitReceipt


def movement_for(totals: CartTotals, reference: str) -> CoinMovement:
    """Redeem what the cart uses, or credit its cashback. Never both."""
    return CoinMovement(
        redeem_coins=totals.coins_to_debit,
        credit_coins=totals.coins_to_credit,
        reference=reference,
    )


# ═══════════════════════════════════════════════════════════════════════════════
# Compensation
# ═══════════════════════════════════════════════════════════════════════════════

type Compensator = Callable[[], Awaitable[Result[None, LedgerError]]]


async def _run_compensators(compensators: list[Compensator]) -> tuple[int, int]:
    """Run compensators in reverse. Returns (run, failed)."""
    run = 0
    failed = 0
    for compensate in reversed(compensators):
        result = await from_result_call(compensate, on_error=LedgerError.unavailable)
        match result:
            case Ok(_):
                run += 1
            case Error(e):
                failed += 1
                log.error("settlement_revert_failed", error=e.message, kind=e.kind.name)
    return run, failed


# ═══════════════════════════════════════════════════════════════════════════════
# Settlement
# ═══════════════════════════════════════════════════════════════════════════════


class Settlement:
    def __init__(
        self,
        ledger: Ledger,
        snapshots: BalanceSnapshots,
        channel: OrderChannel,
        *,
        shipping: ShippingPolicy = ShippingPolicy(),
        mode: RedemptionMode = RedemptionMode.PER_LINE,
        reference_factory: Callable[[], str] = lambda: uuid.uuid4().hex,
    ) -> None:
        self._ledger = ledger
        self._snapshots = snapshots
        self._channel = channel
        self._shipping = shipping
        self._mode = mode
        self._reference_factory = reference_factory

    def _totals(self, cart: tuple[CartLine, ...], coin_settings: CoinSettings) -> CartTotals:
        return price_and_aggregate(cart, coin_settings, shipping=self._shipping, mode=self._mode)

    async def _recompute(
        self,
        user: UserId,
        cart: tuple[CartLine, ...],
        coin_settings: CoinSettings,
    ) -> CartTotals | None:
        match await self._snapshots.refresh(user):
            case Ok(balance):
                return self._totals(cart, CoinSettings(coin_settings.enabled, balance.balance))
            case Error(_):
                return None

    async def settle(
        self,
        user: UserId,
        cart: Iterable[CartLine],
        coin_settings: CoinSettings,
        destination: str,
        *,
        labels: Mapping[str, str] | None = None,
        verification_code: str | None = None,
    ) -> Result[SettlementReceipt, SettlementError]:
        lines = tuple(line for line in cart if line.quantity > 0)
        if not lines:
            return Error(SettlementError(SettlementErrorKind.EMPTY_CART, "cart is empty"))

        totals = self._totals(lines, coin_settings)
        movement = movement_for(totals, self._reference_factory())
        bound = log.bind(user_id=str(user), reference=movement.reference)
        compensators: list[Compensator] = []

        committed = await from_result_call(
            lambda: self._ledger.commit_settlement(user, movement),
            on_error=LedgerError.unavailable,
        )
        match committed:
            case Error(e) if e.is_rejection:
                bound.info("settlement_rejected", kind=e.kind.name, redeem=movement.redeem_coins)
                refreshed = await self._recompute(user, lines, coin_settings)
                return Error(SettlementError(
                    SettlementErrorKind.REJECTED,
                    e.message,
                    ledger_error=e,
                    refreshed_totals=refreshed,
                ))
            case Error(e):
                bound.warning("settlement_commit_failed", kind=e.kind.name)
                return Error(SettlementError(
                    SettlementErrorKind.LEDGER_UNAVAILABLE,
                    e.message,
                    ledger_error=e,
                ))
            case Ok(receipt):
                compensators.append(
                    lambda: self._ledger.revert_settlement(user, receipt.reference)
                )

        message = build_settlement_message(
            totals,
            coin_settings,
            labels=labels,
            verification_code=verification_code,
        )
        delivered = await from_result_call(
            lambda: self._channel.deliver(destination, message),
            on_error=lambda e: DeliveryError(f"order channel failed: {e}", e),
        )
        match delivered:
            case Error(d):
                run, failed = await _run_compensators(compensators)
                bound.warning("settlement_delivery_failed", error=d.message, reverted=run)
                await self._snapshots.invalidate(user)
                return Error(SettlementError(
                    SettlementErrorKind.DELIVERY_FAILED,
                    d.message,
                    delivery_error=d,
                    rollback_complete=failed == 0,
                ))
            case Ok(link):
                await self._snapshots.invalidate(user)
                bound.info(
                    "settlement_committed",
                    redeem=movement.redeem_coins,
                    credit=movement.credit_coins,
                    grand_total=totals.grand_total,
                )
                return Ok(SettlementReceipt(
                    totals=totals,
                    message=message,
                    link=link,
                    commit=receipt,
                ))


__all__ = (
    "SettlementErrorKind",
    "SettlementError",
    "SettlementReceipt",
    "Settlement",
    "movement_for",
)
