"""Shared helpers for the test suite: a controllable clock, ledgers and carts."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any

from kungfu import Error, Ok, Result

from coinshop._types import UserId
from coinshop.ledger import (
    BRASILIA,
    FunctionalLedger,
    LedgerError,
    LedgerErrorKind,
    MemoryLedger,
    ledger_from,
)
from coinshop.pricing import CartLine, ProductPricing

SCHEDULE = (10, 12, 15, 18, 21, 25, 30)
USER = UserId("user-1")


class FakeClock:
    """Starts at 2026-03-10 12:00 Brasília time."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2026, 3, 10, 12, 0, tzinfo=BRASILIA)

    def __call__(self) -> datetime:
        return self.now.astimezone(timezone.utc)

    def advance(self, **delta: float) -> None:
        self.now += timedelta(**delta)


def memory_ledger(clock: FakeClock | None = None, **balances: int) -> MemoryLedger:
    return MemoryLedger(
        SCHEDULE,
        balances={UserId(name): coins for name, coins in balances.items()},
        clock=clock or FakeClock(),
    )


@dataclass
class Calls:
    counts: dict[str, int] = field(default_factory=dict)

    def hit(self, name: str) -> None:
        self.counts[name] = self.counts.get(name, 0) + 1

    def __getitem__(self, name: str) -> int:
        return self.counts.get(name, 0)


def wrap_ledger(base: MemoryLedger, calls: Calls, **overrides: Any) -> FunctionalLedger:
    """Functional ledger delegating to `base`, counting calls, with per-method overrides."""

    def pick(name: str, default: Any) -> Any:
        target = overrides.get(name, default)

        async def counted(*args: Any) -> Any:
            calls.hit(name)
            return await target(*args)

        return counted

    return ledger_from(
        get_balance=pick("get_balance", base.get_balance),
        can_claim_daily_bonus=pick("can_claim_daily_bonus", base.can_claim_daily_bonus),
        claim_daily_bonus=pick("claim_daily_bonus", base.claim_daily_bonus),
        commit_settlement=pick("commit_settlement", base.commit_settlement),
        revert_settlement=pick("revert_settlement", base.revert_settlement),
    )


async def unavailable(*_: Any) -> Result[Any, LedgerError]:
    return Error(LedgerError(LedgerErrorKind.UNAVAILABLE, "coin service down"))


async def explode(*_: Any) -> Result[Any, LedgerError]:
    raise ConnectionError("connection reset")


def product(
    product_id: str = "p1",
    name: str = "Produto",
    unit_price: int = 10000,
    *,
    discount: float = 0,
    cashback: float = 2,
    cap: float = 0,
) -> ProductPricing:
    return ProductPricing(
        product_id=product_id,
        name=name,
        unit_price=unit_price,
        discount_percentage=discount,
        cashback_percentage=cashback,
        redemption_cap_percentage=cap,
    )


def line(quantity: int = 1, **kwargs: Any) -> CartLine:
    size = kwargs.pop("size", None)
    color = kwargs.pop("color", None)
    return CartLine(product(**kwargs), quantity, size=size, color=color)


def ok(result: Result[Any, Any]) -> Any:
    match result:
        case Ok(value):
            return value
        case Error(e):
            raise AssertionError(f"expected Ok, got Error({e!r})")


def err(result: Result[Any, Any]) -> Any:
    match result:
        case Ok(value):
            raise AssertionError(f"expected Error, got Ok({value!r})")
        case Error(e):
            return e
