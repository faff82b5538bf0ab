"""
Ledger protocol — the coin service contract.

Ledger — the external service owning balances and streaks.
All methods return Result for explicit error handling.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Protocol

from kungfu import Result

from coinshop._types import UserId
from coinshop.ledger._types import (
    ClaimResult,
    CoinBalance,
    CoinMovement,
    CommitReceipt,
    LedgerError,
    StreakState,
)

# ═══════════════════════════════════════════════════════════════════════════════
# Ledger Protocol
# ═══════════════════════════════════════════════════════════════════════════════


class Ledger(Protocol):
    """
    Coin ledger service.

    The service serializes and validates every movement: a redemption above
    the real-time balance is rejected even if the caller's snapshot allowed it.
    One daily bonus claim per window is enforced here, not by the client.

    Example — HTTP implementation:

        class HttpLedger:
            def __init__(self, client: httpx.AsyncClient):
                self.client = client

            async def get_balance(self, user: UserId) -> Result[CoinBalance, LedgerError]:
                try:
                    r = await self.client.get(f"/coins/{user}")
                    return Ok(CoinBalance(**r.json()))
                except Exception as e:
                    return Error(LedgerError.unavailable(e))

            # ... other methods
    """

    async def get_balance(self, user: UserId) -> Result[CoinBalance, LedgerError]:
        ...

    async def can_claim_daily_bonus(self, user: UserId) -> Result[StreakState, LedgerError]:
        ...

    async def claim_daily_bonus(self, user: UserId) -> Result[ClaimResult, LedgerError]:
        """Claim today's bonus. NOT_ELIGIBLE when already claimed this window."""
        ...

    async def commit_settlement(
        self,
        user: UserId,
        movement: CoinMovement,
    ) -> Result[CommitReceipt, LedgerError]:
        """Apply a settlement movement. INSUFFICIENT_BALANCE when redeeming too much."""
        ...

    async def revert_settlement(
        self,
        user: UserId,
        reference: str,
    ) -> Result[None, LedgerError]:
        """Undo a committed movement by its reference."""
        ...


# ═══════════════════════════════════════════════════════════════════════════════
# Function-based Ledger Builder
# ═══════════════════════════════════════════════════════════════════════════════

type GetBalanceFn = Callable[[UserId], Awaitable[Result[CoinBalance, LedgerError]]]
type CanClaimFn = Callable[[UserId], Awaitable[Result[StreakState, LedgerError]]]
type ClaimFn = Callable[[UserId], Awaitable[Result[ClaimResult, LedgerError]]]
type CommitFn = Callable[
    [UserId, CoinMovement], Awaitable[Result[CommitReceipt, LedgerError]]
]
type RevertFn = Callable[[UserId, str], Awaitable[Result[None, LedgerError]]]


@dataclass(frozen=True)
class FunctionalLedger:
    """
    Ledger built from functions.

    Example:
        ledger = ledger_from(
            get_balance=repo.balance,
            can_claim_daily_bonus=repo.eligibility,
            claim_daily_bonus=repo.claim,
            commit_settlement=repo.commit,
            revert_settlement=repo.revert,
        )
    """

    _get_balance: GetBalanceFn
    _can_claim: CanClaimFn
    _claim: ClaimFn
    _commit: CommitFn
    _revert: RevertFn

    async def get_balance(self, user: UserId) -> Result[CoinBalance, LedgerError]:
        return await self._get_balance(user)

    async def can_claim_daily_bonus(self, user: UserId) -> Result[StreakState, LedgerError]:
        return await self._can_claim(user)

    async def claim_daily_bonus(self, user: UserId) -> Result[ClaimResult, LedgerError]:
        return await self._claim(user)

    async def commit_settlement(
        self,
        user: UserId,
        movement: CoinMovement,
    ) -> Result[CommitReceipt, LedgerError]:
        return await self._commit(user, movement)

    async def revert_settlement(
        self,
        user: UserId,
        reference: str,
    ) -> Result[None, LedgerError]:
        return await self._revert(user, reference)


def ledger_from(
    get_balance: GetBalanceFn,
    can_claim_daily_bonus: CanClaimFn,
    claim_daily_bonus: ClaimFn,
    commit_settlement: CommitFn,
    revert_settlement: RevertFn,
) -> FunctionalLedger:
    """Create Ledger from functions."""
    return FunctionalLedger(
        _get_balance=get_balance,
        _can_claim=can_claim_daily_bonus,
        _claim=claim_daily_bonus,
        _commit=commit_settlement,
        _revert=revert_settlement,
    )


__all__ = (
    "Ledger",
    "FunctionalLedger",
    "ledger_from",
)
