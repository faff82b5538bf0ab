"""
MemoryLedger — in-process authoritative ledger.

Note: single-instance / tests and demos only. Balances do not survive a
restart and there is no distributed lock.

Window rules:
    - one claim per window; a window runs from reset_hour to reset_hour
      the next day in the reference timezone (20:00 UTC−3 by default)
    - a claim in the window right after the last one advances the streak
    - a missed window, or a claim after the last day, restarts at 1
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

import structlog
from kungfu import Error, Ok, Result

from coinshop._types import Coins, UserId
from coinshop.ledger._types import (
    ClaimResult,
    CoinBalance,
    CoinMovement,
    CommitReceipt,
    LedgerError,
    LedgerErrorKind,
    StreakState,
)

log = structlog.get_logger(__name__)

BRASILIA = timezone(timedelta(hours=-3))
DEFAULT_RESET_HOUR = 20


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ═══════════════════════════════════════════════════════════════════════════════
# Stored Account
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(slots=True)
class _Account:
    balance: Coins = 0
    total_earned: Coins = 0
    total_spent: Coins = 0
    streak: int = 0
    last_claim: datetime | None = None
    commits: dict[str, CoinMovement] = field(default_factory=dict)

    def snapshot(self) -> CoinBalance:
        return CoinBalance(self.balance, self.total_earned, self.total_spent)

    def apply(self, movement: CoinMovement) -> None:
        self.balance += movement.credit_coins - movement.redeem_coins
        self.total_earned += movement.credit_coins
        self.total_spent += movement.redeem_coins

    def undo(self, movement: CoinMovement) -> None:
        self.balance += movement.redeem_coins - movement.credit_coins
        self.total_earned -= movement.credit_coins
        self.total_spent -= movement.redeem_coins


# ═══════════════════════════════════════════════════════════════════════════════
# Memory Ledger
# ═══════════════════════════════════════════════════════════════════════════════


class MemoryLedger:
    """
    Example:
        ledger = MemoryLedger(bonus_schedule=(10, 12, 15, 18, 21, 25, 30))
        ledger.deposit(UserId("u1"), 500)
    """

    def __init__(
        self,
        bonus_schedule: Sequence[Coins],
        *,
        balances: Mapping[UserId, Coins] | None = None,
        reset_hour: int = DEFAULT_RESET_HOUR,
        tz: timezone = BRASILIA,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        if not bonus_schedule:
            raise ValueError("bonus_schedule must list at least one day")
        if not 0 <= reset_hour <= 23:
            raise ValueError("reset_hour must be within 0..23")
        self._schedule = tuple(bonus_schedule)
        self._reset_hour = reset_hour
        self._tz = tz
        self._clock = clock
        self._accounts: dict[UserId, _Account] = {}
        self._lock = asyncio.Lock()
        for user, coins in (balances or {}).items():
            self.deposit(user, coins)

    @property
    def max_streak(self) -> int:
        return len(self._schedule)

    def deposit(self, user: UserId, coins: Coins) -> None:
        """Seed coins outside any settlement (tests, demos)."""
        account = self._account(user)
        account.balance += coins
        account.total_earned += coins

    def _account(self, user: UserId) -> _Account:
        return self._accounts.setdefault(user, _Account())

    # ───────────────────────────────────────────────────────────────────────────
    # Windows
    # ───────────────────────────────────────────────────────────────────────────

    def _window_start(self, moment: datetime) -> datetime:
        local = moment.astimezone(self._tz)
        start = local.replace(hour=self._reset_hour, minute=0, second=0, microsecond=0)
        if local < start:
            start -= timedelta(days=1)
        return start

    def _streak_alive(self, account: _Account, window: datetime) -> bool:
        """True when the last claim is in this window or the one before it."""
        if account.last_claim is None:
            return False
        return window - self._window_start(account.last_claim) <= timedelta(days=1)

    def _next_streak(self, account: _Account, window: datetime) -> int:
        if not self._streak_alive(account, window) or account.streak >= self.max_streak:
            return 1
        return account.streak + 1

    def _bonus_for(self, streak: int) -> Coins:
        return self._schedule[min(streak, self.max_streak) - 1]

    def _state(self, account: _Account, now: datetime) -> StreakState:
        window = self._window_start(now)
        next_reset = window + timedelta(days=1)
        claimed = account.last_claim is not None and self._window_start(account.last_claim) == window
        if claimed:
            current = account.streak
            upcoming = 1 if account.streak >= self.max_streak else account.streak + 1
        else:
            current = account.streak if self._streak_alive(account, window) else 1
            upcoming = self._next_streak(account, window)
        return StreakState(
            current_streak=max(1, current),
            can_claim=not claimed,
            seconds_until_next_claim=int((next_reset - now).total_seconds()) if claimed else 0,
            next_bonus_amount=self._bonus_for(upcoming),
            next_reset=next_reset,
            last_claim=account.last_claim,
        )

    # ───────────────────────────────────────────────────────────────────────────
    # Ledger
    # ───────────────────────────────────────────────────────────────────────────

    async def get_balance(self, user: UserId) -> Result[CoinBalance, LedgerError]:
        async with self._lock:
            return Ok(self._account(user).snapshot())

    async def can_claim_daily_bonus(self, user: UserId) -> Result[StreakState, LedgerError]:
        async with self._lock:
            return Ok(self._state(self._account(user), self._clock()))

    async def claim_daily_bonus(self, user: UserId) -> Result[ClaimResult, LedgerError]:
        async with self._lock:
            now = self._clock()
            account = self._account(user)
            window = self._window_start(now)
            if account.last_claim is not None and self._window_start(account.last_claim) == window:
                return Error(LedgerError(
                    LedgerErrorKind.NOT_ELIGIBLE,
                    "daily bonus already claimed in this window",
                ))

            streak = self._next_streak(account, window)
            bonus = self._bonus_for(streak)
            account.streak = streak
            account.last_claim = now
            account.balance += bonus
            account.total_earned += bonus
            log.info("daily_bonus_granted", user_id=str(user), streak=streak, bonus=bonus)
            return Ok(ClaimResult(new_streak=streak, bonus_amount=bonus))

    async def commit_settlement(
        self,
        user: UserId,
        movement: CoinMovement,
    ) -> Result[CommitReceipt, LedgerError]:
        async with self._lock:
            account = self._account(user)
            if movement.reference in account.commits:
                return Error(LedgerError(
                    LedgerErrorKind.CONFLICT,
                    f"settlement {movement.reference} already committed",
                ))
            if movement.redeem_coins < 0 or movement.credit_coins < 0:
                return Error(LedgerError(LedgerErrorKind.REJECTED, "negative coin movement"))
            if movement.redeem_coins > account.balance:
                log.info(
                    "settlement_rejected",
                    user_id=str(user),
                    requested=movement.redeem_coins,
                    balance=account.balance,
                )
                return Error(LedgerError(
                    LedgerErrorKind.INSUFFICIENT_BALANCE,
                    f"cannot redeem {movement.redeem_coins} coins, balance is {account.balance}",
                ))

            account.apply(movement)
            account.commits[movement.reference] = movement
            return Ok(CommitReceipt(
                reference=movement.reference,
                movement=movement,
                balance_after=account.balance,
            ))

    async def revert_settlement(
        self,
        user: UserId,
        reference: str,
    ) -> Result[None, LedgerError]:
        async with self._lock:
            account = self._account(user)
            movement = account.commits.pop(reference, None)
            if movement is None:
                return Error(LedgerError(
                    LedgerErrorKind.REJECTED,
                    f"unknown settlement {reference}",
                ))
            account.undo(movement)
            return Ok(None)


__all__ = ("BRASILIA", "DEFAULT_RESET_HOUR", "MemoryLedger")
