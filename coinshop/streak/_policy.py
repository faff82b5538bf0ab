"""
StreakPolicy — daily bonus state machine as observed by a client.

The service decides eligibility, streak length and bonus amounts. The
policy only fetches, renders and submits:

    UNKNOWN ──refresh──▶ CLAIMABLE ──claim()──▶ CLAIMING ──▶ IDLE | RESET
       ▲                     ▲                                  │
       └── failed fetch      └────── countdown reaches zero ────┘

Example:
    policy = StreakPolicy(ledger, UserId("u1"), snapshots=snapshots)
    await policy.refresh_eligibility()

    if policy.view.can_claim:
        match await policy.claim():
            case Ok(claimed):
                print(claimed.new_streak, claimed.bonus_amount)
            case Error(e):
                print(e.message)
"""

from __future__ import annotations

from dataclasses import replace

import structlog
from kungfu import Error, Ok, Result

from coinshop._types import UserId
from coinshop.lift import from_result_call
from coinshop.ledger import (
    BalanceSnapshots,
    ClaimResult,
    Ledger,
    LedgerError,
    LedgerErrorKind,
    StreakState,
)
from coinshop.streak._guard import ClaimGuard
from coinshop.streak._types import StreakPhase, StreakView

log = structlog.get_logger(__name__)


class StreakPolicy:
    def __init__(
        self,
        ledger: Ledger,
        user: UserId,
        *,
        snapshots: BalanceSnapshots | None = None,
        guard: ClaimGuard | None = None,
    ) -> None:
        self._ledger = ledger
        self._user = user
        self._snapshots = snapshots
        self._guard = guard if guard is not None else ClaimGuard()
        self._generation = 0
        self._state: StreakState | None = None
        self._phase = StreakPhase.UNKNOWN
        self._countdown = 0
        self._error: LedgerError | None = None
        self._last_claim: ClaimResult | None = None

    @property
    def user(self) -> UserId:
        return self._user

    @property
    def view(self) -> StreakView:
        phase = StreakPhase.CLAIMING if self._guard.in_flight(self._user) else self._phase
        return StreakView(
            phase=phase,
            state=self._state,
            countdown=self._countdown,
            error=self._error,
            last_claim=self._last_claim,
        )

    # ───────────────────────────────────────────────────────────────────────────
    # Eligibility
    # ───────────────────────────────────────────────────────────────────────────

    async def refresh_eligibility(self) -> Result[StreakState, LedgerError]:
        """
        Fetch eligibility. Last write wins: if another refresh starts before
        this one returns, this one's result is dropped.
        """
        self._generation += 1
        generation = self._generation

        result = await from_result_call(
            lambda: self._ledger.can_claim_daily_bonus(self._user),
            on_error=LedgerError.unavailable,
        )

        if generation != self._generation:
            log.debug("eligibility_superseded", user_id=str(self._user))
            return result

        match result:
            case Ok(state):
                self._apply(state)
            case Error(e):
                self._state = None
                self._phase = StreakPhase.UNKNOWN
                self._countdown = 0
                self._error = e
                log.warning("eligibility_fetch_failed", user_id=str(self._user), kind=e.kind.name)
        return result

    def _apply(self, state: StreakState) -> None:
        previous = self._state
        if previous is not None and state.current_streak < previous.current_streak:
            self._phase = StreakPhase.RESET
            log.info(
                "streak_reset",
                user_id=str(self._user),
                previous=previous.current_streak,
                current=state.current_streak,
            )
        elif state.can_claim:
            self._phase = StreakPhase.CLAIMABLE
        else:
            self._phase = StreakPhase.IDLE
        self._state = state
        self._countdown = 0 if state.can_claim else state.seconds_until_next_claim
        self._error = None

    # ───────────────────────────────────────────────────────────────────────────
    # Claim
    # ───────────────────────────────────────────────────────────────────────────

    async def claim(self) -> Result[ClaimResult, LedgerError]:
        """
        Submit one claim.

        CONFLICT while another claim is outstanding, NOT_ELIGIBLE when the
        last snapshot does not allow one. A failed claim changes nothing but
        the recorded error and is not retried.
        """
        if not await self._guard.acquire(self._user):
            return Error(LedgerError(LedgerErrorKind.CONFLICT, "a claim is already in flight"))

        try:
            state = self._state
            if state is None or self._phase is StreakPhase.UNKNOWN or not state.can_claim:
                return Error(LedgerError(LedgerErrorKind.NOT_ELIGIBLE, "daily bonus is not claimable now"))

            result = await from_result_call(
                lambda: self._ledger.claim_daily_bonus(self._user),
                on_error=LedgerError.unavailable,
            )
            match result:
                case Ok(_):
                    # closed until the follow-up refresh says otherwise
                    self._state = replace(state, can_claim=False)
                    self._phase = StreakPhase.IDLE
                case _:
                    pass
        finally:
            await self._guard.release(self._user)

        match result:
            case Ok(claimed):
                self._last_claim = claimed
                self._error = None
                log.info(
                    "bonus_claimed",
                    user_id=str(self._user),
                    streak=claimed.new_streak,
                    bonus=claimed.bonus_amount,
                )
                if self._snapshots is not None:
                    await self._snapshots.invalidate(self._user)
                await self.refresh_eligibility()
                return Ok(claimed)
            case Error(e):
                self._error = e
                log.warning("bonus_claim_failed", user_id=str(self._user), kind=e.kind.name)
                return Error(e)

    # ───────────────────────────────────────────────────────────────────────────
    # Countdown
    # ───────────────────────────────────────────────────────────────────────────

    def tick(self, seconds: int = 1) -> bool:
        """
        Advance the cosmetic countdown.

        Returns True once, when it reaches zero: the caller should refresh.
        The deadline itself always comes from the service.
        """
        if self._state is None or self._countdown <= 0:
            return False
        self._countdown = max(0, self._countdown - seconds)
        return self._countdown == 0


__all__ = ("StreakPolicy",)
