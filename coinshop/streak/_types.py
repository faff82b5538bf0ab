"""
Streak types — client-observed phases and the rendered view.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from coinshop.ledger import ClaimResult, LedgerError, StreakState


class StreakPhase(Enum):
    """
    UNKNOWN    no trustworthy eligibility yet, or the last fetch failed
    IDLE       already claimed this window, countdown running
    CLAIMABLE  service says a claim is allowed
    CLAIMING   a claim request is outstanding
    RESET      service reported a shorter streak than the last one seen
    """

    UNKNOWN = "unknown"
    IDLE = "idle"
    CLAIMABLE = "claimable"
    CLAIMING = "claiming"
    RESET = "reset"


@dataclass(frozen=True, slots=True)
class StreakView:
    """What a widget renders. Every number comes from the service."""

    phase: StreakPhase
    state: StreakState | None
    countdown: int
    error: LedgerError | None = None
    last_claim: ClaimResult | None = None

    @property
    def can_claim(self) -> bool:
        if self.state is None or self.phase in (StreakPhase.UNKNOWN, StreakPhase.CLAIMING):
            return False
        return self.state.can_claim

    @property
    def current_streak(self) -> int | None:
        return self.state.current_streak if self.state is not None else None

    @property
    def next_bonus_amount(self) -> int | None:
        return self.state.next_bonus_amount if self.state is not None else None


__all__ = ("StreakPhase", "StreakView")
