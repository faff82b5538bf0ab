"""
Streak — daily login bonus policy, claim guard and countdown ticker.

    from coinshop.streak import StreakPolicy, StreakTicker

    policy = StreakPolicy(ledger, user, snapshots=snapshots)
    async with StreakTicker(policy):
        await policy.claim()
"""

from coinshop.streak._types import StreakPhase, StreakView
from coinshop.streak._guard import ClaimGuard
from coinshop.streak._policy import StreakPolicy
from coinshop.streak._ticker import StreakTicker

__all__ = (
    "StreakPhase",
    "StreakView",
    "ClaimGuard",
    "StreakPolicy",
    "StreakTicker",
)
