"""
Ledger types — balance, streak state, coin movements and errors.

Everything here mirrors what the coin service returns. None of it is
computed client side.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum, auto

from coinshop._types import Coins

# ═══════════════════════════════════════════════════════════════════════════════
# Balance
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class CoinBalance:
    """Immutable snapshot of a user's coins, as the ledger reported it."""

    balance: Coins = 0
    total_earned: Coins = 0
    total_spent: Coins = 0


# ═══════════════════════════════════════════════════════════════════════════════
# Streak
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class StreakState:
    """
    Daily bonus eligibility, authoritative on the service.

    next_reset is the start of the next eligibility window (20:00 reference
    time). last_claim is None for users who never claimed.
    """

    current_streak: int
    can_claim: bool
    seconds_until_next_claim: int
    next_bonus_amount: Coins
    next_reset: datetime | None = None
    last_claim: datetime | None = None


@dataclass(frozen=True, slots=True)
class ClaimResult:
    new_streak: int
    bonus_amount: Coins


# ═══════════════════════════════════════════════════════════════════════════════
# Settlement Movements
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class CoinMovement:
    """
    Coin intent produced at settlement.

    At most one of redeem_coins / credit_coins is non-zero: redeeming
    forfeits the cart's cashback.
    """

    redeem_coins: Coins
    credit_coins: Coins
    reference: str

    @property
    def is_empty(self) -> bool:
        return self.redeem_coins == 0 and self.credit_coins == 0


@dataclass(frozen=True, slots=True)
class CommitReceipt:
    reference: str
    movement: CoinMovement
    balance_after: Coins


# ═══════════════════════════════════════════════════════════════════════════════
# Errors
# ═══════════════════════════════════════════════════════════════════════════════


class LedgerErrorKind(Enum):
    UNAVAILABLE = auto()
    NOT_ELIGIBLE = auto()
    CONFLICT = auto()
    INSUFFICIENT_BALANCE = auto()
    REJECTED = auto()
    MALFORMED = auto()


@dataclass(frozen=True, slots=True)
class LedgerError:
    """
    Ledger call failure.

    UNAVAILABLE and MALFORMED are transport problems; the rest are
    decisions taken by the service and must be shown as-is.
    """

    kind: LedgerErrorKind
    message: str
    cause: Exception | None = None

    @classmethod
    def unavailable(cls, cause: Exception) -> LedgerError:
        return cls(LedgerErrorKind.UNAVAILABLE, str(cause) or type(cause).__name__, cause)

    @property
    def is_rejection(self) -> bool:
        return self.kind in (
            LedgerErrorKind.INSUFFICIENT_BALANCE,
            LedgerErrorKind.REJECTED,
        )


__all__ = (
    "CoinBalance",
    "StreakState",
    "ClaimResult",
    "CoinMovement",
    "CommitReceipt",
    "LedgerErrorKind",
    "LedgerError",
)
