"""
Wire payloads of the action-based coin service.

Every response carries `success` and, on failure, a `message`. Field names
are the service's camelCase ones; to_domain() turns them into ledger types.
"""

from __future__ import annotations

from datetime import datetime

from kungfu import Error, Ok, Result
from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from coinshop.ledger._types import (
    ClaimResult,
    CoinBalance,
    CoinMovement,
    CommitReceipt,
    LedgerError,
    LedgerErrorKind,
    StreakState,
)

# Fallbacks the storefront showed when the service left a field out.
FALLBACK_STREAK = 1
FALLBACK_BONUS = 10

_CODES: dict[str, LedgerErrorKind] = {
    "not_eligible": LedgerErrorKind.NOT_ELIGIBLE,
    "already_claimed": LedgerErrorKind.NOT_ELIGIBLE,
    "conflict": LedgerErrorKind.CONFLICT,
    "insufficient_balance": LedgerErrorKind.INSUFFICIENT_BALANCE,
    "rejected": LedgerErrorKind.REJECTED,
}


class ActionResponse(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    success: bool = False
    message: str | None = None
    code: str | None = None

    def failure(self, default: LedgerErrorKind) -> LedgerError:
        kind = _CODES.get((self.code or "").lower(), default)
        return LedgerError(kind, self.message or "coin service refused the action")


class BalanceResponse(ActionResponse):
    balance: int = 0
    total_earned: int = Field(default=0, validation_alias=AliasChoices("total_earned", "totalEarned"))
    total_spent: int = Field(default=0, validation_alias=AliasChoices("total_spent", "totalSpent"))

    def to_domain(self) -> Result[CoinBalance, LedgerError]:
        if not self.success:
            return Error(self.failure(LedgerErrorKind.REJECTED))
        return Ok(CoinBalance(
            balance=max(0, self.balance),
            total_earned=max(0, self.total_earned),
            total_spent=max(0, self.total_spent),
        ))


class EligibilityResponse(ActionResponse):
    can_claim: bool = Field(default=False, validation_alias=AliasChoices("canClaim", "can_claim"))
    current_streak: int | None = Field(
        default=None, validation_alias=AliasChoices("currentStreak", "streak", "current_streak")
    )
    next_bonus_amount: int | None = Field(
        default=None, validation_alias=AliasChoices("nextBonusAmount", "next_bonus_amount")
    )
    seconds_until_next_claim: int = Field(
        default=0, validation_alias=AliasChoices("secondsUntilNextClaim", "seconds_until_next_claim")
    )
    next_reset: datetime | None = Field(default=None, validation_alias=AliasChoices("nextReset", "next_reset"))
    last_claim: datetime | None = Field(default=None, validation_alias=AliasChoices("lastClaim", "last_claim"))

    def to_domain(self) -> Result[StreakState, LedgerError]:
        if not self.success:
            return Error(self.failure(LedgerErrorKind.REJECTED))
        return Ok(StreakState(
            current_streak=self.current_streak or FALLBACK_STREAK,
            can_claim=self.can_claim,
            seconds_until_next_claim=max(0, self.seconds_until_next_claim),
            next_bonus_amount=self.next_bonus_amount or FALLBACK_BONUS,
            next_reset=self.next_reset,
            last_claim=self.last_claim,
        ))


class ClaimResponse(ActionResponse):
    new_streak: int | None = Field(
        default=None, validation_alias=AliasChoices("newStreak", "streak", "new_streak")
    )
    bonus_amount: int = Field(
        default=0, validation_alias=AliasChoices("bonusAmount", "amount", "bonus_amount")
    )

    def to_domain(self) -> Result[ClaimResult, LedgerError]:
        if not self.success:
            return Error(self.failure(LedgerErrorKind.NOT_ELIGIBLE))
        if self.new_streak is None:
            return Error(LedgerError(LedgerErrorKind.MALFORMED, "claim response without streak"))
        return Ok(ClaimResult(new_streak=self.new_streak, bonus_amount=max(0, self.bonus_amount)))


class CommitResponse(ActionResponse):
    reference: str | None = None
    balance_after: int = Field(default=0, validation_alias=AliasChoices("balanceAfter", "balance_after"))

    def to_domain(self, movement: CoinMovement) -> Result[CommitReceipt, LedgerError]:
        if not self.success:
            return Error(self.failure(LedgerErrorKind.REJECTED))
        return Ok(CommitReceipt(
            reference=self.reference or movement.reference,
            movement=movement,
            balance_after=self.balance_after,
        ))


class RevertResponse(ActionResponse):
    def to_domain(self) -> Result[None, LedgerError]:
        if not self.success:
            return Error(self.failure(LedgerErrorKind.REJECTED))
        return Ok(None)


class CommitRequest(BaseModel):
    redeem_coins: int
    credit_coins: int
    reference: str

    @classmethod
    def from_domain(cls, movement: CoinMovement) -> CommitRequest:
        return cls(
            redeem_coins=movement.redeem_coins,
            credit_coins=movement.credit_coins,
            reference=movement.reference,
        )


__all__ = (
    "FALLBACK_STREAK",
    "FALLBACK_BONUS",
    "ActionResponse",
    "BalanceResponse",
    "EligibilityResponse",
    "ClaimResponse",
    "CommitResponse",
    "RevertResponse",
    "CommitRequest",
)
