"""
JsonLedger — Ledger over the storefront's action-based coin service.

The transport is a single async callable taking an action name and a JSON
body and returning the decoded JSON response:

    async def invoke(action: str, body: dict[str, Any]) -> dict[str, Any]:
        r = await client.post("/functions/v1/secure-coin-actions", json={"action": action, **body})
        return r.json()

    ledger = JsonLedger(invoke)
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any

import structlog
from combinators import lift as L
from kungfu import Error, Ok, Result
from pydantic import BaseModel, ValidationError

from coinshop._types import UserId
from coinshop.ledger._types import (
    ClaimResult,
    CoinBalance,
    CoinMovement,
    CommitReceipt,
    LedgerError,
    LedgerErrorKind,
    StreakState,
)
from coinshop.ledger._wire import (
    BalanceResponse,
    ClaimResponse,
    CommitRequest,
    CommitResponse,
    EligibilityResponse,
    RevertResponse,
)

log = structlog.get_logger(__name__)

type Invoke = Callable[[str, dict[str, Any]], Awaitable[dict[str, Any]]]

ACTION_GET_BALANCE = "get_balance"
ACTION_CAN_CLAIM = "can_claim_daily_bonus_brasilia"
ACTION_CLAIM = "process_daily_login_brasilia"
ACTION_COMMIT = "commit_settlement"
ACTION_REVERT = "revert_settlement"


class JsonLedger:
    def __init__(self, invoke: Invoke) -> None:
        self._invoke = invoke

    async def _call[M: BaseModel](
        self,
        action: str,
        body: dict[str, Any],
        model: type[M],
    ) -> Result[M, LedgerError]:
        raw = await L.catching_async(
            lambda: self._invoke(action, body),
            on_error=LedgerError.unavailable,
        )
        match raw:
            case Error(e):
                log.warning("ledger_unavailable", action=action, error=e.message)
                return Error(e)
            case Ok(payload):
                try:
                    return Ok(model.model_validate(payload))
                except ValidationError as exc:
                    log.warning("ledger_malformed_response", action=action, errors=exc.error_count())
                    return Error(LedgerError(LedgerErrorKind.MALFORMED, f"bad {action} response", exc))

    async def get_balance(self, user: UserId) -> Result[CoinBalance, LedgerError]:
        match await self._call(ACTION_GET_BALANCE, {"user_id": str(user)}, BalanceResponse):
            case Ok(response):
                return response.to_domain()
            case Error(e):
                return Error(e)

    async def can_claim_daily_bonus(self, user: UserId) -> Result[StreakState, LedgerError]:
        match await self._call(ACTION_CAN_CLAIM, {"user_id": str(user)}, EligibilityResponse):
            case Ok(response):
                return response.to_domain()
            case Error(e):
                return Error(e)

    async def claim_daily_bonus(self, user: UserId) -> Result[ClaimResult, LedgerError]:
        match await self._call(ACTION_CLAIM, {"user_id": str(user)}, ClaimResponse):
            case Ok(response):
                return response.to_domain()
            case Error(e):
                return Error(e)

    async def commit_settlement(
        self,
        user: UserId,
        movement: CoinMovement,
    ) -> Result[CommitReceipt, LedgerError]:
        body = {"user_id": str(user), **CommitRequest.from_domain(movement).model_dump()}
        match await self._call(ACTION_COMMIT, body, CommitResponse):
            case Ok(response):
                return response.to_domain(movement)
            case Error(e):
                return Error(e)

    async def revert_settlement(
        self,
        user: UserId,
        reference: str,
    ) -> Result[None, LedgerError]:
        body = {"user_id": str(user), "reference": reference}
        match await self._call(ACTION_REVERT, body, RevertResponse):
            case Ok(response):
                return response.to_domain()
            case Error(e):
                return Error(e)


__all__ = (
    "Invoke",
    "JsonLedger",
    "ACTION_GET_BALANCE",
    "ACTION_CAN_CLAIM",
    "ACTION_CLAIM",
    "ACTION_COMMIT",
    "ACTION_REVERT",
)
