"""
FastAPI application over a Ledger.

    settings = Settings.from_env()
    app = create_app(JsonLedger(invoke), settings)

The app keeps its balance cache and per-user streak policies on app.state
(snapshots, policies); both hold at most settings.balance_cache_size users.
"""

from __future__ import annotations

import fastapi
import structlog
from kungfu import Error, Ok

from coinshop._types import UserId
from coinshop.cart import CoinSettings
from coinshop.checkout import QuoteContext, quote
from coinshop.config import Settings
from coinshop.ledger import BalanceSnapshots, Ledger, LedgerError, LedgerErrorKind
from coinshop.settlement import LinkChannel, OrderChannel, Settlement, SettlementError, SettlementErrorKind
from coinshop.streak import ClaimGuard, StreakPolicy
from coinshop.wire._models import ClaimOut, QuoteIn, QuoteOut, SettleIn, SettleOut, StreakOut, TotalsOut

log = structlog.get_logger(__name__)

_CLIENT_ERRORS = (LedgerErrorKind.CONFLICT, LedgerErrorKind.NOT_ELIGIBLE)

_SETTLEMENT_STATUS = {
    SettlementErrorKind.EMPTY_CART: 422,
    SettlementErrorKind.REJECTED: 409,
    SettlementErrorKind.LEDGER_UNAVAILABLE: 502,
    SettlementErrorKind.DELIVERY_FAILED: 502,
}


def _http_error(error: LedgerError) -> fastapi.HTTPException:
    status = 409 if error.kind in _CLIENT_ERRORS else 502
    return fastapi.HTTPException(
        status_code=status,
        detail={"kind": error.kind.name.lower(), "message": error.message},
    )


def _settlement_error(error: SettlementError) -> fastapi.HTTPException:
    detail: dict[str, object] = {
        "kind": error.kind.name.lower(),
        "message": error.message,
        "rollback_complete": error.rollback_complete,
    }
    if error.refreshed_totals is not None:
        detail["refreshed_totals"] = TotalsOut.from_domain(error.refreshed_totals).model_dump()
    return fastapi.HTTPException(status_code=_SETTLEMENT_STATUS[error.kind], detail=detail)


class _Policies:
    """One StreakPolicy per user, sharing a guard and the balance cache. Least recently used goes first."""

    def __init__(self, ledger: Ledger, snapshots: BalanceSnapshots, max_users: int = 1000) -> None:
        self._ledger = ledger
        self._snapshots = snapshots
        self._max_users = max_users
        self._guard = ClaimGuard()
        self._policies: dict[UserId, StreakPolicy] = {}

    def __len__(self) -> int:
        return len(self._policies)

    def get(self, user: UserId) -> StreakPolicy:
        policy = self._policies.pop(user, None)
        if policy is None:
            if len(self._policies) >= self._max_users:
                del self._policies[next(iter(self._policies))]
            policy = StreakPolicy(self._ledger, user, snapshots=self._snapshots, guard=self._guard)
        self._policies[user] = policy
        return policy


def create_app(
    ledger: Ledger,
    settings: Settings | None = None,
    *,
    channel: OrderChannel | None = None,
) -> fastapi.FastAPI:
    settings = settings or Settings()
    snapshots = BalanceSnapshots(ledger, max_users=settings.balance_cache_size)
    policies = _Policies(ledger, snapshots, max_users=settings.balance_cache_size)
    context = QuoteContext(
        snapshots=snapshots,
        shipping=settings.shipping_policy(),
        mode=settings.mode(),
        installments=settings.installments,
    )
    settlement = Settlement(
        ledger,
        snapshots,
        channel or LinkChannel(settings.message_base_url),
        shipping=settings.shipping_policy(),
        mode=settings.mode(),
    )

    app = fastapi.FastAPI(title="coinshop")
    app.state.snapshots = snapshots
    app.state.policies = policies

    @app.post("/cart/quote")
    async def post_quote(body: QuoteIn) -> QuoteOut:
        match await quote(body.to_domain(), context):
            case Ok(q):
                return QuoteOut.from_domain(q)
            case Error(e):
                log.warning("quote_failed", user_id=body.user_id, kind=e.kind.name)
                raise _http_error(e)

    @app.post("/cart/settle")
    async def post_settle(body: SettleIn) -> SettleOut:
        destination = body.destination or settings.order_destination
        if not destination:
            raise fastapi.HTTPException(
                status_code=422,
                detail={"kind": "no_destination", "message": "no order destination configured"},
            )

        request = body.to_domain()
        coins = CoinSettings()
        if request.use_coins:
            match await snapshots.get(request.user):
                case Ok(balance):
                    coins = CoinSettings(enabled=True, balance=balance.balance)
                case Error(e):
                    raise _http_error(e)

        result = await settlement.settle(
            request.user,
            request.lines,
            coins,
            destination,
            verification_code=body.verification_code,
        )
        match result:
            case Ok(receipt):
                return SettleOut.from_domain(receipt)
            case Error(e):
                raise _settlement_error(e)

    @app.get("/streak/{user_id}")
    async def get_streak(user_id: str) -> StreakOut:
        policy = policies.get(UserId(user_id))
        match await policy.refresh_eligibility():
            case Ok(_):
                return StreakOut.from_domain(policy.view)
            case Error(e):
                raise _http_error(e)

    @app.post("/streak/{user_id}/claim")
    async def post_claim(user_id: str) -> ClaimOut:
        policy = policies.get(UserId(user_id))
        if policy.view.state is None:
            match await policy.refresh_eligibility():
                case Error(e):
                    raise _http_error(e)
                case Ok(_):
                    pass
        match await policy.claim():
            case Ok(claimed):
                return ClaimOut.from_domain(claimed, policy.view)
            case Error(e):
                raise _http_error(e)

    return app


__all__ = ("create_app",)
