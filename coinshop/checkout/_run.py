"""
quote() — run the quote graph once.

The agent is compiled on first use and reused for every call.

Example:
    context = QuoteContext(snapshots=BalanceSnapshots(ledger))
    request = QuoteRequest(UserId("u1"), tuple(cart), use_coins=True)

    match await quote(request, context):
        case Ok(q):
            render(q.totals, q.message)
        case Error(e):
            show_unavailable(e)
"""

from __future__ import annotations

from collections.abc import Callable, Coroutine
from functools import cache
from typing import Any, cast

from kungfu import Error, Ok, Result
from nodnod import EventLoopAgent, Scope, Value

from coinshop.checkout._nodes import PreviewNode, TotalsNode
from coinshop.checkout._types import Quote, QuoteContext, QuoteRequest
from coinshop.ledger import LedgerError


@cache
def _agent() -> EventLoopAgent:
    return EventLoopAgent.build({PreviewNode})


async def quote(request: QuoteRequest, context: QuoteContext) -> Result[Quote, LedgerError]:
    agent = _agent()

    scope = Scope(detail="quote")
    async with scope:
        scope.push(Value(QuoteRequest, request))
        scope.push(Value(QuoteContext, context))

        run_method = cast(
            Callable[[Scope, dict[type[Any], Scope]], Coroutine[Any, Any, None]],
            getattr(agent, "run"),
        )
        await run_method(scope, {})

        totals = cast(TotalsNode, scope.get(TotalsNode).value)
        preview = cast(PreviewNode, scope.get(PreviewNode).value)

    match totals.result:
        case Ok(value):
            return Ok(Quote(
                totals=value,
                balance=totals.balance,
                installment=value.installment(context.installments),
                message=preview.message,
            ))
        case Error(e):
            return Error(e)


__all__ = ("quote",)
