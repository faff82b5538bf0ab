"""
Quote graph nodes.

    QuoteInput ──┬──▶ BalanceNode ──┐
                 └──▶ PricedLinesNode ──▶ TotalsNode ──▶ PreviewNode

BalanceNode and PricedLinesNode have no edge between them and run
concurrently. Failures travel as Result values, not exceptions.
"""

from kungfu import Error, Ok, Result
from nodnod import scalar_node as node

from coinshop.cart import CartTotals, CoinSettings, aggregate
from coinshop.checkout._types import QuoteContext, QuoteRequest
from coinshop.ledger import CoinBalance, LedgerError
from coinshop.pricing import PricedLine, price_cart
from coinshop.settlement import build_settlement_message


@node
class QuoteInput:
    def __init__(self, data: QuoteRequest) -> None:
        self.data = data

    @classmethod
    def __compose__(cls, request: QuoteRequest) -> "QuoteInput":
        return cls(request)


@node
class BalanceNode:
    """Balance through the session snapshot cache only."""

    def __init__(self, result: Result[CoinBalance, LedgerError]) -> None:
        self.result = result

    @classmethod
    async def __compose__(cls, request: QuoteInput, context: QuoteContext) -> "BalanceNode":
        return cls(await context.snapshots.get(request.data.user))


@node
class PricedLinesNode:
    def __init__(self, lines: tuple[PricedLine, ...]) -> None:
        self.lines = lines

    @classmethod
    def __compose__(cls, request: QuoteInput) -> "PricedLinesNode":
        return cls(price_cart(line for line in request.data.lines if line.quantity > 0))


@node
class TotalsNode:
    """
    Fold priced lines with the coin toggle.

    A failed balance fetch only matters when coins are on.
    """

    def __init__(
        self,
        result: Result[CartTotals, LedgerError],
        balance: CoinBalance | None,
    ) -> None:
        self.result = result
        self.balance = balance

    @classmethod
    def __compose__(
        cls,
        request: QuoteInput,
        priced: PricedLinesNode,
        balance: BalanceNode,
        context: QuoteContext,
    ) -> "TotalsNode":
        use_coins = request.data.use_coins
        match balance.result:
            case Ok(snapshot):
                settings = CoinSettings(enabled=use_coins, balance=snapshot.balance)
                current: CoinBalance | None = snapshot
            case Error(e) if use_coins:
                return cls(Error(e), None)
            case Error(_):
                settings = CoinSettings(enabled=False, balance=0)
                current = None
        totals = aggregate(priced.lines, settings, shipping=context.shipping, mode=context.mode)
        return cls(Ok(totals), current)


@node
class PreviewNode:
    """Order message preview; empty when totals failed."""

    def __init__(self, message: str) -> None:
        self.message = message

    @classmethod
    def __compose__(
        cls,
        request: QuoteInput,
        totals: TotalsNode,
        context: QuoteContext,
    ) -> "PreviewNode":
        match totals.result:
            case Ok(value):
                settings = CoinSettings(
                    enabled=request.data.use_coins,
                    balance=totals.balance.balance if totals.balance is not None else 0,
                )
                return cls(build_settlement_message(value, settings, labels=context.labels))
            case Error(_):
                return cls("")


__all__ = (
    "QuoteInput",
    "BalanceNode",
    "PricedLinesNode",
    "TotalsNode",
    "PreviewNode",
)
