"""
Lift — defer ledger and channel calls as LazyCoroResult.

    lazy = from_result_call(
        lambda: ledger.get_balance(user_id),
        on_error=LedgerError.unavailable,
    )
    result = await lazy
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable

from kungfu import Error, LazyCoroResult, Result

from coinshop._types import Lazy


def from_result_call[T, E](
    result_fn: Callable[[], Awaitable[Result[T, E]]],
    on_error: Callable[[Exception], E] | None = None,
) -> Lazy[T, E]:
    """
    Defer an async call that already returns Result.

    With on_error, an exception escaping the call becomes Error(on_error(exc));
    without it the exception propagates.
    """
    async def _run() -> Result[T, E]:
        if on_error is None:
            return await result_fn()
        try:
            return await result_fn()
        except Exception as exc:
            return Error(on_error(exc))
    return LazyCoroResult(_run)


__all__ = ("from_result_call",)
