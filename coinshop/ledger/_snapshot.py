"""
Balance snapshots — session cache of CoinBalance per user.

Snapshots are read-only. Nothing here adjusts a cached balance after a
claim or a settlement; callers invalidate and the next get() re-fetches
from the ledger.

Example:
    snapshots = BalanceSnapshots(ledger, max_users=1000)

    result = await snapshots.get(user)      # fetch, then cached
    await snapshots.invalidate(user)        # after any committing action
    result = await snapshots.refresh(user)  # invalidate + fetch
"""

from __future__ import annotations

import asyncio

import structlog
from kungfu import Error, Ok, Result

from coinshop._types import UserId
from coinshop.ledger._protocol import Ledger
from coinshop.ledger._types import CoinBalance, LedgerError

log = structlog.get_logger(__name__)


class BalanceSnapshots:
    def __init__(self, ledger: Ledger, max_users: int = 1000) -> None:
        if max_users < 1:
            raise ValueError("max_users must be >= 1")
        self._ledger = ledger
        self._max_users = max_users
        # insertion order doubles as recency: oldest first
        self._entries: dict[UserId, CoinBalance] = {}
        self._generation: dict[UserId, int] = {}
        self._fetching: dict[UserId, int] = {}
        self._lock = asyncio.Lock()

    @property
    def ledger(self) -> Ledger:
        return self._ledger

    def __len__(self) -> int:
        return len(self._entries)

    def peek(self, user: UserId) -> CoinBalance | None:
        """Cached snapshot without fetching or touching recency."""
        return self._entries.get(user)

    async def get(self, user: UserId) -> Result[CoinBalance, LedgerError]:
        async with self._lock:
            cached = self._entries.pop(user, None)
            if cached is not None:
                self._entries[user] = cached
                return Ok(cached)
            generation = self._generation.get(user, 0)
            self._fetching[user] = self._fetching.get(user, 0) + 1

        result: Result[CoinBalance, LedgerError] | None = None
        try:
            result = await self._ledger.get_balance(user)
        finally:
            async with self._lock:
                match result:
                    # an invalidate() while fetching makes this value stale
                    case Ok(balance) if self._generation.get(user, 0) == generation:
                        self._store(user, balance)
                    case _:
                        pass
                self._fetch_done(user)

        match result:
            case Ok(balance):
                log.debug("balance_fetched", user_id=str(user), balance=balance.balance)
                return Ok(balance)
            case Error(e):
                log.warning("balance_fetch_failed", user_id=str(user), kind=e.kind.name)
                return Error(e)

    def _fetch_done(self, user: UserId) -> None:
        remaining = self._fetching[user] - 1
        if remaining:
            self._fetching[user] = remaining
        else:
            # generations only matter while a fetch can still land
            del self._fetching[user]
            self._generation.pop(user, None)

    def _store(self, user: UserId, balance: CoinBalance) -> None:
        if user not in self._entries and len(self._entries) >= self._max_users:
            oldest = next(iter(self._entries))
            del self._entries[oldest]
        self._entries[user] = balance

    async def invalidate(self, user: UserId) -> bool:
        """Drop the cached snapshot. Returns True if one existed."""
        async with self._lock:
            if user in self._fetching:
                self._generation[user] = self._generation.get(user, 0) + 1
            return self._entries.pop(user, None) is not None

    async def refresh(self, user: UserId) -> Result[CoinBalance, LedgerError]:
        await self.invalidate(user)
        return await self.get(user)


__all__ = ("BalanceSnapshots",)
