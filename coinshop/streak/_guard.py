"""
ClaimGuard — one outstanding claim per user.

Compare-and-set under an asyncio.Lock: acquire() returns False when a claim
for the same user is already in flight. Share one guard between every
StreakPolicy serving the same process.
"""

from __future__ import annotations

import asyncio

from coinshop._types import UserId


class ClaimGuard:
    def __init__(self) -> None:
        self._pending: set[UserId] = set()
        self._lock = asyncio.Lock()

    async def acquire(self, user: UserId) -> bool:
        """Mark a claim as in flight. Returns False if one already is."""
        async with self._lock:
            if user in self._pending:
                return False
            self._pending.add(user)
            return True

    async def release(self, user: UserId) -> None:
        async with self._lock:
            self._pending.discard(user)

    def in_flight(self, user: UserId) -> bool:
        return user in self._pending


__all__ = ("ClaimGuard",)
