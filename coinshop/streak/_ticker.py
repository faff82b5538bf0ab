"""
StreakTicker — scheduled countdown and re-fetch for one StreakPolicy.

Fetches eligibility on start, ticks the countdown every `interval`
seconds and re-fetches when it reaches zero. stop() cancels the task.

Example:
    async with StreakTicker(policy, interval=1.0):
        ...  # widget mounted
    # unmounted, task cancelled
"""

from __future__ import annotations

import asyncio
import contextlib

import structlog

from coinshop.streak._policy import StreakPolicy

log = structlog.get_logger(__name__)


class StreakTicker:
    def __init__(self, policy: StreakPolicy, interval: float = 1.0, *, step: int = 1) -> None:
        if interval <= 0:
            raise ValueError("interval must be > 0")
        if step < 1:
            raise ValueError("step must be >= 1")
        self._policy = policy
        self._interval = interval
        self._step = step
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def _run(self) -> None:
        await self._policy.refresh_eligibility()
        while True:
            await asyncio.sleep(self._interval)
            if self._policy.tick(self._step):
                log.debug("countdown_elapsed", user_id=str(self._policy.user))
                await self._policy.refresh_eligibility()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    async def __aenter__(self) -> StreakTicker:
        self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.stop()


__all__ = ("StreakTicker",)
