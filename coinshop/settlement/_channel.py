"""
Order intake channels.

The engine hands the message over and learns only whether the hand-over
itself worked. Order creation on the other side is not observable.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Protocol

from combinators import lift as L
from kungfu import Error, Ok, Result

from coinshop.settlement._message import DEFAULT_BASE_URL, message_link


@dataclass(frozen=True, slots=True)
class DeliveryError:
    message: str
    cause: Exception | None = None


class OrderChannel(Protocol):
    async def deliver(self, destination: str, message: str) -> Result[str, DeliveryError]:
        """Hand the message over. Ok carries a channel reference (e.g. the link)."""
        ...


type Opener = Callable[[str], Awaitable[None]]


class LinkChannel:
    """
    Builds the prefilled message link and optionally opens it.

    Example:
        channel = LinkChannel(opener=push_link_to_client)
        match await channel.deliver("5527996882090", text):
            case Ok(link):
                ...
    """

    def __init__(self, base_url: str = DEFAULT_BASE_URL, opener: Opener | None = None) -> None:
        self._base_url = base_url
        self._opener = opener

    async def deliver(self, destination: str, message: str) -> Result[str, DeliveryError]:
        try:
            link = message_link(destination, message, self._base_url)
        except ValueError as exc:
            return Error(DeliveryError(str(exc), exc))

        if self._opener is None:
            return Ok(link)

        opener = self._opener
        opened = await L.catching_async(
            lambda: opener(link),
            on_error=lambda e: DeliveryError(f"could not open order link: {e}", e),
        )
        match opened:
            case Ok(_):
                return Ok(link)
            case Error(e):
                return Error(e)


__all__ = ("DeliveryError", "OrderChannel", "Opener", "LinkChannel")
