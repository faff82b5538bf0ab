"""
Core types for coinshop: money and coin units, user identity.
"""

from __future__ import annotations

from dataclasses import dataclass

from kungfu import LazyCoroResult

type Cents = int
"""Money in base-unit-100 fixed point. 39999 == 399.99."""

type Coins = int
"""Loyalty coins. 1 coin == 1 cent, 100 coins == 1 currency unit."""

CENTS_PER_UNIT: int = 100

type Lazy[T, E] = LazyCoroResult[T, E]
"""Deferred ledger call; nothing runs until awaited."""


@dataclass(frozen=True, slots=True)
class UserId:
    """Storefront user identity, as issued by the auth collaborator."""

    value: str

    def __str__(self) -> str:
        return self.value


__all__ = (
    "Cents",
    "Coins",
    "CENTS_PER_UNIT",
    "Lazy",
    "UserId",
)
