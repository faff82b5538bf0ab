"""
Ledger — coin balance, streak eligibility and settlement commits.

The ledger service owns every balance. This package defines its contract,
two implementations and the read-only balance cache.

    from coinshop.ledger import JsonLedger, BalanceSnapshots

    ledger = JsonLedger(invoke)
    snapshots = BalanceSnapshots(ledger)

    match await snapshots.get(user):
        case Ok(balance):
            ...
        case Error(e):
            ...
"""

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
from coinshop.ledger._protocol import FunctionalLedger, Ledger, ledger_from
from coinshop.ledger._json import (
    ACTION_CAN_CLAIM,
    ACTION_CLAIM,
    ACTION_COMMIT,
    ACTION_GET_BALANCE,
    ACTION_REVERT,
    Invoke,
    JsonLedger,
)
from coinshop.ledger._memory import BRASILIA, DEFAULT_RESET_HOUR, MemoryLedger
from coinshop.ledger._snapshot import BalanceSnapshots

__all__ = (
    # Types
    "UserId",
    "CoinBalance",
    "StreakState",
    "ClaimResult",
    "CoinMovement",
    "CommitReceipt",
    "LedgerErrorKind",
    "LedgerError",
    # Protocol
    "Ledger",
    "FunctionalLedger",
    "ledger_from",
    # Implementations
    "Invoke",
    "JsonLedger",
    "ACTION_GET_BALANCE",
    "ACTION_CAN_CLAIM",
    "ACTION_CLAIM",
    "ACTION_COMMIT",
    "ACTION_REVERT",
    "MemoryLedger",
    "BRASILIA",
    "DEFAULT_RESET_HOUR",
    # Cache
    "BalanceSnapshots",
)
