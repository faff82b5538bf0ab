"""
Settlement — order message, intake channel and the coin commit.

    from coinshop.settlement import build_settlement_message, message_link

    text = build_settlement_message(totals, coins)
    link = message_link("5527996882090", text)
"""

from coinshop.settlement._message import (
    DEFAULT_BASE_URL,
    DEFAULT_GREETING,
    build_settlement_message,
    message_link,
)
from coinshop.settlement._channel import DeliveryError, LinkChannel, Opener, OrderChannel
from coinshop.settlement._commit import (
    Settlement,
    SettlementError,
    SettlementErrorKind,
    SettlementReceipt,
    movement_for,
)

__all__ = (
    # Message
    "build_settlement_message",
    "message_link",
    "DEFAULT_GREETING",
    "DEFAULT_BASE_URL",
    # Channel
    "OrderChannel",
    "LinkChannel",
    "Opener",
    "DeliveryError",
    # Commit
    "Settlement",
    "SettlementError",
    "SettlementErrorKind",
    "SettlementReceipt",
    "movement_for",
)
