"""
coinshop — cart pricing, loyalty coins and the daily streak bonus.

    from coinshop import pricing     # Per-line discount, cashback, redemption cap
    from coinshop import cart        # Cart totals, redemption, shipping
    from coinshop import ledger      # Coin service contract + balance snapshots
    from coinshop import streak      # Daily bonus policy
    from coinshop import settlement  # Order message + coin commit
    from coinshop import checkout    # Quote graph
    from coinshop import wire        # FastAPI surface (imports fastapi)
"""

from coinshop import pricing
from coinshop import cart
from coinshop import ledger
from coinshop import streak
from coinshop import settlement
from coinshop import checkout
from coinshop import lift
from coinshop._types import Cents, Coins, UserId

__version__ = "0.1.0"

__all__ = (
    "pricing",
    "cart",
    "ledger",
    "streak",
    "settlement",
    "checkout",
    "lift",
    "Cents",
    "Coins",
    "UserId",
)
