"""
State management for the pair
"""

from .balances import TokenLedger
from .clock import BlockClock
from .identity import PairIdentity, sort_tokens
from .lp import LiquidityLedger
from .reserves import ReservePair, update_reserves

__all__ = [
    "TokenLedger",
    "BlockClock",
    "PairIdentity",
    "sort_tokens",
    "LiquidityLedger",
    "ReservePair",
    "update_reserves",
]
