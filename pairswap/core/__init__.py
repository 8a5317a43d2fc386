"""
Core pair algorithms
"""

from .flash import flash_fee, flash_loan, max_flash_loan
from .liquidity import burn, mint
from .oracle import Observation, average_prices, consult, observe
from .pair import Pair
from .swap import swap
from .types import CallResult, EventKind, PairEvent, PairState

__all__ = [
    "Pair",
    "PairState",
    "PairEvent",
    "EventKind",
    "CallResult",
    "mint",
    "burn",
    "swap",
    "max_flash_loan",
    "flash_fee",
    "flash_loan",
    "Observation",
    "observe",
    "average_prices",
    "consult",
]
