"""
pairswap: a two-token constant-product AMM pair.

Public API:
- `Pair` (entry points, reentrancy latch, deadlines, atomic rollback)
- `TokenLedger`, `BlockClock` (the pair's external collaborators)
- `PairConfig`, `load_config`
- `ErrorCode`, `PairError` and its categories
"""

from .config import PairConfig, config_from_mapping, load_config
from .core.pair import Pair
from .core.types import CallResult, EventKind, PairEvent, PairState
from .errors import (
    ArithmeticGuardError,
    ErrorCode,
    InvariantError,
    LiquidityError,
    PairError,
    PreconditionError,
    SlippageError,
    TransferError,
)
from .state.balances import ZERO_ADDRESS, TokenLedger
from .state.clock import BlockClock

__all__ = [
    "Pair",
    "PairConfig",
    "config_from_mapping",
    "load_config",
    "CallResult",
    "EventKind",
    "PairEvent",
    "PairState",
    "ErrorCode",
    "PairError",
    "PreconditionError",
    "InvariantError",
    "SlippageError",
    "LiquidityError",
    "ArithmeticGuardError",
    "TransferError",
    "TokenLedger",
    "BlockClock",
    "ZERO_ADDRESS",
]
