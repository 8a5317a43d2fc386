"""Data types for the pair engine.

`PairState` is the single owned state struct threaded through every core
operation; `PairEvent` records what a committed call emitted; `CallResult` is
the tagged result returned by `Pair.try_call()`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, unique
from typing import Any, Dict, List, Mapping, Optional

from ..errors import ErrorCode
from ..state.identity import PairIdentity
from ..state.lp import LiquidityLedger
from ..state.reserves import ReservePair


@unique
class EventKind(Enum):
    """One member per emitted event type."""
    INITIALIZED = "Initialized"
    MINT = "Mint"
    BURN = "Burn"
    SWAP = "Swap"
    SYNC = "Sync"
    FLASH_LOAN = "FlashLoan"
    TRANSFER = "Transfer"
    APPROVAL = "Approval"


@dataclass(frozen=True)
class PairEvent:
    kind: EventKind
    args: Mapping[str, Any] = field(default_factory=dict)


@dataclass
class PairState:
    """Complete mutable state of one pair. Owned by exactly one `Pair`."""

    identity: PairIdentity
    reserves: ReservePair = field(default_factory=ReservePair)
    shares: LiquidityLedger = field(default_factory=LiquidityLedger)
    locked: bool = False
    events: List[PairEvent] = field(default_factory=list)

    def emit(self, kind: EventKind, **args: Any) -> None:
        self.events.append(PairEvent(kind=kind, args=args))

    def clone(self) -> "PairState":
        """Independent copy for rollback. Identity and reserves are immutable and shared."""
        return PairState(
            identity=self.identity,
            reserves=self.reserves,
            shares=self.shares.copy(),
            locked=self.locked,
            events=list(self.events),
        )

    def restore(self, saved: "PairState") -> None:
        """
        Overwrite this state in place with a `clone()` taken earlier.

        In place, so references held by a call still in progress on another
        pair stay valid.
        """
        self.identity = saved.identity
        self.reserves = saved.reserves
        self.shares = saved.shares.copy()
        self.locked = saved.locked
        self.events = list(saved.events)

    def to_dict(self) -> Dict[str, Any]:
        """The persisted surface of the pair as a plain dict."""
        return {
            "address": self.identity.address,
            "factory": self.identity.factory,
            "token0": self.identity.token0,
            "token1": self.identity.token1,
            "initialized": self.identity.initialized,
            "reserve0": self.reserves.reserve0,
            "reserve1": self.reserves.reserve1,
            "block_timestamp_last": self.reserves.block_timestamp_last,
            "price0_cumulative_last": self.reserves.price0_cumulative_last,
            "price1_cumulative_last": self.reserves.price1_cumulative_last,
            "k_last": self.reserves.k_last,
            "total_supply": self.shares.total_supply,
            "balances": self.shares.get_all_balances(),
            "allowances": self.shares.get_all_allowances(),
        }


@dataclass(frozen=True)
class CallResult:
    """Result of a single entry-point call."""

    ok: bool
    value: Any = None
    error: Optional[ErrorCode] = None
    message: Optional[str] = None
