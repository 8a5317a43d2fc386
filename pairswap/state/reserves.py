"""
Reserve state for the pair.

`ReservePair` is immutable; `update_reserves` is the single transition that
moves reserves forward, folding the elapsed time into the cumulative price
accumulators first.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Tuple

from ..errors import ErrorCode, fail
from ..kernels.uq112x112 import (
    UINT32_BITS,
    UINT32_MAX,
    UINT112_MAX,
    UINT256_MAX,
    accumulate,
    wrapping_sub,
)
from .balances import Amount


@dataclass(frozen=True)
class ReservePair:
    """
    Reserves, last-update timestamp and cumulative prices.

    ``price0_cumulative_last`` integrates ``reserve1 / reserve0`` (token0 priced
    in token1) over time as UQ112x112 seconds; ``price1_cumulative_last`` the
    inverse. Both wrap mod 2**256. ``k_last`` is ``reserve0 * reserve1`` as of
    the last liquidity event while the protocol fee is on, else 0.
    """

    reserve0: Amount = 0
    reserve1: Amount = 0
    block_timestamp_last: int = 0
    price0_cumulative_last: int = 0
    price1_cumulative_last: int = 0
    k_last: int = 0

    def __post_init__(self) -> None:
        if not (0 <= self.reserve0 <= UINT112_MAX) or not (0 <= self.reserve1 <= UINT112_MAX):
            raise ValueError(f"reserves must fit in 112 bits: ({self.reserve0}, {self.reserve1})")
        if not (0 <= self.block_timestamp_last <= UINT32_MAX):
            raise ValueError(f"block_timestamp_last must fit in 32 bits: {self.block_timestamp_last}")
        for name, v in (
            ("price0_cumulative_last", self.price0_cumulative_last),
            ("price1_cumulative_last", self.price1_cumulative_last),
        ):
            if not (0 <= v <= UINT256_MAX):
                raise ValueError(f"{name} must fit in 256 bits: {v}")
        if self.k_last < 0:
            raise ValueError(f"k_last must be non-negative: {self.k_last}")

    def get_reserves(self) -> Tuple[Amount, Amount, int]:
        """``(reserve0, reserve1, block_timestamp_last)``; no side effects."""
        return self.reserve0, self.reserve1, self.block_timestamp_last

    @property
    def k(self) -> int:
        return self.reserve0 * self.reserve1


def update_reserves(state: ReservePair, *, balance0: Amount, balance1: Amount, now: int) -> ReservePair:
    """
    Set reserves to the given balances at time ``now``.

    The accumulators advance by ``price(previous reserves) * dt`` where
    ``dt = now - block_timestamp_last (mod 2**32)``. Nothing accrues when
    ``dt == 0`` (same timestamp) or when either previous reserve is zero;
    the timestamp still moves to ``now mod 2**32``.

    Raises:
        ArithmeticGuardError: If a balance does not fit in 112 bits
    """
    if balance0 < 0 or balance1 < 0:
        raise ValueError(f"balances must be non-negative: ({balance0}, {balance1})")
    if balance0 > UINT112_MAX or balance1 > UINT112_MAX:
        raise fail(ErrorCode.OVERFLOW, f"balances exceed 112 bits: ({balance0}, {balance1})")

    block_timestamp = now & UINT32_MAX
    elapsed = wrapping_sub(block_timestamp, state.block_timestamp_last, UINT32_BITS)

    price0 = state.price0_cumulative_last
    price1 = state.price1_cumulative_last
    if elapsed > 0 and state.reserve0 != 0 and state.reserve1 != 0:
        price0 = accumulate(price0, state.reserve1, state.reserve0, elapsed)
        price1 = accumulate(price1, state.reserve0, state.reserve1, elapsed)

    return replace(
        state,
        reserve0=balance0,
        reserve1=balance1,
        block_timestamp_last=block_timestamp,
        price0_cumulative_last=price0,
        price1_cumulative_last=price1,
    )
