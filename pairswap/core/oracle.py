"""
TWAP oracle consumer.

Pure helpers for price consumers:
- The pair only maintains cumulative prices (see `state.reserves`).
- A consumer records two `Observation`s and differences them here.

Accumulators wrap mod 2**256 and timestamps mod 2**32, so averages are always
computed from differences, never from absolute readings.
"""

from __future__ import annotations

from dataclasses import dataclass
from fractions import Fraction
from typing import Tuple

from ..kernels.uq112x112 import (
    RESOLUTION,
    UINT32_BITS,
    UINT32_MAX,
    accumulate,
    to_fraction,
    wrapping_sub,
)
from ..state.reserves import ReservePair


@dataclass(frozen=True)
class Observation:
    """Cumulative prices as of ``timestamp`` (mod 2**32)."""

    timestamp: int
    price0_cumulative: int
    price1_cumulative: int

    def __post_init__(self) -> None:
        if not (0 <= self.timestamp <= UINT32_MAX):
            raise ValueError(f"timestamp must fit in 32 bits: {self.timestamp}")


def observe(reserves: ReservePair, now: int) -> Observation:
    """
    Cumulative prices as they would read if the pair were synced at ``now``.

    Saves the consumer a `sync()` call: the time elapsed since the last
    update is folded in using the current reserves.
    """
    timestamp = now & UINT32_MAX
    price0 = reserves.price0_cumulative_last
    price1 = reserves.price1_cumulative_last
    elapsed = wrapping_sub(timestamp, reserves.block_timestamp_last, UINT32_BITS)
    if elapsed > 0 and reserves.reserve0 != 0 and reserves.reserve1 != 0:
        price0 = accumulate(price0, reserves.reserve1, reserves.reserve0, elapsed)
        price1 = accumulate(price1, reserves.reserve0, reserves.reserve1, elapsed)
    return Observation(timestamp=timestamp, price0_cumulative=price0, price1_cumulative=price1)


def average_prices(older: Observation, newer: Observation) -> Tuple[int, int]:
    """
    Time-weighted average prices between two observations, as UQ112x112.

    Returns ``(price0_average, price1_average)``: token0 priced in token1 and
    the inverse.
    """
    elapsed = wrapping_sub(newer.timestamp, older.timestamp, UINT32_BITS)
    if elapsed == 0:
        raise ValueError("observations share a timestamp; no time has elapsed")
    price0 = wrapping_sub(newer.price0_cumulative, older.price0_cumulative) // elapsed
    price1 = wrapping_sub(newer.price1_cumulative, older.price1_cumulative) // elapsed
    return price0, price1


def average_prices_fraction(older: Observation, newer: Observation) -> Tuple[Fraction, Fraction]:
    """`average_prices` as exact rationals."""
    price0, price1 = average_prices(older, newer)
    return to_fraction(price0), to_fraction(price1)


def consult(average_price: int, amount_in: int) -> int:
    """Amount out for ``amount_in`` at a UQ112x112 average price (floor)."""
    if amount_in < 0:
        raise ValueError(f"amount_in must be non-negative: {amount_in}")
    return (average_price * amount_in) >> RESOLUTION


def is_fresh(observation: Observation, now: int, max_staleness_seconds: int) -> bool:
    """Return True if ``observation`` is within the staleness window of ``now``."""
    if max_staleness_seconds <= 0:
        raise ValueError(f"max_staleness_seconds must be positive: {max_staleness_seconds}")
    age = wrapping_sub(now & UINT32_MAX, observation.timestamp, UINT32_BITS)
    return age <= max_staleness_seconds
