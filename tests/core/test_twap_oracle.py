# [TESTER] v1

from __future__ import annotations

import pytest

from conftest import START, TOKEN_A, TOKEN_B, USER0, WEI
from pairswap import BlockClock, Pair
from pairswap.core.oracle import Observation, average_prices, consult, is_fresh, observe
from pairswap.kernels.uq112x112 import encode, price_of

PRICE0 = price_of(10 * WEI, 100 * WEI)  # token0 in token1 for reserves (100, 10)
PRICE1 = price_of(100 * WEI, 10 * WEI)


def test_sync_accrues_elapsed_price(seeded_pair: Pair, clock: BlockClock) -> None:
    assert seeded_pair.price0_cumulative_last == 0
    clock.advance(10)
    seeded_pair.sync()
    assert seeded_pair.price0_cumulative_last == PRICE0 * 10
    assert seeded_pair.price1_cumulative_last == PRICE1 * 10
    assert seeded_pair.get_reserves()[2] == START + 10


def test_multiple_updates_in_one_second_accrue_once(seeded_pair: Pair, clock: BlockClock) -> None:
    clock.advance(10)
    seeded_pair.sync()
    seeded_pair.swap_exact_tokens_for_tokens(USER0, 1 * WEI, 0, TOKEN_A, TOKEN_B, USER0, clock.now())
    seeded_pair.sync()
    assert seeded_pair.price0_cumulative_last == PRICE0 * 10


def test_observe_matches_a_sync(seeded_pair: Pair, clock: BlockClock) -> None:
    clock.advance(25)
    obs = observe(seeded_pair.reserves, clock.now())
    seeded_pair.sync()
    assert obs.price0_cumulative == seeded_pair.price0_cumulative_last
    assert obs.price1_cumulative == seeded_pair.price1_cumulative_last
    assert obs.timestamp == START + 25


def test_constant_price_average(seeded_pair: Pair, clock: BlockClock) -> None:
    older = observe(seeded_pair.reserves, clock.now())
    clock.advance(3_600)
    newer = observe(seeded_pair.reserves, clock.now())
    price0, price1 = average_prices(older, newer)
    assert price0 == PRICE0
    assert price1 == PRICE1
    assert price0 == encode(10 * WEI) // (100 * WEI)


def test_average_is_time_weighted(seeded_pair: Pair, clock: BlockClock) -> None:
    older = observe(seeded_pair.reserves, clock.now())
    clock.advance(10)
    seeded_pair.swap_exact_tokens_for_tokens(USER0, 10 * WEI, 0, TOKEN_A, TOKEN_B, USER0, clock.now())
    reserve0, reserve1, _ = seeded_pair.get_reserves()
    clock.advance(30)
    newer = observe(seeded_pair.reserves, clock.now())

    price0, _ = average_prices(older, newer)
    assert price0 == (PRICE0 * 10 + price_of(reserve1, reserve0) * 30) // 40


def test_accumulator_survives_timestamp_wrap(seeded_pair: Pair, clock: BlockClock) -> None:
    clock.set(2**32 + 5)
    seeded_pair.sync()
    elapsed = 2**32 + 5 - START
    assert seeded_pair.get_reserves()[2] == 5
    assert seeded_pair.price0_cumulative_last == PRICE0 * elapsed

    older = Observation(timestamp=START, price0_cumulative=0, price1_cumulative=0)
    newer = observe(seeded_pair.reserves, clock.now())
    assert average_prices(older, newer)[0] == PRICE0


def test_average_requires_elapsed_time(seeded_pair: Pair, clock: BlockClock) -> None:
    obs = observe(seeded_pair.reserves, clock.now())
    with pytest.raises(ValueError, match="no time has elapsed"):
        average_prices(obs, obs)


def test_consult_applies_average_price() -> None:
    # 0.1 is not exact in binary fixed point, so the floor loses one unit.
    assert consult(PRICE0, 10 * WEI) == 1 * WEI - 1
    assert consult(PRICE1, 1 * WEI) == 10 * WEI


def test_is_fresh() -> None:
    obs = Observation(timestamp=1_000, price0_cumulative=0, price1_cumulative=0)
    assert is_fresh(obs, 1_060, 60)
    assert not is_fresh(obs, 1_061, 60)
    with pytest.raises(ValueError):
        is_fresh(obs, 1_000, 0)
