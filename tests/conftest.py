from __future__ import annotations

import pytest

from pairswap import BlockClock, Pair, PairConfig, TokenLedger

WEI = 10**18

TOKEN_A = "0x" + "11" * 20
TOKEN_B = "0x" + "22" * 20
PAIR_ADDRESS = "0x" + "99" * 20
FACTORY = "0x" + "fa" * 20

OWNER = "0x" + "a0" * 20
USER0 = "0x" + "a1" * 20
USER1 = "0x" + "a2" * 20

START = 1_700_000_000


@pytest.fixture
def ledger() -> TokenLedger:
    tokens = TokenLedger()
    tokens.mint(TOKEN_A, OWNER, 1_000_000 * WEI)
    tokens.mint(TOKEN_B, OWNER, 200_000 * WEI)
    tokens.mint(TOKEN_A, USER0, 100 * WEI)
    tokens.mint(TOKEN_B, USER0, 100 * WEI)
    return tokens


@pytest.fixture
def clock() -> BlockClock:
    return BlockClock(START)


@pytest.fixture
def make_pair(ledger: TokenLedger, clock: BlockClock):
    """Factory for initialized pairs over the shared ledger and clock."""

    def _make(config: PairConfig | None = None, address: str = PAIR_ADDRESS) -> Pair:
        pair = Pair(address, ledger, clock, factory=FACTORY, config=config)
        pair.initialize(TOKEN_A, TOKEN_B)
        return pair

    return _make


@pytest.fixture
def pair(make_pair) -> Pair:
    return make_pair()


@pytest.fixture
def seeded_pair(pair: Pair, clock: BlockClock) -> Pair:
    """Pair holding (100, 10) units, shares minted to USER0 by OWNER's deposit."""
    pair.add_liquidity(
        OWNER,
        TOKEN_A,
        TOKEN_B,
        100 * WEI,
        10 * WEI,
        10 * WEI,
        1 * WEI,
        USER0,
        clock.now() + 100,
    )
    return pair
