"""
Reserve and protocol-fee bookkeeping shared by every reserve-mutating call.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Tuple

from ..config import PairConfig
from ..kernels.lp_math import protocol_fee_liquidity
from ..state.balances import ZERO_ADDRESS, Amount, TokenLedger
from ..state.reserves import update_reserves
from .types import EventKind, PairState

logger = logging.getLogger(__name__)


def pair_balances(state: PairState, tokens: TokenLedger) -> Tuple[Amount, Amount]:
    """The pair's actual holdings of ``(token0, token1)``."""
    token0, token1 = state.identity.tokens()
    address = state.identity.address
    return tokens.balance_of(token0, address), tokens.balance_of(token1, address)


def commit_reserves(state: PairState, *, balance0: Amount, balance1: Amount, now: int) -> None:
    """Advance the accumulators, store the balances as reserves, emit ``Sync``."""
    state.reserves = update_reserves(state.reserves, balance0=balance0, balance1=balance1, now=now)
    logger.debug(
        "reserves (%d, %d) at %d: price0=%d price1=%d",
        balance0,
        balance1,
        state.reserves.block_timestamp_last,
        state.reserves.price0_cumulative_last,
        state.reserves.price1_cumulative_last,
    )
    state.emit(EventKind.SYNC, reserve0=balance0, reserve1=balance1)


def mint_protocol_fee(state: PairState, config: PairConfig) -> bool:
    """
    Mint the fee receiver's share of ``sqrt(k)`` growth since ``k_last``.

    Must run against the reserves *before* the current deposit or withdrawal
    so new liquidity does not count as growth. Returns whether the fee is on.
    """
    reserves = state.reserves
    if not config.fee_on:
        if reserves.k_last != 0:
            state.reserves = replace(reserves, k_last=0)
        return False

    liquidity = protocol_fee_liquidity(
        reserve0=reserves.reserve0,
        reserve1=reserves.reserve1,
        k_last=reserves.k_last,
        total_supply=state.shares.total_supply,
        divisor=config.protocol_fee_divisor,
    )
    if liquidity > 0:
        assert config.fee_to is not None
        state.shares.mint(config.fee_to, liquidity)
        state.emit(EventKind.TRANSFER, sender=ZERO_ADDRESS, recipient=config.fee_to, amount=liquidity)
        logger.debug("protocol fee: minted %d shares to %s", liquidity, config.fee_to)
    return True


def record_k_last(state: PairState, fee_on: bool) -> None:
    if fee_on:
        state.reserves = replace(state.reserves, k_last=state.reserves.k)
