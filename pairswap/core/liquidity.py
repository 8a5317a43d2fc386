"""
Liquidity operations: mint and burn pair shares.

Both follow the "tokens first" protocol: the caller has already moved the
underlying tokens (for `mint`) or the shares (for `burn`) into the pair, and
the operation settles against the difference between actual balances and
recorded reserves.
"""

import logging
from typing import Optional, Tuple

from ..config import PairConfig
from ..kernels.lp_math import burn_amounts, initial_liquidity, proportional_liquidity
from ..state.balances import ZERO_ADDRESS, Address, Amount, TokenLedger
from .accounting import commit_reserves, mint_protocol_fee, pair_balances, record_k_last
from .types import EventKind, PairState

logger = logging.getLogger(__name__)


def mint(
    state: PairState,
    tokens: TokenLedger,
    config: PairConfig,
    *,
    to: Address,
    now: int,
    sender: Optional[Address] = None,
) -> Amount:
    """
    Mint shares for the tokens deposited since the last reserve update.

    First deposit:
        liquidity = isqrt(amount0 * amount1) - MINIMUM_LIQUIDITY
        (MINIMUM_LIQUIDITY is minted to the zero address and never withdrawable)

    Later deposits:
        liquidity = min(amount0 * supply // reserve0, amount1 * supply // reserve1)

    The protocol fee, if on, is minted before the deposit is priced.

    Returns:
        Shares minted to ``to``

    Raises:
        LiquidityError: InsufficientInitialLiquidity / InsufficientLiquidityMinted
    """
    reserve0, reserve1, _ = state.reserves.get_reserves()
    balance0, balance1 = pair_balances(state, tokens)
    amount0 = balance0 - reserve0
    amount1 = balance1 - reserve1
    if amount0 < 0 or amount1 < 0:
        raise ValueError(f"pair balances below reserves: ({balance0}, {balance1}) < ({reserve0}, {reserve1})")

    fee_on = mint_protocol_fee(state, config)
    total_supply = state.shares.total_supply
    if total_supply == 0:
        liquidity = initial_liquidity(amount0, amount1, config.minimum_liquidity)
        state.shares.mint(ZERO_ADDRESS, config.minimum_liquidity)
        state.emit(EventKind.TRANSFER, sender=ZERO_ADDRESS, recipient=ZERO_ADDRESS, amount=config.minimum_liquidity)
    else:
        liquidity = proportional_liquidity(
            amount0=amount0,
            amount1=amount1,
            reserve0=reserve0,
            reserve1=reserve1,
            total_supply=total_supply,
        )

    state.shares.mint(to, liquidity)
    state.emit(EventKind.TRANSFER, sender=ZERO_ADDRESS, recipient=to, amount=liquidity)

    commit_reserves(state, balance0=balance0, balance1=balance1, now=now)
    record_k_last(state, fee_on)
    state.emit(EventKind.MINT, sender=sender, amount0=amount0, amount1=amount1)
    logger.debug("mint: %d shares to %s for (%d, %d)", liquidity, to, amount0, amount1)
    return liquidity


def burn(
    state: PairState,
    tokens: TokenLedger,
    config: PairConfig,
    *,
    to: Address,
    now: int,
    sender: Optional[Address] = None,
) -> Tuple[Amount, Amount]:
    """
    Burn the shares held by the pair itself and pay out the underlying tokens.

        amount0 = liquidity * balance0 // total_supply
        amount1 = liquidity * balance1 // total_supply

    Amounts are pro-rata of the *current* balances, so tokens sitting above
    the reserves are distributed too.

    Returns:
        ``(amount0, amount1)`` sent to ``to``

    Raises:
        LiquidityError: InsufficientLiquidityBurned if either amount is zero
    """
    token0, token1 = state.identity.tokens()
    address = state.identity.address
    balance0, balance1 = pair_balances(state, tokens)
    liquidity = state.shares.balance_of(address)

    fee_on = mint_protocol_fee(state, config)
    amounts = burn_amounts(
        liquidity=liquidity,
        balance0=balance0,
        balance1=balance1,
        total_supply=state.shares.total_supply,
    )

    state.shares.burn(address, liquidity)
    state.emit(EventKind.TRANSFER, sender=address, recipient=ZERO_ADDRESS, amount=liquidity)
    tokens.transfer(token0, address, to, amounts.amount0)
    tokens.transfer(token1, address, to, amounts.amount1)

    balance0, balance1 = pair_balances(state, tokens)
    commit_reserves(state, balance0=balance0, balance1=balance1, now=now)
    record_k_last(state, fee_on)
    state.emit(EventKind.BURN, sender=sender, amount0=amounts.amount0, amount1=amounts.amount1, to=to)
    logger.debug("burn: %d shares for (%d, %d) to %s", liquidity, amounts.amount0, amounts.amount1, to)
    return amounts.amount0, amounts.amount1
