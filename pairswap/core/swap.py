"""
Low-level constant-product swap.

The pair pays out first and checks afterwards: any input must already be in
the pair's balance by the time the fee-adjusted invariant is evaluated.
"""

import logging
from typing import Optional

from ..config import PairConfig
from ..errors import ErrorCode, fail
from ..kernels.cpmm_swap import fee_adjusted_k_holds, infer_inputs
from ..state.balances import Address, Amount, TokenLedger
from .accounting import commit_reserves, pair_balances
from .types import EventKind, PairState

logger = logging.getLogger(__name__)


def swap(
    state: PairState,
    tokens: TokenLedger,
    config: PairConfig,
    *,
    amount0_out: Amount,
    amount1_out: Amount,
    to: Address,
    now: int,
    sender: Optional[Address] = None,
) -> None:
    """
    Send ``amount0_out``/``amount1_out`` to ``to`` and verify the pair was paid.

    Post-condition (integer form, D = fee_denominator, N = fee_numerator):
        (balance0*D - amount0_in*N) * (balance1*D - amount1_in*N) >= reserve0 * reserve1 * D**2

    Raises:
        SlippageError: InsufficientOutputAmount if both outputs are zero
        LiquidityError: InsufficientLiquidity if an output reaches its reserve,
            InsufficientInputAmount if nothing was paid in
        PreconditionError: InvalidTo if ``to`` is one of the pair's tokens
        InvariantError: InvariantViolation if the fee-adjusted k decreased
    """
    if amount0_out < 0 or amount1_out < 0:
        raise ValueError(f"outputs must be non-negative: ({amount0_out}, {amount1_out})")
    if amount0_out == 0 and amount1_out == 0:
        raise fail(ErrorCode.INSUFFICIENT_OUTPUT_AMOUNT, "both outputs are zero")

    reserve0, reserve1, _ = state.reserves.get_reserves()
    if amount0_out >= reserve0 or amount1_out >= reserve1:
        raise fail(
            ErrorCode.INSUFFICIENT_LIQUIDITY,
            f"outputs ({amount0_out}, {amount1_out}) must stay below reserves ({reserve0}, {reserve1})",
        )

    token0, token1 = state.identity.tokens()
    if to in (token0, token1):
        raise fail(ErrorCode.INVALID_TO, f"recipient {to} is one of the pair's tokens")

    address = state.identity.address
    if amount0_out > 0:
        tokens.transfer(token0, address, to, amount0_out)
    if amount1_out > 0:
        tokens.transfer(token1, address, to, amount1_out)

    balance0, balance1 = pair_balances(state, tokens)
    inputs = infer_inputs(
        balance0=balance0,
        balance1=balance1,
        reserve0=reserve0,
        reserve1=reserve1,
        amount0_out=amount0_out,
        amount1_out=amount1_out,
    )
    if inputs.amount0_in == 0 and inputs.amount1_in == 0:
        raise fail(ErrorCode.INSUFFICIENT_INPUT_AMOUNT, "no input was paid into the pair")

    if not fee_adjusted_k_holds(
        balance0=balance0,
        balance1=balance1,
        amount0_in=inputs.amount0_in,
        amount1_in=inputs.amount1_in,
        reserve0=reserve0,
        reserve1=reserve1,
        fee_numerator=config.fee_numerator,
        fee_denominator=config.fee_denominator,
    ):
        raise fail(
            ErrorCode.INVARIANT_VIOLATION,
            f"fee-adjusted k of ({balance0}, {balance1}) below {reserve0} * {reserve1}",
        )

    commit_reserves(state, balance0=balance0, balance1=balance1, now=now)
    state.emit(
        EventKind.SWAP,
        sender=sender,
        amount0_in=inputs.amount0_in,
        amount1_in=inputs.amount1_in,
        amount0_out=amount0_out,
        amount1_out=amount1_out,
        to=to,
    )
    logger.debug(
        "swap: in=(%d, %d) out=(%d, %d) to %s",
        inputs.amount0_in,
        inputs.amount1_in,
        amount0_out,
        amount1_out,
        to,
    )
