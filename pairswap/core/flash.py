"""
Flash loans against the pair's reserves.

A loan lives entirely inside one call: the pair sends ``amount`` to the
receiver, runs the receiver's callback, and then requires its balance of the
token to be at least ``balance_before + fee``. Repayment is pushed by the
callback with ordinary token transfers; the pair never pulls.
"""

import logging
from typing import Callable

from ..config import PairConfig
from ..errors import ErrorCode, fail
from ..kernels import cpmm_swap
from ..state.balances import Address, Amount, TokenId, TokenLedger
from .accounting import commit_reserves, pair_balances
from .types import EventKind, PairState

logger = logging.getLogger(__name__)

# callback(token, amount, fee, data)
FlashCallback = Callable[[TokenId, Amount, Amount, bytes], None]


def max_flash_loan(state: PairState, token: TokenId) -> Amount:
    """The whole reserve of ``token`` is borrowable; 0 for any other token."""
    if not state.identity.initialized:
        return 0
    token0, token1 = state.identity.tokens()
    if token == token0:
        return state.reserves.reserve0
    if token == token1:
        return state.reserves.reserve1
    return 0


def flash_fee(state: PairState, config: PairConfig, token: TokenId, amount: Amount) -> Amount:
    """``ceil(amount * fee_numerator / fee_denominator)``, rounding in the pool's favor."""
    state.identity.index_of(token)
    return cpmm_swap.flash_fee(
        amount,
        fee_numerator=config.fee_numerator,
        fee_denominator=config.fee_denominator,
    )


def flash_loan(
    state: PairState,
    tokens: TokenLedger,
    config: PairConfig,
    *,
    receiver: Address,
    token: TokenId,
    amount: Amount,
    callback: FlashCallback,
    data: bytes,
    now: int,
) -> Amount:
    """
    Lend ``amount`` of ``token`` to ``receiver`` for the duration of ``callback``.

    Returns:
        The fee that was charged

    Raises:
        PreconditionError: UnsupportedToken, ExceedsMaxFlashLoan
        InvariantError: FlashLoanNotRepaid if the balance is short after the callback
    """
    if amount < 0:
        raise ValueError(f"amount must be non-negative: {amount}")
    fee = flash_fee(state, config, token, amount)
    available = max_flash_loan(state, token)
    if amount > available:
        raise fail(ErrorCode.EXCEEDS_MAX_FLASH_LOAN, f"requested {amount}, reserve is {available}")

    address = state.identity.address
    balance_before = tokens.balance_of(token, address)
    tokens.transfer(token, address, receiver, amount)
    logger.debug("flash loan: %d of %s to %s (fee %d)", amount, token, receiver, fee)

    callback(token, amount, fee, data)

    balance_after = tokens.balance_of(token, address)
    if balance_after < balance_before + fee:
        raise fail(
            ErrorCode.FLASH_LOAN_NOT_REPAID,
            f"balance {balance_after} below required {balance_before + fee}",
        )

    balance0, balance1 = pair_balances(state, tokens)
    commit_reserves(state, balance0=balance0, balance1=balance1, now=now)
    state.emit(EventKind.FLASH_LOAN, receiver=receiver, token=token, amount=amount, fee=fee)
    return fee
