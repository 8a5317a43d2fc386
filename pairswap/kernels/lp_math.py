"""
Liquidity math kernel.

Small set of pure functions with explicit rounding rules:
- initial mint: ``isqrt(amount0 * amount1) - MINIMUM_LIQUIDITY``
- later mints: ``min(amount0 * supply // reserve0, amount1 * supply // reserve1)``
- burns: pro-rata of the pair's current balances (floor)
- protocol fee: 1/(divisor+1) of the growth in ``sqrt(k)`` since ``k_last``
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from ..errors import ErrorCode, fail
from .cpmm_swap import quote


MINIMUM_LIQUIDITY = 1000
PROTOCOL_FEE_DIVISOR = 5


def _require_int(name: str, value: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")
    if value < 0:
        raise ValueError(f"{name} must be non-negative: {value}")


@dataclass(frozen=True)
class OptimalLiquidityResult:
    amount_a: int
    amount_b: int


def optimal_liquidity(
    *,
    reserve_a: int,
    reserve_b: int,
    amount_a_desired: int,
    amount_b_desired: int,
    amount_a_min: int,
    amount_b_min: int,
) -> OptimalLiquidityResult:
    """
    Ratio-preserving deposit amounts, bounded by the caller's minimums.

    An empty pool takes the desired amounts as-is.
    """
    for name, v in (
        ("reserve_a", reserve_a),
        ("reserve_b", reserve_b),
        ("amount_a_desired", amount_a_desired),
        ("amount_b_desired", amount_b_desired),
        ("amount_a_min", amount_a_min),
        ("amount_b_min", amount_b_min),
    ):
        _require_int(name, v)

    if reserve_a == 0 and reserve_b == 0:
        return OptimalLiquidityResult(amount_a=amount_a_desired, amount_b=amount_b_desired)

    amount_b_optimal = quote(amount_a_desired, reserve_a, reserve_b)
    if amount_b_optimal <= amount_b_desired:
        if amount_b_optimal < amount_b_min:
            raise fail(
                ErrorCode.INSUFFICIENT_B_AMOUNT,
                f"amount_b ({amount_b_optimal}) < amount_b_min ({amount_b_min})",
            )
        return OptimalLiquidityResult(amount_a=amount_a_desired, amount_b=amount_b_optimal)

    amount_a_optimal = quote(amount_b_desired, reserve_b, reserve_a)
    if amount_a_optimal > amount_a_desired:
        raise AssertionError("optimal amount_a exceeds amount_a_desired")
    if amount_a_optimal < amount_a_min:
        raise fail(
            ErrorCode.INSUFFICIENT_A_AMOUNT,
            f"amount_a ({amount_a_optimal}) < amount_a_min ({amount_a_min})",
        )
    return OptimalLiquidityResult(amount_a=amount_a_optimal, amount_b=amount_b_desired)


def initial_liquidity(amount0: int, amount1: int, minimum_liquidity: int = MINIMUM_LIQUIDITY) -> int:
    """
    Shares for the first deposit, excluding the permanently locked minimum.

    Uses integer `isqrt`; float sqrt loses precision well before 112-bit amounts.
    """
    _require_int("amount0", amount0)
    _require_int("amount1", amount1)
    _require_int("minimum_liquidity", minimum_liquidity)
    liquidity = math.isqrt(amount0 * amount1) - minimum_liquidity
    if liquidity <= 0:
        raise fail(
            ErrorCode.INSUFFICIENT_INITIAL_LIQUIDITY,
            f"sqrt({amount0} * {amount1}) must exceed {minimum_liquidity}",
        )
    return liquidity


def proportional_liquidity(
    *,
    amount0: int,
    amount1: int,
    reserve0: int,
    reserve1: int,
    total_supply: int,
) -> int:
    """Shares for a deposit into a live pool; the scarcer side decides."""
    for name, v in (
        ("amount0", amount0),
        ("amount1", amount1),
        ("reserve0", reserve0),
        ("reserve1", reserve1),
        ("total_supply", total_supply),
    ):
        _require_int(name, v)
    if reserve0 == 0 or reserve1 == 0:
        raise fail(ErrorCode.INSUFFICIENT_LIQUIDITY, "cannot mint into an empty pool with outstanding shares")

    liquidity = min((amount0 * total_supply) // reserve0, (amount1 * total_supply) // reserve1)
    if liquidity == 0:
        raise fail(ErrorCode.INSUFFICIENT_LIQUIDITY_MINTED, "deposit too small to mint a share")
    return liquidity


@dataclass(frozen=True)
class BurnAmounts:
    amount0: int
    amount1: int


def burn_amounts(*, liquidity: int, balance0: int, balance1: int, total_supply: int) -> BurnAmounts:
    """Pro-rata share of the pair's *current* token balances (floor)."""
    for name, v in (
        ("liquidity", liquidity),
        ("balance0", balance0),
        ("balance1", balance1),
        ("total_supply", total_supply),
    ):
        _require_int(name, v)
    if total_supply == 0:
        raise fail(ErrorCode.INSUFFICIENT_LIQUIDITY_BURNED, "no shares outstanding")
    if liquidity > total_supply:
        raise ValueError(f"cannot burn more than total_supply: {liquidity} > {total_supply}")

    amount0 = (liquidity * balance0) // total_supply
    amount1 = (liquidity * balance1) // total_supply
    if amount0 == 0 or amount1 == 0:
        raise fail(
            ErrorCode.INSUFFICIENT_LIQUIDITY_BURNED,
            f"burn of {liquidity} shares yields ({amount0}, {amount1})",
        )
    return BurnAmounts(amount0=amount0, amount1=amount1)


def protocol_fee_liquidity(
    *,
    reserve0: int,
    reserve1: int,
    k_last: int,
    total_supply: int,
    divisor: int = PROTOCOL_FEE_DIVISOR,
) -> int:
    """
    Shares owed to the fee receiver for growth in ``sqrt(k)`` since ``k_last``.

        root_k = isqrt(reserve0 * reserve1)
        root_k_last = isqrt(k_last)
        liquidity = total_supply * (root_k - root_k_last) // (root_k * divisor + root_k_last)

    Returns 0 when there is no recorded ``k_last`` or no growth.
    """
    for name, v in (
        ("reserve0", reserve0),
        ("reserve1", reserve1),
        ("k_last", k_last),
        ("total_supply", total_supply),
        ("divisor", divisor),
    ):
        _require_int(name, v)
    if k_last == 0:
        return 0

    root_k = math.isqrt(reserve0 * reserve1)
    root_k_last = math.isqrt(k_last)
    if root_k <= root_k_last:
        return 0

    numerator = total_supply * (root_k - root_k_last)
    denominator = root_k * divisor + root_k_last
    return numerator // denominator
