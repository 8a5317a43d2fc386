"""
Constant-product swap kernel.

Pricing follows the Uniswap-v2 rule:
- The fee is charged on the input amount (0.3% by default).
- ``amount_out`` uses floor division, ``amount_in`` rounds up by one unit,
  so every rounding step is in favor of the pool.
- The post-trade check compares the fee-adjusted product of balances against
  the product of the previous reserves, scaled by ``fee_denominator**2`` so it
  stays in integers.

Argument types are checked with TypeError/ValueError; economic failures raise
categorized `PairError`s so they carry a named `ErrorCode`.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..errors import ErrorCode, fail


FEE_NUMERATOR = 3
FEE_DENOMINATOR = 1000


def _require_int(name: str, value: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")
    if value < 0:
        raise ValueError(f"{name} must be non-negative: {value}")


def _require_fee(fee_numerator: int, fee_denominator: int) -> None:
    _require_int("fee_numerator", fee_numerator)
    _require_int("fee_denominator", fee_denominator)
    if fee_denominator == 0:
        raise ValueError("fee_denominator must be positive")
    if fee_numerator >= fee_denominator:
        raise ValueError(f"fee must be below 100%: {fee_numerator}/{fee_denominator}")


def ceil_div(numerator: int, denominator: int) -> int:
    if denominator <= 0:
        raise ValueError("denominator must be positive")
    if numerator < 0:
        raise ValueError("numerator must be non-negative")
    return (numerator + denominator - 1) // denominator


def quote(amount_a: int, reserve_a: int, reserve_b: int) -> int:
    """Equivalent amount of B for ``amount_a`` of A at the current reserve ratio (floor)."""
    for name, v in (("amount_a", amount_a), ("reserve_a", reserve_a), ("reserve_b", reserve_b)):
        _require_int(name, v)
    if amount_a == 0:
        raise fail(ErrorCode.INSUFFICIENT_AMOUNT, "amount_a is zero")
    if reserve_a == 0 or reserve_b == 0:
        raise fail(ErrorCode.INSUFFICIENT_LIQUIDITY, "cannot quote against an empty reserve")
    return (amount_a * reserve_b) // reserve_a


def get_amount_out(
    amount_in: int,
    reserve_in: int,
    reserve_out: int,
    *,
    fee_numerator: int = FEE_NUMERATOR,
    fee_denominator: int = FEE_DENOMINATOR,
) -> int:
    """
    Maximum output for an exact input.

        amount_in_with_fee = amount_in * (D - N)
        amount_out = amount_in_with_fee * reserve_out // (reserve_in * D + amount_in_with_fee)
    """
    for name, v in (("amount_in", amount_in), ("reserve_in", reserve_in), ("reserve_out", reserve_out)):
        _require_int(name, v)
    _require_fee(fee_numerator, fee_denominator)
    if amount_in == 0:
        raise fail(ErrorCode.INSUFFICIENT_INPUT_AMOUNT, "amount_in is zero")
    if reserve_in == 0 or reserve_out == 0:
        raise fail(ErrorCode.INSUFFICIENT_LIQUIDITY, "cannot swap against an empty reserve")

    amount_in_with_fee = amount_in * (fee_denominator - fee_numerator)
    numerator = amount_in_with_fee * reserve_out
    denominator = reserve_in * fee_denominator + amount_in_with_fee
    return numerator // denominator


def get_amount_in(
    amount_out: int,
    reserve_in: int,
    reserve_out: int,
    *,
    fee_numerator: int = FEE_NUMERATOR,
    fee_denominator: int = FEE_DENOMINATOR,
) -> int:
    """
    Minimum input that yields at least ``amount_out``.

        amount_in = reserve_in * amount_out * D // ((reserve_out - amount_out) * (D - N)) + 1
    """
    for name, v in (("amount_out", amount_out), ("reserve_in", reserve_in), ("reserve_out", reserve_out)):
        _require_int(name, v)
    _require_fee(fee_numerator, fee_denominator)
    if amount_out == 0:
        raise fail(ErrorCode.INSUFFICIENT_OUTPUT_AMOUNT, "amount_out is zero")
    if reserve_in == 0 or reserve_out == 0:
        raise fail(ErrorCode.INSUFFICIENT_LIQUIDITY, "cannot swap against an empty reserve")
    if amount_out >= reserve_out:
        raise fail(
            ErrorCode.INSUFFICIENT_LIQUIDITY,
            f"amount_out ({amount_out}) must be below reserve_out ({reserve_out})",
        )

    numerator = reserve_in * amount_out * fee_denominator
    denominator = (reserve_out - amount_out) * (fee_denominator - fee_numerator)
    return numerator // denominator + 1


def flash_fee(amount: int, *, fee_numerator: int = FEE_NUMERATOR, fee_denominator: int = FEE_DENOMINATOR) -> int:
    """Flash-loan fee, ``ceil(amount * N / D)``."""
    _require_int("amount", amount)
    _require_fee(fee_numerator, fee_denominator)
    return ceil_div(amount * fee_numerator, fee_denominator)


@dataclass(frozen=True)
class SwapInputs:
    """Input amounts inferred from post-transfer balances."""

    amount0_in: int
    amount1_in: int


def infer_inputs(
    *,
    balance0: int,
    balance1: int,
    reserve0: int,
    reserve1: int,
    amount0_out: int,
    amount1_out: int,
) -> SwapInputs:
    """
    Amounts paid in, given balances read *after* the optimistic transfer out.

    ``amountX_in = balanceX - (reserveX - amountX_out)`` when positive, else 0.
    """
    for name, v in (
        ("balance0", balance0),
        ("balance1", balance1),
        ("reserve0", reserve0),
        ("reserve1", reserve1),
        ("amount0_out", amount0_out),
        ("amount1_out", amount1_out),
    ):
        _require_int(name, v)
    floor0 = reserve0 - amount0_out
    floor1 = reserve1 - amount1_out
    amount0_in = balance0 - floor0 if balance0 > floor0 else 0
    amount1_in = balance1 - floor1 if balance1 > floor1 else 0
    return SwapInputs(amount0_in=amount0_in, amount1_in=amount1_in)


def fee_adjusted_k_holds(
    *,
    balance0: int,
    balance1: int,
    amount0_in: int,
    amount1_in: int,
    reserve0: int,
    reserve1: int,
    fee_numerator: int = FEE_NUMERATOR,
    fee_denominator: int = FEE_DENOMINATOR,
) -> bool:
    """
    True iff the fee-adjusted product of balances did not drop below the old k.

        (b0*D - a0in*N) * (b1*D - a1in*N) >= r0 * r1 * D**2
    """
    for name, v in (
        ("balance0", balance0),
        ("balance1", balance1),
        ("amount0_in", amount0_in),
        ("amount1_in", amount1_in),
        ("reserve0", reserve0),
        ("reserve1", reserve1),
    ):
        _require_int(name, v)
    _require_fee(fee_numerator, fee_denominator)
    balance0_adjusted = balance0 * fee_denominator - amount0_in * fee_numerator
    balance1_adjusted = balance1 * fee_denominator - amount1_in * fee_numerator
    return balance0_adjusted * balance1_adjusted >= reserve0 * reserve1 * fee_denominator**2
