# [TESTER] v1

from __future__ import annotations

from fractions import Fraction

import pytest

from pairswap.kernels.uq112x112 import (
    Q112,
    UINT32_BITS,
    UINT112_MAX,
    UINT256_MAX,
    WrappingUint,
    accumulate,
    decode,
    encode,
    price_of,
    to_fraction,
    uqdiv,
    wrapping_add,
    wrapping_sub,
)


def test_encode_decode_integer_part() -> None:
    assert encode(5) == 5 * Q112
    assert decode(encode(5)) == 5
    assert decode(price_of(10, 4)) == 2


def test_encode_rejects_values_wider_than_112_bits() -> None:
    assert encode(UINT112_MAX) == UINT112_MAX << 112
    with pytest.raises(ValueError, match="112 bits"):
        encode(UINT112_MAX + 1)


def test_uqdiv_floors_and_rejects_zero() -> None:
    assert uqdiv(encode(1), 3) == Q112 // 3
    with pytest.raises(ZeroDivisionError):
        uqdiv(encode(1), 0)


def test_price_of_is_exact_for_representable_ratios() -> None:
    assert to_fraction(price_of(1, 4)) == Fraction(1, 4)
    assert to_fraction(price_of(3, 2)) == Fraction(3, 2)


def test_wrapping_helpers_reduce_mod_width() -> None:
    assert wrapping_add(UINT256_MAX, 2) == 1
    assert wrapping_sub(1, 2) == UINT256_MAX
    assert wrapping_sub(5, (1 << 32) - 5, UINT32_BITS) == 10


def test_wrapping_uint_arithmetic() -> None:
    x = WrappingUint(250, bits=8)
    assert int(x + 10) == 4
    assert int(WrappingUint(3, bits=8) - WrappingUint(5, bits=8)) == 254
    assert int(x * 2) == 244
    assert WrappingUint.of(-1, bits=8).value == 255


def test_wrapping_uint_rejects_mismatched_operands() -> None:
    with pytest.raises(ValueError, match="width mismatch"):
        WrappingUint(1, bits=8) + WrappingUint(1, bits=16)
    with pytest.raises(TypeError):
        WrappingUint(1, bits=8) + 1.0  # type: ignore[operator]
    with pytest.raises(ValueError, match="does not fit"):
        WrappingUint(256, bits=8)


def test_accumulate_adds_price_times_elapsed() -> None:
    # reserve0 = 100, reserve1 = 20: token0 is worth 0.2 token1
    got = accumulate(0, 20, 100, 10)
    assert got == (encode(20) // 100) * 10


def test_accumulate_wraps_past_256_bits() -> None:
    start = UINT256_MAX - 5
    step = price_of(1, 1) * 3
    got = accumulate(start, 1, 1, 3)
    assert got == (start + step) % (1 << 256)
    # The difference of two readings still recovers the increment.
    assert wrapping_sub(got, start) == step
