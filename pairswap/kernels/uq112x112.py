"""
UQ112x112 fixed-point prices and fixed-width wrapping integers.

Prices are stored as unsigned fixed point with 112 integer bits and 112
fractional bits (a 224-bit value). The cumulative price accumulators are
256-bit and are *expected* to overflow: a consumer must take the difference of
two readings mod 2**256 (see `wrapping_sub`) and never compare absolute
magnitudes. Block timestamps are 32-bit and wrap the same way.
"""

from __future__ import annotations

from dataclasses import dataclass
from fractions import Fraction


RESOLUTION = 112
Q112 = 1 << RESOLUTION

UINT32_BITS = 32
UINT112_BITS = 112
UINT256_BITS = 256

UINT32_MAX = (1 << UINT32_BITS) - 1
UINT112_MAX = (1 << UINT112_BITS) - 1
UINT256_MAX = (1 << UINT256_BITS) - 1


def _require_uint(name: str, value: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")
    if value < 0:
        raise ValueError(f"{name} must be non-negative: {value}")


def _mask(bits: int) -> int:
    if bits <= 0:
        raise ValueError(f"bits must be positive: {bits}")
    return (1 << bits) - 1


def wrapping_add(a: int, b: int, bits: int = UINT256_BITS) -> int:
    """Return ``(a + b) mod 2**bits``."""
    return (a + b) & _mask(bits)


def wrapping_sub(a: int, b: int, bits: int = UINT256_BITS) -> int:
    """Return ``(a - b) mod 2**bits``. Use this to difference two accumulator readings."""
    return (a - b) & _mask(bits)


def wrapping_mul(a: int, b: int, bits: int = UINT256_BITS) -> int:
    """Return ``(a * b) mod 2**bits``."""
    return (a * b) & _mask(bits)


@dataclass(frozen=True)
class WrappingUint:
    """
    Unsigned integer of a fixed bit width with modular arithmetic.

    Arithmetic between two values requires equal widths; plain ints are
    accepted on the right-hand side and reduced into the domain.
    """

    value: int
    bits: int = UINT256_BITS

    def __post_init__(self) -> None:
        _require_uint("value", self.value)
        if self.value > _mask(self.bits):
            raise ValueError(f"value does not fit in {self.bits} bits: {self.value}")

    @classmethod
    def of(cls, value: int, bits: int = UINT256_BITS) -> "WrappingUint":
        """Reduce an arbitrary int into the domain."""
        return cls(value & _mask(bits), bits)

    def _other(self, other: "WrappingUint | int") -> int:
        if isinstance(other, WrappingUint):
            if other.bits != self.bits:
                raise ValueError(f"width mismatch: {self.bits} vs {other.bits}")
            return other.value
        if not isinstance(other, int) or isinstance(other, bool):
            raise TypeError(f"unsupported operand: {type(other).__name__}")
        return other

    def __add__(self, other: "WrappingUint | int") -> "WrappingUint":
        return WrappingUint(wrapping_add(self.value, self._other(other), self.bits), self.bits)

    def __sub__(self, other: "WrappingUint | int") -> "WrappingUint":
        return WrappingUint(wrapping_sub(self.value, self._other(other), self.bits), self.bits)

    def __mul__(self, other: "WrappingUint | int") -> "WrappingUint":
        return WrappingUint(wrapping_mul(self.value, self._other(other), self.bits), self.bits)

    def __int__(self) -> int:
        return self.value


def encode(y: int) -> int:
    """Encode an integer as UQ112x112 (``y * 2**112``). ``y`` must fit in 112 bits."""
    _require_uint("y", y)
    if y > UINT112_MAX:
        raise ValueError(f"value does not fit in 112 bits: {y}")
    return y << RESOLUTION


def uqdiv(x: int, y: int) -> int:
    """Divide a UQ112x112 by a uint112, returning UQ112x112 (floor)."""
    _require_uint("x", x)
    _require_uint("y", y)
    if y == 0:
        raise ZeroDivisionError("uqdiv by zero")
    return x // y


def decode(x: int) -> int:
    """Integer part of a UQ112x112 value."""
    _require_uint("x", x)
    return x >> RESOLUTION


def to_fraction(x: int) -> Fraction:
    """Exact rational value of a UQ112x112."""
    _require_uint("x", x)
    return Fraction(x, Q112)


def price_of(reserve_numerator: int, reserve_denominator: int) -> int:
    """Instantaneous price ``numerator / denominator`` as UQ112x112."""
    return uqdiv(encode(reserve_numerator), reserve_denominator)


def accumulate(cumulative: int, reserve_numerator: int, reserve_denominator: int, elapsed: int) -> int:
    """
    Fold ``price * elapsed`` into a 256-bit cumulative price, wrapping on overflow.

    ``cumulative`` is a previous accumulator reading, ``elapsed`` the seconds
    (already reduced mod 2**32) the price was in effect.
    """
    _require_uint("cumulative", cumulative)
    _require_uint("elapsed", elapsed)
    return wrapping_add(cumulative, wrapping_mul(price_of(reserve_numerator, reserve_denominator), elapsed))
