"""
Pair configuration.

Defaults reproduce the canonical pair: 0.3% swap and flash fee, 1000 locked
shares, protocol fee off. A YAML file may override any field:

    fee_numerator: 3
    fee_denominator: 1000
    minimum_liquidity: 1000
    fee_to: "0x00000000000000000000000000000000000000fe"
    protocol_fee_divisor: 5
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Mapping, Optional, Union

import yaml

from .kernels.cpmm_swap import FEE_DENOMINATOR, FEE_NUMERATOR
from .kernels.lp_math import MINIMUM_LIQUIDITY, PROTOCOL_FEE_DIVISOR
from .state.balances import ZERO_ADDRESS, Address
from .state.identity import address_value


@dataclass(frozen=True)
class PairConfig:
    """Runtime parameters of one pair."""

    fee_numerator: int = FEE_NUMERATOR
    fee_denominator: int = FEE_DENOMINATOR
    minimum_liquidity: int = MINIMUM_LIQUIDITY
    fee_to: Optional[Address] = None
    protocol_fee_divisor: int = PROTOCOL_FEE_DIVISOR

    def __post_init__(self) -> None:
        for name in ("fee_numerator", "fee_denominator", "minimum_liquidity", "protocol_fee_divisor"):
            v = getattr(self, name)
            if not isinstance(v, int) or isinstance(v, bool):
                raise TypeError(f"{name} must be an int")
            if v < 0:
                raise ValueError(f"{name} must be non-negative: {v}")
        if self.fee_denominator == 0:
            raise ValueError("fee_denominator must be positive")
        if self.fee_numerator >= self.fee_denominator:
            raise ValueError(f"fee must be below 100%: {self.fee_numerator}/{self.fee_denominator}")
        if self.minimum_liquidity == 0:
            raise ValueError("minimum_liquidity must be positive")
        if self.protocol_fee_divisor == 0:
            raise ValueError("protocol_fee_divisor must be positive")
        if self.fee_to is not None:
            address_value(self.fee_to)

    @property
    def fee_on(self) -> bool:
        return self.fee_to is not None and self.fee_to != ZERO_ADDRESS


def config_from_mapping(obj: Mapping[str, Any]) -> PairConfig:
    """Build a `PairConfig` from a mapping, rejecting unknown keys."""
    if not isinstance(obj, Mapping):
        raise TypeError("pair config must be a mapping")
    known = {f.name for f in fields(PairConfig)}
    unknown = sorted(set(obj) - known)
    if unknown:
        raise ValueError(f"unknown pair config keys: {unknown}")
    return PairConfig(**dict(obj))


def load_config(path: Union[str, Path]) -> PairConfig:
    """Read a YAML pair config. An empty file yields the defaults."""
    obj = yaml.safe_load(Path(path).read_text(encoding="utf-8"))
    if obj is None:
        return PairConfig()
    return config_from_mapping(obj)
