"""
Pair identity: its own address, the factory, and the canonical token order.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional, Tuple

from ..errors import ErrorCode, fail
from .balances import ZERO_ADDRESS, Address, TokenId


def address_value(address: Address) -> int:
    """Numeric value of a 0x-prefixed hex address."""
    if not isinstance(address, str):
        raise TypeError("address must be a string")
    try:
        return int(address, 16)
    except ValueError as exc:
        raise ValueError(f"invalid hex address: {address!r}") from exc


def sort_tokens(token_a: TokenId, token_b: TokenId) -> Tuple[TokenId, TokenId]:
    """
    Order two tokens by numeric address value.

    A given unordered pair always maps to the same ``(token0, token1)``.
    """
    value_a = address_value(token_a)
    value_b = address_value(token_b)
    if value_a == value_b:
        raise fail(ErrorCode.IDENTICAL_ADDRESSES, f"{token_a} == {token_b}")
    token0, token1 = (token_a, token_b) if value_a < value_b else (token_b, token_a)
    if address_value(token0) == 0:
        raise fail(ErrorCode.ZERO_ADDRESS, "token address is zero")
    return token0, token1


@dataclass(frozen=True)
class PairIdentity:
    """Addresses that name the pair. ``initialized`` is a one-way latch."""

    address: Address
    factory: Address = ZERO_ADDRESS
    token0: Optional[TokenId] = None
    token1: Optional[TokenId] = None
    initialized: bool = False

    def __post_init__(self) -> None:
        address_value(self.address)
        address_value(self.factory)
        if self.initialized and (self.token0 is None or self.token1 is None):
            raise ValueError("an initialized pair must name both tokens")

    def tokens(self) -> Tuple[TokenId, TokenId]:
        if not self.initialized or self.token0 is None or self.token1 is None:
            raise fail(ErrorCode.NOT_INITIALIZED, "pair has no tokens yet")
        return self.token0, self.token1

    def index_of(self, token: TokenId) -> int:
        """0 for token0, 1 for token1, ``UnsupportedToken`` otherwise."""
        token0, token1 = self.tokens()
        if token == token0:
            return 0
        if token == token1:
            return 1
        raise fail(ErrorCode.UNSUPPORTED_TOKEN, f"{token} is not traded by this pair")


def initialize_identity(identity: PairIdentity, token_a: TokenId, token_b: TokenId) -> PairIdentity:
    """Fix the token pair. Fails with ``AlreadyInitialized`` on a second call."""
    if identity.initialized:
        raise fail(ErrorCode.ALREADY_INITIALIZED, "pair is already initialized")
    token0, token1 = sort_tokens(token_a, token_b)
    return replace(identity, token0=token0, token1=token1, initialized=True)
