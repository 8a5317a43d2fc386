"""
Multi-token balance tracking.

Implements TokenLedger[Address, TokenId] -> Amount, the stand-in for the
fungible-token contracts the pair holds reserves of.
"""

import logging
from typing import Any, Dict, List, Tuple

from ..errors import ErrorCode, fail


# Type aliases
Address = str  # 20-byte hex string (0x...)
TokenId = Address  # a token is identified by its contract address
Amount = int  # Non-negative integer (arbitrary precision)

ZERO_ADDRESS = "0x" + "00" * 20

logger = logging.getLogger(__name__)

LedgerSnapshot = Dict[Tuple[Address, TokenId], Amount]


class TokenLedger:
    """
    Balance table mapping (holder, token) -> amount.

    Every method takes the token first, then the holder(s). Pairs that settle
    against this ledger register themselves with `attach()` so a rollback can
    restore all of them together with the balances.

    Note: balances live in a plain dict. Callers that need a deterministic
    order must sort keys themselves.
    """

    def __init__(self):
        """Initialize empty ledger."""
        self._balances: Dict[Tuple[Address, TokenId], Amount] = {}
        self._participants: List[Any] = []

    def attach(self, participant: Any) -> None:
        """Register a pair that holds balances here. Idempotent."""
        if not any(p is participant for p in self._participants):
            self._participants.append(participant)

    @property
    def participants(self) -> Tuple[Any, ...]:
        return tuple(self._participants)

    def balance_of(self, token: TokenId, holder: Address) -> Amount:
        """Get balance for (holder, token). Returns 0 if not found."""
        return self._balances.get((holder, token), 0)

    def set(self, token: TokenId, holder: Address, amount: Amount) -> None:
        """
        Set balance for (holder, token).

        Raises:
            ValueError: If amount is negative
        """
        if amount < 0:
            raise ValueError(f"Balance cannot be negative: {amount}")
        if amount == 0:
            # Remove zero balances to keep table sparse
            self._balances.pop((holder, token), None)
        else:
            self._balances[(holder, token)] = amount

    def mint(self, token: TokenId, holder: Address, amount: Amount) -> None:
        """Create ``amount`` new units of ``token`` for ``holder``."""
        if amount < 0:
            raise ValueError(f"Mint amount must be non-negative: {amount}")
        self.set(token, holder, self.balance_of(token, holder) + amount)

    def transfer(self, token: TokenId, sender: Address, recipient: Address, amount: Amount) -> None:
        """
        Move ``amount`` of ``token`` from ``sender`` to ``recipient``.

        Raises:
            ValueError: If amount is negative
            TransferError: If the sender's balance does not cover the amount
        """
        if amount < 0:
            raise ValueError(f"Transfer amount must be non-negative: {amount}")
        current = self.balance_of(token, sender)
        if current < amount:
            raise fail(
                ErrorCode.INSUFFICIENT_BALANCE,
                f"{sender} holds {current} of {token}, needs {amount}",
            )
        self.set(token, sender, current - amount)
        self.set(token, recipient, self.balance_of(token, recipient) + amount)
        logger.debug("transfer %s %s -> %s: %d", token, sender, recipient, amount)

    def total_supply(self, token: TokenId) -> Amount:
        """Sum of every holder's balance of ``token``."""
        return sum(amount for (_, t), amount in self._balances.items() if t == token)

    def snapshot(self) -> LedgerSnapshot:
        """Copy of all balances, for restoring after a failed call."""
        return dict(self._balances)

    def restore(self, snapshot: LedgerSnapshot) -> None:
        """Replace all balances with a previous ``snapshot()``."""
        self._balances = dict(snapshot)

    def __repr__(self) -> str:
        return f"TokenLedger({len(self._balances)} entries)"
