"""
LP share balance tracking for the pair.

Shares are a fungible claim on the pair's reserves. The ledger keeps
``total_supply == sum(balances)`` on every operation; the permanently locked
minimum liquidity sits at the zero address, which can never send.
"""

from __future__ import annotations

from typing import Dict, Tuple

from ..errors import ErrorCode, fail
from .balances import ZERO_ADDRESS, Address, Amount

MAX_ALLOWANCE = (1 << 256) - 1


class LiquidityLedger:
    """
    Share table mapping holder -> amount, plus total supply and allowances.

    Notes:
    - Balances are always non-negative.
    - Zero balances are omitted to keep the table sparse.
    - An allowance of ``MAX_ALLOWANCE`` is treated as infinite.
    """

    def __init__(self) -> None:
        self._balances: Dict[Address, Amount] = {}
        self._allowances: Dict[Tuple[Address, Address], Amount] = {}
        self._total_supply: Amount = 0

    @property
    def total_supply(self) -> Amount:
        return self._total_supply

    def balance_of(self, holder: Address) -> Amount:
        """Get share balance for ``holder``. Returns 0 if not found."""
        return self._balances.get(holder, 0)

    def allowance(self, owner: Address, spender: Address) -> Amount:
        return self._allowances.get((owner, spender), 0)

    def _set(self, holder: Address, amount: Amount) -> None:
        if amount < 0:
            raise ValueError(f"Share balance cannot be negative: {amount}")
        if amount == 0:
            self._balances.pop(holder, None)
        else:
            self._balances[holder] = amount

    def mint(self, to: Address, amount: Amount) -> None:
        """Create ``amount`` shares for ``to``."""
        if amount < 0:
            raise ValueError(f"Mint amount must be non-negative: {amount}")
        self._set(to, self.balance_of(to) + amount)
        self._total_supply += amount

    def burn(self, holder: Address, amount: Amount) -> None:
        """Destroy ``amount`` of ``holder``'s shares."""
        if amount < 0:
            raise ValueError(f"Burn amount must be non-negative: {amount}")
        current = self.balance_of(holder)
        if current < amount:
            raise fail(
                ErrorCode.INSUFFICIENT_SHARE_BALANCE,
                f"{holder} holds {current} shares, cannot burn {amount}",
            )
        self._set(holder, current - amount)
        self._total_supply -= amount

    def transfer(self, sender: Address, recipient: Address, amount: Amount) -> None:
        """Move shares between holders. The zero address can neither send nor receive."""
        if amount < 0:
            raise ValueError(f"Transfer amount must be non-negative: {amount}")
        if sender == ZERO_ADDRESS or recipient == ZERO_ADDRESS:
            raise fail(ErrorCode.ZERO_ADDRESS, "share transfer involving the zero address")
        current = self.balance_of(sender)
        if current < amount:
            raise fail(
                ErrorCode.INSUFFICIENT_SHARE_BALANCE,
                f"{sender} holds {current} shares, cannot send {amount}",
            )
        self._set(sender, current - amount)
        self._set(recipient, self.balance_of(recipient) + amount)

    def approve(self, owner: Address, spender: Address, amount: Amount) -> None:
        if amount < 0:
            raise ValueError(f"Allowance cannot be negative: {amount}")
        if amount == 0:
            self._allowances.pop((owner, spender), None)
        else:
            self._allowances[(owner, spender)] = amount

    def transfer_from(self, spender: Address, owner: Address, recipient: Address, amount: Amount) -> None:
        """Move ``owner``'s shares on behalf of ``spender``, spending allowance."""
        allowed = self.allowance(owner, spender)
        if allowed != MAX_ALLOWANCE:
            if allowed < amount:
                raise fail(
                    ErrorCode.INSUFFICIENT_ALLOWANCE,
                    f"{spender} may move {allowed} of {owner}'s shares, asked {amount}",
                )
            self.approve(owner, spender, allowed - amount)
        self.transfer(owner, recipient, amount)

    def copy(self) -> "LiquidityLedger":
        other = LiquidityLedger()
        other._balances = dict(self._balances)
        other._allowances = dict(self._allowances)
        other._total_supply = self._total_supply
        return other

    def get_all_balances(self) -> Dict[Address, Amount]:
        """Return all share balances."""
        return dict(self._balances)

    def get_all_allowances(self) -> Dict[Tuple[Address, Address], Amount]:
        return dict(self._allowances)

    def verify_conservation(self) -> bool:
        """True iff total supply equals the sum of balances and none is negative."""
        return all(a >= 0 for a in self._balances.values()) and sum(self._balances.values()) == self._total_supply

    def __repr__(self) -> str:
        return f"LiquidityLedger({len(self._balances)} holders, supply={self._total_supply})"
