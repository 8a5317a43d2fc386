"""Pair controller.

`Pair` is the only writer of a pair's `PairState`. Every mutating entry point:

1. Fails with ``Reentrant`` if another entry point is still running.
2. Snapshots the token ledger and the state of every pair attached to it,
   then sets the latch.
3. Checks the deadline (where the entry point takes one) before mutating.
4. Delegates to `core.liquidity`, `core.swap` or `core.flash`.
5. On any exception, `KeyboardInterrupt` included, restores the snapshots and
   re-raises. The latch is cleared on every exit path.

The latch is held while a flash-loan callback runs, so a callback that calls
back into any guarded entry point gets ``Reentrant``.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Iterator, Optional, Tuple

from ..config import PairConfig
from ..errors import ErrorCode, PairError, fail
from ..kernels.cpmm_swap import get_amount_in, get_amount_out
from ..kernels.lp_math import optimal_liquidity
from ..state.balances import ZERO_ADDRESS, Address, Amount, TokenId, TokenLedger
from ..state.clock import BlockClock
from ..state.identity import PairIdentity, initialize_identity
from ..state.reserves import ReservePair
from . import flash as flash_ops
from . import liquidity as liquidity_ops
from . import swap as swap_ops
from .accounting import commit_reserves, pair_balances
from .types import CallResult, EventKind, PairEvent, PairState

logger = logging.getLogger(__name__)

# Names accepted by `Pair.try_call()`.
ENTRY_POINTS = frozenset(
    {
        "initialize",
        "sync",
        "skim",
        "mint",
        "burn",
        "swap",
        "add_liquidity",
        "remove_liquidity",
        "swap_exact_tokens_for_tokens",
        "swap_tokens_for_exact_tokens",
        "flash_loan",
        "transfer",
        "approve",
        "transfer_from",
    }
)


class Pair:
    """A two-token constant-product pair with a TWAP oracle and flash loans."""

    def __init__(
        self,
        address: Address,
        tokens: TokenLedger,
        clock: BlockClock,
        *,
        factory: Address = ZERO_ADDRESS,
        config: Optional[PairConfig] = None,
    ) -> None:
        self._tokens = tokens
        self._clock = clock
        self._config = config if config is not None else PairConfig()
        self._state = PairState(identity=PairIdentity(address=address, factory=factory))
        tokens.attach(self)

    # -- read-only views -----------------------------------------------------

    @property
    def address(self) -> Address:
        return self._state.identity.address

    @property
    def factory(self) -> Address:
        return self._state.identity.factory

    @property
    def token0(self) -> Optional[TokenId]:
        return self._state.identity.token0

    @property
    def token1(self) -> Optional[TokenId]:
        return self._state.identity.token1

    @property
    def config(self) -> PairConfig:
        return self._config

    @property
    def reserves(self) -> ReservePair:
        return self._state.reserves

    @property
    def price0_cumulative_last(self) -> int:
        return self._state.reserves.price0_cumulative_last

    @property
    def price1_cumulative_last(self) -> int:
        return self._state.reserves.price1_cumulative_last

    @property
    def k_last(self) -> int:
        return self._state.reserves.k_last

    @property
    def total_supply(self) -> Amount:
        return self._state.shares.total_supply

    @property
    def locked(self) -> bool:
        return self._state.locked

    @property
    def events(self) -> Tuple[PairEvent, ...]:
        return tuple(self._state.events)

    def get_reserves(self) -> Tuple[Amount, Amount, int]:
        """``(reserve0, reserve1, block_timestamp_last)``; never fails."""
        return self._state.reserves.get_reserves()

    def balance_of(self, holder: Address) -> Amount:
        return self._state.shares.balance_of(holder)

    def allowance(self, owner: Address, spender: Address) -> Amount:
        return self._state.shares.allowance(owner, spender)

    def snapshot(self) -> dict:
        """The persisted state tuple as a plain dict."""
        return self._state.to_dict()

    def verify_share_conservation(self) -> bool:
        return self._state.shares.verify_conservation()

    def get_amount_out(self, amount_in: Amount, token_in: TokenId, token_out: TokenId) -> Amount:
        reserve_in, reserve_out = self._oriented_reserves(token_in, token_out)
        return get_amount_out(
            amount_in,
            reserve_in,
            reserve_out,
            fee_numerator=self._config.fee_numerator,
            fee_denominator=self._config.fee_denominator,
        )

    def get_amount_in(self, amount_out: Amount, token_in: TokenId, token_out: TokenId) -> Amount:
        reserve_in, reserve_out = self._oriented_reserves(token_in, token_out)
        return get_amount_in(
            amount_out,
            reserve_in,
            reserve_out,
            fee_numerator=self._config.fee_numerator,
            fee_denominator=self._config.fee_denominator,
        )

    def max_flash_loan(self, token: TokenId) -> Amount:
        return flash_ops.max_flash_loan(self._state, token)

    def flash_fee(self, token: TokenId, amount: Amount) -> Amount:
        return flash_ops.flash_fee(self._state, self._config, token, amount)

    # -- call boundary --------------------------------------------------------

    @contextmanager
    def _transaction(self, name: str, deadline: Optional[int] = None) -> Iterator[PairState]:
        if self._state.locked:
            raise fail(ErrorCode.REENTRANT, f"{name} called while another call is in progress")

        # Every pair on the ledger, since a callback may have traded on them too.
        saved_pairs = [(pair, pair._state.clone()) for pair in self._tokens.participants]
        saved_tokens = self._tokens.snapshot()
        self._state.locked = True
        try:
            if deadline is not None and self._clock.now() > deadline:
                raise fail(
                    ErrorCode.TRANSACTION_EXPIRED,
                    f"deadline {deadline} passed at {self._clock.now()}",
                )
            yield self._state
        except BaseException as exc:
            for pair, saved in saved_pairs:
                pair._state.restore(saved)
            self._tokens.restore(saved_tokens)
            logger.warning("%s rolled back: %r", name, exc)
            raise
        finally:
            self._state.locked = False

    def _orient(self, token_a: TokenId, token_b: TokenId) -> bool:
        """True if ``token_a`` is token0. ``InvalidPath`` unless {a, b} are the pair's tokens."""
        token0, token1 = self._state.identity.tokens()
        if (token_a, token_b) == (token0, token1):
            return True
        if (token_a, token_b) == (token1, token0):
            return False
        raise fail(ErrorCode.INVALID_PATH, f"({token_a}, {token_b}) is not ({token0}, {token1})")

    def _oriented_reserves(self, token_a: TokenId, token_b: TokenId) -> Tuple[Amount, Amount]:
        reserve0, reserve1, _ = self._state.reserves.get_reserves()
        return (reserve0, reserve1) if self._orient(token_a, token_b) else (reserve1, reserve0)

    # -- pair primitives ------------------------------------------------------

    def initialize(self, token_a: TokenId, token_b: TokenId) -> None:
        """Fix the traded tokens. Callable exactly once."""
        with self._transaction("initialize") as state:
            state.identity = initialize_identity(state.identity, token_a, token_b)
            state.emit(EventKind.INITIALIZED, token0=state.identity.token0, token1=state.identity.token1)
        logger.info("pair %s initialized: %s / %s", self.address, self.token0, self.token1)

    def sync(self) -> None:
        """Force reserves to match the pair's actual balances. No-op before `initialize`."""
        with self._transaction("sync") as state:
            if not state.identity.initialized:
                return
            balance0, balance1 = pair_balances(state, self._tokens)
            commit_reserves(state, balance0=balance0, balance1=balance1, now=self._clock.now())

    def skim(self, to: Address) -> None:
        """Send any balance above the reserves to ``to``; reserves are unchanged."""
        with self._transaction("skim") as state:
            token0, token1 = state.identity.tokens()
            balance0, balance1 = pair_balances(state, self._tokens)
            reserve0, reserve1, _ = state.reserves.get_reserves()
            self._tokens.transfer(token0, self.address, to, balance0 - reserve0)
            self._tokens.transfer(token1, self.address, to, balance1 - reserve1)

    def mint(self, to: Address, sender: Optional[Address] = None) -> Amount:
        """Mint shares for tokens already transferred to the pair."""
        with self._transaction("mint") as state:
            return liquidity_ops.mint(
                state, self._tokens, self._config, to=to, now=self._clock.now(), sender=sender
            )

    def burn(self, to: Address, sender: Optional[Address] = None) -> Tuple[Amount, Amount]:
        """Burn shares already transferred to the pair."""
        with self._transaction("burn") as state:
            return liquidity_ops.burn(
                state, self._tokens, self._config, to=to, now=self._clock.now(), sender=sender
            )

    def swap(
        self,
        amount0_out: Amount,
        amount1_out: Amount,
        to: Address,
        sender: Optional[Address] = None,
    ) -> None:
        """Pay out and verify that input already sent to the pair covers it."""
        with self._transaction("swap") as state:
            swap_ops.swap(
                state,
                self._tokens,
                self._config,
                amount0_out=amount0_out,
                amount1_out=amount1_out,
                to=to,
                now=self._clock.now(),
                sender=sender,
            )

    def flash_loan(
        self,
        receiver: Address,
        token: TokenId,
        amount: Amount,
        callback: flash_ops.FlashCallback,
        data: bytes = b"",
    ) -> Amount:
        """Lend ``amount`` of ``token`` for the duration of ``callback``; returns the fee."""
        with self._transaction("flash_loan") as state:
            return flash_ops.flash_loan(
                state,
                self._tokens,
                self._config,
                receiver=receiver,
                token=token,
                amount=amount,
                callback=callback,
                data=data,
                now=self._clock.now(),
            )

    # -- deadline-guarded orchestration ---------------------------------------

    def add_liquidity(
        self,
        sender: Address,
        token_a: TokenId,
        token_b: TokenId,
        amount_a_desired: Amount,
        amount_b_desired: Amount,
        amount_a_min: Amount,
        amount_b_min: Amount,
        to: Address,
        deadline: int,
    ) -> Tuple[Amount, Amount, Amount]:
        """
        Deposit at the current ratio and mint shares to ``to``.

        Returns:
            ``(amount_a, amount_b, liquidity)``

        Raises:
            PreconditionError: TransactionExpired, InvalidPath
            SlippageError: InsufficientAAmount / InsufficientBAmount
        """
        with self._transaction("add_liquidity", deadline) as state:
            reserve_a, reserve_b = self._oriented_reserves(token_a, token_b)
            amounts = optimal_liquidity(
                reserve_a=reserve_a,
                reserve_b=reserve_b,
                amount_a_desired=amount_a_desired,
                amount_b_desired=amount_b_desired,
                amount_a_min=amount_a_min,
                amount_b_min=amount_b_min,
            )
            self._tokens.transfer(token_a, sender, self.address, amounts.amount_a)
            self._tokens.transfer(token_b, sender, self.address, amounts.amount_b)
            liquidity = liquidity_ops.mint(
                state, self._tokens, self._config, to=to, now=self._clock.now(), sender=sender
            )
            return amounts.amount_a, amounts.amount_b, liquidity

    def remove_liquidity(
        self,
        sender: Address,
        token_a: TokenId,
        token_b: TokenId,
        liquidity: Amount,
        amount_a_min: Amount,
        amount_b_min: Amount,
        to: Address,
        deadline: int,
    ) -> Tuple[Amount, Amount]:
        """
        Return ``liquidity`` of ``sender``'s shares for the underlying tokens.

        ``sender`` must have approved the pair to move the shares.

        Returns:
            ``(amount_a, amount_b)``

        Raises:
            PreconditionError: TransactionExpired, InvalidPath
            TransferError: InsufficientAllowance / InsufficientShareBalance
            SlippageError: InsufficientAAmount / InsufficientBAmount
        """
        with self._transaction("remove_liquidity", deadline) as state:
            a_is_token0 = self._orient(token_a, token_b)
            state.shares.transfer_from(self.address, sender, self.address, liquidity)
            state.emit(EventKind.TRANSFER, sender=sender, recipient=self.address, amount=liquidity)
            amount0, amount1 = liquidity_ops.burn(
                state, self._tokens, self._config, to=to, now=self._clock.now(), sender=sender
            )
            amount_a, amount_b = (amount0, amount1) if a_is_token0 else (amount1, amount0)
            if amount_a < amount_a_min:
                raise fail(ErrorCode.INSUFFICIENT_A_AMOUNT, f"amount_a ({amount_a}) < amount_a_min ({amount_a_min})")
            if amount_b < amount_b_min:
                raise fail(ErrorCode.INSUFFICIENT_B_AMOUNT, f"amount_b ({amount_b}) < amount_b_min ({amount_b_min})")
            return amount_a, amount_b

    def swap_exact_tokens_for_tokens(
        self,
        sender: Address,
        amount_in: Amount,
        amount_out_min: Amount,
        token_in: TokenId,
        token_out: TokenId,
        to: Address,
        deadline: int,
    ) -> Amount:
        """
        Sell exactly ``amount_in`` of ``token_in``.

        Raises:
            PreconditionError: TransactionExpired, InvalidPath
            SlippageError: InsufficientOutputAmount if the output is below ``amount_out_min``
        """
        with self._transaction("swap_exact_tokens_for_tokens", deadline) as state:
            amount_out = self.get_amount_out(amount_in, token_in, token_out)
            if amount_out < amount_out_min:
                raise fail(
                    ErrorCode.INSUFFICIENT_OUTPUT_AMOUNT,
                    f"amount_out ({amount_out}) < amount_out_min ({amount_out_min})",
                )
            self._swap_through(state, sender, amount_in, amount_out, token_in, token_out, to)
            return amount_out

    def swap_tokens_for_exact_tokens(
        self,
        sender: Address,
        amount_out: Amount,
        amount_in_max: Amount,
        token_in: TokenId,
        token_out: TokenId,
        to: Address,
        deadline: int,
    ) -> Amount:
        """
        Buy exactly ``amount_out`` of ``token_out``.

        Raises:
            PreconditionError: TransactionExpired, InvalidPath
            SlippageError: ExcessiveInputAmount if the input exceeds ``amount_in_max``
        """
        with self._transaction("swap_tokens_for_exact_tokens", deadline) as state:
            amount_in = self.get_amount_in(amount_out, token_in, token_out)
            if amount_in > amount_in_max:
                raise fail(
                    ErrorCode.EXCESSIVE_INPUT_AMOUNT,
                    f"amount_in ({amount_in}) > amount_in_max ({amount_in_max})",
                )
            self._swap_through(state, sender, amount_in, amount_out, token_in, token_out, to)
            return amount_in

    def _swap_through(
        self,
        state: PairState,
        sender: Address,
        amount_in: Amount,
        amount_out: Amount,
        token_in: TokenId,
        token_out: TokenId,
        to: Address,
    ) -> None:
        in_is_token0 = self._orient(token_in, token_out)
        self._tokens.transfer(token_in, sender, self.address, amount_in)
        amount0_out, amount1_out = (0, amount_out) if in_is_token0 else (amount_out, 0)
        swap_ops.swap(
            state,
            self._tokens,
            self._config,
            amount0_out=amount0_out,
            amount1_out=amount1_out,
            to=to,
            now=self._clock.now(),
            sender=sender,
        )

    # -- share transfers -----------------------------------------------------

    def transfer(self, sender: Address, recipient: Address, amount: Amount) -> None:
        self._state.shares.transfer(sender, recipient, amount)
        self._state.emit(EventKind.TRANSFER, sender=sender, recipient=recipient, amount=amount)

    def approve(self, owner: Address, spender: Address, amount: Amount) -> None:
        self._state.shares.approve(owner, spender, amount)
        self._state.emit(EventKind.APPROVAL, owner=owner, spender=spender, amount=amount)

    def transfer_from(self, spender: Address, owner: Address, recipient: Address, amount: Amount) -> None:
        self._state.shares.transfer_from(spender, owner, recipient, amount)
        self._state.emit(EventKind.TRANSFER, sender=owner, recipient=recipient, amount=amount)

    # -- tagged results -------------------------------------------------------

    def try_call(self, name: str, *args: Any, **kwargs: Any) -> CallResult:
        """
        Run entry point ``name`` and return a `CallResult` instead of raising.

        Only `PairError`s become ``ok=False`` results; anything else is a bug
        in the caller and propagates.
        """
        if name not in ENTRY_POINTS:
            raise AttributeError(f"unknown entry point: {name}")
        try:
            value = getattr(self, name)(*args, **kwargs)
        except PairError as exc:
            return CallResult(ok=False, error=exc.code, message=exc.message)
        return CallResult(ok=True, value=value)

    def __repr__(self) -> str:
        reserve0, reserve1, ts = self.get_reserves()
        return f"Pair({self.address}, reserves=({reserve0}, {reserve1}), ts={ts}, supply={self.total_supply})"
