# [TESTER] v1

from __future__ import annotations

import pytest

from conftest import OWNER, PAIR_ADDRESS, TOKEN_A, TOKEN_B, USER0, USER1, WEI
from pairswap import ErrorCode, EventKind, InvariantError, Pair, PreconditionError, TokenLedger

FOREIGN = "0x" + "33" * 20
OTHER_PAIR = "0x" + "98" * 20


@pytest.fixture
def borrower(ledger: TokenLedger) -> str:
    """USER1 starts with enough of each token to cover fees."""
    ledger.mint(TOKEN_A, USER1, 1 * WEI)
    ledger.mint(TOKEN_B, USER1, 1 * WEI)
    return USER1


def _repay(ledger: TokenLedger, receiver: str, extra: int = 0):
    def callback(token: str, amount: int, fee: int, data: bytes) -> None:
        ledger.transfer(token, receiver, PAIR_ADDRESS, amount + fee + extra)

    return callback


def test_fee_quote_rounds_up(seeded_pair: Pair) -> None:
    assert seeded_pair.flash_fee(TOKEN_A, 50 * WEI) == 15 * 10**16
    assert seeded_pair.flash_fee(TOKEN_B, 5 * WEI) == 15 * 10**15
    assert seeded_pair.flash_fee(TOKEN_A, 1) == 1


def test_max_flash_loan_is_the_reserve(seeded_pair: Pair) -> None:
    assert seeded_pair.max_flash_loan(TOKEN_A) == 100 * WEI
    assert seeded_pair.max_flash_loan(TOKEN_B) == 10 * WEI
    assert seeded_pair.max_flash_loan(FOREIGN) == 0


def test_repaid_loan_grows_reserve_by_fee(seeded_pair: Pair, ledger: TokenLedger, borrower: str) -> None:
    seen = []

    def callback(token: str, amount: int, fee: int, data: bytes) -> None:
        seen.append((token, amount, fee, data))
        assert ledger.balance_of(token, borrower) == 1 * WEI + amount
        ledger.transfer(token, borrower, PAIR_ADDRESS, amount + fee)

    fee = seeded_pair.flash_loan(borrower, TOKEN_A, 50 * WEI, callback, b"payload")
    assert fee == 15 * 10**16
    assert seen == [(TOKEN_A, 50 * WEI, fee, b"payload")]
    assert seeded_pair.get_reserves()[:2] == (100 * WEI + fee, 10 * WEI)
    assert ledger.balance_of(TOKEN_A, borrower) == 1 * WEI - fee
    assert [e.kind for e in seeded_pair.events[-2:]] == [EventKind.SYNC, EventKind.FLASH_LOAN]
    assert seeded_pair.events[-1].args == {"receiver": borrower, "token": TOKEN_A, "amount": 50 * WEI, "fee": fee}
    assert not seeded_pair.locked


def test_overpayment_is_kept(seeded_pair: Pair, ledger: TokenLedger, borrower: str) -> None:
    fee = seeded_pair.flash_loan(borrower, TOKEN_B, 5 * WEI, _repay(ledger, borrower, extra=7))
    assert seeded_pair.get_reserves()[1] == 10 * WEI + fee + 7


def test_whole_reserve_can_be_borrowed(seeded_pair: Pair, ledger: TokenLedger, borrower: str) -> None:
    ledger.mint(TOKEN_B, borrower, 1 * WEI)
    fee = seeded_pair.flash_loan(borrower, TOKEN_B, 10 * WEI, _repay(ledger, borrower))
    assert fee == 3 * 10**16


def test_short_repayment_rolls_back(seeded_pair: Pair, ledger: TokenLedger, borrower: str) -> None:
    before = seeded_pair.snapshot()

    def callback(token: str, amount: int, fee: int, data: bytes) -> None:
        ledger.transfer(token, borrower, PAIR_ADDRESS, amount + fee - 1)

    with pytest.raises(InvariantError) as exc:
        seeded_pair.flash_loan(borrower, TOKEN_A, 50 * WEI, callback)
    assert exc.value.code is ErrorCode.FLASH_LOAN_NOT_REPAID
    assert seeded_pair.snapshot() == before
    assert ledger.balance_of(TOKEN_A, borrower) == 1 * WEI
    assert ledger.balance_of(TOKEN_A, PAIR_ADDRESS) == 100 * WEI
    assert not seeded_pair.locked


def test_unrepaid_loan_rolls_back(seeded_pair: Pair, ledger: TokenLedger, borrower: str) -> None:
    with pytest.raises(InvariantError):
        seeded_pair.flash_loan(borrower, TOKEN_A, 50 * WEI, lambda *args: None)
    assert ledger.balance_of(TOKEN_A, borrower) == 1 * WEI


def test_callback_cannot_reenter(seeded_pair: Pair, ledger: TokenLedger, borrower: str) -> None:
    inner = []

    def callback(token: str, amount: int, fee: int, data: bytes) -> None:
        assert seeded_pair.locked
        inner.append(seeded_pair.try_call("swap", 0, 1, USER0))
        seeded_pair.sync()

    with pytest.raises(PreconditionError) as exc:
        seeded_pair.flash_loan(borrower, TOKEN_A, 50 * WEI, callback)
    assert exc.value.code is ErrorCode.REENTRANT
    assert inner[0].error is ErrorCode.REENTRANT
    assert ledger.balance_of(TOKEN_A, borrower) == 1 * WEI
    assert not seeded_pair.locked
    # The pair is usable again once the outer call has unwound.
    seeded_pair.sync()


def test_callback_exception_propagates(seeded_pair: Pair, ledger: TokenLedger, borrower: str) -> None:
    def callback(token: str, amount: int, fee: int, data: bytes) -> None:
        raise RuntimeError("receiver failed")

    with pytest.raises(RuntimeError, match="receiver failed"):
        seeded_pair.flash_loan(borrower, TOKEN_A, 1 * WEI, callback)
    assert ledger.balance_of(TOKEN_A, PAIR_ADDRESS) == 100 * WEI
    assert not seeded_pair.locked


def test_loan_above_reserve_rejected(seeded_pair: Pair, ledger: TokenLedger, borrower: str) -> None:
    with pytest.raises(PreconditionError) as exc:
        seeded_pair.flash_loan(borrower, TOKEN_B, 10 * WEI + 1, _repay(ledger, borrower))
    assert exc.value.code is ErrorCode.EXCEEDS_MAX_FLASH_LOAN


def test_foreign_token_rejected(seeded_pair: Pair, ledger: TokenLedger, borrower: str) -> None:
    with pytest.raises(PreconditionError) as exc:
        seeded_pair.flash_loan(borrower, FOREIGN, 1, _repay(ledger, borrower))
    assert exc.value.code is ErrorCode.UNSUPPORTED_TOKEN
    with pytest.raises(PreconditionError):
        seeded_pair.flash_fee(FOREIGN, 1)


class _Abort(BaseException):
    """Stands in for KeyboardInterrupt / SystemExit raised mid-callback."""


def test_base_exception_in_callback_unlocks_and_rolls_back(
    seeded_pair: Pair, ledger: TokenLedger, borrower: str
) -> None:
    before = seeded_pair.snapshot()

    def callback(token: str, amount: int, fee: int, data: bytes) -> None:
        raise _Abort()

    with pytest.raises(_Abort):
        seeded_pair.flash_loan(borrower, TOKEN_A, 1 * WEI, callback)
    assert not seeded_pair.locked
    assert seeded_pair.snapshot() == before
    assert ledger.balance_of(TOKEN_A, PAIR_ADDRESS) == 100 * WEI
    # Still usable afterwards.
    seeded_pair.sync()


class TestSharedLedger:
    @pytest.fixture
    def other_pair(self, make_pair, clock) -> Pair:
        pair = make_pair(address=OTHER_PAIR)
        pair.add_liquidity(OWNER, TOKEN_A, TOKEN_B, 100 * WEI, 10 * WEI, 0, 0, OWNER, clock.now() + 100)
        return pair

    @staticmethod
    def _in_sync(pair: Pair, ledger: TokenLedger) -> bool:
        reserve0, reserve1, _ = pair.get_reserves()
        return (reserve0, reserve1) == (
            ledger.balance_of(TOKEN_A, pair.address),
            ledger.balance_of(TOKEN_B, pair.address),
        )

    def test_failed_loan_undoes_trades_on_other_pairs(
        self, seeded_pair: Pair, other_pair: Pair, ledger: TokenLedger, clock, borrower: str
    ) -> None:
        before = other_pair.snapshot()
        events_before = other_pair.events

        def callback(token: str, amount: int, fee: int, data: bytes) -> None:
            other_pair.swap_exact_tokens_for_tokens(USER0, 10 * WEI, 0, TOKEN_A, TOKEN_B, USER0, clock.now())
            assert other_pair.get_reserves()[0] == 110 * WEI

        with pytest.raises(InvariantError) as exc:
            seeded_pair.flash_loan(borrower, TOKEN_A, 1 * WEI, callback)
        assert exc.value.code is ErrorCode.FLASH_LOAN_NOT_REPAID

        assert other_pair.snapshot() == before
        assert other_pair.events == events_before
        assert self._in_sync(other_pair, ledger)
        assert self._in_sync(seeded_pair, ledger)
        assert ledger.balance_of(TOKEN_A, USER0) == 100 * WEI
        # Both pairs keep working on consistent reserves.
        other_pair.swap_exact_tokens_for_tokens(USER0, 10 * WEI, 0, TOKEN_A, TOKEN_B, USER0, clock.now())
        other_pair.add_liquidity(OWNER, TOKEN_A, TOKEN_B, 10 * WEI, 10 * WEI, 0, 0, OWNER, clock.now())
        assert self._in_sync(other_pair, ledger)

    def test_failure_on_other_pair_leaves_loan_intact(
        self, seeded_pair: Pair, other_pair: Pair, ledger: TokenLedger, borrower: str
    ) -> None:
        inner = []

        def callback(token: str, amount: int, fee: int, data: bytes) -> None:
            inner.append(other_pair.try_call("swap", 0, 1 * WEI, USER0))
            ledger.transfer(token, borrower, PAIR_ADDRESS, amount + fee)

        fee = seeded_pair.flash_loan(borrower, TOKEN_A, 50 * WEI, callback)
        assert inner[0].error is ErrorCode.INSUFFICIENT_INPUT_AMOUNT
        assert seeded_pair.get_reserves()[:2] == (100 * WEI + fee, 10 * WEI)
        assert seeded_pair.events[-1].kind is EventKind.FLASH_LOAN
        assert not seeded_pair.locked
        assert self._in_sync(seeded_pair, ledger)
        assert self._in_sync(other_pair, ledger)
