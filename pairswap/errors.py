"""Named failure conditions for the pair.

Every failure surfaces as a ``PairError`` carrying an ``ErrorCode`` so callers
can assert on the cause. Callers that prefer a tagged result over exceptions
use ``Pair.try_call()``, which returns a ``CallResult`` built from the same
codes.
"""

from __future__ import annotations

from enum import Enum, unique


@unique
class ErrorCode(Enum):
    """One member per named failure condition."""

    # Preconditions
    ALREADY_INITIALIZED = "AlreadyInitialized"
    NOT_INITIALIZED = "NotInitialized"
    REENTRANT = "Reentrant"
    TRANSACTION_EXPIRED = "TransactionExpired"
    IDENTICAL_ADDRESSES = "IdenticalAddresses"
    ZERO_ADDRESS = "ZeroAddress"
    INVALID_TO = "InvalidTo"
    INVALID_PATH = "InvalidPath"
    UNSUPPORTED_TOKEN = "UnsupportedToken"
    EXCEEDS_MAX_FLASH_LOAN = "ExceedsMaxFlashLoan"

    # Post-condition invariants
    INVARIANT_VIOLATION = "InvariantViolation"
    FLASH_LOAN_NOT_REPAID = "FlashLoanNotRepaid"

    # Caller-supplied bounds
    INSUFFICIENT_A_AMOUNT = "InsufficientAAmount"
    INSUFFICIENT_B_AMOUNT = "InsufficientBAmount"
    INSUFFICIENT_OUTPUT_AMOUNT = "InsufficientOutputAmount"
    EXCESSIVE_INPUT_AMOUNT = "ExcessiveInputAmount"

    # Liquidity accounting
    INSUFFICIENT_INITIAL_LIQUIDITY = "InsufficientInitialLiquidity"
    INSUFFICIENT_LIQUIDITY_MINTED = "InsufficientLiquidityMinted"
    INSUFFICIENT_LIQUIDITY_BURNED = "InsufficientLiquidityBurned"
    INSUFFICIENT_LIQUIDITY = "InsufficientLiquidity"
    INSUFFICIENT_INPUT_AMOUNT = "InsufficientInputAmount"
    INSUFFICIENT_AMOUNT = "InsufficientAmount"

    # Arithmetic bounds
    OVERFLOW = "Overflow"

    # Token and share transfers
    INSUFFICIENT_BALANCE = "InsufficientBalance"
    INSUFFICIENT_SHARE_BALANCE = "InsufficientShareBalance"
    INSUFFICIENT_ALLOWANCE = "InsufficientAllowance"


class PairError(Exception):
    """Base class for every pair failure. Always carries an ``ErrorCode``."""

    def __init__(self, code: ErrorCode, message: str = "") -> None:
        self.code = code
        self.message = message
        super().__init__(f"{code.value}: {message}" if message else code.value)


class PreconditionError(PairError):
    """Raised before any mutation when an entry point may not run."""


class InvariantError(PairError):
    """Raised when a tentative post-state breaks an economic invariant."""


class SlippageError(PairError):
    """Raised when actual amounts fall outside caller-supplied bounds."""


class LiquidityError(PairError):
    """Raised when reserves or shares cannot support the requested amounts."""


class ArithmeticGuardError(PairError):
    """Raised when a value would leave its fixed-width domain."""


class TransferError(PairError):
    """Raised when a token or share transfer cannot be covered."""


_CATEGORY: dict[ErrorCode, type[PairError]] = {
    ErrorCode.ALREADY_INITIALIZED: PreconditionError,
    ErrorCode.NOT_INITIALIZED: PreconditionError,
    ErrorCode.REENTRANT: PreconditionError,
    ErrorCode.TRANSACTION_EXPIRED: PreconditionError,
    ErrorCode.IDENTICAL_ADDRESSES: PreconditionError,
    ErrorCode.ZERO_ADDRESS: PreconditionError,
    ErrorCode.INVALID_TO: PreconditionError,
    ErrorCode.INVALID_PATH: PreconditionError,
    ErrorCode.UNSUPPORTED_TOKEN: PreconditionError,
    ErrorCode.EXCEEDS_MAX_FLASH_LOAN: PreconditionError,
    ErrorCode.INVARIANT_VIOLATION: InvariantError,
    ErrorCode.FLASH_LOAN_NOT_REPAID: InvariantError,
    ErrorCode.INSUFFICIENT_A_AMOUNT: SlippageError,
    ErrorCode.INSUFFICIENT_B_AMOUNT: SlippageError,
    ErrorCode.INSUFFICIENT_OUTPUT_AMOUNT: SlippageError,
    ErrorCode.EXCESSIVE_INPUT_AMOUNT: SlippageError,
    ErrorCode.INSUFFICIENT_INITIAL_LIQUIDITY: LiquidityError,
    ErrorCode.INSUFFICIENT_LIQUIDITY_MINTED: LiquidityError,
    ErrorCode.INSUFFICIENT_LIQUIDITY_BURNED: LiquidityError,
    ErrorCode.INSUFFICIENT_LIQUIDITY: LiquidityError,
    ErrorCode.INSUFFICIENT_INPUT_AMOUNT: LiquidityError,
    ErrorCode.INSUFFICIENT_AMOUNT: LiquidityError,
    ErrorCode.OVERFLOW: ArithmeticGuardError,
    ErrorCode.INSUFFICIENT_BALANCE: TransferError,
    ErrorCode.INSUFFICIENT_SHARE_BALANCE: TransferError,
    ErrorCode.INSUFFICIENT_ALLOWANCE: TransferError,
}


def fail(code: ErrorCode, message: str = "") -> PairError:
    """Build the categorized exception for ``code``. Use as ``raise fail(...)``."""
    return _CATEGORY[code](code, message)
