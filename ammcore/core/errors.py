"""Error taxonomy for the AMM processor.

Every rejection carries a specific ``ErrorCode`` and belongs to exactly one
category class. Callers can branch on the class (or ``disposition``) to tell
"retry with looser limits" from "structurally invalid" from "configuration not
usable".

Handlers raise these; ``process()`` in ``processor.py`` converts them into a
``ProcessResult`` for callers that prefer result inspection.
"""

from __future__ import annotations

from enum import IntEnum, unique
from typing import Optional


@unique
class ErrorCode(IntEnum):
    ALREADY_IN_USE = 0
    INVALID_PROGRAM_ADDRESS = 1
    INVALID_STATE_ADDRESS = 2
    INVALID_STATE_OWNER = 3
    INVALID_OWNER = 4
    INVALID_OUTPUT_OWNER = 5
    EXPECTED_MINT = 6
    EXPECTED_ACCOUNT = 7
    EMPTY_SUPPLY = 8
    INVALID_DECIMALS = 9
    INVALID_SUPPLY = 10
    REPEATED_MINT = 11
    INVALID_DELEGATE = 12
    INVALID_INPUT = 13
    INCORRECT_SWAP_ACCOUNT = 14
    INCORRECT_POOL_MINT = 15
    CALCULATION_FAILURE = 16
    INVALID_INSTRUCTION = 17
    EXCEEDED_SLIPPAGE = 18
    INVALID_CLOSE_AUTHORITY = 19
    INVALID_FREEZE_AUTHORITY = 20
    INCORRECT_MARKET_OWNER_ACCOUNT = 21
    INVALID_SIGNER = 22
    NOT_INITIALIZED_STATE = 23
    INCORRECT_FEE_ACCOUNT = 24
    ZERO_TRADING_TOKENS = 25
    FEE_CALCULATION_FAILURE = 26
    CONVERSION_FAILURE = 27
    INVALID_FEE = 28
    INCORRECT_TOKEN_PROGRAM_ID = 29
    UNSUPPORTED_CURVE_TYPE = 30
    INVALID_CURVE = 31
    UNSUPPORTED_CURVE_OPERATION = 32
    INCORRECT_PROGRAM_ID = 33
    UNINITIALIZED_POOL = 34
    NOT_ENOUGH_ACCOUNT_KEYS = 35
    LEDGER_REJECTED = 36


MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.ALREADY_IN_USE: "Swap account already in use",
    ErrorCode.INVALID_PROGRAM_ADDRESS: "Invalid program address generated from nonce and key",
    ErrorCode.INVALID_STATE_ADDRESS: "Invalid state address generated from seed",
    ErrorCode.INVALID_STATE_OWNER: "The input account is not a owner of state account",
    ErrorCode.INVALID_OWNER: "The input account owner is not the program address",
    ErrorCode.INVALID_OUTPUT_OWNER: "Output pool account owner cannot be the program address",
    ErrorCode.EXPECTED_MINT: "Deserialized account is not a token mint",
    ErrorCode.EXPECTED_ACCOUNT: "Deserialized account is not a token account",
    ErrorCode.EMPTY_SUPPLY: "Input token account empty",
    ErrorCode.INVALID_DECIMALS: "Pool token mint doesn't have exact decimal",
    ErrorCode.INVALID_SUPPLY: "Pool token mint has a non-zero supply",
    ErrorCode.REPEATED_MINT: "Swap input token accounts have the same mint",
    ErrorCode.INVALID_DELEGATE: "Token account has a delegate",
    ErrorCode.INVALID_INPUT: "InvalidInput",
    ErrorCode.INCORRECT_SWAP_ACCOUNT: "Address of the provided swap token account is incorrect",
    ErrorCode.INCORRECT_POOL_MINT: "Address of the provided pool token mint is incorrect",
    ErrorCode.CALCULATION_FAILURE: "CalculationFailure",
    ErrorCode.INVALID_INSTRUCTION: "InvalidInstruction",
    ErrorCode.EXCEEDED_SLIPPAGE: "Swap instruction exceeds desired slippage limit",
    ErrorCode.INVALID_CLOSE_AUTHORITY: "Token account has a close authority",
    ErrorCode.INVALID_FREEZE_AUTHORITY: "Token account or pool token mint has a freeze authority",
    ErrorCode.INCORRECT_MARKET_OWNER_ACCOUNT: "Owner of Market account is incorrect",
    ErrorCode.INVALID_SIGNER: "State owner should be the signer",
    ErrorCode.NOT_INITIALIZED_STATE: "Program State should be initialized before creating pool",
    ErrorCode.INCORRECT_FEE_ACCOUNT: "Pool fee token account incorrect",
    ErrorCode.ZERO_TRADING_TOKENS: "Given pool token amount results in zero trading tokens",
    ErrorCode.FEE_CALCULATION_FAILURE: "The fee calculation failed due to overflow, underflow, or unexpected 0",
    ErrorCode.CONVERSION_FAILURE: "Conversion to or from u64 failed",
    ErrorCode.INVALID_FEE: "The provided fee does not match the program owner's constraints",
    ErrorCode.INCORRECT_TOKEN_PROGRAM_ID: (
        "The provided token program does not match the token program expected by the swap"
    ),
    ErrorCode.UNSUPPORTED_CURVE_TYPE: "The provided curve type is not supported by the program owner",
    ErrorCode.INVALID_CURVE: "The provided curve parameters are invalid",
    ErrorCode.UNSUPPORTED_CURVE_OPERATION: "The operation cannot be performed on the given curve",
    ErrorCode.INCORRECT_PROGRAM_ID: "Account is not owned by this program",
    ErrorCode.UNINITIALIZED_POOL: "Pool account is not initialized",
    ErrorCode.NOT_ENOUGH_ACCOUNT_KEYS: "Account list does not match the instruction layout",
    ErrorCode.LEDGER_REJECTED: "The ledger rejected a balance mutation",
}


class AmmError(Exception):
    """Base class for every processor rejection."""

    category: str = "amm"
    disposition: str = "invalid"

    def __init__(self, code: ErrorCode, detail: Optional[str] = None) -> None:
        self.code = code
        self.detail = detail
        message = MESSAGES.get(code, code.name)
        if detail:
            message = f"{message}: {detail}"
        self.message = message
        super().__init__(f"{code.name}: {message}")


class AuthorizationError(AmmError):
    """Signer, state-owner or derived-authority mismatch."""

    category = "authorization"


class AccountMismatchError(AmmError):
    """Wrong mint, program, fee account or pool-side account identity."""

    category = "account_mismatch"


class GovernanceViolationError(AmmError):
    """Fee schedule or curve below the build-time floor, or self-inconsistent."""

    category = "governance"
    disposition = "configuration"


class StateError(AmmError):
    """Lifecycle violations: not yet initialized, already in use, unusable pool setup."""

    category = "state"
    disposition = "configuration"


class CalculationError(AmmError):
    """Overflow, narrowing failure, or a trade that rounds to zero tokens."""

    category = "arithmetic"


class SlippageError(AmmError):
    """Computed amount violates the caller-supplied bound."""

    category = "slippage"
    disposition = "adjust_limits"


class InvalidInstructionError(AmmError, ValueError):
    """Malformed opcode record or account list."""

    category = "instruction"


class LedgerError(AmmError):
    """Raised by ledger collaborators when a mutation cannot be applied."""

    category = "ledger"

    def __init__(self, detail: str) -> None:
        super().__init__(ErrorCode.LEDGER_REJECTED, detail)


def zero_trading_tokens(detail: Optional[str] = None) -> CalculationError:
    return CalculationError(ErrorCode.ZERO_TRADING_TOKENS, detail)
