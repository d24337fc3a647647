"""
Fee schedule (deterministic, integer-only).

Two rates share one denominator:
- the fixed fee is the protocol cut, paid out to the fee recipient;
- the return fee stays in the pool and accrues to liquidity providers.

Rounding: floor, but any non-zero rate on a non-zero amount charges at least 1.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import Optional

from .errors import ErrorCode, GovernanceViolationError, InvalidInstructionError
from .math import U64_MAX, checked_div, checked_mul

_FEES_LAYOUT = struct.Struct("<QQQ")
FEES_PACKED_LEN = _FEES_LAYOUT.size


def _require_u64(name: str, value: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")
    if not (0 <= value <= U64_MAX):
        raise ValueError(f"{name} must be in [0, {U64_MAX}]: {value}")


def calculate_fee(token_amount: int, fee_numerator: int, fee_denominator: int) -> Optional[int]:
    if fee_numerator == 0 or token_amount == 0:
        return 0
    product = checked_mul(token_amount, fee_numerator)
    if product is None:
        return None
    fee = checked_div(product, fee_denominator)
    if fee is None:
        return None
    if fee == 0:
        return 1
    return fee


def _validate_fraction(numerator: int, denominator: int) -> None:
    if denominator == 0 and numerator == 0:
        return
    if numerator >= denominator:
        raise GovernanceViolationError(
            ErrorCode.INVALID_FEE, f"{numerator}/{denominator} is not a proper fraction"
        )


@dataclass(frozen=True)
class FeeSchedule:
    fixed_fee_numerator: int
    return_fee_numerator: int
    fee_denominator: int

    def __post_init__(self) -> None:
        for name in ("fixed_fee_numerator", "return_fee_numerator", "fee_denominator"):
            _require_u64(name, getattr(self, name))

    def validate(self) -> None:
        """Self-consistency: every numerator is strictly below the denominator."""
        _validate_fraction(self.fixed_fee_numerator, self.fee_denominator)
        _validate_fraction(self.return_fee_numerator, self.fee_denominator)

    def owner_trading_fee(self, trading_tokens: int) -> Optional[int]:
        return calculate_fee(trading_tokens, self.fixed_fee_numerator, self.fee_denominator)

    def trading_fee(self, trading_tokens: int) -> Optional[int]:
        return calculate_fee(trading_tokens, self.return_fee_numerator, self.fee_denominator)

    def pack(self) -> bytes:
        return _FEES_LAYOUT.pack(self.fixed_fee_numerator, self.return_fee_numerator, self.fee_denominator)

    @classmethod
    def unpack(cls, data: bytes) -> "FeeSchedule":
        if len(data) != FEES_PACKED_LEN:
            raise InvalidInstructionError(
                ErrorCode.INVALID_INSTRUCTION, f"fee schedule must be {FEES_PACKED_LEN} bytes"
            )
        return cls(*_FEES_LAYOUT.unpack(data))
