"""Checked fixed-width integer arithmetic.

Python ints never overflow, so every operation here enforces the 128-bit
intermediate domain explicitly and returns ``None`` when a result would leave
it (the "no trade possible" signal used throughout the curve layer).

Division is floor division on non-negative operands.
"""

from __future__ import annotations

from typing import Optional

from .errors import CalculationError, ErrorCode

U8_MAX: int = (1 << 8) - 1
U64_MAX: int = (1 << 64) - 1
U128_MAX: int = (1 << 128) - 1


def _in_u128(value: int) -> bool:
    return 0 <= value <= U128_MAX


def checked_add(a: int, b: int) -> Optional[int]:
    out = a + b
    return out if _in_u128(out) else None


def checked_sub(a: int, b: int) -> Optional[int]:
    out = a - b
    return out if _in_u128(out) else None


def checked_mul(a: int, b: int) -> Optional[int]:
    out = a * b
    return out if _in_u128(out) else None


def checked_div(a: int, b: int) -> Optional[int]:
    if b == 0:
        return None
    return a // b


def checked_rem(a: int, b: int) -> Optional[int]:
    if b == 0:
        return None
    return a % b


def is_u64(value: int) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and 0 <= value <= U64_MAX


def is_u128(value: int) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and _in_u128(value)


def to_u64(value: int) -> int:
    """Narrow a 128-bit intermediate to the u64 boundary (raises on failure)."""
    if not is_u64(value):
        raise CalculationError(ErrorCode.CONVERSION_FAILURE, f"{value} does not fit in u64")
    return value


def to_u128(value: int) -> int:
    if not is_u128(value):
        raise CalculationError(ErrorCode.CONVERSION_FAILURE, f"{value} does not fit in u128")
    return value
