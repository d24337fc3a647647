"""Data types shared by the curve layer.

All result types are frozen dataclasses holding plain ints in the u128 domain.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum, unique


@unique
class CurveKind(IntEnum):
    """One member per supported pricing curve (wire tag = value)."""
    CONSTANT_PRODUCT = 0
    CONSTANT_PRICE = 1


@unique
class TradeDirection(Enum):
    A_TO_B = "a_to_b"
    B_TO_A = "b_to_a"

    def opposite(self) -> "TradeDirection":
        return TradeDirection.B_TO_A if self is TradeDirection.A_TO_B else TradeDirection.A_TO_B


@unique
class RoundDirection(Enum):
    """Floor for withdrawals (never over-pay), ceiling for deposits (never under-fund)."""
    FLOOR = "floor"
    CEILING = "ceiling"


@dataclass(frozen=True)
class SwapWithoutFeesResult:
    source_amount_swapped: int
    destination_amount_swapped: int


@dataclass(frozen=True)
class TradeResult:
    """Outcome of a fee-aware swap. Transient; never persisted."""

    source_amount_swapped: int
    destination_amount_swapped: int
    owner_fee: int
    return_fee: int
    new_source_amount: int
    new_destination_amount: int


@dataclass(frozen=True)
class TradingTokenResult:
    token_a_amount: int
    token_b_amount: int
