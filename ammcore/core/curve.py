"""
Fee-aware curve.

`Curve` is a tagged variant `{kind, calculator}`: the declared kind selects the
calculator type through `CALCULATORS`, and the calculator reports its own kind
back. The two must always agree (`validate`).

Fee handling for swaps:
- `owner_fee` (fixed fee) and `return_fee` are both taken from the gross input;
- the calculator prices only the net input;
- the return fee stays in the pool, the owner fee leaves it.

Single-sided deposits and withdrawals are treated as half a swap: the combined
fee rate is charged on half of the traded amount.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import Optional

from .calculators import (
    CURVE_PARAMS_LEN,
    ConstantPriceCurve,
    ConstantProductCurve,
    CurveCalculator,
    unpack_calculator,
)
from .errors import ErrorCode, GovernanceViolationError, InvalidInstructionError
from .fees import FeeSchedule, calculate_fee
from .math import checked_add, checked_sub, is_u128
from .types import CurveKind, RoundDirection, TradeDirection, TradeResult, TradingTokenResult

CURVE_PACKED_LEN = 1 + CURVE_PARAMS_LEN


def _single_sided_fee(amount: int, fees: FeeSchedule) -> Optional[int]:
    half = max(1, amount // 2)
    numerator = fees.fixed_fee_numerator + fees.return_fee_numerator
    return calculate_fee(half, numerator, fees.fee_denominator)


@dataclass(frozen=True)
class Curve:
    kind: CurveKind
    calculator: CurveCalculator

    def __post_init__(self) -> None:
        if not isinstance(self.kind, CurveKind):
            object.__setattr__(self, "kind", CurveKind(self.kind))
        if not isinstance(self.calculator, CurveCalculator):
            raise TypeError("calculator must be a CurveCalculator")

    @classmethod
    def constant_product(cls) -> "Curve":
        return cls(CurveKind.CONSTANT_PRODUCT, ConstantProductCurve())

    @classmethod
    def constant_price(cls, token_b_price: int) -> "Curve":
        return cls(CurveKind.CONSTANT_PRICE, ConstantPriceCurve(token_b_price=token_b_price))

    def validate(self) -> None:
        if self.kind != self.calculator.kind:
            raise GovernanceViolationError(
                ErrorCode.INVALID_CURVE,
                f"declared {self.kind.name} but calculator is {self.calculator.kind.name}",
            )
        self.calculator.validate()

    def swap(
        self,
        source_amount: int,
        swap_source_amount: int,
        swap_destination_amount: int,
        trade_direction: TradeDirection,
        fees: FeeSchedule,
    ) -> Optional[TradeResult]:
        """
        Exact-in swap quote including fees.

        Returns None when the trade rounds to zero or leaves the u128 domain.
        """
        owner_fee = fees.owner_trading_fee(source_amount)
        return_fee = fees.trading_fee(source_amount)
        if owner_fee is None or return_fee is None:
            return None
        net_source_amount = checked_sub(source_amount, owner_fee + return_fee)
        if net_source_amount is None:
            return None

        swapped = self.calculator.swap_without_fees(
            net_source_amount, swap_source_amount, swap_destination_amount, trade_direction
        )
        if swapped is None:
            return None

        source_amount_swapped = checked_add(swapped.source_amount_swapped, owner_fee + return_fee)
        if source_amount_swapped is None:
            return None
        destination_amount_swapped = swapped.destination_amount_swapped
        if destination_amount_swapped > swap_destination_amount:
            return None

        # Owner fee is paid out of the pool's inflow.
        new_source_amount = checked_add(swap_source_amount, source_amount_swapped - owner_fee)
        new_destination_amount = swap_destination_amount - destination_amount_swapped
        if new_source_amount is None or not is_u128(new_destination_amount):
            return None

        return TradeResult(
            source_amount_swapped=source_amount_swapped,
            destination_amount_swapped=destination_amount_swapped,
            owner_fee=owner_fee,
            return_fee=return_fee,
            new_source_amount=new_source_amount,
            new_destination_amount=new_destination_amount,
        )

    def pool_tokens_to_trading_tokens(
        self,
        pool_tokens: int,
        pool_token_supply: int,
        swap_token_a_amount: int,
        swap_token_b_amount: int,
        round_direction: RoundDirection,
    ) -> Optional[TradingTokenResult]:
        return self.calculator.pool_tokens_to_trading_tokens(
            pool_tokens, pool_token_supply, swap_token_a_amount, swap_token_b_amount, round_direction
        )

    def deposit_single_token_type(
        self,
        source_amount: int,
        swap_token_a_amount: int,
        swap_token_b_amount: int,
        pool_supply: int,
        trade_direction: TradeDirection,
        fees: FeeSchedule,
    ) -> Optional[int]:
        if source_amount == 0:
            return 0
        trade_fee = _single_sided_fee(source_amount, fees)
        if trade_fee is None:
            return None
        net_source_amount = checked_sub(source_amount, trade_fee)
        if net_source_amount is None:
            return None
        return self.calculator.deposit_single_token_type(
            net_source_amount, swap_token_a_amount, swap_token_b_amount, pool_supply, trade_direction
        )

    def withdraw_single_token_type_exact_out(
        self,
        destination_amount: int,
        swap_token_a_amount: int,
        swap_token_b_amount: int,
        pool_supply: int,
        trade_direction: TradeDirection,
        fees: FeeSchedule,
    ) -> Optional[int]:
        if destination_amount == 0:
            return 0
        trade_fee = _single_sided_fee(destination_amount, fees)
        if trade_fee is None:
            return None
        gross_destination_amount = checked_add(destination_amount, trade_fee)
        if gross_destination_amount is None:
            return None
        return self.calculator.withdraw_single_token_type_exact_out(
            gross_destination_amount, swap_token_a_amount, swap_token_b_amount, pool_supply, trade_direction
        )

    def pack(self) -> bytes:
        return struct.pack("<B", int(self.kind)) + self.calculator.pack_params()

    @classmethod
    def unpack(cls, data: bytes) -> "Curve":
        if len(data) != CURVE_PACKED_LEN:
            raise InvalidInstructionError(ErrorCode.INVALID_INSTRUCTION, f"curve must be {CURVE_PACKED_LEN} bytes")
        tag = data[0]
        try:
            kind = CurveKind(tag)
        except ValueError as exc:
            raise InvalidInstructionError(ErrorCode.INVALID_INSTRUCTION, f"unknown curve kind: {tag}") from exc
        return cls(kind, unpack_calculator(kind, data[1:]))

