"""
Curve calculators.

A calculator owns the fee-free pricing rule of one curve kind. `Curve` (see
`curve.py`) wraps exactly one calculator and layers the fee schedule on top.

Capability set shared by every calculator:
- `swap_without_fees`
- `pool_tokens_to_trading_tokens` (proportional, identical for all kinds)
- `deposit_single_token_type` / `withdraw_single_token_type_exact_out`
- `validate`, `validate_supply`, `allows_deposits`
- `pack_params` / `unpack_params` (fixed 32-byte parameter block)
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import Dict, Optional, Type

from ..kernels.python import constant_price_v1 as _kernel_constant_price
from ..kernels.python import constant_product_v1 as _kernel_constant_product
from .errors import ErrorCode, GovernanceViolationError, InvalidInstructionError, StateError
from .math import U64_MAX, checked_div, checked_mul, checked_rem
from .types import CurveKind, RoundDirection, SwapWithoutFeesResult, TradeDirection, TradingTokenResult

CURVE_PARAMS_LEN = 32


def _proportional(pool_tokens: int, reserve: int, pool_supply: int, round_direction: RoundDirection) -> Optional[int]:
    product = checked_mul(pool_tokens, reserve)
    if product is None:
        return None
    amount = checked_div(product, pool_supply)
    if amount is None:
        return None
    if round_direction is RoundDirection.CEILING:
        remainder = checked_rem(product, pool_supply)
        if remainder:
            amount += 1
    return amount


class CurveCalculator:
    """Interface for a fee-free pricing rule."""

    kind: CurveKind

    def swap_without_fees(
        self,
        source_amount: int,
        swap_source_amount: int,
        swap_destination_amount: int,
        trade_direction: TradeDirection,
    ) -> Optional[SwapWithoutFeesResult]:
        raise NotImplementedError

    def deposit_single_token_type(
        self,
        source_amount: int,
        swap_token_a_amount: int,
        swap_token_b_amount: int,
        pool_supply: int,
        trade_direction: TradeDirection,
    ) -> Optional[int]:
        raise NotImplementedError

    def withdraw_single_token_type_exact_out(
        self,
        destination_amount: int,
        swap_token_a_amount: int,
        swap_token_b_amount: int,
        pool_supply: int,
        trade_direction: TradeDirection,
    ) -> Optional[int]:
        raise NotImplementedError

    def validate(self) -> None:
        raise NotImplementedError

    def validate_supply(self, token_a_amount: int, token_b_amount: int) -> None:
        raise NotImplementedError

    def allows_deposits(self) -> bool:
        return True

    def pack_params(self) -> bytes:
        raise NotImplementedError

    @classmethod
    def unpack_params(cls, data: bytes) -> "CurveCalculator":
        raise NotImplementedError

    def pool_tokens_to_trading_tokens(
        self,
        pool_tokens: int,
        pool_token_supply: int,
        swap_token_a_amount: int,
        swap_token_b_amount: int,
        round_direction: RoundDirection,
    ) -> Optional[TradingTokenResult]:
        """
        Convert pool tokens into the proportional amount of each trading token.

        CEILING protects the pool on deposits, FLOOR on withdrawals.
        """
        if pool_token_supply == 0:
            return None
        token_a_amount = _proportional(pool_tokens, swap_token_a_amount, pool_token_supply, round_direction)
        token_b_amount = _proportional(pool_tokens, swap_token_b_amount, pool_token_supply, round_direction)
        if token_a_amount is None or token_b_amount is None:
            return None
        return TradingTokenResult(token_a_amount=token_a_amount, token_b_amount=token_b_amount)


@dataclass(frozen=True)
class ConstantProductCurve(CurveCalculator):
    kind = CurveKind.CONSTANT_PRODUCT

    def swap_without_fees(
        self,
        source_amount: int,
        swap_source_amount: int,
        swap_destination_amount: int,
        trade_direction: TradeDirection,
    ) -> Optional[SwapWithoutFeesResult]:
        out = _kernel_constant_product.swap(
            source_amount=source_amount,
            swap_source_amount=swap_source_amount,
            swap_destination_amount=swap_destination_amount,
        )
        if out is None:
            return None
        return SwapWithoutFeesResult(source_amount_swapped=out[0], destination_amount_swapped=out[1])

    def deposit_single_token_type(
        self,
        source_amount: int,
        swap_token_a_amount: int,
        swap_token_b_amount: int,
        pool_supply: int,
        trade_direction: TradeDirection,
    ) -> Optional[int]:
        reserve = swap_token_a_amount if trade_direction is TradeDirection.A_TO_B else swap_token_b_amount
        return _kernel_constant_product.pool_tokens_for_deposit(
            source_amount=source_amount, swap_token_amount=reserve, pool_supply=pool_supply
        )

    def withdraw_single_token_type_exact_out(
        self,
        destination_amount: int,
        swap_token_a_amount: int,
        swap_token_b_amount: int,
        pool_supply: int,
        trade_direction: TradeDirection,
    ) -> Optional[int]:
        reserve = swap_token_a_amount if trade_direction is TradeDirection.A_TO_B else swap_token_b_amount
        return _kernel_constant_product.pool_tokens_for_withdraw(
            destination_amount=destination_amount, swap_token_amount=reserve, pool_supply=pool_supply
        )

    def validate(self) -> None:
        return None

    def validate_supply(self, token_a_amount: int, token_b_amount: int) -> None:
        if token_a_amount == 0:
            raise StateError(ErrorCode.EMPTY_SUPPLY, "token A reserve is empty")
        if token_b_amount == 0:
            raise StateError(ErrorCode.EMPTY_SUPPLY, "token B reserve is empty")

    def pack_params(self) -> bytes:
        return bytes(CURVE_PARAMS_LEN)

    @classmethod
    def unpack_params(cls, data: bytes) -> "ConstantProductCurve":
        return cls()


@dataclass(frozen=True)
class ConstantPriceCurve(CurveCalculator):
    """Token B is worth `token_b_price` units of token A."""

    kind = CurveKind.CONSTANT_PRICE
    token_b_price: int = 1

    def __post_init__(self) -> None:
        if not isinstance(self.token_b_price, int) or isinstance(self.token_b_price, bool):
            raise TypeError("token_b_price must be an int")
        if not (0 <= self.token_b_price <= U64_MAX):
            raise ValueError(f"token_b_price must be in [0, {U64_MAX}]")

    def swap_without_fees(
        self,
        source_amount: int,
        swap_source_amount: int,
        swap_destination_amount: int,
        trade_direction: TradeDirection,
    ) -> Optional[SwapWithoutFeesResult]:
        out = _kernel_constant_price.swap(
            source_amount=source_amount,
            token_b_price=self.token_b_price,
            a_to_b=trade_direction is TradeDirection.A_TO_B,
        )
        if out is None:
            return None
        return SwapWithoutFeesResult(source_amount_swapped=out[0], destination_amount_swapped=out[1])

    def _value_share(
        self,
        token_amount: int,
        swap_token_a_amount: int,
        swap_token_b_amount: int,
        pool_supply: int,
        trade_direction: TradeDirection,
        round_up: bool,
    ) -> Optional[int]:
        return _kernel_constant_price.pool_tokens_for_value(
            token_amount=token_amount,
            token_is_a=trade_direction is TradeDirection.A_TO_B,
            swap_token_a_amount=swap_token_a_amount,
            swap_token_b_amount=swap_token_b_amount,
            pool_supply=pool_supply,
            token_b_price=self.token_b_price,
            round_up=round_up,
        )

    def deposit_single_token_type(
        self,
        source_amount: int,
        swap_token_a_amount: int,
        swap_token_b_amount: int,
        pool_supply: int,
        trade_direction: TradeDirection,
    ) -> Optional[int]:
        return self._value_share(
            source_amount, swap_token_a_amount, swap_token_b_amount, pool_supply, trade_direction, round_up=False
        )

    def withdraw_single_token_type_exact_out(
        self,
        destination_amount: int,
        swap_token_a_amount: int,
        swap_token_b_amount: int,
        pool_supply: int,
        trade_direction: TradeDirection,
    ) -> Optional[int]:
        reserve = swap_token_a_amount if trade_direction is TradeDirection.A_TO_B else swap_token_b_amount
        if destination_amount > reserve:
            return None
        return self._value_share(
            destination_amount, swap_token_a_amount, swap_token_b_amount, pool_supply, trade_direction, round_up=True
        )

    def validate(self) -> None:
        if self.token_b_price == 0:
            raise GovernanceViolationError(ErrorCode.INVALID_CURVE, "token_b_price must be positive")

    def validate_supply(self, token_a_amount: int, token_b_amount: int) -> None:
        total_value = _kernel_constant_price.normalized_value(
            swap_token_a_amount=token_a_amount,
            swap_token_b_amount=token_b_amount,
            token_b_price=self.token_b_price,
        )
        if total_value == 0:
            raise StateError(ErrorCode.EMPTY_SUPPLY, "pool holds no value")

    def pack_params(self) -> bytes:
        return struct.pack("<Q", self.token_b_price).ljust(CURVE_PARAMS_LEN, b"\x00")

    @classmethod
    def unpack_params(cls, data: bytes) -> "ConstantPriceCurve":
        (token_b_price,) = struct.unpack_from("<Q", data, 0)
        return cls(token_b_price=token_b_price)


CALCULATORS: Dict[CurveKind, Type[CurveCalculator]] = {
    CurveKind.CONSTANT_PRODUCT: ConstantProductCurve,
    CurveKind.CONSTANT_PRICE: ConstantPriceCurve,
}


def unpack_calculator(kind: CurveKind, params: bytes) -> CurveCalculator:
    if len(params) != CURVE_PARAMS_LEN:
        raise InvalidInstructionError(
            ErrorCode.INVALID_INSTRUCTION, f"curve params must be {CURVE_PARAMS_LEN} bytes"
        )
    calculator_type = CALCULATORS.get(kind)
    if calculator_type is None:
        raise InvalidInstructionError(ErrorCode.INVALID_INSTRUCTION, f"unknown curve kind: {int(kind)}")
    return calculator_type.unpack_params(params)
