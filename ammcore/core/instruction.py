"""
Instruction records and their wire codec.

Wire form: one opcode byte followed by a fixed-width little-endian payload.

| opcode | record                          | payload                          |
|--------|---------------------------------|----------------------------------|
| 0      | UpdateGlobalState               | u64, fees (3 x u64), curve (33B) |
| 1      | InitializePool                  | u8 nonce                         |
| 2      | Swap                            | u64, u64                         |
| 3      | DepositAllTokenTypes            | u64, u64, u64                    |
| 4      | WithdrawAllTokenTypes           | u64, u64, u64                    |
| 5      | DepositSingleTokenTypeExactIn   | u64, u64                         |
| 6      | WithdrawSingleTokenTypeExactOut | u64, u64                         |
"""

from __future__ import annotations

import struct
from dataclasses import dataclass, fields
from enum import IntEnum, unique
from typing import Dict, Type, Union

from .curve import CURVE_PACKED_LEN, Curve
from .errors import ErrorCode, InvalidInstructionError
from .fees import FEES_PACKED_LEN, FeeSchedule
from .math import U8_MAX, U64_MAX


@unique
class Opcode(IntEnum):
    UPDATE_GLOBAL_STATE = 0
    INITIALIZE_POOL = 1
    SWAP = 2
    DEPOSIT_ALL_TOKEN_TYPES = 3
    WITHDRAW_ALL_TOKEN_TYPES = 4
    DEPOSIT_SINGLE_TOKEN_TYPE_EXACT_IN = 5
    WITHDRAW_SINGLE_TOKEN_TYPE_EXACT_OUT = 6


def _require_uint(name: str, value: int, hi: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise InvalidInstructionError(ErrorCode.INVALID_INSTRUCTION, f"{name} must be an int")
    if not (0 <= value <= hi):
        raise InvalidInstructionError(ErrorCode.INVALID_INSTRUCTION, f"{name} out of range: {value}")


class _Scalars:
    """Mixin for records whose payload is a flat tuple of u64 fields."""

    opcode: Opcode
    layout: struct.Struct

    def __post_init__(self) -> None:
        for f in fields(self):
            _require_uint(f.name, getattr(self, f.name), U64_MAX)

    def pack_payload(self) -> bytes:
        return self.layout.pack(*(getattr(self, f.name) for f in fields(self)))

    @classmethod
    def unpack_payload(cls, payload: bytes):
        if len(payload) != cls.layout.size:
            raise InvalidInstructionError(
                ErrorCode.INVALID_INSTRUCTION,
                f"{cls.__name__} payload must be {cls.layout.size} bytes, got {len(payload)}",
            )
        return cls(*cls.layout.unpack(payload))


@dataclass(frozen=True)
class UpdateGlobalState:
    initial_supply: int
    fees: FeeSchedule
    curve: Curve

    opcode = Opcode.UPDATE_GLOBAL_STATE
    payload_len = 8 + FEES_PACKED_LEN + CURVE_PACKED_LEN

    def __post_init__(self) -> None:
        _require_uint("initial_supply", self.initial_supply, U64_MAX)
        if not isinstance(self.fees, FeeSchedule):
            raise InvalidInstructionError(ErrorCode.INVALID_INSTRUCTION, "fees must be a FeeSchedule")
        if not isinstance(self.curve, Curve):
            raise InvalidInstructionError(ErrorCode.INVALID_INSTRUCTION, "curve must be a Curve")

    def pack_payload(self) -> bytes:
        return struct.pack("<Q", self.initial_supply) + self.fees.pack() + self.curve.pack()

    @classmethod
    def unpack_payload(cls, payload: bytes) -> "UpdateGlobalState":
        if len(payload) != cls.payload_len:
            raise InvalidInstructionError(
                ErrorCode.INVALID_INSTRUCTION,
                f"UpdateGlobalState payload must be {cls.payload_len} bytes, got {len(payload)}",
            )
        (initial_supply,) = struct.unpack_from("<Q", payload, 0)
        fees = FeeSchedule.unpack(payload[8 : 8 + FEES_PACKED_LEN])
        curve = Curve.unpack(payload[8 + FEES_PACKED_LEN :])
        return cls(initial_supply=initial_supply, fees=fees, curve=curve)


@dataclass(frozen=True)
class InitializePool:
    nonce: int

    opcode = Opcode.INITIALIZE_POOL

    def __post_init__(self) -> None:
        _require_uint("nonce", self.nonce, U8_MAX)

    def pack_payload(self) -> bytes:
        return struct.pack("<B", self.nonce)

    @classmethod
    def unpack_payload(cls, payload: bytes) -> "InitializePool":
        if len(payload) != 1:
            raise InvalidInstructionError(
                ErrorCode.INVALID_INSTRUCTION, f"InitializePool payload must be 1 byte, got {len(payload)}"
            )
        return cls(nonce=payload[0])


@dataclass(frozen=True)
class Swap(_Scalars):
    amount_in: int
    minimum_amount_out: int

    opcode = Opcode.SWAP
    layout = struct.Struct("<QQ")


@dataclass(frozen=True)
class DepositAllTokenTypes(_Scalars):
    pool_token_amount: int
    maximum_token_a_amount: int
    maximum_token_b_amount: int

    opcode = Opcode.DEPOSIT_ALL_TOKEN_TYPES
    layout = struct.Struct("<QQQ")


@dataclass(frozen=True)
class WithdrawAllTokenTypes(_Scalars):
    pool_token_amount: int
    minimum_token_a_amount: int
    minimum_token_b_amount: int

    opcode = Opcode.WITHDRAW_ALL_TOKEN_TYPES
    layout = struct.Struct("<QQQ")


@dataclass(frozen=True)
class DepositSingleTokenTypeExactIn(_Scalars):
    source_token_amount: int
    minimum_pool_token_amount: int

    opcode = Opcode.DEPOSIT_SINGLE_TOKEN_TYPE_EXACT_IN
    layout = struct.Struct("<QQ")


@dataclass(frozen=True)
class WithdrawSingleTokenTypeExactOut(_Scalars):
    destination_token_amount: int
    maximum_pool_token_amount: int

    opcode = Opcode.WITHDRAW_SINGLE_TOKEN_TYPE_EXACT_OUT
    layout = struct.Struct("<QQ")


Instruction = Union[
    UpdateGlobalState,
    InitializePool,
    Swap,
    DepositAllTokenTypes,
    WithdrawAllTokenTypes,
    DepositSingleTokenTypeExactIn,
    WithdrawSingleTokenTypeExactOut,
]

INSTRUCTION_TYPES: Dict[Opcode, Type] = {
    Opcode.UPDATE_GLOBAL_STATE: UpdateGlobalState,
    Opcode.INITIALIZE_POOL: InitializePool,
    Opcode.SWAP: Swap,
    Opcode.DEPOSIT_ALL_TOKEN_TYPES: DepositAllTokenTypes,
    Opcode.WITHDRAW_ALL_TOKEN_TYPES: WithdrawAllTokenTypes,
    Opcode.DEPOSIT_SINGLE_TOKEN_TYPE_EXACT_IN: DepositSingleTokenTypeExactIn,
    Opcode.WITHDRAW_SINGLE_TOKEN_TYPE_EXACT_OUT: WithdrawSingleTokenTypeExactOut,
}


def pack_instruction(instruction: Instruction) -> bytes:
    return struct.pack("<B", int(instruction.opcode)) + instruction.pack_payload()


def unpack_instruction(data: bytes) -> Instruction:
    if not data:
        raise InvalidInstructionError(ErrorCode.INVALID_INSTRUCTION, "empty instruction")
    tag = data[0]
    try:
        opcode = Opcode(tag)
    except ValueError as exc:
        raise InvalidInstructionError(ErrorCode.INVALID_INSTRUCTION, f"unknown opcode: {tag}") from exc
    return INSTRUCTION_TYPES[opcode].unpack_payload(bytes(data[1:]))
