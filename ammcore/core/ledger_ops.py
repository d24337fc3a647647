"""
Ledger mutation records.

Handlers compute the full list of effects first; `issue` applies them in list
order only after every check has passed.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Sequence, Union

from .collaborators import Ledger, RecordStore
from .math import to_u64


def _require_amount(value: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError("amount must be an int")
    to_u64(value)


@dataclass(frozen=True)
class Transfer:
    source: str
    destination: str
    authority: str
    amount: int

    def __post_init__(self) -> None:
        _require_amount(self.amount)


@dataclass(frozen=True)
class MintTo:
    mint: str
    destination: str
    authority: str
    amount: int

    def __post_init__(self) -> None:
        _require_amount(self.amount)


@dataclass(frozen=True)
class Burn:
    source: str
    mint: str
    authority: str
    amount: int

    def __post_init__(self) -> None:
        _require_amount(self.amount)


@dataclass(frozen=True)
class NativeTransfer:
    source: str
    destination: str
    amount: int

    def __post_init__(self) -> None:
        _require_amount(self.amount)


@dataclass(frozen=True)
class WriteRecord:
    key: str
    record: Any


LedgerOp = Union[Transfer, MintTo, Burn, NativeTransfer, WriteRecord]


def issue(ops: Sequence[LedgerOp], *, ledger: Ledger, store: RecordStore) -> None:
    """Apply ledger mutations in order, then record writes."""
    for op in ops:
        if isinstance(op, Transfer):
            ledger.transfer(source=op.source, destination=op.destination, authority=op.authority, amount=op.amount)
        elif isinstance(op, MintTo):
            ledger.mint_to(mint=op.mint, destination=op.destination, authority=op.authority, amount=op.amount)
        elif isinstance(op, Burn):
            ledger.burn(source=op.source, mint=op.mint, authority=op.authority, amount=op.amount)
        elif isinstance(op, NativeTransfer):
            ledger.transfer_native(source=op.source, destination=op.destination, amount=op.amount)
        elif not isinstance(op, WriteRecord):
            raise TypeError(f"unknown ledger op: {type(op).__name__}")
    for op in ops:
        if isinstance(op, WriteRecord):
            store.put(op.key, op.record)
