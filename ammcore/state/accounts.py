"""
Account references and the ledger records they resolve to.

Keys are opaque strings (base58 addresses in production, any unique string in
tests).
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional


PubKey = str
Amount = int


@dataclass(frozen=True)
class AccountRef:
    """
    One entry of an instruction's account list.

    `owner` is the program that owns the referenced record (the token program
    for token accounts and mints, this program for pool and state records).
    """

    key: PubKey
    owner: PubKey = ""
    is_signer: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.key, str) or not self.key:
            raise ValueError("account key must be a non-empty string")


@dataclass(frozen=True)
class TokenAccountRecord:
    mint: PubKey
    owner: PubKey
    amount: Amount = 0
    delegate: Optional[PubKey] = None
    close_authority: Optional[PubKey] = None
    is_frozen: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.amount, int) or isinstance(self.amount, bool) or self.amount < 0:
            raise ValueError(f"token amount must be a non-negative int: {self.amount!r}")

    def with_amount(self, amount: Amount) -> "TokenAccountRecord":
        return replace(self, amount=amount)


@dataclass(frozen=True)
class MintRecord:
    supply: Amount = 0
    decimals: int = 0
    mint_authority: Optional[PubKey] = None
    freeze_authority: Optional[PubKey] = None

    def __post_init__(self) -> None:
        if not isinstance(self.supply, int) or isinstance(self.supply, bool) or self.supply < 0:
            raise ValueError(f"mint supply must be a non-negative int: {self.supply!r}")

    def with_supply(self, supply: Amount) -> "MintRecord":
        return replace(self, supply=supply)
