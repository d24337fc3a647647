"""
Pool records.

A pool is created once by InitializePool and its identifiers never change
afterwards; reserves live in the ledger, not here.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.math import U8_MAX
from ..core.types import TradeDirection
from .accounts import PubKey


@dataclass(frozen=True)
class Pool:
    is_initialized: bool
    nonce: int
    venue_id: PubKey
    market_id: PubKey
    market_program_id: PubKey
    token_program_id: PubKey
    token_a: PubKey
    token_b: PubKey
    pool_mint: PubKey
    token_a_mint: PubKey
    token_b_mint: PubKey

    def __post_init__(self) -> None:
        if not isinstance(self.nonce, int) or isinstance(self.nonce, bool):
            raise TypeError("nonce must be an int")
        if not (0 <= self.nonce <= U8_MAX):
            raise ValueError(f"nonce must be in [0, {U8_MAX}]")
        if self.token_a == self.token_b:
            raise ValueError("token_a and token_b must be distinct accounts")

    def direction_from_source_account(self, key: PubKey) -> Optional[TradeDirection]:
        """A_TO_B when `key` is the A-side pool account, B_TO_A for the B side."""
        if key == self.token_a:
            return TradeDirection.A_TO_B
        if key == self.token_b:
            return TradeDirection.B_TO_A
        return None

    def direction_from_mint(self, mint: PubKey) -> Optional[TradeDirection]:
        if mint == self.token_a_mint:
            return TradeDirection.A_TO_B
        if mint == self.token_b_mint:
            return TradeDirection.B_TO_A
        return None

    def side_account(self, direction: TradeDirection) -> PubKey:
        return self.token_a if direction is TradeDirection.A_TO_B else self.token_b
