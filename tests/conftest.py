"""Shared fixtures: an engine with one initialized constant-product pool."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

import pytest

from ammcore.core.constants import INITIAL_STATE_OWNER
from ammcore.core.constraints import SWAP_CONSTRAINTS
from ammcore.core.curve import Curve
from ammcore.core.fees import FeeSchedule
from ammcore.core.instruction import InitializePool, UpdateGlobalState, pack_instruction
from ammcore.integration.engine import AmmEngine
from ammcore.state.accounts import AccountRef

TOKEN_PROGRAM = "TokenProgram1111"
MARKET_PROGRAM = "MarketProgram1111"
ADMIN = "admin"
FEE_OWNER = "fee-owner"
TRADER = "trader"
LP_OWNER = "lp-owner"

POOL = "pool-1"
NONCE = 7
RESERVE = 1_000_000
INITIAL_SUPPLY = 1_000_000_000


@dataclass
class Market:
    engine: AmmEngine
    pool: str
    authority: str
    token_a: str = "pool-a"
    token_b: str = "pool-b"
    pool_mint: str = "lp-mint"
    mint_a: str = "mint-a"
    mint_b: str = "mint-b"

    @property
    def ledger(self):
        return self.engine.ledger

    @property
    def program_id(self) -> str:
        return self.engine.config.program_id

    def pool_ref(self) -> AccountRef:
        return AccountRef(self.pool, owner=self.program_id)

    def state_ref(self) -> AccountRef:
        return AccountRef(self.engine.state_address, owner=self.program_id)

    def token(self, key: str) -> AccountRef:
        return AccountRef(key, owner=TOKEN_PROGRAM)

    def signer(self, key: str) -> AccountRef:
        return AccountRef(key, is_signer=True)

    def swap_accounts(
        self,
        *,
        a_to_b: bool = True,
        source: str = "trader-a",
        destination: str = "trader-b",
        fee_account: str = "fee-a",
        fee_wallet: str = FEE_OWNER,
        user: str = TRADER,
    ) -> List[AccountRef]:
        swap_source, swap_destination = (self.token_a, self.token_b) if a_to_b else (self.token_b, self.token_a)
        return [
            self.pool_ref(),
            AccountRef(self.authority),
            self.signer(user),
            self.state_ref(),
            self.token(source),
            self.token(swap_source),
            self.token(swap_destination),
            self.token(destination),
            self.token(self.pool_mint),
            self.token(fee_account),
            AccountRef(fee_wallet),
            AccountRef(TOKEN_PROGRAM),
        ]

    def deposit_all_accounts(self, *, user: str = TRADER, destination: str = "trader-lp") -> List[AccountRef]:
        return [
            self.pool_ref(),
            AccountRef(self.authority),
            self.signer(user),
            self.state_ref(),
            self.token("trader-a"),
            self.token("trader-b"),
            self.token(self.token_a),
            self.token(self.token_b),
            self.token(self.pool_mint),
            self.token(destination),
            AccountRef(TOKEN_PROGRAM),
        ]

    def withdraw_all_accounts(self, *, user: str = LP_OWNER, source: str = "lp-dest") -> List[AccountRef]:
        return [
            self.pool_ref(),
            AccountRef(self.authority),
            self.signer(user),
            self.state_ref(),
            self.token(self.pool_mint),
            self.token(source),
            self.token(self.token_a),
            self.token(self.token_b),
            self.token("lp-a"),
            self.token("lp-b"),
            AccountRef(TOKEN_PROGRAM),
        ]

    def deposit_single_accounts(self, *, source: str = "trader-a", destination: str = "trader-lp") -> List[AccountRef]:
        return [
            self.pool_ref(),
            AccountRef(self.authority),
            self.signer(TRADER),
            self.state_ref(),
            self.token(source),
            self.token(self.token_a),
            self.token(self.token_b),
            self.token(self.pool_mint),
            self.token(destination),
            AccountRef(TOKEN_PROGRAM),
        ]

    def withdraw_single_accounts(self, *, destination: str = "lp-a", source: str = "lp-dest") -> List[AccountRef]:
        return [
            self.pool_ref(),
            AccountRef(self.authority),
            self.signer(LP_OWNER),
            self.state_ref(),
            self.token(self.pool_mint),
            self.token(source),
            self.token(self.token_a),
            self.token(self.token_b),
            self.token(destination),
            AccountRef(TOKEN_PROGRAM),
        ]


def update_state_accounts(
    engine: AmmEngine, *, current_owner: str = INITIAL_STATE_OWNER, new_owner: str = ADMIN, signed: bool = True
) -> List[AccountRef]:
    return [
        AccountRef(engine.state_address, owner=engine.config.program_id),
        AccountRef(current_owner, is_signer=signed),
        AccountRef(new_owner),
        AccountRef(FEE_OWNER),
    ]


def init_global_state(
    engine: AmmEngine,
    *,
    fees: FeeSchedule = SWAP_CONSTRAINTS.fees,
    curve: Optional[Curve] = None,
    initial_supply: int = INITIAL_SUPPLY,
) -> None:
    ix = UpdateGlobalState(
        initial_supply=initial_supply,
        fees=fees,
        curve=curve if curve is not None else Curve.constant_product(),
    )
    res = engine.apply_instruction(pack_instruction(ix), update_state_accounts(engine))
    assert res.ok, res.error


def seed_pool_accounts(engine: AmmEngine, *, pool: str = POOL, nonce: int = NONCE, reserve: int = RESERVE) -> Market:
    """Create mints and token accounts for one pool, without initializing it."""
    authority = engine.pool_authority(pool, nonce)
    market = Market(engine=engine, pool=pool, authority=authority)
    ledger = engine.ledger
    ledger.create_mint(market.mint_a, decimals=6)
    ledger.create_mint(market.mint_b, decimals=6)
    ledger.create_mint(market.pool_mint, decimals=8, mint_authority=authority)

    ledger.create_account(market.token_a, mint=market.mint_a, owner=authority, amount=reserve)
    ledger.create_account(market.token_b, mint=market.mint_b, owner=authority, amount=reserve)
    ledger.create_account("lp-dest", mint=market.pool_mint, owner=LP_OWNER)
    ledger.create_account("lp-a", mint=market.mint_a, owner=LP_OWNER)
    ledger.create_account("lp-b", mint=market.mint_b, owner=LP_OWNER)

    ledger.create_account("fee-a", mint=market.mint_a, owner=FEE_OWNER)
    ledger.create_account("fee-b", mint=market.mint_b, owner=FEE_OWNER)

    ledger.create_account("trader-a", mint=market.mint_a, owner=TRADER, amount=RESERVE)
    ledger.create_account("trader-b", mint=market.mint_b, owner=TRADER, amount=RESERVE)
    ledger.create_account("trader-lp", mint=market.pool_mint, owner=TRADER)
    return market


def initialize_pool_accounts(market: Market, *, current_owner: str = ADMIN) -> List[AccountRef]:
    return [
        market.pool_ref(),
        AccountRef(market.authority),
        market.state_ref(),
        AccountRef("venue-1"),
        market.token(market.token_a),
        market.token(market.token_b),
        market.token(market.pool_mint),
        market.token("lp-dest"),
        AccountRef("market-1", owner=MARKET_PROGRAM),
        AccountRef(TOKEN_PROGRAM),
        AccountRef(MARKET_PROGRAM),
        AccountRef(current_owner, is_signer=True),
    ]


def open_pool(market: Market) -> None:
    res = market.engine.apply_instruction(
        pack_instruction(InitializePool(nonce=NONCE)), initialize_pool_accounts(market)
    )
    assert res.ok, res.error


@pytest.fixture
def engine() -> AmmEngine:
    return AmmEngine()


@pytest.fixture
def seeded(engine: AmmEngine) -> Market:
    """Global state initialized, pool accounts created, pool not yet initialized."""
    init_global_state(engine)
    return seed_pool_accounts(engine)


@pytest.fixture
def market(seeded: Market) -> Market:
    """A live 1_000_000 / 1_000_000 constant-product pool with default fees."""
    open_pool(seeded)
    return seeded
