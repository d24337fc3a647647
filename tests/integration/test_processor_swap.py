from __future__ import annotations

from typing import List

from conftest import FEE_OWNER, MARKET_PROGRAM, RESERVE, TOKEN_PROGRAM, TRADER, Market, init_global_state

from ammcore.core.constants import NATIVE_MINT
from ammcore.core.errors import ErrorCode
from ammcore.core.instruction import InitializePool, Swap, pack_instruction
from ammcore.core.ledger_ops import NativeTransfer, Transfer
from ammcore.core.processor import plan
from ammcore.integration.engine import AmmEngine
from ammcore.state.accounts import AccountRef


def _replace(accounts: List[AccountRef], index: int, ref: AccountRef) -> List[AccountRef]:
    out = list(accounts)
    out[index] = ref
    return out


def _swap(market: Market, accounts: List[AccountRef], amount_in: int = 1000, minimum_amount_out: int = 0):  # type: ignore[no-untyped-def]
    ix = Swap(amount_in=amount_in, minimum_amount_out=minimum_amount_out)
    return market.engine.apply_instruction(pack_instruction(ix), accounts)


class TestSwapHappyPath:
    def test_a_to_b_moves_balances(self, market: Market):
        res = _swap(market, market.swap_accounts(), minimum_amount_out=996)
        assert res.ok, res.error

        ledger = market.ledger
        # 1000 in: owner fee 2 to the fee account, return fee 1 stays in the pool.
        assert ledger.balance("trader-a") == RESERVE - 1000
        assert ledger.balance("fee-a") == 2
        assert ledger.balance(market.token_a) == RESERVE + 998
        assert ledger.balance(market.token_b) == RESERVE - 996
        assert ledger.balance("trader-b") == RESERVE + 996

    def test_issues_three_transfers_in_order(self, market: Market):
        res = _swap(market, market.swap_accounts())
        assert res.ops == (
            Transfer("trader-a", market.token_a, TRADER, 998),
            Transfer("trader-a", "fee-a", TRADER, 2),
            Transfer(market.token_b, "trader-b", market.authority, 996),
        )

    def test_b_to_a(self, market: Market):
        accounts = market.swap_accounts(a_to_b=False, source="trader-b", destination="trader-a", fee_account="fee-b")
        res = _swap(market, accounts)
        assert res.ok, res.error
        assert market.ledger.balance("fee-b") == 2
        assert market.ledger.balance(market.token_b) == RESERVE + 998
        assert market.ledger.balance("trader-a") == RESERVE + 996

    def test_invariant_grows(self, market: Market):
        ledger = market.ledger
        k0 = ledger.balance(market.token_a) * ledger.balance(market.token_b)
        for _ in range(5):
            assert _swap(market, market.swap_accounts(), amount_in=50_000).ok
            k = ledger.balance(market.token_a) * ledger.balance(market.token_b)
            assert k >= k0
            k0 = k

    def test_plan_does_not_touch_the_ledger(self, market: Market):
        ops = plan(market.engine.ctx, Swap(1000, 0), market.swap_accounts())
        assert len(ops) == 3
        assert market.ledger.balance("trader-a") == RESERVE


class TestSwapRejections:
    def test_slippage(self, market: Market):
        res = _swap(market, market.swap_accounts(), minimum_amount_out=997)
        assert res.code == ErrorCode.EXCEEDED_SLIPPAGE
        assert res.disposition == "adjust_limits"
        assert market.ledger.balance("trader-a") == RESERVE

    def test_zero_input(self, market: Market):
        assert _swap(market, market.swap_accounts(), amount_in=0).code == ErrorCode.ZERO_TRADING_TOKENS

    def test_user_authority_must_sign(self, market: Market):
        accounts = _replace(market.swap_accounts(), 2, AccountRef(TRADER))
        assert _swap(market, accounts).code == ErrorCode.INVALID_SIGNER

    def test_fee_wallet_must_be_fee_owner(self, market: Market):
        assert _swap(market, market.swap_accounts(fee_wallet="mallory")).code == ErrorCode.INVALID_OWNER

    def test_fee_account_mint_must_match_source(self, market: Market):
        assert _swap(market, market.swap_accounts(fee_account="fee-b")).code == ErrorCode.INCORRECT_FEE_ACCOUNT

    def test_fee_account_owner(self, market: Market):
        market.ledger.create_account("other-fee-a", mint=market.mint_a, owner="someone")
        res = _swap(market, market.swap_accounts(fee_account="other-fee-a"))
        assert res.code == ErrorCode.INCORRECT_FEE_ACCOUNT

    def test_same_pool_account_both_sides(self, market: Market):
        accounts = _replace(market.swap_accounts(), 6, market.token(market.token_a))
        assert _swap(market, accounts).code == ErrorCode.INVALID_INPUT

    def test_user_account_aliases_pool(self, market: Market):
        assert _swap(market, market.swap_accounts(source=market.token_a)).code == ErrorCode.INVALID_INPUT

    def test_swap_account_outside_pool(self, market: Market):
        accounts = _replace(market.swap_accounts(), 5, market.token("fee-a"))
        assert _swap(market, accounts).code == ErrorCode.INCORRECT_SWAP_ACCOUNT

    def test_pool_not_owned_by_program(self, market: Market):
        accounts = _replace(market.swap_accounts(), 0, AccountRef(market.pool, owner="other"))
        assert _swap(market, accounts).code == ErrorCode.INCORRECT_PROGRAM_ID

    def test_uninitialized_pool(self, market: Market):
        accounts = _replace(market.swap_accounts(), 0, AccountRef("pool-2", owner=market.program_id))
        assert _swap(market, accounts).code == ErrorCode.UNINITIALIZED_POOL

    def test_wrong_authority(self, market: Market):
        accounts = _replace(market.swap_accounts(), 1, AccountRef("nobody"))
        assert _swap(market, accounts).code == ErrorCode.INVALID_PROGRAM_ADDRESS

    def test_wrong_pool_mint(self, market: Market):
        accounts = _replace(market.swap_accounts(), 8, market.token(market.mint_a))
        assert _swap(market, accounts).code == ErrorCode.INCORRECT_POOL_MINT

    def test_wrong_token_program(self, market: Market):
        accounts = _replace(market.swap_accounts(), 11, AccountRef("OtherTokenProgram"))
        assert _swap(market, accounts).code == ErrorCode.INCORRECT_TOKEN_PROGRAM_ID

    def test_insufficient_funds_rejected_by_ledger(self, market: Market):
        res = _swap(market, market.swap_accounts(), amount_in=2 * RESERVE)
        assert res.code == ErrorCode.LEDGER_REJECTED
        assert market.ledger.balance(market.token_b) == RESERVE

    def test_partial_effects_are_rolled_back(self, market: Market):
        # 999 covers the pool inflow (998) but not the owner fee (2).
        market.ledger.create_account("poor-a", mint=market.mint_a, owner=TRADER, amount=999)
        res = _swap(market, market.swap_accounts(source="poor-a"))
        assert res.code == ErrorCode.LEDGER_REJECTED
        assert market.ledger.balance("poor-a") == 999
        assert market.ledger.balance(market.token_a) == RESERVE
        assert market.ledger.balance("fee-a") == 0


def _native_market() -> Market:
    """A pool whose A side is the wrapped native mint."""
    engine = AmmEngine()
    init_global_state(engine)
    authority = engine.pool_authority("pool-n", 3)
    market = Market(engine=engine, pool="pool-n", authority=authority, mint_a=NATIVE_MINT)
    ledger = engine.ledger
    ledger.create_mint(NATIVE_MINT, decimals=9)
    ledger.create_mint(market.mint_b, decimals=6)
    ledger.create_mint(market.pool_mint, decimals=8, mint_authority=authority)
    ledger.create_account(market.token_a, mint=NATIVE_MINT, owner=authority, amount=RESERVE)
    ledger.create_account(market.token_b, mint=market.mint_b, owner=authority, amount=RESERVE)
    ledger.create_account("lp-dest", mint=market.pool_mint, owner="lp-owner")
    ledger.create_account("trader-a", mint=NATIVE_MINT, owner=TRADER, amount=RESERVE)
    ledger.create_account("trader-b", mint=market.mint_b, owner=TRADER)
    ledger.set_native_balance(TRADER, 10)

    accounts = [
        market.pool_ref(),
        AccountRef(authority),
        market.state_ref(),
        AccountRef("venue-n"),
        market.token(market.token_a),
        market.token(market.token_b),
        market.token(market.pool_mint),
        market.token("lp-dest"),
        AccountRef("market-n", owner=MARKET_PROGRAM),
        AccountRef(TOKEN_PROGRAM),
        AccountRef(MARKET_PROGRAM),
        AccountRef("admin", is_signer=True),
    ]
    res = engine.apply_instruction(pack_instruction(InitializePool(nonce=3)), accounts)
    assert res.ok, res.error
    return market


class TestNativeFee:
    def test_owner_fee_paid_as_native_transfer(self):
        market = _native_market()
        res = _swap(market, market.swap_accounts(fee_account=FEE_OWNER))
        assert res.ok, res.error
        assert res.ops[1] == NativeTransfer(TRADER, FEE_OWNER, 2)
        assert market.ledger.native_balance(FEE_OWNER) == 2
        assert market.ledger.native_balance(TRADER) == 8
        assert market.ledger.balance("trader-a") == RESERVE - 998
        assert market.ledger.balance("trader-b") == 996

    def test_native_fee_needs_native_balance(self):
        market = _native_market()
        market.ledger.set_native_balance(TRADER, 1)
        res = _swap(market, market.swap_accounts(fee_account=FEE_OWNER))
        assert res.code == ErrorCode.LEDGER_REJECTED
        assert market.ledger.balance("trader-a") == RESERVE
