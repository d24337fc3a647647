from __future__ import annotations

import pytest

from ammcore.core.constants import INITIAL_STATE_OWNER
from ammcore.core.constraints import SWAP_CONSTRAINTS
from ammcore.core.types import TradeDirection
from ammcore.state.accounts import AccountRef, MintRecord, TokenAccountRecord
from ammcore.state.global_state import default_global_state
from ammcore.state.pools import Pool
from ammcore.state.store import RecordStore


def _pool(**overrides) -> Pool:  # type: ignore[no-untyped-def]
    fields = dict(
        is_initialized=True,
        nonce=1,
        venue_id="venue",
        market_id="market",
        market_program_id="market-program",
        token_program_id="token-program",
        token_a="pool-a",
        token_b="pool-b",
        pool_mint="lp",
        token_a_mint="mint-a",
        token_b_mint="mint-b",
    )
    fields.update(overrides)
    return Pool(**fields)


class TestPool:
    def test_directions(self):
        p = _pool()
        assert p.direction_from_source_account("pool-a") is TradeDirection.A_TO_B
        assert p.direction_from_source_account("pool-b") is TradeDirection.B_TO_A
        assert p.direction_from_source_account("elsewhere") is None
        assert p.direction_from_mint("mint-b") is TradeDirection.B_TO_A
        assert p.direction_from_mint("mint-c") is None
        assert p.side_account(TradeDirection.B_TO_A) == "pool-b"
        assert TradeDirection.A_TO_B.opposite() is TradeDirection.B_TO_A

    def test_invariants(self):
        with pytest.raises(ValueError):
            _pool(token_b="pool-a")
        with pytest.raises(ValueError):
            _pool(nonce=256)
        with pytest.raises(TypeError):
            _pool(nonce=True)


class TestRecords:
    def test_account_ref_requires_key(self):
        with pytest.raises(ValueError):
            AccountRef("")

    def test_token_and_mint_records(self):
        acct = TokenAccountRecord(mint="m", owner="o", amount=5)
        assert acct.with_amount(9).amount == 9
        assert acct.amount == 5
        assert MintRecord(supply=1).with_supply(3).supply == 3
        with pytest.raises(ValueError):
            TokenAccountRecord(mint="m", owner="o", amount=-1)


class TestRecordStore:
    def test_put_get_and_restore(self):
        store = RecordStore()
        state = default_global_state(SWAP_CONSTRAINTS, initial_state_owner=INITIAL_STATE_OWNER)
        store.put("state", state)
        snap = store.snapshot()
        store.put("pool", _pool())
        assert len(store) == 2
        assert "pool" in store
        store.restore(snap)
        assert "pool" not in store
        assert store.get("state") is state
        assert store.get("missing") is None

    def test_rejects_foreign_records(self):
        with pytest.raises(TypeError):
            RecordStore().put("x", {"not": "a record"})  # type: ignore[arg-type]
