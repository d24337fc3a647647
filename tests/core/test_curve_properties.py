"""Property tests for the fee-aware constant-product curve.

Uses Hypothesis to check the pool-protecting invariants over random reserves,
trade sizes and fee schedules.
"""

from __future__ import annotations

import importlib.util

import pytest

if importlib.util.find_spec("hypothesis") is None:  # pragma: no cover
    pytest.skip("hypothesis not installed", allow_module_level=True)

import hypothesis.strategies as st
from hypothesis import given, settings

from ammcore.core.curve import Curve
from ammcore.core.fees import FeeSchedule
from ammcore.core.types import RoundDirection, TradeDirection

reserves = st.integers(min_value=1, max_value=10**15)
amounts = st.integers(min_value=0, max_value=10**15)
supplies = st.integers(min_value=1, max_value=10**15)


@st.composite
def fee_schedules(draw) -> FeeSchedule:
    denominator = draw(st.integers(min_value=1, max_value=100_000))
    fixed = draw(st.integers(min_value=0, max_value=denominator // 10))
    ret = draw(st.integers(min_value=0, max_value=denominator // 10))
    return FeeSchedule(fixed, ret, denominator)


@given(amount=amounts, src=reserves, dst=reserves, fees=fee_schedules())
@settings(max_examples=300, deadline=None)
def test_swap_never_shrinks_invariant(amount: int, src: int, dst: int, fees: FeeSchedule) -> None:
    r = Curve.constant_product().swap(amount, src, dst, TradeDirection.A_TO_B, fees)
    if r is None:
        return
    assert r.source_amount_swapped <= amount
    assert 0 < r.destination_amount_swapped < dst
    # The owner fee leaves the pool, yet k still does not decrease.
    assert r.new_source_amount * r.new_destination_amount >= src * dst
    assert r.new_source_amount == src + r.source_amount_swapped - r.owner_fee


@given(amount=amounts, src=reserves, dst=reserves, fees=fee_schedules())
@settings(max_examples=200, deadline=None)
def test_larger_input_never_pays_less(amount: int, src: int, dst: int, fees: FeeSchedule) -> None:
    curve = Curve.constant_product()
    small = curve.swap(amount, src, dst, TradeDirection.A_TO_B, fees)
    large = curve.swap(amount * 2, src, dst, TradeDirection.A_TO_B, fees)
    if small is None or large is None:
        return
    assert large.destination_amount_swapped >= small.destination_amount_swapped


@given(pool_tokens=amounts, supply=supplies, a=reserves, b=reserves)
@settings(max_examples=200, deadline=None)
def test_ceiling_never_below_floor(pool_tokens: int, supply: int, a: int, b: int) -> None:
    curve = Curve.constant_product()
    up = curve.pool_tokens_to_trading_tokens(pool_tokens, supply, a, b, RoundDirection.CEILING)
    down = curve.pool_tokens_to_trading_tokens(pool_tokens, supply, a, b, RoundDirection.FLOOR)
    if up is None or down is None:
        return
    assert 0 <= up.token_a_amount - down.token_a_amount <= 1
    assert 0 <= up.token_b_amount - down.token_b_amount <= 1


@given(amount=st.integers(min_value=1, max_value=10**9), reserve=reserves, supply=supplies, fees=fee_schedules())
@settings(max_examples=200, deadline=None)
def test_round_trip_single_sided_never_profits(amount: int, reserve: int, supply: int, fees: FeeSchedule) -> None:
    curve = Curve.constant_product()
    minted = curve.deposit_single_token_type(amount, reserve, reserve, supply, TradeDirection.A_TO_B, fees)
    burned = curve.withdraw_single_token_type_exact_out(amount, reserve, reserve, supply, TradeDirection.A_TO_B, fees)
    if minted is None or burned is None:
        return
    # Taking `amount` back out of the same pool costs at least what depositing it earned.
    assert burned >= minted
