from __future__ import annotations

import pytest

from ammcore.core.errors import CalculationError, ErrorCode
from ammcore.core.math import (
    U64_MAX,
    U128_MAX,
    checked_add,
    checked_div,
    checked_mul,
    checked_rem,
    checked_sub,
    is_u64,
    to_u64,
    to_u128,
)


def test_checked_ops_stay_in_u128() -> None:
    assert checked_add(U128_MAX, 0) == U128_MAX
    assert checked_add(U128_MAX, 1) is None
    assert checked_sub(0, 1) is None
    assert checked_sub(5, 5) == 0
    assert checked_mul(1 << 64, 1 << 64) is None
    assert checked_mul(1 << 63, 1 << 64) == 1 << 127


def test_division_by_zero_is_none() -> None:
    assert checked_div(7, 0) is None
    assert checked_rem(7, 0) is None
    assert checked_div(7, 2) == 3
    assert checked_rem(7, 2) == 1


def test_narrowing() -> None:
    assert to_u64(U64_MAX) == U64_MAX
    assert to_u128(U64_MAX + 1) == U64_MAX + 1
    assert not is_u64(True)

    with pytest.raises(CalculationError) as exc:
        to_u64(U64_MAX + 1)
    assert exc.value.code == ErrorCode.CONVERSION_FAILURE
    with pytest.raises(CalculationError):
        to_u128(-1)
