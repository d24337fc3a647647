"""
Constant-product kernel (v1 semantics).

Pure integer functions for the `x * y = k` curve:
- swaps round the new destination reserve *up* (ceil division with the input
  reserve re-derived), so `k` never decreases;
- single-sided liquidity conversions use exact integer square roots, floored
  for deposits and ceiled for withdrawals.

Every function returns ``None`` when no trade is possible (zero output,
drained reserve, or a value leaving the 128-bit domain). Fees are not applied
here; see `ammcore.core.curve`.
"""

from __future__ import annotations

import math
from typing import Optional, Tuple


U128_MAX = (1 << 128) - 1


def _require_int(name: str, value: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")
    if value < 0:
        raise ValueError(f"{name} must be non-negative")


def _fits(value: int) -> bool:
    return 0 <= value <= U128_MAX


def ceil_div_rederive(dividend: int, divisor: int) -> Optional[Tuple[int, int]]:
    """
    Return ``(ceil(dividend / divisor), divisor')`` with ``divisor'`` re-derived
    so that ``quotient * divisor' >= dividend``.
    """
    if divisor == 0:
        return None
    quotient = dividend // divisor
    if quotient == 0:
        return None
    if dividend % divisor:
        quotient += 1
        divisor = -(-dividend // quotient)
    return quotient, divisor


def swap(*, source_amount: int, swap_source_amount: int, swap_destination_amount: int) -> Optional[Tuple[int, int]]:
    """
    Exact-in swap without fees.

    Returns ``(source_amount_swapped, destination_amount_swapped)``.
    """
    for name, v in (
        ("source_amount", source_amount),
        ("swap_source_amount", swap_source_amount),
        ("swap_destination_amount", swap_destination_amount),
    ):
        _require_int(name, v)

    invariant = swap_source_amount * swap_destination_amount
    new_swap_source_amount = swap_source_amount + source_amount
    if not _fits(invariant) or not _fits(new_swap_source_amount):
        return None

    rederived = ceil_div_rederive(invariant, new_swap_source_amount)
    if rederived is None:
        return None
    new_swap_destination_amount, new_swap_source_amount = rederived

    source_amount_swapped = new_swap_source_amount - swap_source_amount
    destination_amount_swapped = swap_destination_amount - new_swap_destination_amount
    if source_amount_swapped < 0 or destination_amount_swapped <= 0:
        return None
    return source_amount_swapped, destination_amount_swapped


def pool_tokens_for_deposit(*, source_amount: int, swap_token_amount: int, pool_supply: int) -> Optional[int]:
    """
    Pool tokens minted for a single-sided deposit (floor).

    `minted = isqrt(S^2 * (R + s) / R) - S`
    """
    for name, v in (
        ("source_amount", source_amount),
        ("swap_token_amount", swap_token_amount),
        ("pool_supply", pool_supply),
    ):
        _require_int(name, v)
    if swap_token_amount == 0:
        return None
    if source_amount == 0:
        return 0
    new_swap_token_amount = swap_token_amount + source_amount
    if not _fits(new_swap_token_amount):
        return None

    ratio_scaled = (pool_supply * pool_supply * new_swap_token_amount) // swap_token_amount
    minted = math.isqrt(ratio_scaled) - pool_supply
    if not _fits(minted):
        return None
    return minted


def pool_tokens_for_withdraw(*, destination_amount: int, swap_token_amount: int, pool_supply: int) -> Optional[int]:
    """
    Pool tokens burned for a single-sided exact-out withdrawal (ceiling).

    `burned = S - isqrt(S^2 * (R - s) / R)`
    """
    for name, v in (
        ("destination_amount", destination_amount),
        ("swap_token_amount", swap_token_amount),
        ("pool_supply", pool_supply),
    ):
        _require_int(name, v)
    if swap_token_amount == 0 or destination_amount > swap_token_amount:
        return None
    if destination_amount == 0:
        return 0

    remaining = swap_token_amount - destination_amount
    ratio_scaled = (pool_supply * pool_supply * remaining) // swap_token_amount
    burned = pool_supply - math.isqrt(ratio_scaled)
    if not _fits(burned):
        return None
    return burned
