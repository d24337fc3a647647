"""
Constant-price kernel (v1 semantics).

Token B is always worth `token_b_price` units of token A:
- B -> A pays out `amount * price`;
- A -> B pays out `amount // price`; the remainder stays with the trader.

Single-sided liquidity is priced by value share against the pool's total
value `a + b * price` (floor for deposits, ceiling for withdrawals).
"""

from __future__ import annotations

from typing import Optional, Tuple


U128_MAX = (1 << 128) - 1


def _require_int(name: str, value: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")
    if value < 0:
        raise ValueError(f"{name} must be non-negative")


def swap(*, source_amount: int, token_b_price: int, a_to_b: bool) -> Optional[Tuple[int, int]]:
    """Returns ``(source_amount_swapped, destination_amount_swapped)``."""
    _require_int("source_amount", source_amount)
    _require_int("token_b_price", token_b_price)
    if token_b_price == 0:
        return None

    if a_to_b:
        destination_amount_swapped = source_amount // token_b_price
        source_amount_swapped = source_amount - (source_amount % token_b_price)
    else:
        source_amount_swapped = source_amount
        destination_amount_swapped = source_amount * token_b_price

    if source_amount_swapped == 0 or destination_amount_swapped == 0:
        return None
    if destination_amount_swapped > U128_MAX:
        return None
    return source_amount_swapped, destination_amount_swapped


def normalized_value(*, swap_token_a_amount: int, swap_token_b_amount: int, token_b_price: int) -> int:
    _require_int("swap_token_a_amount", swap_token_a_amount)
    _require_int("swap_token_b_amount", swap_token_b_amount)
    _require_int("token_b_price", token_b_price)
    return swap_token_a_amount + swap_token_b_amount * token_b_price


def pool_tokens_for_value(
    *,
    token_amount: int,
    token_is_a: bool,
    swap_token_a_amount: int,
    swap_token_b_amount: int,
    pool_supply: int,
    token_b_price: int,
    round_up: bool,
) -> Optional[int]:
    """
    Pool tokens equivalent to `token_amount` of one side.

    `pool_tokens = S * value / (a + b * price)`
    """
    _require_int("token_amount", token_amount)
    _require_int("pool_supply", pool_supply)
    given_value = token_amount if token_is_a else token_amount * token_b_price
    total_value = normalized_value(
        swap_token_a_amount=swap_token_a_amount,
        swap_token_b_amount=swap_token_b_amount,
        token_b_price=token_b_price,
    )
    if total_value == 0:
        return None

    numerator = pool_supply * given_value
    pool_tokens = numerator // total_value
    if round_up and numerator % total_value:
        pool_tokens += 1
    if pool_tokens > U128_MAX:
        return None
    return pool_tokens
