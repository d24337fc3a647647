"""
Process-wide configuration record and its lifecycle.

States: uninitialized -> initialized. The first administrative write starts
from a default population (built from the governance constraints and a fixed
initial owner); that owner must then sign the write. Every later write must be
signed by the current owner. New fees and curve are re-validated each time.

`apply_update` is pure: it returns the record to persist or raises, and never
yields a partially updated record.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.constants import INITIAL_STATE_OWNER, INITIAL_SWAP_POOL_AMOUNT
from ..core.constraints import GovernanceConstraints
from ..core.curve import Curve
from ..core.errors import AuthorizationError, ErrorCode
from ..core.fees import FeeSchedule
from ..core.math import U64_MAX
from .accounts import PubKey


@dataclass(frozen=True)
class GlobalState:
    is_initialized: bool
    state_owner: PubKey
    fee_owner: PubKey
    fees: FeeSchedule
    curve: Curve
    initial_supply: int

    def __post_init__(self) -> None:
        if not isinstance(self.initial_supply, int) or isinstance(self.initial_supply, bool):
            raise TypeError("initial_supply must be an int")
        if not (0 <= self.initial_supply <= U64_MAX):
            raise ValueError(f"initial_supply must be in [0, {U64_MAX}]")


def default_global_state(
    constraints: GovernanceConstraints, *, initial_state_owner: PubKey = INITIAL_STATE_OWNER
) -> GlobalState:
    return GlobalState(
        is_initialized=True,
        state_owner=initial_state_owner,
        fee_owner=constraints.owner_key,
        fees=constraints.fees,
        curve=Curve.constant_product(),
        initial_supply=INITIAL_SWAP_POOL_AMOUNT,
    )


def effective_state(
    current: Optional[GlobalState],
    constraints: GovernanceConstraints,
    *,
    initial_state_owner: PubKey = INITIAL_STATE_OWNER,
) -> GlobalState:
    """The stored record, or the default population when nothing usable is stored."""
    if current is None or not current.is_initialized:
        return default_global_state(constraints, initial_state_owner=initial_state_owner)
    return current


def apply_update(
    current: Optional[GlobalState],
    *,
    constraints: GovernanceConstraints,
    caller: PubKey,
    new_owner: PubKey,
    fee_owner: PubKey,
    fees: FeeSchedule,
    curve: Curve,
    initial_supply: int,
    initial_state_owner: PubKey = INITIAL_STATE_OWNER,
) -> GlobalState:
    """
    Validate an administrative write and return the record to persist.

    Check order: owner match, governance curve, governance fees, fee
    self-consistency, curve self-consistency.
    """
    state = effective_state(current, constraints, initial_state_owner=initial_state_owner)
    if state.state_owner != caller:
        raise AuthorizationError(ErrorCode.INVALID_STATE_OWNER, f"{caller} is not the state owner")

    constraints.validate_curve(curve)
    constraints.validate_fees(fees)
    fees.validate()
    curve.validate()

    return GlobalState(
        is_initialized=True,
        state_owner=new_owner,
        fee_owner=fee_owner,
        fees=fees,
        curve=curve,
        initial_supply=initial_supply,
    )
