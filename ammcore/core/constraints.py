"""
Governance constraints.

A deployment fixes, before it starts processing, the minimum fee schedule, the
set of curve kinds pools may use, and the designated fee recipient. Every fee
schedule or curve supplied at runtime is checked against these floors before
any state is written.

The built-in `SWAP_CONSTRAINTS` apply unless the engine is pointed (through
`AmmEngineConfig.constraints_path` or `AMM_CONSTRAINTS_PATH`) at a YAML
document of the form:

    owner_key: <fee recipient key>
    valid_curve_kinds: [constant_product, constant_price]
    fees:
      fixed_fee_numerator: 20
      return_fee_numerator: 10
      fee_denominator: 10000

Omitted keys keep their built-in value.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, FrozenSet, Iterable, Mapping, Optional, Union

import yaml

from .constants import INITIAL_STATE_OWNER
from .curve import Curve
from .errors import ErrorCode, GovernanceViolationError
from .fees import FeeSchedule
from .types import CurveKind

logger = logging.getLogger(__name__)

CONSTRAINTS_PATH_ENV = "AMM_CONSTRAINTS_PATH"

_TOP_LEVEL_KEYS = frozenset({"owner_key", "valid_curve_kinds", "fees"})
_FEE_KEYS = ("fixed_fee_numerator", "return_fee_numerator", "fee_denominator")


def _coerce_curve_kind(value: Any) -> CurveKind:
    if isinstance(value, CurveKind):
        return value
    if isinstance(value, bool):
        raise ValueError(f"invalid curve kind: {value!r}")
    if isinstance(value, int):
        try:
            return CurveKind(value)
        except ValueError as exc:
            raise ValueError(f"invalid curve kind: {value!r}") from exc
    if isinstance(value, str) and value.strip():
        name = value.strip().upper()
        if name in CurveKind.__members__:
            return CurveKind[name]
    raise ValueError(f"invalid curve kind: {value!r}")


@dataclass(frozen=True)
class GovernanceConstraints:
    owner_key: str
    valid_curve_kinds: FrozenSet[CurveKind]
    fees: FeeSchedule

    def __post_init__(self) -> None:
        if not isinstance(self.owner_key, str) or not self.owner_key:
            raise ValueError("owner_key must be a non-empty string")
        kinds = frozenset(_coerce_curve_kind(k) for k in self.valid_curve_kinds)
        object.__setattr__(self, "valid_curve_kinds", kinds)
        if not isinstance(self.fees, FeeSchedule):
            raise TypeError("fees must be a FeeSchedule")

    def validate_curve(self, curve: Curve) -> None:
        """Both the declared kind and the calculator's own kind must be allowed."""
        if curve.kind in self.valid_curve_kinds and curve.calculator.kind in self.valid_curve_kinds:
            return
        raise GovernanceViolationError(ErrorCode.UNSUPPORTED_CURVE_TYPE, f"curve kind {curve.kind.name} is not allowed")

    def validate_fees(self, fees: FeeSchedule) -> None:
        """Each numerator must be at or above the floor; denominators must match exactly."""
        if (
            fees.return_fee_numerator >= self.fees.return_fee_numerator
            and fees.fixed_fee_numerator >= self.fees.fixed_fee_numerator
            and fees.fee_denominator == self.fees.fee_denominator
        ):
            return
        raise GovernanceViolationError(ErrorCode.INVALID_FEE, "fee schedule is below the governance floor")


SWAP_CONSTRAINTS = GovernanceConstraints(
    owner_key=INITIAL_STATE_OWNER,
    valid_curve_kinds=frozenset({CurveKind.CONSTANT_PRODUCT}),
    fees=FeeSchedule(fixed_fee_numerator=20, return_fee_numerator=10, fee_denominator=10_000),
)


def _parse_fees(raw: Any, default: FeeSchedule) -> FeeSchedule:
    if not isinstance(raw, Mapping):
        raise ValueError("fees must be a mapping")
    unknown = set(raw) - set(_FEE_KEYS)
    if unknown:
        raise ValueError(f"unknown fee keys: {sorted(unknown)}")
    values = {}
    for key in _FEE_KEYS:
        v = raw.get(key, getattr(default, key))
        if not isinstance(v, int) or isinstance(v, bool):
            raise ValueError(f"fees.{key} must be an int")
        values[key] = v
    try:
        fees = FeeSchedule(**values)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"invalid fees: {exc}") from exc
    try:
        fees.validate()
    except GovernanceViolationError as exc:
        raise ValueError(f"invalid fees: {exc.message}") from exc
    return fees


def constraints_from_mapping(
    doc: Mapping[str, Any], *, default: GovernanceConstraints = SWAP_CONSTRAINTS
) -> GovernanceConstraints:
    if not isinstance(doc, Mapping):
        raise ValueError("constraints document must be a mapping")
    unknown = set(doc) - _TOP_LEVEL_KEYS
    if unknown:
        raise ValueError(f"unknown constraints keys: {sorted(unknown)}")

    owner_key = doc.get("owner_key", default.owner_key)
    if not isinstance(owner_key, str) or not owner_key.strip():
        raise ValueError("owner_key must be a non-empty string")

    raw_kinds: Optional[Iterable[Any]] = doc.get("valid_curve_kinds", default.valid_curve_kinds)
    if isinstance(raw_kinds, (str, bytes)) or not isinstance(raw_kinds, Iterable):
        raise ValueError("valid_curve_kinds must be a list")
    kinds = frozenset(_coerce_curve_kind(k) for k in raw_kinds)
    if not kinds:
        raise ValueError("valid_curve_kinds must not be empty")

    fees = _parse_fees(doc["fees"], default.fees) if "fees" in doc else default.fees
    return GovernanceConstraints(owner_key=owner_key.strip(), valid_curve_kinds=kinds, fees=fees)


def load_constraints(path: Union[str, Path]) -> GovernanceConstraints:
    p = Path(path)
    try:
        doc = yaml.safe_load(p.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ValueError(f"constraints file {p} is not valid YAML: {exc}") from exc
    constraints = constraints_from_mapping(doc)
    logger.info(
        "Loaded governance constraints from %s (curves=%s, fees=%s/%s/%s)",
        p,
        sorted(k.name for k in constraints.valid_curve_kinds),
        constraints.fees.fixed_fee_numerator,
        constraints.fees.return_fee_numerator,
        constraints.fees.fee_denominator,
    )
    return constraints

