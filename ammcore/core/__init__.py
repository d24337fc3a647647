"""
Core AMM algorithms: fees, curves, governance floors and the wire codec.

The instruction processor lives in `ammcore.core.processor`.
"""

from .constraints import SWAP_CONSTRAINTS, GovernanceConstraints, load_constraints
from .curve import Curve
from .errors import AmmError, ErrorCode
from .fees import FeeSchedule
from .instruction import Opcode, pack_instruction, unpack_instruction
from .types import CurveKind, RoundDirection, TradeDirection, TradeResult

__all__ = [
    "SWAP_CONSTRAINTS",
    "GovernanceConstraints",
    "load_constraints",
    "Curve",
    "AmmError",
    "ErrorCode",
    "FeeSchedule",
    "Opcode",
    "pack_instruction",
    "unpack_instruction",
    "CurveKind",
    "RoundDirection",
    "TradeDirection",
    "TradeResult",
]
