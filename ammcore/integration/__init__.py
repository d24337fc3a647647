"""
Integration layer: reference collaborators and the atomic execution shell.
"""

from .derivation import HashDerivation
from .engine import AmmEngine, AmmEngineConfig, AmmTxResult
from .ledger import InMemoryLedger

__all__ = [
    "HashDerivation",
    "AmmEngine",
    "AmmEngineConfig",
    "AmmTxResult",
    "InMemoryLedger",
]
