"""
Record state for the AMM: account references, pools, and the global state.
"""

from .accounts import AccountRef, MintRecord, TokenAccountRecord
from .global_state import GlobalState, apply_update, default_global_state
from .pools import Pool
from .store import RecordStore

__all__ = [
    "AccountRef",
    "MintRecord",
    "TokenAccountRecord",
    "GlobalState",
    "apply_update",
    "default_global_state",
    "Pool",
    "RecordStore",
]
