"""
In-memory record store for pool and global-state records.

Records are immutable dataclasses, so a snapshot is a shallow copy of the
table.
"""

from __future__ import annotations

from typing import Dict, Optional, Union

from .accounts import PubKey
from .global_state import GlobalState
from .pools import Pool

Record = Union[GlobalState, Pool]


class RecordStore:
    def __init__(self) -> None:
        self._records: Dict[PubKey, Record] = {}

    def get(self, key: PubKey) -> Optional[Record]:
        return self._records.get(key)

    def put(self, key: PubKey, record: Record) -> None:
        if not isinstance(record, (GlobalState, Pool)):
            raise TypeError(f"unsupported record type: {type(record).__name__}")
        self._records[key] = record

    def __contains__(self, key: object) -> bool:
        return key in self._records

    def __len__(self) -> int:
        return len(self._records)

    def snapshot(self) -> Dict[PubKey, Record]:
        return dict(self._records)

    def restore(self, snapshot: Dict[PubKey, Record]) -> None:
        self._records = dict(snapshot)
