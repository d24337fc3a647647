"""
Deterministic address derivation (sha256 stand-in for program-derived addresses).

Derived keys are `"0x" + sha256(domain || program_id || ...)`. They only need
to be deterministic and collision-resistant for the processor's equality
checks.
"""

from __future__ import annotations

import hashlib

from ..core.collaborators import AuthorityDerivation
from ..core.math import U8_MAX


def _domain(label: str) -> bytes:
    return label.encode("ascii") + b"\x00"


class HashDerivation(AuthorityDerivation):
    def __init__(self, program_id: str) -> None:
        if not isinstance(program_id, str) or not program_id:
            raise ValueError("program_id must be a non-empty string")
        self.program_id = program_id

    def derive(self, venue_key: str, nonce: int) -> str:
        if not isinstance(nonce, int) or isinstance(nonce, bool) or not (0 <= nonce <= U8_MAX):
            raise ValueError(f"nonce must be in [0, {U8_MAX}]")
        data = (
            _domain("AmmPoolAuthority")
            + self.program_id.encode("utf-8")
            + b"\x00"
            + venue_key.encode("utf-8")
            + b"\x00"
            + bytes([nonce])
        )
        return "0x" + hashlib.sha256(data).hexdigest()

    def state_address(self, seed: str) -> str:
        data = _domain("AmmStateAddress") + seed.encode("utf-8") + b"\x00" + self.program_id.encode("utf-8")
        return "0x" + hashlib.sha256(data).hexdigest()
