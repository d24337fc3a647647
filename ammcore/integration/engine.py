"""
AMM execution adapter.

This is an imperative-shell wrapper around the functional core:
- Bounds-checks and decodes the raw instruction bytes.
- Runs the processor against the ledger and record store.
- Makes the whole instruction atomic: on any rejection, ledger balances and
  records are restored to their pre-instruction snapshot.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from ..core.constants import GLOBAL_STATE_SEED, INITIAL_STATE_OWNER
from ..core.constraints import CONSTRAINTS_PATH_ENV, SWAP_CONSTRAINTS, GovernanceConstraints, load_constraints
from ..core.errors import AmmError, ErrorCode
from ..core.ledger_ops import LedgerOp
from ..core.processor import ProcessContext, process
from ..state.accounts import AccountRef
from ..state.store import RecordStore
from .derivation import HashDerivation
from .ledger import InMemoryLedger

logger = logging.getLogger(__name__)

DEFAULT_PROGRAM_ID = "AmmCore1111111111111111111111111111111111111"


def _env_int(name: str, default: int, *, lo: int, hi: int) -> int:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return int(default)
    try:
        v = int(raw.strip())
    except ValueError:
        return int(default)
    if v < lo:
        return int(lo)
    if v > hi:
        return int(hi)
    return int(v)


def _env_str(name: str, default: str) -> str:
    raw = os.environ.get(name)
    if raw is None:
        return default
    v = raw.strip()
    return v if v else default


@dataclass(frozen=True)
class AmmEngineConfig:
    program_id: str = DEFAULT_PROGRAM_ID
    # YAML governance constraints; None keeps the built-in floors.
    constraints_path: Optional[str] = None
    initial_state_owner: str = INITIAL_STATE_OWNER
    # Longest encoding is UpdateGlobalState (1 + 8 + 24 + 33 bytes).
    max_instruction_bytes: int = 128

    @classmethod
    def from_env(cls) -> "AmmEngineConfig":
        constraints_path = _env_str(CONSTRAINTS_PATH_ENV, "")
        return cls(
            program_id=_env_str("AMM_PROGRAM_ID", DEFAULT_PROGRAM_ID),
            constraints_path=constraints_path or None,
            initial_state_owner=_env_str("AMM_INITIAL_STATE_OWNER", INITIAL_STATE_OWNER),
            max_instruction_bytes=_env_int("AMM_MAX_INSTRUCTION_BYTES", 128, lo=1, hi=4096),
        )

    def constraints(self) -> GovernanceConstraints:
        if self.constraints_path is None:
            return SWAP_CONSTRAINTS
        return load_constraints(self.constraints_path)


@dataclass(frozen=True)
class AmmTxResult:
    ok: bool
    ops: Tuple[LedgerOp, ...] = ()
    error: Optional[str] = None
    code: Optional[ErrorCode] = None
    disposition: Optional[str] = None


class AmmEngine:
    """Owns one deployment's ledger, record store and processing context."""

    def __init__(
        self,
        config: Optional[AmmEngineConfig] = None,
        *,
        ledger: Optional[InMemoryLedger] = None,
        store: Optional[RecordStore] = None,
    ) -> None:
        self.config = config or AmmEngineConfig()
        self.ledger = ledger if ledger is not None else InMemoryLedger()
        self.store = store if store is not None else RecordStore()
        self.derivation = HashDerivation(self.config.program_id)
        self.ctx = ProcessContext(
            program_id=self.config.program_id,
            ledger=self.ledger,
            derivation=self.derivation,
            store=self.store,
            constraints=self.config.constraints(),
            initial_state_owner=self.config.initial_state_owner,
        )

    @property
    def state_address(self) -> str:
        return self.derivation.state_address(GLOBAL_STATE_SEED)

    def pool_authority(self, pool_key: str, nonce: int) -> str:
        return self.derivation.derive(pool_key, nonce)

    def apply_instruction(self, data: bytes, accounts: Sequence[AccountRef]) -> AmmTxResult:
        """Apply one encoded instruction atomically."""
        if not isinstance(data, (bytes, bytearray)):
            return AmmTxResult(ok=False, error="instruction must be bytes", code=ErrorCode.INVALID_INSTRUCTION)
        if len(data) > self.config.max_instruction_bytes:
            return AmmTxResult(
                ok=False,
                error=f"instruction too large: {len(data)} > {self.config.max_instruction_bytes}",
                code=ErrorCode.INVALID_INSTRUCTION,
            )

        ledger_snapshot = self.ledger.snapshot()
        store_snapshot = self.store.snapshot()
        try:
            result = process(self.ctx, bytes(data), accounts)
        except Exception:
            self.ledger.restore(ledger_snapshot)
            self.store.restore(store_snapshot)
            logger.exception("Internal error while processing instruction")
            return AmmTxResult(ok=False, error="internal error")

        if not result.ok:
            self.ledger.restore(ledger_snapshot)
            self.store.restore(store_snapshot)
            err: AmmError = result.error  # type: ignore[assignment]
            logger.warning("Instruction rejected: %s (%s)", err.code.name, err.category)
            return AmmTxResult(ok=False, error=str(err), code=err.code, disposition=err.disposition)

        logger.info("Instruction applied: %d ops", len(result.ops))
        return AmmTxResult(ok=True, ops=result.ops)
