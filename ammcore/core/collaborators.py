"""
Interfaces for the collaborators the processor depends on.

The processor never touches storage, balances or key derivation directly; it
goes through these. Reference in-memory implementations live under
`ammcore.integration` and `ammcore.state.store`.
"""

from __future__ import annotations

from typing import Any, Optional, Union

from ..state.accounts import Amount, MintRecord, PubKey, TokenAccountRecord

LedgerRecord = Union[TokenAccountRecord, MintRecord]


class Ledger:
    """
    Token ledger: account/mint reads plus atomic balance mutations.

    Mutations raise `LedgerError` when they cannot be applied (wrong authority,
    insufficient balance, mint mismatch).
    """

    def read(self, key: PubKey) -> Optional[LedgerRecord]:
        raise NotImplementedError

    def transfer(self, *, source: PubKey, destination: PubKey, authority: PubKey, amount: Amount) -> None:
        raise NotImplementedError

    def mint_to(self, *, mint: PubKey, destination: PubKey, authority: PubKey, amount: Amount) -> None:
        raise NotImplementedError

    def burn(self, *, source: PubKey, mint: PubKey, authority: PubKey, amount: Amount) -> None:
        raise NotImplementedError

    def transfer_native(self, *, source: PubKey, destination: PubKey, amount: Amount) -> None:
        raise NotImplementedError


class AuthorityDerivation:
    """Deterministic program-address derivation."""

    def derive(self, venue_key: PubKey, nonce: int) -> PubKey:
        raise NotImplementedError

    def state_address(self, seed: str) -> PubKey:
        raise NotImplementedError


class RecordStore:
    """Program-owned records (pools and the global state) keyed by account."""

    def get(self, key: PubKey) -> Optional[Any]:
        raise NotImplementedError

    def put(self, key: PubKey, record: Any) -> None:
        raise NotImplementedError
