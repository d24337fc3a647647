"""
In-memory reference ledger.

Holds token accounts, mints and native balances. Each mutation is checked and
applied in full or not at all; sequences of mutations are made atomic by the
caller through `snapshot()` / `restore()`.
"""

from __future__ import annotations

from typing import Dict, Optional, Tuple

from ..core.collaborators import Ledger, LedgerRecord
from ..core.errors import LedgerError
from ..core.math import U64_MAX
from ..state.accounts import MintRecord, TokenAccountRecord

LedgerSnapshot = Tuple[Dict[str, TokenAccountRecord], Dict[str, MintRecord], Dict[str, int]]


def _require_amount(amount: int) -> None:
    if not isinstance(amount, int) or isinstance(amount, bool) or not (0 <= amount <= U64_MAX):
        raise LedgerError(f"amount out of range: {amount!r}")


class InMemoryLedger(Ledger):
    def __init__(self) -> None:
        self._accounts: Dict[str, TokenAccountRecord] = {}
        self._mints: Dict[str, MintRecord] = {}
        self._native: Dict[str, int] = {}

    # -- setup --------------------------------------------------------------

    def create_mint(
        self,
        key: str,
        *,
        decimals: int,
        mint_authority: Optional[str] = None,
        freeze_authority: Optional[str] = None,
        supply: int = 0,
    ) -> MintRecord:
        if key in self._mints or key in self._accounts:
            raise ValueError(f"ledger key already exists: {key}")
        mint = MintRecord(
            supply=supply, decimals=decimals, mint_authority=mint_authority, freeze_authority=freeze_authority
        )
        self._mints[key] = mint
        return mint

    def create_account(self, key: str, *, mint: str, owner: str, amount: int = 0, **flags) -> TokenAccountRecord:
        if key in self._mints or key in self._accounts:
            raise ValueError(f"ledger key already exists: {key}")
        if mint not in self._mints:
            raise ValueError(f"unknown mint: {mint}")
        account = TokenAccountRecord(mint=mint, owner=owner, amount=amount, **flags)
        self._accounts[key] = account
        return account

    def set_native_balance(self, key: str, lamports: int) -> None:
        if lamports < 0:
            raise ValueError("native balance cannot be negative")
        self._native[key] = lamports

    # -- reads --------------------------------------------------------------

    def read(self, key: str) -> Optional[LedgerRecord]:
        if key in self._accounts:
            return self._accounts[key]
        return self._mints.get(key)

    def balance(self, key: str) -> int:
        account = self._accounts.get(key)
        if account is None:
            raise KeyError(key)
        return account.amount

    def supply(self, mint: str) -> int:
        return self._mints[mint].supply

    def native_balance(self, key: str) -> int:
        return self._native.get(key, 0)

    # -- mutations ----------------------------------------------------------

    def _account(self, key: str) -> TokenAccountRecord:
        account = self._accounts.get(key)
        if account is None:
            raise LedgerError(f"unknown token account: {key}")
        return account

    def _mint(self, key: str) -> MintRecord:
        mint = self._mints.get(key)
        if mint is None:
            raise LedgerError(f"unknown mint: {key}")
        return mint

    @staticmethod
    def _check_authority(account: TokenAccountRecord, authority: str, key: str) -> None:
        if authority != account.owner and authority != account.delegate:
            raise LedgerError(f"{authority} may not move funds from {key}")
        if account.is_frozen:
            raise LedgerError(f"account {key} is frozen")

    def transfer(self, *, source: str, destination: str, authority: str, amount: int) -> None:
        _require_amount(amount)
        src = self._account(source)
        dst = self._account(destination)
        self._check_authority(src, authority, source)
        if dst.is_frozen:
            raise LedgerError(f"account {destination} is frozen")
        if src.mint != dst.mint:
            raise LedgerError(f"mint mismatch: {source} -> {destination}")
        if src.amount < amount:
            raise LedgerError(f"insufficient funds in {source}: {src.amount} < {amount}")
        if source == destination:
            return
        if dst.amount + amount > U64_MAX:
            raise LedgerError(f"balance overflow in {destination}")
        self._accounts[source] = src.with_amount(src.amount - amount)
        self._accounts[destination] = dst.with_amount(dst.amount + amount)

    def mint_to(self, *, mint: str, destination: str, authority: str, amount: int) -> None:
        _require_amount(amount)
        m = self._mint(mint)
        dst = self._account(destination)
        if m.mint_authority is None or authority != m.mint_authority:
            raise LedgerError(f"{authority} is not the mint authority of {mint}")
        if dst.mint != mint:
            raise LedgerError(f"account {destination} does not hold mint {mint}")
        if m.supply + amount > U64_MAX or dst.amount + amount > U64_MAX:
            raise LedgerError(f"supply overflow for {mint}")
        self._mints[mint] = m.with_supply(m.supply + amount)
        self._accounts[destination] = dst.with_amount(dst.amount + amount)

    def burn(self, *, source: str, mint: str, authority: str, amount: int) -> None:
        _require_amount(amount)
        m = self._mint(mint)
        src = self._account(source)
        self._check_authority(src, authority, source)
        if src.mint != mint:
            raise LedgerError(f"account {source} does not hold mint {mint}")
        if src.amount < amount:
            raise LedgerError(f"insufficient funds in {source}: {src.amount} < {amount}")
        self._mints[mint] = m.with_supply(m.supply - amount)
        self._accounts[source] = src.with_amount(src.amount - amount)

    def transfer_native(self, *, source: str, destination: str, amount: int) -> None:
        _require_amount(amount)
        have = self._native.get(source, 0)
        if have < amount:
            raise LedgerError(f"insufficient native balance in {source}: {have} < {amount}")
        self._native[source] = have - amount
        self._native[destination] = self._native.get(destination, 0) + amount

    # -- atomicity ----------------------------------------------------------

    def snapshot(self) -> LedgerSnapshot:
        return dict(self._accounts), dict(self._mints), dict(self._native)

    def restore(self, snapshot: LedgerSnapshot) -> None:
        accounts, mints, native = snapshot
        self._accounts = dict(accounts)
        self._mints = dict(mints)
        self._native = dict(native)
