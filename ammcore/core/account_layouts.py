"""Fixed account orderings, one per opcode."""

from __future__ import annotations

from typing import Dict, NamedTuple, Sequence, Type, TypeVar

from ..state.accounts import AccountRef
from .errors import ErrorCode, InvalidInstructionError
from .instruction import Opcode


class UpdateGlobalStateAccounts(NamedTuple):
    state: AccountRef
    current_owner: AccountRef
    new_owner: AccountRef
    fee_recipient: AccountRef


class InitializePoolAccounts(NamedTuple):
    pool: AccountRef
    authority: AccountRef
    state: AccountRef
    venue: AccountRef
    token_a: AccountRef
    token_b: AccountRef
    pool_mint: AccountRef
    destination: AccountRef
    market: AccountRef
    token_program: AccountRef
    market_program: AccountRef
    current_owner: AccountRef


class SwapAccounts(NamedTuple):
    pool: AccountRef
    authority: AccountRef
    user_transfer_authority: AccountRef
    state: AccountRef
    source: AccountRef
    swap_source: AccountRef
    swap_destination: AccountRef
    destination: AccountRef
    pool_mint: AccountRef
    fee_account: AccountRef
    fee_wallet: AccountRef
    token_program: AccountRef


class DepositAllAccounts(NamedTuple):
    pool: AccountRef
    authority: AccountRef
    user_transfer_authority: AccountRef
    state: AccountRef
    source_a: AccountRef
    source_b: AccountRef
    token_a: AccountRef
    token_b: AccountRef
    pool_mint: AccountRef
    destination: AccountRef
    token_program: AccountRef


class WithdrawAllAccounts(NamedTuple):
    pool: AccountRef
    authority: AccountRef
    user_transfer_authority: AccountRef
    state: AccountRef
    pool_mint: AccountRef
    source: AccountRef
    token_a: AccountRef
    token_b: AccountRef
    destination_a: AccountRef
    destination_b: AccountRef
    token_program: AccountRef


class DepositSingleAccounts(NamedTuple):
    pool: AccountRef
    authority: AccountRef
    user_transfer_authority: AccountRef
    state: AccountRef
    source: AccountRef
    token_a: AccountRef
    token_b: AccountRef
    pool_mint: AccountRef
    destination: AccountRef
    token_program: AccountRef


class WithdrawSingleAccounts(NamedTuple):
    pool: AccountRef
    authority: AccountRef
    user_transfer_authority: AccountRef
    state: AccountRef
    pool_mint: AccountRef
    source: AccountRef
    token_a: AccountRef
    token_b: AccountRef
    destination: AccountRef
    token_program: AccountRef


ACCOUNT_LAYOUTS: Dict[Opcode, Type[tuple]] = {
    Opcode.UPDATE_GLOBAL_STATE: UpdateGlobalStateAccounts,
    Opcode.INITIALIZE_POOL: InitializePoolAccounts,
    Opcode.SWAP: SwapAccounts,
    Opcode.DEPOSIT_ALL_TOKEN_TYPES: DepositAllAccounts,
    Opcode.WITHDRAW_ALL_TOKEN_TYPES: WithdrawAllAccounts,
    Opcode.DEPOSIT_SINGLE_TOKEN_TYPE_EXACT_IN: DepositSingleAccounts,
    Opcode.WITHDRAW_SINGLE_TOKEN_TYPE_EXACT_OUT: WithdrawSingleAccounts,
}

L = TypeVar("L")


def resolve_accounts(layout: Type[L], accounts: Sequence[AccountRef]) -> L:
    expected = len(layout._fields)  # type: ignore[attr-defined]
    if len(accounts) != expected:
        raise InvalidInstructionError(
            ErrorCode.NOT_ENOUGH_ACCOUNT_KEYS,
            f"{layout.__name__} expects {expected} accounts, got {len(accounts)}",
        )
    for i, ref in enumerate(accounts):
        if not isinstance(ref, AccountRef):
            raise InvalidInstructionError(ErrorCode.INVALID_INSTRUCTION, f"account {i} is not an AccountRef")
    return layout(*accounts)
