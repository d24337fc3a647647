"""Dispatch-table instruction processor.

``process(ctx, instruction, accounts)`` is the single entry point. It:

1. Decodes the instruction (if given raw bytes) and resolves the fixed account
   layout for its opcode.
2. Dispatches to the handler, which runs every check and returns the complete,
   ordered list of ledger mutations and record writes. Nothing is issued yet.
3. Issues the mutations to the ledger in order, then writes records.
4. Returns a ``ProcessResult`` (ok, or rejected with a typed ``AmmError``).

Handlers never mutate anything themselves. Atomicity of the issued sequence is
the caller's concern (see ``ammcore.integration.engine``).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple, Type, Union

from ..state.accounts import AccountRef, MintRecord, PubKey, TokenAccountRecord
from ..state.global_state import GlobalState, apply_update
from ..state.pools import Pool
from .account_layouts import (
    DepositAllAccounts,
    DepositSingleAccounts,
    InitializePoolAccounts,
    SwapAccounts,
    UpdateGlobalStateAccounts,
    WithdrawAllAccounts,
    WithdrawSingleAccounts,
    resolve_accounts,
)
from .collaborators import AuthorityDerivation, Ledger, RecordStore
from .constants import GLOBAL_STATE_SEED, INITIAL_STATE_OWNER, LP_MINT_DECIMALS, MIN_LP_SUPPLY, NATIVE_MINT
from .constraints import SWAP_CONSTRAINTS, GovernanceConstraints
from .errors import (
    AccountMismatchError,
    AmmError,
    AuthorizationError,
    CalculationError,
    ErrorCode,
    SlippageError,
    StateError,
    zero_trading_tokens,
)
from .instruction import (
    DepositAllTokenTypes,
    DepositSingleTokenTypeExactIn,
    InitializePool,
    Instruction,
    Opcode,
    Swap,
    UpdateGlobalState,
    WithdrawAllTokenTypes,
    WithdrawSingleTokenTypeExactOut,
    unpack_instruction,
)
from .ledger_ops import Burn, LedgerOp, MintTo, NativeTransfer, Transfer, WriteRecord, issue
from .math import checked_add, checked_sub, to_u64, to_u128
from .types import RoundDirection, TradeDirection

logger = logging.getLogger(__name__)


@dataclass
class ProcessContext:
    """Everything a handler may consult. One context per deployment."""

    program_id: PubKey
    ledger: Ledger
    derivation: AuthorityDerivation
    store: RecordStore
    constraints: GovernanceConstraints = SWAP_CONSTRAINTS
    initial_state_owner: PubKey = INITIAL_STATE_OWNER


@dataclass(frozen=True)
class ProcessResult:
    ok: bool
    ops: Tuple[LedgerOp, ...] = ()
    error: Optional[AmmError] = None


# -- shared checks ------------------------------------------------------------


def _require_signer(ref: AccountRef) -> None:
    if not ref.is_signer:
        raise AuthorizationError(ErrorCode.INVALID_SIGNER, f"{ref.key} must sign")


def _check_state_address(ctx: ProcessContext, ref: AccountRef) -> None:
    if ref.key != ctx.derivation.state_address(GLOBAL_STATE_SEED):
        raise AccountMismatchError(ErrorCode.INVALID_STATE_ADDRESS)


def _load_state(ctx: ProcessContext, ref: AccountRef) -> GlobalState:
    _check_state_address(ctx, ref)
    record = ctx.store.get(ref.key)
    if not isinstance(record, GlobalState) or not record.is_initialized:
        raise StateError(ErrorCode.NOT_INITIALIZED_STATE)
    return record


def _load_pool(ctx: ProcessContext, ref: AccountRef) -> Pool:
    if ref.owner != ctx.program_id:
        raise AccountMismatchError(ErrorCode.INCORRECT_PROGRAM_ID, f"pool {ref.key} is not owned by this program")
    record = ctx.store.get(ref.key)
    if not isinstance(record, Pool) or not record.is_initialized:
        raise StateError(ErrorCode.UNINITIALIZED_POOL, ref.key)
    return record


def _check_authority(ctx: ProcessContext, pool_key: PubKey, nonce: int, authority: AccountRef) -> None:
    if authority.key != ctx.derivation.derive(pool_key, nonce):
        raise AuthorizationError(ErrorCode.INVALID_PROGRAM_ADDRESS)


def _read_token_account(ctx: ProcessContext, ref: AccountRef, token_program_id: PubKey) -> TokenAccountRecord:
    if ref.owner != token_program_id:
        raise AccountMismatchError(ErrorCode.INCORRECT_TOKEN_PROGRAM_ID, ref.key)
    record = ctx.ledger.read(ref.key)
    if not isinstance(record, TokenAccountRecord):
        raise AccountMismatchError(ErrorCode.EXPECTED_ACCOUNT, ref.key)
    return record


def _read_mint(ctx: ProcessContext, ref: AccountRef, token_program_id: PubKey) -> MintRecord:
    if ref.owner != token_program_id:
        raise AccountMismatchError(ErrorCode.INCORRECT_TOKEN_PROGRAM_ID, ref.key)
    record = ctx.ledger.read(ref.key)
    if not isinstance(record, MintRecord):
        raise AccountMismatchError(ErrorCode.EXPECTED_MINT, ref.key)
    return record


def _check_accounts(
    ctx: ProcessContext,
    pool: Pool,
    pool_ref: AccountRef,
    authority: AccountRef,
    token_a: AccountRef,
    token_b: AccountRef,
    pool_mint: AccountRef,
    token_program: AccountRef,
    user_token_a: Optional[AccountRef] = None,
    user_token_b: Optional[AccountRef] = None,
) -> None:
    """Cross-check supplied accounts against the persisted pool record."""
    _check_authority(ctx, pool_ref.key, pool.nonce, authority)
    if token_a.key != pool.token_a:
        raise AccountMismatchError(ErrorCode.INCORRECT_SWAP_ACCOUNT, token_a.key)
    if token_b.key != pool.token_b:
        raise AccountMismatchError(ErrorCode.INCORRECT_SWAP_ACCOUNT, token_b.key)
    if pool_mint.key != pool.pool_mint:
        raise AccountMismatchError(ErrorCode.INCORRECT_POOL_MINT)
    if token_program.key != pool.token_program_id:
        raise AccountMismatchError(ErrorCode.INCORRECT_TOKEN_PROGRAM_ID)
    if user_token_a is not None and user_token_a.key == token_a.key:
        raise AccountMismatchError(ErrorCode.INVALID_INPUT, "user account aliases pool token A")
    if user_token_b is not None and user_token_b.key == token_b.key:
        raise AccountMismatchError(ErrorCode.INVALID_INPUT, "user account aliases pool token B")


def _direction_from_mint(pool: Pool, mint: PubKey) -> TradeDirection:
    direction = pool.direction_from_mint(mint)
    if direction is not None:
        return direction
    raise AccountMismatchError(ErrorCode.INCORRECT_SWAP_ACCOUNT, f"mint {mint} is not traded by this pool")


# -- handlers -----------------------------------------------------------------


def _process_update_global_state(
    ctx: ProcessContext, ix: UpdateGlobalState, accounts: UpdateGlobalStateAccounts
) -> List[LedgerOp]:
    _check_state_address(ctx, accounts.state)
    _require_signer(accounts.current_owner)

    current = ctx.store.get(accounts.state.key)
    new_state = apply_update(
        current if isinstance(current, GlobalState) else None,
        constraints=ctx.constraints,
        caller=accounts.current_owner.key,
        new_owner=accounts.new_owner.key,
        fee_owner=accounts.fee_recipient.key,
        fees=ix.fees,
        curve=ix.curve,
        initial_supply=ix.initial_supply,
        initial_state_owner=ctx.initial_state_owner,
    )
    return [WriteRecord(accounts.state.key, new_state)]


def _process_initialize_pool(ctx: ProcessContext, ix: InitializePool, accounts: InitializePoolAccounts) -> List[LedgerOp]:
    if accounts.pool.owner != ctx.program_id:
        raise AccountMismatchError(ErrorCode.INCORRECT_PROGRAM_ID, f"pool {accounts.pool.key} is not owned by this program")
    # Any record at the key, pool or not, means the account is taken.
    if ctx.store.get(accounts.pool.key) is not None:
        raise StateError(ErrorCode.ALREADY_IN_USE, accounts.pool.key)
    _check_authority(ctx, accounts.pool.key, ix.nonce, accounts.authority)

    state = _load_state(ctx, accounts.state)
    _require_signer(accounts.current_owner)
    if accounts.current_owner.key != state.state_owner:
        raise AuthorizationError(ErrorCode.INVALID_OWNER, "initializer is not the state owner")

    token_program_id = accounts.token_program.key
    token_a = _read_token_account(ctx, accounts.token_a, token_program_id)
    token_b = _read_token_account(ctx, accounts.token_b, token_program_id)
    destination = _read_token_account(ctx, accounts.destination, token_program_id)
    pool_mint = _read_mint(ctx, accounts.pool_mint, token_program_id)

    authority = accounts.authority.key
    if token_a.owner != authority or token_b.owner != authority:
        raise AuthorizationError(ErrorCode.INVALID_OWNER, "pool token accounts must be owned by the pool authority")
    if destination.owner == authority:
        raise AuthorizationError(ErrorCode.INVALID_OUTPUT_OWNER)
    if pool_mint.mint_authority != authority:
        raise AuthorizationError(ErrorCode.INVALID_OWNER, "pool mint authority must be the pool authority")
    if token_a.mint == token_b.mint:
        raise StateError(ErrorCode.REPEATED_MINT)

    state.curve.calculator.validate_supply(token_a.amount, token_b.amount)

    if token_a.delegate is not None or token_b.delegate is not None:
        raise StateError(ErrorCode.INVALID_DELEGATE)
    if token_a.is_frozen or token_b.is_frozen:
        raise StateError(ErrorCode.INVALID_FREEZE_AUTHORITY)
    if token_a.close_authority is not None or token_b.close_authority is not None:
        raise StateError(ErrorCode.INVALID_CLOSE_AUTHORITY)
    if pool_mint.decimals != LP_MINT_DECIMALS:
        raise StateError(ErrorCode.INVALID_DECIMALS)
    if pool_mint.supply != 0:
        raise StateError(ErrorCode.INVALID_SUPPLY)
    if pool_mint.freeze_authority is not None:
        raise StateError(ErrorCode.INVALID_FREEZE_AUTHORITY)
    if accounts.market.owner != accounts.market_program.key:
        raise AccountMismatchError(ErrorCode.INCORRECT_MARKET_OWNER_ACCOUNT)

    pool = Pool(
        is_initialized=True,
        nonce=ix.nonce,
        venue_id=accounts.venue.key,
        market_id=accounts.market.key,
        market_program_id=accounts.market_program.key,
        token_program_id=token_program_id,
        token_a=accounts.token_a.key,
        token_b=accounts.token_b.key,
        pool_mint=accounts.pool_mint.key,
        token_a_mint=token_a.mint,
        token_b_mint=token_b.mint,
    )
    return [
        MintTo(accounts.pool_mint.key, accounts.destination.key, authority, to_u64(state.initial_supply)),
        WriteRecord(accounts.pool.key, pool),
    ]


def _process_swap(ctx: ProcessContext, ix: Swap, accounts: SwapAccounts) -> List[LedgerOp]:
    pool = _load_pool(ctx, accounts.pool)
    _check_authority(ctx, accounts.pool.key, pool.nonce, accounts.authority)
    state = _load_state(ctx, accounts.state)

    pool_sides = (pool.token_a, pool.token_b)
    if accounts.swap_source.key not in pool_sides or accounts.swap_destination.key not in pool_sides:
        raise AccountMismatchError(ErrorCode.INCORRECT_SWAP_ACCOUNT)
    if accounts.swap_source.key == accounts.swap_destination.key:
        raise AccountMismatchError(ErrorCode.INVALID_INPUT, "swap source and destination are the same account")
    if accounts.swap_source.key == accounts.source.key or accounts.swap_destination.key == accounts.destination.key:
        raise AccountMismatchError(ErrorCode.INVALID_INPUT, "user account aliases a pool account")
    if accounts.pool_mint.key != pool.pool_mint:
        raise AccountMismatchError(ErrorCode.INCORRECT_POOL_MINT)
    if accounts.token_program.key != pool.token_program_id:
        raise AccountMismatchError(ErrorCode.INCORRECT_TOKEN_PROGRAM_ID)
    _require_signer(accounts.user_transfer_authority)

    trade_direction = pool.direction_from_source_account(accounts.swap_source.key)
    swap_source = _read_token_account(ctx, accounts.swap_source, pool.token_program_id)
    swap_destination = _read_token_account(ctx, accounts.swap_destination, pool.token_program_id)

    if accounts.fee_wallet.key != state.fee_owner:
        raise AuthorizationError(ErrorCode.INVALID_OWNER, "fee wallet is not the configured fee owner")
    native_fee = swap_source.mint == NATIVE_MINT
    if not native_fee:
        fee_account = _read_token_account(ctx, accounts.fee_account, pool.token_program_id)
        if fee_account.owner != state.fee_owner or fee_account.mint != swap_source.mint:
            raise AccountMismatchError(ErrorCode.INCORRECT_FEE_ACCOUNT)

    result = state.curve.swap(
        to_u128(ix.amount_in),
        to_u128(swap_source.amount),
        to_u128(swap_destination.amount),
        trade_direction,
        state.fees,
    )
    if result is None:
        raise zero_trading_tokens()
    if result.destination_amount_swapped < ix.minimum_amount_out:
        raise SlippageError(
            ErrorCode.EXCEEDED_SLIPPAGE,
            f"amount out {result.destination_amount_swapped} < minimum {ix.minimum_amount_out}",
        )

    uta = accounts.user_transfer_authority.key
    ops: List[LedgerOp] = [
        Transfer(accounts.source.key, accounts.swap_source.key, uta, to_u64(result.source_amount_swapped - result.owner_fee)),
    ]
    if native_fee:
        ops.append(NativeTransfer(uta, accounts.fee_wallet.key, to_u64(result.owner_fee)))
    else:
        ops.append(Transfer(accounts.source.key, accounts.fee_account.key, uta, to_u64(result.owner_fee)))
    ops.append(
        Transfer(
            accounts.swap_destination.key,
            accounts.destination.key,
            accounts.authority.key,
            to_u64(result.destination_amount_swapped),
        )
    )
    return ops


def _process_deposit_all(ctx: ProcessContext, ix: DepositAllTokenTypes, accounts: DepositAllAccounts) -> List[LedgerOp]:
    pool = _load_pool(ctx, accounts.pool)
    state = _load_state(ctx, accounts.state)
    if not state.curve.calculator.allows_deposits():
        raise StateError(ErrorCode.UNSUPPORTED_CURVE_OPERATION)
    _check_accounts(
        ctx, pool, accounts.pool, accounts.authority,
        accounts.token_a, accounts.token_b, accounts.pool_mint, accounts.token_program,
        accounts.source_a, accounts.source_b,
    )
    _require_signer(accounts.user_transfer_authority)

    token_a = _read_token_account(ctx, accounts.token_a, pool.token_program_id)
    token_b = _read_token_account(ctx, accounts.token_b, pool.token_program_id)
    pool_mint = _read_mint(ctx, accounts.pool_mint, pool.token_program_id)

    current_supply = to_u128(pool_mint.supply)
    if current_supply > 0:
        pool_token_amount, pool_mint_supply = to_u128(ix.pool_token_amount), current_supply
    else:
        pool_token_amount = pool_mint_supply = to_u128(state.initial_supply)

    results = state.curve.pool_tokens_to_trading_tokens(
        pool_token_amount, pool_mint_supply, token_a.amount, token_b.amount, RoundDirection.CEILING
    )
    if results is None:
        raise zero_trading_tokens()

    token_a_amount = to_u64(results.token_a_amount)
    if token_a_amount > ix.maximum_token_a_amount:
        raise SlippageError(ErrorCode.EXCEEDED_SLIPPAGE, f"token A {token_a_amount} > maximum {ix.maximum_token_a_amount}")
    if token_a_amount == 0:
        raise zero_trading_tokens("token A")
    token_b_amount = to_u64(results.token_b_amount)
    if token_b_amount > ix.maximum_token_b_amount:
        raise SlippageError(ErrorCode.EXCEEDED_SLIPPAGE, f"token B {token_b_amount} > maximum {ix.maximum_token_b_amount}")
    if token_b_amount == 0:
        raise zero_trading_tokens("token B")

    uta = accounts.user_transfer_authority.key
    return [
        Transfer(accounts.source_a.key, accounts.token_a.key, uta, token_a_amount),
        Transfer(accounts.source_b.key, accounts.token_b.key, uta, token_b_amount),
        MintTo(accounts.pool_mint.key, accounts.destination.key, accounts.authority.key, to_u64(pool_token_amount)),
    ]


def _process_withdraw_all(
    ctx: ProcessContext, ix: WithdrawAllTokenTypes, accounts: WithdrawAllAccounts
) -> List[LedgerOp]:
    pool = _load_pool(ctx, accounts.pool)
    state = _load_state(ctx, accounts.state)
    _check_accounts(
        ctx, pool, accounts.pool, accounts.authority,
        accounts.token_a, accounts.token_b, accounts.pool_mint, accounts.token_program,
        accounts.destination_a, accounts.destination_b,
    )
    _require_signer(accounts.user_transfer_authority)

    token_a = _read_token_account(ctx, accounts.token_a, pool.token_program_id)
    token_b = _read_token_account(ctx, accounts.token_b, pool.token_program_id)
    pool_mint = _read_mint(ctx, accounts.pool_mint, pool.token_program_id)

    # Withdrawal fee is currently disabled.
    withdraw_fee = 0
    pool_token_amount = checked_sub(to_u128(ix.pool_token_amount), withdraw_fee)
    if pool_token_amount is None:
        raise CalculationError(ErrorCode.CALCULATION_FAILURE, "withdraw fee exceeds pool token amount")

    supply = to_u128(pool_mint.supply)
    max_pool_token_amount = checked_sub(supply, MIN_LP_SUPPLY)
    if max_pool_token_amount is None:
        raise CalculationError(ErrorCode.CALCULATION_FAILURE, f"pool token supply {supply} is below the floor")
    pool_token_amount = min(pool_token_amount, max_pool_token_amount)

    results = state.curve.pool_tokens_to_trading_tokens(
        pool_token_amount, supply, token_a.amount, token_b.amount, RoundDirection.FLOOR
    )
    if results is None:
        raise zero_trading_tokens()

    token_a_amount = min(token_a.amount, to_u64(results.token_a_amount))
    if token_a_amount < ix.minimum_token_a_amount:
        raise SlippageError(ErrorCode.EXCEEDED_SLIPPAGE, f"token A {token_a_amount} < minimum {ix.minimum_token_a_amount}")
    if token_a_amount == 0 and token_a.amount != 0:
        raise zero_trading_tokens("token A")
    token_b_amount = min(token_b.amount, to_u64(results.token_b_amount))
    if token_b_amount < ix.minimum_token_b_amount:
        raise SlippageError(ErrorCode.EXCEEDED_SLIPPAGE, f"token B {token_b_amount} < minimum {ix.minimum_token_b_amount}")
    if token_b_amount == 0 and token_b.amount != 0:
        raise zero_trading_tokens("token B")

    uta = accounts.user_transfer_authority.key
    authority = accounts.authority.key
    ops: List[LedgerOp] = [Burn(accounts.source.key, accounts.pool_mint.key, uta, to_u64(pool_token_amount))]
    if token_a_amount > 0:
        ops.append(Transfer(accounts.token_a.key, accounts.destination_a.key, authority, token_a_amount))
    if token_b_amount > 0:
        ops.append(Transfer(accounts.token_b.key, accounts.destination_b.key, authority, token_b_amount))
    return ops


def _process_deposit_single(
    ctx: ProcessContext, ix: DepositSingleTokenTypeExactIn, accounts: DepositSingleAccounts
) -> List[LedgerOp]:
    pool = _load_pool(ctx, accounts.pool)
    state = _load_state(ctx, accounts.state)

    source = _read_token_account(ctx, accounts.source, pool.token_program_id)
    swap_token_a = _read_token_account(ctx, accounts.token_a, pool.token_program_id)
    swap_token_b = _read_token_account(ctx, accounts.token_b, pool.token_program_id)
    trade_direction = _direction_from_mint(pool, source.mint)

    a_to_b = trade_direction is TradeDirection.A_TO_B
    _check_accounts(
        ctx, pool, accounts.pool, accounts.authority,
        accounts.token_a, accounts.token_b, accounts.pool_mint, accounts.token_program,
        accounts.source if a_to_b else None,
        None if a_to_b else accounts.source,
    )
    _require_signer(accounts.user_transfer_authority)

    pool_mint = _read_mint(ctx, accounts.pool_mint, pool.token_program_id)
    pool_mint_supply = to_u128(pool_mint.supply)
    if pool_mint_supply > 0:
        minted = state.curve.deposit_single_token_type(
            to_u128(ix.source_token_amount),
            swap_token_a.amount,
            swap_token_b.amount,
            pool_mint_supply,
            trade_direction,
            state.fees,
        )
        if minted is None:
            raise zero_trading_tokens()
    else:
        minted = to_u128(state.initial_supply)

    pool_token_amount = to_u64(minted)
    if pool_token_amount < ix.minimum_pool_token_amount:
        raise SlippageError(
            ErrorCode.EXCEEDED_SLIPPAGE, f"pool tokens {pool_token_amount} < minimum {ix.minimum_pool_token_amount}"
        )
    if pool_token_amount == 0:
        raise zero_trading_tokens()

    return [
        Transfer(
            accounts.source.key,
            pool.side_account(trade_direction),
            accounts.user_transfer_authority.key,
            ix.source_token_amount,
        ),
        MintTo(accounts.pool_mint.key, accounts.destination.key, accounts.authority.key, pool_token_amount),
    ]


def _process_withdraw_single(
    ctx: ProcessContext, ix: WithdrawSingleTokenTypeExactOut, accounts: WithdrawSingleAccounts
) -> List[LedgerOp]:
    pool = _load_pool(ctx, accounts.pool)
    state = _load_state(ctx, accounts.state)

    destination = _read_token_account(ctx, accounts.destination, pool.token_program_id)
    swap_token_a = _read_token_account(ctx, accounts.token_a, pool.token_program_id)
    swap_token_b = _read_token_account(ctx, accounts.token_b, pool.token_program_id)
    trade_direction = _direction_from_mint(pool, destination.mint)

    a_to_b = trade_direction is TradeDirection.A_TO_B
    _check_accounts(
        ctx, pool, accounts.pool, accounts.authority,
        accounts.token_a, accounts.token_b, accounts.pool_mint, accounts.token_program,
        accounts.destination if a_to_b else None,
        None if a_to_b else accounts.destination,
    )
    _require_signer(accounts.user_transfer_authority)

    pool_mint = _read_mint(ctx, accounts.pool_mint, pool.token_program_id)
    pool_mint_supply = to_u128(pool_mint.supply)

    burn_pool_token_amount = state.curve.withdraw_single_token_type_exact_out(
        to_u128(ix.destination_token_amount),
        swap_token_a.amount,
        swap_token_b.amount,
        pool_mint_supply,
        trade_direction,
        state.fees,
    )
    if burn_pool_token_amount is None:
        raise zero_trading_tokens()

    # Withdrawal fee is currently disabled.
    withdraw_fee = 0
    pool_token_amount = checked_add(burn_pool_token_amount, withdraw_fee)
    if pool_token_amount is None:
        raise CalculationError(ErrorCode.CALCULATION_FAILURE)

    if to_u64(pool_token_amount) > ix.maximum_pool_token_amount:
        raise SlippageError(
            ErrorCode.EXCEEDED_SLIPPAGE, f"pool tokens {pool_token_amount} > maximum {ix.maximum_pool_token_amount}"
        )
    if pool_token_amount == 0:
        raise zero_trading_tokens()
    # Exact-out: the payout is fixed by the caller, so clamping the burn (as
    # withdraw-all does) would pay the full amount for fewer pool tokens.
    remaining_supply = checked_sub(pool_mint_supply, pool_token_amount)
    if remaining_supply is None or remaining_supply < MIN_LP_SUPPLY:
        raise CalculationError(ErrorCode.CALCULATION_FAILURE, "withdrawal would drop pool token supply below the floor")

    return [
        Burn(accounts.source.key, accounts.pool_mint.key, accounts.user_transfer_authority.key, to_u64(burn_pool_token_amount)),
        Transfer(
            pool.side_account(trade_direction),
            accounts.destination.key,
            accounts.authority.key,
            ix.destination_token_amount,
        ),
    ]


# -- dispatch -----------------------------------------------------------------

HandlerFn = Callable[[ProcessContext, Instruction, tuple], List[LedgerOp]]

_DISPATCH: dict[Opcode, tuple[str, Type[tuple], HandlerFn]] = {
    Opcode.UPDATE_GLOBAL_STATE: ("UpdateGlobalState", UpdateGlobalStateAccounts, _process_update_global_state),
    Opcode.INITIALIZE_POOL: ("InitializePool", InitializePoolAccounts, _process_initialize_pool),
    Opcode.SWAP: ("Swap", SwapAccounts, _process_swap),
    Opcode.DEPOSIT_ALL_TOKEN_TYPES: ("DepositAllTokenTypes", DepositAllAccounts, _process_deposit_all),
    Opcode.WITHDRAW_ALL_TOKEN_TYPES: ("WithdrawAllTokenTypes", WithdrawAllAccounts, _process_withdraw_all),
    Opcode.DEPOSIT_SINGLE_TOKEN_TYPE_EXACT_IN: (
        "DepositSingleTokenTypeExactIn", DepositSingleAccounts, _process_deposit_single,
    ),
    Opcode.WITHDRAW_SINGLE_TOKEN_TYPE_EXACT_OUT: (
        "WithdrawSingleTokenTypeExactOut", WithdrawSingleAccounts, _process_withdraw_single,
    ),
}


def plan(
    ctx: ProcessContext, instruction: Union[Instruction, bytes], accounts: Sequence[AccountRef]
) -> List[LedgerOp]:
    """Run every check for one instruction and return its ops without issuing them."""
    ix = unpack_instruction(bytes(instruction)) if isinstance(instruction, (bytes, bytearray)) else instruction
    name, layout, handler = _DISPATCH[ix.opcode]
    logger.debug("Instruction: %s", name)
    resolved = resolve_accounts(layout, accounts)
    return handler(ctx, ix, resolved)


def process(
    ctx: ProcessContext, instruction: Union[Instruction, bytes], accounts: Sequence[AccountRef]
) -> ProcessResult:
    """Execute one instruction.

    Returns ``ProcessResult`` with ``ok=True`` and the issued ops on success,
    or ``ok=False`` with the first ``AmmError`` encountered.
    """
    try:
        ops = plan(ctx, instruction, accounts)
        issue(ops, ledger=ctx.ledger, store=ctx.store)
    except AmmError as exc:
        logger.debug("Rejected: %s", exc)
        return ProcessResult(ok=False, error=exc)
    return ProcessResult(ok=True, ops=tuple(ops))


def process_or_raise(
    ctx: ProcessContext, instruction: Union[Instruction, bytes], accounts: Sequence[AccountRef]
) -> ProcessResult:
    """Like ``process()`` but raises the typed ``AmmError`` on rejection."""
    result = process(ctx, instruction, accounts)
    if result.ok:
        return result
    assert result.error is not None
    raise result.error
