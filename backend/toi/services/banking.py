import logging

from ..models.banking import BankAccount, BankTransaction
from ..schemas.banking import (
    BankAccountSelector,
    BankAccountTransactionSearchParams,
    NewBankAccountTransactionRequest,
)
from ..state import ToiState
from ..utils.error_handlers import NotFoundError
from .entities import BANK_ACCOUNTS, TRANSACTIONS, add_entity, delete_entities, get_entities
from .search import fetch_rows, search_ids

logger = logging.getLogger(__name__)


async def find_bank_account(state: ToiState, selector: BankAccountSelector) -> BankAccount:
    ids = await search_ids(state, BANK_ACCOUNTS, selector.bank_account_search())
    with state.session_factory() as db:
        rows = fetch_rows(db, BankAccount, ids[:1])
    if not rows:
        raise NotFoundError("bank account not found")
    return rows[0]


async def add_account_transaction(
    state: ToiState, request: NewBankAccountTransactionRequest
) -> tuple[BankAccount, BankTransaction]:
    account = await find_bank_account(state, request)
    transaction = await add_entity(
        state,
        TRANSACTIONS,
        {
            "bank_account_id": account.id,
            "description": request.transaction_description,
            "amount": request.transaction_amount,
            "posted_at": request.transaction_posted_at,
        },
    )
    return account, transaction


async def get_account_history(
    state: ToiState, params: BankAccountTransactionSearchParams
) -> tuple[BankAccount, list[BankTransaction]]:
    account = await find_bank_account(state, params)
    scope = (BankTransaction.bank_account_id == account.id,)
    return account, await get_entities(state, TRANSACTIONS, params.transaction_search(), scope=scope)


async def delete_account_transactions(
    state: ToiState, params: BankAccountTransactionSearchParams
) -> tuple[BankAccount, list[BankTransaction]]:
    account = await find_bank_account(state, params)
    scope = (BankTransaction.bank_account_id == account.id,)
    return account, await delete_entities(state, TRANSACTIONS, params.transaction_search(), scope=scope)
