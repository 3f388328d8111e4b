from fastapi import APIRouter, Depends

from ..schemas.banking import (
    BankAccountHistory,
    BankAccountOut,
    BankAccountSearchParams,
    BankAccountTransaction,
    BankAccountTransactionSearchParams,
    NewBankAccountRequest,
    NewBankAccountTransactionRequest,
    TransactionOut,
    TransactionSearchParams,
    UpdateBankAccountRequest,
    UpdateTransactionRequest,
)
from ..services import banking as banking_service
from ..services.entities import BANK_ACCOUNTS, TRANSACTIONS, add_entity, delete_entities, get_entities, update_entity
from ..state import ToiState, get_state

router = APIRouter(prefix="/banking", tags=["Banking"])


def _history(account, transactions) -> BankAccountHistory:  # noqa: ANN001
    return BankAccountHistory(
        bank_account=BankAccountOut.model_validate(account),
        transactions=[TransactionOut.model_validate(t) for t in transactions],
    )


@router.post("/accounts", status_code=201, response_model=BankAccountOut)
async def add_bank_account(request: NewBankAccountRequest, state: ToiState = Depends(get_state)):
    return BankAccountOut.model_validate(await add_entity(state, BANK_ACCOUNTS, request.model_dump()))


@router.put("/accounts", response_model=BankAccountOut)
async def update_bank_account(request: UpdateBankAccountRequest, state: ToiState = Depends(get_state)):
    params = request.to_search_params(BankAccountSearchParams, "bank_account_updates")
    return BankAccountOut.model_validate(
        await update_entity(state, BANK_ACCOUNTS, params, request.bank_account_updates)
    )


@router.post("/accounts/search", response_model=list[BankAccountOut])
async def search_bank_accounts(params: BankAccountSearchParams, state: ToiState = Depends(get_state)):
    return [BankAccountOut.model_validate(row) for row in await get_entities(state, BANK_ACCOUNTS, params)]


@router.post("/accounts/delete", response_model=list[BankAccountOut])
async def delete_bank_accounts(params: BankAccountSearchParams, state: ToiState = Depends(get_state)):
    """Delete bank accounts along with all of their transactions."""
    return [BankAccountOut.model_validate(row) for row in await delete_entities(state, BANK_ACCOUNTS, params)]


@router.post("/accounts/transactions", status_code=201, response_model=BankAccountTransaction)
async def add_bank_account_transaction(
    request: NewBankAccountTransactionRequest, state: ToiState = Depends(get_state)
):
    """Record a transaction on the bank account that best matches the bank account fields."""
    account, transaction = await banking_service.add_account_transaction(state, request)
    return BankAccountTransaction(
        bank_account=BankAccountOut.model_validate(account),
        transaction=TransactionOut.model_validate(transaction),
    )


@router.post("/accounts/transactions/search", response_model=BankAccountHistory)
async def search_bank_account_transactions(
    params: BankAccountTransactionSearchParams, state: ToiState = Depends(get_state)
):
    """Find a bank account and search its transactions."""
    return _history(*await banking_service.get_account_history(state, params))


@router.post("/accounts/transactions/delete", response_model=BankAccountHistory)
async def delete_bank_account_transactions(
    params: BankAccountTransactionSearchParams, state: ToiState = Depends(get_state)
):
    return _history(*await banking_service.delete_account_transactions(state, params))


@router.put("/transactions", response_model=TransactionOut)
async def update_transaction(request: UpdateTransactionRequest, state: ToiState = Depends(get_state)):
    params = request.to_search_params(TransactionSearchParams, "transaction_updates")
    return TransactionOut.model_validate(
        await update_entity(state, TRANSACTIONS, params, request.transaction_updates)
    )


@router.post("/transactions/search", response_model=list[TransactionOut])
async def search_transactions(params: TransactionSearchParams, state: ToiState = Depends(get_state)):
    """Search transactions across all bank accounts."""
    return [TransactionOut.model_validate(row) for row in await get_entities(state, TRANSACTIONS, params)]


@router.post("/transactions/delete", response_model=list[TransactionOut])
async def delete_transactions(params: TransactionSearchParams, state: ToiState = Depends(get_state)):
    return [TransactionOut.model_validate(row) for row in await delete_entities(state, TRANSACTIONS, params)]
