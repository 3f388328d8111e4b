from pydantic import BaseModel, Field

from .common import EntityOut, OrderBy, SearchParams, UpdateRequest, UtcDatetime, sub_params


class BankAccountOut(EntityOut):
    id: int
    description: str
    created_at: UtcDatetime


class TransactionOut(EntityOut):
    id: int
    bank_account_id: int
    description: str
    amount: float
    posted_at: UtcDatetime
    created_at: UtcDatetime


class NewBankAccountRequest(BaseModel):
    description: str = Field(min_length=1, description="Bank account description, e.g. 'Chase checking'")


class BankAccountSearchParams(SearchParams):
    pass


class BankAccountUpdates(BaseModel):
    description: str | None = Field(default=None, min_length=1)


class UpdateBankAccountRequest(UpdateRequest):
    bank_account_updates: BankAccountUpdates


class TransactionFilters(BaseModel):
    posted_from: UtcDatetime | None = Field(default=None, description="Only transactions posted at or after this time")
    posted_to: UtcDatetime | None = Field(default=None, description="Only transactions posted at or before this time")


class TransactionSearchParams(TransactionFilters, SearchParams):
    pass


class TransactionUpdates(BaseModel):
    description: str | None = Field(default=None, min_length=1)
    amount: float | None = None
    posted_at: UtcDatetime | None = None


class UpdateTransactionRequest(TransactionFilters, UpdateRequest):
    transaction_updates: TransactionUpdates


class BankAccountSelector(BaseModel):
    bank_account_id: int | None = Field(default=None, description="ID of the bank account")
    bank_account_query: str | None = Field(default=None, description="Query used to find the bank account")
    bank_account_use_reranking_filter: bool = False
    bank_account_created_from: UtcDatetime | None = None
    bank_account_created_to: UtcDatetime | None = None
    bank_account_order_by: OrderBy | None = None

    def bank_account_search(self) -> BankAccountSearchParams:
        return sub_params(
            self,
            "bank_account_",
            BankAccountSearchParams,
            ids=[self.bank_account_id] if self.bank_account_id else None,
            limit=1,
        )


class NewBankAccountTransactionRequest(BankAccountSelector):
    transaction_description: str = Field(min_length=1, description="What the transaction was for")
    transaction_amount: float = Field(description="Signed amount; negative for money leaving the account")
    transaction_posted_at: UtcDatetime


class BankAccountTransactionSearchParams(BankAccountSelector):
    transaction_ids: list[int] | None = Field(default=None, description="IDs of transactions")
    transaction_query: str | None = Field(default=None, description="Query used to find transactions")
    transaction_use_reranking_filter: bool = False
    transaction_posted_from: UtcDatetime | None = None
    transaction_posted_to: UtcDatetime | None = None
    transaction_order_by: OrderBy | None = None
    transaction_limit: int | None = Field(default=None, ge=1)

    def transaction_search(self) -> TransactionSearchParams:
        return sub_params(self, "transaction_", TransactionSearchParams)


class BankAccountTransaction(BaseModel):
    bank_account: BankAccountOut
    transaction: TransactionOut


class BankAccountHistory(BaseModel):
    bank_account: BankAccountOut
    transactions: list[TransactionOut]
