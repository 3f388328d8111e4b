from sqlalchemy import Column, DateTime, Float, ForeignKey, Integer, Text

from ..database import Base
from ._columns import created_at_column, embedding_column


class BankAccount(Base):
    __tablename__ = "bank_accounts"

    id = Column(Integer, primary_key=True, index=True)
    description = Column(Text, nullable=False)
    embedding = embedding_column()
    created_at = created_at_column()


class BankTransaction(Base):
    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True, index=True)
    bank_account_id = Column(Integer, ForeignKey("bank_accounts.id", ondelete="CASCADE"), nullable=False, index=True)
    description = Column(Text, nullable=False)
    amount = Column(Float, nullable=False)
    posted_at = Column(DateTime(timezone=True), nullable=False)
    embedding = embedding_column()
    created_at = created_at_column()
