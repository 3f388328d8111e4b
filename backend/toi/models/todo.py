from sqlalchemy import Column, DateTime, Integer, Text

from ..database import Base
from ._columns import created_at_column, embedding_column


class Todo(Base):
    __tablename__ = "todos"

    id = Column(Integer, primary_key=True, index=True)
    item = Column(Text, nullable=False)
    due_at = Column(DateTime(timezone=True), nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    embedding = embedding_column()
    created_at = created_at_column()
