from sqlalchemy import Column, Integer, Text

from ..database import Base
from ._columns import created_at_column, embedding_column


class Note(Base):
    __tablename__ = "notes"

    id = Column(Integer, primary_key=True, index=True)
    content = Column(Text, nullable=False)
    embedding = embedding_column()
    created_at = created_at_column()
