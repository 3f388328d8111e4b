from sqlalchemy import Column, Integer, String

from ..database import Base
from ._columns import created_at_column, embedding_column


class Tag(Base):
    __tablename__ = "tags"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    embedding = embedding_column()
    created_at = created_at_column()
