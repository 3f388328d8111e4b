from sqlalchemy import Column, Integer, String, Text

from ..database import Base
from ._columns import created_at_column, embedding_column


class Place(Base):
    __tablename__ = "places"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    address = Column(Text, nullable=True)
    phone = Column(String(64), nullable=True)
    embedding = embedding_column()
    created_at = created_at_column()
