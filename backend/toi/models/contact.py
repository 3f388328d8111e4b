from sqlalchemy import Column, Date, Integer, String, Text

from ..database import Base
from ._columns import created_at_column, embedding_column


class Contact(Base):
    __tablename__ = "contacts"

    id = Column(Integer, primary_key=True, index=True)
    first_name = Column(String(255), nullable=False)
    last_name = Column(String(255), nullable=True)
    email = Column(String(255), nullable=True, unique=True)
    phone = Column(String(64), nullable=True, unique=True)
    birthday = Column(Date, nullable=True)
    relationship = Column(Text, nullable=True)
    embedding = embedding_column()
    created_at = created_at_column()
