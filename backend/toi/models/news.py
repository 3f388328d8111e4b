from sqlalchemy import Column, DateTime, String, Text

from ..database import Base


class NewsAlias(Base):
    """One slot of the recycled short-link ring used by /news."""

    __tablename__ = "news"

    alias = Column(String(64), primary_key=True)
    tinyurl = Column(Text, nullable=True)
    title = Column(Text, nullable=True)
    url = Column(Text, nullable=True)
    updated_at = Column(DateTime(timezone=True), nullable=True, index=True)
