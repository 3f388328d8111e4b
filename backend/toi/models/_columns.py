from datetime import datetime, timezone

from pgvector.sqlalchemy import Vector
from sqlalchemy import Column, DateTime
from sqlalchemy.sql import func


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def created_at_column() -> Column:
    return Column(DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now(), index=True)


def embedding_column() -> Column:
    # Dimension follows whatever the configured embedding model returns.
    return Column(Vector(), nullable=False)
