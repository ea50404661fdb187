"""SQLAlchemy ORM model definitions."""

from sqlalchemy import Column, String, DateTime, Text

from suggestion_lifecycle.repositories.sqlalchemy.database import Base


class SuggestionCacheORM(Base):
    """SQLAlchemy model for SuggestionSnapshot (one row per portfolio)."""

    __tablename__ = "suggestion_cache"

    portfolio_id = Column(String(64), primary_key=True)
    status_json = Column(Text, nullable=True)  # SuggestionStatusPayload, camelCase
    pending_json = Column(Text, nullable=False, default="[]")  # list of PendingTransactionPayload
    cached_at = Column(DateTime, nullable=False)  # America/Sao_Paulo wall time
