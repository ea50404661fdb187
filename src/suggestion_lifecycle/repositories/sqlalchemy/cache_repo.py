"""SQLAlchemy implementation of SuggestionCacheRepository."""

import json
import logging
from typing import Optional

from pydantic import TypeAdapter
from sqlalchemy.orm import Session

from suggestion_lifecycle.api.schemas.backend import (
    PendingTransactionPayload,
    SuggestionStatusPayload,
)
from suggestion_lifecycle.core.timezone import now_brt, to_brt
from suggestion_lifecycle.domain.models import SuggestionSnapshot
from suggestion_lifecycle.repositories.sqlalchemy.orm_models import SuggestionCacheORM

logger = logging.getLogger(__name__)

_pending_adapter = TypeAdapter(list[PendingTransactionPayload])


class SqlAlchemySuggestionCacheRepository:
    """SQLAlchemy-backed suggestion cache; rows hold the backend's JSON shapes."""

    def __init__(self, db: Session):
        self._db = db

    def get(self, portfolio_id: str) -> Optional[SuggestionSnapshot]:
        """Get the cached snapshot for a portfolio."""
        orm_entry = (
            self._db.query(SuggestionCacheORM)
            .filter(SuggestionCacheORM.portfolio_id == portfolio_id)
            .first()
        )
        return self._to_domain(orm_entry) if orm_entry else None

    def set(self, snapshot: SuggestionSnapshot) -> SuggestionSnapshot:
        """Insert or replace the snapshot for its portfolio."""
        cached_at = snapshot.cached_at or now_brt()
        status_json = (
            SuggestionStatusPayload.from_domain(snapshot.status).model_dump_json(by_alias=True)
            if snapshot.status
            else None
        )
        pending_json = json.dumps(
            [
                PendingTransactionPayload.from_domain(t).model_dump(mode="json", by_alias=True)
                for t in snapshot.pending
            ]
        )

        orm_entry = (
            self._db.query(SuggestionCacheORM)
            .filter(SuggestionCacheORM.portfolio_id == snapshot.portfolio_id)
            .first()
        )
        if orm_entry:
            orm_entry.status_json = status_json
            orm_entry.pending_json = pending_json
            orm_entry.cached_at = cached_at
        else:
            orm_entry = SuggestionCacheORM(
                portfolio_id=snapshot.portfolio_id,
                status_json=status_json,
                pending_json=pending_json,
                cached_at=cached_at,
            )
            self._db.add(orm_entry)

        self._db.commit()
        self._db.refresh(orm_entry)
        return self._to_domain(orm_entry)

    def remove(self, portfolio_id: str) -> None:
        """Drop the cached snapshot for a portfolio (no-op when absent)."""
        self._db.query(SuggestionCacheORM).filter(
            SuggestionCacheORM.portfolio_id == portfolio_id
        ).delete()
        self._db.commit()

    @staticmethod
    def _to_domain(orm: SuggestionCacheORM) -> SuggestionSnapshot:
        """Convert ORM row to domain model."""
        status = (
            SuggestionStatusPayload.model_validate_json(orm.status_json).to_domain()
            if orm.status_json
            else None
        )
        pending = [p.to_domain() for p in _pending_adapter.validate_json(orm.pending_json or "[]")]
        return SuggestionSnapshot(
            portfolio_id=orm.portfolio_id,
            status=status,
            pending=pending,
            cached_at=to_brt(orm.cached_at) if orm.cached_at else None,
        )
