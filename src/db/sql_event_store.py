"""Implementation of EventStore using SQLAlchemy"""

import logging
from typing import Optional, Sequence
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from src.core.exceptions import ConcurrencyError
from src.core.models import StoredEvent
from src.core.shared_types import AggregateType
from src.db.event_store import to_stored_events
from src.db.schema import DBEvent
from src.softball.events import DomainEvent

logger = logging.getLogger(__name__)


class SQLEventStore:
    """Event streams stored as rows of the `events` table"""

    def __init__(self, db_session: Session) -> None:
        self.db = db_session

    def append(
        self,
        stream_id: UUID,
        aggregate_type: AggregateType,
        events: Sequence[DomainEvent],
        expected_version: Optional[int] = None,
    ) -> int:
        current_version = self._current_version(stream_id)
        if expected_version is not None and expected_version != current_version:
            raise ConcurrencyError(str(stream_id), expected_version, current_version)
        if not events:
            return current_version

        stored = to_stored_events(stream_id, aggregate_type, events, current_version)
        self.db.add_all(self._to_db(event) for event in stored)
        try:
            self.db.commit()
        except IntegrityError as e:
            # another writer got the same stream versions in first
            self.db.rollback()
            actual_version = self._current_version(stream_id)
            raise ConcurrencyError(str(stream_id), current_version, actual_version) from e

        new_version = current_version + len(stored)
        logger.debug(
            "Appended %d event(s) to %s stream %s (version %d)",
            len(stored),
            aggregate_type,
            stream_id,
            new_version,
        )
        return new_version

    def get_events(self, stream_id: UUID, from_version: Optional[int] = None) -> list[StoredEvent]:
        query = select(DBEvent).where(DBEvent.stream_id == stream_id)
        if from_version is not None:
            query = query.where(DBEvent.stream_version > from_version)
        query = query.order_by(DBEvent.stream_version)
        return [self._to_model(row) for row in self.db.scalars(query)]

    def get_game_events(
        self, game_id: UUID, aggregate_type: Optional[AggregateType] = None
    ) -> list[StoredEvent]:
        query = select(DBEvent).where(DBEvent.game_id == game_id)
        if aggregate_type is not None:
            query = query.where(DBEvent.aggregate_type == aggregate_type)
        query = query.order_by(DBEvent.position)
        return [self._to_model(row) for row in self.db.scalars(query)]

    def _current_version(self, stream_id: UUID) -> int:
        query = select(func.max(DBEvent.stream_version)).where(DBEvent.stream_id == stream_id)
        return self.db.scalar(query) or 0

    def _to_db(self, event: StoredEvent) -> DBEvent:
        return DBEvent(
            event_id=event.event_id,
            stream_id=event.stream_id,
            game_id=event.game_id,
            aggregate_type=event.aggregate_type,
            event_type=event.event_type,
            event_data=event.event_data,
            stream_version=event.stream_version,
            timestamp=event.timestamp,
        )

    def _to_model(self, event_db: DBEvent) -> StoredEvent:
        """Convert SQLAlchemy model to data transfer model."""
        return StoredEvent(
            event_id=event_db.event_id,
            stream_id=event_db.stream_id,
            game_id=event_db.game_id,
            aggregate_type=event_db.aggregate_type,
            event_type=event_db.event_type,
            event_data=event_db.event_data,
            stream_version=event_db.stream_version,
            timestamp=event_db.timestamp,
        )
