"""Implementation of EventStore keeping everything in memory (tests, single process use)"""

import logging
from typing import Optional, Sequence
from uuid import UUID

from src.core.exceptions import ConcurrencyError
from src.core.models import StoredEvent
from src.core.shared_types import AggregateType
from src.db.event_store import to_stored_events
from src.softball.events import DomainEvent

logger = logging.getLogger(__name__)


class InMemoryEventStore:
    def __init__(self) -> None:
        self._streams: dict[UUID, list[StoredEvent]] = {}
        self._log: list[StoredEvent] = []

    def append(
        self,
        stream_id: UUID,
        aggregate_type: AggregateType,
        events: Sequence[DomainEvent],
        expected_version: Optional[int] = None,
    ) -> int:
        stream = self._streams.get(stream_id, [])
        current_version = len(stream)
        if expected_version is not None and expected_version != current_version:
            raise ConcurrencyError(str(stream_id), expected_version, current_version)
        if not events:
            return current_version

        stored = to_stored_events(stream_id, aggregate_type, events, current_version)
        self._streams[stream_id] = stream + stored
        self._log.extend(stored)
        logger.debug(
            "Appended %d event(s) to %s stream %s (version %d)",
            len(stored),
            aggregate_type,
            stream_id,
            current_version + len(stored),
        )
        return current_version + len(stored)

    def get_events(self, stream_id: UUID, from_version: Optional[int] = None) -> list[StoredEvent]:
        stream = self._streams.get(stream_id, [])
        if from_version is None:
            return list(stream)
        return [event for event in stream if event.stream_version > from_version]

    def get_game_events(
        self, game_id: UUID, aggregate_type: Optional[AggregateType] = None
    ) -> list[StoredEvent]:
        return [
            event
            for event in self._log
            if event.game_id == game_id
            and (aggregate_type is None or event.aggregate_type == aggregate_type)
        ]
