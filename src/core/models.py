"""
Boundary layer data model(s).

Events leave the domain layer as StoredEvent records: the event store (in memory or SQL) only ever sees these,
and the repositories turn them back into domain events when rebuilding an aggregate.
(Decouples the table layout of the DB layer from the dataclasses of the domain layer)
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any
from uuid import UUID


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class StoredEvent:
    """Transport-safe representation of a single domain event as persisted in a stream."""

    event_id: UUID
    stream_id: UUID
    game_id: UUID
    aggregate_type: str
    event_type: str
    event_data: dict[str, Any]  # event fields as plain data
    stream_version: int
    timestamp: datetime = field(default_factory=utc_now)
