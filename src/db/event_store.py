"""Protocol event store (implemented in memory and with SQLAlchemy)"""

from typing import Optional, Protocol, Sequence
from uuid import UUID, uuid4

from src.core.models import StoredEvent
from src.core.shared_types import AggregateType
from src.softball.events import DomainEvent, event_to_dict


class EventStore(Protocol):
    """Append-only storage of event streams, one stream per aggregate instance."""

    def append(
        self,
        stream_id: UUID,
        aggregate_type: AggregateType,
        events: Sequence[DomainEvent],
        expected_version: Optional[int] = None,
    ) -> int:
        """
        Append events to the end of the stream and return the new stream version.
        Raises ConcurrencyError when expected_version is given and the stream is at another version.
        """
        ...

    def get_events(self, stream_id: UUID, from_version: Optional[int] = None) -> list[StoredEvent]:
        """Events of a stream in order. from_version: only events with stream_version > from_version."""
        ...

    def get_game_events(
        self, game_id: UUID, aggregate_type: Optional[AggregateType] = None
    ) -> list[StoredEvent]:
        """All events of all streams belonging to a game, in the order they were stored."""
        ...


def to_stored_events(
    stream_id: UUID,
    aggregate_type: AggregateType,
    events: Sequence[DomainEvent],
    current_version: int,
) -> list[StoredEvent]:
    """Wrap domain events for storage, numbering them on from the current stream version."""
    return [
        StoredEvent(
            event_id=uuid4(),
            stream_id=stream_id,
            game_id=UUID(event.game_id),
            aggregate_type=AggregateType(aggregate_type),
            event_type=event.event_type,
            event_data=event_to_dict(event),
            stream_version=current_version + offset,
        )
        for offset, event in enumerate(events, start=1)
    ]
