"""
Implementation of the repositories on top of an EventStore.

Saving appends the aggregate's pending events (with the version it was loaded at as expected version),
loading replays the stream through the aggregate's `from_events`.
"""

import logging
from typing import Callable, Generic, Iterable, Optional, Protocol, Self, Sequence, TypeVar
from uuid import UUID

from src.core.models import StoredEvent
from src.core.shared_types import AggregateType, TeamSide
from src.db.event_store import EventStore
from src.softball.events import DomainEvent, event_from_dict
from src.softball.game import Game
from src.softball.inning import InningState
from src.softball.lineup import TeamLineup

logger = logging.getLogger(__name__)


class EventSourcedAggregate(Protocol):
    """Just the parts of an aggregate the repositories need"""

    @property
    def id(self) -> UUID: ...

    @property
    def uncommitted_events(self) -> Sequence[DomainEvent]: ...

    @property
    def committed_version(self) -> int: ...

    def mark_events_as_committed(self) -> Self: ...


AggregateT = TypeVar("AggregateT", bound=EventSourcedAggregate)


def decode_events(stored: Iterable[StoredEvent]) -> list[DomainEvent]:
    return [event_from_dict(event.event_type, event.event_data) for event in stored]


class EventSourcedRepository(Generic[AggregateT]):
    aggregate_type: AggregateType

    def __init__(
        self,
        event_store: EventStore,
        rebuild: Callable[[list[DomainEvent]], AggregateT],
    ) -> None:
        self.event_store = event_store
        self._rebuild = rebuild

    def find_by_id(self, aggregate_id: UUID) -> Optional[AggregateT]:
        stored = self.event_store.get_events(aggregate_id)
        if not stored:
            return None
        return self._rebuild(decode_events(stored))

    def save(self, aggregate: AggregateT) -> AggregateT:
        events = list(aggregate.uncommitted_events)
        if not events:
            return aggregate
        version = self.event_store.append(
            aggregate.id,
            self.aggregate_type,
            events,
            expected_version=aggregate.committed_version,
        )
        logger.debug("Saved %s %s at version %d", self.aggregate_type, aggregate.id, version)
        return aggregate.mark_events_as_committed()

    def _find_all_by_game_id(self, game_id: UUID) -> list[AggregateT]:
        """Rebuild every stream of this aggregate type belonging to the game (first stored first)."""
        streams: dict[UUID, list[StoredEvent]] = {}
        for event in self.event_store.get_game_events(game_id, self.aggregate_type):
            streams.setdefault(event.stream_id, []).append(event)
        return [
            self._rebuild(decode_events(sorted(stored, key=lambda e: e.stream_version)))
            for stored in streams.values()
        ]


class EventSourcedGameRepository(EventSourcedRepository[Game]):
    aggregate_type = AggregateType.GAME

    def __init__(self, event_store: EventStore) -> None:
        super().__init__(event_store, Game.from_events)


class EventSourcedInningStateRepository(EventSourcedRepository[InningState]):
    aggregate_type = AggregateType.INNING_STATE

    def __init__(self, event_store: EventStore) -> None:
        super().__init__(event_store, InningState.from_events)

    def find_by_game_id(self, game_id: UUID) -> Optional[InningState]:
        inning_states = self._find_all_by_game_id(game_id)
        return inning_states[0] if inning_states else None


class EventSourcedTeamLineupRepository(EventSourcedRepository[TeamLineup]):
    aggregate_type = AggregateType.TEAM_LINEUP

    def __init__(self, event_store: EventStore) -> None:
        super().__init__(event_store, TeamLineup.from_events)

    def find_by_game_id(self, game_id: UUID) -> list[TeamLineup]:
        return self._find_all_by_game_id(game_id)

    def find_by_game_id_and_side(self, game_id: UUID, side: TeamSide) -> Optional[TeamLineup]:
        return next(
            (lineup for lineup in self.find_by_game_id(game_id) if lineup.side == side),
            None,
        )
