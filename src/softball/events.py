"""
Domain events emitted by the aggregates.

Every state change of Game, InningState and TeamLineup is recorded as one of these events. They only hold primitive fields
(strings, ints, bools, plain dicts), so they can be stored as plain JSON data by any event store and replayed later.
"""

from dataclasses import asdict, dataclass, fields
from typing import Any, Optional

from src.core.exceptions import InvalidEventError


@dataclass(frozen=True)
class DomainEvent:
    game_id: str

    @property
    def event_type(self) -> str:
        return type(self).__name__


# --- GAME ---
@dataclass(frozen=True)
class GameCreated(DomainEvent):
    home_team_name: str
    away_team_name: str
    rules: dict[str, Any]


@dataclass(frozen=True)
class GameStarted(DomainEvent):
    pass


@dataclass(frozen=True)
class ScoreUpdated(DomainEvent):
    scoring_side: str
    runs_added: int
    home_runs: int
    away_runs: int


@dataclass(frozen=True)
class InningAdvanced(DomainEvent):
    new_inning: int
    is_top_half: bool


@dataclass(frozen=True)
class GameCompleted(DomainEvent):
    reason: str
    home_runs: int
    away_runs: int
    final_inning: int
    is_top_half: bool


# --- INNING STATE ---
@dataclass(frozen=True)
class InningStateCreated(DomainEvent):
    inning_state_id: str
    inning: int
    is_top_half: bool


@dataclass(frozen=True)
class AtBatCompleted(DomainEvent):
    batter_id: str
    batting_slot: int
    result: str
    inning: int
    is_top_half: bool
    outs_before: int
    outs_after: int
    runs_scored: int
    is_walk_off: bool = False


@dataclass(frozen=True)
class RunnerAdvanced(DomainEvent):
    runner_id: str
    from_base: Optional[str]
    to_base: str
    reason: str
    outs_after: int


@dataclass(frozen=True)
class RunScored(DomainEvent):
    runner_id: str
    scoring_side: str
    batter_id: Optional[str]
    # running score after this run, unknown when a runner scores between plays
    home_runs: Optional[int]
    away_runs: Optional[int]


@dataclass(frozen=True)
class CurrentBatterChanged(DomainEvent):
    side: str
    previous_slot: int
    new_slot: int
    inning: int
    is_top_half: bool


@dataclass(frozen=True)
class HalfInningEnded(DomainEvent):
    inning: int
    was_top_half: bool
    outs: int


# --- TEAM LINEUP ---
@dataclass(frozen=True)
class TeamLineupCreated(DomainEvent):
    lineup_id: str
    team_name: str
    side: str


@dataclass(frozen=True)
class PlayerAddedToLineup(DomainEvent):
    lineup_id: str
    player_id: str
    player_name: str
    batting_slot: int


@dataclass(frozen=True)
class PlayerSubstitutedIntoGame(DomainEvent):
    lineup_id: str
    batting_slot: int
    outgoing_player_id: str
    incoming_player_id: str
    incoming_player_name: str
    inning: int
    is_reentry: bool


EVENT_TYPES: dict[str, type[DomainEvent]] = {
    cls.__name__: cls
    for cls in (
        GameCreated,
        GameStarted,
        ScoreUpdated,
        InningAdvanced,
        GameCompleted,
        InningStateCreated,
        AtBatCompleted,
        RunnerAdvanced,
        RunScored,
        CurrentBatterChanged,
        HalfInningEnded,
        TeamLineupCreated,
        PlayerAddedToLineup,
        PlayerSubstitutedIntoGame,
    )
}


def event_to_dict(event: DomainEvent) -> dict[str, Any]:
    return asdict(event)


def event_from_dict(event_type: str, event_data: dict[str, Any]) -> DomainEvent:
    """Reverse of event_to_dict. The event type name picks the dataclass to rebuild."""
    event_cls = EVENT_TYPES.get(event_type)
    if event_cls is None:
        raise InvalidEventError(f"Unknown event type: {event_type!r}")
    if not isinstance(event_data, dict):
        raise InvalidEventError(f"Payload of {event_type} must be a mapping, got {type(event_data).__name__}")

    expected = {f.name for f in fields(event_cls)}
    if set(event_data) != expected:
        raise InvalidEventError(
            f"Payload of {event_type} has fields {sorted(event_data)}, expected {sorted(expected)}"
        )
    return event_cls(**event_data)
