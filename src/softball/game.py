"""
The Game aggregate: score, status and the inning pointer of a single game.

Immutable: every operation returns a new Game carrying the event(s) it raised in `uncommitted_events`.
Live operations and replay from a stored stream go through the same `_apply`, so rebuilding a game from its events
always gives the exact same state.
"""

from dataclasses import dataclass, replace
from typing import Iterable, Optional, Self
from uuid import UUID

from src.core.exceptions import DomainError, GameStateError, InvalidEventError
from src.core.shared_types import CompletionReason, GameStatus, TeamSide
from src.softball.events import (
    DomainEvent,
    GameCompleted,
    GameCreated,
    GameStarted,
    InningAdvanced,
    ScoreUpdated,
)
from src.softball.rules import SoftballRules

MAX_TEAM_NAME_LENGTH = 50


@dataclass(frozen=True)
class Game:
    # --- DOMAIN LAYER API CALLED BY THE COORDINATOR / SERVICE ---

    id: UUID
    home_team_name: str
    away_team_name: str
    rules: SoftballRules
    status: GameStatus = GameStatus.NOT_STARTED
    home_runs: int = 0
    away_runs: int = 0
    current_inning: int = 1
    is_top_half: bool = True
    completion_reason: Optional[CompletionReason] = None
    version: int = 0
    uncommitted_events: tuple[DomainEvent, ...] = ()

    @classmethod
    def create_new(
        cls,
        game_id: UUID,
        home_team_name: str,
        away_team_name: str,
        rules: Optional[SoftballRules] = None,
    ) -> Self:
        """A new game, not started yet. Rules default to the standard (recreation league) configuration."""
        for name in (home_team_name, away_team_name):
            if not name or not name.strip():
                raise DomainError("Team name cannot be empty or whitespace")
            if len(name) > MAX_TEAM_NAME_LENGTH:
                raise DomainError(f"Team name cannot exceed {MAX_TEAM_NAME_LENGTH} characters")
        if home_team_name.strip() == away_team_name.strip():
            raise DomainError("Home and away team must have different names")

        rules = rules or SoftballRules()
        blank = cls(
            id=game_id,
            home_team_name=home_team_name,
            away_team_name=away_team_name,
            rules=rules,
        )
        return blank._raise_event(
            GameCreated(
                game_id=str(game_id),
                home_team_name=home_team_name,
                away_team_name=away_team_name,
                rules=rules.to_dict(),
            )
        )

    @classmethod
    def from_events(cls, events: Iterable[DomainEvent]) -> Self:
        """Rebuild a game from its (committed) event stream."""
        events = list(events)
        if not events:
            raise InvalidEventError("Cannot reconstruct game from an empty event stream")

        first = events[0]
        if not isinstance(first, GameCreated):
            raise InvalidEventError(f"First event must be GameCreated, got {first.event_type}")
        if any(event.game_id != first.game_id for event in events):
            raise InvalidEventError("All events must belong to the same game")

        game = cls(
            id=UUID(first.game_id),
            home_team_name=first.home_team_name,
            away_team_name=first.away_team_name,
            rules=SoftballRules.from_dict(first.rules),
        )
        for event in events[1:]:
            game = game._apply(event)
        return replace(game, version=len(events), uncommitted_events=())

    # --- QUERIES ---
    @property
    def batting_side(self) -> TeamSide:
        return TeamSide.AWAY if self.is_top_half else TeamSide.HOME

    def runs_for(self, side: TeamSide) -> int:
        return self.home_runs if side == TeamSide.HOME else self.away_runs

    @property
    def run_differential(self) -> int:
        """Positive when the home team leads."""
        return self.home_runs - self.away_runs

    def is_home_winning(self) -> bool:
        return self.run_differential > 0

    def is_tied(self) -> bool:
        return self.run_differential == 0

    @property
    def winner(self) -> Optional[str]:
        if self.status != GameStatus.COMPLETED or self.is_tied():
            return None
        return self.home_team_name if self.is_home_winning() else self.away_team_name

    @property
    def committed_version(self) -> int:
        """Version of the stream this game was loaded from (before any of its pending events)."""
        return self.version - len(self.uncommitted_events)

    # --- COMMANDS ---
    def start_game(self) -> Self:
        if self.status != GameStatus.NOT_STARTED:
            raise GameStateError(
                f"Cannot start game that is not in NOT_STARTED status (current status: {self.status})",
                status=self.status,
            )
        return self._raise_event(GameStarted(game_id=str(self.id)))

    def add_runs(self, side: TeamSide, runs: int) -> Self:
        self._assert_in_progress("add runs")
        if isinstance(runs, bool) or not isinstance(runs, int):
            raise DomainError(f"Runs must be an integer, got {runs!r}")
        if runs <= 0:
            raise DomainError("Runs to add must be greater than zero")

        home_runs = self.home_runs + runs if side == TeamSide.HOME else self.home_runs
        away_runs = self.away_runs + runs if side == TeamSide.AWAY else self.away_runs
        return self._raise_event(
            ScoreUpdated(
                game_id=str(self.id),
                scoring_side=side,
                runs_added=runs,
                home_runs=home_runs,
                away_runs=away_runs,
            )
        )

    def add_home_runs(self, runs: int) -> Self:
        return self.add_runs(TeamSide.HOME, runs)

    def add_away_runs(self, runs: int) -> Self:
        return self.add_runs(TeamSide.AWAY, runs)

    def advance_inning(self) -> Self:
        """Top half -> bottom half of the same inning, bottom half -> top of the next inning."""
        self._assert_in_progress("advance inning")
        if self.is_top_half:
            new_inning, new_top_half = self.current_inning, False
        else:
            new_inning, new_top_half = self.current_inning + 1, True
        return self._raise_event(
            InningAdvanced(game_id=str(self.id), new_inning=new_inning, is_top_half=new_top_half)
        )

    def complete_game(self, reason: CompletionReason) -> Self:
        self._assert_in_progress("complete game")
        return self._raise_event(
            GameCompleted(
                game_id=str(self.id),
                reason=CompletionReason(reason),
                home_runs=self.home_runs,
                away_runs=self.away_runs,
                final_inning=self.current_inning,
                is_top_half=self.is_top_half,
            )
        )

    def mark_events_as_committed(self) -> Self:
        return replace(self, uncommitted_events=())

    # -- PRIVATE HELPERS ---
    def _assert_in_progress(self, operation: str) -> None:
        if self.status != GameStatus.IN_PROGRESS:
            raise GameStateError(
                f"Cannot {operation} when game is not in progress (current status: {self.status})",
                status=self.status,
            )

    def _raise_event(self, event: DomainEvent) -> Self:
        """Apply a new event and keep it as pending, to be picked up by the repository."""
        applied = self._apply(event)
        return replace(
            applied,
            version=self.version + 1,
            uncommitted_events=self.uncommitted_events + (event,),
        )

    def _apply(self, event: DomainEvent) -> Self:
        """State transition belonging to each event type."""
        match event:
            case GameCreated():
                return self
            case GameStarted():
                return replace(self, status=GameStatus.IN_PROGRESS)
            case ScoreUpdated(home_runs=home_runs, away_runs=away_runs):
                if home_runs < self.home_runs or away_runs < self.away_runs:
                    raise InvalidEventError("Score can never decrease")
                return replace(self, home_runs=home_runs, away_runs=away_runs)
            case InningAdvanced(new_inning=new_inning, is_top_half=is_top_half):
                return replace(self, current_inning=new_inning, is_top_half=is_top_half)
            case GameCompleted(reason=reason, home_runs=home_runs, away_runs=away_runs):
                return replace(
                    self,
                    status=GameStatus.COMPLETED,
                    completion_reason=CompletionReason(reason),
                    home_runs=home_runs,
                    away_runs=away_runs,
                )
            case _:
                raise InvalidEventError(
                    f"Unsupported event type for Game reconstruction: {event.event_type}"
                )
