"""Orchestration of communication from API models to business logic and persistence layers (and the reverse direction)."""

import logging
from typing import Optional
from uuid import UUID, uuid4

from src.api.models import (
    AtBatResponse,
    GameStateResponse,
    InningTransitionResponse,
    LineupEntry,
    RecordAtBatRequest,
    StartGameRequest,
)
from src.core.config import get_rules_preset
from src.core.exceptions import DomainError, RepositoryError
from src.core.logging_config import configure_logging
from src.core.shared_types import TeamSide
from src.db.repository import GameRepository, InningStateRepository, TeamLineupRepository
from src.softball.coordinator import GameCoordinator
from src.softball.game import Game
from src.softball.inning import InningState
from src.softball.lineup import TeamLineup
from src.softball.rules import SoftballRules

logger = logging.getLogger(__name__)


class GameService:
    """Orchestration of layers for a softball game."""

    def __init__(
        self,
        game_repository: GameRepository,
        inning_repository: InningStateRepository,
        lineup_repository: TeamLineupRepository,
        coordinator: Optional[GameCoordinator] = None,
    ) -> None:
        self.game_repo = game_repository
        self.inning_repo = inning_repository
        self.lineup_repo = lineup_repository
        self.coordinator = coordinator or GameCoordinator()
        configure_logging()

    # -- Use cases ---
    def start_new_game(self, request: StartGameRequest) -> GameStateResponse:
        """Create the game with both lineups, and start it: the away team bats first."""
        rules = request.rules.to_rules() if request.rules else SoftballRules.from_preset(get_rules_preset())

        game_id = uuid4()
        game = Game.create_new(game_id, request.home_team_name, request.away_team_name, rules).start_game()
        home_lineup = self._build_lineup(game_id, request.home_team_name, TeamSide.HOME, request.home_lineup)
        away_lineup = self._build_lineup(game_id, request.away_team_name, TeamSide.AWAY, request.away_lineup)
        inning_state = InningState.create_new(uuid4(), game_id)

        # Store everything (only once all aggregates were built without errors)
        game = self.game_repo.save(game)
        home_lineup = self.lineup_repo.save(home_lineup)
        away_lineup = self.lineup_repo.save(away_lineup)
        inning_state = self.inning_repo.save(inning_state)

        logger.info(
            "Started game %s: %s (home) vs %s (away), %s",
            game_id,
            game.home_team_name,
            game.away_team_name,
            rules,
        )
        return self._create_state_response(game, inning_state, home_lineup, away_lineup)

    def record_at_bat(self, request: RecordAtBatRequest) -> AtBatResponse:
        """
        Run one at-bat through the coordinator.
        ----
        A rejected at-bat is reported in the response and nothing gets stored.
        """
        game, inning_state, home_lineup, away_lineup = self._fetch_aggregates(request.game_id)
        try:
            overrides = (
                [advance.to_movement() for advance in request.runner_advances]
                if request.runner_advances
                else None
            )
        except DomainError as e:
            return self._rejected(request.game_id, e)

        outcome = self.coordinator.record_at_bat(
            game=game,
            home_lineup=home_lineup,
            away_lineup=away_lineup,
            inning_state=inning_state,
            batter_id=request.batter_id,
            result=request.result,
            runner_overrides=overrides,
        )
        if not outcome.success:
            return self._rejected(request.game_id, outcome.error)  # type: ignore[arg-type]

        updated_game = self.game_repo.save(outcome.updated_game)  # type: ignore[arg-type]
        updated_inning = self.inning_repo.save(outcome.updated_inning_state)  # type: ignore[arg-type]

        transition = outcome.inning_transition
        return AtBatResponse(
            success=True,
            game_id=request.game_id,
            runs_scored=outcome.runs_scored,
            rbis=outcome.rbis,
            inning_complete=outcome.inning_complete,
            inning_transition=(
                InningTransitionResponse(new_inning=transition.new_inning, new_top_half=transition.new_top_half)
                if transition
                else None
            ),
            game_complete=outcome.game_complete,
            completion_reason=outcome.completion_reason,
            game_state=self._create_state_response(updated_game, updated_inning, home_lineup, away_lineup),
        )

    def get_game_state(self, game_id: UUID) -> GameStateResponse:
        """Retrieve current game state."""
        game, inning_state, home_lineup, away_lineup = self._fetch_aggregates(game_id)
        return self._create_state_response(game, inning_state, home_lineup, away_lineup)

    # -- Internal helpers --
    @staticmethod
    def _rejected(game_id: UUID, error: DomainError) -> AtBatResponse:
        return AtBatResponse(
            success=False,
            game_id=game_id,
            error_kind=error.kind,
            error_message=error.message,
        )

    @staticmethod
    def _build_lineup(
        game_id: UUID, team_name: str, side: TeamSide, entries: list[LineupEntry]
    ) -> TeamLineup:
        lineup = TeamLineup.create_new(uuid4(), game_id, team_name, side)
        for entry in sorted(entries, key=lambda e: e.batting_slot):
            lineup = lineup.add_player(entry.player_id, entry.player_name, entry.batting_slot)
        return lineup

    def _fetch_aggregates(self, game_id: UUID) -> tuple[Game, InningState, TeamLineup, TeamLineup]:
        """Attempt to find all aggregates of the game in the repositories and raise error if it fails."""
        game = self.game_repo.find_by_id(game_id)
        if game is None:
            raise RepositoryError(f"Game with {game_id=} not found.")
        inning_state = self.inning_repo.find_by_game_id(game_id)
        if inning_state is None:
            raise RepositoryError(f"Inning state of game with {game_id=} not found.")
        home_lineup = self.lineup_repo.find_by_game_id_and_side(game_id, TeamSide.HOME)
        away_lineup = self.lineup_repo.find_by_game_id_and_side(game_id, TeamSide.AWAY)
        if home_lineup is None or away_lineup is None:
            raise RepositoryError(f"Lineups of game with {game_id=} not found.")
        return game, inning_state, home_lineup, away_lineup

    @staticmethod
    def _create_state_response(
        game: Game, inning_state: InningState, home_lineup: TeamLineup, away_lineup: TeamLineup
    ) -> GameStateResponse:
        batting_lineup = away_lineup if inning_state.is_top_half else home_lineup
        return GameStateResponse(
            game_id=game.id,
            home_team_name=game.home_team_name,
            away_team_name=game.away_team_name,
            status=game.status,
            home_score=game.home_runs,
            away_score=game.away_runs,
            current_inning=game.current_inning,
            is_top_half=game.is_top_half,
            outs=inning_state.outs,
            bases={str(base): runner for base, runner in inning_state.bases.runners().items()},
            current_batter_id=batting_lineup.current_player(inning_state.current_batting_slot),
            completion_reason=game.completion_reason,
            winner=game.winner,
        )
