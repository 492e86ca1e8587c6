"""
Coordination engine: records one at-bat across the Game, InningState and TeamLineup aggregates.

Either all aggregates reflect the at-bat, or (on any domain error) none do: the outcome then carries the error
and no aggregate at all. The aggregates passed in are immutable, so the caller's copies are never touched.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Self, Sequence

from src.core.exceptions import (
    BatterEligibilityError,
    DomainError,
    GameStateError,
)
from src.core.shared_types import AtBatResultType, CompletionReason, GameStatus, PlayerId, TeamSide
from src.softball.advancement import determine_runner_advancement, validate_runner_overrides
from src.softball.bases import RunnerMovement, runs_scored
from src.softball.completion import evaluate_completion
from src.softball.game import Game
from src.softball.inning import CompletedHalfInning, GameContext, InningState
from src.softball.lineup import TeamLineup
from src.softball.rbi import calculate_rbis

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InningTransition:
    """Where play continues after a half-inning ended."""

    new_inning: int
    new_top_half: bool

    @classmethod
    def after(cls, completed_half: CompletedHalfInning) -> Self:
        if completed_half.is_top_half:
            return cls(new_inning=completed_half.inning, new_top_half=False)
        return cls(new_inning=completed_half.inning + 1, new_top_half=True)


@dataclass(frozen=True)
class AtBatOutcome:
    success: bool
    updated_game: Optional[Game] = None
    updated_inning_state: Optional[InningState] = None
    runs_scored: int = 0
    rbis: int = 0
    inning_complete: bool = False
    inning_transition: Optional[InningTransition] = None
    game_complete: bool = False
    completion_reason: Optional[CompletionReason] = None
    movements: tuple[RunnerMovement, ...] = ()
    error: Optional[DomainError] = None

    @classmethod
    def failure(cls, error: DomainError) -> Self:
        return cls(success=False, error=error)

    @property
    def error_message(self) -> Optional[str]:
        return self.error.message if self.error else None


class GameCoordinator:
    """Stateless: one instance can serve any number of games."""

    def record_at_bat(
        self,
        game: Game,
        home_lineup: TeamLineup,
        away_lineup: TeamLineup,
        inning_state: InningState,
        batter_id: PlayerId,
        result: AtBatResultType,
        runner_overrides: Optional[Sequence[RunnerMovement]] = None,
    ) -> AtBatOutcome:
        try:
            return self._record_at_bat(
                game, home_lineup, away_lineup, inning_state, batter_id, result, runner_overrides
            )
        except DomainError as e:
            logger.warning("At-bat rejected for game %s (%s): %s", game.id, e.kind, e.message)
            return AtBatOutcome.failure(e)

    # -- PRIVATE HELPERS ---
    def _record_at_bat(
        self,
        game: Game,
        home_lineup: TeamLineup,
        away_lineup: TeamLineup,
        inning_state: InningState,
        batter_id: PlayerId,
        result: AtBatResultType,
        runner_overrides: Optional[Sequence[RunnerMovement]],
    ) -> AtBatOutcome:
        result = self._parse_result(result)
        self._validate_game(game, inning_state)
        batting_lineup = away_lineup if inning_state.is_top_half else home_lineup
        batting_slot = self._validate_batter(batting_lineup, inning_state.batting_side, batter_id)

        # 1. movement
        bases_before = inning_state.bases
        if runner_overrides:
            validate_runner_overrides(runner_overrides, bases_before, batter_id)
            movements = tuple(runner_overrides)
        else:
            movements = tuple(determine_runner_advancement(result, bases_before, batter_id))
        runs = runs_scored(movements)

        # 2. RBI
        rbis = calculate_rbis(result, bases_before, inning_state.outs)

        # 3. inning
        context = GameContext(
            home_score=game.home_runs,
            away_score=game.away_runs,
            total_innings=game.rules.total_innings,
            runs_about_to_score=runs,
        )
        play = inning_state.record_at_bat(
            batter_id=batter_id,
            batting_slot=batting_slot,
            result=result,
            inning=inning_state.inning,
            context=context,
            lineup_size=batting_lineup.batting_order_size,
            movements=movements,
        )

        # 4. score
        updated_game = game.add_runs(inning_state.batting_side, runs) if runs > 0 else game

        # 5. inning completion
        completed_half = play.completed_half
        transition = InningTransition.after(completed_half) if completed_half else None

        # 6. game completion
        decision = evaluate_completion(
            rules=game.rules,
            home_score=updated_game.home_runs,
            away_score=updated_game.away_runs,
            inning=play.inning_state.inning,
            is_top_half=play.inning_state.is_top_half,
            runs_scored=runs,
            completed_half=completed_half,
        )

        # 7. terminal state
        if decision.is_complete:
            updated_game = updated_game.complete_game(decision.reason)  # type: ignore[arg-type]
            logger.info(
                "Game %s completed (%s): %s %d - %d %s",
                game.id,
                decision.reason,
                updated_game.home_team_name,
                updated_game.home_runs,
                updated_game.away_runs,
                updated_game.away_team_name,
            )
        elif completed_half is not None:
            updated_game = updated_game.advance_inning()
            self._validate_in_sync(updated_game, play.inning_state)

        logger.debug(
            "Game %s: %s by %s, %d run(s), %d RBI, %d out(s)",
            game.id,
            result,
            batter_id,
            runs,
            rbis,
            play.inning_state.outs,
        )
        return AtBatOutcome(
            success=True,
            updated_game=updated_game,
            updated_inning_state=play.inning_state,
            runs_scored=runs,
            rbis=rbis,
            inning_complete=completed_half is not None,
            inning_transition=transition,
            game_complete=decision.is_complete,
            completion_reason=decision.reason,
            movements=movements,
        )

    @staticmethod
    def _parse_result(result: AtBatResultType) -> AtBatResultType:
        try:
            return AtBatResultType(result)
        except ValueError as e:
            raise DomainError(f"Unknown at-bat result: {result!r}") from e

    @staticmethod
    def _validate_game(game: Game, inning_state: InningState) -> None:
        if game.status != GameStatus.IN_PROGRESS:
            raise GameStateError(
                f"Cannot record at-bat when game is not in progress (current status: {game.status})",
                status=game.status,
            )
        if inning_state.game_id != game.id:
            raise GameStateError("Inning state belongs to another game", status=game.status)
        if (inning_state.inning, inning_state.is_top_half) != (game.current_inning, game.is_top_half):
            raise GameStateError(
                f"Inning state ({inning_state.inning}, top half: {inning_state.is_top_half}) is out of sync "
                f"with the game ({game.current_inning}, top half: {game.is_top_half})",
                status=game.status,
            )

    @staticmethod
    def _validate_batter(lineup: TeamLineup, batting_side: TeamSide, batter_id: PlayerId) -> int:
        """Batting slot of the batter in the lineup that is up."""
        if lineup.side != batting_side:
            raise BatterEligibilityError(
                f"{lineup.team_name} ({lineup.side}) is not batting, {batting_side} is",
                batter_id=batter_id,
                batting_side=batting_side,
            )
        slot = lineup.find_slot(batter_id)
        if slot is None:
            raise BatterEligibilityError(
                f"Batter {batter_id} is not in the active lineup of {lineup.team_name}",
                batter_id=batter_id,
                batting_side=batting_side,
            )
        return slot.position

    @staticmethod
    def _validate_in_sync(game: Game, inning_state: InningState) -> None:
        if (game.current_inning, game.is_top_half) != (inning_state.inning, inning_state.is_top_half):
            raise GameStateError(
                f"Game advanced to ({game.current_inning}, top half: {game.is_top_half}) but the inning is at "
                f"({inning_state.inning}, top half: {inning_state.is_top_half})",
                status=game.status,
            )
