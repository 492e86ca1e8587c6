"""
The InningState aggregate: outs, runners and the batting order of the half-inning being played.

Immutable like Game. Every state change goes through an event and `_apply`, so an inning rebuilt from its stream
matches the live one exactly.

Runner advancement for hits is NOT derived here: the coordinator precomputes the movements and passes them in.
The aggregate only validates and applies them, lead runner first, and keeps the out count, batting order
and the half-inning pointer in sync.
"""

from dataclasses import dataclass, field, replace
from typing import Iterable, Optional, Self, Sequence
from uuid import UUID

from src.core.exceptions import (
    BatterEligibilityError,
    DomainError,
    GameStateError,
    InvalidEventError,
    RunnerAdvancementError,
)
from src.core.shared_types import (
    BASE_ORDER,
    HIT_RESULTS,
    HOME,
    OUT,
    OUTS_ON_PLAY,
    AdvanceReason,
    AtBatResultType,
    Base,
    PlayerId,
    TeamSide,
)
from src.softball.advancement import walk_movements
from src.softball.bases import BasesState, RunnerMovement, runs_scored
from src.softball.events import (
    AtBatCompleted,
    CurrentBatterChanged,
    DomainEvent,
    HalfInningEnded,
    InningStateCreated,
    RunnerAdvanced,
    RunScored,
)

OUTS_PER_HALF_INNING = 3

# Results where the batter is put out by the play itself
BATTER_OUT_RESULTS: frozenset[AtBatResultType] = frozenset(
    {
        AtBatResultType.STRIKEOUT,
        AtBatResultType.GROUND_OUT,
        AtBatResultType.FLY_OUT,
        AtBatResultType.SACRIFICE_FLY,
        AtBatResultType.DOUBLE_PLAY,
        AtBatResultType.TRIPLE_PLAY,
    }
)

ADVANCE_REASONS: dict[AtBatResultType, AdvanceReason] = {
    AtBatResultType.SINGLE: AdvanceReason.HIT,
    AtBatResultType.DOUBLE: AdvanceReason.HIT,
    AtBatResultType.TRIPLE: AdvanceReason.HIT,
    AtBatResultType.HOME_RUN: AdvanceReason.HIT,
    AtBatResultType.WALK: AdvanceReason.WALK,
    AtBatResultType.ERROR: AdvanceReason.ERROR,
    AtBatResultType.FIELDERS_CHOICE: AdvanceReason.FIELDERS_CHOICE,
    AtBatResultType.SACRIFICE_FLY: AdvanceReason.SACRIFICE,
}


@dataclass(frozen=True)
class GameContext:
    """The bits of the Game the inning needs to know about (running score and walk-off awareness)."""

    home_score: int
    away_score: int
    total_innings: int
    runs_about_to_score: int = 0

    def __post_init__(self) -> None:
        for name in ("home_score", "away_score", "runs_about_to_score"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise DomainError(f"{name} must be a non-negative integer, got {value!r}")
        if isinstance(self.total_innings, bool) or not isinstance(self.total_innings, int) or self.total_innings < 1:
            raise DomainError(f"total_innings must be a positive integer, got {self.total_innings!r}")

    def is_walk_off(self, inning: int, is_top_half: bool) -> bool:
        """Home takes the lead in the bottom of the last (or an extra) inning."""
        return (
            not is_top_half
            and inning >= self.total_innings
            and self.runs_about_to_score > 0
            and self.home_score + self.runs_about_to_score > self.away_score
        )


@dataclass(frozen=True)
class CompletedHalfInning:
    """Identity of the half-inning that just ended with its third out."""

    inning: int
    is_top_half: bool


@dataclass(frozen=True)
class InningPlayResult:
    inning_state: "InningState"
    completed_half: Optional[CompletedHalfInning] = None

    @property
    def half_inning_completed(self) -> bool:
        return self.completed_half is not None


def _moved(bases: BasesState, movement: RunnerMovement) -> BasesState:
    """Bases after a single movement. Rejects runners that are not where the movement says, and occupied targets."""
    if movement.from_base is not None:
        actual = bases.runner(movement.from_base)
        if actual != movement.runner_id:
            raise RunnerAdvancementError(
                f"Runner {movement.runner_id} is not on {movement.from_base} (found: {actual or 'nobody'})",
                runner_id=movement.runner_id,
                from_base=movement.from_base,
                to_base=movement.to_base,
            )
        bases = bases.without_runner(movement.from_base)

    if movement.to_base in (HOME, OUT):
        return bases

    target = Base(movement.to_base)
    occupant = bases.runner(target)
    if occupant is not None:
        raise RunnerAdvancementError(
            f"Runner {movement.runner_id} cannot move to {target}: occupied by {occupant}",
            runner_id=movement.runner_id,
            from_base=movement.from_base,
            to_base=target,
        )
    return bases.with_runner_on(target, movement.runner_id)


def _lead_runner_first(movement: RunnerMovement) -> int:
    # THIRD -> -3, SECOND -> -2, FIRST -> -1, batter -> 0
    if movement.is_batter:
        return 0
    return -(BASE_ORDER.index(movement.from_base) + 1)


@dataclass(frozen=True)
class InningState:
    # --- DOMAIN LAYER API CALLED BY THE COORDINATOR ---

    id: UUID
    game_id: UUID
    inning: int = 1
    is_top_half: bool = True
    outs: int = 0
    bases: BasesState = field(default_factory=BasesState.empty)
    away_batting_slot: int = 1
    home_batting_slot: int = 1
    version: int = 0
    uncommitted_events: tuple[DomainEvent, ...] = ()

    @classmethod
    def create_new(cls, inning_state_id: UUID, game_id: UUID) -> Self:
        """Top of the first, nobody out, bases empty, both teams leading off with slot 1."""
        blank = cls(id=inning_state_id, game_id=game_id)
        return blank._raise_event(
            InningStateCreated(
                game_id=str(game_id),
                inning_state_id=str(inning_state_id),
                inning=1,
                is_top_half=True,
            )
        )

    @classmethod
    def from_events(cls, events: Iterable[DomainEvent]) -> Self:
        events = list(events)
        if not events:
            raise InvalidEventError("Cannot reconstruct inning state from an empty event stream")

        first = events[0]
        if not isinstance(first, InningStateCreated):
            raise InvalidEventError(f"First event must be InningStateCreated, got {first.event_type}")
        if any(event.game_id != first.game_id for event in events):
            raise InvalidEventError("All events must belong to the same game")

        state = cls(
            id=UUID(first.inning_state_id),
            game_id=UUID(first.game_id),
            inning=first.inning,
            is_top_half=first.is_top_half,
        )
        for event in events[1:]:
            state = state._apply(event)
        return replace(state, version=len(events), uncommitted_events=())

    # --- QUERIES ---
    @property
    def batting_side(self) -> TeamSide:
        return TeamSide.AWAY if self.is_top_half else TeamSide.HOME

    def batting_slot_for(self, side: TeamSide) -> int:
        return self.away_batting_slot if side == TeamSide.AWAY else self.home_batting_slot

    @property
    def current_batting_slot(self) -> int:
        return self.batting_slot_for(self.batting_side)

    @property
    def committed_version(self) -> int:
        return self.version - len(self.uncommitted_events)

    # --- COMMANDS ---
    def record_at_bat(
        self,
        batter_id: PlayerId,
        batting_slot: int,
        result: AtBatResultType,
        inning: int,
        context: GameContext,
        lineup_size: int,
        movements: Optional[Sequence[RunnerMovement]] = None,
    ) -> InningPlayResult:
        """
        Record one plate appearance.

        The play's own outs are counted first, then the movements are applied (lead runner first),
        then the batting order moves on. On the third out the half-inning ends within the same transition,
        and the result carries the identity of the half that just ended.
        """
        result = AtBatResultType(result)
        self._validate_at_bat(batter_id, batting_slot, inning, lineup_size)
        if result in HIT_RESULTS and movements is None:
            raise DomainError(f"{result} requires the runner movements to be provided")

        supplied = sorted(movements or (), key=_lead_runner_first)
        self._validate_movements(supplied, batter_id=batter_id)
        if result in HIT_RESULTS and not any(movement.is_batter for movement in supplied):
            raise RunnerAdvancementError(
                f"{result} requires a movement for the batter", runner_id=batter_id
            )

        runs = runs_scored(supplied)
        if runs != context.runs_about_to_score:
            raise DomainError(
                f"Movements score {runs} run(s), but the game expects {context.runs_about_to_score}"
            )

        # where everybody ends up, including the batter placement the play implies when no movement says otherwise
        bases_after = self.bases
        for movement in supplied:
            bases_after = _moved(bases_after, movement)
        implied = self._implied_movements(result, batter_id, supplied, bases_after)
        all_movements = supplied + implied

        batter_out = result in BATTER_OUT_RESULTS or any(
            m.is_batter and m.is_out for m in all_movements
        )
        runner_outs = sum(1 for m in all_movements if not m.is_batter and m.is_out)
        outs_recorded = max(OUTS_ON_PLAY.get(result, 0), int(batter_out) + runner_outs)
        outs_after = min(self.outs + outs_recorded, OUTS_PER_HALF_INNING)

        state = self._raise_event(
            AtBatCompleted(
                game_id=str(self.game_id),
                batter_id=batter_id,
                batting_slot=batting_slot,
                result=result,
                inning=self.inning,
                is_top_half=self.is_top_half,
                outs_before=self.outs,
                outs_after=outs_after,
                runs_scored=runs,
                is_walk_off=outs_after < OUTS_PER_HALF_INNING and context.is_walk_off(self.inning, self.is_top_half),
            )
        )
        state = state._record_movements(
            all_movements,
            reason=ADVANCE_REASONS.get(result, AdvanceReason.FORCE),
            outs_after=outs_after,
            batter_id=batter_id,
            context=context,
        )

        next_slot = batting_slot % lineup_size + 1
        state = state._raise_event(
            CurrentBatterChanged(
                game_id=str(self.game_id),
                side=self.batting_side,
                previous_slot=batting_slot,
                new_slot=next_slot,
                inning=self.inning,
                is_top_half=self.is_top_half,
            )
        )
        return state._end_half_if_three_outs()

    def advance_runners(
        self,
        result: Optional[AtBatResultType],
        movements: Sequence[RunnerMovement],
    ) -> InningPlayResult:
        """
        Move runners between plays (stolen base, wild pitch, pick-off ...). The batter is not involved.
        Without a result, the movements are recorded as manual overrides.
        """
        supplied = sorted(movements, key=_lead_runner_first)
        if any(movement.is_batter for movement in supplied):
            raise RunnerAdvancementError("Batter movements can only be recorded with an at-bat")
        self._validate_movements(supplied)

        outs_after = min(
            self.outs + sum(1 for m in supplied if m.is_out), OUTS_PER_HALF_INNING
        )
        if result is None:
            reason = AdvanceReason.OVERRIDE
        else:
            reason = ADVANCE_REASONS.get(AtBatResultType(result), AdvanceReason.FORCE)
        state = self._record_movements(supplied, reason=reason, outs_after=outs_after)
        return state._end_half_if_three_outs()

    def end_half_inning(self) -> InningPlayResult:
        """End the current half-inning regardless of outs (e.g. the scorer calls it)."""
        completed = CompletedHalfInning(inning=self.inning, is_top_half=self.is_top_half)
        state = self._raise_event(
            HalfInningEnded(
                game_id=str(self.game_id),
                inning=self.inning,
                was_top_half=self.is_top_half,
                outs=self.outs,
            )
        )
        return InningPlayResult(inning_state=state, completed_half=completed)

    def mark_events_as_committed(self) -> Self:
        return replace(self, uncommitted_events=())

    # --- SETUP HELPERS (no events: used to build situations in tests) ---
    def with_runner_on(self, base: Base, runner_id: PlayerId) -> Self:
        return replace(self, bases=self.bases.with_runner_on(Base(base), runner_id))

    def with_bases(self, bases: BasesState) -> Self:
        return replace(self, bases=bases)

    def with_outs(self, outs: int) -> Self:
        if isinstance(outs, bool) or not isinstance(outs, int) or not 0 <= outs < OUTS_PER_HALF_INNING:
            raise DomainError(f"Outs must be an integer between 0 and 2, got {outs!r}")
        return replace(self, outs=outs)

    def with_batting_slot(self, slot: int, side: Optional[TeamSide] = None) -> Self:
        if isinstance(slot, bool) or not isinstance(slot, int) or slot < 1:
            raise DomainError(f"Batting slot must be a positive integer, got {slot!r}")
        side = side or self.batting_side
        if side == TeamSide.AWAY:
            return replace(self, away_batting_slot=slot)
        return replace(self, home_batting_slot=slot)

    def with_inning_half(self, inning: int, is_top_half: bool) -> Self:
        if isinstance(inning, bool) or not isinstance(inning, int) or inning < 1:
            raise DomainError(f"Inning must be a positive integer, got {inning!r}")
        return replace(self, inning=inning, is_top_half=is_top_half)

    # -- PRIVATE HELPERS ---
    def _validate_at_bat(
        self, batter_id: PlayerId, batting_slot: int, inning: int, lineup_size: int
    ) -> None:
        if not batter_id:
            raise BatterEligibilityError("Batter id cannot be empty", batting_side=self.batting_side)
        if inning != self.inning:
            raise GameStateError(
                f"At-bat recorded for inning {inning}, but inning {self.inning} is being played"
            )
        if isinstance(lineup_size, bool) or not isinstance(lineup_size, int) or lineup_size < 1:
            raise DomainError(f"Lineup size must be a positive integer, got {lineup_size!r}")
        if isinstance(batting_slot, bool) or not isinstance(batting_slot, int) or not 1 <= batting_slot <= lineup_size:
            raise BatterEligibilityError(
                f"Batting slot must be between 1 and {lineup_size}, got {batting_slot!r}",
                batter_id=batter_id,
                batting_side=self.batting_side,
            )
        if batting_slot != self.current_batting_slot:
            raise BatterEligibilityError(
                f"Batting slot {batting_slot} does not match current batter slot {self.current_batting_slot}",
                batter_id=batter_id,
                batting_side=self.batting_side,
            )
        if self.bases.base_of(batter_id) is not None:
            raise BatterEligibilityError(
                f"Batter {batter_id} is currently on {self.bases.base_of(batter_id)}",
                batter_id=batter_id,
                batting_side=self.batting_side,
            )

    def _validate_movements(
        self, movements: Sequence[RunnerMovement], batter_id: Optional[PlayerId] = None
    ) -> None:
        seen: set[PlayerId] = set()
        for movement in movements:
            if not isinstance(movement, RunnerMovement):
                raise RunnerAdvancementError(f"Not a runner movement: {movement!r}")
            if movement.runner_id in seen:
                raise RunnerAdvancementError(
                    f"Runner {movement.runner_id} has more than one movement",
                    runner_id=movement.runner_id,
                )
            seen.add(movement.runner_id)

            if movement.is_batter and movement.runner_id != batter_id:
                raise RunnerAdvancementError(
                    f"Movement from home plate must be the batter ({batter_id}), got {movement.runner_id}",
                    runner_id=movement.runner_id,
                    to_base=movement.to_base,
                )
            if not movement.is_batter and self.bases.runner(movement.from_base) != movement.runner_id:
                raise RunnerAdvancementError(
                    f"Runner {movement.runner_id} is not on {movement.from_base}",
                    runner_id=movement.runner_id,
                    from_base=movement.from_base,
                    to_base=movement.to_base,
                )

    @staticmethod
    def _implied_movements(
        result: AtBatResultType,
        batter_id: PlayerId,
        supplied: Sequence[RunnerMovement],
        bases_after: BasesState,
    ) -> list[RunnerMovement]:
        """
        Batter placement the play implies when the movements leave the batter out of it:
        * WALK / ERROR: batter reaches first, the runners ahead of the batter move up as far as they are forced
        * FIELDERS_CHOICE: batter reaches first, the runner still on first is forced out
        * DOUBLE_PLAY: the runner still on first is doubled off (the batter is out by the play itself)

        Implied movements never score: a forced run has to be part of the movements.
        """
        if any(movement.is_batter for movement in supplied):
            return []
        runner_put_out = any(movement.is_out for movement in supplied)
        on_first = bases_after.runner(Base.FIRST)

        if result in (AtBatResultType.WALK, AtBatResultType.ERROR):
            forced = walk_movements(bases_after, batter_id)
            forced_home = next((movement for movement in forced if movement.scores), None)
            if forced_home is not None:
                raise RunnerAdvancementError(
                    f"Runner {forced_home.runner_id} is forced home on {result}, the run must be in the movements",
                    runner_id=forced_home.runner_id,
                    to_base=HOME,
                )
            return forced

        implied: list[RunnerMovement] = []
        if result in (AtBatResultType.FIELDERS_CHOICE, AtBatResultType.DOUBLE_PLAY):
            if on_first is not None and not runner_put_out:
                implied.append(RunnerMovement(on_first, Base.FIRST, OUT))
                on_first = None
        if result == AtBatResultType.FIELDERS_CHOICE:
            if on_first is not None:
                raise RunnerAdvancementError(
                    f"Batter cannot reach first on {result}: occupied by {on_first}",
                    runner_id=batter_id,
                    to_base=Base.FIRST,
                )
            implied.append(RunnerMovement.batter(batter_id, Base.FIRST))
        return implied

    def _record_movements(
        self,
        movements: Sequence[RunnerMovement],
        reason: AdvanceReason,
        outs_after: int,
        batter_id: Optional[PlayerId] = None,
        context: Optional[GameContext] = None,
    ) -> Self:
        state = self
        runs_so_far = 0
        for movement in movements:
            state = state._raise_event(
                RunnerAdvanced(
                    game_id=str(self.game_id),
                    runner_id=movement.runner_id,
                    from_base=movement.from_base,
                    to_base=movement.to_base,
                    reason=reason,
                    outs_after=outs_after,
                )
            )
            if not movement.scores:
                continue

            runs_so_far += 1
            home_runs = away_runs = None
            if context is not None:
                home_runs, away_runs = context.home_score, context.away_score
                if self.batting_side == TeamSide.HOME:
                    home_runs += runs_so_far
                else:
                    away_runs += runs_so_far
            state = state._raise_event(
                RunScored(
                    game_id=str(self.game_id),
                    runner_id=movement.runner_id,
                    scoring_side=self.batting_side,
                    batter_id=batter_id,
                    home_runs=home_runs,
                    away_runs=away_runs,
                )
            )
        return state

    def _end_half_if_three_outs(self) -> InningPlayResult:
        if self.outs < OUTS_PER_HALF_INNING:
            return InningPlayResult(inning_state=self)
        return self.end_half_inning()

    def _raise_event(self, event: DomainEvent) -> Self:
        applied = self._apply(event)
        return replace(
            applied,
            version=self.version + 1,
            uncommitted_events=self.uncommitted_events + (event,),
        )

    def _apply(self, event: DomainEvent) -> Self:
        match event:
            case InningStateCreated():
                return self
            case AtBatCompleted(outs_after=outs_after):
                return replace(self, outs=outs_after)
            case RunnerAdvanced(runner_id=runner_id, from_base=from_base, to_base=to_base, outs_after=outs_after):
                movement = RunnerMovement(runner_id, from_base, to_base)
                return replace(self, bases=_moved(self.bases, movement), outs=outs_after)
            case RunScored():
                return self
            case CurrentBatterChanged(side=side, new_slot=new_slot):
                if side == TeamSide.AWAY:
                    return replace(self, away_batting_slot=new_slot)
                return replace(self, home_batting_slot=new_slot)
            case HalfInningEnded(was_top_half=was_top_half):
                if was_top_half:
                    new_inning, new_top_half = self.inning, False
                else:
                    new_inning, new_top_half = self.inning + 1, True
                return replace(
                    self,
                    inning=new_inning,
                    is_top_half=new_top_half,
                    outs=0,
                    bases=BasesState.empty(),
                )
            case _:
                raise InvalidEventError(
                    f"Unsupported event type for InningState reconstruction: {event.event_type}"
                )
