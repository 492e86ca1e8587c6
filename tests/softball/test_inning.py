"""Unit tests for src/softball/inning.py"""

from uuid import UUID, uuid4

import pytest

from src.core.exceptions import (
    BatterEligibilityError,
    DomainError,
    GameStateError,
    InvalidEventError,
    RunnerAdvancementError,
)
from src.core.shared_types import HOME, OUT, AdvanceReason, AtBatResultType, Base, TeamSide
from src.softball.bases import BasesState, RunnerMovement
from src.softball.events import (
    AtBatCompleted,
    CurrentBatterChanged,
    HalfInningEnded,
    InningStateCreated,
    RunnerAdvanced,
    RunScored,
)
from src.softball.inning import CompletedHalfInning, GameContext, InningState

LINEUP_SIZE = 9


@pytest.fixture
def inning_state() -> InningState:
    return InningState.create_new(uuid4(), uuid4())


def quiet_context(runs: int = 0) -> GameContext:
    return GameContext(home_score=0, away_score=0, total_innings=7, runs_about_to_score=runs)


def strikeout(state: InningState, batter_id: str = "batter"):
    return state.record_at_bat(
        batter_id, state.current_batting_slot, AtBatResultType.STRIKEOUT, state.inning, quiet_context(), LINEUP_SIZE
    )


# -- CREATION LOGIC --
def test_create_new(inning_state: InningState) -> None:
    assert (inning_state.inning, inning_state.is_top_half, inning_state.outs) == (1, True, 0)
    assert inning_state.bases.is_empty()
    assert (inning_state.away_batting_slot, inning_state.home_batting_slot) == (1, 1)
    assert inning_state.batting_side == TeamSide.AWAY
    assert [type(e) for e in inning_state.uncommitted_events] == [InningStateCreated]


# -- SETUP HELPERS --
def test_setup_helpers(inning_state: InningState) -> None:
    state = (
        inning_state.with_inning_half(7, False)
        .with_outs(2)
        .with_runner_on(Base.SECOND, "r2")
        .with_batting_slot(4)
    )
    assert (state.inning, state.is_top_half, state.outs) == (7, False, 2)
    assert state.bases == BasesState(second="r2")
    assert state.home_batting_slot == 4
    assert state.away_batting_slot == 1
    assert state.uncommitted_events == inning_state.uncommitted_events  # no events


@pytest.mark.parametrize("outs", [-1, 3, 1.0, True])
def test_with_outs_rejects_invalid_outs(inning_state: InningState, outs) -> None:
    with pytest.raises(DomainError):
        inning_state.with_outs(outs)


# -- OUTS --
@pytest.mark.parametrize(
    "result, expected_outs",
    [
        (AtBatResultType.STRIKEOUT, 1),
        (AtBatResultType.GROUND_OUT, 1),
        (AtBatResultType.FLY_OUT, 1),
        (AtBatResultType.SACRIFICE_FLY, 1),
        (AtBatResultType.FIELDERS_CHOICE, 1),
        (AtBatResultType.DOUBLE_PLAY, 2),
        (AtBatResultType.ERROR, 0),
        (AtBatResultType.WALK, 0),
    ],
)
def test_outs_recorded_on_play(inning_state: InningState, result: AtBatResultType, expected_outs: int) -> None:
    play = inning_state.record_at_bat("batter", 1, result, 1, quiet_context(), LINEUP_SIZE, movements=[])
    assert play.inning_state.outs == expected_outs
    assert not play.half_inning_completed


def test_third_out_ends_half_inning(inning_state: InningState) -> None:
    state = inning_state.with_outs(2).with_runner_on(Base.FIRST, "r1")
    play = strikeout(state)

    assert play.completed_half == CompletedHalfInning(inning=1, is_top_half=True)
    after = play.inning_state
    assert (after.inning, after.is_top_half, after.outs) == (1, False, 0)
    assert after.bases.is_empty()
    assert isinstance(after.uncommitted_events[-1], HalfInningEnded)


def test_bottom_half_ending_moves_to_next_inning(inning_state: InningState) -> None:
    state = inning_state.with_inning_half(3, False).with_outs(2)
    play = strikeout(state)
    assert play.completed_half == CompletedHalfInning(inning=3, is_top_half=False)
    assert (play.inning_state.inning, play.inning_state.is_top_half) == (4, True)


def test_double_play_with_one_out_ends_half_inning(inning_state: InningState) -> None:
    state = inning_state.with_outs(1).with_runner_on(Base.FIRST, "r1")
    play = state.record_at_bat(
        "batter", 1, AtBatResultType.DOUBLE_PLAY, 1, quiet_context(), LINEUP_SIZE, movements=[]
    )
    assert play.half_inning_completed
    assert play.inning_state.outs == 0


def test_triple_play_always_ends_half_inning(inning_state: InningState) -> None:
    play = inning_state.record_at_bat(
        "batter", 1, AtBatResultType.TRIPLE_PLAY, 1, quiet_context(), LINEUP_SIZE, movements=[]
    )
    assert play.completed_half == CompletedHalfInning(1, True)


def test_runner_outs_count_on_top_of_batter_out(inning_state: InningState) -> None:
    """Ground out where the runner on second is also thrown out: two outs."""
    state = inning_state.with_runner_on(Base.SECOND, "r2")
    play = state.record_at_bat(
        "batter",
        1,
        AtBatResultType.GROUND_OUT,
        1,
        quiet_context(),
        LINEUP_SIZE,
        movements=[RunnerMovement("r2", Base.SECOND, OUT)],
    )
    assert play.inning_state.outs == 2
    assert play.inning_state.bases.is_empty()


def test_double_play_override_is_not_counted_twice(inning_state: InningState) -> None:
    state = inning_state.with_runner_on(Base.FIRST, "r1")
    play = state.record_at_bat(
        "batter",
        1,
        AtBatResultType.DOUBLE_PLAY,
        1,
        quiet_context(),
        LINEUP_SIZE,
        movements=[RunnerMovement("r1", Base.FIRST, OUT)],
    )
    assert play.inning_state.outs == 2


# -- MOVEMENTS --
def test_hits_require_movements(inning_state: InningState) -> None:
    with pytest.raises(DomainError):
        inning_state.record_at_bat("batter", 1, AtBatResultType.SINGLE, 1, quiet_context(), LINEUP_SIZE)
    with pytest.raises(RunnerAdvancementError):
        inning_state.record_at_bat(
            "batter", 1, AtBatResultType.SINGLE, 1, quiet_context(), LINEUP_SIZE, movements=[]
        )


def test_movements_applied_lead_runner_first(inning_state: InningState) -> None:
    """Runner on first moving to second is fine, because the runner on second moved on first (whatever the list order)."""
    state = inning_state.with_runner_on(Base.FIRST, "r1").with_runner_on(Base.SECOND, "r2")
    movements = [
        RunnerMovement.batter("batter", Base.FIRST),
        RunnerMovement("r1", Base.FIRST, Base.SECOND),
        RunnerMovement("r2", Base.SECOND, HOME),
    ]
    play = state.record_at_bat(
        "batter", 1, AtBatResultType.SINGLE, 1, quiet_context(runs=1), LINEUP_SIZE, movements
    )
    assert play.inning_state.bases == BasesState(first="batter", second="r1")

    advanced = [e for e in play.inning_state.uncommitted_events if isinstance(e, RunnerAdvanced)]
    assert [e.runner_id for e in advanced] == ["r2", "r1", "batter"]
    assert all(e.reason == AdvanceReason.HIT for e in advanced)


def test_move_onto_occupied_base(inning_state: InningState) -> None:
    state = inning_state.with_runner_on(Base.SECOND, "r2")
    with pytest.raises(RunnerAdvancementError):
        state.record_at_bat(
            "batter",
            1,
            AtBatResultType.DOUBLE,
            1,
            quiet_context(),
            LINEUP_SIZE,
            movements=[RunnerMovement.batter("batter", Base.SECOND)],
        )


def test_movement_of_runner_not_on_base(inning_state: InningState) -> None:
    with pytest.raises(RunnerAdvancementError):
        inning_state.record_at_bat(
            "batter",
            1,
            AtBatResultType.SINGLE,
            1,
            quiet_context(),
            LINEUP_SIZE,
            movements=[RunnerMovement("ghost", Base.FIRST, Base.SECOND), RunnerMovement.batter("batter", Base.FIRST)],
        )


def test_batter_movement_for_someone_else(inning_state: InningState) -> None:
    with pytest.raises(RunnerAdvancementError):
        inning_state.record_at_bat(
            "batter",
            1,
            AtBatResultType.SINGLE,
            1,
            quiet_context(),
            LINEUP_SIZE,
            movements=[RunnerMovement.batter("someone else", Base.FIRST)],
        )


def test_runs_must_match_game_context(inning_state: InningState) -> None:
    with pytest.raises(DomainError):
        inning_state.record_at_bat(
            "batter",
            1,
            AtBatResultType.HOME_RUN,
            1,
            quiet_context(runs=0),
            LINEUP_SIZE,
            movements=[RunnerMovement.batter("batter", HOME)],
        )


def test_error_puts_batter_on_first(inning_state: InningState) -> None:
    play = inning_state.record_at_bat(
        "batter", 1, AtBatResultType.ERROR, 1, quiet_context(), LINEUP_SIZE, movements=[]
    )
    assert play.inning_state.bases == BasesState(first="batter")
    assert play.inning_state.outs == 0


def test_error_forces_runner_on_first_to_second(inning_state: InningState) -> None:
    state = inning_state.with_runner_on(Base.FIRST, "r1").with_runner_on(Base.THIRD, "r3")
    play = state.record_at_bat(
        "batter", 1, AtBatResultType.ERROR, 1, quiet_context(), LINEUP_SIZE, movements=[]
    )
    assert play.inning_state.bases == BasesState(first="batter", second="r1", third="r3")
    assert play.inning_state.outs == 0
    advanced = [e for e in play.inning_state.uncommitted_events if isinstance(e, RunnerAdvanced)]
    assert [(e.runner_id, e.from_base, e.to_base, e.reason) for e in advanced] == [
        ("r1", Base.FIRST, Base.SECOND, AdvanceReason.ERROR),
        ("batter", None, Base.FIRST, AdvanceReason.ERROR),
    ]


def test_error_with_bases_loaded_needs_the_forced_run(inning_state: InningState) -> None:
    state = inning_state.with_bases(BasesState(first="r1", second="r2", third="r3"))
    with pytest.raises(RunnerAdvancementError):
        state.record_at_bat("batter", 1, AtBatResultType.ERROR, 1, quiet_context(), LINEUP_SIZE, movements=[])


def test_error_with_movements_for_the_runners(inning_state: InningState) -> None:
    state = inning_state.with_runner_on(Base.FIRST, "r1")
    play = state.record_at_bat(
        "batter",
        1,
        AtBatResultType.ERROR,
        1,
        quiet_context(),
        LINEUP_SIZE,
        movements=[RunnerMovement("r1", Base.FIRST, Base.THIRD)],
    )
    assert play.inning_state.bases == BasesState(first="batter", third="r1")


def test_fielders_choice_forces_runner_on_first(inning_state: InningState) -> None:
    state = inning_state.with_runner_on(Base.FIRST, "r1")
    play = state.record_at_bat(
        "batter", 1, AtBatResultType.FIELDERS_CHOICE, 1, quiet_context(), LINEUP_SIZE, movements=[]
    )
    assert play.inning_state.bases == BasesState(first="batter")
    assert play.inning_state.outs == 1


def test_double_play_doubles_off_runner_on_first(inning_state: InningState) -> None:
    state = inning_state.with_runner_on(Base.FIRST, "r1").with_runner_on(Base.THIRD, "r3")
    play = state.record_at_bat(
        "batter", 1, AtBatResultType.DOUBLE_PLAY, 1, quiet_context(), LINEUP_SIZE, movements=[]
    )
    assert play.inning_state.bases == BasesState(third="r3")
    assert play.inning_state.outs == 2


def test_run_scored_events_carry_running_score(inning_state: InningState) -> None:
    state = inning_state.with_inning_half(2, False).with_runner_on(Base.THIRD, "r3")
    context = GameContext(home_score=2, away_score=5, total_innings=7, runs_about_to_score=2)
    play = state.record_at_bat(
        "batter",
        1,
        AtBatResultType.HOME_RUN,
        2,
        context,
        LINEUP_SIZE,
        movements=[RunnerMovement("r3", Base.THIRD, HOME), RunnerMovement.batter("batter", HOME)],
    )
    scored = [e for e in play.inning_state.uncommitted_events if isinstance(e, RunScored)]
    assert [(e.runner_id, e.scoring_side, e.batter_id) for e in scored] == [
        ("r3", "HOME", "batter"),
        ("batter", "HOME", "batter"),
    ]
    assert [(e.home_runs, e.away_runs) for e in scored] == [(3, 5), (4, 5)]
    assert play.inning_state.bases.is_empty()


def test_walk_off_flag(inning_state: InningState) -> None:
    state = inning_state.with_inning_half(7, False).with_runner_on(Base.THIRD, "r3")
    context = GameContext(home_score=3, away_score=3, total_innings=7, runs_about_to_score=1)
    play = state.record_at_bat(
        "batter",
        1,
        AtBatResultType.SACRIFICE_FLY,
        7,
        context,
        LINEUP_SIZE,
        movements=[RunnerMovement("r3", Base.THIRD, HOME)],
    )
    at_bat = next(e for e in play.inning_state.uncommitted_events if isinstance(e, AtBatCompleted))
    assert at_bat.is_walk_off
    assert at_bat.runs_scored == 1
    assert (at_bat.outs_before, at_bat.outs_after) == (0, 1)


def test_no_walk_off_flag_when_the_play_makes_the_third_out(inning_state: InningState) -> None:
    state = inning_state.with_inning_half(7, False).with_outs(2).with_runner_on(Base.THIRD, "r3")
    context = GameContext(home_score=3, away_score=3, total_innings=7, runs_about_to_score=1)
    play = state.record_at_bat(
        "batter",
        1,
        AtBatResultType.SACRIFICE_FLY,
        7,
        context,
        LINEUP_SIZE,
        movements=[RunnerMovement("r3", Base.THIRD, HOME)],
    )
    at_bat = next(e for e in play.inning_state.uncommitted_events if isinstance(e, AtBatCompleted))
    assert not at_bat.is_walk_off
    assert at_bat.outs_after == 3
    assert play.completed_half == CompletedHalfInning(inning=7, is_top_half=False)


# -- BATTING ORDER --
def test_batting_order_advances_per_side(inning_state: InningState) -> None:
    play = strikeout(inning_state)
    assert play.inning_state.away_batting_slot == 2
    assert play.inning_state.home_batting_slot == 1
    changed = play.inning_state.uncommitted_events[-1]
    assert isinstance(changed, CurrentBatterChanged)
    assert (changed.side, changed.previous_slot, changed.new_slot) == ("AWAY", 1, 2)


def test_batting_order_wraps_around(inning_state: InningState) -> None:
    state = inning_state.with_batting_slot(LINEUP_SIZE)
    play = strikeout(state)
    assert play.inning_state.away_batting_slot == 1


def test_batting_slot_persists_across_half_innings(inning_state: InningState) -> None:
    state = inning_state.with_outs(2).with_batting_slot(5)
    after_top = strikeout(state).inning_state
    assert after_top.batting_side == TeamSide.HOME
    assert after_top.current_batting_slot == 1
    assert after_top.away_batting_slot == 6


def test_batting_out_of_order(inning_state: InningState) -> None:
    with pytest.raises(BatterEligibilityError):
        inning_state.record_at_bat("batter", 2, AtBatResultType.STRIKEOUT, 1, quiet_context(), LINEUP_SIZE)


@pytest.mark.parametrize("slot", [0, LINEUP_SIZE + 1])
def test_batting_slot_outside_lineup(inning_state: InningState, slot: int) -> None:
    with pytest.raises(BatterEligibilityError):
        inning_state.record_at_bat("batter", slot, AtBatResultType.STRIKEOUT, 1, quiet_context(), LINEUP_SIZE)


def test_batter_already_on_base(inning_state: InningState) -> None:
    state = inning_state.with_runner_on(Base.FIRST, "batter")
    with pytest.raises(BatterEligibilityError):
        strikeout(state)


def test_at_bat_for_other_inning(inning_state: InningState) -> None:
    with pytest.raises(GameStateError):
        inning_state.record_at_bat("batter", 1, AtBatResultType.STRIKEOUT, 2, quiet_context(), LINEUP_SIZE)


# -- BETWEEN PLAYS --
def test_advance_runners_stolen_base(inning_state: InningState) -> None:
    state = inning_state.with_runner_on(Base.FIRST, "r1")
    play = state.advance_runners(None, [RunnerMovement("r1", Base.FIRST, Base.SECOND)])
    assert play.inning_state.bases == BasesState(second="r1")
    event = play.inning_state.uncommitted_events[-1]
    assert isinstance(event, RunnerAdvanced)
    assert event.reason == AdvanceReason.OVERRIDE


def test_caught_stealing_can_end_half_inning(inning_state: InningState) -> None:
    state = inning_state.with_outs(2).with_runner_on(Base.FIRST, "r1")
    play = state.advance_runners(None, [RunnerMovement("r1", Base.FIRST, OUT)])
    assert play.completed_half == CompletedHalfInning(1, True)


def test_advance_runners_cannot_move_batter(inning_state: InningState) -> None:
    with pytest.raises(RunnerAdvancementError):
        inning_state.advance_runners(AtBatResultType.WALK, [RunnerMovement.batter("batter", Base.FIRST)])


def test_end_half_inning(inning_state: InningState) -> None:
    play = inning_state.with_outs(1).with_runner_on(Base.THIRD, "r3").end_half_inning()
    assert play.completed_half == CompletedHalfInning(1, True)
    assert play.inning_state.outs == 0
    assert play.inning_state.bases.is_empty()


# -- EVENT SOURCING --
def test_rebuild_from_events(inning_state: InningState) -> None:
    state = inning_state
    state = state.record_at_bat(
        "a1", 1, AtBatResultType.WALK, 1, quiet_context(), LINEUP_SIZE,
        movements=[RunnerMovement.batter("a1", Base.FIRST)],
    ).inning_state
    state = state.record_at_bat(
        "a2", 2, AtBatResultType.DOUBLE, 1, quiet_context(), LINEUP_SIZE,
        movements=[RunnerMovement("a1", Base.FIRST, Base.THIRD), RunnerMovement.batter("a2", Base.SECOND)],
    ).inning_state
    state = state.record_at_bat("a3", 3, AtBatResultType.STRIKEOUT, 1, quiet_context(), LINEUP_SIZE).inning_state
    state = state.record_at_bat(
        "a4", 4, AtBatResultType.DOUBLE_PLAY, 1, quiet_context(), LINEUP_SIZE, movements=[]
    ).inning_state

    assert (state.inning, state.is_top_half, state.outs) == (1, False, 0)
    assert state.away_batting_slot == 5

    rebuilt = InningState.from_events(state.uncommitted_events)
    assert rebuilt == state.mark_events_as_committed()


def test_rebuild_requires_created_event() -> None:
    with pytest.raises(InvalidEventError):
        InningState.from_events([])
    with pytest.raises(InvalidEventError):
        InningState.from_events([HalfInningEnded(game_id=str(uuid4()), inning=1, was_top_half=True, outs=3)])


def test_game_context_validation() -> None:
    with pytest.raises(DomainError):
        GameContext(home_score=-1, away_score=0, total_innings=7)
    with pytest.raises(DomainError):
        GameContext(home_score=0, away_score=0, total_innings=0)


def test_inning_state_identity_is_kept(inning_state: InningState) -> None:
    play = strikeout(inning_state)
    assert play.inning_state.id == inning_state.id
    assert isinstance(play.inning_state.game_id, UUID)
    assert inning_state.outs == 0  # original untouched
