"""
Automatic runner movement per at-bat result, and validation of manually entered movements

Key idea: strategy pattern again, one movement rule per result type.
Results without a rule (outs, errors, fielder's choice, ...) move nobody automatically:
the scorer enters those movements by hand.
"""

from typing import Callable, Sequence

from src.core.exceptions import RunnerAdvancementError
from src.core.shared_types import BASE_ORDER, HOME, AtBatResultType, Base, PlayerId
from src.softball.bases import BasesState, RunnerMovement


# --- MOVEMENT RULES ---
def runners_score(bases: BasesState) -> list[RunnerMovement]:
    """Every runner on base comes home (lead runner first)."""
    return [
        RunnerMovement(bases.runner(base), base, HOME)  # type: ignore[arg-type]
        for base in reversed(bases.occupied_bases())
    ]


def home_run_movements(bases: BasesState, batter_id: PlayerId) -> list[RunnerMovement]:
    return runners_score(bases) + [RunnerMovement.batter(batter_id, HOME)]


def triple_movements(bases: BasesState, batter_id: PlayerId) -> list[RunnerMovement]:
    return runners_score(bases) + [RunnerMovement.batter(batter_id, Base.THIRD)]


def double_movements(bases: BasesState, batter_id: PlayerId) -> list[RunnerMovement]:
    return runners_score(bases) + [RunnerMovement.batter(batter_id, Base.SECOND)]


def single_movements(bases: BasesState, batter_id: PlayerId) -> list[RunnerMovement]:
    """Runners in scoring position come home, the runner on first takes second."""
    movements = [
        RunnerMovement(bases.runner(base), base, HOME)  # type: ignore[arg-type]
        for base in (Base.THIRD, Base.SECOND)
        if bases.is_occupied(base)
    ]
    if bases.is_occupied(Base.FIRST):
        movements.append(RunnerMovement(bases.runner(Base.FIRST), Base.FIRST, Base.SECOND))  # type: ignore[arg-type]
    return movements + [RunnerMovement.batter(batter_id, Base.FIRST)]


def walk_movements(bases: BasesState, batter_id: PlayerId) -> list[RunnerMovement]:
    """
    Force advancement
    ---
    Only the runners forced by the batter move: walk the chain of occupied bases starting at first,
    stop at the first empty base. A runner forced off third scores.
    """
    forced: list[RunnerMovement] = []
    next_stops: tuple[Base | str, ...] = BASE_ORDER[1:] + (HOME,)
    for base, next_stop in zip(BASE_ORDER, next_stops):
        if not bases.is_occupied(base):
            break
        forced.append(RunnerMovement(bases.runner(base), base, next_stop))  # type: ignore[arg-type]
    # lead runner first
    return list(reversed(forced)) + [RunnerMovement.batter(batter_id, Base.FIRST)]


def sacrifice_fly_movements(bases: BasesState, batter_id: PlayerId) -> list[RunnerMovement]:
    """Runner on third tags up and scores, the batter is out on the catch."""
    if not bases.is_occupied(Base.THIRD):
        return []
    return [RunnerMovement(bases.runner(Base.THIRD), Base.THIRD, HOME)]  # type: ignore[arg-type]


# -- STRATEGY PATTERN: AUTOMATIC MOVEMENT ---
AutomaticMovementFn = Callable[[BasesState, PlayerId], list[RunnerMovement]]
MOVEMENT_RULES: dict[AtBatResultType, AutomaticMovementFn] = {
    AtBatResultType.HOME_RUN: home_run_movements,
    AtBatResultType.TRIPLE: triple_movements,
    AtBatResultType.DOUBLE: double_movements,
    AtBatResultType.SINGLE: single_movements,
    AtBatResultType.WALK: walk_movements,
    AtBatResultType.SACRIFICE_FLY: sacrifice_fly_movements,
}


def determine_runner_advancement(
    result: AtBatResultType, bases: BasesState, batter_id: PlayerId
) -> list[RunnerMovement]:
    """Standard movement for the result, given who is on base before the play."""
    rule = MOVEMENT_RULES.get(AtBatResultType(result))
    if rule is None:
        return []
    return rule(bases, batter_id)


# --- MANUAL OVERRIDES ---
def validate_runner_overrides(
    overrides: Sequence[RunnerMovement], bases: BasesState, batter_id: PlayerId
) -> None:
    """
    Overrides are taken verbatim, but they have to describe the actual situation:
    * a movement from a base names the runner that is on that base
    * a movement from home plate is the batter
    * nobody moves twice
    """
    seen: set[PlayerId] = set()
    for override in overrides:
        if override.runner_id in seen:
            raise RunnerAdvancementError(
                f"Runner {override.runner_id} has more than one movement",
                runner_id=override.runner_id,
            )
        seen.add(override.runner_id)

        if override.is_batter:
            if override.runner_id != batter_id:
                raise RunnerAdvancementError(
                    f"Movement from home plate must be the batter ({batter_id}), got {override.runner_id}",
                    runner_id=override.runner_id,
                    to_base=override.to_base,
                )
            continue

        actual = bases.runner(override.from_base)  # type: ignore[arg-type]
        if actual != override.runner_id:
            raise RunnerAdvancementError(
                f"Runner {override.runner_id} is not on {override.from_base} (found: {actual or 'nobody'})",
                runner_id=override.runner_id,
                from_base=override.from_base,
                to_base=override.to_base,
            )
