"""
Value types for the bases and the runners moving around them.

(placed in their own module as the inning aggregate, the advancement rules and the coordinator all need them)
"""

from dataclasses import dataclass, replace
from typing import Iterable, Optional, Self

from src.core.exceptions import RunnerAdvancementError
from src.core.shared_types import BASE_ORDER, HOME, OUT, Base, Destination, PlayerId

# Distance from home plate. Used to reject runners moving backwards around the bases.
_BASE_NUMBER: dict[str, int] = {Base.FIRST: 1, Base.SECOND: 2, Base.THIRD: 3, HOME: 4}


def _as_destination(value: str) -> Destination:
    if value in (HOME, OUT):
        return value  # type: ignore[return-value]
    if value in Base.__members__.values():
        return Base(value)
    raise RunnerAdvancementError(f"Unknown destination: {value!r}", to_base=str(value))


@dataclass(frozen=True)
class RunnerMovement:
    """
    One runner going from somewhere to somewhere.

    * from_base None: the batter, coming from home plate
    * to_base HOME: the runner scores
    * to_base OUT: the runner is put out on the play
    """

    runner_id: PlayerId
    from_base: Optional[Base]
    to_base: Destination

    def __post_init__(self) -> None:
        if not self.runner_id:
            raise RunnerAdvancementError("Runner id cannot be empty")
        if self.from_base is not None:
            if self.from_base not in Base.__members__.values():
                raise RunnerAdvancementError(
                    f"Unknown base: {self.from_base!r}", runner_id=self.runner_id
                )
            object.__setattr__(self, "from_base", Base(self.from_base))
        object.__setattr__(self, "to_base", _as_destination(self.to_base))

        if self.is_backwards():
            raise RunnerAdvancementError(
                f"Runner {self.runner_id} cannot move backwards from {self.from_base} to {self.to_base}",
                runner_id=self.runner_id,
                from_base=self.from_base,
                to_base=self.to_base,
            )

    @classmethod
    def batter(cls, runner_id: PlayerId, to_base: Destination) -> Self:
        return cls(runner_id=runner_id, from_base=None, to_base=to_base)

    @property
    def is_batter(self) -> bool:
        return self.from_base is None

    @property
    def scores(self) -> bool:
        return self.to_base == HOME

    @property
    def is_out(self) -> bool:
        return self.to_base == OUT

    def is_backwards(self) -> bool:
        if self.is_out:
            return False
        start = 0 if self.from_base is None else _BASE_NUMBER[self.from_base]
        return _BASE_NUMBER[self.to_base] < start


def runs_scored(movements: Iterable[RunnerMovement]) -> int:
    """Every movement ending at home plate is a run."""
    return sum(1 for movement in movements if movement.scores)


@dataclass(frozen=True)
class BasesState:
    """Who is standing on which base. None means the base is empty."""

    first: Optional[PlayerId] = None
    second: Optional[PlayerId] = None
    third: Optional[PlayerId] = None

    def __post_init__(self) -> None:
        occupants = [runner for runner in (self.first, self.second, self.third) if runner]
        if len(occupants) != len(set(occupants)):
            raise RunnerAdvancementError("A runner cannot occupy more than one base")

    @classmethod
    def empty(cls) -> Self:
        return cls()

    @classmethod
    def from_runners(cls, runners: dict[Base, PlayerId]) -> Self:
        """Convenience method: BasesState.from_runners({Base.FIRST: "p1", Base.THIRD: "p3"})"""
        return cls(
            first=runners.get(Base.FIRST),
            second=runners.get(Base.SECOND),
            third=runners.get(Base.THIRD),
        )

    # --- QUERIES ---
    def runner(self, base: Base) -> Optional[PlayerId]:
        return getattr(self, base.lower())

    def is_occupied(self, base: Base) -> bool:
        return self.runner(base) is not None

    def occupied_bases(self) -> list[Base]:
        return [base for base in BASE_ORDER if self.is_occupied(base)]

    def runners(self) -> dict[Base, PlayerId]:
        return {base: self.runner(base) for base in self.occupied_bases()}  # type: ignore[misc]

    def runners_in_scoring_position(self) -> list[PlayerId]:
        return [
            self.runners()[base]
            for base in (Base.SECOND, Base.THIRD)
            if self.is_occupied(base)
        ]

    def base_of(self, runner_id: PlayerId) -> Optional[Base]:
        return next((base for base, runner in self.runners().items() if runner == runner_id), None)

    def is_empty(self) -> bool:
        return not self.occupied_bases()

    def is_loaded(self) -> bool:
        return len(self.occupied_bases()) == len(BASE_ORDER)

    def is_force_at(self, base: Base) -> bool:
        """A runner is forced to `base` when every base behind it is occupied (the batter forces first)."""
        index = BASE_ORDER.index(base)
        return all(self.is_occupied(behind) for behind in BASE_ORDER[:index])

    # --- UPDATES (all return a new BasesState) ---
    def with_runner_on(self, base: Base, runner_id: PlayerId) -> Self:
        current_base = self.base_of(runner_id)
        if current_base is not None and current_base != base:
            raise RunnerAdvancementError(
                f"Runner {runner_id} is already on {current_base}",
                runner_id=runner_id,
                from_base=current_base,
                to_base=base,
            )
        return replace(self, **{base.lower(): runner_id})

    def without_runner(self, base: Base) -> Self:
        return replace(self, **{base.lower(): None})

    def with_runner_advanced(self, from_base: Base, to_base: Destination) -> Self:
        """Move the runner on `from_base`. Going HOME or OUT simply takes them off the bases."""
        runner_id = self.runner(from_base)
        if runner_id is None:
            raise RunnerAdvancementError(f"No runner on {from_base}", from_base=from_base)
        vacated = self.without_runner(from_base)
        if to_base in (HOME, OUT):
            return vacated
        return vacated.with_runner_on(Base(to_base), runner_id)

    def with_bases_cleared(self) -> Self:
        return type(self).empty()
