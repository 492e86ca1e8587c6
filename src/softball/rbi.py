"""
Runs batted in: how many of the runs on a play are credited to the batter.

Depends only on the result and the situation before the pitch (who was on base, how many outs).
"""

from typing import Callable

from src.core.exceptions import DomainError
from src.core.shared_types import OUTS_ON_PLAY, AtBatResultType, Base
from src.softball.bases import BasesState

MAX_OUTS_BEFORE_PLAY = 2


def _home_run_rbis(bases: BasesState, outs: int) -> int:
    # batter drives in themselves too
    return 1 + len(bases.occupied_bases())


def _single_rbis(bases: BasesState, outs: int) -> int:
    return len(bases.runners_in_scoring_position())


def _extra_base_hit_rbis(bases: BasesState, outs: int) -> int:
    return len(bases.occupied_bases())


def _walk_rbis(bases: BasesState, outs: int) -> int:
    """Only a bases-loaded walk forces a run in."""
    return 1 if bases.is_loaded() else 0


def _productive_out_rbis(bases: BasesState, outs: int) -> int:
    """Runner on third scores on the out, as long as it is not the third out."""
    return 1 if bases.is_occupied(Base.THIRD) and outs < 2 else 0


def _multiple_out_rbis(outs_on_play: int) -> Callable[[BasesState, int], int]:
    def rbis(bases: BasesState, outs: int) -> int:
        if outs + outs_on_play >= 3:
            return 0
        return _productive_out_rbis(bases, outs)

    return rbis


RbiFn = Callable[[BasesState, int], int]
RBI_RULES: dict[AtBatResultType, RbiFn] = {
    AtBatResultType.HOME_RUN: _home_run_rbis,
    AtBatResultType.SINGLE: _single_rbis,
    AtBatResultType.DOUBLE: _extra_base_hit_rbis,
    AtBatResultType.TRIPLE: _extra_base_hit_rbis,
    AtBatResultType.WALK: _walk_rbis,
    AtBatResultType.SACRIFICE_FLY: _productive_out_rbis,
    AtBatResultType.GROUND_OUT: _productive_out_rbis,
    AtBatResultType.FLY_OUT: _productive_out_rbis,
    AtBatResultType.FIELDERS_CHOICE: _productive_out_rbis,
    AtBatResultType.DOUBLE_PLAY: _multiple_out_rbis(OUTS_ON_PLAY[AtBatResultType.DOUBLE_PLAY]),
    AtBatResultType.TRIPLE_PLAY: _multiple_out_rbis(OUTS_ON_PLAY[AtBatResultType.TRIPLE_PLAY]),
}


def calculate_rbis(result: AtBatResultType, bases_before: BasesState, outs_before: int) -> int:
    """RBIs credited to the batter. Strikeouts and errors never drive in a run."""
    if isinstance(outs_before, bool) or not isinstance(outs_before, int):
        raise DomainError(f"Outs must be an integer, got {outs_before!r}")
    if not 0 <= outs_before <= MAX_OUTS_BEFORE_PLAY:
        raise DomainError(f"Outs must be between 0 and {MAX_OUTS_BEFORE_PLAY}, got {outs_before}")

    rule = RBI_RULES.get(AtBatResultType(result))
    if rule is None:
        return 0
    return rule(bases_before, outs_before)
