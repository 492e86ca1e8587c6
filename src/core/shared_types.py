"""
Type definitions used across layers
"""

from enum import StrEnum
from typing import Final, Literal

# Player ids come from the roster layer and are opaque strings to the domain
PlayerId = str

# --- A movement can end on one of the bases, at home plate (a run) or with the runner being put out
HOME: Final = "HOME"
OUT: Final = "OUT"


class GameStatus(StrEnum):
    NOT_STARTED = "NOT_STARTED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"


class AtBatResultType(StrEnum):
    SINGLE = "SINGLE"
    DOUBLE = "DOUBLE"
    TRIPLE = "TRIPLE"
    HOME_RUN = "HOME_RUN"
    WALK = "WALK"
    ERROR = "ERROR"
    FIELDERS_CHOICE = "FIELDERS_CHOICE"
    STRIKEOUT = "STRIKEOUT"
    GROUND_OUT = "GROUND_OUT"
    FLY_OUT = "FLY_OUT"
    SACRIFICE_FLY = "SACRIFICE_FLY"
    DOUBLE_PLAY = "DOUBLE_PLAY"
    TRIPLE_PLAY = "TRIPLE_PLAY"


HIT_RESULTS: frozenset[AtBatResultType] = frozenset(
    {
        AtBatResultType.SINGLE,
        AtBatResultType.DOUBLE,
        AtBatResultType.TRIPLE,
        AtBatResultType.HOME_RUN,
    }
)

# How many outs the play itself records (runners put out by a movement come on top of this)
OUTS_ON_PLAY: dict[AtBatResultType, int] = {
    AtBatResultType.STRIKEOUT: 1,
    AtBatResultType.GROUND_OUT: 1,
    AtBatResultType.FLY_OUT: 1,
    AtBatResultType.SACRIFICE_FLY: 1,
    AtBatResultType.FIELDERS_CHOICE: 1,
    AtBatResultType.DOUBLE_PLAY: 2,
    AtBatResultType.TRIPLE_PLAY: 3,
}


class Base(StrEnum):
    FIRST = "FIRST"
    SECOND = "SECOND"
    THIRD = "THIRD"


BASE_ORDER: tuple[Base, ...] = (Base.FIRST, Base.SECOND, Base.THIRD)

Destination = Base | Literal["HOME", "OUT"]


class TeamSide(StrEnum):
    HOME = "HOME"
    AWAY = "AWAY"


class CompletionReason(StrEnum):
    REGULATION = "REGULATION"
    WALKOFF = "WALKOFF"
    MERCY_RULE = "MERCY_RULE"


class AggregateType(StrEnum):
    GAME = "Game"
    INNING_STATE = "InningState"
    TEAM_LINEUP = "TeamLineup"


class AdvanceReason(StrEnum):
    HIT = "HIT"
    WALK = "WALK"
    FORCE = "FORCE"
    SACRIFICE = "SACRIFICE"
    ERROR = "ERROR"
    FIELDERS_CHOICE = "FIELDERS_CHOICE"
    OVERRIDE = "OVERRIDE"
