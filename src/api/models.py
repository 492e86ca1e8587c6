"""Requests and Response models"""

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, field_validator

from src.core.config import get_rules_preset
from src.core.exceptions import InvalidRequestError
from src.core.shared_types import HOME, OUT, AtBatResultType, Base, CompletionReason, GameStatus
from src.softball.bases import RunnerMovement
from src.softball.lineup import MAX_BATTING_SLOTS
from src.softball.rules import RULES_PRESETS, MercyRuleTier, SoftballRules

PlayerId = str
BaseName = str


# --- REQUEST MODELS ---
class MercyRuleTierConfig(BaseModel):
    differential: int
    after_inning: int


class RulesConfig(BaseModel):
    """A preset (default from the environment) with optional field-by-field customizations on top."""

    preset: Optional[str] = None
    total_innings: Optional[int] = None
    max_players_per_team: Optional[int] = None
    time_limit_minutes: Optional[int] = None
    allow_re_entry: Optional[bool] = None
    mercy_rule_enabled: Optional[bool] = None
    mercy_rule_tiers: Optional[list[MercyRuleTierConfig]] = None
    max_extra_innings: Optional[int] = None
    allow_tie_games: Optional[bool] = None

    @field_validator("preset")
    @classmethod
    def validate_preset(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        if value.strip().lower() not in RULES_PRESETS:
            raise InvalidRequestError(
                f"Unknown rules preset: {value!r}. Pick one from {', '.join(sorted(RULES_PRESETS))}"
            )
        return value.strip().lower()

    def to_rules(self) -> SoftballRules:
        """
        Only the fields that were actually sent override the preset.
        (so an explicit `max_extra_innings: null` means unlimited, leaving it out keeps the preset value)
        """
        base_rules = SoftballRules.from_preset(self.preset or get_rules_preset())
        changes = self.model_dump(exclude_unset=True, exclude={"preset", "mercy_rule_tiers"})
        if "mercy_rule_tiers" in self.model_fields_set:
            changes["mercy_rule_tiers"] = tuple(
                MercyRuleTier(tier.differential, tier.after_inning)
                for tier in self.mercy_rule_tiers or []
            )
        return base_rules.with_customizations(**changes)


class LineupEntry(BaseModel):
    player_id: PlayerId
    player_name: str
    batting_slot: int

    @field_validator("batting_slot")
    @classmethod
    def validate_batting_slot(cls, value: int) -> int:
        if not 1 <= value <= MAX_BATTING_SLOTS:
            raise InvalidRequestError(
                f"Batting slot must be between 1 and {MAX_BATTING_SLOTS}, got {value}."
            )
        return value


class StartGameRequest(BaseModel):
    home_team_name: str
    away_team_name: str
    home_lineup: list[LineupEntry]
    away_lineup: list[LineupEntry]
    rules: Optional[RulesConfig] = None

    @field_validator(*["home_lineup", "away_lineup"])
    @classmethod
    def validate_lineup(cls, value: list[LineupEntry]) -> list[LineupEntry]:
        if not value:
            raise InvalidRequestError("A lineup needs at least one player.")

        slots = [entry.batting_slot for entry in value]
        if len(slots) != len(set(slots)):
            raise InvalidRequestError("Every batting slot can only be filled once.")
        if sorted(slots) != list(range(1, len(slots) + 1)):
            raise InvalidRequestError("Batting slots must be numbered 1, 2, 3, ... without gaps.")
        return value


class RunnerAdvanceRequest(BaseModel):
    runner_id: PlayerId
    from_base: Optional[Base] = None  # None: the batter
    to_base: BaseName

    @field_validator("to_base")
    @classmethod
    def validate_to_base(cls, value: str) -> str:
        value = value.strip().upper()
        if value not in (*Base.__members__.values(), HOME, OUT):
            raise InvalidRequestError(
                f"Cannot interpret to_base: {value!r} as FIRST, SECOND, THIRD, HOME or OUT."
            )
        return value

    def to_movement(self) -> RunnerMovement:
        return RunnerMovement(self.runner_id, self.from_base, self.to_base)  # type: ignore[arg-type]


class RecordAtBatRequest(BaseModel):
    game_id: UUID
    batter_id: PlayerId
    result: AtBatResultType
    runner_advances: Optional[list[RunnerAdvanceRequest]] = None


# --- RESPONSE MODELS ---
class GameStateResponse(BaseModel):
    game_id: UUID
    home_team_name: str
    away_team_name: str
    status: GameStatus
    home_score: int
    away_score: int
    current_inning: int
    is_top_half: bool
    outs: int
    bases: dict[BaseName, PlayerId]
    current_batter_id: Optional[PlayerId]
    completion_reason: Optional[CompletionReason]
    winner: Optional[str]


class InningTransitionResponse(BaseModel):
    new_inning: int
    new_top_half: bool


class AtBatResponse(BaseModel):
    success: bool
    game_id: UUID
    runs_scored: int = 0
    rbis: int = 0
    inning_complete: bool = False
    inning_transition: Optional[InningTransitionResponse] = None
    game_complete: bool = False
    completion_reason: Optional[CompletionReason] = None
    error_kind: Optional[str] = None
    error_message: Optional[str] = None
    game_state: Optional[GameStateResponse] = None
