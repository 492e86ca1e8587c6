"""
The rules policy a game is played under.

Pure value object: built once per game, never changes afterwards. Invalid configurations are rejected on construction,
so any SoftballRules instance you can get hold of is a valid one.
"""

from dataclasses import asdict, dataclass, field, replace
from typing import Any, Callable, Optional, Self

from src.core.exceptions import RulesConfigurationError

MAX_INNINGS = 50
MAX_DIFFERENTIAL = 100
MAX_TIME_LIMIT_MINUTES = 720
MIN_PLAYERS_PER_TEAM = 9
MAX_PLAYERS_PER_TEAM = 50


def _require_int(name: str, value: Any, low: int, high: Optional[int] = None) -> None:
    """bool is a subclass of int, but `True` innings makes no sense, so reject it explicitly."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise RulesConfigurationError(f"{name} must be an integer, got {value!r}")
    if high is None and value < low:
        raise RulesConfigurationError(f"{name} must be {low} or more, got {value}")
    if high is not None and not low <= value <= high:
        raise RulesConfigurationError(f"{name} must be between {low} and {high}, got {value}")


def _require_bool(name: str, value: Any) -> None:
    if not isinstance(value, bool):
        raise RulesConfigurationError(f"{name} must be a boolean, got {value!r}")


@dataclass(frozen=True)
class MercyRuleTier:
    """Game ends once the lead is at least `differential` runs after `after_inning` innings have been completed."""

    differential: int
    after_inning: int

    def __post_init__(self) -> None:
        _require_int("Mercy rule differential", self.differential, 1, MAX_DIFFERENTIAL)
        _require_int("Mercy rule after inning", self.after_inning, 1, MAX_INNINGS)

    def applies(self, differential: int, inning: int) -> bool:
        return inning >= self.after_inning and differential >= self.differential


DEFAULT_MERCY_TIERS: tuple[MercyRuleTier, ...] = (MercyRuleTier(differential=15, after_inning=3),)


@dataclass(frozen=True)
class SoftballRules:
    """
    Configuration of a single game.
    ----

    * total_innings: regulation length of the game
    * mercy_rule_tiers: evaluated as a disjunction. Tier order only matters for validation (strictly increasing innings).
    * max_extra_innings: None means extra innings are unlimited
    * allow_tie_games: a game may end tied once the extra innings limit is reached. Requires a bounded max_extra_innings.

    max_players_per_team / time_limit_minutes / allow_re_entry are not used by the at-bat engine,
    but travel with the game for the lineup and clock handling.
    """

    total_innings: int = 7
    max_players_per_team: int = 25
    time_limit_minutes: Optional[int] = None
    allow_re_entry: bool = True
    mercy_rule_enabled: bool = True
    mercy_rule_tiers: tuple[MercyRuleTier, ...] = field(default=DEFAULT_MERCY_TIERS)
    max_extra_innings: Optional[int] = None
    allow_tie_games: bool = False

    def __post_init__(self) -> None:
        # accept any iterable of tiers, but store a tuple so the policy stays hashable
        if not isinstance(self.mercy_rule_tiers, tuple):
            object.__setattr__(self, "mercy_rule_tiers", tuple(self.mercy_rule_tiers))

        _require_int("Total innings", self.total_innings, 1, MAX_INNINGS)
        _require_int(
            "Max players per team",
            self.max_players_per_team,
            MIN_PLAYERS_PER_TEAM,
            MAX_PLAYERS_PER_TEAM,
        )
        if self.time_limit_minutes is not None:
            _require_int("Time limit minutes", self.time_limit_minutes, 1, MAX_TIME_LIMIT_MINUTES)
        _require_bool("allow_re_entry", self.allow_re_entry)
        _require_bool("mercy_rule_enabled", self.mercy_rule_enabled)
        _require_bool("allow_tie_games", self.allow_tie_games)
        if self.max_extra_innings is not None:
            _require_int("Max extra innings", self.max_extra_innings, 0, MAX_INNINGS)
        self._validate_tiers()

        if self.allow_tie_games and self.max_extra_innings is None:
            raise RulesConfigurationError(
                "Tie games require a bounded number of extra innings (max_extra_innings cannot be unlimited)."
            )

    def _validate_tiers(self) -> None:
        previous_inning = 0
        for tier in self.mercy_rule_tiers:
            if not isinstance(tier, MercyRuleTier):
                raise RulesConfigurationError(f"Invalid mercy rule tier: {tier!r}")
            if tier.after_inning <= previous_inning:
                raise RulesConfigurationError(
                    "Mercy rule tiers must be ordered by strictly increasing inning "
                    f"(inning {tier.after_inning} follows inning {previous_inning})."
                )
            previous_inning = tier.after_inning

    # --- RULE EVALUATION ---
    def is_mercy_rule(self, home_score: int, away_score: int, current_inning: int) -> bool:
        """True if any tier's differential is reached at or after that tier's inning."""
        _require_int("home_score", home_score, 0)
        _require_int("away_score", away_score, 0)
        _require_int("current_inning", current_inning, 1)

        if not self.mercy_rule_enabled or not self.mercy_rule_tiers:
            return False
        differential = abs(home_score - away_score)
        return any(tier.applies(differential, current_inning) for tier in self.mercy_rule_tiers)

    def is_game_complete(self, home_score: int, away_score: int, current_inning: int) -> bool:
        """Quick check on a scoreline alone. The coordinator runs the full half-inning aware version."""
        if self.is_mercy_rule(home_score, away_score, current_inning):
            return True
        if current_inning < self.total_innings:
            return False
        return home_score != away_score

    @property
    def has_unlimited_extra_innings(self) -> bool:
        return self.max_extra_innings is None

    # --- CONVERSIONS ---
    def to_dict(self) -> dict[str, Any]:
        """Plain data (used as payload of the GameCreated event)."""
        data = asdict(self)
        data["mercy_rule_tiers"] = [asdict(tier) for tier in self.mercy_rule_tiers]
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        config = dict(data)
        tiers = config.pop("mercy_rule_tiers", None)
        if tiers is not None:
            config["mercy_rule_tiers"] = tuple(MercyRuleTier(**tier) for tier in tiers)
        try:
            return cls(**config)
        except TypeError as e:
            raise RulesConfigurationError(f"Unknown rules configuration: {e}") from e

    def with_customizations(self, **changes: Any) -> Self:
        """Copy of these rules with some fields changed (validated again)."""
        try:
            return replace(self, **changes)
        except TypeError as e:
            raise RulesConfigurationError(f"Unknown rules configuration: {e}") from e

    def __str__(self) -> str:
        time_limit = f"{self.time_limit_minutes}min" if self.time_limit_minutes else "unlimited"
        if self.mercy_rule_enabled and self.mercy_rule_tiers:
            mercy = ", ".join(
                f"{tier.differential} runs after inning {tier.after_inning}"
                for tier in self.mercy_rule_tiers
            )
        else:
            mercy = "disabled"
        extra = "unlimited" if self.max_extra_innings is None else str(self.max_extra_innings)
        return (
            f"SoftballRules(total_innings={self.total_innings}, time_limit={time_limit}, "
            f"mercy_rule={mercy}, extra_innings={extra}, allow_tie_games={self.allow_tie_games})"
        )

    # --- PRESETS ---
    @classmethod
    def recreation_league(cls) -> Self:
        return cls(
            total_innings=7,
            max_players_per_team=25,
            allow_re_entry=True,
            mercy_rule_tiers=(MercyRuleTier(15, 3),),
        )

    @classmethod
    def tournament(cls) -> Self:
        return cls(
            total_innings=7,
            max_players_per_team=20,
            time_limit_minutes=90,
            allow_re_entry=False,
            mercy_rule_tiers=(MercyRuleTier(10, 4),),
            max_extra_innings=2,
            allow_tie_games=True,
        )

    @classmethod
    def youth_league(cls) -> Self:
        return cls(
            total_innings=5,
            max_players_per_team=15,
            time_limit_minutes=75,
            mercy_rule_tiers=(MercyRuleTier(12, 2),),
            max_extra_innings=1,
            allow_tie_games=True,
        )

    @classmethod
    def asa_usa_softball(cls) -> Self:
        return cls(
            total_innings=7,
            max_players_per_team=20,
            allow_re_entry=False,
            mercy_rule_tiers=(MercyRuleTier(10, 5),),
        )

    @classmethod
    def usssa(cls) -> Self:
        return cls(total_innings=7, max_players_per_team=25, mercy_rule_tiers=(MercyRuleTier(15, 3),))

    @classmethod
    def fast_pitch(cls) -> Self:
        return cls(
            total_innings=7,
            max_players_per_team=18,
            allow_re_entry=False,
            mercy_rule_tiers=(MercyRuleTier(8, 5),),
        )

    @classmethod
    def slow_pitch(cls) -> Self:
        return cls(total_innings=7, max_players_per_team=25, mercy_rule_tiers=(MercyRuleTier(15, 3),))

    @classmethod
    def two_tier_mercy_rule(cls) -> Self:
        return cls(
            total_innings=7,
            time_limit_minutes=90,
            mercy_rule_tiers=(MercyRuleTier(10, 4), MercyRuleTier(7, 5)),
        )

    @classmethod
    def three_tier_mercy_rule(cls) -> Self:
        return cls(
            total_innings=7,
            max_players_per_team=20,
            time_limit_minutes=75,
            allow_re_entry=False,
            mercy_rule_tiers=(MercyRuleTier(20, 2), MercyRuleTier(12, 4), MercyRuleTier(8, 6)),
        )

    @classmethod
    def no_mercy_rule(cls) -> Self:
        return cls(mercy_rule_enabled=False, mercy_rule_tiers=())

    @classmethod
    def from_preset(cls, name: str) -> Self:
        """Look up one of the presets above by name, e.g. 'tournament'."""
        preset = RULES_PRESETS.get(name.strip().lower())
        if preset is None:
            raise RulesConfigurationError(
                f"Unknown rules preset: {name!r}. Pick one from {', '.join(sorted(RULES_PRESETS))}"
            )
        return preset()


RULES_PRESETS: dict[str, Callable[[], SoftballRules]] = {
    "recreation_league": SoftballRules.recreation_league,
    "tournament": SoftballRules.tournament,
    "youth_league": SoftballRules.youth_league,
    "asa_usa_softball": SoftballRules.asa_usa_softball,
    "usssa": SoftballRules.usssa,
    "fast_pitch": SoftballRules.fast_pitch,
    "slow_pitch": SoftballRules.slow_pitch,
    "two_tier_mercy_rule": SoftballRules.two_tier_mercy_rule,
    "three_tier_mercy_rule": SoftballRules.three_tier_mercy_rule,
    "no_mercy_rule": SoftballRules.no_mercy_rule,
}
