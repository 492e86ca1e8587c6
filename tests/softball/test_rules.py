"""Unit tests for src/softball/rules.py"""

from typing import Any

import pytest

from src.core.exceptions import RulesConfigurationError
from src.softball.rules import RULES_PRESETS, MercyRuleTier, SoftballRules


@pytest.fixture
def two_tier_rules() -> SoftballRules:
    return SoftballRules.two_tier_mercy_rule()


# --- CONSTRUCTION ---
def test_defaults() -> None:
    rules = SoftballRules()
    assert rules.total_innings == 7
    assert rules.max_players_per_team == 25
    assert rules.time_limit_minutes is None
    assert rules.allow_re_entry is True
    assert rules.mercy_rule_enabled is True
    assert rules.mercy_rule_tiers == (MercyRuleTier(15, 3),)
    assert rules.max_extra_innings is None
    assert rules.has_unlimited_extra_innings
    assert rules.allow_tie_games is False


def test_value_equality() -> None:
    assert SoftballRules(total_innings=5) == SoftballRules(total_innings=5)
    assert SoftballRules(total_innings=5) != SoftballRules(total_innings=6)


def test_tiers_given_as_list_are_stored_as_tuple() -> None:
    rules = SoftballRules(mercy_rule_tiers=[MercyRuleTier(10, 4), MercyRuleTier(7, 5)])  # type: ignore[arg-type]
    assert rules.mercy_rule_tiers == (MercyRuleTier(10, 4), MercyRuleTier(7, 5))
    assert hash(rules) == hash(SoftballRules(mercy_rule_tiers=(MercyRuleTier(10, 4), MercyRuleTier(7, 5))))


@pytest.mark.parametrize(
    "invalid_config",
    [
        {"total_innings": 0},
        {"total_innings": 51},
        {"total_innings": 7.5},
        {"total_innings": True},
        {"total_innings": "7"},
        {"max_players_per_team": 8},
        {"max_players_per_team": 51},
        {"time_limit_minutes": 0},
        {"time_limit_minutes": 721},
        {"allow_re_entry": "yes"},
        {"mercy_rule_enabled": 1},
        {"max_extra_innings": -1},
        {"max_extra_innings": 2.0},
        {"allow_tie_games": None},
        {"mercy_rule_tiers": ("15 after 3",)},
    ],
)
def test_invalid_configuration_is_rejected(invalid_config: dict[str, Any]) -> None:
    with pytest.raises(RulesConfigurationError):
        SoftballRules(**invalid_config)


@pytest.mark.parametrize(
    "differential, after_inning",
    [(0, 3), (101, 3), (10, 0), (10, 51), (True, 3), (10, 2.5)],
)
def test_invalid_mercy_tier(differential: Any, after_inning: Any) -> None:
    with pytest.raises(RulesConfigurationError):
        MercyRuleTier(differential, after_inning)


@pytest.mark.parametrize(
    "other_fields",
    [
        {},
        {"total_innings": 5},
        {"mercy_rule_enabled": False},
        {"max_extra_innings": 2, "allow_tie_games": True},
        {"time_limit_minutes": 60, "allow_re_entry": False},
    ],
)
@pytest.mark.parametrize(
    "bad_tiers",
    [
        (MercyRuleTier(7, 5), MercyRuleTier(10, 4)),  # out of order
        (MercyRuleTier(10, 4), MercyRuleTier(7, 4)),  # duplicate inning
        (MercyRuleTier(20, 2), MercyRuleTier(8, 6), MercyRuleTier(12, 4)),
    ],
)
def test_misordered_tiers_always_fail(
    other_fields: dict[str, Any], bad_tiers: tuple[MercyRuleTier, ...]
) -> None:
    """Tier order is checked whatever the rest of the configuration looks like."""
    with pytest.raises(RulesConfigurationError):
        SoftballRules(mercy_rule_tiers=bad_tiers, **other_fields)


def test_tie_games_need_bounded_extra_innings() -> None:
    with pytest.raises(RulesConfigurationError):
        SoftballRules(allow_tie_games=True, max_extra_innings=None)

    rules = SoftballRules(allow_tie_games=True, max_extra_innings=0)
    assert rules.allow_tie_games


# --- MERCY RULE ---
@pytest.mark.parametrize(
    "home, away, inning, expected",
    [
        (10, 0, 4, True),
        (9, 0, 4, False),
        (0, 10, 4, True),  # differential in either direction
        (17, 0, 3, False),  # no tier before the 4th inning
        (7, 0, 5, True),
        (6, 0, 5, False),
        (7, 0, 4, False),
        (7, 0, 9, True),  # tiers keep applying after their inning
    ],
)
def test_two_tier_mercy_rule(
    two_tier_rules: SoftballRules, home: int, away: int, inning: int, expected: bool
) -> None:
    assert two_tier_rules.is_mercy_rule(home, away, inning) is expected


def test_three_tier_mercy_rule() -> None:
    rules = SoftballRules.three_tier_mercy_rule()
    assert rules.is_mercy_rule(20, 0, 2)
    assert not rules.is_mercy_rule(19, 0, 3)
    assert rules.is_mercy_rule(12, 0, 4)
    assert not rules.is_mercy_rule(11, 0, 5)
    assert rules.is_mercy_rule(8, 0, 6)


def test_mercy_rule_disabled() -> None:
    rules = SoftballRules(mercy_rule_enabled=False)
    assert not rules.is_mercy_rule(50, 0, 7)


def test_mercy_rule_enabled_without_tiers_never_fires() -> None:
    rules = SoftballRules(mercy_rule_enabled=True, mercy_rule_tiers=())
    assert not rules.is_mercy_rule(50, 0, 7)


@pytest.mark.parametrize(
    "home, away, inning",
    [(-1, 0, 3), (0, -1, 3), (5, 0, 0), (5.0, 0, 3), (5, 0, True)],
)
def test_mercy_rule_rejects_invalid_input(home: Any, away: Any, inning: Any) -> None:
    with pytest.raises(RulesConfigurationError):
        SoftballRules().is_mercy_rule(home, away, inning)


# --- QUICK COMPLETION CHECK ---
def test_is_game_complete() -> None:
    rules = SoftballRules()
    assert not rules.is_game_complete(5, 3, 6)
    assert rules.is_game_complete(5, 3, 7)
    assert not rules.is_game_complete(4, 4, 7)
    assert rules.is_game_complete(18, 2, 3)  # mercy


# --- CONVERSIONS ---
def test_dict_round_trip() -> None:
    rules = SoftballRules.tournament()
    data = rules.to_dict()
    assert data["mercy_rule_tiers"] == [{"differential": 10, "after_inning": 4}]
    assert SoftballRules.from_dict(data) == rules


def test_from_dict_unknown_field() -> None:
    with pytest.raises(RulesConfigurationError):
        SoftballRules.from_dict({"total_innings": 7, "designated_hitter": True})


def test_with_customizations_validates_again() -> None:
    rules = SoftballRules()
    shorter = rules.with_customizations(total_innings=5)
    assert shorter.total_innings == 5
    assert rules.total_innings == 7

    with pytest.raises(RulesConfigurationError):
        rules.with_customizations(total_innings=0)
    with pytest.raises(RulesConfigurationError):
        rules.with_customizations(allow_tie_games=True)
    with pytest.raises(RulesConfigurationError):
        rules.with_customizations(innings=9)


def test_str_describes_the_rules() -> None:
    description = str(SoftballRules.two_tier_mercy_rule())
    assert "total_innings=7" in description
    assert "10 runs after inning 4" in description
    assert "7 runs after inning 5" in description
    assert "mercy_rule=disabled" in str(SoftballRules.no_mercy_rule())


# --- PRESETS ---
@pytest.mark.parametrize("preset_name", sorted(RULES_PRESETS))
def test_every_preset_is_valid(preset_name: str) -> None:
    rules = SoftballRules.from_preset(preset_name)
    assert isinstance(rules, SoftballRules)


def test_preset_lookup_ignores_case() -> None:
    assert SoftballRules.from_preset(" Tournament ") == SoftballRules.tournament()


def test_unknown_preset() -> None:
    with pytest.raises(RulesConfigurationError):
        SoftballRules.from_preset("little_league_world_series")


def test_tier_presets() -> None:
    assert SoftballRules.two_tier_mercy_rule().mercy_rule_tiers == (
        MercyRuleTier(10, 4),
        MercyRuleTier(7, 5),
    )
    assert SoftballRules.three_tier_mercy_rule().mercy_rule_tiers == (
        MercyRuleTier(20, 2),
        MercyRuleTier(12, 4),
        MercyRuleTier(8, 6),
    )
