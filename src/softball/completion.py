"""
Game completion state machine
-----

Decides, after every at-bat, whether the game is over and why. Precedence:

1. WALKOFF: home takes the lead in the bottom of the last (or an extra) inning, ends the game on the spot
2. MERCY_RULE: only once a bottom half is complete, so both teams had the same number of turns at bat
3. REGULATION: the regulation innings are played and somebody is ahead
   (home does not need to bat in the bottom half when it already leads)
4. Extra innings: keep playing while tied. A tie only becomes final when the rules allow tie games
   and the extra innings limit has been reached.

The inning position passed in is where play currently stands after the at-bat. A walk-off needs play to
still be in that bottom half: a run scored on the third-out play does not end the game on the spot. The
other rules are decided on the half-inning that just ended, as reported by the inning aggregate.
"""

from dataclasses import dataclass
from typing import Optional, Self

from src.core.shared_types import CompletionReason
from src.softball.inning import CompletedHalfInning
from src.softball.rules import SoftballRules


@dataclass(frozen=True)
class CompletionDecision:
    is_complete: bool
    reason: Optional[CompletionReason] = None

    @classmethod
    def complete(cls, reason: CompletionReason) -> Self:
        return cls(is_complete=True, reason=reason)

    @classmethod
    def not_complete(cls) -> Self:
        return cls(is_complete=False)


def is_walk_off(
    rules: SoftballRules,
    home_score: int,
    away_score: int,
    inning: int,
    is_top_half: bool,
    runs_scored: int,
) -> bool:
    return (
        not is_top_half
        and inning >= rules.total_innings
        and runs_scored > 0
        and home_score > away_score
    )


def is_extra_innings_limit_reached(rules: SoftballRules, inning: int) -> bool:
    if rules.has_unlimited_extra_innings:
        return False
    return inning - rules.total_innings >= rules.max_extra_innings  # type: ignore[operator]


def evaluate_completion(
    rules: SoftballRules,
    home_score: int,
    away_score: int,
    inning: int,
    is_top_half: bool,
    runs_scored: int,
    completed_half: Optional[CompletedHalfInning] = None,
) -> CompletionDecision:
    """
    Scores are the scores after the at-bat. inning / is_top_half: where play currently stands, after the at-bat.
    completed_half: the half-inning that ended on this at-bat, if any.
    """
    if completed_half is None:
        if is_walk_off(rules, home_score, away_score, inning, is_top_half, runs_scored):
            return CompletionDecision.complete(CompletionReason.WALKOFF)
        return CompletionDecision.not_complete()

    # the third out was made: play has moved on, decide on the half that ended
    inning = completed_half.inning
    home_leads = home_score > away_score
    tied = home_score == away_score

    if completed_half.is_top_half:
        if inning >= rules.total_innings and home_leads:
            return CompletionDecision.complete(CompletionReason.REGULATION)
        return CompletionDecision.not_complete()

    # bottom half done: both teams had their turn
    if rules.is_mercy_rule(home_score, away_score, inning):
        return CompletionDecision.complete(CompletionReason.MERCY_RULE)

    if inning < rules.total_innings:
        return CompletionDecision.not_complete()

    if not tied:
        return CompletionDecision.complete(CompletionReason.REGULATION)

    # tied after regulation: at least one extra inning is always played.
    # Bounded extras without tie games keep going until somebody wins.
    if inning > rules.total_innings and rules.allow_tie_games and is_extra_innings_limit_reached(rules, inning):
        return CompletionDecision.complete(CompletionReason.REGULATION)
    return CompletionDecision.not_complete()
