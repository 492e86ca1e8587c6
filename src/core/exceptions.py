"""
Custom exceptions raised across the layers.

Everything derives from GameError, so the service layer (and tests) can catch a single top-level type.
The domain layer raises DomainError subclasses. The coordinator converts those into failure outcomes,
every other layer lets them propagate.
"""

from typing import Optional


class GameError(Exception):
    """Top-level exception for anything that goes wrong while tracking a game."""


# --- DOMAIN ERRORS ---
class DomainError(GameError):
    """A softball rule or aggregate invariant would be violated."""

    kind: str = "DOMAIN"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class GameStateError(DomainError):
    """Game is not in a state that allows the operation (not started, already completed, out of sync)."""

    kind = "STATE"

    def __init__(self, message: str, status: Optional[str] = None) -> None:
        super().__init__(message)
        self.status = status


class BatterEligibilityError(DomainError):
    """The batter is not an active member of the batting lineup, or is batting out of order."""

    kind = "ELIGIBILITY"

    def __init__(
        self,
        message: str,
        batter_id: Optional[str] = None,
        batting_side: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.batter_id = batter_id
        self.batting_side = batting_side


class RunnerAdvancementError(DomainError):
    """A proposed runner movement does not match the bases (wrong runner, occupied target, ...)."""

    kind = "ADVANCEMENT"

    def __init__(
        self,
        message: str,
        runner_id: Optional[str] = None,
        from_base: Optional[str] = None,
        to_base: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.runner_id = runner_id
        self.from_base = from_base
        self.to_base = to_base


class RulesConfigurationError(DomainError):
    """Invalid rules policy configuration."""

    kind = "RULES"


class InvalidEventError(DomainError):
    """Event stream cannot be decoded or replayed onto an aggregate."""

    kind = "EVENT"


# --- PERSISTENCE ERRORS ---
class RepositoryError(GameError):
    """Record not found / could not be stored."""


class ConcurrencyError(RepositoryError):
    """Optimistic concurrency check failed: the stream moved on since the aggregate was loaded."""

    def __init__(self, stream_id: str, expected_version: int, actual_version: int) -> None:
        super().__init__(
            f"Stream {stream_id} is at version {actual_version}, expected {expected_version}."
        )
        self.stream_id = stream_id
        self.expected_version = expected_version
        self.actual_version = actual_version


# --- BOUNDARY ERRORS ---
class InvalidRequestError(GameError):
    """Request data could not be interpreted."""
