"""Centralized configuration read from environment variables."""

import os

DATABASE_URL_ENV = "SOFTBALL_DATABASE_URL"
SQL_ECHO_ENV = "SOFTBALL_SQL_ECHO"
LOG_LEVEL_ENV = "SOFTBALL_LOG_LEVEL"
RULES_PRESET_ENV = "SOFTBALL_RULES_PRESET"

DEFAULT_DATABASE_URL = "sqlite:///softball.db"
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_RULES_PRESET = "recreation_league"

_TRUTHY = {"1", "true", "yes", "on"}


def get_database_url() -> str:
    """SQLAlchemy URL of the event store database."""
    return os.environ.get(DATABASE_URL_ENV, DEFAULT_DATABASE_URL)


def get_sql_echo() -> bool:
    """Whether SQLAlchemy should log every statement."""
    return os.environ.get(SQL_ECHO_ENV, "").strip().lower() in _TRUTHY


def get_log_level() -> str:
    return os.environ.get(LOG_LEVEL_ENV, DEFAULT_LOG_LEVEL).strip().upper()


def get_rules_preset() -> str:
    """Name of the rules preset used when a new game does not bring its own rules."""
    return os.environ.get(RULES_PRESET_ENV, DEFAULT_RULES_PRESET).strip().lower()
