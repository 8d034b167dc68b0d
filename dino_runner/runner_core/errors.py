"""
Errors
======

Exception types raised by the runner core and its service clients.
"""

from __future__ import annotations


class RunnerError(Exception):
    """Base class for all Dino Runner errors."""


class ConfigError(RunnerError, ValueError):
    """game_config.yaml is malformed or inconsistent."""


class ScoringServiceError(RunnerError):
    """A session submission or leaderboard request failed."""


class SettingsError(RunnerError):
    """Player settings could not be fetched or saved."""


class InvalidPlayerNameError(RunnerError, ValueError):
    """Player name is empty or longer than the allowed length."""
