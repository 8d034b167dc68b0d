"""
Scoring System
==============

Accumulates the real-valued session score: a small continuous increment per
Playing tick plus a bonus for every obstacle avoided. Only the floored value
is ever shown, compared against the high score, or submitted.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

from dino_runner.runner_core.config_loader import GameConfig, get_config


@dataclass
class ScoreEvent:
    """Record of an avoidance bonus."""
    points: float
    obstacles: int

    def __repr__(self) -> str:
        return f"ScoreEvent(avoided={self.obstacles}, +{self.points:g})"


class ScoreTracker:
    """
    Tracks session score and obstacles avoided.

    The score never decreases between resets.
    """

    def __init__(self, config: Optional[GameConfig] = None):
        """
        Initialize score tracker.

        Args:
            config: Game configuration. Uses default if None.
        """
        if config is None:
            config = get_config()

        self._points_per_tick = config.scoring.points_per_tick
        self._avoid_bonus = config.scoring.avoid_bonus
        self._score: float = 0.0
        self._obstacles_avoided: int = 0

    @property
    def score(self) -> float:
        """Accumulated (fractional) score."""
        return self._score

    @property
    def floored(self) -> int:
        """Integer score for display, high score and submission."""
        return math.floor(self._score)

    @property
    def obstacles_avoided(self) -> int:
        return self._obstacles_avoided

    def add_tick(self) -> None:
        """Continuous per-tick increment."""
        self._score += self._points_per_tick

    def apply_avoided(self, count: int = 1) -> Optional[ScoreEvent]:
        """
        Award the avoidance bonus for ``count`` retired obstacles.

        Returns:
            ScoreEvent, or None when ``count`` is zero.
        """
        if count <= 0:
            return None
        points = self._avoid_bonus * count
        self._score += points
        self._obstacles_avoided += count
        return ScoreEvent(points=points, obstacles=count)

    def add_bonus(self, points: float) -> None:
        """Add bonus points (negative values are ignored)."""
        if points > 0:
            self._score += points

    def reset(self) -> None:
        """Reset score and avoided count to zero."""
        self._score = 0.0
        self._obstacles_avoided = 0
