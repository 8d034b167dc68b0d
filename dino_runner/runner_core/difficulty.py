"""
Difficulty Controller
=====================

Derives scroll speed and spawn interval from the floored score. Nothing here
is stored between ticks except the peak speed of the current session.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

from dino_runner.runner_core.config_loader import GameConfig, get_config


@dataclass(frozen=True)
class DifficultyLevel:
    """Difficulty parameters for a given score."""
    level: int
    scroll_speed: float
    spawn_interval: int


class DifficultyController:
    """
    Score -> (level, scroll speed, spawn interval).

    level = floor(score / points_per_level)
    speed = base_speed + level * speed_per_level
    interval = max(min_interval, base_interval - level * interval_step)
    """

    def __init__(self, config: Optional[GameConfig] = None, base_speed: Optional[float] = None):
        """
        Args:
            config: Game configuration. Uses default if None.
            base_speed: Difficulty-scaled initial speed. Config value if None.
        """
        if config is None:
            config = get_config()

        diff = config.difficulty
        self._points_per_level = diff.points_per_level
        self._speed_per_level = diff.speed_per_level
        self._base_interval = diff.base_spawn_interval
        self._min_interval = diff.min_spawn_interval
        self._interval_step = diff.interval_step_per_level
        self._base_speed = diff.base_speed if base_speed is None else base_speed
        self._peak_speed = self._base_speed

    @property
    def base_speed(self) -> float:
        return self._base_speed

    @base_speed.setter
    def base_speed(self, value: float) -> None:
        self._base_speed = value

    @property
    def peak_speed(self) -> float:
        """Highest scroll speed seen since the last reset."""
        return self._peak_speed

    def level_for(self, score: float) -> int:
        """Difficulty level for a score (floored first)."""
        return max(0, math.floor(score)) // self._points_per_level

    def speed_for(self, score: float) -> float:
        return self._base_speed + self.level_for(score) * self._speed_per_level

    def spawn_interval_for(self, score: float) -> int:
        return max(
            self._min_interval,
            self._base_interval - self.level_for(score) * self._interval_step
        )

    def compute(self, score: float) -> DifficultyLevel:
        """Difficulty parameters for a score. Pure; does not touch peak speed."""
        return DifficultyLevel(
            level=self.level_for(score),
            scroll_speed=self.speed_for(score),
            spawn_interval=self.spawn_interval_for(score)
        )

    def update(self, score: float) -> DifficultyLevel:
        """Compute parameters for ``score`` and fold the speed into the peak."""
        result = self.compute(score)
        if result.scroll_speed > self._peak_speed:
            self._peak_speed = result.scroll_speed
        return result

    def reset(self) -> DifficultyLevel:
        """Start a new session at level 0."""
        self._peak_speed = self._base_speed
        return self.compute(0)
