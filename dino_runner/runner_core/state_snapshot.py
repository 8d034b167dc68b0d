"""
State Snapshot
==============

Read-only view of the simulation after a tick, for presentation. Obstacles
are packed into fixed-size numpy arrays with a mask, so renderers and
headless consumers get the same layout every frame.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterator, Optional, Tuple, TYPE_CHECKING

import numpy as np

from dino_runner.runner_core.config_loader import GameConfig, get_config
from dino_runner.runner_core.obstacle_catalog import SizeClass
from dino_runner.runner_core.session_state import GamePhase

if TYPE_CHECKING:
    from dino_runner.runner_core.actor import Actor
    from dino_runner.runner_core.obstacle_field import ObstacleField


@dataclass(frozen=True)
class GameSnapshot:
    """
    Everything a renderer may read after a tick.

    Arrays are marked read-only.
    """
    # Session
    phase: GamePhase
    frame: int
    score: int                  # Floored
    high_score: int
    obstacles_avoided: int
    new_high_score: bool

    # Difficulty
    level: int
    scroll_speed: float
    spawn_interval: int
    peak_speed: float

    # Field geometry
    field_width: float
    field_height: float
    ground_line_y: float

    # Actor
    actor_x: float
    actor_y: float
    actor_width: float
    actor_height: float
    actor_velocity: float
    actor_airborne: bool

    # Obstacles (fixed size, padded)
    obstacle_count: int
    obs_x: np.ndarray           # (MAX_OBS,) float32
    obs_y: np.ndarray           # (MAX_OBS,) float32
    obs_width: np.ndarray       # (MAX_OBS,) float32
    obs_height: np.ndarray      # (MAX_OBS,) float32
    obs_class: np.ndarray       # (MAX_OBS,) int8, -1 for empty slots
    obs_mask: np.ndarray        # (MAX_OBS,) bool

    @property
    def actor_box(self) -> Tuple[float, float, float, float]:
        """(x, y, width, height)."""
        return (self.actor_x, self.actor_y, self.actor_width, self.actor_height)

    def iter_obstacles(self) -> Iterator[Tuple[float, float, float, float, SizeClass]]:
        """Yield (x, y, width, height, size_class) for each live obstacle."""
        for i in range(self.obstacle_count):
            yield (
                float(self.obs_x[i]),
                float(self.obs_y[i]),
                float(self.obs_width[i]),
                float(self.obs_height[i]),
                SizeClass(int(self.obs_class[i]))
            )

    def to_dict(self) -> Dict[str, Any]:
        """Plain-Python view (JSON friendly)."""
        return {
            "phase": self.phase.value,
            "frame": self.frame,
            "score": self.score,
            "high_score": self.high_score,
            "obstacles_avoided": self.obstacles_avoided,
            "new_high_score": self.new_high_score,
            "level": self.level,
            "scroll_speed": self.scroll_speed,
            "spawn_interval": self.spawn_interval,
            "peak_speed": self.peak_speed,
            "actor": {
                "x": self.actor_x,
                "y": self.actor_y,
                "width": self.actor_width,
                "height": self.actor_height,
                "velocity": self.actor_velocity,
                "airborne": self.actor_airborne,
            },
            "obstacles": [
                {"x": x, "y": y, "width": w, "height": h, "size_class": c.tag}
                for x, y, w, h, c in self.iter_obstacles()
            ],
        }


class SnapshotBuilder:
    """Builds snapshots with fixed-size obstacle arrays."""

    def __init__(self, config: Optional[GameConfig] = None):
        if config is None:
            config = get_config()

        self._max_obstacles = config.snapshot.max_obstacles
        self._field_width = float(config.field.width)
        self._field_height = float(config.field.height)
        self._ground_line_y = config.field.ground_line_y

    @property
    def max_obstacles(self) -> int:
        return self._max_obstacles

    def build(
        self,
        phase: GamePhase,
        frame: int,
        score: int,
        high_score: int,
        obstacles_avoided: int,
        new_high_score: bool,
        level: int,
        spawn_interval: int,
        peak_speed: float,
        actor: "Actor",
        field: "ObstacleField"
    ) -> GameSnapshot:
        """Build a snapshot from current game state."""
        n = self._max_obstacles
        obs_x = np.zeros(n, dtype=np.float32)
        obs_y = np.zeros(n, dtype=np.float32)
        obs_width = np.zeros(n, dtype=np.float32)
        obs_height = np.zeros(n, dtype=np.float32)
        obs_class = np.full(n, -1, dtype=np.int8)
        obs_mask = np.zeros(n, dtype=bool)

        # Obstacles beyond capacity are the rightmost (newest) ones
        obstacles = field.obstacles[:n]
        for i, obstacle in enumerate(obstacles):
            obs_x[i] = obstacle.x
            obs_y[i] = obstacle.y
            obs_width[i] = obstacle.width
            obs_height[i] = obstacle.height
            obs_class[i] = int(obstacle.size_class)
            obs_mask[i] = True

        for array in (obs_x, obs_y, obs_width, obs_height, obs_class, obs_mask):
            array.flags.writeable = False

        return GameSnapshot(
            phase=phase,
            frame=frame,
            score=score,
            high_score=high_score,
            obstacles_avoided=obstacles_avoided,
            new_high_score=new_high_score,
            level=level,
            scroll_speed=field.scroll_speed,
            spawn_interval=spawn_interval,
            peak_speed=peak_speed,
            field_width=self._field_width,
            field_height=self._field_height,
            ground_line_y=self._ground_line_y,
            actor_x=actor.x,
            actor_y=actor.y,
            actor_width=actor.width,
            actor_height=actor.height,
            actor_velocity=actor.velocity,
            actor_airborne=actor.airborne,
            obstacle_count=len(obstacles),
            obs_x=obs_x,
            obs_y=obs_y,
            obs_width=obs_width,
            obs_height=obs_height,
            obs_class=obs_class,
            obs_mask=obs_mask
        )
