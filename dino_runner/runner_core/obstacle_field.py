"""
Obstacle Field
==============

Owns live obstacles, the spawn timer and the scroll speed. Each Playing tick
spawns (when due), moves every obstacle left, and retires the ones that have
fully left the screen.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, List, Optional

from dino_runner.runner_core.collision import Box
from dino_runner.runner_core.config_loader import GameConfig, get_config
from dino_runner.runner_core.obstacle_catalog import ObstacleCatalog, ObstacleType, SizeClass
from dino_runner.runner_core.rng import ObstaclePicker


@dataclass
class Obstacle:
    """A live obstacle. ``x``/``y`` are the top-left corner."""
    uid: int
    obstacle_type: ObstacleType
    x: float
    y: float

    @property
    def size_class(self) -> SizeClass:
        return self.obstacle_type.size_class

    @property
    def width(self) -> float:
        return self.obstacle_type.width

    @property
    def height(self) -> float:
        return self.obstacle_type.height

    @property
    def right(self) -> float:
        return self.x + self.obstacle_type.width

    @property
    def box(self) -> Box:
        return Box.from_rect(self.x, self.y, self.width, self.height)

    @property
    def is_off_screen(self) -> bool:
        """True once the trailing edge has crossed the left boundary."""
        return self.right < 0


@dataclass
class FieldStepResult:
    """What happened to the field during one tick."""
    spawned: Optional[Obstacle]
    retired: List[Obstacle]


class ObstacleField:
    """
    Ordered obstacles plus the spawn scheduler.

    Obstacles are kept in spawn order, which is also left-to-right screen
    order since they all share one scroll speed.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        catalog: Optional[ObstacleCatalog] = None,
        seed: Optional[int] = None
    ):
        """
        Initialize an empty field.

        Args:
            config: Game configuration. Uses default if None.
            catalog: Obstacle types. Built from config if None.
            seed: Random seed for size-class selection.
        """
        if config is None:
            config = get_config()
        if catalog is None:
            catalog = ObstacleCatalog(config)

        self._config = config
        self._catalog = catalog
        self._picker = ObstaclePicker(catalog, seed)
        self._spawn_x = float(config.field.width)
        self._ground_line_y = config.field.ground_line_y

        self._obstacles: List[Obstacle] = []
        self._next_uid = 0
        self.spawn_timer: int = 0
        self.spawn_interval: int = config.difficulty.base_spawn_interval
        self.scroll_speed: float = config.difficulty.base_speed
        self.total_spawned: int = 0
        self.total_retired: int = 0

    def __len__(self) -> int:
        return len(self._obstacles)

    def __iter__(self) -> Iterator[Obstacle]:
        return iter(self._obstacles)

    @property
    def obstacles(self) -> List[Obstacle]:
        """Live obstacles in screen order (copy)."""
        return list(self._obstacles)

    @property
    def picker(self) -> ObstaclePicker:
        return self._picker

    def reset(
        self,
        scroll_speed: float,
        spawn_interval: int,
        seed: Optional[int] = None
    ) -> None:
        """
        Clear all obstacles and restart the spawn timer.

        Args:
            scroll_speed: Initial scroll speed for the new session.
            spawn_interval: Initial spawn interval in ticks.
            seed: New seed for size-class selection. Keeps current if None.
        """
        self._obstacles.clear()
        self._picker.reset(seed)
        self.spawn_timer = 0
        self.spawn_interval = spawn_interval
        self.scroll_speed = scroll_speed
        self.total_spawned = 0
        self.total_retired = 0

    def spawn(self, obstacle_type: Optional[ObstacleType] = None) -> Obstacle:
        """
        Place a new obstacle at the right edge, base on the ground line.

        Args:
            obstacle_type: Type to spawn. Drawn at random if None.

        Returns:
            The new obstacle.
        """
        if obstacle_type is None:
            obstacle_type = self._picker.pick()
        obstacle = Obstacle(
            uid=self._next_uid,
            obstacle_type=obstacle_type,
            x=self._spawn_x,
            y=self._ground_line_y - obstacle_type.height
        )
        self._next_uid += 1
        self._obstacles.append(obstacle)
        self.total_spawned += 1
        return obstacle

    def step(self) -> FieldStepResult:
        """
        Advance one Playing tick: spawn if due, scroll, retire.

        Returns:
            FieldStepResult with the spawned obstacle (if any) and the
            obstacles retired this tick.
        """
        spawned = None
        self.spawn_timer += 1
        if self.spawn_timer >= self.spawn_interval:
            spawned = self.spawn()
            self.spawn_timer = 0

        speed = self.scroll_speed
        for obstacle in self._obstacles:
            obstacle.x -= speed

        retired = [o for o in self._obstacles if o.is_off_screen]
        if retired:
            self._obstacles = [o for o in self._obstacles if not o.is_off_screen]
            self.total_retired += len(retired)

        return FieldStepResult(spawned=spawned, retired=retired)

    def nearest_ahead(self, x: float) -> Optional[Obstacle]:
        """First obstacle whose trailing edge is still right of ``x``."""
        for obstacle in self._obstacles:
            if obstacle.right > x:
                return obstacle
        return None
