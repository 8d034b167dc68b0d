"""
Obstacle Catalog
================

Closed set of obstacle size classes and their geometry, loaded from config.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Iterator, Optional, Tuple

from dino_runner.runner_core.config_loader import GameConfig, SizeClassConfig, get_config


class SizeClass(IntEnum):
    """Obstacle size class. The integer value is the catalog index."""
    SMALL = 0
    MEDIUM = 1
    WIDE = 2

    @property
    def tag(self) -> str:
        """Lowercase name, as used in config and snapshots."""
        return self.name.lower()


@dataclass(frozen=True)
class ObstacleType:
    """
    Runtime representation of a size class.

    Carries only geometry; how a size class looks is up to the renderer.
    """
    size_class: SizeClass
    width: float
    height: float

    @classmethod
    def from_config(cls, size_class: SizeClass, config: SizeClassConfig) -> "ObstacleType":
        return cls(size_class=size_class, width=config.width, height=config.height)

    @property
    def name(self) -> str:
        return self.size_class.tag

    def __repr__(self) -> str:
        return f"ObstacleType({self.name}: {self.width:g}x{self.height:g})"


class ObstacleCatalog:
    """
    Collection of all obstacle types, indexed by SizeClass.
    """

    def __init__(self, config: Optional[GameConfig] = None):
        """
        Initialize catalog from game config.

        Args:
            config: GameConfig instance. If None, loads from default location.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._types: Tuple[ObstacleType, ...] = tuple(
            ObstacleType.from_config(SizeClass(i), size_config)
            for i, size_config in enumerate(config.obstacles.size_classes)
        )

    def __len__(self) -> int:
        return len(self._types)

    def __getitem__(self, size_class: int) -> ObstacleType:
        """Get obstacle type by size class (or its integer index)."""
        if 0 <= size_class < len(self._types):
            return self._types[size_class]
        raise IndexError(f"Size class {size_class} out of range [0, {len(self._types)})")

    def __iter__(self) -> Iterator[ObstacleType]:
        return iter(self._types)

    @property
    def max_height(self) -> float:
        """Tallest obstacle height."""
        return max(t.height for t in self._types)

    def get_by_name(self, name: str) -> Optional[ObstacleType]:
        """Get obstacle type by name (case-insensitive)."""
        name_lower = name.lower()
        for obstacle_type in self._types:
            if obstacle_type.name == name_lower:
                return obstacle_type
        return None
