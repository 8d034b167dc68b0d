"""
Collision Detection
===================

Axis-aligned bounding-box overlap between the actor and live obstacles.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from dino_runner.runner_core.obstacle_field import Obstacle


@dataclass(frozen=True)
class Box:
    """Axis-aligned box in screen coordinates (y grows downwards)."""
    left: float
    top: float
    right: float
    bottom: float

    @classmethod
    def from_rect(cls, x: float, y: float, width: float, height: float) -> "Box":
        """Box with top-left corner at (x, y)."""
        return cls(left=x, top=y, right=x + width, bottom=y + height)

    @property
    def width(self) -> float:
        return self.right - self.left

    @property
    def height(self) -> float:
        return self.bottom - self.top


def boxes_overlap(a: Box, b: Box) -> bool:
    """
    Open-interval overlap test.

    Boxes that only share an edge or a corner do not overlap.
    """
    return (
        a.left < b.right
        and a.right > b.left
        and a.top < b.bottom
        and a.bottom > b.top
    )


class CollisionDetector:
    """Finds the first live obstacle overlapping the actor."""

    def __init__(self) -> None:
        self._checks = 0

    @property
    def checks(self) -> int:
        """Total pairwise tests performed (diagnostics)."""
        return self._checks

    def first_hit(self, actor_box: Box, obstacles: Iterable["Obstacle"]) -> Optional["Obstacle"]:
        """
        Return the first obstacle overlapping ``actor_box``, or None.

        Any hit is terminal for the session, so scanning stops there.
        """
        for obstacle in obstacles:
            self._checks += 1
            if boxes_overlap(actor_box, obstacle.box):
                return obstacle
        return None

    def any_hit(self, actor_box: Box, obstacles: Iterable["Obstacle"]) -> bool:
        """True if any obstacle overlaps ``actor_box``."""
        return self.first_hit(actor_box, obstacles) is not None
