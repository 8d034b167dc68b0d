"""
RNG - Uniform Size-Class Picker
===============================

Seeded source of obstacle size classes. Every spawn draws uniformly and
independently from the catalog.
"""

from __future__ import annotations

import random
from typing import List, Optional

from dino_runner.runner_core.obstacle_catalog import ObstacleCatalog, ObstacleType


class ObstaclePicker:
    """
    Uniform random choice over obstacle size classes.

    A fixed seed reproduces the same sequence of size classes, which keeps
    headless runs and tests deterministic.
    """

    def __init__(self, catalog: ObstacleCatalog, seed: Optional[int] = None):
        """
        Initialize picker.

        Args:
            catalog: Obstacle types to choose from.
            seed: Random seed for reproducibility. Random if None.
        """
        self._catalog = catalog
        self._seed = seed
        self._rng = random.Random(seed)
        self._picks = 0

    @property
    def picks(self) -> int:
        """Number of draws since the last reset."""
        return self._picks

    def pick(self) -> ObstacleType:
        """Draw the next obstacle type."""
        self._picks += 1
        return self._catalog[self._rng.randrange(len(self._catalog))]

    def peek(self, count: int = 1) -> List[ObstacleType]:
        """
        Look at upcoming draws without consuming them.

        Args:
            count: Number of upcoming draws.

        Returns:
            List of upcoming obstacle types.
        """
        state = self._rng.getstate()
        result = [self._catalog[self._rng.randrange(len(self._catalog))] for _ in range(count)]
        self._rng.setstate(state)
        return result

    def reset(self, seed: Optional[int] = None) -> None:
        """
        Restart the sequence.

        Args:
            seed: New random seed. Keeps current if None.
        """
        if seed is not None:
            self._seed = seed
        self._rng = random.Random(self._seed)
        self._picks = 0
