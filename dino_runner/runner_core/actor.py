"""
Actor Physics
=============

Vertical-only kinematic body for the player. The actor never moves
horizontally; the world scrolls past it instead.
"""

from __future__ import annotations

from typing import Optional

from dino_runner.runner_core.collision import Box
from dino_runner.runner_core.config_loader import GameConfig, get_config


class Actor:
    """
    Player-controlled runner.

    Invariants after every step: ``top_y <= y <= ground_y``, and standing on
    the ground means zero velocity and not airborne.
    """

    def __init__(self, config: Optional[GameConfig] = None):
        """
        Initialize actor standing on the ground.

        Args:
            config: Game configuration. Uses default if None.
        """
        if config is None:
            config = get_config()

        actor = config.actor
        self._x = actor.x
        self._width = actor.width
        self._height = actor.height
        self._ground_y = actor.ground_y
        self._top_y = config.field.top_y
        self._gravity = actor.gravity
        self._jump_impulse = actor.jump_impulse

        self.y: float = self._ground_y
        self.velocity: float = 0.0
        self.airborne: bool = False
        self.jumps: int = 0

    @property
    def x(self) -> float:
        return self._x

    @property
    def width(self) -> float:
        return self._width

    @property
    def height(self) -> float:
        return self._height

    @property
    def ground_y(self) -> float:
        return self._ground_y

    @property
    def box(self) -> Box:
        """Current bounding box."""
        return Box.from_rect(self._x, self.y, self._width, self._height)

    @property
    def on_ground(self) -> bool:
        return not self.airborne

    def reset(self) -> None:
        """Put the actor back on the ground, at rest."""
        self.y = self._ground_y
        self.velocity = 0.0
        self.airborne = False
        self.jumps = 0

    def jump(self) -> bool:
        """
        Apply the jump impulse if grounded.

        Returns:
            True if the impulse was applied, False if already airborne.
        """
        if self.airborne:
            return False
        self.velocity = self._jump_impulse
        self.airborne = True
        self.jumps += 1
        return True

    def step(self) -> None:
        """Advance one tick: gravity, integrate, clamp to [top_y, ground_y]."""
        self.velocity += self._gravity
        self.y += self.velocity

        if self.y >= self._ground_y:
            self.y = self._ground_y
            self.velocity = 0.0
            self.airborne = False
        elif self.y < self._top_y:
            # Hit the ceiling: stop rising, keep falling from there
            self.y = self._top_y
            if self.velocity < 0:
                self.velocity = 0.0

    def __repr__(self) -> str:
        return f"Actor(y={self.y:.2f}, vy={self.velocity:.2f}, airborne={self.airborne})"
