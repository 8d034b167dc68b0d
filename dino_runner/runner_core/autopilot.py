"""
Autopilot
=========

Simple scripted player for headless runs: take off so that the apex of the
jump lines up with the middle of the nearest obstacle ahead.
"""

from __future__ import annotations

from dino_runner.runner_core.state_snapshot import GameSnapshot


class Autopilot:
    """
    Distance-threshold jumper.

    Jumps once the gap to the next obstacle drops to
    ``speed * apex_ticks - (actor_width + obstacle_width) / 2``, i.e. when
    the actor would be at the top of its arc halfway across the obstacle.
    """

    def __init__(self, apex_ticks: float = 19.5, min_gap: float = 0.0):
        """
        Args:
            apex_ticks: Ticks from take-off to the top of the jump
                (``-jump_impulse / gravity`` with the default config).
            min_gap: Lower bound for the trigger distance, in pixels.
        """
        self.apex_ticks = apex_ticks
        self.min_gap = min_gap

    def trigger_gap(self, snapshot: GameSnapshot, obstacle_width: float) -> float:
        """Gap (pixels) at which to take off for an obstacle of this width."""
        overlap = (snapshot.actor_width + obstacle_width) / 2.0
        return max(self.min_gap, snapshot.scroll_speed * self.apex_ticks - overlap)

    def __call__(self, snapshot: GameSnapshot) -> bool:
        if snapshot.actor_airborne:
            return False

        actor_right = snapshot.actor_x + snapshot.actor_width
        for x, _, width, _, _ in snapshot.iter_obstacles():
            if x + width <= snapshot.actor_x:
                continue  # already behind the actor
            return x - actor_right <= self.trigger_gap(snapshot, width)
        return False
