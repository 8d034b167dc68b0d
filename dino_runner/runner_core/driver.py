"""
Frame Driver
============

Host-side clock glue: one simulation tick per frame, regardless of how long
the frame actually took. The driver applies at most one queued input, ticks
the controller and hands the snapshot to a presentation sink.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from dino_runner.runner_core.game import SessionController, TickResult
from dino_runner.runner_core.session_state import GamePhase
from dino_runner.runner_core.state_snapshot import GameSnapshot

FrameSink = Callable[[GameSnapshot], None]
Policy = Callable[[GameSnapshot], bool]


@dataclass
class RunResult:
    """Outcome of a driven run."""
    ticks: int
    phase: GamePhase
    score: int
    obstacles_avoided: int
    jumps_requested: int


class FrameDriver:
    """
    Drives a SessionController one tick per frame.

    Input arrives between frames via ``queue_jump()``; several presses in one
    frame collapse into a single ``request_jump()``.
    """

    def __init__(self, controller: SessionController, on_frame: Optional[FrameSink] = None):
        """
        Args:
            controller: Simulation to drive.
            on_frame: Presentation sink called with each post-tick snapshot.
        """
        self._controller = controller
        self._on_frame = on_frame
        self._jump_queued = False
        self.frames = 0

    @property
    def controller(self) -> SessionController:
        return self._controller

    def queue_jump(self) -> None:
        """Record a jump/start/restart press for the next frame."""
        self._jump_queued = True

    def step(self, jump: bool = False) -> TickResult:
        """
        Run one frame.

        Args:
            jump: Also request a jump this frame.

        Returns:
            TickResult from the controller.
        """
        if jump or self._jump_queued:
            self._jump_queued = False
            self._controller.request_jump()

        result = self._controller.tick()
        self.frames += 1
        if self._on_frame is not None:
            self._on_frame(result.snapshot)
        return result

    def run(
        self,
        max_ticks: int,
        policy: Optional[Policy] = None,
        start: bool = True
    ) -> RunResult:
        """
        Run headless until game over or ``max_ticks``.

        Args:
            max_ticks: Tick cap.
            policy: Called with the latest snapshot; return True to jump.
            start: Leave WAITING (or GAME_OVER) and start a session first.

        Returns:
            RunResult for the session.
        """
        controller = self._controller
        if start and controller.phase is not GamePhase.PLAYING:
            controller.restart()

        snapshot = controller.snapshot()
        jumps = 0
        ticks = 0
        while ticks < max_ticks and controller.phase is GamePhase.PLAYING:
            jump = policy(snapshot) if policy is not None else False
            if jump:
                jumps += 1
            snapshot = self.step(jump=jump).snapshot
            ticks += 1

        return RunResult(
            ticks=ticks,
            phase=controller.phase,
            score=controller.display_score,
            obstacles_avoided=controller.obstacles_avoided,
            jumps_requested=jumps
        )
