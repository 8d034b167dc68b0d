"""
Session Controller
==================

Main game orchestrator combining actor physics, the obstacle field,
collision detection, difficulty and scoring into the session state machine.

    WAITING --jump--> PLAYING --collision--> GAME_OVER --jump--> WAITING

One tick = one frame. While PLAYING a tick runs, in order: actor physics,
obstacle spawn/advance/retire, collision, difficulty, score increment.
"""

from __future__ import annotations

import logging
import math
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional

from dino_runner.runner_core.actor import Actor
from dino_runner.runner_core.collision import CollisionDetector
from dino_runner.runner_core.config_loader import (
    GameConfig,
    PlayerSettings,
    base_speed_for,
    get_config,
)
from dino_runner.runner_core.difficulty import DifficultyController, DifficultyLevel
from dino_runner.runner_core.obstacle_catalog import ObstacleCatalog
from dino_runner.runner_core.obstacle_field import Obstacle, ObstacleField
from dino_runner.runner_core.profile_store import ProfileStore
from dino_runner.runner_core.reporting import NullReporter, SessionSummary
from dino_runner.runner_core.scoring import ScoreEvent, ScoreTracker
from dino_runner.runner_core.session_state import GamePhase, SessionState
from dino_runner.runner_core.state_snapshot import GameSnapshot, SnapshotBuilder

logger = logging.getLogger(__name__)


@dataclass
class TickResult:
    """Result of a single tick."""
    snapshot: GameSnapshot
    phase: GamePhase
    collided: bool
    spawned: int
    retired: int
    delta_score: float
    score_event: Optional[ScoreEvent] = None    # Avoidance bonus, if any
    skipped: bool = False


class SessionController:
    """
    Single-session game simulation.

    Owns every piece of simulation state; nothing is module-global. Ticks
    are serialised: a tick started while another is running on the same
    thread is dropped, and other threads wait for the running tick.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        settings: Optional[PlayerSettings] = None,
        reporter: Optional[Any] = None,
        profile: Optional[ProfileStore] = None,
        seed: Optional[int] = None,
        clock: Callable[[], float] = time.monotonic
    ):
        """
        Initialize in the WAITING state.

        Args:
            config: Game configuration. Uses default if None.
            settings: Player settings; only the difficulty preference is used.
            reporter: Receives the session summary at game over via
                ``report(summary)``. Must not block. NullReporter if None.
            profile: Local profile holding the high score. In-memory if None.
            seed: Random seed for obstacle size classes.
            clock: Monotonic seconds source for session duration.
        """
        if config is None:
            config = get_config()
        if settings is None:
            settings = PlayerSettings()

        self._config = config
        self._settings = settings
        self._reporter = reporter if reporter is not None else NullReporter()
        self._profile = profile if profile is not None else ProfileStore()
        self._seed = seed
        self._clock = clock

        # Subsystems
        self._catalog = ObstacleCatalog(config)
        self._actor = Actor(config)
        self._field = ObstacleField(config, self._catalog, seed)
        self._detector = CollisionDetector()
        self._difficulty = DifficultyController(config, base_speed_for(config, settings))
        self._scorer = ScoreTracker(config)
        self._snapshot_builder = SnapshotBuilder(config)

        self._state = SessionState()
        self._level = self._difficulty.reset()
        self._field.reset(self._level.scroll_speed, self._level.spawn_interval, seed)

        self._lock = threading.RLock()
        self._in_tick = False

    @property
    def config(self) -> GameConfig:
        return self._config

    @property
    def settings(self) -> PlayerSettings:
        return self._settings

    @property
    def state(self) -> SessionState:
        """Session bookkeeping (phase, frame, timestamps, summary)."""
        return self._state

    @property
    def phase(self) -> GamePhase:
        return self._state.phase

    @property
    def actor(self) -> Actor:
        return self._actor

    @property
    def field(self) -> ObstacleField:
        return self._field

    @property
    def difficulty(self) -> DifficultyController:
        return self._difficulty

    @property
    def scorer(self) -> ScoreTracker:
        return self._scorer

    @property
    def profile(self) -> ProfileStore:
        return self._profile

    @property
    def reporter(self) -> Any:
        return self._reporter

    @property
    def score(self) -> float:
        """Accumulated (fractional) score."""
        return self._scorer.score

    @property
    def display_score(self) -> int:
        """Floored score, as shown, compared and submitted."""
        return self._scorer.floored

    @property
    def obstacles_avoided(self) -> int:
        return self._scorer.obstacles_avoided

    @property
    def high_score(self) -> int:
        return self._profile.high_score

    @property
    def peak_speed(self) -> float:
        return self._difficulty.peak_speed

    @property
    def level(self) -> DifficultyLevel:
        return self._level

    @property
    def last_summary(self) -> Optional[SessionSummary]:
        return self._state.summary

    @property
    def is_over(self) -> bool:
        return self._state.is_over

    def apply_settings(self, settings: PlayerSettings) -> None:
        """
        Switch player settings.

        The new base speed applies from the next session start; a session in
        progress keeps its speed.
        """
        with self._lock:
            self._settings = settings
            if self._state.phase is GamePhase.WAITING:
                self._reset_components()
            logger.info(
                "Applied settings: theme=%s difficulty=%s (base speed %.2f)",
                settings.background_theme,
                settings.difficulty_preference,
                base_speed_for(self._config, settings)
            )

    def request_jump(self) -> bool:
        """
        The single input entry point (jump / start / restart).

        - WAITING: start a session.
        - PLAYING and grounded: jump.
        - PLAYING and airborne: no-op.
        - GAME_OVER: back to WAITING.

        Returns:
            True if the request changed anything.
        """
        with self._lock:
            phase = self._state.phase
            if phase is GamePhase.WAITING:
                self._start_session()
                return True
            if phase is GamePhase.PLAYING:
                return self._actor.jump()
            self._reset_to_waiting()
            return True

    def restart(self, seed: Optional[int] = None) -> None:
        """
        Reset and go straight to PLAYING, from any phase.

        Args:
            seed: New obstacle seed. Keeps the current one if None.
        """
        with self._lock:
            if seed is not None:
                self._seed = seed
            self._reset_to_waiting()
            self._start_session()

    def tick(self) -> TickResult:
        """
        Advance the simulation by one frame.

        Does nothing outside PLAYING. Never blocks on I/O.

        Returns:
            TickResult with the post-tick snapshot.
        """
        with self._lock:
            if self._in_tick:
                logger.debug("Dropping reentrant tick at frame %d", self._state.frame)
                return self._result(skipped=True)
            self._in_tick = True
            try:
                return self._tick()
            finally:
                self._in_tick = False

    def snapshot(self) -> GameSnapshot:
        """Read-only view of the current state for presentation."""
        with self._lock:
            return self._build_snapshot()

    def _tick(self) -> TickResult:
        if not self._state.is_playing:
            return self._result()

        score_before = self._scorer.score
        self._state.frame += 1

        self._actor.step()

        field_result = self._field.step()
        retired = len(field_result.retired)
        score_event = self._scorer.apply_avoided(retired)

        hit = self._detector.first_hit(self._actor.box, self._field)
        if hit is not None:
            self._end_session(hit)
            return self._result(
                collided=True,
                spawned=int(field_result.spawned is not None),
                retired=retired,
                delta_score=self._scorer.score - score_before,
                score_event=score_event
            )

        self._level = self._difficulty.update(self._scorer.score)
        self._field.scroll_speed = self._level.scroll_speed
        self._field.spawn_interval = self._level.spawn_interval

        self._scorer.add_tick()

        return self._result(
            spawned=int(field_result.spawned is not None),
            retired=retired,
            delta_score=self._scorer.score - score_before,
            score_event=score_event
        )

    def _reset_components(self) -> None:
        self._scorer.reset()
        self._difficulty.base_speed = base_speed_for(self._config, self._settings)
        self._actor.reset()
        self._level = self._difficulty.reset()
        self._field.reset(self._level.scroll_speed, self._level.spawn_interval, self._seed)
        self._state.frame = 0
        self._state.ended_at = None
        self._state.new_high_score = False

    def _reset_to_waiting(self) -> None:
        self._reset_components()
        self._state.phase = GamePhase.WAITING
        self._state.summary = None
        logger.debug("Session reset, waiting for start")

    def _start_session(self) -> None:
        self._reset_components()
        self._state.phase = GamePhase.PLAYING
        self._state.started_at = self._clock()
        self._state.summary = None
        self._state.sessions_played += 1
        logger.info(
            "Session %d started (base speed %.2f)",
            self._state.sessions_played, self._difficulty.base_speed
        )

    def _end_session(self, hit: Obstacle) -> None:
        """PLAYING -> GAME_OVER: freeze score, report, update high score."""
        state = self._state
        state.phase = GamePhase.GAME_OVER
        state.ended_at = self._clock()
        duration = max(0, math.floor(state.ended_at - state.started_at))

        summary = SessionSummary(
            score=self._scorer.floored,
            obstacles_avoided=self._scorer.obstacles_avoided,
            duration_seconds=duration,
            peak_speed=self._difficulty.peak_speed
        )
        state.summary = summary

        try:
            self._reporter.report(summary)
        except Exception:
            # Reporting is best effort; local bookkeeping below must still run
            logger.exception("Session reporter failed")

        state.new_high_score = self._profile.record_score(summary.score)

        logger.info(
            "Game over: score %d, %d obstacles avoided, %ds, hit %s obstacle",
            summary.score, summary.obstacles_avoided, duration, hit.size_class.tag
        )

    def _result(
        self,
        collided: bool = False,
        spawned: int = 0,
        retired: int = 0,
        delta_score: float = 0.0,
        score_event: Optional[ScoreEvent] = None,
        skipped: bool = False
    ) -> TickResult:
        return TickResult(
            snapshot=self._build_snapshot(),
            phase=self._state.phase,
            collided=collided,
            spawned=spawned,
            retired=retired,
            delta_score=delta_score,
            score_event=score_event,
            skipped=skipped
        )

    def _build_snapshot(self) -> GameSnapshot:
        """Build current game state snapshot."""
        return self._snapshot_builder.build(
            phase=self._state.phase,
            frame=self._state.frame,
            score=self._scorer.floored,
            high_score=self._profile.high_score,
            obstacles_avoided=self._scorer.obstacles_avoided,
            new_high_score=self._state.new_high_score,
            level=self._level.level,
            spawn_interval=self._field.spawn_interval,
            peak_speed=self._difficulty.peak_speed,
            actor=self._actor,
            field=self._field
        )
