"""
Tests for the session state machine and tick ordering.
"""

import threading

import pytest

from dino_runner.runner_core.config_loader import PlayerSettings, load_config
from dino_runner.runner_core.errors import ScoringServiceError
from dino_runner.runner_core.game import SessionController
from dino_runner.runner_core.obstacle_catalog import ObstacleCatalog, SizeClass
from dino_runner.runner_core.profile_store import ProfileStore
from dino_runner.runner_core.reporting import (
    NullReporter,
    ScoringService,
    SessionReporter,
)
from dino_runner.runner_core.session_state import GamePhase


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


class DownService(ScoringService):
    def __init__(self):
        self.attempts = 0

    def submit_session(self, *args):
        self.attempts += 1
        raise ScoringServiceError("connection refused")


class ExplodingReporter:
    """Reporter that fails synchronously."""

    def report(self, summary):
        raise RuntimeError("reporter exploded")


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def reporter():
    return NullReporter()


@pytest.fixture
def controller(config, reporter, clock):
    return SessionController(config=config, reporter=reporter, seed=1, clock=clock)


def place_on_actor(controller, size_class=SizeClass.SMALL):
    """Put an obstacle where it will overlap the grounded actor after one tick."""
    catalog = ObstacleCatalog(controller.config)
    obstacle = controller.field.spawn(catalog[size_class])
    obstacle.x = controller.actor.x + 10
    return obstacle


def place_about_to_retire(controller):
    field = controller.field
    obstacle = field.spawn()
    obstacle.x = -obstacle.width - 1
    return obstacle


class TestStateMachine:
    """Test WAITING -> PLAYING -> GAME_OVER -> WAITING."""

    def test_starts_waiting(self, controller):
        assert controller.phase is GamePhase.WAITING
        result = controller.tick()
        assert result.phase is GamePhase.WAITING
        assert controller.score == 0
        assert controller.state.frame == 0

    def test_jump_starts_session(self, controller, clock):
        assert controller.request_jump()
        assert controller.phase is GamePhase.PLAYING
        assert controller.state.started_at == clock.now
        assert not controller.actor.airborne

    def test_collision_ends_session(self, controller):
        controller.request_jump()
        place_on_actor(controller)
        result = controller.tick()
        assert result.collided
        assert result.phase is GamePhase.GAME_OVER
        assert controller.is_over

    def test_game_over_jump_returns_to_waiting(self, controller):
        controller.request_jump()
        for _ in range(30):
            controller.tick()
        place_on_actor(controller)
        controller.tick()

        assert controller.request_jump()
        assert controller.phase is GamePhase.WAITING
        assert controller.score == 0
        assert controller.obstacles_avoided == 0
        assert len(controller.field) == 0

    def test_score_frozen_after_game_over(self, controller):
        controller.request_jump()
        for _ in range(20):
            controller.tick()
        place_on_actor(controller)
        controller.tick()
        frozen = controller.score
        for _ in range(20):
            controller.tick()
        assert controller.score == frozen

    def test_restart_goes_straight_to_playing(self, controller):
        controller.request_jump()
        for _ in range(50):
            controller.tick()
        controller.restart()
        assert controller.phase is GamePhase.PLAYING
        assert controller.score == 0
        assert controller.state.sessions_played == 2


class TestPlaying:
    """Test per-tick behaviour while PLAYING."""

    def test_score_increments_per_tick(self, controller):
        controller.request_jump()
        for _ in range(100):
            controller.tick()
        assert controller.score == pytest.approx(10.0)
        assert controller.display_score in (9, 10)

    def test_score_monotonic(self, controller):
        controller.request_jump()
        previous = controller.score
        for _ in range(300):
            if controller.actor.on_ground:
                controller.request_jump()
            result = controller.tick()
            assert controller.score >= previous
            assert result.delta_score >= 0
            previous = controller.score
            if controller.is_over:
                break

    def test_no_double_jump(self, controller, config):
        controller.request_jump()
        assert controller.request_jump()
        assert not controller.request_jump()
        assert controller.actor.velocity == config.actor.jump_impulse
        assert controller.actor.jumps == 1

    def test_retirement_awards_bonus(self, controller):
        controller.request_jump()
        place_about_to_retire(controller)
        result = controller.tick()
        assert result.retired == 1
        assert controller.obstacles_avoided == 1
        assert controller.score == pytest.approx(10.1)
        assert result.score_event.obstacles == 1
        assert result.score_event.points == pytest.approx(10.0)

    def test_no_score_event_without_retirement(self, controller):
        controller.request_jump()
        result = controller.tick()
        assert result.retired == 0
        assert result.score_event is None

    def test_difficulty_follows_score(self, controller):
        controller.request_jump()
        controller.scorer.add_bonus(400)
        controller.tick()
        assert controller.level.level == 2
        assert controller.field.scroll_speed == pytest.approx(4.0)
        assert controller.field.spawn_interval == 100
        assert controller.peak_speed == pytest.approx(4.0)

    def test_serialised_ticks_from_threads(self, controller):
        controller.request_jump()

        def worker():
            for _ in range(100):
                controller.tick()

        threads = [threading.Thread(target=worker) for _ in range(2)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert controller.state.frame == 200
        assert controller.score == pytest.approx(20.0)


class TestSessionSummary:
    """Test the end-of-session summary and high score."""

    def test_summary_floors_score(self, controller, reporter, clock):
        controller.request_jump()
        controller.scorer.apply_avoided(3)
        controller.scorer.add_bonus(220.7)
        clock.now += 12.7
        place_on_actor(controller)
        controller.tick()

        assert controller.phase is GamePhase.GAME_OVER
        assert len(reporter.summaries) == 1
        summary = reporter.summaries[0]
        assert summary.score == 250
        assert summary.obstacles_avoided == 3
        assert summary.duration_seconds == 12
        assert summary.peak_speed == pytest.approx(3.0)
        assert controller.last_summary == summary
        assert controller.high_score == 250
        assert controller.state.new_high_score

        controller.restart()
        assert controller.phase is GamePhase.PLAYING
        assert controller.score == 0

    def test_same_tick_retirement_counts(self, controller, reporter):
        controller.request_jump()
        place_about_to_retire(controller)
        place_on_actor(controller)
        result = controller.tick()

        assert result.collided
        assert result.retired == 1
        assert reporter.summaries[0].obstacles_avoided == 1
        assert reporter.summaries[0].score == 10

    def test_lower_score_keeps_high_score(self, config, reporter):
        controller = SessionController(
            config=config, reporter=reporter, profile=ProfileStore(high_score=500)
        )
        controller.request_jump()
        place_on_actor(controller)
        controller.tick()
        assert controller.high_score == 500
        assert not controller.state.new_high_score

    def test_snapshot_reports_game_over(self, controller):
        controller.request_jump()
        controller.scorer.add_bonus(42.5)
        place_on_actor(controller)
        snapshot = controller.tick().snapshot
        assert snapshot.phase is GamePhase.GAME_OVER
        assert snapshot.score == 42
        assert snapshot.high_score == 42


class TestScoringServiceOutage:
    """Test that reporting failures never touch local state."""

    def test_failed_submission(self, config):
        service = DownService()
        reporter = SessionReporter(service, player_name="Rex")
        profile = ProfileStore(high_score=100)
        controller = SessionController(config=config, reporter=reporter, profile=profile)

        controller.request_jump()
        controller.scorer.add_bonus(250)
        place_on_actor(controller)
        controller.tick()

        assert controller.phase is GamePhase.GAME_OVER
        assert profile.high_score == 250
        assert reporter.flush(2.0)
        assert service.attempts == 1
        assert reporter.failed == 1

        assert controller.request_jump()
        assert controller.phase is GamePhase.WAITING
        reporter.close()

    def test_reporter_raising(self, config):
        profile = ProfileStore(high_score=100)
        controller = SessionController(
            config=config, reporter=ExplodingReporter(), profile=profile
        )
        controller.request_jump()
        controller.scorer.add_bonus(250)
        place_on_actor(controller)
        controller.tick()

        assert controller.is_over
        assert profile.high_score == 250
        controller.restart()
        assert controller.phase is GamePhase.PLAYING

    def test_anonymous_not_submitted(self, config):
        service = DownService()
        reporter = SessionReporter(service, player_name=None)
        controller = SessionController(config=config, reporter=reporter)
        controller.request_jump()
        place_on_actor(controller)
        controller.tick()

        assert reporter.flush(1.0)
        assert reporter.skipped == 1
        assert service.attempts == 0


class TestReentrancy:
    """Test that a tick started during a tick is dropped."""

    def test_nested_tick_skipped(self, config):
        nested = []

        class TickingReporter:
            def report(self, summary):
                nested.append(controller.tick())

        controller = SessionController(config=config, reporter=TickingReporter())
        controller.request_jump()
        place_on_actor(controller)
        frame_before = controller.state.frame
        result = controller.tick()

        assert result.collided
        assert len(nested) == 1
        assert nested[0].skipped
        assert controller.state.frame == frame_before + 1


class TestSettings:
    """Test difficulty preference application."""

    def test_hard_before_start(self, controller):
        controller.apply_settings(PlayerSettings(difficulty_preference="hard"))
        controller.request_jump()
        assert controller.field.scroll_speed == pytest.approx(3.9)

    def test_change_mid_session_waits_for_restart(self, controller):
        controller.request_jump()
        controller.tick()
        controller.apply_settings(PlayerSettings(difficulty_preference="easy"))
        controller.tick()
        assert controller.field.scroll_speed == pytest.approx(3.0)

        controller.restart()
        assert controller.field.scroll_speed == pytest.approx(2.4)

    def test_unknown_preference_uses_normal(self, config):
        controller = SessionController(
            config=config, settings=PlayerSettings(difficulty_preference="turbo")
        )
        controller.request_jump()
        assert controller.field.scroll_speed == pytest.approx(3.0)
