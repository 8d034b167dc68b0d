"""
Tests for actor physics: gravity, jumping, ground and ceiling clamps.
"""

import dataclasses

import pytest

from dino_runner.runner_core.actor import Actor
from dino_runner.runner_core.config_loader import load_config


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def actor(config):
    return Actor(config)


class TestGroundClamp:
    """Test the actor never sinks below the ground."""

    def test_starts_on_ground(self, actor, config):
        assert actor.y == config.actor.ground_y
        assert actor.velocity == 0.0
        assert not actor.airborne

    def test_resting_actor_stays_put(self, actor, config):
        for _ in range(50):
            actor.step()
            assert actor.y == config.actor.ground_y
            assert actor.velocity == 0.0
            assert not actor.airborne

    def test_invariants_through_full_arc(self, actor):
        """y <= ground at every tick, and y == ground means landed and at rest."""
        actor.jump()
        landed = False
        for _ in range(100):
            actor.step()
            assert actor.y <= actor.ground_y
            if actor.y == actor.ground_y:
                assert actor.velocity == 0.0
                assert not actor.airborne
                landed = True
        assert landed

    def test_lands_within_expected_ticks(self, actor):
        """With gravity 0.6 and impulse -12 the arc takes about 40 ticks."""
        actor.jump()
        ticks = 0
        while actor.airborne:
            actor.step()
            ticks += 1
            assert ticks < 60
        assert 38 <= ticks <= 41


class TestJump:
    """Test jump requests."""

    def test_jump_applies_impulse(self, actor, config):
        assert actor.jump()
        assert actor.velocity == config.actor.jump_impulse
        assert actor.airborne

    def test_first_step_after_jump(self, actor):
        actor.jump()
        actor.step()
        assert actor.velocity == pytest.approx(-11.4)
        assert actor.y == pytest.approx(138.6)

    def test_no_double_jump(self, actor, config):
        """Two requests without a landing in between give one impulse."""
        assert actor.jump()
        assert not actor.jump()
        assert actor.velocity == config.actor.jump_impulse
        assert actor.jumps == 1

    def test_no_jump_mid_air(self, actor):
        actor.jump()
        for _ in range(10):
            actor.step()
        velocity = actor.velocity
        assert not actor.jump()
        assert actor.velocity == velocity
        assert actor.jumps == 1

    def test_can_jump_again_after_landing(self, actor):
        actor.jump()
        while actor.airborne:
            actor.step()
        assert actor.jump()
        assert actor.jumps == 2

    def test_reset(self, actor, config):
        actor.jump()
        actor.step()
        actor.reset()
        assert actor.y == config.actor.ground_y
        assert actor.velocity == 0.0
        assert not actor.airborne
        assert actor.jumps == 0


class TestCeiling:
    """Test the top clamp with an oversized jump."""

    @pytest.fixture
    def strong_actor(self, config):
        strong = dataclasses.replace(
            config, actor=dataclasses.replace(config.actor, jump_impulse=-40.0)
        )
        return Actor(strong)

    def test_clamped_at_top(self, strong_actor, config):
        strong_actor.jump()
        for _ in range(4):
            strong_actor.step()
        assert strong_actor.y == config.field.top_y
        assert strong_actor.velocity == 0.0

    def test_never_above_top(self, strong_actor, config):
        strong_actor.jump()
        for _ in range(200):
            strong_actor.step()
            assert config.field.top_y <= strong_actor.y <= strong_actor.ground_y
        assert not strong_actor.airborne
