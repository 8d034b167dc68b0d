"""
Tests for the pygame renderer (headless, dummy video driver).
"""

import os

import pytest

os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
pygame = pytest.importorskip("pygame")

from dino_runner.runner_core.api_client import LeaderboardEntry
from dino_runner.runner_core.config_loader import PlayerSettings, load_config
from dino_runner.runner_core.game import SessionController
from dino_runner.runner_core.render_pygame import THEMES, PygameRenderer, darken, hex_to_rgb


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def controller(config):
    return SessionController(config=config, seed=0)


@pytest.fixture
def renderer(config):
    return PygameRenderer(config)


class TestColours:

    def test_hex_to_rgb(self):
        assert hex_to_rgb("#FF5722") == (255, 87, 34)
        assert hex_to_rgb("4caf50") == (76, 175, 80)

    @pytest.mark.parametrize("value", ["", "#12", "#GGGGGG", None])
    def test_bad_hex_uses_default(self, value):
        assert hex_to_rgb(value) == (76, 175, 80)

    def test_darken_clamps(self):
        assert darken((100, 100, 100), 20) == (49, 49, 49)
        assert darken((10, 200, 0), 20) == (0, 149, 0)


class TestPygameRenderer:
    """Test RGB output."""

    def test_shape(self, renderer, controller, config):
        frame = renderer.render(controller.snapshot())
        assert frame.shape == (config.field.height, config.field.width, 3)

    def test_theme_colours(self, config, controller):
        renderer = PygameRenderer(config, PlayerSettings(background_theme="night"))
        controller.request_jump()
        frame = renderer.render(controller.snapshot())
        sky, ground = THEMES["night"]
        assert tuple(frame[5, 400]) == sky
        assert tuple(frame[195, 700]) == ground

    def test_game_over_overlay_darkens(self, renderer, controller):
        controller.request_jump()
        before = renderer.render(controller.snapshot())
        for _ in range(1000):
            controller.tick()
            if controller.is_over:
                break
        after = renderer.render(controller.snapshot())
        assert controller.is_over
        assert after[5, 400].sum() < before[5, 400].sum()

    def test_leaderboard_and_banner(self, renderer, controller, config):
        renderer.set_leaderboard([LeaderboardEntry(rank=1, player_name="Ada", score=900)])
        renderer.show_banner("NEW GLOBAL RECORD!", frames=1)
        plain = PygameRenderer(config).render(controller.snapshot())
        decorated = renderer.render(controller.snapshot())
        assert (plain != decorated).any()
