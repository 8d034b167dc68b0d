"""
Tests for configuration loading and player settings.
"""

from pathlib import Path

import pytest
import yaml

import dino_runner
from dino_runner.runner_core.config_loader import (
    DEFAULT_DINO_COLOR,
    PlayerSettings,
    get_config,
    load_config,
    reload_config,
)
from dino_runner.runner_core.errors import ConfigError

DEFAULT_CONFIG = Path(dino_runner.__file__).parent / "game_config.yaml"


@pytest.fixture
def raw_config():
    with open(DEFAULT_CONFIG) as f:
        return yaml.safe_load(f)


def write_config(tmp_path, data):
    path = tmp_path / "game_config.yaml"
    with open(path, "w") as f:
        yaml.safe_dump(data, f)
    return str(path)


class TestLoadConfig:
    """Test game_config.yaml loading and validation."""

    def test_defaults(self):
        config = load_config()
        assert config.field.width == 800
        assert config.field.ground_line_y == 180
        assert config.actor.gravity == pytest.approx(0.6)
        assert config.actor.jump_impulse == pytest.approx(-12.0)
        assert config.difficulty.base_spawn_interval == 120
        assert config.difficulty.min_spawn_interval == 60
        assert config.scoring.avoid_bonus == 10

    def test_size_classes(self):
        config = load_config()
        assert config.num_size_classes == 3
        assert config.get_size_class("medium").height == 50
        with pytest.raises(ValueError):
            config.get_size_class("huge")

    def test_cached(self):
        assert get_config() is get_config()
        reloaded = reload_config()
        assert get_config() is reloaded

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(str(tmp_path / "nope.yaml"))

    def test_missing_section(self, tmp_path, raw_config):
        del raw_config["actor"]
        with pytest.raises(ConfigError):
            load_config(write_config(tmp_path, raw_config))

    def test_upward_gravity_rejected(self, tmp_path, raw_config):
        raw_config["actor"]["jump_impulse"] = 12
        with pytest.raises(ConfigError):
            load_config(write_config(tmp_path, raw_config))

    def test_min_interval_above_base_rejected(self, tmp_path, raw_config):
        raw_config["difficulty"]["min_spawn_interval"] = 500
        with pytest.raises(ConfigError):
            load_config(write_config(tmp_path, raw_config))

    def test_optional_sections_default(self, tmp_path, raw_config):
        del raw_config["service"]
        del raw_config["snapshot"]
        config = load_config(write_config(tmp_path, raw_config))
        assert config.snapshot.max_obstacles == 32
        assert config.service.leaderboard_limit == 5


class TestPlayerSettings:
    """Test settings parsing and fallbacks."""

    def test_defaults(self):
        settings = PlayerSettings()
        assert settings.dino_color == DEFAULT_DINO_COLOR
        assert settings.background_theme == "desert"
        assert settings.difficulty_preference == "normal"
        assert settings.speed_multiplier == 1.0

    def test_from_api_dict(self):
        settings = PlayerSettings.from_dict({
            "dinoColor": "#FF5722",
            "backgroundTheme": "night",
            "soundEnabled": False,
            "difficultyPreference": "hard",
        })
        assert settings.dino_color == "#FF5722"
        assert settings.background_theme == "night"
        assert settings.sound_enabled is False
        assert settings.speed_multiplier == pytest.approx(1.3)

    def test_invalid_values_fall_back(self):
        settings = PlayerSettings.from_dict({
            "backgroundTheme": "underwater",
            "difficultyPreference": "impossible",
            "soundEnabled": "yes",
        })
        assert settings == PlayerSettings()

    @pytest.mark.parametrize("data", [None, [], "hard", 3])
    def test_non_mapping(self, data):
        assert PlayerSettings.from_dict(data) == PlayerSettings()

    def test_unknown_preference_warns(self, caplog):
        settings = PlayerSettings(difficulty_preference="turbo")
        assert settings.speed_multiplier == 1.0
        assert "turbo" in caplog.text

    def test_dict_round_trips(self):
        settings = PlayerSettings(background_theme="space", difficulty_preference="easy")
        assert PlayerSettings.from_dict(settings.to_dict()) == settings
        assert PlayerSettings.from_dict(settings.to_api_dict()) == settings
