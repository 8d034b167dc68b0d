"""
Configuration Loader
====================

Loads and validates game_config.yaml, providing typed access to all parameters,
and resolves per-player settings (theme, colour, difficulty preference).
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml

from dino_runner.runner_core.errors import ConfigError

logger = logging.getLogger(__name__)

# Difficulty preference -> multiplier applied to the base scroll speed
DIFFICULTY_MULTIPLIERS: Dict[str, float] = {
    "easy": 0.8,
    "normal": 1.0,
    "hard": 1.3,
}
DEFAULT_DIFFICULTY = "normal"

BACKGROUND_THEMES: Tuple[str, ...] = ("desert", "forest", "night", "rainbow", "space")
DEFAULT_THEME = "desert"
DEFAULT_DINO_COLOR = "#4CAF50"

SIZE_CLASS_NAMES: Tuple[str, ...] = ("small", "medium", "wide")


@dataclass(frozen=True)
class FieldConfig:
    """Visible playfield geometry."""
    width: int               # Obstacles spawn at this x
    height: int
    ground_line_y: float     # Obstacle bases rest on this line
    top_y: float             # Highest y the actor may reach


@dataclass(frozen=True)
class ActorConfig:
    """Player-controlled actor geometry and kinematics."""
    x: float
    width: float
    height: float
    ground_y: float          # Actor top edge when standing
    gravity: float
    jump_impulse: float      # Negative: up is -y


@dataclass(frozen=True)
class SizeClassConfig:
    """Geometry of one obstacle size class."""
    name: str
    width: float
    height: float


@dataclass(frozen=True)
class ObstacleConfig:
    """Obstacle size classes, in catalog order."""
    size_classes: Tuple[SizeClassConfig, ...]


@dataclass(frozen=True)
class DifficultyConfig:
    """Difficulty escalation parameters."""
    base_speed: float
    points_per_level: int
    speed_per_level: float
    base_spawn_interval: int
    min_spawn_interval: int
    interval_step_per_level: int


@dataclass(frozen=True)
class ScoringConfig:
    """Score accumulation parameters."""
    points_per_tick: float
    avoid_bonus: float


@dataclass(frozen=True)
class SnapshotConfig:
    """Rendering snapshot parameters."""
    max_obstacles: int


@dataclass(frozen=True)
class ServiceConfig:
    """Backend service defaults."""
    base_url: str
    timeout_seconds: float
    leaderboard_limit: int


@dataclass(frozen=True)
class GameConfig:
    """
    Complete game configuration loaded from YAML.

    All values are immutable to prevent accidental modification during runtime.
    """
    field: FieldConfig
    actor: ActorConfig
    obstacles: ObstacleConfig
    difficulty: DifficultyConfig
    scoring: ScoringConfig
    snapshot: SnapshotConfig
    service: ServiceConfig

    @property
    def num_size_classes(self) -> int:
        """Number of obstacle size classes."""
        return len(self.obstacles.size_classes)

    def get_size_class(self, name: str) -> SizeClassConfig:
        """Get size class config by name."""
        for size_class in self.obstacles.size_classes:
            if size_class.name == name:
                return size_class
        raise ValueError(f"Unknown size class: {name}")


@dataclass(frozen=True)
class PlayerSettings:
    """
    Per-player customisation.

    Only ``difficulty_preference`` reaches the simulation (through
    ``speed_multiplier``); the rest is presentation.
    """
    dino_color: str = DEFAULT_DINO_COLOR
    background_theme: str = DEFAULT_THEME
    sound_enabled: bool = True
    difficulty_preference: str = DEFAULT_DIFFICULTY

    @property
    def speed_multiplier(self) -> float:
        """Base speed multiplier, falling back to 1.0 for unknown preferences."""
        multiplier = DIFFICULTY_MULTIPLIERS.get(self.difficulty_preference)
        if multiplier is None:
            logger.warning(
                "Unknown difficulty preference %r, using %s",
                self.difficulty_preference, DEFAULT_DIFFICULTY
            )
            multiplier = DIFFICULTY_MULTIPLIERS[DEFAULT_DIFFICULTY]
        return multiplier

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "PlayerSettings":
        """
        Build settings from a (possibly partial) dict.

        Accepts both the API's camelCase keys and snake_case keys. Missing or
        invalid values fall back to defaults; this never raises.

        Args:
            data: Raw settings mapping, or None.

        Returns:
            PlayerSettings instance.
        """
        if not isinstance(data, dict):
            return cls()

        def pick(snake: str, camel: str, default: Any) -> Any:
            if snake in data:
                return data[snake]
            return data.get(camel, default)

        color = pick("dino_color", "dinoColor", DEFAULT_DINO_COLOR)
        if not isinstance(color, str) or not color:
            color = DEFAULT_DINO_COLOR

        theme = pick("background_theme", "backgroundTheme", DEFAULT_THEME)
        if theme not in BACKGROUND_THEMES:
            logger.warning("Unknown background theme %r, using %s", theme, DEFAULT_THEME)
            theme = DEFAULT_THEME

        sound = pick("sound_enabled", "soundEnabled", True)
        if not isinstance(sound, bool):
            sound = True

        difficulty = pick("difficulty_preference", "difficultyPreference", DEFAULT_DIFFICULTY)
        if difficulty not in DIFFICULTY_MULTIPLIERS:
            logger.warning(
                "Unknown difficulty preference %r, using %s", difficulty, DEFAULT_DIFFICULTY
            )
            difficulty = DEFAULT_DIFFICULTY

        return cls(
            dino_color=color,
            background_theme=theme,
            sound_enabled=sound,
            difficulty_preference=difficulty
        )

    def to_dict(self) -> Dict[str, Any]:
        """Snake_case dict for local persistence."""
        return asdict(self)

    def to_api_dict(self) -> Dict[str, Any]:
        """CamelCase dict matching the customization API."""
        return {
            "dinoColor": self.dino_color,
            "backgroundTheme": self.background_theme,
            "soundEnabled": self.sound_enabled,
            "difficultyPreference": self.difficulty_preference,
        }


def base_speed_for(config: GameConfig, settings: Optional[PlayerSettings] = None) -> float:
    """
    Difficulty-scaled initial scroll speed.

    Args:
        config: Game configuration.
        settings: Player settings. Defaults (multiplier 1.0) if None.

    Returns:
        ``config.difficulty.base_speed * settings.speed_multiplier``.
    """
    if settings is None:
        settings = PlayerSettings()
    return config.difficulty.base_speed * settings.speed_multiplier


def _parse_size_class(data: dict) -> SizeClassConfig:
    """Parse a single size class from YAML."""
    return SizeClassConfig(
        name=str(data["name"]),
        width=float(data["width"]),
        height=float(data["height"])
    )


def _validate_config(config: GameConfig) -> None:
    """Validate configuration consistency."""
    field = config.field
    if field.width <= 0 or field.height <= 0:
        raise ConfigError(f"Field size must be positive, got {field.width}x{field.height}")

    actor = config.actor
    if actor.width <= 0 or actor.height <= 0:
        raise ConfigError(f"Actor box must be positive, got {actor.width}x{actor.height}")
    if actor.gravity <= 0:
        raise ConfigError(f"gravity must be positive, got {actor.gravity}")
    if actor.jump_impulse >= 0:
        raise ConfigError(f"jump_impulse must be negative (upwards), got {actor.jump_impulse}")
    if not field.top_y <= actor.ground_y:
        raise ConfigError(
            f"actor.ground_y ({actor.ground_y}) must not be above field.top_y ({field.top_y})"
        )

    names = tuple(s.name for s in config.obstacles.size_classes)
    if names != SIZE_CLASS_NAMES:
        raise ConfigError(f"size_classes must be {list(SIZE_CLASS_NAMES)} in order, got {list(names)}")

    for size_class in config.obstacles.size_classes:
        if size_class.width <= 0 or size_class.height <= 0:
            raise ConfigError(f"Size class {size_class.name} must have a positive box")
        if size_class.height > field.ground_line_y - field.top_y:
            raise ConfigError(f"Size class {size_class.name} does not fit above the ground line")

    diff = config.difficulty
    if diff.base_speed <= 0:
        raise ConfigError(f"base_speed must be positive, got {diff.base_speed}")
    if diff.points_per_level <= 0:
        raise ConfigError(f"points_per_level must be positive, got {diff.points_per_level}")
    if diff.min_spawn_interval <= 0:
        raise ConfigError(f"min_spawn_interval must be positive, got {diff.min_spawn_interval}")
    if diff.min_spawn_interval > diff.base_spawn_interval:
        raise ConfigError(
            f"min_spawn_interval ({diff.min_spawn_interval}) exceeds "
            f"base_spawn_interval ({diff.base_spawn_interval})"
        )

    if config.scoring.points_per_tick < 0 or config.scoring.avoid_bonus < 0:
        raise ConfigError("Scoring increments must not be negative")

    if config.snapshot.max_obstacles <= 0:
        raise ConfigError(f"max_obstacles must be positive, got {config.snapshot.max_obstacles}")


def load_config(config_path: Optional[str] = None) -> GameConfig:
    """
    Load and validate game configuration from YAML.

    Args:
        config_path: Path to game_config.yaml. If None, uses default location.

    Returns:
        Validated GameConfig instance.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        ConfigError: If config validation fails.
    """
    if config_path is None:
        config_path = os.path.join(
            os.path.dirname(os.path.dirname(__file__)),
            "game_config.yaml"
        )

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "r") as f:
        raw = yaml.safe_load(f)

    if not isinstance(raw, dict):
        raise ConfigError(f"Config root must be a mapping: {config_path}")

    try:
        field_data = raw["field"]
        field = FieldConfig(
            width=int(field_data["width"]),
            height=int(field_data["height"]),
            ground_line_y=float(field_data["ground_line_y"]),
            top_y=float(field_data.get("top_y", 0.0))
        )

        actor_data = raw["actor"]
        actor = ActorConfig(
            x=float(actor_data["x"]),
            width=float(actor_data["width"]),
            height=float(actor_data["height"]),
            ground_y=float(actor_data["ground_y"]),
            gravity=float(actor_data["gravity"]),
            jump_impulse=float(actor_data["jump_impulse"])
        )

        obstacles = ObstacleConfig(
            size_classes=tuple(
                _parse_size_class(s) for s in raw["obstacles"]["size_classes"]
            )
        )

        diff_data = raw["difficulty"]
        difficulty = DifficultyConfig(
            base_speed=float(diff_data["base_speed"]),
            points_per_level=int(diff_data.get("points_per_level", 200)),
            speed_per_level=float(diff_data.get("speed_per_level", 0.5)),
            base_spawn_interval=int(diff_data["base_spawn_interval"]),
            min_spawn_interval=int(diff_data["min_spawn_interval"]),
            interval_step_per_level=int(diff_data.get("interval_step_per_level", 10))
        )

        scoring_data = raw["scoring"]
        scoring = ScoringConfig(
            points_per_tick=float(scoring_data["points_per_tick"]),
            avoid_bonus=float(scoring_data["avoid_bonus"])
        )

        snapshot_data = raw.get("snapshot", {})
        snapshot = SnapshotConfig(
            max_obstacles=int(snapshot_data.get("max_obstacles", 32))
        )

        service_data = raw.get("service", {})
        service = ServiceConfig(
            base_url=str(service_data.get("base_url", "http://localhost:8000")),
            timeout_seconds=float(service_data.get("timeout_seconds", 2.0)),
            leaderboard_limit=int(service_data.get("leaderboard_limit", 5))
        )
    except (KeyError, TypeError, ValueError) as e:
        raise ConfigError(f"Invalid config {config_path}: {e!r}") from e

    config = GameConfig(
        field=field,
        actor=actor,
        obstacles=obstacles,
        difficulty=difficulty,
        scoring=scoring,
        snapshot=snapshot,
        service=service
    )

    _validate_config(config)
    return config


# Module-level singleton for convenience
_cached_config: Optional[GameConfig] = None


def get_config() -> GameConfig:
    """Get the cached game configuration, loading if necessary."""
    global _cached_config
    if _cached_config is None:
        _cached_config = load_config()
    return _cached_config


def reload_config(config_path: Optional[str] = None) -> GameConfig:
    """Reload the configuration (useful for testing)."""
    global _cached_config
    _cached_config = load_config(config_path)
    return _cached_config
