"""
Pygame Renderer
===============

Draws GameSnapshots with pygame. Supports both display mode (human play)
and headless RGB output. Reads snapshots only; nothing flows back into the
simulation.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence, Tuple

try:
    import pygame
    PYGAME_AVAILABLE = True
except ImportError:
    PYGAME_AVAILABLE = False

import numpy as np

from dino_runner.runner_core.api_client import LeaderboardEntry
from dino_runner.runner_core.config_loader import (
    DEFAULT_DINO_COLOR,
    DEFAULT_THEME,
    GameConfig,
    PlayerSettings,
    get_config,
)
from dino_runner.runner_core.obstacle_catalog import SizeClass
from dino_runner.runner_core.session_state import GamePhase
from dino_runner.runner_core.state_snapshot import GameSnapshot

Color = Tuple[int, int, int]

# Background theme -> (sky, ground)
THEMES: Dict[str, Tuple[Color, Color]] = {
    "desert": ((135, 206, 235), (222, 184, 135)),
    "forest": ((152, 251, 152), (34, 139, 34)),
    "night": ((25, 25, 112), (47, 79, 79)),
    "rainbow": ((255, 105, 180), (255, 215, 0)),
    "space": ((0, 0, 0), (105, 105, 105)),
}

CACTUS_BODY: Color = (46, 125, 50)
CACTUS_DETAIL: Color = (27, 94, 32)

# Cactus arms per size class: (anchor, dx, dy, w, h). Anchor "L", "R" or "C"
# picks the left edge, right edge or centre of the body; dy is from the top.
CACTUS_ARMS: Dict[SizeClass, Tuple[Tuple[str, float, float, float, float], ...]] = {
    SizeClass.SMALL: (
        ("L", -3, 10, 6, 4),
        ("R", -3, 20, 6, 4),
    ),
    SizeClass.MEDIUM: (
        ("L", -4, 8, 8, 6),
        ("R", -4, 15, 8, 6),
        ("C", -2, 25, 4, 8),
    ),
    SizeClass.WIDE: (
        ("L", -5, 5, 10, 8),
        ("R", -5, 10, 10, 8),
        ("C", -3, 20, 6, 6),
    ),
}


def hex_to_rgb(value: str, default: str = DEFAULT_DINO_COLOR) -> Color:
    """Parse ``#RRGGBB``; falls back to ``default`` when malformed."""
    text = value.lstrip("#") if isinstance(value, str) else ""
    try:
        if len(text) != 6:
            raise ValueError(value)
        return (int(text[0:2], 16), int(text[2:4], 16), int(text[4:6], 16))
    except ValueError:
        text = default.lstrip("#")
        return (int(text[0:2], 16), int(text[2:4], 16), int(text[4:6], 16))


def darken(color: Color, percent: float) -> Color:
    """Subtract ``percent`` of full scale from each channel, clamped to [0, 255]."""
    amount = round(2.55 * percent)
    return tuple(max(0, min(255, c - amount)) for c in color)


class PygameRenderer:
    """
    Renderer for the runner using pygame.

    Supports:
    - Theme-coloured sky and ground
    - Actor in the player's colour with a running animation
    - Cactus obstacles with per-size-class arms
    - Score/high score HUD, waiting and game-over overlays
    - Optional leaderboard panel and transient banner
    - Screen display for human mode, RGB array output for headless use
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        settings: Optional[PlayerSettings] = None
    ):
        """
        Initialize renderer.

        Args:
            config: Game configuration.
            settings: Player settings (theme and colour).
        """
        if not PYGAME_AVAILABLE:
            raise ImportError("pygame is required for PygameRenderer")

        if config is None:
            config = get_config()

        self._config = config
        self.apply_settings(settings if settings is not None else PlayerSettings())

        if not pygame.get_init():
            pygame.init()

        # Display surface (created on demand)
        self._screen: Optional[pygame.Surface] = None
        self._screen_size: Optional[Tuple[int, int]] = None

        # Fonts
        pygame.font.init()
        self._font = pygame.font.Font(None, 24)
        self._font_large = pygame.font.Font(None, 40)
        self._font_small = pygame.font.Font(None, 18)

        self._text_color: Color = (40, 40, 40)
        self._leaderboard: List[LeaderboardEntry] = []
        self._banner_text: Optional[str] = None
        self._banner_frames = 0

    def apply_settings(self, settings: PlayerSettings) -> None:
        """Pick up a new theme and actor colour."""
        self._sky_color, self._ground_color = THEMES.get(
            settings.background_theme, THEMES[DEFAULT_THEME]
        )
        self._dino_color = hex_to_rgb(settings.dino_color)
        self._dino_detail = darken(self._dino_color, 20)

    def set_leaderboard(self, entries: Sequence[LeaderboardEntry]) -> None:
        """Replace the leaderboard panel contents."""
        self._leaderboard = list(entries)

    def show_banner(self, text: str, frames: int = 180) -> None:
        """Show ``text`` across the top for ``frames`` rendered frames."""
        self._banner_text = text
        self._banner_frames = frames

    def render(self, snapshot: GameSnapshot) -> np.ndarray:
        """
        Render to RGB array.

        Args:
            snapshot: State to draw.

        Returns:
            (height, width, 3) uint8 array at field resolution.
        """
        surface = pygame.Surface((int(snapshot.field_width), int(snapshot.field_height)))
        self._render_to_surface(surface, snapshot)
        array = pygame.surfarray.array3d(surface)
        return np.transpose(array, (1, 0, 2))

    def render_to_screen(self, snapshot: GameSnapshot) -> None:
        """
        Render to the pygame window (created or resized as needed).

        Args:
            snapshot: State to draw.
        """
        size = (int(snapshot.field_width), int(snapshot.field_height))
        if self._screen is None or self._screen_size != size:
            self._screen = pygame.display.set_mode(size)
            self._screen_size = size
            pygame.display.set_caption("Dino Runner")

        self._render_to_surface(self._screen, snapshot)

    def _render_to_surface(self, surface: "pygame.Surface", snapshot: GameSnapshot) -> None:
        """Render game state to a pygame surface."""
        width, height = surface.get_size()

        # Sky down to 75% of the field, ground below
        horizon = int(height * 0.75)
        surface.fill(self._sky_color)
        pygame.draw.rect(surface, self._ground_color, (0, horizon, width, height - horizon))
        ground_y = int(snapshot.ground_line_y)
        pygame.draw.line(surface, darken(self._ground_color, 25), (0, ground_y), (width, ground_y), 2)

        self._draw_obstacles(surface, snapshot)
        self._draw_actor(surface, snapshot)
        self._draw_hud(surface, snapshot)

        if snapshot.phase is GamePhase.WAITING:
            self._draw_instructions(surface)
        elif snapshot.phase is GamePhase.GAME_OVER:
            self._draw_game_over(surface, snapshot)

        if self._leaderboard:
            self._draw_leaderboard(surface)

        if self._banner_text and self._banner_frames > 0:
            self._draw_banner(surface)
            self._banner_frames -= 1

    def _draw_obstacles(self, surface: "pygame.Surface", snapshot: GameSnapshot) -> None:
        for x, y, w, h, size_class in snapshot.iter_obstacles():
            pygame.draw.rect(surface, CACTUS_BODY, (int(x), int(y), int(w), int(h)))
            for anchor, dx, dy, aw, ah in CACTUS_ARMS[size_class]:
                if anchor == "L":
                    ax = x + dx
                elif anchor == "R":
                    ax = x + w + dx
                else:
                    ax = x + w / 2 + dx
                pygame.draw.rect(surface, CACTUS_DETAIL, (int(ax), int(y + dy), int(aw), int(ah)))

    def _draw_actor(self, surface: "pygame.Surface", snapshot: GameSnapshot) -> None:
        x, y, w, h = (int(v) for v in snapshot.actor_box)
        pygame.draw.rect(surface, self._dino_color, (x, y, w, h))

        # Eye and mouth
        pygame.draw.rect(surface, self._dino_detail, (x + 25, y + 8, 4, 4))
        pygame.draw.rect(surface, self._dino_detail, (x + 30, y + 20, 8, 2))

        if snapshot.actor_airborne:
            return

        # Legs, alternating every 8 frames while running
        stride = 0
        if snapshot.phase is GamePhase.PLAYING:
            stride = 2 if (snapshot.frame // 8) % 2 == 0 else -2
        leg_y = y + h - 2
        pygame.draw.rect(surface, self._dino_color, (x + 10, leg_y + stride, 6, 8))
        pygame.draw.rect(surface, self._dino_color, (x + 24, leg_y - stride, 6, 8))

    def _draw_hud(self, surface: "pygame.Surface", snapshot: GameSnapshot) -> None:
        width = surface.get_width()
        score_text = self._font.render(f"Score: {snapshot.score}", True, self._text_color)
        surface.blit(score_text, (width - score_text.get_width() - 10, 8))

        high_text = self._font_small.render(f"High: {snapshot.high_score}", True, self._text_color)
        surface.blit(high_text, (width - high_text.get_width() - 10, 30))

        if snapshot.phase is GamePhase.PLAYING and snapshot.level > 0:
            level_text = self._font_small.render(
                f"Level {snapshot.level}  speed {snapshot.scroll_speed:.1f}", True, self._text_color
            )
            surface.blit(level_text, (10, 8))

    def _draw_centered(
        self,
        surface: "pygame.Surface",
        font: "pygame.font.Font",
        text: str,
        color: Color,
        center_y: int
    ) -> None:
        rendered = font.render(text, True, color)
        surface.blit(rendered, ((surface.get_width() - rendered.get_width()) // 2, center_y))

    def _draw_instructions(self, surface: "pygame.Surface") -> None:
        mid = surface.get_height() // 2
        self._draw_centered(surface, self._font_large, "Press SPACE or UP to jump!", self._text_color, mid - 40)
        self._draw_centered(surface, self._font, "Click anywhere to start", self._text_color, mid - 5)

    def _draw_game_over(self, surface: "pygame.Surface", snapshot: GameSnapshot) -> None:
        width, height = surface.get_size()
        overlay = pygame.Surface((width, height), pygame.SRCALPHA)
        overlay.fill((0, 0, 0, 204))
        surface.blit(overlay, (0, 0))

        mid = height // 2
        white = (255, 255, 255)
        self._draw_centered(surface, self._font_large, "GAME OVER", white, mid - 60)
        self._draw_centered(surface, self._font, f"Final Score: {snapshot.score}", white, mid - 20)

        if snapshot.new_high_score and snapshot.high_score > 0:
            self._draw_centered(surface, self._font, "NEW HIGH SCORE!", (255, 215, 0), mid + 5)
        elif snapshot.high_score > 0:
            self._draw_centered(
                surface, self._font, f"High Score: {snapshot.high_score}", (204, 204, 204), mid + 5
            )

        self._draw_centered(
            surface, self._font_small, "Click or press SPACE to restart", white, mid + 35
        )

    def _draw_leaderboard(self, surface: "pygame.Surface") -> None:
        x, y = 10, 28
        title = self._font_small.render("Top scores", True, self._text_color)
        surface.blit(title, (x, y))
        for entry in self._leaderboard[:5]:
            y += 14
            line = self._font_small.render(
                f"#{entry.rank} {entry.player_name[:12]} {entry.score:,}", True, self._text_color
            )
            surface.blit(line, (x, y))

    def _draw_banner(self, surface: "pygame.Surface") -> None:
        width = surface.get_width()
        text = self._font.render(self._banner_text, True, (255, 215, 0))
        box = pygame.Rect(0, 0, text.get_width() + 24, text.get_height() + 10)
        box.midtop = (width // 2, 6)
        pygame.draw.rect(surface, (60, 40, 0), box, border_radius=6)
        surface.blit(text, (box.x + 12, box.y + 5))
