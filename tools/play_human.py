"""
Human Play Mode
================

Play Dino Runner interactively in a pygame window.

Controls:
    - Space / Up / Click: Jump (also starts and restarts)
    - R: Restart immediately
    - ESC: Quit

Named players submit their scores to the backend and pull their saved
customization from it; without a name the game runs fully offline.

Usage:
    python -m tools.play_human [--player NAME] [--difficulty easy|normal|hard]
                               [--api-url URL] [--profile PATH] [--seed SEED]
"""

from __future__ import annotations

import argparse
import dataclasses
import logging
import queue
import sys
import threading
from pathlib import Path
from typing import Any, Optional, Tuple

try:
    import pygame
    PYGAME_AVAILABLE = True
except ImportError:
    PYGAME_AVAILABLE = False

from dino_runner.runner_core.api_client import RunnerApiClient
from dino_runner.runner_core.config_loader import (
    DIFFICULTY_MULTIPLIERS,
    GameConfig,
    PlayerSettings,
    load_config,
)
from dino_runner.runner_core.driver import FrameDriver
from dino_runner.runner_core.errors import (
    InvalidPlayerNameError,
    ScoringServiceError,
    SettingsError,
)
from dino_runner.runner_core.game import SessionController
from dino_runner.runner_core.profile_store import ProfileStore
from dino_runner.runner_core.render_pygame import PygameRenderer
from dino_runner.runner_core.reporting import (
    NullReporter,
    SessionReporter,
    SessionSummary,
    SubmissionResult,
)
from dino_runner.runner_core.session_state import GamePhase

logger = logging.getLogger("tools.play_human")

DEFAULT_PROFILE = Path.home() / ".dino_runner" / "profile.json"

JUMP_KEYS = (pygame.K_SPACE, pygame.K_UP) if PYGAME_AVAILABLE else ()


class HumanPlayer:
    """
    Interactive game loop: pygame events in, one tick per frame, snapshot
    out to the renderer. Backend traffic runs on background threads and
    reports back through a queue drained once per frame.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        profile: Optional[ProfileStore] = None,
        client: Optional[RunnerApiClient] = None,
        seed: Optional[int] = None,
        target_fps: int = 60
    ):
        if not PYGAME_AVAILABLE:
            raise ImportError("pygame required. Install: pip install pygame")

        if config is None:
            config = load_config()
        if profile is None:
            profile = ProfileStore()

        self._config = config
        self._profile = profile
        self._client = client
        self._target_fps = target_fps

        # Backend results -> main thread
        self._inbox: "queue.Queue[Tuple[str, Any]]" = queue.Queue()

        if client is not None and profile.player_name:
            self._reporter = SessionReporter(
                client, player_name=profile.player_name, on_result=self._on_submitted
            )
        else:
            self._reporter = NullReporter()

        self._controller = SessionController(
            config=config,
            settings=profile.settings,
            reporter=self._reporter,
            profile=profile,
            seed=seed
        )

        pygame.init()
        self._renderer = PygameRenderer(config, profile.settings)
        self._driver = FrameDriver(self._controller, on_frame=self._renderer.render_to_screen)
        self._clock = pygame.time.Clock()

        self._running = True
        self._last_phase = self._controller.phase

    def run(self) -> int:
        """Run the game loop. Returns the high score."""
        name = self._profile.player_name or "anonymous"
        print("=== Dino Runner ===")
        print(f"Player: {name}  High score: {self._profile.high_score}")
        print("Space/Up/Click to jump, R to restart, ESC to quit")
        print()

        self._refresh_leaderboard()

        try:
            while self._running:
                self._handle_events()
                self._drain_inbox()
                self._driver.step()
                self._report_phase_change()
                pygame.display.flip()
                self._clock.tick(self._target_fps)
        finally:
            self._reporter.close()
            pygame.quit()

        return self._profile.high_score

    def _handle_events(self) -> None:
        """Process pygame events."""
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self._running = False

            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    self._running = False
                elif event.key == pygame.K_r:
                    self._controller.restart()
                elif event.key in JUMP_KEYS:
                    self._driver.queue_jump()

            elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                self._driver.queue_jump()

    def _report_phase_change(self) -> None:
        phase = self._controller.phase
        if phase is self._last_phase:
            return
        self._last_phase = phase

        if phase is GamePhase.PLAYING:
            print("--- Run started ---")
        elif phase is GamePhase.GAME_OVER:
            summary = self._controller.last_summary
            print(f"\nGAME OVER - Score: {summary.score}, "
                  f"avoided: {summary.obstacles_avoided}, "
                  f"time: {summary.duration_seconds}s, "
                  f"peak speed: {summary.peak_speed:.1f}")
            if self._controller.state.new_high_score:
                print("NEW HIGH SCORE!")

    def _on_submitted(self, summary: SessionSummary, result: SubmissionResult) -> None:
        # Reporter worker thread: hand off to the main loop
        self._inbox.put(("submitted", (summary, result)))

    def _drain_inbox(self) -> None:
        while True:
            try:
                kind, payload = self._inbox.get_nowait()
            except queue.Empty:
                return

            if kind == "submitted":
                summary, result = payload
                print(f"Score {summary.score} is global rank #{result.global_rank}")
                if result.is_new_global_record:
                    self._renderer.show_banner("NEW GLOBAL RECORD!")
                self._refresh_leaderboard()
            elif kind == "leaderboard":
                self._renderer.set_leaderboard(payload)

    def _refresh_leaderboard(self) -> None:
        """Fetch the leaderboard in the background."""
        if self._client is None:
            return

        def fetch() -> None:
            try:
                entries = self._client.fetch_leaderboard(self._config.service.leaderboard_limit)
            except ScoringServiceError as e:
                logger.warning("Leaderboard unavailable: %s", e)
                return
            self._inbox.put(("leaderboard", entries))

        threading.Thread(target=fetch, name="leaderboard-fetch", daemon=True).start()


def resolve_settings(
    profile: ProfileStore,
    client: Optional[RunnerApiClient],
    difficulty: Optional[str]
) -> PlayerSettings:
    """
    Pick the settings for this run.

    Remote settings win over the local profile for named players; a
    ``--difficulty`` flag wins over both and is saved back.
    """
    settings = profile.settings
    name = profile.player_name

    if client is not None and name:
        try:
            settings = client.fetch_settings(name)
            logger.info("Loaded settings for %s from %s", name, client.base_url)
        except SettingsError as e:
            logger.warning("Using local settings for %s: %s", name, e)

    if difficulty is not None and difficulty != settings.difficulty_preference:
        settings = dataclasses.replace(settings, difficulty_preference=difficulty)
        if client is not None and name:
            try:
                client.save_settings(name, settings)
            except SettingsError as e:
                logger.warning("Could not save settings for %s: %s", name, e)

    profile.set_settings(settings)
    return settings


def main(argv=None):
    parser = argparse.ArgumentParser(description="Play Dino Runner interactively")
    parser.add_argument("--player", type=str, default=None, help="Player name (1-20 characters)")
    parser.add_argument(
        "--difficulty",
        choices=sorted(DIFFICULTY_MULTIPLIERS),
        default=None,
        help="Difficulty preference (saved to the profile)"
    )
    parser.add_argument("--api-url", type=str, default=None, help="Backend base URL")
    parser.add_argument("--offline", action="store_true", help="Do not contact the backend")
    parser.add_argument(
        "--profile",
        type=str,
        default=str(DEFAULT_PROFILE),
        help=f"Local profile file (default: {DEFAULT_PROFILE})"
    )
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument("--fps", type=int, default=60, help="Target FPS")
    parser.add_argument("--log-level", default="INFO", help="Logging level")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )

    config = load_config()
    profile = ProfileStore(args.profile)

    if args.player is not None:
        try:
            profile.set_player_name(args.player)
        except InvalidPlayerNameError as e:
            print(f"Error: {e}")
            return 1

    client = None
    if not args.offline:
        client = RunnerApiClient(
            args.api_url or config.service.base_url,
            timeout=config.service.timeout_seconds
        )

    resolve_settings(profile, client, args.difficulty)

    try:
        player = HumanPlayer(
            config=config,
            profile=profile,
            client=client,
            seed=args.seed,
            target_fps=args.fps
        )
        high_score = player.run()
        print(f"\nHigh Score: {high_score}")
        return 0
    except ImportError as e:
        print(f"Error: {e}")
        return 1
    finally:
        if client is not None:
            client.close()


if __name__ == "__main__":
    sys.exit(main())
