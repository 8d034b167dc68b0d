"""
Runner Core - The simulation and its collaborators.

Main exports:
- SessionController: Single-session game simulation (tick + request_jump)
- GameSnapshot: Read-only per-tick state for presentation
- GameConfig / PlayerSettings: Configuration from game_config.yaml and the player
- SessionReporter: Fire-and-forget submission to the scoring service
- RunnerApiClient: HTTP client for the leaderboard/customization backend
- FrameDriver / Autopilot: Host-side tick driver and a scripted player
"""

from dino_runner.runner_core.config_loader import (
    GameConfig,
    PlayerSettings,
    load_config,
    get_config,
)
from dino_runner.runner_core.obstacle_catalog import SizeClass, ObstacleCatalog
from dino_runner.runner_core.session_state import GamePhase, SessionState
from dino_runner.runner_core.state_snapshot import GameSnapshot
from dino_runner.runner_core.game import SessionController, TickResult
from dino_runner.runner_core.reporting import (
    NullReporter,
    ScoringService,
    SessionReporter,
    SessionSummary,
    SubmissionResult,
)
from dino_runner.runner_core.api_client import RunnerApiClient, LeaderboardEntry
from dino_runner.runner_core.profile_store import ProfileStore, validate_player_name
from dino_runner.runner_core.driver import FrameDriver, RunResult
from dino_runner.runner_core.autopilot import Autopilot

__all__ = [
    "GameConfig",
    "PlayerSettings",
    "load_config",
    "get_config",
    "SizeClass",
    "ObstacleCatalog",
    "GamePhase",
    "SessionState",
    "GameSnapshot",
    "SessionController",
    "TickResult",
    "NullReporter",
    "ScoringService",
    "SessionReporter",
    "SessionSummary",
    "SubmissionResult",
    "RunnerApiClient",
    "LeaderboardEntry",
    "ProfileStore",
    "validate_player_name",
    "FrameDriver",
    "RunResult",
    "Autopilot",
]
