"""
Session State
=============

Explicit per-session state owned by one SessionController.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from dino_runner.runner_core.reporting import SessionSummary


class GamePhase(str, Enum):
    """Session state machine: WAITING -> PLAYING -> GAME_OVER -> WAITING."""
    WAITING = "waiting"
    PLAYING = "playing"
    GAME_OVER = "game_over"


@dataclass
class SessionState:
    """
    Bookkeeping for the current play attempt.

    Score, actor and obstacles live in their own components; this holds what
    ties them into a session.
    """
    phase: GamePhase = GamePhase.WAITING
    frame: int = 0                          # Playing ticks this session
    started_at: float = 0.0                 # Clock reading at WAITING -> PLAYING
    ended_at: Optional[float] = None        # Clock reading at PLAYING -> GAME_OVER
    summary: Optional[SessionSummary] = None
    new_high_score: bool = False
    sessions_played: int = 0

    @property
    def is_playing(self) -> bool:
        return self.phase is GamePhase.PLAYING

    @property
    def is_over(self) -> bool:
        return self.phase is GamePhase.GAME_OVER
