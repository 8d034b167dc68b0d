"""
Backend API Client
==================

HTTP client for the leaderboard and customization backend. Implements the
ScoringService contract used by SessionReporter.

Endpoints:
    POST /api/scores                    submit a finished session
    GET  /api/leaderboard?limit=N       top N scores
    GET  /api/customization/{player}    player settings
    POST /api/customization             save player settings
    GET  /api/health                    liveness
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import requests

from dino_runner.runner_core.config_loader import PlayerSettings
from dino_runner.runner_core.errors import ScoringServiceError, SettingsError
from dino_runner.runner_core.reporting import ScoringService, SessionSummary, SubmissionResult


@dataclass(frozen=True)
class LeaderboardEntry:
    """One row of the global leaderboard."""
    rank: int
    player_name: str
    score: int
    obstacles_avoided: int = 0


class RunnerApiClient(ScoringService):
    """
    requests-based client for the game backend.

    Every failure surfaces as ScoringServiceError (scores, leaderboard,
    health) or SettingsError (customization).
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 2.0,
        session: Optional[requests.Session] = None
    ):
        """
        Args:
            base_url: Backend root, e.g. ``http://localhost:8000``.
            timeout: Per-request timeout in seconds.
            session: Shared requests session. A new one if None.
        """
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._session = session if session is not None else requests.Session()

    @property
    def base_url(self) -> str:
        return self._base_url

    def close(self) -> None:
        self._session.close()

    def _url(self, path: str) -> str:
        return f"{self._base_url}{path}"

    def _request_json(
        self,
        method: str,
        path: str,
        error_cls: type,
        **kwargs: Any
    ) -> Dict[str, Any]:
        """Issue a request and return the decoded JSON object body."""
        try:
            response = self._session.request(
                method, self._url(path), timeout=self._timeout, **kwargs
            )
            response.raise_for_status()
            data = response.json()
        except requests.RequestException as e:
            raise error_cls(f"{method} {path} failed: {e}") from e
        except ValueError as e:
            raise error_cls(f"{method} {path} returned invalid JSON") from e

        if not isinstance(data, dict):
            raise error_cls(f"{method} {path} returned {type(data).__name__}, expected object")
        if data.get("success") is False:
            raise error_cls(f"{method} {path} rejected: {data.get('error', 'unknown error')}")
        return data

    def submit_session(
        self,
        player_id: Optional[str],
        score: int,
        obstacles_avoided: int,
        duration_seconds: int,
        peak_speed: float
    ) -> SubmissionResult:
        """
        Submit a finished session.

        Args:
            player_id: Player name. Required by the backend.
            score: Floored session score.
            obstacles_avoided: Obstacles retired during the session.
            duration_seconds: Whole seconds from start to game over.
            peak_speed: Highest scroll speed reached.

        Returns:
            SubmissionResult with the global rank.

        Raises:
            ScoringServiceError: On missing player, transport error, non-2xx
                status or malformed response.
        """
        if not player_id:
            raise ScoringServiceError("Anonymous sessions cannot be submitted")

        data = self._request_json(
            "POST",
            "/api/scores",
            ScoringServiceError,
            json=SessionSummary(
                score=int(score),
                obstacles_avoided=int(obstacles_avoided),
                duration_seconds=int(duration_seconds),
                peak_speed=float(peak_speed)
            ).to_payload(player_id)
        )

        try:
            rank = int(data["globalRank"])
        except (KeyError, TypeError, ValueError) as e:
            raise ScoringServiceError(f"Malformed submission response: {data!r}") from e
        if rank < 1:
            raise ScoringServiceError(f"Invalid global rank {rank}")

        return SubmissionResult(
            accepted=bool(data.get("success", True)),
            global_rank=rank,
            is_new_global_record=bool(data.get("isNewRecord", rank == 1))
        )

    def fetch_leaderboard(self, limit: int = 5) -> List[LeaderboardEntry]:
        """
        Fetch the top ``limit`` scores.

        Raises:
            ScoringServiceError: On any failure.
        """
        data = self._request_json(
            "GET", "/api/leaderboard", ScoringServiceError, params={"limit": int(limit)}
        )
        rows = data.get("leaderboard") or []
        entries = []
        try:
            for index, row in enumerate(rows):
                entries.append(LeaderboardEntry(
                    rank=int(row.get("rank") or index + 1),
                    player_name=str(row["playerName"]),
                    score=int(row["score"]),
                    obstacles_avoided=int(row.get("obstaclesAvoided") or 0)
                ))
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise ScoringServiceError(f"Malformed leaderboard row: {e!r}") from e
        return entries

    def fetch_settings(self, player_name: str) -> PlayerSettings:
        """
        Fetch a player's customization settings.

        Raises:
            SettingsError: On any failure.
        """
        data = self._request_json(
            "GET", f"/api/customization/{quote(player_name, safe='')}", SettingsError
        )
        return PlayerSettings.from_dict(data.get("settings"))

    def save_settings(self, player_name: str, settings: PlayerSettings) -> None:
        """
        Save a player's customization settings.

        Raises:
            SettingsError: On any failure.
        """
        body = {"playerName": player_name}
        body.update(settings.to_api_dict())
        self._request_json("POST", "/api/customization", SettingsError, json=body)

    def health(self) -> Dict[str, Any]:
        """Backend health check payload."""
        return self._request_json("GET", "/api/health", ScoringServiceError)
