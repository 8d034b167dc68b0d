"""
Profile Store
=============

Local, per-machine player profile: name, settings and personal high score.
Backed by a small JSON file, or kept in memory when no path is given.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

from dino_runner.runner_core.config_loader import PlayerSettings
from dino_runner.runner_core.errors import InvalidPlayerNameError

logger = logging.getLogger(__name__)

MAX_PLAYER_NAME_LENGTH = 20


def validate_player_name(name: Optional[str]) -> str:
    """
    Normalise and validate a player name.

    Args:
        name: Raw name as typed.

    Returns:
        The stripped name.

    Raises:
        InvalidPlayerNameError: If empty or longer than 20 characters.
    """
    stripped = (name or "").strip()
    if not stripped:
        raise InvalidPlayerNameError("Please enter a name")
    if len(stripped) > MAX_PLAYER_NAME_LENGTH:
        raise InvalidPlayerNameError(
            f"Please enter a valid name (1-{MAX_PLAYER_NAME_LENGTH} characters)"
        )
    return stripped


class ProfileStore:
    """
    Player name, settings and high score for this machine.

    Writes through to disk on every change when a path is set.
    """

    def __init__(
        self,
        path: Optional[Union[str, Path]] = None,
        player_name: Optional[str] = None,
        high_score: int = 0
    ):
        """
        Args:
            path: JSON file to load from and save to. In-memory if None.
            player_name: Initial player name (overridden by a stored one).
            high_score: Initial high score (overridden by a stored one).
        """
        self._path = Path(path) if path is not None else None
        self.player_name: Optional[str] = (
            validate_player_name(player_name) if player_name else None
        )
        self.settings = PlayerSettings()
        self._high_score = max(0, int(high_score))
        if self._path is not None:
            self.load()

    @property
    def path(self) -> Optional[Path]:
        return self._path

    @property
    def high_score(self) -> int:
        return self._high_score

    def load(self) -> None:
        """Load from disk. Missing or corrupt files leave defaults in place."""
        if self._path is None or not self._path.exists():
            return
        try:
            with open(self._path, "r") as f:
                raw = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable profile %s: %s", self._path, e)
            return
        if not isinstance(raw, dict):
            logger.warning("Ignoring malformed profile %s", self._path)
            return

        name = raw.get("player_name")
        if isinstance(name, str) and name:
            try:
                self.player_name = validate_player_name(name)
            except InvalidPlayerNameError:
                logger.warning("Ignoring invalid stored player name %r", name)

        self.settings = PlayerSettings.from_dict(raw.get("settings"))

        try:
            self._high_score = max(0, int(raw.get("high_score", 0)))
        except (TypeError, ValueError):
            self._high_score = 0

    def save(self) -> None:
        """Write to disk (no-op for in-memory stores)."""
        if self._path is None:
            return
        self._path.parent.mkdir(parents=True, exist_ok=True)
        with open(self._path, "w") as f:
            json.dump(self.to_dict(), f, indent=2)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "player_name": self.player_name,
            "settings": self.settings.to_dict(),
            "high_score": self._high_score,
        }

    def record_score(self, score: int) -> bool:
        """
        Fold a finished session's floored score into the high score.

        Returns:
            True if ``score`` is a new high score.
        """
        if score > self._high_score:
            self._high_score = score
            try:
                self.save()
            except OSError as e:
                logger.warning("Could not save profile %s: %s", self._path, e)
            logger.info("New high score: %d", score)
            return True
        return False

    def set_player_name(self, name: str) -> str:
        """Validate and store the player name. Returns the stored name."""
        self.player_name = validate_player_name(name)
        self.save()
        return self.player_name

    def set_settings(self, settings: PlayerSettings) -> None:
        self.settings = settings
        self.save()

    def reset(self) -> None:
        """Forget the player name, settings and high score."""
        self.player_name = None
        self.settings = PlayerSettings()
        self._high_score = 0
        if self._path is not None and self._path.exists():
            self._path.unlink()
