"""
Session Reporting
=================

End-of-session summaries and the fire-and-forget path that hands them to the
remote scoring service. Submission runs on a background worker thread so the
tick loop never waits for the network, and its outcome never feeds back into
game state.
"""

from __future__ import annotations

import logging
import queue
import threading
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Protocol, Tuple, Union

from dino_runner.runner_core.errors import ScoringServiceError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionSummary:
    """What the scoring service learns about a finished session."""
    score: int
    obstacles_avoided: int
    duration_seconds: int
    peak_speed: float

    def to_payload(self, player_name: str) -> Dict[str, Union[str, int, float]]:
        """JSON body for the scores endpoint."""
        return {
            "playerName": player_name,
            "score": self.score,
            "obstaclesAvoided": self.obstacles_avoided,
            "gameDuration": self.duration_seconds,
            "maxSpeed": self.peak_speed,
        }


@dataclass(frozen=True)
class SubmissionResult:
    """Scoring service response to a submission."""
    accepted: bool
    global_rank: int
    is_new_global_record: bool


class ScoringService(Protocol):
    """
    Remote scoring service contract.

    Implementations may block; callers go through SessionReporter, which
    keeps them off the tick loop.
    """

    def submit_session(
        self,
        player_id: Optional[str],
        score: int,
        obstacles_avoided: int,
        duration_seconds: int,
        peak_speed: float
    ) -> SubmissionResult:
        """
        Record a finished session.

        Raises:
            ScoringServiceError: On any transport or protocol failure.
        """
        ...


ResultCallback = Callable[[SessionSummary, SubmissionResult], None]


class NullReporter:
    """Reporter that keeps summaries in memory and submits nothing."""

    def __init__(self) -> None:
        self.summaries: List[SessionSummary] = []

    def report(self, summary: SessionSummary) -> None:
        self.summaries.append(summary)

    def flush(self, timeout: Optional[float] = None) -> bool:
        return True

    def close(self) -> None:
        pass


class SessionReporter:
    """
    Fire-and-forget submission of session summaries.

    ``report()`` returns immediately. A daemon worker makes exactly one
    submission attempt per summary; failures are logged and dropped.
    Sessions without a player name are never submitted.
    """

    def __init__(
        self,
        service: ScoringService,
        player_name: Optional[str] = None,
        on_result: Optional[ResultCallback] = None
    ):
        """
        Args:
            service: Scoring service to submit to.
            player_name: Player to submit as. None means anonymous.
            on_result: Called from the worker thread after a successful
                submission.
        """
        self._service = service
        self.player_name = player_name
        self._on_result = on_result

        self._queue: "queue.Queue[Optional[Tuple[str, SessionSummary]]]" = queue.Queue()
        self._thread: Optional[threading.Thread] = None
        self._lock = threading.Lock()
        self._pending = 0
        self._idle = threading.Event()
        self._idle.set()
        self._closed = False

        self.submitted = 0
        self.failed = 0
        self.skipped = 0
        self.last_result: Optional[SubmissionResult] = None

    def report(self, summary: SessionSummary) -> None:
        """
        Queue a summary for submission. Never blocks, never raises.

        Args:
            summary: Finished session summary.
        """
        player_name = self.player_name
        if not player_name:
            self.skipped += 1
            logger.debug("Anonymous session (score %d), not submitting", summary.score)
            return
        with self._lock:
            if self._closed:
                self.skipped += 1
                logger.warning(
                    "Reporter closed, dropping session summary (score %d)", summary.score
                )
                return
            self._pending += 1
            self._idle.clear()
            self._ensure_worker()
            # Name is fixed at report time
            self._queue.put_nowait((player_name, summary))

    def flush(self, timeout: Optional[float] = None) -> bool:
        """
        Wait for queued submissions to finish.

        Returns:
            True if the queue drained within ``timeout``.
        """
        return self._idle.wait(timeout)

    def close(self, timeout: float = 2.0) -> None:
        """Stop the worker after it drains the queue. Later reports are dropped."""
        with self._lock:
            self._closed = True
            thread = self._thread
            if thread is not None:
                self._queue.put_nowait(None)
        if thread is not None:
            thread.join(timeout=timeout)

    def _ensure_worker(self) -> None:
        if self._thread is None or not self._thread.is_alive():
            self._thread = threading.Thread(
                target=self._run_loop,
                name="session-reporter",
                daemon=True
            )
            self._thread.start()

    def _run_loop(self) -> None:
        """Worker loop (runs in background thread)."""
        while True:
            item = self._queue.get()
            if item is None:
                break
            player_name, summary = item
            try:
                self._submit(player_name, summary)
            finally:
                with self._lock:
                    self._pending -= 1
                    if self._pending == 0:
                        self._idle.set()

    def _submit(self, player_name: str, summary: SessionSummary) -> None:
        try:
            result = self._service.submit_session(
                player_name,
                summary.score,
                summary.obstacles_avoided,
                summary.duration_seconds,
                summary.peak_speed
            )
        except ScoringServiceError as e:
            self.failed += 1
            logger.warning("Failed to submit score %d for %s: %s", summary.score, player_name, e)
            return
        except Exception:
            # Worker must survive anything the service throws
            self.failed += 1
            logger.exception("Unexpected error submitting score %d", summary.score)
            return

        self.submitted += 1
        self.last_result = result
        logger.info(
            "Score %d submitted for %s, global rank #%d",
            summary.score, player_name, result.global_rank
        )
        if result.is_new_global_record:
            logger.info("New global record: %d by %s", summary.score, player_name)

        if self._on_result is not None:
            try:
                self._on_result(summary, result)
            except Exception:
                logger.exception("Submission result callback failed")
