"""In-memory progress store for batch verification sessions."""

import asyncio
import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from typing import Any

from organic_verifier.config.constants import SessionStatus
from organic_verifier.config.settings import Settings
from organic_verifier.services.verification.errors import SessionNotInitialized, SessionStateError
from organic_verifier.services.verification.models import VerificationResult

logger = logging.getLogger(__name__)


@dataclass
class VerificationSession:
    """Progress record for one submitted batch."""

    total: int
    completed: int = 0
    current: str = ""
    results: list[VerificationResult] = field(default_factory=list)
    status: SessionStatus = SessionStatus.PENDING
    error: str | None = None
    created_at: float = 0.0
    expires_at: float | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to the polling payload."""
        data: dict[str, Any] = {
            "total": self.total,
            "completed": self.completed,
            "current": self.current,
            "results": [r.model_dump(mode="json") for r in self.results],
            "status": self.status.value,
        }
        if self.error is not None:
            data["error"] = self.error
        return data


class ProgressStore:
    """Thread-safe mapping of session id to session record with expiry.

    Sessions in a terminal state expire after a retention window; expired
    sessions read as absent and are dropped on access or by
    ``purge_expired``.
    """

    def __init__(
        self,
        completed_retention: float = 300.0,
        error_retention: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._completed_retention = completed_retention
        self._error_retention = error_retention
        self._clock = clock
        self._sessions: dict[str, VerificationSession] = {}
        self._lock = threading.Lock()

    @classmethod
    def from_settings(cls, settings: Settings) -> "ProgressStore":
        return cls(
            completed_retention=settings.session_completed_retention,
            error_retention=settings.session_error_retention,
        )

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def _live(self, session_id: str) -> VerificationSession | None:
        session = self._sessions.get(session_id)
        if session is None:
            return None
        if session.expires_at is not None and self._clock() >= session.expires_at:
            del self._sessions[session_id]
            logger.debug("Session %s expired", session_id)
            return None
        return session

    def _writable(self, session_id: str) -> VerificationSession:
        session = self._live(session_id)
        if session is None:
            raise SessionNotInitialized(session_id)
        if session.status.is_terminal:
            raise SessionStateError(
                f"Session {session_id} is already {session.status.value}"
            )
        return session

    def create(self, session_id: str, total: int) -> VerificationSession:
        """Insert a pending session."""
        with self._lock:
            if self._live(session_id) is not None:
                raise SessionStateError(f"Session {session_id} already exists")
            session = VerificationSession(total=total, created_at=self._clock())
            self._sessions[session_id] = session
            return replace(session, results=list(session.results))

    def get(self, session_id: str) -> VerificationSession | None:
        """Snapshot of a session, or None if unknown or expired."""
        with self._lock:
            session = self._live(session_id)
            if session is None:
                return None
            return replace(session, results=list(session.results))

    def exists(self, session_id: str) -> bool:
        with self._lock:
            return self._live(session_id) is not None

    def mark_processing(self, session_id: str) -> None:
        with self._lock:
            session = self._writable(session_id)
            if session.status is not SessionStatus.PENDING:
                raise SessionStateError(
                    f"Session {session_id} cannot start processing from {session.status.value}"
                )
            session.status = SessionStatus.PROCESSING

    def set_current(self, session_id: str, operation_name: str) -> None:
        with self._lock:
            self._writable(session_id).current = operation_name

    def record_result(self, session_id: str, result: VerificationResult) -> None:
        """Append a finished result and bump the completed counter."""
        with self._lock:
            session = self._writable(session_id)
            if session.completed >= session.total:
                raise SessionStateError(
                    f"Session {session_id} already holds {session.total} results"
                )
            session.results.append(result)
            session.completed += 1

    def complete(self, session_id: str) -> None:
        with self._lock:
            session = self._writable(session_id)
            if session.status is not SessionStatus.PROCESSING:
                raise SessionStateError(
                    f"Session {session_id} cannot complete from {session.status.value}"
                )
            session.status = SessionStatus.COMPLETED
            session.current = ""
            session.expires_at = self._clock() + self._completed_retention

    def fail(self, session_id: str, message: str) -> None:
        with self._lock:
            session = self._writable(session_id)
            session.status = SessionStatus.ERROR
            session.error = message
            session.expires_at = self._clock() + self._error_retention

    def purge_expired(self) -> int:
        """Remove expired sessions and return the count removed."""
        with self._lock:
            now = self._clock()
            expired = [
                k
                for k, v in self._sessions.items()
                if v.expires_at is not None and now >= v.expires_at
            ]
            for k in expired:
                del self._sessions[k]
        if expired:
            logger.info("Purged %d expired sessions", len(expired))
        return len(expired)

    async def run_reaper(self, interval: float) -> None:
        """Purge expired sessions every ``interval`` seconds until cancelled."""
        while True:
            await asyncio.sleep(interval)
            self.purge_expired()
