"""Batch runner: windowed concurrent verification of submitted operations."""

import asyncio
import logging
import time
from collections.abc import Sequence

from organic_verifier.config.constants import EMPTY_BATCH_MESSAGE
from organic_verifier.config.settings import Settings
from organic_verifier.infrastructure.logging.logger import StructuredLogger
from organic_verifier.services.progress.store import ProgressStore
from organic_verifier.services.verification.errors import (
    BatchAborted,
    EmptyBatch,
    SessionNotInitialized,
    VerificationError,
)
from organic_verifier.services.verification.fetcher import RecordFetcher
from organic_verifier.services.verification.models import OperationInput
from organic_verifier.services.verification.verifier import verify_operation

logger = logging.getLogger(__name__)


def split_windows(
    operations: Sequence[OperationInput], size: int
) -> list[Sequence[OperationInput]]:
    """Split operations into consecutive windows of at most ``size``."""
    return [operations[i:i + size] for i in range(0, len(operations), size)]


class BatchRunner:
    """Drives fetch + match work for a session, one window at a time.

    Windows run strictly in input order; operations inside a window are
    verified concurrently, which caps simultaneous registry fetches at the
    window size.
    """

    def __init__(
        self,
        fetcher: RecordFetcher,
        store: ProgressStore,
        settings: Settings,
    ):
        """Initialize runner."""
        self.fetcher = fetcher
        self.store = store
        self.settings = settings
        self.window_size = settings.verification_window_size
        self.events = StructuredLogger(__name__)
        self._tasks: set[asyncio.Task[None]] = set()

    def submit(
        self, operations: Sequence[OperationInput], session_id: str
    ) -> asyncio.Task[None]:
        """
        Schedule ``run_batch`` on the running loop and return its task.

        The runner keeps a reference until the task finishes, so callers may
        await the task or simply drop it.

        Raises:
            SessionNotInitialized: No session was created for ``session_id``
        """
        if not self.store.exists(session_id):
            raise SessionNotInitialized(session_id)
        task = asyncio.create_task(
            self.run_batch(operations, session_id), name=f"verify-batch-{session_id}"
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def run_batch(
        self, operations: Sequence[OperationInput], session_id: str
    ) -> None:
        """
        Verify every operation and record progress in the session.

        Per-operation failures are recorded as ``Failed`` results. An empty
        batch or any unexpected error ends the session in the error state.

        Raises:
            SessionNotInitialized: No session was created for ``session_id``
        """
        if not self.store.exists(session_id):
            raise SessionNotInitialized(session_id)

        if not operations:
            error = EmptyBatch(EMPTY_BATCH_MESSAGE)
            logger.warning("Session %s rejected: %s", session_id, error)
            self.store.fail(session_id, str(error))
            return

        self.store.mark_processing(session_id)
        windows = split_windows(operations, self.window_size)
        self.events.log_step(
            "batch_started",
            {"session_id": session_id, "total": len(operations), "windows": len(windows)},
        )
        start = time.time()

        try:
            for window in windows:
                outcomes = await asyncio.gather(
                    *(self._verify_and_record(op, session_id) for op in window),
                    return_exceptions=True,
                )
                for outcome in outcomes:
                    if isinstance(outcome, BaseException):
                        raise outcome
            self.store.complete(session_id)
        except Exception as e:
            error = BatchAborted(str(e))
            self.events.log_error("batch_aborted", e, {"session_id": session_id})
            try:
                self.store.fail(session_id, str(error))
            except VerificationError as state_error:
                logger.warning("Could not mark session %s as failed: %s", session_id, state_error)
            return

        self.events.log_step(
            "batch_completed",
            {"session_id": session_id, "total": len(operations)},
            duration_ms=(time.time() - start) * 1000,
        )

    async def _verify_and_record(self, operation: OperationInput, session_id: str) -> None:
        self.store.set_current(session_id, operation.operation_name)
        result = await verify_operation(operation, self.fetcher, self.settings)
        self.store.record_result(session_id, result)
