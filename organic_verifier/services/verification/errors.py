"""Verification error taxonomy."""


class VerificationError(Exception):
    """Base class for verification errors."""


class FetchError(VerificationError):
    """A single operation's registry record could not be obtained."""

    def __init__(self, registry_id: str, message: str):
        super().__init__(message)
        self.registry_id = registry_id


class RegistryUnavailable(FetchError):
    """Network, timeout or render failure while fetching a record."""


class RecordNotFound(FetchError):
    """The registry answered but holds no identifiable record for the ID."""


class SessionNotInitialized(VerificationError):
    """A batch was started for a session that was never created."""

    def __init__(self, session_id: str):
        super().__init__(f"Session {session_id} not initialized")
        self.session_id = session_id


class SessionStateError(VerificationError):
    """A session mutation is not allowed in the session's current state."""


class EmptyBatch(VerificationError):
    """A batch was submitted with zero operations."""


class BatchAborted(VerificationError):
    """An unexpected error escaped window processing."""
