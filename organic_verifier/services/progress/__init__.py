"""Session progress tracking module."""

from organic_verifier.services.progress.store import ProgressStore, VerificationSession

__all__ = ["ProgressStore", "VerificationSession"]
