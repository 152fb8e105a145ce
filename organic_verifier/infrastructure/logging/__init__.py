"""Logging infrastructure module."""

from organic_verifier.infrastructure.logging.logger import StructuredLogger, setup_logging

__all__ = ["StructuredLogger", "setup_logging"]
