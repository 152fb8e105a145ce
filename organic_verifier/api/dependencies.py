"""FastAPI dependencies."""

from functools import lru_cache

from organic_verifier.config.settings import Settings, get_settings
from organic_verifier.infrastructure.registry.document_source import (
    DocumentSource,
    build_document_source,
)
from organic_verifier.services.progress.store import ProgressStore
from organic_verifier.services.verification.batch_runner import BatchRunner
from organic_verifier.services.verification.fetcher import RecordFetcher


@lru_cache
def get_settings_dependency() -> Settings:
    """Get settings as a FastAPI dependency."""
    return get_settings()


@lru_cache
def get_progress_store() -> ProgressStore:
    """Process-wide session progress store."""
    return ProgressStore.from_settings(get_settings())


@lru_cache
def get_document_source() -> DocumentSource:
    """Shared registry document source (browser launched on first fetch)."""
    return build_document_source(get_settings())


@lru_cache
def get_batch_runner() -> BatchRunner:
    """Batch runner wired to the shared store and document source."""
    return BatchRunner(
        RecordFetcher(get_document_source()),
        get_progress_store(),
        get_settings(),
    )
