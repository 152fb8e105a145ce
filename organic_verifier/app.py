"""FastAPI application entry point."""

import asyncio
import contextlib
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware

from organic_verifier.api.dependencies import get_document_source, get_progress_store
from organic_verifier.api.routers import api_router
from organic_verifier.config.settings import Settings, get_settings
from organic_verifier.infrastructure.logging.logger import setup_logging

settings = get_settings()

setup_logging(
    level=settings.log_level,
    json_output=not settings.debug,
    silence_noisy_loggers=True,
)

logger = logging.getLogger(__name__)


def _validate_startup_config(settings: Settings) -> None:
    """Validate required configuration at startup."""
    if not settings.registry_base_url.startswith(("http://", "https://")):
        logger.warning("registry_base_url is not an HTTP(S) URL: %s", settings.registry_base_url)
    if settings.verification_window_size > 10:
        logger.warning(
            "verification_window_size=%d may overload the public registry",
            settings.verification_window_size,
        )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Startup and shutdown lifecycle."""
    logger.info("Starting %s", settings.app_name)
    _validate_startup_config(settings)

    reaper = asyncio.create_task(
        get_progress_store().run_reaper(settings.session_reaper_interval),
        name="session-reaper",
    )

    yield
    logger.info("Shutting down %s", settings.app_name)
    reaper.cancel()
    with contextlib.suppress(asyncio.CancelledError):
        await reaper
    if get_document_source.cache_info().currsize:
        try:
            await get_document_source().close()
            logger.info("Registry document source closed")
        except Exception as e:
            logger.error("Error closing registry document source: %s", e, exc_info=True)


app = FastAPI(
    title=settings.app_name,
    description="Batch verification of organic certification and certified products",
    version=settings.app_version,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials="*" not in settings.allowed_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(ProxyHeadersMiddleware, trusted_hosts=["*"])

app.include_router(api_router, prefix="/api")
