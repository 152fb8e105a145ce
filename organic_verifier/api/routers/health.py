"""Health endpoint."""

from fastapi import APIRouter, Depends

from organic_verifier.api.dependencies import get_settings_dependency
from organic_verifier.api.models import HealthResponse
from organic_verifier.config.settings import Settings

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health(
    settings: Settings = Depends(get_settings_dependency),  # noqa: B008
) -> HealthResponse:
    """Health check endpoint."""
    return HealthResponse(status="healthy", version=settings.app_version)
