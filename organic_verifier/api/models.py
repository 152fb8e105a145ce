"""Request/Response models for API endpoints."""

from pydantic import BaseModel, Field


class VerifyTextRequest(BaseModel):
    """Request model for pasted-text verification."""

    text: str = Field(..., description="One operation per line: ID | products, or Name | ID | products")


class VerifyResponse(BaseModel):
    """Response model for a submitted verification batch."""

    session_id: str = Field(..., description="Token to poll progress with")
    total: int = Field(..., description="Number of operations submitted")


class HealthResponse(BaseModel):
    """Response model for health endpoint."""

    status: str = Field(..., description="Service status")
    version: str = Field(..., description="Application version")
