"""
Health check endpoints.

Provides endpoints for monitoring application health and readiness.
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ..dependencies import ServiceContainer, get_container

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    version: str


class ReadinessResponse(BaseModel):
    """Readiness check response model."""

    status: str
    storage: str
    payments: str
    transformer: str


@router.get("/health", response_model=HealthResponse)
async def health_check(
    container: ServiceContainer = Depends(get_container),
) -> HealthResponse:
    """
    Basic health check endpoint.

    Returns 200 if the API is running.
    """
    return HealthResponse(status="healthy", version=container.settings.app_version)


@router.get("/ready", response_model=ReadinessResponse)
async def readiness_check(
    container: ServiceContainer = Depends(get_container),
) -> ReadinessResponse:
    """
    Readiness check endpoint.

    Reports which storage backend is in use and whether the external
    collaborators have credentials configured.
    """
    settings = container.settings
    payments_ready = bool(settings.razorpay_key_id and settings.razorpay_key_secret)
    transformer_ready = bool(settings.openai_api_key)

    return ReadinessResponse(
        status="ready",
        storage=settings.storage_backend,
        payments="configured" if payments_ready else "unconfigured",
        transformer="configured" if transformer_ready else "unconfigured",
    )
