"""Health check endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from fedsearch import __version__
from fedsearch.api.deps import get_settings
from fedsearch.config.settings import Settings

router = APIRouter()


class HealthResponse(BaseModel):
    """System health check response."""

    status: str = Field(description="Health status (e.g. 'healthy')")
    version: str = Field(description="fedsearch server version")
    service: str = Field(description="Service name ('fedsearch')")
    sources: int = Field(description="Number of configured source URLs")


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="System Health Check",
    description="Returns server health, version and the number of configured sources.",
)
async def health_check(settings: Settings = Depends(get_settings)) -> HealthResponse:
    return HealthResponse(
        status="healthy",
        version=__version__,
        service="fedsearch",
        sources=len(settings.federation.urls),
    )
