"""Health check endpoints."""

from datetime import datetime, timezone
from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from catalog_sync import __version__
from catalog_sync.api.dependencies import get_container
from catalog_sync.config import get_settings
from catalog_sync.container import SyncContainer

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    timestamp: str
    service: str
    version: str


class ReadinessResponse(BaseModel):
    """Readiness check response model."""

    ready: bool
    checks: dict[str, bool]


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """
    Liveness check.

    Does not touch upstream APIs, so it stays green while commercetools or
    the Retail API are unavailable.
    """
    return HealthResponse(
        status="OK",
        timestamp=datetime.now(timezone.utc).isoformat(),
        service=get_settings().service_name,
        version=__version__,
    )


@router.get("/health/ready", response_model=ReadinessResponse)
async def readiness_check(
    container: Annotated[SyncContainer, Depends(get_container)],
):
    """
    Readiness check.

    Reports the Redis connection when the event version guard is enabled;
    answers 503 if any check fails.
    """
    checks: dict[str, bool] = {}

    version_store = container.dispatcher.version_store
    if version_store is not None:
        checks["redis"] = await version_store.health_check()

    result = ReadinessResponse(ready=all(checks.values()), checks=checks)
    if not result.ready:
        return JSONResponse(status_code=503, content=result.model_dump())
    return result
