"""Shared API dependencies and error responses."""

from fastapi import Request
from fastapi.responses import JSONResponse

from catalog_sync.container import SyncContainer


def get_container(request: Request) -> SyncContainer:
    """Container built during application startup."""
    return request.app.state.container


def error_response(message: str, exc: Exception, status_code: int = 500) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "message": message, "error": str(exc)},
    )
