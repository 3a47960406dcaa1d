"""Health check endpoints router for monitoring service availability."""

from typing import Any

from fastapi import APIRouter, Request
from starlette.responses import JSONResponse, PlainTextResponse

from user_records.app.api.http.app_data import ApplicationDependencies
from user_records.app.runtime.context import get_config

router = APIRouter(tags=["health"])


@router.get("/healthz", response_class=PlainTextResponse)
async def healthz() -> str:
    """Liveness probe returning a plain ``ok``."""
    return "ok"


@router.get("/health")
async def health() -> dict[str, str]:
    """Basic health check endpoint - checks if app is running.

    This is a liveness probe that returns 200 OK as long as the application
    process is running. It does not check dependencies.
    """
    return {"status": "healthy", "service": "user-records"}


@router.get("/health/ready", response_model=None)
def readiness(request: Request) -> dict[str, Any] | JSONResponse:
    """Readiness check - validates the user storage backend.

    Returns 200 if storage is available, 503 otherwise.
    """
    app_deps: ApplicationDependencies = request.app.state.app_dependencies
    config = get_config()

    storage_type = app_deps.user_storage.backend_name
    try:
        healthy = app_deps.user_storage.is_available()
        checks = {
            "storage": {
                "status": "healthy" if healthy else "unhealthy",
                "type": storage_type,
            }
        }
    except Exception as e:
        healthy = False
        checks = {
            "storage": {
                "status": "unhealthy",
                "type": storage_type,
                "error": str(e),
            }
        }

    response = {
        "status": "ready" if healthy else "not_ready",
        "environment": config.app.environment,
        "checks": checks,
    }

    if not healthy:
        return JSONResponse(status_code=503, content=response)

    return response
