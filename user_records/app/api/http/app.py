"""FastAPI application factory and setup."""

import time
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse

from user_records.app.api.http.app_data import ApplicationDependencies
from user_records.app.api.http.routers.health import router as health_router
from user_records.app.api.http.routers.users import router as users_router
from user_records.app.api.utils.app_startup import configure_logging
from user_records.app.core.exceptions import StorageError
from user_records.app.core.storage import UserStorage, build_user_storage
from user_records.app.runtime.context import get_config

__all__ = ["app", "create_app"]


# --- Security middleware ---
class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault(
            "Referrer-Policy", "strict-origin-when-cross-origin"
        )
        if get_config().app.environment == "production":
            response.headers.setdefault(
                "Strict-Transport-Security",
                "max-age=31536000; includeSubDomains; preload",
            )
        return response


def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", None) or "-"


# --- Request logging middleware ---
async def log_requests(request: Request, call_next):
    request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
    request.state.request_id = request_id

    xff = request.headers.get("x-forwarded-for")
    client_ip = (
        xff.split(",")[0].strip()
        if xff
        else request.client.host
        if request.client
        else "unknown"
    )

    base_ctx = {
        "request_id": request_id,
        "method": request.method,
        "path": request.url.path,
        "client_ip": client_ip,
        "user_agent": request.headers.get("user-agent", "unknown"),
    }

    start = time.perf_counter()

    with logger.contextualize(**base_ctx):
        try:
            logger.info("request.start")
            response = await call_next(request)

            duration_ms = (time.perf_counter() - start) * 1000
            logger.bind(
                status_code=response.status_code,
                duration_ms=round(duration_ms, 1),
            ).info("request.end")

            response.headers.setdefault("X-Request-ID", request_id)
            return response

        except Exception as exc:
            duration_ms = (time.perf_counter() - start) * 1000
            logger.bind(
                status_code=500,
                duration_ms=round(duration_ms, 1),
                error_type=type(exc).__name__,
            ).exception("request.error")
            return JSONResponse(
                status_code=500,
                content={"detail": "Internal Server Error", "request_id": request_id},
                headers={"X-Request-ID": request_id},
            )


# --- Exception handlers ---
async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Malformed ids, bodies and missing fields are all client errors."""
    logger.bind(errors=len(exc.errors())).info("request.invalid")
    return JSONResponse(
        status_code=400,
        content={
            "detail": jsonable_encoder(exc.errors()),
            "request_id": _request_id(request),
        },
    )


async def storage_error_handler(request: Request, exc: StorageError) -> JSONResponse:
    logger.bind(error_type=type(exc).__name__).error("Storage failure: {}", exc)
    return JSONResponse(
        status_code=503,
        content={"detail": "Storage unavailable", "request_id": _request_id(request)},
    )


def create_app(user_storage: UserStorage | None = None) -> FastAPI:
    """Build the FastAPI application.

    Args:
        user_storage: Storage to serve. When omitted, one is built from the
            active configuration at startup and closed at shutdown.
    """
    config = get_config()
    configure_logging()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owns_storage = user_storage is None
        storage = user_storage if user_storage is not None else build_user_storage()
        app.state.app_dependencies = ApplicationDependencies(user_storage=storage)
        logger.info(
            "Starting up application in {} environment", get_config().app.environment
        )
        try:
            yield
        finally:
            logger.info("Shutting down application")
            if owns_storage:
                storage.close()

    app = FastAPI(
        title="User Records",
        lifespan=lifespan,
        docs_url=None if config.app.environment == "production" else "/docs",
        redoc_url=None if config.app.environment == "production" else "/redoc",
    )

    app.add_middleware(SecurityHeadersMiddleware)

    if config.app.environment == "production" and "*" in config.app.cors.origins:
        raise RuntimeError(
            "CORS misconfigured: cannot use '*' with allow_credentials=True in production"
        )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.app.cors.origins,
        allow_credentials=config.app.cors.allow_credentials,
        allow_methods=config.app.cors.allow_methods,
        allow_headers=config.app.cors.allow_headers,
    )

    app.middleware("http")(log_requests)

    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StorageError, storage_error_handler)

    app.include_router(health_router)
    app.include_router(users_router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    main_config = get_config()
    uvicorn.run(
        app,
        host=main_config.app.host,
        port=main_config.app.port,
        access_log=False,  # request logging lives in middleware
        timeout_graceful_shutdown=main_config.app.shutdown_timeout,
    )
