"""Hackathon Core Service.

Hackathon management backend. Identity and email delivery are delegated to
sibling services; the process refuses to start until they and the database
are ready.
"""

import asyncio
import sys
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.routes.hackathons import router as hackathons_router
from app.api.routes.health import router as health_router
from app.api.routes.monitoring import router as monitoring_router
from app.clients.identity_client import IdentityClient
from app.clients.notification_client import NotificationClient
from app.core.config import AppEnvironment, Settings, get_settings
from app.core.database import reset_engine
from app.core.errors import HackathonCoreError, get_status_code
from app.core.logging import setup_logging
from app.core.tracing import clear_tracing_context, set_request_id, set_trace_parent
from app.readiness import build_readiness_gate

logger = structlog.get_logger(__name__)

API_CSP_POLICY = (
    "default-src 'none'; frame-ancestors 'none'; base-uri 'none'; "
    "form-action 'none'; object-src 'none'"
)
DOCS_CSP_POLICY = (
    "default-src 'self'; img-src 'self' data:; style-src 'self' 'unsafe-inline'; "
    "script-src 'self' 'unsafe-inline'; frame-ancestors 'none'; object-src 'none'; "
    "base-uri 'self'"
)
SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Strict-Transport-Security": "max-age=63072000; includeSubDomains; preload",
}


def _request_log_context(request: Request) -> dict[str, str]:
    return {
        "path": request.url.path,
        "method": request.method,
        "request_id": getattr(request.state, "request_id", ""),
        "client_host": request.client.host if request.client else "",
    }


def _is_docs_path(path: str) -> bool:
    return path.startswith("/docs") or path.startswith("/redoc") or path.startswith("/openapi.json")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Application lifespan context manager."""
    settings = get_settings()
    setup_logging()

    logger.info(
        "Starting Hackathon Core service",
        app=settings.app.name,
        env=settings.app.env.value,
        version=settings.app.version,
    )

    app.state.settings = settings
    app.state.identity_client = IdentityClient(config=settings.identity)
    app.state.notification_client = NotificationClient(config=settings.notification)

    yield

    await app.state.identity_client.close()
    await app.state.notification_client.close()
    await reset_engine()

    logger.info("Hackathon Core service stopped")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()
    docs_enabled = settings.observability.swagger_enabled

    app = FastAPI(
        title="Hackathon Core Service",
        description="Hackathon management API. Identity and notifications are delegated.",
        version=settings.app.version,
        lifespan=lifespan,
        docs_url="/docs" if docs_enabled else None,
        redoc_url="/redoc" if docs_enabled else None,
        openapi_url="/openapi.json" if docs_enabled else None,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.security.cors_origins_list,
        allow_credentials=True,
        allow_methods=settings.security.cors_allow_methods,
        allow_headers=["*"],
    )

    api_prefix = settings.app.api_prefix
    app.include_router(health_router, prefix=api_prefix)
    app.include_router(monitoring_router, prefix=api_prefix)
    app.include_router(hackathons_router, prefix=api_prefix)

    @app.middleware("http")
    async def request_context_middleware(request: Request, call_next):
        """Bind request ID and traceparent for outbound calls; stamp security headers."""
        request_id = set_request_id(request.headers.get("x-request-id"))
        set_trace_parent(request.headers.get("traceparent"))
        request.state.request_id = request_id

        try:
            response = await call_next(request)
        finally:
            # Prevent context leakage across requests in long-lived workers.
            clear_tracing_context()

        response.headers["X-Request-ID"] = request_id
        for name, value in SECURITY_HEADERS.items():
            response.headers.setdefault(name, value)
        response.headers.setdefault(
            "Content-Security-Policy",
            DOCS_CSP_POLICY if _is_docs_path(request.url.path) else API_CSP_POLICY,
        )
        return response

    @app.exception_handler(HackathonCoreError)
    async def domain_error_handler(request: Request, exc: HackathonCoreError) -> JSONResponse:
        status_code = get_status_code(exc)
        log = logger.error if status_code >= 500 else logger.warning
        log(
            "Request failed",
            **_request_log_context(request),
            status_code=status_code,
            code=exc.code,
            error=exc.message,
            error_details=exc.details or {},
        )
        body: dict[str, object] = {"detail": exc.message, "code": exc.code}
        if exc.details:
            body["errors"] = exc.details
        return JSONResponse(status_code=status_code, content=body)

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled exception", **_request_log_context(request), error=str(exc))
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})

    return app


def wait_for_dependencies(settings: Settings) -> bool:
    """Block until the startup dependencies are ready; False when they never are."""
    if not settings.startup.health_check_enabled:
        logger.warning("Startup health check disabled, skipping dependency checks")
        return True

    gate = build_readiness_gate(settings)

    async def _wait() -> bool:
        try:
            return await gate.wait_for_services(
                max_attempts=settings.startup.max_attempts,
                retry_delay=settings.startup.retry_delay_seconds,
            )
        finally:
            # Pooled connections are bound to this loop; the server runs on another.
            await reset_engine()

    return asyncio.run(_wait())


def run() -> None:
    """Check dependencies, then run the application using uvicorn.

    Exits with status 1 before binding the port when a dependency is not
    ready.
    """
    import uvicorn

    settings = get_settings()
    setup_logging()

    if not wait_for_dependencies(settings):
        logger.error("Cannot start application: required services are not available")
        sys.exit(1)

    logger.info("All dependencies ready, starting server", port=settings.server.port)
    uvicorn.run(
        "app.main:create_app",
        factory=True,
        host=settings.server.host,
        port=settings.server.port,
        reload=settings.app.env == AppEnvironment.LOCAL,
        workers=1 if settings.app.env == AppEnvironment.LOCAL else settings.server.workers,
        log_level=settings.app.log_level.lower(),
    )


if __name__ == "__main__":
    run()
