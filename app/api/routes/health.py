"""Health check routes."""

import logging
import os
import platform
import socket
import time

import psutil
from fastapi import APIRouter, Response, status
from sqlalchemy import text

from app.core.config import get_settings
from app.core.database import get_engine
from app.core.metrics import (
    hackathon_core_db_query_failures_total,
    hackathon_core_db_query_latency_seconds,
)
from app.readiness import build_readiness_gate
from app.readiness.models import all_healthy
from app.schemas.v1.health import (
    DatabaseHealth,
    DependencyStatus,
    HealthResponse,
    ReadyResponse,
    SystemHealthResponse,
)
from app.utils.clock import utc_now

router = APIRouter(tags=["health"])
logger = logging.getLogger(__name__)

_MB = 1024 * 1024


def _round_mb(value: float) -> float:
    return round(value / _MB, 2)


async def _check_database() -> DatabaseHealth:
    started = time.perf_counter()
    try:
        engine = get_engine()
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as exc:
        hackathon_core_db_query_failures_total.labels(query_name="health_db_check").inc()
        logger.warning(
            "Health DB check failed",
            extra={"route": "/api/v1/health", "dependency": "database", "error": str(exc)},
        )
        return DatabaseHealth(status="unhealthy", error=str(exc))

    elapsed = time.perf_counter() - started
    hackathon_core_db_query_latency_seconds.labels(query_name="health_db_check").observe(elapsed)
    return DatabaseHealth(status="healthy", response_time_ms=round(elapsed * 1000, 2))


def _host_stats() -> dict[str, dict]:
    memory = psutil.virtual_memory()
    process = psutil.Process(os.getpid())
    process_memory = process.memory_info()
    load_average = psutil.getloadavg() if hasattr(psutil, "getloadavg") else (0.0, 0.0, 0.0)

    return {
        "memory": {
            "total_mb": _round_mb(memory.total),
            "available_mb": _round_mb(memory.available),
            "used_mb": _round_mb(memory.used),
            "percent": memory.percent,
        },
        "cpu": {
            "count": psutil.cpu_count(logical=True),
            "percent": psutil.cpu_percent(interval=None),
            "load_average": [round(value, 2) for value in load_average],
        },
        "process": {
            "pid": process.pid,
            "rss_mb": _round_mb(process_memory.rss),
            "vms_mb": _round_mb(process_memory.vms),
            "threads": process.num_threads(),
        },
        "platform": {
            "hostname": socket.gethostname(),
            "system": platform.system(),
            "release": platform.release(),
            "python_version": platform.python_version(),
        },
    }


@router.get("/health", response_model=SystemHealthResponse)
async def health_check():
    """Detailed health: host, process and database status.

    Always answers 200; a failing database is reported in the body.
    """
    settings = get_settings()
    database = await _check_database()
    uptime = time.time() - psutil.Process(os.getpid()).create_time()

    return SystemHealthResponse(
        status="ok" if database.status == "healthy" else "degraded",
        timestamp=utc_now().isoformat(),
        version=settings.app.version,
        environment=settings.app.env.value,
        uptime_seconds=round(uptime, 2),
        database=database,
        **_host_stats(),
    )


@router.get("/health/ready", response_model=ReadyResponse)
async def readiness_check(response: Response):
    """Run one readiness attempt against every startup dependency."""
    results = await build_readiness_gate(get_settings()).check_all_results()
    ready = all_healthy(results)
    if not ready:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    return ReadyResponse(
        status="ready" if ready else "degraded",
        dependencies=[DependencyStatus(**result.to_dict()) for result in results],
    )


@router.get("/health/live", response_model=HealthResponse)
async def liveness_check():
    """Liveness check."""
    return HealthResponse(status="alive")
