"""Monitoring and metrics endpoints.

Provides Prometheus metrics endpoint for observability.
"""

import hmac
import logging

from fastapi import APIRouter, HTTPException, Request, status
from fastapi.responses import Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from app.core.config import get_settings

router = APIRouter(tags=["monitoring"])
logger = logging.getLogger(__name__)


@router.get("/metrics")
async def get_metrics(request: Request) -> Response:
    """Prometheus metrics in text exposition format.

    When METRICS_TOKEN is set, scrapers must send it in X-Metrics-Token.
    """
    expected_token = get_settings().observability.metrics_token
    if expected_token:
        provided_token = request.headers.get("X-Metrics-Token")
        if not hmac.compare_digest(provided_token or "", expected_token):
            logger.warning(
                "Unauthorized metrics access attempt",
                extra={
                    "security_event": True,
                    "client_ip": request.client.host if request.client else "unknown",
                },
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Invalid metrics token",
            )

    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
