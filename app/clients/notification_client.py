"""Notification service client for transactional email.

Template rendering and delivery happen in the sibling notification service;
this client only submits requests to it.
"""

from __future__ import annotations

import time
from typing import Any

import httpx
import structlog
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from app.core.config import NotificationServiceConfig
from app.core.errors import DependencyError
from app.core.metrics import (
    hackathon_core_dependency_failures_total,
    hackathon_core_dependency_requests_total,
)
from app.core.tracing import get_tracing_headers

logger = structlog.get_logger(__name__)

DEPENDENCY = "notification_service"
WINNER_RANK_CUTOFF = 3


class NotificationClient:
    """HTTP client for the notification service.

    Connection failures are retried with exponential backoff; HTTP error
    responses are not retried.
    """

    def __init__(
        self,
        config: NotificationServiceConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = config.service_url.rstrip("/")
        self._timeout = config.timeout_seconds
        self._retry_attempts = max(config.retry_attempts, 1)
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                timeout=self._timeout,
                headers={"Content-Type": "application/json"},
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    # ------------------------------------------------------------------
    # Email sending
    # ------------------------------------------------------------------

    async def send_email(self, email: dict[str, Any]) -> dict[str, Any]:
        return await self._request("POST", "/notifications/send-email", json=email)

    async def send_bulk_email(self, email: dict[str, Any]) -> dict[str, Any]:
        return await self._request("POST", "/notifications/send-bulk-email", json=email)

    async def send_template_email(self, email: dict[str, Any]) -> dict[str, Any]:
        return await self._request("POST", "/notifications/send-template-email", json=email)

    async def send_bulk_template_email(self, email: dict[str, Any]) -> dict[str, Any]:
        return await self._request("POST", "/notifications/send-bulk-template-email", json=email)

    # ------------------------------------------------------------------
    # Template management
    # ------------------------------------------------------------------

    async def create_email_template(self, template: dict[str, Any]) -> dict[str, Any]:
        data = await self._request("POST", "/notifications/templates", json=template)
        return _payload(data, "template")

    async def get_email_templates(self) -> list[dict[str, Any]]:
        data = await self._request("GET", "/notifications/templates")
        return _payload(data, "templates") or []

    async def get_email_template_by_name(self, name: str) -> dict[str, Any]:
        data = await self._request("GET", f"/notifications/templates/{name}")
        return _payload(data, "template")

    async def update_email_template(
        self, template_id: str, changes: dict[str, Any]
    ) -> dict[str, Any]:
        data = await self._request("PUT", f"/notifications/templates/{template_id}", json=changes)
        return _payload(data, "template")

    async def delete_email_template(self, template_id: str) -> dict[str, Any]:
        return await self._request("DELETE", f"/notifications/templates/{template_id}")

    # ------------------------------------------------------------------
    # Notification history
    # ------------------------------------------------------------------

    async def get_notifications(
        self,
        *,
        status: str | None = None,
        recipient_email: str | None = None,
        campaign_id: str | None = None,
        page: int | None = None,
        limit: int | None = None,
        start_date: str | None = None,
        end_date: str | None = None,
    ) -> dict[str, Any]:
        params = {
            "status": status,
            "recipientEmail": recipient_email,
            "campaignId": campaign_id,
            "page": page,
            "limit": limit,
            "startDate": start_date,
            "endDate": end_date,
        }
        return await self._request(
            "GET", "/notifications", params={k: v for k, v in params.items() if v is not None}
        )

    async def get_notification_by_id(self, notification_id: str) -> dict[str, Any]:
        return await self._request("GET", f"/notifications/{notification_id}")

    async def retry_notification(self, notification_id: str) -> dict[str, Any]:
        return await self._request("POST", f"/notifications/{notification_id}/retry")

    async def get_notification_stats(self) -> dict[str, Any]:
        return await self._request("GET", "/notifications/stats")

    # ------------------------------------------------------------------
    # Health
    # ------------------------------------------------------------------

    async def get_health_status(self) -> dict[str, Any]:
        return await self._request("GET", "/health")

    async def get_simple_health_status(self) -> dict[str, Any]:
        return await self._request("GET", "/health/simple")

    async def get_health_stats(self) -> dict[str, Any]:
        return await self._request("GET", "/health/stats")

    # ------------------------------------------------------------------
    # Convenience helpers
    # ------------------------------------------------------------------

    async def send_welcome_email(
        self, recipient_email: str, recipient_name: str, template_data: dict[str, Any]
    ) -> dict[str, Any]:
        return await self.send_template_email(
            {
                "recipientEmail": recipient_email,
                "recipientName": recipient_name,
                "templateName": "welcome",
                "templateData": template_data,
                "priority": "normal",
                "metadata": {"source": "user_registration"},
            }
        )

    async def send_hackathon_notification(
        self,
        recipient_email: str,
        recipient_name: str,
        subject: str,
        content: str,
        html_content: str | None = None,
        hackathon_id: str | None = None,
    ) -> dict[str, Any]:
        email: dict[str, Any] = {
            "recipientEmail": recipient_email,
            "recipientName": recipient_name,
            "subject": subject,
            "content": content,
            "priority": "normal",
            "metadata": {"source": "hackathon_notification", "hackathon_id": hackathon_id},
        }
        if html_content is not None:
            email["htmlContent"] = html_content
        return await self.send_email(email)

    async def send_team_invitation_email(
        self,
        recipient_email: str,
        recipient_name: str,
        team_name: str,
        inviter_name: str,
        hackathon_title: str,
        invitation_link: str,
    ) -> dict[str, Any]:
        return await self.send_template_email(
            {
                "recipientEmail": recipient_email,
                "recipientName": recipient_name,
                "templateName": "team_invitation",
                "templateData": {
                    "teamName": team_name,
                    "inviterName": inviter_name,
                    "hackathonTitle": hackathon_title,
                    "invitationLink": invitation_link,
                },
                "priority": "high",
                "metadata": {"source": "team_invitation"},
            }
        )

    async def send_submission_deadline_reminder(
        self,
        recipient_emails: list[str],
        hackathon_title: str,
        deadline_date: str,
        submission_url: str,
    ) -> dict[str, Any]:
        template_data = {
            "hackathonTitle": hackathon_title,
            "deadlineDate": deadline_date,
            "submissionUrl": submission_url,
        }
        return await self.send_bulk_template_email(
            {
                "recipients": [
                    {"email": email, "templateData": template_data} for email in recipient_emails
                ],
                "templateName": "submission_deadline_reminder",
                "priority": "high",
                "metadata": {"source": "deadline_reminder"},
            }
        )

    async def send_results_announcement(
        self,
        recipient_email: str,
        recipient_name: str,
        hackathon_title: str,
        rank: int | None = None,
        award_title: str | None = None,
        results_url: str | None = None,
    ) -> dict[str, Any]:
        return await self.send_template_email(
            {
                "recipientEmail": recipient_email,
                "recipientName": recipient_name,
                "templateName": "results_announcement",
                "templateData": {
                    "hackathonTitle": hackathon_title,
                    "rank": rank,
                    "awardTitle": award_title,
                    "resultsUrl": results_url,
                    "isWinner": rank is not None and rank <= WINNER_RANK_CUTOFF,
                },
                "priority": "high",
                "metadata": {"source": "results_announcement"},
            }
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _request(
        self,
        method: str,
        path: str,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        client = await self._get_client()
        headers = get_tracing_headers()
        started = time.perf_counter()

        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self._retry_attempts),
                wait=wait_exponential(multiplier=0.5, min=0.5, max=5),
                retry=retry_if_exception_type((httpx.ConnectError, httpx.ConnectTimeout)),
                reraise=True,
            ):
                with attempt:
                    response = await client.request(
                        method, path, json=json, params=params, headers=headers
                    )
        except httpx.HTTPError as exc:
            hackathon_core_dependency_failures_total.labels(dependency=DEPENDENCY).inc()
            logger.error(
                "Notification service request failed",
                method=method,
                path=path,
                error=str(exc) or type(exc).__name__,
            )
            raise DependencyError(
                "Notification service unavailable", dependency=DEPENDENCY
            ) from exc

        elapsed_ms = round((time.perf_counter() - started) * 1000, 1)
        hackathon_core_dependency_requests_total.labels(
            dependency=DEPENDENCY, status_code=str(response.status_code)
        ).inc()

        if response.is_error:
            logger.error(
                "Notification service error",
                method=method,
                path=path,
                status_code=response.status_code,
                body=response.text[:200],
                elapsed_ms=elapsed_ms,
            )
            raise DependencyError(
                f"Notification service error: {response.status_code}",
                dependency=DEPENDENCY,
                details={"status_code": response.status_code},
            )

        return response.json() if response.content else {}


def _payload(data: dict[str, Any], key: str) -> Any:
    """Template endpoints wrap their result as ``{"data": {key: ...}}``."""
    return (data.get("data") or {}).get(key)
