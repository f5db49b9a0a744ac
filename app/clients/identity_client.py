"""Identity service client.

Users and admins live in the sibling identity service; this service never
stores credentials. Tokens are opaque here: they are forwarded as bearer
tokens and the identity service resolves them to a profile.
"""

from __future__ import annotations

import time
from typing import Any

import httpx
import structlog

from app.core.config import IdentityServiceConfig
from app.core.errors import DependencyError, UnauthorizedError
from app.core.metrics import (
    hackathon_core_dependency_failures_total,
    hackathon_core_dependency_requests_total,
)
from app.core.tracing import get_tracing_headers

logger = structlog.get_logger(__name__)

DEPENDENCY = "identity_service"
SUPER_ADMIN_ROLE = 0


class IdentityClient:
    """HTTP client for the identity service.

    Credential and token failures surface as UnauthorizedError; any other
    failure surfaces as DependencyError.
    """

    def __init__(
        self,
        config: IdentityServiceConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = config.service_url.rstrip("/")
        self._timeout = config.timeout_seconds
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
    # Admin authentication
    # ------------------------------------------------------------------

    async def admin_sign_in(self, username: str, password: str) -> dict[str, Any]:
        try:
            return await self._request(
                "POST", "/admin/login", json={"username": username, "password": password}
            )
        except DependencyError as exc:
            raise UnauthorizedError("Invalid admin credentials") from exc

    async def get_admin_profile(self, token: str) -> dict[str, Any]:
        try:
            data = await self._request("GET", "/admin/me", token=token)
        except DependencyError as exc:
            raise UnauthorizedError("Invalid admin token") from exc
        return data.get("admin") or {}

    async def create_admin(
        self,
        token: str,
        *,
        name: str,
        username: str,
        password: str,
        role: int,
    ) -> dict[str, Any]:
        return await self._request(
            "POST",
            "/admin/create",
            token=token,
            json={"name": name, "username": username, "password": password, "role": role},
        )

    async def list_admins(self, token: str) -> list[dict[str, Any]]:
        return await self._request("GET", "/admin/list", token=token)

    # ------------------------------------------------------------------
    # User authentication
    # ------------------------------------------------------------------

    async def user_sign_in(self, identifier: str, password: str) -> dict[str, Any]:
        try:
            return await self._request(
                "POST", "/auth/signin", json={"identifier": identifier, "password": password}
            )
        except DependencyError as exc:
            raise UnauthorizedError("Invalid user credentials") from exc

    async def create_user(self, username: str, email: str, password: str) -> dict[str, Any]:
        return await self._request(
            "POST",
            "/auth/signup/step1",
            json={"username": username, "email": email, "password": password},
        )

    async def complete_user_registration(
        self, user_id: str, profile: dict[str, Any]
    ) -> dict[str, Any]:
        return await self._request("POST", f"/auth/signup/step2/{user_id}", json=profile)

    async def verify_token(self, token: str) -> dict[str, Any]:
        """Ask the identity service whether a token is valid. Never raises."""
        try:
            return await self._request("POST", "/auth/verify-token", json={"token": token})
        except DependencyError:
            return {"valid": False, "message": "Invalid token"}

    async def get_user_profile(self, token: str) -> dict[str, Any]:
        try:
            data = await self._request("GET", "/auth/me", token=token)
        except DependencyError as exc:
            raise UnauthorizedError("Invalid user token") from exc
        return data.get("user") or {}

    async def find_user(
        self, *, username: str | None = None, email: str | None = None
    ) -> dict[str, Any]:
        params = {k: v for k, v in {"username": username, "email": email}.items() if v}
        data = await self._request("GET", "/users/find", params=params)
        return data.get("user") or {}

    async def get_user_by_id(self, user_id: str) -> dict[str, Any]:
        data = await self._request("GET", f"/users/{user_id}")
        return data.get("user") or {}

    async def update_user(
        self, user_id: str, token: str, changes: dict[str, Any]
    ) -> dict[str, Any]:
        data = await self._request("PUT", f"/users/{user_id}", token=token, json=changes)
        return data.get("user") or {}

    async def deactivate_user(self, user_id: str, token: str) -> dict[str, Any]:
        return await self._request("DELETE", f"/users/{user_id}", token=token)

    # ------------------------------------------------------------------
    # Admin user management
    # ------------------------------------------------------------------

    async def get_users(
        self,
        token: str,
        *,
        page: int | None = None,
        limit: int | None = None,
        search: str | None = None,
        search_field: str | None = None,
        verified: bool | None = None,
        active: bool | None = None,
        sort_by: str | None = None,
        sort_order: str | None = None,
    ) -> dict[str, Any]:
        """Page through users; returns ``users``, ``total``, ``page``, ``limit``, ``totalPages``."""
        params = {
            "page": page,
            "limit": limit,
            "search": search,
            "searchField": search_field,
            "verified": verified,
            "active": active,
            "sortBy": sort_by,
            "sortOrder": sort_order,
        }
        return await self._request(
            "GET",
            "/admin/users",
            token=token,
            params={k: v for k, v in params.items() if v is not None},
        )

    async def admin_deactivate_user(self, user_id: str, token: str) -> dict[str, Any]:
        return await self._request(
            "POST", f"/admin/users/{user_id}/deactivate", token=token, json={}
        )

    # ------------------------------------------------------------------
    # Email verification and password reset
    # ------------------------------------------------------------------

    async def request_email_verification(self, email: str) -> dict[str, Any]:
        return await self._request(
            "POST", "/auth/request-email-verification", json={"email": email}
        )

    async def verify_email(self, otp_id: str, code: str) -> dict[str, Any]:
        return await self._request(
            "POST", "/auth/verify-email", json={"otpId": otp_id, "code": code}
        )

    async def resend_email_verification(self, otp_id: str) -> dict[str, Any]:
        return await self._request(
            "POST", "/auth/resend-email-verification", json={"otpId": otp_id}
        )

    async def request_password_reset(self, email: str) -> dict[str, Any]:
        return await self._request("POST", "/auth/forgot-password", json={"email": email})

    async def reset_password(self, otp_id: str, code: str, new_password: str) -> dict[str, Any]:
        return await self._request(
            "POST",
            "/auth/reset-password",
            json={"otpId": otp_id, "code": code, "newPassword": new_password},
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _request(
        self,
        method: str,
        path: str,
        *,
        token: str | None = None,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        headers = get_tracing_headers()
        if token:
            headers["Authorization"] = f"Bearer {token}"

        client = await self._get_client()
        started = time.perf_counter()
        try:
            response = await client.request(method, path, headers=headers, json=json, params=params)
        except httpx.HTTPError as exc:
            hackathon_core_dependency_failures_total.labels(dependency=DEPENDENCY).inc()
            logger.error(
                "Identity service request failed",
                method=method,
                path=path,
                error=str(exc) or type(exc).__name__,
            )
            raise DependencyError("Identity service unavailable", dependency=DEPENDENCY) from exc

        elapsed_ms = round((time.perf_counter() - started) * 1000, 1)
        hackathon_core_dependency_requests_total.labels(
            dependency=DEPENDENCY, status_code=str(response.status_code)
        ).inc()

        if response.is_error:
            message = _error_message(response)
            logger.error(
                "Identity service error",
                method=method,
                path=path,
                status_code=response.status_code,
                error=message,
                elapsed_ms=elapsed_ms,
            )
            raise DependencyError(
                f"Identity service error: {response.status_code} - {message}",
                dependency=DEPENDENCY,
                details={"status_code": response.status_code},
            )

        logger.debug(
            "Identity service request succeeded",
            method=method,
            path=path,
            status_code=response.status_code,
            elapsed_ms=elapsed_ms,
        )
        return response.json() if response.content else {}


def _error_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return response.text[:200]
    if isinstance(payload, dict) and payload.get("message"):
        return str(payload["message"])
    return response.text[:200]
