"""API-key gate and bearer-token guards.

Token validation is delegated to the identity service: a bearer token is
only accepted if the identity service resolves it to an admin or user
profile.
"""

import hmac
from typing import Annotated, Any

import structlog
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel

from app.clients.identity_client import SUPER_ADMIN_ROLE, IdentityClient
from app.core.config import get_settings
from app.core.errors import UnauthorizedError

logger = structlog.get_logger(__name__)

API_KEY_HEADERS = ("x-api-key", "x-apikey", "x-api_key")
API_KEY_QUERY_PARAMS = ("api_key", "apiKey")

_bearer = HTTPBearer(auto_error=False)


class AuthenticatedAdmin(BaseModel):
    id: str
    name: str | None = None
    username: str | None = None
    role: int | None = None
    token: str

    @property
    def is_super_admin(self) -> bool:
        return self.role == SUPER_ADMIN_ROLE


class AuthenticatedUser(BaseModel):
    id: str
    username: str | None = None
    email: str | None = None
    full_name: str | None = None
    token: str


def extract_api_key(request: Request) -> str | None:
    """First API key found in the known header variants, then the query string."""
    for header in API_KEY_HEADERS:
        if value := request.headers.get(header):
            return value
    for param in API_KEY_QUERY_PARAMS:
        if value := request.query_params.get(param):
            return value
    return None


def is_api_key_allowed(candidate: str | None, allowed: list[str]) -> bool:
    if not candidate or not allowed:
        return False
    return any(hmac.compare_digest(candidate, key) for key in allowed)


async def require_api_key(request: Request) -> None:
    """Router dependency rejecting requests without a configured API key."""
    security = get_settings().security
    if not security.api_key_enabled:
        return

    if not is_api_key_allowed(extract_api_key(request), security.api_keys_list):
        logger.warning(
            "API key rejected",
            path=request.url.path,
            client_host=request.client.host if request.client else "",
        )
        raise UnauthorizedError("Invalid or missing API key")


def get_identity_client(request: Request) -> IdentityClient:
    return request.app.state.identity_client


def _profile_to_admin(profile: dict[str, Any], token: str) -> AuthenticatedAdmin:
    return AuthenticatedAdmin(
        id=str(profile.get("id", "")),
        name=profile.get("name"),
        username=profile.get("username"),
        role=profile.get("role"),
        token=token,
    )


async def get_current_admin(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
    identity: IdentityClient = Depends(get_identity_client),
) -> AuthenticatedAdmin:
    if credentials is None:
        raise UnauthorizedError("Admin access token required")

    profile = await identity.get_admin_profile(credentials.credentials)
    if not profile.get("id"):
        raise UnauthorizedError("Invalid admin token")
    return _profile_to_admin(profile, credentials.credentials)


async def require_super_admin(
    admin: AuthenticatedAdmin = Depends(get_current_admin),
) -> AuthenticatedAdmin:
    if not admin.is_super_admin:
        logger.warning("Super admin access denied", admin_id=admin.id, role=admin.role)
        raise UnauthorizedError("Super admin access required")
    return admin


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
    identity: IdentityClient = Depends(get_identity_client),
) -> AuthenticatedUser:
    if credentials is None:
        raise UnauthorizedError("User access token required")

    profile = await identity.get_user_profile(credentials.credentials)
    if not profile.get("id"):
        raise UnauthorizedError("Invalid user token")
    return AuthenticatedUser(
        id=str(profile["id"]),
        username=profile.get("username"),
        email=profile.get("email"),
        full_name=profile.get("fullName"),
        token=credentials.credentials,
    )


CurrentAdmin = Annotated[AuthenticatedAdmin, Depends(get_current_admin)]
SuperAdmin = Annotated[AuthenticatedAdmin, Depends(require_super_admin)]
CurrentUser = Annotated[AuthenticatedUser, Depends(get_current_user)]
