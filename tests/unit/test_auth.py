"""Unit tests for auth module."""

from unittest.mock import AsyncMock

import pytest
from fastapi.security import HTTPAuthorizationCredentials
from starlette.requests import Request

from app.core.auth import (
    AuthenticatedAdmin,
    extract_api_key,
    get_current_admin,
    get_current_user,
    is_api_key_allowed,
    require_api_key,
    require_super_admin,
)
from app.core.errors import UnauthorizedError


def _request(headers: dict[str, str] | None = None, query: str = "") -> Request:
    return Request(
        {
            "type": "http",
            "method": "GET",
            "path": "/api/v1/hackathons",
            "headers": [(k.encode(), v.encode()) for k, v in (headers or {}).items()],
            "query_string": query.encode(),
        }
    )


def _bearer(token: str) -> HTTPAuthorizationCredentials:
    return HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)


@pytest.mark.parametrize("header", ["x-api-key", "x-apikey", "x-api_key"])
def test_extract_api_key_from_header_variants(header):
    assert extract_api_key(_request({header: "k1"})) == "k1"


@pytest.mark.parametrize("param", ["api_key", "apiKey"])
def test_extract_api_key_from_query(param):
    assert extract_api_key(_request(query=f"{param}=k2")) == "k2"


def test_extract_api_key_prefers_header():
    assert extract_api_key(_request({"x-api-key": "from-header"}, "api_key=q")) == "from-header"


def test_extract_api_key_missing():
    assert extract_api_key(_request()) is None


def test_is_api_key_allowed():
    assert is_api_key_allowed("a", ["a", "b"]) is True
    assert is_api_key_allowed("c", ["a", "b"]) is False
    assert is_api_key_allowed(None, ["a"]) is False
    assert is_api_key_allowed("a", []) is False


@pytest.mark.asyncio
async def test_require_api_key_accepts_configured_key():
    await require_api_key(_request({"x-api-key": "test-api-key"}))


@pytest.mark.asyncio
async def test_require_api_key_rejects_wrong_key():
    with pytest.raises(UnauthorizedError):
        await require_api_key(_request({"x-api-key": "nope"}))


@pytest.mark.asyncio
async def test_require_api_key_disabled(monkeypatch):
    monkeypatch.setenv("API_KEY_ENABLED", "false")
    await require_api_key(_request())


@pytest.mark.asyncio
async def test_require_api_key_empty_allow_list_rejects(monkeypatch):
    monkeypatch.setenv("API_KEYS", "")
    monkeypatch.delenv("API_KEY", raising=False)
    with pytest.raises(UnauthorizedError):
        await require_api_key(_request({"x-api-key": ""}))


@pytest.mark.asyncio
async def test_get_current_admin_requires_token():
    with pytest.raises(UnauthorizedError, match="Admin access token required"):
        await get_current_admin(credentials=None, identity=AsyncMock())


@pytest.mark.asyncio
async def test_get_current_admin_resolves_profile():
    identity = AsyncMock()
    identity.get_admin_profile.return_value = {"id": 7, "name": "Root", "role": 0}

    admin = await get_current_admin(credentials=_bearer("tok"), identity=identity)

    identity.get_admin_profile.assert_awaited_once_with("tok")
    assert admin.id == "7"
    assert admin.token == "tok"
    assert admin.is_super_admin is True


@pytest.mark.asyncio
async def test_get_current_admin_rejects_profile_without_id():
    identity = AsyncMock()
    identity.get_admin_profile.return_value = {}

    with pytest.raises(UnauthorizedError, match="Invalid admin token"):
        await get_current_admin(credentials=_bearer("tok"), identity=identity)


@pytest.mark.asyncio
async def test_require_super_admin():
    root = AuthenticatedAdmin(id="1", role=0, token="t")
    organizer = AuthenticatedAdmin(id="2", role=1, token="t")

    assert await require_super_admin(root) is root
    with pytest.raises(UnauthorizedError):
        await require_super_admin(organizer)


@pytest.mark.asyncio
async def test_get_current_user_maps_profile():
    identity = AsyncMock()
    identity.get_user_profile.return_value = {
        "id": "u-1",
        "username": "ada",
        "email": "ada@example.com",
        "fullName": "Ada Lovelace",
    }

    user = await get_current_user(credentials=_bearer("tok"), identity=identity)

    assert user.id == "u-1"
    assert user.full_name == "Ada Lovelace"


@pytest.mark.asyncio
async def test_get_current_user_requires_token():
    with pytest.raises(UnauthorizedError, match="User access token required"):
        await get_current_user(credentials=None, identity=AsyncMock())
