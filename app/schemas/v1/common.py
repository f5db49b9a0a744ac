"""Common schemas: enums and error responses."""

from enum import StrEnum
from typing import Any

from pydantic import BaseModel


class HackathonStatus(StrEnum):
    DRAFT = "draft"
    PUBLISHED = "published"
    ACTIVE = "active"
    COMPLETED = "completed"


class HackathonMode(StrEnum):
    ONLINE = "Online"
    OFFLINE = "Offline"
    HYBRID = "Hybrid"


class ApiError(BaseModel):
    detail: str
    code: str | None = None
    errors: dict[str, Any] | None = None
