"""Health check schemas."""

from typing import Any

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    status: str


class DependencyStatus(BaseModel):
    name: str
    healthy: bool
    outcome: str
    reason: str | None = None
    latency_ms: float = 0.0


class ReadyResponse(BaseModel):
    status: str
    dependencies: list[DependencyStatus] = Field(default_factory=list)


class DatabaseHealth(BaseModel):
    status: str
    response_time_ms: float | None = None
    error: str | None = None


class SystemHealthResponse(BaseModel):
    status: str
    timestamp: str
    version: str
    environment: str
    uptime_seconds: float
    database: DatabaseHealth
    memory: dict[str, Any] = Field(default_factory=dict)
    cpu: dict[str, Any] = Field(default_factory=dict)
    process: dict[str, Any] = Field(default_factory=dict)
    platform: dict[str, Any] = Field(default_factory=dict)
