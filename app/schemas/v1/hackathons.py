"""Hackathon schemas."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, field_validator

from app.schemas.v1.common import HackathonMode, HackathonStatus


class CreateHackathonRequest(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    problem_statement: str = Field(min_length=1)
    mode: HackathonMode
    banner_url: str | None = None
    logo_url: str | None = None
    timeline: dict[str, Any] = Field(default_factory=dict)
    participation_rules: dict[str, Any] = Field(default_factory=dict)
    submission_requirements: dict[str, Any] = Field(default_factory=dict)
    communication_resources: dict[str, Any] = Field(default_factory=dict)
    prize_rewards: dict[str, Any] = Field(default_factory=dict)
    settings: dict[str, Any] = Field(default_factory=dict)

    @field_validator("title")
    @classmethod
    def strip_title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Title must not be blank")
        return v


class UpdateHackathonRequest(BaseModel):
    """Partial update; lifecycle status is changed through the transition routes."""

    title: str | None = Field(default=None, min_length=1, max_length=200)
    problem_statement: str | None = None
    mode: HackathonMode | None = None
    banner_url: str | None = None
    logo_url: str | None = None
    timeline: dict[str, Any] | None = None
    participation_rules: dict[str, Any] | None = None
    submission_requirements: dict[str, Any] | None = None
    communication_resources: dict[str, Any] | None = None
    prize_rewards: dict[str, Any] | None = None
    settings: dict[str, Any] | None = None


class HackathonResponse(BaseModel):
    id: str
    organizer_id: str
    title: str
    problem_statement: str
    mode: HackathonMode
    banner_url: str | None = None
    logo_url: str | None = None
    timeline: dict[str, Any] = Field(default_factory=dict)
    participation_rules: dict[str, Any] = Field(default_factory=dict)
    submission_requirements: dict[str, Any] = Field(default_factory=dict)
    communication_resources: dict[str, Any] = Field(default_factory=dict)
    prize_rewards: dict[str, Any] = Field(default_factory=dict)
    settings: dict[str, Any] = Field(default_factory=dict)
    status: HackathonStatus
    created_at: datetime | None = None
    updated_at: datetime | None = None


class HackathonListResponse(BaseModel):
    hackathons: list[HackathonResponse]
    total: int
    page: int
    total_pages: int


class HackathonStats(BaseModel):
    hackathon_id: str
    title: str
    status: HackathonStatus
    total_teams: int = 0
    total_submissions: int = 0
    submission_rate: float = 0.0


class AnnouncementRecipient(BaseModel):
    email: str = Field(min_length=3, max_length=320)
    name: str = Field(min_length=1, max_length=200)


class AnnounceHackathonRequest(BaseModel):
    recipients: list[AnnouncementRecipient] = Field(min_length=1, max_length=500)
    subject: str = Field(min_length=1, max_length=200)
    content: str = Field(min_length=1)
    html_content: str | None = None


class AnnouncementResponse(BaseModel):
    hackathon_id: str
    sent: int
