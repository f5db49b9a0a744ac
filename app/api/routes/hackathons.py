"""Hackathon routes."""

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_session
from app.core.dependencies import CurrentAdmin, Notifier, require_api_key
from app.schemas.v1.common import ApiError, HackathonStatus
from app.schemas.v1.hackathons import (
    AnnounceHackathonRequest,
    AnnouncementResponse,
    CreateHackathonRequest,
    HackathonListResponse,
    HackathonResponse,
    HackathonStats,
    UpdateHackathonRequest,
)
from app.services.hackathon_service import HackathonService

router = APIRouter(
    prefix="/hackathons",
    tags=["hackathons"],
    dependencies=[Depends(require_api_key)],
    responses={401: {"model": ApiError}, 403: {"model": ApiError}, 404: {"model": ApiError}},
)


@router.post("", response_model=HackathonResponse, status_code=201)
async def create_hackathon(
    request: CreateHackathonRequest,
    admin: CurrentAdmin,
    session: AsyncSession = Depends(get_session),
):
    """Create a draft hackathon owned by the calling admin."""
    service = HackathonService(session)
    return await service.create(admin.id, request.model_dump(mode="json"))


@router.get("", response_model=HackathonListResponse)
async def list_hackathons(
    admin: CurrentAdmin,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    status: HackathonStatus | None = Query(None),
    session: AsyncSession = Depends(get_session),
):
    """List the calling admin's hackathons."""
    service = HackathonService(session)
    return await service.find_all(admin.id, page=page, limit=limit, status=status)


@router.get("/public", response_model=HackathonListResponse)
async def list_public_hackathons(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    session: AsyncSession = Depends(get_session),
):
    """List published and active hackathons."""
    service = HackathonService(session)
    return await service.get_public(page=page, limit=limit)


@router.get("/slug/{slug}", response_model=HackathonResponse)
async def get_hackathon_by_slug(slug: str, session: AsyncSession = Depends(get_session)):
    service = HackathonService(session)
    return await service.find_by_slug(slug)


@router.get("/{hackathon_id}", response_model=HackathonResponse)
async def get_hackathon(hackathon_id: str, session: AsyncSession = Depends(get_session)):
    service = HackathonService(session)
    return await service.find_one(hackathon_id)


@router.get("/{hackathon_id}/stats", response_model=HackathonStats)
async def get_hackathon_stats(
    hackathon_id: str,
    admin: CurrentAdmin,
    session: AsyncSession = Depends(get_session),
):
    service = HackathonService(session)
    return await service.get_stats(hackathon_id)


@router.patch("/{hackathon_id}", response_model=HackathonResponse)
async def update_hackathon(
    hackathon_id: str,
    request: UpdateHackathonRequest,
    admin: CurrentAdmin,
    session: AsyncSession = Depends(get_session),
):
    service = HackathonService(session)
    return await service.update(
        hackathon_id, admin.id, request.model_dump(mode="json", exclude_unset=True)
    )


@router.delete("/{hackathon_id}", status_code=204)
async def delete_hackathon(
    hackathon_id: str,
    admin: CurrentAdmin,
    session: AsyncSession = Depends(get_session),
) -> Response:
    service = HackathonService(session)
    await service.remove(hackathon_id, admin.id)
    return Response(status_code=204)


@router.post("/{hackathon_id}/publish", response_model=HackathonResponse)
async def publish_hackathon(
    hackathon_id: str,
    admin: CurrentAdmin,
    session: AsyncSession = Depends(get_session),
):
    """Move a draft hackathon to published."""
    service = HackathonService(session)
    return await service.publish(hackathon_id, admin.id)


@router.post("/{hackathon_id}/activate", response_model=HackathonResponse)
async def activate_hackathon(
    hackathon_id: str,
    admin: CurrentAdmin,
    session: AsyncSession = Depends(get_session),
):
    """Move a published hackathon to active."""
    service = HackathonService(session)
    return await service.activate(hackathon_id, admin.id)


@router.post("/{hackathon_id}/complete", response_model=HackathonResponse)
async def complete_hackathon(
    hackathon_id: str,
    admin: CurrentAdmin,
    session: AsyncSession = Depends(get_session),
):
    """Move an active hackathon to completed."""
    service = HackathonService(session)
    return await service.complete(hackathon_id, admin.id)


@router.post("/{hackathon_id}/announce", response_model=AnnouncementResponse)
async def announce_hackathon(
    hackathon_id: str,
    request: AnnounceHackathonRequest,
    admin: CurrentAdmin,
    notifier: Notifier,
    session: AsyncSession = Depends(get_session),
):
    """Email an announcement about the hackathon through the notification service."""
    service = HackathonService(session)
    return await service.announce(
        hackathon_id,
        admin.id,
        notifier,
        recipients=[recipient.model_dump() for recipient in request.recipients],
        subject=request.subject,
        content=request.content,
        html_content=request.html_content,
    )
