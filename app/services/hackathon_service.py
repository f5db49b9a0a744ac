"""Hackathon service - lifecycle and organizer-scoped CRUD."""

from typing import Any

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from app.clients.notification_client import NotificationClient
from app.core.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from app.persistence.hackathon_repository import HackathonRepository
from app.persistence.query_builder import total_pages
from app.schemas.v1.common import HackathonStatus

logger = structlog.get_logger(__name__)

PUBLIC_STATUSES = (HackathonStatus.PUBLISHED.value, HackathonStatus.ACTIVE.value)

# fields an update may clear by sending null
NULLABLE_FIELDS = frozenset({"banner_url", "logo_url"})

# target status -> the only status it may be entered from
LIFECYCLE_PREDECESSOR: dict[HackathonStatus, HackathonStatus] = {
    HackathonStatus.PUBLISHED: HackathonStatus.DRAFT,
    HackathonStatus.ACTIVE: HackathonStatus.PUBLISHED,
    HackathonStatus.COMPLETED: HackathonStatus.ACTIVE,
}


def _page_response(rows: list[dict[str, Any]], total: int, page: int, limit: int) -> dict[str, Any]:
    return {
        "hackathons": rows,
        "total": total,
        "page": page,
        "total_pages": total_pages(total, limit),
    }


class HackathonService:
    def __init__(self, session: AsyncSession, repository: HackathonRepository | None = None):
        self.session = session
        self.repo = repository or HackathonRepository(session)

    async def create(self, organizer_id: str, data: dict[str, Any]) -> dict[str, Any]:
        """Create a hackathon in draft status.

        Raises:
            ConflictError: If a hackathon with the same title exists
        """
        if await self.repo.get_by_title(data["title"]) is not None:
            raise ConflictError(
                "Hackathon with this title already exists", details={"title": data["title"]}
            )

        hackathon = await self.repo.create(
            organizer_id, {**data, "status": HackathonStatus.DRAFT.value}
        )
        logger.info(
            "Hackathon created", hackathon_id=hackathon["id"], organizer_id=organizer_id
        )
        return hackathon

    async def find_all(
        self,
        organizer_id: str,
        page: int = 1,
        limit: int = 10,
        status: HackathonStatus | None = None,
    ) -> dict[str, Any]:
        """Page through the hackathons owned by one organizer."""
        rows, total = await self.repo.list_page(
            page=page,
            limit=limit,
            status=status.value if status else None,
            organizer_id=organizer_id,
        )
        return _page_response(rows, total, page, limit)

    async def get_public(self, page: int = 1, limit: int = 10) -> dict[str, Any]:
        rows, total = await self.repo.list_page(page=page, limit=limit, statuses=PUBLIC_STATUSES)
        return _page_response(rows, total, page, limit)

    async def find_one(self, hackathon_id: str) -> dict[str, Any]:
        hackathon = await self.repo.get(hackathon_id)
        if hackathon is None:
            raise NotFoundError(f"Hackathon not found: {hackathon_id}")
        return hackathon

    async def find_by_slug(self, slug: str) -> dict[str, Any]:
        """Look up a hackathon by its slug.

        The slug is matched against the title as given first, then with
        dashes read as spaces.
        """
        hackathon = await self.repo.get_by_title(slug)
        if hackathon is None and "-" in slug:
            hackathon = await self.repo.get_by_title(slug.replace("-", " ").strip())
        if hackathon is None:
            raise NotFoundError(f"Hackathon not found: {slug}")
        return hackathon

    async def update(
        self, hackathon_id: str, organizer_id: str, changes: dict[str, Any]
    ) -> dict[str, Any]:
        hackathon = await self._get_owned(hackathon_id, organizer_id)
        changes = {
            key: value
            for key, value in changes.items()
            if value is not None or key in NULLABLE_FIELDS
        }
        changes.pop("status", None)
        if not changes:
            return hackathon

        updated = await self.repo.update(hackathon_id, changes)
        if updated is None:
            raise NotFoundError(f"Hackathon not found: {hackathon_id}")
        logger.info("Hackathon updated", hackathon_id=hackathon_id, fields=sorted(changes))
        return updated

    async def remove(self, hackathon_id: str, organizer_id: str) -> None:
        await self._get_owned(hackathon_id, organizer_id)
        if not await self.repo.delete(hackathon_id):
            raise NotFoundError(f"Hackathon not found: {hackathon_id}")
        logger.info("Hackathon deleted", hackathon_id=hackathon_id)

    async def publish(self, hackathon_id: str, organizer_id: str) -> dict[str, Any]:
        return await self._transition(hackathon_id, organizer_id, HackathonStatus.PUBLISHED)

    async def activate(self, hackathon_id: str, organizer_id: str) -> dict[str, Any]:
        return await self._transition(hackathon_id, organizer_id, HackathonStatus.ACTIVE)

    async def complete(self, hackathon_id: str, organizer_id: str) -> dict[str, Any]:
        return await self._transition(hackathon_id, organizer_id, HackathonStatus.COMPLETED)

    async def announce(
        self,
        hackathon_id: str,
        organizer_id: str,
        notifier: NotificationClient,
        *,
        recipients: list[dict[str, str]],
        subject: str,
        content: str,
        html_content: str | None = None,
    ) -> dict[str, Any]:
        """Email an announcement about a hackathon to each recipient.

        Delivery goes through the notification service one recipient at a
        time; the first failure stops the run and propagates.
        """
        await self._get_owned(hackathon_id, organizer_id)
        for recipient in recipients:
            await notifier.send_hackathon_notification(
                recipient["email"],
                recipient["name"],
                subject,
                content,
                html_content=html_content,
                hackathon_id=hackathon_id,
            )
        logger.info("Hackathon announced", hackathon_id=hackathon_id, recipients=len(recipients))
        return {"hackathon_id": hackathon_id, "sent": len(recipients)}

    async def get_stats(self, hackathon_id: str) -> dict[str, Any]:
        hackathon = await self.find_one(hackathon_id)
        counts = await self.repo.count_related(hackathon_id)
        teams = counts["total_teams"]
        submissions = counts["total_submissions"]
        return {
            "hackathon_id": hackathon["id"],
            "title": hackathon["title"],
            "status": hackathon["status"],
            "total_teams": teams,
            "total_submissions": submissions,
            "submission_rate": (submissions / teams * 100) if teams else 0.0,
        }

    async def _get_owned(self, hackathon_id: str, organizer_id: str) -> dict[str, Any]:
        hackathon = await self.find_one(hackathon_id)
        if hackathon["organizer_id"] != organizer_id:
            logger.warning(
                "Hackathon access denied",
                hackathon_id=hackathon_id,
                organizer_id=organizer_id,
            )
            raise ForbiddenError("Only the organizer can modify this hackathon")
        return hackathon

    async def _transition(
        self, hackathon_id: str, organizer_id: str, target: HackathonStatus
    ) -> dict[str, Any]:
        hackathon = await self._get_owned(hackathon_id, organizer_id)
        required = LIFECYCLE_PREDECESSOR[target]
        if hackathon["status"] != required.value:
            raise ValidationError(
                f"Only {required.value} hackathons can be moved to {target.value}",
                details={"current_status": hackathon["status"], "target_status": target.value},
            )

        updated = await self.repo.update(hackathon_id, {"status": target.value})
        if updated is None:
            raise NotFoundError(f"Hackathon not found: {hackathon_id}")
        logger.info(
            "Hackathon status changed",
            hackathon_id=hackathon_id,
            from_status=required.value,
            to_status=target.value,
        )
        return updated
