"""Dependency injection type aliases."""

from typing import Annotated

from fastapi import Depends, Request

from app.clients.notification_client import NotificationClient
from app.core.auth import (
    AuthenticatedAdmin,
    AuthenticatedUser,
    CurrentAdmin,
    CurrentUser,
    SuperAdmin,
    require_api_key,
)


def get_notification_client(request: Request) -> NotificationClient:
    return request.app.state.notification_client


Notifier = Annotated[NotificationClient, Depends(get_notification_client)]

__all__ = [
    "AuthenticatedAdmin",
    "AuthenticatedUser",
    "CurrentAdmin",
    "CurrentUser",
    "Notifier",
    "SuperAdmin",
    "get_notification_client",
    "require_api_key",
]
