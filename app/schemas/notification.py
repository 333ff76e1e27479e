"""Notification schemas."""

from datetime import datetime

from app.models.notification import NotificationLevel
from app.schemas.common import CamelSchema


class NotificationResponse(CamelSchema):
    """Notification response schema."""

    id: int
    level: NotificationLevel
    title: str
    message: str
    is_read: bool
    read_at: datetime | None
    created_at: datetime


class NotificationMarkRead(CamelSchema):
    """Mark notifications as read."""

    notification_ids: list[int]


class NotificationStats(CamelSchema):
    """Notification statistics."""

    total: int
    unread: int
    read: int
