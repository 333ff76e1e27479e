"""Notification endpoints."""

from fastapi import APIRouter, Query

from app.core.database import DbSession
from app.schemas.common import MessageResponse
from app.schemas.notification import (
    NotificationMarkRead,
    NotificationResponse,
    NotificationStats,
)
from app.services.notification import NotificationService

router = APIRouter()


@router.get("", response_model=list[NotificationResponse])
def list_notifications(
    db: DbSession,
    is_read: bool | None = None,
    limit: int = Query(50, ge=1, le=200),
):
    """List notifications, newest first."""
    service = NotificationService(db)
    return service.list_notifications(is_read, limit)


@router.get("/stats", response_model=NotificationStats)
def get_notification_stats(db: DbSession):
    """Get notification statistics."""
    service = NotificationService(db)
    return service.get_stats()


@router.post("/mark-read", response_model=MessageResponse)
def mark_notifications_read(
    request: NotificationMarkRead,
    db: DbSession,
):
    """Mark notifications as read."""
    service = NotificationService(db)
    count = service.mark_as_read(request.notification_ids)
    return MessageResponse(message=f"{count} notifications marked as read")
