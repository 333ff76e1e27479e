"""Notification service."""

import logging
from datetime import datetime, timezone

from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.models.notification import Notification, NotificationLevel
from app.schemas.notification import NotificationResponse, NotificationStats

logger = logging.getLogger(__name__)


class NotificationService:
    """Notification sink for success, warning and error messages."""

    def __init__(self, db: Session):
        self.db = db

    def notify(self, level: NotificationLevel, title: str, message: str) -> None:
        """Record a notification. Fire-and-forget: failures are logged, never raised."""
        log = logger.error if level == NotificationLevel.ERROR else logger.info
        log(f"[NOTIFY] {level.value}: {title} - {message}")
        try:
            self.db.add(Notification(level=level, title=title, message=message))
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception("[NOTIFY] Failed to store notification")

    def list_notifications(
        self,
        is_read: bool | None = None,
        limit: int = 50,
    ) -> list[NotificationResponse]:
        """List notifications, newest first."""
        query = select(Notification)
        if is_read is not None:
            query = query.where(Notification.is_read == is_read)
        query = query.order_by(Notification.created_at.desc(), Notification.id.desc()).limit(limit)

        result = self.db.execute(query)
        return [NotificationResponse.model_validate(n) for n in result.scalars().all()]

    def mark_as_read(self, notification_ids: list[int]) -> int:
        """Mark notifications as read. Returns count of updated."""
        result = self.db.execute(
            update(Notification)
            .where(
                Notification.id.in_(notification_ids),
                Notification.is_read == False,  # noqa: E712
            )
            .values(is_read=True, read_at=datetime.now(timezone.utc))
        )
        self.db.flush()
        return result.rowcount

    def get_stats(self) -> NotificationStats:
        """Get notification statistics."""
        total = self.db.execute(select(func.count(Notification.id))).scalar() or 0
        unread = (
            self.db.execute(
                select(func.count(Notification.id)).where(Notification.is_read == False)  # noqa: E712
            ).scalar()
            or 0
        )
        return NotificationStats(total=total, unread=unread, read=total - unread)


# Convenience functions for import outcomes
def notify_import_succeeded(
    db: Session,
    file_name: str,
    students_added: int,
    students_updated: int,
    rows_failed: int = 0,
) -> None:
    """Send the terminal notification for a completed import."""
    message = (
        f"Import of '{file_name}' successful: {students_added} students added, "
        f"{students_updated} students updated"
    )
    level = NotificationLevel.SUCCESS
    if rows_failed:
        message += f" ({rows_failed} rows could not be processed)"
        level = NotificationLevel.WARNING
    NotificationService(db).notify(level, "Import Complete", message)


def notify_import_failed(db: Session, file_name: str, reason: str) -> None:
    """Send the terminal notification for a rejected import."""
    NotificationService(db).notify(
        NotificationLevel.ERROR,
        "Import Failed",
        f"Import of '{file_name}' failed: {reason}",
    )
