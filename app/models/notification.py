"""Notification model."""

import enum
from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, Enum, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base
from app.models.base import IDMixin


class NotificationLevel(str, enum.Enum):
    """Notification severity."""

    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class Notification(Base, IDMixin):
    """User-facing notification (import outcomes and similar)."""

    __tablename__ = "notifications"

    level: Mapped[NotificationLevel] = mapped_column(
        Enum(NotificationLevel),
        nullable=False,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)

    # Status
    is_read: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    read_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        server_default=func.now(),
        nullable=False,
        index=True,
    )

    def __repr__(self) -> str:
        return f"<Notification(id={self.id}, level={self.level}, title={self.title})>"
