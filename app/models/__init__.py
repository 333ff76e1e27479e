"""Database models package."""

from app.models.collection import StoredCollection
from app.models.notification import Notification, NotificationLevel

__all__ = [
    # Key-value store
    "StoredCollection",
    # Notification
    "Notification",
    "NotificationLevel",
]
