"""Key-value collection store backed by the database."""

import logging
from typing import Any

from sqlalchemy.orm import Session

from app.models.collection import StoredCollection

logger = logging.getLogger(__name__)

STUDENTS_KEY = "students"
TRANSCRIPTS_KEY = "transcripts"


class CollectionStore:
    """Get/set whole collections of records by key.

    Writes are full-snapshot overwrites, so a repeated write of the same
    snapshot is idempotent. Writes are flushed, not committed; the caller
    commits a group of writes as one transaction.
    """

    def __init__(self, db: Session):
        self.db = db

    def get(self, key: str) -> list[dict[str, Any]]:
        """Return the stored collection, or an empty list if never written."""
        row = self.db.get(StoredCollection, key)
        if row is None:
            return []
        return list(row.payload or [])

    def set(self, key: str, items: list[dict[str, Any]]) -> None:
        """Replace the whole collection stored under key."""
        row = self.db.get(StoredCollection, key)
        if row is None:
            row = StoredCollection(key=key, payload=items)
            self.db.add(row)
        else:
            row.payload = items
        self.db.flush()
        logger.debug(f"[STORE] Wrote {len(items)} records to '{key}'")
