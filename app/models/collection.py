"""Key-value collection model."""

from typing import Any

from sqlalchemy import JSON, String
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base
from app.models.base import TimestampMixin


class StoredCollection(Base, TimestampMixin):
    """A whole collection of records stored under one key.

    Each write replaces the full payload; there are no partial patches.
    """

    __tablename__ = "collections"

    key: Mapped[str] = mapped_column(String(64), primary_key=True)
    payload: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)

    def __repr__(self) -> str:
        return f"<StoredCollection(key={self.key}, size={len(self.payload or [])})>"
