"""FastAPI dependency injection utilities."""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.services.transcript import TranscriptService


def get_transcript_service(
    db: Annotated[Session, Depends(get_db)],
) -> TranscriptService:
    """Registry loaded from the store for this request."""
    return TranscriptService(db)


# Type alias for dependency injection
Registry = Annotated[TranscriptService, Depends(get_transcript_service)]
