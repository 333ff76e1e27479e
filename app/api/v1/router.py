"""Main API router aggregating all module routers."""

from fastapi import APIRouter

from app.api.v1.endpoints import (
    dashboard,
    notifications,
    students,
    transcripts,
    uploads,
)
from app.schemas.common import ErrorResponse

# Every error is returned in the same envelope
api_router = APIRouter(
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
    },
)

# Students
api_router.include_router(
    students.router,
    prefix="/students",
    tags=["Students"],
)

# Transcripts
api_router.include_router(
    transcripts.router,
    prefix="/transcripts",
    tags=["Transcripts"],
)

# Spreadsheet import and template
api_router.include_router(
    uploads.router,
    prefix="/uploads",
    tags=["Uploads"],
)

# Dashboard
api_router.include_router(
    dashboard.router,
    prefix="/dashboard",
    tags=["Dashboard"],
)

# Notifications
api_router.include_router(
    notifications.router,
    prefix="/notifications",
    tags=["Notifications"],
)
