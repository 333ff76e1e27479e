"""Transcript endpoints: edits, summary and export."""

from io import BytesIO

from fastapi import APIRouter
from fastapi.responses import StreamingResponse

from app.core.dependencies import Registry
from app.schemas.transcript import CourseUnitEdit, Transcript, TranscriptSummary, TranscriptUpdate
from app.services.export import XLSX_MEDIA_TYPE, ExportService, content_disposition
from app.services.grading import summarize_transcript

router = APIRouter()


@router.get("/{transcript_id}", response_model=Transcript)
def get_transcript(transcript_id: str, registry: Registry):
    """Get a transcript by ID."""
    return registry.get_transcript(transcript_id)


@router.patch("/{transcript_id}", response_model=Transcript)
def update_transcript(transcript_id: str, request: TranscriptUpdate, registry: Registry):
    """Update remarks, comments and term details."""
    return registry.update_transcript(transcript_id, request)


@router.patch("/{transcript_id}/course-units/{unit_id}", response_model=Transcript)
def edit_course_unit(
    transcript_id: str,
    unit_id: str,
    request: CourseUnitEdit,
    registry: Registry,
):
    """
    Edit one score of a course unit.

    - Editing CAT or EXAM recalculates TOTAL and GRADE once both are present
    - Editing TOTAL recalculates GRADE only
    """
    return registry.edit_course_unit(transcript_id, unit_id, request)


@router.get("/{transcript_id}/summary", response_model=TranscriptSummary)
def get_transcript_summary(transcript_id: str, registry: Registry):
    """School total, average, pass level and display comments."""
    return summarize_transcript(registry.get_transcript(transcript_id))


@router.get("/{transcript_id}/export")
def export_transcript(transcript_id: str, registry: Registry):
    """Download a transcript as an Excel file."""
    transcript = registry.get_transcript(transcript_id)
    content, file_name = ExportService(registry.course_units).export_transcript(transcript)

    return StreamingResponse(
        BytesIO(content),
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": content_disposition(file_name)},
    )
