"""Upload endpoints for Excel file processing."""

import logging
from io import BytesIO

from fastapi import APIRouter, File, UploadFile
from fastapi.responses import StreamingResponse

from app.core.config import settings
from app.core.database import DbSession
from app.core.dependencies import Registry
from app.core.exceptions import UploadError
from app.schemas.upload import ImportResult
from app.services.export import XLSX_MEDIA_TYPE, ExportService
from app.services.upload import UploadService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/transcripts", response_model=ImportResult)
def upload_transcripts(
    db: DbSession,
    registry: Registry,
    file: UploadFile = File(...),
):
    """
    Import students and grades from an Excel file.

    - Rows are matched to existing students by admission number
    - Blank cells keep the stored values
    - Template explanation/example rows are skipped
    - Partial success is allowed (failing rows are skipped and logged)
    - Status is "failed" when every data row was rejected

    Download the template first to see the expected columns.
    """
    if not file.filename:
        raise UploadError("No file provided")

    if not any(file.filename.lower().endswith(ext) for ext in settings.ALLOWED_EXTENSIONS):
        logger.warning(f"[UPLOAD] Rejected '{file.filename}': unsupported file type")
        raise UploadError(
            f"Only {', '.join(settings.ALLOWED_EXTENSIONS)} files are allowed",
            details={"file_name": file.filename},
        )

    content = file.file.read()
    if len(content) > settings.MAX_UPLOAD_SIZE_MB * 1024 * 1024:
        logger.warning(f"[UPLOAD] Rejected '{file.filename}': {len(content)} bytes")
        raise UploadError(f"File size exceeds {settings.MAX_UPLOAD_SIZE_MB}MB limit")

    service = UploadService(db, registry)
    return service.process_transcript_upload(content, file.filename)


@router.get("/template")
def download_template(registry: Registry):
    """Download the Excel template for transcript import."""
    content = ExportService(registry.course_units).generate_template()

    return StreamingResponse(
        BytesIO(content),
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": "attachment; filename=transcripts_template.xlsx"},
    )
