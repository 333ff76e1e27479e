"""Upload processing service for transcript spreadsheets."""

import logging
from io import BytesIO

from openpyxl import load_workbook
from sqlalchemy.orm import Session

from app.core.exceptions import DecodeError, EmptyImportError, ValidationError
from app.schemas.upload import ImportResult, ImportStatus, RawRow
from app.services.merge import MergeOutcome, MergeService
from app.services.normalizer import normalize_row
from app.services.notification import notify_import_failed, notify_import_succeeded
from app.services.row_filter import filter_data_rows
from app.services.transcript import TranscriptService

logger = logging.getLogger(__name__)


class UploadService:
    """Spreadsheet import: decode, filter, normalize, merge, tally."""

    def __init__(self, db: Session, registry: TranscriptService | None = None):
        self.db = db
        self.registry = registry or TranscriptService(db)
        self.merger = MergeService(self.registry)

    def process_transcript_upload(self, file_content: bytes, file_name: str) -> ImportResult:
        """
        Import students and grades from an Excel file.
        Allows partial success - rows that fail are skipped and logged.
        Sends exactly one notification for the attempt.
        """
        logger.info(f"[IMPORT] Starting import of '{file_name}' ({len(file_content)} bytes)")
        try:
            rows = self._parse_excel(file_content)
            result = self.import_rows(rows)
        except (DecodeError, EmptyImportError) as e:
            logger.warning(f"[IMPORT] '{file_name}' rejected: {e.message}")
            notify_import_failed(self.db, file_name, e.message)
            raise

        if result.status == ImportStatus.FAILED:
            logger.warning(f"[IMPORT] '{file_name}' failed: all {result.rows_failed} data rows were rejected")
            notify_import_failed(
                self.db,
                file_name,
                f"no valid student records found ({result.rows_failed} rows could not be processed)",
            )
            return result

        notify_import_succeeded(
            self.db,
            file_name,
            result.students_added,
            result.students_updated,
            result.rows_failed,
        )
        return result

    def import_rows(self, rows: list[RawRow]) -> ImportResult:
        """Drive filter -> normalize -> merge over decoded rows.

        Raises EmptyImportError before touching the registries when no row
        qualifies as data.
        """
        data_rows = filter_data_rows(rows)
        skipped = len(rows) - len(data_rows)
        if not data_rows:
            raise EmptyImportError(
                "No valid data rows found in the spreadsheet. Please check the template format.",
                details={"decoded_rows": len(rows)},
            )

        added = 0
        updated = 0
        failed = 0
        for row_num, raw in data_rows:
            try:
                row = normalize_row(raw, self.registry.course_units, row_number=row_num)
                outcome = self.merger.merge_row(row)
            except ValidationError as e:
                failed += 1
                logger.warning(
                    f"[IMPORT] Row {row_num} FAILED - {e.message} "
                    f"(column={e.details.get('column')}, value={e.details.get('value')})"
                )
                continue
            except Exception:
                failed += 1
                logger.exception(f"[IMPORT] Row {row_num} FAILED - unexpected error")
                continue

            if outcome == MergeOutcome.ADDED:
                added += 1
            else:
                updated += 1

        logger.info(
            f"[IMPORT] Complete - added: {added}, updated: {updated}, "
            f"skipped: {skipped}, failed: {failed}"
        )
        if failed and not added + updated:
            status = ImportStatus.FAILED
        elif failed:
            status = ImportStatus.PARTIAL
        else:
            status = ImportStatus.SUCCESS
        return ImportResult(
            status=status,
            students_added=added,
            students_updated=updated,
            rows_skipped=skipped,
            rows_failed=failed,
            message=self._get_result_message(added, updated, failed),
        )

    def _parse_excel(self, file_content: bytes) -> list[RawRow]:
        """Decode the first worksheet into header -> value dictionaries.

        Headers keep their original text (trimmed); matching them is the
        normalizer's job. Blank rows are kept so row numbers stay aligned.
        """
        try:
            workbook = load_workbook(filename=BytesIO(file_content), read_only=True, data_only=True)
        except Exception as e:
            raise DecodeError(f"Failed to read Excel file: {str(e)}")

        try:
            if not workbook.worksheets:
                raise DecodeError("Excel file has no worksheets")
            sheet = workbook.worksheets[0]

            rows = list(sheet.iter_rows(values_only=True))
            logger.debug(f"[EXCEL PARSE] Total raw rows in Excel (including header): {len(rows)}")
            if not rows:
                raise DecodeError("Excel file has no header row")

            headers = [str(h).strip() if h is not None else "" for h in rows[0]]
            if not any(headers):
                raise DecodeError("Excel file has an empty header row")
            logger.debug(f"[EXCEL PARSE] Detected headers: {headers}")

            data: list[RawRow] = []
            for row in rows[1:]:
                row_dict: RawRow = {}
                for i, value in enumerate(row):
                    if i < len(headers) and headers[i]:
                        row_dict[headers[i]] = value
                data.append(row_dict)

            logger.info(f"[EXCEL PARSE] {len(data)} rows decoded below the header")
            return data
        finally:
            workbook.close()

    def _get_result_message(self, added: int, updated: int, failed: int) -> str:
        """Generate result message for an import."""
        if failed and not added + updated:
            return f"Import failed: no valid student records found. {failed} rows could not be processed."
        message = f"Import successful: {added} students added, {updated} students updated."
        if failed:
            message += f" {failed} rows could not be processed."
        return message
