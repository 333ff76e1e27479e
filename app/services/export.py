"""Spreadsheet generation: import template and single-transcript export."""

import re
from io import BytesIO
from urllib.parse import quote

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

from app.core.config import settings
from app.schemas.grading import GRADE_SCALES, PASS_BANDS, ScoringScheme
from app.schemas.transcript import Transcript
from app.services.grading import score_bounds, summarize_transcript
from app.services.normalizer import FIELD_ALIASES, SCORE_SUFFIXES, subject_column

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

# Header -> explanatory text and example value for the identity and comment columns
TEMPLATE_FIELDS = {
    "name": ("REQUIRED: Full student name", "John Doe"),
    "admissionNumber": ("REQUIRED: Unique admission number", "ADM/2024/001"),
    "course": ("REQUIRED: Course name", "Electrical Installation"),
    "schoolYear": ("Optional: School year", "2024"),
    "closingDay": ("Optional: Term closing date", "2024-11-29"),
    "openingDay": ("Optional: Next term opening date", "2025-01-06"),
    "feeBalance": ("Optional: Outstanding fee balance", "0"),
    "managerComments": ("Optional: Manager's comments", "Keep up the good work."),
    "hodComments": ("Optional: HOD's comments", "Good progress."),
    "hodName": ("Optional: Name of the HOD", "Jane Smith"),
    "remarks": ("Optional: General remarks", "Satisfactory."),
}

# Example scores per unit: (cat, exam)
EXAMPLE_SCORES = (25, 55)


def _styles() -> dict:
    thin = Side(style="thin")
    return {
        "title_font": Font(bold=True, size=14),
        "header_font": Font(bold=True, color="FFFFFF"),
        "header_fill": PatternFill(start_color="4472C4", end_color="4472C4", fill_type="solid"),
        "note_fill": PatternFill(start_color="FFF2CC", end_color="FFF2CC", fill_type="solid"),
        "total_fill": PatternFill(start_color="B4C6E7", end_color="B4C6E7", fill_type="solid"),
        "border": Border(left=thin, right=thin, top=thin, bottom=thin),
        "center": Alignment(horizontal="center", vertical="center"),
        "wrap": Alignment(vertical="top", wrap_text=True),
    }


def transcript_file_name(student_name: str) -> str:
    """Export file name derived from the student's name."""
    stem = re.sub(r"\W+", "_", student_name, flags=re.UNICODE).strip("_") or "student"
    return f"{stem}_transcript.xlsx"


def content_disposition(file_name: str) -> str:
    """Attachment header with an ASCII fallback and an RFC 5987 UTF-8 name."""
    fallback = file_name.encode("ascii", "ignore").decode("ascii") or "transcript.xlsx"
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(file_name)}"


class ExportService:
    """Builds Excel workbooks for the import template and transcript exports."""

    def __init__(
        self,
        course_units: list[str] | None = None,
        scheme: ScoringScheme | None = None,
    ):
        self.course_units = list(course_units if course_units is not None else settings.COURSE_UNITS)
        self.scheme = scheme or settings.SCORING_SCHEME

    def template_headers(self) -> list[str]:
        """Every canonical column, identity fields first, then per-unit scores."""
        headers = list(FIELD_ALIASES)
        for unit_name in self.course_units:
            headers.extend(subject_column(unit_name, part) for part in SCORE_SUFFIXES)
        return headers

    # ==========================================
    # Template Generation
    # ==========================================

    def generate_template(self) -> bytes:
        """Generate the Excel template for transcript import.

        Row 1 holds the headers, row 2 explains each column, row 3 is an
        example record and row 4 is a blank scaffold row. Rows 2 and 3 are
        recognised as template text and skipped on import.
        """
        styles = _styles()
        wb = Workbook()
        ws = wb.active
        ws.title = "Transcripts"

        headers = self.template_headers()
        notes, example = self._template_rows()

        for col_idx, header in enumerate(headers, start=1):
            cell = ws.cell(row=1, column=col_idx, value=header)
            cell.font = styles["header_font"]
            cell.fill = styles["header_fill"]
            cell.border = styles["border"]
            cell.alignment = styles["center"]

            note_cell = ws.cell(row=2, column=col_idx, value=notes[col_idx - 1])
            note_cell.fill = styles["note_fill"]
            note_cell.border = styles["border"]
            note_cell.alignment = styles["wrap"]

            ws.cell(row=3, column=col_idx, value=example[col_idx - 1]).border = styles["border"]
            ws.cell(row=4, column=col_idx).border = styles["border"]

            ws.column_dimensions[get_column_letter(col_idx)].width = max(14, len(header) + 4)

        self._add_instructions_sheet(wb, styles)

        output = BytesIO()
        wb.save(output)
        output.seek(0)
        return output.getvalue()

    def _template_rows(self) -> tuple[list[str], list]:
        notes = [TEMPLATE_FIELDS[key][0] for key in FIELD_ALIASES]
        example: list = [TEMPLATE_FIELDS[key][1] for key in FIELD_ALIASES]

        cat_low, cat_high = score_bounds("cat", self.scheme)
        exam_low, exam_high = score_bounds("exam", self.scheme)
        cat_example, exam_example = EXAMPLE_SCORES
        if self.scheme == ScoringScheme.EXAM_ONLY:
            cat_example, exam_example = None, cat_example + exam_example

        for _ in self.course_units:
            notes.extend([
                f"CAT score ({cat_low:g}-{cat_high:g})",
                f"EXAM score ({exam_low:g}-{exam_high:g})",
                "Optional: calculated when blank",
            ])
            example.extend([cat_example, exam_example, None])
        return notes, example

    def _add_instructions_sheet(self, wb: Workbook, styles: dict) -> None:
        ws = wb.create_sheet("Instructions")
        ws.column_dimensions["A"].width = 28
        ws.column_dimensions["B"].width = 70

        instructions = [
            ("TRANSCRIPT IMPORT INSTRUCTIONS", ""),
            ("", ""),
            ("REQUIRED COLUMNS:", ""),
            ("name", "Student's full name"),
            ("admissionNumber", "Unique admission number; existing students are matched on it"),
            ("course", "Course the student is enrolled in"),
            ("", ""),
            ("OPTIONAL COLUMNS:", ""),
            ("schoolYear, closingDay, openingDay", "Term details shown on the transcript"),
            ("feeBalance", "Outstanding fee balance"),
            ("managerComments, hodComments, hodName, remarks", "Comments printed on the transcript"),
            ("<UNIT>_CAT / _EXAM / _TOTAL", "Scores per course unit; TOTAL is calculated when left blank"),
            ("", ""),
            ("NOTES:", ""),
            ("Blank cells", "Leave existing values unchanged when re-importing"),
            ("Rows 2 and 3", "Explanation and example rows are ignored on import"),
            ("", ""),
            ("COURSE UNITS:", ""),
        ]
        instructions.extend((f"{idx}.", name) for idx, name in enumerate(self.course_units, start=1))
        instructions.append(("", ""))
        instructions.append(("GRADING SYSTEM:", ""))
        instructions.extend((scale.grade, scale.range) for scale in GRADE_SCALES)
        instructions.append(("", ""))
        instructions.append(("PASS LEVELS:", ""))
        instructions.extend(
            (band.level, f"{band.min_total:g}-{band.max_total:g}") for band in PASS_BANDS
        )

        for row_idx, (col1, col2) in enumerate(instructions, start=1):
            cell1 = ws.cell(row=row_idx, column=1, value=col1)
            ws.cell(row=row_idx, column=2, value=col2)
            if row_idx == 1:
                cell1.font = styles["title_font"]
            elif col1 and col1.endswith(":"):
                cell1.font = Font(bold=True)

    # ==========================================
    # Transcript Export
    # ==========================================

    def export_transcript(self, transcript: Transcript) -> tuple[bytes, str]:
        """Export one transcript as a workbook. Returns (content, file_name)."""
        styles = _styles()
        summary = summarize_transcript(transcript, self.scheme)
        student = transcript.student

        wb = Workbook()
        ws = wb.active
        ws.title = "Transcript"

        identity = [
            "Name", student.name,
            "Admission No", student.admission_number,
            "Course", student.course,
            "School Year", student.school_year,
        ]
        for col_idx, value in enumerate(identity, start=1):
            cell = ws.cell(row=1, column=col_idx, value=value)
            if col_idx % 2 == 1:
                cell.font = Font(bold=True)

        # Row 2 is the blank separator
        table_headers = ["COURSE UNIT", "CAT", "EXAM", "TOTAL", "GRADE"]
        for col_idx, header in enumerate(table_headers, start=1):
            cell = ws.cell(row=3, column=col_idx, value=header)
            cell.font = styles["header_font"]
            cell.fill = styles["header_fill"]
            cell.border = styles["border"]
            cell.alignment = styles["center"]

        row_idx = 4
        for unit in transcript.course_units:
            values = [unit.name, unit.cat, unit.exam, unit.total, unit.grade]
            for col_idx, value in enumerate(values, start=1):
                ws.cell(row=row_idx, column=col_idx, value=value).border = styles["border"]
            row_idx += 1

        totals = ["Total", None, None, summary.school_total, summary.pass_level]
        for col_idx, value in enumerate(totals, start=1):
            cell = ws.cell(row=row_idx, column=col_idx, value=value)
            cell.font = Font(bold=True)
            cell.fill = styles["total_fill"]
            cell.border = styles["border"]
        row_idx += 2

        comments = [
            ("Remarks", summary.remarks),
            ("Manager's Comments", summary.manager_comments),
            ("HOD's Comments", summary.hod_comments),
            ("HOD Name", transcript.hod_name),
            ("Closing Day", transcript.closing_day),
            ("Opening Day", transcript.opening_day),
            ("Fee Balance", transcript.fee_balance),
        ]
        for label, text in comments:
            ws.cell(row=row_idx, column=1, value=label).font = Font(bold=True)
            ws.cell(row=row_idx, column=2, value=text)
            row_idx += 1

        ws.column_dimensions["A"].width = 28
        for col in ("B", "C", "D", "E", "F", "G", "H"):
            ws.column_dimensions[col].width = 16

        output = BytesIO()
        wb.save(output)
        output.seek(0)
        return output.getvalue(), transcript_file_name(student.name)
