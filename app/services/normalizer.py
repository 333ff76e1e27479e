"""Column normalization for imported spreadsheet rows.

This is the only code that reads decoded rows directly. It maps the many
header spellings seen in older templates onto canonical field names and
converts cells into typed values.
"""

from datetime import date, datetime
from decimal import Decimal, InvalidOperation

from app.core.config import settings
from app.core.exceptions import ValidationError
from app.schemas.upload import CanonicalRow, CellValue, RawRow, SubjectScores

# Canonical key -> accepted header aliases, tried in order
FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "name": ("name", "Name", "NAME"),
    "admissionNumber": ("admissionNumber", "Admission Number", "ADMISSION_NUMBER"),
    "course": ("course", "Course", "COURSE"),
    "schoolYear": ("schoolYear", "School Year", "SCHOOL_YEAR"),
    "closingDay": ("closingDay", "Closing Day", "CLOSING_DAY"),
    "openingDay": ("openingDay", "Opening Day", "OPENING_DAY"),
    "feeBalance": ("feeBalance", "Fee Balance", "FEE_BALANCE"),
    "managerComments": ("managerComments", "Manager Comments", "MANAGER_COMMENTS"),
    "hodComments": ("hodComments", "HOD Comments", "HOD_COMMENTS"),
    "hodName": ("hodName", "HOD Name", "HOD_NAME"),
    "remarks": ("remarks", "Remarks", "REMARKS"),
}

# Canonical key -> CanonicalRow attribute
FIELD_ATTRIBUTES = {
    "name": "name",
    "admissionNumber": "admission_number",
    "course": "course",
    "schoolYear": "school_year",
    "closingDay": "closing_day",
    "openingDay": "opening_day",
    "feeBalance": "fee_balance",
    "managerComments": "manager_comments",
    "hodComments": "hod_comments",
    "hodName": "hod_name",
    "remarks": "remarks",
}

REQUIRED_FIELDS = ("name", "admissionNumber", "course")

SCORE_SUFFIXES = {"cat": "CAT", "exam": "EXAM", "total": "TOTAL"}


def subject_column(unit_name: str, part: str) -> str:
    """Spreadsheet column for one score of a course unit, e.g. MATHEMATICS_CAT."""
    return f"{unit_name}_{SCORE_SUFFIXES[part]}"


def lookup(row: RawRow, canonical_key: str) -> CellValue:
    """First aliased cell present in the row with a non-blank value."""
    for alias in FIELD_ALIASES[canonical_key]:
        value = row.get(alias)
        if value is None or (isinstance(value, str) and not value.strip()):
            continue
        return value
    return None


def to_text(value: CellValue) -> str:
    """Render a cell as trimmed text; absent cells become an empty string."""
    if value is None:
        return ""
    if isinstance(value, datetime):
        return value.date().isoformat() if value.time() == datetime.min.time() else value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def to_score(value: CellValue, column: str) -> float | None:
    """Parse a numeric cell. Blank cells are absent, never zero."""
    if value is None:
        return None
    # bool is an int subclass and datetime a date subclass
    if isinstance(value, (bool, date)):
        raise ValidationError(
            f"Expected a number in '{column}'",
            details={"column": column, "value": str(value)},
        )
    if isinstance(value, (int, float, Decimal)):
        return float(value)

    text = str(value).strip()
    if not text:
        return None
    try:
        number = Decimal(text)
    except InvalidOperation:
        raise ValidationError(
            f"Invalid number '{text}' in '{column}'",
            details={"column": column, "value": text},
        )
    if not number.is_finite():
        raise ValidationError(
            f"Invalid number '{text}' in '{column}'",
            details={"column": column, "value": text},
        )
    return float(number)


def normalize_text_fields(row: RawRow) -> dict[str, str]:
    """Canonical text fields of a row. Never raises."""
    return {key: to_text(lookup(row, key)) for key in FIELD_ALIASES}


def normalize_row(
    row: RawRow,
    course_units: list[str] | None = None,
    row_number: int = 0,
) -> CanonicalRow:
    """Rewrite a raw row into a CanonicalRow.

    Subject columns are matched exactly against the registered unit names.
    Raises ValidationError when a score cell holds something that is not a number.
    """
    course_units = course_units if course_units is not None else settings.COURSE_UNITS
    text = normalize_text_fields(row)

    scores: dict[str, SubjectScores] = {}
    for unit_name in course_units:
        parts = {
            part: to_score(row.get(subject_column(unit_name, part)), subject_column(unit_name, part))
            for part in SCORE_SUFFIXES
        }
        subject_scores = SubjectScores(**parts)
        if not subject_scores.is_empty:
            scores[unit_name] = subject_scores

    return CanonicalRow(
        row_number=row_number,
        scores=scores,
        **{FIELD_ATTRIBUTES[key]: value for key, value in text.items()},
    )
