"""Spreadsheet import schemas."""

import enum
from datetime import date, datetime
from decimal import Decimal
from typing import Union

from app.schemas.common import BaseSchema, CamelSchema

# A decoded spreadsheet row: header text -> cell value
CellValue = Union[str, int, float, Decimal, bool, date, datetime, None]
RawRow = dict[str, CellValue]


class SubjectScores(BaseSchema):
    """Scores supplied by a row for one course unit; None means absent."""

    cat: float | None = None
    exam: float | None = None
    total: float | None = None

    @property
    def is_empty(self) -> bool:
        return self.cat is None and self.exam is None and self.total is None


class CanonicalRow(BaseSchema):
    """A spreadsheet row rewritten into canonical field names.

    Text fields are empty strings when absent.
    """

    row_number: int = 0
    name: str = ""
    admission_number: str = ""
    course: str = ""
    school_year: str = ""
    closing_day: str = ""
    opening_day: str = ""
    fee_balance: str = ""
    manager_comments: str = ""
    hod_comments: str = ""
    hod_name: str = ""
    remarks: str = ""
    scores: dict[str, SubjectScores] = {}


class ImportStatus(str, enum.Enum):
    """Outcome of an import attempt."""

    SUCCESS = "success"
    PARTIAL = "partial"
    FAILED = "failed"


class ImportResult(CamelSchema):
    """Aggregate counts reported to the caller after an import."""

    status: ImportStatus
    students_added: int
    students_updated: int
    rows_skipped: int = 0
    rows_failed: int = 0
    message: str
