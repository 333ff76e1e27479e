"""Student, course unit and transcript schemas."""

from pydantic import Field

from app.schemas.common import CamelSchema, PaginatedResponse


# ==========================================
# Records
# ==========================================

class Student(CamelSchema):
    """Student identity record. admission_number is the business key."""

    id: str
    name: str
    admission_number: str
    course: str
    school_year: str = ""
    transcript_id: str


class CourseUnit(CamelSchema):
    """A subject's assessment record within a transcript."""

    id: str
    name: str
    cat: float | None = None
    exam: float | None = None
    total: float | None = None
    grade: str | None = None


class Transcript(CamelSchema):
    """Transcript aggregate with an embedded copy of its student."""

    id: str
    student: Student
    course_units: list[CourseUnit] = []
    remarks: str = ""
    manager_comments: str = ""
    hod_comments: str = ""
    hod_name: str = ""
    closing_day: str = ""
    opening_day: str = ""
    fee_balance: str = ""

    def find_unit(self, unit_id: str) -> CourseUnit | None:
        return next((u for u in self.course_units if u.id == unit_id), None)


# Free-text transcript fields merged from spreadsheet rows and editable by hand
TRANSCRIPT_TEXT_FIELDS = (
    "remarks",
    "manager_comments",
    "hod_comments",
    "hod_name",
    "closing_day",
    "opening_day",
    "fee_balance",
)


# ==========================================
# Requests
# ==========================================

class StudentCreate(CamelSchema):
    """Manual student creation."""

    name: str = Field(..., min_length=1, max_length=255)
    admission_number: str = Field(..., min_length=1, max_length=100)
    course: str = Field(..., min_length=1, max_length=255)
    school_year: str = Field("", max_length=50)


class StudentUpdate(CamelSchema):
    """Partial student update."""

    name: str | None = Field(None, min_length=1, max_length=255)
    admission_number: str | None = Field(None, min_length=1, max_length=100)
    course: str | None = Field(None, min_length=1, max_length=255)
    school_year: str | None = Field(None, max_length=50)


class TranscriptUpdate(CamelSchema):
    """Partial update of transcript free-text fields."""

    remarks: str | None = None
    manager_comments: str | None = None
    hod_comments: str | None = None
    hod_name: str | None = None
    closing_day: str | None = None
    opening_day: str | None = None
    fee_balance: str | None = None


class CourseUnitEdit(CamelSchema):
    """Single-field manual edit of a course unit score."""

    field: str = Field(..., pattern="^(cat|exam|total)$")
    value: float | None = None


# ==========================================
# Responses
# ==========================================

class PaginatedStudentResponse(PaginatedResponse):
    """Paginated student list."""

    items: list[Student]


class TranscriptSummary(CamelSchema):
    """Derived read of a transcript: totals, pass level and display text."""

    transcript_id: str
    school_total: float
    average: int
    graded_units: int
    pass_level: str
    remarks: str
    manager_comments: str
    hod_comments: str
