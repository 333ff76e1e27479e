"""Dashboard schemas."""

from pydantic import Field

from app.schemas.common import BaseSchema, CamelSchema
from app.schemas.transcript import Student


class GradeDistribution(BaseSchema):
    """Count of graded course units per letter."""

    A: int = 0
    B: int = 0
    C: int = 0
    D: int = 0
    E: int = 0


class CourseUnitAverage(CamelSchema):
    """Average total for one course unit across graded transcripts."""

    name: str
    graded_count: int
    average_total: float | None = None


class StudentRanking(CamelSchema):
    """A student's place by school total."""

    rank: int
    student_id: str
    name: str
    admission_number: str
    school_total: float
    pass_level: str


class DashboardStats(CamelSchema):
    """Read-only aggregate view over students and transcripts."""

    total_students: int = 0
    complete_transcripts: int = 0
    incomplete_transcripts: int = 0
    grade_distribution: GradeDistribution
    pass_level_counts: dict[str, int] = {}
    course_unit_averages: list[CourseUnitAverage] = []
    rankings: list[StudentRanking] = []
    recent_students: list[Student] = Field(
        default_factory=list,
        description="Up to five students, highest admission number first",
    )
