"""Grading constants and scale schemas."""

import enum

from app.schemas.common import BaseSchema


# ==========================================
# Constants
# ==========================================

# Registered course units, in transcript display order
DEFAULT_COURSE_UNITS = [
    "TRADE THEORY",
    "TRADE PRACTICE",
    "COMMUNICATION SKILLS",
    "ENTREPRENEURSHIP",
    "MATHEMATICS",
    "GENERAL SCIENCE",
    "DIGITAL LITERACY",
]

CAT_MAX = 30.0
EXAM_MAX_WITH_CAT = 70.0
EXAM_MAX_EXAM_ONLY = 100.0
TOTAL_MAX = 100.0

NOT_GRADED = "NOT GRADED"


class ScoringScheme(str, enum.Enum):
    """How a course unit total is composed."""

    CAT_EXAM = "cat_exam"  # CAT (30) + EXAM (70) = TOTAL (100)
    EXAM_ONLY = "exam_only"  # EXAM (100) = TOTAL


class ScoreRangePolicy(str, enum.Enum):
    """What the import path does with a score outside its bounds."""

    ACCEPT = "accept"
    CLAMP = "clamp"
    IGNORE = "ignore"
    REJECT = "reject"


# ==========================================
# Scales
# ==========================================

class GradeScale(BaseSchema):
    """Letter grade with its inclusive lower bound."""

    grade: str
    min_total: float
    range: str


class PassBand(BaseSchema):
    """Pass level with an inclusive school-total range."""

    level: str
    min_total: float
    max_total: float

    def contains(self, school_total: float) -> bool:
        return self.min_total <= school_total <= self.max_total


# Evaluated top-down, first match wins
GRADE_SCALES = [
    GradeScale(grade="A", min_total=70, range="70-100"),
    GradeScale(grade="B", min_total=60, range="60-69"),
    GradeScale(grade="C", min_total=50, range="50-59"),
    GradeScale(grade="D", min_total=40, range="40-49"),
    GradeScale(grade="E", min_total=0, range="0-39"),
]

PASS_BANDS = [
    PassBand(level="DISTINCTION", min_total=451, max_total=600),
    PassBand(level="CREDIT", min_total=301, max_total=450),
    PassBand(level="PASS", min_total=200, max_total=300),
    PassBand(level="FAIL", min_total=0, max_total=199),
]

# Auto-generated transcript text per pass level: (remarks, manager, hod)
LEVEL_COMMENTS = {
    "DISTINCTION": (
        "Excellent performance! Student has demonstrated exceptional understanding of course content.",
        "Outstanding performance. Keep up the excellent work!",
        "Exceptional results. Student shows great potential in this field.",
    ),
    "CREDIT": (
        "Good performance! Student has shown strong grasp of course material.",
        "Commendable performance. Continue with the good effort.",
        "Good results. Student demonstrates solid understanding of the subject.",
    ),
    "PASS": (
        "Satisfactory performance. Student has met the minimum requirements.",
        "You have passed. Work harder to improve your grades.",
        "Acceptable results. Student should focus on improving weak areas.",
    ),
    "FAIL": (
        "Below required standards. Student needs to improve in most areas.",
        "You need to put in more effort and seek additional support.",
        "Student requires remedial work and closer supervision.",
    ),
    NOT_GRADED: (
        "Not enough data to generate remarks.",
        "Please complete all assessments for proper evaluation.",
        "Incomplete assessment. Unable to provide comprehensive feedback.",
    ),
}
