"""Derived field calculation: totals, letter grades and pass levels."""

import math

from app.core.config import settings
from app.core.exceptions import ValidationError
from app.schemas.grading import (
    CAT_MAX,
    EXAM_MAX_EXAM_ONLY,
    EXAM_MAX_WITH_CAT,
    LEVEL_COMMENTS,
    NOT_GRADED,
    PASS_BANDS,
    TOTAL_MAX,
    ScoreRangePolicy,
    ScoringScheme,
)
from app.schemas.transcript import CourseUnit, Transcript, TranscriptSummary

SCORE_FIELDS = ("cat", "exam", "total")


def calculate_grade(total: float | None) -> str | None:
    """Map a total to its letter grade. A null total has no grade."""
    if total is None:
        return None
    if total >= 70:
        return "A"
    elif total >= 60:
        return "B"
    elif total >= 50:
        return "C"
    elif total >= 40:
        return "D"
    else:
        return "E"


def score_bounds(field: str, scheme: ScoringScheme | None = None) -> tuple[float, float]:
    """Inclusive (low, high) bounds for a score field under a scoring scheme."""
    scheme = scheme or settings.SCORING_SCHEME
    if field == "cat":
        return 0.0, CAT_MAX
    if field == "exam":
        upper = EXAM_MAX_EXAM_ONLY if scheme == ScoringScheme.EXAM_ONLY else EXAM_MAX_WITH_CAT
        return 0.0, upper
    if field == "total":
        return 0.0, TOTAL_MAX
    raise ValueError(f"Unknown score field: {field}")


def apply_range_policy(
    value: float | None,
    field: str,
    scheme: ScoringScheme | None = None,
    policy: ScoreRangePolicy | None = None,
    column: str | None = None,
) -> float | None:
    """Apply the configured out-of-range policy to an imported score.

    Returns the value to store, or None when the value should be treated as absent.
    """
    if value is None:
        return None
    policy = policy or settings.SCORE_RANGE_POLICY
    low, high = score_bounds(field, scheme)
    if low <= value <= high:
        return value

    if policy == ScoreRangePolicy.ACCEPT:
        return value
    if policy == ScoreRangePolicy.CLAMP:
        return min(max(value, low), high)
    if policy == ScoreRangePolicy.IGNORE:
        return None
    raise ValidationError(
        f"{field.upper()} score {value:g} is outside {low:g}-{high:g}",
        details={"column": column or field, "value": str(value)},
    )


def _sum_scores(*values: float) -> float:
    return round(sum(values), 2)


def derive_course_unit(
    unit: CourseUnit,
    explicit_total: bool = False,
    scheme: ScoringScheme | None = None,
) -> CourseUnit:
    """Recompute total and grade for a merged course unit.

    An explicitly supplied total is authoritative. Otherwise the total is
    derived from its components when they are all present, and left as stored
    when they are not. The grade follows the total; a null total leaves the
    stored grade untouched.
    """
    scheme = scheme or settings.SCORING_SCHEME
    total = unit.total
    if not explicit_total:
        if scheme == ScoringScheme.EXAM_ONLY:
            if unit.exam is not None:
                total = unit.exam
        elif unit.cat is not None and unit.exam is not None:
            total = _sum_scores(unit.cat, unit.exam)

    grade = calculate_grade(total) if total is not None else unit.grade
    return unit.model_copy(update={"total": total, "grade": grade})


def derive_course_units(
    units: list[CourseUnit],
    explicit_totals: set[str] | None = None,
    scheme: ScoringScheme | None = None,
) -> list[CourseUnit]:
    """Derive every unit; explicit_totals holds names of units whose total came from the row."""
    explicit_totals = explicit_totals or set()
    return [derive_course_unit(u, u.name in explicit_totals, scheme) for u in units]


def apply_manual_edit(
    unit: CourseUnit,
    field: str,
    value: float | None,
    scheme: ScoringScheme | None = None,
) -> CourseUnit:
    """Apply a single-field edit from the transcript editor.

    Editing cat or exam recomputes total and grade once the components are
    complete; editing total recomputes only the grade.
    """
    scheme = scheme or settings.SCORING_SCHEME
    if field not in SCORE_FIELDS:
        raise ValidationError(f"Field '{field}' cannot be edited", details={"field": field})

    if value is not None:
        low, high = score_bounds(field, scheme)
        if not low <= value <= high:
            raise ValidationError(
                f"{field.upper()} must be between {low:g} and {high:g}",
                details={"field": field, "value": str(value)},
            )

    updated = unit.model_copy(update={field: value})
    if field == "total":
        return updated.model_copy(update={"grade": calculate_grade(value)})

    if scheme == ScoringScheme.EXAM_ONLY:
        if field == "exam" and value is not None:
            return updated.model_copy(update={"total": value, "grade": calculate_grade(value)})
        return updated

    if updated.cat is not None and updated.exam is not None:
        total = _sum_scores(updated.cat, updated.exam)
        return updated.model_copy(update={"total": total, "grade": calculate_grade(total)})
    return updated


# ==========================================
# Pass Levels
# ==========================================

def school_total(units: list[CourseUnit], scheme: ScoringScheme | None = None) -> float:
    """Sum of unit totals, or of exam scores under the exam-only scheme."""
    scheme = scheme or settings.SCORING_SCHEME
    if scheme == ScoringScheme.EXAM_ONLY:
        return _sum_scores(*(u.exam for u in units if u.exam is not None))
    return _sum_scores(*(u.total for u in units if u.total is not None))


def pass_level(total: float) -> str:
    """First pass band containing the school total, or NOT GRADED."""
    for band in PASS_BANDS:
        if band.contains(total):
            return band.level
    return NOT_GRADED


def summarize_transcript(
    transcript: Transcript,
    scheme: ScoringScheme | None = None,
) -> TranscriptSummary:
    """Totals, pass level and display text for a transcript.

    Stored remarks and comments win; empty ones fall back to the text for the
    pass level.
    """
    graded = [u for u in transcript.course_units if u.total is not None]
    total = school_total(transcript.course_units, scheme)
    graded_sum = _sum_scores(*(u.total for u in graded))
    average = math.floor(graded_sum / len(graded) + 0.5) if graded else 0
    level = pass_level(total)
    auto_remarks, auto_manager, auto_hod = LEVEL_COMMENTS.get(level, LEVEL_COMMENTS[NOT_GRADED])

    return TranscriptSummary(
        transcript_id=transcript.id,
        school_total=total,
        average=average,
        graded_units=len(graded),
        pass_level=level,
        remarks=transcript.remarks or auto_remarks,
        manager_comments=transcript.manager_comments or auto_manager,
        hod_comments=transcript.hod_comments or auto_hod,
    )
