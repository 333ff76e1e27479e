"""Merge engine: reconcile one canonical row against the registries."""

import enum
import logging

from app.core.config import settings
from app.schemas.grading import ScoreRangePolicy, ScoringScheme
from app.schemas.transcript import TRANSCRIPT_TEXT_FIELDS, CourseUnit, Transcript
from app.schemas.upload import CanonicalRow
from app.services.grading import apply_range_policy, derive_course_units
from app.services.normalizer import SCORE_SUFFIXES, subject_column
from app.services.transcript import TranscriptService

logger = logging.getLogger(__name__)


class MergeOutcome(str, enum.Enum):
    """What a merged row did to the registries."""

    ADDED = "added"
    UPDATED = "updated"


class MergeService:
    """Match-or-create a student by admission number and merge a row into its transcript.

    Rows are matched on admission number only. On an existing record every
    field the row leaves blank keeps its stored value.
    """

    def __init__(
        self,
        registry: TranscriptService,
        scheme: ScoringScheme | None = None,
        range_policy: ScoreRangePolicy | None = None,
    ):
        self.registry = registry
        self.scheme = scheme or settings.SCORING_SCHEME
        self.range_policy = range_policy or settings.SCORE_RANGE_POLICY

    def merge_row(self, row: CanonicalRow) -> MergeOutcome:
        """Merge one validated row. Nothing is stored if this raises."""
        existing = self.registry.find_by_admission_number(row.admission_number)

        if existing is None:
            student, transcript = self.registry.build_record(
                row.name,
                row.admission_number,
                row.course,
                row.school_year,
            )
            outcome = MergeOutcome.ADDED
            logger.debug(f"[MERGE] Row {row.row_number}: new student {row.admission_number}")
        else:
            student = existing.model_copy(
                update={
                    "name": row.name or existing.name,
                    "course": row.course or existing.course,
                    "school_year": row.school_year or existing.school_year,
                }
            )
            transcript = self.registry.find_transcript(existing.transcript_id)
            if transcript is None:
                logger.warning(
                    f"[MERGE] Row {row.row_number}: student {existing.admission_number} "
                    f"has no transcript {existing.transcript_id}, creating one"
                )
                transcript = Transcript(
                    id=existing.transcript_id,
                    student=student,
                    course_units=self.registry.default_course_units(),
                )
            outcome = MergeOutcome.UPDATED
            logger.debug(f"[MERGE] Row {row.row_number}: updating student {row.admission_number}")

        course_units, explicit_totals = self._merge_scores(transcript.course_units, row)
        text_updates = {
            field: getattr(row, field) or getattr(transcript, field)
            for field in TRANSCRIPT_TEXT_FIELDS
        }
        merged = transcript.model_copy(
            update={
                **text_updates,
                "course_units": derive_course_units(course_units, explicit_totals, self.scheme),
            }
        )

        self.registry.save_record(student, merged)
        return outcome

    def _merge_scores(
        self,
        units: list[CourseUnit],
        row: CanonicalRow,
    ) -> tuple[list[CourseUnit], set[str]]:
        """Overlay the row's scores on the transcript's units.

        Returns the merged units and the names of units whose total was
        supplied explicitly.
        """
        known = {u.name for u in units}
        for name in row.scores:
            if name not in known:
                logger.debug(f"[MERGE] Row {row.row_number}: transcript has no unit '{name}', scores ignored")

        merged: list[CourseUnit] = []
        explicit_totals: set[str] = set()
        for unit in units:
            incoming = row.scores.get(unit.name)
            if incoming is None:
                merged.append(unit)
                continue

            updates = {}
            for part in SCORE_SUFFIXES:
                value = apply_range_policy(
                    getattr(incoming, part),
                    part,
                    scheme=self.scheme,
                    policy=self.range_policy,
                    column=subject_column(unit.name, part),
                )
                if value is not None:
                    updates[part] = value
            if "total" in updates:
                explicit_totals.add(unit.name)
            merged.append(unit.model_copy(update=updates))

        return merged, explicit_totals
