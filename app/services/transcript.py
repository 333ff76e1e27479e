"""Student and transcript registry service."""

import logging
from uuid import uuid4

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.exceptions import ConflictError, NotFoundError
from app.schemas.transcript import (
    CourseUnit,
    CourseUnitEdit,
    PaginatedStudentResponse,
    Student,
    StudentCreate,
    StudentUpdate,
    Transcript,
    TranscriptUpdate,
)
from app.services.grading import apply_manual_edit
from app.services.store import STUDENTS_KEY, TRANSCRIPTS_KEY, CollectionStore

logger = logging.getLogger(__name__)


class TranscriptService:
    """Owns the student and transcript collections.

    Both collections are loaded wholesale from the store and written back in
    full after every successful mutation. Records are replaced, never mutated
    in place.
    """

    def __init__(self, db: Session, course_units: list[str] | None = None):
        self.db = db
        self.store = CollectionStore(db)
        self.course_units = list(course_units if course_units is not None else settings.COURSE_UNITS)
        self.students: list[Student] = [
            Student.model_validate(s) for s in self.store.get(STUDENTS_KEY)
        ]
        self.transcripts: list[Transcript] = [
            Transcript.model_validate(t) for t in self.store.get(TRANSCRIPTS_KEY)
        ]

    # ==========================================
    # Persistence
    # ==========================================

    def _persist(self) -> None:
        """Write both collections as full snapshots in one transaction.

        Failures roll back both writes and are logged, not raised.
        """
        try:
            self.store.set(STUDENTS_KEY, [s.model_dump(mode="json", by_alias=True) for s in self.students])
            self.store.set(TRANSCRIPTS_KEY, [t.model_dump(mode="json", by_alias=True) for t in self.transcripts])
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception("[REGISTRY] Failed to persist collections")

    @staticmethod
    def _replace(items: list, record) -> list:
        """New list with record swapped in by id, or appended when new."""
        if any(item.id == record.id for item in items):
            return [record if item.id == record.id else item for item in items]
        return [*items, record]

    def save_record(self, student: Student, transcript: Transcript) -> None:
        """Store a student and its transcript together, then persist."""
        transcript = transcript.model_copy(update={"student": student})
        self.students = self._replace(self.students, student)
        self.transcripts = self._replace(self.transcripts, transcript)
        self._persist()

    # ==========================================
    # Construction
    # ==========================================

    def default_course_units(self) -> list[CourseUnit]:
        """Every registered unit with empty scores, ids numbered from 1."""
        return [
            CourseUnit(id=str(idx), name=name)
            for idx, name in enumerate(self.course_units, start=1)
        ]

    def build_record(
        self,
        name: str,
        admission_number: str,
        course: str,
        school_year: str = "",
    ) -> tuple[Student, Transcript]:
        """New linked student and transcript with fresh ids."""
        student = Student(
            id=str(uuid4()),
            name=name,
            admission_number=admission_number,
            course=course,
            school_year=school_year,
            transcript_id=str(uuid4()),
        )
        transcript = Transcript(
            id=student.transcript_id,
            student=student,
            course_units=self.default_course_units(),
        )
        return student, transcript

    # ==========================================
    # Lookups
    # ==========================================

    def find_by_admission_number(self, admission_number: str) -> Student | None:
        """Exact-match lookup on the business key."""
        return next((s for s in self.students if s.admission_number == admission_number), None)

    def get_student(self, student_id: str) -> Student:
        """Get student by ID."""
        student = next((s for s in self.students if s.id == student_id), None)
        if not student:
            raise NotFoundError("Student", student_id)
        return student

    def find_transcript(self, transcript_id: str) -> Transcript | None:
        return next((t for t in self.transcripts if t.id == transcript_id), None)

    def get_transcript(self, transcript_id: str) -> Transcript:
        """Get transcript by ID."""
        transcript = self.find_transcript(transcript_id)
        if not transcript:
            raise NotFoundError("Transcript", transcript_id)
        return transcript

    def get_student_transcript(self, student_id: str) -> Transcript:
        """Get the transcript linked to a student."""
        student = self.get_student(student_id)
        return self.get_transcript(student.transcript_id)

    def list_students(
        self,
        search: str | None = None,
        page: int = 1,
        page_size: int = 50,
    ) -> PaginatedStudentResponse:
        """List students with search and pagination, in insertion order."""
        students = self.students
        if search:
            term = search.lower()
            students = [
                s
                for s in students
                if term in s.name.lower()
                or term in s.admission_number.lower()
                or term in s.course.lower()
            ]

        total = len(students)
        offset = (page - 1) * page_size
        return PaginatedStudentResponse(
            items=students[offset:offset + page_size],
            total=total,
            page=page,
            page_size=page_size,
            total_pages=(total + page_size - 1) // page_size,
        )

    # ==========================================
    # Mutations
    # ==========================================

    def create_student(self, request: StudentCreate) -> Student:
        """Create a student together with its transcript."""
        if self.find_by_admission_number(request.admission_number):
            raise ConflictError(
                f"Admission number '{request.admission_number}' is already in use",
                details={"admissionNumber": request.admission_number},
            )
        student, transcript = self.build_record(
            request.name,
            request.admission_number,
            request.course,
            request.school_year,
        )
        self.save_record(student, transcript)
        logger.info(f"[REGISTRY] Created student {student.admission_number} ({student.id})")
        return student

    def update_student(self, student_id: str, request: StudentUpdate) -> Student:
        """Update a student and the copy embedded in its transcript."""
        student = self.get_student(student_id)
        update_data = request.model_dump(exclude_unset=True, exclude_none=True)

        new_number = update_data.get("admission_number")
        if new_number and new_number != student.admission_number:
            if self.find_by_admission_number(new_number):
                raise ConflictError(
                    f"Admission number '{new_number}' is already in use",
                    details={"admissionNumber": new_number},
                )

        updated = student.model_copy(update=update_data)
        transcript = self.find_transcript(student.transcript_id)
        if transcript is None:
            transcript = Transcript(
                id=student.transcript_id,
                student=updated,
                course_units=self.default_course_units(),
            )
        self.save_record(updated, transcript)
        return updated

    def delete_student(self, student_id: str) -> None:
        """Delete a student and its transcript."""
        student = self.get_student(student_id)
        self.transcripts = [t for t in self.transcripts if t.id != student.transcript_id]
        self.students = [s for s in self.students if s.id != student_id]
        self._persist()
        logger.info(f"[REGISTRY] Deleted student {student.admission_number} ({student_id})")

    def update_transcript(self, transcript_id: str, request: TranscriptUpdate) -> Transcript:
        """Update free-text transcript fields."""
        transcript = self.get_transcript(transcript_id)
        updated = transcript.model_copy(update=request.model_dump(exclude_unset=True, exclude_none=True))
        self.transcripts = self._replace(self.transcripts, updated)
        self._persist()
        return updated

    def edit_course_unit(self, transcript_id: str, unit_id: str, edit: CourseUnitEdit) -> Transcript:
        """Apply a single-field score edit to one course unit."""
        transcript = self.get_transcript(transcript_id)
        unit = transcript.find_unit(unit_id)
        if unit is None:
            raise NotFoundError("Course unit", unit_id)

        edited = apply_manual_edit(unit, edit.field, edit.value)
        updated = transcript.model_copy(
            update={"course_units": [edited if u.id == unit_id else u for u in transcript.course_units]}
        )
        self.transcripts = self._replace(self.transcripts, updated)
        self._persist()
        return updated
