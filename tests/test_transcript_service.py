# tests/test_transcript_service.py

import pytest
from sqlalchemy.exc import OperationalError

from app.core.exceptions import ConflictError, NotFoundError, ValidationError
from app.schemas.transcript import CourseUnitEdit, StudentCreate, StudentUpdate, TranscriptUpdate
from app.services.store import TRANSCRIPTS_KEY, CollectionStore
from app.services.transcript import TranscriptService


def _create(registry, name="Jane Roe", admission_number="ADM/2024/099", course="Welding"):
    return registry.create_student(
        StudentCreate(name=name, admission_number=admission_number, course=course)
    )


def test_create_student_links_a_seeded_transcript(registry):
    student = _create(registry)

    transcript = registry.get_student_transcript(student.id)
    assert transcript.id == student.transcript_id
    assert transcript.student == student
    assert [(u.id, u.name) for u in transcript.course_units] == [
        ("1", "MATHEMATICS"),
        ("2", "TRADE THEORY"),
        ("3", "DIGITAL LITERACY"),
    ]


def test_create_duplicate_admission_number_conflicts(registry):
    _create(registry)

    with pytest.raises(ConflictError):
        _create(registry, name="Someone Else")

    assert len(registry.students) == 1


def test_update_student_syncs_transcript_copy(registry):
    student = _create(registry)

    updated = registry.update_student(student.id, StudentUpdate(course="Plumbing", school_year="2025"))

    assert updated.course == "Plumbing"
    transcript = registry.get_transcript(student.transcript_id)
    assert transcript.student.course == "Plumbing"
    assert transcript.student.school_year == "2025"


def test_update_to_taken_admission_number_conflicts(registry):
    _create(registry)
    other = _create(registry, name="John Kamau", admission_number="ADM/2024/100")

    with pytest.raises(ConflictError):
        registry.update_student(other.id, StudentUpdate(admission_number="ADM/2024/099"))


def test_delete_student_cascades(registry):
    student = _create(registry)
    _create(registry, name="John Kamau", admission_number="ADM/2024/100")

    registry.delete_student(student.id)

    assert registry.find_by_admission_number("ADM/2024/099") is None
    assert registry.find_transcript(student.transcript_id) is None
    assert len(registry.transcripts) == 1


def test_missing_records_raise_not_found(registry):
    with pytest.raises(NotFoundError):
        registry.get_student("nope")
    with pytest.raises(NotFoundError):
        registry.get_transcript("nope")


def test_list_students_searches_and_paginates(registry):
    for idx in range(1, 6):
        _create(registry, name=f"Student {idx}", admission_number=f"ADM/2024/00{idx}")
    _create(registry, name="Jane Roe", admission_number="ADM/2023/777", course="Plumbing")

    page = registry.list_students(page=2, page_size=4)
    assert page.total == 6
    assert page.total_pages == 2
    assert [s.name for s in page.items] == ["Student 5", "Jane Roe"]

    found = registry.list_students(search="plumb")
    assert [s.admission_number for s in found.items] == ["ADM/2023/777"]


def test_update_transcript_text(registry):
    student = _create(registry)

    registry.update_transcript(student.transcript_id, TranscriptUpdate(hod_name="Mr. Otieno"))
    transcript = registry.update_transcript(student.transcript_id, TranscriptUpdate(remarks="Keen"))

    assert transcript.hod_name == "Mr. Otieno"
    assert transcript.remarks == "Keen"


def test_edit_course_unit(registry):
    student = _create(registry)

    registry.edit_course_unit(student.transcript_id, "1", CourseUnitEdit(field="cat", value=25))
    transcript = registry.edit_course_unit(student.transcript_id, "1", CourseUnitEdit(field="exam", value=50))

    maths = transcript.find_unit("1")
    assert (maths.cat, maths.exam, maths.total, maths.grade) == (25, 50, 75, "A")


def test_edit_unknown_unit_is_not_found(registry):
    student = _create(registry)

    with pytest.raises(NotFoundError):
        registry.edit_course_unit(student.transcript_id, "99", CourseUnitEdit(field="cat", value=1))


def test_out_of_range_edit_is_rejected(registry):
    student = _create(registry)

    with pytest.raises(ValidationError):
        registry.edit_course_unit(student.transcript_id, "1", CourseUnitEdit(field="total", value=101))


def test_changes_survive_reload(db, registry):
    student = _create(registry)
    registry.edit_course_unit(student.transcript_id, "2", CourseUnitEdit(field="total", value=64))

    reloaded = TranscriptService(db, registry.course_units)

    assert reloaded.get_student(student.id).admission_number == "ADM/2024/099"
    assert reloaded.get_transcript(student.transcript_id).find_unit("2").grade == "B"


def test_failed_transcripts_write_rolls_back_students(db, registry, monkeypatch):
    original_set = CollectionStore.set

    def failing_set(self, key, items):
        if key == TRANSCRIPTS_KEY:
            raise OperationalError("UPDATE collections", {}, Exception("disk I/O error"))
        original_set(self, key, items)

    monkeypatch.setattr(CollectionStore, "set", failing_set)
    _create(registry)
    monkeypatch.undo()

    reloaded = TranscriptService(db, registry.course_units)

    assert reloaded.students == []
    assert reloaded.transcripts == []
