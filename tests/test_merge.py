# tests/test_merge.py

import pytest

from app.core.exceptions import ValidationError
from app.schemas.grading import ScoreRangePolicy, ScoringScheme
from app.schemas.upload import CanonicalRow, SubjectScores
from app.services.merge import MergeOutcome, MergeService
from app.services.transcript import TranscriptService


def _row(**fields):
    defaults = {"name": "Jane Roe", "admission_number": "ADM/2024/099", "course": "Welding"}
    return CanonicalRow(**{**defaults, **fields})


@pytest.fixture
def merger(registry):
    return MergeService(registry, ScoringScheme.CAT_EXAM, ScoreRangePolicy.ACCEPT)


def test_new_row_creates_student_and_transcript(registry, merger):
    outcome = merger.merge_row(
        _row(scores={"MATHEMATICS": SubjectScores(cat=20, exam=45)}, remarks="Keen")
    )

    assert outcome == MergeOutcome.ADDED
    student = registry.find_by_admission_number("ADM/2024/099")
    assert student.name == "Jane Roe"
    assert student.course == "Welding"

    transcript = registry.get_transcript(student.transcript_id)
    assert transcript.student == student
    assert [u.name for u in transcript.course_units] == registry.course_units
    assert [u.id for u in transcript.course_units] == ["1", "2", "3"]
    maths = transcript.course_units[0]
    assert (maths.cat, maths.exam, maths.total, maths.grade) == (20, 45, 65, "B")
    assert all(u.total is None for u in transcript.course_units[1:])
    assert transcript.remarks == "Keen"


def test_blank_cells_preserve_stored_values(registry, merger):
    merger.merge_row(
        _row(
            school_year="2024",
            hod_name="Mr. Otieno",
            scores={"MATHEMATICS": SubjectScores(cat=20, exam=45)},
        )
    )

    outcome = merger.merge_row(
        _row(name="", course="", scores={"TRADE THEORY": SubjectScores(total=72)})
    )

    assert outcome == MergeOutcome.UPDATED
    student = registry.find_by_admission_number("ADM/2024/099")
    assert student.name == "Jane Roe"
    assert student.course == "Welding"
    assert student.school_year == "2024"

    transcript = registry.get_transcript(student.transcript_id)
    assert transcript.hod_name == "Mr. Otieno"
    maths, theory = transcript.course_units[:2]
    assert (maths.cat, maths.exam, maths.total) == (20, 45, 65)
    assert (theory.total, theory.grade) == (72, "A")


def test_supplied_values_overwrite(registry, merger):
    merger.merge_row(_row(scores={"MATHEMATICS": SubjectScores(cat=20, exam=45)}))

    merger.merge_row(_row(name="Jane A. Roe", scores={"MATHEMATICS": SubjectScores(exam=60)}))

    student = registry.find_by_admission_number("ADM/2024/099")
    maths = registry.get_transcript(student.transcript_id).course_units[0]
    assert student.name == "Jane A. Roe"
    assert (maths.cat, maths.exam, maths.total, maths.grade) == (20, 60, 80, "A")


def test_admission_number_stays_unique(registry, merger):
    for _ in range(3):
        merger.merge_row(_row())
    merger.merge_row(_row(admission_number="ADM/2024/100", name="John Kamau"))

    numbers = [s.admission_number for s in registry.students]
    assert sorted(numbers) == ["ADM/2024/099", "ADM/2024/100"]
    assert len(registry.transcripts) == 2


def test_match_is_exact(registry, merger):
    merger.merge_row(_row())
    merger.merge_row(_row(admission_number="adm/2024/099"))

    assert len(registry.students) == 2


def test_unknown_subject_is_ignored(registry, merger):
    merger.merge_row(_row(scores={"WOODWORK": SubjectScores(total=90)}))

    student = registry.find_by_admission_number("ADM/2024/099")
    transcript = registry.get_transcript(student.transcript_id)
    assert all(u.total is None for u in transcript.course_units)


def test_missing_transcript_is_repaired(registry, merger):
    merger.merge_row(_row())
    student = registry.find_by_admission_number("ADM/2024/099")
    registry.transcripts = []

    outcome = merger.merge_row(_row(scores={"MATHEMATICS": SubjectScores(total=50)}))

    assert outcome == MergeOutcome.UPDATED
    transcript = registry.get_transcript(student.transcript_id)
    assert transcript.course_units[0].grade == "C"


def test_rejected_score_leaves_registry_unchanged(registry):
    merger = MergeService(registry, ScoringScheme.CAT_EXAM, ScoreRangePolicy.REJECT)

    with pytest.raises(ValidationError):
        merger.merge_row(_row(scores={"MATHEMATICS": SubjectScores(cat=45)}))

    assert registry.students == []
    assert registry.transcripts == []


def test_merged_rows_are_persisted(db, registry, merger):
    merger.merge_row(_row(scores={"MATHEMATICS": SubjectScores(cat=20, exam=45)}))

    reloaded = TranscriptService(db, registry.course_units)

    assert [s.model_dump() for s in reloaded.students] == [s.model_dump() for s in registry.students]
    assert [t.model_dump() for t in reloaded.transcripts] == [t.model_dump() for t in registry.transcripts]
