# tests/test_dashboard.py

from app.schemas.transcript import CourseUnitEdit, StudentCreate
from app.services.dashboard import DashboardService


def _student_with_totals(registry, admission_number, totals):
    student = registry.create_student(
        StudentCreate(name=f"Student {admission_number}", admission_number=admission_number, course="Welding")
    )
    for unit_id, total in totals.items():
        registry.edit_course_unit(student.transcript_id, unit_id, CourseUnitEdit(field="total", value=total))
    return student


def test_empty_dashboard(registry):
    stats = DashboardService(registry).get_dashboard()

    assert stats.total_students == 0
    assert stats.rankings == []
    assert [a.name for a in stats.course_unit_averages] == registry.course_units


def test_dashboard_counts(registry):
    _student_with_totals(registry, "ADM/001", {"1": 80, "2": 65})
    _student_with_totals(registry, "ADM/002", {"1": 40})
    _student_with_totals(registry, "ADM/003", {})

    stats = DashboardService(registry).get_dashboard()

    assert stats.total_students == 3
    assert stats.complete_transcripts == 2
    assert stats.incomplete_transcripts == 1
    assert stats.grade_distribution.A == 1
    assert stats.grade_distribution.B == 1
    assert stats.grade_distribution.D == 1
    maths = stats.course_unit_averages[0]
    assert (maths.name, maths.graded_count, maths.average_total) == ("MATHEMATICS", 2, 60)
    assert stats.pass_level_counts["FAIL"] == 3
    assert [s.admission_number for s in stats.recent_students] == ["ADM/003", "ADM/002", "ADM/001"]


def test_rankings_share_rank_on_ties(registry):
    _student_with_totals(registry, "ADM/001", {"1": 50})
    _student_with_totals(registry, "ADM/002", {"1": 70})
    _student_with_totals(registry, "ADM/003", {"1": 50})

    rankings = DashboardService(registry).get_rankings()

    assert [(r.admission_number, r.rank) for r in rankings] == [
        ("ADM/002", 1),
        ("ADM/001", 2),
        ("ADM/003", 2),
    ]


def test_dashboard_serializes_camel_case(registry):
    _student_with_totals(registry, "ADM/001", {"1": 80})

    payload = DashboardService(registry).get_dashboard().model_dump(by_alias=True)

    assert payload["totalStudents"] == 1
    assert payload["gradeDistribution"]["A"] == 1
    assert payload["rankings"][0]["passLevel"] == "FAIL"
