# tests/test_upload.py

from io import BytesIO

import pytest
from openpyxl import load_workbook

from app.core.exceptions import DecodeError, EmptyImportError
from app.models.notification import NotificationLevel
from app.schemas.upload import ImportStatus
from app.services.export import ExportService
from app.services.notification import NotificationService
from app.services.upload import UploadService

HEADER = ["name", "admissionNumber", "course", "MATHEMATICS_CAT", "MATHEMATICS_EXAM", "TRADE THEORY_TOTAL"]


@pytest.fixture
def uploader(db, registry):
    return UploadService(db, registry)


def _snapshot(registry):
    return (
        [s.model_dump() for s in registry.students],
        [t.model_dump() for t in registry.transcripts],
    )


def _notifications(db):
    return NotificationService(db).list_notifications()


def test_import_adds_students(db, registry, uploader, make_xlsx):
    content = make_xlsx([
        HEADER,
        ["Jane Roe", "ADM/2024/099", "Welding", 20, 45, None],
        ["John Kamau", "ADM/2024/100", "Plumbing", None, None, 58],
    ])

    result = uploader.process_transcript_upload(content, "term1.xlsx")

    assert result.status == ImportStatus.SUCCESS
    assert (result.students_added, result.students_updated) == (2, 0)
    assert result.rows_failed == 0
    jane = registry.find_by_admission_number("ADM/2024/099")
    maths = registry.get_transcript(jane.transcript_id).course_units[0]
    assert (maths.total, maths.grade) == (65, "B")

    notifications = _notifications(db)
    assert len(notifications) == 1
    assert notifications[0].level == NotificationLevel.SUCCESS
    assert "2 students added" in notifications[0].message


def test_reimport_is_idempotent(registry, uploader, make_xlsx):
    content = make_xlsx([
        HEADER,
        ["Jane Roe", "ADM/2024/099", "Welding", 20, 45, 70],
        ["John Kamau", "ADM/2024/100", "Plumbing", 10, 30, None],
    ])

    uploader.process_transcript_upload(content, "term1.xlsx")
    first = _snapshot(registry)
    result = uploader.process_transcript_upload(content, "term1.xlsx")

    assert (result.students_added, result.students_updated) == (0, 2)
    assert _snapshot(registry) == first


def test_new_row_is_created_with_all_units(registry, uploader, make_xlsx):
    content = make_xlsx([
        ["name", "admissionNumber", "course"],
        ["Jane Roe", "ADM/2024/099", "Welding"],
    ])

    result = uploader.process_transcript_upload(content, "new.xlsx")

    assert result.students_added == 1
    student = registry.find_by_admission_number("ADM/2024/099")
    assert (student.name, student.course) == ("Jane Roe", "Welding")
    transcript = registry.get_transcript(student.transcript_id)
    assert [u.name for u in transcript.course_units] == registry.course_units
    assert all(u.cat is None and u.exam is None and u.total is None for u in transcript.course_units)


def test_noise_rows_are_skipped(registry, uploader, make_xlsx):
    content = make_xlsx([
        HEADER,
        ["REQUIRED: Full student name", "REQUIRED: Unique admission number", "REQUIRED: Course name"],
        ["John Doe", "ADM/2024/001", "Electrical Installation", 25, 55, None],
        [" ", " ", " "],
        ["Jane Roe", "ADM/2024/099", "Welding", 20, 45, None],
    ])

    result = uploader.process_transcript_upload(content, "term1.xlsx")

    assert result.students_added == 1
    assert result.rows_skipped == 3
    assert [s.admission_number for s in registry.students] == ["ADM/2024/099"]


def test_only_noise_rows_rejects_import(db, registry, uploader, make_xlsx):
    uploader.process_transcript_upload(
        make_xlsx([HEADER, ["Jane Roe", "ADM/2024/099", "Welding", 20, 45, None]]),
        "term1.xlsx",
    )
    before = _snapshot(registry)

    content = make_xlsx([
        HEADER,
        ["REQUIRED: Full student name", "REQUIRED: Unique admission number", "REQUIRED: Course name"],
        ["John Doe", "ADM/2024/001", "Electrical Installation", 25, 55, None],
    ])
    with pytest.raises(EmptyImportError) as exc_info:
        uploader.process_transcript_upload(content, "noise.xlsx")

    assert exc_info.value.code == "IMPORT_NO_VALID_ROWS"
    assert _snapshot(registry) == before
    latest = _notifications(db)[0]
    assert latest.level == NotificationLevel.ERROR
    assert "noise.xlsx" in latest.message


def test_generated_template_imports_nothing(registry, uploader):
    template = ExportService(registry.course_units).generate_template()

    with pytest.raises(EmptyImportError):
        uploader.process_transcript_upload(template, "template.xlsx")

    assert registry.students == []


def test_filled_template_imports(registry, uploader):
    exporter = ExportService(registry.course_units)
    headers = exporter.template_headers()
    wb = load_workbook(BytesIO(exporter.generate_template()))
    ws = wb["Transcripts"]
    values = {
        "name": "Jane Roe",
        "admissionNumber": "ADM/2024/099",
        "course": "Welding",
        "MATHEMATICS_CAT": 28,
        "MATHEMATICS_EXAM": 62,
    }
    for col_idx, header in enumerate(headers, start=1):
        ws.cell(row=4, column=col_idx, value=values.get(header))
    output = BytesIO()
    wb.save(output)

    result = uploader.process_transcript_upload(output.getvalue(), "filled.xlsx")

    assert result.students_added == 1
    assert result.rows_skipped == 2
    jane = registry.find_by_admission_number("ADM/2024/099")
    maths = next(u for u in registry.get_transcript(jane.transcript_id).course_units if u.name == "MATHEMATICS")
    assert (maths.total, maths.grade) == (90, "A")


def test_unreadable_file_is_decode_error(db, registry, uploader):
    with pytest.raises(DecodeError) as exc_info:
        uploader.process_transcript_upload(b"not a spreadsheet", "broken.xlsx")

    assert exc_info.value.code == "IMPORT_DECODE_FAILED"
    assert registry.students == []
    assert _notifications(db)[0].level == NotificationLevel.ERROR


def test_bad_row_is_counted_and_skipped(db, registry, uploader, make_xlsx):
    content = make_xlsx([
        HEADER,
        ["Jane Roe", "ADM/2024/099", "Welding", "twenty", 45, None],
        ["John Kamau", "ADM/2024/100", "Plumbing", 10, 30, None],
    ])

    result = uploader.process_transcript_upload(content, "term1.xlsx")

    assert result.status == ImportStatus.PARTIAL
    assert result.rows_failed == 1
    assert result.students_added == 1
    assert registry.find_by_admission_number("ADM/2024/099") is None
    assert _notifications(db)[0].level == NotificationLevel.WARNING


def test_all_rows_failing_reports_failure(db, registry, uploader, make_xlsx):
    content = make_xlsx([
        HEADER,
        ["Jane Roe", "ADM/2024/099", "Welding", "abc", 45, None],
        ["John Kamau", "ADM/2024/100", "Plumbing", "xyz", 30, None],
    ])

    result = uploader.process_transcript_upload(content, "term1.xlsx")

    assert result.status == ImportStatus.FAILED
    assert result.rows_failed == 2
    assert result.students_added == 0
    assert "successful" not in result.message
    assert registry.students == []

    notifications = _notifications(db)
    assert len(notifications) == 1
    assert notifications[0].level == NotificationLevel.ERROR
    assert "no valid student records" in notifications[0].message


def test_header_aliases_are_accepted(registry, uploader, make_xlsx):
    content = make_xlsx([
        ["Name", "Admission Number", "COURSE", "Remarks"],
        ["Jane Roe", "ADM/2024/099", "Welding", "Promising"],
    ])

    uploader.process_transcript_upload(content, "legacy.xlsx")

    jane = registry.find_by_admission_number("ADM/2024/099")
    assert registry.get_transcript(jane.transcript_id).remarks == "Promising"


def test_import_rows_without_spreadsheet(registry, uploader):
    result = uploader.import_rows([
        {"name": "Jane Roe", "admissionNumber": "ADM/2024/099", "course": "Welding"},
        {"name": "Jane Roe", "admissionNumber": "ADM/2024/099", "course": "Welding", "TRADE THEORY_TOTAL": 41},
    ])

    assert (result.students_added, result.students_updated) == (1, 1)
    assert len(registry.students) == 1
