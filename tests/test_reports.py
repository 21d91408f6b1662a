from datetime import date
from types import SimpleNamespace

import pytest

from classroom.errors import ValidationError
from classroom.models.attendance import StudentAttendanceRow
from classroom.services.reports import daily_log_frame, render, summary_frame


def test_summary_csv_marks_students_without_data():
    rows = [
        StudentAttendanceRow(student_id="A", name="Alan", present=2, total=2, percentage=100, has_data=True),
        StudentAttendanceRow(student_id="B", name=None, present=0, total=0, percentage=0, has_data=False),
    ]

    content, media_type, ext = render(summary_frame(rows), "csv")

    assert (media_type, ext) == ("text/csv", "csv")
    assert content.decode("utf-8").splitlines() == [
        "Enrollment Number,Student Name,Present,Total,Attendance %",
        "A,Alan,2,2,100",
        "B,Unknown,0,0,No data",
    ]


def test_daily_log_is_sorted_by_date_then_student():
    records = [
        SimpleNamespace(date=date(2024, 3, 2), records={"B": True, "A": False}),
        SimpleNamespace(date=date(2024, 3, 1), records={"A": True}),
    ]

    frame = daily_log_frame(records, {"A": "Alan"})

    assert frame.values.tolist() == [
        ["2024-03-01", "A", "Alan", "Present"],
        ["2024-03-02", "A", "Alan", "Absent"],
        ["2024-03-02", "B", "Unknown", "Present"],
    ]


def test_excel_export_produces_a_workbook():
    content, media_type, ext = render(summary_frame([]), "excel")

    assert ext == "xlsx"
    assert content[:2] == b"PK"


def test_unknown_format_is_rejected():
    with pytest.raises(ValidationError):
        render(summary_frame([]), "pdf")
