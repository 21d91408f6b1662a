import asyncio
from datetime import date

import pytest

from classroom.errors import NotFoundError, ValidationError
from classroom.services.roll_call import RollCallService, build_roll_call


def test_build_roll_call_marks_unchecked_students_absent():
    marks = build_roll_call(["A", "B", "C"], {"B"})

    assert marks == {"A": False, "B": True, "C": False}


def test_submit_writes_a_boolean_for_every_enrolled_student(classes, attendance):
    classes.add("CS-101", students=["A", "B", "C"])
    svc = RollCallService(classes, attendance)

    record = asyncio.run(svc.submit_attendance("CS-101", date(2024, 3, 1), ["A"], marked_by="STF-001"))

    assert record.records == {"A": True, "B": False, "C": False}
    assert record.marked_by == "STF-001"
    assert record.id == "CS-101_2024-03-01"


def test_resubmitting_same_roll_call_is_idempotent(classes, attendance):
    classes.add("CS-101", students=["A", "B"])
    svc = RollCallService(classes, attendance)
    day = date(2024, 3, 1)

    first = dict(asyncio.run(svc.submit_attendance("CS-101", day, ["B"])).records)
    second = dict(asyncio.run(svc.submit_attendance("CS-101", day, ["B"])).records)

    assert first == second == {"A": False, "B": True}
    assert len(attendance.by_id) == 1


def test_resubmission_overwrites_previous_marks(classes, attendance):
    classes.add("CS-101", students=["A", "B"])
    svc = RollCallService(classes, attendance)
    day = date(2024, 3, 1)

    asyncio.run(svc.submit_attendance("CS-101", day, ["A", "B"]))
    record = asyncio.run(svc.submit_attendance("CS-101", day, []))

    assert record.records == {"A": False, "B": False}


def test_resubmission_keeps_marks_of_students_who_left(classes, attendance):
    school_class = classes.add("CS-101", students=["A", "B"])
    svc = RollCallService(classes, attendance)
    day = date(2024, 3, 1)

    asyncio.run(svc.submit_attendance("CS-101", day, ["A", "B"]))
    school_class.students.remove("A")
    record = asyncio.run(svc.submit_attendance("CS-101", day, []))

    assert record.records == {"A": True, "B": False}


def test_present_ids_must_be_on_the_roster(classes, attendance):
    classes.add("CS-101", students=["A"])
    svc = RollCallService(classes, attendance)

    with pytest.raises(ValidationError, match="Z"):
        asyncio.run(svc.submit_attendance("CS-101", date(2024, 3, 1), ["A", "Z"]))
    assert attendance.by_id == {}


def test_unknown_class_is_rejected(classes, attendance):
    svc = RollCallService(classes, attendance)

    with pytest.raises(NotFoundError):
        asyncio.run(svc.submit_attendance("NOPE", date(2024, 3, 1), []))


def test_sheet_for_day_without_roll_call_is_empty(classes, attendance):
    classes.add("CS-101", students=["A"])
    svc = RollCallService(classes, attendance)

    sheet = asyncio.run(svc.get_sheet("CS-101", date(2024, 3, 2)))

    assert sheet.exists is False
    assert sheet.records == {}
