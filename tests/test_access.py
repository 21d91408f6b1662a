import asyncio
from datetime import date
from types import SimpleNamespace

import pytest
from fastapi import HTTPException

from classroom.api.assignments import submission_file_url
from classroom.api.attendance import student_attendance
from classroom.models.assignment import AssignmentCreate, QuestionCreate
from classroom.models.user import UserRole
from classroom.services.aggregation import AttendanceAggregator
from classroom.services.assignments import AssignmentService
from classroom.services.classes import ClassService
from classroom.services.roster import RosterService


def staff_user(staff_id):
    return SimpleNamespace(id=staff_id.lower(), role=UserRole.STAFF, staff_id=staff_id, enrollment_number=None)


def student_user(enrollment_number):
    return SimpleNamespace(
        id=enrollment_number.lower(),
        role=UserRole.STUDENT,
        staff_id=None,
        enrollment_number=enrollment_number,
    )


ADMIN = SimpleNamespace(id="admin", role=UserRole.ADMIN, staff_id=None, enrollment_number=None)


@pytest.fixture
def submission_with_file(users, classes, assignments, submissions, storage):
    classes.add("CS-101", students=["2024CS001"], staff=["STF-001"])
    classes.add("EE-102", staff=["STF-002"])
    service = AssignmentService(classes, assignments, submissions, storage)
    assignment = asyncio.run(
        service.create(
            AssignmentCreate(
                class_id="CS-101",
                name="Lab report",
                due_date=date(2024, 5, 1),
                questions=[QuestionCreate(text="Upload your report")],
            )
        )
    )
    submission = asyncio.run(
        service.submit(assignment.id, "2024CS001", ["attached"], file_body=b"data", filename="lab.pdf")
    )
    return service, ClassService(classes, users), submission


def test_staff_of_the_class_gets_the_file_url(submission_with_file):
    service, class_service, submission = submission_with_file

    result = asyncio.run(
        submission_file_url(
            submission_id=submission.id,
            user=staff_user("STF-001"),
            classes=class_service,
            assignments=service,
        )
    )

    assert result == {"url": f"https://files.example.com/{submission.file_key}"}


def test_staff_of_another_class_cannot_get_the_file_url(submission_with_file):
    service, class_service, submission = submission_with_file

    with pytest.raises(HTTPException) as exc:
        asyncio.run(
            submission_file_url(
                submission_id=submission.id,
                user=staff_user("STF-002"),
                classes=class_service,
                assignments=service,
            )
        )
    assert exc.value.status_code == 403


@pytest.fixture
def attendance_routes(users, classes, attendance):
    users.add_student("2024CS001")
    classes.add("CS-101", students=["2024CS001"], staff=["STF-001"])
    classes.add("EE-102", staff=["STF-002"])
    attendance.add("CS-101", date(2024, 3, 1), {"2024CS001": True})
    return RosterService(classes, users), AttendanceAggregator(classes, attendance, users)


@pytest.mark.parametrize(
    "user",
    [staff_user("STF-001"), student_user("2024CS001"), ADMIN],
    ids=["class-staff", "self", "admin"],
)
def test_student_report_is_visible_to_allowed_users(attendance_routes, user):
    roster, aggregator = attendance_routes

    report = asyncio.run(
        student_attendance(enrollment_number="2024CS001", user=user, roster=roster, aggregator=aggregator)
    )

    assert (report.present, report.total) == (1, 1)


@pytest.mark.parametrize(
    "user",
    [staff_user("STF-002"), student_user("2024CS002")],
    ids=["other-staff", "other-student"],
)
def test_student_report_is_hidden_from_others(attendance_routes, user):
    roster, aggregator = attendance_routes

    with pytest.raises(HTTPException) as exc:
        asyncio.run(
            student_attendance(enrollment_number="2024CS001", user=user, roster=roster, aggregator=aggregator)
        )
    assert exc.value.status_code == 403
