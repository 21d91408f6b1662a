import asyncio
from datetime import date

import pytest
from beanie import init_beanie
from fastapi.security import HTTPAuthorizationCredentials
from mongomock_motor import AsyncMongoMockClient
from pymongo.errors import ServerSelectionTimeoutError

from classroom.api.deps import get_current_user
from classroom.errors import RemoteOperationError, ValidationError
from classroom.models import (
    Answer,
    Assignment,
    AttendanceRecord,
    ClassRecord,
    Submission,
    Subject,
    User,
    UserRole,
)
from classroom.repositories import (
    AttendanceRepository,
    ClassRepository,
    SubmissionRepository,
    UserRepository,
)
from classroom.services.identity import create_access_token

DOCUMENTS = [User, ClassRecord, AttendanceRecord, Assignment, Submission]


def run_with_db(scenario):
    """Run ``scenario()`` against a fresh in-memory Mongo database."""

    async def main():
        client = AsyncMongoMockClient()
        await init_beanie(database=client["classroom_test"], document_models=DOCUMENTS)
        return await scenario()

    return asyncio.run(main())


def class_fields(class_id, capacity, **fields):
    return {"id": class_id, "name": f"Class {class_id}", "capacity": capacity, **fields}


def test_add_member_enforces_uniqueness_and_capacity():
    classes = ClassRepository()

    async def scenario():
        await classes.insert(class_fields("CS-101", 2))
        results = [
            await classes.add_member("CS-101", "students", member, capacity=2)
            for member in ["A", "A", "B", "C"]
        ]
        return results, (await classes.get("CS-101")).students

    results, students = run_with_db(scenario)

    assert results == [True, False, True, False]
    assert students == ["A", "B"]


def test_add_member_with_stale_capacity_matches_nothing():
    classes = ClassRepository()

    async def scenario():
        await classes.insert(class_fields("CS-101", 3))
        added = await classes.add_member("CS-101", "students", "A", capacity=2)
        return added, (await classes.get("CS-101")).students

    assert run_with_db(scenario) == (False, [])


def test_remove_and_unlink_members():
    classes = ClassRepository()

    async def scenario():
        await classes.insert(class_fields("CS-101", 10, students=["A", "B"]))
        await classes.insert(
            class_fields(
                "EE-102",
                10,
                students=["A"],
                staff=["STF-001"],
                subjects=[Subject(name="Circuits", staff_id="STF-001")],
            )
        )
        removed = await classes.remove_member("CS-101", "students", "B")
        removed_again = await classes.remove_member("CS-101", "students", "B")
        teaching = [c.id for c in await classes.find_by_member("subjects.staff_id", "STF-001")]
        unlinked = await classes.pull_member_everywhere("students", "A")
        remaining = [c.id for c in await classes.find_by_member("students", "A")]
        return removed, removed_again, teaching, unlinked, remaining

    removed, removed_again, teaching, unlinked, remaining = run_with_db(scenario)

    assert (removed, removed_again) == (True, False)
    assert teaching == ["EE-102"]
    assert unlinked == 2
    assert remaining == []


def test_merge_keeps_earlier_keys_in_a_single_record():
    attendance = AttendanceRepository()
    day = date(2024, 3, 1)

    async def scenario():
        await attendance.merge("CS-101", day, {"A": True, "B": False}, "STF-001")
        record = await attendance.merge("CS-101", day, {"B": True}, "STF-002")
        return record, await AttendanceRecord.find_all().count()

    record, count = run_with_db(scenario)

    assert record.records == {"A": True, "B": True}
    assert (record.id, record.class_id, record.date) == ("CS-101_2024-03-01", "CS-101", day)
    assert record.marked_by == "STF-002"
    assert count == 1


def test_find_for_classes_filters_by_class_and_date_range():
    attendance = AttendanceRepository()

    async def scenario():
        for day in (date(2024, 3, 1), date(2024, 3, 2), date(2024, 3, 3)):
            await attendance.merge("CS-101", day, {"A": True}, None)
        await attendance.merge("EE-102", date(2024, 3, 2), {"B": True}, None)
        records = await attendance.find_for_classes(
            ["CS-101"], start=date(2024, 3, 2), end=date(2024, 3, 3)
        )
        return [(r.class_id, r.date) for r in records]

    assert run_with_db(scenario) == [
        ("CS-101", date(2024, 3, 2)),
        ("CS-101", date(2024, 3, 3)),
    ]


def test_second_submission_for_the_same_pair_is_a_validation_error():
    submissions = SubmissionRepository()
    fields = {
        "assignment_id": "a1",
        "student_id": "2024CS001",
        "answers": [Answer(question_text="Q1", answer="42")],
    }

    async def scenario():
        await submissions.insert(dict(fields))
        await submissions.insert(dict(fields))

    with pytest.raises(ValidationError, match="duplicate key"):
        run_with_db(scenario)


def test_students_are_found_by_enrollment_number():
    users = UserRepository()

    async def scenario():
        await users.insert(
            {
                "id": "adaschooledu",
                "email": "ada@school.edu",
                "hashed_password": "x",
                "role": UserRole.STUDENT,
                "name": "Ada",
                "enrollment_number": "2024CS001",
            }
        )
        return await users.get_student("2024CS001"), await users.get_staff("2024CS001")

    student, staff = run_with_db(scenario)

    assert student.id == "adaschooledu"
    assert staff is None


def test_store_outage_during_authentication_is_a_remote_error(monkeypatch):
    async def unreachable(*args, **kwargs):
        raise ServerSelectionTimeoutError("no servers available")

    monkeypatch.setattr(User, "get", unreachable)
    credentials = HTTPAuthorizationCredentials(
        scheme="Bearer", credentials=create_access_token("adaschooledu", "student")
    )

    with pytest.raises(RemoteOperationError):
        asyncio.run(get_current_user(credentials))
