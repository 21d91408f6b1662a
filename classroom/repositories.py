"""Beanie-backed persistence used by the services.

Every call runs inside ``remote_call`` so driver failures surface as
RemoteOperationError. Services only see these methods, which keeps them
testable with in-memory stand-ins.
"""
from __future__ import annotations

from datetime import date, datetime
from typing import Any, Iterable, Optional

from beanie import PydanticObjectId
from bson.errors import InvalidId

from classroom.errors import remote_call
from classroom.models.assignment import Assignment, Submission
from classroom.models.attendance import AttendanceRecord, attendance_record_id
from classroom.models.school_class import ClassRecord
from classroom.models.user import User, UserRole


def safe_object_id(value: str | None) -> PydanticObjectId | None:
    if not value:
        return None
    try:
        return PydanticObjectId(value)
    except (InvalidId, TypeError, ValueError):
        return None


class UserRepository:
    async def get(self, user_id: str) -> Optional[User]:
        with remote_call("load user"):
            return await User.get(user_id)

    async def get_by_email(self, email: str) -> Optional[User]:
        with remote_call("load user by email"):
            return await User.find_one(User.email == email)

    async def get_student(self, enrollment_number: str) -> Optional[User]:
        with remote_call("load student"):
            return await User.find_one(
                {"role": UserRole.STUDENT.value, "enrollment_number": enrollment_number}
            )

    async def get_staff(self, staff_id: str) -> Optional[User]:
        with remote_call("load staff"):
            return await User.find_one({"role": UserRole.STAFF.value, "staff_id": staff_id})

    async def find_students(self, enrollment_numbers: Iterable[str]) -> list[User]:
        numbers = list(enrollment_numbers)
        if not numbers:
            return []
        with remote_call("load students"):
            return await User.find(
                {"role": UserRole.STUDENT.value, "enrollment_number": {"$in": numbers}}
            ).to_list()

    async def find_staff(self, staff_ids: Iterable[str]) -> list[User]:
        ids = list(staff_ids)
        if not ids:
            return []
        with remote_call("load staff"):
            return await User.find({"role": UserRole.STAFF.value, "staff_id": {"$in": ids}}).to_list()

    async def list_by_role(self, role: UserRole) -> list[User]:
        with remote_call("list users"):
            return await User.find({"role": role.value}).sort("name").to_list()

    async def insert(self, fields: dict[str, Any]) -> User:
        with remote_call("create user"):
            user = User(**fields)
            await user.insert()
        return user

    async def update(self, user: User, changes: dict[str, Any]) -> User:
        for key, value in changes.items():
            setattr(user, key, value)
        user.updated_at = datetime.utcnow()
        with remote_call("update user"):
            await user.save()
        return user

    async def delete(self, user: User) -> None:
        with remote_call("delete user"):
            await user.delete()


class ClassRepository:
    async def get(self, class_id: str) -> Optional[ClassRecord]:
        with remote_call("load class"):
            return await ClassRecord.get(class_id)

    async def list_all(self) -> list[ClassRecord]:
        with remote_call("list classes"):
            return await ClassRecord.find_all().sort("_id").to_list()

    async def insert(self, fields: dict[str, Any]) -> ClassRecord:
        with remote_call("create class"):
            record = ClassRecord(**fields)
            await record.insert()
        return record

    async def update(self, record: ClassRecord, changes: dict[str, Any]) -> ClassRecord:
        for key, value in changes.items():
            setattr(record, key, value)
        record.updated_at = datetime.utcnow()
        with remote_call("update class"):
            await record.save()
        return record

    async def delete(self, record: ClassRecord) -> None:
        with remote_call("delete class"):
            await record.delete()

    async def add_member(
        self,
        class_id: str,
        field: str,
        member_id: str,
        *,
        capacity: Optional[int] = None,
    ) -> bool:
        """Conditionally add ``member_id`` to the ``field`` array.

        Matches only while the id is absent and, when ``capacity`` is given,
        while the class still has that capacity and a free seat.
        """
        query: dict[str, Any] = {"_id": class_id, field: {"$ne": member_id}}
        if capacity is not None:
            query["capacity"] = capacity
            query[f"{field}.{capacity - 1}"] = {"$exists": False}
        with remote_call(f"add {field} member"):
            result = await ClassRecord.find_one(query).update(
                {"$addToSet": {field: member_id}, "$set": {"updated_at": datetime.utcnow()}}
            )
        return bool(result and result.modified_count)

    async def remove_member(self, class_id: str, field: str, member_id: str) -> bool:
        with remote_call(f"remove {field} member"):
            result = await ClassRecord.find_one({"_id": class_id, field: member_id}).update(
                {"$pull": {field: member_id}, "$set": {"updated_at": datetime.utcnow()}}
            )
        return bool(result and result.modified_count)

    async def pull_member_everywhere(self, field: str, member_id: str) -> int:
        with remote_call(f"unlink {field} member"):
            result = await ClassRecord.find({field: member_id}).update(
                {"$pull": {field: member_id}, "$set": {"updated_at": datetime.utcnow()}}
            )
        return result.modified_count if result else 0

    async def find_by_member(self, field: str, member_id: str) -> list[ClassRecord]:
        with remote_call("load classes by member"):
            return await ClassRecord.find({field: member_id}).sort("_id").to_list()


class AttendanceRepository:
    async def get(self, class_id: str, day: date) -> Optional[AttendanceRecord]:
        with remote_call("load attendance"):
            return await AttendanceRecord.get(attendance_record_id(class_id, day))

    async def merge(
        self,
        class_id: str,
        day: date,
        marks: dict[str, bool],
        marked_by: Optional[str],
    ) -> AttendanceRecord:
        """Upsert one roll call, setting each student's key individually.

        Keys already stored for students not in ``marks`` are left as they are.
        """
        record_id = attendance_record_id(class_id, day)
        update = {
            "$set": {
                **{f"records.{student}": present for student, present in marks.items()},
                "marked_by": marked_by,
                "marked_at": datetime.utcnow(),
            },
            "$setOnInsert": {"class_id": class_id, "date": day},
        }
        with remote_call("save attendance"):
            await AttendanceRecord.find_one({"_id": record_id}).update(update, upsert=True)
            return await AttendanceRecord.get(record_id)

    async def find_for_classes(
        self,
        class_ids: Iterable[str],
        *,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> list[AttendanceRecord]:
        ids = list(class_ids)
        if not ids:
            return []
        query: dict[str, Any] = {"class_id": {"$in": ids}}
        if start or end:
            query["date"] = {}
            if start:
                query["date"]["$gte"] = start
            if end:
                query["date"]["$lte"] = end
        with remote_call("load attendance"):
            return await AttendanceRecord.find(query).sort("date").to_list()

    async def find_for_day(self, class_ids: Iterable[str], day: date) -> list[AttendanceRecord]:
        return await self.find_for_classes(class_ids, start=day, end=day)


class AssignmentRepository:
    async def get(self, assignment_id: str) -> Optional[Assignment]:
        oid = safe_object_id(assignment_id)
        if not oid:
            return None
        with remote_call("load assignment"):
            return await Assignment.get(oid)

    async def insert(self, fields: dict[str, Any]) -> Assignment:
        with remote_call("create assignment"):
            assignment = Assignment(**fields)
            await assignment.insert()
        return assignment

    async def list_for_classes(self, class_ids: Iterable[str]) -> list[Assignment]:
        ids = list(class_ids)
        if not ids:
            return []
        with remote_call("list assignments"):
            return await Assignment.find({"class_id": {"$in": ids}}).sort("due_date").to_list()


class SubmissionRepository:
    async def get(self, submission_id: str) -> Optional[Submission]:
        oid = safe_object_id(submission_id)
        if not oid:
            return None
        with remote_call("load submission"):
            return await Submission.get(oid)

    async def find_one(self, assignment_id: str, student_id: str) -> Optional[Submission]:
        with remote_call("load submission"):
            return await Submission.find_one(
                {"assignment_id": assignment_id, "student_id": student_id}
            )

    async def insert(self, fields: dict[str, Any]) -> Submission:
        with remote_call("save submission"):
            submission = Submission(**fields)
            await submission.insert()
        return submission

    async def list_for_assignment(self, assignment_id: str) -> list[Submission]:
        with remote_call("list submissions"):
            return await Submission.find({"assignment_id": assignment_id}).sort("submitted_at").to_list()

    async def list_for_student(self, student_id: str) -> list[Submission]:
        with remote_call("list submissions"):
            return await Submission.find({"student_id": student_id}).to_list()
