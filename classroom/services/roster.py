"""Roster membership: students[] / staff[] arrays on a class.

The class arrays are the only place membership is stored. Writes are
conditional in the store, so a stale read can never push a class past its
capacity or enroll the same id twice.
"""
from __future__ import annotations

import logging

from classroom.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

STUDENTS = "students"
STAFF = "staff"


class RosterService:
    def __init__(self, classes, users):
        self._classes = classes
        self._users = users

    async def _load_class(self, class_id: str):
        record = await self._classes.get(class_id)
        if not record:
            raise NotFoundError(f"Class {class_id} not found")
        return record

    async def add_student(self, class_id: str, enrollment_number: str):
        record = await self._load_class(class_id)
        if not await self._users.get_student(enrollment_number):
            raise ValidationError(
                f"No student found with enrollment number {enrollment_number}"
            )
        self._check_can_enroll(record, enrollment_number)

        added = await self._classes.add_member(
            class_id, STUDENTS, enrollment_number, capacity=record.capacity
        )
        if not added:
            # Someone changed the class since it was read; explain from fresh state.
            self._check_can_enroll(await self._load_class(class_id), enrollment_number)
            raise ValidationError(f"Class {class_id} changed while enrolling, try again")
        logger.info(f"Student {enrollment_number} enrolled in {class_id}")
        return await self._load_class(class_id)

    @staticmethod
    def _check_can_enroll(record, enrollment_number: str) -> None:
        if enrollment_number in record.students:
            raise ValidationError("This student is already enrolled in this class")
        if len(record.students) >= record.capacity:
            raise ValidationError(f"Class {record.id} is full ({record.capacity} students)")

    async def remove_student(self, class_id: str, enrollment_number: str):
        record = await self._load_class(class_id)
        if enrollment_number not in record.students:
            raise ValidationError("This student is not enrolled in this class")
        if not await self._classes.remove_member(class_id, STUDENTS, enrollment_number):
            raise ValidationError("This student is not enrolled in this class")
        logger.info(f"Student {enrollment_number} removed from {class_id}")
        return await self._load_class(class_id)

    async def add_staff(self, class_id: str, staff_id: str):
        record = await self._load_class(class_id)
        if not await self._users.get_staff(staff_id):
            raise ValidationError(f"No staff member found with ID {staff_id}")
        if staff_id in record.staff:
            raise ValidationError("This staff member is already assigned to this class")
        if not await self._classes.add_member(class_id, STAFF, staff_id):
            raise ValidationError("This staff member is already assigned to this class")
        logger.info(f"Staff {staff_id} assigned to {class_id}")
        return await self._load_class(class_id)

    async def remove_staff(self, class_id: str, staff_id: str):
        record = await self._load_class(class_id)
        if staff_id not in record.staff:
            raise ValidationError("This staff member is not assigned to this class")
        if not await self._classes.remove_member(class_id, STAFF, staff_id):
            raise ValidationError("This staff member is not assigned to this class")
        logger.info(f"Staff {staff_id} removed from {class_id}")
        return await self._load_class(class_id)

    async def classes_for_student(self, enrollment_number: str):
        return await self._classes.find_by_member(STUDENTS, enrollment_number)

    async def classes_for_staff(self, staff_id: str):
        return await self._classes.find_by_member(STAFF, staff_id)

    async def unlink_everywhere(self, field: str, member_id: str) -> int:
        """Drop a deleted user's id from every class roster."""
        count = await self._classes.pull_member_everywhere(field, member_id)
        if count:
            logger.info(f"Removed {member_id} from {field} of {count} class(es)")
        return count
