"""Class catalogue: create, edit and delete classes."""
from __future__ import annotations

import logging
from typing import Iterable

from classroom.errors import NotFoundError, ValidationError
from classroom.models.school_class import ClassCreate, ClassOut, ClassUpdate, Subject

logger = logging.getLogger(__name__)


def staff_from_subjects(subjects: Iterable[Subject]) -> list[str]:
    """Distinct subject teachers, in first-seen order."""
    staff: list[str] = []
    for subject in subjects:
        if subject.staff_id and subject.staff_id not in staff:
            staff.append(subject.staff_id)
    return staff


def serialize_class(record) -> ClassOut:
    return ClassOut(
        class_id=record.id,
        name=record.name,
        department=record.department,
        semester=record.semester,
        capacity=record.capacity,
        room=record.room,
        subjects=list(record.subjects),
        students=list(record.students),
        staff=list(record.staff),
    )


class ClassService:
    def __init__(self, classes, users):
        self._classes = classes
        self._users = users

    async def _check_subject_staff(self, subjects: list[Subject]) -> None:
        wanted = staff_from_subjects(subjects)
        found = {s.staff_id for s in await self._users.find_staff(wanted)}
        missing = [staff_id for staff_id in wanted if staff_id not in found]
        if missing:
            raise ValidationError(f"Unknown staff id(s): {', '.join(missing)}")

    async def get(self, class_id: str):
        record = await self._classes.get(class_id)
        if not record:
            raise NotFoundError(f"Class {class_id} not found")
        return record

    async def list_classes(self):
        return await self._classes.list_all()

    async def create(self, data: ClassCreate):
        if await self._classes.get(data.class_id):
            raise ValidationError(f"Class {data.class_id} already exists")
        await self._check_subject_staff(data.subjects)
        record = await self._classes.insert(
            {
                "id": data.class_id,
                "name": data.name,
                "department": data.department,
                "semester": data.semester,
                "capacity": data.capacity,
                "room": data.room,
                "subjects": data.subjects,
                "staff": staff_from_subjects(data.subjects),
                "students": [],
            }
        )
        logger.info(f"Class {data.class_id} created")
        return record

    async def update(self, class_id: str, data: ClassUpdate):
        record = await self.get(class_id)
        changes = data.model_dump(exclude_unset=True, exclude={"subjects"})
        if "capacity" in changes and changes["capacity"] < len(record.students):
            raise ValidationError(
                f"Capacity {changes['capacity']} is below the {len(record.students)} enrolled students"
            )
        if data.subjects is not None:
            await self._check_subject_staff(data.subjects)
            changes["subjects"] = data.subjects
            changes["staff"] = staff_from_subjects(data.subjects)
        return await self._classes.update(record, changes)

    async def set_subjects(self, class_id: str, subjects: list[Subject]):
        return await self.update(class_id, ClassUpdate(subjects=subjects))

    async def delete(self, class_id: str) -> None:
        # Attendance and assignments of the class are left in place.
        record = await self.get(class_id)
        await self._classes.delete(record)
        logger.info(f"Class {class_id} deleted")
