"""Student, staff and admin records."""
from __future__ import annotations

import logging

from classroom.errors import NotFoundError, ValidationError
from classroom.models.user import ProfileUpdate, StaffCreate, StudentCreate, UserCreate, UserOut, UserRole
from classroom.services.identity import IdentityService
from classroom.services.roster import STAFF, STUDENTS, RosterService

logger = logging.getLogger(__name__)


def serialize_user(user) -> UserOut:
    return UserOut(
        id=user.id,
        email=user.email,
        role=user.role,
        name=user.name,
        phone=user.phone,
        department=user.department,
        is_active=user.is_active,
        enrollment_number=user.enrollment_number,
        staff_id=user.staff_id,
        details=dict(user.details or {}),
    )


class DirectoryService:
    def __init__(self, users, classes):
        self._users = users
        self._classes = classes
        self._identity = IdentityService(users)
        self._roster = RosterService(classes, users)

    async def create_student(self, data: StudentCreate):
        return await self._identity.create_user(
            data.email,
            data.password,
            data.name,
            UserRole.STUDENT,
            phone=data.phone,
            enrollment_number=data.enrollment_number,
            department=data.department,
            details=data.details,
        )

    async def create_staff(self, data: StaffCreate):
        return await self._identity.create_user(
            data.email,
            data.password,
            data.name,
            UserRole.STAFF,
            phone=data.phone,
            staff_id=data.staff_id,
            department=data.department,
            details=data.details,
        )

    async def create_admin(self, data: UserCreate):
        return await self._identity.create_user(
            data.email, data.password, data.name, UserRole.ADMIN, phone=data.phone
        )

    async def list_students(self):
        return await self._users.list_by_role(UserRole.STUDENT)

    async def list_staff(self):
        return await self._users.list_by_role(UserRole.STAFF)

    async def list_admins(self):
        return await self._users.list_by_role(UserRole.ADMIN)

    async def get_student(self, enrollment_number: str):
        student = await self._users.get_student(enrollment_number)
        if not student:
            raise NotFoundError(f"Student {enrollment_number} not found")
        return student

    async def get_staff(self, staff_id: str):
        staff = await self._users.get_staff(staff_id)
        if not staff:
            raise NotFoundError(f"Staff member {staff_id} not found")
        return staff

    async def update_profile(self, user, data: ProfileUpdate):
        changes = data.model_dump(exclude_unset=True)
        if changes.get("details") is not None:
            changes["details"] = {**(user.details or {}), **changes["details"]}
        else:
            changes.pop("details", None)
        return await self._users.update(user, changes)

    async def delete_student(self, enrollment_number: str) -> None:
        student = await self.get_student(enrollment_number)
        await self._roster.unlink_everywhere(STUDENTS, enrollment_number)
        await self._users.delete(student)
        logger.info(f"Student {enrollment_number} deleted")

    async def delete_staff(self, staff_id: str) -> None:
        staff = await self.get_staff(staff_id)
        teaching = [c.id for c in await self._classes.find_by_member("subjects.staff_id", staff_id)]
        if teaching:
            raise ValidationError(
                f"Staff {staff_id} still teaches subjects in {', '.join(teaching)}; reassign them first"
            )
        await self._roster.unlink_everywhere(STAFF, staff_id)
        await self._users.delete(staff)
        logger.info(f"Staff {staff_id} deleted")
