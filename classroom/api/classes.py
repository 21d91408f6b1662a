"""Classes, subjects and roster membership."""
from fastapi import APIRouter

from classroom.api.deps import AdminOnly, Classes, Roster, StaffOrAdmin, ensure_class_access
from classroom.models.school_class import ClassCreate, ClassUpdate, RosterChange, Subject
from classroom.services.classes import serialize_class

router = APIRouter()


@router.get("/")
async def list_classes(admin: AdminOnly, classes: Classes):
    return [serialize_class(c) for c in await classes.list_classes()]


@router.post("/", status_code=201)
async def create_class(data: ClassCreate, admin: AdminOnly, classes: Classes):
    return serialize_class(await classes.create(data))


@router.get("/{class_id}")
async def get_class(class_id: str, user: StaffOrAdmin, classes: Classes):
    record = await classes.get(class_id)
    ensure_class_access(user, record)
    return serialize_class(record)


@router.patch("/{class_id}")
async def update_class(class_id: str, data: ClassUpdate, admin: AdminOnly, classes: Classes):
    """Edit class details; a new subject list also replaces the staff list."""
    return serialize_class(await classes.update(class_id, data))


@router.put("/{class_id}/subjects")
async def set_subjects(class_id: str, subjects: list[Subject], admin: AdminOnly, classes: Classes):
    return serialize_class(await classes.set_subjects(class_id, subjects))


@router.delete("/{class_id}", status_code=204)
async def delete_class(class_id: str, admin: AdminOnly, classes: Classes):
    """Delete the class. Its attendance and assignments are kept."""
    await classes.delete(class_id)


@router.post("/{class_id}/students")
async def add_student(class_id: str, data: RosterChange, admin: AdminOnly, roster: Roster):
    return serialize_class(await roster.add_student(class_id, data.member_id))


@router.delete("/{class_id}/students/{enrollment_number}")
async def remove_student(class_id: str, enrollment_number: str, admin: AdminOnly, roster: Roster):
    return serialize_class(await roster.remove_student(class_id, enrollment_number))


@router.post("/{class_id}/staff")
async def add_staff(class_id: str, data: RosterChange, admin: AdminOnly, roster: Roster):
    return serialize_class(await roster.add_staff(class_id, data.member_id))


@router.delete("/{class_id}/staff/{staff_id}")
async def remove_staff(class_id: str, staff_id: str, admin: AdminOnly, roster: Roster):
    return serialize_class(await roster.remove_staff(class_id, staff_id))
