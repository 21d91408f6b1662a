from fastapi import APIRouter, HTTPException

from classroom.api.deps import AdminOnly, CurrentUser, Directory, Roster, StaffOrAdmin
from classroom.models.user import ProfileUpdate, StaffCreate, UserRole
from classroom.services.classes import serialize_class
from classroom.services.people import serialize_user

router = APIRouter()


@router.get("/")
async def list_staff(user: CurrentUser, directory: Directory):
    """List all staff members (students see them as subject teachers)."""
    return [serialize_user(s) for s in await directory.list_staff()]


@router.post("/", status_code=201)
async def create_staff(data: StaffCreate, admin: AdminOnly, directory: Directory):
    """Create a new staff member and their login."""
    staff = await directory.create_staff(data)
    return serialize_user(staff)


@router.get("/me/classes")
async def my_classes(user: StaffOrAdmin, roster: Roster):
    """Classes the signed-in staff member is assigned to."""
    if user.role != UserRole.STAFF:
        raise HTTPException(status_code=403, detail="Only staff have assigned classes")
    return [serialize_class(c) for c in await roster.classes_for_staff(user.staff_id)]


@router.get("/{staff_id}")
async def get_staff(staff_id: str, admin: AdminOnly, directory: Directory):
    return serialize_user(await directory.get_staff(staff_id))


@router.get("/{staff_id}/classes")
async def get_staff_classes(staff_id: str, admin: AdminOnly, roster: Roster):
    return [serialize_class(c) for c in await roster.classes_for_staff(staff_id)]


@router.patch("/{staff_id}")
async def update_staff(staff_id: str, data: ProfileUpdate, admin: AdminOnly, directory: Directory):
    staff = await directory.get_staff(staff_id)
    return serialize_user(await directory.update_profile(staff, data))


@router.delete("/{staff_id}", status_code=204)
async def delete_staff(staff_id: str, admin: AdminOnly, directory: Directory):
    await directory.delete_staff(staff_id)
