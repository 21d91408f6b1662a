"""Student records."""
from fastapi import APIRouter, HTTPException, Query

from classroom.api.deps import AdminOnly, CurrentUser, Directory, Roster, StudentOnly
from classroom.models.user import ProfileUpdate, StudentCreate, UserRole
from classroom.services.classes import serialize_class
from classroom.services.people import serialize_user

router = APIRouter()


@router.get("/")
async def list_students(
    user: CurrentUser,
    directory: Directory,
    q: str | None = Query(None, description="Search by name or enrollment number"),
    department: str | None = None,
):
    if user.role == UserRole.STUDENT:
        raise HTTPException(status_code=403, detail="Insufficient permissions")
    students = await directory.list_students()
    if department:
        students = [s for s in students if s.department == department]
    if q and q.strip():
        needle = q.strip().lower()
        students = [
            s for s in students
            if needle in s.name.lower() or needle in (s.enrollment_number or "").lower()
        ]
    return [serialize_user(s) for s in students]


@router.post("/", status_code=201)
async def create_student(data: StudentCreate, admin: AdminOnly, directory: Directory):
    student = await directory.create_student(data)
    return serialize_user(student)


@router.get("/me/classes")
async def my_classes(user: StudentOnly, roster: Roster):
    return [serialize_class(c) for c in await roster.classes_for_student(user.enrollment_number)]


@router.patch("/me")
async def update_my_details(data: ProfileUpdate, user: StudentOnly, directory: Directory):
    """Students may edit their own name, phone and free-form details."""
    changes = ProfileUpdate(**data.model_dump(exclude_unset=True, include={"name", "phone", "details"}))
    updated = await directory.update_profile(user, changes)
    return serialize_user(updated)


@router.get("/{enrollment_number}")
async def get_student(enrollment_number: str, user: CurrentUser, directory: Directory):
    if user.role == UserRole.STUDENT and user.enrollment_number != enrollment_number:
        raise HTTPException(status_code=403, detail="Not authorized for this student")
    return serialize_user(await directory.get_student(enrollment_number))


@router.get("/{enrollment_number}/classes")
async def get_student_classes(enrollment_number: str, admin: AdminOnly, roster: Roster):
    return [serialize_class(c) for c in await roster.classes_for_student(enrollment_number)]


@router.patch("/{enrollment_number}")
async def update_student(enrollment_number: str, data: ProfileUpdate, admin: AdminOnly, directory: Directory):
    student = await directory.get_student(enrollment_number)
    updated = await directory.update_profile(student, data)
    return serialize_user(updated)


@router.delete("/{enrollment_number}", status_code=204)
async def delete_student(enrollment_number: str, admin: AdminOnly, directory: Directory):
    """Delete the student and drop them from every class roster."""
    await directory.delete_student(enrollment_number)
