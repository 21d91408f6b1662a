"""Admin accounts."""
from fastapi import APIRouter
from pydantic import BaseModel

from classroom.api.deps import AdminOnly, Directory, Identity
from classroom.models.user import UserCreate
from classroom.services.people import serialize_user

router = APIRouter()


class PasswordUpdate(BaseModel):
    password: str


@router.get("/admins")
async def list_admins(admin: AdminOnly, directory: Directory):
    return [serialize_user(u) for u in await directory.list_admins()]


@router.post("/admins", status_code=201)
async def create_admin(data: UserCreate, admin: AdminOnly, directory: Directory):
    user = await directory.create_admin(data)
    return serialize_user(user)


@router.post("/{user_id}/set-password")
async def set_user_password(user_id: str, data: PasswordUpdate, admin: AdminOnly, identity: Identity):
    """Set or reset a user's password (admin-only)."""
    await identity.set_password(user_id, data.password)
    return {"id": user_id}
