"""JWT-based stateless authentication."""
from fastapi import APIRouter, status
from pydantic import BaseModel, EmailStr

from classroom.api.deps import CurrentUser, Identity
from classroom.config import settings
from classroom.services.identity import TokenPair
from classroom.services.people import serialize_user

router = APIRouter()


class LoginRequest(BaseModel):
    email: str
    password: str


class RefreshRequest(BaseModel):
    refresh_token: str


class PasswordResetRequest(BaseModel):
    email: EmailStr


class PasswordResetConfirm(BaseModel):
    token: str
    password: str


@router.post("/login", response_model=TokenPair)
async def login(req: LoginRequest, identity: Identity):
    return await identity.sign_in(req.email, req.password)


@router.post("/refresh", response_model=TokenPair)
async def refresh_token(req: RefreshRequest, identity: Identity):
    return await identity.refresh(req.refresh_token)


@router.post("/password-reset", status_code=status.HTTP_202_ACCEPTED)
async def request_password_reset(req: PasswordResetRequest, identity: Identity):
    """Always accepted so account existence is not revealed."""
    token = await identity.send_password_reset(req.email)
    out = {"status": "accepted"}
    if settings.debug and token:
        out["reset_token"] = token
    return out


@router.post("/password-reset/confirm")
async def confirm_password_reset(req: PasswordResetConfirm, identity: Identity):
    await identity.reset_password(req.token, req.password)
    return {"status": "ok"}


@router.get("/me")
async def me(user: CurrentUser):
    return serialize_user(user)
