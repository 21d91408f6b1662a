"""Identity: accounts, password hashing and JWT tokens."""
from __future__ import annotations

import logging
import re
from datetime import datetime, timedelta
from typing import Any, Optional

import bcrypt
from jose import JWTError, jwt
from pydantic import BaseModel

from classroom.config import settings
from classroom.errors import IdentityError, ValidationError
from classroom.models.user import UserRole

logger = logging.getLogger(__name__)


class TokenPair(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


def normalize_email(email: str) -> str:
    """Document id for a user: lower-cased email with non-alphanumerics stripped."""
    return re.sub(r"[^a-z0-9]", "", email.strip().lower())


def verify_password(plain: str, hashed: str) -> bool:
    return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))


def get_password_hash(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def _encode(claims: dict[str, Any], expires_in: timedelta) -> str:
    to_encode = {**claims, "exp": datetime.utcnow() + expires_in}
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def create_access_token(subject: str, role: str) -> str:
    return _encode(
        {"sub": subject, "role": role, "type": "access"},
        timedelta(minutes=settings.jwt_access_token_expire_minutes),
    )


def create_refresh_token(subject: str) -> str:
    return _encode(
        {"sub": subject, "type": "refresh"},
        timedelta(days=settings.jwt_refresh_token_expire_days),
    )


def create_reset_token(subject: str) -> str:
    return _encode(
        {"sub": subject, "type": "reset"},
        timedelta(minutes=settings.jwt_reset_token_expire_minutes),
    )


def decode_token(token: str, expected_type: str) -> str:
    """Return the token subject, or raise IdentityError("invalid-token")."""
    try:
        payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        raise IdentityError("invalid-token", "Invalid or expired token")
    if payload.get("type") != expected_type:
        raise IdentityError("invalid-token", "Invalid token type")
    subject = payload.get("sub")
    if not subject:
        raise IdentityError("invalid-token", "Invalid token")
    return subject


def issue_tokens(user) -> TokenPair:
    return TokenPair(
        access_token=create_access_token(user.id, UserRole(user.role).value),
        refresh_token=create_refresh_token(user.id),
    )


class IdentityService:
    def __init__(self, users):
        self._users = users

    def _check_password(self, password: str) -> None:
        if len(password or "") < settings.min_password_length:
            raise IdentityError(
                "invalid-password",
                f"The password is not strong enough. It must be at least "
                f"{settings.min_password_length} characters long.",
            )

    async def create_user(
        self,
        email: str,
        password: str,
        display_name: str,
        role: UserRole,
        **profile: Any,
    ):
        self._check_password(password)
        user_id = normalize_email(email)
        if not user_id:
            raise ValidationError("A valid email address is required")
        if await self._users.get(user_id) or await self._users.get_by_email(email):
            raise IdentityError(
                "email-already-exists",
                "This email address is already in use by another account.",
            )

        enrollment_number = profile.get("enrollment_number")
        if enrollment_number and await self._users.get_student(enrollment_number):
            raise ValidationError(f"Enrollment number {enrollment_number} is already in use")
        staff_id = profile.get("staff_id")
        if staff_id and await self._users.get_staff(staff_id):
            raise ValidationError(f"Staff ID {staff_id} is already in use")

        user = await self._users.insert(
            {
                "id": user_id,
                "email": email,
                "hashed_password": get_password_hash(password),
                "role": role,
                "name": display_name,
                **profile,
            }
        )
        logger.info(f"Created {role.value} account {user_id}")
        return user

    async def sign_in(self, email: str, password: str) -> TokenPair:
        user = await self._users.get(normalize_email(email))
        if not user or not user.is_active or not verify_password(password, user.hashed_password):
            raise IdentityError("invalid-credentials", "Invalid credentials")
        return issue_tokens(user)

    async def refresh(self, refresh_token: str) -> TokenPair:
        user = await self._users.get(decode_token(refresh_token, "refresh"))
        if not user or not user.is_active:
            raise IdentityError("invalid-credentials", "User not found or inactive")
        return issue_tokens(user)

    async def send_password_reset(self, email: str) -> Optional[str]:
        """Issue a reset token. Unknown emails are accepted without a token."""
        user = await self._users.get(normalize_email(email))
        if not user or not user.is_active:
            logger.info("Password reset requested for an unknown account")
            return None
        token = create_reset_token(user.id)
        logger.info(f"Password reset token issued for {user.id}")
        return token

    async def reset_password(self, token: str, new_password: str) -> None:
        user = await self._users.get(decode_token(token, "reset"))
        if not user:
            raise IdentityError("invalid-token", "Invalid token")
        self._check_password(new_password)
        await self._users.update(user, {"hashed_password": get_password_hash(new_password)})

    async def set_password(self, user_id: str, new_password: str) -> None:
        user = await self._users.get(user_id)
        if not user:
            raise ValidationError(f"User {user_id} not found")
        self._check_password(new_password)
        await self._users.update(user, {"hashed_password": get_password_hash(new_password)})
