"""Users: admins, staff and students, keyed by normalized email."""
from datetime import datetime
from enum import Enum
from typing import Any, Optional

import pymongo
from beanie import Document, Indexed
from pydantic import BaseModel, EmailStr, Field, field_validator
from pymongo import IndexModel

BUSINESS_KEY_PATTERN = r"^[A-Za-z0-9][A-Za-z0-9_-]*$"


class UserRole(str, Enum):
    ADMIN = "admin"
    STAFF = "staff"
    STUDENT = "student"


class User(Document):
    """User document. The id is the normalized email; classes join on
    ``enrollment_number`` / ``staff_id`` instead."""

    id: str
    email: Indexed(EmailStr, unique=True)
    hashed_password: str
    role: UserRole
    name: str
    phone: Optional[str] = None
    department: Optional[str] = None
    is_active: bool = True
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    # Student-specific
    enrollment_number: Optional[str] = None

    # Staff-specific
    staff_id: Optional[str] = None

    # Form fields not promoted to top level (dob, guardian names, ...)
    details: dict[str, Any] = Field(default_factory=dict)

    class Settings:
        name = "users"
        use_state_management = True
        indexes = [
            # Optional fields are stored as null, so a sparse index would still clash.
            IndexModel(
                [("enrollment_number", pymongo.ASCENDING)],
                unique=True,
                partialFilterExpression={"enrollment_number": {"$type": "string"}},
            ),
            IndexModel(
                [("staff_id", pymongo.ASCENDING)],
                unique=True,
                partialFilterExpression={"staff_id": {"$type": "string"}},
            ),
            IndexModel([("role", pymongo.ASCENDING)]),
        ]


class UserCreate(BaseModel):
    email: EmailStr
    password: str
    name: str
    phone: Optional[str] = None


class StudentCreate(UserCreate):
    enrollment_number: str = Field(pattern=BUSINESS_KEY_PATTERN)
    department: Optional[str] = None
    details: dict[str, Any] = Field(default_factory=dict)


class StaffCreate(UserCreate):
    staff_id: str = Field(pattern=BUSINESS_KEY_PATTERN)
    department: Optional[str] = None
    details: dict[str, Any] = Field(default_factory=dict)


class ProfileUpdate(BaseModel):
    """All fields optional for PATCH; ``details`` is merged key by key."""
    name: Optional[str] = None
    phone: Optional[str] = None
    department: Optional[str] = None
    is_active: Optional[bool] = None
    details: Optional[dict[str, Any]] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not value.strip():
            raise ValueError("name must not be blank")
        return value


class UserOut(BaseModel):
    id: str
    email: str
    role: UserRole
    name: str
    phone: Optional[str] = None
    department: Optional[str] = None
    is_active: bool
    enrollment_number: Optional[str] = None
    staff_id: Optional[str] = None
    details: dict[str, Any] = {}

    class Config:
        from_attributes = True
