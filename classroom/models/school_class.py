from datetime import datetime
from typing import Optional

import pymongo
from beanie import Document
from pydantic import BaseModel, Field
from pymongo import IndexModel

from classroom.models.user import BUSINESS_KEY_PATTERN


class Subject(BaseModel):
    name: str = Field(min_length=1)
    staff_id: str


class ClassRecord(Document):
    """A class (e.g. CS-101) with its subjects and rosters.

    ``students`` and ``staff`` are the single source of membership; a
    student's or staff member's classes are looked up with array queries.
    """
    id: str  # human-assigned class id
    name: str
    department: Optional[str] = None
    semester: int = 1
    capacity: int
    room: Optional[str] = None
    subjects: list[Subject] = Field(default_factory=list)
    students: list[str] = Field(default_factory=list)  # enrollment numbers
    staff: list[str] = Field(default_factory=list)  # staff ids
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "classes"
        use_state_management = True
        indexes = [
            IndexModel([("students", pymongo.ASCENDING)]),
            IndexModel([("staff", pymongo.ASCENDING)]),
        ]


class ClassCreate(BaseModel):
    class_id: str = Field(pattern=BUSINESS_KEY_PATTERN)
    name: str = Field(min_length=1)
    department: Optional[str] = None
    semester: int = Field(default=1, ge=1)
    capacity: int = Field(ge=1)
    room: Optional[str] = None
    subjects: list[Subject] = Field(default_factory=list)


class ClassUpdate(BaseModel):
    name: Optional[str] = None
    department: Optional[str] = None
    semester: Optional[int] = Field(default=None, ge=1)
    capacity: Optional[int] = Field(default=None, ge=1)
    room: Optional[str] = None
    subjects: Optional[list[Subject]] = None


class RosterChange(BaseModel):
    member_id: str


class ClassOut(BaseModel):
    class_id: str
    name: str
    department: Optional[str] = None
    semester: int
    capacity: int
    room: Optional[str] = None
    subjects: list[Subject]
    students: list[str]
    staff: list[str]
