from datetime import date, datetime
from typing import Optional

from beanie import Document, Indexed
from pydantic import BaseModel, Field


def attendance_record_id(class_id: str, day: date) -> str:
    """Composite key of a roll call: ``{class_id}_{yyyy-mm-dd}``."""
    return f"{class_id}_{day.isoformat()}"


class AttendanceRecord(Document):
    """Roll call for one class on one calendar day.

    A student missing from ``records`` has no data for that day; it is not
    the same as ``False`` (absent).
    """
    id: str
    class_id: Indexed(str)
    date: Indexed(date)
    records: dict[str, bool] = Field(default_factory=dict)
    marked_by: Optional[str] = None
    marked_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "attendance"
        use_state_management = True


class RollCallSubmit(BaseModel):
    class_id: str
    date: date
    present: list[str] = Field(default_factory=list)


class AttendanceSheet(BaseModel):
    class_id: str
    date: date
    exists: bool
    records: dict[str, bool]


class AttendanceSummary(BaseModel):
    present: int
    total: int
    percentage: int
    has_data: bool


class StudentAttendanceRow(AttendanceSummary):
    student_id: str
    name: Optional[str] = None


class ClassAttendanceBreakdown(AttendanceSummary):
    class_id: str


class StudentAttendanceReport(AttendanceSummary):
    student_id: str
    present_dates: list[date] = Field(default_factory=list)
    absent_dates: list[date] = Field(default_factory=list)
    by_class: list[ClassAttendanceBreakdown] = Field(default_factory=list)
