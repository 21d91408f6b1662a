"""Beanie document models and Pydantic schemas."""
from classroom.models.user import (
    User,
    UserRole,
    UserCreate,
    StudentCreate,
    StaffCreate,
    ProfileUpdate,
    UserOut,
)
from classroom.models.school_class import (
    ClassRecord,
    Subject,
    ClassCreate,
    ClassUpdate,
    ClassOut,
    RosterChange,
)
from classroom.models.attendance import (
    AttendanceRecord,
    RollCallSubmit,
    AttendanceSheet,
    AttendanceSummary,
    StudentAttendanceRow,
    ClassAttendanceBreakdown,
    StudentAttendanceReport,
    attendance_record_id,
)
from classroom.models.assignment import (
    Assignment,
    Submission,
    Question,
    QuestionType,
    QuestionCreate,
    Answer,
    AssignmentCreate,
    AssignmentOut,
    StudentAssignments,
)

__all__ = [
    "User",
    "UserRole",
    "UserCreate",
    "StudentCreate",
    "StaffCreate",
    "ProfileUpdate",
    "UserOut",
    "ClassRecord",
    "Subject",
    "ClassCreate",
    "ClassUpdate",
    "ClassOut",
    "RosterChange",
    "AttendanceRecord",
    "RollCallSubmit",
    "AttendanceSheet",
    "AttendanceSummary",
    "StudentAttendanceRow",
    "ClassAttendanceBreakdown",
    "StudentAttendanceReport",
    "attendance_record_id",
    "Assignment",
    "Submission",
    "Question",
    "QuestionType",
    "QuestionCreate",
    "Answer",
    "AssignmentCreate",
    "AssignmentOut",
    "StudentAssignments",
]
