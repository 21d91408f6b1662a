"""Attendance aggregation: per-student and per-class percentages.

Counting rule: a record whose map has a key for the student counts towards
``total``; ``True`` also counts towards ``present``. A missing key is
``NO_RECORD`` and is left out of the denominator, so a student who joined a
class late is not penalised for roll calls taken before they were enrolled.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Iterable, Mapping

from classroom.errors import NotFoundError, ValidationError
from classroom.models.attendance import (
    AttendanceSummary,
    ClassAttendanceBreakdown,
    StudentAttendanceReport,
    StudentAttendanceRow,
)


class AttendanceMark(str, Enum):
    PRESENT = "present"
    ABSENT = "absent"
    NO_RECORD = "no_record"


def mark_for(records: Mapping[str, bool], student_id: str) -> AttendanceMark:
    if student_id not in records:
        return AttendanceMark.NO_RECORD
    return AttendanceMark.PRESENT if records[student_id] else AttendanceMark.ABSENT


def percentage(present: int, total: int) -> int:
    """Whole-number percentage, halves rounded up; 0 when there is no data."""
    if total <= 0:
        return 0
    return (present * 200 + total) // (2 * total)


@dataclass
class AttendanceStats:
    present: int = 0
    total: int = 0
    present_dates: list[date] = field(default_factory=list)
    absent_dates: list[date] = field(default_factory=list)

    def add(self, mark: AttendanceMark, day: date | None = None) -> None:
        if mark is AttendanceMark.NO_RECORD:
            return
        self.total += 1
        if mark is AttendanceMark.PRESENT:
            self.present += 1
            if day is not None:
                self.present_dates.append(day)
        elif day is not None:
            self.absent_dates.append(day)

    @property
    def has_data(self) -> bool:
        return self.total > 0

    @property
    def percentage(self) -> int:
        return percentage(self.present, self.total)

    def summary(self) -> dict:
        return {
            "present": self.present,
            "total": self.total,
            "percentage": self.percentage,
            "has_data": self.has_data,
        }


def tally(records: Iterable, student_ids: Iterable[str]) -> dict[str, AttendanceStats]:
    """Single pass over attendance records for the given students."""
    stats = {student_id: AttendanceStats() for student_id in student_ids}
    for record in records:
        for student_id, student_stats in stats.items():
            student_stats.add(mark_for(record.records, student_id), record.date)
    return stats


def summarize_marks(records: Iterable) -> AttendanceSummary:
    """Present/total over every stored mark, whoever it belongs to."""
    stats = AttendanceStats()
    for record in records:
        for present in record.records.values():
            stats.add(AttendanceMark.PRESENT if present else AttendanceMark.ABSENT)
    return AttendanceSummary(**stats.summary())


class AttendanceAggregator:
    """Re-scans the store on every call; no caching."""

    def __init__(self, classes, attendance, users):
        self._classes = classes
        self._attendance = attendance
        self._users = users

    async def compute_attendance(
        self,
        *,
        student_id: str | None = None,
        class_id: str | None = None,
    ) -> StudentAttendanceReport | list[StudentAttendanceRow]:
        """One student across their classes, or one class across its roster."""
        if (student_id is None) == (class_id is None):
            raise ValidationError("Give exactly one of student_id or class_id")
        if student_id is not None:
            return await self.compute_for_student(student_id)
        return await self.compute_for_class(class_id)

    async def compute_for_student(self, enrollment_number: str) -> StudentAttendanceReport:
        student = await self._users.get_student(enrollment_number)
        if not student:
            raise NotFoundError(f"Student {enrollment_number} not found")

        classes = await self._classes.find_by_member("students", enrollment_number)
        records = await self._attendance.find_for_classes([c.id for c in classes])

        overall = AttendanceStats()
        by_class: dict[str, AttendanceStats] = {c.id: AttendanceStats() for c in classes}
        for record in sorted(records, key=lambda r: r.date):
            mark = mark_for(record.records, enrollment_number)
            overall.add(mark, record.date)
            if record.class_id in by_class:
                by_class[record.class_id].add(mark)

        return StudentAttendanceReport(
            student_id=enrollment_number,
            present_dates=overall.present_dates,
            absent_dates=overall.absent_dates,
            by_class=[
                ClassAttendanceBreakdown(class_id=class_id, **stats.summary())
                for class_id, stats in by_class.items()
            ],
            **overall.summary(),
        )

    async def compute_for_class(self, class_id: str) -> list[StudentAttendanceRow]:
        school_class = await self._classes.get(class_id)
        if not school_class:
            raise NotFoundError(f"Class {class_id} not found")

        records = await self._attendance.find_for_classes([class_id])
        stats = tally(records, school_class.students)
        students = await self._users.find_students(school_class.students)
        names = {s.enrollment_number: s.name for s in students}

        return [
            StudentAttendanceRow(
                student_id=student_id,
                name=names.get(student_id),
                **stats[student_id].summary(),
            )
            for student_id in school_class.students
        ]

    async def daily_log(
        self,
        class_id: str,
        *,
        start: date | None = None,
        end: date | None = None,
    ) -> tuple[list, dict[str, str]]:
        """Stored roll calls of a class in a date range, with student names."""
        if not await self._classes.get(class_id):
            raise NotFoundError(f"Class {class_id} not found")
        records = await self._attendance.find_for_classes([class_id], start=start, end=end)
        student_ids = sorted({s for record in records for s in record.records})
        students = await self._users.find_students(student_ids)
        return records, {s.enrollment_number: s.name for s in students}

    async def summarize_day(self, class_ids: Iterable[str], day: date) -> AttendanceSummary:
        records = await self._attendance.find_for_day(list(class_ids), day)
        return summarize_marks(records)
