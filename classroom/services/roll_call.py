"""Attendance writer: one explicit boolean per enrolled student per day."""
from __future__ import annotations

import logging
from datetime import date
from typing import Iterable, Optional

from classroom.errors import NotFoundError, ValidationError
from classroom.models.attendance import AttendanceSheet

logger = logging.getLogger(__name__)


def build_roll_call(roster: Iterable[str], present: Iterable[str]) -> dict[str, bool]:
    """Mark every roster student, defaulting to absent."""
    present_set = set(present)
    return {student: student in present_set for student in roster}


class RollCallService:
    def __init__(self, classes, attendance):
        self._classes = classes
        self._attendance = attendance

    async def submit_attendance(
        self,
        class_id: str,
        day: date,
        present: Iterable[str],
        *,
        marked_by: Optional[str] = None,
    ):
        school_class = await self._classes.get(class_id)
        if not school_class:
            raise NotFoundError(f"Class {class_id} not found")

        present_set = set(present)
        unknown = sorted(present_set - set(school_class.students))
        if unknown:
            raise ValidationError(
                f"Not enrolled in {class_id}: {', '.join(unknown)}"
            )

        marks = build_roll_call(school_class.students, present_set)
        record = await self._attendance.merge(class_id, day, marks, marked_by)
        logger.info(
            f"Roll call for {class_id} on {day.isoformat()} saved by {marked_by}: "
            f"{len(present_set)}/{len(marks)} present"
        )
        return record

    async def get_sheet(self, class_id: str, day: date) -> AttendanceSheet:
        """Stored roll call for the day, or an empty sheet when none was taken."""
        school_class = await self._classes.get(class_id)
        if not school_class:
            raise NotFoundError(f"Class {class_id} not found")
        record = await self._attendance.get(class_id, day)
        return AttendanceSheet(
            class_id=class_id,
            date=day,
            exists=record is not None,
            records=dict(record.records) if record else {},
        )
