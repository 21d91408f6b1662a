from datetime import date
from typing import List, Optional

from fastapi import APIRouter, HTTPException, Query
from fastapi.responses import StreamingResponse

from classroom.api.deps import (
    Aggregator,
    Classes,
    CurrentUser,
    RollCall,
    Roster,
    StaffOrAdmin,
    ensure_class_access,
    ensure_student_access,
)
from classroom.models.attendance import (
    AttendanceSheet,
    RollCallSubmit,
    StudentAttendanceReport,
    StudentAttendanceRow,
)
from classroom.models.user import UserRole
from classroom.services import reports

router = APIRouter()


@router.get("/record/{class_id}/{day}", response_model=AttendanceSheet)
async def get_attendance_record(class_id: str, day: date, user: StaffOrAdmin, classes: Classes, roll_call: RollCall):
    """Fetch the roll call for a class and date (empty when none was taken)."""
    ensure_class_access(user, await classes.get(class_id))
    return await roll_call.get_sheet(class_id, day)


@router.post("/submit")
async def submit_attendance(data: RollCallSubmit, user: StaffOrAdmin, classes: Classes, roll_call: RollCall):
    """Save a day's roll call; every enrolled student not listed is marked absent."""
    ensure_class_access(user, await classes.get(data.class_id))
    marked_by = user.staff_id if user.role == UserRole.STAFF else user.id
    record = await roll_call.submit_attendance(data.class_id, data.date, data.present, marked_by=marked_by)
    return {
        "status": "success",
        "message": f"Attendance for {data.class_id} on {data.date.isoformat()} has been submitted.",
        "records": record.records if record else {},
    }


@router.get("/student/{enrollment_number}", response_model=StudentAttendanceReport)
async def student_attendance(enrollment_number: str, user: CurrentUser, roster: Roster, aggregator: Aggregator):
    ensure_student_access(user, enrollment_number, await roster.classes_for_student(enrollment_number))
    return await aggregator.compute_for_student(enrollment_number)


@router.get("/class/{class_id}", response_model=List[StudentAttendanceRow])
async def class_attendance(class_id: str, user: StaffOrAdmin, classes: Classes, aggregator: Aggregator):
    """Per-student attendance for the current roster, in roster order."""
    ensure_class_access(user, await classes.get(class_id))
    return await aggregator.compute_for_class(class_id)


@router.get("/report")
async def download_attendance_report(
    class_id: str,
    user: StaffOrAdmin,
    classes: Classes,
    aggregator: Aggregator,
    kind: str = Query("summary", enum=["summary", "daily"]),
    from_date: Optional[date] = None,
    to_date: Optional[date] = None,
    format: str = Query("csv", enum=["csv", "excel"]),
):
    """Download the class summary or the day-by-day log as CSV or Excel."""
    ensure_class_access(user, await classes.get(class_id))

    if kind == "summary":
        frame = reports.summary_frame(await aggregator.compute_for_class(class_id))
    else:
        records, names = await aggregator.daily_log(class_id, start=from_date, end=to_date)
        frame = reports.daily_log_frame(records, names)

    if frame.empty:
        raise HTTPException(status_code=404, detail="No records found for the given criteria")

    content, media_type, ext = reports.render(frame, format)
    return StreamingResponse(
        iter([content]),
        media_type=media_type,
        headers={"Content-Disposition": f"attachment; filename=attendance_{class_id}_{kind}.{ext}"},
    )
