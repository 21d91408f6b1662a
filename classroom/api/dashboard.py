from datetime import date
from typing import Any, Dict

from fastapi import APIRouter, HTTPException

from classroom.api.deps import AdminOnly, Aggregator, Assignments, Classes, CurrentUser, Directory, Roster
from classroom.models.user import UserRole

router = APIRouter()


@router.get("/admin")
async def admin_stats(admin: AdminOnly, directory: Directory, classes: Classes) -> Dict[str, Any]:
    """Overview counts for the admin dashboard."""
    students = await directory.list_students()
    staff = await directory.list_staff()
    all_classes = await classes.list_classes()
    return {
        "counts": {
            "students": len(students),
            "staff": len(staff),
            "classes": len(all_classes),
        },
        "enrollment": {
            "enrolled": sum(len(c.students) for c in all_classes),
            "capacity": sum(c.capacity for c in all_classes),
        },
    }


@router.get("/staff")
async def staff_stats(user: CurrentUser, roster: Roster, aggregator: Aggregator) -> Dict[str, Any]:
    """Assigned classes and today's attendance across them."""
    if user.role != UserRole.STAFF:
        raise HTTPException(status_code=403, detail="Only staff have a staff dashboard")
    my_classes = await roster.classes_for_staff(user.staff_id)
    today = date.today()
    summary = await aggregator.summarize_day([c.id for c in my_classes], today)
    return {
        "classes": len(my_classes),
        "students": len({s for c in my_classes for s in c.students}),
        "attendance_today": {**summary.model_dump(), "date": today.isoformat()},
    }


@router.get("/student")
async def student_stats(
    user: CurrentUser,
    roster: Roster,
    directory: Directory,
    aggregator: Aggregator,
    assignments: Assignments,
) -> Dict[str, Any]:
    """Subjects with their teachers, overall attendance and pending assignments."""
    if user.role != UserRole.STUDENT:
        raise HTTPException(status_code=403, detail="Only students have a student dashboard")
    my_classes = await roster.classes_for_student(user.enrollment_number)
    teachers = {s.staff_id: s.name for s in await directory.list_staff()}
    report = await aggregator.compute_for_student(user.enrollment_number)
    work = await assignments.list_for_student(user.enrollment_number)

    subjects = [
        {
            "class_id": c.id,
            "subject": s.name,
            "teacher": teachers.get(s.staff_id, "N/A"),
        }
        for c in my_classes
        for s in c.subjects
    ]
    return {
        "total_subjects": len(subjects),
        "subjects": subjects,
        "attendance": {
            "percentage": report.percentage,
            "has_data": report.has_data,
            "chart": [
                {"name": "Present", "value": report.present},
                {"name": "Absent", "value": report.total - report.present},
            ],
        },
        "pending_assignments": sum(1 for a in work.upcoming if not a.submitted),
    }
