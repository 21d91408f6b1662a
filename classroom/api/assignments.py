from typing import List, Optional

from fastapi import APIRouter, File, Form, UploadFile

from classroom.api.deps import (
    Assignments,
    Classes,
    StaffOrAdmin,
    StudentOnly,
    ensure_class_access,
)
from classroom.models.assignment import AssignmentCreate, StudentAssignments
from classroom.models.user import UserRole
from classroom.services.assignments import serialize_assignment

router = APIRouter()


def serialize_submission(s) -> dict:
    return {
        "id": str(s.id),
        "assignment_id": s.assignment_id,
        "student_id": s.student_id,
        "answers": [a.model_dump() for a in s.answers],
        "has_file": bool(s.file_key),
        "submitted_at": s.submitted_at.isoformat(),
        "graded": s.graded,
    }


@router.post("/", status_code=201)
async def create_assignment(data: AssignmentCreate, user: StaffOrAdmin, classes: Classes, assignments: Assignments):
    ensure_class_access(user, await classes.get(data.class_id))
    created_by = user.staff_id if user.role == UserRole.STAFF else user.id
    assignment = await assignments.create(data, created_by=created_by)
    return serialize_assignment(assignment)


@router.get("/class/{class_id}")
async def list_class_assignments(class_id: str, user: StaffOrAdmin, classes: Classes, assignments: Assignments):
    ensure_class_access(user, await classes.get(class_id))
    return [serialize_assignment(a) for a in await assignments.list_for_class(class_id)]


@router.get("/mine", response_model=StudentAssignments)
async def my_assignments(user: StudentOnly, assignments: Assignments):
    """Upcoming and past assignments of the signed-in student's classes."""
    return await assignments.list_for_student(user.enrollment_number)


@router.post("/{assignment_id}/submit", status_code=201)
async def submit_assignment(
    assignment_id: str,
    user: StudentOnly,
    assignments: Assignments,
    answers: List[str] = Form(default=[]),
    file: Optional[UploadFile] = File(None),
):
    body = await file.read() if file else None
    submission = await assignments.submit(
        assignment_id,
        user.enrollment_number,
        answers,
        file_body=body,
        filename=file.filename if file else None,
        content_type=file.content_type if file else None,
    )
    return serialize_submission(submission)


@router.get("/{assignment_id}/submissions")
async def list_submissions(assignment_id: str, user: StaffOrAdmin, classes: Classes, assignments: Assignments):
    assignment = await assignments.get(assignment_id)
    ensure_class_access(user, await classes.get(assignment.class_id))
    return [serialize_submission(s) for s in await assignments.list_submissions(assignment_id)]


@router.get("/submissions/{submission_id}/file")
async def submission_file_url(submission_id: str, user: StaffOrAdmin, classes: Classes, assignments: Assignments):
    """Presigned download URL for the file attached to a submission."""
    submission = await assignments.get_submission(submission_id)
    assignment = await assignments.get(submission.assignment_id)
    ensure_class_access(user, await classes.get(assignment.class_id))
    return {"url": await assignments.file_url(submission_id)}
