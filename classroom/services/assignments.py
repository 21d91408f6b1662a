"""Assignments and submissions (one submission per assignment and student)."""
from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from classroom.errors import NotFoundError, RemoteOperationError, ValidationError
from classroom.models.assignment import (
    Answer,
    AssignmentCreate,
    AssignmentOut,
    Question,
    QuestionType,
    StudentAssignments,
)
from classroom.services.s3 import submission_file_key

logger = logging.getLogger(__name__)


def build_questions(data: AssignmentCreate) -> list[Question]:
    if not data.name.strip():
        raise ValidationError("Assignment name is required")
    if not data.questions:
        raise ValidationError("An assignment needs at least one question")

    questions = []
    for number, q in enumerate(data.questions, start=1):
        if not q.text.strip():
            raise ValidationError(f"Question {number} has no text")
        if q.type == QuestionType.MCQ:
            options = [o for o in q.options if o.strip()]
            if len(options) < 2:
                raise ValidationError(f"Question {number} needs at least two options")
            if not 0 <= q.correct_answer_index < len(options):
                raise ValidationError(f"Question {number} has no valid correct answer")
            questions.append(
                Question(
                    text=q.text,
                    type=q.type,
                    options=options,
                    correct_answer=options[q.correct_answer_index],
                )
            )
        else:
            questions.append(Question(text=q.text, type=q.type))
    return questions


def serialize_assignment(assignment, submitted: Optional[bool] = None) -> AssignmentOut:
    return AssignmentOut(
        id=str(assignment.id),
        class_id=assignment.class_id,
        name=assignment.name,
        due_date=assignment.due_date,
        questions=list(assignment.questions),
        submitted=submitted,
    )


class AssignmentService:
    def __init__(self, classes, assignments, submissions, storage=None):
        self._classes = classes
        self._assignments = assignments
        self._submissions = submissions
        self._storage = storage

    async def get(self, assignment_id: str):
        assignment = await self._assignments.get(assignment_id)
        if not assignment:
            raise NotFoundError(f"Assignment {assignment_id} not found")
        return assignment

    async def create(self, data: AssignmentCreate, *, created_by: Optional[str] = None):
        if not await self._classes.get(data.class_id):
            raise NotFoundError(f"Class {data.class_id} not found")
        questions = build_questions(data)
        assignment = await self._assignments.insert(
            {
                "class_id": data.class_id,
                "name": data.name.strip(),
                "due_date": data.due_date,
                "questions": questions,
                "created_by": created_by,
            }
        )
        logger.info(f"Assignment {assignment.id} created for {data.class_id}")
        return assignment

    async def list_for_class(self, class_id: str):
        return await self._assignments.list_for_classes([class_id])

    async def list_for_student(
        self, enrollment_number: str, *, today: Optional[date] = None
    ) -> StudentAssignments:
        """Assignments of the student's classes; due today or later is upcoming."""
        today = today or date.today()
        classes = await self._classes.find_by_member("students", enrollment_number)
        assignments = await self._assignments.list_for_classes([c.id for c in classes])
        submitted = {
            s.assignment_id for s in await self._submissions.list_for_student(enrollment_number)
        }

        result = StudentAssignments()
        for assignment in assignments:
            out = serialize_assignment(assignment, submitted=str(assignment.id) in submitted)
            if assignment.due_date >= today:
                result.upcoming.append(out)
            else:
                result.past.append(out)
        return result

    async def submit(
        self,
        assignment_id: str,
        enrollment_number: str,
        answers: list[str],
        *,
        file_body: Optional[bytes] = None,
        filename: Optional[str] = None,
        content_type: Optional[str] = None,
    ):
        assignment = await self.get(assignment_id)
        school_class = await self._classes.get(assignment.class_id)
        if not school_class or enrollment_number not in school_class.students:
            raise ValidationError("You are not enrolled in the class of this assignment")
        if await self._submissions.find_one(assignment_id, enrollment_number):
            raise ValidationError("This assignment has already been submitted")
        if len(answers) != len(assignment.questions):
            raise ValidationError(
                f"Expected {len(assignment.questions)} answers, got {len(answers)}"
            )

        file_key = None
        if file_body is not None:
            if self._storage is None:
                raise ValidationError("File uploads are not available")
            file_key = await self._storage.upload(
                submission_file_key(assignment_id, enrollment_number, filename),
                file_body,
                content_type,
            )

        try:
            submission = await self._submissions.insert(
                {
                    "assignment_id": assignment_id,
                    "student_id": enrollment_number,
                    "answers": [
                        Answer(question_text=q.text, answer=a or "")
                        for q, a in zip(assignment.questions, answers)
                    ],
                    "file_key": file_key,
                }
            )
        except (ValidationError, RemoteOperationError):
            # Insert lost to a concurrent submission or failed; the upload is orphaned.
            if file_key:
                logger.warning(f"Removing uploaded file {file_key} of rejected submission")
                await self._storage.delete(file_key)
            raise
        logger.info(f"Submission for {assignment_id} by {enrollment_number} saved")
        return submission

    async def list_submissions(self, assignment_id: str):
        await self.get(assignment_id)
        return await self._submissions.list_for_assignment(assignment_id)

    async def get_submission(self, submission_id: str):
        submission = await self._submissions.get(submission_id)
        if not submission:
            raise NotFoundError(f"Submission {submission_id} not found")
        return submission

    async def file_url(self, submission_id: str) -> str:
        submission = await self.get_submission(submission_id)
        if not submission.file_key:
            raise ValidationError("This submission has no file")
        if self._storage is None:
            raise ValidationError("File downloads are not available")
        return await self._storage.download_url(submission.file_key)
