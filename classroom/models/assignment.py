"""Assignments created by staff and the students' submissions."""
from datetime import date, datetime
from enum import Enum
from typing import Optional

import pymongo
from beanie import Document, Indexed
from pydantic import BaseModel, Field
from pymongo import IndexModel


class QuestionType(str, Enum):
    MCQ = "mcq"
    BRIEF = "brief"


class Question(BaseModel):
    text: str
    type: QuestionType = QuestionType.BRIEF
    options: list[str] = Field(default_factory=list)
    correct_answer: Optional[str] = None


class Assignment(Document):
    class_id: Indexed(str)
    name: str
    due_date: date
    questions: list[Question] = Field(default_factory=list)
    created_by: Optional[str] = None  # staff id
    created_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "assignments"
        use_state_management = True


class Answer(BaseModel):
    question_text: str
    answer: str = ""


class Submission(Document):
    """One student's answers to one assignment."""
    assignment_id: Indexed(str)
    student_id: Indexed(str)  # enrollment number
    answers: list[Answer] = Field(default_factory=list)
    file_key: Optional[str] = None
    submitted_at: datetime = Field(default_factory=datetime.utcnow)
    graded: bool = False

    class Settings:
        name = "submissions"
        use_state_management = True
        indexes = [
            IndexModel(
                [("assignment_id", pymongo.ASCENDING), ("student_id", pymongo.ASCENDING)],
                unique=True,
            ),
        ]


class QuestionCreate(BaseModel):
    text: str
    type: QuestionType = QuestionType.BRIEF
    options: list[str] = Field(default_factory=list)
    correct_answer_index: int = 0


class AssignmentCreate(BaseModel):
    class_id: str
    name: str
    due_date: date
    questions: list[QuestionCreate] = Field(default_factory=list)


class AssignmentOut(BaseModel):
    id: str
    class_id: str
    name: str
    due_date: date
    questions: list[Question]
    submitted: Optional[bool] = None


class StudentAssignments(BaseModel):
    upcoming: list[AssignmentOut] = Field(default_factory=list)
    past: list[AssignmentOut] = Field(default_factory=list)
