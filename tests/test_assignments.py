import asyncio
from datetime import date

import pytest

from classroom.errors import NotFoundError, ValidationError
from classroom.models.assignment import AssignmentCreate, QuestionCreate, QuestionType
from classroom.services.assignments import AssignmentService, build_questions
from classroom.services.s3 import submission_file_key


@pytest.fixture
def service(classes, assignments, submissions, storage):
    classes.add("CS-101", students=["2024CS001"])
    return AssignmentService(classes, assignments, submissions, storage)


def make_assignment(svc, due=date(2024, 5, 1), **kwargs):
    data = AssignmentCreate(
        class_id=kwargs.pop("class_id", "CS-101"),
        name="Week 1",
        due_date=due,
        questions=[
            QuestionCreate(text="2 + 2?", type=QuestionType.MCQ, options=["3", "4", " "], correct_answer_index=1),
            QuestionCreate(text="Explain recursion"),
        ],
    )
    return asyncio.run(svc.create(data, created_by="STF-001"))


def test_mcq_stores_correct_option_text(service):
    assignment = make_assignment(service)

    mcq, brief = assignment.questions
    assert mcq.options == ["3", "4"]
    assert mcq.correct_answer == "4"
    assert brief.correct_answer is None


@pytest.mark.parametrize(
    "question, message",
    [
        (QuestionCreate(text=" "), "no text"),
        (QuestionCreate(text="Pick", type=QuestionType.MCQ, options=["only"]), "two options"),
        (QuestionCreate(text="Pick", type=QuestionType.MCQ, options=["a", "b"], correct_answer_index=5), "correct"),
    ],
)
def test_invalid_questions_are_rejected(question, message):
    data = AssignmentCreate(class_id="CS-101", name="Quiz", due_date=date(2024, 5, 1), questions=[question])

    with pytest.raises(ValidationError, match=message):
        build_questions(data)


def test_assignment_needs_questions_and_existing_class(service):
    with pytest.raises(ValidationError, match="at least one question"):
        build_questions(AssignmentCreate(class_id="CS-101", name="Quiz", due_date=date(2024, 5, 1)))
    with pytest.raises(NotFoundError):
        make_assignment(service, class_id="NOPE")


def test_one_submission_per_student(service, submissions):
    assignment = make_assignment(service)

    asyncio.run(service.submit(assignment.id, "2024CS001", ["4", "A function calling itself"]))
    with pytest.raises(ValidationError, match="already been submitted"):
        asyncio.run(service.submit(assignment.id, "2024CS001", ["3", "Again"]))

    assert len(submissions.by_id) == 1


def test_submission_requires_enrollment_and_all_answers(service):
    assignment = make_assignment(service)

    with pytest.raises(ValidationError, match="not enrolled"):
        asyncio.run(service.submit(assignment.id, "2024CS999", ["4", "x"]))
    with pytest.raises(ValidationError, match="Expected 2 answers"):
        asyncio.run(service.submit(assignment.id, "2024CS001", ["4"]))


def test_submission_file_is_uploaded_and_signed(service, storage):
    assignment = make_assignment(service)

    submission = asyncio.run(
        service.submit(
            assignment.id,
            "2024CS001",
            ["4", "see file"],
            file_body=b"%PDF-1.4",
            filename="answers.pdf",
            content_type="application/pdf",
        )
    )

    assert submission.file_key.startswith(f"submissions/{assignment.id}/2024CS001/")
    assert submission.file_key.endswith(".pdf")
    assert storage.objects[submission.file_key] == b"%PDF-1.4"
    url = asyncio.run(service.file_url(submission.id))
    assert url == f"https://files.example.com/{submission.file_key}"


def test_student_assignments_split_on_due_date(service):
    past = make_assignment(service, due=date(2024, 4, 1))
    today = make_assignment(service, due=date(2024, 4, 10))
    asyncio.run(service.submit(past.id, "2024CS001", ["4", "done"]))

    result = asyncio.run(service.list_for_student("2024CS001", today=date(2024, 4, 10)))

    assert [a.id for a in result.upcoming] == [today.id]
    assert [(a.id, a.submitted) for a in result.past] == [(past.id, True)]


def test_upload_is_removed_when_the_insert_loses_a_race(service, submissions, storage):
    assignment = make_assignment(service)
    submissions.reject_next_insert = True

    with pytest.raises(ValidationError, match="duplicate"):
        asyncio.run(
            service.submit(
                assignment.id,
                "2024CS001",
                ["4", "see file"],
                file_body=b"%PDF-1.4",
                filename="answers.pdf",
            )
        )

    assert storage.objects == {}
    assert submissions.by_id == {}


@pytest.mark.parametrize(
    "filename, ext",
    [
        ("answers.PDF", "PDF"),
        ("archive.tar.gz", "gz"),
        ("report.pdf/../evil", "bin"),
        ("notes", "bin"),
        (None, "bin"),
        ("weird.toolongextension", "bin"),
    ],
)
def test_file_key_extension_is_sanitized(filename, ext):
    key = submission_file_key("a1", "2024CS001", filename)

    assert key.startswith("submissions/a1/2024CS001/")
    assert key.count("/") == 3
    assert key.rsplit(".", 1)[-1] == ext
