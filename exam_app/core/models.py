"""Domain models for the exam application."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class UserRole(str, Enum):
    """Roles handed to us by the authentication collaborator."""

    STUDENT = "student"
    ADMIN = "admin"


@dataclass(slots=True, frozen=True)
class UserIdentity:
    """A verified caller."""

    user_id: int
    display_name: str
    role: UserRole = UserRole.STUDENT

    @property
    def is_privileged(self) -> bool:
        return self.role is UserRole.ADMIN


@dataclass(slots=True)
class ExamQuestion:
    """Multiple-choice question with exactly four options."""

    id: int
    prompt: str
    options: list[str]
    correct_option_index: int | None = None  # None in the redacted projection
    marks: int = 1


@dataclass(slots=True)
class Exam:
    """An authored set of questions with a time limit and mark weighting."""

    id: int
    title: str
    duration_minutes: int
    questions: list[ExamQuestion]
    description: str = ""
    total_marks: int = 0
    is_active: bool = True
    created_by: int | None = None
    created_at: datetime = field(default_factory=utc_now)

    @property
    def question_count(self) -> int:
        return len(self.questions)

    def has_answer_key(self) -> bool:
        return all(q.correct_option_index is not None for q in self.questions)

    def get_question(self, question_id: int) -> ExamQuestion | None:
        return next((q for q in self.questions if q.id == question_id), None)

    def redacted(self) -> "Exam":
        """Return the student projection with every correct answer removed."""
        return replace(
            self,
            questions=[
                ExamQuestion(
                    id=q.id,
                    prompt=q.prompt,
                    options=list(q.options),
                    correct_option_index=None,
                    marks=q.marks,
                )
                for q in self.questions
            ],
        )


def compute_total_marks(questions: list[ExamQuestion]) -> int:
    return sum(question.marks for question in questions)


@dataclass(slots=True, frozen=True)
class SubmittedAnswer:
    """One selected option for one question."""

    question_id: int
    selected_option_index: int


@dataclass(slots=True)
class ExamResult:
    """The persisted outcome of one graded submission."""

    student_id: int
    exam_id: int
    answers: dict[int, int]
    score: int
    total_marks: int
    percentage: float
    submitted_at: datetime = field(default_factory=utc_now)
    id: int | None = None


@dataclass(slots=True, frozen=True)
class ResultRow:
    """Result snapshot with exam and student names resolved for display."""

    result: ExamResult
    exam_title: str
    student_name: str
    exam_description: str = ""
