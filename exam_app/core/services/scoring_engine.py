"""Service that grades a finished answer set against an exam's answer key."""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from exam_app.constants.exam_constants import PERCENTAGE_DECIMALS
from exam_app.core.errors import ValidationFailure
from exam_app.core.models import Exam, ExamResult, SubmittedAnswer, utc_now


def normalize_answers(answers: Iterable[SubmittedAnswer] | Mapping[int, int]) -> dict[int, int]:
    """Collapse submitted answers into a question-id -> option-index mapping.

    A later entry for the same question replaces an earlier one.
    """
    if isinstance(answers, Mapping):
        return {int(question_id): int(index) for question_id, index in answers.items()}
    return {answer.question_id: answer.selected_option_index for answer in answers}


def compute_percentage(score: int, total_marks: int) -> float:
    """Return ``100 * score / total_marks``; an exam worth nothing scores 0.0."""
    if total_marks <= 0:
        return 0.0
    return round(100 * score / total_marks, PERCENTAGE_DECIMALS)


class ScoringEngine:
    """Pure grading: no partial credit, no negative marking."""

    def grade(
        self,
        exam: Exam,
        answers: Iterable[SubmittedAnswer] | Mapping[int, int],
        student_id: int,
    ) -> ExamResult:
        if not exam.has_answer_key():
            raise ValidationFailure("Cannot grade against an exam without its answer key.")

        selected = normalize_answers(answers)
        score = self.compute_score(exam, selected)
        return ExamResult(
            student_id=student_id,
            exam_id=exam.id,
            answers=dict(selected),
            score=score,
            total_marks=exam.total_marks,
            percentage=compute_percentage(score, exam.total_marks),
            submitted_at=utc_now(),
        )

    @staticmethod
    def compute_score(exam: Exam, selected: Mapping[int, int]) -> int:
        # Ids that are not part of the exam are never looked up
        score = 0
        for question in exam.questions:
            chosen = selected.get(question.id)
            if chosen is not None and chosen == question.correct_option_index:
                score += question.marks
        return score
