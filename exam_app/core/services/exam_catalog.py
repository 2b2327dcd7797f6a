"""Service for managing the collection of authored exams."""

from __future__ import annotations

from dataclasses import replace
import logging

from exam_app.constants.exam_constants import OPTION_COUNT
from exam_app.core.errors import NotFoundError, ValidationFailure
from exam_app.core.models import Exam, ExamQuestion, compute_total_marks, utc_now

logger = logging.getLogger(__name__)


class ExamCatalog:
    """Stores exam definitions and hands out validated copies."""

    def __init__(self) -> None:
        self._exams: dict[int, Exam] = {}
        self._exam_counter: int = 0
        self._question_counter: int = 0

    def add_exam(self, exam: Exam, created_by: int | None = None) -> Exam:
        """Validate a draft, assign identifiers and store it."""
        prepared = self._prepare_exam(exam)
        prepared.id = self._next_exam_id()
        prepared.created_by = created_by if created_by is not None else exam.created_by
        prepared.created_at = utc_now()
        self._exams[prepared.id] = prepared
        logger.info("Exam %s '%s' added with %d question(s)", prepared.id, prepared.title, prepared.question_count)
        return prepared

    def get_exam(self, exam_id: int) -> Exam:
        exam = self._exams.get(exam_id)
        if exam is None:
            raise NotFoundError("Exam not found")
        return exam

    def has_exam(self, exam_id: int) -> bool:
        return exam_id in self._exams

    def list_exams(self, active_only: bool = False) -> list[Exam]:
        """Return exams newest first."""
        exams = sorted(self._exams.values(), key=lambda e: (e.created_at, e.id), reverse=True)
        if active_only:
            return [exam for exam in exams if exam.is_active]
        return exams

    def get_exam_count(self) -> int:
        return len(self._exams)

    def update_exam(self, exam_id: int, exam: Exam) -> Exam:
        current = self.get_exam(exam_id)
        prepared = self._prepare_exam(exam, reusable_ids={q.id for q in current.questions})
        # Identity and provenance survive an edit
        prepared.id = current.id
        prepared.created_by = current.created_by
        prepared.created_at = current.created_at
        self._exams[exam_id] = prepared
        logger.info("Exam %s updated", exam_id)
        return prepared

    def delete_exam(self, exam_id: int) -> None:
        if self._exams.pop(exam_id, None) is None:
            raise NotFoundError("Exam not found")
        logger.info("Exam %s deleted", exam_id)

    def _prepare_exam(self, exam: Exam, reusable_ids: set[int] | None = None) -> Exam:
        """Validate and normalize an exam before storage.

        Question ids found in ``reusable_ids`` are kept so an edited exam still
        matches answers recorded against its earlier version; every other
        question gets a fresh id.
        """
        title = exam.title.strip()
        if not title:
            raise ValidationFailure("Exam title must not be empty.")
        if not isinstance(exam.duration_minutes, int) or exam.duration_minutes <= 0:
            raise ValidationFailure("Exam duration must be a positive integer number of minutes.")

        available_ids = set(reusable_ids or ())
        questions: list[ExamQuestion] = []
        for question in exam.questions:
            if question.id in available_ids:
                available_ids.discard(question.id)
                question_id = question.id
            else:
                question_id = self._next_question_id()
            questions.append(self._prepare_question(question, question_id))
        return replace(
            exam,
            title=title,
            description=exam.description.strip(),
            questions=questions,
            total_marks=compute_total_marks(questions),
        )

    def _prepare_question(self, question: ExamQuestion, question_id: int) -> ExamQuestion:
        options = self._validate_options(question.options)
        prompt = question.prompt.strip()
        if not prompt:
            raise ValidationFailure("Question text must not be empty.")
        if question.correct_option_index is None:
            raise ValidationFailure("Each question needs a correct answer.")
        if not 0 <= question.correct_option_index < len(options):
            raise ValidationFailure(f"Correct option index must be between 0 and {len(options) - 1}.")
        if not isinstance(question.marks, int) or question.marks <= 0:
            raise ValidationFailure("Question marks must be a positive integer.")

        return ExamQuestion(
            id=question_id,
            prompt=prompt,
            options=options,
            correct_option_index=question.correct_option_index,
            marks=question.marks,
        )

    def _next_exam_id(self) -> int:
        self._exam_counter += 1
        return self._exam_counter

    def _next_question_id(self) -> int:
        self._question_counter += 1
        return self._question_counter

    @staticmethod
    def _validate_options(options: list[str]) -> list[str]:
        if len(options) != OPTION_COUNT:
            raise ValidationFailure(f"Each question must have exactly {OPTION_COUNT} options.")
        cleaned = [option.strip() for option in options]
        if any(not option for option in cleaned):
            raise ValidationFailure("Option text cannot be empty.")
        return cleaned
