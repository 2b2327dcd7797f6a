"""State machine for one student's timed attempt at one exam.

The session is driven by discrete events (answer selection, navigation,
timer ticks, submit) processed one at a time. It owns its repeating timer and
stops it on every path out of IN_PROGRESS, so a stray tick can never cause a
second submission.
"""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum, auto
import logging
from typing import Protocol

from exam_app.client.api_client import SubmissionSummary
from exam_app.constants.exam_constants import LOW_TIME_WARNING_SECONDS
from exam_app.core.errors import ExamAppError, ValidationFailure
from exam_app.core.models import Exam

logger = logging.getLogger(__name__)


class SessionState(Enum):
    LOADING = auto()
    IN_PROGRESS = auto()
    SUBMITTING = auto()
    SUBMITTED = auto()
    FAILED = auto()


class SessionStateError(RuntimeError):
    """Raised when an action is not allowed in the session's current state."""


class ExamGateway(Protocol):
    def fetch_exam(self, exam_id: int) -> Exam: ...

    def submit_exam(self, exam_id: int, answers: dict[int, int]) -> SubmissionSummary: ...


class RepeatingTimer(Protocol):
    def start(self, callback: Callable[[], None]) -> None: ...

    def stop(self) -> None: ...

    def is_active(self) -> bool: ...


ConfirmSubmit = Callable[[int, int], bool]
SessionListener = Callable[["ExamSession"], None]


class ExamSession:
    """Holds the exam, the answer set, the countdown and the submission state."""

    def __init__(
        self,
        exam_id: int,
        gateway: ExamGateway,
        timer: RepeatingTimer,
        confirm_submit: ConfirmSubmit | None = None,
    ) -> None:
        self._exam_id = exam_id
        self._gateway = gateway
        self._timer = timer
        self._confirm_submit = confirm_submit

        self._state = SessionState.LOADING
        self._exam: Exam | None = None
        self._answers: dict[int, int] = {}
        self._remaining_seconds: int = 0
        self._current_index: int = 0
        self._error: str | None = None
        self._summary: SubmissionSummary | None = None
        self._auto_submitted: bool = False
        self._submit_attempted: bool = False
        self._closed: bool = False
        self._listeners: list[SessionListener] = []

    # --- Observation ---

    def add_listener(self, listener: SessionListener) -> None:
        self._listeners.append(listener)

    def set_confirm_submit(self, confirm_submit: ConfirmSubmit | None) -> None:
        self._confirm_submit = confirm_submit

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def exam(self) -> Exam | None:
        return self._exam

    @property
    def remaining_seconds(self) -> int:
        return self._remaining_seconds

    @property
    def current_index(self) -> int:
        return self._current_index

    @property
    def error_message(self) -> str | None:
        return self._error

    @property
    def summary(self) -> SubmissionSummary | None:
        return self._summary

    @property
    def was_auto_submitted(self) -> bool:
        return self._auto_submitted

    @property
    def question_count(self) -> int:
        return self._exam.question_count if self._exam else 0

    @property
    def answered_count(self) -> int:
        return len(self._answers)

    def get_answers(self) -> dict[int, int]:
        return dict(self._answers)

    def get_selected_option(self, question_id: int) -> int | None:
        return self._answers.get(question_id)

    def is_answered(self, question_id: int) -> bool:
        return question_id in self._answers

    def progress_percentage(self) -> float:
        """Share of questions answered; an exam without questions counts as complete."""
        if self.question_count == 0:
            return 100.0
        return 100 * self.answered_count / self.question_count

    def formatted_remaining_time(self) -> str:
        minutes, seconds = divmod(max(0, self._remaining_seconds), 60)
        return f"{minutes:02d}:{seconds:02d}"

    def is_low_on_time(self) -> bool:
        return 0 < self._remaining_seconds < LOW_TIME_WARNING_SECONDS

    def can_retry(self) -> bool:
        return self._state is SessionState.FAILED and self._submit_attempted

    def can_resume(self) -> bool:
        return self.can_retry() and self._remaining_seconds > 0

    # --- Lifecycle ---

    def start(self) -> None:
        """Fetch the exam and begin the countdown."""
        self._require_open()
        if self._state is not SessionState.LOADING:
            raise SessionStateError("Session has already been started.")
        try:
            exam = self._gateway.fetch_exam(self._exam_id)
        except ExamAppError as exc:
            logger.warning("Could not load exam %s: %s", self._exam_id, exc.message)
            self._error = exc.message
            self._state = SessionState.FAILED
            self._notify()
            return

        self._exam = exam
        self._remaining_seconds = exam.duration_minutes * 60
        self._current_index = 0
        self._error = None
        self._state = SessionState.IN_PROGRESS
        self._timer.start(self.tick)
        logger.info("Exam %s started with %d question(s)", exam.id, exam.question_count)
        self._notify()

    def close(self) -> None:
        """Tear the session down without submitting."""
        self._timer.stop()
        self._closed = True
        logger.info("Exam session for exam %s closed in state %s", self._exam_id, self._state.name)

    # --- Answering & Navigation ---

    def select_answer(self, question_id: int, option_index: int) -> None:
        self._require_in_progress()
        question = self._exam.get_question(question_id)
        if question is None:
            raise ValidationFailure(f"Question {question_id} is not part of this exam.")
        if not 0 <= option_index < len(question.options):
            raise ValidationFailure(f"Option index {option_index} is out of range.")
        self._answers[question_id] = option_index
        self._notify()

    def navigate(self, index: int) -> int:
        """Move to a question, clamped to the exam's bounds."""
        self._require_in_progress()
        upper = max(0, self.question_count - 1)
        self._current_index = min(max(index, 0), upper)
        self._notify()
        return self._current_index

    def next_question(self) -> int:
        return self.navigate(self._current_index + 1)

    def previous_question(self) -> int:
        return self.navigate(self._current_index - 1)

    # --- Timer ---

    def tick(self) -> None:
        if self._closed or self._state is not SessionState.IN_PROGRESS:
            self._timer.stop()
            return
        self._remaining_seconds = max(0, self._remaining_seconds - 1)
        if self._remaining_seconds == 0:
            logger.info("Time is up for exam %s; submitting automatically", self._exam_id)
            self.submit(auto=True)
            return
        self._notify()

    # --- Submission ---

    def submit(self, auto: bool = False) -> bool:
        """Submit the collected answers; returns False when the student declines."""
        self._require_in_progress()
        if not auto and self._confirm_submit is not None:
            if not self._confirm_submit(self.answered_count, self.question_count):
                return False
        self._auto_submitted = auto
        self._timer.stop()
        self._send()
        return True

    def retry(self) -> None:
        """Re-send the preserved answers after a failed submission."""
        self._require_open()
        if not self.can_retry():
            raise SessionStateError("There is no failed submission to retry.")
        self._send()

    def resume(self) -> None:
        """Return to answering after a failed submission while time remains."""
        self._require_open()
        if not self.can_resume():
            raise SessionStateError("The exam cannot be resumed.")
        self._error = None
        self._state = SessionState.IN_PROGRESS
        self._timer.start(self.tick)
        self._notify()

    def _send(self) -> None:
        self._state = SessionState.SUBMITTING
        self._submit_attempted = True
        self._error = None
        self._notify()
        try:
            summary = self._gateway.submit_exam(self._exam_id, dict(self._answers))
        except ExamAppError as exc:
            logger.warning("Submission for exam %s failed: %s", self._exam_id, exc.message)
            self._error = exc.message
            self._state = SessionState.FAILED
            self._notify()
            return
        self._summary = summary
        self._state = SessionState.SUBMITTED
        logger.info(
            "Exam %s submitted: %s/%s (%.2f%%)",
            self._exam_id,
            summary.score,
            summary.total_marks,
            summary.percentage,
        )
        self._notify()

    def _require_open(self) -> None:
        if self._closed:
            raise SessionStateError("Session has been closed.")

    def _require_in_progress(self) -> None:
        self._require_open()
        if self._state is not SessionState.IN_PROGRESS or self._exam is None:
            raise SessionStateError(f"Action not allowed while the session is {self._state.name.lower()}.")
