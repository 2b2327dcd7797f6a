"""Business logic for exams and results shared by the API server and tooling."""

from __future__ import annotations

from collections.abc import Iterable
import logging
from threading import Lock

from exam_app.core.errors import ForbiddenError, NotFoundError
from exam_app.core.models import Exam, ExamResult, ResultRow, SubmittedAnswer, UserIdentity
from exam_app.core.services.exam_catalog import ExamCatalog
from exam_app.core.services.result_store import ResultStore
from exam_app.core.services.scoring_engine import ScoringEngine
from exam_app.core.services.user_directory import UserDirectory

logger = logging.getLogger(__name__)


class ExamManager:
    """Facade for exam services: Catalog, ScoringEngine, ResultStore and UserDirectory."""

    def __init__(
        self,
        catalog: ExamCatalog | None = None,
        results: ResultStore | None = None,
        users: UserDirectory | None = None,
    ) -> None:
        self._lock = Lock()

        # Services
        self._catalog = catalog or ExamCatalog()
        self._scoring = ScoringEngine()
        self._results = results or ResultStore()
        self._users = users or UserDirectory()

    @property
    def users(self) -> UserDirectory:
        return self._users

    # --- Exam Catalog Delegation ---

    def list_exams_for(self, user: UserIdentity) -> list[Exam]:
        with self._lock:
            exams = self._catalog.list_exams(active_only=True)
        return [self._project(exam, user) for exam in exams]

    def get_exam_for(self, user: UserIdentity, exam_id: int) -> Exam:
        """Return the exam projection the caller is allowed to see."""
        with self._lock:
            exam = self._catalog.get_exam(exam_id)
        if not exam.is_active and not user.is_privileged:
            raise NotFoundError("Exam not found")
        return self._project(exam, user)

    def get_exam_for_export(self, user: UserIdentity, exam_id: int) -> Exam:
        self._require_admin(user, "export exams")
        with self._lock:
            return self._catalog.get_exam(exam_id)

    def create_exam(self, user: UserIdentity, exam: Exam) -> Exam:
        self._require_admin(user, "create exams")
        with self._lock:
            return self._catalog.add_exam(exam, created_by=user.user_id)

    def update_exam(self, user: UserIdentity, exam_id: int, exam: Exam) -> Exam:
        self._require_admin(user, "edit exams")
        with self._lock:
            return self._catalog.update_exam(exam_id, exam)

    def delete_exam(self, user: UserIdentity, exam_id: int) -> None:
        self._require_admin(user, "delete exams")
        with self._lock:
            self._catalog.delete_exam(exam_id)

    def load_exams(self, exams: Iterable[Exam], created_by: int | None = None) -> list[Exam]:
        """Seed the catalog without a caller, e.g. from an imported text file."""
        with self._lock:
            return [self._catalog.add_exam(exam, created_by=created_by) for exam in exams]

    # --- Submission & Grading ---

    def submit_exam(
        self,
        user: UserIdentity,
        exam_id: int,
        answers: Iterable[SubmittedAnswer],
    ) -> ExamResult:
        """Grade a submission against the full exam and store the result.

        Every call stores a new result; repeat attempts are kept side by side.
        """
        with self._lock:
            exam = self._catalog.get_exam(exam_id)
            if not exam.is_active:
                raise NotFoundError("Exam not found")
            graded = self._scoring.grade(exam, answers, student_id=user.user_id)
            saved = self._results.save(graded)
        logger.info(
            "Result %s: student %s scored %s/%s (%.2f%%) on exam %s",
            saved.id,
            user.user_id,
            saved.score,
            saved.total_marks,
            saved.percentage,
            exam_id,
        )
        return saved

    # --- Result Queries ---

    def get_results_for(self, user: UserIdentity) -> list[ResultRow]:
        with self._lock:
            results = self._results.find_by_student(user.user_id)
            return [self._to_row(result) for result in results]

    def get_all_results(self, user: UserIdentity) -> list[ResultRow]:
        self._require_admin(user, "view all results")
        with self._lock:
            return [self._to_row(result) for result in self._results.find_all()]

    # --- Helpers ---

    @staticmethod
    def _project(exam: Exam, user: UserIdentity) -> Exam:
        return exam if user.is_privileged else exam.redacted()

    @staticmethod
    def _require_admin(user: UserIdentity, action: str) -> None:
        if not user.is_privileged:
            logger.warning("User %s tried to %s without admin role", user.user_id, action)
            raise ForbiddenError(f"Admin access required to {action}")

    def _to_row(self, result: ExamResult) -> ResultRow:
        # Titles of deleted exams are no longer known; the stored snapshot still stands
        title, description = "Deleted exam", ""
        if self._catalog.has_exam(result.exam_id):
            exam = self._catalog.get_exam(result.exam_id)
            title, description = exam.title, exam.description
        return ResultRow(
            result=result,
            exam_title=title,
            exam_description=description,
            student_name=self._users.display_name_for(result.student_id),
        )
