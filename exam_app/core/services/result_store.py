"""Service for keeping graded exam results."""

from __future__ import annotations

from dataclasses import replace
from threading import Lock

from exam_app.core.errors import NotFoundError
from exam_app.core.models import ExamResult


def _detached(result: ExamResult) -> ExamResult:
    return replace(result, answers=dict(result.answers))


class ResultStore:
    """Append-only, in-memory result storage.

    Stored records are never handed out; every read returns copies.
    """

    def __init__(self) -> None:
        self._results: list[ExamResult] = []
        self._result_counter: int = 0
        self._lock = Lock()

    def save(self, result: ExamResult) -> ExamResult:
        """Store a copy of the result and return it with its identifier."""
        with self._lock:
            self._result_counter += 1
            stored = replace(result, id=self._result_counter, answers=dict(result.answers))
            self._results.append(stored)
            return _detached(stored)

    def get(self, result_id: int) -> ExamResult:
        with self._lock:
            found = next((r for r in self._results if r.id == result_id), None)
            if found is None:
                raise NotFoundError("Result not found")
            return _detached(found)

    def find_by_student(self, student_id: int) -> list[ExamResult]:
        """Return a student's results, newest submission first."""
        with self._lock:
            matching = [_detached(r) for r in self._results if r.student_id == student_id]
        return self._newest_first(matching)

    def find_all(self) -> list[ExamResult]:
        with self._lock:
            snapshot = [_detached(r) for r in self._results]
        return self._newest_first(snapshot)

    @staticmethod
    def _newest_first(results: list[ExamResult]) -> list[ExamResult]:
        # Ids break ties between submissions stamped within the same instant
        return sorted(results, key=lambda r: (r.submitted_at, r.id or 0), reverse=True)
