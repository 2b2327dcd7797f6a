"""HTTP client the student session uses to reach the exam API."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
import logging
from typing import Any, TypeVar

import httpx

from exam_app.constants.network_constants import REQUEST_TIMEOUT_SECONDS
from exam_app.core.errors import TransientIOError, error_for_status
from exam_app.core.models import Exam, ExamQuestion

logger = logging.getLogger(__name__)

T = TypeVar("T")

_UNREADABLE_RESPONSE = "The exam server sent a response that could not be read. Try again."


@dataclass(slots=True, frozen=True)
class SubmissionSummary:
    """Score summary returned by the server for one submission."""

    score: int
    total_marks: int
    percentage: float


def exam_from_dict(payload: dict[str, Any]) -> Exam:
    questions = [
        ExamQuestion(
            id=int(item["id"]),
            prompt=item["question"],
            options=list(item["options"]),
            correct_option_index=item.get("correctAnswer"),
            marks=int(item.get("marks", 1)),
        )
        for item in payload.get("questions", [])
    ]
    return Exam(
        id=int(payload["id"]),
        title=payload["title"],
        description=payload.get("description", ""),
        duration_minutes=int(payload["duration"]),
        questions=questions,
        total_marks=int(payload.get("totalMarks", 0)),
        is_active=bool(payload.get("isActive", True)),
        created_by=payload.get("createdBy"),
    )


def _summary_from_dict(payload: dict[str, Any]) -> SubmissionSummary:
    summary = payload["result"]
    return SubmissionSummary(
        score=int(summary["score"]),
        total_marks=int(summary["totalMarks"]),
        percentage=float(summary["percentage"]),
    )


class ExamApiClient:
    """Thin wrapper over httpx that speaks the error taxonomy."""

    def __init__(
        self,
        base_url: str,
        token: str,
        timeout: float = REQUEST_TIMEOUT_SECONDS,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._client = httpx.Client(
            base_url=base_url.rstrip("/"),
            headers={"Authorization": f"Bearer {token}"},
            timeout=timeout,
            transport=transport,
        )

    def fetch_exam(self, exam_id: int) -> Exam:
        payload = self._request("GET", f"/exams/{exam_id}")
        return self._parse(exam_from_dict, payload)

    def list_exams(self) -> list[Exam]:
        payload = self._request("GET", "/exams")
        return self._parse(lambda items: [exam_from_dict(item) for item in items], payload)

    def submit_exam(self, exam_id: int, answers: dict[int, int]) -> SubmissionSummary:
        body = {
            "examId": exam_id,
            "answers": [
                {"questionId": question_id, "selectedAnswer": index}
                for question_id, index in answers.items()
            ],
        }
        payload = self._request("POST", "/results/submit", json=body)
        return self._parse(_summary_from_dict, payload)

    def my_results(self) -> list[dict[str, Any]]:
        return self._request("GET", "/results/my-results")

    def close(self) -> None:
        self._client.close()

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        try:
            response = self._client.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            raise TransientIOError("Unable to reach the exam server. Check your connection and try again.") from exc

        if response.is_success:
            try:
                return response.json()
            except ValueError as exc:
                logger.warning("%s %s returned a body that is not JSON", method, path)
                raise TransientIOError(_UNREADABLE_RESPONSE) from exc

        try:
            body = response.json()
            message = (body.get("message") if isinstance(body, dict) else None) or response.reason_phrase
        except ValueError:
            message = response.reason_phrase
        logger.info("%s %s returned %s: %s", method, path, response.status_code, message)
        if response.status_code >= 500:
            raise TransientIOError(message or "Server error")
        raise error_for_status(response.status_code, message)

    @staticmethod
    def _parse(parser: Callable[[Any], T], payload: Any) -> T:
        try:
            return parser(payload)
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            logger.warning("Unexpected response payload: %r", exc)
            raise TransientIOError(_UNREADABLE_RESPONSE) from exc
