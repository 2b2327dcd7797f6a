from __future__ import annotations

import json

import httpx
import pytest

from exam_app.client.api_client import ExamApiClient, SubmissionSummary, exam_from_dict
from exam_app.core.errors import (
    ForbiddenError,
    NotFoundError,
    TransientIOError,
    UnauthorizedError,
    ValidationFailure,
)

_EXAM_JSON = {
    "id": 3,
    "title": "Remote exam",
    "description": "",
    "duration": 15,
    "totalMarks": 4,
    "isActive": True,
    "createdBy": 1,
    "questions": [
        {"id": 1, "question": "Q1", "options": ["a", "b", "c", "d"], "marks": 1},
        {"id": 2, "question": "Q2", "options": ["a", "b", "c", "d"], "marks": 3},
    ],
}


def _client(handler) -> ExamApiClient:
    return ExamApiClient("http://testserver/api", "token-123", transport=httpx.MockTransport(handler))


def test_exam_from_dict_keeps_redaction():
    exam = exam_from_dict(_EXAM_JSON)

    assert exam.duration_minutes == 15
    assert exam.total_marks == 4
    assert [q.marks for q in exam.questions] == [1, 3]
    assert not exam.has_answer_key()


def test_fetch_exam_sends_bearer_token():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=_EXAM_JSON)

    exam = _client(handler).fetch_exam(3)

    assert exam.title == "Remote exam"
    assert seen[0].url.path == "/api/exams/3"
    assert seen[0].headers["Authorization"] == "Bearer token-123"


def test_submit_exam_posts_answers_and_reads_summary():
    bodies: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        bodies.append(json.loads(request.content))
        result = {"id": 1, "score": 1, "totalMarks": 4, "percentage": 25.0}
        return httpx.Response(201, json={"message": "Exam submitted successfully", "result": result})

    summary = _client(handler).submit_exam(3, {1: 0, 2: 0})

    assert summary == SubmissionSummary(score=1, total_marks=4, percentage=25.0)
    assert bodies[0] == {
        "examId": 3,
        "answers": [{"questionId": 1, "selectedAnswer": 0}, {"questionId": 2, "selectedAnswer": 0}],
    }


@pytest.mark.parametrize(
    ("status", "error_type"),
    [
        (401, UnauthorizedError),
        (403, ForbiddenError),
        (404, NotFoundError),
        (422, ValidationFailure),
        (500, TransientIOError),
        (503, TransientIOError),
    ],
)
def test_error_statuses_map_to_taxonomy(status, error_type):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status, json={"message": "nope"})

    with pytest.raises(error_type) as exc_info:
        _client(handler).fetch_exam(3)
    assert exc_info.value.message == "nope"


def test_non_json_error_body_uses_reason_phrase():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, text="<html>missing</html>")

    with pytest.raises(NotFoundError) as exc_info:
        _client(handler).fetch_exam(3)
    assert exc_info.value.message == "Not Found"


def test_connection_failure_is_transient():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(TransientIOError):
        _client(handler).submit_exam(3, {})


def test_list_exams_and_my_results():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/api/exams":
            return httpx.Response(200, json=[_EXAM_JSON])
        return httpx.Response(200, json=[{"id": 1, "score": 1, "totalMarks": 4, "percentage": 25.0}])

    client = _client(handler)

    assert [exam.id for exam in client.list_exams()] == [3]
    assert client.my_results()[0]["percentage"] == 25.0
    client.close()


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(200, text="<html>proxy page</html>"),
        httpx.Response(201, json={"message": "Exam submitted successfully"}),
        httpx.Response(201, json=["unexpected"]),
    ],
)
def test_unreadable_success_response_is_transient(response):
    def handler(request: httpx.Request) -> httpx.Response:
        return response

    with pytest.raises(TransientIOError):
        _client(handler).submit_exam(3, {1: 0})


def test_malformed_exam_payload_is_transient():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"id": 3, "questions": []})

    with pytest.raises(TransientIOError):
        _client(handler).fetch_exam(3)


def test_decoding_failure_is_transient():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.DecodingError("bad gzip stream", request=request)

    with pytest.raises(TransientIOError):
        _client(handler).fetch_exam(3)
