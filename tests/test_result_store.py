from __future__ import annotations

from datetime import timedelta

import pytest

from exam_app.core.errors import NotFoundError
from exam_app.core.models import ExamResult, utc_now
from exam_app.core.services.result_store import ResultStore


def _result(student_id: int, minutes_ago: int) -> ExamResult:
    return ExamResult(
        student_id=student_id,
        exam_id=1,
        answers={1: 0},
        score=1,
        total_marks=2,
        percentage=50.0,
        submitted_at=utc_now() - timedelta(minutes=minutes_ago),
    )


def test_save_assigns_identifiers():
    store = ResultStore()
    first = store.save(_result(1, 5))
    second = store.save(_result(1, 3))
    assert (first.id, second.id) == (1, 2)
    assert store.get(2).submitted_at == second.submitted_at


def test_find_by_student_is_newest_first():
    store = ResultStore()
    store.save(_result(1, 10))
    store.save(_result(2, 5))
    store.save(_result(1, 1))

    results = store.find_by_student(1)
    assert [r.id for r in results] == [3, 1]
    assert [r.id for r in store.find_all()] == [3, 2, 1]


def test_saved_copy_is_independent_of_input():
    store = ResultStore()
    original = _result(1, 0)
    store.save(original)
    original.answers[2] = 3
    assert store.get(1).answers == {1: 0}


def test_missing_result_raises():
    with pytest.raises(NotFoundError):
        ResultStore().get(1)


def test_reads_cannot_rewrite_stored_results():
    store = ResultStore()
    store.save(_result(1, 0))

    fetched = store.get(1)
    fetched.percentage = 100.0
    fetched.answers[1] = 3
    store.find_by_student(1)[0].score = 99
    store.find_all()[0].answers.clear()

    stored = store.get(1)
    assert (stored.score, stored.percentage, stored.answers) == (1, 50.0, {1: 0})
