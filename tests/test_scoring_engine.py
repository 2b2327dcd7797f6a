from __future__ import annotations

import random

import pytest

from exam_app.core.errors import ValidationFailure
from exam_app.core.models import SubmittedAnswer
from exam_app.core.services.exam_catalog import ExamCatalog
from exam_app.core.services.scoring_engine import ScoringEngine, compute_percentage

from exam_factories import make_exam


@pytest.fixture
def graded_exam():
    return ExamCatalog().add_exam(make_exam(marks=(1, 3), correct=(0, 1)))


def test_partial_submission_example(graded_exam):
    q1, q2 = graded_exam.questions
    result = ScoringEngine().grade(
        graded_exam,
        [SubmittedAnswer(q1.id, 0), SubmittedAnswer(q2.id, 0)],
        student_id=5,
    )

    assert result.score == 1
    assert result.total_marks == 4
    assert result.percentage == 25.0
    assert result.student_id == 5
    assert result.exam_id == graded_exam.id


def test_empty_submission_scores_zero(graded_exam):
    result = ScoringEngine().grade(graded_exam, [], student_id=1)
    assert result.score == 0
    assert result.percentage == 0.0


def test_unknown_question_ids_are_ignored(graded_exam):
    q1, _ = graded_exam.questions
    result = ScoringEngine().grade(
        graded_exam,
        [SubmittedAnswer(q1.id, 0), SubmittedAnswer(999, 1)],
        student_id=1,
    )
    assert result.score == 1


def test_grading_is_order_independent_and_repeatable(graded_exam):
    q1, q2 = graded_exam.questions
    answers = [SubmittedAnswer(q1.id, 0), SubmittedAnswer(q2.id, 1), SubmittedAnswer(77, 2)]
    engine = ScoringEngine()
    expected = engine.grade(graded_exam, answers, student_id=1).score

    for _ in range(5):
        shuffled = list(answers)
        random.shuffle(shuffled)
        assert engine.grade(graded_exam, shuffled, student_id=1).score == expected
    assert expected == 4


def test_grading_does_not_mutate_inputs(graded_exam):
    answers = {graded_exam.questions[0].id: 0}
    before = [(q.id, q.correct_option_index, q.marks) for q in graded_exam.questions]
    ScoringEngine().grade(graded_exam, answers, student_id=1)
    assert answers == {graded_exam.questions[0].id: 0}
    assert [(q.id, q.correct_option_index, q.marks) for q in graded_exam.questions] == before


def test_score_stays_within_bounds(graded_exam):
    for first in range(4):
        for second in range(4):
            answers = {graded_exam.questions[0].id: first, graded_exam.questions[1].id: second}
            result = ScoringEngine().grade(graded_exam, answers, student_id=1)
            assert 0 <= result.score <= result.total_marks
            assert result.percentage == compute_percentage(result.score, result.total_marks)


def test_zero_total_marks_falls_back_to_zero_percent():
    assert compute_percentage(0, 0) == 0.0


def test_redacted_exam_cannot_be_graded(graded_exam):
    with pytest.raises(ValidationFailure):
        ScoringEngine().grade(graded_exam.redacted(), [], student_id=1)
