"""Builders for exam drafts used across the tests."""

from __future__ import annotations

from exam_app.core.models import Exam, ExamQuestion


def make_exam(marks: tuple[int, ...] = (1, 3), correct: tuple[int, ...] = (0, 1), duration: int = 10) -> Exam:
    questions = [
        ExamQuestion(
            id=0,
            prompt=f"Question {idx + 1}",
            options=["A", "B", "C", "D"],
            correct_option_index=correct_index,
            marks=mark,
        )
        for idx, (mark, correct_index) in enumerate(zip(marks, correct))
    ]
    return Exam(id=0, title="Sample exam", duration_minutes=duration, questions=questions)
