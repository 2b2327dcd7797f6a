"""Utilities for exporting exams to the plain-text format used for imports."""

from __future__ import annotations

from exam_app.constants.exam_constants import OPTION_LETTERS
from exam_app.core.models import Exam, ExamQuestion


def serialize_exams(exams: list[Exam]) -> str:
    """Render exams in the text import format."""
    if not exams:
        raise ValueError("Cannot export without any exams.")
    if not all(exam.has_answer_key() for exam in exams):
        raise ValueError("Cannot export an exam whose answer key was removed.")
    return "\n\n===\n\n".join(_serialize_exam(exam) for exam in exams) + "\n"


def _serialize_exam(exam: Exam) -> str:
    header = [f"TITLE: {exam.title}", f"DURATION: {exam.duration_minutes}"]
    if exam.description:
        description_lines = exam.description.splitlines()
        header.append(f"DESCRIPTION: {description_lines[0]}")
        header.extend(line for line in description_lines[1:] if line.strip())
    if not exam.is_active:
        header.append("ACTIVE: no")

    blocks = ["\n".join(header)]
    blocks.extend(_serialize_question(question) for question in exam.questions)
    return "\n\n---\n\n".join(blocks)


def _serialize_question(question: ExamQuestion) -> str:
    lines: list[str] = []

    prompt_lines = question.prompt.splitlines() or [question.prompt]
    lines.append(f"Q: {prompt_lines[0]}")
    lines.extend(prompt_lines[1:])

    for idx, letter in enumerate(OPTION_LETTERS):
        option_text = question.options[idx] if idx < len(question.options) else ""
        option_lines = option_text.splitlines() or [option_text]
        lines.append(f"{letter}: {option_lines[0]}")
        lines.extend(option_lines[1:])

    lines.append(f"CORRECT: {OPTION_LETTERS[question.correct_option_index]}")
    if question.marks != 1:
        lines.append(f"MARKS: {question.marks}")

    return "\n".join(lines)
