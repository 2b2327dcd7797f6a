from __future__ import annotations

from pathlib import Path

import pytest

from exam_app.core.exam_exporter import serialize_exams
from exam_app.core.exam_importer import ExamImportError, load_exams_from_file, parse_exams_text
from exam_app.core.services.exam_catalog import ExamCatalog

_DOCUMENT = """
TITLE: Arithmetic
DURATION: 10
DESCRIPTION: Warm-up
Two questions.

Q: What is 2 + 2?
A: 3
B: 4
C: 5
D: 22
CORRECT: B
MARKS: 2

---

Q: What is 3 * 3?
A: 9
B: 6
C: 33
D: 0
CORRECT: A

===

TITLE: Hidden
DURATION: 5
ACTIVE: no
"""


def test_parse_multiple_exams():
    arithmetic, hidden = parse_exams_text(_DOCUMENT)

    assert arithmetic.title == "Arithmetic"
    assert arithmetic.duration_minutes == 10
    assert arithmetic.description == "Warm-up\nTwo questions."
    assert [q.correct_option_index for q in arithmetic.questions] == [1, 0]
    assert [q.marks for q in arithmetic.questions] == [2, 1]
    assert hidden.is_active is False
    assert hidden.questions == []


def test_missing_correct_answer_is_an_error():
    with pytest.raises(ExamImportError):
        parse_exams_text("TITLE: X\nDURATION: 5\n\nQ: Q?\nA: 1\nB: 2\nC: 3\nD: 4\n")


def test_missing_header_is_an_error():
    with pytest.raises(ExamImportError):
        parse_exams_text("Q: Q?\nA: 1\nB: 2\nC: 3\nD: 4\nCORRECT: A\n")


def test_bad_duration_is_an_error():
    with pytest.raises(ExamImportError):
        parse_exams_text("TITLE: X\nDURATION: soon\n")


def test_export_then_import_preserves_exam(tmp_path: Path):
    catalog = ExamCatalog()
    stored = [catalog.add_exam(exam) for exam in parse_exams_text(_DOCUMENT)]

    target = tmp_path / "exams.txt"
    target.write_text(serialize_exams(stored), encoding="utf-8")
    reloaded = load_exams_from_file(target).exams

    assert serialize_exams(reloaded) == serialize_exams(stored)


def test_sample_seed_file_loads():
    seed = Path(__file__).resolve().parents[1] / "exam_app" / "data" / "sample_exam.txt"
    exams = load_exams_from_file(seed).exams
    catalog = ExamCatalog()
    assert [catalog.add_exam(exam).total_marks for exam in exams] == [5, 4]


def test_export_requires_full_exams():
    exam = ExamCatalog().add_exam(parse_exams_text(_DOCUMENT)[0])

    with pytest.raises(ValueError):
        serialize_exams([])
    with pytest.raises(ValueError):
        serialize_exams([exam.redacted()])
