"""Utilities for importing exams from a human-friendly text file.

File format. An exam starts with a header block, followed by question blocks
separated by blank lines or '---'. Several exams may share one file when
separated by a line containing only '==='.

    TITLE: Exam title
    DURATION: minutes
    DESCRIPTION: free text (optional, continues on following lines)
    ACTIVE: yes|no   (optional, defaults to yes)

    Q: Question text. Additional lines until the next marker are part of it.
    A: First option text
    B: Second option text
    C: Third option text
    D: Fourth option text
    CORRECT: A|B|C|D
    MARKS: positive integer   (optional, defaults to 1)

Example:

    TITLE: Arithmetic
    DURATION: 10

    Q: What is 2 + 2?
    A: 3
    B: 4
    C: 5
    D: 22
    CORRECT: B
    MARKS: 2
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from exam_app.constants.exam_constants import DEFAULT_QUESTION_MARKS, OPTION_LETTERS
from exam_app.core.models import Exam, ExamQuestion

_HEADER_KEYS = ("TITLE:", "DURATION:", "DESCRIPTION:", "ACTIVE:")
_EXAM_SEPARATOR = "==="
_BLOCK_SEPARATOR = "---"


class ExamImportError(Exception):
    """Raised when an exam definition cannot be parsed."""


@dataclass(slots=True)
class ImportedExams:
    """Container for the exams read from one file."""

    source_path: Path
    exams: list[Exam]


def load_exams_from_file(file_path: Path) -> ImportedExams:
    text = file_path.read_text(encoding="utf-8")
    exams = parse_exams_text(text)
    if not exams:
        raise ExamImportError("Exam file did not contain any exams.")
    return ImportedExams(source_path=file_path, exams=exams)


def parse_exams_text(text: str) -> list[Exam]:
    sections: list[list[str]] = [[]]
    for raw_line in text.splitlines():
        if raw_line.strip() == _EXAM_SEPARATOR:
            sections.append([])
        else:
            sections[-1].append(raw_line)
    return [_parse_exam(blocks) for blocks in (_split_blocks(lines) for lines in sections) if blocks]


def _split_blocks(lines: list[str]) -> list[str]:
    blocks: list[str] = []
    current_block: list[str] = []
    for raw_line in lines:
        stripped = raw_line.strip()
        if stripped == _BLOCK_SEPARATOR:
            if current_block:
                blocks.append("\n".join(current_block).strip())
                current_block = []
            continue
        if stripped:
            current_block.append(raw_line)
        elif current_block:
            blocks.append("\n".join(current_block).strip())
            current_block = []
    if current_block:
        blocks.append("\n".join(current_block).strip())
    return [block for block in blocks if block]


def _parse_exam(blocks: list[str]) -> Exam:
    header, *question_blocks = blocks
    if not header.upper().startswith(_HEADER_KEYS):
        raise ExamImportError("Each exam must start with a TITLE/DURATION header block.")

    title, duration, description, active = _parse_header(header)
    questions = [_parse_question(block) for block in question_blocks]
    return Exam(
        id=0,  # assigned by the catalog
        title=title,
        duration_minutes=duration,
        questions=questions,
        description=description,
        is_active=active,
    )


def _parse_header(block: str) -> tuple[str, int, str, bool]:
    title: str | None = None
    duration: int | None = None
    description_lines: list[str] = []
    active = True
    in_description = False

    for raw_line in block.splitlines():
        line = raw_line.strip()
        upper = line.upper()
        if upper.startswith("TITLE:"):
            title = line.split(":", 1)[1].strip()
            in_description = False
        elif upper.startswith("DURATION:"):
            duration = _parse_positive_int(line.split(":", 1)[1].strip(), "DURATION")
            in_description = False
        elif upper.startswith("DESCRIPTION:"):
            description_lines = [line.split(":", 1)[1].strip()]
            in_description = True
        elif upper.startswith("ACTIVE:"):
            value = line.split(":", 1)[1].strip().lower()
            if value not in ("yes", "no", "true", "false"):
                raise ExamImportError("ACTIVE must be yes or no.")
            active = value in ("yes", "true")
            in_description = False
        elif in_description:
            description_lines.append(line)
        else:
            raise ExamImportError(f"Encountered text outside of a known header field: '{line}'.")

    if not title:
        raise ExamImportError("Exam title missing (TITLE: ...)")
    if duration is None:
        raise ExamImportError("Exam duration missing (DURATION: ...)")
    return title, duration, "\n".join(description_lines).strip(), active


def _parse_question(block: str) -> ExamQuestion:
    question_lines: list[str] = []
    options: dict[str, str] = {}
    correct_letter: str | None = None
    marks = DEFAULT_QUESTION_MARKS
    current_section: str | None = None

    for raw_line in block.splitlines():
        line = raw_line.strip()
        if not line:
            continue

        upper = line.upper()
        if upper.startswith("Q:"):
            question_lines = [line[2:].strip()]
            current_section = "Q"
            continue

        if upper.startswith("CORRECT:"):
            correct_letter = line.split(":", 1)[1].strip().upper()
            current_section = None
            continue

        if upper.startswith("MARKS:"):
            marks = _parse_positive_int(line.split(":", 1)[1].strip(), "MARKS")
            current_section = None
            continue

        if len(line) > 2 and line[0].upper() in OPTION_LETTERS and line[1] == ":":
            letter = line[0].upper()
            options[letter] = line[2:].strip()
            current_section = letter
            continue

        if current_section == "Q":
            question_lines.append(line)
        elif current_section in OPTION_LETTERS:
            options[current_section] = options[current_section] + f"\n{line}"
        else:
            raise ExamImportError(f"Encountered text outside of a known section: '{line}'.")

    if not question_lines:
        raise ExamImportError("Question text missing (Q: ...)")
    if len(options) != len(OPTION_LETTERS):
        raise ExamImportError("Each question must define exactly four options (A-D).")

    option_list = [options[letter].strip() for letter in OPTION_LETTERS]
    if any(not opt for opt in option_list):
        raise ExamImportError("Option text cannot be empty.")

    if correct_letter is None:
        raise ExamImportError("CORRECT is required for every exam question.")
    if correct_letter not in OPTION_LETTERS:
        raise ExamImportError("CORRECT must be one of A, B, C, or D.")

    prompt = "\n".join(question_lines).strip()
    if not prompt:
        raise ExamImportError("Question text cannot be empty.")

    return ExamQuestion(
        id=0,  # assigned by the catalog
        prompt=prompt,
        options=option_list,
        correct_option_index=OPTION_LETTERS.index(correct_letter),
        marks=marks,
    )


def _parse_positive_int(raw_value: str, field_name: str) -> int:
    if not raw_value:
        raise ExamImportError(f"{field_name} must include an integer value.")
    try:
        parsed_value = int(raw_value)
    except ValueError as exc:
        raise ExamImportError(f"{field_name} must be an integer.") from exc
    if parsed_value <= 0:
        raise ExamImportError(f"{field_name} must be a positive integer.")
    return parsed_value
