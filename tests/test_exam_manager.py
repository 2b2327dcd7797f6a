from __future__ import annotations

import pytest

from exam_app.core.errors import ForbiddenError, NotFoundError
from exam_app.core.models import SubmittedAnswer

from exam_factories import make_exam


def test_students_receive_redacted_exam(manager, student, admin, exam):
    student_view = manager.get_exam_for(student, exam.id)
    admin_view = manager.get_exam_for(admin, exam.id)

    assert all(q.correct_option_index is None for q in student_view.questions)
    assert [q.correct_option_index for q in admin_view.questions] == [0, 1]


def test_only_admins_author_exams(manager, student, exam):
    with pytest.raises(ForbiddenError):
        manager.create_exam(student, make_exam())
    with pytest.raises(ForbiddenError):
        manager.update_exam(student, exam.id, make_exam())
    with pytest.raises(ForbiddenError):
        manager.delete_exam(student, exam.id)


def test_submit_grades_against_full_exam_and_stores_result(manager, student, exam):
    q1, q2 = exam.questions
    result = manager.submit_exam(student, exam.id, [SubmittedAnswer(q1.id, 0), SubmittedAnswer(q2.id, 0)])

    assert result.id == 1
    assert (result.score, result.total_marks, result.percentage) == (1, 4, 25.0)
    rows = manager.get_results_for(student)
    assert len(rows) == 1
    assert rows[0].exam_title == "Sample exam"
    assert rows[0].student_name == "Student One"


def test_resubmission_appends_new_results(manager, student, exam):
    manager.submit_exam(student, exam.id, [])
    manager.submit_exam(student, exam.id, [SubmittedAnswer(exam.questions[1].id, 1)])

    rows = manager.get_results_for(student)
    assert [row.result.id for row in rows] == [2, 1]
    assert rows[0].result.score == 3


def test_result_total_is_a_snapshot(manager, admin, student, exam):
    manager.submit_exam(student, exam.id, [SubmittedAnswer(exam.questions[0].id, 0)])
    manager.update_exam(admin, exam.id, make_exam(marks=(10, 10), correct=(0, 0)))

    row = manager.get_results_for(student)[0]
    assert row.result.total_marks == 4
    assert row.result.percentage == 25.0


def test_submit_to_unknown_or_inactive_exam(manager, admin, student):
    with pytest.raises(NotFoundError):
        manager.submit_exam(student, 99, [])

    draft = make_exam()
    draft.is_active = False
    hidden = manager.create_exam(admin, draft)
    with pytest.raises(NotFoundError):
        manager.submit_exam(student, hidden.id, [])
    with pytest.raises(NotFoundError):
        manager.get_exam_for(student, hidden.id)
    assert manager.list_exams_for(student) == []


def test_all_results_require_admin(manager, admin, student, other_student, exam):
    manager.submit_exam(student, exam.id, [])
    manager.submit_exam(other_student, exam.id, [])

    with pytest.raises(ForbiddenError):
        manager.get_all_results(student)
    names = [row.student_name for row in manager.get_all_results(admin)]
    assert names == ["Student Two", "Student One"]
    assert len(manager.get_results_for(other_student)) == 1


def test_result_rows_carry_exam_title_and_description(manager, admin, student):
    draft = make_exam()
    draft.description = "Chapter 3 review"
    exam = manager.create_exam(admin, draft)
    manager.submit_exam(student, exam.id, [])

    row = manager.get_results_for(student)[0]
    assert (row.exam_title, row.exam_description) == ("Sample exam", "Chapter 3 review")

    manager.delete_exam(admin, exam.id)
    row = manager.get_results_for(student)[0]
    assert (row.exam_title, row.exam_description) == ("Deleted exam", "")
