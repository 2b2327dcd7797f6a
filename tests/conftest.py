"""Shared fixtures for the exam application tests."""

from __future__ import annotations

import pytest

from exam_app.core.exam_manager import ExamManager
from exam_app.core.models import Exam, UserRole

from exam_factories import make_exam


@pytest.fixture
def manager() -> ExamManager:
    exam_manager = ExamManager()
    exam_manager.users.register("Admin", UserRole.ADMIN)
    exam_manager.users.register("Student One", UserRole.STUDENT)
    exam_manager.users.register("Student Two", UserRole.STUDENT)
    return exam_manager


@pytest.fixture
def admin(manager):
    return manager.users.get_user(1)


@pytest.fixture
def student(manager):
    return manager.users.get_user(2)


@pytest.fixture
def other_student(manager):
    return manager.users.get_user(3)


@pytest.fixture
def exam(manager, admin) -> Exam:
    return manager.create_exam(admin, make_exam())
