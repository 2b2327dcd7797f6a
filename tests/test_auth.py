from __future__ import annotations

import pytest

from exam_app.core.errors import UnauthorizedError
from exam_app.core.models import UserIdentity, UserRole
from exam_app.server.auth import issue_access_token, resolve_identity

SECRET = "unit-secret"


def test_token_resolves_to_registered_user(manager, student):
    token = issue_access_token(student, SECRET)

    assert resolve_identity(token, SECRET, manager.users) == student


def test_missing_token_is_unauthorized(manager):
    with pytest.raises(UnauthorizedError, match="Authentication required"):
        resolve_identity(None, SECRET, manager.users)


def test_expired_token_is_unauthorized(manager, student):
    token = issue_access_token(student, SECRET, minutes=-1)

    with pytest.raises(UnauthorizedError, match="invalid or expired"):
        resolve_identity(token, SECRET, manager.users)


def test_token_for_unknown_user_is_unauthorized(manager):
    ghost = UserIdentity(user_id=42, display_name="Ghost", role=UserRole.STUDENT)
    token = issue_access_token(ghost, SECRET)

    with pytest.raises(UnauthorizedError, match="User not found"):
        resolve_identity(token, SECRET, manager.users)
