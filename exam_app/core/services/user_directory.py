"""Service holding the identities vouched for by the authentication collaborator."""

from __future__ import annotations

from threading import Lock

from exam_app.core.models import UserIdentity, UserRole

_UNKNOWN_USER_NAME = "Unknown user"


class UserDirectory:
    """Maps user ids to verified identities."""

    def __init__(self, users: list[UserIdentity] | None = None) -> None:
        self._users: dict[int, UserIdentity] = {}
        self._user_counter: int = 0
        self._lock = Lock()
        for user in users or []:
            self.add_user(user)

    def add_user(self, user: UserIdentity) -> UserIdentity:
        with self._lock:
            self._users[user.user_id] = user
            self._user_counter = max(self._user_counter, user.user_id)
            return user

    def register(self, display_name: str, role: UserRole = UserRole.STUDENT) -> UserIdentity:
        cleaned = display_name.strip()
        if not cleaned:
            raise ValueError("Display name cannot be empty.")
        with self._lock:
            self._user_counter += 1
            user = UserIdentity(user_id=self._user_counter, display_name=cleaned, role=role)
            self._users[user.user_id] = user
            return user

    def get_user(self, user_id: int) -> UserIdentity | None:
        with self._lock:
            return self._users.get(user_id)

    def display_name_for(self, user_id: int) -> str:
        user = self.get_user(user_id)
        return user.display_name if user else _UNKNOWN_USER_NAME

    def get_users(self) -> list[UserIdentity]:
        with self._lock:
            return sorted(self._users.values(), key=lambda u: u.user_id)
