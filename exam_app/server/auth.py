"""Bearer-token boundary between the API and the authentication collaborator."""

from __future__ import annotations

from datetime import timedelta
import logging

from jose import JWTError, jwt

from exam_app.constants.exam_constants import ACCESS_TOKEN_MINUTES
from exam_app.core.errors import UnauthorizedError
from exam_app.core.models import UserIdentity, utc_now
from exam_app.core.services.user_directory import UserDirectory

ALGORITHM = "HS256"

logger = logging.getLogger(__name__)


def issue_access_token(user: UserIdentity, secret_key: str, minutes: int = ACCESS_TOKEN_MINUTES) -> str:
    expire = utc_now() + timedelta(minutes=minutes)
    payload = {"sub": str(user.user_id), "role": user.role.value, "exp": expire}
    return jwt.encode(payload, secret_key, algorithm=ALGORITHM)


def resolve_identity(token: str | None, secret_key: str, users: UserDirectory) -> UserIdentity:
    """Turn a bearer token into a verified identity or raise UnauthorizedError."""
    if not token:
        raise UnauthorizedError("Authentication required")
    try:
        payload = jwt.decode(token, secret_key, algorithms=[ALGORITHM])
    except JWTError as exc:
        logger.info("Rejected token: %s", exc)
        raise UnauthorizedError("Token is invalid or expired") from exc

    subject = payload.get("sub")
    try:
        user_id = int(subject)
    except (TypeError, ValueError) as exc:
        raise UnauthorizedError("Invalid authentication credentials") from exc

    user = users.get_user(user_id)
    if user is None:
        raise UnauthorizedError("User not found")
    return user
