"""Error taxonomy shared by the server, the API client and the exam session.

Each error carries the HTTP status it maps to so the API layer can translate
it with a single handler and the client can map responses back.
"""

from __future__ import annotations


class ExamAppError(Exception):
    """Base class for expected, user-facing failures."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFoundError(ExamAppError):
    """Raised when an exam or result does not exist."""

    status_code = 404


class UnauthorizedError(ExamAppError):
    """Raised when the caller identity is missing, invalid or expired."""

    status_code = 401


class ForbiddenError(ExamAppError):
    """Raised when the caller is authenticated but lacks the required role."""

    status_code = 403


class ValidationFailure(ExamAppError):
    """Raised for malformed exams or submissions; nothing is graded or stored."""

    status_code = 422


class TransientIOError(ExamAppError):
    """Raised when the network or storage fails and the action may be retried."""

    status_code = 503


_ERRORS_BY_STATUS: dict[int, type[ExamAppError]] = {
    NotFoundError.status_code: NotFoundError,
    UnauthorizedError.status_code: UnauthorizedError,
    ForbiddenError.status_code: ForbiddenError,
    ValidationFailure.status_code: ValidationFailure,
    400: ValidationFailure,
    TransientIOError.status_code: TransientIOError,
}


def error_for_status(status_code: int, message: str) -> ExamAppError:
    """Return the taxonomy error matching an HTTP status code."""
    error_type = _ERRORS_BY_STATUS.get(status_code, ExamAppError)
    error = error_type(message)
    if error_type is ExamAppError:
        error.status_code = status_code
    return error
