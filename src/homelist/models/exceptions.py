"""Domain exceptions for Homelist.

Every error carries the HTTP status code it maps to so the web layer and the
REST adapter can translate in both directions.
"""


class HomelistError(Exception):
    """Base exception for all Homelist domain errors."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidInputError(HomelistError):
    """Raised when an identifier or payload is missing or malformed."""

    status_code = 400


class UnauthorizedError(HomelistError):
    """Raised when the shared secret is missing or wrong."""

    status_code = 401


class NotFoundError(HomelistError):
    """Raised when the requested task does not exist."""

    status_code = 404


class RemoteMutationError(HomelistError):
    """Raised when the task service cannot be reached or fails."""

    status_code = 502


_BY_STATUS = {
    InvalidInputError.status_code: InvalidInputError,
    UnauthorizedError.status_code: UnauthorizedError,
    NotFoundError.status_code: NotFoundError,
}


def error_for_status(status_code: int, message: str) -> HomelistError:
    """Build the domain error matching an HTTP status code."""
    return _BY_STATUS.get(status_code, RemoteMutationError)(message)
