"""
Exit codes for Homelist CLI.

Semantic exit codes so scripts can tell what happened.
"""

from homelist.models.exceptions import (
    HomelistError,
    InvalidInputError,
    NotFoundError,
    RemoteMutationError,
    UnauthorizedError,
)

# Success
SUCCESS = 0

# General error (unspecified)
ERROR_GENERAL = 1

# Invalid arguments or validation error
ERROR_INVALID_ARGS = 2

# Authentication failure (wrong or missing secret/token)
ERROR_AUTH_FAILURE = 3

# Network or API error (server unreachable, timeout, etc.)
ERROR_NETWORK = 4

# Resource not found
ERROR_NOT_FOUND = 5


def exit_code_for(error: HomelistError) -> int:
    """Map a domain error to the exit code a command should return."""
    if isinstance(error, InvalidInputError):
        return ERROR_INVALID_ARGS
    if isinstance(error, UnauthorizedError):
        return ERROR_AUTH_FAILURE
    if isinstance(error, NotFoundError):
        return ERROR_NOT_FOUND
    if isinstance(error, RemoteMutationError):
        return ERROR_NETWORK
    return ERROR_GENERAL
