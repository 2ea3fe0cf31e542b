"""Typed errors raised by the diagram client."""

from typing import Optional


class DiagramClientError(Exception):
    """Base error for failed requests and unresolvable lookups.

    ``status_code`` is the HTTP status when the server answered, ``None``
    for transport failures. ``error_code`` carries the server's machine
    readable ``error`` field when present.
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        error_code: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.error_code = error_code


class DiagramValidationError(DiagramClientError):
    """The server rejected the request body or parameters (400)."""


class DiagramNotFoundError(DiagramClientError):
    """No such diagram, version, filter or nested entity (404)."""


class DiagramConflictError(DiagramClientError):
    """The write collides with an existing diagram id (409)."""


STATUS_ERRORS = {
    400: DiagramValidationError,
    404: DiagramNotFoundError,
    409: DiagramConflictError,
}
