"""
Error taxonomy for the training core.

Every failure the core reports to a caller is one of these. The API layer
maps them onto HTTP status codes (see api/errors.py); the device CLI prints
the message and exits non-zero.
"""

from typing import List, Optional


class TrainingCoreError(Exception):
    """Base class for all training core errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(TrainingCoreError):
    """Raised when input is malformed or an operation would break an invariant.

    Always raised before any side effect happens.
    """

    def __init__(self, message: str, errors: Optional[List[str]] = None):
        super().__init__(message)
        self.errors = errors or []


class SessionStateError(ValidationError):
    """Raised when a session operation is not allowed in the current state."""

    def __init__(self, message: str, state: Optional[str] = None):
        super().__init__(message)
        self.state = state


class AuthorizationError(TrainingCoreError):
    """Raised when the actor lacks the capability or ownership required."""


class NotFoundError(TrainingCoreError):
    """Raised when a template, routine or schedule day does not exist."""

    def __init__(self, message: str, resource: Optional[str] = None):
        super().__init__(message)
        self.resource = resource


class PersistenceError(TrainingCoreError):
    """Raised when the record store (or the sync endpoint) rejects a write."""
