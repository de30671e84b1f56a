"""
Translation of training core errors into HTTP errors.

Routers catch TrainingCoreError around each use case call and re-raise
through to_http_exception(); nothing else in the API layer picks status codes
for domain failures.
"""

from fastapi import HTTPException

from application.exceptions import (
    AuthorizationError,
    NotFoundError,
    PersistenceError,
    TrainingCoreError,
    ValidationError,
)

_STATUS_CODES = (
    (ValidationError, 400),
    (AuthorizationError, 403),
    (NotFoundError, 404),
    (PersistenceError, 503),
)


def to_http_exception(error: TrainingCoreError) -> HTTPException:
    """Map a core error to the HTTPException the client should see."""
    for error_type, status_code in _STATUS_CODES:
        if isinstance(error, error_type):
            detail = error.message
            if isinstance(error, ValidationError) and error.errors:
                detail = {"message": error.message, "errors": error.errors}
            return HTTPException(status_code=status_code, detail=detail)
    return HTTPException(status_code=500, detail=error.message)
