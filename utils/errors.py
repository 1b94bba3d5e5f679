"""
Error taxonomy shared by the services and the HTTP layer.

Every domain failure is raised as a single ApiError tagged with an ErrorKind.
Callers branch on ``err.kind``; the Flask error handlers turn it into the
error envelope ``{statusCode, message, success: false, errors: []}``.
"""
from __future__ import annotations

import enum
import logging
from functools import wraps
from typing import Any, List, Optional


logger = logging.getLogger(__name__)


class ErrorKind(enum.Enum):
    VALIDATION = "validation"
    AUTH = "auth"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    UPLOAD = "upload"
    INTERNAL = "internal"

    @property
    def status_code(self) -> int:
        return STATUS_CODES[self]


STATUS_CODES = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.AUTH: 401,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.CONFLICT: 409,
    ErrorKind.UPLOAD: 500,
    ErrorKind.INTERNAL: 500,
}


class ApiError(Exception):
    """Structured error carrying a kind, a message and optional field errors."""

    def __init__(self, kind: ErrorKind, message: str, errors: Optional[List[Any]] = None):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.errors = list(errors or [])

    @property
    def status_code(self) -> int:
        return self.kind.status_code

    def to_dict(self) -> dict:
        return {
            "statusCode": self.status_code,
            "message": self.message,
            "success": False,
            "errors": self.errors,
        }

    def __repr__(self) -> str:
        return f"<ApiError {self.kind.name} {self.status_code}: {self.message}>"


def normalize_errors(message: str = "Something went wrong"):
    """
    Decorator for service operations: ApiError passes through untouched,
    anything else is logged and re-raised as ApiError(INTERNAL).
    """
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            try:
                return fn(*args, **kwargs)
            except ApiError:
                raise
            except Exception as exc:
                logger.exception("Unexpected error in %s", fn.__name__)
                raise ApiError(ErrorKind.INTERNAL, message) from exc

        return wrapper

    return decorator
