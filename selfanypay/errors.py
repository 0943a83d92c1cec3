# selfanypay/errors.py
"""Error kinds raised by the services and their HTTP translation.

Services raise one of the ``ServiceError`` subclasses below. Routers catch
``ServiceError`` and call ``to_http_exception`` which switches on ``kind``.
"""

from enum import Enum
from typing import Dict, Optional, Sequence

from fastapi import HTTPException


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    CONCURRENCY = "concurrency"
    UPLOAD = "upload"
    AUTHENTICATION = "authentication"
    UNKNOWN = "unknown"


class ServiceError(Exception):
    kind: ErrorKind = ErrorKind.UNKNOWN

    def __init__(self, message: str, *, fields: Optional[Sequence[str]] = None):
        super().__init__(message)
        self.message = message
        self.fields = list(fields or [])


class ValidationError(ServiceError):
    kind = ErrorKind.VALIDATION


class NotFoundError(ServiceError):
    kind = ErrorKind.NOT_FOUND


class ConcurrencyError(ServiceError):
    kind = ErrorKind.CONCURRENCY


class UploadError(ServiceError):
    kind = ErrorKind.UPLOAD


class AuthenticationError(ServiceError):
    kind = ErrorKind.AUTHENTICATION


class UnknownError(ServiceError):
    kind = ErrorKind.UNKNOWN

    def __init__(self, message: str, *, detail: Optional[str] = None, status_code: int = 500):
        super().__init__(message)
        self.detail = detail
        self.status_code = status_code


STATUS_BY_KIND: Dict[ErrorKind, int] = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.CONCURRENCY: 404,
    ErrorKind.UPLOAD: 500,
    ErrorKind.AUTHENTICATION: 401,
    ErrorKind.UNKNOWN: 500,
}


def to_http_exception(
    exc: ServiceError, *, concurrency_status: Optional[int] = None
) -> HTTPException:
    """Translate ``exc`` by its kind; call sites may override the concurrency status."""
    status_code = getattr(exc, "status_code", None) or STATUS_BY_KIND[exc.kind]
    if exc.kind is ErrorKind.CONCURRENCY and concurrency_status is not None:
        status_code = concurrency_status

    message = exc.message
    if exc.kind is ErrorKind.UPLOAD:
        message = f"Upload error: {message}"

    detail = {"message": message}
    if exc.fields:
        detail["fields"] = exc.fields
    short = getattr(exc, "detail", None)
    if short:
        detail["detail"] = short[:200]

    headers = None
    if exc.kind is ErrorKind.AUTHENTICATION:
        headers = {"WWW-Authenticate": "Bearer"}

    return HTTPException(status_code=status_code, detail=detail, headers=headers)
