"""Service error model shared by every component and mapped to HTTP by the API layer."""

from enum import Enum


class ErrorKind(str, Enum):
    """Category of a failed operation; decides the response status."""

    VALIDATION = "validation_error"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    CONFLICT = "conflict"
    NOT_FOUND = "not_found"
    STORAGE_UNAVAILABLE = "storage_unavailable"
    INTERNAL = "internal"


# Status code per error kind for the HTTP layer.
HTTP_STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.UNAUTHORIZED: 401,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.CONFLICT: 409,
    ErrorKind.STORAGE_UNAVAILABLE: 503,
    ErrorKind.INTERNAL: 500,
}


class ServiceError(Exception):
    """
    Raised by services when an operation cannot complete.

    `message` is safe to return to clients; `cause` keeps the underlying
    exception for logs only.
    """

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        cause: Exception | None = None,
    ) -> None:
        self.kind = kind
        self.message = message
        self.cause = cause
        super().__init__(message)

    @property
    def status_code(self) -> int:
        return HTTP_STATUS_BY_KIND.get(self.kind, 500)


def validation_error(message: str) -> ServiceError:
    return ServiceError(ErrorKind.VALIDATION, message)


def unauthorized(message: str = "Invalid or expired session") -> ServiceError:
    return ServiceError(ErrorKind.UNAUTHORIZED, message)


def forbidden(message: str = "Admin access required") -> ServiceError:
    return ServiceError(ErrorKind.FORBIDDEN, message)


def conflict(message: str) -> ServiceError:
    return ServiceError(ErrorKind.CONFLICT, message)


def not_found(message: str) -> ServiceError:
    return ServiceError(ErrorKind.NOT_FOUND, message)


def storage_unavailable(message: str, cause: Exception | None = None) -> ServiceError:
    return ServiceError(ErrorKind.STORAGE_UNAVAILABLE, message, cause=cause)
