from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    UPSTREAM = "upstream"
    AI_SERVICE = "ai_service"
    INTERNAL = "internal"

    @property
    def status_code(self) -> int:
        return _STATUS_CODES[self]


_STATUS_CODES = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.UPSTREAM: 500,
    ErrorKind.AI_SERVICE: 500,
    ErrorKind.INTERNAL: 500,
}


class ServiceError(Exception):
    """Error with a category the HTTP layer can map to a status code.

    ``message`` is safe to show to API clients; ``detail`` is for logs only.
    """

    kind = ErrorKind.INTERNAL

    def __init__(self, message: str, kind: Optional[ErrorKind] = None, detail: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        if kind is not None:
            self.kind = kind
        self.detail = detail


class ValidationError(ServiceError):
    kind = ErrorKind.VALIDATION


class NotFoundError(ServiceError):
    kind = ErrorKind.NOT_FOUND


class UpstreamError(ServiceError):
    kind = ErrorKind.UPSTREAM

    def __init__(self, status: str, upstream_message: str) -> None:
        super().__init__(
            f"API 오류: [{status}] {upstream_message}",
            detail=f"status={status} message={upstream_message}",
        )
        self.status = status
        self.upstream_message = upstream_message


class AIServiceError(ServiceError):
    kind = ErrorKind.AI_SERVICE


class MissingAPIKeyError(AIServiceError):
    pass
