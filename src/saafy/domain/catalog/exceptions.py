"""Catalog-specific exceptions for error handling."""

from enum import Enum
from typing import Any, Optional


class ApiErrorCode(str, Enum):
    NETWORK_ERROR = "NETWORK_ERROR"
    RATE_LIMITED = "RATE_LIMITED"
    INVALID_INPUT = "INVALID_INPUT"
    NOT_FOUND = "NOT_FOUND"
    SERVER_ERROR = "SERVER_ERROR"
    PARSE_ERROR = "PARSE_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"


class CatalogError(Exception):
    """Base exception for song API operations."""

    code: ApiErrorCode = ApiErrorCode.SERVER_ERROR

    def __init__(self, message: str, status: int = 0, code: Optional[ApiErrorCode] = None):
        super().__init__(message)
        self.message = message
        self.status = status
        if code is not None:
            self.code = code

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": type(self).__name__,
            "message": self.message,
            "status": self.status,
            "code": self.code.value,
        }


class NetworkError(CatalogError):
    """Raised when the API cannot be reached (connection failure or timeout)."""

    code = ApiErrorCode.NETWORK_ERROR

    def __init__(self, message: str = "Network error occurred"):
        super().__init__(message, status=0)


class ApiError(CatalogError):
    """Raised when the API answers with an error (non-2xx or bad payload)."""

    def __init__(self, message: str, status: int, code: ApiErrorCode = ApiErrorCode.SERVER_ERROR):
        super().__init__(message, status=status, code=code)
