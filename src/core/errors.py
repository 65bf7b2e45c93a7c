"""Remote operation errors and failure classification."""

from enum import Enum
from typing import Literal

from pydantic import BaseModel


class RemoteOperationError(RuntimeError):
    """A call to the remote pantry store failed (network, store or bad data)."""

    def __init__(self, message: str, *, operation: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.operation = operation


class ErrorSeverity(Enum):
    """Severity levels for errors."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ErrorCode:
    """Error codes for specific failure conditions."""

    ERR_NETWORK_ERROR = "ERR_NETWORK_ERROR"
    ERR_RECORD_NOT_FOUND = "ERR_RECORD_NOT_FOUND"
    ERR_INVALID_RECORD = "ERR_INVALID_RECORD"
    ERR_MISSING_TABLE = "ERR_MISSING_TABLE"
    ERR_UNKNOWN = "ERR_UNKNOWN"


class ErrorResponse(BaseModel):
    """Structured description of a failure, attached to log records."""

    code: str
    message: str
    severity: ErrorSeverity


_ERROR_PATTERNS: dict[
    Literal["network", "not_found", "invalid", "missing_table"],
    dict[str, list[str] | set[str]],
] = {
    "network": {
        "phrases": [
            "connection",
            "timeout",
            "timed out",
            "network",
            "unreachable",
            "502",
            "503",
            "504",
        ],
        "exception_types": {"ConnectionError", "TimeoutError", "ConnectError", "ReadTimeout"},
    },
    "not_found": {
        "phrases": ["not found", "404"],
        "exception_types": {"RecordNotFoundError"},
    },
    "invalid": {
        "phrases": ["validation error", "invalid record", "invalid row"],
        "exception_types": {"ValidationError"},
    },
    "missing_table": {
        "phrases": ["no such table", "does not exist"],
        "exception_types": set(),
    },
}


def _match_error_pattern(
    *,
    error_str: str,
    exception_type: str,
    pattern_type: Literal["network", "not_found", "invalid", "missing_table"],
) -> bool:
    """Return True if the error matches the configured pattern type."""
    patterns = _ERROR_PATTERNS[pattern_type]
    return any(phrase in error_str for phrase in patterns["phrases"]) or exception_type in patterns["exception_types"]


def _exception_types(exception: BaseException) -> list[str]:
    """Names of the exception and of the exception it was raised from."""
    names = [type(exception).__name__]
    if exception.__cause__ is not None:
        names.append(type(exception.__cause__).__name__)
    return names


def classify_remote_error(exception: BaseException) -> ErrorResponse:
    """Classify a remote failure into a code and severity.

    Inspects the exception message and the types of the exception and its
    direct cause.

    Args:
        exception: The exception raised by a repository call

    Returns:
        ErrorResponse with code, message and severity
    """
    error_str = str(exception).lower()

    def matches(pattern_type: Literal["network", "not_found", "invalid", "missing_table"]) -> bool:
        return any(
            _match_error_pattern(error_str=error_str, exception_type=name, pattern_type=pattern_type)
            for name in _exception_types(exception)
        )

    if matches("missing_table"):
        return ErrorResponse(
            code=ErrorCode.ERR_MISSING_TABLE,
            message="The pantry table has not been created.",
            severity=ErrorSeverity.HIGH,
        )

    if matches("not_found"):
        return ErrorResponse(
            code=ErrorCode.ERR_RECORD_NOT_FOUND,
            message="The pantry item no longer exists in the store.",
            severity=ErrorSeverity.LOW,
        )

    if matches("invalid"):
        return ErrorResponse(
            code=ErrorCode.ERR_INVALID_RECORD,
            message="The store returned a record that is not a valid pantry item.",
            severity=ErrorSeverity.MEDIUM,
        )

    if matches("network"):
        return ErrorResponse(
            code=ErrorCode.ERR_NETWORK_ERROR,
            message="Could not reach the pantry store.",
            severity=ErrorSeverity.MEDIUM,
        )

    return ErrorResponse(
        code=ErrorCode.ERR_UNKNOWN,
        message="The pantry store reported an unexpected error.",
        severity=ErrorSeverity.MEDIUM,
    )
