"""Canonical Titan domain API error-code semantics for adapter-layer routing."""

from __future__ import annotations

from enum import Enum
from typing import Final


class TitanErrorCode(str, Enum):
    """Known Titan domain API error codes used by adapter routing logic."""

    NO_SUCH_OBJECT = "NoSuchObjectException"
    OBJECT_EXISTS = "ObjectExistsException"
    ILLEGAL_ARGUMENT = "IllegalArgumentException"
    COMMAND_FAILED = "CommandException"
    UNKNOWN = "UNKNOWN"


TITAN_ERROR_DEFAULT_MESSAGES: Final[dict[str, str]] = {
    TitanErrorCode.NO_SUCH_OBJECT.value: "No such object.",
    TitanErrorCode.OBJECT_EXISTS.value: "Object already exists.",
    TitanErrorCode.ILLEGAL_ARGUMENT.value: "Illegal argument.",
    TitanErrorCode.COMMAND_FAILED.value: "Server command failed.",
}

TITAN_STATUS_CODE_ERRORS: Final[dict[int, str]] = {
    400: TitanErrorCode.ILLEGAL_ARGUMENT.value,
    404: TitanErrorCode.NO_SUCH_OBJECT.value,
    409: TitanErrorCode.OBJECT_EXISTS.value,
}

TITAN_ERROR_STATUS_CODES: Final[dict[str, int]] = {
    error_code: status_code for status_code, error_code in TITAN_STATUS_CODE_ERRORS.items()
}


def titan_error_default_message(error_code: str, fallback_message: str) -> str:
    """Return canonical default message for an error code.

    Args:
        error_code: Server error code.
        fallback_message: Fallback message when code is unknown.

    Returns:
        str: Canonical message for known code, else provided fallback message.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    return TITAN_ERROR_DEFAULT_MESSAGES.get(error_code, fallback_message)


def titan_error_code_for_status(status_code: int) -> str:
    """Infer an error code from an HTTP status when the body carries none.

    Args:
        status_code: HTTP response status.

    Returns:
        str: Mapped error code, `CommandException` for other server errors,
            `UNKNOWN` otherwise.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    mapped_code = TITAN_STATUS_CODE_ERRORS.get(status_code)
    if mapped_code is not None:
        return mapped_code
    if status_code >= 500:
        return TitanErrorCode.COMMAND_FAILED.value
    return TitanErrorCode.UNKNOWN.value


def titan_error_status_code(error_code: str) -> int:
    """Return the HTTP status a server uses for an error code.

    Args:
        error_code: Server error code.

    Returns:
        int: HTTP status, 500 for codes without a dedicated status.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    return TITAN_ERROR_STATUS_CODES.get(error_code, 500)
