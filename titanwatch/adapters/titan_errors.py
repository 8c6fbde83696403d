"""Project-native typed exceptions for Titan domain API failures."""

from __future__ import annotations

from titanwatch.domain import ApiDomainError, ApiTransportError

from .titan_error_codes import TitanErrorCode


class TitanApiError(Exception):
    """Base exception for adapter-level Titan API failures.

    Attributes:
        error_code: Optional server error code.
        details: Optional server-supplied details.
    """

    def __init__(self, message: str, error_code: str | None = None, details: str | None = None):
        super().__init__(message)
        self.error_code = error_code
        self.details = details


class TitanConnectionError(TitanApiError, ConnectionError):
    """Transport-level connectivity failure during Titan API communication."""


class TitanTimeoutError(TitanApiError, TimeoutError):
    """Transport timeout while waiting for a Titan API response."""


class TitanDomainError(TitanApiError, RuntimeError):
    """Structured error answered by the Titan server."""


class TitanNoSuchObjectError(TitanDomainError):
    """Referenced object does not exist (`NoSuchObjectException`)."""


class TitanObjectExistsError(TitanDomainError):
    """Object already exists or conflicts with one in progress (`ObjectExistsException`)."""


class TitanIllegalArgumentError(TitanDomainError, ValueError):
    """Request rejected as invalid (`IllegalArgumentException`)."""


class TitanServerError(TitanDomainError):
    """Generic server or command failure."""


_DOMAIN_ERROR_TYPES: dict[str, type[TitanDomainError]] = {
    TitanErrorCode.NO_SUCH_OBJECT.value: TitanNoSuchObjectError,
    TitanErrorCode.OBJECT_EXISTS.value: TitanObjectExistsError,
    TitanErrorCode.ILLEGAL_ARGUMENT.value: TitanIllegalArgumentError,
}


def titan_error_from_result(result: ApiDomainError | ApiTransportError) -> TitanApiError:
    """Map a failed API result variant to its typed exception.

    Args:
        result: Domain-error or transport-error result variant.

    Returns:
        TitanApiError: Typed exception ready to raise.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    if isinstance(result, ApiTransportError):
        if result.timed_out:
            return TitanTimeoutError(result.cause)
        return TitanConnectionError(result.cause)

    error_type = _DOMAIN_ERROR_TYPES.get(result.code, TitanServerError)
    return error_type(
        f"Titan request failed: code={result.code}, message={result.message}",
        error_code=result.code,
        details=result.details,
    )
