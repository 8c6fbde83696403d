"""Discriminated result contracts for domain API calls.

Every domain API call resolves to exactly one of three variants. Callers branch
on the variant instead of inspecting exception types:

- `ApiSuccess`: the call succeeded and carries the decoded value.
- `ApiDomainError`: the server answered with a structured error code.
- `ApiTransportError`: the server could not be reached or answered unreadably.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True)
class ApiSuccess(Generic[T]):
    """Successful API call.

    Attributes:
        value: Decoded response value.
    """

    value: T


@dataclass(frozen=True)
class ApiDomainError:
    """Structured error returned by the server.

    Attributes:
        code: Server error code such as `NoSuchObjectException`.
        message: Server-supplied message.
        details: Optional server-supplied details.
        status_code: HTTP status that carried the error.
    """

    code: str
    message: str
    details: str | None = None
    status_code: int | None = None


@dataclass(frozen=True)
class ApiTransportError:
    """Transport-level failure (refused connection, timeout, unreadable body).

    Attributes:
        cause: Human-readable failure description.
        timed_out: Whether the failure was a timeout.
    """

    cause: str
    timed_out: bool = False


ApiResult = Union[ApiSuccess[T], ApiDomainError, ApiTransportError]
