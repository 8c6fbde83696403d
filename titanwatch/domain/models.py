"""Typed domain models shared across runtime layers.

This module provides the data contracts exchanged with the Titan domain API:
operations, their append-only progress log, and the readiness status views of
volumes and commits.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Final


class OperationType(str, Enum):
    """Asynchronous operation verbs accepted by the domain API."""

    PUSH = "PUSH"
    PULL = "PULL"


class OperationState(str, Enum):
    """Server-side lifecycle state of one operation."""

    RUNNING = "RUNNING"
    COMPLETE = "COMPLETE"
    ABORTED = "ABORTED"
    FAILED = "FAILED"

    @property
    def is_terminal(self) -> bool:
        """Return whether no further transition can leave this state."""

        return self is not OperationState.RUNNING


class ProgressEntryType(str, Enum):
    """Progress log record types emitted by the server."""

    MESSAGE = "MESSAGE"
    START = "START"
    PROGRESS = "PROGRESS"
    END = "END"
    ERROR = "ERROR"
    ABORT = "ABORT"
    FAILED = "FAILED"
    COMPLETE = "COMPLETE"

    @classmethod
    def _missing_(cls, value: object) -> ProgressEntryType | None:
        # Older servers serialize the abort marker as "ABORTED".
        if value == "ABORTED":
            return cls.ABORT
        return None

    @property
    def is_terminal(self) -> bool:
        """Return whether this entry type closes an operation log."""

        return self in TERMINAL_PROGRESS_ENTRY_TYPES


TERMINAL_PROGRESS_ENTRY_TYPES: Final[frozenset[ProgressEntryType]] = frozenset(
    {ProgressEntryType.COMPLETE, ProgressEntryType.ABORT, ProgressEntryType.FAILED}
)

PROGRESS_ENTRY_TERMINAL_STATES: Final[dict[ProgressEntryType, OperationState]] = {
    ProgressEntryType.COMPLETE: OperationState.COMPLETE,
    ProgressEntryType.ABORT: OperationState.ABORTED,
    ProgressEntryType.FAILED: OperationState.FAILED,
}


@dataclass(frozen=True)
class Operation:
    """Snapshot of one server-tracked asynchronous operation.

    Attributes:
        operation_id: Opaque identifier assigned by the server.
        operation_type: Operation verb.
        commit_id: Versioned snapshot the operation concerns.
        remote_name: Remote backend the operation targets.
        state: Lifecycle state at observation time.
    """

    operation_id: str
    operation_type: OperationType
    commit_id: str
    remote_name: str
    state: OperationState = OperationState.RUNNING


@dataclass(frozen=True)
class ProgressEntry:
    """One append-only progress log record.

    Attributes:
        entry_id: Strictly increasing id within one operation log.
        entry_type: Record type.
        message: Human-readable text, empty when the server sent none.
        percent: Optional completion percentage for `PROGRESS` records.
    """

    entry_id: int
    entry_type: ProgressEntryType
    message: str = ""
    percent: int | None = None


@dataclass(frozen=True)
class ResourceStatus:
    """Readiness view of a volume or commit.

    Attributes:
        ready: Whether the resource is usable.
        error: Server-supplied failure text, empty when none.
        details: Remaining status fields (sizes, properties) as returned.
    """

    ready: bool
    error: str = ""
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def is_failed(self) -> bool:
        """Return whether the server reported a populated error string."""

        return bool(self.error)


@dataclass(frozen=True)
class RemoteParameters:
    """Per-request remote parameters sent with push and pull.

    Attributes:
        provider: Remote provider type such as `nop`, `ssh` or `s3`.
        properties: Provider-specific properties (for example `delay`).
    """

    provider: str
    properties: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Repository:
    """Repository descriptor.

    Attributes:
        name: Repository name.
        properties: Free-form repository properties.
    """

    name: str
    properties: dict[str, Any] = field(default_factory=dict)


def domain_parse_operation(payload: dict[str, Any]) -> Operation:
    """Build an operation snapshot from its JSON payload.

    Args:
        payload: Decoded JSON object returned by the domain API.

    Returns:
        Operation: Parsed operation snapshot.

    Raises:
        ValueError: Raised when required fields are missing or enum values are unknown.
    """

    try:
        return Operation(
            operation_id=str(payload["id"]),
            operation_type=OperationType(payload["type"]),
            commit_id=str(payload.get("commitId") or ""),
            remote_name=str(payload.get("remote") or ""),
            state=OperationState(payload.get("state") or OperationState.RUNNING.value),
        )
    except KeyError as error:
        raise ValueError(f"operation payload missing field: {error.args[0]}") from error


def domain_parse_progress_entry(payload: dict[str, Any]) -> ProgressEntry:
    """Build a progress entry from its JSON payload.

    Args:
        payload: Decoded JSON object returned by the domain API.

    Returns:
        ProgressEntry: Parsed progress entry.

    Raises:
        ValueError: Raised when required fields are missing or the type is unknown.
    """

    try:
        raw_percent = payload.get("percent")
        return ProgressEntry(
            entry_id=int(payload["id"]),
            entry_type=ProgressEntryType(payload["type"]),
            message=str(payload.get("message") or ""),
            percent=int(raw_percent) if raw_percent is not None else None,
        )
    except KeyError as error:
        raise ValueError(f"progress entry payload missing field: {error.args[0]}") from error


def domain_parse_resource_status(payload: dict[str, Any]) -> ResourceStatus:
    """Build a readiness status view from a volume or commit status payload.

    Args:
        payload: Decoded JSON object returned by the domain API.

    Returns:
        ResourceStatus: Parsed readiness view.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    details = {key: value for key, value in payload.items() if key not in ("ready", "error")}
    return ResourceStatus(
        ready=bool(payload.get("ready", False)),
        error=str(payload.get("error") or ""),
        details=details,
    )
