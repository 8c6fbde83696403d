"""Typed contracts for readiness waits and operation tracking."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Final

from titanwatch.domain import Operation, ProgressEntry


class ProbeOutcome(str, Enum):
    """Classification of one readiness probe invocation."""

    READY = "ready"
    NOT_READY = "not_ready"
    FATAL = "fatal"


@dataclass(frozen=True)
class ProbeResult:
    """Result contract returned by every readiness probe.

    Attributes:
        outcome: Probe classification.
        detail: Human-readable detail; for `FATAL` the message surfaced to callers.
        error_code: Optional server error code behind a `FATAL` outcome.
    """

    outcome: ProbeOutcome
    detail: str = ""
    error_code: str | None = None

    @classmethod
    def ready(cls, detail: str = "") -> ProbeResult:
        return cls(outcome=ProbeOutcome.READY, detail=detail)

    @classmethod
    def not_ready(cls, detail: str = "") -> ProbeResult:
        return cls(outcome=ProbeOutcome.NOT_READY, detail=detail)

    @classmethod
    def fatal(cls, message: str, error_code: str | None = None) -> ProbeResult:
        return cls(outcome=ProbeOutcome.FATAL, detail=message, error_code=error_code)


@dataclass(frozen=True)
class PollPolicy:
    """Retry budget for one readiness wait.

    Attributes:
        delay_seconds: Fixed delay between probe invocations.
        max_attempts: Maximum probe invocations, or None for no ceiling.
    """

    delay_seconds: float
    max_attempts: int | None = None

    def __post_init__(self) -> None:
        if self.delay_seconds < 0:
            raise ValueError("delay_seconds must be >= 0")
        if self.max_attempts is not None and self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1 when set")


SERVICE_BOOT_POLICY: Final[PollPolicy] = PollPolicy(delay_seconds=1.0, max_attempts=60)
ENDPOINT_POLICY: Final[PollPolicy] = PollPolicy(delay_seconds=1.0, max_attempts=60)
RESOURCE_POLICY: Final[PollPolicy] = PollPolicy(delay_seconds=1.0, max_attempts=None)
OPERATION_POLL_POLICY: Final[PollPolicy] = PollPolicy(delay_seconds=0.5, max_attempts=None)


@dataclass(frozen=True)
class WaitResult:
    """Result contract for a successful readiness wait.

    Attributes:
        label: Name of the awaited dependency.
        attempts: Number of probe invocations performed.
        stage_timeline: Structured timeline captured during the wait.
    """

    label: str
    attempts: int
    stage_timeline: list[dict[str, object]] = field(default_factory=list)


class OperationOutcome(str, Enum):
    """Classified terminal outcome of one operation."""

    COMPLETE = "COMPLETE"
    ABORTED = "ABORTED"
    FAILED = "FAILED"


@dataclass(frozen=True)
class OperationPollResult:
    """Result contract for one tracker poll.

    Attributes:
        operation: Operation snapshot fetched before the progress entries.
        entries: Entries not previously delivered, ascending by id.
        terminal_entry: Terminal entry once observed by this tracker, else None.
    """

    operation: Operation
    entries: tuple[ProgressEntry, ...]
    terminal_entry: ProgressEntry | None = None


@dataclass(frozen=True)
class OperationCompletion:
    """Result contract for a finished operation wait.

    Attributes:
        operation: Last fetched operation snapshot.
        outcome: Classified terminal outcome.
        entries: Entries accumulated during the wait, in arrival order.
        message: Message of the terminal entry, empty when none.
        attempts: Number of polls performed.
        stage_timeline: Structured timeline captured during the wait.
    """

    operation: Operation
    outcome: OperationOutcome
    entries: tuple[ProgressEntry, ...]
    message: str = ""
    attempts: int = 0
    stage_timeline: list[dict[str, object]] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        """Return whether the operation completed successfully."""

        return self.outcome is OperationOutcome.COMPLETE

    @property
    def aborted(self) -> bool:
        """Return whether the operation ended by deliberate abort."""

        return self.outcome is OperationOutcome.ABORTED
