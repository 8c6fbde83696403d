"""Project-native typed exceptions for readiness waits and operation outcomes."""

from __future__ import annotations

from titanwatch.domain import ProgressEntry


class WaitError(Exception):
    """Base exception for wait failures.

    Attributes:
        label: Name of the awaited dependency.
        attempts: Probe invocations performed before failing.
        stage_timeline: Structured timeline captured during the wait.
    """

    def __init__(
        self,
        message: str,
        label: str,
        attempts: int,
        stage_timeline: list[dict[str, object]] | None = None,
    ):
        super().__init__(message)
        self.label = label
        self.attempts = attempts
        self.stage_timeline = stage_timeline or []


class WaitTimeoutError(WaitError, TimeoutError):
    """Attempt budget exhausted while the dependency was still not ready.

    Attributes:
        diagnostics: Best-effort diagnostic output (for example a log tail).
    """

    def __init__(
        self,
        label: str,
        attempts: int,
        diagnostics: str,
        stage_timeline: list[dict[str, object]] | None = None,
    ):
        super().__init__(
            message=f"timed out waiting for {label} after {attempts} attempts: {diagnostics}",
            label=label,
            attempts=attempts,
            stage_timeline=stage_timeline,
        )
        self.diagnostics = diagnostics


class WaitFatalError(WaitError, RuntimeError):
    """Probe reported a condition retries cannot fix.

    The exception message is the probe's failure message, unaltered.

    Attributes:
        error_code: Optional server error code behind the failure.
    """

    def __init__(
        self,
        message: str,
        label: str,
        attempts: int,
        error_code: str | None = None,
        stage_timeline: list[dict[str, object]] | None = None,
    ):
        super().__init__(message=message, label=label, attempts=attempts, stage_timeline=stage_timeline)
        self.error_code = error_code


class OperationFailedError(WaitError, RuntimeError):
    """Operation ended with a `FAILED` terminal entry or state.

    Attributes:
        operation_id: Failed operation identifier.
        failure_message: Terminal progress message, unaltered.
        entries: Entries accumulated while waiting.
    """

    def __init__(
        self,
        operation_id: str,
        failure_message: str,
        entries: tuple[ProgressEntry, ...],
        attempts: int,
        stage_timeline: list[dict[str, object]] | None = None,
    ):
        super().__init__(
            message=f"operation failed: {failure_message}",
            label=f"operation {operation_id}",
            attempts=attempts,
            stage_timeline=stage_timeline,
        )
        self.operation_id = operation_id
        self.failure_message = failure_message
        self.entries = entries


class OperationAbortedError(WaitError):
    """Operation ended by abort while the caller asked to treat abort as an error.

    Attributes:
        operation_id: Aborted operation identifier.
        abort_message: Terminal progress message, unaltered.
        entries: Entries accumulated while waiting.
    """

    def __init__(
        self,
        operation_id: str,
        abort_message: str,
        entries: tuple[ProgressEntry, ...],
        attempts: int,
        stage_timeline: list[dict[str, object]] | None = None,
    ):
        super().__init__(
            message=f"operation aborted: {abort_message}",
            label=f"operation {operation_id}",
            attempts=attempts,
            stage_timeline=stage_timeline,
        )
        self.operation_id = operation_id
        self.abort_message = abort_message
        self.entries = entries
