"""Operation completion tracking over the append-only progress log."""

from __future__ import annotations

import time
from dataclasses import dataclass, replace
from typing import Callable

import structlog

from titanwatch.adapters import TitanApiPort, adapter_result_unwrap, titan_error_from_result
from titanwatch.domain import (
    PROGRESS_ENTRY_TERMINAL_STATES,
    ApiDomainError,
    ApiResult,
    ApiSuccess,
    ApiTransportError,
    Operation,
    OperationState,
    ProgressEntry,
)

from .interfaces import (
    OPERATION_POLL_POLICY,
    OperationCompletion,
    OperationOutcome,
    OperationPollResult,
    PollPolicy,
    ProbeResult,
)
from .readiness_poller import ReadinessPoller
from .wait_errors import OperationAbortedError, OperationFailedError

logger = structlog.get_logger(__name__)

_STATE_OUTCOMES: dict[OperationState, OperationOutcome] = {
    OperationState.COMPLETE: OperationOutcome.COMPLETE,
    OperationState.ABORTED: OperationOutcome.ABORTED,
    OperationState.FAILED: OperationOutcome.FAILED,
}


@dataclass
class _OperationCursor:
    """Per-operation consumption state owned by one tracker.

    Attributes:
        last_entry_id: Highest progress entry id delivered so far.
        terminal_entry: Terminal entry once delivered; nothing follows it.
        operation: Latest snapshot, carrying the terminal state once the
            terminal entry is delivered.
    """

    last_entry_id: int = 0
    terminal_entry: ProgressEntry | None = None
    operation: Operation | None = None


class OperationTracker:
    """Observe server operations to completion through a monotonic progress cursor.

    Each tracked operation gets its own cursor. Entries are delivered once, in
    ascending id order, and the terminal entry is always the last entry a
    tracker reports for an operation. Timing out a wait never aborts the
    operation on the server; `tracker_abort` is the only cancellation path.
    """

    def __init__(
        self,
        api: TitanApiPort,
        policy: PollPolicy = OPERATION_POLL_POLICY,
        sleep: Callable[[float], None] | None = None,
    ):
        """Initialize tracker.

        Args:
            api: Domain API port.
            policy: Poll delay and optional attempt budget for completion waits.
            sleep: Optional sleep function, `time.sleep` when omitted.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when api is None.
        """

        if api is None:
            raise ValueError("api must not be None")
        self._api = api
        self._policy = policy
        self._sleep = sleep or time.sleep
        self._cursors: dict[str, _OperationCursor] = {}

    def tracker_cursor(self, operation_id: str) -> int:
        """Return the highest entry id already delivered for an operation.

        Args:
            operation_id: Operation identifier.

        Returns:
            int: Cursor value, `0` when nothing was consumed.

        Raises:
            RuntimeError: This method does not raise runtime errors.
        """

        cursor = self._cursors.get(operation_id)
        return cursor.last_entry_id if cursor is not None else 0

    def tracker_reset_cursor(self, operation_id: str) -> None:
        """Forget consumption state so the next poll replays the log from id 0."""

        self._cursors.pop(operation_id, None)

    def tracker_poll(self, operation_id: str) -> OperationPollResult:
        """Fetch operation state and any entries past the cursor, advancing it.

        Args:
            operation_id: Operation identifier.

        Returns:
            OperationPollResult: Snapshot plus newly delivered entries.

        Raises:
            TitanApiError: Typed subclass matching the failed API call.
        """

        return adapter_result_unwrap(self._tracker_poll_result(operation_id))

    def tracker_await_completion(self, operation_id: str, abort_is_error: bool = False) -> OperationCompletion:
        """Poll until the operation log or state reaches a terminal condition.

        Args:
            operation_id: Operation identifier.
            abort_is_error: Raise `OperationAbortedError` instead of returning an
                aborted completion.

        Returns:
            OperationCompletion: Classified outcome with entries accumulated in
                arrival order.

        Raises:
            OperationFailedError: Raised when the operation failed.
            OperationAbortedError: Raised on abort when `abort_is_error` is set.
            WaitFatalError: Raised when the operation cannot be observed (unknown
                id, server error, transport failure).
            WaitTimeoutError: Raised when a configured poll budget runs out.
        """

        accumulated_entries: list[ProgressEntry] = []
        latest_operation: list[Operation] = []

        def _operation_probe() -> ProbeResult:
            poll_result = self._tracker_poll_result(operation_id)
            if isinstance(poll_result, ApiDomainError):
                return ProbeResult.fatal(poll_result.message, error_code=poll_result.code)
            if isinstance(poll_result, ApiTransportError):
                return ProbeResult.fatal(poll_result.cause)

            observed = poll_result.value
            accumulated_entries.extend(observed.entries)
            latest_operation[:] = [observed.operation]
            if observed.terminal_entry is not None:
                return ProbeResult.ready(f"terminal entry {observed.terminal_entry.entry_type.value}")
            if observed.operation.state.is_terminal:
                return ProbeResult.ready(f"terminal state {observed.operation.state.value}")
            return ProbeResult.not_ready(f"state {observed.operation.state.value}")

        poller = ReadinessPoller(policy=self._policy, label=f"operation {operation_id}", sleep=self._sleep)
        wait_result = poller.poller_wait(_operation_probe)

        operation = latest_operation[0]
        entries = tuple(accumulated_entries)
        terminal_entry = self._cursors[operation_id].terminal_entry
        if terminal_entry is not None:
            outcome = _STATE_OUTCOMES[PROGRESS_ENTRY_TERMINAL_STATES[terminal_entry.entry_type]]
            message = terminal_entry.message
        else:
            # State went terminal without a terminal entry; the state is authoritative.
            outcome = _STATE_OUTCOMES[operation.state]
            message = entries[-1].message if entries else ""

        logger.info(
            "operation_finished",
            operation_id=operation_id,
            outcome=outcome.value,
            entries=len(entries),
            attempts=wait_result.attempts,
        )

        if outcome is OperationOutcome.FAILED:
            raise OperationFailedError(
                operation_id=operation_id,
                failure_message=message,
                entries=entries,
                attempts=wait_result.attempts,
                stage_timeline=wait_result.stage_timeline,
            )
        if outcome is OperationOutcome.ABORTED and abort_is_error:
            raise OperationAbortedError(
                operation_id=operation_id,
                abort_message=message,
                entries=entries,
                attempts=wait_result.attempts,
                stage_timeline=wait_result.stage_timeline,
            )
        return OperationCompletion(
            operation=operation,
            outcome=outcome,
            entries=entries,
            message=message,
            attempts=wait_result.attempts,
            stage_timeline=wait_result.stage_timeline,
        )

    def tracker_abort(self, operation_id: str) -> None:
        """Request cancellation of a running operation without waiting for it.

        Aborting an operation that is already terminal is a no-op.

        Args:
            operation_id: Operation identifier.

        Returns:
            None: Sends the cancellation request as side effect.

        Raises:
            TitanApiError: Raised when the operation is unknown or the request fails
                while the operation is still running.
        """

        cursor = self._cursors.get(operation_id)
        if cursor is not None and cursor.terminal_entry is not None:
            logger.info("operation_abort_skipped", operation_id=operation_id, reason="terminal entry delivered")
            return

        operation = adapter_result_unwrap(self._api.adapter_get_operation(operation_id))
        if operation.state.is_terminal:
            logger.info("operation_abort_skipped", operation_id=operation_id, state=operation.state.value)
            return

        abort_result = self._api.adapter_abort_operation(operation_id)
        if isinstance(abort_result, ApiSuccess):
            logger.info("operation_abort_requested", operation_id=operation_id)
            return

        # The operation may have finished between the state read and the abort request.
        refreshed = self._api.adapter_get_operation(operation_id)
        if isinstance(refreshed, ApiSuccess) and refreshed.value.state.is_terminal:
            logger.info("operation_abort_skipped", operation_id=operation_id, state=refreshed.value.state.value)
            return
        raise titan_error_from_result(abort_result)

    def _tracker_poll_result(self, operation_id: str) -> ApiResult[OperationPollResult]:
        """Fetch operation then progress, applying cursor discipline.

        The operation is read before the progress log, so an observed terminal
        state is always accompanied by the entries written before it. Once the
        terminal entry is delivered the cached snapshot answers every later poll
        without contacting the server, which retires finished operations after
        their log has been read.

        Args:
            operation_id: Operation identifier.

        Returns:
            ApiResult[OperationPollResult]: Poll result, or the failed call's variant.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        cursor = self._cursors.setdefault(operation_id, _OperationCursor())
        if cursor.terminal_entry is not None and cursor.operation is not None:
            return ApiSuccess(
                OperationPollResult(operation=cursor.operation, entries=(), terminal_entry=cursor.terminal_entry)
            )

        operation_result = self._api.adapter_get_operation(operation_id)
        if not isinstance(operation_result, ApiSuccess):
            return operation_result
        cursor.operation = operation_result.value

        progress_result = self._api.adapter_get_operation_progress(operation_id, last_id=cursor.last_entry_id)
        if not isinstance(progress_result, ApiSuccess):
            return progress_result

        delivered: list[ProgressEntry] = []
        for entry in sorted(progress_result.value, key=lambda item: item.entry_id):
            if entry.entry_id <= cursor.last_entry_id:
                continue
            delivered.append(entry)
            cursor.last_entry_id = entry.entry_id
            logger.info(
                "operation_progress_received",
                operation_id=operation_id,
                entry_id=entry.entry_id,
                entry_type=entry.entry_type.value,
                message=entry.message,
            )
            if entry.entry_type.is_terminal:
                cursor.terminal_entry = entry
                cursor.operation = replace(cursor.operation, state=PROGRESS_ENTRY_TERMINAL_STATES[entry.entry_type])
                break

        return ApiSuccess(
            OperationPollResult(
                operation=cursor.operation,
                entries=tuple(delivered),
                terminal_entry=cursor.terminal_entry,
            )
        )
