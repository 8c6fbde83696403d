"""Regression tests for operation progress tracking, completion and abort."""

from __future__ import annotations

import pytest

from titanwatch.adapters import TitanNoSuchObjectError
from titanwatch.domain import (
    ApiDomainError,
    ApiResult,
    ApiSuccess,
    ApiTransportError,
    Operation,
    OperationState,
    OperationType,
    ProgressEntry,
    ProgressEntryType,
)
from titanwatch.jobs import (
    OperationAbortedError,
    OperationFailedError,
    OperationOutcome,
    OperationTracker,
    PollPolicy,
    WaitFatalError,
    WaitTimeoutError,
)


class _OperationApiStub:
    """Scripted domain API stub serving one operation.

    Each poll consumes the next scripted step. A step is the operation state the
    server reports plus the full progress log at that moment; the stub filters the
    log by `last_id` the way the server does unless `ignore_last_id` is set.
    """

    def __init__(
        self,
        steps: list[tuple[OperationState, list[ProgressEntry]]],
        ignore_last_id: bool = False,
    ):
        """Initialize API stub.

        Args:
            steps: Scripted `(state, log)` snapshots, the last one repeating.
            ignore_last_id: Return the whole log regardless of `last_id`.

        Returns:
            None: Initializer does not return values.

        Raises:
            ValueError: This stub does not raise value errors.
        """

        self._steps = list(steps)
        self._ignore_last_id = ignore_last_id
        self._current = self._steps[0]
        self.progress_requests: list[int] = []
        self.abort_requests = 0
        self.abort_result: ApiResult[None] = ApiSuccess(None)
        self.operation_failure: ApiResult[Operation] | None = None

    def adapter_base_url(self) -> str:
        return "http://titan.test"

    def adapter_get_operation(self, operation_id: str) -> ApiResult[Operation]:
        if self.operation_failure is not None:
            return self.operation_failure
        self._current = self._steps.pop(0) if len(self._steps) > 1 else self._steps[0]
        return ApiSuccess(
            Operation(
                operation_id=operation_id,
                operation_type=OperationType.PUSH,
                commit_id="id",
                remote_name="b",
                state=self._current[0],
            )
        )

    def adapter_get_operation_progress(self, operation_id: str, last_id: int = 0) -> ApiResult[list[ProgressEntry]]:
        _ = operation_id
        self.progress_requests.append(last_id)
        entries = self._current[1]
        if self._ignore_last_id:
            return ApiSuccess(list(entries))
        return ApiSuccess([entry for entry in entries if entry.entry_id > last_id])

    def adapter_abort_operation(self, operation_id: str) -> ApiResult[None]:
        _ = operation_id
        self.abort_requests += 1
        return self.abort_result


def _entry(entry_id: int, entry_type: ProgressEntryType, message: str = "") -> ProgressEntry:
    return ProgressEntry(entry_id=entry_id, entry_type=entry_type, message=message)


_PUSH_MESSAGE = _entry(1, ProgressEntryType.MESSAGE, "Pushing id to 'b'")


def _tracker(api: _OperationApiStub, max_attempts: int | None = None) -> OperationTracker:
    return OperationTracker(api=api, policy=PollPolicy(0.5, max_attempts), sleep=lambda _seconds: None)


def test_jobs_operation_tracker_push_completes_with_message_then_complete() -> None:
    """Deliver the push message then the terminal COMPLETE entry.

    Returns:
        None: Assertions validate outcome and delivered entries.

    Raises:
        AssertionError: Raised when completion classification is incorrect.
    """

    api = _OperationApiStub(
        [
            (OperationState.RUNNING, [_PUSH_MESSAGE]),
            (OperationState.COMPLETE, [_PUSH_MESSAGE, _entry(2, ProgressEntryType.COMPLETE)]),
        ]
    )

    completion = _tracker(api).tracker_await_completion("op-1")

    assert completion.outcome is OperationOutcome.COMPLETE
    assert completion.succeeded
    assert [entry.entry_type for entry in completion.entries] == [
        ProgressEntryType.MESSAGE,
        ProgressEntryType.COMPLETE,
    ]
    assert completion.entries[0].message == "Pushing id to 'b'"
    assert api.progress_requests == [0, 1]


def test_jobs_operation_tracker_cursor_never_redelivers_entries() -> None:
    """Drop entries at or below the cursor even when the server resends them.

    Returns:
        None: Assertions validate monotonic delivery.

    Raises:
        AssertionError: Raised when an entry is delivered twice.
    """

    api = _OperationApiStub(
        [
            (OperationState.RUNNING, [_PUSH_MESSAGE, _entry(2, ProgressEntryType.START, "volume v0")]),
            (
                OperationState.RUNNING,
                [_PUSH_MESSAGE, _entry(2, ProgressEntryType.START, "volume v0"), _entry(3, ProgressEntryType.END)],
            ),
        ],
        ignore_last_id=True,
    )
    tracker = _tracker(api)

    first_poll = tracker.tracker_poll("op-1")
    second_poll = tracker.tracker_poll("op-1")

    assert [entry.entry_id for entry in first_poll.entries] == [1, 2]
    assert [entry.entry_id for entry in second_poll.entries] == [3]
    assert tracker.tracker_cursor("op-1") == 3


def test_jobs_operation_tracker_stops_delivery_at_terminal_entry() -> None:
    """Treat the first terminal entry as the last one ever delivered."""

    api = _OperationApiStub(
        [
            (
                OperationState.ABORTED,
                [
                    _PUSH_MESSAGE,
                    _entry(3, ProgressEntryType.ABORT),
                    _entry(2, ProgressEntryType.PROGRESS, "50%"),
                    _entry(4, ProgressEntryType.MESSAGE, "late"),
                ],
            ),
        ],
        ignore_last_id=True,
    )
    tracker = _tracker(api)

    first_poll = tracker.tracker_poll("op-1")
    second_poll = tracker.tracker_poll("op-1")

    assert [entry.entry_id for entry in first_poll.entries] == [1, 2, 3]
    assert first_poll.terminal_entry is not None
    assert first_poll.terminal_entry.entry_type is ProgressEntryType.ABORT
    assert second_poll.entries == ()
    assert tracker.tracker_cursor("op-1") == 3


def test_jobs_operation_tracker_answers_from_cache_after_terminal_entry() -> None:
    """Serve polls and waits from the delivered terminal entry once the server retired the operation.

    Returns:
        None: Assertions validate cached outcome and absence of server calls.

    Raises:
        AssertionError: Raised when the tracker contacts the server again.
    """

    api = _OperationApiStub([(OperationState.RUNNING, [_PUSH_MESSAGE, _entry(2, ProgressEntryType.COMPLETE)])])
    tracker = _tracker(api)
    first_poll = tracker.tracker_poll("op-1")
    api.operation_failure = ApiDomainError(code="NoSuchObjectException", message="no such operation", status_code=404)

    second_poll = tracker.tracker_poll("op-1")
    completion = tracker.tracker_await_completion("op-1")

    assert first_poll.operation.state is OperationState.COMPLETE
    assert second_poll.entries == ()
    assert second_poll.terminal_entry == _entry(2, ProgressEntryType.COMPLETE)
    assert completion.outcome is OperationOutcome.COMPLETE
    assert completion.operation.state is OperationState.COMPLETE
    assert completion.attempts == 1
    assert api.progress_requests == [0]


def test_jobs_operation_tracker_reset_cursor_replays_log() -> None:
    """Replay the log from the beginning after an explicit cursor reset."""

    api = _OperationApiStub([(OperationState.RUNNING, [_PUSH_MESSAGE])])
    tracker = _tracker(api)
    tracker.tracker_poll("op-1")

    tracker.tracker_reset_cursor("op-1")
    replay = tracker.tracker_poll("op-1")

    assert [entry.entry_id for entry in replay.entries] == [1]
    assert api.progress_requests == [0, 0]


def test_jobs_operation_tracker_aborted_is_not_an_error_by_default() -> None:
    """Return an aborted completion unless the caller opts into raising.

    Returns:
        None: Assertions validate both abort classifications.

    Raises:
        AssertionError: Raised when abort classification is incorrect.
    """

    steps = [(OperationState.ABORTED, [_PUSH_MESSAGE, _entry(2, ProgressEntryType.ABORT)])]

    completion = _tracker(_OperationApiStub(list(steps))).tracker_await_completion("op-1")

    assert completion.outcome is OperationOutcome.ABORTED
    assert completion.aborted
    assert not completion.succeeded

    with pytest.raises(OperationAbortedError) as error_info:
        _tracker(_OperationApiStub(list(steps))).tracker_await_completion("op-1", abort_is_error=True)
    assert error_info.value.operation_id == "op-1"


def test_jobs_operation_tracker_failed_raises_with_verbatim_message() -> None:
    """Raise on FAILED with the terminal progress message unaltered.

    Returns:
        None: Assertions validate failure message and accumulated entries.

    Raises:
        AssertionError: Raised when failure is not surfaced.
    """

    api = _OperationApiStub(
        [
            (OperationState.RUNNING, [_PUSH_MESSAGE]),
            (OperationState.FAILED, [_PUSH_MESSAGE, _entry(2, ProgressEntryType.FAILED, "remote unreachable")]),
        ]
    )

    with pytest.raises(OperationFailedError) as error_info:
        _tracker(api).tracker_await_completion("op-1")

    assert error_info.value.failure_message == "remote unreachable"
    assert str(error_info.value) == "operation failed: remote unreachable"
    assert len(error_info.value.entries) == 2


def test_jobs_operation_tracker_terminal_state_without_entry_is_authoritative() -> None:
    """Finish on a terminal state even when no terminal entry is visible."""

    api = _OperationApiStub([(OperationState.COMPLETE, [_PUSH_MESSAGE])])

    completion = _tracker(api).tracker_await_completion("op-1")

    assert completion.outcome is OperationOutcome.COMPLETE
    assert completion.attempts == 1


def test_jobs_operation_tracker_unknown_operation_is_fatal() -> None:
    """Fail immediately when the operation id is unknown to the server."""

    api = _OperationApiStub([(OperationState.RUNNING, [])])
    api.operation_failure = ApiDomainError(
        code="NoSuchObjectException",
        message="no such operation 'op-x'",
        status_code=404,
    )

    with pytest.raises(WaitFatalError) as error_info:
        _tracker(api).tracker_await_completion("op-x")

    assert error_info.value.error_code == "NoSuchObjectException"
    assert error_info.value.attempts == 1


def test_jobs_operation_tracker_budget_exhaustion_does_not_abort() -> None:
    """Time out after the poll budget without sending an abort request."""

    api = _OperationApiStub([(OperationState.RUNNING, [_PUSH_MESSAGE])])

    with pytest.raises(WaitTimeoutError):
        _tracker(api, max_attempts=3).tracker_await_completion("op-1")

    assert api.abort_requests == 0
    assert api.progress_requests == [0, 1, 1]


def test_jobs_operation_tracker_abort_running_operation_sends_request() -> None:
    """Send exactly one abort request for a running operation."""

    api = _OperationApiStub([(OperationState.RUNNING, [_PUSH_MESSAGE])])

    _tracker(api).tracker_abort("op-1")

    assert api.abort_requests == 1


def test_jobs_operation_tracker_abort_is_noop_after_terminal_state() -> None:
    """Skip the abort request when the operation already finished.

    Returns:
        None: Assertions validate idempotent abort.

    Raises:
        AssertionError: Raised when a terminal operation is aborted again.
    """

    api = _OperationApiStub([(OperationState.COMPLETE, [_PUSH_MESSAGE, _entry(2, ProgressEntryType.COMPLETE)])])
    tracker = _tracker(api)

    tracker.tracker_abort("op-1")
    tracker.tracker_await_completion("op-1")
    api.operation_failure = ApiDomainError(code="NoSuchObjectException", message="retired", status_code=404)
    tracker.tracker_abort("op-1")

    assert api.abort_requests == 0


def test_jobs_operation_tracker_abort_tolerates_completion_race() -> None:
    """Swallow an abort failure when the operation finished in the meantime."""

    api = _OperationApiStub(
        [
            (OperationState.RUNNING, [_PUSH_MESSAGE]),
            (OperationState.COMPLETE, [_PUSH_MESSAGE, _entry(2, ProgressEntryType.COMPLETE)]),
        ]
    )
    api.abort_result = ApiTransportError(cause="connection reset")

    _tracker(api).tracker_abort("op-1")

    assert api.abort_requests == 1


def test_jobs_operation_tracker_abort_unknown_operation_raises() -> None:
    """Raise the typed not-found error when aborting an unknown operation."""

    api = _OperationApiStub([(OperationState.RUNNING, [])])
    api.operation_failure = ApiDomainError(code="NoSuchObjectException", message="no such operation", status_code=404)

    with pytest.raises(TitanNoSuchObjectError):
        _tracker(api).tracker_abort("op-x")
