"""Regression tests for the bounded-retry readiness poller."""

from __future__ import annotations

import pytest

from titanwatch.jobs import PollPolicy, ProbeResult, ReadinessPoller, WaitFatalError, WaitTimeoutError
import titanwatch.jobs.readiness_poller as poller_module


class _ScriptedProbe:
    """Probe stub returning scripted results in order, repeating the last one."""

    def __init__(self, results: list[ProbeResult | Exception]):
        """Initialize probe stub.

        Args:
            results: Results to return, or exceptions to raise, per invocation.

        Returns:
            None: Initializer does not return values.

        Raises:
            ValueError: This stub does not raise value errors.
        """

        self._results = list(results)
        self.calls = 0

    def __call__(self) -> ProbeResult:
        self.calls += 1
        result = self._results[0] if len(self._results) == 1 else self._results.pop(0)
        if isinstance(result, Exception):
            raise result
        return result


def test_jobs_readiness_poller_returns_after_first_ready_probe() -> None:
    """Return immediately when the first probe is ready, without sleeping.

    Returns:
        None: Assertions validate attempt count and sleep behavior.

    Raises:
        AssertionError: Raised when the poller sleeps or probes again.
    """

    sleep_calls: list[float] = []
    probe = _ScriptedProbe([ProbeResult.ready("up")])
    poller = ReadinessPoller(PollPolicy(delay_seconds=1.0, max_attempts=5), label="server", sleep=sleep_calls.append)

    wait_result = poller.poller_wait(probe)

    assert wait_result.attempts == 1
    assert wait_result.label == "server"
    assert probe.calls == 1
    assert sleep_calls == []
    assert wait_result.stage_timeline[-1]["status"] == "completed"


def test_jobs_readiness_poller_timeout_uses_exact_attempt_budget() -> None:
    """Stop after exactly `max_attempts` probes and never sleep after the last one.

    Returns:
        None: Assertions validate budget and sleep count.

    Raises:
        AssertionError: Raised when the budget is exceeded.
    """

    sleep_calls: list[float] = []
    probe = _ScriptedProbe([ProbeResult.not_ready("connection refused")])
    poller = ReadinessPoller(PollPolicy(delay_seconds=1.0, max_attempts=3), label="server", sleep=sleep_calls.append)

    with pytest.raises(WaitTimeoutError) as error_info:
        poller.poller_wait(probe)

    assert probe.calls == 3
    assert sleep_calls == [1.0, 1.0]
    assert error_info.value.attempts == 3
    assert error_info.value.label == "server"
    assert "after 3 attempts" in str(error_info.value)
    assert isinstance(error_info.value, TimeoutError)


def test_jobs_readiness_poller_fatal_short_circuits_without_sleep() -> None:
    """Raise the probe message verbatim on the first fatal result.

    Returns:
        None: Assertions validate single probe and zero sleeps.

    Raises:
        AssertionError: Raised when fatal outcome is retried.
    """

    sleep_calls: list[float] = []
    probe = _ScriptedProbe([ProbeResult.fatal("disk full", error_code="CommandException")])
    poller = ReadinessPoller(PollPolicy(delay_seconds=1.0), label="volume foo/v0", sleep=sleep_calls.append)

    with pytest.raises(WaitFatalError) as error_info:
        poller.poller_wait(probe)

    assert str(error_info.value) == "disk full"
    assert error_info.value.error_code == "CommandException"
    assert error_info.value.attempts == 1
    assert probe.calls == 1
    assert sleep_calls == []


def test_jobs_readiness_poller_transport_exception_counts_as_not_ready() -> None:
    """Treat transport exceptions raised by the probe as retryable."""

    probe = _ScriptedProbe(
        [
            ConnectionRefusedError("refused"),
            TimeoutError("slow"),
            ProbeResult.ready(),
        ]
    )
    poller = ReadinessPoller(PollPolicy(delay_seconds=0.0, max_attempts=5), sleep=lambda _seconds: None)

    wait_result = poller.poller_wait(probe)

    assert wait_result.attempts == 3


def test_jobs_readiness_poller_non_transport_exception_propagates() -> None:
    """Propagate programming errors raised by the probe unchanged."""

    probe = _ScriptedProbe([KeyError("missing")])
    poller = ReadinessPoller(PollPolicy(delay_seconds=0.0, max_attempts=5), sleep=lambda _seconds: None)

    with pytest.raises(KeyError):
        poller.poller_wait(probe)


def test_jobs_readiness_poller_nested_wait_timeout_propagates() -> None:
    """Propagate a timeout raised by a wait nested inside the probe.

    Returns:
        None: Assertions validate the nested error is not retried.

    Raises:
        AssertionError: Raised when the nested timeout is treated as not ready.
    """

    nested_timeout = WaitTimeoutError(label="volume foo/v0", attempts=3, diagnostics="no diagnostics available")
    probe = _ScriptedProbe([nested_timeout, ProbeResult.ready()])
    poller = ReadinessPoller(PollPolicy(delay_seconds=0.0, max_attempts=5), sleep=lambda _seconds: None)

    with pytest.raises(WaitTimeoutError) as error_info:
        poller.poller_wait(probe)

    assert error_info.value is nested_timeout
    assert probe.calls == 1


def test_jobs_readiness_poller_attaches_diagnostics_on_timeout() -> None:
    """Attach diagnostics provider output to the timeout error.

    Returns:
        None: Assertions validate diagnostics propagation.

    Raises:
        AssertionError: Raised when diagnostics are missing.
    """

    probe = _ScriptedProbe([ProbeResult.not_ready()])
    poller = ReadinessPoller(
        PollPolicy(delay_seconds=0.0, max_attempts=2),
        label="server",
        diagnostics_provider=lambda: "zpool import failed",
        sleep=lambda _seconds: None,
    )

    with pytest.raises(WaitTimeoutError) as error_info:
        poller.poller_wait(probe)

    assert error_info.value.diagnostics == "zpool import failed"
    assert "zpool import failed" in str(error_info.value)


def test_jobs_readiness_poller_diagnostics_failure_does_not_mask_timeout() -> None:
    """Still raise the timeout when the diagnostics provider itself fails.

    Returns:
        None: Assertions validate timeout type and placeholder diagnostics.

    Raises:
        AssertionError: Raised when the diagnostics failure escapes.
    """

    def _broken_diagnostics() -> str:
        raise RuntimeError("no such container: test-launch")

    probe = _ScriptedProbe([ProbeResult.not_ready()])
    poller = ReadinessPoller(
        PollPolicy(delay_seconds=0.0, max_attempts=1),
        label="server",
        diagnostics_provider=_broken_diagnostics,
        sleep=lambda _seconds: None,
    )

    with pytest.raises(WaitTimeoutError) as error_info:
        poller.poller_wait(probe)

    assert error_info.value.attempts == 1
    assert "no such container" in error_info.value.diagnostics


def test_jobs_readiness_poller_timeline_records_only_transitions(monkeypatch: pytest.MonkeyPatch) -> None:
    """Record one retry event per distinct not-ready detail.

    Args:
        monkeypatch: Pytest monkeypatch fixture.

    Returns:
        None: Assertions validate timeline compaction.

    Raises:
        AssertionError: Raised when repeated details are recorded.
    """

    sleep_calls: list[float] = []
    monkeypatch.setattr(poller_module.time, "sleep", sleep_calls.append)
    probe = _ScriptedProbe(
        [
            ProbeResult.not_ready("starting"),
            ProbeResult.not_ready("starting"),
            ProbeResult.not_ready("importing pool"),
            ProbeResult.ready(),
        ]
    )
    poller = ReadinessPoller(PollPolicy(delay_seconds=0.5, max_attempts=10))

    wait_result = poller.poller_wait(probe)

    retry_events = [event for event in wait_result.stage_timeline if event["status"] == "retrying"]
    assert [event["details"]["detail"] for event in retry_events] == ["starting", "importing pool"]
    assert [event["attempt"] for event in retry_events] == [1, 3]
    assert {event["label"] for event in wait_result.stage_timeline} == {"resource"}
    assert sleep_calls == [0.5, 0.5, 0.5]


def test_jobs_readiness_poller_policy_rejects_invalid_budget() -> None:
    """Reject negative delays and non-positive attempt caps."""

    with pytest.raises(ValueError):
        PollPolicy(delay_seconds=-1.0)
    with pytest.raises(ValueError):
        PollPolicy(delay_seconds=1.0, max_attempts=0)
