"""Generic bounded-retry readiness poller."""

from __future__ import annotations

import time
from typing import Callable

import structlog

from titanwatch.domain import domain_build_wait_event

from .interfaces import PollPolicy, ProbeOutcome, ProbeResult, WaitResult
from .wait_errors import WaitError, WaitFatalError, WaitTimeoutError

logger = structlog.get_logger(__name__)


class ReadinessPoller:
    """Invoke a probe until it reports ready, fatal, or the attempt budget runs out.

    The probe owns all I/O and classifies its own outcome. The poller only adds
    two rules on top: a probe that raises an `OSError` (connection refused,
    socket timeout) counts as not ready unless it is a nested `WaitError`, and
    no sleep happens after a fatal result or after the final attempt.
    """

    def __init__(
        self,
        policy: PollPolicy,
        label: str = "resource",
        diagnostics_provider: Callable[[], str] | None = None,
        sleep: Callable[[float], None] | None = None,
    ):
        """Initialize poller.

        Args:
            policy: Delay and attempt budget.
            label: Name of the awaited dependency used in errors and logs.
            diagnostics_provider: Optional best-effort source of context attached
                to timeout errors (for example container logs).
            sleep: Optional sleep function, `time.sleep` when omitted.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when label is blank.
        """

        if not label.strip():
            raise ValueError("label must not be blank")
        self._policy = policy
        self._label = label.strip()
        self._diagnostics_provider = diagnostics_provider
        self._sleep = sleep or time.sleep

    def poller_wait(self, probe: Callable[[], ProbeResult]) -> WaitResult:
        """Block until the probe reports ready.

        Args:
            probe: Zero-argument readiness check.

        Returns:
            WaitResult: Attempt count and captured stage timeline.

        Raises:
            WaitFatalError: Raised immediately when the probe reports a fatal outcome.
            WaitTimeoutError: Raised after `max_attempts` not-ready probes.
        """

        stage_timeline: list[dict[str, object]] = [
            domain_build_wait_event(
                self._label,
                "started",
                0,
                delay_seconds=self._policy.delay_seconds,
                max_attempts=self._policy.max_attempts,
            )
        ]
        attempt = 0
        last_not_ready_detail: str | None = None

        while True:
            attempt += 1
            probe_result = self._poller_invoke_probe(probe)

            if probe_result.outcome is ProbeOutcome.READY:
                stage_timeline.append(
                    domain_build_wait_event(self._label, "completed", attempt, detail=probe_result.detail)
                )
                logger.debug("wait_ready", label=self._label, attempts=attempt)
                return WaitResult(label=self._label, attempts=attempt, stage_timeline=stage_timeline)

            if probe_result.outcome is ProbeOutcome.FATAL:
                stage_timeline.append(
                    domain_build_wait_event(
                        self._label,
                        "failed",
                        attempt,
                        error_code=probe_result.error_code,
                        error_message=probe_result.detail,
                    )
                )
                logger.warning("wait_fatal", label=self._label, attempts=attempt, error=probe_result.detail)
                raise WaitFatalError(
                    message=probe_result.detail,
                    label=self._label,
                    attempts=attempt,
                    error_code=probe_result.error_code,
                    stage_timeline=stage_timeline,
                )

            # Not-ready attempts are recorded on detail change only.
            if probe_result.detail != last_not_ready_detail:
                stage_timeline.append(
                    domain_build_wait_event(self._label, "retrying", attempt, detail=probe_result.detail)
                )
                last_not_ready_detail = probe_result.detail
            logger.debug("wait_attempt_not_ready", label=self._label, attempt=attempt, detail=probe_result.detail)

            if self._policy.max_attempts is not None and attempt >= self._policy.max_attempts:
                break
            if self._policy.delay_seconds > 0:
                self._sleep(self._policy.delay_seconds)

        diagnostics = self._poller_collect_diagnostics()
        stage_timeline.append(domain_build_wait_event(self._label, "timed_out", attempt))
        logger.warning("wait_timed_out", label=self._label, attempts=attempt)
        raise WaitTimeoutError(
            label=self._label,
            attempts=attempt,
            diagnostics=diagnostics,
            stage_timeline=stage_timeline,
        )

    def _poller_invoke_probe(self, probe: Callable[[], ProbeResult]) -> ProbeResult:
        """Invoke the probe, mapping transport-level exceptions to not ready.

        Args:
            probe: Zero-argument readiness check.

        Returns:
            ProbeResult: Probe classification.

        Raises:
            WaitError: Nested wait failures raised by the probe propagate unchanged.
            Exception: Non-transport exceptions raised by the probe propagate.
        """

        try:
            return probe()
        except WaitError:
            raise
        except OSError as error:
            return ProbeResult.not_ready(f"transport error: {error}")

    def _poller_collect_diagnostics(self) -> str:
        """Best-effort diagnostics fetch that never raises.

        Returns:
            str: Diagnostic text, or a placeholder describing why none is available.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        if self._diagnostics_provider is None:
            return "no diagnostics available"
        try:
            return self._diagnostics_provider()
        except Exception as error:  # pylint: disable=broad-exception-caught
            logger.warning("wait_diagnostics_unavailable", label=self._label, error=str(error))
            return f"diagnostics unavailable: {error}"
