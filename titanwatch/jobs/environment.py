"""Job-layer readiness waits for the server under test and its collaborators."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

import structlog

from titanwatch.adapters import EndpointSessionPort, EnvironmentProvisionerPort, RemoteFixturePort, TitanApiPort
from titanwatch.config import WatchSettings

from .interfaces import (
    ENDPOINT_POLICY,
    RESOURCE_POLICY,
    SERVICE_BOOT_POLICY,
    PollPolicy,
    ProbeResult,
    WaitResult,
)
from .probes import (
    job_build_commit_probe,
    job_build_endpoint_probe,
    job_build_service_probe,
    job_build_volume_probe,
)
from .readiness_poller import ReadinessPoller

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class EnvironmentWaitPolicies:
    """Per-dependency retry budgets.

    Attributes:
        service: Server boot wait budget.
        endpoint: Remote endpoint wait budget.
        resource: Volume and commit readiness budget.
    """

    service: PollPolicy = SERVICE_BOOT_POLICY
    endpoint: PollPolicy = ENDPOINT_POLICY
    resource: PollPolicy = RESOURCE_POLICY


def job_build_policies_from_settings(settings: WatchSettings) -> EnvironmentWaitPolicies:
    """Build wait budgets from validated settings.

    Args:
        settings: Runtime settings.

    Returns:
        EnvironmentWaitPolicies: Budgets for each dependency.

    Raises:
        ValueError: Raised when a configured budget is invalid.
    """

    return EnvironmentWaitPolicies(
        service=PollPolicy(settings.service_wait_delay_seconds, settings.service_wait_max_attempts),
        endpoint=PollPolicy(settings.endpoint_wait_delay_seconds, settings.endpoint_wait_max_attempts),
        resource=PollPolicy(settings.resource_wait_delay_seconds, settings.resource_wait_max_attempts),
    )


class EnvironmentReadinessService:
    """Block until the server, its remote endpoints and its resources are usable.

    Collaborators other than the API are optional; waits that need a missing
    collaborator raise `ValueError`.
    """

    def __init__(
        self,
        api: TitanApiPort,
        policies: EnvironmentWaitPolicies | None = None,
        provisioner: EnvironmentProvisionerPort | None = None,
        endpoint: EndpointSessionPort | None = None,
        ssh_fixture: RemoteFixturePort | None = None,
        sleep: Callable[[float], None] | None = None,
    ):
        """Initialize readiness service.

        Args:
            api: Domain API port.
            policies: Retry budgets, defaults when omitted.
            provisioner: Server provisioner used for setup and boot diagnostics.
            endpoint: Remote SSH endpoint session collaborator.
            ssh_fixture: SSH fixture providing endpoint diagnostics.
            sleep: Optional sleep function shared by every wait.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when api is None.
        """

        if api is None:
            raise ValueError("api must not be None")
        self._api = api
        self._policies = policies or EnvironmentWaitPolicies()
        self._provisioner = provisioner
        self._endpoint = endpoint
        self._ssh_fixture = ssh_fixture
        self._sleep = sleep

    def job_wait_for_server(self) -> WaitResult:
        """Wait until the server answers `ListRepositories`.

        Returns:
            WaitResult: Successful wait metadata.

        Raises:
            WaitTimeoutError: Raised after the boot budget with server logs attached.
        """

        diagnostics_provider = self._provisioner.adapter_fetch_logs if self._provisioner is not None else None
        return self._job_wait(
            label=f"server at {self._api.adapter_base_url()}",
            policy=self._policies.service,
            probe=job_build_service_probe(self._api),
            diagnostics_provider=diagnostics_provider,
        )

    def job_wait_for_endpoint(self) -> WaitResult:
        """Wait until the remote SSH endpoint accepts a session.

        Returns:
            WaitResult: Successful wait metadata.

        Raises:
            ValueError: Raised when no endpoint collaborator is configured.
            WaitTimeoutError: Raised after the endpoint budget with fixture logs attached.
        """

        if self._endpoint is None:
            raise ValueError("endpoint collaborator is not configured")
        diagnostics_provider = self._ssh_fixture.adapter_fetch_logs if self._ssh_fixture is not None else None
        return self._job_wait(
            label=f"ssh endpoint {self._endpoint.adapter_endpoint_label()}",
            policy=self._policies.endpoint,
            probe=job_build_endpoint_probe(self._endpoint),
            diagnostics_provider=diagnostics_provider,
        )

    def job_wait_for_volume(self, repository_name: str, volume_name: str) -> WaitResult:
        """Wait until a volume reports ready.

        Args:
            repository_name: Repository name.
            volume_name: Volume name.

        Returns:
            WaitResult: Successful wait metadata.

        Raises:
            WaitFatalError: Raised on a server-reported volume error, verbatim.
        """

        return self._job_wait(
            label=f"volume {repository_name}/{volume_name}",
            policy=self._policies.resource,
            probe=job_build_volume_probe(self._api, repository_name, volume_name),
        )

    def job_wait_for_commit(self, repository_name: str, commit_id: str) -> WaitResult:
        """Wait until a commit reports ready.

        Args:
            repository_name: Repository name.
            commit_id: Commit identifier.

        Returns:
            WaitResult: Successful wait metadata.

        Raises:
            WaitFatalError: Raised on a server-reported commit error, verbatim.
        """

        return self._job_wait(
            label=f"commit {repository_name}/{commit_id}",
            policy=self._policies.resource,
            probe=job_build_commit_probe(self._api, repository_name, commit_id),
        )

    def job_setup_server(self, parameters: tuple[str, ...] = ()) -> WaitResult:
        """Tear down leftovers, start a fresh server and wait for it to boot.

        Args:
            parameters: Context-specific configuration forwarded to the provisioner.

        Returns:
            WaitResult: Server boot wait metadata.

        Raises:
            ValueError: Raised when no provisioner is configured.
            EnvironmentCommandError: Raised when the server cannot be started.
            WaitTimeoutError: Raised when the server never answers.
        """

        if self._provisioner is None:
            raise ValueError("provisioner collaborator is not configured")
        self._provisioner.adapter_stop(force=True)
        self._provisioner.adapter_start(parameters)
        return self.job_wait_for_server()

    def _job_wait(
        self,
        label: str,
        policy: PollPolicy,
        probe: Callable[[], ProbeResult],
        diagnostics_provider: Callable[[], str] | None = None,
    ) -> WaitResult:
        poller = ReadinessPoller(
            policy=policy,
            label=label,
            diagnostics_provider=diagnostics_provider,
            sleep=self._sleep,
        )
        wait_result = poller.poller_wait(probe)
        logger.info("environment_ready", label=label, attempts=wait_result.attempts)
        return wait_result
