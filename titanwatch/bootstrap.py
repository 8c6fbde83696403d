"""Application bootstrap wiring for startup validation and dependency assembly."""

from fastapi import FastAPI

from titanwatch.adapters import (
    DockerServiceProvisioner,
    DockerSshFixture,
    S3BucketFixture,
    SshEndpointAdapter,
    TitanHttpClient,
)
from titanwatch.api import create_simulator_application
from titanwatch.config import WatchSettings, config_configure_logging, config_load_settings
from titanwatch.jobs import (
    EnvironmentReadinessService,
    OperationTracker,
    PollPolicy,
    job_build_policies_from_settings,
)


def bootstrap_load_settings() -> WatchSettings:
    """Load settings and configure logging once for the process.

    Returns:
        WatchSettings: Validated runtime settings.

    Raises:
        SettingsLoadError: Raised when startup configuration validation fails.
    """

    settings = config_load_settings()
    config_configure_logging(settings)
    return settings


def bootstrap_create_api_client(settings: WatchSettings) -> TitanHttpClient:
    """Build the domain API client from settings."""

    return TitanHttpClient(
        base_url=settings.titan_base_url,
        request_timeout_seconds=settings.titan_request_timeout_seconds,
    )


def bootstrap_create_readiness_service(
    settings: WatchSettings,
    api_client: TitanHttpClient,
) -> EnvironmentReadinessService:
    """Assemble the readiness service with docker-backed diagnostics collaborators.

    Args:
        settings: Validated runtime settings.
        api_client: Domain API client of the server being awaited.

    Returns:
        EnvironmentReadinessService: Fully wired readiness service.

    Raises:
        ValueError: Raised when configured values are invalid.
    """

    provisioner = DockerServiceProvisioner(
        identity=settings.titan_identity,
        image=settings.titan_image,
        port=settings.titan_port,
        context=settings.titan_context,
    )
    ssh_fixture = DockerSshFixture(
        identity=settings.titan_identity,
        port=settings.ssh_port,
        container_suffix=settings.ssh_container_suffix,
    )
    endpoint = SshEndpointAdapter(host=settings.ssh_host, port=settings.ssh_port)
    return EnvironmentReadinessService(
        api=api_client,
        policies=job_build_policies_from_settings(settings),
        provisioner=provisioner,
        endpoint=endpoint,
        ssh_fixture=ssh_fixture,
    )


def bootstrap_create_operation_tracker(settings: WatchSettings, api_client: TitanHttpClient) -> OperationTracker:
    """Build an operation tracker using the configured poll budget."""

    policy = PollPolicy(settings.operation_poll_delay_seconds, settings.operation_poll_max_attempts)
    return OperationTracker(api=api_client, policy=policy)


def bootstrap_create_simulator_application() -> FastAPI:
    """Assemble the simulator application.

    Returns:
        FastAPI: Simulator application backed by fresh in-memory state.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    return create_simulator_application()


def bootstrap_create_bucket_fixture(settings: WatchSettings, location: str | None = None) -> S3BucketFixture:
    """Build the object storage fixture for an explicit or configured location.

    Args:
        settings: Validated runtime settings.
        location: Optional `bucket/path` overriding `bucket_location`.

    Returns:
        S3BucketFixture: Fixture bound to the resolved location.

    Raises:
        ValueError: Raised when no bucket location is available.
    """

    resolved_location = location or settings.bucket_location
    if not resolved_location:
        raise ValueError("bucket location is required: pass one or set BUCKET_LOCATION")
    return S3BucketFixture(
        location=resolved_location,
        region=settings.bucket_region,
        endpoint_url=settings.bucket_endpoint_url,
    )
