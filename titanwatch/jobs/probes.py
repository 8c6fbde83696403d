"""Readiness probe builders for the server, remote endpoints and resources."""

from __future__ import annotations

from typing import Callable

from titanwatch.adapters import EndpointSessionPort, TitanApiPort
from titanwatch.domain import ApiDomainError, ApiResult, ApiSuccess, ApiTransportError, ResourceStatus

from .interfaces import ProbeResult


def job_build_service_probe(api: TitanApiPort) -> Callable[[], ProbeResult]:
    """Build a boot probe that treats any failed listing as still starting.

    Args:
        api: Domain API port of the server being started.

    Returns:
        Callable[[], ProbeResult]: Probe that is ready once `ListRepositories` succeeds.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    def _service_probe() -> ProbeResult:
        result = api.adapter_list_repositories()
        if isinstance(result, ApiSuccess):
            return ProbeResult.ready(f"{api.adapter_base_url()} answered")
        return ProbeResult.not_ready(_job_describe_failure(result))

    return _service_probe


def job_build_endpoint_probe(endpoint: EndpointSessionPort) -> Callable[[], ProbeResult]:
    """Build a probe that opens and closes one session on a remote endpoint.

    Args:
        endpoint: Endpoint session collaborator.

    Returns:
        Callable[[], ProbeResult]: Probe that is never fatal.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    def _endpoint_probe() -> ProbeResult:
        label = endpoint.adapter_endpoint_label()
        try:
            accepted = endpoint.adapter_check_session()
        except OSError as error:
            return ProbeResult.not_ready(f"{label} unreachable: {error}")
        if accepted:
            return ProbeResult.ready(f"{label} accepted session")
        return ProbeResult.not_ready(f"{label} rejected session")

    return _endpoint_probe


def job_build_volume_probe(api: TitanApiPort, repository_name: str, volume_name: str) -> Callable[[], ProbeResult]:
    """Build a readiness probe for one volume."""

    return lambda: job_classify_resource_status(api.adapter_get_volume_status(repository_name, volume_name))


def job_build_commit_probe(api: TitanApiPort, repository_name: str, commit_id: str) -> Callable[[], ProbeResult]:
    """Build a readiness probe for one commit."""

    return lambda: job_classify_resource_status(api.adapter_get_commit_status(repository_name, commit_id))


def job_classify_resource_status(result: ApiResult[ResourceStatus]) -> ProbeResult:
    """Classify one resource status response.

    A populated server error wins over the `ready` flag and is surfaced verbatim.
    The server is already running when resources are awaited, so API and
    transport failures are fatal too.

    Args:
        result: Volume or commit status call result.

    Returns:
        ProbeResult: Ready, not ready, or fatal classification.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    if isinstance(result, ApiDomainError):
        return ProbeResult.fatal(result.message, error_code=result.code)
    if not isinstance(result, ApiSuccess):
        return ProbeResult.fatal(result.cause)

    status = result.value
    if status.is_failed:
        return ProbeResult.fatal(status.error)
    if status.ready:
        return ProbeResult.ready("resource ready")
    return ProbeResult.not_ready("resource not ready")


def _job_describe_failure(result: ApiDomainError | ApiTransportError) -> str:
    if isinstance(result, ApiDomainError):
        return f"{result.code}: {result.message}"
    return result.cause
