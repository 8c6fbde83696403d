"""Titan domain API adapter implementation over pooled HTTP transport."""

from __future__ import annotations

from typing import Any, Callable, Final, TypeVar

import httpx
import structlog

from titanwatch.domain import (
    ApiDomainError,
    ApiResult,
    ApiSuccess,
    ApiTransportError,
    Operation,
    OperationType,
    ProgressEntry,
    RemoteParameters,
    Repository,
    ResourceStatus,
    domain_parse_operation,
    domain_parse_progress_entry,
    domain_parse_resource_status,
)

from .interfaces import TitanApiPort
from .titan_error_codes import titan_error_code_for_status, titan_error_default_message
from .titan_errors import titan_error_from_result

T = TypeVar("T")
V = TypeVar("V")

logger = structlog.get_logger(__name__)


def adapter_result_unwrap(result: ApiResult[T]) -> T:
    """Return the success value or raise the typed exception for a failure variant.

    Args:
        result: Result of one domain API call.

    Returns:
        T: Success value.

    Raises:
        TitanApiError: Typed subclass matching the failure variant.
    """

    if isinstance(result, ApiSuccess):
        return result.value
    raise titan_error_from_result(result)


class TitanHttpClient(TitanApiPort):
    """Adapter implementation for the Titan `/v1` REST surface."""

    _USER_AGENT: Final[str] = "titan-watch/1.0 (Python/httpx)"

    def __init__(
        self,
        base_url: str = "http://localhost:5001",
        request_timeout_seconds: float = 30.0,
        client: httpx.Client | None = None,
    ):
        """Initialize Titan API adapter.

        Args:
            base_url: Base endpoint URL of the Titan server.
            request_timeout_seconds: HTTP request timeout in seconds.
            client: Optional pre-built HTTP client, used as-is when provided.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when required config values are invalid.
        """

        normalized_base_url = base_url.strip()
        if not normalized_base_url:
            raise ValueError("base_url must not be blank")
        if request_timeout_seconds <= 0:
            raise ValueError("request_timeout_seconds must be > 0")

        self._base_url = normalized_base_url.rstrip("/")
        self._client = client or httpx.Client(
            base_url=self._base_url,
            timeout=request_timeout_seconds,
            headers={"User-Agent": self._USER_AGENT},
        )

    def close(self) -> None:
        """Release pooled transport connections."""

        self._client.close()

    def adapter_base_url(self) -> str:
        """Return configured base URL.

        Returns:
            str: Base URL without trailing slash.

        Raises:
            RuntimeError: This implementation does not raise runtime errors.
        """

        return self._base_url

    def adapter_list_repositories(self) -> ApiResult[list[Repository]]:
        return self._adapter_map(
            self._adapter_send("GET", "/v1/repositories"),
            lambda payload: [_adapter_parse_repository(item) for item in payload],
        )

    def adapter_create_repository(self, repository: Repository) -> ApiResult[Repository]:
        return self._adapter_map(
            self._adapter_send(
                "POST",
                "/v1/repositories",
                json_body={"name": repository.name, "properties": repository.properties},
            ),
            _adapter_parse_repository,
        )

    def adapter_create_remote(
        self,
        repository_name: str,
        remote_name: str,
        provider: str,
        properties: dict[str, Any] | None = None,
    ) -> ApiResult[dict[str, Any]]:
        return self._adapter_send(
            "POST",
            f"/v1/repositories/{repository_name}/remotes",
            json_body={"name": remote_name, "provider": provider, "properties": properties or {}},
        )

    def adapter_create_volume(
        self,
        repository_name: str,
        volume_name: str,
        properties: dict[str, Any] | None = None,
    ) -> ApiResult[dict[str, Any]]:
        return self._adapter_send(
            "POST",
            f"/v1/repositories/{repository_name}/volumes",
            json_body={"name": volume_name, "properties": properties or {}},
        )

    def adapter_get_volume_status(self, repository_name: str, volume_name: str) -> ApiResult[ResourceStatus]:
        return self._adapter_map(
            self._adapter_send("GET", f"/v1/repositories/{repository_name}/volumes/{volume_name}/status"),
            domain_parse_resource_status,
        )

    def adapter_create_commit(
        self,
        repository_name: str,
        commit_id: str,
        properties: dict[str, Any] | None = None,
    ) -> ApiResult[dict[str, Any]]:
        return self._adapter_send(
            "POST",
            f"/v1/repositories/{repository_name}/commits",
            json_body={"id": commit_id, "properties": properties or {}},
        )

    def adapter_get_commit_status(self, repository_name: str, commit_id: str) -> ApiResult[ResourceStatus]:
        return self._adapter_map(
            self._adapter_send("GET", f"/v1/repositories/{repository_name}/commits/{commit_id}/status"),
            domain_parse_resource_status,
        )

    def adapter_start_operation(
        self,
        operation_type: str,
        repository_name: str,
        remote_name: str,
        commit_id: str,
        parameters: RemoteParameters,
        metadata_only: bool = False,
    ) -> ApiResult[Operation]:
        """Start a push or pull operation.

        Args:
            operation_type: `PUSH` or `PULL`.
            repository_name: Repository name.
            remote_name: Remote name.
            commit_id: Commit identifier.
            parameters: Remote parameters including provider properties.
            metadata_only: Transfer only descriptive metadata.

        Returns:
            ApiResult[Operation]: Created operation or failure variant.

        Raises:
            ValueError: Raised when operation type is not a known verb.
        """

        verb = OperationType(operation_type.strip().upper()).value.lower()
        return self._adapter_map(
            self._adapter_send(
                "POST",
                f"/v1/repositories/{repository_name}/remotes/{remote_name}/commits/{commit_id}/{verb}",
                query_parameters={"metadataOnly": "true" if metadata_only else "false"},
                json_body={"provider": parameters.provider, "properties": parameters.properties},
            ),
            domain_parse_operation,
        )

    def adapter_push(
        self,
        repository_name: str,
        remote_name: str,
        commit_id: str,
        parameters: RemoteParameters,
        metadata_only: bool = False,
    ) -> ApiResult[Operation]:
        return self.adapter_start_operation(
            OperationType.PUSH.value, repository_name, remote_name, commit_id, parameters, metadata_only
        )

    def adapter_pull(
        self,
        repository_name: str,
        remote_name: str,
        commit_id: str,
        parameters: RemoteParameters,
        metadata_only: bool = False,
    ) -> ApiResult[Operation]:
        return self.adapter_start_operation(
            OperationType.PULL.value, repository_name, remote_name, commit_id, parameters, metadata_only
        )

    def adapter_get_operation(self, operation_id: str) -> ApiResult[Operation]:
        return self._adapter_map(
            self._adapter_send("GET", f"/v1/operations/{operation_id}"),
            domain_parse_operation,
        )

    def adapter_list_operations(self, repository_name: str | None = None) -> ApiResult[list[Operation]]:
        query_parameters = {"repository": repository_name} if repository_name else None
        return self._adapter_map(
            self._adapter_send("GET", "/v1/operations", query_parameters=query_parameters),
            lambda payload: [domain_parse_operation(item) for item in payload],
        )

    def adapter_get_operation_progress(self, operation_id: str, last_id: int = 0) -> ApiResult[list[ProgressEntry]]:
        return self._adapter_map(
            self._adapter_send(
                "GET",
                f"/v1/operations/{operation_id}/progress",
                query_parameters={"lastId": str(max(int(last_id), 0))},
            ),
            lambda payload: [domain_parse_progress_entry(item) for item in payload],
        )

    def adapter_abort_operation(self, operation_id: str) -> ApiResult[None]:
        result = self._adapter_send("DELETE", f"/v1/operations/{operation_id}")
        if isinstance(result, ApiSuccess):
            return ApiSuccess(None)
        return result

    def _adapter_send(
        self,
        method: str,
        path: str,
        query_parameters: dict[str, str] | None = None,
        json_body: dict[str, Any] | None = None,
    ) -> ApiResult[Any]:
        """Execute one HTTP request and classify the outcome.

        Args:
            method: HTTP method.
            path: Path relative to the base URL.
            query_parameters: Optional query string parameters.
            json_body: Optional JSON request body.

        Returns:
            ApiResult[Any]: Decoded JSON body (or None when empty), structured
                server error, or transport failure.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        try:
            response = self._client.request(method, path, params=query_parameters, json=json_body)
        except httpx.TimeoutException as error:
            logger.debug("titan_request_timed_out", method=method, path=path)
            return ApiTransportError(cause=f"Titan transport request timed out: {error}", timed_out=True)
        except httpx.HTTPError as error:
            logger.debug("titan_request_failed", method=method, path=path, error=str(error))
            return ApiTransportError(cause=f"Titan transport request failed: {error}")

        if response.status_code >= 400:
            return self._adapter_extract_response_error(response)

        if not response.content:
            return ApiSuccess(None)
        try:
            payload = response.json()
        except ValueError:
            return ApiTransportError(cause=f"Titan response for {method} {path} is not valid JSON")

        # Docker volume plugin endpoints report failures inside a successful body.
        if isinstance(payload, dict) and payload.get("Err"):
            return ApiDomainError(
                code=titan_error_code_for_status(500),
                message=str(payload["Err"]),
                status_code=response.status_code,
            )
        return ApiSuccess(payload)

    def _adapter_extract_response_error(self, response: httpx.Response) -> ApiDomainError:
        """Extract normalized error code and message from an error response.

        Args:
            response: HTTP response with status >= 400.

        Returns:
            ApiDomainError: Normalized domain error.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        try:
            payload = response.json()
        except ValueError:
            payload = None

        if not isinstance(payload, dict):
            error_code = titan_error_code_for_status(response.status_code)
            raw_text = response.text.strip()
            return ApiDomainError(
                code=error_code,
                message=raw_text or titan_error_default_message(error_code, f"HTTP {response.status_code}"),
                status_code=response.status_code,
            )

        error_code = str(payload.get("code") or titan_error_code_for_status(response.status_code))
        error_message = str(payload.get("message") or payload.get("Err") or "").strip()
        if not error_message:
            error_message = titan_error_default_message(error_code, f"HTTP {response.status_code}")
        raw_details = payload.get("details")
        return ApiDomainError(
            code=error_code,
            message=error_message,
            details=str(raw_details) if raw_details is not None else None,
            status_code=response.status_code,
        )

    def _adapter_map(self, result: ApiResult[Any], parser: Callable[[Any], V]) -> ApiResult[V]:
        """Apply a payload parser to a success variant.

        Args:
            result: Raw request result.
            parser: Payload-to-model conversion.

        Returns:
            ApiResult[V]: Parsed success, or the original failure variant. A payload
                that does not match the expected shape becomes a transport error.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        if not isinstance(result, ApiSuccess):
            return result
        try:
            return ApiSuccess(parser(result.value))
        except (KeyError, TypeError, ValueError) as error:
            return ApiTransportError(cause=f"Titan response payload is malformed: {error}")


def _adapter_parse_repository(payload: dict[str, Any]) -> Repository:
    return Repository(name=str(payload["name"]), properties=dict(payload.get("properties") or {}))
