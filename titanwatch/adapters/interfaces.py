"""Typed interfaces for adapter-layer responsibilities."""

from __future__ import annotations

from typing import Protocol

from titanwatch.domain import (
    ApiResult,
    Operation,
    ProgressEntry,
    RemoteParameters,
    Repository,
    ResourceStatus,
)


class TitanApiPort(Protocol):
    """Port definition for the Titan domain API consumed by waiters and trackers.

    Every method resolves to an `ApiResult` variant instead of raising, so callers
    classify failures by variant.
    """

    def adapter_base_url(self) -> str:
        """Return the API base URL for diagnostics.

        Returns:
            str: Base URL label.

        Raises:
            RuntimeError: Raised when endpoint metadata is unavailable.
        """

    def adapter_list_repositories(self) -> ApiResult[list[Repository]]:
        """List repositories; doubles as the lightweight liveness call.

        Returns:
            ApiResult[list[Repository]]: Repositories or failure variant.
        """

    def adapter_get_operation(self, operation_id: str) -> ApiResult[Operation]:
        """Fetch one operation snapshot.

        Args:
            operation_id: Operation identifier.

        Returns:
            ApiResult[Operation]: Operation snapshot or failure variant.
        """

    def adapter_list_operations(self, repository_name: str | None = None) -> ApiResult[list[Operation]]:
        """List known operations, optionally filtered by repository.

        Args:
            repository_name: Optional repository filter.

        Returns:
            ApiResult[list[Operation]]: Operations or failure variant.
        """

    def adapter_get_operation_progress(self, operation_id: str, last_id: int = 0) -> ApiResult[list[ProgressEntry]]:
        """Fetch progress entries with id greater than `last_id`, ascending.

        Args:
            operation_id: Operation identifier.
            last_id: Highest entry id already consumed; `0` returns the full log.

        Returns:
            ApiResult[list[ProgressEntry]]: New entries or failure variant.
        """

    def adapter_abort_operation(self, operation_id: str) -> ApiResult[None]:
        """Request cancellation of a running operation.

        Args:
            operation_id: Operation identifier.

        Returns:
            ApiResult[None]: Success or failure variant.
        """

    def adapter_get_volume_status(self, repository_name: str, volume_name: str) -> ApiResult[ResourceStatus]:
        """Fetch readiness status of one volume.

        Args:
            repository_name: Repository name.
            volume_name: Volume name.

        Returns:
            ApiResult[ResourceStatus]: Status view or failure variant.
        """

    def adapter_get_commit_status(self, repository_name: str, commit_id: str) -> ApiResult[ResourceStatus]:
        """Fetch readiness status of one commit.

        Args:
            repository_name: Repository name.
            commit_id: Commit identifier.

        Returns:
            ApiResult[ResourceStatus]: Status view or failure variant.
        """

    def adapter_start_operation(
        self,
        operation_type: str,
        repository_name: str,
        remote_name: str,
        commit_id: str,
        parameters: RemoteParameters,
        metadata_only: bool = False,
    ) -> ApiResult[Operation]:
        """Start a push or pull and return the created operation.

        Args:
            operation_type: `PUSH` or `PULL`.
            repository_name: Repository name.
            remote_name: Remote name.
            commit_id: Commit identifier.
            parameters: Remote parameters including provider properties.
            metadata_only: Transfer only descriptive metadata.

        Returns:
            ApiResult[Operation]: Created operation or failure variant.
        """


class EnvironmentProvisionerPort(Protocol):
    """Port definition for starting and stopping the server under observation."""

    def adapter_start(self, parameters: tuple[str, ...] = ()) -> None:
        """Start the server process.

        Args:
            parameters: Context-specific configuration entries.

        Raises:
            RuntimeError: Raised when the server cannot be started.
        """

    def adapter_stop(self, force: bool = False) -> None:
        """Stop the server and release its resources.

        Args:
            force: Ignore individual teardown failures.

        Raises:
            RuntimeError: Raised on teardown failure unless `force` is set.
        """

    def adapter_is_reachable(self) -> bool:
        """Return whether the server process is running.

        Returns:
            bool: True when the server container is running.
        """

    def adapter_fetch_logs(self) -> str:
        """Return recent server log output for diagnostics.

        Returns:
            str: Combined log output.

        Raises:
            RuntimeError: Raised when logs cannot be read.
        """


class EndpointSessionPort(Protocol):
    """Port definition for a remote endpoint that accepts sessions."""

    def adapter_endpoint_label(self) -> str:
        """Return a `host:port` label for diagnostics."""

    def adapter_check_session(self) -> bool:
        """Open and immediately close one session.

        Returns:
            bool: True when the endpoint accepted a session.

        Raises:
            OSError: Raised when the endpoint cannot be reached.
        """


class RemoteFixturePort(Protocol):
    """Port definition for file primitives on a remote test fixture."""

    def adapter_write_file(self, path: str, content: str) -> None:
        """Write text content to a file on the fixture."""

    def adapter_read_file(self, path: str) -> str:
        """Read a text file from the fixture."""

    def adapter_make_directory(self, path: str) -> None:
        """Create a directory owned by the fixture user."""

    def adapter_fetch_logs(self) -> str:
        """Return recent fixture log output for diagnostics."""


class BucketFixturePort(Protocol):
    """Port definition for object primitives on a remote storage bucket fixture."""

    def adapter_write_file(self, path: str, content: str) -> None:
        """Store text content under a key relative to the fixture location."""

    def adapter_read_file(self, path: str) -> str:
        """Read a text object relative to the fixture location."""

    def adapter_clear_bucket(self) -> int:
        """Delete every object under the fixture location.

        Returns:
            int: Number of deleted objects.

        Raises:
            RuntimeError: Raised when listing or deleting objects fails.
        """
