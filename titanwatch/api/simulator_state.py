"""In-memory domain state served by the API simulator.

Operations advance lazily: every read compares the injected clock with the
operation's start time and applies the terminal transition once the remote
`delay` has elapsed. No background threads are involved, so a test clock fully
controls operation timing.
"""

from __future__ import annotations

import threading
import time
import uuid
from dataclasses import dataclass, field
from typing import Any, Callable

import structlog

from titanwatch.adapters.titan_error_codes import TitanErrorCode, titan_error_status_code
from titanwatch.domain import (
    Operation,
    OperationState,
    OperationType,
    ProgressEntry,
    ProgressEntryType,
    PROGRESS_ENTRY_TERMINAL_STATES,
    Repository,
    ResourceStatus,
)

logger = structlog.get_logger(__name__)


class SimulatorObjectError(Exception):
    """Domain error answered by the simulator with a structured error body.

    Attributes:
        code: Server error code.
        status_code: HTTP status carrying the error.
    """

    def __init__(self, code: TitanErrorCode, message: str):
        super().__init__(message)
        self.code = code.value
        self.message = message
        self.status_code = titan_error_status_code(code.value)


@dataclass
class _SimulatedResource:
    properties: dict[str, Any]
    created_at: float


@dataclass
class _SimulatedOperation:
    operation_id: str
    operation_type: OperationType
    repository_name: str
    remote_name: str
    commit_id: str
    started_at: float
    delay_seconds: float
    failure_message: str
    metadata_only: bool
    state: OperationState = OperationState.RUNNING
    entries: list[ProgressEntry] = field(default_factory=list)

    def snapshot(self) -> Operation:
        return Operation(
            operation_id=self.operation_id,
            operation_type=self.operation_type,
            commit_id=self.commit_id,
            remote_name=self.remote_name,
            state=self.state,
        )


class SimulatorState:
    """Repositories, remotes, volumes, commits and operations held in memory."""

    def __init__(self, clock: Callable[[], float] | None = None):
        """Initialize empty simulator state.

        Args:
            clock: Monotonic clock in seconds, `time.monotonic` when omitted.

        Returns:
            None: Initializer does not return a value.

        Raises:
            RuntimeError: This initializer does not raise runtime errors.
        """

        self._clock = clock or time.monotonic
        self._lock = threading.RLock()
        self._repositories: dict[str, Repository] = {}
        self._remotes: dict[str, dict[str, dict[str, Any]]] = {}
        self._volumes: dict[str, dict[str, _SimulatedResource]] = {}
        self._commits: dict[str, dict[str, _SimulatedResource]] = {}
        self._operations: dict[str, _SimulatedOperation] = {}

    def state_list_repositories(self) -> list[Repository]:
        with self._lock:
            return list(self._repositories.values())

    def state_create_repository(self, name: str, properties: dict[str, Any]) -> Repository:
        """Create a repository.

        Args:
            name: Repository name.
            properties: Free-form properties.

        Returns:
            Repository: Created repository.

        Raises:
            SimulatorObjectError: Raised when the name is blank or already taken.
        """

        normalized_name = name.strip()
        if not normalized_name:
            raise SimulatorObjectError(TitanErrorCode.ILLEGAL_ARGUMENT, "repository name must not be blank")
        with self._lock:
            if normalized_name in self._repositories:
                raise SimulatorObjectError(
                    TitanErrorCode.OBJECT_EXISTS, f"repository '{normalized_name}' already exists"
                )
            repository = Repository(name=normalized_name, properties=dict(properties))
            self._repositories[normalized_name] = repository
            self._remotes[normalized_name] = {}
            self._volumes[normalized_name] = {}
            self._commits[normalized_name] = {}
            return repository

    def state_create_remote(
        self,
        repository_name: str,
        remote_name: str,
        provider: str,
        properties: dict[str, Any],
    ) -> dict[str, Any]:
        with self._lock:
            remotes = self._state_require_repository(repository_name, self._remotes)
            if remote_name in remotes:
                raise SimulatorObjectError(
                    TitanErrorCode.OBJECT_EXISTS,
                    f"remote '{remote_name}' already exists in repository '{repository_name}'",
                )
            remote = {"name": remote_name, "provider": provider, "properties": dict(properties)}
            remotes[remote_name] = remote
            return remote

    def state_create_volume(self, repository_name: str, volume_name: str, properties: dict[str, Any]) -> dict[str, Any]:
        with self._lock:
            volumes = self._state_require_repository(repository_name, self._volumes)
            if volume_name in volumes:
                raise SimulatorObjectError(
                    TitanErrorCode.OBJECT_EXISTS,
                    f"volume '{volume_name}' already exists in repository '{repository_name}'",
                )
            volumes[volume_name] = _SimulatedResource(properties=dict(properties), created_at=self._clock())
            return {"name": volume_name, "properties": dict(properties)}

    def state_get_volume_status(self, repository_name: str, volume_name: str) -> ResourceStatus:
        with self._lock:
            volumes = self._state_require_repository(repository_name, self._volumes)
            volume = volumes.get(volume_name)
            if volume is None:
                raise SimulatorObjectError(
                    TitanErrorCode.NO_SUCH_OBJECT,
                    f"no such volume '{volume_name}' in repository '{repository_name}'",
                )
            return self._state_resource_status(volume, {"name": volume_name})

    def state_create_commit(self, repository_name: str, commit_id: str, properties: dict[str, Any]) -> dict[str, Any]:
        with self._lock:
            commits = self._state_require_repository(repository_name, self._commits)
            if commit_id in commits:
                raise SimulatorObjectError(
                    TitanErrorCode.OBJECT_EXISTS,
                    f"commit '{commit_id}' already exists in repository '{repository_name}'",
                )
            commits[commit_id] = _SimulatedResource(properties=dict(properties), created_at=self._clock())
            return {"id": commit_id, "properties": dict(properties)}

    def state_get_commit_status(self, repository_name: str, commit_id: str) -> ResourceStatus:
        with self._lock:
            commit = self._state_require_commit(repository_name, commit_id)
            return self._state_resource_status(commit, {"id": commit_id})

    def state_start_operation(
        self,
        operation_type: OperationType,
        repository_name: str,
        remote_name: str,
        commit_id: str,
        provider: str,
        properties: dict[str, Any],
        metadata_only: bool = False,
    ) -> Operation:
        """Validate and start a push or pull.

        Args:
            operation_type: Push or pull.
            repository_name: Repository name.
            remote_name: Remote name.
            commit_id: Commit identifier.
            provider: Provider named by the request parameters.
            properties: Request properties; `delay` (seconds) and `failure`
                (terminal failure message) shape the simulated run.
            metadata_only: Transfer only descriptive metadata.

        Returns:
            Operation: Created operation in `RUNNING` state.

        Raises:
            SimulatorObjectError: Raised for unknown objects, provider mismatch,
                a push of a missing commit, or a pull of an existing commit.
        """

        with self._lock:
            remotes = self._state_require_repository(repository_name, self._remotes)
            remote = remotes.get(remote_name)
            if remote is None:
                raise SimulatorObjectError(
                    TitanErrorCode.NO_SUCH_OBJECT,
                    f"no such remote '{remote_name}' in repository '{repository_name}'",
                )
            if remote["provider"] != provider:
                raise SimulatorObjectError(
                    TitanErrorCode.ILLEGAL_ARGUMENT,
                    f"operation parameters type ({provider}) doesn't match type of remote "
                    f"'{remote_name}' ({remote['provider']})",
                )

            if operation_type is OperationType.PUSH:
                self._state_require_commit(repository_name, commit_id)
                message = f"Pushing {commit_id} to '{remote_name}'"
            else:
                self._state_reject_duplicate_pull(repository_name, commit_id)
                message = f"Pulling {commit_id} from '{remote_name}'"

            try:
                delay_seconds = max(float(properties.get("delay", 0)), 0.0)
            except (TypeError, ValueError) as error:
                raise SimulatorObjectError(
                    TitanErrorCode.ILLEGAL_ARGUMENT, f"invalid delay property: {properties.get('delay')!r}"
                ) from error

            record = _SimulatedOperation(
                operation_id=str(uuid.uuid4()),
                operation_type=operation_type,
                repository_name=repository_name,
                remote_name=remote_name,
                commit_id=commit_id,
                started_at=self._clock(),
                delay_seconds=delay_seconds,
                failure_message=str(properties.get("failure") or ""),
                metadata_only=metadata_only,
            )
            self._state_append_entry(record, ProgressEntryType.MESSAGE, message)
            self._operations[record.operation_id] = record
            logger.info(
                "simulator_operation_started",
                operation_id=record.operation_id,
                operation_type=operation_type.value,
                repository=repository_name,
                delay_seconds=delay_seconds,
            )
            return record.snapshot()

    def state_list_operations(self, repository_name: str | None = None) -> list[Operation]:
        with self._lock:
            if repository_name is not None:
                self._state_require_repository(repository_name, self._remotes)
            snapshots = []
            for record in self._operations.values():
                if repository_name is not None and record.repository_name != repository_name:
                    continue
                self._state_advance(record)
                snapshots.append(record.snapshot())
            return snapshots

    def state_get_operation(self, operation_id: str) -> Operation:
        with self._lock:
            record = self._state_require_operation(operation_id)
            self._state_advance(record)
            return record.snapshot()

    def state_get_progress(self, operation_id: str, last_id: int = 0) -> list[ProgressEntry]:
        """Return entries past `last_id`; reading a finished operation retires it.

        Args:
            operation_id: Operation identifier.
            last_id: Highest entry id already consumed by the caller.

        Returns:
            list[ProgressEntry]: Entries with id greater than `last_id`, ascending.

        Raises:
            SimulatorObjectError: Raised when the operation is unknown or retired.
        """

        with self._lock:
            record = self._state_require_operation(operation_id)
            self._state_advance(record)
            entries = [entry for entry in record.entries if entry.entry_id > last_id]
            if record.state.is_terminal:
                del self._operations[operation_id]
                logger.info("simulator_operation_retired", operation_id=operation_id, state=record.state.value)
            return entries

    def state_abort_operation(self, operation_id: str) -> None:
        """Abort a running operation; aborting a finished one changes nothing.

        Args:
            operation_id: Operation identifier.

        Returns:
            None: Appends the abort entry as side effect.

        Raises:
            SimulatorObjectError: Raised when the operation is unknown or retired.
        """

        with self._lock:
            record = self._state_require_operation(operation_id)
            self._state_advance(record)
            if record.state.is_terminal:
                return
            self._state_append_entry(record, ProgressEntryType.ABORT, "")
            logger.info("simulator_operation_aborted", operation_id=operation_id)

    def _state_advance(self, record: _SimulatedOperation) -> None:
        if record.state.is_terminal or self._clock() - record.started_at < record.delay_seconds:
            return
        if record.failure_message:
            self._state_append_entry(record, ProgressEntryType.FAILED, record.failure_message)
            return
        self._state_append_entry(record, ProgressEntryType.COMPLETE, "")
        if record.operation_type is OperationType.PULL and not record.metadata_only:
            self._commits[record.repository_name].setdefault(
                record.commit_id,
                _SimulatedResource(properties={}, created_at=self._clock()),
            )

    def _state_append_entry(self, record: _SimulatedOperation, entry_type: ProgressEntryType, message: str) -> None:
        # Entry and state change together so a terminal state is never visible without its entry.
        record.entries.append(ProgressEntry(entry_id=len(record.entries) + 1, entry_type=entry_type, message=message))
        record.state = PROGRESS_ENTRY_TERMINAL_STATES.get(entry_type, OperationState.RUNNING)

    def _state_resource_status(self, resource: _SimulatedResource, identity: dict[str, Any]) -> ResourceStatus:
        try:
            ready_delay = float(resource.properties.get("readyDelay", 0))
        except (TypeError, ValueError):
            ready_delay = 0.0
        return ResourceStatus(
            ready=self._clock() - resource.created_at >= ready_delay,
            error=str(resource.properties.get("error") or ""),
            details={**identity, "properties": dict(resource.properties)},
        )

    def _state_require_repository(self, repository_name: str, index: dict[str, Any]) -> Any:
        if repository_name not in self._repositories:
            raise SimulatorObjectError(TitanErrorCode.NO_SUCH_OBJECT, f"no such repository '{repository_name}'")
        return index[repository_name]

    def _state_require_commit(self, repository_name: str, commit_id: str) -> _SimulatedResource:
        commits = self._state_require_repository(repository_name, self._commits)
        commit = commits.get(commit_id)
        if commit is None:
            raise SimulatorObjectError(
                TitanErrorCode.NO_SUCH_OBJECT,
                f"no such commit '{commit_id}' in repository '{repository_name}'",
            )
        return commit

    def _state_require_operation(self, operation_id: str) -> _SimulatedOperation:
        record = self._operations.get(operation_id)
        if record is None:
            raise SimulatorObjectError(TitanErrorCode.NO_SUCH_OBJECT, f"no such operation '{operation_id}'")
        return record

    def _state_reject_duplicate_pull(self, repository_name: str, commit_id: str) -> None:
        for record in self._operations.values():
            self._state_advance(record)
            if (
                record.repository_name == repository_name
                and record.operation_type is OperationType.PULL
                and record.commit_id == commit_id
                and record.state is OperationState.RUNNING
            ):
                raise SimulatorObjectError(
                    TitanErrorCode.OBJECT_EXISTS,
                    f"Pull operation {record.operation_id} already in progress for commit {commit_id}",
                )
        if commit_id in self._commits[repository_name]:
            raise SimulatorObjectError(
                TitanErrorCode.OBJECT_EXISTS,
                f"commit '{commit_id}' already exists in repository '{repository_name}'",
            )
