"""Request bodies and JSON serializers shared by simulator routers."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from titanwatch.domain import Operation, ProgressEntry, Repository, ResourceStatus


class RepositoryBody(BaseModel):
    """Repository creation body."""

    name: str
    properties: dict[str, Any] = Field(default_factory=dict)


class RemoteBody(BaseModel):
    """Remote creation body."""

    name: str
    provider: str = "nop"
    properties: dict[str, Any] = Field(default_factory=dict)


class VolumeBody(BaseModel):
    """Volume creation body; `readyDelay` and `error` properties shape its status."""

    name: str
    properties: dict[str, Any] = Field(default_factory=dict)


class CommitBody(BaseModel):
    """Commit creation body; `readyDelay` and `error` properties shape its status."""

    id: str
    properties: dict[str, Any] = Field(default_factory=dict)


class RemoteParametersBody(BaseModel):
    """Per-request remote parameters for push and pull."""

    provider: str = "nop"
    properties: dict[str, Any] = Field(default_factory=dict)


def api_serialize_repository(repository: Repository) -> dict[str, Any]:
    return {"name": repository.name, "properties": repository.properties}


def api_serialize_operation(operation: Operation) -> dict[str, Any]:
    return {
        "id": operation.operation_id,
        "type": operation.operation_type.value,
        "commitId": operation.commit_id,
        "remote": operation.remote_name,
        "state": operation.state.value,
    }


def api_serialize_progress_entry(entry: ProgressEntry) -> dict[str, Any]:
    payload: dict[str, Any] = {"id": entry.entry_id, "type": entry.entry_type.value, "message": entry.message}
    if entry.percent is not None:
        payload["percent"] = entry.percent
    return payload


def api_serialize_resource_status(status: ResourceStatus) -> dict[str, Any]:
    return {**status.details, "ready": status.ready, "error": status.error}
