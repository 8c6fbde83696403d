"""Repository, remote, volume and commit endpoints of the API simulator."""

from __future__ import annotations

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from ..simulator_state import SimulatorState
from .payloads import (
    CommitBody,
    RemoteBody,
    RepositoryBody,
    VolumeBody,
    api_serialize_repository,
    api_serialize_resource_status,
)


def api_create_repository_router(state: SimulatorState) -> APIRouter:
    """Create router for repository-scoped objects.

    Args:
        state: Shared simulator state.

    Returns:
        APIRouter: Router exposing `/v1/repositories` endpoints.

    Raises:
        ValueError: Raised when state is None.
    """

    if state is None:
        raise ValueError("state must not be None")

    router = APIRouter(prefix="/v1/repositories", tags=["repositories"])

    @router.get("")
    def api_list_repositories() -> JSONResponse:
        """Return all repositories; also used as the server liveness call."""

        payload = [api_serialize_repository(repository) for repository in state.state_list_repositories()]
        return JSONResponse(content=payload, status_code=status.HTTP_200_OK)

    @router.post("")
    def api_create_repository(body: RepositoryBody) -> JSONResponse:
        repository = state.state_create_repository(body.name, body.properties)
        return JSONResponse(content=api_serialize_repository(repository), status_code=status.HTTP_201_CREATED)

    @router.post("/{repository_name}/remotes")
    def api_create_remote(repository_name: str, body: RemoteBody) -> JSONResponse:
        remote = state.state_create_remote(repository_name, body.name, body.provider, body.properties)
        return JSONResponse(content=remote, status_code=status.HTTP_201_CREATED)

    @router.post("/{repository_name}/volumes")
    def api_create_volume(repository_name: str, body: VolumeBody) -> JSONResponse:
        volume = state.state_create_volume(repository_name, body.name, body.properties)
        return JSONResponse(content=volume, status_code=status.HTTP_201_CREATED)

    @router.get("/{repository_name}/volumes/{volume_name}/status")
    def api_get_volume_status(repository_name: str, volume_name: str) -> JSONResponse:
        """Return volume readiness; a populated `error` is a permanent failure."""

        volume_status = state.state_get_volume_status(repository_name, volume_name)
        return JSONResponse(content=api_serialize_resource_status(volume_status), status_code=status.HTTP_200_OK)

    @router.post("/{repository_name}/commits")
    def api_create_commit(repository_name: str, body: CommitBody) -> JSONResponse:
        commit = state.state_create_commit(repository_name, body.id, body.properties)
        return JSONResponse(content=commit, status_code=status.HTTP_201_CREATED)

    @router.get("/{repository_name}/commits/{commit_id}/status")
    def api_get_commit_status(repository_name: str, commit_id: str) -> JSONResponse:
        commit_status = state.state_get_commit_status(repository_name, commit_id)
        return JSONResponse(content=api_serialize_resource_status(commit_status), status_code=status.HTTP_200_OK)

    return router
