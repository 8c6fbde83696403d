"""Push, pull and operation tracking endpoints of the API simulator."""

from __future__ import annotations

from fastapi import APIRouter, Query, status
from fastapi.responses import JSONResponse, Response

from titanwatch.domain import OperationType

from ..simulator_state import SimulatorState
from .payloads import RemoteParametersBody, api_serialize_operation, api_serialize_progress_entry


def api_create_operation_router(state: SimulatorState) -> APIRouter:
    """Create router for operation creation, inspection and abort.

    Args:
        state: Shared simulator state.

    Returns:
        APIRouter: Router exposing push/pull and `/v1/operations` endpoints.

    Raises:
        ValueError: Raised when state is None.
    """

    if state is None:
        raise ValueError("state must not be None")

    router = APIRouter(prefix="/v1", tags=["operations"])

    @router.post("/repositories/{repository_name}/remotes/{remote_name}/commits/{commit_id}/push")
    def api_push(
        repository_name: str,
        remote_name: str,
        commit_id: str,
        body: RemoteParametersBody,
        metadata_only: bool = Query(default=False, alias="metadataOnly"),
    ) -> JSONResponse:
        operation = state.state_start_operation(
            OperationType.PUSH, repository_name, remote_name, commit_id, body.provider, body.properties, metadata_only
        )
        return JSONResponse(content=api_serialize_operation(operation), status_code=status.HTTP_200_OK)

    @router.post("/repositories/{repository_name}/remotes/{remote_name}/commits/{commit_id}/pull")
    def api_pull(
        repository_name: str,
        remote_name: str,
        commit_id: str,
        body: RemoteParametersBody,
        metadata_only: bool = Query(default=False, alias="metadataOnly"),
    ) -> JSONResponse:
        operation = state.state_start_operation(
            OperationType.PULL, repository_name, remote_name, commit_id, body.provider, body.properties, metadata_only
        )
        return JSONResponse(content=api_serialize_operation(operation), status_code=status.HTTP_200_OK)

    @router.get("/operations")
    def api_list_operations(repository: str | None = Query(default=None)) -> JSONResponse:
        """List operations not yet retired by a terminal progress read."""

        payload = [api_serialize_operation(operation) for operation in state.state_list_operations(repository)]
        return JSONResponse(content=payload, status_code=status.HTTP_200_OK)

    @router.get("/operations/{operation_id}")
    def api_get_operation(operation_id: str) -> JSONResponse:
        operation = state.state_get_operation(operation_id)
        return JSONResponse(content=api_serialize_operation(operation), status_code=status.HTTP_200_OK)

    @router.get("/operations/{operation_id}/progress")
    def api_get_operation_progress(operation_id: str, last_id: int = Query(default=0, alias="lastId")) -> JSONResponse:
        """Return progress entries past `lastId` in ascending id order.

        Reading the progress of a finished operation removes it, after which
        both the operation and its progress answer `NoSuchObjectException`.
        """

        entries = state.state_get_progress(operation_id, last_id)
        payload = [api_serialize_progress_entry(entry) for entry in entries]
        return JSONResponse(content=payload, status_code=status.HTTP_200_OK)

    @router.delete("/operations/{operation_id}")
    def api_abort_operation(operation_id: str) -> Response:
        state.state_abort_operation(operation_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    return router
