"""FastAPI application factory for the in-memory domain API simulator.

The simulator serves the same `/v1` surface the client adapter consumes, so
readiness waits and operation tracking can run end to end without a real
server.
"""

from typing import Callable

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from .routers import api_create_operation_router, api_create_repository_router
from .simulator_state import SimulatorObjectError, SimulatorState


def create_simulator_application(
    state: SimulatorState | None = None,
    clock: Callable[[], float] | None = None,
) -> FastAPI:
    """Create the FastAPI application instance for the simulator.

    Args:
        state: Optional pre-populated state; a fresh one is created when omitted.
        clock: Optional clock for a freshly created state.

    Returns:
        FastAPI: Framework application instance with all simulator routers.

    Raises:
        ValueError: Raised when both state and clock are provided.
    """

    if state is not None and clock is not None:
        raise ValueError("provide either state or clock, not both")
    simulator_state = state or SimulatorState(clock=clock)
    application = FastAPI(title="Titan Watch Simulator")
    application.state.simulator = simulator_state

    @application.exception_handler(SimulatorObjectError)
    def api_simulator_error_handler(_request: Request, error: SimulatorObjectError) -> JSONResponse:
        """Render domain errors as `{code, message, details}` bodies."""

        payload = {"code": error.code, "message": error.message, "details": None}
        return JSONResponse(content=payload, status_code=error.status_code)

    @application.get("/", tags=["foundation"])
    def foundation_index() -> dict[str, str]:
        return {"service": "titan-watch-simulator", "status": "ready"}

    application.include_router(api_create_repository_router(state=simulator_state))
    application.include_router(api_create_operation_router(state=simulator_state))

    return application
