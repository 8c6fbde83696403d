"""API layer package for the FastAPI domain API simulator."""

from .application import create_simulator_application
from .simulator_state import SimulatorObjectError, SimulatorState

__all__ = ["SimulatorObjectError", "SimulatorState", "create_simulator_application"]
