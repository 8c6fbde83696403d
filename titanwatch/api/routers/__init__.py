"""API router package for simulator endpoint composition."""

from .operations import api_create_operation_router
from .repositories import api_create_repository_router

__all__ = ["api_create_operation_router", "api_create_repository_router"]
