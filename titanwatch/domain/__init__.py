"""Domain models used across application layer boundaries."""

from .models import (
    PROGRESS_ENTRY_TERMINAL_STATES,
    TERMINAL_PROGRESS_ENTRY_TYPES,
    Operation,
    OperationState,
    OperationType,
    ProgressEntry,
    ProgressEntryType,
    RemoteParameters,
    Repository,
    ResourceStatus,
    domain_parse_operation,
    domain_parse_progress_entry,
    domain_parse_resource_status,
)
from .results import ApiDomainError, ApiResult, ApiSuccess, ApiTransportError
from .timeline import domain_build_wait_event

__all__ = [
    "ApiDomainError",
    "ApiResult",
    "ApiSuccess",
    "ApiTransportError",
    "Operation",
    "OperationState",
    "OperationType",
    "PROGRESS_ENTRY_TERMINAL_STATES",
    "ProgressEntry",
    "ProgressEntryType",
    "RemoteParameters",
    "Repository",
    "ResourceStatus",
    "TERMINAL_PROGRESS_ENTRY_TYPES",
    "domain_build_wait_event",
    "domain_parse_operation",
    "domain_parse_progress_entry",
    "domain_parse_resource_status",
]
