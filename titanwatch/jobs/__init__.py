"""Job layer package for readiness waits and operation tracking."""

from .environment import EnvironmentReadinessService, EnvironmentWaitPolicies, job_build_policies_from_settings
from .interfaces import (
	ENDPOINT_POLICY,
	OPERATION_POLL_POLICY,
	RESOURCE_POLICY,
	SERVICE_BOOT_POLICY,
	OperationCompletion,
	OperationOutcome,
	OperationPollResult,
	PollPolicy,
	ProbeOutcome,
	ProbeResult,
	WaitResult,
)
from .operation_tracker import OperationTracker
from .probes import (
	job_build_commit_probe,
	job_build_endpoint_probe,
	job_build_service_probe,
	job_build_volume_probe,
	job_classify_resource_status,
)
from .readiness_poller import ReadinessPoller
from .wait_errors import (
	OperationAbortedError,
	OperationFailedError,
	WaitError,
	WaitFatalError,
	WaitTimeoutError,
)

__all__ = [
	"ENDPOINT_POLICY",
	"OPERATION_POLL_POLICY",
	"RESOURCE_POLICY",
	"SERVICE_BOOT_POLICY",
	"EnvironmentReadinessService",
	"EnvironmentWaitPolicies",
	"OperationAbortedError",
	"OperationCompletion",
	"OperationFailedError",
	"OperationOutcome",
	"OperationPollResult",
	"OperationTracker",
	"PollPolicy",
	"ProbeOutcome",
	"ProbeResult",
	"ReadinessPoller",
	"WaitError",
	"WaitFatalError",
	"WaitResult",
	"WaitTimeoutError",
	"job_build_commit_probe",
	"job_build_endpoint_probe",
	"job_build_policies_from_settings",
	"job_build_service_probe",
	"job_build_volume_probe",
	"job_classify_resource_status",
]
