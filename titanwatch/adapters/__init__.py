"""Adapter layer package for Titan server and environment integration boundaries."""

from .docker_provisioner import DockerServiceProvisioner, DockerSshFixture, adapter_run_docker
from .environment_errors import BucketFixtureError, EnvironmentCommandError
from .interfaces import (
	BucketFixturePort,
	EndpointSessionPort,
	EnvironmentProvisionerPort,
	RemoteFixturePort,
	TitanApiPort,
)
from .s3_bucket_fixture import S3BucketFixture
from .ssh_endpoint import SshEndpointAdapter
from .titan_error_codes import TitanErrorCode
from .titan_errors import (
	TitanApiError,
	TitanConnectionError,
	TitanDomainError,
	TitanIllegalArgumentError,
	TitanNoSuchObjectError,
	TitanObjectExistsError,
	TitanServerError,
	TitanTimeoutError,
	titan_error_from_result,
)
from .titan_http_client import TitanHttpClient, adapter_result_unwrap

__all__ = [
	"BucketFixtureError",
	"BucketFixturePort",
	"DockerServiceProvisioner",
	"DockerSshFixture",
	"EndpointSessionPort",
	"EnvironmentCommandError",
	"EnvironmentProvisionerPort",
	"RemoteFixturePort",
	"S3BucketFixture",
	"SshEndpointAdapter",
	"TitanApiError",
	"TitanApiPort",
	"TitanConnectionError",
	"TitanDomainError",
	"TitanErrorCode",
	"TitanHttpClient",
	"TitanIllegalArgumentError",
	"TitanNoSuchObjectError",
	"TitanObjectExistsError",
	"TitanServerError",
	"TitanTimeoutError",
	"adapter_result_unwrap",
	"adapter_run_docker",
	"titan_error_from_result",
]
