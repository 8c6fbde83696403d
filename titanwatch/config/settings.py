"""Typed runtime settings with dotenv support and startup validation."""

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class SettingsLoadError(RuntimeError):
    """Raised when runtime settings cannot be loaded or validated."""


class WatchSettings(BaseSettings):
    """Settings for the Titan client, wait budgets and local collaborators.

    Environment variable names map directly to field names in uppercase.
    Example: `titan_base_url` reads from `TITAN_BASE_URL`.

    Attributes:
        environment_name: Runtime environment label.
        titan_base_url: Base URL of the Titan domain API.
        titan_request_timeout_seconds: Per-request HTTP timeout.
        titan_identity: Identity prefix used for provisioned container names.
        titan_image: Server image started by the provisioner.
        titan_port: Host port the provisioned server listens on.
        titan_context: Provisioning context (`docker-zfs` or `kubernetes-csi`).
        ssh_host: Host of the remote SSH endpoint fixture.
        ssh_port: Port of the remote SSH endpoint fixture.
        ssh_container_suffix: Container suffix of the SSH fixture (`<identity>-<suffix>`).
        bucket_location: Object storage fixture location as `bucket` or `bucket/path`.
        bucket_region: Region of the object storage fixture.
        bucket_endpoint_url: Optional object storage endpoint override.
        service_wait_delay_seconds: Delay between service boot probes.
        service_wait_max_attempts: Service boot probe budget.
        endpoint_wait_delay_seconds: Delay between remote endpoint probes.
        endpoint_wait_max_attempts: Remote endpoint probe budget.
        resource_wait_delay_seconds: Delay between volume/commit readiness probes.
        resource_wait_max_attempts: Volume/commit probe budget, unbounded when unset.
        operation_poll_delay_seconds: Delay between operation status polls.
        operation_poll_max_attempts: Operation poll budget, unbounded when unset.
        simulator_host: Bind host for the domain API simulator.
        simulator_port: Bind port for the domain API simulator.
        log_level: Minimum emitted log level.
        log_format: Log renderer, `console` or `json`.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    environment_name: str = Field(default="development")
    titan_base_url: str = Field(default="http://localhost:5001", min_length=1)
    titan_request_timeout_seconds: float = Field(default=30.0, gt=0)
    titan_identity: str = Field(default="test", min_length=1)
    titan_image: str = Field(default="titan:latest", min_length=1)
    titan_port: int = Field(default=6001, ge=1, le=65535)
    titan_context: str = Field(default="docker-zfs")
    ssh_host: str = Field(default="localhost", min_length=1)
    ssh_port: int = Field(default=6003, ge=1, le=65535)
    ssh_container_suffix: str = Field(default="ssh", min_length=1)
    bucket_location: str | None = Field(default=None)
    bucket_region: str | None = Field(default=None)
    bucket_endpoint_url: str | None = Field(default=None)
    service_wait_delay_seconds: float = Field(default=1.0, ge=0)
    service_wait_max_attempts: int = Field(default=60, ge=1)
    endpoint_wait_delay_seconds: float = Field(default=1.0, ge=0)
    endpoint_wait_max_attempts: int = Field(default=60, ge=1)
    resource_wait_delay_seconds: float = Field(default=1.0, ge=0)
    resource_wait_max_attempts: int | None = Field(default=None, ge=1)
    operation_poll_delay_seconds: float = Field(default=0.5, ge=0)
    operation_poll_max_attempts: int | None = Field(default=None, ge=1)
    simulator_host: str = Field(default="127.0.0.1")
    simulator_port: int = Field(default=5001, ge=1, le=65535)
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="console")

    @field_validator("titan_base_url", "titan_identity", "titan_image", "ssh_host")
    @classmethod
    def _validate_non_empty_string(cls, value: str) -> str:
        stripped_value = value.strip()
        if not stripped_value:
            raise ValueError("value must not be blank")
        return stripped_value

    @field_validator("titan_context")
    @classmethod
    def _validate_context(cls, value: str) -> str:
        normalized_value = value.strip()
        if normalized_value not in ("docker-zfs", "kubernetes-csi"):
            raise ValueError("titan_context must be one of: docker-zfs, kubernetes-csi")
        return normalized_value

    @field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, value: str) -> str:
        normalized_value = value.strip().upper()
        if normalized_value not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError("log_level must be a standard logging level name")
        return normalized_value

    @field_validator("log_format")
    @classmethod
    def _validate_log_format(cls, value: str) -> str:
        normalized_value = value.strip().lower()
        if normalized_value not in ("console", "json"):
            raise ValueError("log_format must be one of: console, json")
        return normalized_value


def config_load_settings() -> WatchSettings:
    """Load and validate runtime settings from environment and dotenv.

    Returns:
        WatchSettings: Validated runtime settings object.

    Raises:
        SettingsLoadError: Raised when settings are missing or invalid.
    """

    try:
        return WatchSettings()
    except ValidationError as error:
        raise SettingsLoadError(
            f"Startup configuration validation failed. Update .env or environment variables. Details: {error}"
        ) from error
