"""Docker CLI backed collaborators for the server and SSH fixture containers."""

from __future__ import annotations

import shlex
import subprocess
from typing import Final

import structlog

from .environment_errors import EnvironmentCommandError
from .interfaces import EnvironmentProvisionerPort, RemoteFixturePort

logger = structlog.get_logger(__name__)

DOCKER_ZFS_CONTEXT: Final[str] = "docker-zfs"
KUBERNETES_CONTEXT: Final[str] = "kubernetes-csi"


def adapter_run_docker(arguments: list[str], ignore_errors: bool = False) -> str:
    """Run one docker CLI command and return its combined output.

    Args:
        arguments: Arguments following the `docker` executable.
        ignore_errors: Return output instead of raising on non-zero exit.

    Returns:
        str: Combined stdout and stderr text.

    Raises:
        EnvironmentCommandError: Raised on non-zero exit unless ignored, or when
            docker cannot be executed at all.
    """

    command = ["docker", *arguments]
    try:
        completed = subprocess.run(command, capture_output=True, text=True, check=False)
    except OSError as error:
        if ignore_errors:
            return ""
        raise EnvironmentCommandError(command, -1, str(error)) from error

    output = (completed.stdout or "") + (completed.stderr or "")
    if completed.returncode != 0:
        if ignore_errors:
            logger.debug("docker_command_ignored_failure", command=command, returncode=completed.returncode)
            return output
        raise EnvironmentCommandError(command, completed.returncode, output)
    return output


class DockerServiceProvisioner(EnvironmentProvisionerPort):
    """Start, stop and inspect the Titan server container through the docker CLI."""

    def __init__(
        self,
        identity: str = "test",
        image: str = "titan:latest",
        port: int = 6001,
        context: str = DOCKER_ZFS_CONTEXT,
        kubernetes_image: str = "titandata/titan:latest",
        home_directory: str = "~",
    ):
        """Initialize server provisioner.

        Args:
            identity: Identity prefix for container and volume names.
            image: Image used to launch the server.
            port: Host port the server listens on.
            context: `docker-zfs` or `kubernetes-csi`.
            kubernetes_image: Server image passed to the kubernetes context.
            home_directory: Home directory holding `.kube` credentials.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when required config values are invalid.
        """

        if not identity.strip():
            raise ValueError("identity must not be blank")
        if not image.strip():
            raise ValueError("image must not be blank")
        if context not in (DOCKER_ZFS_CONTEXT, KUBERNETES_CONTEXT):
            raise ValueError(f"context must be one of: {DOCKER_ZFS_CONTEXT}, {KUBERNETES_CONTEXT}")

        self._identity = identity.strip()
        self._image = image.strip()
        self._port = port
        self._context = context
        self._kubernetes_image = kubernetes_image
        self._home_directory = home_directory

    def adapter_container_name(self, container_type: str) -> str:
        """Return an identity-qualified container name such as `test-server`."""

        return f"{self._identity}-{container_type}"

    def adapter_primary_container(self) -> str:
        """Return the container whose logs describe server boot.

        Returns:
            str: `launch` container for docker-zfs, `server` otherwise.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        if self._context == DOCKER_ZFS_CONTEXT:
            return self.adapter_container_name("launch")
        return self.adapter_container_name("server")

    def adapter_start(self, parameters: tuple[str, ...] = ()) -> None:
        """Create the data volume and launch the server for the configured context.

        Args:
            parameters: `key=value` entries forwarded as `TITAN_CONFIG` in kubernetes context.

        Returns:
            None: Starts containers as side effect.

        Raises:
            EnvironmentCommandError: Raised when a docker command fails.
        """

        logger.info("environment_start", context=self._context, identity=self._identity)
        adapter_run_docker(["volume", "create", f"{self._identity}-data"])
        if self._context == DOCKER_ZFS_CONTEXT:
            self._adapter_run_entry_point("launch", daemon=True)
        else:
            self._adapter_run_kubernetes("run", parameters)

    def adapter_stop(self, force: bool = False) -> None:
        """Remove server containers, tear down pool state and drop the data volume.

        Args:
            force: Continue past individual failures.

        Returns:
            None: Removes containers as side effect.

        Raises:
            EnvironmentCommandError: Raised on the first failure unless `force` is set.
        """

        logger.info("environment_stop", context=self._context, identity=self._identity, force=force)
        if self._context == DOCKER_ZFS_CONTEXT:
            adapter_run_docker(["rm", "-f", self.adapter_container_name("launch")], ignore_errors=force)
        adapter_run_docker(["rm", "-f", self.adapter_container_name("server")], ignore_errors=force)
        if self._context == DOCKER_ZFS_CONTEXT:
            self._adapter_run_entry_point("teardown", daemon=False, ignore_errors=force)
        adapter_run_docker(["volume", "rm", f"{self._identity}-data"], ignore_errors=force)

    def adapter_restart(self) -> None:
        """Remove the server container so the launcher restarts it (docker-zfs only).

        Raises:
            EnvironmentCommandError: Raised when the container cannot be removed.
        """

        adapter_run_docker(["rm", "-f", self.adapter_container_name("server")])

    def adapter_is_reachable(self) -> bool:
        output = adapter_run_docker(
            ["inspect", "-f", "{{.State.Running}}", self.adapter_primary_container()],
            ignore_errors=True,
        )
        return output.strip() == "true"

    def adapter_fetch_logs(self) -> str:
        return adapter_run_docker(["logs", self.adapter_primary_container()])

    def _adapter_run_entry_point(self, entry_point: str, daemon: bool, ignore_errors: bool = False) -> None:
        arguments = [
            "run",
            "--privileged",
            "--pid=host",
            "--network=host",
            "-v",
            "/var/lib:/var/lib",
            "-v",
            "/run/docker:/run/docker",
        ]
        if daemon:
            arguments += [
                "-d",
                "--restart",
                "always",
                "--name",
                self.adapter_primary_container(),
                "-v",
                f"/lib:/var/lib/{self._identity}/system",
            ]
        else:
            arguments.append("--rm")
        arguments += [
            "-v",
            f"{self._identity}-data:/var/lib/{self._identity}/data",
            "-v",
            "/var/run/docker.sock:/var/run/docker.sock",
            "-e",
            f"TITAN_IDENTITY={self._identity}",
            "-e",
            f"TITAN_IMAGE={self._image}",
            "-e",
            f"TITAN_PORT={self._port}",
            self._image,
            "/bin/bash",
            f"/titan/{entry_point}",
        ]
        adapter_run_docker(arguments, ignore_errors=ignore_errors)

    def _adapter_run_kubernetes(self, entry_point: str, parameters: tuple[str, ...]) -> None:
        config_entries = list(parameters)
        if not any(entry.startswith("titanImage=") for entry in config_entries):
            config_entries.append(f"titanImage={self._kubernetes_image}")
        adapter_run_docker(
            [
                "run",
                "-d",
                "--restart",
                "always",
                "--name",
                self.adapter_primary_container(),
                "-v",
                f"{self._home_directory}/.kube:/root/.kube",
                "-v",
                f"{self._identity}-data:/var/lib/{self._identity}",
                "-e",
                f"TITAN_CONTEXT={KUBERNETES_CONTEXT}",
                "-e",
                f"TITAN_IDENTITY={self._identity}",
                "-e",
                f"TITAN_CONFIG={','.join(config_entries)}",
                "-p",
                f"{self._port}:5001",
                self._image,
                "/bin/bash",
                f"/titan/{entry_point}",
            ]
        )


class DockerSshFixture(RemoteFixturePort):
    """SSH server fixture container exposing file primitives through `docker exec`."""

    _IMAGE: Final[str] = "titandata/ssh-test-server:latest"

    def __init__(self, identity: str = "test", port: int = 6003, user: str = "test", container_suffix: str = "ssh"):
        """Initialize SSH fixture collaborator.

        Args:
            identity: Identity prefix shared with the server container.
            port: Host port mapped to the fixture's port 22.
            user: Fixture login user owning created directories.
            container_suffix: Container name suffix.

        Raises:
            ValueError: Raised when identity is blank.
        """

        if not identity.strip():
            raise ValueError("identity must not be blank")
        self._identity = identity.strip()
        self._port = port
        self._user = user
        self._container = f"{self._identity}-{container_suffix}"

    def adapter_start(self) -> None:
        adapter_run_docker(
            [
                "run",
                "-p",
                f"{self._port}:22",
                "-d",
                "--name",
                self._container,
                "--network",
                self._identity,
                self._IMAGE,
            ]
        )

    def adapter_stop(self) -> None:
        adapter_run_docker(["rm", "-f", self._container], ignore_errors=True)

    def adapter_network_address(self) -> str:
        """Return the fixture's address on the shared container network."""

        return adapter_run_docker(
            ["inspect", "-f", "{{range .NetworkSettings.Networks}}{{.IPAddress}}{{end}}", self._container]
        ).strip()

    def adapter_write_file(self, path: str, content: str) -> None:
        adapter_run_docker(
            ["exec", self._container, "sh", "-c", f"echo {shlex.quote(content)} > {shlex.quote(path)}"]
        )

    def adapter_read_file(self, path: str) -> str:
        return adapter_run_docker(["exec", self._container, "cat", path])

    def adapter_make_directory(self, path: str) -> None:
        adapter_run_docker(["exec", self._container, "mkdir", "-p", path])
        adapter_run_docker(["exec", self._container, "chown", self._user, path])

    def adapter_fetch_logs(self) -> str:
        return adapter_run_docker(["logs", self._container])
