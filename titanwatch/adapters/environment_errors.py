"""Typed exceptions for local environment collaborator failures."""

from __future__ import annotations


class EnvironmentCommandError(RuntimeError):
    """External command used to manage the environment exited unsuccessfully.

    Attributes:
        command: Executed argument vector.
        returncode: Process exit status.
        output: Combined stdout/stderr text.
    """

    def __init__(self, command: list[str], returncode: int, output: str):
        super().__init__(f"command failed with exit status {returncode}: {' '.join(command)}: {output.strip()}")
        self.command = command
        self.returncode = returncode
        self.output = output


class BucketFixtureError(RuntimeError):
    """Object storage request issued by the bucket fixture failed.

    Attributes:
        bucket: Bucket the request targeted.
        error_code: Storage service error code, `None` for client-side failures.
    """

    def __init__(self, bucket: str, message: str, error_code: str | None = None):
        super().__init__(f"bucket '{bucket}' request failed: {message}")
        self.bucket = bucket
        self.error_code = error_code
