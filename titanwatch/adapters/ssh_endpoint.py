"""Session-level reachability check for a remote SSH endpoint."""

from __future__ import annotations

import socket
from typing import Final

from .interfaces import EndpointSessionPort


class SshEndpointAdapter(EndpointSessionPort):
    """Open a TCP session, read the SSH identification banner and close it."""

    _BANNER_PREFIX: Final[bytes] = b"SSH-"
    _MAX_BANNER_BYTES: Final[int] = 255

    def __init__(self, host: str = "localhost", port: int = 6003, connect_timeout_seconds: float = 5.0):
        """Initialize endpoint adapter.

        Args:
            host: Endpoint host.
            port: Endpoint port.
            connect_timeout_seconds: Connect and banner read timeout.

        Raises:
            ValueError: Raised when required config values are invalid.
        """

        if not host.strip():
            raise ValueError("host must not be blank")
        if connect_timeout_seconds <= 0:
            raise ValueError("connect_timeout_seconds must be > 0")
        self._host = host.strip()
        self._port = port
        self._connect_timeout_seconds = connect_timeout_seconds

    def adapter_endpoint_label(self) -> str:
        return f"{self._host}:{self._port}"

    def adapter_check_session(self) -> bool:
        """Open and immediately close one session.

        Returns:
            bool: True when the peer greeted with an SSH identification banner.

        Raises:
            OSError: Raised when the connection cannot be opened or read.
        """

        with socket.create_connection((self._host, self._port), timeout=self._connect_timeout_seconds) as connection:
            banner = connection.recv(self._MAX_BANNER_BYTES)
        return banner.startswith(self._BANNER_PREFIX)
