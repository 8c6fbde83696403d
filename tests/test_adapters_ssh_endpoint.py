"""Regression tests for the SSH endpoint banner check."""

from __future__ import annotations

import pytest

from titanwatch.adapters import SshEndpointAdapter
import titanwatch.adapters.ssh_endpoint as ssh_module


class _FakeConnection:
    """Socket stub returning a fixed banner."""

    def __init__(self, banner: bytes):
        self._banner = banner
        self.closed = False

    def __enter__(self) -> _FakeConnection:
        return self

    def __exit__(self, *_exc_info: object) -> None:
        self.closed = True

    def recv(self, size: int) -> bytes:
        return self._banner[:size]


def test_adapters_ssh_endpoint_accepts_ssh_banner(monkeypatch: pytest.MonkeyPatch) -> None:
    """Accept a session whose peer greets with an SSH identification string.

    Args:
        monkeypatch: Pytest monkeypatch fixture.

    Returns:
        None: Assertions validate banner acceptance and connection target.

    Raises:
        AssertionError: Raised when a valid banner is rejected.
    """

    connection = _FakeConnection(b"SSH-2.0-OpenSSH_8.9\r\n")
    targets: list[tuple[str, int]] = []

    def _create_connection(address: tuple[str, int], timeout: float) -> _FakeConnection:
        _ = timeout
        targets.append(address)
        return connection

    monkeypatch.setattr(ssh_module.socket, "create_connection", _create_connection)

    endpoint = SshEndpointAdapter(host="localhost", port=6003)

    assert endpoint.adapter_check_session()
    assert targets == [("localhost", 6003)]
    assert connection.closed
    assert endpoint.adapter_endpoint_label() == "localhost:6003"


def test_adapters_ssh_endpoint_rejects_non_ssh_peer(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(
        ssh_module.socket,
        "create_connection",
        lambda address, timeout: _FakeConnection(b"HTTP/1.1 400 Bad Request\r\n"),
    )

    assert not SshEndpointAdapter().adapter_check_session()


def test_adapters_ssh_endpoint_propagates_refused_connection(monkeypatch: pytest.MonkeyPatch) -> None:
    """Let connection errors escape so the endpoint probe can classify them."""

    def _refuse(address: tuple[str, int], timeout: float) -> _FakeConnection:
        raise ConnectionRefusedError(f"refused {address} within {timeout}")

    monkeypatch.setattr(ssh_module.socket, "create_connection", _refuse)

    with pytest.raises(OSError):
        SshEndpointAdapter().adapter_check_session()
