"""Pytest configuration and fixtures for probeadopt tests."""

import socket

import pytest

from probeadopt.config import HARDWARE_PROBE_ENV, AdoptionServerConfig


@pytest.fixture
def free_port() -> int:
    """Find a TCP port on loopback that nothing listens on."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


@pytest.fixture
def server_config(free_port: int) -> AdoptionServerConfig:
    """Loopback config with a lifetime long enough to outlast a test."""
    return AdoptionServerConfig(port=free_port, lifetime_ms=30_000, host="127.0.0.1")


@pytest.fixture
def base_url(server_config: AdoptionServerConfig) -> str:
    return f"http://127.0.0.1:{server_config.port}"


@pytest.fixture
def hardware_probe(monkeypatch):
    """Run as a hardware probe."""
    monkeypatch.setenv(HARDWARE_PROBE_ENV, "true")


@pytest.fixture
def software_probe(monkeypatch):
    """Run as a software-only probe."""
    monkeypatch.delenv(HARDWARE_PROBE_ENV, raising=False)
