"""Finding a free local port for the tool server."""

from __future__ import annotations

import socket

from stakpak.local_context import detect_container_environment

_PORTS = range(65535, 1023, -1)


class NoAvailablePortError(RuntimeError):
    """Raised when every port in the searched range is taken."""


def find_available_port_descending(host: str) -> int:
    """Return the highest port from 65535 down to 1024 that can be bound on host."""
    for port in _PORTS:
        try:
            with socket.create_server((host, port)):
                return port
        except OSError:
            continue
    raise NoAvailablePortError("No available port found in range 1024-65535")


def find_available_bind_address_descending() -> str:
    """Return ``host:port`` with a free port, binding all interfaces in containers."""
    host = "0.0.0.0" if detect_container_environment() else "localhost"
    return f"{host}:{find_available_port_descending(host)}"