import socket

from stakpak.network import (
    find_available_bind_address_descending,
    find_available_port_descending,
)


def test_port_is_in_range_and_bindable():
    port = find_available_port_descending("127.0.0.1")
    assert 1024 <= port <= 65535
    with socket.create_server(("127.0.0.1", port)) as server:
        assert server.getsockname()[1] == port


def test_taken_port_is_skipped():
    first = find_available_port_descending("127.0.0.1")
    with socket.create_server(("127.0.0.1", first)):
        second = find_available_port_descending("127.0.0.1")
    assert second < first


def test_bind_address_in_container(monkeypatch):
    monkeypatch.setenv("KUBERNETES_SERVICE_HOST", "10.0.0.1")
    address = find_available_bind_address_descending()
    host, _, port = address.rpartition(":")
    assert host == "0.0.0.0"
    assert 1024 <= int(port) <= 65535