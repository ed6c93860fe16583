import json
import socket
from pathlib import Path

import pytest


VIOLATIONS = []
ARTIFACTS_DIR = Path("artifacts")
REPORT = ARTIFACTS_DIR / "egress-violations.json"

LOCAL_HOSTS = {"localhost", "127.0.0.1", "::1", "testserver"}


@pytest.fixture(autouse=True, scope="session")
def egress_guard():
    """Search runs against in-memory SQLite in tests; nothing may leave the host."""
    real_getaddrinfo = socket.getaddrinfo
    real_create_connection = socket.create_connection

    def guard_getaddrinfo(host, *args, **kwargs):
        if isinstance(host, str) and host in LOCAL_HOSTS:
            return real_getaddrinfo(host, *args, **kwargs)
        VIOLATIONS.append({"fn": "getaddrinfo", "host": str(host)})
        raise RuntimeError("Egress blocked: getaddrinfo disallowed")

    def guard_create_connection(address, *args, **kwargs):
        host = address[0] if isinstance(address, tuple) else None
        if host in LOCAL_HOSTS:
            return real_create_connection(address, *args, **kwargs)
        VIOLATIONS.append({"fn": "create_connection", "address": str(address)})
        raise RuntimeError("Egress blocked: create_connection disallowed")

    socket.getaddrinfo = guard_getaddrinfo  # type: ignore[assignment]
    socket.create_connection = guard_create_connection  # type: ignore[assignment]

    yield

    socket.getaddrinfo = real_getaddrinfo  # type: ignore[assignment]
    socket.create_connection = real_create_connection  # type: ignore[assignment]

    if VIOLATIONS:
        ARTIFACTS_DIR.mkdir(parents=True, exist_ok=True)
        REPORT.write_text(json.dumps(VIOLATIONS, indent=2))
