"""
Helper methods for building throwaway service configurations.

Tests that drive real PostgreSQL and Redis servers are opt-in: they require the `DEVSTACK_TEST_LIVE`
environment variable (as unit tests do not take arguments), the server binaries on the search path,
and a non-root user (as `initdb` refuses to run as root).  Each configuration gets its own data
directories and free ports, so nothing touches a developer's real servers.
"""

from contextlib import contextmanager
import os
import shutil
import socket
import tempfile
from typing import Iterator
import unittest

from devstack.config import ServiceConfig


LIVE_TOOLS = ("initdb", "pg_ctl", "redis-server", "redis-cli")


def free_port() -> str:
    """
    Ask the OS for a currently unused TCP port.
    """
    with socket.socket() as sock:
        sock.bind(("localhost", 0))
        return str(sock.getsockname()[1])


def make_config(root: str, **overrides: str) -> ServiceConfig:
    """
    Create a config whose data directories live under the given root.
    """
    values = dict(pg_data=os.path.join(root, "data", "postgres"), pg_port=free_port(),
                  pg_user="tester", pg_password="secret", pg_db="missing_app_db",
                  redis_port=free_port(), redis_dir=os.path.join(root, "data", "redis"))
    values.update(overrides)
    return ServiceConfig(**values)


def require_live() -> None:
    """
    Skip the calling test unless real servers can be used.
    """
    if not os.getenv("DEVSTACK_TEST_LIVE"):
        raise unittest.SkipTest("Requires real servers, must set DEVSTACK_TEST_LIVE")
    missing = [tool for tool in LIVE_TOOLS if not shutil.which(tool)]
    if missing:
        raise unittest.SkipTest("Missing binaries: {}".format(", ".join(missing)))
    if hasattr(os, "geteuid") and os.geteuid() == 0:
        raise unittest.SkipTest("initdb can't run as root")


@contextmanager
def temp_config(**overrides: str) -> Iterator[ServiceConfig]:
    """
    Context manager helper that provides a config inside a temporary directory:

        with temp_config() as config:
            ...
    """
    with tempfile.TemporaryDirectory() as root:
        yield make_config(root, **overrides)
