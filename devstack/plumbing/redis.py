"""
Redis server lifecycle, driven through `redis-server` and `redis-cli`.
"""

import logging
import os
from typing import List

from redis import Redis, RedisError

from ..config import ServiceConfig
from .common import Arg, command, CommandFailed, Result, State, Unreachable


LOG = logging.getLogger(__name__)

CONNECT_TIMEOUT = 3


def connect(config: ServiceConfig) -> Redis:
    """
    Create a Redis client, with connection attempts bounded by a short timeout.
    """
    return Redis(host=config.redis_host, port=int(config.redis_port),
                 password=config.redis_password or None,
                 socket_connect_timeout=CONNECT_TIMEOUT, socket_timeout=CONNECT_TIMEOUT)


def ping(config: ServiceConfig) -> None:
    """
    Connect to the server and require a reply to `PING`.

    Raises `Unreachable` with the client's message if the server can't be reached.
    """
    client = None
    try:
        client = connect(config)
        client.ping()
    except RedisError as ex:
        raise Unreachable(str(ex)) from ex
    finally:
        if client is not None:
            client.close()


def get_reachable(config: ServiceConfig) -> bool:
    try:
        ping(config)
    except Unreachable:
        return False
    else:
        return True


def start_server(config: ServiceConfig, path: str) -> Result[None]:
    """
    Launch a daemonised server using the given working directory, which must be an absolute path.

    The server's own output is captured, and attached to the `CommandFailed` error if it exits
    unsuccessfully.
    """
    args: List[Arg] = ["redis-server",
                       "--port", config.redis_port,
                       "--daemonize", "yes",
                       "--logfile", os.path.join(path, "redis.log"),
                       "--pidfile", os.path.join(path, "redis.pid"),
                       "--dir", path]
    if config.redis_password:
        args += ["--requirepass", config.redis_secret]
    command(args, output=True)
    return Result(State.success)


def shutdown_server(config: ServiceConfig) -> Result[None]:
    """
    Stop the server without saving a snapshot.

    Redis closes the connection as part of shutting down, so a client error is only treated as a
    failure if the server still answers afterwards.
    """
    args: List[Arg] = ["redis-cli", "-h", config.redis_host, "-p", config.redis_port]
    if config.redis_password:
        args += ["-a", config.redis_secret, "--no-auth-warning"]
    try:
        command(args + ["shutdown", "nosave"], output=True)
    except CommandFailed:
        if get_reachable(config):
            raise
        LOG.warning("redis-cli reported failure, but server is down")
    return Result(State.success)
