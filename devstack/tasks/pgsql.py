"""
PostgreSQL operations for a local development cluster.
"""

import logging
import time

from ..config import ServiceConfig
from ..plumbing import pgsql
from ..plumbing.common import Collect, CommandFailed, NotInitialised, Result, State


LOG = logging.getLogger(__name__)

KILL_GRACE = 1
"""
Seconds to wait after force-killing a server, to let the OS reap the process.
"""


def init(config: ServiceConfig) -> Result[str]:
    """
    Initialise the data directory, unless this has already been done.
    """
    return pgsql.init_cluster(config)


def start(config: ServiceConfig) -> Result[None]:
    """
    Start the server from an initialised data directory.

    An already-reachable server is left alone.
    """
    if not pgsql.get_initialised(config):
        raise NotInitialised("PostgreSQL data directory {!r} is not initialised"
                             .format(config.pg_data))
    if pgsql.get_reachable(config):
        return Result(State.unchanged)
    return pgsql.start_server(config)


@Result.collect
def stop(config: ServiceConfig) -> Collect[None]:
    """
    Stop the server if one was started from the data directory.

    A regular fast shutdown is tried first.  If that fails (e.g. a server stuck in single-user
    mode), the postmaster is killed instead.
    """
    if pgsql.get_pid(config) is None:
        LOG.debug("No PostgreSQL pid file in %r", config.pg_data)
        return
    try:
        yield pgsql.stop_server(config)
        return
    except CommandFailed as ex:
        LOG.warning("pg_ctl stop failed: %s", ex)
    # The server may have removed its pid file while shutting down.
    pid = pgsql.get_pid(config)
    if pid is None:
        yield Result(State.success)
        return
    LOG.warning("Sending KILL to PostgreSQL PID %d", pid)
    try:
        yield pgsql.kill_server(pid)
    except CommandFailed as ex:
        LOG.warning("pg_ctl kill failed: %s", ex)
        yield Result(State.success)
    time.sleep(KILL_GRACE)
