"""
PostgreSQL server lifecycle, driven through `initdb` and `pg_ctl`.
"""

from contextlib import contextmanager
import logging
import os
from typing import Generator, Optional

from psycopg2 import connect as psycopg2_connect, Error as PostgresError
from psycopg2.extensions import connection as Connection, cursor as Cursor

from ..config import ServiceConfig
from . import unix
from .common import command, credential_file, Result, State, Unreachable


LOG = logging.getLogger(__name__)

MAINTENANCE_DB = "postgres"
"""
Database used for health checks, which exists in every cluster (unlike the application database,
which may not have been created yet).
"""

CONNECT_TIMEOUT = 3


def connect(config: ServiceConfig) -> Connection:
    """
    Create a PostgreSQL connection using Psycopg2 as the administrative user.
    """
    conn = psycopg2_connect(host=config.pg_host, port=config.pg_port, user=config.pg_user,
                            password=config.pg_password, dbname=MAINTENANCE_DB,
                            connect_timeout=CONNECT_TIMEOUT)
    conn.autocommit = True
    return conn


@contextmanager
def context(config: ServiceConfig) -> Generator[Cursor, None, None]:
    """
    Run multiple PostgreSQL commands in a single connection:

        with context(config) as cursor:
            cursor.execute("SELECT 1")
    """
    conn = connect(config)
    try:
        yield conn.cursor()
    finally:
        conn.close()


def get_initialised(config: ServiceConfig) -> bool:
    """
    Check if the data directory has been through `initdb`.
    """
    return os.path.exists(config.pg_marker)


def get_pid(config: ServiceConfig) -> Optional[int]:
    """
    Read the postmaster process ID from the data directory, if a server was started from it.

    This says nothing about whether the server is still alive or accepting connections.
    """
    try:
        with open(config.pg_pidfile) as pidfile:
            first = pidfile.readline().strip()
    except OSError:
        return None
    try:
        return int(first)
    except ValueError:
        return None


def ping(config: ServiceConfig) -> None:
    """
    Connect to the maintenance database and run a trivial query.

    Raises `Unreachable` with the driver's message if the server can't be reached.
    """
    try:
        with context(config) as cursor:
            cursor.execute("SELECT 1")
            cursor.fetchone()
    except PostgresError as ex:
        raise Unreachable(str(ex).strip()) from ex


def get_reachable(config: ServiceConfig) -> bool:
    try:
        ping(config)
    except Unreachable:
        return False
    else:
        return True


def init_cluster(config: ServiceConfig) -> Result[str]:
    """
    Create a new database cluster in the configured data directory, owned by the administrative
    user.

    The password is handed over in a temporary file next to the data directory, which is removed
    again whether or not `initdb` succeeds.  Without a password, local trust authentication is used
    instead.
    """
    if get_initialised(config):
        return Result(State.unchanged, config.pg_data)
    parent = os.path.dirname(os.path.abspath(config.pg_data))
    unix.mkdir(parent)
    args = ["initdb", "-D", config.pg_data, "-U", config.pg_user]
    passwd = config.pg_secret
    if passwd:
        with credential_file(passwd, parent) as pwfile:
            command(args + ["--pwfile", pwfile, "--auth", "md5"])
    else:
        LOG.warning("No password for %r, using trust authentication", config.pg_user)
        command(args + ["--auth", "trust"])
    return Result(State.created, config.pg_data)


def start_server(config: ServiceConfig) -> Result[None]:
    """
    Launch the server in the background with `pg_ctl`, listening on the configured port.

    This doesn't wait for the server to accept connections.
    """
    command(["pg_ctl", "start", "-D", config.pg_data, "-o", "-p {}".format(config.pg_port),
             "-l", config.pg_logfile])
    return Result(State.success)


def stop_server(config: ServiceConfig) -> Result[None]:
    """
    Ask the server to shut down, aborting open transactions and disconnecting clients.
    """
    command(["pg_ctl", "stop", "-D", config.pg_data, "-m", "fast"])
    return Result(State.success)


def kill_server(pid: int) -> Result[None]:
    """
    Send SIGKILL to a server process via `pg_ctl`, for servers that ignore a regular shutdown.
    """
    command(["pg_ctl", "kill", "KILL", str(pid)])
    return Result(State.success)
