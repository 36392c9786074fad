"""
Scripts to manage the development PostgreSQL server.
"""

from .utils import entrypoint, error
from ..config import ServiceConfig
from ..plumbing import pgsql as plumbing
from ..plumbing.common import Unreachable
from ..tasks import pgsql


def _target(config: ServiceConfig) -> str:
    return "{}:{}/{}".format(config.pg_host, config.pg_port, config.pg_db)


@entrypoint
def init(config: ServiceConfig):
    """
    Initialise the PostgreSQL data directory (first time only).

    Usage: {script} [options]
    """
    print("Initialising PostgreSQL data directory...")
    if pgsql.init(config):
        print("PostgreSQL initialised at {}".format(config.pg_data))
    else:
        print("PostgreSQL data directory already initialised, skipping")


@entrypoint
def start(config: ServiceConfig):
    """
    Start PostgreSQL.

    Usage: {script} [options]
    """
    print("Starting PostgreSQL...")
    if pgsql.start(config):
        print("PostgreSQL started on {}:{}".format(config.pg_host, config.pg_port))
    else:
        print("PostgreSQL already running on {}:{}".format(config.pg_host, config.pg_port))


@entrypoint
def stop(config: ServiceConfig):
    """
    Stop PostgreSQL.

    Usage: {script} [options]
    """
    if pgsql.stop(config):
        print("PostgreSQL stopped")
    else:
        print("PostgreSQL not running, skipping")


@entrypoint
def status(config: ServiceConfig):
    """
    Show whether PostgreSQL is accepting connections.

    Usage: {script} [options]
    """
    try:
        plumbing.ping(config)
    except Unreachable as ex:
        print("PostgreSQL {} ... stopped ({})".format(_target(config), ex))
    else:
        print("PostgreSQL {} ... running".format(_target(config)))


@entrypoint
def check(config: ServiceConfig):
    """
    Check that PostgreSQL is accepting connections, exiting non-zero if not.

    Usage: {script} [options]
    """
    try:
        plumbing.ping(config)
    except Unreachable as ex:
        error("PostgreSQL {}: {}".format(_target(config), ex), exit=1)
    else:
        print("PostgreSQL {} is running".format(_target(config)))
