"""
Scripts to manage both development services together.
"""

from .utils import entrypoint
from ..config import ServiceConfig
from ..tasks import env


@entrypoint
def up(config: ServiceConfig):
    """
    Start PostgreSQL and Redis.

    Usage: {script} [options]
    """
    print("Starting PostgreSQL and Redis...")
    result = env.up(config)
    pg, cache = result.parts
    create_dir, *launch = cache.parts
    print("PostgreSQL {}".format("started" if pg else "already running"))
    print("Redis {}".format("started" if launch else "already running"))


@entrypoint
def down(config: ServiceConfig):
    """
    Stop PostgreSQL and Redis.

    Usage: {script} [options]
    """
    result = env.down(config)
    pg, cache = result.parts
    print("PostgreSQL {}".format("stopped" if pg else "not running, skipping"))
    print("Redis {}".format("stopped" if cache else "not running, skipping"))


@entrypoint
def reset(config: ServiceConfig):
    """
    Stop both services, wipe their data, then initialise and start them again.

    All data in the PostgreSQL and Redis directories is deleted.

    Usage: {script} [options]
    """
    print("Resetting PostgreSQL and Redis...")
    env.reset(config)
    print("Reset complete!")
