"""
Combined operations over both services, always handling PostgreSQL before Redis.
"""

from ..config import ServiceConfig
from ..plumbing import unix
from ..plumbing.common import Collect, Result
from . import pgsql, redis


@Result.collect
def up(config: ServiceConfig) -> Collect[None]:
    """
    Start both services.  A failure stops the sequence, without undoing earlier steps.
    """
    yield pgsql.start(config)
    yield redis.start(config)


@Result.collect
def down(config: ServiceConfig) -> Collect[None]:
    """
    Stop both services, skipping any that aren't running.
    """
    yield pgsql.stop(config)
    yield redis.stop(config)


@Result.collect
def wipe(config: ServiceConfig) -> Collect[None]:
    """
    Delete both services' data.  Failures are only logged.
    """
    yield unix.remove_tree(config.pg_data)
    yield unix.remove_tree(config.redis_dir)


@Result.collect
def reset(config: ServiceConfig) -> Collect[None]:
    """
    Stop both services, delete all of their data, then initialise and start them from scratch.
    """
    yield from down(config)
    yield from wipe(config)
    yield pgsql.init(config)
    yield from up(config)
