"""
Redis operations for a local development server.
"""

import logging

from ..config import ServiceConfig
from ..plumbing import redis, unix
from ..plumbing.common import Collect, Result


LOG = logging.getLogger(__name__)


@Result.collect
def start(config: ServiceConfig) -> Collect[str]:
    """
    Start a daemonised server, creating its working directory if needed.

    An already-reachable server is left alone.  Returns the resolved working directory.
    """
    yield unix.mkdir(config.redis_dir)
    path = unix.get_canonical_path(config.redis_dir)
    if redis.get_reachable(config):
        LOG.debug("Redis already answering on %s:%s", config.redis_host, config.redis_port)
        return path
    yield redis.start_server(config, path)
    return path


@Result.collect
def stop(config: ServiceConfig) -> Collect[None]:
    """
    Shut down the server if it's reachable, discarding unsaved data.
    """
    if not redis.get_reachable(config):
        LOG.debug("Redis not answering on %s:%s", config.redis_host, config.redis_port)
        return
    yield redis.shutdown_server(config)
