"""
Scripts to manage the development Redis server.
"""

from .utils import entrypoint, error
from ..config import ServiceConfig
from ..plumbing import redis as plumbing
from ..plumbing.common import Unreachable
from ..tasks import redis


def _target(config: ServiceConfig) -> str:
    return "{}:{}".format(config.redis_host, config.redis_port)


@entrypoint
def start(config: ServiceConfig):
    """
    Start Redis.

    Usage: {script} [options]
    """
    print("Starting Redis...")
    result = redis.start(config)
    create_dir, *launch = result.parts
    if create_dir:
        print("Created working directory {}".format(result.value))
    if launch:
        print("Redis started on {}".format(_target(config)))
    else:
        print("Redis already running on {}".format(_target(config)))


@entrypoint
def stop(config: ServiceConfig):
    """
    Stop Redis without saving.

    Usage: {script} [options]
    """
    if redis.stop(config):
        print("Redis stopped")
    else:
        print("Redis not running, skipping")


@entrypoint
def status(config: ServiceConfig):
    """
    Show whether Redis is answering.

    Usage: {script} [options]
    """
    try:
        plumbing.ping(config)
    except Unreachable as ex:
        print("Redis {} ... stopped ({})".format(_target(config), ex))
    else:
        print("Redis {} ... running".format(_target(config)))


@entrypoint
def check(config: ServiceConfig):
    """
    Check that Redis is answering, exiting non-zero if not.

    Usage: {script} [options]
    """
    try:
        plumbing.ping(config)
    except Unreachable as ex:
        error("Redis {}: {}".format(_target(config), ex), exit=1)
    else:
        print("Redis {} is running".format(_target(config)))
