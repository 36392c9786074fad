"""
Manage PostgreSQL and Redis for development.

Usage:
    devstack pg (init | start | stop | status | check) [options]
    devstack redis (start | stop | status | check) [options]
    devstack (up | down | reset) [options]
    devstack (-h | --help)

Commands:
    pg init       Initialise the PostgreSQL data directory (first time only).
    pg start      Start PostgreSQL.
    pg stop       Stop PostgreSQL.
    pg status     Show connection status.
    pg check      Check connection, exiting non-zero if not reachable.
    redis start   Start Redis.
    redis stop    Stop Redis.
    redis status  Show connection status.
    redis check   Check connection, exiting non-zero if not reachable.
    up            Start PostgreSQL and Redis.
    down          Stop PostgreSQL and Redis.
    reset         Wipe data and reinitialise.
"""

from typing import Any, Callable, Dict, Optional, Tuple

from docopt import docopt

from devstack.config import OPTIONS
from devstack.scripts import env, pgsql, redis
from devstack.scripts.utils import DocOptArgs


COMMANDS: Dict[Tuple[Optional[str], str], Callable[..., Any]] = {
    ("pg", "init"): pgsql.init,
    ("pg", "start"): pgsql.start,
    ("pg", "stop"): pgsql.stop,
    ("pg", "status"): pgsql.status,
    ("pg", "check"): pgsql.check,
    ("redis", "start"): redis.start,
    ("redis", "stop"): redis.stop,
    ("redis", "status"): redis.status,
    ("redis", "check"): redis.check,
    (None, "up"): env.up,
    (None, "down"): env.down,
    (None, "reset"): env.reset,
}


def resolve(opts: DocOptArgs) -> Callable[..., Any]:
    """
    Find the script matching the commands selected on the command line.
    """
    for (service, action), fn in COMMANDS.items():
        if (service is None or opts.get(service)) and opts.get(action):
            return fn
    raise KeyError("No command selected")


def main(argv=None):
    opts = docopt("{}\n{}".format(__doc__.strip(), OPTIONS), argv)
    resolve(opts)(opts)


if __name__ == "__main__":
    main()
