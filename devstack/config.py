"""
Connection and storage settings shared by every service operation.

Each setting can be given as a command-line option, or falls back to an environment variable and
then to a default suitable for local development.
"""

from dataclasses import dataclass, field, fields
import os
from typing import Dict, Mapping, NamedTuple, Optional

from .plumbing.common import Password


class Setting(NamedTuple):
    option: str
    env: str
    default: str
    help: str


SETTINGS: Dict[str, Setting] = {
    "pg_data": Setting("--pg-data", "PGDATA", ".dev-data/postgres",
                       "PostgreSQL data directory"),
    "pg_host": Setting("--pg-host", "DATABASE_HOST", "localhost",
                       "PostgreSQL host"),
    "pg_port": Setting("--pg-port", "DATABASE_PORT", "5432",
                       "PostgreSQL port"),
    "pg_user": Setting("--pg-user", "POSTGRES_USER", "devstack",
                       "PostgreSQL administrative user"),
    "pg_password": Setting("--pg-password", "POSTGRES_PASSWORD", "",
                           "PostgreSQL administrative password"),
    "pg_db": Setting("--pg-db", "POSTGRES_DB", "devstack",
                     "Application database name"),
    "redis_host": Setting("--redis-host", "REDIS_HOST", "localhost",
                          "Redis host"),
    "redis_port": Setting("--redis-port", "REDIS_PORT", "6379",
                          "Redis port"),
    "redis_password": Setting("--redis-password", "REDIS_PASSWORD", "",
                              "Redis password"),
    "redis_dir": Setting("--redis-dir", "REDIS_DIR", ".dev-data/redis",
                         "Redis working directory"),
}


def _options_doc() -> str:
    lines = ["Options:",
             "  --debug  Log external commands and other details."]
    for setting in SETTINGS.values():
        line = "  {}=VALUE".format(setting.option)
        lines.append("{:<32}{} [env: {}]".format(line, setting.help, setting.env))
    return "\n".join(lines)


OPTIONS = _options_doc()
"""
Docopt `Options:` block describing every setting, appended to script usage text.
"""


def _port(value: str, name: str) -> str:
    if not value.isdigit() or not 0 < int(value) < 65536:
        raise ValueError("Invalid port for {}: {!r}".format(name, value))
    return value


@dataclass(frozen=True)
class ServiceConfig:
    """
    Settings for both managed services.  Instances are immutable, and passed to every operation.
    """

    pg_data: str = SETTINGS["pg_data"].default
    pg_host: str = SETTINGS["pg_host"].default
    pg_port: str = SETTINGS["pg_port"].default
    pg_user: str = SETTINGS["pg_user"].default
    pg_password: str = field(default=SETTINGS["pg_password"].default, repr=False)
    pg_db: str = SETTINGS["pg_db"].default
    redis_host: str = SETTINGS["redis_host"].default
    redis_port: str = SETTINGS["redis_port"].default
    redis_password: str = field(default=SETTINGS["redis_password"].default, repr=False)
    redis_dir: str = SETTINGS["redis_dir"].default

    def __post_init__(self):
        _port(self.pg_port, "PostgreSQL")
        _port(self.redis_port, "Redis")

    @classmethod
    def from_opts(cls, opts: Mapping[str, object],
                  environ: Optional[Mapping[str, str]] = None) -> "ServiceConfig":
        """
        Build a config from parsed docopt options, filling in gaps from the environment.
        """
        if environ is None:
            environ = os.environ
        values = {}
        for item in fields(cls):
            setting = SETTINGS[item.name]
            value = opts.get(setting.option)
            if value is None:
                value = environ.get(setting.env, setting.default)
            values[item.name] = str(value)
        return cls(**values)

    @property
    def pg_secret(self) -> Password:
        return Password(self.pg_password)

    @property
    def redis_secret(self) -> Password:
        return Password(self.redis_password)

    @property
    def pg_marker(self) -> str:
        """
        File written by `initdb`, whose presence means the data directory is ready to use.
        """
        return os.path.join(self.pg_data, "PG_VERSION")

    @property
    def pg_pidfile(self) -> str:
        return os.path.join(self.pg_data, "postmaster.pid")

    @property
    def pg_logfile(self) -> str:
        return os.path.join(self.pg_data, "postgres.log")
