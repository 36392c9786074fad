"""
Local filesystem helpers for service data directories.
"""

import logging
import os
import shutil

from .common import FilesystemError, Result, State


LOG = logging.getLogger(__name__)

# Extended-length path prefix produced by resolving paths on Windows, which most command-line
# parsers (including redis-server's) don't understand.
_EXTENDED_PREFIX = "\\\\?\\"


def get_canonical_path(path: str) -> str:
    """
    Resolve a path to an absolute, symlink-free form that can be passed to external tools.
    """
    resolved = os.path.realpath(path)
    if resolved.startswith(_EXTENDED_PREFIX):
        resolved = resolved[len(_EXTENDED_PREFIX):]
    return resolved


def mkdir(path: str) -> Result[str]:
    """
    Create a directory and any missing parents.
    """
    if os.path.isdir(path):
        return Result(State.unchanged, path)
    LOG.debug("Creating directory %r", path)
    try:
        os.makedirs(path, exist_ok=True)
    except OSError as ex:
        raise FilesystemError(path, ex) from ex
    return Result(State.created, path)


def remove_tree(path: str) -> Result[None]:
    """
    Delete a directory and everything inside it.

    This is best-effort: failures are logged rather than raised, and any problem left behind will
    surface when the directory is next used.
    """
    if not os.path.lexists(path):
        return Result(State.unchanged)
    try:
        shutil.rmtree(path)
    except OSError as ex:
        LOG.warning("Couldn't remove %r: %s", path, ex)
        return Result(State.unchanged)
    return Result(State.success)
