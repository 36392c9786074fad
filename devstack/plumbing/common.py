"""
Shared helper methods and base classes.
"""

from contextlib import contextmanager
from enum import Enum
from functools import wraps
import inspect
import logging
import os
import shutil
import subprocess
import tempfile
from typing import Any, Callable, Generator, Generic, Iterable, List, Optional, TypeVar, Union


LOG = logging.getLogger(__name__)

T = TypeVar("T")

Collect = Generator["Result[Any]", None, T]
"""
Generic type for the return value of functions using `Result.collect`.
"""


class Unset:
    """
    Constructor of generic default values for optional but nullable parameters.
    """

    def __repr__(self):
        return "UNSET"


UNSET = Unset()
"""
Global generic default value.
"""


class DevStackError(Exception):
    """
    Base class of all fatal conditions raised while managing services.
    """


class ToolNotFound(DevStackError):
    """
    A required external executable is not available on the search path.
    """

    def __init__(self, tool: str):
        super().__init__("{!r} not found in PATH".format(tool))
        self.tool = tool


class ExecutionError(DevStackError):
    """
    An external executable was found but could not be started.
    """

    def __init__(self, tool: str, error: OSError):
        super().__init__("Failed to execute {}: {}".format(tool, error.strerror or error))
        self.tool = tool
        self.error = error


class CommandFailed(DevStackError):
    """
    An external executable ran to completion but reported failure.

    Any captured output is kept for diagnostics, and included in the message.
    """

    def __init__(self, tool: str, returncode: int, stdout: Optional[bytes] = None,
                 stderr: Optional[bytes] = None):
        self.tool = tool
        self.returncode = returncode
        self.stdout = (stdout or b"").decode("utf-8", "replace").strip()
        self.stderr = (stderr or b"").decode("utf-8", "replace").strip()
        lines = ["{} failed (exit {})".format(tool, returncode)]
        if self.stderr:
            lines.append("  stderr: {}".format(self.stderr))
        if self.stdout:
            lines.append("  stdout: {}".format(self.stdout))
        super().__init__("\n".join(lines))


class FilesystemError(DevStackError):
    """
    A data or working directory could not be created or written.
    """

    def __init__(self, path: str, error: OSError):
        super().__init__("Can't use {}: {}".format(path, error.strerror or error))
        self.path = path
        self.error = error


class Unreachable(DevStackError):
    """
    A liveness check could not connect to, or get a reply from, a service.
    """


class NotInitialised(DevStackError):
    """
    A service was asked to start before its storage was initialised.
    """


class State(Enum):
    """
    Enumeration used by `Result` to declare whether the action happened.
    """

    unchanged = 0
    """
    No action required, the request and current state are consistent.
    """
    success = 1
    """
    The action was completed without issues.
    """
    created = 2
    """
    The action resulted in the creation of a new object or record.
    """

    def __bool__(self):
        return bool(self.value)


class Result(Generic[T]):
    """
    State and optional accompanying value from a unit of work.

    For a simple plumbing action, just create a new result directly with the resulting `State` and
    a value if relevant:

        def unit():
            # Create a directory, call an external command etc.
            return Result(State.success, True)

    For a task that combines multiple results, see `Result.collect`.  The state of such a result is
    based on all of its parts -- if any changes were made, the outer result also reports a change.

    A result can be checked for truthiness, which is `False` if no changes were made.

    A result can also be converted to a string, which produces a tree-like summary of changes:

        module:task success True
            module:unit1 unchanged
            module:unit2 success
    """

    @classmethod
    def collect(cls, fn: Callable[..., Collect[T]]) -> Callable[..., "Result[T]"]:
        """
        Decorator: build a `Result` from multiple sub-tasks:

            def plumb_b() -> Result[str]: ...

            @Result.collect
            def task() -> Collect[str]:
                yield plumb_a()
                result = yield from plumb_b()
                if result:
                    yield plumb_c()
                return result.value

        The inner function this decorator wraps should be a generator of `Result` objects.

        The return value of the wrapper function will be a new `Result` object, whose `parts` will
        be those collected sub-task results, and whose `value` will be set to the return value of
        the inner function (i.e. the example above will return a `Result[str]`).
        """
        @wraps(fn)
        def inner(*args: Any, **kwargs: Any) -> Result[T]:
            state = None
            value = None
            parts: List[Result[Any]] = []
            gen = fn(*args, **kwargs)
            try:
                while True:
                    result = next(gen)
                    parts.append(result)
            except StopIteration as ex:
                value = ex.value
            return cls(state, value, parts, fn)
        return inner

    def __init__(self, state: Optional[State] = None, value: Union[T, Unset] = UNSET,
                 parts: Iterable["Result[Any]"] = (), caller: Optional[Callable[..., Any]] = None):
        self._state = state
        self._value = value
        self.parts = tuple(parts)
        self.caller = "<unknown>"
        # Inspection magic to log the calling method, e.g. `module.sub:function`.
        name = None
        if not caller:
            frame = inspect.currentframe()
            try:
                name = frame.f_back.f_code.co_name
                caller = frame.f_back.f_globals[name]
            except (AttributeError, KeyError):
                pass
        if caller:
            self.caller = "{}:{}".format(caller.__module__, caller.__qualname__)
        elif name:
            self.caller = name

    @property
    def state(self) -> State:
        """
        Modification state of the unit of work.

        This may be set directly, computed from `parts`, or defaulted to `State.unchanged`.
        """
        if self._state:
            return self._state
        elif any(self.parts):
            if State.created in (part.state for part in self.parts):
                return State.created
            else:
                return State.success
        else:
            return State.unchanged

    @state.setter
    def state(self, state: State) -> None:
        self._state = state

    @property
    def value(self) -> T:
        """
        Return value produced by the unit of work.

        Accessing this attribute will raise `ValueError` if no value has been set.
        """
        if isinstance(self._value, Unset):
            raise ValueError("No value set")
        return self._value

    @value.setter
    def value(self, value: T) -> None:
        self._value = value

    def __bool__(self) -> bool:
        return bool(self.state)

    def __iter__(self) -> Generator["Result[T]", None, "Result[T]"]:
        # Syntactic sugar used by `yield from` expressions in `Result.collect()`.
        yield self
        return self

    def __repr__(self) -> str:
        params = [str(self.state)]
        if not isinstance(self._value, Unset):
            params.append(repr(self._value))
        if self.parts:
            params.append("<{} parts>".format(len(self.parts)))
        return "{}({})".format(self.__class__.__name__, ", ".join(params))

    def __str__(self) -> str:
        tree = "{}: {}".format(self.caller, self.state.name)
        if not isinstance(self._value, Unset):
            tree = "{} {!r}".format(tree, self._value)
        if self.parts:
            for result in self.parts:
                tree += "\n    {}".format(str(result).replace("\n", "\n    "))
        return tree


class Password:
    """
    Container of secret values.  Use `str(passwd)` to get the actual value.
    """

    def __init__(self, value: str, template: str = "{}"):
        self._value = value
        self._template = template

    def __str__(self):
        return self._template.format(self._value)

    def __repr__(self):
        return "<{}: {!r}>".format(self.__class__.__name__, self._template.format("***"))

    def __bool__(self):
        return bool(self._value)


Arg = Union[str, Password]


@contextmanager
def credential_file(passwd: Password, directory: str) -> Generator[str, None, None]:
    """
    Write a password to a private file for the duration of the block, for tools that only read
    secrets from disk:

        with credential_file(passwd, parent) as path:
            command(["initdb", "-D", data, "-U", user, "--pwfile", path, "--auth", "md5"])

    The file is only readable by the current user, and is removed however the block exits.
    """
    try:
        fd, path = tempfile.mkstemp(prefix=".pwfile-", dir=directory)
    except OSError as ex:
        raise FilesystemError(directory, ex) from ex
    LOG.debug("Credential file: %r", path)
    try:
        with os.fdopen(fd, "w") as handle:
            handle.write(str(passwd))
        yield path
    finally:
        try:
            os.remove(path)
        except FileNotFoundError:
            pass


def find_tool(name: str) -> str:
    """
    Resolve an executable name on the search path.
    """
    path = shutil.which(name)
    if not path:
        raise ToolNotFound(name)
    return path


def command(args: List[Arg], output: bool = False) -> "subprocess.CompletedProcess[bytes]":
    """
    Create a subprocess to execute an external command.

    The program is looked up on the search path first.  With `output` set, both stdout and stderr
    are captured and attached to the result, or to the `CommandFailed` error on a non-zero exit.
    """
    LOG.debug("Exec: %r", args)
    tool = str(args[0])
    argv = [find_tool(tool)] + [str(arg) for arg in args[1:]]
    try:
        return subprocess.run(argv, stdout=subprocess.PIPE if output else None,
                              stderr=subprocess.PIPE if output else None, check=True)
    except subprocess.CalledProcessError as ex:
        raise CommandFailed(tool, ex.returncode, ex.stdout, ex.stderr) from ex
    except OSError as ex:
        raise ExecutionError(tool, ex) from ex
