"""
Helpers for converting methods into scripts, and filling in arguments with service settings.
"""

from functools import wraps
from inspect import cleandoc, signature
import logging
import sys
from typing import Any, Callable, Dict, List, Optional, Union

from docopt import docopt

from ..config import OPTIONS, ServiceConfig
from ..plumbing.common import DevStackError


DocOptArgs = Dict[str, Union[bool, str, List[str], None]]


ENTRYPOINTS: List[str] = []


def entrypoint(fn: Callable[..., Any]) -> Callable[..., Any]:
    """
    Decorator to make an entrypoint out of a generic function.

    This uses `docopt` to parse arguments according to the method docstring, and will be formatted
    with `{script}` set to the script name.  At minimum, it should contain `Usage: {script}`.  The
    shared `Options:` block for service settings is appended automatically.

    Functions may optionally accept arguments, but they must be annotated with a recognised type in
    order to be filled in:

    - `DocOptArgs` (a `dict` of input parameters parsed from the usage line)
    - `ServiceConfig` (settings built from the options, environment and defaults)

    Any `DevStackError` raised by the function is printed, and the script exits with status 1.

    An example function:

        @entrypoint
        def check(config: ServiceConfig):
            \"""
            Check that the server is reachable.

            Usage: {script} [options]
            \"""
    """
    label = "devstack-{}-{}".format(fn.__module__.rsplit(".", 1)[-1],
                                    fn.__qualname__).replace("_", "-")

    @wraps(fn)
    def wrap(opts: Optional[DocOptArgs] = None):
        extra: Dict[str, Any] = {}
        if opts is None:
            doc = "{}\n\n{}".format(cleandoc(fn.__doc__.format(script=label)), OPTIONS)
            opts = docopt(doc)
        if opts.pop("--debug", False):
            logging.basicConfig(level=logging.DEBUG)
        # Detect resolvable-typed arguments and fill in their values.
        sig = signature(fn)
        for param in sig.parameters.values():
            name = param.name
            cls = param.annotation
            if cls is DocOptArgs:
                extra[name] = opts
            elif cls is ServiceConfig:
                try:
                    extra[name] = ServiceConfig.from_opts(opts)
                except ValueError as ex:
                    error(str(ex), exit=1)
            else:
                raise RuntimeError("Bad parameter {!r} type {!r}".format(name, cls))
        try:
            return fn(**extra)
        except DevStackError as ex:
            error(str(ex), exit=1)
    wrap.__doc__ = wrap.__doc__.format(script=label)
    # Create a console script line for setup.
    target = "{}:{}".format(fn.__module__, fn.__qualname__)
    ENTRYPOINTS.append("{}={}".format(label, target))
    return wrap


def error(msg: Optional[str] = None, *, exit: Optional[int] = None, colour: Optional[str] = None):
    """
    Print an error message and/or exit.
    """
    if msg:
        colour = colour or ("1" if exit else "3")
        print("\033[9{}m{}\033[0m".format(colour, msg), file=sys.stderr)
    if exit is not None:
        sys.exit(exit)
