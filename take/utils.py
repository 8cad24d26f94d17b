"""
Take utilities (internal helpers, carefully exposed)

Scope
- Small building blocks shared by the flag, command, and help layers.
- Collaborators that live around the dispatcher but carry no parsing logic.

Overview
- UnsetType / Unset
  • Singleton sentinel to represent “value not provided” without conflating with None.
  • Falsey (bool(Unset) is False), printable as "Unset", and non-subclassable.

- coalesce(value, default=None)
  • Replace Unset with a concrete default, but preserve legitimate falsey values like None/0/""/[].

- rename(callable, name) / @rename("name")
  • Assign stable __name__/__qualname__ to generated wrappers for clean tracebacks and help.

- mirror("attr")
  • Read-only property factory exposing a private backing field (self._attr).

- timer()
  • Stopwatch whose string form is the human-readable elapsed time ("1.52secs").

- loadenv(path)
  • Populate an environment mapping from a KEY=VALUE file; a missing file is not an error.

Quick examples
    >>> one = coalesce(Unset, "fallback")  # "fallback"
    >>> two = coalesce(None, "fallback")    # None  (None is preserved)
    >>> stopwatch = timer()
    >>> print(f"ran in {stopwatch}")
    ran in 0.01ms
"""
import builtins
import functools
import logging
import os
import re
import time
from collections.abc import Mapping, Sequence, Set
from types import MappingProxyType
from typing import final

logger = logging.getLogger(__name__)


@final
class UnsetType:
    """
    Internal sentinel type representing a value that was not provided.

    This is used when None is a legitimate user value, but the API needs a way
    to distinguish “not provided” from “provided as None”. A single instance,
    Unset, is exposed for use as the default in internal parameters.
    """

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


Unset = UnsetType()
"""
Internal sentinel for “not provided”.

Notes
- Singleton: there is only one Unset instance.
- Distinct from None: equality and identity checks must not treat it as None.
- Falsey: bool(Unset) is False, but it is not equivalent to None or 0.
"""


def coalesce(object, default=None, /):
    """
    Resolve an internal Unset sentinel to a concrete default.

    Returns the given object unless it is the Unset sentinel, in which case the
    provided default is returned. Falsey values like None, 0, "" or [] are
    preserved as-is.

    Examples
    - coalesce("name", "fallback") -> "name"
    - coalesce(Unset, "fallback")  -> "fallback"
    - coalesce(None, "fallback")   -> None
    """
    return object if object is not Unset else default


def rename(*parameters):
    """
    Set a stable __name__/__qualname__ on a callable, or return a decorator
    that will do so later.

    Forms
    - rename(callable, name) -> callable (renamed in place)
    - rename(name)           -> decorator
    """
    match len(parameters):
        case 2:
            callable, name = parameters
            if not builtins.callable(callable):
                raise TypeError("rename() first argument must be callable")
            if not isinstance(name, str):
                raise TypeError("rename() second argument must be a string")
            try:
                callable.__qualname__ = name
                callable.__name__ = name
            except (AttributeError, TypeError):
                raise TypeError("rename() first argument must be a updatable callable") from None
            return callable
        case 1:
            name, = parameters
            if not isinstance(name, str):
                raise TypeError("@rename() argument must be a string")

            def wrapper(callable):
                if not builtins.callable(callable):
                    raise TypeError("@rename() must be applied to a callable")
                return rename(callable, name)

            return rename(wrapper, "rename")
        case _:
            raise TypeError("rename takes 1 to 2 arguments but %d were given" % len(parameters))


def _freeze(object):
    """
    Return a read-only view for containers (tuple, MappingProxyType, frozenset).
    """
    if isinstance(object, Sequence) and not isinstance(object, str):
        return tuple(object)
    elif isinstance(object, Mapping):
        return MappingProxyType(object)
    elif isinstance(object, Set):
        return frozenset(object)
    return object


def mirror(name, /):
    """
    Define a read-only property that mirrors a private backing attribute.

    The generated property reads "_{name}" on the instance and returns a
    read-only view for container types.

    Example
    - Given self._flags, declare flags = mirror("flags") to expose it safely.
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        return _freeze(getattr(self, "_" + name))

    return property(getter)


# (limit, unit) pairs: a value below the limit is shown in that unit, otherwise
# it is divided by the limit and the next unit is tried.
_SCALE = (
    (1000, "ms"),
    (60, "sec"),
    (60, "min"),
    (24, "hr"),
)


def _elapsed(milliseconds, /):
    value = milliseconds
    for index, (limit, unit) in enumerate(_SCALE):
        if value < limit or index == len(_SCALE) - 1:
            plural = "" if value == 1 or unit.endswith("s") else "s"
            return f"{value:.2f}{unit}{plural}"
        value /= limit


class timer:
    """
    Stopwatch started on construction.

    Calling the instance or converting it to a string formats the time elapsed
    since construction, auto-scaling through ms, secs, mins and hrs.
    """
    __slots__ = ("_start",)

    def __init__(self):
        self._start = time.perf_counter()

    def __call__(self):
        return _elapsed((time.perf_counter() - self._start) * 1000)

    def __str__(self):
        return self()

    def __repr__(self):
        return f"timer({self()})"


def loadenv(path=".env", /, environ=Unset):
    """
    Load KEY=VALUE lines from a file into an environment mapping.

    rules
    - blank lines and lines starting with '#' are skipped.
    - keys and values are trimmed; one pair of matching surrounding quotes
      (single or double) is stripped from the value.
    - existing keys are overwritten.

    returns
    - True when the file was read, False when it does not exist or cannot be read.
    """
    environ = coalesce(environ, os.environ)
    try:
        with open(path, encoding="utf-8") as file:
            content = file.read()
    except OSError:
        return False

    count = 0
    for line in content.splitlines():
        if not (line := line.strip()) or line.startswith("#"):
            continue
        if not (match := re.fullmatch(r"([^=]+)=(.*)", line)):
            continue
        key = match[1].strip()
        value = match[2].strip()
        if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
            value = value[1:-1]
        environ[key] = value
        count += 1

    logger.debug("loaded %d variables from %s", count, path)
    return True


__all__ = (
    # Functions
    "coalesce",
    "rename",
    "mirror",
    "loadenv",

    # Types
    "UnsetType",
    "timer",

    # Constants
    "Unset",
)
