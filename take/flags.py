r"""
Take flag declarations and value conversion.

Overview
- Flag: declaration of a named option: its initial value, its description,
  and an optional environment variable that backs it. The flag's type is never
  declared: it is inferred from the Python type of the initial value.
    • str                → "string"
    • int / float        → "number"
    • bool               → "boolean"    (presence-only on the command line)
    • datetime           → "timestamp"
- NamedFlag: a Flag bound to its name; what the parser and the help renderer
  consume. A command's named flags are always sorted by name.
- namedflags(mapping): normalize a name → Flag mapping into sorted NamedFlags.
- typeof(initial) / convert(raw, type): type inference and string coercion.

Quick example:
    >>> from take.flags import Flag, namedflags, convert
    >>> specs = namedflags({
    ...     "watch": Flag(False, "rebuild on change"),
    ...     "count": Flag(3, "number of runs", env="COUNT"),
    ... })
    >>> [spec.name for spec in specs]
    ['count', 'watch']
    >>> convert("12", specs[0].type)
    12
"""
import functools
import operator
import re
from datetime import datetime
from typing import NamedTuple

from .faults import ConversionError, SchemaError
from .utils import *


class SpecType(type):
    """
    Metaclass for the declaration types (Flag, Command).

    Responsibilities
    - Derive __typename__ from the class name (camel-case split with hyphens),
      used in messages.
    - Expose every name listed in __introspectable__ as a read-only property
      backed by the "_<name>" attribute.
    - Provide stable __repr__/__rich_repr__ implementations.
    """
    __introspectable__ = ()

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            return f"{type(self).__typename__}({', '.join(map(functools.partial(operator.mod, '%s=%r'), self.__rich_repr__()))})"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in type(self).__introspectable__:
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


class Flag(metaclass=SpecType):
    """
    Declaration of a single flag.

    Parameters
    - initial: str | int | float | bool | datetime
      Default value; its type is the flag's type.
    - descr: str
      Short description for help. Required (checked when the command set is
      registered, so a bad declaration is reported with its command name).
    - env: str (keyword-only)
      Environment variable consulted when the flag is absent from the command line.
    """

    __introspectable__ = (
        "initial",
        "descr",
        "env",
    )

    def __new__(cls, initial, descr=Unset, *, env=Unset):
        self = super().__new__(cls)
        self._initial = initial
        self._descr = coalesce(descr)
        self._env = coalesce(env)
        return self

    @property
    def type(self):
        return typeof(self.initial)


class NamedFlag(NamedTuple):
    name: str
    initial: object
    descr: str
    env: str | None = None

    @property
    def type(self):
        return typeof(self.initial)


# Appended to every command's specs; never declared by users.
HELP = NamedFlag("help", False, "show help")


def namedflags(flags, /):
    """
    Convert a name → Flag mapping into a list of NamedFlag sorted by name.
    """
    return sorted(
        (NamedFlag(name, flag.initial, flag.descr, flag.env) for name, flag in flags.items()),
        key=operator.attrgetter("name"),
    )


def typeof(initial, /):
    """
    Infer the flag type tag from an initial value.
    """
    # bool first: bool is a subclass of int
    if isinstance(initial, bool):
        return "boolean"
    if isinstance(initial, int | float):
        return "number"
    if isinstance(initial, str):
        return "string"
    if isinstance(initial, datetime):
        return "timestamp"
    raise SchemaError(f"unknown type: {type(initial).__name__}")


# longest leading float literal, the way parseFloat reads "12px" as 12
_NUMBER = re.compile(r"\s*(?P<number>[+-]?(?:Infinity|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?))")

_FALSY = frozenset({"", "0", "false", "no", "off"})


def convert(raw, type, /):
    """
    Coerce a raw string into the given flag type.

    rules
    - "string"    → str(raw)
    - "number"    → leading float literal; integral literals give int. no literal → ConversionError.
    - "boolean"   → False for "", "0", "false", "no", "off" (any case); True otherwise.
    - "timestamp" → datetime.fromisoformat(raw); invalid → ConversionError.
    - anything else → SchemaError.
    """
    match type:
        case "string":
            return str(raw)
        case "number":
            if not (match := _NUMBER.match(str(raw))):
                raise ConversionError(f"expected a number, got: {raw}", value=raw)
            number = match["number"]
            if "Infinity" in number:
                return float(number.replace("Infinity", "inf"))
            if re.fullmatch(r"[+-]?\d+", number):
                return int(number)
            return float(number)
        case "boolean":
            return str(raw).strip().lower() not in _FALSY
        case "timestamp":
            try:
                return datetime.fromisoformat(str(raw))
            except ValueError:
                raise ConversionError(f"expected a timestamp, got: {raw}", value=raw) from None
        case _:
            raise SchemaError(f"unknown type: {type}")


__all__ = (
    "Flag",
    "NamedFlag",
    "HELP",
    "namedflags",
    "typeof",
    "convert",
)
