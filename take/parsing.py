"""
Command resolution and flag parsing.

resolve(tokens, commands)
- greedy longest-prefix match of the tokens against the commands' normalized
  names. "db migrate x" prefers a "db migrate" command over "db".

parse(tokens, specs, environ)
- scan(): one left-to-right pass with one token of lookahead state (the
  pending valued flag). each token is a flag value, a flag marker
  ("--name" / "-x"), or a positional.
- settle(): fill in every flag not given on the command line, first from its
  environment variable, then from its initial value.

Short flags
- "-x" picks the first spec (in spec order) whose first letter appears
  anywhere in "x"; so "-f" reaches "force" and "-fv" reaches whichever of
  "force"/"verbose" sorts first.

Booleans
- a boolean marker is presence-only: it never consumes the next token.
  "--watch file.txt" gives watch=True and the positional "file.txt". boolean
  values are only ever converted from the environment.
"""
import logging
import re

from .faults import MissingFlagValueError, UnknownFlagError, UnresolvedCommandError
from .flags import convert

logger = logging.getLogger(__name__)

_MARKER = re.compile(r"-(-?)(\S+)")


def resolve(tokens, commands, /):
    """
    Split tokens into the matched command and the remaining arguments.

    parameters
    - tokens: Sequence[str]
    - commands: Iterable[Command] with normalized names (space-joined segments).

    returns
    - (command, rest): rest is a list of the tokens after the command name.

    raises
    - UnresolvedCommandError when no prefix names a command.
    """
    tokens = list(tokens)
    byname = {command.name: command for command in commands}
    for length in range(len(tokens), 0, -1):
        if (command := byname.get(" ".join(tokens[:length]))) is not None:
            logger.debug("resolved %r with %d remaining arguments", command.name, len(tokens) - length)
            return command, tokens[length:]
    raise UnresolvedCommandError("no matched command: %s" % " ".join(tokens), tokens=tokens)


def _lookup(marker, specs):
    long, name = marker[1], marker[2]
    for spec in specs:
        if long and spec.name == name:
            return spec
        if not long and spec.name[0] in name:
            return spec
    raise UnknownFlagError(f'unknown flag "{name}"', flag=name)


def scan(tokens, specs, /):
    """
    Sort tokens into flag values and positionals (no defaults applied).

    returns
    - (values, positionals): dict of the flags given on the command line, list of positionals.

    raises
    - UnknownFlagError, MissingFlagValueError, ConversionError.
    """
    values = {}
    positionals = []
    pending = None

    for token in tokens:
        if pending is not None:
            values[pending.name] = convert(token, pending.type)
            pending = None
            continue

        if marker := _MARKER.fullmatch(token):
            spec = _lookup(marker, specs)
            if spec.type == "boolean":
                values[spec.name] = True
            else:
                pending = spec
            continue

        positionals.append(token)

    if pending is not None:
        raise MissingFlagValueError(f"missing value for flag: {pending.name}", flag=pending.name)

    return values, positionals


def settle(values, specs, environ, /):
    """
    Complete values in place: command line > environment > initial value.
    """
    for spec in specs:
        if spec.name in values:
            continue
        if spec.env and environ.get(spec.env):
            logger.debug("flag %r taken from $%s", spec.name, spec.env)
            values[spec.name] = convert(environ[spec.env], spec.type)
            continue
        values[spec.name] = spec.initial
    return values


def parse(tokens, specs, environ, /):
    """
    Parse the arguments that follow a command name.

    When the "help" flag was given, the values are returned as scanned (no
    defaults): the caller renders help instead of running the command.
    """
    values, positionals = scan(tokens, specs)
    if values.get("help"):
        return values, positionals
    return settle(values, specs, environ), positionals


__all__ = (
    "resolve",
    "scan",
    "settle",
    "parse",
)
