"""
Take faults (errors) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every failure the
  dispatcher can surface. Codes are grouped by domain to keep logs and
  searches predictable.
- TakeException: base type that carries a message and knows how to render
  itself (“ERROR: <message>”) through rich.
- HelpFault: failures that are answered by printing help text and exiting 1.
- fail(): the way command logic reports a user-facing error.

Routing
- Schema faults (SchemaValidationError, SchemaError) stop the program before
  any command runs.
- Command-scoped help faults (ConversionError, UnknownFlagError,
  MissingFlagValueError, HandlerError) print the command's detail view.
- UnresolvedCommandError prints the overview.
- SpawnError carries the child's exit status, which becomes the process exit code.
"""
from enum import IntEnum

from rich.text import Text


class FaultCode(IntEnum):
    """
    canonical fault codes used across the cli (stable identifiers).

    grouping
    - schema (101xx): SCHEMA_VALIDATION, UNKNOWN_TYPE
    - routing (111xx): UNRESOLVED_COMMAND
    - flags (112xx): UNKNOWN_FLAG, MISSING_FLAG_VALUE, CONVERSION
    - delegated (113xx): HANDLER, SPAWN
    """
    # --- schema errors (10xxx) ---
    SCHEMA_VALIDATION   = 10101
    UNKNOWN_TYPE        = 10102

    # --- routing errors (11xxx) ---
    UNRESOLVED_COMMAND  = 11101

    # --- flag errors (11xxx) ---
    UNKNOWN_FLAG        = 11201
    MISSING_FLAG_VALUE  = 11202
    CONVERSION          = 11203

    # --- delegated errors (11xxx) ---
    HANDLER             = 11301
    SPAWN               = 11302


class TakeException(Exception):
    code = FaultCode.HANDLER

    def __init__(self, message, /):
        if not isinstance(message, str):
            raise TypeError(f"{type(self).__name__} message must be a string")
        super().__init__(message)
        self.message = message

    def __rich__(self):
        return Text.assemble(("ERROR:", "bold red"), " ", self.message)

    def __str__(self):
        return self.message


class SchemaValidationError(TakeException):
    code = FaultCode.SCHEMA_VALIDATION


class SchemaError(TakeException):
    code = FaultCode.UNKNOWN_TYPE


class HelpFault(TakeException):
    """
    A failure answered with help text; the message is shown under the help view.
    """


class ConversionError(HelpFault):
    code = FaultCode.CONVERSION

    def __init__(self, message, /, value):
        super().__init__(message)
        self.value = value


class UnknownFlagError(HelpFault):
    code = FaultCode.UNKNOWN_FLAG

    def __init__(self, message, /, flag):
        super().__init__(message)
        self.flag = flag


class MissingFlagValueError(HelpFault):
    code = FaultCode.MISSING_FLAG_VALUE

    def __init__(self, message, /, flag):
        super().__init__(message)
        self.flag = flag


class UnresolvedCommandError(HelpFault):
    code = FaultCode.UNRESOLVED_COMMAND

    def __init__(self, message, /, tokens=()):
        super().__init__(message)
        self.tokens = tuple(tokens)


class HandlerError(HelpFault):
    code = FaultCode.HANDLER


class SpawnError(TakeException):
    """
    A spawned program exited unsuccessfully; `returncode` holds its exit status.
    """
    code = FaultCode.SPAWN

    def __init__(self, message, /, program, returncode):
        super().__init__(message)
        self.program = program
        self.returncode = returncode


def fail(message, /):
    """
    report a user-facing error from command logic.

    the dispatcher prints the running command's help followed by the message
    and exits with status 1.
    """
    raise HandlerError(message)


__all__ = (
    "FaultCode",
    "TakeException",
    "SchemaValidationError",
    "SchemaError",
    "HelpFault",
    "ConversionError",
    "UnknownFlagError",
    "MissingFlagValueError",
    "UnresolvedCommandError",
    "HandlerError",
    "SpawnError",
    "fail",
)
