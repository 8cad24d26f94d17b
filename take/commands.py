"""
Take command layer: declare, register, and dispatch CLI commands.

What this module provides
- Command: wraps a Python callable (the handler) with a name, a description,
  optional long help, and a mapping of flags.
  • Names are whitespace-separated segments; "db migrate" is a subcommand-style
    name, independent of whether a "db" command exists.
- command(...): build a Command directly or as a decorator.
- Registry: the validated, name-sorted command set for one process, and the
  dispatcher that runs it.
- register(...): validate, then run sys.argv (or a given prompt) to completion.
- CommandInput: what a handler receives: flag values, positionals, a re-entrant
  dispatcher, its own name, and its help callback.

Quick start
    from take import Flag, command, register, fail

    @command(flags={
        "watch": Flag(False, "rebuild on change"),
        "output": Flag("dist", "output directory", env="OUTPUT"),
    })
    def build(input):
        \"\"\"Build the project\"\"\"
        if not input.args:
            fail("nothing to build")
        print(input.flags["output"], input.args)

    @command(name="db migrate")
    async def migrate(input):
        \"\"\"Run migrations, then rebuild\"\"\"
        await input.cmd("build", "--output", "out", "schema")

    if __name__ == "__main__":
        register(build, migrate)

Dispatch pipeline
- resolve: longest command-name prefix of the tokens (take.parsing.resolve).
- parse: flags/positionals with environment and initial-value fallback.
- run: await a coroutine handler; run a plain one in a worker thread (awaiting
  whatever awaitable it returns); print the elapsed time.

Fault routing
- schema problems → SchemaValidationError at Registry construction.
- unresolved command → overview + error, exit 1.
- flag/conversion problems and fail(...) in a handler → command help + error, exit 1.
- anything else → exit with the error's positive integer code/returncode attribute
  when present, otherwise print the traceback and exit 1.
"""
import asyncio
import functools
import inspect
import logging
import os
import shlex
import sys
import traceback
from collections.abc import Iterable, Mapping
from types import MappingProxyType
from typing import Any, Callable, NamedTuple

from rich.console import Console
from rich.logging import RichHandler
from rich.text import Text

from . import help as renderer
from .docs import inject
from .faults import *
from .flags import HELP, Flag, SpecType, namedflags, typeof
from .parsing import parse, resolve
from .utils import *

logger = logging.getLogger(__name__)


class CommandInput(NamedTuple):
    """
    Everything a handler receives for one invocation.

    Fields
    - flags: read-only mapping with a value for every declared flag (plus "help").
    - args: positional arguments, in order.
    - cmd: re-enters the dispatcher. async handlers await it (await input.cmd("build", "-w"));
      plain handlers, which run in a worker thread, call it and block until it finishes.
    - name: normalized name of the running command.
    - help: print this command's help and exit; help("message") exits 1 with the message.
    """
    flags: Mapping[str, Any]
    args: tuple[str, ...]
    cmd: Callable[..., Any]
    name: str
    help: Callable[..., Any]


class Command(metaclass=SpecType):
    """
    A registered unit of work.

    Parameters
    - callback: callable(CommandInput) returning None or an awaitable.
    - name: str; defaults to the callback's __name__ with underscores as dashes.
    - descr: str; defaults to the callback's docstring.
    - help: str; long help shown in the command's detail view.
    - flags: Mapping[str, Flag]; defaults to no flags.

    Nothing is validated here; the Registry validates the whole command set at
    once so that every problem is reported against a command name.
    """

    __introspectable__ = (
        "name",
        "names",
        "descr",
        "help",
        "flags",
    )

    def __new__(cls, callback, /, name=Unset, descr=Unset, help=Unset, flags=Unset):
        self = super().__new__(cls)
        self._callback = callback
        self._name = coalesce(name, getattr(callback, "__name__", "").replace("_", "-"))
        self._names = tuple(self._name.split()) if isinstance(self._name, str) else ()
        self._descr = coalesce(descr, inspect.getdoc(callback) if callable(callback) else None)
        self._help = coalesce(help)
        self._flags = coalesce(flags, {})
        return self

    def __call__(self, input, /):
        return self._callback(input)


def command(source=Unset, /, *args, **kwargs):
    """
    Create a Command or return a decorator to build it later.

    Invocation modes
    - Direct callback:  cmd = command(func, name="x", ...)
    - Decorator:        @command(name="x", flags={...})
                        def func(input): ...
    """
    @rename("command")
    def wrapper(source, /):
        if not callable(source):
            raise TypeError("@command() must be applied to a callable")
        return Command(source, *args, **kwargs)

    return wrapper(source) if source is not Unset else wrapper


def _process_name(command, names):
    if not isinstance(command.name, str) or not command.names:
        raise SchemaValidationError('all commands must have a "name"')
    # tidy name: single spaces between segments
    command._name = " ".join(command.names)
    if command.name in names:
        raise SchemaValidationError(f"duplicate command name: {command.name}")
    names.add(command.name)


def _process_callback(command):
    if not callable(command._callback):
        raise SchemaValidationError(f'command "{command.name}" must have a callable handler')


def _process_flags(command):
    """
    Validate the flags mapping and normalize plain mappings into Flag objects.
    """
    if not isinstance(command._flags, Mapping):
        raise SchemaValidationError(f'command "{command.name}" flags must be a mapping, you can use {{}}')

    flags = {}
    for name, flag in command._flags.items():
        if not isinstance(name, str) or not name:
            raise SchemaValidationError(f'command "{command.name}" has a flag without a name')
        if isinstance(flag, Mapping):
            if "initial" not in flag:
                raise SchemaValidationError(f'command "{command.name}" flag "{name}" must have an "initial" value')
            flag = Flag(
                flag["initial"],
                flag.get("descr", flag.get("description", Unset)),
                env=flag.get("env", Unset),
            )
        elif not isinstance(flag, Flag):
            raise SchemaValidationError(f'command "{command.name}" flag "{name}" must be a Flag or a mapping')
        if not isinstance(flag.descr, str) or not flag.descr.strip():
            raise SchemaValidationError(f'command "{command.name}" flag "{name}" must have a "descr"')
        if flag.env is not None and not isinstance(flag.env, str):
            raise SchemaValidationError(f'command "{command.name}" flag "{name}" env must be a string')
        try:
            typeof(flag.initial)
        except SchemaError as fault:
            raise SchemaValidationError(f'command "{command.name}" flag "{name}": {fault.message}') from None
        flags[name] = flag
    command._flags = flags


def _tokenize(prompt):
    """
    Normalize a prompt into a token list: Unset → sys.argv[1:], str → shlex.split, Iterable[str] → list.
    """
    if prompt is Unset:
        return sys.argv[1:]
    if isinstance(prompt, str):
        return shlex.split(prompt)
    if isinstance(prompt, Iterable):
        tokens = list(prompt)
        if not all(isinstance(token, str) for token in tokens):
            raise TypeError("main() argument must be a string or an iterable of strings")
        return tokens
    raise TypeError("main() argument must be a string or an iterable of strings")


def _exitcode(error):
    # first positive integer exit status carried by the error, if any; a child
    # killed by a signal reports a negative returncode and falls through
    for attribute in ("code", "returncode"):
        value = getattr(error, attribute, None)
        if isinstance(value, int) and not isinstance(value, bool | FaultCode) and value > 0:
            return value
    return None


class Registry:
    """
    Validated command set and dispatcher for one process.

    Options
    - prog: program name in help; defaults to __prog__ in __main__, then the script name.
    - environ: mapping consulted for flag fallbacks and DEBUG; defaults to os.environ.
    - envfile: KEY=VALUE file loaded into environ by main(); None disables.
    - docs: text file that receives the command reference on every overview render.
    - colorful: style help output.
    - file: stream help and timing lines are printed to; defaults to stdout.

    Raises
    - SchemaValidationError when the command set is malformed.
    """

    def __init__(
            self,
            *commands,
            prog=Unset,
            environ=Unset,
            envfile=".env",
            docs=None,
            colorful=False,
            file=Unset
    ):
        if not commands:
            raise SchemaValidationError("at least 1 command must be registered")

        names = set()
        for command in commands:
            if not isinstance(command, Command):
                raise SchemaValidationError(f"registered commands must be commands, got {command!r}")
            _process_name(command, names)
            _process_callback(command)
            _process_flags(command)

        self._commands = tuple(sorted(commands, key=lambda command: command.name))
        self._prog = coalesce(prog, getattr(__import__("__main__"), "__prog__", Unset))
        if self._prog is Unset:
            self._prog = os.path.basename(sys.argv[0]) if sys.argv and sys.argv[0] else "cli"
        self._environ = coalesce(environ, os.environ)
        self._envfile = envfile
        self._docs = docs
        self._colorful = bool(colorful)
        self._file = file

    commands = mirror("commands")
    prog = mirror("prog")
    environ = mirror("environ")

    def _console(self):
        return Console(file=coalesce(self._file), highlight=False)

    def overview(self, message=Unset, /):
        """
        Print the command list (and message) and exit; 0 without a message, 1 with one.
        """
        if not message and self._docs:
            inject(self._docs, self._commands, self._environ)
        renderer.show(
            renderer.overview(self._commands, self._prog, self._environ, colorful=self._colorful),
            message,
            file=self._file,
            colorful=self._colorful,
        )

    def detail(self, command, specs, message=Unset, /):
        """
        Print one command's help (and message) and exit; 0 without a message, 1 with one.
        """
        renderer.show(
            renderer.detail(command, specs, self._prog, colorful=self._colorful),
            message,
            file=self._file,
            colorful=self._colorful,
        )

    async def invoke(self, *tokens):
        """
        Run one command from tokens; handlers re-enter here through input.cmd.
        """
        if not tokens:
            self.overview()

        try:
            command, rest = resolve(tokens, self._commands)
        except UnresolvedCommandError as fault:
            logger.debug("fault %s (%d): %s", fault.code.name, fault.code, fault.message)
            self.overview(fault.message)

        specs = [*namedflags(command.flags), HELP]
        render = functools.partial(self.detail, command, specs)

        try:
            values, positionals = parse(rest, specs, self._environ)
        except HelpFault as fault:
            logger.debug("fault %s (%d): %s", fault.code.name, fault.code, fault.message)
            render(fault.message)

        if values.get("help"):
            render()

        # plain handlers run in a worker thread so that input.cmd can block on the loop
        concurrent = inspect.iscoroutinefunction(command._callback)
        logger.debug("running %r with flags %r and arguments %r", command.name, values, positionals)
        input = CommandInput(
            flags=MappingProxyType(values),
            args=tuple(positionals),
            cmd=self.invoke if concurrent else self._blocking(asyncio.get_running_loop()),
            name=command.name,
            help=render,
        )

        stopwatch = timer()
        try:
            if concurrent:
                await command(input)
            elif inspect.isawaitable(result := await asyncio.to_thread(command, input)):
                await result
        except HelpFault as fault:
            logger.debug("fault %s (%d): %s", fault.code.name, fault.code, fault.message)
            render(fault.message)

        self._console().print(Text(f'{self._prog} "{command.name}" ran in {stopwatch}'), soft_wrap=True)

    def _blocking(self, loop, /):
        """
        Build input.cmd for a plain handler: run the nested command on loop and wait for it.
        """
        async def reenter(*tokens):
            # SystemExit would stop the loop; hand it back to the calling thread instead
            try:
                await self.invoke(*tokens)
            except SystemExit as exit:
                return exit
            return None

        @rename("cmd")
        def cmd(*tokens):
            if (exit := asyncio.run_coroutine_threadsafe(reenter(*tokens), loop).result()) is not None:
                raise exit

        return cmd

    def _unexpected(self, error):
        if (code := _exitcode(error)) is not None:
            logger.debug("exiting with %d from %s", code, type(error).__name__)
            sys.exit(code)
        message = "".join(traceback.format_exception(error)).rstrip()
        self._console().print(Text(f"ERROR: {message}\n"), soft_wrap=True)
        sys.exit(1)

    def main(self, prompt=Unset, /):
        """
        Run the program: load the env file, answer top-level help, dispatch.

        prompt
        - Unset: sys.argv[1:].
        - str: shell-like string, split with shlex.split.
        - Iterable[str]: pre-tokenized arguments.
        """
        tokens = _tokenize(prompt)

        if self._envfile:
            loadenv(self._envfile, self._environ)

        if self._environ.get("DEBUG") == "1":
            logging.basicConfig(
                level=logging.DEBUG,
                format="%(message)s",
                handlers=[RichHandler(console=Console(stderr=True))],
            )

        if not tokens or tokens[0] in ("-h", "--help"):
            self.overview()

        try:
            asyncio.run(self.invoke(*tokens))
        except HelpFault as fault:
            self.overview(fault.message)
        except Exception as error:
            self._unexpected(error)


def register(*commands, prompt=Unset, **options):
    """
    Validate commands and run the program.

    A malformed command set is reported and ends the process with status 1.
    Other keyword options are forwarded to Registry.
    """
    try:
        registry = Registry(*commands, **options)
    except SchemaValidationError as fault:
        Console(file=coalesce(options.get("file", Unset)), highlight=False).print(fault, soft_wrap=True)
        sys.exit(1)
    registry.main(prompt)
    return registry


__all__ = (
    "CommandInput",
    "Command",
    "command",
    "Registry",
    "register",
)
