"""
Child-process helper for command handlers.

    @command(flags={"fix": Flag(False, "fix issues in place")})
    async def lint(input):
        await spawn("ruff", "check", *(["--fix"] if input.flags["fix"] else []))

The child inherits the standard streams unless stdin/stdout/stderr are given.
A non-zero exit raises SpawnError, whose returncode the dispatcher turns into
the process exit status.
"""
import asyncio
import logging

from .faults import SpawnError

logger = logging.getLogger(__name__)


async def spawn(program, /, *args, stdin=None, stdout=None, stderr=None, cwd=None, env=None):
    """
    Run program with args and wait for it.

    returns
    - 0 on success.

    raises
    - SpawnError carrying the exit status otherwise.
    """
    logger.debug("spawning %s %s", program, " ".join(args))
    process = await asyncio.create_subprocess_exec(
        program, *args,
        stdin=stdin,
        stdout=stdout,
        stderr=stderr,
        cwd=cwd,
        env=env,
    )
    if returncode := await process.wait():
        raise SpawnError(f"{program} exited with {returncode}", program=program, returncode=returncode)
    return 0


__all__ = (
    "spawn",
)
