"""
Process module behavioral tests (child programs).

Scope
- Validate spawn() success, failure status, and stream redirection.
- Validate that a failing child decides the process exit status through main().

Conventions
- Test method names follow CamelCase per project convention.
- Children are the running Python interpreter, so no external program is needed.
"""

from __future__ import annotations

import asyncio
import io
import sys
import unittest
from unittest import IsolatedAsyncioTestCase, TestCase

from take import Registry, SpawnError, command, spawn


class TestSpawn(IsolatedAsyncioTestCase):
    """Behavioral tests for spawn()."""

    async def testSuccessReturnsZero(self):
        self.assertEqual(await spawn(sys.executable, "-c", "pass"), 0)

    async def testFailureRaises(self):
        with self.assertRaises(SpawnError) as context:
            await spawn(sys.executable, "-c", "raise SystemExit(3)")
        self.assertEqual(context.exception.returncode, 3)
        self.assertEqual(context.exception.program, sys.executable)
        self.assertIn("exited with 3", context.exception.message)

    async def testStreamsCanBeRedirected(self):
        # stdin reads empty from devnull, so the child exits 1
        code = "import sys; print('noise'); sys.exit(sys.stdin.read() != 'ok')"
        with self.assertRaises(SpawnError) as context:
            await spawn(
                sys.executable, "-c", code,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.DEVNULL,
            )
        self.assertEqual(context.exception.returncode, 1)


class TestSpawnExitStatus(TestCase):
    """Behavioral tests for spawn() failures inside handlers."""

    def testChildStatusBecomesExitStatus(self):
        @command(name="lint")
        async def lint(input):
            await spawn(sys.executable, "-c", "raise SystemExit(5)")

        registry = Registry(lint, prog="dev", environ={}, envfile=None, file=io.StringIO())
        with self.assertRaises(SystemExit) as context:
            registry.main(["lint"])
        self.assertEqual(context.exception.code, 5)


if __name__ == "__main__":
    unittest.main()
