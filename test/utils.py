"""
Utils module behavioral tests (sentinels, helpers, timer, env files).

Scope
- Validate Unset/coalesce semantics and rename()/mirror() helpers.
- Validate elapsed-time formatting across units.
- Validate loadenv() parsing rules and missing-file handling.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import os
import tempfile
import unittest
from unittest import TestCase

from take.utils import Unset, UnsetType, _elapsed, coalesce, loadenv, mirror, rename, timer


class TestUnset(TestCase):
    """Behavioral tests for the Unset sentinel."""

    def testSingleton(self):
        self.assertIs(UnsetType(), Unset)

    def testFalsey(self):
        self.assertFalse(Unset)
        self.assertEqual(repr(Unset), "Unset")

    def testNotSubclassable(self):
        with self.assertRaises(TypeError):
            type("Other", (UnsetType,), {})

    def testNoUnionSupport(self):
        with self.assertRaises(TypeError):
            Unset | int
        with self.assertRaises(TypeError):
            int | Unset

    def testCoalesce(self):
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(None, "fallback"))
        self.assertEqual(coalesce(0, 5), 0)
        self.assertIsNone(coalesce(Unset))


class TestRename(TestCase):
    """Behavioral tests for rename()."""

    def testDirect(self):
        def original():
            pass

        rename(original, "renamed")
        self.assertEqual(original.__name__, "renamed")
        self.assertEqual(original.__qualname__, "renamed")

    def testDecorator(self):
        @rename("renamed")
        def original():
            pass

        self.assertEqual(original.__name__, "renamed")

    def testBadArguments(self):
        with self.assertRaises(TypeError):
            rename()
        with self.assertRaises(TypeError):
            rename(42, "name")


class TestMirror(TestCase):
    """Behavioral tests for mirror()."""

    def testReadOnlyViews(self):
        class Holder:
            items = mirror("items")
            table = mirror("table")

            def __init__(self):
                self._items = [1, 2]
                self._table = {"a": 1}

        holder = Holder()
        self.assertEqual(holder.items, (1, 2))
        with self.assertRaises(TypeError):
            holder.table["b"] = 2
        with self.assertRaises(AttributeError):
            holder.items = ()


class TestTimer(TestCase):
    """Behavioral tests for timer and elapsed formatting."""

    def testMilliseconds(self):
        self.assertEqual(_elapsed(1), "1.00ms")
        self.assertEqual(_elapsed(12.5), "12.50ms")

    def testSeconds(self):
        self.assertEqual(_elapsed(1000), "1.00sec")
        self.assertEqual(_elapsed(1520), "1.52secs")

    def testMinutes(self):
        self.assertEqual(_elapsed(90_000), "1.50mins")

    def testHoursAbsorbLargerValues(self):
        self.assertEqual(_elapsed(2 * 3_600_000), "2.00hrs")
        self.assertEqual(_elapsed(48 * 3_600_000), "48.00hrs")

    def testStopwatch(self):
        stopwatch = timer()
        self.assertTrue(str(stopwatch).endswith("ms"))
        self.assertRegex(stopwatch(), r"^\d+\.\d{2}(ms|secs?)$")


class TestLoadEnv(TestCase):
    """Behavioral tests for loadenv()."""

    def setUp(self):
        self.directory = tempfile.TemporaryDirectory()
        self.addCleanup(self.directory.cleanup)
        self.path = os.path.join(self.directory.name, ".env")

    def load(self, content, environ=None):
        with open(self.path, "w", encoding="utf-8") as file:
            file.write(content)
        environ = {} if environ is None else environ
        self.assertTrue(loadenv(self.path, environ))
        return environ

    def testPairs(self):
        self.assertEqual(self.load("A=1\nB = two \n"), {"A": "1", "B": "two"})

    def testCommentsAndBlankLines(self):
        self.assertEqual(self.load("# comment\n\n  # indented\nA=1\n"), {"A": "1"})

    def testQuotesStripped(self):
        environ = self.load("A=\"x y\"\nB='z'\nC=\"unbalanced'\n")
        self.assertEqual(environ, {"A": "x y", "B": "z", "C": "\"unbalanced'"})

    def testValueMayContainEquals(self):
        self.assertEqual(self.load("URL=a=b\n"), {"URL": "a=b"})

    def testLinesWithoutEqualsIgnored(self):
        self.assertEqual(self.load("garbage\nA=1\n"), {"A": "1"})

    def testOverwritesExistingKeys(self):
        self.assertEqual(self.load("A=new\n", {"A": "old", "B": "kept"}), {"A": "new", "B": "kept"})

    def testEmptyValue(self):
        self.assertEqual(self.load("A=\n"), {"A": ""})

    def testMissingFile(self):
        environ = {}
        self.assertFalse(loadenv(os.path.join(self.directory.name, "missing.env"), environ))
        self.assertEqual(environ, {})


if __name__ == "__main__":
    unittest.main()
