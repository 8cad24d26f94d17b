"""
Flags module behavioral tests (declaration, normalization, conversion).

Scope
- Validate Flag declarations and type inference from initial values.
- Validate namedflags() ordering.
- Validate convert() for every type tag, including failures.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import math
import unittest
from datetime import datetime
from unittest import TestCase

from take import Flag, NamedFlag, HELP, namedflags, typeof, convert
from take.faults import ConversionError, SchemaError


class TestFlag(TestCase):
    """Behavioral tests for Flag declarations."""

    def testFlagMirrorsDeclaration(self):
        flag = Flag("dist", "output directory", env="OUTPUT")
        self.assertEqual(flag.initial, "dist")
        self.assertEqual(flag.descr, "output directory")
        self.assertEqual(flag.env, "OUTPUT")

    def testFlagEnvDefaultsToNone(self):
        self.assertIsNone(Flag(3, "count").env)

    def testFlagDescrDefaultsToNone(self):
        self.assertIsNone(Flag(3).descr)

    def testFlagFieldsAreReadOnly(self):
        flag = Flag(3, "count")
        with self.assertRaises(AttributeError):
            flag.initial = 4  # type: ignore[misc]

    def testFlagTypeIsInferred(self):
        self.assertEqual(Flag("x", "d").type, "string")
        self.assertEqual(Flag(3, "d").type, "number")
        self.assertEqual(Flag(2.5, "d").type, "number")
        self.assertEqual(Flag(False, "d").type, "boolean")
        self.assertEqual(Flag(datetime(2024, 1, 1), "d").type, "timestamp")

    def testFlagRepr(self):
        self.assertEqual(repr(Flag(3, "count")), "flag(initial=3, descr='count', env=None)")


class TestTypeOf(TestCase):
    """Behavioral tests for typeof()."""

    def testBooleanIsNotANumber(self):
        self.assertEqual(typeof(True), "boolean")

    def testUnsupportedTypeRaises(self):
        with self.assertRaises(SchemaError):
            typeof([1, 2])


class TestNamedFlags(TestCase):
    """Behavioral tests for namedflags()."""

    def testSortedByName(self):
        specs = namedflags({
            "watch": Flag(False, "watch"),
            "count": Flag(3, "count"),
            "Zed": Flag("z", "zed"),
        })
        self.assertEqual([spec.name for spec in specs], ["Zed", "count", "watch"])

    def testCarriesDeclaration(self):
        spec, = namedflags({"count": Flag(3, "count", env="COUNT")})
        self.assertEqual(spec, NamedFlag("count", 3, "count", "COUNT"))
        self.assertEqual(spec.type, "number")

    def testEmptyMapping(self):
        self.assertEqual(namedflags({}), [])

    def testHelpSpec(self):
        self.assertEqual(HELP.name, "help")
        self.assertIs(HELP.initial, False)
        self.assertIsNone(HELP.env)


class TestConvert(TestCase):
    """Behavioral tests for convert()."""

    def testString(self):
        self.assertEqual(convert("abc", "string"), "abc")

    def testIntegerLiteral(self):
        value = convert("42", "number")
        self.assertEqual(value, 42)
        self.assertIsInstance(value, int)

    def testFloatLiteral(self):
        self.assertEqual(convert("2.5", "number"), 2.5)
        self.assertEqual(convert("-1e3", "number"), -1000.0)
        self.assertEqual(convert(".5", "number"), 0.5)

    def testLeadingLiteralIsUsed(self):
        self.assertEqual(convert("12px", "number"), 12)

    def testInfinity(self):
        self.assertTrue(math.isinf(convert("Infinity", "number")))

    def testNonNumericRaises(self):
        with self.assertRaises(ConversionError) as context:
            convert("abc", "number")
        self.assertEqual(context.exception.value, "abc")
        self.assertIn("abc", context.exception.message)

    def testBooleanTruthy(self):
        self.assertIs(convert("1", "boolean"), True)
        self.assertIs(convert("yes", "boolean"), True)
        self.assertIs(convert("true", "boolean"), True)

    def testBooleanFalsy(self):
        for raw in ("", "0", "false", "FALSE", "no", "off", " off "):
            with self.subTest(raw=raw):
                self.assertIs(convert(raw, "boolean"), False)

    def testTimestamp(self):
        self.assertEqual(convert("2024-05-01T10:00:00", "timestamp"), datetime(2024, 5, 1, 10))

    def testBadTimestampRaises(self):
        with self.assertRaises(ConversionError):
            convert("yesterday", "timestamp")

    def testUnknownTypeRaises(self):
        with self.assertRaises(SchemaError):
            convert("x", "list")


if __name__ == "__main__":
    unittest.main()
