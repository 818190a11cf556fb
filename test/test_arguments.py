"""
Arguments module behavioral tests (option flag specs, positional slots).

Scope
- Validate Option construction: arity, spellings, negation, canonical name, matching.
- Validate Cardinal construction and parsing from "<x>" / "[x]" tokens.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import unittest
from unittest import TestCase

from commodore import Arity, Option, Cardinal


class TestOption(TestCase):
    """Behavioral tests for Option (flag) specifications."""

    def testRequiredArityFromAngleBrackets(self):
        self.assertIs(Option("-p, --port <number>").arity, Arity.REQUIRED)

    def testOptionalArityFromSquareBrackets(self):
        self.assertIs(Option("-c, --cheese [type]").arity, Arity.OPTIONAL)

    def testAngleBracketsWinOverSquareBrackets(self):
        self.assertIs(Option("--mix <base> [extra]").arity, Arity.REQUIRED)

    def testBooleanArityWithoutPlaceholders(self):
        option = Option("-v, --verbose")
        self.assertIs(option.arity, Arity.BOOLEAN)
        self.assertFalse(option.required)
        self.assertFalse(option.optional)

    def testShortAndLongSpellings(self):
        option = Option("-p, --port <number>")
        self.assertEqual(option.short, "-p")
        self.assertEqual(option.long, "--port")
        self.assertEqual(option.flags, "-p, --port <number>")

    def testShortSpellingMayBeAbsent(self):
        option = Option("--port <number>")
        self.assertIsNone(option.short)
        self.assertEqual(option.long, "--port")

    def testPipeAndSpaceSeparators(self):
        option = Option("-q |  --quiet")
        self.assertEqual(option.short, "-q")
        self.assertEqual(option.long, "--quiet")

    def testCanonicalNameStripsDashes(self):
        self.assertEqual(Option("--dry-run").name, "dry-run")

    def testCanonicalNameStripsNegation(self):
        self.assertEqual(Option("--no-color").name, "color")

    def testNegatedOptionDefaultsToFalse(self):
        option = Option("--no-sauce")
        self.assertTrue(option.negated)
        self.assertIs(option.default, False)

    def testPlainOptionDefaultsToTrue(self):
        option = Option("--sauce")
        self.assertFalse(option.negated)
        self.assertIs(option.default, True)

    def testMatchesExactSpellingsOnly(self):
        option = Option("-p, --port <number>")
        self.assertTrue(option.matches("-p"))
        self.assertTrue(option.matches("--port"))
        self.assertFalse(option.matches("--po"))
        self.assertFalse(option.matches("--port=80"))
        self.assertFalse(option.matches("port"))

    def testMissingLongSpellingRejected(self):
        with self.assertRaises(ValueError):
            Option("-p")

    def testBlankFlagsRejected(self):
        with self.assertRaises(ValueError):
            Option("   ")

    def testNonStringFlagsRejected(self):
        with self.assertRaises(TypeError):
            Option(42)

    def testDescriptionIsTrimmed(self):
        self.assertEqual(Option("--x", "  hello ").descr, "hello")
        self.assertIsNone(Option("--x").descr)

    def testNonStringDescriptionRejected(self):
        with self.assertRaises(TypeError):
            Option("--x", 3)

    def testOptionIsReadOnly(self):
        option = Option("--port <number>")
        with self.assertRaises(AttributeError):
            option.name = "other"

    def testReprShowsTypename(self):
        self.assertTrue(repr(Option("--port <n>")).startswith("option("))


class TestCardinal(TestCase):
    """Behavioral tests for Cardinal (positional slot) specifications."""

    def testParseRequiredSlot(self):
        cardinal = Cardinal.parse("<target>", index=0)
        self.assertEqual(cardinal.name, "target")
        self.assertTrue(cardinal.required)
        self.assertEqual(str(cardinal), "<target>")

    def testParseOptionalSlot(self):
        cardinal = Cardinal.parse("[env]", index=1)
        self.assertEqual(cardinal.name, "env")
        self.assertFalse(cardinal.required)
        self.assertEqual(cardinal.index, 1)
        self.assertEqual(str(cardinal), "[env]")

    def testParseIgnoresPlainTokens(self):
        self.assertIsNone(Cardinal.parse("plain"))

    def testEmptyNameRejected(self):
        with self.assertRaises(ValueError):
            Cardinal.parse("<>")

    def testNegativeIndexRejected(self):
        with self.assertRaises(ValueError):
            Cardinal("file", index=-1)


if __name__ == "__main__":
    unittest.main()
