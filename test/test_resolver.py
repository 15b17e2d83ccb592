"""
Token resolution behavioral tests.

Scope
- Long options ('--name', '--name value', '--name=value') and last-wins binding.
- Short options, flag clusters ('-abc') and attached values ('-ofile.txt').
- Positional accumulation and order preservation.
- Help short-circuit and required-argument validation.
- Fault taxonomy with structured context (name, value, index).
- Parser reuse and caller-owned slots.

Conventions
- Test method names follow CamelCase per project convention.
- Parsers are fed pre-tokenized lists unless the test is about prompt splitting.
"""
from __future__ import annotations

import unittest
import warnings
from unittest import TestCase

from incanti import (
    ConversionFailedError,
    EmptyInlineValueWarning,
    FaultCode,
    Flag,
    FlagAssignmentError,
    MissingValueError,
    ParseError,
    Parser,
    Registry,
    RequiredArgumentMissingError,
    Settings,
    Slot,
    UnknownArgumentError,
    Valued,
    resolve,
    validate,
)


class TestLongOptions(TestCase):
    """Behavioral tests for '--name' tokens."""

    def setUp(self):
        self.parser = Parser("tool")
        self.verbose = self.parser.flag("verbose", "v")
        self.count = self.parser.option("count", "c", int, default=1)
        self.mode = self.parser.option("mode", "m", converter=str.upper)

    def testSeparatedValue(self):
        self.parser.parse(["--count", "3"])
        self.assertEqual(self.count.value, 3)
        self.assertTrue(self.count.resolved)

    def testInlineValue(self):
        self.parser.parse(["--count=4"])
        self.assertEqual(self.count.value, 4)

    def testInlineValueSplitsOnFirstEquals(self):
        self.parser.parse(["--mode=a=b"])
        self.assertEqual(self.mode.value, "A=B")

    def testLastOccurrenceWins(self):
        self.parser.parse(["--mode", "fast", "--mode", "slow"])
        self.assertEqual(self.mode.value, "SLOW")

    def testValueMayLookLikeAnOption(self):
        self.parser.parse(["--mode", "--verbose"])
        self.assertEqual(self.mode.value, "--VERBOSE")
        self.assertIs(self.verbose.value, False)

    def testNegativeNumbersNeedTheInlineForm(self):
        self.parser.parse(["--count=-5"])
        self.assertEqual(self.count.value, -5)

    def testFlag(self):
        self.parser.parse(["--verbose"])
        self.assertIs(self.verbose.value, True)
        self.assertIs(self.parser["verbose"], True)

    def testDefaultSurvivesWhenAbsent(self):
        outcome = self.parser.parse([])
        self.assertEqual(self.count.value, 1)
        self.assertFalse(self.count.resolved)
        self.assertEqual(outcome.namespace["count"], 1)
        self.assertNotIn("mode", outcome.namespace)


class TestShortOptions(TestCase):
    """Behavioral tests for '-x' tokens and clusters."""

    def setUp(self):
        self.parser = Parser("tool")
        self.a = self.parser.flag("all", "a")
        self.b = self.parser.flag("brief", "b")
        self.c = self.parser.flag("color", "c")
        self.output = self.parser.option("output", "o")
        self.count = self.parser.option("count", "n", int)

    def testFlagCluster(self):
        self.parser.parse(["-abc"])
        self.assertIs(self.a.value, True)
        self.assertIs(self.b.value, True)
        self.assertIs(self.c.value, True)

    def testSeparatedValue(self):
        self.parser.parse(["-o", "file.txt"])
        self.assertEqual(self.output.value, "file.txt")

    def testAttachedValue(self):
        self.parser.parse(["-ofile.txt"])
        self.assertEqual(self.output.value, "file.txt")

    def testAttachedNumericValue(self):
        self.parser.parse(["-n42"])
        self.assertEqual(self.count.value, 42)

    def testClusterEndingWithValuedTakesNextToken(self):
        self.parser.parse(["-abo", "out.txt"])
        self.assertIs(self.a.value, True)
        self.assertIs(self.b.value, True)
        self.assertEqual(self.output.value, "out.txt")

    def testClusterValuedTakesRemainder(self):
        self.parser.parse(["-aoabc"])
        self.assertIs(self.a.value, True)
        self.assertEqual(self.output.value, "abc")
        self.assertIs(self.b.value, False)
        self.assertIs(self.c.value, False)

    def testUnknownCharacterInCluster(self):
        with self.assertRaises(UnknownArgumentError) as context:
            self.parser.parse(["-abz"])
        self.assertEqual(context.exception.name, "z")
        self.assertEqual(context.exception.index, 1)

    def testMixedFormsLastWins(self):
        self.parser.parse(["--output", "first", "-o", "second", "-othird"])
        self.assertEqual(self.output.value, "third")
        self.parser.parse(["-o", "first", "--output=second"])
        self.assertEqual(self.output.value, "second")


class TestPositionals(TestCase):
    """Behavioral tests for unmatched tokens."""

    def setUp(self):
        self.parser = Parser("tool")
        self.flag = self.parser.flag("flag", "f")

    def testOrderPreserved(self):
        outcome = self.parser.parse(["a", "--flag", "b", "c"])
        self.assertEqual(outcome.positionals, ("a", "b", "c"))
        self.assertEqual(self.parser.positionals, ("a", "b", "c"))
        self.assertIs(self.flag.value, True)

    def testEmptyTokenAndLoneDashArePositional(self):
        outcome = self.parser.parse(["", "-", "x"])
        self.assertEqual(outcome.positionals, ("", "-", "x"))

    def testNoTokens(self):
        outcome = self.parser.parse([])
        self.assertEqual(outcome.positionals, ())
        self.assertFalse(outcome.help)


class TestHelp(TestCase):
    """Behavioral tests for the help short-circuit."""

    def setUp(self):
        self.parser = Parser("tool")
        self.parser.option("input", "i", required=True)
        self.verbose = self.parser.flag("verbose", "v")

    def testHelpSkipsValidation(self):
        for tokens in (["-h"], ["--help"], ["-v", "-h"], ["a", "--help", "b"]):
            with self.subTest(tokens=tokens):
                outcome = self.parser.parse(tokens)
                self.assertTrue(outcome.help)

    def testHelpStopsResolution(self):
        outcome = self.parser.parse(["a", "-h", "-v", "b"])
        self.assertEqual(outcome.positionals, ("a",))
        self.assertIs(self.verbose.value, False)

    def testHelpInsideClusterIsNotHelp(self):
        outcome = self.parser.parse(["-vh", "-i", "in.txt"])
        self.assertFalse(outcome.help)
        self.assertIs(self.parser["help"], True)
        with self.assertRaises(RequiredArgumentMissingError):
            self.parser.parse(["-vh"])

    def testInlineHelpValueIsNotHelp(self):
        with self.assertRaises(FlagAssignmentError):
            self.parser.parse(["--help=yes"])


class TestFaults(TestCase):
    """Behavioral tests for parse faults and their context."""

    def setUp(self):
        self.parser = Parser("tool")
        self.verbose = self.parser.flag("verbose", "v")
        self.count = self.parser.option("count", "c", int)
        self.color = self.parser.option("color", type=bool)

    def testUnknownLongOption(self):
        with self.assertRaises(UnknownArgumentError) as context:
            self.parser.parse(["--bogus"])
        self.assertEqual(context.exception.name, "bogus")
        self.assertEqual(context.exception.kind, FaultCode.UNKNOWN_ARGUMENT)
        self.assertIn("at first position", str(context.exception))

    def testUnknownOptionSuggestsCloseMatch(self):
        with self.assertRaises(UnknownArgumentError) as context:
            self.parser.parse(["x", "--verbos"])
        self.assertEqual(context.exception.index, 2)
        self.assertEqual(context.exception.options["suggestions"][0], "--verbose")
        self.assertIn("--verbose", context.exception.options["hint"])

    def testUnknownShortOption(self):
        with self.assertRaises(UnknownArgumentError) as context:
            self.parser.parse(["-q"])
        self.assertEqual(context.exception.name, "q")

    def testBareDoubleDashIsUnknown(self):
        with self.assertRaises(UnknownArgumentError) as context:
            self.parser.parse(["--"])
        self.assertEqual(context.exception.name, "")

    def testMissingValueLong(self):
        with self.assertRaises(MissingValueError) as context:
            self.parser.parse(["-v", "--count"])
        self.assertEqual(context.exception.name, "count")
        self.assertEqual(context.exception.index, 2)
        self.assertIn("at second position", str(context.exception))

    def testMissingValueShort(self):
        with self.assertRaises(MissingValueError):
            self.parser.parse(["-c"])
        with self.assertRaises(MissingValueError):
            self.parser.parse(["-vc"])

    def testConversionFailed(self):
        with self.assertRaises(ConversionFailedError) as context:
            self.parser.parse(["--count", "many"])
        self.assertEqual(context.exception.name, "count")
        self.assertEqual(context.exception.value, "many")
        self.assertEqual(context.exception.index, 2)
        self.assertIsInstance(context.exception.__cause__, ValueError)

    def testBooleanConversion(self):
        self.parser.parse(["--color", "YES"])
        self.assertIs(self.color.value, True)
        self.parser.parse(["--color=0"])
        self.assertIs(self.color.value, False)
        with self.assertRaises(ConversionFailedError) as context:
            self.parser.parse(["--color", "maybe"])
        self.assertEqual(context.exception.value, "maybe")

    def testCustomConverterFailureIsWrapped(self):
        def port(text):
            if not 0 < (number := int(text)) < 65536:
                raise ValueError("port out of range")
            return number

        self.parser.option("port", "p", int, converter=port)
        self.parser.parse(["-p", "8080"])
        self.assertEqual(self.parser["port"], 8080)
        with self.assertRaises(ConversionFailedError) as context:
            self.parser.parse(["-p", "70000"])
        self.assertEqual(context.exception.name, "port")
        self.assertEqual(context.exception.options["hint"], "port out of range")

    def testStrictFlagAssignment(self):
        with self.assertRaises(FlagAssignmentError) as context:
            self.parser.parse(["--verbose=true"])
        self.assertEqual(context.exception.name, "verbose")
        self.assertEqual(context.exception.value, "true")

    def testLenientFlagAssignment(self):
        parser = Parser("tool", strict=False)
        verbose = parser.flag("verbose", "v")
        parser.parse(["--verbose=false"])
        self.assertIs(verbose.value, True)

    def testEmptyInlineValueTakesNextToken(self):
        name = self.parser.option("name")
        with self.assertWarns(EmptyInlineValueWarning):
            outcome = self.parser.parse(["--name=", "value", "rest"])
        self.assertEqual(name.value, "value")
        self.assertEqual(outcome.positionals, ("rest",))

    def testEmptyInlineValueAtEndIsMissing(self):
        self.parser.option("name")
        with warnings.catch_warnings():
            warnings.simplefilter("ignore")
            with self.assertRaises(MissingValueError) as context:
                self.parser.parse(["--name="])
        self.assertEqual(context.exception.name, "name")

    def testEmptyInlineValueConvertsNextToken(self):
        with warnings.catch_warnings():
            warnings.simplefilter("ignore")
            self.parser.parse(["--count=", "7"])
        self.assertEqual(self.count.value, 7)

    def testFailedParseLeavesNoPartialBindings(self):
        self.parser.option("level", "l", int, default=2)
        with self.assertRaises(UnknownArgumentError):
            self.parser.parse(["-v", "-c", "5", "-l", "9", "x", "--bogus"])
        self.assertIs(self.verbose.value, False)
        self.assertIsNone(self.count.value)
        self.assertFalse(self.count.resolved)
        self.assertEqual(self.parser["level"], 2)
        self.assertEqual(self.parser.positionals, ())

    def testAllFaultsAreParseErrors(self):
        for tokens in (["--bogus"], ["--count"], ["--count", "x"], ["--verbose=1"]):
            with self.subTest(tokens=tokens), self.assertRaises(ParseError):
                self.parser.parse(tokens)

    def testNonStringTokensRejected(self):
        with self.assertRaises(TypeError):
            self.parser.parse(["--count", 3])


class TestValidation(TestCase):
    """Behavioral tests for the required-argument pass."""

    def testMissingRequiredNamesCanonicalName(self):
        parser = Parser("tool")
        parser.option("input", "i", required=True)
        with self.assertRaises(RequiredArgumentMissingError) as context:
            parser.parse(["positional", "other"])
        self.assertEqual(context.exception.name, "input")
        self.assertEqual(context.exception.kind, FaultCode.REQUIRED_ARGUMENT_MISSING)
        self.assertIn("'--input'", str(context.exception))

    def testRequiredSatisfiedByEitherSpelling(self):
        parser = Parser("tool")
        source = parser.option("input", "i", required=True)
        parser.parse(["-i", "a.txt"])
        self.assertEqual(source.value, "a.txt")
        parser.parse(["--input", "b.txt"])
        self.assertEqual(source.value, "b.txt")

    def testRequiredWithDefaultIsSatisfied(self):
        parser = Parser("tool")
        parser.option("level", "l", int, required=True, default=3)
        outcome = parser.parse([])
        self.assertEqual(outcome.namespace["level"], 3)

    def testFirstViolationInRegistrationOrder(self):
        parser = Parser("tool")
        parser.option("second", required=True)
        parser.option("first", required=True)
        with self.assertRaises(RequiredArgumentMissingError) as context:
            parser.parse([])
        self.assertEqual(context.exception.name, "second")

    def testValidateDirectly(self):
        registry = Registry()
        required = registry.register(Valued("input", "i", str, Settings(required=True)))
        with self.assertRaises(RequiredArgumentMissingError):
            validate(registry)
        required.bind("file")
        validate(registry)


class TestReuseAndSlots(TestCase):
    """Behavioral tests for repeated parses and caller-owned storage."""

    def testParseResetsPreviousRun(self):
        parser = Parser("tool")
        verbose = parser.flag("verbose", "v")
        count = parser.option("count", "c", int, default=1)
        output = parser.option("output", "o")
        parser.parse(["-v", "-c", "5", "-o", "x"])
        parser.parse([])
        self.assertIs(verbose.value, False)
        self.assertEqual(count.value, 1)
        self.assertFalse(output.resolved)
        self.assertNotIn("output", parser.parse([]).namespace)

    def testAttributeSlot(self):
        class Config:
            threads = 1
            debug = False

        config = Config()
        parser = Parser("tool")
        parser.option("threads", "t", int, into=Slot.attribute(config, "threads"))
        parser.flag("debug", "d", into=Slot.attribute(config, "debug"))
        parser.parse(["-dt", "4"])
        self.assertEqual(config.threads, 4)
        self.assertIs(config.debug, True)

    def testFailedParseKeepsAttributeSlot(self):
        class Config:
            threads = 1

        config = Config()
        parser = Parser("tool")
        parser.option("threads", "t", int, into=Slot.attribute(config, "threads"))
        with self.assertRaises(UnknownArgumentError):
            parser.parse(["-t", "8", "--bogus"])
        self.assertEqual(config.threads, 1)

    def testNamespaceIsReadOnly(self):
        parser = Parser("tool")
        parser.flag("verbose", "v")
        outcome = parser.parse(["-v"])
        self.assertEqual(dict(outcome.namespace), {"help": False, "verbose": True})
        with self.assertRaises(TypeError):
            outcome.namespace["verbose"] = False  # type: ignore[index]


class TestResolveFunction(TestCase):
    """Behavioral tests for the registry-level entry point."""

    def setUp(self):
        self.registry = Registry()
        self.flag = self.registry.register(Flag("flag", "f"))
        self.value = self.registry.register(Valued("value", "x", float))

    def testResolve(self):
        outcome = resolve(["a", "-f", "-x", "2.5", "b"], self.registry)
        self.assertEqual(outcome.positionals, ("a", "b"))
        self.assertEqual(self.value.value, 2.5)
        self.assertIs(self.flag.value, True)

    def testHelpTokensWithoutHelpDefinition(self):
        self.assertTrue(resolve(["--help"], self.registry).help)

    def testLenient(self):
        resolve(["--flag=1"], self.registry, strict=False)
        self.assertIs(self.flag.value, True)


if __name__ == "__main__":
    unittest.main()
