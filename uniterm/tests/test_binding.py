#!/usr/bin/env python3
"""
Binder and Value Converter Tests

Run with: python -m pytest uniterm/tests/test_binding.py -v

Author: YSNRFD
Version: 1.0.0
"""

import unittest
from enum import Enum

from uniterm.binding.binder import Binder
from uniterm.binding.converters import ValueConverter
from uniterm.commands.base import Command
from uniterm.commands.metadata import Option, OptionKind, OptionMetadata
from uniterm.commands.registry import CommandRegistry
from uniterm.exceptions import BindError
from uniterm.exit_code import ExitCode
from uniterm.shell.parser import parse


class Color(Enum):
    RED = 1
    GREEN = 2


class SampleCommand(Command):
    name = "sample"
    description = "Sample command"
    options = (
        Option('verbose', 'v', OptionKind.BOOL),
        Option('count', 'n', OptionKind.INT, default=1),
        Option('tag', 't', is_list=True),
        Option('ratio', kind=OptionKind.FLOAT),
        Option('color', 'c', OptionKind.ENUM, enum_type=Color),
        Option('point', kind=OptionKind.STRUCTURED, parser='point'),
    )

    def execute(self, context, token):
        return ExitCode.SUCCESS


class RequiredCommand(Command):
    name = "req"
    description = "Needs a pattern"
    options = (
        Option('pattern', 'p', required=True),
    )

    def execute(self, context, token):
        return ExitCode.SUCCESS


class CounterCommand(Command):
    name = "counter"
    description = "Needs a count"
    options = (
        Option('count', kind=OptionKind.INT, required=True),
    )

    def execute(self, context, token):
        return ExitCode.SUCCESS


class TestValueConverter(unittest.TestCase):
    """Scalar and list conversion."""

    def setUp(self):
        self.converter = ValueConverter()

    def test_int(self):
        self.assertEqual(self.converter.convert_scalar("+5", OptionKind.INT), 5)
        self.assertEqual(self.converter.convert_scalar("-12", OptionKind.INT), -12)
        for bad in ("5.0", "1_000", "", "ten", " 5"):
            with self.subTest(value=bad):
                with self.assertRaises(ValueError):
                    self.converter.convert_scalar(bad, OptionKind.INT)

    def test_float(self):
        self.assertEqual(self.converter.convert_scalar("1e3", OptionKind.FLOAT), 1000.0)
        self.assertEqual(self.converter.convert_scalar("-.5", OptionKind.FLOAT), -0.5)
        for bad in ("nan", "inf", "1.0.0", "1_0"):
            with self.subTest(value=bad):
                with self.assertRaises(ValueError):
                    self.converter.convert_scalar(bad, OptionKind.FLOAT)

    def test_bool(self):
        self.assertTrue(self.converter.convert_scalar("YES", OptionKind.BOOL))
        self.assertFalse(self.converter.convert_scalar("off", OptionKind.BOOL))
        with self.assertRaises(ValueError):
            self.converter.convert_scalar("maybe", OptionKind.BOOL)

    def test_enum(self):
        self.assertIs(self.converter.convert_scalar("green", OptionKind.ENUM, enum_type=Color), Color.GREEN)
        with self.assertRaises(ValueError) as ctx:
            self.converter.convert_scalar("purple", OptionKind.ENUM, enum_type=Color)
        self.assertIn("Valid values: red, green", str(ctx.exception))

    def test_structured(self):
        with self.assertRaises(ValueError):
            self.converter.convert_scalar("3:4", OptionKind.STRUCTURED, parser_name="point")

        self.converter.register_parser("point", lambda s: tuple(int(p) for p in s.split(":")))
        self.assertTrue(self.converter.has_parser("point"))
        self.assertEqual(self.converter.convert_scalar("3:4", OptionKind.STRUCTURED, parser_name="point"), (3, 4))

    def test_list_splitting(self):
        option = OptionMetadata.from_option(Option('n', kind=OptionKind.INT, is_list=True))
        self.assertEqual(self.converter.convert("1,2,3", option), [1, 2, 3])

        option = OptionMetadata.from_option(Option('tag', is_list=True))
        self.assertEqual(self.converter.convert("a,b", option, was_quoted=True), ["a,b"])


class TestBinder(unittest.TestCase):
    """Binding parsed commands to their schema."""

    def setUp(self):
        self.registry = CommandRegistry()
        self.registry.register(SampleCommand)
        self.registry.register(RequiredCommand)
        self.registry.register(CounterCommand)
        self.binder = Binder(self.registry)

    def bind(self, text):
        return self.binder.bind(parse(text).pipeline).commands[0]

    def bind_error(self, text):
        with self.assertRaises(BindError) as ctx:
            self.bind(text)
        return ctx.exception

    def test_defaults_without_options(self):
        bound = self.bind("sample a b")
        self.assertEqual(bound.name, "sample")
        self.assertEqual(bound.positional_arguments, ("a", "b"))
        self.assertFalse(bound.command.verbose)
        self.assertEqual(bound.command.count, 1)
        self.assertEqual(bound.command.tag, [])
        self.assertIsNone(bound.command.ratio)

    def test_typed_values(self):
        bound = self.bind("sample --count=3 --ratio 0.25 -c RED")
        self.assertEqual(bound.command.count, 3)
        self.assertEqual(bound.command.ratio, 0.25)
        self.assertIs(bound.command.color, Color.RED)

    def test_long_names_are_case_insensitive(self):
        self.assertEqual(self.bind("sample --COUNT=7").command.count, 7)

    def test_flag_value_returns_to_positionals(self):
        """A word taken as a flag's value goes back to its original slot."""
        bound = self.bind("sample a -v b c")
        self.assertTrue(bound.command.verbose)
        self.assertEqual(bound.positional_arguments, ("a", "b", "c"))

        bound = self.bind("sample -v x --verbose y")
        self.assertEqual(bound.positional_arguments, ("x", "y"))

    def test_flag_rejects_attached_value(self):
        error = self.bind_error("sample -v=true")
        self.assertTrue(error.message.startswith("boolean option --verbose does not accept a value"))

    def test_value_required(self):
        error = self.bind_error("sample --count")
        self.assertTrue(error.message.startswith("option --count requires a value"))

    def test_value_option_inside_cluster(self):
        """A value-taking short option in the middle of a cluster has no value."""
        error = self.bind_error("sample -nv 3")
        self.assertTrue(error.message.startswith("option --count requires a value"))

        bound = self.bind("sample -vn=3")
        self.assertTrue(bound.command.verbose)
        self.assertEqual(bound.command.count, 3)

    def test_conversion_failure(self):
        error = self.bind_error("sample -n abc")
        self.assertTrue(error.message.startswith(
            "failed to convert value 'abc' for option --count: cannot convert 'abc' to int"
        ))

        error = self.bind_error("sample --color=purple")
        self.assertIn("Valid values: red, green", error.message)

    def test_structured_option(self):
        error = self.bind_error("sample --point=3:4")
        self.assertIn("no parser registered for 'point'", error.message)

        self.binder.converter.register_parser("point", lambda s: tuple(int(p) for p in s.split(":")))
        self.assertEqual(self.bind("sample --point=3:4").command.point, (3, 4))

    def test_last_occurrence_wins(self):
        self.assertEqual(self.bind("sample -n 1 -n 2").command.count, 2)

    def test_list_accumulates(self):
        self.assertEqual(self.bind("sample -t a,b -t c").command.tag, ["a", "b", "c"])
        self.assertEqual(self.bind('sample -t "a,b"').command.tag, ["a,b"])

    def test_fresh_instance_per_bind(self):
        first = self.bind("sample -t x")
        second = self.bind("sample")
        self.assertIsNot(first.command, second.command)
        self.assertEqual(second.command.tag, [])

    def test_unknown_options(self):
        error = self.bind_error("sample --bogus")
        self.assertTrue(error.message.startswith("unknown option: --bogus\n\n"))
        self.assertIn("sample - Sample command", error.message)
        self.assertEqual(error.command_name, "sample")
        self.assertEqual(error.exit_code, ExitCode.USAGE_ERROR)

        error = self.bind_error("sample -x")
        self.assertTrue(error.message.startswith("unknown option: -x"))

    def test_required_option(self):
        error = self.bind_error("req")
        self.assertTrue(error.message.startswith("required option --pattern is missing"))
        self.assertEqual(self.bind("req -p abc").command.pattern, "abc")

    def test_required_int_option(self):
        """Missing, unconvertible and repeated values of a required int."""
        self.assertTrue(self.bind_error("counter").message.startswith("required option --count is missing"))
        self.assertTrue(self.bind_error("counter --count=abc").message.startswith("failed to convert value 'abc'"))
        self.assertEqual(self.bind("counter --count 5 --count 7").command.count, 7)

    def test_unknown_command(self):
        error = self.bind_error("nope")
        self.assertTrue(error.message.startswith("command not found: nope\n\n"))
        self.assertIn("Available commands:", error.message)

    def test_pipeline(self):
        bound = self.binder.bind(parse("sample a | req -p x > out.txt").pipeline)
        self.assertEqual(len(bound), 2)
        self.assertEqual([c.name for c in bound.commands], ["sample", "req"])
        self.assertEqual(bound.commands[1].redirections.stdout_path, "out.txt")


if __name__ == '__main__':
    unittest.main()
