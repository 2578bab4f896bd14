#!/usr/bin/env python3
"""
Command Metadata and Registry Tests

Run with: python -m pytest uniterm/tests/test_commands.py -v

Author: YSNRFD
Version: 1.0.0
"""

import unittest
from enum import Enum

from uniterm.commands import builtins
from uniterm.commands.base import Command
from uniterm.commands.metadata import CommandMetadata, Option, OptionKind, OptionMetadata
from uniterm.commands.registry import CommandRegistry
from uniterm.exceptions import CommandDefinitionError
from uniterm.exit_code import ExitCode


class Color(Enum):
    RED = 1
    GREEN = 2


class PaintCommand(Command):
    name = "paint"
    description = "Paint things"
    options = (
        Option('color', 'c', OptionKind.ENUM, enum_type=Color, description="Paint color"),
        Option('layers', 'n', OptionKind.INT, default=1),
        Option('dry-run', kind=OptionKind.BOOL),
        Option('tag', 't', is_list=True),
    )

    def execute(self, context, token):
        return ExitCode.SUCCESS


class OtherPaintCommand(Command):
    name = "PAINT"
    description = "Paint differently"

    def execute(self, context, token):
        return ExitCode.SUCCESS


class AbstractCommand(Command):
    name = "abstract"


def metadata_for(*options):
    return CommandMetadata(
        command_name="sample",
        description="Sample command",
        options=tuple(OptionMetadata.from_option(o) for o in options),
        factory=object,
    )


class TestOptionMetadata(unittest.TestCase):
    """Option declarations and their validation."""

    def test_defaults(self):
        """Bools default to False, lists to an empty list."""
        flag = OptionMetadata.from_option(Option('verbose', 'v', OptionKind.BOOL))
        self.assertTrue(flag.is_bool_flag)
        self.assertIs(flag.default, False)

        tags = OptionMetadata.from_option(Option('tag', is_list=True))
        self.assertTrue(tags.is_list_type)
        self.assertEqual(tags.element_type, OptionKind.STRING)
        self.assertEqual(tags.default, [])

    def test_attribute_name(self):
        option = OptionMetadata.from_option(Option('no-newline', 'n', OptionKind.BOOL))
        self.assertEqual(option.attribute, "no_newline")

        option = OptionMetadata.from_option(Option('in', attribute='source'))
        self.assertEqual(option.attribute, "source")

    def test_invalid_declarations(self):
        invalid = [
            Option('flags', kind=OptionKind.BOOL, is_list=True),
            Option('lines', 'ln', OptionKind.INT),
            Option('color', kind=OptionKind.ENUM),
            Option('color', kind=OptionKind.ENUM, enum_type=str),
            Option('point', kind=OptionKind.STRUCTURED),
            Option('--lines'),
            Option(''),
        ]
        for option in invalid:
            with self.subTest(option=option):
                with self.assertRaises(CommandDefinitionError):
                    OptionMetadata.from_option(option)

    def test_friendly_type_name(self):
        self.assertEqual(OptionMetadata.from_option(Option('n', kind=OptionKind.INT)).friendly_type_name(), "int")
        self.assertEqual(
            OptionMetadata.from_option(Option('c', kind=OptionKind.ENUM, enum_type=Color)).friendly_type_name(),
            "red|green"
        )
        self.assertEqual(
            OptionMetadata.from_option(Option('x', kind=OptionKind.FLOAT, is_list=True)).friendly_type_name(),
            "list<float>"
        )
        self.assertEqual(
            OptionMetadata.from_option(Option('p', kind=OptionKind.STRUCTURED, parser='point')).friendly_type_name(),
            "point"
        )


class TestCommandMetadata(unittest.TestCase):
    """Option lookup, instances and help."""

    def test_duplicate_options_rejected(self):
        with self.assertRaises(CommandDefinitionError):
            metadata_for(Option('lines', 'n'), Option('LINES'))
        with self.assertRaises(CommandDefinitionError):
            metadata_for(Option('lines', 'n'), Option('number', 'n'))

    def test_long_lookup_is_case_insensitive(self):
        metadata = metadata_for(Option('lines', 'n'))
        self.assertIs(metadata.find_long_option("LiNeS"), metadata.options[0])
        self.assertIsNone(metadata.find_long_option("line"))

    def test_short_lookup_exact_then_case_insensitive(self):
        metadata = metadata_for(Option('lines', 'n'))
        self.assertEqual(metadata.find_short_option("N").long_name, "lines")

        metadata = metadata_for(Option('lines', 'n'), Option('number', 'N'))
        self.assertEqual(metadata.find_short_option("n").long_name, "lines")
        self.assertEqual(metadata.find_short_option("N").long_name, "number")
        self.assertIsNone(metadata.find_short_option("x"))

    def test_create_instance_resets_defaults(self):
        """Every instance is fresh and never shares a mutable default."""
        metadata = CommandRegistry().register(PaintCommand)

        first = metadata.create_instance()
        first.tag.append("x")
        second = metadata.create_instance()

        self.assertIsNot(first, second)
        self.assertEqual(second.tag, [])
        self.assertEqual(second.layers, 1)
        self.assertIsNone(second.color)
        self.assertFalse(second.dry_run)

    def test_generate_help(self):
        metadata = CommandRegistry().register(builtins.GrepCommand)
        text = metadata.generate_help()

        self.assertTrue(text.startswith("grep - Filter lines matching a pattern\n\nOptions:\n"))
        self.assertIn("  -p, --pattern <string> (required)  Pattern to search for", text)
        self.assertIn("  -i, --ignorecase  Ignore case distinctions", text)


class TestCommandRegistry(unittest.TestCase):
    """Registration and lookup."""

    def setUp(self):
        self.registry = CommandRegistry()

    def test_register_and_lookup(self):
        metadata = self.registry.register(PaintCommand)

        self.assertEqual(metadata.command_name, "paint")
        self.assertEqual(metadata.description, "Paint things")
        self.assertEqual(len(metadata.options), 4)
        self.assertIs(self.registry.lookup("PAINT"), metadata)
        self.assertIn("Paint", self.registry)
        self.assertEqual(len(self.registry), 1)
        self.assertIsNone(self.registry.lookup("missing"))

    def test_duplicate_name_last_wins(self):
        self.registry.register(PaintCommand)
        self.registry.register(OtherPaintCommand)

        self.assertEqual(len(self.registry), 1)
        self.assertIs(self.registry.lookup("paint").command_type, OtherPaintCommand)

    def test_invalid_types_rejected(self):
        class Nameless(Command):
            def execute(self, context, token):
                return ExitCode.SUCCESS

        class Spaced(Nameless):
            name = "two words"

        for command_type in (str, Nameless, Spaced, AbstractCommand):
            with self.subTest(command_type=command_type):
                with self.assertRaises(CommandDefinitionError):
                    self.registry.register(command_type)

    def test_factory(self):
        """A factory is used to create instances."""
        created = []

        def factory():
            command = PaintCommand()
            created.append(command)
            return command

        metadata = self.registry.register(PaintCommand, factory)
        instance = metadata.create_instance()
        self.assertEqual(created, [instance])

    def test_scan_module(self):
        count = self.registry.scan_module(builtins)

        self.assertEqual(count, len(builtins.BUILTIN_COMMANDS))
        for command_type in builtins.BUILTIN_COMMANDS:
            self.assertIn(command_type.name, self.registry)

    def test_line_window_base_is_abstract(self):
        """head and tail share a base that cannot be instantiated itself."""
        base = builtins.HeadCommand.__mro__[1]
        self.assertIn('select', base.__abstractmethods__)
        with self.assertRaises(TypeError):
            base()

    def test_unregister(self):
        self.registry.register(PaintCommand)
        self.assertTrue(self.registry.unregister("Paint"))
        self.assertFalse(self.registry.unregister("paint"))
        self.assertEqual(len(self.registry), 0)

    def test_global_help(self):
        builtins.register_builtins(self.registry)
        text = self.registry.generate_global_help()

        self.assertTrue(text.startswith("Available commands:\n\n"))
        self.assertIn(f"  {'grep':<20} Filter lines matching a pattern", text)
        self.assertLess(text.index("  cat "), text.index("  echo "))

    def test_register_builtins_disabled(self):
        count = builtins.register_builtins(self.registry, disabled=["LOG", "cd"])

        self.assertEqual(count, len(builtins.BUILTIN_COMMANDS) - 2)
        self.assertNotIn("log", self.registry)
        self.assertNotIn("cd", self.registry)
        self.assertEqual(list(self.registry.list_names())[0], "echo")


if __name__ == '__main__':
    unittest.main()
