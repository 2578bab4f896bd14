"""
uniterm Commands Module

Command interface, option schema, registry and built-in commands.
"""

from .metadata import OptionKind, Option, OptionMetadata, CommandMetadata
from .base import Command, CommandContext, CompletionContext, write_error
from .registry import CommandRegistry
from .builtins import BUILTIN_COMMANDS, register_builtins

__all__ = [
    # Metadata
    'OptionKind',
    'Option',
    'OptionMetadata',
    'CommandMetadata',
    # Interface
    'Command',
    'CommandContext',
    'CompletionContext',
    'write_error',
    # Registry
    'CommandRegistry',
    # Built-ins
    'BUILTIN_COMMANDS',
    'register_builtins',
]
