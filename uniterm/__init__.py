"""
uniterm - An embeddable shell-like command interpreter

This package provides a small command language for host programs:
quoting and escaping, POSIX-style options, pipelines, file
redirection, typed option binding, cancellation and tab completion,
implemented in Python 3.10+ using only the standard library.
"""

__version__ = "1.0.0"
__author__ = "YSNRFD"

from .exit_code import ExitCode
from .core.cancellation import CancellationToken
from .commands.base import Command, CommandContext, CompletionContext
from .commands.metadata import Option, OptionKind
from .commands.registry import CommandRegistry
from .streams.text_io import (
    EmptyTextReader,
    ListTextReader,
    ListTextWriter,
    StringTextWriter,
)
from .terminal import Terminal, create_terminal

__all__ = [
    'ExitCode',
    'CancellationToken',
    'Command',
    'CommandContext',
    'CompletionContext',
    'Option',
    'OptionKind',
    'CommandRegistry',
    'EmptyTextReader',
    'ListTextReader',
    'ListTextWriter',
    'StringTextWriter',
    'Terminal',
    'create_terminal',
]
