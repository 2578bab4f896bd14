"""
uniterm Exception Hierarchy

All terminal errors inherit from TerminalException and carry the exit
code reported when they abort a pipeline.

Architecture:
    TerminalException (Base)
    ├── ParseError              (usage error, 2)
    ├── BindError               (usage error, 2)
    ├── TerminalRuntimeError    (runtime error, 1)
    ├── CommandDefinitionError
    └── ConfigValidationError
    CommandCancelledError       (cancellation, not an error exit)
"""

from .terminal_exceptions import (
    TerminalException,
    ParseError,
    BindError,
    TerminalRuntimeError,
    CommandDefinitionError,
    ConfigValidationError,
    CommandCancelledError,
)

__all__ = [
    "TerminalException",
    "ParseError",
    "BindError",
    "TerminalRuntimeError",
    "CommandDefinitionError",
    "ConfigValidationError",
    "CommandCancelledError",
]
