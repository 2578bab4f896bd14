"""
uniterm Completion Module

Tab completion for command names, options, paths and arguments.
"""

from .completion_engine import (
    CompletionTarget,
    CompletionCandidate,
    CompletionResult,
    CompletionEngine,
)

__all__ = [
    'CompletionTarget',
    'CompletionCandidate',
    'CompletionResult',
    'CompletionEngine',
]
