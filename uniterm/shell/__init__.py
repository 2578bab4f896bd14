"""
uniterm Shell Module

Tokenizer and parser for the command language.
"""

from .tokenizer import TokenKind, SourceSpan, Token, Tokenizer, tokenize
from .parser import (
    RedirectMode,
    ParsedRedirections,
    ParsedOptionOccurrence,
    ParsedCommand,
    ParsedPipeline,
    ParsedInput,
    CommandParser,
    is_number,
    parse,
)

__all__ = [
    # Tokenizer
    'TokenKind',
    'SourceSpan',
    'Token',
    'Tokenizer',
    'tokenize',
    # Parser
    'RedirectMode',
    'ParsedRedirections',
    'ParsedOptionOccurrence',
    'ParsedCommand',
    'ParsedPipeline',
    'ParsedInput',
    'CommandParser',
    'is_number',
    'parse',
]
