"""
Command Tokenizer Module

Splits one input line into words and operators.

Handles:
- Space-separated words (space is the only separator)
- Pipe and redirection operators (|, <, >, >>)
- Single quotes (fully literal) and double quotes (\\" and \\\\ escapes)
- Backslash escapes outside quotes
- The end-of-options marker (--)

Author: YSNRFD
Version: 1.0.0
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Tuple

from uniterm.exceptions import ParseError
from uniterm.logger import get_logger


class TokenKind(Enum):
    """Token kinds produced by the tokenizer."""
    WORD = "word"
    PIPE = "pipe"
    REDIRECT_IN = "redirect_in"
    REDIRECT_OUT = "redirect_out"
    REDIRECT_APPEND = "redirect_append"
    END_OF_OPTIONS = "end_of_options"


@dataclass(frozen=True)
class SourceSpan:
    """Position of a token in the input line."""
    start: int
    length: int

    @property
    def end(self) -> int:
        return self.start + self.length


@dataclass(frozen=True)
class Token:
    """A lexical token."""
    kind: TokenKind
    value: str
    span: SourceSpan
    was_quoted: bool = False

    def __str__(self) -> str:
        return f"{self.kind.name}({self.value!r})"


_OPERATORS = {
    '|': TokenKind.PIPE,
    '<': TokenKind.REDIRECT_IN,
    '>': TokenKind.REDIRECT_OUT,
}

_WORD_TERMINATORS = frozenset(' |<>')


class Tokenizer:
    """
    Converts an input line into tokens.

    Example:
        >>> tokens = Tokenizer().tokenize('grep -p "a b" > out.txt')
        >>> [t.kind.name for t in tokens]
        ['WORD', 'WORD', 'WORD', 'REDIRECT_OUT', 'WORD']
    """

    def __init__(self):
        self._logger = get_logger('tokenizer')

    def tokenize(self, text: str) -> List[Token]:
        """
        Tokenize a line.

        Args:
            text: Input line

        Returns:
            List of tokens; empty for empty or all-space input

        Raises:
            ParseError: On a tab character, a trailing escape or an
                unterminated quote
        """
        tokens: List[Token] = []
        if not text:
            return tokens

        # Tabs are rejected anywhere, quoted or escaped included
        tab = text.find('\t')
        if tab != -1:
            raise ParseError(f"Tab character is not allowed in input at position {tab}", position=tab)

        i = 0
        length = len(text)

        while i < length:
            char = text[i]

            if char == ' ':
                i += 1
                continue

            if char == '>' and i + 1 < length and text[i + 1] == '>':
                tokens.append(Token(TokenKind.REDIRECT_APPEND, '>>', SourceSpan(i, 2)))
                i += 2
                continue

            if char in _OPERATORS:
                tokens.append(Token(_OPERATORS[char], char, SourceSpan(i, 1)))
                i += 1
                continue

            token, i = self._read_word(text, i)
            tokens.append(token)

        self._logger.debug("Tokenized input", context={'tokens': len(tokens)})
        return tokens

    def _read_word(self, text: str, start: int) -> Tuple[Token, int]:
        """Read one word made of adjacent quoted and unquoted segments."""
        parts: List[str] = []
        was_quoted = False
        i = start
        length = len(text)

        while i < length:
            char = text[i]

            if char in _WORD_TERMINATORS:
                break

            if char == '\\':
                if i + 1 >= length:
                    raise ParseError(f"Escape character at end of input at position {i}", position=i)
                parts.append(text[i + 1])
                i += 2
                continue

            if char == '"':
                was_quoted = True
                i = self._read_double_quoted(text, i + 1, parts)
                continue

            if char == "'":
                was_quoted = True
                i = self._read_single_quoted(text, i + 1, parts)
                continue

            parts.append(char)
            i += 1

        value = ''.join(parts)
        span = SourceSpan(start, i - start)

        if value == '--' and not was_quoted:
            return Token(TokenKind.END_OF_OPTIONS, '--', span), i

        return Token(TokenKind.WORD, value, span, was_quoted), i

    @staticmethod
    def _read_double_quoted(text: str, start: int, parts: List[str]) -> int:
        i = start
        length = len(text)

        while i < length:
            char = text[i]

            if char == '"':
                return i + 1

            # Only \" and \\ are escapes; any other backslash is literal
            if char == '\\' and i + 1 < length and text[i + 1] in '"\\':
                parts.append(text[i + 1])
                i += 2
                continue

            parts.append(char)
            i += 1

        raise ParseError(f"Unclosed double quote starting at position {start - 1}", position=start - 1)

    @staticmethod
    def _read_single_quoted(text: str, start: int, parts: List[str]) -> int:
        i = start
        length = len(text)

        while i < length:
            char = text[i]

            if char == "'":
                return i + 1

            parts.append(char)
            i += 1

        raise ParseError(f"Unclosed single quote starting at position {start - 1}", position=start - 1)


def tokenize(text: str) -> List[Token]:
    """Tokenize a line with a default Tokenizer."""
    return Tokenizer().tokenize(text)
