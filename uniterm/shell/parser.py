"""
Command Parser Module

Parses a token stream into a single pipeline of commands.

Handles:
- Pipes (|) between commands
- Redirections (<, >, >>)
- Long options (--name, --name=value, --name value)
- Short option clusters (-abc, -abc=value, -n value)
- The end-of-options marker (--)

Author: YSNRFD
Version: 1.0.0
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, List

from uniterm.exceptions import ParseError
from uniterm.logger import get_logger
from uniterm.shell.tokenizer import Token, TokenKind, Tokenizer


class RedirectMode(Enum):
    """How a stdout redirection opens its file."""
    NONE = "none"
    OVERWRITE = "overwrite"
    APPEND = "append"


@dataclass
class ParsedRedirections:
    """Redirections declared by one command."""
    stdin_path: Optional[str] = None
    stdout_path: Optional[str] = None
    stdout_mode: RedirectMode = RedirectMode.NONE


@dataclass
class ParsedOptionOccurrence:
    """
    One raw mention of an option, before schema matching.

    Attributes:
        name: Option name without dashes
        is_long: True for --name, False for -n
        raw_value: Attached or space-separated value, if any
        has_value: Whether a value was supplied
        was_quoted: Whether the value came from a quoted token
        is_value_space_separated: Value came from the following token
        argument_index: Positional arguments seen before this option
    """
    name: str
    is_long: bool
    raw_value: Optional[str] = None
    has_value: bool = False
    was_quoted: bool = False
    is_value_space_separated: bool = False
    argument_index: int = 0

    @property
    def display_name(self) -> str:
        return f"--{self.name}" if self.is_long else f"-{self.name}"

    def __str__(self) -> str:
        if self.has_value:
            return f"{self.display_name}={self.raw_value or ''}"
        return self.display_name


@dataclass
class ParsedCommand:
    """A parsed command with its arguments, options and redirections."""
    command_name: str
    positional_arguments: List[str] = field(default_factory=list)
    options: List[ParsedOptionOccurrence] = field(default_factory=list)
    redirections: ParsedRedirections = field(default_factory=ParsedRedirections)


@dataclass
class ParsedPipeline:
    """Commands joined by pipes, in execution order."""
    commands: List[ParsedCommand] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.commands)


@dataclass
class ParsedInput:
    """Result of parsing one input line."""
    pipeline: Optional[ParsedPipeline] = None

    @property
    def is_empty(self) -> bool:
        return self.pipeline is None or not self.pipeline.commands


def is_number(value: str) -> bool:
    """
    Check whether a word looks numeric (optional sign, digits and dots).

    Such words are positional arguments even when they start with '-'.

    Example:
        >>> is_number('-5'), is_number('-3.2'), is_number('-x')
        (True, True, False)
    """
    if not value:
        return False

    start = 0
    if value[0] in '+-':
        if len(value) == 1:
            return False
        start = 1

    return all(c.isdigit() or c == '.' for c in value[start:])


class _CommandBuilder:
    """Mutable state while scanning one command's tokens."""

    def __init__(self):
        self.command_name: Optional[str] = None
        self.positional_arguments: List[str] = []
        self.options: List[ParsedOptionOccurrence] = []
        self.after_end_of_options = False
        self.stdin_path: Optional[str] = None
        self.stdout_path: Optional[str] = None
        self.stdout_mode = RedirectMode.NONE

    def build(self) -> ParsedCommand:
        if self.command_name is None:
            raise ParseError("Command name is missing")

        return ParsedCommand(
            command_name=self.command_name,
            positional_arguments=self.positional_arguments,
            options=self.options,
            redirections=ParsedRedirections(self.stdin_path, self.stdout_path, self.stdout_mode),
        )


class CommandParser:
    """
    Parses command lines into a pipeline.

    Example:
        >>> parser = CommandParser()
        >>> parsed = parser.parse("cat a.txt | grep -p foo > out.txt")
        >>> [c.command_name for c in parsed.pipeline.commands]
        ['cat', 'grep']
    """

    def __init__(self, tokenizer: Optional[Tokenizer] = None):
        self._tokenizer = tokenizer or Tokenizer()
        self._logger = get_logger('parser')

    def parse(self, text: str) -> ParsedInput:
        """
        Tokenize and parse a line.

        Args:
            text: Input line

        Returns:
            ParsedInput; its pipeline is None for empty input

        Raises:
            ParseError: If the line is malformed
        """
        return self.parse_tokens(self._tokenizer.tokenize(text))

    def parse_tokens(self, tokens: List[Token]) -> ParsedInput:
        """Parse an already tokenized line."""
        if not tokens:
            return ParsedInput()

        pipeline = self._parse_pipeline(tokens)
        self._logger.debug(
            "Parsed pipeline",
            context={'commands': ' | '.join(c.command_name for c in pipeline.commands)}
        )
        return ParsedInput(pipeline=pipeline)

    def _parse_pipeline(self, tokens: List[Token]) -> ParsedPipeline:
        pipeline = ParsedPipeline()
        segment: List[Token] = []
        last_was_redirect_out = False

        for token in tokens:
            if token.kind == TokenKind.PIPE:
                if last_was_redirect_out:
                    raise ParseError("Cannot use pipe after stdout redirection (>)", position=token.span.start)
                if not segment:
                    raise ParseError("Empty command before pipe", position=token.span.start)

                command = self._parse_command(segment)
                if command.redirections.stdout_mode != RedirectMode.NONE:
                    raise ParseError("Cannot use pipe after stdout redirection (>)", position=token.span.start)

                pipeline.commands.append(command)
                segment = []
                last_was_redirect_out = False
                continue

            if token.kind in (TokenKind.REDIRECT_OUT, TokenKind.REDIRECT_APPEND):
                last_was_redirect_out = True
            elif token.kind in (TokenKind.WORD, TokenKind.END_OF_OPTIONS):
                last_was_redirect_out = False

            segment.append(token)

        if not segment:
            raise ParseError("Empty command after pipe")

        pipeline.commands.append(self._parse_command(segment))
        return pipeline

    def _parse_command(self, tokens: List[Token]) -> ParsedCommand:
        builder = _CommandBuilder()
        i = 0

        while i < len(tokens):
            token = tokens[i]

            if token.kind == TokenKind.REDIRECT_IN:
                i = self._expect_path(tokens, i, '<')
                builder.stdin_path = tokens[i].value
            elif token.kind == TokenKind.REDIRECT_OUT:
                i = self._expect_path(tokens, i, '>')
                builder.stdout_path = tokens[i].value
                builder.stdout_mode = RedirectMode.OVERWRITE
            elif token.kind == TokenKind.REDIRECT_APPEND:
                i = self._expect_path(tokens, i, '>>')
                builder.stdout_path = tokens[i].value
                builder.stdout_mode = RedirectMode.APPEND
            elif token.kind == TokenKind.END_OF_OPTIONS:
                builder.after_end_of_options = True
            elif token.kind == TokenKind.WORD:
                i = self._process_word(tokens, i, builder)

            i += 1

        return builder.build()

    @staticmethod
    def _expect_path(tokens: List[Token], i: int, symbol: str) -> int:
        """Return the index of the path word following a redirection."""
        if i + 1 >= len(tokens) or tokens[i + 1].kind != TokenKind.WORD:
            raise ParseError(f"Expected file path after {symbol}", position=tokens[i].span.start)
        return i + 1

    def _process_word(self, tokens: List[Token], i: int, builder: _CommandBuilder) -> int:
        token = tokens[i]
        value = token.value

        if builder.command_name is None:
            builder.command_name = value
            return i

        if builder.after_end_of_options:
            builder.positional_arguments.append(value)
            return i

        if value.startswith('--'):
            return self._process_long_option(tokens, i, builder)

        if value.startswith('-') and len(value) > 1 and not is_number(value):
            return self._process_short_options(tokens, i, builder)

        builder.positional_arguments.append(value)
        return i

    def _process_long_option(self, tokens: List[Token], i: int, builder: _CommandBuilder) -> int:
        token = tokens[i]
        body = token.value[2:]
        index = len(builder.positional_arguments)

        name, eq, raw_value = body.partition('=')
        if eq and not name:
            raise ParseError(f"Invalid option format: {token.value}", position=token.span.start)

        if eq:
            builder.options.append(ParsedOptionOccurrence(
                name, True, raw_value, True, token.was_quoted, argument_index=index
            ))
            return i

        occurrence = ParsedOptionOccurrence(name, True, argument_index=index)
        if i + 1 < len(tokens) and self._is_option_value(tokens[i + 1]):
            value_token = tokens[i + 1]
            occurrence = ParsedOptionOccurrence(
                name, True, value_token.value, True, value_token.was_quoted,
                is_value_space_separated=True, argument_index=index
            )
            i += 1

        builder.options.append(occurrence)
        return i

    def _process_short_options(self, tokens: List[Token], i: int, builder: _CommandBuilder) -> int:
        token = tokens[i]
        body = token.value[1:]
        index = len(builder.positional_arguments)

        names, eq, raw_value = body.partition('=')
        if eq and not names:
            raise ParseError("Invalid option format: -=", position=token.span.start)

        occurrences = [ParsedOptionOccurrence(c, False, argument_index=index) for c in names]

        if eq:
            # -abc=value: only the last option receives the value
            occurrences[-1] = ParsedOptionOccurrence(
                names[-1], False, raw_value, True, token.was_quoted, argument_index=index
            )
        elif len(occurrences) == 1 and i + 1 < len(tokens) and self._is_option_value(tokens[i + 1]):
            value_token = tokens[i + 1]
            occurrences[0] = ParsedOptionOccurrence(
                names, False, value_token.value, True, value_token.was_quoted,
                is_value_space_separated=True, argument_index=index
            )
            i += 1

        builder.options.extend(occurrences)
        return i

    @staticmethod
    def _is_option_value(token: Token) -> bool:
        if token.kind != TokenKind.WORD:
            return False
        return not token.value.startswith('-')


def parse(text: str) -> ParsedInput:
    """Parse a line with a default CommandParser."""
    return CommandParser().parse(text)
