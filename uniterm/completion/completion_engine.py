"""
Completion Engine Module

Suggests replacements for the token being typed:
- Command names
- Option names of the current command
- File system paths
- Command-specific argument values

Author: YSNRFD
Version: 1.0.0
"""

import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, List, Tuple

from uniterm.commands.base import CompletionContext
from uniterm.commands.registry import CommandRegistry
from uniterm.core.config_loader import CompletionConfig
from uniterm.exceptions import CommandCancelledError
from uniterm.filesystem.path_resolver import PathResolver
from uniterm.logger import get_logger

_REDIRECT_SYMBOLS = ('<', '>', '>>')


class CompletionTarget(Enum):
    """What kind of token is being completed."""
    COMMAND_NAME = "command_name"
    OPTION_NAME = "option_name"
    PATH = "path"
    ARGUMENT = "argument"


@dataclass(frozen=True)
class CompletionCandidate:
    """A single suggested replacement for the current token."""
    text: str
    display_text: str
    target: CompletionTarget = CompletionTarget.ARGUMENT


@dataclass
class CompletionResult:
    """
    Candidates plus the span of input they replace.

    Attributes:
        candidates: Suggestions in display order
        token_start: Index in the input where the token starts
        token_length: Length of the token being replaced
    """
    candidates: List[CompletionCandidate] = field(default_factory=list)
    token_start: int = 0
    token_length: int = 0

    @property
    def texts(self) -> List[str]:
        return [c.text for c in self.candidates]

    def __len__(self) -> int:
        return len(self.candidates)


@dataclass
class _Analysis:
    target: CompletionTarget
    command_name: Optional[str] = None
    token_index: int = 0


class CompletionEngine:
    """
    Computes completions for a partial input line.

    Example:
        >>> engine = CompletionEngine(registry, '/tmp', '/home/ada')
        >>> engine.complete('he').texts
        ['head', 'help']
    """

    def __init__(
        self,
        registry: CommandRegistry,
        working_directory: str,
        home_directory: str,
        config: Optional[CompletionConfig] = None
    ):
        if registry is None:
            raise ValueError("registry is required")
        if working_directory is None or home_directory is None:
            raise ValueError("working_directory and home_directory are required")

        self._registry = registry
        self._working_directory = working_directory
        self._home_directory = home_directory
        self._config = config or CompletionConfig()
        self._logger = get_logger('completion')

    def complete(self, input_line: str) -> CompletionResult:
        """
        Complete the token at the end of the input line.

        Args:
            input_line: Text typed so far

        Returns:
            CompletionResult; empty candidates when nothing matches
        """
        input_line = input_line or ""
        token, token_start = self._extract_current_token(input_line)
        analysis = self._analyze(input_line, token_start)

        if analysis.target == CompletionTarget.COMMAND_NAME:
            candidates = self._complete_commands(token)
        elif analysis.target == CompletionTarget.OPTION_NAME:
            candidates = self._complete_options(token, analysis.command_name)
        elif analysis.target == CompletionTarget.PATH:
            candidates = self._complete_paths(token)
        else:
            candidates = self._complete_arguments(input_line, token, analysis)
            if not candidates:
                candidates = self._complete_paths(token)

        if self._config.max_candidates > 0:
            candidates = candidates[:self._config.max_candidates]

        return CompletionResult(candidates, token_start, len(token))

    @staticmethod
    def _extract_current_token(input_line: str) -> Tuple[str, int]:
        """The text after the last space, and where it starts."""
        start = input_line.rfind(' ') + 1
        return input_line[start:], start

    @staticmethod
    def _analyze(input_line: str, token_start: int) -> _Analysis:
        parts = input_line[:token_start].split()
        if not parts:
            return _Analysis(CompletionTarget.COMMAND_NAME)

        last_pipe = -1
        for i in range(len(parts) - 1, -1, -1):
            if parts[i] == '|':
                last_pipe = i
                break

        command_start = last_pipe + 1
        if command_start >= len(parts):
            return _Analysis(CompletionTarget.COMMAND_NAME)

        command_name = parts[command_start]

        if parts[-1] in _REDIRECT_SYMBOLS:
            return _Analysis(CompletionTarget.PATH, command_name)

        if input_line[token_start:].startswith('-'):
            return _Analysis(CompletionTarget.OPTION_NAME, command_name)

        return _Analysis(CompletionTarget.ARGUMENT, command_name, len(parts) - command_start)

    def _complete_commands(self, prefix: str) -> List[CompletionCandidate]:
        lowered = prefix.lower()
        candidates = []

        for name in self._registry.list_names():
            if not name.lower().startswith(lowered):
                continue
            metadata = self._registry.lookup(name)
            if metadata is None:
                continue
            candidates.append(CompletionCandidate(
                name, f"{name} - {metadata.description}", CompletionTarget.COMMAND_NAME
            ))

        candidates.sort(key=lambda c: c.text.lower())
        return candidates

    def _complete_options(self, prefix: str, command_name: Optional[str]) -> List[CompletionCandidate]:
        metadata = self._registry.lookup(command_name) if command_name else None
        if metadata is None:
            return []

        lowered = prefix.lower()
        candidates = []

        for opt in metadata.options:
            long_form = f"--{opt.long_name}"
            if long_form.lower().startswith(lowered):
                candidates.append(CompletionCandidate(
                    long_form, f"{long_form} - {opt.description}", CompletionTarget.OPTION_NAME
                ))

            if not opt.short_name:
                continue
            short_form = f"-{opt.short_name}"
            if short_form.lower().startswith(lowered):
                candidates.append(CompletionCandidate(
                    short_form,
                    f"{short_form} ({long_form}) - {opt.description}",
                    CompletionTarget.OPTION_NAME
                ))

        candidates.sort(key=lambda c: c.text.lower())
        return candidates

    def _complete_arguments(
        self,
        input_line: str,
        prefix: str,
        analysis: _Analysis
    ) -> List[CompletionCandidate]:
        metadata = self._registry.lookup(analysis.command_name) if analysis.command_name else None
        if metadata is None:
            return []

        context = CompletionContext(
            input_line=input_line,
            current_token=prefix,
            token_index=analysis.token_index,
            working_directory=self._working_directory,
            home_directory=self._home_directory,
        )

        lowered = prefix.lower()
        try:
            instance = metadata.create_instance()
            suggestions = list(instance.get_completions(context))
        except CommandCancelledError:
            raise
        except Exception as e:
            self._logger.warning(
                f"Completion hook failed: {metadata.command_name}",
                context={'error': str(e)}
            )
            return []

        return [
            CompletionCandidate(text, text, CompletionTarget.ARGUMENT)
            for text in suggestions
            if text.lower().startswith(lowered)
        ]

    def _complete_paths(self, prefix: str) -> List[CompletionCandidate]:
        # "~" alone completes the contents of home
        typed_dir, _, fragment = ("~/" if prefix == "~" else prefix).rpartition('/')
        if typed_dir or prefix.startswith('/'):
            typed_dir += '/'

        if not typed_dir:
            base = self._working_directory
        else:
            base = PathResolver.resolve(typed_dir, self._working_directory, self._home_directory)

        try:
            with os.scandir(base) as entries:
                listing = [(entry.name, entry.is_dir()) for entry in entries]
        except OSError as e:
            self._logger.debug(
                "Path completion skipped",
                context={'path': base, 'error': e.strerror}
            )
            return []

        lowered = fragment.lower()
        show_hidden = self._config.show_hidden_files or fragment.startswith('.')
        directories: List[str] = []
        files: List[str] = []

        for name, is_dir in listing:
            if not name.lower().startswith(lowered):
                continue
            if name.startswith('.') and not show_hidden:
                continue
            (directories if is_dir else files).append(name)

        candidates = [
            CompletionCandidate(f"{typed_dir}{name}/", f"{name}/", CompletionTarget.PATH)
            for name in sorted(directories, key=str.lower)
        ]
        candidates.extend(
            CompletionCandidate(f"{typed_dir}{name}", name, CompletionTarget.PATH)
            for name in sorted(files, key=str.lower)
        )
        return candidates
