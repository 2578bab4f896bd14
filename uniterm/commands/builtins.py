"""
Built-in Commands

Reference commands registered in every terminal by default.

Author: YSNRFD
Version: 1.0.0
"""

import os
import re
from abc import abstractmethod
from datetime import datetime
from typing import Iterable, List, Optional

from uniterm.commands.base import Command, CommandContext, CompletionContext, write_error
from uniterm.commands.metadata import Option, OptionKind
from uniterm.core.cancellation import CancellationToken
from uniterm.exit_code import ExitCode
from uniterm.logger import Logger, LogLevel
from uniterm.streams.text_io import FileTextReader


def _read_file_lines(
    command: str,
    context: CommandContext,
    path: str,
    token: CancellationToken
) -> Optional[Iterable[str]]:
    """Open a file argument for reading, reporting problems on stderr."""
    resolved = context.resolve_path(path)

    if not os.path.exists(resolved):
        write_error(context, f"{command}: {path}: No such file or directory", token)
        return None
    if os.path.isdir(resolved):
        write_error(context, f"{command}: {path}: Is a directory", token)
        return None

    return FileTextReader(resolved).read_lines(token)


class EchoCommand(Command):
    """Print arguments separated by spaces."""

    name = "echo"
    description = "Display a line of text"
    options = (
        Option('no-newline', 'n', OptionKind.BOOL, description="Do not output the trailing newline"),
    )

    def execute(self, context: CommandContext, token: CancellationToken) -> ExitCode:
        text = " ".join(context.arguments)
        if self.no_newline:
            context.stdout.write(text, token)
        else:
            context.stdout.write_line(text, token)
        return ExitCode.SUCCESS


class CatCommand(Command):
    """Copy stdin, or each named file, to stdout."""

    name = "cat"
    description = "Concatenate and display file contents"

    def execute(self, context: CommandContext, token: CancellationToken) -> ExitCode:
        if not context.arguments:
            for line in context.stdin.read_lines(token):
                context.stdout.write_line(line, token)
            return ExitCode.SUCCESS

        for path in context.arguments:
            lines = _read_file_lines(self.name, context, path, token)
            if lines is None:
                return ExitCode.RUNTIME_ERROR
            for line in lines:
                context.stdout.write_line(line, token)

        return ExitCode.SUCCESS


class GrepCommand(Command):
    """
    Filter stdin by a regular expression.

    Exits with RUNTIME_ERROR when no line is selected, which stops the
    rest of the pipeline.
    """

    name = "grep"
    description = "Filter lines matching a pattern"
    options = (
        Option('pattern', 'p', required=True, description="Pattern to search for"),
        Option('ignorecase', 'i', OptionKind.BOOL, description="Ignore case distinctions"),
        Option('invert', 'v', OptionKind.BOOL, description="Select non-matching lines"),
        Option('count', 'c', OptionKind.BOOL, description="Only print count of matching lines"),
    )

    def execute(self, context: CommandContext, token: CancellationToken) -> ExitCode:
        if not self.pattern:
            context.stderr.write_line("grep: pattern is required", token)
            return ExitCode.USAGE_ERROR

        flags = re.IGNORECASE if self.ignorecase else 0
        try:
            regex = re.compile(self.pattern, flags)
        except re.error as e:
            context.stderr.write_line(f"grep: invalid pattern: {e}", token)
            return ExitCode.USAGE_ERROR

        matches = 0
        for line in context.stdin.read_lines(token):
            selected = regex.search(line) is not None
            if self.invert:
                selected = not selected
            if not selected:
                continue

            matches += 1
            if not self.count:
                context.stdout.write_line(line, token)

        if self.count:
            context.stdout.write_line(str(matches), token)

        return ExitCode.SUCCESS if matches else ExitCode.RUNTIME_ERROR


class _LineWindowCommand(Command):
    """Shared file/stdin handling for head and tail."""

    @abstractmethod
    def select(self, lines: List[str]) -> List[str]:
        """Pick the lines to print from all input lines."""

    def execute(self, context: CommandContext, token: CancellationToken) -> ExitCode:
        if not context.arguments:
            for line in self.select(list(context.stdin.read_lines(token))):
                context.stdout.write_line(line, token)
            return ExitCode.SUCCESS

        show_headers = len(context.arguments) > 1
        for index, path in enumerate(context.arguments):
            lines = _read_file_lines(self.name, context, path, token)
            if lines is None:
                return ExitCode.RUNTIME_ERROR

            if show_headers:
                if index:
                    context.stdout.write_line("", token)
                context.stdout.write_line(f"==> {path} <==", token)

            for line in self.select(list(lines)):
                context.stdout.write_line(line, token)

        return ExitCode.SUCCESS


class HeadCommand(_LineWindowCommand):
    """First lines of input; a negative count drops that many from the end."""

    name = "head"
    description = "Output the first part of files"
    options = (
        Option('lines', 'n', OptionKind.INT, default=10,
               description="Output the first K lines (default: 10); -K drops the last K"),
    )

    def select(self, lines: List[str]) -> List[str]:
        if self.lines < 0:
            return lines[:max(0, len(lines) + self.lines)]
        return lines[:self.lines]


class TailCommand(_LineWindowCommand):
    """Last lines of input."""

    name = "tail"
    description = "Output the last part of files"
    options = (
        Option('lines', 'n', OptionKind.INT, default=10,
               description="Output the last K lines (default: 10)"),
    )

    def select(self, lines: List[str]) -> List[str]:
        count = abs(self.lines)
        return lines[-count:] if count else []


class PwdCommand(Command):
    name = "pwd"
    description = "Print working directory"

    def execute(self, context: CommandContext, token: CancellationToken) -> ExitCode:
        context.stdout.write_line(context.working_directory, token)
        return ExitCode.SUCCESS


class CdCommand(Command):
    """
    Change the terminal's working directory.

    With no argument changes to the home directory; ``cd -`` returns to
    the previous directory and prints it.
    """

    name = "cd"
    description = "Change working directory"

    def execute(self, context: CommandContext, token: CancellationToken) -> ExitCode:
        if len(context.arguments) > 1:
            context.stderr.write_line("cd: too many arguments", token)
            return ExitCode.USAGE_ERROR

        if context.change_directory is None:
            return write_error(context, "cd: cannot change directory in this context", token)

        show_path = False
        if not context.arguments:
            target = context.home_directory
            display = "~"
        elif context.arguments[0] == "-":
            if not context.previous_working_directory:
                return write_error(context, "cd: OLDPWD not set", token)
            target = context.previous_working_directory
            display = target
            show_path = True
        else:
            display = context.arguments[0]
            target = context.resolve_path(display)

        if not os.path.exists(target):
            return write_error(context, f"cd: {display}: No such file or directory", token)
        if not os.path.isdir(target):
            return write_error(context, f"cd: {display}: Not a directory", token)

        context.change_directory(target)
        if show_path:
            context.stdout.write_line(target, token)
        return ExitCode.SUCCESS


class HistoryCommand(Command):
    """Display or manage command history."""

    name = "history"
    description = "Display or manage command history"
    options = (
        Option('clear', 'c', OptionKind.BOOL, description="Clear all history"),
        Option('delete', 'd', OptionKind.INT, default=-1, description="Delete entry at specified position"),
        Option('number', 'n', OptionKind.INT, default=-1, description="Display only last N entries"),
        Option('reverse', 'r', OptionKind.BOOL, description="Display history in reverse order"),
    )

    def execute(self, context: CommandContext, token: CancellationToken) -> ExitCode:
        if self.clear:
            if context.clear_history is None:
                return write_error(context, "history: history clearing not supported", token)
            context.clear_history()
            return ExitCode.SUCCESS

        if self.delete > 0:
            if context.delete_history_entry is None:
                return write_error(context, "history: history deletion not supported", token)
            if self.delete > len(context.history):
                return write_error(context, f"history: position {self.delete} out of range", token)
            context.delete_history_entry(self.delete)
            return ExitCode.SUCCESS

        history = list(context.history)
        start = 0
        if 0 < self.number < len(history):
            start = len(history) - self.number

        numbers = range(start, len(history))
        if self.reverse:
            numbers = reversed(numbers)

        for i in numbers:
            context.stdout.write_line(f"{i + 1:5d}  {history[i]}", token)

        return ExitCode.SUCCESS


class HelpCommand(Command):
    """List commands, or show the usage of one command."""

    name = "help"
    description = "Display help for commands"

    def __init__(self, registry=None):
        self._registry = registry

    def execute(self, context: CommandContext, token: CancellationToken) -> ExitCode:
        registry = context.registry or self._registry
        if registry is None:
            return write_error(context, "help: registry not configured", token)

        if not context.arguments:
            text = registry.generate_global_help()
        else:
            metadata = registry.lookup(context.arguments[0])
            if metadata is None:
                context.stderr.write_line(f"help: unknown command: {context.arguments[0]}", token)
                return ExitCode.USAGE_ERROR
            text = metadata.generate_help()

        for line in text.splitlines():
            context.stdout.write_line(line, token)
        return ExitCode.SUCCESS

    def get_completions(self, context: CompletionContext) -> Iterable[str]:
        if self._registry is None or context.token_index != 1:
            return []
        return sorted(self._registry.list_names(), key=str.lower)


class LogCommand(Command):
    """Print records from the terminal's in-memory log buffer."""

    name = "log"
    description = "Display terminal log messages"
    options = (
        Option('lines', 'n', OptionKind.INT, default=0, description="Output only the last N entries"),
        Option('level', 'l', OptionKind.ENUM, enum_type=LogLevel, default=LogLevel.DEBUG,
               description="Minimum level to display"),
        Option('subsystem', 's', is_list=True, description="Only show these subsystems"),
        Option('clear', 'c', OptionKind.BOOL, description="Clear the log buffer"),
    )

    def execute(self, context: CommandContext, token: CancellationToken) -> ExitCode:
        if not Logger.is_initialized():
            return write_error(context, "log: log buffer is not available", token)

        if self.clear:
            Logger.clear_buffer()
            return ExitCode.SUCCESS

        entries = Logger.get_buffered_logs(level=self.level.name, limit=0)
        if self.subsystem:
            wanted = set(self.subsystem)
            entries = [e for e in entries if e['subsystem'] in wanted]
        if self.lines > 0:
            entries = entries[-self.lines:]

        for entry in entries:
            timestamp = datetime.fromtimestamp(entry['timestamp']).strftime('%H:%M:%S')
            context.stdout.write_line(
                f"{timestamp} [{entry['level']}] [{entry['subsystem']}] {entry['message']}",
                token
            )
        return ExitCode.SUCCESS


BUILTIN_COMMANDS = (
    EchoCommand,
    CatCommand,
    GrepCommand,
    HeadCommand,
    TailCommand,
    PwdCommand,
    CdCommand,
    HistoryCommand,
    HelpCommand,
    LogCommand,
)


def register_builtins(registry, disabled: Iterable[str] = ()) -> int:
    """
    Register the built-in commands.

    Args:
        registry: Registry to populate
        disabled: Command names to leave out

    Returns:
        Number of commands registered
    """
    skip = {name.lower() for name in disabled}
    count = 0

    for command_type in BUILTIN_COMMANDS:
        if command_type.name in skip:
            continue
        if command_type is HelpCommand:
            registry.register(HelpCommand, factory=lambda: HelpCommand(registry))
        else:
            registry.register(command_type)
        count += 1

    return count
