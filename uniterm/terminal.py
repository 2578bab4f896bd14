"""
uniterm Terminal

The embeddable terminal front end.

Provides:
- Line execution (parse, bind, execute)
- Tab completion
- Script execution
- Working directory state
- Command history

Author: YSNRFD
Version: 1.0.0
"""

import os
import sys
from typing import Any, Callable, Optional, List

from uniterm.binding.binder import Binder
from uniterm.commands.builtins import register_builtins
from uniterm.commands.metadata import CommandMetadata
from uniterm.commands.registry import CommandRegistry
from uniterm.completion.completion_engine import CompletionEngine, CompletionResult
from uniterm.core.cancellation import CancellationToken, ensure_token
from uniterm.core.config_loader import Config, ConfigLoader
from uniterm.exceptions import BindError, ParseError, TerminalRuntimeError
from uniterm.exit_code import ExitCode
from uniterm.execution.pipeline_executor import PipelineExecutor
from uniterm.filesystem.path_resolver import PathResolver
from uniterm.logger import Logger, LogLevel, get_logger
from uniterm.shell.parser import CommandParser
from uniterm.streams.text_io import StreamTextWriter, TextReader, TextWriter


class Terminal:
    """
    A shell-like command interpreter embedded in a host program.

    Example:
        >>> terminal = Terminal()
        >>> out = StringTextWriter()
        >>> terminal.run_line('echo hello | grep -p hell', stdout=out)
        <ExitCode.SUCCESS: 0>
        >>> out.getvalue()
        'hello\\n'
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        stdout: Optional[TextWriter] = None,
        stderr: Optional[TextWriter] = None,
        registry: Optional[CommandRegistry] = None,
        register_builtins: Optional[bool] = None
    ):
        self._config = config or Config()
        ConfigLoader.validate(self._config)

        self._initialize_logging()
        self._logger = get_logger('terminal')

        self._stdout = stdout or StreamTextWriter(sys.stdout)
        self._stderr = stderr or StreamTextWriter(sys.stderr)

        self._home_directory = self._config.paths.resolved_home()
        self._working_directory = self._config.paths.resolved_working_directory()
        self._previous_working_directory: Optional[str] = None

        self._history: List[str] = []

        self._registry = registry or CommandRegistry()
        self._parser = CommandParser()
        self._binder = Binder(self._registry)

        if register_builtins is None:
            register_builtins = self._config.commands.register_builtins
        if register_builtins:
            self.register_builtin_commands()

        self._logger.info(
            "Terminal initialized",
            context={'commands': len(self._registry), 'cwd': self._working_directory}
        )

    def _initialize_logging(self) -> None:
        if Logger.is_initialized():
            return

        settings = self._config.logging
        Logger.initialize(
            level=LogLevel.from_name(settings.level),
            log_file=settings.log_file,
            use_colors=settings.use_colors,
            console_output=settings.console_output,
            buffer_size=settings.buffer_size,
        )

    # Properties

    @property
    def config(self) -> Config:
        return self._config

    @property
    def registry(self) -> CommandRegistry:
        return self._registry

    @property
    def binder(self) -> Binder:
        return self._binder

    @property
    def home_directory(self) -> str:
        return self._home_directory

    @property
    def working_directory(self) -> str:
        return self._working_directory

    @working_directory.setter
    def working_directory(self, value: str) -> None:
        self.change_directory(value)

    @property
    def previous_working_directory(self) -> Optional[str]:
        return self._previous_working_directory

    @property
    def history(self) -> List[str]:
        """Copy of the command history, oldest first."""
        return list(self._history)

    @property
    def max_history_size(self) -> int:
        return self._config.history.max_size

    # Commands

    def register_builtin_commands(self) -> int:
        """Register the built-in command set, minus configured exclusions."""
        return register_builtins(self._registry, disabled=self._config.commands.disabled)

    def register_command(
        self,
        command_type: type,
        factory: Optional[Callable[[], Any]] = None
    ) -> CommandMetadata:
        """Register a host command type."""
        return self._registry.register(command_type, factory)

    def register_parser(self, name: str, parser: Callable[[str], Any]) -> None:
        """Register a parser for structured options declaring this name."""
        self._binder.converter.register_parser(name, parser)

    # Working directory

    def change_directory(self, path: str) -> None:
        """
        Change the working directory.

        Args:
            path: Absolute, relative or ~ path

        Raises:
            TerminalRuntimeError: If the path is not a directory
        """
        resolved = PathResolver.resolve(path, self._working_directory, self._home_directory)
        if not os.path.isdir(resolved):
            raise TerminalRuntimeError(f"not a directory: {path}", path=resolved)

        if resolved != self._working_directory:
            self._previous_working_directory = self._working_directory
            self._working_directory = resolved
            self._logger.debug("Working directory changed", context={'cwd': resolved})

    # History

    def add_history(self, line: str) -> None:
        """Record a line, skipping blanks and consecutive duplicates."""
        if not line or not line.strip():
            return

        if (
            self._config.history.ignore_consecutive_duplicates
            and self._history
            and self._history[-1] == line
        ):
            return

        self._history.append(line)
        overflow = len(self._history) - self.max_history_size
        if overflow > 0:
            del self._history[:overflow]

    def clear_history(self) -> None:
        self._history.clear()

    def delete_history_entry(self, position: int) -> bool:
        """Delete the entry at a 1-based position; False if out of range."""
        index = position - 1
        if 0 <= index < len(self._history):
            del self._history[index]
            return True
        return False

    # Execution

    def run_line(
        self,
        text: str,
        stdin: Optional[TextReader] = None,
        token: Optional[CancellationToken] = None,
        stdout: Optional[TextWriter] = None,
        stderr: Optional[TextWriter] = None
    ) -> ExitCode:
        """
        Execute one input line.

        Args:
            text: Command line
            stdin: Input for the first command; None means no input
            token: Cancellation token
            stdout: Output sink; defaults to the terminal's stdout
            stderr: Error sink; defaults to the terminal's stderr

        Returns:
            Exit code of the pipeline

        Raises:
            CommandCancelledError: If the token is cancelled while running
        """
        stdout = stdout or self._stdout
        stderr = stderr or self._stderr
        token = ensure_token(token)

        if not text or not text.strip():
            return ExitCode.SUCCESS

        self.add_history(text)

        try:
            parsed = self._parser.parse(text)
            if parsed.is_empty:
                return ExitCode.SUCCESS

            bound = self._binder.bind(parsed.pipeline)

            executor = PipelineExecutor(
                self._working_directory,
                self._home_directory,
                registry=self._registry,
                previous_working_directory=self._previous_working_directory,
                change_directory=self._on_directory_changed,
                history=self._history,
                clear_history=self.clear_history,
                delete_history_entry=self.delete_history_entry,
            )
            return executor.execute(bound, stdin, stdout, stderr, token)

        except ParseError as e:
            self._logger.debug("Parse error", context={'error': e.message, 'position': e.position})
            stderr.write_line(f"parse error: {e.message}")
            return e.exit_code
        except BindError as e:
            self._logger.debug("Bind error", context={'command': e.command_name})
            stderr.write_line(e.message)
            return e.exit_code
        except TerminalRuntimeError as e:
            self._logger.warning("Runtime error", context={'error': e.message})
            stderr.write_line(f"runtime error: {e.message}")
            return e.exit_code

    def _on_directory_changed(self, path: str) -> None:
        if path != self._working_directory:
            self._previous_working_directory = self._working_directory
            self._working_directory = path

    def run_script(
        self,
        script: str,
        token: Optional[CancellationToken] = None,
        stdout: Optional[TextWriter] = None,
        stderr: Optional[TextWriter] = None
    ) -> ExitCode:
        """
        Run a script line by line.

        Blank lines and lines starting with # are skipped. Execution
        stops at the first line that does not succeed.

        Returns:
            SUCCESS, or the exit code of the failing line
        """
        for line in script.splitlines():
            line = line.strip()
            if not line or line.startswith('#'):
                continue

            exit_code = self.run_line(line, token=token, stdout=stdout, stderr=stderr)
            if exit_code != ExitCode.SUCCESS:
                return exit_code

        return ExitCode.SUCCESS

    def complete(self, text: str) -> CompletionResult:
        """Completion candidates for the token at the end of text."""
        engine = CompletionEngine(
            self._registry,
            self._working_directory,
            self._home_directory,
            config=self._config.completion,
        )
        return engine.complete(text)

    def prompt(self) -> str:
        return f"{PathResolver.display_path(self._working_directory, self._home_directory)}$ "


def create_terminal(config_path: Optional[str] = None, **kwargs: Any) -> Terminal:
    """
    Factory function to create a terminal.

    Args:
        config_path: Optional JSON configuration file
        **kwargs: Passed to Terminal

    Returns:
        Configured Terminal
    """
    if config_path is not None and 'config' not in kwargs:
        kwargs['config'] = ConfigLoader().load(config_path)
    return Terminal(**kwargs)
