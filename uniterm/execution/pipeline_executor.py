"""
Pipeline Executor Module

Runs a bound pipeline stage by stage:
- Wires stdin, stdout and redirections for every stage
- Buffers each stage's output as the next stage's input
- Stops at the first non-success exit code
- Closes every opened file on every exit path, cancellation included

Author: YSNRFD
Version: 1.0.0
"""

import os
from contextlib import ExitStack
from typing import Callable, Optional, Sequence

from uniterm.binding.binder import BoundCommand, BoundPipeline
from uniterm.commands.base import CommandContext
from uniterm.commands.registry import CommandRegistry
from uniterm.core.cancellation import CancellationToken, ensure_token
from uniterm.exceptions import CommandCancelledError, TerminalException
from uniterm.exit_code import ExitCode
from uniterm.filesystem.path_resolver import PathResolver
from uniterm.logger import get_logger
from uniterm.shell.parser import RedirectMode
from uniterm.streams.text_io import (
    EmptyTextReader,
    FileTextReader,
    FileTextWriter,
    ListTextReader,
    ListTextWriter,
    TextReader,
    TextWriter,
)


class PipelineExecutor:
    """
    Executes bound pipelines.

    The executor carries the terminal state handed to command bodies.
    A directory change made by one stage is visible to later stages
    and reported to the owner through the change_directory callback.

    Example:
        >>> executor = PipelineExecutor('/tmp', '/home/ada', registry)
        >>> code = executor.execute(bound, None, StringTextWriter(), StringTextWriter())
    """

    def __init__(
        self,
        working_directory: str,
        home_directory: str,
        registry: Optional[CommandRegistry] = None,
        previous_working_directory: Optional[str] = None,
        change_directory: Optional[Callable[[str], None]] = None,
        history: Sequence[str] = (),
        clear_history: Optional[Callable[[], None]] = None,
        delete_history_entry: Optional[Callable[[int], bool]] = None
    ):
        if working_directory is None or home_directory is None:
            raise ValueError("working_directory and home_directory are required")

        self._working_directory = working_directory
        self._home_directory = home_directory
        self._registry = registry
        self._previous_working_directory = previous_working_directory
        self._change_directory_callback = change_directory
        self._history = history
        self._clear_history = clear_history
        self._delete_history_entry = delete_history_entry
        self._logger = get_logger('executor')

    @property
    def working_directory(self) -> str:
        return self._working_directory

    @property
    def previous_working_directory(self) -> Optional[str]:
        return self._previous_working_directory

    def _change_directory(self, path: str) -> None:
        self._previous_working_directory = self._working_directory
        self._working_directory = path
        if self._change_directory_callback is not None:
            self._change_directory_callback(path)

    def execute(
        self,
        pipeline: BoundPipeline,
        stdin: Optional[TextReader],
        stdout: TextWriter,
        stderr: TextWriter,
        token: Optional[CancellationToken] = None
    ) -> ExitCode:
        """
        Execute a pipeline.

        Args:
            pipeline: Bound pipeline
            stdin: Input for the first stage; None means no input
            stdout: Output of the last stage
            stderr: Error sink shared by all stages
            token: Cancellation token

        Returns:
            Exit code of the last stage executed

        Raises:
            CommandCancelledError: If the token is cancelled
        """
        token = ensure_token(token)
        if not pipeline.commands:
            return ExitCode.SUCCESS

        with ExitStack() as resources:
            return self._execute_stages(pipeline, stdin, stdout, stderr, token, resources)

    def _execute_stages(
        self,
        pipeline: BoundPipeline,
        stdin: Optional[TextReader],
        stdout: TextWriter,
        stderr: TextWriter,
        token: CancellationToken,
        resources: ExitStack
    ) -> ExitCode:
        current_stdin: TextReader = stdin if stdin is not None else EmptyTextReader()
        exit_code = ExitCode.SUCCESS
        last_index = len(pipeline.commands) - 1

        for index, bound in enumerate(pipeline.commands):
            token.raise_if_cancelled()

            stage_stdin = self._resolve_stdin(bound, index, current_stdin)
            if stage_stdin is None:
                stderr.write_line(f"File not found: {self._resolve(bound.redirections.stdin_path)}", token)
                return ExitCode.RUNTIME_ERROR

            try:
                stage_stdout, pipe_buffer = self._resolve_stdout(bound, index == last_index, stdout, resources)
            except TerminalException as e:
                stderr.write_line(f"{bound.name}: {e.message}", token)
                return e.exit_code

            self._logger.debug(
                f"Running stage {index}: {bound.name}",
                context={'arguments': len(bound.positional_arguments)}
            )
            exit_code = self._run_command(bound, stage_stdin, stage_stdout, stderr, token)

            if exit_code != ExitCode.SUCCESS:
                self._logger.debug(
                    f"Pipeline stopped at stage {index}",
                    context={'command': bound.name, 'exit_code': exit_code.name}
                )
                return exit_code

            if pipe_buffer is not None:
                pipe_buffer.flush()
                current_stdin = ListTextReader(pipe_buffer.lines)

        return exit_code

    def _resolve(self, path: str) -> str:
        return PathResolver.resolve(path, self._working_directory, self._home_directory)

    def _resolve_stdin(self, bound: BoundCommand, index: int, current_stdin: TextReader) -> Optional[TextReader]:
        """Input reader for a stage, or None if its redirect file is missing."""
        stdin_path = bound.redirections.stdin_path
        if stdin_path is None:
            return current_stdin

        if index > 0:
            self._logger.warning(
                "Ignoring stdin redirection on a piped command",
                context={'command': bound.name, 'path': stdin_path}
            )
            return current_stdin

        resolved = self._resolve(stdin_path)
        if not os.path.isfile(resolved):
            return None
        return FileTextReader(resolved)

    def _resolve_stdout(
        self,
        bound: BoundCommand,
        is_last: bool,
        stdout: TextWriter,
        resources: ExitStack
    ):
        """Return (writer, pipe buffer or None) for a stage."""
        redirections = bound.redirections
        if redirections.stdout_mode != RedirectMode.NONE:
            writer = FileTextWriter(
                self._resolve(redirections.stdout_path),
                append=redirections.stdout_mode == RedirectMode.APPEND,
            )
            resources.callback(writer.close)
            return writer, None

        if is_last:
            return stdout, None

        buffer = ListTextWriter()
        return buffer, buffer

    def _create_context(
        self,
        bound: BoundCommand,
        stdin: TextReader,
        stdout: TextWriter,
        stderr: TextWriter
    ) -> CommandContext:
        return CommandContext(
            stdin=stdin,
            stdout=stdout,
            stderr=stderr,
            arguments=list(bound.positional_arguments),
            working_directory=self._working_directory,
            home_directory=self._home_directory,
            registry=self._registry,
            previous_working_directory=self._previous_working_directory,
            change_directory=self._change_directory,
            history=tuple(self._history),
            clear_history=self._clear_history,
            delete_history_entry=self._delete_history_entry,
        )

    def _run_command(
        self,
        bound: BoundCommand,
        stdin: TextReader,
        stdout: TextWriter,
        stderr: TextWriter,
        token: CancellationToken
    ) -> ExitCode:
        context = self._create_context(bound, stdin, stdout, stderr)

        try:
            return ExitCode(bound.command.execute(context, token))
        except CommandCancelledError:
            raise
        except TerminalException as e:
            self._logger.warning(
                f"Command failed: {bound.name}",
                context={'error': e.message, 'exit_code': e.exit_code.name}
            )
            stderr.write_line(f"{bound.name}: {e.message}", token)
            return e.exit_code
        except Exception as e:
            self._logger.exception(f"Command crashed: {bound.name}", exc=e)
            stderr.write_line(f"{bound.name}: {e}", token)
            return ExitCode.RUNTIME_ERROR
