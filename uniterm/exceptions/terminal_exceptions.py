"""
Terminal Exceptions

Exceptions raised by the command-language front end: malformed input,
option binding failures, runtime failures and cancellation.

Author: YSNRFD
Version: 1.0.0
"""

from typing import Optional, Any

from uniterm.exit_code import ExitCode


class TerminalException(Exception):
    """
    Base exception for all terminal errors.

    Every terminal error maps to the exit code the pipeline reports
    when the error aborts it.

    Attributes:
        message: Human-readable error description
        exit_code: Exit code reported for this error
        context: Additional context about the error

    Example:
        >>> raise TerminalException("Something failed", ExitCode.RUNTIME_ERROR)
    """

    def __init__(
        self,
        message: str,
        exit_code: ExitCode = ExitCode.RUNTIME_ERROR,
        context: Optional[dict[str, Any]] = None
    ) -> None:
        super().__init__(message)
        self.message = message
        self.exit_code = exit_code
        self.context = context or {}

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"exit_code={self.exit_code.name})"
        )


class ParseError(TerminalException):
    """
    Malformed command-line syntax.

    Raised by the tokenizer and parser for tab characters, dangling
    escapes, unterminated quotes, missing redirection targets and
    empty commands. Always a usage error.

    Example:
        >>> raise ParseError("Unclosed double quote", position=5)
    """

    def __init__(
        self,
        message: str,
        position: Optional[int] = None,
        context: Optional[dict[str, Any]] = None
    ) -> None:
        ctx = context or {}
        if position is not None:
            ctx["position"] = position
        super().__init__(
            message=message,
            exit_code=ExitCode.USAGE_ERROR,
            context=ctx
        )
        self.position = position


class BindError(TerminalException):
    """
    A parsed command could not be bound to its option schema.

    Raised for unknown commands, unknown options, missing required
    options and values that fail type conversion.

    Example:
        >>> raise BindError("unknown option: --foo", command_name="grep")
    """

    def __init__(
        self,
        message: str,
        command_name: Optional[str] = None,
        context: Optional[dict[str, Any]] = None
    ) -> None:
        ctx = context or {}
        if command_name:
            ctx["command"] = command_name
        super().__init__(
            message=message,
            exit_code=ExitCode.USAGE_ERROR,
            context=ctx
        )
        self.command_name = command_name


class TerminalRuntimeError(TerminalException):
    """
    Failure while a pipeline is running.

    Covers I/O failures, missing redirection targets and failing
    command bodies.

    Example:
        >>> raise TerminalRuntimeError("File not found: /tmp/in.txt", path="/tmp/in.txt")
    """

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        context: Optional[dict[str, Any]] = None
    ) -> None:
        ctx = context or {}
        if path:
            ctx["path"] = path
        super().__init__(
            message=message,
            exit_code=ExitCode.RUNTIME_ERROR,
            context=ctx
        )
        self.path = path


class CommandDefinitionError(TerminalException):
    """
    A command type declares an invalid name or option schema.

    Raised at registration time, never while running a line.
    """

    def __init__(
        self,
        message: str,
        command_type: Optional[type] = None
    ) -> None:
        ctx = {}
        if command_type is not None:
            ctx["type"] = command_type.__qualname__
        super().__init__(
            message=message,
            exit_code=ExitCode.RUNTIME_ERROR,
            context=ctx
        )
        self.command_type = command_type


class ConfigValidationError(TerminalException):
    """Raised when configuration validation fails."""

    def __init__(self, message: str, key: Optional[str] = None) -> None:
        super().__init__(
            message=message,
            exit_code=ExitCode.RUNTIME_ERROR,
            context={"key": key} if key else None
        )
        self.key = key


class CommandCancelledError(Exception):
    """
    The running pipeline was cancelled through its cancellation token.

    Not a TerminalException: cancellation carries no exit code. The
    pipeline executor never catches it, so it unwinds to the host.
    """

    def __init__(self, message: str = "operation cancelled") -> None:
        super().__init__(message)
        self.message = message
