"""
Command Base Module

The interface every command implements and the contexts it receives.

Author: YSNRFD
Version: 1.0.0
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Optional, Sequence, List, Tuple, TYPE_CHECKING

from uniterm.core.cancellation import CancellationToken
from uniterm.exit_code import ExitCode
from uniterm.filesystem.path_resolver import PathResolver
from uniterm.streams.text_io import TextReader, TextWriter

if TYPE_CHECKING:
    from uniterm.commands.metadata import Option
    from uniterm.commands.registry import CommandRegistry


@dataclass
class CommandContext:
    """
    Everything a command body may touch while it runs.

    Attributes:
        stdin: Input lines for this stage
        stdout: Output sink for this stage
        stderr: Error sink shared by the whole pipeline
        arguments: Positional arguments after binding
        working_directory: Current directory of the terminal
        home_directory: Target of ~
        registry: Command registry, for commands such as help
        previous_working_directory: Directory before the last cd
        change_directory: Callback that changes the terminal's directory
        history: Snapshot of the command history, oldest first
        clear_history: Callback that empties the history
        delete_history_entry: Callback taking a 1-based entry number
    """
    stdin: TextReader
    stdout: TextWriter
    stderr: TextWriter
    arguments: List[str] = field(default_factory=list)
    working_directory: str = "."
    home_directory: str = "~"
    registry: Optional['CommandRegistry'] = None
    previous_working_directory: Optional[str] = None
    change_directory: Optional[Callable[[str], None]] = None
    history: Sequence[str] = ()
    clear_history: Optional[Callable[[], None]] = None
    delete_history_entry: Optional[Callable[[int], bool]] = None

    def resolve_path(self, path: str) -> str:
        """Resolve a user path against this context's directories."""
        return PathResolver.resolve(path, self.working_directory, self.home_directory)


@dataclass(frozen=True)
class CompletionContext:
    """
    Input handed to a command's completion hook.

    Attributes:
        input_line: Whole line being edited
        current_token: Partial token under the cursor
        token_index: Index of that token among the command's words
            (0 is the command name)
        working_directory: Current directory of the terminal
        home_directory: Target of ~
    """
    input_line: str
    current_token: str
    token_index: int
    working_directory: str
    home_directory: str


class Command(ABC):
    """
    Base class for terminal commands.

    Subclasses declare ``name``, ``description`` and an ``options`` tuple
    of Option entries. The registry creates a fresh instance for every
    invocation and sets one attribute per option before execute() runs.

    Example:
        >>> class Upper(Command):
        ...     name = "upper"
        ...     description = "Convert input to upper case"
        ...
        ...     def execute(self, context, token):
        ...         for line in context.stdin.read_lines(token):
        ...             context.stdout.write_line(line.upper(), token)
        ...         return ExitCode.SUCCESS
    """

    name: str = ""
    description: str = ""
    options: Tuple['Option', ...] = ()

    @abstractmethod
    def execute(self, context: CommandContext, token: CancellationToken) -> ExitCode:
        """
        Run the command.

        Args:
            context: Streams, arguments and terminal state
            token: Cancellation token; check it at every read and write

        Returns:
            Exit code for this stage
        """

    def get_completions(self, context: CompletionContext) -> Iterable[str]:
        """Candidates for a non-option argument; none by default."""
        return ()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r})"


def write_error(context: CommandContext, message: Any, token: Optional[CancellationToken] = None) -> ExitCode:
    """Write '<message>' to stderr and return RUNTIME_ERROR."""
    context.stderr.write_line(str(message), token)
    return ExitCode.RUNTIME_ERROR
