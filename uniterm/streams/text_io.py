"""
Line-Oriented Text Streams

Readers and writers that connect pipeline stages:
- Empty and in-memory readers
- File readers and writers for redirections
- In-memory writers that buffer one stage's output for the next

Every read and write checks the cancellation token first.

Author: YSNRFD
Version: 1.0.0
"""

from abc import ABC, abstractmethod
from typing import Iterable, Iterator, List, Optional, TextIO

from uniterm.core.cancellation import CancellationToken
from uniterm.exceptions import TerminalRuntimeError


def _check(token: Optional[CancellationToken]) -> None:
    if token is not None:
        token.raise_if_cancelled()


class TextReader(ABC):
    """Source of lines for a command's stdin."""

    @abstractmethod
    def read_lines(self, token: Optional[CancellationToken] = None) -> Iterator[str]:
        """
        Yield lines lazily, without line terminators.

        The iteration is not restartable; a consumer may stop early.

        Raises:
            CommandCancelledError: If the token is cancelled mid-read
        """


class TextWriter(ABC):
    """Sink for a command's stdout or stderr."""

    @abstractmethod
    def write_line(self, line: str, token: Optional[CancellationToken] = None) -> None:
        """Write line followed by a line terminator."""

    @abstractmethod
    def write(self, text: str, token: Optional[CancellationToken] = None) -> None:
        """Write text without a line terminator."""

    @abstractmethod
    def clear(self) -> None:
        """Discard everything written so far, where supported."""


class EmptyTextReader(TextReader):
    """A reader that yields no lines."""

    def read_lines(self, token: Optional[CancellationToken] = None) -> Iterator[str]:
        _check(token)
        return iter(())


class ListTextReader(TextReader):
    """Yields lines from an in-memory sequence."""

    def __init__(self, lines: Iterable[str]):
        self._lines: List[str] = list(lines)

    def read_lines(self, token: Optional[CancellationToken] = None) -> Iterator[str]:
        for line in self._lines:
            _check(token)
            yield line


class FileTextReader(TextReader):
    """
    Yields the lines of a UTF-8 text file.

    The file is opened when iteration starts and closed when it ends,
    including when the consumer stops early.
    """

    def __init__(self, path: str):
        self.path = path

    def read_lines(self, token: Optional[CancellationToken] = None) -> Iterator[str]:
        _check(token)
        try:
            f = open(self.path, 'r', encoding='utf-8')
        except OSError as e:
            raise TerminalRuntimeError(f"cannot open {self.path}: {e.strerror}", path=self.path) from e

        with f:
            for line in f:
                _check(token)
                yield line.rstrip('\r\n')


class ListTextWriter(TextWriter):
    """
    Buffers written output as a list of lines.

    Text written with write() accumulates as a partial line until the
    next write_line() or flush().

    Example:
        >>> writer = ListTextWriter()
        >>> writer.write("a")
        >>> writer.write_line("b")
        >>> writer.write("c")
        >>> writer.flush()
        >>> writer.lines
        ['ab', 'c']
    """

    def __init__(self) -> None:
        self._lines: List[str] = []
        self._partial = ""

    @property
    def lines(self) -> List[str]:
        return list(self._lines)

    def write_line(self, line: str, token: Optional[CancellationToken] = None) -> None:
        _check(token)
        self._lines.append(self._partial + line)
        self._partial = ""

    def write(self, text: str, token: Optional[CancellationToken] = None) -> None:
        _check(token)
        self._partial += text

    def flush(self) -> None:
        """Move a non-empty partial line into the line list."""
        if self._partial:
            self._lines.append(self._partial)
            self._partial = ""

    def clear(self) -> None:
        self._lines.clear()
        self._partial = ""


class FileTextWriter(TextWriter):
    """
    Writes to a UTF-8 text file, truncating or appending.

    Output is flushed after every write so a later stage or the host
    sees it immediately. close() may be called any number of times.
    """

    def __init__(self, path: str, append: bool = False):
        self.path = path
        self.append = append
        try:
            self._file = open(path, 'a' if append else 'w', encoding='utf-8', newline='\n')
        except OSError as e:
            raise TerminalRuntimeError(f"cannot open {path}: {e.strerror}", path=path) from e
        self._closed = False

    def write_line(self, line: str, token: Optional[CancellationToken] = None) -> None:
        self.write(line + '\n', token)

    def write(self, text: str, token: Optional[CancellationToken] = None) -> None:
        _check(token)
        if self._closed:
            raise TerminalRuntimeError(f"write to closed file: {self.path}", path=self.path)
        self._file.write(text)
        self._file.flush()

    def clear(self) -> None:
        raise NotImplementedError("clear is not supported for file output")

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        if not self._closed:
            self._closed = True
            self._file.close()

    def __enter__(self) -> 'FileTextWriter':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


class StreamTextWriter(TextWriter):
    """Writes to a text stream such as sys.stdout; the stream is not closed."""

    def __init__(self, stream: TextIO):
        self._stream = stream

    def write_line(self, line: str, token: Optional[CancellationToken] = None) -> None:
        self.write(line + '\n', token)

    def write(self, text: str, token: Optional[CancellationToken] = None) -> None:
        _check(token)
        self._stream.write(text)
        self._stream.flush()

    def clear(self) -> None:
        raise NotImplementedError("clear is not supported for stream output")


class StringTextWriter(TextWriter):
    """Accumulates everything written into a single string."""

    def __init__(self) -> None:
        self._parts: List[str] = []

    def write_line(self, line: str, token: Optional[CancellationToken] = None) -> None:
        _check(token)
        self._parts.append(line + '\n')

    def write(self, text: str, token: Optional[CancellationToken] = None) -> None:
        _check(token)
        self._parts.append(text)

    def getvalue(self) -> str:
        return ''.join(self._parts)

    def clear(self) -> None:
        self._parts.clear()

    def __str__(self) -> str:
        return self.getvalue()
