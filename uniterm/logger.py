"""
uniterm Logger Module

Every stage of the front end (tokenizer, parser, binder, executor,
completion, registry, terminal) logs through its own subsystem logger.
Records carry a structured `context` dict next to the message and are
kept in a bounded in-memory buffer so the `log` command can show them.
Console and file output are opt-in.

Author: YSNRFD
Version: 1.0.0
"""

import logging
import sys
import threading
from collections import deque
from datetime import datetime
from enum import IntEnum
from pathlib import Path
from typing import Optional, Any, List

ROOT_LOGGER_NAME = 'uniterm'


class LogLevel(IntEnum):
    """Levels understood by the `log` command and the logging config."""
    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR
    CRITICAL = logging.CRITICAL

    @classmethod
    def from_name(cls, name: str) -> 'LogLevel':
        """Look up a level by case-insensitive name."""
        try:
            return cls[name.upper()]
        except KeyError:
            valid = ", ".join(level.name for level in cls)
            raise ValueError(f"Unknown log level '{name}'. Valid values: {valid}") from None


class LogFormatter(logging.Formatter):
    """
    Renders one record per line:

        [12:00:00.123] WARNING  registry: message {key=value}

    Level names are coloured only when the target stream is a TTY.
    """

    LEVEL_COLORS = {
        LogLevel.DEBUG: '\033[2m',
        LogLevel.INFO: '\033[32m',
        LogLevel.WARNING: '\033[33m',
        LogLevel.ERROR: '\033[31m',
        LogLevel.CRITICAL: '\033[1;31m',
    }
    RESET = '\033[0m'

    def __init__(self, use_colors: bool = True, stream=None):
        super().__init__()
        target = stream or sys.stderr
        self.use_colors = use_colors and getattr(target, 'isatty', lambda: False)()

    def _level(self, record: logging.LogRecord) -> str:
        label = f"{record.levelname:<8}"
        color = self.LEVEL_COLORS.get(record.levelno) if self.use_colors else None
        return f"{color}{label}{self.RESET}" if color else label

    def format(self, record: logging.LogRecord) -> str:
        stamp = datetime.fromtimestamp(record.created).strftime('%H:%M:%S')
        head = f"[{stamp}.{int(record.msecs):03d}] {self._level(record)}"

        subsystem = getattr(record, 'subsystem', None)
        body = f"{subsystem}: {record.getMessage()}" if subsystem else record.getMessage()

        context = getattr(record, 'context', None)
        if context:
            pairs = " ".join(f"{key}={value}" for key, value in context.items())
            body = f"{body} {{{pairs}}}"

        line = f"{head} {body}"
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


class LogBufferHandler(logging.Handler):
    """
    Keeps the most recent records in memory for the `log` command.

    Entries are plain dicts with `timestamp`, `level`, `message`,
    `subsystem` and `context` keys.
    """

    def __init__(self, max_entries: int = 1000):
        super().__init__()
        self._entries: deque = deque(maxlen=max(1, max_entries))
        self._entries_lock = threading.Lock()

    @property
    def max_entries(self) -> int:
        return self._entries.maxlen

    def emit(self, record: logging.LogRecord) -> None:
        entry = {
            'timestamp': record.created,
            'level': record.levelname,
            'message': record.getMessage(),
            'subsystem': getattr(record, 'subsystem', None),
            'context': dict(getattr(record, 'context', None) or {}),
        }
        with self._entries_lock:
            self._entries.append(entry)

    def get_logs(
        self,
        level: Optional[str] = None,
        subsystem: Optional[str] = None,
        limit: int = 100
    ) -> List[dict[str, Any]]:
        """
        Snapshot of the buffer, oldest first.

        Args:
            level: Minimum level name to include
            subsystem: Only entries logged by this subsystem
            limit: Keep the newest `limit` entries; 0 or less keeps all
        """
        with self._entries_lock:
            entries = list(self._entries)

        if level:
            minimum = LogLevel.from_name(level)
            entries = [e for e in entries if LogLevel.from_name(e['level']) >= minimum]
        if subsystem:
            entries = [e for e in entries if e['subsystem'] == subsystem]

        return entries[-limit:] if limit > 0 else entries

    def clear(self) -> None:
        with self._entries_lock:
            self._entries.clear()


class Logger:
    """
    Subsystem logger for uniterm.

    `Logger('parser')` always returns the same object for the same name.
    Records go to the standard `uniterm.<subsystem>` logger, so hosts may
    also attach their own handlers with the logging module.

    Example:
        >>> log = Logger('parser')
        >>> log.debug("Parsed pipeline", context={'commands': 2})
    """

    _instances: dict[str, 'Logger'] = {}
    _lock = threading.Lock()
    _initialized = False
    _buffer_handler: Optional[LogBufferHandler] = None
    _handlers: List[logging.Handler] = []

    def __new__(cls, subsystem: str = 'terminal') -> 'Logger':
        with cls._lock:
            instance = cls._instances.get(subsystem)
            if instance is None:
                instance = super().__new__(cls)
                instance._subsystem = subsystem
                instance._logger = logging.getLogger(f'{ROOT_LOGGER_NAME}.{subsystem}')
                cls._instances[subsystem] = instance
            return instance

    @property
    def subsystem(self) -> str:
        return self._subsystem

    @classmethod
    def initialize(
        cls,
        level: int = LogLevel.WARNING,
        log_file: Optional[str] = None,
        use_colors: bool = True,
        console_output: bool = False,
        buffer_size: int = 1000
    ) -> None:
        """
        Attach the buffer handler, plus console and file handlers on request.

        A second call is ignored until shutdown() has run.

        Args:
            level: Minimum level captured by every handler
            log_file: Append formatted records to this file
            use_colors: Colour level names on a TTY console
            console_output: Also write formatted records to stderr
            buffer_size: Number of records kept for the `log` command
        """
        with cls._lock:
            if cls._initialized:
                return

            buffer_handler = LogBufferHandler(max_entries=buffer_size)
            handlers: List[logging.Handler] = [buffer_handler]

            if console_output:
                console = logging.StreamHandler(sys.stderr)
                console.setFormatter(LogFormatter(use_colors=use_colors, stream=sys.stderr))
                handlers.append(console)

            if log_file:
                Path(log_file).parent.mkdir(parents=True, exist_ok=True)
                file_handler = logging.FileHandler(log_file, encoding='utf-8')
                file_handler.setFormatter(LogFormatter(use_colors=False))
                handlers.append(file_handler)

            root = logging.getLogger(ROOT_LOGGER_NAME)
            root.setLevel(level)
            for handler in handlers:
                handler.setLevel(level)
                root.addHandler(handler)

            cls._buffer_handler = buffer_handler
            cls._handlers = handlers
            cls._initialized = True

    @classmethod
    def shutdown(cls) -> None:
        """Detach and close every handler installed by initialize()."""
        with cls._lock:
            root = logging.getLogger(ROOT_LOGGER_NAME)
            for handler in cls._handlers:
                root.removeHandler(handler)
                handler.close()
            cls._handlers = []
            cls._buffer_handler = None
            cls._initialized = False

    @classmethod
    def is_initialized(cls) -> bool:
        return cls._initialized

    @classmethod
    def get_buffered_logs(
        cls,
        level: Optional[str] = None,
        subsystem: Optional[str] = None,
        limit: int = 100
    ) -> List[dict[str, Any]]:
        """Buffered entries, or an empty list before initialize()."""
        if cls._buffer_handler is None:
            return []
        return cls._buffer_handler.get_logs(level=level, subsystem=subsystem, limit=limit)

    @classmethod
    def clear_buffer(cls) -> None:
        if cls._buffer_handler is not None:
            cls._buffer_handler.clear()

    def log(
        self,
        level: int,
        message: str,
        context: Optional[dict[str, Any]] = None,
        exc_info: Any = None
    ) -> None:
        """Log `message` at `level` with this logger's subsystem attached."""
        self._logger.log(
            level,
            message,
            extra={'subsystem': self._subsystem, 'context': context or {}},
            exc_info=exc_info
        )

    def debug(self, message: str, context: Optional[dict[str, Any]] = None) -> None:
        self.log(LogLevel.DEBUG, message, context)

    def info(self, message: str, context: Optional[dict[str, Any]] = None) -> None:
        self.log(LogLevel.INFO, message, context)

    def warning(self, message: str, context: Optional[dict[str, Any]] = None) -> None:
        self.log(LogLevel.WARNING, message, context)

    def error(self, message: str, context: Optional[dict[str, Any]] = None) -> None:
        self.log(LogLevel.ERROR, message, context)

    def exception(
        self,
        message: str,
        exc: Optional[BaseException] = None,
        context: Optional[dict[str, Any]] = None
    ) -> None:
        """Log at ERROR with the traceback of `exc` (or the active exception)."""
        self.log(LogLevel.ERROR, message, context, exc_info=exc or True)


def get_logger(subsystem: str) -> Logger:
    """Return the shared logger for `subsystem` (e.g. 'parser', 'executor')."""
    return Logger(subsystem)
