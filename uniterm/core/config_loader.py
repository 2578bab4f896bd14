"""
uniterm Configuration Loader

Terminal settings live in a JSON object with one member per section:

    {
        "paths":      {"home_directory": "~", "working_directory": null},
        "history":    {"max_size": 1000, "ignore_consecutive_duplicates": true},
        "logging":    {"level": "WARNING", "log_file": null, ...},
        "completion": {"show_hidden_files": true, "max_candidates": 0},
        "commands":   {"register_builtins": true, "disabled": []}
    }

Omitted sections and keys keep their defaults. Unknown sections or keys
are rejected rather than ignored.

Author: YSNRFD
Version: 1.0.0
"""

import json
import os
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Optional, List, Tuple

from uniterm.exceptions import ConfigValidationError
from uniterm.logger import LogLevel


@dataclass
class PathsConfig:
    """Directory settings. None means the user's home directory."""
    home_directory: Optional[str] = None
    working_directory: Optional[str] = None

    def resolved_home(self) -> str:
        return os.path.abspath(os.path.expanduser(self.home_directory or "~"))

    def resolved_working_directory(self) -> str:
        if self.working_directory is None:
            return self.resolved_home()
        return os.path.abspath(os.path.expanduser(self.working_directory))


@dataclass
class HistoryConfig:
    max_size: int = 1000
    ignore_consecutive_duplicates: bool = True


@dataclass
class LoggingConfig:
    level: str = "WARNING"
    log_file: Optional[str] = None
    console_output: bool = False
    use_colors: bool = True
    buffer_size: int = 1000


@dataclass
class CompletionConfig:
    show_hidden_files: bool = True
    max_candidates: int = 0  # 0 = unlimited


@dataclass
class CommandsConfig:
    """Which commands a new terminal registers."""
    register_builtins: bool = True
    disabled: List[str] = field(default_factory=list)


@dataclass
class Config:
    """All settings of one terminal, grouped by section."""
    paths: PathsConfig = field(default_factory=PathsConfig)
    history: HistoryConfig = field(default_factory=HistoryConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    completion: CompletionConfig = field(default_factory=CompletionConfig)
    commands: CommandsConfig = field(default_factory=CommandsConfig)


# (dotted key, smallest allowed value)
_INTEGER_LIMITS: Tuple[Tuple[str, int], ...] = (
    ('history.max_size', 0),
    ('logging.buffer_size', 1),
    ('completion.max_candidates', 0),
)


class ConfigLoader:
    """
    Reads, validates and edits a terminal `Config`.

    Each terminal owns its own loader; there is no process-wide
    configuration.

    Example:
        >>> loader = ConfigLoader()
        >>> config = loader.load('terminal.json')
        >>> loader.get('history.max_size')
        1000
    """

    def __init__(self, config: Optional[Config] = None):
        self._config = config or Config()
        self._loaded = config is not None

    @property
    def config(self) -> Config:
        return self._config

    @property
    def loaded(self) -> bool:
        return self._loaded

    def load(self, config_path: str) -> Config:
        """
        Load and validate a JSON configuration file.

        Raises:
            ConfigValidationError: If the file is missing, unreadable,
                not valid JSON, or holds invalid settings
        """
        path = Path(config_path)
        if not path.is_file():
            raise ConfigValidationError(f"Configuration file not found: {config_path}")

        try:
            data = json.loads(path.read_text(encoding='utf-8'))
        except json.JSONDecodeError as e:
            raise ConfigValidationError(f"Invalid JSON in configuration file: {e}") from e
        except OSError as e:
            raise ConfigValidationError(f"Cannot read configuration file: {e}") from e

        return self.load_dict(data)

    def load_dict(self, data: dict[str, Any]) -> Config:
        """Same as load(), for an already-decoded mapping."""
        if not isinstance(data, dict):
            raise ConfigValidationError("Configuration root must be a JSON object")

        config = Config()
        for name, section_data in data.items():
            if name not in {f.name for f in fields(Config)}:
                raise ConfigValidationError(f"Unknown configuration section: {name}", key=name)
            if not isinstance(section_data, dict):
                raise ConfigValidationError(f"Section '{name}' must be an object", key=name)
            setattr(config, name, self._build_section(name, getattr(config, name), section_data))

        self.validate(config)
        self._config = config
        self._loaded = True
        return config

    @staticmethod
    def _build_section(name: str, defaults: Any, section_data: dict[str, Any]) -> Any:
        known = {f.name for f in fields(defaults)}
        unknown = [key for key in section_data if key not in known]
        if unknown:
            key = f"{name}.{unknown[0]}"
            raise ConfigValidationError(f"Unknown configuration key: {key}", key=key)

        merged = asdict(defaults)
        merged.update(section_data)
        return type(defaults)(**merged)

    @staticmethod
    def validate(config: Config) -> None:
        """Raise ConfigValidationError for the first invalid setting."""
        for key, minimum in _INTEGER_LIMITS:
            section, name = key.split('.')
            value = getattr(getattr(config, section), name)
            # bool is an int subclass but never a valid count
            if isinstance(value, bool) or not isinstance(value, int) or value < minimum:
                expected = "a non-negative" if minimum == 0 else "a positive"
                raise ConfigValidationError(f"{key} must be {expected} integer", key=key)

        try:
            LogLevel.from_name(str(config.logging.level))
        except ValueError as e:
            raise ConfigValidationError(str(e), key="logging.level") from e

        disabled = config.commands.disabled
        if not isinstance(disabled, list) or not all(isinstance(n, str) for n in disabled):
            raise ConfigValidationError(
                "commands.disabled must be a list of command names",
                key="commands.disabled"
            )

    def _lookup(self, key: str) -> Tuple[Any, str]:
        """Split 'section.name' into the section object and the field name."""
        section_name, _, name = key.partition('.')
        section = getattr(self._config, section_name, None)
        if section is None or not name or '.' in name:
            raise ConfigValidationError(f"Invalid configuration key: {key}", key=key)
        if name not in {f.name for f in fields(section)}:
            raise ConfigValidationError(f"Invalid configuration key: {key}", key=key)
        return section, name

    def get(self, key: str, default: Any = None) -> Any:
        """Value at a dotted key such as 'history.max_size', or `default`."""
        if '.' not in key:
            return getattr(self._config, key, default)
        try:
            section, name = self._lookup(key)
        except ConfigValidationError:
            return default
        return getattr(section, name)

    def set(self, key: str, value: Any) -> None:
        """
        Change one setting in memory. Nothing is written back to disk.

        The previous value is restored when the new one fails validation.

        Raises:
            ConfigValidationError: For an unknown key or an invalid value
        """
        section, name = self._lookup(key)
        previous = getattr(section, name)
        setattr(section, name, value)
        try:
            self.validate(self._config)
        except ConfigValidationError:
            setattr(section, name, previous)
            raise

    def to_dict(self) -> dict[str, Any]:
        """The current configuration as plain JSON-compatible data."""
        return asdict(self._config)
