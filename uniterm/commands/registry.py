"""
uniterm Command Registry

A registry mapping command names to their metadata.
Provides:
- Registration of command types from their declared option schema
- Module scanning for Command subclasses
- Case-insensitive lookup
- Global help text

Author: YSNRFD
Version: 1.0.0
"""

import inspect
import threading
from types import ModuleType
from typing import Any, Callable, Iterator, Optional, List

from uniterm.commands.base import Command
from uniterm.commands.metadata import CommandMetadata, Option, OptionMetadata
from uniterm.exceptions import CommandDefinitionError
from uniterm.logger import get_logger


class CommandRegistry:
    """
    Registry of available commands.

    Each terminal constructs its own registry. Registration normally
    happens once at startup; lookups are safe from any thread.

    Example:
        >>> registry = CommandRegistry()
        >>> registry.register(EchoCommand)
        >>> registry.lookup('ECHO').command_name
        'echo'
    """

    def __init__(self):
        self._commands: dict[str, CommandMetadata] = {}
        self._lock = threading.Lock()
        self._logger = get_logger('registry')

    def register(
        self,
        command_type: type,
        factory: Optional[Callable[[], Any]] = None
    ) -> CommandMetadata:
        """
        Register a command type.

        Args:
            command_type: Command subclass declaring name, description
                and options
            factory: Zero-argument callable creating instances;
                defaults to the type itself

        Returns:
            The registered metadata

        Raises:
            CommandDefinitionError: If the declaration is invalid
        """
        metadata = self._build_metadata(command_type, factory)
        key = metadata.command_name.lower()

        with self._lock:
            previous = self._commands.get(key)
            if previous is not None:
                self._logger.warning(
                    f"Duplicate command name '{metadata.command_name}' - using last registered",
                    context={
                        'previous': previous.command_type.__qualname__ if previous.command_type else None,
                        'current': command_type.__qualname__,
                    }
                )
            self._commands[key] = metadata

        self._logger.debug(
            f"Registered command: {metadata.command_name}",
            context={'options': len(metadata.options)}
        )
        return metadata

    @staticmethod
    def _build_metadata(
        command_type: type,
        factory: Optional[Callable[[], Any]]
    ) -> CommandMetadata:
        if not isinstance(command_type, type) or not issubclass(command_type, Command):
            raise CommandDefinitionError(f"{command_type!r} is not a Command subclass")

        if inspect.isabstract(command_type) and factory is None:
            raise CommandDefinitionError(
                f"cannot register abstract command {command_type.__qualname__}",
                command_type
            )

        name = getattr(command_type, 'name', '')
        if not isinstance(name, str) or not name.strip():
            raise CommandDefinitionError("command declares no name", command_type)
        if any(c in name for c in ' |<>\'"\\\t'):
            raise CommandDefinitionError(f"invalid command name: {name!r}", command_type)

        declared = getattr(command_type, 'options', ())
        options: List[OptionMetadata] = []
        for option in declared:
            if not isinstance(option, Option):
                raise CommandDefinitionError(
                    f"options of '{name}' must be Option declarations, got {option!r}",
                    command_type
                )
            options.append(OptionMetadata.from_option(option, command_type))

        return CommandMetadata(
            command_name=name,
            description=getattr(command_type, 'description', '') or '',
            options=tuple(options),
            factory=factory or command_type,
            command_type=command_type,
        )

    def scan_module(self, module: ModuleType) -> int:
        """
        Register every concrete Command subclass defined in a module.

        Classes without a declared name are skipped.

        Args:
            module: Module to scan

        Returns:
            Number of commands registered
        """
        count = 0
        for _, obj in inspect.getmembers(module, inspect.isclass):
            if obj.__module__ != module.__name__:
                continue
            if not issubclass(obj, Command) or obj is Command or inspect.isabstract(obj):
                continue
            if not getattr(obj, 'name', ''):
                continue
            self.register(obj)
            count += 1

        self._logger.debug(f"Scanned module {module.__name__}", context={'registered': count})
        return count

    def unregister(self, name: str) -> bool:
        """Remove a command. Returns False if it was not registered."""
        with self._lock:
            return self._commands.pop(name.lower(), None) is not None

    def lookup(self, name: str) -> Optional[CommandMetadata]:
        """Find a command by case-insensitive name."""
        return self._commands.get(name.lower())

    def list_names(self) -> Iterator[str]:
        """Iterate registered command names in registration order."""
        with self._lock:
            names = [meta.command_name for meta in self._commands.values()]
        return iter(names)

    def __contains__(self, name: str) -> bool:
        return name.lower() in self._commands

    def __len__(self) -> int:
        return len(self._commands)

    def generate_global_help(self) -> str:
        """List every command with its description, sorted by name."""
        with self._lock:
            commands = sorted(self._commands.values(), key=lambda m: m.command_name.lower())

        lines = ["Available commands:", ""]
        for meta in commands:
            lines.append(f"  {meta.command_name:<20} {meta.description}")

        return "\n".join(lines) + "\n"
