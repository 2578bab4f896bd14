"""
Binder Module

Matches parsed option occurrences against a command's schema and
populates a fresh command instance.

Author: YSNRFD
Version: 1.0.0
"""

from dataclasses import dataclass
from typing import Any, Optional, List, Tuple

from uniterm.binding.converters import ValueConverter
from uniterm.commands.metadata import CommandMetadata, OptionMetadata
from uniterm.commands.registry import CommandRegistry
from uniterm.exceptions import BindError, CommandCancelledError
from uniterm.logger import get_logger
from uniterm.shell.parser import ParsedCommand, ParsedOptionOccurrence, ParsedPipeline, ParsedRedirections


@dataclass(frozen=True)
class BoundCommand:
    """A command instance with its options populated, ready to run."""
    command: Any
    metadata: CommandMetadata
    positional_arguments: Tuple[str, ...]
    redirections: ParsedRedirections

    @property
    def name(self) -> str:
        return self.metadata.command_name


@dataclass(frozen=True)
class BoundPipeline:
    """Bound commands in execution order."""
    commands: Tuple[BoundCommand, ...]

    def __len__(self) -> int:
        return len(self.commands)


class _BindingState:
    """Per-command bookkeeping while occurrences are applied."""

    def __init__(self, parsed: ParsedCommand, metadata: CommandMetadata):
        self.parsed = parsed
        self.metadata = metadata
        self.instance = metadata.create_instance()
        self.seen: set[str] = set()
        self.returned_arguments: List[Tuple[int, str]] = []

    def fail(self, message: str) -> BindError:
        return BindError(
            f"{message}\n\n{self.metadata.generate_help()}",
            command_name=self.parsed.command_name,
        )

    def positional_arguments(self) -> Tuple[str, ...]:
        """Positional arguments with returned flag values at their source slots."""
        arguments = list(self.parsed.positional_arguments)
        for inserted, (index, value) in enumerate(self.returned_arguments):
            arguments.insert(index + inserted, value)
        return tuple(arguments)


class Binder:
    """
    Binds parsed commands to registered command types.

    Example:
        >>> binder = Binder(registry)
        >>> bound = binder.bind(parse('head -n 3 notes.txt').pipeline)
        >>> bound.commands[0].command.lines
        3
    """

    def __init__(self, registry: CommandRegistry, converter: Optional[ValueConverter] = None):
        self._registry = registry
        self._converter = converter or ValueConverter()
        self._logger = get_logger('binder')

    @property
    def converter(self) -> ValueConverter:
        return self._converter

    def bind(self, pipeline: ParsedPipeline) -> BoundPipeline:
        """
        Bind every command of a pipeline.

        Raises:
            BindError: On the first command that fails to bind
        """
        return BoundPipeline(tuple(self.bind_command(parsed) for parsed in pipeline.commands))

    def bind_command(
        self,
        parsed: ParsedCommand,
        metadata: Optional[CommandMetadata] = None
    ) -> BoundCommand:
        """
        Bind one parsed command.

        Args:
            parsed: Parsed command
            metadata: Schema to bind against; looked up by name when None

        Returns:
            BoundCommand with a fresh, populated instance

        Raises:
            BindError: Unknown command or option, missing value,
                conversion failure or missing required option
        """
        if metadata is None:
            metadata = self._registry.lookup(parsed.command_name)
            if metadata is None:
                raise BindError(
                    f"command not found: {parsed.command_name}\n\n{self._registry.generate_global_help()}",
                    command_name=parsed.command_name,
                )

        state = _BindingState(parsed, metadata)

        for occurrence in parsed.options:
            option = self._resolve_option(state, occurrence)

            if option.is_bool_flag:
                self._apply_flag(state, occurrence, option)
            else:
                self._apply_value(state, occurrence, option)

        for option in metadata.options:
            if option.is_required and option.long_name not in state.seen:
                raise state.fail(f"required option --{option.long_name} is missing")

        bound = BoundCommand(
            command=state.instance,
            metadata=metadata,
            positional_arguments=state.positional_arguments(),
            redirections=parsed.redirections,
        )
        self._logger.debug(
            f"Bound command: {metadata.command_name}",
            context={'options': len(state.seen), 'arguments': len(bound.positional_arguments)}
        )
        return bound

    @staticmethod
    def _resolve_option(state: _BindingState, occurrence: ParsedOptionOccurrence) -> OptionMetadata:
        if occurrence.is_long:
            option = state.metadata.find_long_option(occurrence.name)
        else:
            option = state.metadata.find_short_option(occurrence.name)

        if option is None:
            raise state.fail(f"unknown option: {occurrence.display_name}")
        return option

    @staticmethod
    def _apply_flag(state: _BindingState, occurrence: ParsedOptionOccurrence, option: OptionMetadata) -> None:
        if occurrence.has_value and not occurrence.is_value_space_separated:
            raise state.fail(f"boolean option --{option.long_name} does not accept a value")

        # A value taken from the next word belongs to the positional arguments
        if occurrence.has_value:
            state.returned_arguments.append((occurrence.argument_index, occurrence.raw_value))

        setattr(state.instance, option.attribute, True)
        state.seen.add(option.long_name)

    def _apply_value(self, state: _BindingState, occurrence: ParsedOptionOccurrence, option: OptionMetadata) -> None:
        if not occurrence.has_value:
            raise state.fail(f"option --{option.long_name} requires a value")

        raw_value = occurrence.raw_value or ""
        try:
            value = self._converter.convert(raw_value, option, occurrence.was_quoted)
        except CommandCancelledError:
            raise
        except Exception as e:
            raise state.fail(
                f"failed to convert value '{raw_value}' for option --{option.long_name}: {e}"
            ) from e

        if option.is_list_type:
            if option.long_name not in state.seen:
                setattr(state.instance, option.attribute, [])
            getattr(state.instance, option.attribute).extend(value)
        else:
            setattr(state.instance, option.attribute, value)

        state.seen.add(option.long_name)
