"""
Command Metadata Module

Declarative option schema for commands:
- Option declarations listed by each command type
- Validated, immutable option metadata built at registration
- Per-command metadata with option lookup, instance creation and help text

Author: YSNRFD
Version: 1.0.0
"""

import copy
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Optional, List, Tuple

from uniterm.exceptions import CommandDefinitionError


class OptionKind(Enum):
    """Closed set of value kinds an option can bind to."""
    STRING = "string"
    INT = "int"
    FLOAT = "float"
    BOOL = "bool"
    ENUM = "enum"
    STRUCTURED = "structured"


@dataclass(frozen=True)
class Option:
    """
    Option declaration listed in a command's ``options`` tuple.

    Attributes:
        long_name: Name used as --long-name
        short_name: Optional single character used as -s
        kind: Value kind the raw text is converted to
        required: Binding fails when the option is absent
        description: One-line help text
        default: Attribute value when the option is absent
        is_list: Accumulate every occurrence into a list
        enum_type: Enum class for OptionKind.ENUM
        parser: Registered parser name for OptionKind.STRUCTURED
        attribute: Instance attribute name; defaults to long_name
            with '-' replaced by '_'

    Example:
        >>> Option('lines', 'n', OptionKind.INT, default=10,
        ...        description='Number of lines to print')
    """
    long_name: str
    short_name: Optional[str] = None
    kind: OptionKind = OptionKind.STRING
    required: bool = False
    description: str = ""
    default: Any = None
    is_list: bool = False
    enum_type: Optional[type] = None
    parser: Optional[str] = None
    attribute: Optional[str] = None


@dataclass(frozen=True)
class OptionMetadata:
    """Validated option schema entry."""
    long_name: str
    short_name: Optional[str]
    is_required: bool
    description: str
    value_type: OptionKind
    is_bool_flag: bool
    is_list_type: bool
    element_type: Optional[OptionKind]
    enum_type: Optional[type]
    parser_name: Optional[str]
    attribute: str
    default: Any

    @classmethod
    def from_option(cls, option: Option, command_type: Optional[type] = None) -> 'OptionMetadata':
        """
        Validate a declaration and build its metadata.

        Raises:
            CommandDefinitionError: If the declaration is inconsistent
        """
        name = option.long_name
        if not name or name.startswith('-') or '=' in name or ' ' in name:
            raise CommandDefinitionError(f"invalid option name: {name!r}", command_type)

        if option.short_name is not None and (
            len(option.short_name) != 1 or option.short_name in '-= '
        ):
            raise CommandDefinitionError(
                f"short name of option --{name} must be a single character",
                command_type
            )

        if not isinstance(option.kind, OptionKind):
            raise CommandDefinitionError(f"option --{name} has no valid kind", command_type)

        if option.kind == OptionKind.BOOL and option.is_list:
            raise CommandDefinitionError(f"option --{name}: list of bool is not supported", command_type)

        if option.kind == OptionKind.ENUM and not (
            isinstance(option.enum_type, type) and issubclass(option.enum_type, Enum)
        ):
            raise CommandDefinitionError(f"option --{name}: enum option needs enum_type", command_type)

        if option.kind == OptionKind.STRUCTURED and not option.parser:
            raise CommandDefinitionError(f"option --{name}: structured option needs a parser name", command_type)

        default = option.default
        if default is None:
            if option.is_list:
                default = []
            elif option.kind == OptionKind.BOOL:
                default = False

        return cls(
            long_name=name,
            short_name=option.short_name,
            is_required=option.required,
            description=option.description,
            value_type=option.kind,
            is_bool_flag=option.kind == OptionKind.BOOL,
            is_list_type=option.is_list,
            element_type=option.kind if option.is_list else None,
            enum_type=option.enum_type,
            parser_name=option.parser,
            attribute=option.attribute or name.replace('-', '_'),
            default=default,
        )

    @property
    def display_name(self) -> str:
        return f"--{self.long_name}"

    def friendly_type_name(self) -> str:
        """Type name shown in help text, e.g. int or list<string>."""
        if self.value_type == OptionKind.ENUM:
            base = "|".join(m.name.lower() for m in self.enum_type)
        elif self.value_type == OptionKind.STRUCTURED:
            base = self.parser_name
        else:
            base = self.value_type.value

        return f"list<{base}>" if self.is_list_type else base

    def __str__(self) -> str:
        short_part = f"-{self.short_name}, " if self.short_name else ""
        required = " (required)" if self.is_required else ""
        return f"{short_part}--{self.long_name}{required}: {self.friendly_type_name()}"


@dataclass
class CommandMetadata:
    """
    Registry entry for one command.

    Long names match case-insensitively. Short names match exactly
    first, then case-insensitively, so -n and -N may coexist.
    """
    command_name: str
    description: str
    options: Tuple[OptionMetadata, ...]
    factory: Callable[[], Any]
    command_type: Optional[type] = None
    _long_map: dict[str, OptionMetadata] = field(default_factory=dict, init=False, repr=False)
    _short_map: dict[str, OptionMetadata] = field(default_factory=dict, init=False, repr=False)

    def __post_init__(self) -> None:
        self.options = tuple(self.options)
        for opt in self.options:
            key = opt.long_name.lower()
            if key in self._long_map:
                raise CommandDefinitionError(
                    f"command '{self.command_name}' declares option --{opt.long_name} twice",
                    self.command_type
                )
            self._long_map[key] = opt

            if opt.short_name:
                if opt.short_name in self._short_map:
                    raise CommandDefinitionError(
                        f"command '{self.command_name}' declares option -{opt.short_name} twice",
                        self.command_type
                    )
                self._short_map[opt.short_name] = opt

    def find_long_option(self, name: str) -> Optional[OptionMetadata]:
        return self._long_map.get(name.lower())

    def find_short_option(self, name: str) -> Optional[OptionMetadata]:
        if name in self._short_map:
            return self._short_map[name]

        lowered = name.lower()
        for short_name, opt in self._short_map.items():
            if short_name.lower() == lowered:
                return opt
        return None

    def create_instance(self) -> Any:
        """
        Create a fresh command instance with every option at its default.

        Mutable defaults are copied so instances never share state.
        """
        instance = self.factory()
        for opt in self.options:
            setattr(instance, opt.attribute, copy.copy(opt.default))
        return instance

    def generate_help(self) -> str:
        """
        Build the usage text for this command.

        Example:
            head - Print the first lines of input

            Options:
              -n, --lines <int>  Number of lines to print
        """
        lines: List[str] = [f"{self.command_name} - {self.description}", ""]

        if self.options:
            lines.append("Options:")
            for opt in self.options:
                short_part = f"-{opt.short_name}, " if opt.short_name else "    "
                text = f"  {short_part}--{opt.long_name}"
                if not opt.is_bool_flag:
                    text += f" <{opt.friendly_type_name()}>"
                if opt.is_required:
                    text += " (required)"
                if opt.description:
                    text += f"  {opt.description}"
                lines.append(text)

        return "\n".join(lines) + "\n"
