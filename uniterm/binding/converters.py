"""
Value Converter Module

Converts raw option text into typed values by option kind.

Author: YSNRFD
Version: 1.0.0
"""

import re
import threading
from typing import Any, Callable, List

from uniterm.commands.metadata import OptionKind, OptionMetadata

_INT_PATTERN = re.compile(r'[+-]?[0-9]+')
_FLOAT_PATTERN = re.compile(r'[+-]?([0-9]+(\.[0-9]*)?|\.[0-9]+)([eE][+-]?[0-9]+)?')

_TRUE_WORDS = frozenset({'true', '1', 'yes', 'on'})
_FALSE_WORDS = frozenset({'false', '0', 'no', 'off'})


class ValueConverter:
    """
    Converts option values for every OptionKind.

    STRUCTURED options name a parser registered by the host; a parser
    takes the raw text and returns the value or raises ValueError.

    Example:
        >>> converter = ValueConverter()
        >>> converter.register_parser('point', lambda s: tuple(map(int, s.split(':'))))
        >>> converter.convert_scalar('3:4', OptionKind.STRUCTURED, parser_name='point')
        (3, 4)
    """

    def __init__(self):
        self._parsers: dict[str, Callable[[str], Any]] = {}
        self._lock = threading.Lock()
        self._dispatch: dict[OptionKind, Callable[..., Any]] = {
            OptionKind.STRING: self._convert_string,
            OptionKind.INT: self._convert_int,
            OptionKind.FLOAT: self._convert_float,
            OptionKind.BOOL: self._convert_bool,
            OptionKind.ENUM: self._convert_enum,
            OptionKind.STRUCTURED: self._convert_structured,
        }

    def register_parser(self, name: str, parser: Callable[[str], Any]) -> None:
        """Register a parser for STRUCTURED options declaring this name."""
        with self._lock:
            self._parsers[name] = parser

    def has_parser(self, name: str) -> bool:
        return name in self._parsers

    def convert(self, raw_value: str, option: OptionMetadata, was_quoted: bool = False) -> Any:
        """
        Convert a raw value for an option.

        List options split an unquoted value on commas and convert each
        element; a quoted value is always one element.

        Raises:
            ValueError: If the value cannot be converted
        """
        if option.is_list_type:
            parts = [raw_value] if was_quoted else raw_value.split(',')
            return [self._convert_option_scalar(part, option) for part in parts]

        return self._convert_option_scalar(raw_value, option)

    def _convert_option_scalar(self, raw_value: str, option: OptionMetadata) -> Any:
        return self.convert_scalar(
            raw_value,
            option.value_type,
            enum_type=option.enum_type,
            parser_name=option.parser_name,
        )

    def convert_scalar(self, raw_value: str, kind: OptionKind, enum_type: Any = None, parser_name: Any = None) -> Any:
        """Convert one value of the given kind."""
        converter = self._dispatch.get(kind)
        if converter is None:
            raise ValueError(f"unsupported option kind: {kind}")
        return converter(raw_value, enum_type=enum_type, parser_name=parser_name)

    @staticmethod
    def _convert_string(raw_value: str, **_: Any) -> str:
        return raw_value

    @staticmethod
    def _convert_int(raw_value: str, **_: Any) -> int:
        if not _INT_PATTERN.fullmatch(raw_value):
            raise ValueError(f"cannot convert '{raw_value}' to int")
        return int(raw_value)

    @staticmethod
    def _convert_float(raw_value: str, **_: Any) -> float:
        if not _FLOAT_PATTERN.fullmatch(raw_value):
            raise ValueError(f"cannot convert '{raw_value}' to float")
        return float(raw_value)

    @staticmethod
    def _convert_bool(raw_value: str, **_: Any) -> bool:
        lowered = raw_value.lower()
        if lowered in _TRUE_WORDS:
            return True
        if lowered in _FALSE_WORDS:
            return False
        raise ValueError(f"cannot convert '{raw_value}' to bool")

    @staticmethod
    def _convert_enum(raw_value: str, enum_type: Any = None, **_: Any) -> Any:
        lowered = raw_value.lower()
        for member in enum_type:
            if member.name.lower() == lowered:
                return member

        valid: List[str] = [member.name.lower() for member in enum_type]
        raise ValueError(
            f"cannot convert '{raw_value}' to {enum_type.__name__}. Valid values: {', '.join(valid)}"
        )

    def _convert_structured(self, raw_value: str, parser_name: Any = None, **_: Any) -> Any:
        parser = self._parsers.get(parser_name)
        if parser is None:
            raise ValueError(f"no parser registered for '{parser_name}'")
        return parser(raw_value)
