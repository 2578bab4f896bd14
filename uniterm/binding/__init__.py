"""
uniterm Binding Module

Option value conversion and command binding.
"""

from .converters import ValueConverter
from .binder import Binder, BoundCommand, BoundPipeline

__all__ = [
    'ValueConverter',
    'Binder',
    'BoundCommand',
    'BoundPipeline',
]
