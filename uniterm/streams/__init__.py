"""
uniterm Streams Module

Line-oriented readers and writers used for stdin, stdout, stderr and
the buffers between pipeline stages.
"""

from .text_io import (
    TextReader,
    TextWriter,
    EmptyTextReader,
    ListTextReader,
    FileTextReader,
    ListTextWriter,
    FileTextWriter,
    StreamTextWriter,
    StringTextWriter,
)

__all__ = [
    # Interfaces
    'TextReader',
    'TextWriter',
    # Readers
    'EmptyTextReader',
    'ListTextReader',
    'FileTextReader',
    # Writers
    'ListTextWriter',
    'FileTextWriter',
    'StreamTextWriter',
    'StringTextWriter',
]
