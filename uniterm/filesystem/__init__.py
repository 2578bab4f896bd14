"""
uniterm File System Helpers

Path resolution against a terminal's working and home directories.
"""

from .path_resolver import PathResolver

__all__ = ['PathResolver']
