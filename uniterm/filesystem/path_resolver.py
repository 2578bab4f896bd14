"""
Path Resolver Module

Turns the paths a user types (`~/notes.txt`, `../src`, `out.txt`) into
absolute host paths relative to a terminal's working and home
directories, and back into the short form shown in prompts.

Author: YSNRFD
Version: 1.0.0
"""

import os


class PathResolver:
    """
    Static helpers over os.path that know about the terminal's `~`.

    Only the bare `~` and `~/...` forms are home shorthand; `~user` is
    an ordinary relative name.
    """

    @staticmethod
    def to_display_separators(path: str) -> str:
        """Use forward slashes regardless of platform."""
        for separator in (os.sep, os.altsep):
            if separator and separator != '/':
                path = path.replace(separator, '/')
        return path

    @staticmethod
    def expand_home(path: str, home_directory: str) -> str:
        if path == '~':
            return home_directory
        if path[:2] in ('~/', '~' + os.sep):
            return os.path.join(home_directory, path[2:])
        return path

    @staticmethod
    def resolve(path: str, working_directory: str, home_directory: str) -> str:
        """
        Absolute, normalized form of a typed path.

        Example:
            >>> PathResolver.resolve('~/notes.txt', '/tmp', '/home/ada')
            '/home/ada/notes.txt'
        """
        target = PathResolver.expand_home(path, home_directory)
        return os.path.abspath(os.path.join(working_directory, target))

    @staticmethod
    def display_path(path: str, home_directory: str) -> str:
        """
        Prompt form of an absolute path: `~` or `~/rest` under the home
        directory, otherwise the full path, always with forward slashes.
        """
        home = os.path.normpath(home_directory)
        full = os.path.normpath(path)
        if full == home:
            return '~'

        under_home = home.rstrip(os.sep) + os.sep
        if full.startswith(under_home):
            full = '~' + os.sep + full[len(under_home):]
        return PathResolver.to_display_separators(full)
