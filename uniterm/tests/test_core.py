#!/usr/bin/env python3
"""
Core Component Tests

Configuration, logging, cancellation, exceptions and path resolution.

Run with: python -m pytest uniterm/tests/test_core.py -v

Author: YSNRFD
Version: 1.0.0
"""

import json
import os
import tempfile
import threading
import unittest

from uniterm.core.cancellation import CancellationToken, ensure_token
from uniterm.core.config_loader import Config, ConfigLoader
from uniterm.exceptions import (
    BindError,
    CommandCancelledError,
    ConfigValidationError,
    ParseError,
    TerminalException,
    TerminalRuntimeError,
)
from uniterm.exit_code import ExitCode
from uniterm.filesystem.path_resolver import PathResolver
from uniterm.logger import Logger, LogLevel, get_logger


class TestExceptions(unittest.TestCase):
    """Test the exception hierarchy."""

    def test_exit_codes(self):
        self.assertEqual(ParseError("x").exit_code, ExitCode.USAGE_ERROR)
        self.assertEqual(BindError("x").exit_code, ExitCode.USAGE_ERROR)
        self.assertEqual(TerminalRuntimeError("x").exit_code, ExitCode.RUNTIME_ERROR)

    def test_context(self):
        exc = ParseError("Unclosed double quote", position=5)
        self.assertEqual(exc.position, 5)
        self.assertEqual(exc.context["position"], 5)
        self.assertEqual(str(exc), "Unclosed double quote")
        self.assertIn("USAGE_ERROR", repr(exc))

        exc = BindError("unknown option: --x", command_name="grep")
        self.assertEqual(exc.context["command"], "grep")

    def test_cancellation_is_not_a_terminal_error(self):
        self.assertFalse(issubclass(CommandCancelledError, TerminalException))
        self.assertTrue(issubclass(ParseError, TerminalException))


class TestCancellationToken(unittest.TestCase):
    """Cooperative cancellation."""

    def test_cancel(self):
        token = CancellationToken()
        self.assertFalse(token.is_cancelled)
        token.raise_if_cancelled()

        token.cancel()
        self.assertTrue(token.is_cancelled)
        with self.assertRaises(CommandCancelledError):
            token.raise_if_cancelled()

    def test_cancel_from_other_thread(self):
        token = CancellationToken()
        thread = threading.Thread(target=token.cancel)
        thread.start()
        thread.join()

        self.assertTrue(token.wait(1.0))

    def test_ensure_token(self):
        token = CancellationToken()
        self.assertIs(ensure_token(token), token)
        self.assertFalse(ensure_token(None).is_cancelled)


class TestConfig(unittest.TestCase):
    """Test the configuration system."""

    def test_default_config(self):
        config = Config()

        self.assertEqual(config.history.max_size, 1000)
        self.assertTrue(config.history.ignore_consecutive_duplicates)
        self.assertEqual(config.logging.level, "WARNING")
        self.assertTrue(config.completion.show_hidden_files)
        self.assertTrue(config.commands.register_builtins)

    def test_load_dict(self):
        loader = ConfigLoader()
        config = loader.load_dict({
            'history': {'max_size': 5},
            'completion': {'max_candidates': 20},
            'commands': {'disabled': ['log']},
        })

        self.assertTrue(loader.loaded)
        self.assertEqual(config.history.max_size, 5)
        self.assertTrue(config.history.ignore_consecutive_duplicates)
        self.assertEqual(config.completion.max_candidates, 20)
        self.assertEqual(config.commands.disabled, ['log'])

    def test_load_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "terminal.json")
            with open(path, 'w', encoding='utf-8') as f:
                json.dump({'paths': {'home_directory': tmp}}, f)

            config = ConfigLoader().load(path)
            self.assertEqual(config.paths.resolved_home(), os.path.abspath(tmp))
            self.assertEqual(config.paths.resolved_working_directory(), os.path.abspath(tmp))

    def test_load_errors(self):
        loader = ConfigLoader()
        with self.assertRaises(ConfigValidationError):
            loader.load(os.path.join(tempfile.gettempdir(), "uniterm-missing.json"))

        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "bad.json")
            with open(path, 'w', encoding='utf-8') as f:
                f.write("{not json")
            with self.assertRaises(ConfigValidationError):
                loader.load(path)

    def test_validation(self):
        invalid = [
            {'bogus': {}},
            {'history': {'bogus': 1}},
            {'history': 5},
            {'history': {'max_size': -1}},
            {'logging': {'level': 'LOUD'}},
            {'logging': {'buffer_size': 0}},
            {'completion': {'max_candidates': -3}},
        ]
        for data in invalid:
            with self.subTest(data=data):
                with self.assertRaises(ConfigValidationError):
                    ConfigLoader().load_dict(data)

    def test_get_and_set(self):
        loader = ConfigLoader()
        self.assertEqual(loader.get('history.max_size'), 1000)
        self.assertEqual(loader.get('history.missing', 'x'), 'x')

        loader.set('history.max_size', 10)
        self.assertEqual(loader.config.history.max_size, 10)

        with self.assertRaises(ConfigValidationError):
            loader.set('history.max_size', -5)
        self.assertEqual(loader.config.history.max_size, 10)

        with self.assertRaises(ConfigValidationError):
            loader.set('history.nothing', 1)

    def test_to_dict(self):
        data = ConfigLoader().to_dict()
        self.assertEqual(data['history']['max_size'], 1000)
        self.assertEqual(data['commands']['disabled'], [])


class TestLogger(unittest.TestCase):
    """Test the logging system."""

    def setUp(self):
        Logger.shutdown()
        Logger.initialize(level=LogLevel.DEBUG, buffer_size=3)

    def tearDown(self):
        Logger.shutdown()

    def test_logger_per_subsystem(self):
        self.assertIs(get_logger('test'), Logger('test'))
        self.assertIsNot(get_logger('test'), get_logger('other'))
        self.assertEqual(get_logger('test').subsystem, 'test')

    def test_buffer(self):
        get_logger('test').info("hello", context={'k': 1})
        get_logger('other').warning("careful")

        logs = Logger.get_buffered_logs(subsystem='test')
        self.assertEqual(len(logs), 1)
        self.assertEqual(logs[0]['message'], "hello")
        self.assertEqual(logs[0]['context'], {'k': 1})

        self.assertEqual(len(Logger.get_buffered_logs(level='WARNING')), 1)

        Logger.clear_buffer()
        self.assertEqual(Logger.get_buffered_logs(), [])

    def test_buffer_is_bounded(self):
        log = get_logger('test')
        for i in range(5):
            log.debug(f"message {i}")

        messages = [entry['message'] for entry in Logger.get_buffered_logs(limit=0)]
        self.assertEqual(messages, ["message 2", "message 3", "message 4"])

    def test_log_levels(self):
        self.assertTrue(LogLevel.ERROR > LogLevel.INFO)
        self.assertIs(LogLevel.from_name("warning"), LogLevel.WARNING)
        with self.assertRaises(ValueError):
            LogLevel.from_name("loud")


class TestPathResolver(unittest.TestCase):
    """Host path resolution."""

    def test_resolve(self):
        wd = os.path.abspath(os.path.join(os.sep, "work", "dir"))
        home = os.path.abspath(os.path.join(os.sep, "home", "ada"))

        self.assertEqual(PathResolver.resolve("~", wd, home), home)
        self.assertEqual(PathResolver.resolve("~/notes.txt", wd, home), os.path.join(home, "notes.txt"))
        self.assertEqual(PathResolver.resolve("a/../b", wd, home), os.path.join(wd, "b"))
        self.assertEqual(PathResolver.resolve("..", wd, home), os.path.dirname(wd))
        self.assertEqual(PathResolver.resolve("~bob", wd, home), os.path.join(wd, "~bob"))

    def test_display_path(self):
        home = os.path.abspath(os.path.join(os.sep, "home", "ada"))

        self.assertEqual(PathResolver.display_path(home, home), "~")
        self.assertEqual(PathResolver.display_path(os.path.join(home, "src", "x"), home), "~/src/x")
        self.assertFalse(PathResolver.display_path(home + "x", home).startswith("~"))


if __name__ == '__main__':
    unittest.main()
