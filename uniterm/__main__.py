#!/usr/bin/env python3
"""
uniterm - Interactive entry point

Runs a terminal against the process's stdin and stdout.

Usage:
    python -m uniterm [--config FILE] [--script FILE]

Ctrl+C while a command runs cancels that command; Ctrl+C at the
prompt discards the current line; Ctrl+D or `exit` leaves.

Author: YSNRFD
Version: 1.0.0
"""

import sys
import threading
from typing import List, Optional

from uniterm.core.cancellation import CancellationToken
from uniterm.exceptions import CommandCancelledError, ConfigValidationError
from uniterm.exit_code import ExitCode
from uniterm.terminal import Terminal, create_terminal


def _run_cancellable(terminal: Terminal, line: str) -> ExitCode:
    """Run one line on a worker thread so Ctrl+C can cancel it."""
    token = CancellationToken()
    outcome: dict = {}

    def worker() -> None:
        try:
            outcome['code'] = terminal.run_line(line, token=token)
        except CommandCancelledError:
            print("cancelled", file=sys.stderr)
            outcome['code'] = ExitCode.RUNTIME_ERROR

    thread = threading.Thread(target=worker, name='uniterm-command', daemon=True)
    thread.start()

    while thread.is_alive():
        try:
            thread.join(0.1)
        except KeyboardInterrupt:
            token.cancel()
            print("^C")

    return outcome.get('code', ExitCode.RUNTIME_ERROR)


def repl(terminal: Terminal) -> int:
    """
    Run the interactive loop.

    Returns:
        Exit code of the last command
    """
    print("uniterm - type 'help' for a list of commands.\n")
    last = ExitCode.SUCCESS

    while True:
        try:
            line = input(terminal.prompt())
        except EOFError:
            print()
            break
        except KeyboardInterrupt:
            print("^C")
            continue

        if line.strip() in ('exit', 'quit'):
            break

        last = _run_cancellable(terminal, line)

    return int(last)


def _parse_args(argv: List[str]) -> dict:
    args: dict = {'config': None, 'script': None}
    i = 0
    while i < len(argv):
        arg = argv[i]
        if arg in ('--config', '--script') and i + 1 < len(argv):
            args[arg[2:]] = argv[i + 1]
            i += 2
        elif arg in ('-h', '--help'):
            args['help'] = True
            i += 1
        else:
            raise ValueError(f"unrecognized argument: {arg}")
    return args


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    try:
        args = _parse_args(sys.argv[1:] if argv is None else argv)
    except ValueError as e:
        print(f"uniterm: {e}", file=sys.stderr)
        return int(ExitCode.USAGE_ERROR)

    if args.get('help'):
        print(__doc__.split('Author:')[0].strip())
        return int(ExitCode.SUCCESS)

    try:
        terminal = create_terminal(args['config'])
    except ConfigValidationError as e:
        print(f"uniterm: {e.message}", file=sys.stderr)
        return int(ExitCode.RUNTIME_ERROR)

    if args['script']:
        try:
            with open(args['script'], 'r', encoding='utf-8') as f:
                script = f.read()
        except OSError as e:
            print(f"uniterm: cannot read {args['script']}: {e.strerror}", file=sys.stderr)
            return int(ExitCode.RUNTIME_ERROR)
        return int(terminal.run_script(script))

    return repl(terminal)


if __name__ == '__main__':
    sys.exit(main())
