"""
Cancellation Token

Cooperative cancellation threaded through every pipeline call.

Author: YSNRFD
Version: 1.0.0
"""

import threading

from uniterm.exceptions import CommandCancelledError


class CancellationToken:
    """
    A cooperative cancellation flag.

    The host (typically on another thread) calls cancel(); command
    bodies and line readers/writers call raise_if_cancelled() at every
    suspension point.

    Example:
        >>> token = CancellationToken()
        >>> token.cancel()
        >>> token.raise_if_cancelled()
        Traceback (most recent call last):
        ...
        CommandCancelledError: operation cancelled
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        """Request cancellation."""
        self._event.set()

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        """Raise CommandCancelledError if cancellation was requested."""
        if self._event.is_set():
            raise CommandCancelledError()

    def wait(self, timeout: float) -> bool:
        """Block up to timeout seconds; True if cancelled meanwhile."""
        return self._event.wait(timeout)

    def __repr__(self) -> str:
        return f"CancellationToken(cancelled={self.is_cancelled})"


def ensure_token(token: "CancellationToken | None") -> CancellationToken:
    """Return token, or a fresh never-cancelled token when None."""
    return token if token is not None else CancellationToken()
