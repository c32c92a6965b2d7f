"""Signal dispositions for the prompt, children and here-documents."""

from __future__ import annotations

import signal
import sys
from enum import IntEnum
from typing import Any


class SignalMode(IntEnum):
    """How a signal is to be handled."""

    SHELL = 100
    DEFAULT = 101
    IGNORE = 102
    HEREDOC = 103


_SIGQUIT = getattr(signal, "SIGQUIT", None)


def _shell_interrupt(signum: int, frame: Any) -> None:
    """Start a fresh prompt line; the reading loop sees KeyboardInterrupt."""
    sys.stdout.write("\n")
    sys.stdout.flush()
    raise KeyboardInterrupt


def _shell_quit(signum: int, frame: Any) -> None:
    """Quit is ignored at the prompt."""


def _heredoc_interrupt(signum: int, frame: Any) -> None:
    """Abandon the here-document being read."""
    sys.stdout.write("\n")
    sys.stdout.flush()
    raise KeyboardInterrupt


_INT_HANDLERS = {
    SignalMode.SHELL: _shell_interrupt,
    SignalMode.DEFAULT: signal.SIG_DFL,
    SignalMode.IGNORE: signal.SIG_IGN,
    SignalMode.HEREDOC: _heredoc_interrupt,
}

_QUIT_HANDLERS = {
    SignalMode.SHELL: _shell_quit,
    SignalMode.DEFAULT: signal.SIG_DFL,
    SignalMode.IGNORE: signal.SIG_IGN,
}


def set_signal(sig_int: int, sig_quit: int) -> dict[int, Any]:
    """Install handlers for SIGINT and SIGQUIT according to the modes.

    A mode with no meaning for a signal (HEREDOC for SIGQUIT) leaves it
    untouched. Returns the previous handlers of the signals changed.
    """
    previous: dict[int, Any] = {}
    int_handler = _INT_HANDLERS.get(SignalMode(sig_int))
    if int_handler is not None:
        previous[signal.SIGINT] = signal.signal(signal.SIGINT, int_handler)
    quit_handler = _QUIT_HANDLERS.get(SignalMode(sig_quit))
    if quit_handler is not None and _SIGQUIT is not None:
        previous[_SIGQUIT] = signal.signal(_SIGQUIT, quit_handler)
    return previous