"""Exceptions raised by the shell and helpers for reporting them."""

from __future__ import annotations

import sys
from typing import TextIO

PROMPT_TAG = "🐈: "


class ShellError(Exception):
    """A failure reported to the user; ``exit_code`` is the resulting status."""

    exit_code: int | None = 1
    default_message = "error"

    def __init__(self, message: str | None = None, exit_code: int | None = None):
        self.message = message if message is not None else self.default_message
        super().__init__(self.message)
        if exit_code is not None:
            self.exit_code = exit_code


class ShellSyntaxError(ShellError):
    """The line could not be parsed; the previous exit status is kept."""

    exit_code = None
    default_message = "syntax error"


class AmbiguousRedirect(ShellError):
    """A redirection target expanded to nothing."""

    exit_code = 1
    default_message = "ambiguous redirect"


class CommandNotFound(ShellError):
    """No executable could be found for a command name."""

    exit_code = 127

    def __init__(self, command: str):
        self.command = command
        super().__init__(f"{PROMPT_TAG}{command}: command not found")


class ShellExit(Exception):
    """Request to leave the shell with ``status``; ``message`` goes to stdout."""

    def __init__(self, status: int, message: str | None = None):
        super().__init__(status)
        self.status = status
        self.message = message


def export_error_message(identifier: str) -> str:
    """Return the message for an invalid ``export`` identifier."""
    return f"{PROMPT_TAG}export: `{identifier}': not a vaild identifier"


def report(message: str, stream: TextIO | None = None) -> None:
    """Write ``message`` and a newline to ``stream`` (standard error by default)."""
    target = stream if stream is not None else sys.stderr
    target.write(message + "\n")
    target.flush()