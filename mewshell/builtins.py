"""Commands the shell runs itself instead of starting a program."""

from __future__ import annotations

import os
import sys
from collections.abc import Sequence
from typing import TextIO

from .env import Environment
from .errors import ShellExit, export_error_message, report
from .strings import is_identifier

NUMERIC_ERROR = "numeric argument required"
NUMERIC_ERROR_STATUS = 255
BUILTINS = frozenset({"cd", "unset", "exit", "pwd", "echo", "export", "env"})

_MAX_DIGITS = 19
_LIMIT_PREFIX = 922337203685477580
_ATOI_SPACE = frozenset(" \t\n\v\f\r")


def _out(stream: TextIO | None) -> TextIO:
    return stream if stream is not None else sys.stdout


def _err(stream: TextIO | None) -> TextIO:
    return stream if stream is not None else sys.stderr


def echo(args: Sequence[str], no_newline: bool = False, stdout: TextIO | None = None) -> int:
    """Print ``args`` separated by spaces.

    An argument starting with a double quote prints only the text up to
    the next double quote.
    """
    pieces = []
    for arg in args:
        if arg.startswith('"'):
            pieces.append(arg[1:].split('"', 1)[0])
        else:
            pieces.append(arg)
    text = " ".join(pieces)
    if not no_newline:
        text += "\n"
    _out(stdout).write(text)
    return 0


def cd(env: Environment, path: str | None) -> int:
    """Change directory, recording ``OLDPWD`` and ``PWD``.

    A directory that cannot be entered leaves the working directory as it was.
    """
    export(env, [f"OLDPWD={os.getcwd()}"])
    if path is not None:
        try:
            os.chdir(path)
        except OSError:
            pass
    export(env, [f"PWD={os.getcwd()}"])
    return 0


def pwd(stdout: TextIO | None = None) -> int:
    """Print the working directory."""
    _out(stdout).write(os.getcwd() + "\n")
    return 0


def _numeric_error() -> ShellExit:
    return ShellExit(NUMERIC_ERROR_STATUS, NUMERIC_ERROR)


def exit_status(arg: str | None) -> int:
    """Return the status ``exit`` leaves with for ``arg``.

    Raises :class:`ShellExit` with status 255 when ``arg`` is not a number
    that fits in a signed 64-bit integer, or is negative zero.
    """
    if arg is None:
        return 0
    text = arg.lstrip("".join(_ATOI_SPACE))
    sign = 1
    if text[:1] == "-":
        sign = -1
    if text[:1] in ("+", "-"):
        text = text[1:]
    num = 0
    for count, char in enumerate(text):
        if count >= _MAX_DIGITS:
            raise _numeric_error()
        if not ("0" <= char <= "9"):
            raise _numeric_error()
        digit = ord(char) - ord("0")
        if num == _LIMIT_PREFIX and digit > (7 if sign == 1 else 8):
            raise _numeric_error()
        num = num * 10 + digit
    if sign == -1 and num == 0:
        raise _numeric_error()
    return (sign * num) % 256


def _split_assignment(arg: str) -> tuple[str | None, str | None]:
    separator = " " if arg == "=" else "="
    parts = [part for part in arg.split(separator) if part]
    key = parts[0] if parts else None
    value = parts[1] if len(parts) > 1 else None
    return key, value


def export(env: Environment, args: Sequence[str], stderr: TextIO | None = None) -> int:
    """Set variables from ``KEY=VALUE`` arguments.

    An existing variable is always updated; a new one must have a name
    that is a letter followed by letters or digits, otherwise an error is
    reported. The value is the text between the first and second ``=``.
    """
    for arg in args:
        key, value = _split_assignment(arg)
        if key is not None and key in env:
            env.set(key, value)
        elif key is None or not is_identifier(key):
            report(export_error_message(key if key is not None else arg), _err(stderr))
        else:
            env.set(key, value)
    return 0


def unset(env: Environment, key: str | None) -> int:
    """Remove ``key`` from the environment."""
    if key is not None:
        env.unset(key)
    return 0


def print_env(env: Environment, stdout: TextIO | None = None) -> int:
    """Print ``KEY=VALUE`` for every variable that has a value."""
    stream = _out(stdout)
    for key in env:
        value = env.get(key)
        if value is not None:
            stream.write(f"{key}={value}\n")
    return 0


def print_export(env: Environment, stdout: TextIO | None = None) -> int:
    """Print every variable as ``declare -x`` lines sorted by name."""
    lines = sorted(
        env.export_lines(), key=lambda line: line.split("=", 1)[0].encode()
    )
    stream = _out(stdout)
    for line in lines:
        stream.write(f"declare -x {line}\n")
    return 0


def echo_flag_count(args: Sequence[str]) -> int:
    """Return the index of the first word after the ``-n`` flags of ``echo``.

    ``args`` includes the command name and is expected to have ``-n`` as
    its second element.
    """
    index = 2
    while index < len(args) and args[index] == "-n":
        index += 1
    return index


def is_builtin(args: Sequence[str]) -> bool:
    """Return True if ``args`` names a builtin command."""
    return bool(args) and args[0] in BUILTINS


def run_builtin(
    args: Sequence[str],
    env: Environment,
    stdout: TextIO | None = None,
    stderr: TextIO | None = None,
) -> int:
    """Run the builtin named by ``args[0]`` and return its status.

    ``exit`` raises :class:`ShellExit`. Raises ValueError if ``args`` does
    not name a builtin.
    """
    if not is_builtin(args):
        raise ValueError(f"not a builtin: {args[0] if args else ''}")
    name = args[0]
    first = args[1] if len(args) > 1 else None
    if name == "cd":
        return cd(env, first)
    if name == "unset":
        return unset(env, first)
    if name == "exit":
        raise ShellExit(exit_status(first))
    if name == "pwd":
        return pwd(stdout)
    if name == "echo":
        if first == "-n":
            return echo(args[echo_flag_count(args):], True, stdout)
        return echo(args[1:], False, stdout)
    if name == "export":
        if first is not None:
            return export(env, args[1:], stderr)
        return print_export(env, stdout)
    return print_env(env, stdout)