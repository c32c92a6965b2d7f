"""Here-documents: read text up to a delimiter into temporary files."""

from __future__ import annotations

import os
from collections.abc import Callable, Iterable

from .commands import Command, TokenType
from .env import Environment
from .errors import ShellError

DEFAULT_PREFIX = "/tmp/.here_doc"
PROMPT = "> "

ReadLine = Callable[[str], "str | None"]

_NAME_STOPS = frozenset(" \"'.")


def expand_line(line: str, env: Environment) -> str:
    """Replace ``$NAME`` in a here-document line.

    A name runs to a space, quote or dot. A ``$`` with no name stays a
    ``$``; an unknown name expands to nothing.
    """
    parts: list[str] = []
    pos = 0
    while pos < len(line):
        dollar = line.find("$", pos)
        if dollar == -1:
            parts.append(line[pos:])
            break
        parts.append(line[pos:dollar])
        end = dollar + 1
        while end < len(line) and line[end] not in _NAME_STOPS:
            end += 1
        value = env.get(line[dollar + 1:end] or None)
        if value:
            parts.append(value)
        pos = end
    return "".join(parts)


def _delimiter_word(delimiter: str | None) -> str | None:
    words = [word for word in (delimiter or "").split(" ") if word]
    return words[0] if words else None


def read_here_doc(
    delimiter: str | None, env: Environment, read_line: ReadLine
) -> str:
    """Read lines with ``read_line`` until ``delimiter`` or end of input.

    Lines containing ``$`` are expanded. Returns the text, each line
    ending in a newline.
    """
    word = _delimiter_word(delimiter)
    lines: list[str] = []
    while True:
        try:
            line = read_line(PROMPT)
        except EOFError:
            break
        if line is None or line == word:
            break
        if "$" in line:
            line = expand_line(line, env)
        lines.append(line + "\n")
    return "".join(lines)


def _write_file(path: str, text: str) -> None:
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o644)
    with os.fdopen(fd, "w") as handle:
        handle.write(text)


def create_here_docs(
    commands: Iterable[Command],
    env: Environment,
    read_line: ReadLine,
    prefix: str = DEFAULT_PREFIX,
) -> list[str]:
    """Read every here-document and turn it into an input redirection.

    The file for an element is ``prefix`` followed by its position among
    the non-pipe elements, counting from 1. Returns the files written.
    An interrupt while reading removes them before it propagates.
    """
    paths: list[str] = []
    non_pipes = (command for command in commands if command.kind != TokenType.PIPE)
    try:
        for count, command in enumerate(non_pipes, start=1):
            if command.kind != TokenType.REDIRECT_HEREDOC:
                continue
            path = f"{prefix}{count}"
            text = read_here_doc(command.text, env, read_line)
            try:
                _write_file(path, text)
            except OSError as exc:
                raise ShellError(f"{path}: {exc.strerror}", exit_code=1) from exc
            paths.append(path)
            command.text = path
            command.kind = TokenType.REDIRECT_INPUT
    except (KeyboardInterrupt, ShellError):
        delete_here_docs(paths)
        raise
    return paths


def delete_here_docs(paths: Iterable[str]) -> None:
    """Remove the here-document files that still exist."""
    for path in paths:
        try:
            os.unlink(path)
        except FileNotFoundError:
            pass