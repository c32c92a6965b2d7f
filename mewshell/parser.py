"""Turn an input line into a list of commands, redirections and pipes."""

from __future__ import annotations

import re
from collections.abc import Iterable

from .commands import Command, TokenType
from .env import Environment
from .errors import AmbiguousRedirect, ShellSyntaxError
from .strings import NO_QUOTE, SINGLE_QUOTE, is_blank, quote_state, token_length

_REDIRECT_KINDS = {
    "<": (TokenType.REDIRECT_INPUT, TokenType.REDIRECT_HEREDOC),
    ">": (TokenType.REDIRECT_OUTPUT, TokenType.REDIRECT_APPEND),
}

# A "$" with the name that follows it, or any other single character.
_DOLLAR = re.compile(r"""\$([^ \t\n\v\f\r$|<>'".]*)|(.)""", re.DOTALL)

# Pieces of a word: quoted text (closing quote optional), a whitespace run,
# or a run of plain characters.
_WORD_PART = re.compile(
    r"""'([^']*)'?|"([^"]*)"?|([ \t\n\v\f\r]+)|([^ \t\n\v\f\r'"]+)"""
)


def _add_element(commands: list[Command], kind: TokenType, text: str) -> None:
    """Append ``text`` as an element of ``kind`` unless it is blank."""
    if not is_blank(text):
        commands.append(Command(kind, text))


def _read_redirect(commands: list[Command], line: str, pos: int) -> int:
    """Read the redirection starting at ``pos``; return the position after its target."""
    symbol = line[pos]
    single, double = _REDIRECT_KINDS[symbol]
    kind = single
    pos += 1
    if line[pos:pos + 1] == symbol:
        kind = double
        pos += 1
    while line[pos:pos + 1] == " ":
        pos += 1
    length = token_length(line[pos:])
    if length == 0:
        raise ShellSyntaxError("syntax error")
    _add_element(commands, kind, line[pos:pos + length])
    return pos + length


def tokenize(line: str) -> list[Command]:
    """Split ``line`` into words, redirections and pipes.

    Quotes are kept in the text of each element. Raises
    :class:`ShellSyntaxError` for doubled pipes, a trailing pipe, an
    unclosed quote or a redirection without a target.
    """
    commands: list[Command] = []
    buffer: str | None = None
    quotes = NO_QUOTE
    after_pipe = False
    pos = 0
    while pos < len(line):
        char = line[pos]
        quotes = quote_state(char, quotes)
        if quotes:
            buffer = (buffer or "") + char
            pos += 1
            continue
        if char in _REDIRECT_KINDS:
            if buffer is not None:
                _add_element(commands, TokenType.WORD, buffer)
                buffer = None
            pos = _read_redirect(commands, line, pos)
            continue
        if char == "|":
            if buffer is not None:
                _add_element(commands, TokenType.WORD, buffer)
                buffer = None
            if after_pipe:
                raise ShellSyntaxError("syntax error: pipe error")
            after_pipe = True
            commands.append(Command(TokenType.PIPE))
        else:
            buffer = (buffer or "") + char
            after_pipe = False
        pos += 1
    if buffer is not None:
        _add_element(commands, TokenType.WORD, buffer)
    if after_pipe:
        raise ShellSyntaxError("syntax error: pipe")
    if quotes:
        raise ShellSyntaxError("syntax error: unclosed quotes")
    return commands


def expand_word(word: str, env: Environment, exit_code: int) -> str | None:
    """Replace ``$NAME`` and ``$?`` in ``word``; None if nothing is left.

    Inside single quotes the text is kept as written. A ``$`` with no
    name after it stays a ``$``; an unknown name expands to nothing.
    """
    parts: list[str] = []
    quotes = NO_QUOTE
    for match in _DOLLAR.finditer(word):
        char = match.group(2)
        if char is not None:
            quotes = quote_state(char, quotes)
            parts.append(char)
            continue
        key = match.group(1)
        if quotes == SINGLE_QUOTE:
            parts.append("$" + key)
        elif key == "?":
            parts.append(str(exit_code))
        else:
            value = env.get(key or None)
            if value:
                parts.append(value)
    return "".join(parts) or None


def expand_variables(
    commands: Iterable[Command], env: Environment, exit_code: int
) -> None:
    """Expand variables in place in every element except here-document delimiters."""
    for command in commands:
        if (
            command.text
            and "$" in command.text
            and command.kind != TokenType.REDIRECT_HEREDOC
        ):
            command.text = expand_word(command.text, env, exit_code)


def split_words(text: str) -> list[str]:
    """Split ``text`` at unquoted whitespace and remove the quotes.

    Adjacent quoted and plain pieces join into one word; an empty pair
    of quotes alone makes no word.
    """
    words: list[str] = []
    current: str | None = None
    for match in _WORD_PART.finditer(text):
        if match.group(3):
            if current is not None:
                words.append(current)
                current = None
            continue
        piece = match.group(1) or match.group(2) or match.group(4) or ""
        if piece:
            current = (current or "") + piece
    if current is not None:
        words.append(current)
    return words


def split_arguments(commands: Iterable[Command]) -> None:
    """Fill ``args`` of each element and set its text to the first argument."""
    for command in commands:
        command.args = split_words(command.text or "")
        command.text = command.args[0] if command.args else None


def check_ambiguous_redirect(commands: Iterable[Command]) -> None:
    """Give empty words one empty argument; raise for empty redirection targets."""
    for command in commands:
        if command.args:
            continue
        if command.kind == TokenType.WORD:
            command.args = [""]
            command.text = ""
        elif command.kind != TokenType.PIPE:
            raise AmbiguousRedirect()


def parse(line: str, env: Environment, exit_code: int = 0) -> list[Command]:
    """Tokenize, expand and split ``line`` into a list of commands."""
    commands = tokenize(line)
    expand_variables(commands, env, exit_code)
    split_arguments(commands)
    check_ambiguous_redirect(commands)
    return commands