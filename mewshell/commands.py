"""Token kinds and the command list produced by the parser."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import IntEnum


class TokenType(IntEnum):
    """Kind of a parsed element on a command line."""

    WORD = 0
    REDIRECT_INPUT = 1
    REDIRECT_OUTPUT = 2
    REDIRECT_HEREDOC = 3
    REDIRECT_APPEND = 4
    PIPE = 5

    @property
    def is_redirect(self) -> bool:
        return self in (
            TokenType.REDIRECT_INPUT,
            TokenType.REDIRECT_OUTPUT,
            TokenType.REDIRECT_HEREDOC,
            TokenType.REDIRECT_APPEND,
        )


@dataclass
class Command:
    """One element: a word group, a redirection target or a pipe."""

    kind: TokenType
    text: str | None = None
    args: list[str] = field(default_factory=list)


def count_type(commands: Iterable[Command], token_type: TokenType) -> int:
    """Return how many elements are of ``token_type``."""
    return sum(1 for command in commands if command.kind == token_type)


def split_pipeline(commands: Iterable[Command]) -> list[list[Command]]:
    """Split the elements at pipes; n pipes give n + 1 segments."""
    segments: list[list[Command]] = [[]]
    for command in commands:
        if command.kind == TokenType.PIPE:
            segments.append([])
        else:
            segments[-1].append(command)
    return segments