"""Character classes and small string helpers used by the parser."""

from __future__ import annotations

NO_QUOTE = 0
SINGLE_QUOTE = 1
DOUBLE_QUOTE = 2

_WHITESPACE = frozenset(" \t\n\v\f\r")
_META = frozenset("$|><'\"")
_WHITE_META = _WHITESPACE | _META | frozenset(".")
_TOKEN_STOPS = frozenset(" |><")


def is_whitespace(c: str) -> bool:
    """Return True for a space or one of the control characters tab to carriage return."""
    return c in _WHITESPACE


def is_blank(text: str) -> bool:
    """Return True if ``text`` holds only whitespace (an empty string counts)."""
    return all(is_whitespace(ch) for ch in text)


def is_meta_character(c: str) -> bool:
    """Return True for the characters with special meaning to the shell."""
    return c in _META


def is_white_meta_char(c: str) -> bool:
    """Return True for characters that end a variable name."""
    return c in _WHITE_META


def _is_ascii_alpha(c: str) -> bool:
    return c.isascii() and c.isalpha()


def _is_ascii_alnum(c: str) -> bool:
    return c.isascii() and c.isalnum()


def is_identifier(text: str) -> bool:
    """Return True if ``text`` is a letter followed by letters or digits."""
    if not text or not _is_ascii_alpha(text[0]):
        return False
    return all(_is_ascii_alnum(ch) for ch in text[1:])


def quote_state(c: str, quotes: int) -> int:
    """Return the quoting state after reading ``c`` in state ``quotes``.

    A single quote opens or closes single quoting unless inside double
    quotes; a double quote does the same for double quoting.
    """
    if c == "'":
        if quotes == SINGLE_QUOTE:
            return NO_QUOTE
        if quotes == DOUBLE_QUOTE:
            return DOUBLE_QUOTE
        return SINGLE_QUOTE
    if c == '"':
        if quotes == DOUBLE_QUOTE:
            return NO_QUOTE
        if quotes == SINGLE_QUOTE:
            return SINGLE_QUOTE
        return DOUBLE_QUOTE
    return quotes


def token_length(text: str) -> int:
    """Return the length of the redirection target at the start of ``text``.

    A target starting with a quote runs to its closing quote, inclusive.
    Otherwise it runs to the first space, pipe or angle bracket; a single
    trailing space is counted as part of it.
    """
    if not text:
        return 0
    quotes = quote_state(text[0], NO_QUOTE)
    if quotes:
        end = 1
        while end < len(text) and quote_state(text[end], quotes):
            end += 1
        return min(end + 1, len(text))
    end = 0
    while end < len(text) and text[end] not in _TOKEN_STOPS:
        end += 1
    if end < len(text) and text[end] == " ":
        end += 1
    return end