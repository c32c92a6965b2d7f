"""The shell's ordered table of environment variables."""

from __future__ import annotations

from collections.abc import Iterable, Iterator


class Environment:
    """Variables in insertion order; a value of None means declared but unset."""

    def __init__(self) -> None:
        self._vars: dict[str, str | None] = {}

    @classmethod
    def from_strings(cls, entries: Iterable[str]) -> Environment:
        """Build an environment from ``KEY=VALUE`` strings.

        The key is everything before the first ``=``. Every ``=`` sign is
        dropped from the value, and an empty value is stored as None. When
        a key repeats, the first entry wins; entries without a key are
        skipped.
        """
        env = cls()
        for entry in entries:
            key, sep, rest = entry.partition("=")
            if not key or key in env:
                continue
            value = rest.replace("=", "") if sep else ""
            env.set(key, value or None)
        return env

    def get(self, key: str | None) -> str | None:
        """Return the value of ``key``, or None; a missing name gives ``$``."""
        if key is None:
            return "$"
        return self._vars.get(key)

    def set(self, key: str, value: str | None) -> None:
        """Set ``key``; an existing variable keeps its position."""
        self._vars[key] = value

    def unset(self, key: str) -> None:
        """Remove ``key`` if it exists."""
        self._vars.pop(key, None)

    def __contains__(self, key: object) -> bool:
        return key in self._vars

    def __len__(self) -> int:
        return len(self._vars)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._vars))

    def to_list(self) -> list[str]:
        """Return ``KEY=VALUE`` strings for a child process environment."""
        return [f"{key}={value or ''}" for key, value in self._vars.items()]

    def export_lines(self) -> list[str]:
        """Return ``KEY="VALUE"`` (or bare ``KEY``) strings in insertion order."""
        return [
            key if value is None else f'{key}="{value}"'
            for key, value in self._vars.items()
        ]