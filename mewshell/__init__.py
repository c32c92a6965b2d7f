"""A small interactive Unix-style shell with pipes, redirections and builtins."""

__version__ = "0.1.0"
__all__ = [
    "builtins",
    "commands",
    "env",
    "errors",
    "executor",
    "heredoc",
    "parser",
    "shell",
    "signals",
    "strings",
]