"""The interactive shell: prompt, line handling and the command entry point."""

from __future__ import annotations

import os
import signal
import sys
from collections.abc import Callable, Iterator, Mapping, Sequence
from contextlib import contextmanager
from typing import TextIO

try:
    import termios
except ImportError:  # not available on every platform
    termios = None  # type: ignore[assignment]

from .env import Environment
from .errors import AmbiguousRedirect, ShellError, ShellExit, ShellSyntaxError, report
from .executor import execute
from .heredoc import DEFAULT_PREFIX, create_here_docs, delete_here_docs
from .parser import parse
from .signals import SignalMode, set_signal

PROMPT = "🐈 $ "

_BANNER = (
    "\nMewww  |\\      _,,,—,,_        \n"
    "       /,`.-'`'   ._  \\-;;,_    \n"
    "      |,4-  ) )_   .;.(  `'-'   \n"
    "     '—''(_/._)-'(_\\_)     Mewww…   \n"
    "  ___     _       _   _    _ _   "
    "                  ___ _        _ _ \n"
    " / __| __| |_  _ (_)_(_)__| (_)_ _"
    "  __ _ ___ _ _  / __| |_  ___| | |\n"
    " \\__ \\/ _| ' \\| '_/ _ \\/ _` | | "
    "' \\/ _` / -_) '_| \\__ \\ ' \\/ -_) | |\n"
    " |___/\\__|_||_|_| \\___/\\__,_|_"
    "|_||_\\__, \\___|_|   |___/_||_\\___|_|_|\n"
    "                                   "
    "|___/                            \n"
    "                                       "
    "       Mewww…                      \n\n"
)

ReadLine = Callable[[str], "str | None"]


def _read_line(prompt: str) -> str:
    return input(prompt)


@contextmanager
def _signal_modes(sig_int: int, sig_quit: int) -> Iterator[None]:
    try:
        previous = set_signal(sig_int, sig_quit)
    except ValueError:
        previous = {}
    try:
        yield
    finally:
        for signum, handler in previous.items():
            if handler is not None:
                signal.signal(signum, handler)


@contextmanager
def _quiet_control_echo() -> Iterator[None]:
    """Stop the terminal from echoing control characters such as ``^C``."""
    saved = None
    fd = -1
    if termios is not None:
        try:
            fd = sys.stdin.fileno()
            saved = termios.tcgetattr(fd)
            changed = list(saved)
            changed[3] &= ~getattr(termios, "ECHOCTL", 0)
            termios.tcsetattr(fd, termios.TCSANOW, changed)
        except (termios.error, OSError, ValueError, AttributeError):
            saved = None
    try:
        yield
    finally:
        if saved is not None:
            termios.tcsetattr(fd, termios.TCSANOW, saved)


class Shell:
    """A shell session: its variables, last exit status and output streams."""

    def __init__(
        self,
        environ: Mapping[str, str] | None = None,
        stdout: TextIO | None = None,
        stderr: TextIO | None = None,
    ):
        source = os.environ if environ is None else environ
        self.env = Environment.from_strings(f"{key}={value}" for key, value in source.items())
        self.stdout = stdout if stdout is not None else sys.stdout
        self.stderr = stderr if stderr is not None else sys.stderr
        self.exit_code = 0
        self.read_line: ReadLine = _read_line
        self.heredoc_prefix = DEFAULT_PREFIX

    def run_line(self, line: str) -> int:
        """Parse and run one line; return the new exit status.

        A syntax error keeps the previous status. ``exit`` raises
        :class:`ShellExit`.
        """
        if not line:
            return self.exit_code
        try:
            commands = parse(line, self.env, self.exit_code)
        except ShellSyntaxError as exc:
            report(exc.message, self.stderr)
            return self.exit_code
        except AmbiguousRedirect as exc:
            report(exc.message, self.stderr)
            self.exit_code = exc.exit_code or 1
            return self.exit_code
        if not commands:
            return self.exit_code

        try:
            with _signal_modes(SignalMode.HEREDOC, SignalMode.IGNORE):
                paths = create_here_docs(
                    commands, self.env, self.read_line, self.heredoc_prefix
                )
        except KeyboardInterrupt:
            self.exit_code = 1
            return self.exit_code
        except ShellError as exc:
            report(exc.message, self.stderr)
            self.exit_code = exc.exit_code or 1
            return self.exit_code

        try:
            self.exit_code = execute(
                commands, self.env, None, self.stdout, self.stderr
            )
        finally:
            delete_here_docs(paths)
        return self.exit_code

    def loop(self, read_line: ReadLine | None = None) -> int:
        """Read and run lines until end of input or ``exit``.

        Returns the status given to ``exit``, or 0 at end of input.
        An interrupt at the prompt sets the status to 1.
        """
        if read_line is not None:
            self.read_line = read_line
        while True:
            try:
                line = self.read_line(PROMPT)
            except EOFError:
                break
            except KeyboardInterrupt:
                self.exit_code = 1
                continue
            if line is None:
                break
            try:
                self.run_line(line)
            except ShellExit as exc:
                if exc.message:
                    self.stdout.write(exc.message + "\n")
                    self.stdout.flush()
                return exc.status
            except KeyboardInterrupt:
                self.exit_code = 1
        return 0


def print_banner(stream: TextIO | None = None) -> None:
    """Write the greeting shown when the shell starts."""
    target = stream if stream is not None else sys.stdout
    target.write(_BANNER)
    target.flush()


def main(argv: Sequence[str] | None = None) -> int:
    """Start an interactive session; extra arguments are an error."""
    args = sys.argv[1:] if argv is None else list(argv)
    if args:
        report("arguments error", sys.stderr)
        return 1
    try:
        import readline  # noqa: F401  (line editing and history for input())
    except ImportError:
        pass
    print_banner(sys.stdout)
    shell = Shell()
    with _quiet_control_echo(), _signal_modes(SignalMode.SHELL, SignalMode.IGNORE):
        return shell.loop()


if __name__ == "__main__":
    sys.exit(main())