"""Run a parsed command line: redirections, pipes, builtins and programs."""

from __future__ import annotations

import io
import os
import signal
import subprocess
import sys
import threading
from collections.abc import Iterable, Iterator, Sequence
from contextlib import contextmanager
from dataclasses import dataclass
from typing import IO, BinaryIO, TextIO, Union

from .builtins import is_builtin, run_builtin
from .commands import Command, TokenType, split_pipeline
from .env import Environment
from .errors import CommandNotFound, ShellError, ShellExit, report
from .signals import SignalMode, set_signal

NOT_EXECUTABLE_STATUS = 126
INTERRUPT_MESSAGE = "^C"
QUIT_MESSAGE = "^\\Quit: 3"

# Where a stage reads from: the shell's own input (None), a descriptor,
# bytes produced by an earlier builtin, or the read end of a pipe.
_Source = Union[None, int, bytes, IO[bytes]]

_OUTPUT_FLAGS = {
    TokenType.REDIRECT_OUTPUT: os.O_WRONLY | os.O_CREAT | os.O_TRUNC,
    TokenType.REDIRECT_APPEND: os.O_WRONLY | os.O_CREAT | os.O_APPEND,
}


@dataclass
class Redirections:
    """Files opened for one pipeline segment."""

    stdin: BinaryIO | None = None
    stdout: BinaryIO | None = None

    def close(self) -> None:
        """Close the files that are still open."""
        for handle in (self.stdin, self.stdout):
            if handle is not None:
                handle.close()
        self.stdin = None
        self.stdout = None

    def __enter__(self) -> Redirections:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def search_path(env: Environment) -> list[str]:
    """Return the directories named in ``PATH``, empty entries dropped."""
    value = env.get("PATH")
    if not value:
        return []
    return [directory for directory in value.split(":") if directory]


def resolve_command(dirs: Iterable[str], name: str) -> str:
    """Return the file to run for ``name``.

    A name that exists as given is used as it is; otherwise each directory
    is tried in order. Raises :class:`CommandNotFound` if nothing exists.
    """
    if name and os.path.exists(name):
        return name
    if not name:
        raise CommandNotFound(name)
    for directory in dirs:
        candidate = f"{directory}/{name}"
        if os.path.exists(candidate):
            return candidate
    raise CommandNotFound(name)


def command_args(segment: Iterable[Command]) -> list[str] | None:
    """Return the arguments of the first word in ``segment``, or None."""
    for command in segment:
        if command.kind == TokenType.WORD:
            return list(command.args)
    return None


def open_redirections(segment: Iterable[Command]) -> Redirections:
    """Open the files named by the redirections of ``segment``, in order.

    A later redirection of the same direction replaces an earlier one.
    Raises :class:`ShellError` (status 1) when a file cannot be opened.
    """
    redirections = Redirections()
    try:
        for command in segment:
            name = command.text or ""
            if command.kind == TokenType.REDIRECT_INPUT:
                handle = open(name, "rb")
                if redirections.stdin is not None:
                    redirections.stdin.close()
                redirections.stdin = handle
            elif command.kind in _OUTPUT_FLAGS:
                fd = os.open(name, _OUTPUT_FLAGS[command.kind], 0o666)
                if redirections.stdout is not None:
                    redirections.stdout.close()
                redirections.stdout = os.fdopen(fd, "wb")
    except OSError as exc:
        redirections.close()
        filename = exc.filename if exc.filename is not None else ""
        raise ShellError(f"{filename}: {exc.strerror}", exit_code=1) from exc
    return redirections


def status_from_returncode(returncode: int) -> int:
    """Return the shell status for a child's return code (128 + signal if killed)."""
    if returncode < 0:
        return 128 - returncode
    return returncode


def _fileno(stream: object) -> int | None:
    try:
        return stream.fileno()  # type: ignore[attr-defined]
    except (AttributeError, OSError, ValueError, io.UnsupportedOperation):
        return None


def _flush(stream: TextIO) -> None:
    try:
        stream.flush()
    except (OSError, ValueError):
        pass


def _release(source: _Source) -> None:
    if source is not None and not isinstance(source, (int, bytes)):
        source.close()


def _child_environment(env: Environment) -> dict[str, str]:
    return dict(entry.partition("=")[::2] for entry in env.to_list())


def _feed(pipe: IO[bytes], data: bytes) -> None:
    try:
        pipe.write(data)
    except BrokenPipeError:
        pass
    finally:
        try:
            pipe.close()
        except BrokenPipeError:
            pass


def _pump(pipe: IO[bytes], stream: TextIO) -> None:
    with pipe:
        data = pipe.read()
    stream.write(data.decode(errors="replace"))


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


class _Pipeline:
    """State of one run: the processes started and the threads moving data."""

    def __init__(self, env: Environment, out: TextIO, err: TextIO):
        self.env = env
        self.out = out
        self.err = err
        self.out_fd = _fileno(out)
        self.err_fd = _fileno(err)
        self.child_env = _child_environment(env)
        self.dirs = search_path(env)
        self.processes: list[subprocess.Popen] = []
        self.threads: list[threading.Thread] = []

    def run(self, segments: Sequence[list[Command]], source: _Source) -> int:
        result: int | subprocess.Popen = 0
        try:
            for index, segment in enumerate(segments):
                last = index == len(segments) - 1
                next_source, result = self._stage(segment, source, last)
                _release(source)
                source = next_source
        finally:
            _release(source)
            self._wait()
        if isinstance(result, subprocess.Popen):
            return status_from_returncode(result.returncode)
        return result

    def _stage(
        self, segment: list[Command], source: _Source, last: bool
    ) -> tuple[_Source, int | subprocess.Popen]:
        try:
            redirections = open_redirections(segment)
        except ShellError as exc:
            report(exc.message, self.err)
            return b"", exc.exit_code or 1
        with redirections:
            if redirections.stdin is not None:
                _release(source)
                source = redirections.stdin
            args = command_args(segment)
            if args is None:
                return b"", 0
            if is_builtin(args):
                return self._builtin(args, redirections.stdout, last)
            return self._external(args, source, redirections.stdout, last)

    def _builtin(
        self, args: list[str], redirect: BinaryIO | None, last: bool
    ) -> tuple[_Source, int]:
        buffer = io.StringIO()
        if last:
            target = buffer if redirect is not None else self.out
            status = run_builtin(args, self.env, target, self.err)
            if redirect is not None:
                redirect.write(buffer.getvalue().encode())
            _flush(self.out)
            return b"", status
        status = self._isolated(args, buffer)
        data = buffer.getvalue().encode()
        if redirect is not None:
            redirect.write(data)
            data = b""
        return data, status

    def _isolated(self, args: list[str], buffer: io.StringIO) -> int:
        """Run a builtin as if in a child: no lasting change to variables or directory."""
        scratch = Environment()
        for key in self.env:
            scratch.set(key, self.env.get(key))
        cwd = os.getcwd()
        try:
            return run_builtin(args, scratch, buffer, self.err)
        except ShellExit as exc:
            if exc.message:
                buffer.write(exc.message + "\n")
            return exc.status
        finally:
            os.chdir(cwd)

    def _external(
        self,
        args: list[str],
        source: _Source,
        redirect: BinaryIO | None,
        last: bool,
    ) -> tuple[_Source, int | subprocess.Popen]:
        try:
            path = resolve_command(self.dirs, args[0])
        except CommandNotFound as exc:
            report(exc.message, self.err)
            return b"", exc.exit_code or 127
        if "/" not in path:
            path = "./" + path

        feed: bytes | None = None
        stdin_arg: object = source
        if isinstance(source, bytes):
            stdin_arg, feed = subprocess.PIPE, source

        capture_out = False
        if redirect is not None:
            stdout_arg: object = redirect
        elif not last:
            stdout_arg = subprocess.PIPE
        elif self.out_fd is not None:
            stdout_arg = self.out_fd
        else:
            stdout_arg = subprocess.PIPE
            capture_out = True
        stderr_arg: object = self.err_fd if self.err_fd is not None else subprocess.PIPE

        _flush(self.out)
        _flush(self.err)
        try:
            process = subprocess.Popen(
                args,
                executable=path,
                stdin=stdin_arg,
                stdout=stdout_arg,
                stderr=stderr_arg,
                env=self.child_env,
            )
        except OSError:
            return b"", NOT_EXECUTABLE_STATUS
        self.processes.append(process)

        if feed is not None:
            self._start(_feed, process.stdin, feed)
        if capture_out:
            self._start(_pump, process.stdout, self.out)
        if self.err_fd is None:
            self._start(_pump, process.stderr, self.err)

        if redirect is None and not last:
            return process.stdout, process
        return b"", process

    def _start(self, target: object, *args: object) -> None:
        thread = threading.Thread(target=target, args=args, daemon=True)
        thread.start()
        self.threads.append(thread)

    def _wait(self) -> None:
        with _signal_modes(SignalMode.IGNORE, SignalMode.IGNORE):
            for process in self.processes:
                process.wait()
            for thread in self.threads:
                thread.join()
        sigquit = getattr(signal, "SIGQUIT", None)
        for process in self.processes:
            signum = -process.returncode
            if signum == signal.SIGINT:
                report(INTERRUPT_MESSAGE, self.err)
                break
            if sigquit is not None and signum == sigquit:
                report(QUIT_MESSAGE, self.err)
                break


def _initial_source(stdin: TextIO | None) -> _Source:
    if stdin is None:
        return None
    fd = _fileno(stdin)
    if fd is not None:
        return fd
    data = stdin.read()
    return data.encode() if isinstance(data, str) else data


def execute(
    commands: Iterable[Command],
    env: Environment,
    stdin: TextIO | None = None,
    stdout: TextIO | None = None,
    stderr: TextIO | None = None,
) -> int:
    """Run the pipeline described by ``commands`` and return its status.

    Builtins in the last segment run in the shell itself and may change
    ``env``; ``exit`` there raises :class:`ShellExit`. Builtins in earlier
    segments run on a copy. Streams without a file descriptor are served
    through pipes.
    """
    out = stdout if stdout is not None else sys.stdout
    err = stderr if stderr is not None else sys.stderr
    segments = split_pipeline(list(commands))
    pipeline = _Pipeline(env, out, err)
    return pipeline.run(segments, _initial_source(stdin))