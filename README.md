# mewshell

A small interactive shell for POSIX systems. It reads command lines,
expands variables, splits words on whitespace while honouring quotes, and
runs pipelines of external programs and builtins. It needs nothing beyond
the Python standard library.

## Features

- Pipelines: `ls -l | grep py | wc -l`
- Redirections: `< file`, `> file`, `>> file`. When a segment has several
  redirections of the same direction, the last one wins.
- Here-documents: `cat << EOF`. Lines are read up to the delimiter or end
  of input, and `$NAME` is expanded in them. The text goes to temporary
  files named `/tmp/.here_doc<N>`, which are removed after the line has run.
- Variable expansion: `$NAME` and `$?` (the last exit status). Nothing is
  expanded inside single quotes; an unknown name expands to nothing.
- Quotes: single and double quotes group words and are removed after
  expansion.
- Builtins: `echo` (with one or more `-n`), `cd`, `pwd`, `export`,
  `unset`, `env`, `exit [status]`.
  - `export` with no arguments lists the variables as `declare -x` lines
    sorted by name. New names must be a letter followed by letters or
    digits.
  - `exit` with an argument that is not a number fitting in a signed
    64-bit integer prints `numeric argument required` and leaves with
    status 255; otherwise the status is the number modulo 256.
  - A builtin in the last segment of a pipeline runs in the shell itself
    and can change its variables and directory; in an earlier segment it
    runs on a copy.
- Errors: doubled pipes, a trailing pipe, an unclosed quote and a
  redirection without a target are syntax errors and keep the previous
  exit status. A redirection target that expands to nothing is an
  "ambiguous redirect" (status 1). An unknown command gives status 127; a
  child killed by a signal gives 128 plus the signal number.

## Installation

```
pip install .
```

## Usage

Start the interactive shell:

```
mewshell
```

The same session can be started with `python -m mewshell.shell`. Giving
any arguments is an error. The shell prints a banner and then the prompt
`🐈 $ `. Press Ctrl-D at the prompt to leave (status 0), or run
`exit [status]`. Ctrl-C at the prompt starts a new line and sets the status
to 1.

The shell can also be driven from Python:

```python
import io
from mewshell.shell import Shell

out = io.StringIO()
shell = Shell({"PATH": "/usr/bin:/bin", "GREETING": "hello"}, out, io.StringIO())
shell.run_line("echo $GREETING world")
print(out.getvalue())   # hello world
```

`Shell.run_line` returns the new exit status; `exit` raises
`mewshell.errors.ShellExit`. `Shell.loop(read_line)` reads lines with the
given function (called with the prompt) until it returns None, raises
`EOFError`, or `exit` is run, and returns the final status.

The parsing layer can be used on its own:

```python
from mewshell.env import Environment
from mewshell.parser import parse

env = Environment.from_strings(["NAME=mew"])
commands = parse("echo 'hi' $NAME > out.txt", env, 0)
# [Command(kind=<TokenType.WORD: 0>, text='echo', args=['echo', 'hi', 'mew']),
#  Command(kind=<TokenType.REDIRECT_OUTPUT: 2>, text='out.txt', args=['out.txt'])]
```

A parsed list can be run with `mewshell.executor.execute(commands, env)`.

## What it does not do

The shell handles only the constructs listed above. There are no command
separators (`;`, `&&`, `||`), no background jobs or job control, no
globbing, no backslash escapes, no subshells or command substitution, no
`2>` style redirection of other descriptors, and no startup files or
scripts: it reads commands interactively or through `Shell.loop` and
`Shell.run_line`.

## Running the tests

```
pip install .[test]
pytest
```