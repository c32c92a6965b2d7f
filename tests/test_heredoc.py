import os

import pytest

from mewshell.commands import TokenType
from mewshell.env import Environment
from mewshell.heredoc import (
    create_here_docs,
    delete_here_docs,
    expand_line,
    read_here_doc,
)
from mewshell.parser import parse


def make_env(**values):
    env = Environment()
    for key, value in values.items():
        env.set(key, value)
    return env


def reader(lines, prompts=None):
    feed = iter(lines)

    def read_line(prompt):
        if prompts is not None:
            prompts.append(prompt)
        return next(feed, None)

    return read_line


def test_expand_line_replaces_name():
    env = make_env(USER="cat")
    assert expand_line("hi $USER.", env) == "hi cat."


def test_expand_line_lone_dollar_kept():
    assert expand_line("cost $", make_env()) == "cost $"


def test_expand_line_unknown_is_empty():
    assert expand_line("a$NOPE b", make_env()) == "a b"


def test_expand_line_name_runs_through_dollar():
    env = make_env(A="1")
    assert expand_line("$A$B", env) == ""


def test_expand_line_without_dollar_unchanged():
    assert expand_line("plain text", make_env()) == "plain text"


def test_read_here_doc_stops_at_delimiter():
    prompts = []
    text = read_here_doc("EOF", make_env(X="val"), reader(["one", "$X", "EOF", "after"], prompts))
    assert text == "one\nval\n"
    assert prompts == ["> ", "> ", "> "]


def test_read_here_doc_stops_at_end_of_input():
    assert read_here_doc("EOF", make_env(), reader(["a"])) == "a\n"


def test_read_here_doc_delimiter_trailing_space():
    assert read_here_doc("END ", make_env(), reader(["x", "END"])) == "x\n"


def test_create_here_docs_writes_file(tmp_path):
    env = make_env()
    commands = parse("cat << EOF | wc", env)
    prefix = str(tmp_path / "hd")
    paths = create_here_docs(commands, env, reader(["hello", "EOF"]), prefix)
    assert len(paths) == 1
    target = [c for c in commands if c.text == paths[0]]
    assert len(target) == 1
    assert target[0].kind == TokenType.REDIRECT_INPUT
    assert paths[0] == prefix + "2"
    with open(paths[0]) as handle:
        assert handle.read() == "hello\n"
    delete_here_docs(paths)
    assert not os.path.exists(paths[0])


def test_create_here_docs_without_heredoc(tmp_path):
    env = make_env()
    commands = parse("echo hi", env)
    assert create_here_docs(commands, env, reader([]), str(tmp_path / "hd")) == []
    assert commands[0].kind == TokenType.WORD


def test_create_here_docs_interrupt_cleans_up(tmp_path):
    env = make_env()
    commands = parse("cat << A << B", env)
    calls = {"n": 0}

    def read_line(prompt):
        calls["n"] += 1
        if calls["n"] == 1:
            return "A"
        raise KeyboardInterrupt

    prefix = str(tmp_path / "hd")
    with pytest.raises(KeyboardInterrupt):
        create_here_docs(commands, env, read_line, prefix)
    assert list(tmp_path.iterdir()) == []


def test_delete_here_docs_ignores_missing(tmp_path):
    present = tmp_path / "a"
    present.write_text("x")
    delete_here_docs([str(present), str(tmp_path / "missing")])
    assert not present.exists()