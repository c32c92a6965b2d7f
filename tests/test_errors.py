import io

import pytest

from mewshell.errors import (
    AmbiguousRedirect,
    CommandNotFound,
    ShellError,
    ShellExit,
    ShellSyntaxError,
    export_error_message,
    report,
)


def test_command_not_found_message_and_status():
    err = CommandNotFound("ls")
    assert str(err) == "🐈: ls: command not found"
    assert err.exit_code == 127
    assert err.command == "ls"


def test_ambiguous_redirect_is_shell_error():
    err = AmbiguousRedirect()
    assert isinstance(err, ShellError)
    assert err.message == "ambiguous redirect"
    assert str(err) == "ambiguous redirect"
    assert err.exit_code == 1
    with pytest.raises(ShellError, match="ambiguous redirect"):
        raise err


def test_syntax_error_keeps_previous_status():
    err = ShellSyntaxError("syntax error: pipe")
    assert err.exit_code is None
    assert str(err) == "syntax error: pipe"


def test_syntax_error_default_message():
    assert ShellSyntaxError().message == "syntax error"


def test_exit_code_override():
    err = ShellError("boom", exit_code=126)
    assert err.exit_code == 126
    assert str(err) == "boom"


def test_shell_exit_carries_status_and_message():
    exc = ShellExit(255, "numeric argument required")
    assert exc.status == 255
    assert exc.message == "numeric argument required"


def test_export_error_message():
    assert export_error_message("1x") == "🐈: export: `1x': not a vaild identifier"


def test_report_writes_line():
    stream = io.StringIO()
    report("syntax error", stream)
    assert stream.getvalue() == "syntax error\n"