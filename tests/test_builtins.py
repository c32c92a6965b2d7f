import io
import os

import pytest

from mewshell.builtins import (
    cd,
    echo,
    echo_flag_count,
    exit_status,
    export,
    is_builtin,
    print_env,
    print_export,
    pwd,
    run_builtin,
    unset,
)
from mewshell.env import Environment
from mewshell.errors import ShellExit, export_error_message


def make_env(**values):
    env = Environment()
    for key, value in values.items():
        env.set(key, value)
    return env


def test_echo_joins_with_spaces():
    out = io.StringIO()
    assert echo(["a", "b"], False, out) == 0
    assert out.getvalue() == "a b\n"


def test_echo_no_newline():
    out = io.StringIO()
    echo(["x"], True, out)
    assert out.getvalue() == "x"


def test_echo_double_quoted_argument_prints_inside():
    out = io.StringIO()
    echo(['"hi there"'], False, out)
    assert out.getvalue() == "hi there\n"


def test_pwd_prints_cwd():
    out = io.StringIO()
    assert pwd(out) == 0
    assert out.getvalue() == os.getcwd() + "\n"


def test_cd_sets_pwd_and_oldpwd(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    start = os.getcwd()
    target = tmp_path / "sub"
    target.mkdir()
    env = make_env()
    assert cd(env, str(target)) == 0
    assert env.get("OLDPWD") == start
    assert env.get("PWD") == os.getcwd()
    assert os.path.samefile(os.getcwd(), target)


def test_cd_missing_directory_stays(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    start = os.getcwd()
    env = make_env()
    cd(env, str(tmp_path / "missing"))
    assert os.getcwd() == start
    assert env.get("PWD") == start


@pytest.mark.parametrize(
    "arg, status",
    [
        (None, 0),
        ("42", 42),
        ("  +7", 7),
        ("-1", 255),
        ("9223372036854775807", 255),
    ],
)
def test_exit_status_values(arg, status):
    assert exit_status(arg) == status


def test_exit_status_wraps_modulo_256():
    assert exit_status("256") == exit_status("0")


@pytest.mark.parametrize(
    "arg",
    ["abc", "-0", "12a", "9223372036854775808", "-9223372036854775809", "00000000000000000001"],
)
def test_exit_status_numeric_error(arg):
    with pytest.raises(ShellExit) as info:
        exit_status(arg)
    assert info.value.status == 255
    assert info.value.message == "numeric argument required"


def test_export_sets_new_variable():
    env = make_env()
    assert export(env, ["A=1"]) == 0
    assert env.get("A") == "1"


def test_export_without_value():
    env = make_env()
    export(env, ["B"])
    assert "B" in env
    assert env.get("B") is None


def test_export_takes_second_part_only():
    env = make_env()
    export(env, ["A=b=c"])
    assert env.get("A") == "b"


def test_export_updates_existing_in_place():
    env = make_env(X="1", Y="2")
    export(env, ["X=9"])
    assert list(env) == ["X", "Y"]
    assert env.get("X") == "9"


def test_export_invalid_identifier_reports():
    env = make_env()
    err = io.StringIO()
    assert export(env, ["1A=2"], err) == 0
    assert "1A" not in env
    assert err.getvalue() == export_error_message("1A") + "\n"


def test_unset_removes():
    env = make_env(A="1", B="2")
    unset(env, "A")
    assert list(env) == ["B"]


def test_print_env_skips_unset_values():
    env = make_env(A="1", B=None)
    out = io.StringIO()
    print_env(env, out)
    assert out.getvalue() == "A=1\n"


def test_print_export_sorted():
    env = make_env(B="2", A="1", C=None)
    out = io.StringIO()
    print_export(env, out)
    assert out.getvalue().splitlines() == [
        'declare -x A="1"',
        'declare -x B="2"',
        "declare -x C",
    ]


def test_echo_flag_count():
    assert echo_flag_count(["echo", "-n", "-n", "x"]) == 3
    assert echo_flag_count(["echo", "-n"]) == 2


def test_is_builtin():
    assert is_builtin(["export"])
    assert not is_builtin(["ls"])
    assert not is_builtin([])


def test_run_builtin_echo_flags():
    out = io.StringIO()
    run_builtin(["echo", "-n", "-n", "hi"], make_env(), out)
    assert out.getvalue() == "hi"


def test_run_builtin_export_without_args_prints():
    out = io.StringIO()
    run_builtin(["export"], make_env(K="v"), out)
    assert out.getvalue() == 'declare -x K="v"\n'


def test_run_builtin_exit_raises():
    with pytest.raises(ShellExit) as info:
        run_builtin(["exit", "3"], make_env())
    assert info.value.status == 3


def test_run_builtin_env():
    out = io.StringIO()
    run_builtin(["env"], make_env(K="v"), out)
    assert out.getvalue() == "K=v\n"


def test_run_builtin_rejects_other_commands():
    with pytest.raises(ValueError):
        run_builtin(["ls"], make_env())