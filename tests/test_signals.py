import signal

import pytest

from mewshell.signals import SignalMode, set_signal


@pytest.fixture(autouse=True)
def restore_handlers():
    saved_int = signal.getsignal(signal.SIGINT)
    saved_quit = signal.getsignal(signal.SIGQUIT)
    yield
    signal.signal(signal.SIGINT, saved_int)
    signal.signal(signal.SIGQUIT, saved_quit)


def test_ignore_both():
    set_signal(SignalMode.IGNORE, SignalMode.IGNORE)
    previous = set_signal(SignalMode.DEFAULT, SignalMode.DEFAULT)
    assert previous[signal.SIGINT] == signal.SIG_IGN
    assert previous[signal.SIGQUIT] == signal.SIG_IGN


def test_default_both():
    set_signal(SignalMode.DEFAULT, SignalMode.DEFAULT)
    previous = set_signal(SignalMode.IGNORE, SignalMode.IGNORE)
    assert previous[signal.SIGINT] == signal.SIG_DFL
    assert previous[signal.SIGQUIT] == signal.SIG_DFL


def test_accepts_plain_integers():
    set_signal(102, 101)
    previous = set_signal(SignalMode.IGNORE, SignalMode.IGNORE)
    assert previous[signal.SIGINT] == signal.SIG_IGN
    assert previous[signal.SIGQUIT] == signal.SIG_DFL


def test_returns_previous_handlers():
    set_signal(SignalMode.IGNORE, SignalMode.IGNORE)
    previous = set_signal(SignalMode.DEFAULT, SignalMode.DEFAULT)
    assert previous[signal.SIGINT] == signal.SIG_IGN
    assert previous[signal.SIGQUIT] == signal.SIG_IGN


def test_shell_interrupt_handler_raises(capsys):
    set_signal(SignalMode.SHELL, SignalMode.IGNORE)
    handler = signal.getsignal(signal.SIGINT)
    with pytest.raises(KeyboardInterrupt):
        handler(signal.SIGINT, None)
    assert capsys.readouterr().out == "\n"


def test_heredoc_leaves_quit_untouched():
    set_signal(SignalMode.IGNORE, SignalMode.IGNORE)
    previous = set_signal(SignalMode.HEREDOC, SignalMode.HEREDOC)
    assert signal.SIGQUIT not in previous
    assert signal.getsignal(signal.SIGQUIT) == signal.SIG_IGN
    handler = signal.getsignal(signal.SIGINT)
    with pytest.raises(KeyboardInterrupt):
        handler(signal.SIGINT, None)


def test_shell_quit_handler_does_nothing():
    set_signal(SignalMode.SHELL, SignalMode.SHELL)
    previous = set_signal(SignalMode.IGNORE, SignalMode.IGNORE)
    handler = previous[signal.SIGQUIT]
    assert handler not in (signal.SIG_IGN, signal.SIG_DFL)
    assert handler(signal.SIGQUIT, None) is None


def test_unknown_mode_rejected():
    with pytest.raises(ValueError):
        set_signal(7, SignalMode.IGNORE)