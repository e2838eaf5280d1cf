import pytest

from claudex.terminal.detect import EnvSnapshot, detect_from_env, terminal_supports_hyperlinks


def test_terminal_supports_hyperlinks_forced(monkeypatch):
    monkeypatch.setenv("FORCE_HYPERLINKS", "1")
    assert terminal_supports_hyperlinks() is True


def test_from_environ_reads_variables():
    env = EnvSnapshot.from_environ({"TERM": "xterm-kitty", "WT_SESSION": "s", "OTHER": "x"})
    assert env == EnvSnapshot(term="xterm-kitty", wt_session="s")


def test_force_hyperlinks_overrides_all():
    assert detect_from_env(EnvSnapshot(force_hyperlinks="1"), False) is True


def test_force_hyperlinks_zero_no_effect():
    assert detect_from_env(EnvSnapshot(force_hyperlinks="0"), False) is False


def test_not_tty_returns_false():
    assert detect_from_env(EnvSnapshot(), False) is False


def test_domterm_returns_true():
    assert detect_from_env(EnvSnapshot(domterm="1"), True) is True


@pytest.mark.parametrize(
    "program", ["iTerm.app", "WezTerm", "vscode", "WarpTerminal", "Tabby", "Hyper", "mintty"]
)
def test_known_term_programs_detected(program):
    assert detect_from_env(EnvSnapshot(term_program=program), True) is True


def test_unknown_term_program_not_detected():
    assert detect_from_env(EnvSnapshot(term_program="SomeObscureTerminal"), True) is False


def test_kitty_term_detected():
    assert detect_from_env(EnvSnapshot(term="xterm-kitty"), True) is True


def test_ghostty_term_detected():
    assert detect_from_env(EnvSnapshot(term="xterm-ghostty"), True) is True


def test_plain_xterm_not_detected():
    assert detect_from_env(EnvSnapshot(term="xterm-256color"), True) is False


def test_vte_version_5000_detected():
    assert detect_from_env(EnvSnapshot(vte_version="5000"), True) is True


def test_vte_version_above_5000_detected():
    assert detect_from_env(EnvSnapshot(vte_version="7200"), True) is True


def test_vte_version_below_5000_not_detected():
    assert detect_from_env(EnvSnapshot(vte_version="4999"), True) is False


def test_vte_version_non_numeric_not_detected():
    assert detect_from_env(EnvSnapshot(vte_version="abc"), True) is False


def test_windows_terminal_detected():
    assert detect_from_env(EnvSnapshot(wt_session="some-session-id"), True) is True


def test_unknown_tty_returns_false():
    assert detect_from_env(EnvSnapshot(), True) is False


def test_priority_force_over_not_tty():
    assert detect_from_env(EnvSnapshot(force_hyperlinks="1"), False) is True