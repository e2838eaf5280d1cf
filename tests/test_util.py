import io

from claudex.util import prompt_input


def test_prompt_input_strips_and_prints_label(monkeypatch, capsys):
    monkeypatch.setattr("sys.stdin", io.StringIO("  hello  \n"))
    assert prompt_input("Name") == "hello"
    assert capsys.readouterr().out == "Name: "


def test_prompt_input_reads_one_line_per_call(monkeypatch):
    monkeypatch.setattr("sys.stdin", io.StringIO("first\nsecond\n"))
    assert prompt_input("A") == "first"
    assert prompt_input("B") == "second"


def test_prompt_input_at_eof_returns_empty(monkeypatch):
    monkeypatch.setattr("sys.stdin", io.StringIO(""))
    assert prompt_input("Anything") == ""