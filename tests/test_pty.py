import pytest

from claudex.terminal.osc8 import LinkDetector
from claudex.terminal.pty import (
    ChildExitError,
    OutputProcessor,
    detect_resume_session,
    find_utf8_safe_end,
    spawn_with_pty,
    strip_ansi_escapes,
)


# strip_ansi_escapes

def test_strip_ansi_plain_text():
    assert strip_ansi_escapes("hello world") == "hello world"


def test_strip_ansi_empty():
    assert strip_ansi_escapes("") == ""


def test_strip_ansi_csi_color():
    assert strip_ansi_escapes("\x1b[32mclaude --resume abc\x1b[0m") == "claude --resume abc"


def test_strip_ansi_csi_cursor_movement():
    assert strip_ansi_escapes("\x1b[2K\x1b[1Ahello") == "hello"


def test_strip_ansi_osc_with_bel():
    assert strip_ansi_escapes("\x1b]0;title\x07text here") == "text here"


def test_strip_ansi_osc_with_st():
    text = "\x1b]8;id=link;https://example.com\x1b\\click\x1b]8;;\x1b\\"
    assert strip_ansi_escapes(text) == "click"


def test_strip_ansi_mixed_escapes():
    text = "\x1b[1m\x1b[36mclaude\x1b[0m --resume \x1b[33mabcdef\x1b[0m"
    assert strip_ansi_escapes(text) == "claude --resume abcdef"


def test_strip_ansi_single_char_escape():
    assert strip_ansi_escapes("\x1bMtext") == "text"


def test_strip_ansi_trailing_escape():
    assert strip_ansi_escapes("text\x1b") == "text"


# detect_resume_session

def test_detect_resume_plain():
    assert detect_resume_session("claude --resume abc-123-def") == "abc-123-def"


def test_detect_resume_with_ansi():
    line = "\x1b[32mclaude --resume \x1b[1mabc-123\x1b[0m"
    assert detect_resume_session(line) == "abc-123"


def test_detect_resume_with_leading_whitespace():
    assert detect_resume_session("  claude --resume xyz-789  ") == "xyz-789"


def test_detect_resume_not_matched():
    assert detect_resume_session("some other output line") is None


def test_detect_resume_partial_prefix():
    assert detect_resume_session("claude --resume") is None


def test_detect_resume_uuid_format():
    line = "claude --resume 0130c158-76e0-4f95-b067-a6e171fa2f3a"
    assert detect_resume_session(line) == "0130c158-76e0-4f95-b067-a6e171fa2f3a"


def test_detect_resume_empty_line():
    assert detect_resume_session("") is None


def test_detect_resume_osc8_wrapped():
    line = "\x1b]8;;https://example.com\x1b\\claude --resume abc-456\x1b]8;;\x1b\\"
    assert detect_resume_session(line) == "abc-456"


# find_utf8_safe_end

def test_utf8_safe_end_empty():
    assert find_utf8_safe_end(b"") == 0


def test_utf8_safe_end_ascii_only():
    assert find_utf8_safe_end(b"hello") == 5


def test_utf8_safe_end_complete_multibyte():
    assert find_utf8_safe_end("中".encode("utf-8")) == 3


def test_utf8_safe_end_incomplete_multibyte():
    assert find_utf8_safe_end(bytes([0xE4, 0xB8])) == 0


def test_utf8_safe_end_mixed_ascii_and_incomplete():
    assert find_utf8_safe_end(bytes([ord("h"), ord("i"), 0xE4, 0xB8])) == 2


def test_utf8_safe_end_only_continuation_bytes():
    assert find_utf8_safe_end(bytes([0x80, 0x80, 0x80, 0x80])) == 0


# OutputProcessor

@pytest.fixture
def processor(tmp_path):
    return OutputProcessor(LinkDetector(tmp_path))


def test_feed_returns_complete_lines_only(processor):
    assert processor.feed(b"hello\nwor") == "hello\n"
    assert processor.flush() == "wor"
    assert processor.flush() == ""


def test_feed_joins_split_multibyte_character(processor):
    assert processor.feed(b"a\xe4\xb8") == ""
    assert processor.feed(b"\xad\n") == "a中\n"


def test_feed_links_urls(processor):
    out = processor.feed(b"see https://example.com\n")
    assert out == "see \x1b]8;;https://example.com\x07https://example.com\x1b]8;;\x07\n"


def test_feed_records_latest_resume_session(processor):
    processor.feed(b"claude --resume old-id\nclaude --resume new-id\n")
    assert processor.resume_session_id == "new-id"


def test_flush_does_not_detect_resume(processor):
    processor.feed(b"claude --resume partial")
    assert processor.flush() == "claude --resume partial"
    assert processor.resume_session_id is None


def test_spawn_rejects_empty_command(tmp_path):
    with pytest.raises(ValueError):
        spawn_with_pty([], tmp_path)


def test_child_exit_error_carries_code():
    err = ChildExitError("claude exited with status: 2", code=2)
    assert err.code == 2
    assert str(err) == "claude exited with status: 2"