"""Running a child process in a pseudo-terminal and linking its output."""

from __future__ import annotations

import errno
import os
import select
import signal
import sys
from pathlib import Path
from typing import Sequence

from claudex.terminal.osc8 import LinkDetector

_RESUME_PREFIX = "claude --resume "
_READ_SIZE = 4096
_POLL_TIMEOUT_MS = 50


class ChildExitError(RuntimeError):
    """The child process exited with a failure status or was killed."""

    def __init__(self, message: str, code: int | None = None, signal_number: int | None = None):
        super().__init__(message)
        self.code = code
        self.signal_number = signal_number


def strip_ansi_escapes(text: str) -> str:
    """Remove CSI, OSC and single-character escape sequences from ``text``."""
    out: list[str] = []
    chars = iter(text)
    pending: str | None = None

    def next_char() -> str | None:
        nonlocal pending
        if pending is not None:
            ch, pending = pending, None
            return ch
        return next(chars, None)

    def peek() -> str | None:
        nonlocal pending
        if pending is None:
            pending = next(chars, None)
        return pending

    while (ch := next_char()) is not None:
        if ch != "\x1b":
            out.append(ch)
            continue
        following = peek()
        if following == "[":
            next_char()
            # CSI ends at the first byte in 0x40..0x7E
            while (inner := next_char()) is not None:
                if "\x40" <= inner <= "\x7e":
                    break
        elif following == "]":
            next_char()
            # OSC ends at BEL or ESC \
            while (inner := peek()) is not None:
                next_char()
                if inner == "\x07":
                    break
                if inner == "\x1b":
                    if peek() == "\\":
                        next_char()
                    break
        else:
            next_char()
    return "".join(out)


def detect_resume_session(line: str) -> str | None:
    """Return the session ID from a ``claude --resume <id>`` line, if it is one."""
    trimmed = strip_ansi_escapes(line).strip()
    if not trimmed.startswith(_RESUME_PREFIX):
        return None
    session_id = trimmed[len(_RESUME_PREFIX):].strip()
    return session_id or None


def find_utf8_safe_end(data: bytes) -> int:
    """Length of the prefix of ``data`` that ends on a whole UTF-8 character.

    Trailing bytes of an incomplete character are left out so that they can be
    joined with the next read.
    """
    length = len(data)
    for back in range(min(4, length)):
        pos = length - 1 - back
        byte = data[pos]
        if byte < 0x80:
            return length
        if byte >= 0xC0:
            if byte < 0xE0:
                expected = 2
            elif byte < 0xF0:
                expected = 3
            else:
                expected = 4
            return length if length - pos >= expected else pos
    return 0


class OutputProcessor:
    """Turns raw child output into linked text, one complete line at a time."""

    def __init__(self, detector: LinkDetector) -> None:
        self.detector = detector
        self.resume_session_id: str | None = None
        self._line_buf = ""
        self._residual = b""

    def feed(self, data: bytes) -> str:
        """Take a chunk of output and return the text ready to be shown."""
        combined = self._residual + data
        self._residual = b""
        valid_end = find_utf8_safe_end(combined)
        try:
            self._line_buf += combined[:valid_end].decode("utf-8")
        except UnicodeDecodeError:
            pass
        self._residual = combined[valid_end:]

        pieces: list[str] = []
        while "\n" in self._line_buf:
            line, self._line_buf = self._line_buf.split("\n", 1)
            self._note_resume(line)
            pieces.append(self.detector.enhance_line(line) + "\n")
        return "".join(pieces)

    def flush(self) -> str:
        """Return the buffered partial line, linked, and clear it."""
        if not self._line_buf:
            return ""
        enhanced = self.detector.enhance_line(self._line_buf)
        self._line_buf = ""
        return enhanced

    def _finish(self) -> str:
        self._note_resume(self._line_buf)
        return self.flush()

    def _note_resume(self, line: str) -> None:
        found = detect_resume_session(line)
        if found is not None:
            self.resume_session_id = found


def _sync_winsize(stdin_fd: int, master_fd: int) -> None:
    import fcntl
    import termios

    try:
        size = fcntl.ioctl(stdin_fd, termios.TIOCGWINSZ, b"\0" * 8)
        fcntl.ioctl(master_fd, termios.TIOCSWINSZ, size)
    except OSError:
        pass


def _write_out(text: str) -> None:
    if text:
        sys.stdout.buffer.write(text.encode("utf-8"))
        sys.stdout.buffer.flush()


def _run_proxy_loop(master_fd: int, stdin_fd: int, processor: OutputProcessor) -> None:
    poller = select.poll()
    poller.register(stdin_fd, select.POLLIN)
    poller.register(master_fd, select.POLLIN)

    while True:
        events = dict(poller.poll(_POLL_TIMEOUT_MS))
        if not events:
            # Show partial lines promptly rather than waiting for a newline.
            _write_out(processor.flush())
            continue

        stdin_events = events.get(stdin_fd, 0)
        if stdin_events & select.POLLIN:
            data = os.read(stdin_fd, _READ_SIZE)
            if not data:
                return
            os.write(master_fd, data)

        master_events = events.get(master_fd, 0)
        if master_events & select.POLLIN:
            try:
                data = os.read(master_fd, _READ_SIZE)
            except OSError as exc:
                if exc.errno == errno.EIO:
                    return
                raise
            if not data:
                return
            _write_out(processor.feed(data))
        if master_events & select.POLLHUP:
            _write_out(processor._finish())
            return


def _exec_child(cmd: Sequence[str], master_fd: int, slave_fd: int) -> None:
    import fcntl
    import termios

    try:
        os.close(master_fd)
        try:
            os.setsid()
        except OSError:
            pass
        try:
            fcntl.ioctl(slave_fd, termios.TIOCSCTTY, 0)
        except OSError:
            pass
        for fd in (0, 1, 2):
            os.dup2(slave_fd, fd)
        if slave_fd > 2:
            os.close(slave_fd)
        os.execvp(cmd[0], list(cmd))
    except BaseException as exc:  # the child must never return into the caller
        os.write(2, f"failed to execute command: {exc}\n".encode("utf-8", "replace"))
    finally:
        os._exit(127)


def spawn_with_pty(cmd: Sequence[str], cwd: str | Path) -> str | None:
    """Run ``cmd`` in a pseudo-terminal, proxying input and linking its output.

    Returns the session ID if the child printed a ``claude --resume`` line.
    Raises ChildExitError when the child exits non-zero or is killed.
    """
    import termios
    import tty

    if not cmd:
        raise ValueError("command must not be empty")

    master_fd, slave_fd = os.openpty()
    stdin_fd = sys.stdin.fileno()

    try:
        original_mode = termios.tcgetattr(stdin_fd)
    except termios.error:
        original_mode = None

    if original_mode is not None:
        try:
            tty.setraw(stdin_fd, termios.TCSANOW)
        except termios.error as exc:
            os.close(master_fd)
            os.close(slave_fd)
            raise OSError(f"failed to set raw mode: {exc}") from exc

    _sync_winsize(stdin_fd, master_fd)
    sys.stdout.flush()

    pid = os.fork()
    if pid == 0:
        _exec_child(cmd, master_fd, slave_fd)

    os.close(slave_fd)
    previous_handler = signal.signal(
        signal.SIGWINCH, lambda _signum, _frame: _sync_winsize(stdin_fd, master_fd)
    )

    processor = OutputProcessor(LinkDetector(cwd))
    loop_error: BaseException | None = None
    try:
        _run_proxy_loop(master_fd, stdin_fd, processor)
    except OSError as exc:
        loop_error = exc
    finally:
        signal.signal(signal.SIGWINCH, previous_handler)
        if original_mode is not None:
            try:
                termios.tcsetattr(stdin_fd, termios.TCSANOW, original_mode)
            except termios.error:
                pass
        os.close(master_fd)

    try:
        _, status = os.waitpid(pid, 0)
    except OSError:
        if loop_error is not None:
            raise loop_error
        return processor.resume_session_id

    if os.WIFEXITED(status):
        code = os.WEXITSTATUS(status)
        if code != 0:
            raise ChildExitError(f"claude exited with status: {code}", code=code)
    elif os.WIFSIGNALED(status):
        number = os.WTERMSIG(status)
        try:
            name = signal.Signals(number).name
        except ValueError:
            name = str(number)
        raise ChildExitError(f"claude killed by signal: {name}", signal_number=number)
    elif loop_error is not None:
        raise loop_error

    return processor.resume_session_id