"""Wrapping links found in terminal output with OSC 8 hyperlink sequences."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from pathlib import Path

_LINE_COL = r"(?::\d+(?::\d+)?)?"

_URL_RE = re.compile(
    r"(https?://|file://|mailto:)[^\s<>\"'\x1b)\]]*[^\s<>\"'\x1b)\].,:;!?]"
)
_ABS_PATH_RE = re.compile(r"/[\w./_-]+\.\w+" + _LINE_COL)
_REL_PATH_DOTSLASH_RE = re.compile(r"(?:\.\./|\./)([\w./_-]+)" + _LINE_COL)
_REL_PATH_DIR_RE = re.compile(r"[\w-]+/[\w./_-]+\.\w+" + _LINE_COL)
_ANSI_RE = re.compile(
    r"\x1b(?:\[[0-9;]*[a-zA-Z]|\](?:[^;\x07\x1b]*;)*[^;\x07\x1b]*(?:\x07|\x1b\\))"
)

_OSC8_MARKER = "\x1b]8;"

Replacement = tuple[int, int, str]


@dataclass(frozen=True)
class Segment:
    """A piece of a terminal line: an ANSI escape sequence or plain text."""

    text: str
    is_escape: bool = False


def split_ansi_segments(line: str) -> list[Segment]:
    """Split ``line`` into alternating escape and text segments."""
    segments: list[Segment] = []
    last_end = 0
    for match in _ANSI_RE.finditer(line):
        if match.start() > last_end:
            segments.append(Segment(line[last_end:match.start()]))
        segments.append(Segment(match.group(0), is_escape=True))
        last_end = match.end()
    if last_end < len(line):
        segments.append(Segment(line[last_end:]))
    return segments


def wrap_osc8(uri: str, display_text: str) -> str:
    """Wrap ``display_text`` in an OSC 8 link to ``uri``, terminated with BEL."""
    return f"\x1b]8;;{uri}\x07{display_text}\x1b]8;;\x07"


def _file_part(path: str) -> str:
    return path.split(":", 1)[0]


def _join(cwd: str | Path, part: str) -> str:
    if part.startswith("/"):
        return part
    return os.path.join(os.fspath(cwd), part)


def file_path_to_uri(path: str, cwd: str | Path) -> str:
    """Turn a path, possibly with a ``:line:col`` suffix, into a ``file://`` URI."""
    return f"file://{_join(cwd, _file_part(path))}"


class LinkDetector:
    """Finds URLs and existing file paths in output lines and links them."""

    def __init__(self, cwd: str | Path) -> None:
        self.cwd = Path(cwd)
        self.file_cache: dict[str, bool] = {}

    def check_file_exists(self, file_part: str) -> bool:
        """Whether the path exists, relative to the working directory; cached."""
        cached = self.file_cache.get(file_part)
        if cached is not None:
            return cached
        exists = os.path.exists(_join(self.cwd, file_part))
        self.file_cache[file_part] = exists
        return exists

    def enhance_line(self, line: str) -> str:
        """Return ``line`` with detected links wrapped in OSC 8 sequences."""
        if _OSC8_MARKER in line:
            return line
        if not any(marker in line for marker in ("://", "/", ".", "mailto:")):
            return line
        return "".join(
            segment.text if segment.is_escape else self._enhance_text(segment.text)
            for segment in split_ansi_segments(line)
        )

    def overlaps(self, replacements: list[Replacement], start: int, end: int) -> bool:
        """Whether ``[start, end)`` intersects any replacement's range."""
        return any(start < r_end and end > r_start for r_start, r_end, _ in replacements)

    def _add_path_links(
        self,
        pattern: re.Pattern[str],
        text: str,
        replacements: list[Replacement],
        resolve: bool = False,
    ) -> None:
        for match in pattern.finditer(text):
            if self.overlaps(replacements, match.start(), match.end()):
                continue
            path_str = match.group(0)
            file_part = _file_part(path_str)
            if resolve:
                file_part = os.path.join(os.fspath(self.cwd), file_part)
            if self.check_file_exists(file_part):
                uri = file_path_to_uri(path_str, self.cwd)
                replacements.append(
                    (match.start(), match.end(), wrap_osc8(uri, path_str))
                )

    def _enhance_text(self, text: str) -> str:
        replacements: list[Replacement] = [
            (match.start(), match.end(), wrap_osc8(match.group(0), match.group(0)))
            for match in _URL_RE.finditer(text)
        ]
        self._add_path_links(_ABS_PATH_RE, text, replacements)
        self._add_path_links(_REL_PATH_DOTSLASH_RE, text, replacements, resolve=True)
        self._add_path_links(_REL_PATH_DIR_RE, text, replacements)

        if not replacements:
            return text

        pieces: list[str] = []
        last_end = 0
        for start, end, replacement in sorted(replacements, key=lambda r: r[0]):
            if start >= last_end:
                pieces.append(text[last_end:start])
                pieces.append(replacement)
                last_end = end
        pieces.append(text[last_end:])
        return "".join(pieces)