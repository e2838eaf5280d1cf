"""Detection of terminals that support OSC 8 hyperlinks."""

from __future__ import annotations

import os
import re
import sys
from dataclasses import dataclass
from typing import Mapping

_KNOWN_TERM_PROGRAMS = frozenset(
    {"iTerm.app", "WezTerm", "vscode", "Tabby", "Hyper", "mintty", "WarpTerminal"}
)
_KNOWN_TERM_PREFIXES = ("xterm-kitty", "xterm-ghostty")
_U32_RE = re.compile(r"\+?[0-9]+")
_U32_MAX = 2**32 - 1


@dataclass(frozen=True)
class EnvSnapshot:
    """The environment variables that hyperlink detection looks at."""

    force_hyperlinks: str | None = None
    domterm: str | None = None
    term_program: str | None = None
    term: str | None = None
    vte_version: str | None = None
    wt_session: str | None = None

    @classmethod
    def from_environ(cls, environ: Mapping[str, str] | None = None) -> EnvSnapshot:
        env = os.environ if environ is None else environ
        return cls(
            force_hyperlinks=env.get("FORCE_HYPERLINKS"),
            domterm=env.get("DOMTERM"),
            term_program=env.get("TERM_PROGRAM"),
            term=env.get("TERM"),
            vte_version=env.get("VTE_VERSION"),
            wt_session=env.get("WT_SESSION"),
        )


def _parse_u32(text: str) -> int | None:
    if not _U32_RE.fullmatch(text):
        return None
    value = int(text)
    return value if value <= _U32_MAX else None


def detect_from_env(env: EnvSnapshot, is_tty: bool) -> bool:
    """Decide hyperlink support from an environment snapshot."""
    if env.force_hyperlinks == "1":
        return True
    if not is_tty:
        return False
    if env.domterm is not None:
        return True
    if env.term_program in _KNOWN_TERM_PROGRAMS:
        return True
    if env.term is not None and env.term.startswith(_KNOWN_TERM_PREFIXES):
        return True
    if env.vte_version is not None:
        version = _parse_u32(env.vte_version)
        if version is not None:
            # VTE 0.50 and later
            return version >= 5000
    if env.wt_session is not None:
        return True
    return False


def terminal_supports_hyperlinks() -> bool:
    """Whether standard output is a terminal that renders OSC 8 links."""
    try:
        is_tty = sys.stdout.isatty()
    except (AttributeError, ValueError):
        is_tty = False
    return detect_from_env(EnvSnapshot.from_environ(), is_tty)