"""Small interactive helpers shared across commands."""

from __future__ import annotations

import sys


def prompt_input(label: str) -> str:
    """Print ``label: `` and return one line read from stdin, stripped.

    Returns an empty string when stdin is exhausted.
    """
    sys.stdout.write(f"{label}: ")
    sys.stdout.flush()
    return sys.stdin.readline().strip()