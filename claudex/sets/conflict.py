"""Interactive handling of files that already exist at install targets."""

from __future__ import annotations

import shutil
import subprocess
import sys
from enum import Enum, auto
from pathlib import Path

from claudex.util import prompt_input


class ConflictResolution(Enum):
    REPLACE = auto()
    APPEND = auto()
    PREPEND = auto()
    SKIP = auto()


def has_conflict(target: str | Path) -> bool:
    """Whether the install target already exists."""
    return Path(target).exists()


def _choose(prompt: str, choices: dict[str, ConflictResolution], invalid: str,
            on_other=None) -> ConflictResolution:
    while True:
        choice = prompt_input(prompt)
        if choice in choices:
            return choices[choice]
        if on_other is not None and on_other(choice):
            continue
        print(invalid)


def resolve_file_conflict(
    source: str | Path, target: str | Path, component_label: str
) -> ConflictResolution:
    """Ask how to handle an existing file; option 5 shows a diff and asks again."""
    source, target = Path(source), Path(target)
    print(f"\n[Conflict] {component_label} already exists: {target}")
    print("  1) Replace (overwrite with set version)")
    print("  2) Append (add set content to end)")
    print("  3) Prepend (add set content to beginning)")
    print("  4) Skip (keep existing)")
    print("  5) View diff")

    def view_diff(choice: str) -> bool:
        if choice != "5":
            return False
        _show_diff(source, target)
        return True

    return _choose(
        "Select [1-5]",
        {
            "1": ConflictResolution.REPLACE,
            "2": ConflictResolution.APPEND,
            "3": ConflictResolution.PREPEND,
            "4": ConflictResolution.SKIP,
        },
        "Invalid choice, please select 1-5",
        view_diff,
    )


def _replace_or_skip() -> ConflictResolution:
    print("  1) Replace (overwrite)")
    print("  2) Skip (keep existing)")
    return _choose(
        "Select [1/2]",
        {"1": ConflictResolution.REPLACE, "2": ConflictResolution.SKIP},
        "Invalid choice, please select 1 or 2",
    )


def resolve_dir_conflict(target: str | Path, component_label: str) -> ConflictResolution:
    """Ask whether to replace or keep an existing directory."""
    print(f"\n[Conflict] {component_label} already exists: {Path(target)}")
    return _replace_or_skip()


def resolve_mcp_conflict(name: str) -> ConflictResolution:
    """Ask whether to replace or keep an existing MCP server entry."""
    print(f"\n[Conflict] MCP server '{name}' already exists")
    return _replace_or_skip()


def apply_file_resolution(
    source: str | Path, target: str | Path, resolution: ConflictResolution
) -> None:
    """Write ``source`` into ``target`` according to ``resolution``."""
    source, target = Path(source), Path(target)
    if resolution is ConflictResolution.REPLACE:
        shutil.copy(source, target)
    elif resolution is ConflictResolution.APPEND:
        new = source.read_text(encoding="utf-8")
        existing = target.read_text(encoding="utf-8")
        target.write_text(f"{existing}\n\n{new}", encoding="utf-8")
    elif resolution is ConflictResolution.PREPEND:
        new = source.read_text(encoding="utf-8")
        existing = target.read_text(encoding="utf-8")
        target.write_text(f"{new}\n\n{existing}", encoding="utf-8")


def _file_size(path: Path) -> int:
    try:
        return path.stat().st_size
    except OSError:
        return 0


def _show_diff(source: Path, target: Path) -> None:
    sys.stdout.flush()
    try:
        result = subprocess.run(
            ["diff", "--color=auto", "-u", str(target), str(source)], check=False
        )
    except OSError:
        result = None
    # diff exits with 1 when the files differ
    if result is not None and result.returncode in (0, 1):
        return
    print(f"  Existing: {_file_size(target)} bytes, New: {_file_size(source)} bytes")