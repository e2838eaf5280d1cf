# claudex

A small library of building blocks for keeping Claude Code set up the way you
want it:

- **Set manifests**: parse and validate `.claudex-sets.json` manifests that
  describe a bundle of `CLAUDE.md`, rules, skills, MCP servers and the
  environment values they need.
- **Conflict handling**: ask the user what to do when a file or directory is
  already present, and apply the answer (replace, append, prepend or skip).
- **Terminal helpers**: turn URLs and file paths in terminal output into
  clickable OSC 8 hyperlinks, detect whether the terminal supports them, and
  run a command inside a pseudo-terminal with its output enhanced.

## Installing

```
pip install .
```

Tests need the `test` extra:

```
pip install ".[test]"
pytest
```

## Set manifests

A manifest is a JSON file named `.claudex-sets.json` or `claudex-sets.json`:

```json
{
  "name": "my-set",
  "version": "1.0.0",
  "description": "Team defaults",
  "components": {
    "claude_md": {"path": "CLAUDE.md"},
    "rules": [{"name": "style", "path": "rules/style.md"}],
    "skills": [{"name": "review", "path": "skills/review"}],
    "mcp_servers": [
      {"name": "docs", "type": "http", "url": "https://docs.example.com/mcp"},
      {
        "name": "local-tools",
        "type": "stdio",
        "command": "my-mcp-server",
        "args": ["--quiet"],
        "setup": "Install my-mcp-server first"
      }
    ]
  },
  "env": [
    {"name": "DOCS_TOKEN", "description": "Token for the docs server", "required": true}
  ]
}
```

```python
from claudex.sets.schema import ManifestError, SetManifest

path, manifest = SetManifest.find_in_dir("path/to/set")
print(manifest.name, manifest.version)
for server in manifest.components.mcp_servers:
    print(server.name, server.server_type)
```

`SetManifest.find_in_dir` looks for `.claudex-sets.json` first, then
`claudex-sets.json`. `from_json` and `from_file` parse and validate;
`from_dict` builds a manifest from decoded JSON without validating it, and
`validate` can be called afterwards. Validation requires a non-empty name
matching `^[a-z0-9][a-z0-9._-]*$`, a non-empty version, a `url` for every
`http` server and a `command` for every `stdio` server. Any problem raises
`ManifestError` (a `ValueError`).

## Conflict handling

`claudex.sets.conflict` offers the prompts used when an install target already
exists:

- `has_conflict(target)` tells whether the target exists.
- `resolve_file_conflict(source, target, label)` offers replace, append,
  prepend, skip, or viewing a `diff -u` of the two files (falling back to
  their sizes when `diff` is unavailable), and returns a `ConflictResolution`.
- `resolve_dir_conflict(target, label)` and `resolve_mcp_conflict(name)` offer
  only replace or skip.
- `apply_file_resolution(source, target, resolution)` copies over the target,
  or joins the two texts with a blank line between them, or does nothing for
  `SKIP`.

Prompts read from standard input through `claudex.util.prompt_input`.

## Terminal hyperlinks

```python
from pathlib import Path
from claudex.terminal.detect import terminal_supports_hyperlinks
from claudex.terminal.osc8 import LinkDetector

detector = LinkDetector(Path.cwd())
line = detector.enhance_line("See https://example.com and src/main.py:42")
if terminal_supports_hyperlinks():
    print(line)
```

URLs (`http://`, `https://`, `file://`, `mailto:`) are always linked. File
paths, absolute or relative, with an optional `:line:col` suffix, are linked
only when the file exists; existence checks are cached per detector. ANSI
colour codes are left intact, and lines that already carry OSC 8 links are
passed through unchanged.

`terminal_supports_hyperlinks()` reports support when `FORCE_HYPERLINKS=1`, or
when standard output is a terminal known to render OSC 8 (by `DOMTERM`,
`TERM_PROGRAM`, `TERM`, `VTE_VERSION` of 5000 or more, or `WT_SESSION`). The
same decision is available for any `EnvSnapshot` through `detect_from_env`.

## Running a command in a pseudo-terminal

`claudex.terminal.pty.spawn_with_pty(cmd, cwd)` (POSIX only) runs the argument
list `cmd` in a pseudo-terminal, puts the real terminal in raw mode, passes
keystrokes through, keeps the window size in step, and prints the child's
output with links added. It returns the session id if the output contained a
`claude --resume <id>` line. A non-zero exit or a fatal signal raises
`ChildExitError`, carrying `code` or `signal_number`.

The pieces are usable on their own: `OutputProcessor` turns raw output bytes
into linked lines (holding back incomplete UTF-8 sequences and partial lines
until `flush`), `strip_ansi_escapes` removes escape sequences,
`detect_resume_session` extracts a session id from one line, and
`find_utf8_safe_end` finds where a byte chunk can be safely decoded.

## What this package does not do

There is no command-line program. The package reads and validates manifests
and handles individual conflicts, but it does not fetch sets from git
repositories or URLs, does not copy a set's components into `.claude`, does
not write MCP server entries to `.claude.json`, does not collect environment
values, and keeps no record of which sets are installed, so sets cannot be
listed, updated or removed with it.