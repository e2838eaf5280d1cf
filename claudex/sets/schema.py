"""Types and validation for set manifests (``.claudex-sets.json``)."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

MANIFEST_FILENAMES = (".claudex-sets.json", "claudex-sets.json")

_NAME_PATTERN = "^[a-z0-9][a-z0-9._-]*$"
_NAME_RE = re.compile(r"[a-z0-9][a-z0-9._-]*")


class ManifestError(ValueError):
    """A manifest could not be read, parsed or validated."""


class McpServerType(Enum):
    HTTP = "http"
    STDIO = "stdio"

    def __str__(self) -> str:
        return self.value


@dataclass
class ClaudeMd:
    path: str


@dataclass
class Rule:
    name: str
    path: str
    description: str | None = None


@dataclass
class Skill:
    name: str
    path: str
    description: str | None = None


@dataclass
class McpServer:
    name: str
    server_type: McpServerType
    url: str | None = None
    command: str | None = None
    args: list[str] = field(default_factory=list)
    headers: dict[str, str] = field(default_factory=dict)
    env: dict[str, str] = field(default_factory=dict)
    description: str | None = None
    setup: str | None = None


@dataclass
class EnvVar:
    name: str
    description: str | None = None
    required: bool = False
    default: str | None = None


@dataclass
class Components:
    claude_md: ClaudeMd | None = None
    rules: list[Rule] = field(default_factory=list)
    skills: list[Skill] = field(default_factory=list)
    mcp_servers: list[McpServer] = field(default_factory=list)


def _invalid(message: str) -> ManifestError:
    return ManifestError(f"invalid manifest: {message}")


def _as_object(value: Any, context: str) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise _invalid(f"{context} must be an object")
    return value


def _req_str(data: dict[str, Any], key: str, context: str) -> str:
    if key not in data:
        raise _invalid(f"missing field `{key}` in {context}")
    value = data[key]
    if not isinstance(value, str):
        raise _invalid(f"field `{key}` in {context} must be a string")
    return value


def _opt_str(data: dict[str, Any], key: str, context: str) -> str | None:
    value = data.get(key)
    if value is not None and not isinstance(value, str):
        raise _invalid(f"field `{key}` in {context} must be a string")
    return value


def _bool(data: dict[str, Any], key: str, context: str) -> bool:
    value = data.get(key, False)
    if not isinstance(value, bool):
        raise _invalid(f"field `{key}` in {context} must be a boolean")
    return value


def _list(data: dict[str, Any], key: str, context: str) -> list[Any]:
    value = data.get(key, [])
    if not isinstance(value, list):
        raise _invalid(f"field `{key}` in {context} must be an array")
    return value


def _str_list(data: dict[str, Any], key: str, context: str) -> list[str]:
    items = _list(data, key, context)
    if not all(isinstance(item, str) for item in items):
        raise _invalid(f"field `{key}` in {context} must hold strings")
    return list(items)


def _str_map(data: dict[str, Any], key: str, context: str) -> dict[str, str]:
    value = data.get(key, {})
    if not isinstance(value, dict) or not all(isinstance(v, str) for v in value.values()):
        raise _invalid(f"field `{key}` in {context} must map strings to strings")
    return dict(value)


def _parse_named(data: Any, kind: type, context: str):
    obj = _as_object(data, context)
    return kind(
        name=_req_str(obj, "name", context),
        path=_req_str(obj, "path", context),
        description=_opt_str(obj, "description", context),
    )


def _parse_mcp_server(data: Any) -> McpServer:
    context = "mcp server"
    obj = _as_object(data, context)
    raw_type = _req_str(obj, "type", context)
    try:
        server_type = McpServerType(raw_type)
    except ValueError:
        raise _invalid(f"unknown mcp server type `{raw_type}`") from None
    return McpServer(
        name=_req_str(obj, "name", context),
        server_type=server_type,
        url=_opt_str(obj, "url", context),
        command=_opt_str(obj, "command", context),
        args=_str_list(obj, "args", context),
        headers=_str_map(obj, "headers", context),
        env=_str_map(obj, "env", context),
        description=_opt_str(obj, "description", context),
        setup=_opt_str(obj, "setup", context),
    )


def _parse_env_var(data: Any) -> EnvVar:
    context = "env var"
    obj = _as_object(data, context)
    return EnvVar(
        name=_req_str(obj, "name", context),
        description=_opt_str(obj, "description", context),
        required=_bool(obj, "required", context),
        default=_opt_str(obj, "default", context),
    )


def _parse_components(data: Any) -> Components:
    context = "components"
    obj = _as_object(data, context)
    raw_claude_md = obj.get("claude_md")
    claude_md = None
    if raw_claude_md is not None:
        claude_obj = _as_object(raw_claude_md, "claude_md")
        claude_md = ClaudeMd(path=_req_str(claude_obj, "path", "claude_md"))
    return Components(
        claude_md=claude_md,
        rules=[_parse_named(item, Rule, "rule") for item in _list(obj, "rules", context)],
        skills=[_parse_named(item, Skill, "skill") for item in _list(obj, "skills", context)],
        mcp_servers=[_parse_mcp_server(item) for item in _list(obj, "mcp_servers", context)],
    )


@dataclass
class SetManifest:
    name: str
    version: str
    components: Components
    description: str | None = None
    author: str | None = None
    homepage: str | None = None
    license: str | None = None
    env: list[EnvVar] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> SetManifest:
        """Build a manifest from decoded JSON without validating its values."""
        context = "manifest"
        obj = _as_object(data, context)
        if "components" not in obj:
            raise _invalid("missing field `components` in manifest")
        return cls(
            name=_req_str(obj, "name", context),
            version=_req_str(obj, "version", context),
            components=_parse_components(obj["components"]),
            description=_opt_str(obj, "description", context),
            author=_opt_str(obj, "author", context),
            homepage=_opt_str(obj, "homepage", context),
            license=_opt_str(obj, "license", context),
            env=[_parse_env_var(item) for item in _list(obj, "env", context)],
        )

    @classmethod
    def from_json(cls, content: str) -> SetManifest:
        """Parse and validate a manifest from JSON text."""
        try:
            data = json.loads(content)
        except json.JSONDecodeError as exc:
            raise _invalid(str(exc)) from exc
        manifest = cls.from_dict(data)
        manifest.validate()
        return manifest

    @classmethod
    def from_file(cls, path: str | Path) -> SetManifest:
        """Load and validate a manifest file."""
        path = Path(path)
        try:
            content = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ManifestError(f"failed to read {path}: {exc}") from exc
        return cls.from_json(content)

    @classmethod
    def find_in_dir(cls, directory: str | Path) -> tuple[Path, SetManifest]:
        """Locate the manifest in ``directory``, dotfile name first."""
        directory = Path(directory)
        for filename in MANIFEST_FILENAMES:
            path = directory / filename
            if path.exists():
                return path, cls.from_file(path)
        raise ManifestError(
            f"no .claudex-sets.json or claudex-sets.json found in {directory}"
        )

    def validate(self) -> None:
        """Check names, version and MCP server completeness."""
        if not self.name:
            raise ManifestError("manifest name cannot be empty")
        if not _NAME_RE.fullmatch(self.name):
            raise ManifestError(
                f"invalid manifest name '{self.name}': must match {_NAME_PATTERN}"
            )
        if not self.version:
            raise ManifestError("manifest version cannot be empty")
        for server in self.components.mcp_servers:
            if server.server_type is McpServerType.HTTP and server.url is None:
                raise ManifestError(
                    f"MCP server '{server.name}' is http type but missing url"
                )
            if server.server_type is McpServerType.STDIO and server.command is None:
                raise ManifestError(
                    f"MCP server '{server.name}' is stdio type but missing command"
                )