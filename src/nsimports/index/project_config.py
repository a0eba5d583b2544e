"""ProjectConfig — parsed view of one ``tsconfig.json``.

Only the three compiler options the resolver cares about are kept:

  baseUrl   directory non-aliased bare imports are computed against
  paths     ordered alias pattern -> target patterns map
  outDir    build output, never indexed

Missing keys become ``None``; no defaults are baked in here.  The resolver
decides what an absent value means.
"""

from __future__ import annotations

import json
import posixpath
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError

# A target of null or "" blocks its alias from resolving.
UNRESOLVABLE_TARGETS: frozenset[str | None] = frozenset({None, ""})


class ConfigParseError(ValueError):
    """A project configuration file could not be turned into a ProjectConfig."""


class ProjectConfig(BaseModel):
    """One project's resolution settings, rooted at its config's directory."""

    model_config = ConfigDict(frozen=True)

    root: str                                   # absolute POSIX dir of the config file
    config_path: str
    base_url: str | None = None
    paths: dict[str, list[str | None]] | None = None
    out_dir: str | None = None

    @property
    def base_path(self) -> str:
        """Absolute directory aliases and baseUrl imports resolve against."""
        return posixpath.normpath(posixpath.join(self.root, self.base_url or "."))

    @property
    def out_dir_path(self) -> str | None:
        if self.out_dir is None:
            return None
        # posixpath.join keeps an absolute out_dir as-is
        return posixpath.normpath(posixpath.join(self.root, self.out_dir))

    @property
    def depth(self) -> int:
        return len([part for part in self.root.split("/") if part])


# ── Parsing ───────────────────────────────────────────────────────────────────


def strip_json_comments(text: str) -> str:
    """Remove ``//`` and ``/* */`` comments outside string literals."""
    result: list[str] = []
    i = 0
    n = len(text)
    in_string = False

    while i < n:
        char = text[i]

        if in_string:
            result.append(char)
            if char == "\\" and i + 1 < n:
                result.append(text[i + 1])
                i += 2
                continue
            if char == '"':
                in_string = False
            i += 1
            continue

        if char == '"':
            in_string = True
            result.append(char)
            i += 1
        elif text.startswith("//", i):
            while i < n and text[i] != "\n":
                i += 1
        elif text.startswith("/*", i):
            end = text.find("*/", i + 2)
            i = n if end == -1 else end + 2
        else:
            result.append(char)
            i += 1

    return "".join(result)


def _strip_trailing_commas(text: str) -> str:
    """Drop commas directly followed by ``}`` or ``]``, outside strings."""
    result: list[str] = []
    i = 0
    n = len(text)
    in_string = False

    while i < n:
        char = text[i]
        if in_string:
            result.append(char)
            if char == "\\" and i + 1 < n:
                result.append(text[i + 1])
                i += 2
                continue
            if char == '"':
                in_string = False
        elif char == '"':
            in_string = True
            result.append(char)
        elif char == ",":
            j = i + 1
            while j < n and text[j].isspace():
                j += 1
            if j >= n or text[j] not in "}]":
                result.append(char)
        else:
            result.append(char)
        i += 1

    return "".join(result)


def parse_tsconfig_text(text: str) -> dict[str, Any]:
    """Parse tsconfig-flavoured JSON (BOM, comments, trailing commas) into a dict."""
    cleaned = _strip_trailing_commas(strip_json_comments(text.removeprefix("\ufeff")))
    if not cleaned.strip():
        return {}
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        raise ConfigParseError(f"invalid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigParseError("top level is not an object")
    return data


def project_config_from_raw(config_path: str, raw: dict[str, Any]) -> ProjectConfig:
    """Build a ProjectConfig from an already-parsed config object."""
    if not isinstance(raw, dict):
        raise ConfigParseError(f"{config_path}: top level is not an object")
    compiler_options = raw.get("compilerOptions")
    if compiler_options is None:
        compiler_options = {}
    if not isinstance(compiler_options, dict):
        raise ConfigParseError(f"{config_path}: compilerOptions is not an object")

    try:
        return ProjectConfig(
            root=posixpath.dirname(config_path),
            config_path=config_path,
            base_url=compiler_options.get("baseUrl"),
            paths=compiler_options.get("paths"),
            out_dir=compiler_options.get("outDir"),
        )
    except ValidationError as exc:
        raise ConfigParseError(f"{config_path}: {exc}") from exc


def load_tsconfig(config_path: Path) -> dict[str, Any]:
    """Read and parse a tsconfig file from disk.  Raises OSError / ConfigParseError."""
    try:
        text = config_path.read_text(encoding="utf-8-sig")
    except UnicodeDecodeError as exc:
        raise ConfigParseError(f"{config_path}: not valid UTF-8: {exc}") from exc
    return parse_tsconfig_text(text)
