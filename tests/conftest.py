"""Shared test fixtures for nsimports."""

from __future__ import annotations

import posixpath
from typing import Any

import pytest

from nsimports.index.schema import WorkspaceFolder
from nsimports.index.sources import ConfigSource, FileEnumerator, build_spec


class InMemoryWorkspace(ConfigSource, FileEnumerator):
    """A workspace folder that exists only as paths.

    ``configs`` maps workspace-relative config paths to raw config objects
    (or to an exception instance, raised on load).  ``files`` lists
    workspace-relative file paths.
    """

    def __init__(
        self,
        configs: dict[str, Any],
        files: list[str],
        root: str = "/ws",
        name: str = "ws",
    ) -> None:
        self.folder = WorkspaceFolder(name=name, root=root)
        self.configs: dict[str, Any] = {self.abs(rel): raw for rel, raw in configs.items()}
        self.files: list[str] = [self.abs(rel) for rel in files]
        self.fail_discovery = False
        self.fail_listing = False
        self.discover_calls = 0

    def abs(self, rel: str) -> str:
        return posixpath.join(self.folder.root, rel)

    # ConfigSource

    def discover(self, folder: WorkspaceFolder) -> list[str]:
        self.discover_calls += 1
        if self.fail_discovery:
            raise OSError("disk on fire")
        return [
            path for path in self.configs
            if path.startswith(folder.root + "/") and "/node_modules/" not in path
        ]

    def load(self, config_path: str) -> dict[str, Any]:
        raw = self.configs[config_path]
        if isinstance(raw, Exception):
            raise raw
        return raw

    # FileEnumerator

    def find_files(self, folder: WorkspaceFolder, include: list[str], excludes: list[str]) -> list[str]:
        if self.fail_listing:
            raise OSError("permission denied")
        include_spec = build_spec(include)
        exclude_spec = build_spec(excludes)
        result = []
        for path in self.files:
            if not path.startswith(folder.root + "/"):
                continue
            rel = posixpath.relpath(path, folder.root)
            if not include_spec.match_file(rel) or exclude_spec.match_file(rel):
                continue
            result.append(path)
        return result


@pytest.fixture
def memory_workspace():
    """Factory for in-memory workspaces: ``memory_workspace(configs, files)``."""

    def _make(configs: dict[str, Any], files: list[str], root: str = "/ws", name: str = "ws"):
        return InMemoryWorkspace(configs, files, root=root, name=name)

    return _make


@pytest.fixture
def ts_project(tmp_path):
    """A temporary on-disk TypeScript workspace with one aliased project."""
    (tmp_path / "tsconfig.json").write_text(
        '{\n'
        '  // path aliases\n'
        '  "compilerOptions": {\n'
        '    "outDir": "dist",\n'
        '    "paths": { "@/*": ["src/*"], },\n'
        '  },\n'
        '}\n',
        encoding="utf-8",
    )
    (tmp_path / "src").mkdir()
    (tmp_path / "src" / "main.ts").write_text("export const main = 1;\n", encoding="utf-8")
    (tmp_path / "src" / "foo_bar.ts").write_text("export const x = 1;\n", encoding="utf-8")
    (tmp_path / "lib").mkdir()
    (tmp_path / "lib" / "baz.ts").write_text("export const y = 1;\n", encoding="utf-8")
    (tmp_path / "dist").mkdir()
    (tmp_path / "dist" / "foo_bar.ts").write_text("// built\n", encoding="utf-8")
    (tmp_path / "node_modules" / "pkg").mkdir(parents=True)
    (tmp_path / "node_modules" / "pkg" / "index.ts").write_text("", encoding="utf-8")
    return tmp_path
