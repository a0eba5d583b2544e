"""Collaborators the indexer reads the workspace through.

``ConfigSource`` finds and parses project configuration files,
``FileEnumerator`` lists source files matching include/exclude globs.
Both are abstract so tests and editor hosts can supply their own; the
filesystem-backed implementations below are what the CLI uses.

Include and exclude patterns are gitignore-style globs matched against
folder-relative POSIX paths with ``pathspec``: ``**`` spans directories,
``*`` and ``?`` stay within one path segment.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable
from pathlib import Path
from typing import Any

import pathspec

from nsimports.index.project_config import load_tsconfig
from nsimports.index.schema import WorkspaceFolder

logger = logging.getLogger(__name__)


# ── Patterns ──────────────────────────────────────────────────────────────────


def build_spec(patterns: Iterable[str]) -> pathspec.PathSpec:
    """Compile gitignore-style *patterns* into one matcher."""
    return pathspec.GitIgnoreSpec.from_lines(list(patterns))


# ── Interfaces ────────────────────────────────────────────────────────────────


class FileEnumerator(ABC):
    """Lists files of a workspace folder."""

    @abstractmethod
    def find_files(
        self,
        folder: WorkspaceFolder,
        include: list[str],
        excludes: list[str],
    ) -> list[str]:
        """Return absolute POSIX paths matching any of *include* and none of *excludes*.

        Patterns are relative to ``folder.root``.  Raises OSError if the folder
        cannot be listed.
        """


class ConfigSource(ABC):
    """Finds and parses project configuration files."""

    @abstractmethod
    def discover(self, folder: WorkspaceFolder) -> list[str]:
        """Return absolute paths of every config file, dependency dirs excluded."""

    @abstractmethod
    def load(self, config_path: str) -> dict[str, Any]:
        """Return the raw parsed config.  Raises OSError or ConfigParseError."""


# ── Filesystem implementations ────────────────────────────────────────────────


class FileSystemEnumerator(FileEnumerator):
    """Walk the folder on disk, sorted for reproducibility."""

    def find_files(
        self,
        folder: WorkspaceFolder,
        include: list[str],
        excludes: list[str],
    ) -> list[str]:
        root = Path(folder.root)
        if not root.is_dir():
            raise OSError(f"workspace folder not found: {folder.root}")

        include_spec = build_spec(include)
        exclude_spec = build_spec(excludes)
        result: list[str] = []
        for path in sorted(root.rglob("*")):
            rel = path.relative_to(root).as_posix()
            if not include_spec.match_file(rel) or exclude_spec.match_file(rel):
                continue
            if not path.is_file():
                continue
            result.append(path.as_posix())
        return result


class FileSystemConfigSource(ConfigSource):
    """Locate ``tsconfig.json`` files on disk through a FileEnumerator.

    Parameters
    ----------
    config_filename:
        Name of the per-project configuration file.
    dependency_dirs:
        Directory names never searched for configs.
    enumerator:
        Defaults to a ``FileSystemEnumerator``.
    """

    def __init__(
        self,
        config_filename: str = "tsconfig.json",
        dependency_dirs: list[str] | None = None,
        enumerator: FileEnumerator | None = None,
    ) -> None:
        self._config_filename = config_filename
        self._dependency_dirs = dependency_dirs if dependency_dirs is not None else ["node_modules"]
        self._enumerator = enumerator or FileSystemEnumerator()

    def discover(self, folder: WorkspaceFolder) -> list[str]:
        excludes = [f"**/{name}/**" for name in self._dependency_dirs]
        found = self._enumerator.find_files(folder, [f"**/{self._config_filename}"], excludes)
        logger.debug("Found %d %s files in %s", len(found), self._config_filename, folder.root)
        return found

    def load(self, config_path: str) -> dict[str, Any]:
        return load_tsconfig(Path(config_path))
