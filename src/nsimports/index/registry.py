"""ProjectRegistry — the projects of one workspace folder, deepest first."""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from nsimports.index.path_resolver import is_same_or_under, is_under
from nsimports.index.project_config import ProjectConfig


class ProjectRegistry:
    """Ordered collection of ProjectConfig answering ownership and exclusion.

    Parameters
    ----------
    projects:
        Parsed project configs, in any order.  They are sorted by root depth,
        deepest first; projects of equal depth keep their given order.
    dependency_dirs:
        Directory names (e.g. ``node_modules``) excluded wherever they appear.
    """

    def __init__(
        self,
        projects: Iterable[ProjectConfig],
        dependency_dirs: Iterable[str] = ("node_modules",),
    ) -> None:
        self._projects: tuple[ProjectConfig, ...] = tuple(
            sorted(projects, key=lambda p: -p.depth)
        )
        self._dependency_dirs = frozenset(dependency_dirs)
        self._out_dirs: tuple[str, ...] = tuple(
            p.out_dir_path for p in self._projects if p.out_dir_path is not None
        )

    def __iter__(self) -> Iterator[ProjectConfig]:
        return iter(self._projects)

    def __len__(self) -> int:
        return len(self._projects)

    @property
    def out_dirs(self) -> tuple[str, ...]:
        """Absolute build-output directories of every project."""
        return self._out_dirs

    def owner_of(self, file_path: str) -> ProjectConfig | None:
        """Return the deepest project whose root contains *file_path*."""
        for project in self._projects:
            if is_under(file_path, project.root):
                return project
        return None

    def is_dependency(self, path: str) -> bool:
        parts = path.split("/")
        return any(part in self._dependency_dirs for part in parts)

    def is_in_out_dir(self, path: str) -> bool:
        return any(is_same_or_under(path, out_dir) for out_dir in self._out_dirs)

    def is_excluded(self, path: str) -> bool:
        """True if *path* is in a dependency directory or any project's outDir."""
        return self.is_dependency(path) or self.is_in_out_dir(path)

    def roots_under(self, directory: str) -> list[str]:
        """Project roots equal to or inside *directory*."""
        return [p.root for p in self._projects if is_same_or_under(p.root, directory)]
