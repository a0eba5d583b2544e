"""WorkspaceIndexer — full (re)build of one workspace folder's module index.

Steps for a folder:

  1. discover every project config (dependency dirs excluded)
  2. parse them, in parallel; a config that fails to read is skipped
  3. build the ProjectRegistry (deepest project first)
  4. enumerate source files, excluding dependency and build-output dirs
  5. resolve every (project, file) pair and fill each project's index
  6. record the owner project of every file

The result is a fresh ``WorkspaceState``; nothing shared is mutated, so
the caller can publish it with a single assignment.
"""

from __future__ import annotations

import logging
import posixpath
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field

from nsimports.core.config import IndexSettings
from nsimports.index.module_index import ModuleIndex
from nsimports.index.naming import module_name_for
from nsimports.index.path_resolver import resolve
from nsimports.index.project_config import ConfigParseError, ProjectConfig, project_config_from_raw
from nsimports.index.registry import ProjectRegistry
from nsimports.index.schema import BuildStats, ModuleRecord, WorkspaceFolder
from nsimports.index.sources import ConfigSource, FileEnumerator

logger = logging.getLogger(__name__)


class WorkspaceBuildError(Exception):
    """Discovery or enumeration failed for a whole workspace folder."""


@dataclass
class WorkspaceState:
    """Everything known about one workspace folder."""

    folder: WorkspaceFolder
    registry: ProjectRegistry
    indices: dict[str, ModuleIndex] = field(default_factory=dict)   # project root -> index
    owners: dict[str, str] = field(default_factory=dict)            # file path -> project root

    def index_for(self, project_root: str) -> ModuleIndex | None:
        return self.indices.get(project_root)

    def stats(self) -> BuildStats:
        return BuildStats(
            folder=self.folder.name,
            total_projects=len(self.registry),
            total_files=len(self.owners),
            total_records=sum(len(index) for index in self.indices.values()),
            records_by_project={root: len(index) for root, index in self.indices.items()},
        )


def make_record(project: ProjectConfig, file_path: str, workspace_root: str) -> ModuleRecord | None:
    """Resolve *file_path* for *project*; None when it is not importable there."""
    module_name = module_name_for(file_path)
    if not module_name:
        return None
    resolution = resolve(project, file_path, workspace_root)
    if not resolution.importable:
        return None
    return ModuleRecord(
        module_name=module_name,
        file_path=file_path,
        kind=resolution.kind,
        import_path=resolution.import_path,
    )


class WorkspaceIndexer:
    """Build ``WorkspaceState`` for workspace folders.

    Parameters
    ----------
    config_source:
        Finds and parses project configs.
    enumerator:
        Lists candidate source files.
    settings:
        Config filename, source extensions and dependency dirs.
    """

    def __init__(
        self,
        config_source: ConfigSource,
        enumerator: FileEnumerator,
        settings: IndexSettings | None = None,
    ) -> None:
        self._config_source = config_source
        self._enumerator = enumerator
        self._settings = settings or IndexSettings()

    @property
    def settings(self) -> IndexSettings:
        return self._settings

    # ── Public ────────────────────────────────────────────────────────────────

    def build(self, folder: WorkspaceFolder) -> WorkspaceState:
        """Index *folder* from scratch.  Raises WorkspaceBuildError."""
        try:
            config_paths = self._config_source.discover(folder)
        except OSError as exc:
            raise WorkspaceBuildError(
                f"{folder.name}: failed finding project configs: {exc}"
            ) from exc

        projects = self._load_projects(config_paths)
        registry = ProjectRegistry(projects, self._settings.dependency_dirs)

        try:
            files = self._collect_files(folder, registry)
        except OSError as exc:
            raise WorkspaceBuildError(f"{folder.name}: failed listing source files: {exc}") from exc

        state = WorkspaceState(
            folder=folder,
            registry=registry,
            indices={project.root: ModuleIndex() for project in registry},
        )

        for project in registry:
            index = state.indices[project.root]
            for file_path in files:
                record = make_record(project, file_path, folder.root)
                if record is not None:
                    index.put(record)

        for file_path in files:
            owner = registry.owner_of(file_path)
            if owner is not None:
                state.owners[file_path] = owner.root

        stats = state.stats()
        logger.info(
            "Built %s: %d projects, %d files, %d records",
            folder.name, stats.total_projects, len(files), stats.total_records,
        )
        return state

    # ── Internal helpers ──────────────────────────────────────────────────────

    def _load_projects(self, config_paths: list[str]) -> list[ProjectConfig]:
        if not config_paths:
            return []
        workers = max(1, min(self._settings.config_read_workers, len(config_paths)))
        with ThreadPoolExecutor(max_workers=workers) as pool:
            loaded = list(pool.map(self._load_project, config_paths))
        return [project for project in loaded if project is not None]

    def _load_project(self, config_path: str) -> ProjectConfig | None:
        try:
            raw = self._config_source.load(config_path)
            return project_config_from_raw(config_path, raw)
        except (OSError, ConfigParseError) as exc:
            logger.error("Error reading project config at %s: %s", config_path, exc)
            return None

    def _collect_files(self, folder: WorkspaceFolder, registry: ProjectRegistry) -> list[str]:
        """Source files of *folder*, with dependency and build-output dirs left out."""
        excludes = list(self._settings.dependency_exclude_globs)
        for out_dir in registry.out_dirs:
            rel = posixpath.relpath(out_dir, folder.root)
            if rel != "." and not rel.startswith(".."):
                excludes.append(f"{rel}/**")

        files = self._enumerator.find_files(folder, self._settings.include_globs, excludes)
        # also covers outDirs outside the folder root
        return [
            f for f in files
            if self._settings.is_source_file(f) and not registry.is_excluded(f)
        ]
