"""CompletionService — per-folder state store and the caller-facing API.

The host wires its events to the ``notify_*`` methods and its completion
provider to ``query_completions``.  Mutations of one folder's state are
serialized by a per-folder lock; queries take no lock and read whatever
state is currently published.  A rebuild assembles a new WorkspaceState
off to the side and publishes it with one dict assignment, so a reader
sees either the old or the new state, never a mix.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable

from nsimports.core.config import IndexSettings
from nsimports.index.path_resolver import is_same_or_under, relative_import_path
from nsimports.index.schema import ImportKind, ModuleCompletion, WorkspaceFolder
from nsimports.index.sources import (
    ConfigSource,
    FileEnumerator,
    FileSystemConfigSource,
    FileSystemEnumerator,
)
from nsimports.index.updater import IncrementalUpdater, UpdateOutcome
from nsimports.index.workspace_indexer import WorkspaceBuildError, WorkspaceIndexer, WorkspaceState

logger = logging.getLogger(__name__)


class CompletionService:
    """Owns the WorkspaceState of every tracked workspace folder.

    Parameters
    ----------
    folders:
        Workspace folders to track from the start.
    config_source, enumerator:
        Collaborators used for every build; default to the filesystem.
    settings:
        Index settings shared by the indexer and the updater.
    build:
        Build the initial folders immediately (default).  Pass False to
        start empty and call ``reset()`` later, e.g. from a worker thread.
    """

    def __init__(
        self,
        folders: Iterable[WorkspaceFolder] = (),
        config_source: ConfigSource | None = None,
        enumerator: FileEnumerator | None = None,
        settings: IndexSettings | None = None,
        build: bool = True,
    ) -> None:
        self._settings = settings or IndexSettings()
        enumerator = enumerator or FileSystemEnumerator()
        config_source = config_source or FileSystemConfigSource(
            config_filename=self._settings.config_filename,
            dependency_dirs=self._settings.dependency_dirs,
            enumerator=enumerator,
        )
        self._indexer = WorkspaceIndexer(config_source, enumerator, self._settings)
        self._updater = IncrementalUpdater(self._settings)

        self._folders: dict[str, WorkspaceFolder] = {}
        self._states: dict[str, WorkspaceState] = {}
        self._locks: dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

        for folder in folders:
            self._folders[folder.name] = folder
        if build:
            self.reset()

    # ── Folder lifecycle ──────────────────────────────────────────────────────

    @property
    def folders(self) -> list[WorkspaceFolder]:
        return list(self._folders.values())

    def state(self, folder_name: str) -> WorkspaceState | None:
        """Currently published state of a folder (read-only use)."""
        return self._states.get(folder_name)

    def build_folder(self, folder: WorkspaceFolder) -> WorkspaceState | None:
        """(Re)build *folder* and publish the result.  Never raises."""
        with self._lock_for(folder.name):
            try:
                state = self._indexer.build(folder)
            except WorkspaceBuildError as exc:
                logger.error("%s", exc)
                # a failed rebuild must not leave stale records behind
                self._states.pop(folder.name, None)
                return None
            if folder.name in self._folders:
                self._states[folder.name] = state
            return state

    def reset(self) -> None:
        """Rebuild every tracked folder from scratch."""
        for folder in list(self._folders.values()):
            self.build_folder(folder)

    def notify_workspace_folders_changed(
        self,
        added: Iterable[WorkspaceFolder] = (),
        removed: Iterable[WorkspaceFolder] = (),
    ) -> None:
        for folder in removed:
            with self._lock_for(folder.name):
                self._folders.pop(folder.name, None)
                self._states.pop(folder.name, None)
            with self._locks_guard:
                self._locks.pop(folder.name, None)
        for folder in added:
            self._folders[folder.name] = folder
            self.build_folder(folder)

    def folder_for(self, path: str) -> WorkspaceFolder | None:
        """Deepest tracked folder containing *path*."""
        best: WorkspaceFolder | None = None
        for folder in self._folders.values():
            if is_same_or_under(path, folder.root):
                if best is None or len(folder.root) > len(best.root):
                    best = folder
        return best

    # ── File events ───────────────────────────────────────────────────────────

    def notify_file_created(self, path: str) -> None:
        self._dispatch(path, "created", self._updater.file_created)

    def notify_file_deleted(self, path: str) -> None:
        self._dispatch(path, "deleted", self._updater.file_deleted)

    def notify_file_changed(self, path: str) -> None:
        self._dispatch(path, "changed", self._updater.file_changed)

    # ── Queries ───────────────────────────────────────────────────────────────

    def query_completions(self, current_file: str, query: str) -> list[ModuleCompletion]:
        """Modules importable from *current_file* whose name starts like *query*."""
        if not query:
            return []

        folder = self.folder_for(current_file)
        if folder is None:
            logger.warning("No workspace folder for %s", current_file)
            return []
        state = self._states.get(folder.name)
        if state is None:
            logger.warning("Workspace %s has not been indexed", folder.name)
            return []
        if state.registry.is_excluded(current_file):
            return []

        owner_root = state.owners.get(current_file)
        if owner_root is None:
            owner = state.registry.owner_of(current_file)
            owner_root = owner.root if owner is not None else None
        index = state.index_for(owner_root) if owner_root is not None else None
        if index is None:
            logger.warning("No project found for current file: %s", current_file)
            return []

        completions: list[ModuleCompletion] = []
        for record in index.get(query[0]):
            if record.file_path == current_file:
                continue
            if record.kind is ImportKind.RELATIVE:
                import_path = relative_import_path(current_file, record.file_path)
            else:
                import_path = record.import_path or ""
            completions.append(ModuleCompletion(record.module_name, import_path))
        return completions

    # ── Internal helpers ──────────────────────────────────────────────────────

    def _lock_for(self, folder_name: str) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(folder_name)
            if lock is None:
                lock = threading.Lock()
                self._locks[folder_name] = lock
            return lock

    def _dispatch(
        self,
        path: str,
        event: str,
        handler: Callable[[WorkspaceState, str], UpdateOutcome],
    ) -> None:
        folder = self.folder_for(path)
        if folder is None:
            logger.warning("File %s: %s outside every workspace folder", event, path)
            return

        with self._lock_for(folder.name):
            state = self._states.get(folder.name)
            if state is not None:
                outcome = handler(state, path)

        if state is None:
            if self._updater.is_config_file(path):
                # a new or fixed config may make a failed folder buildable
                self.build_folder(folder)
                return
            logger.warning("File %s: workspace %s not indexed, dropping %s", event, folder.name, path)
            return

        logger.debug("File %s: %s -> %s", event, path, outcome.value)
        # rebuilds take the folder locks themselves
        if outcome is UpdateOutcome.REBUILD_FOLDER:
            self.build_folder(folder)
        elif outcome is UpdateOutcome.RESET_ALL:
            logger.info("Project config %s %s; rebuilding all workspace folders", path, event)
            self.reset()
