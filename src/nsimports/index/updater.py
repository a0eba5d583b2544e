"""IncrementalUpdater — apply single file events to a built WorkspaceState.

Each handler runs to completion against the state it is given and reports
what the caller must do next.  Config edits and deletions that remove a
project root cannot be patched in place; the handler says so and leaves
the rebuild to the caller.
"""

from __future__ import annotations

import logging
import posixpath
from enum import Enum

from nsimports.core.config import IndexSettings
from nsimports.index.workspace_indexer import WorkspaceState, make_record

logger = logging.getLogger(__name__)


class UpdateOutcome(str, Enum):
    APPLIED = "applied"
    IGNORED = "ignored"
    REBUILD_FOLDER = "rebuild_folder"   # project topology of this folder changed
    RESET_ALL = "reset_all"             # a project config changed somewhere


class IncrementalUpdater:
    """Patch a WorkspaceState for created, deleted and changed files."""

    def __init__(self, settings: IndexSettings | None = None) -> None:
        self._settings = settings or IndexSettings()

    def is_config_file(self, path: str) -> bool:
        return posixpath.basename(path) == self._settings.config_filename

    # ── Events ────────────────────────────────────────────────────────────────

    def file_created(self, state: WorkspaceState, path: str) -> UpdateOutcome:
        if self.is_config_file(path):
            return UpdateOutcome.RESET_ALL
        if not self._settings.is_source_file(path):
            return UpdateOutcome.IGNORED
        if state.registry.is_excluded(path):
            logger.debug("Skipping created file in dependency or outDir: %s", path)
            return UpdateOutcome.IGNORED

        for project in state.registry:
            record = make_record(project, path, state.folder.root)
            if record is None:
                continue
            index = state.indices[project.root]
            # a create for an already indexed path replaces its record
            index.remove(record)
            index.put(record)

        owner = state.registry.owner_of(path)
        if owner is None:
            logger.warning("No project found for file: %s", path)
            return UpdateOutcome.APPLIED
        state.owners[path] = owner.root
        return UpdateOutcome.APPLIED

    def file_deleted(self, state: WorkspaceState, path: str) -> UpdateOutcome:
        if self._is_directory(state, path):
            return self._directory_deleted(state, path)
        if self.is_config_file(path):
            return UpdateOutcome.RESET_ALL
        if not self._settings.is_source_file(path):
            return UpdateOutcome.IGNORED
        if state.registry.is_excluded(path):
            return UpdateOutcome.IGNORED

        for project in state.registry:
            record = make_record(project, path, state.folder.root)
            if record is not None:
                state.indices[project.root].remove(record)

        state.owners.pop(path, None)
        return UpdateOutcome.APPLIED

    def file_changed(self, state: WorkspaceState, path: str) -> UpdateOutcome:
        """Content edits only matter for project configs."""
        if self.is_config_file(path):
            return UpdateOutcome.RESET_ALL
        return UpdateOutcome.IGNORED

    # ── Internal helpers ──────────────────────────────────────────────────────

    def _is_directory(self, state: WorkspaceState, path: str) -> bool:
        """Delete events do not say whether a directory went away; infer it."""
        if posixpath.splitext(path)[1] == "":
            return True
        directory = path.rstrip("/")
        if state.registry.roots_under(directory):
            return True
        prefix = directory + "/"
        return any(file_path.startswith(prefix) for file_path in state.owners)

    def _directory_deleted(self, state: WorkspaceState, path: str) -> UpdateOutcome:
        directory = path.rstrip("/")
        if state.registry.roots_under(directory):
            logger.info("Deleted %s contained a project root; rebuilding", directory)
            return UpdateOutcome.REBUILD_FOLDER

        removed = 0
        for index in state.indices.values():
            removed += index.remove_under(directory)

        prefix = directory + "/"
        stale = [file_path for file_path in state.owners if file_path.startswith(prefix)]
        for file_path in stale:
            del state.owners[file_path]

        logger.debug("Deleted %s: dropped %d records, %d files", directory, removed, len(stale))
        return UpdateOutcome.APPLIED
