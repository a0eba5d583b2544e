"""Module index — which workspace files can be namespace-imported, and how."""

from nsimports.index.module_index import ModuleIndex
from nsimports.index.project_config import ConfigParseError, ProjectConfig
from nsimports.index.registry import ProjectRegistry
from nsimports.index.schema import (
    BuildStats,
    ImportKind,
    ModuleCompletion,
    ModuleRecord,
    Resolution,
    WorkspaceFolder,
)
from nsimports.index.service import CompletionService
from nsimports.index.updater import IncrementalUpdater, UpdateOutcome
from nsimports.index.workspace_indexer import WorkspaceBuildError, WorkspaceIndexer, WorkspaceState

__all__ = [
    "BuildStats",
    "CompletionService",
    "ConfigParseError",
    "ImportKind",
    "IncrementalUpdater",
    "ModuleCompletion",
    "ModuleIndex",
    "ModuleRecord",
    "ProjectConfig",
    "ProjectRegistry",
    "Resolution",
    "UpdateOutcome",
    "WorkspaceBuildError",
    "WorkspaceFolder",
    "WorkspaceIndexer",
    "WorkspaceState",
]
