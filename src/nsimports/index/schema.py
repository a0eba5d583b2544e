"""Immutable dataclass models for the module index."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class ImportKind(str, Enum):
    """How a file can be imported from a given project."""

    BARE = "bare"              # alias- or baseUrl-resolved, e.g. '@/foo'
    RELATIVE = "relative"      # './foo', computed against the asking file
    DISALLOWED = "disallowed"  # not importable from this project


# ── Dataclass models ──────────────────────────────────────────────────────────

@dataclass(frozen=True)
class WorkspaceFolder:
    """A top-level folder opened in the host editor."""

    name: str
    root: str           # absolute POSIX path, no trailing slash


@dataclass(frozen=True)
class Resolution:
    """Outcome of resolving one file against one project."""

    kind: ImportKind
    import_path: str | None = None   # set only for BARE

    @property
    def importable(self) -> bool:
        return self.kind is not ImportKind.DISALLOWED


DISALLOWED = Resolution(ImportKind.DISALLOWED)
RELATIVE = Resolution(ImportKind.RELATIVE)


@dataclass(frozen=True)
class ModuleRecord:
    """One importable module as seen from one project.

    ``file_path`` is the identity of a record within a project's index;
    two records for the same file in the same index never coexist.
    """

    module_name: str
    file_path: str      # absolute POSIX path of the source file
    kind: ImportKind
    import_path: str | None = None   # None for RELATIVE, rendered at query time

    @property
    def prefix(self) -> str:
        return self.module_name[:1]


@dataclass(frozen=True)
class ModuleCompletion:
    """A completion candidate returned to the caller."""

    module_name: str
    import_path: str

    def import_statement(self) -> str:
        return f"import * as {self.module_name} from '{self.import_path}';"


@dataclass(frozen=True)
class BuildStats:
    """Snapshot statistics of one workspace folder's state."""

    folder: str
    total_projects: int
    total_files: int
    total_records: int
    records_by_project: dict[str, int] = field(default_factory=dict)
