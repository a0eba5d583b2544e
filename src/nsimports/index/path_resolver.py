"""PathResolver — decide whether and how a file is importable from a project.

Pure functions over POSIX path strings; nothing here touches the disk.
Resolution order for one (project, file) pair:

  1. ``paths`` aliases, in configuration order, first match wins
  2. ``baseUrl``, if set and the file lives under it, unless the result
     would be reinterpreted by one of the project's own alias patterns
  3. relative import, if the file lives under the project root
  4. otherwise not importable

Import paths never carry the file's extension.  The module name is
derived separately (see ``naming``).
"""

from __future__ import annotations

import logging
import posixpath
import re

from nsimports.index.project_config import UNRESOLVABLE_TARGETS, ProjectConfig
from nsimports.index.schema import DISALLOWED, RELATIVE, ImportKind, Resolution

logger = logging.getLogger(__name__)

WILDCARD = "*"


# ── Path helpers ──────────────────────────────────────────────────────────────


def is_under(path: str, directory: str) -> bool:
    """True if *path* is strictly inside *directory* (segment-aware)."""
    prefix = directory if directory.endswith("/") else directory + "/"
    return path.startswith(prefix)


def is_same_or_under(path: str, directory: str) -> bool:
    return path == directory.rstrip("/") or is_under(path, directory)


def strip_extension(import_path: str, file_path: str) -> str:
    """Drop *file_path*'s extension from the end of *import_path*, if present."""
    _stem, ext = posixpath.splitext(file_path)
    if ext and import_path.endswith(ext):
        return import_path[: -len(ext)]
    return import_path


def relative_import_path(from_file: str, to_file: str) -> str:
    """Render a ``./``-style import of *to_file* from inside *from_file*."""
    rel = posixpath.relpath(to_file, posixpath.dirname(from_file))
    if not rel.startswith(".."):
        rel = "./" + rel
    return strip_extension(rel, to_file)


# ── Alias matching ────────────────────────────────────────────────────────────


def _capture(target: str, candidate: str) -> str | None:
    """Return what the target's wildcard stands for in *candidate*, or None."""
    head, _, tail = target.partition(WILDCARD)
    match = re.fullmatch(re.escape(head) + "(.+)" + re.escape(tail), candidate)
    if match is None:
        return None
    return match.group(1)


def _match_target(pattern: str, target: str, candidate: str) -> str | None:
    """Match one workspace-relative target against *candidate*.

    Returns the alias-side import path (extension not yet stripped).
    """
    pattern_wild = WILDCARD in pattern
    target_wild = WILDCARD in target

    candidate_stem, _ext = posixpath.splitext(candidate)

    if pattern_wild and target_wild:
        captured = _capture(target, candidate)
        if captured is None:
            # targets may omit the extension
            captured = _capture(target, candidate_stem)
        if captured is None:
            return None
        return pattern.replace(WILDCARD, captured, 1)

    if pattern_wild or target_wild:
        # pattern and target must agree on having a wildcard
        return None

    if candidate == target or candidate_stem == target:
        return pattern
    if is_under(candidate, target):
        remainder = candidate[len(target.rstrip("/")) + 1:]
        return pattern.rstrip("/") + "/" + remainder
    return None


def match_alias(project: ProjectConfig, file_path: str, workspace_root: str) -> str | None:
    """Try every ``paths`` entry in order; return the first alias import path."""
    if not project.paths:
        return None

    candidate = posixpath.relpath(file_path, workspace_root)
    base_path = project.base_path

    for pattern, targets in project.paths.items():
        if any(target in UNRESOLVABLE_TARGETS for target in targets):
            continue
        for target in targets:
            resolved = posixpath.normpath(posixpath.join(base_path, target))
            workspace_target = posixpath.relpath(resolved, workspace_root)
            matched = _match_target(pattern, workspace_target, candidate)
            if matched is not None:
                return matched
    return None


# ── baseUrl fallback ──────────────────────────────────────────────────────────


def _alias_prefixes(project: ProjectConfig) -> list[tuple[str, bool]]:
    """(prefix, is_wildcard) for every alias pattern, empty prefixes dropped."""
    result: list[tuple[str, bool]] = []
    for pattern in project.paths or {}:
        if WILDCARD in pattern:
            prefix = pattern.partition(WILDCARD)[0]
            if prefix:
                result.append((prefix, True))
        elif pattern:
            result.append((pattern.rstrip("/"), False))
    return result


def collides_with_alias(project: ProjectConfig, import_path: str) -> bool:
    """True if *import_path* would be read as one of the project's aliases."""
    for prefix, wild in _alias_prefixes(project):
        if wild and import_path.startswith(prefix):
            return True
        if not wild and (import_path == prefix or import_path.startswith(prefix + "/")):
            return True
    return False


def match_base_url(project: ProjectConfig, file_path: str) -> str | None:
    if project.base_url is None:
        return None
    base_path = project.base_path
    if not is_under(file_path, base_path):
        return None
    return strip_extension(posixpath.relpath(file_path, base_path), file_path)


# ── Entry point ───────────────────────────────────────────────────────────────


def resolve(project: ProjectConfig, file_path: str, workspace_root: str) -> Resolution:
    """Resolve *file_path* (absolute) as seen from *project*."""
    aliased = match_alias(project, file_path, workspace_root)
    if aliased is not None:
        return Resolution(ImportKind.BARE, strip_extension(aliased, file_path))

    via_base = match_base_url(project, file_path)
    if via_base is not None:
        if collides_with_alias(project, via_base):
            logger.debug(
                "baseUrl import %r for %s shadows an alias of %s",
                via_base, file_path, project.root,
            )
            return DISALLOWED
        return Resolution(ImportKind.BARE, via_base)

    if is_under(file_path, project.root):
        return RELATIVE

    return DISALLOWED
