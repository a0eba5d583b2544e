"""ModuleIndex — one project's importable modules, bucketed by first character.

A bucket holds every record whose module name starts with its key, in
insertion order.  Removal filters by file path rather than by object
identity, so a freshly resolved record removes the one stored earlier.
"""

from __future__ import annotations

from collections.abc import Iterator

from nsimports.index.schema import ModuleRecord


class ModuleIndex:
    """Prefix-bucketed ModuleRecord store for a single project."""

    def __init__(self, records: list[ModuleRecord] | None = None) -> None:
        self._buckets: dict[str, list[ModuleRecord]] = {}
        for record in records or []:
            self.put(record)

    def put(self, record: ModuleRecord) -> None:
        """Append *record* to its bucket.  Callers must not put a file twice."""
        self._buckets.setdefault(record.prefix, []).append(record)

    def remove(self, record: ModuleRecord) -> None:
        """Drop every record for ``record.file_path`` from its bucket."""
        key = record.prefix
        bucket = self._buckets.get(key)
        if bucket is None:
            return
        self._buckets[key] = [r for r in bucket if r.file_path != record.file_path]

    def remove_under(self, directory: str) -> int:
        """Drop records whose file lives in *directory*.  Returns the count removed."""
        prefix = directory if directory.endswith("/") else directory + "/"
        removed = 0
        for key, bucket in list(self._buckets.items()):
            kept = [r for r in bucket if not r.file_path.startswith(prefix)]
            removed += len(bucket) - len(kept)
            self._buckets[key] = kept
        return removed

    def get(self, prefix: str) -> list[ModuleRecord]:
        """Return the bucket for *prefix*; empty list if absent."""
        return list(self._buckets.get(prefix, []))

    def __iter__(self) -> Iterator[ModuleRecord]:
        for bucket in list(self._buckets.values()):
            yield from bucket

    def __len__(self) -> int:
        return sum(len(bucket) for bucket in self._buckets.values())

    def file_paths(self) -> set[str]:
        return {record.file_path for record in self}
