"""Tests for WorkspaceIndexer — full folder builds."""

from __future__ import annotations

import logging

import pytest

from nsimports.core.config import IndexSettings
from nsimports.index.project_config import ConfigParseError
from nsimports.index.schema import ImportKind
from nsimports.index.workspace_indexer import WorkspaceBuildError, WorkspaceIndexer

ALIASED = {"compilerOptions": {"paths": {"@/*": ["src/*"]}, "outDir": "dist"}}


def _build(ws, settings: IndexSettings | None = None):
    return WorkspaceIndexer(ws, ws, settings).build(ws.folder)


# ── Single project ────────────────────────────────────────────────────────────


class TestSingleProject:
    @pytest.fixture
    def ws(self, memory_workspace):
        return memory_workspace(
            {"tsconfig.json": ALIASED},
            [
                "src/foo_bar.ts",
                "src/main.ts",
                "lib/baz.ts",
                "dist/foo_bar.ts",
                "node_modules/pkg/index.ts",
                "README.md",
                "src/___.ts",
            ],
        )

    def test_records(self, ws) -> None:
        state = _build(ws)
        index = state.index_for("/ws")
        assert index is not None
        foo = index.get("f")
        assert [(r.module_name, r.kind, r.import_path) for r in foo] == [
            ("fooBar", ImportKind.BARE, "@/foo_bar")
        ]
        baz = index.get("b")
        assert [(r.module_name, r.kind, r.import_path) for r in baz] == [
            ("baz", ImportKind.RELATIVE, None)
        ]

    def test_excluded_and_unnamed_files_not_indexed(self, ws) -> None:
        state = _build(ws)
        assert state.indices["/ws"].file_paths() == {
            "/ws/src/foo_bar.ts", "/ws/src/main.ts", "/ws/lib/baz.ts",
        }

    def test_owners(self, ws) -> None:
        state = _build(ws)
        assert state.owners["/ws/lib/baz.ts"] == "/ws"
        assert "/ws/dist/foo_bar.ts" not in state.owners

    def test_stats(self, ws) -> None:
        stats = _build(ws).stats()
        assert stats.folder == "ws"
        assert stats.total_projects == 1
        assert stats.total_records == 3
        assert stats.records_by_project == {"/ws": 3}

    def test_custom_extensions(self, memory_workspace) -> None:
        ws = memory_workspace({"tsconfig.json": {}}, ["a.ts", "b.tsx", "c.mts"])
        state = _build(ws, IndexSettings(source_extensions=[".ts", ".mts"]))
        assert state.indices["/ws"].file_paths() == {"/ws/a.ts", "/ws/c.mts"}


# ── Nested projects ───────────────────────────────────────────────────────────


class TestNestedProjects:
    @pytest.fixture
    def ws(self, memory_workspace):
        return memory_workspace(
            {
                "tsconfig.json": {},
                "packages/app/tsconfig.json": {
                    "compilerOptions": {"paths": {"@/*": ["src/*"]}, "outDir": "build"}
                },
                "node_modules/dep/tsconfig.json": {},
            },
            [
                "packages/app/src/app_main.ts",
                "packages/app/build/app_main.ts",
                "shared/util.ts",
            ],
        )

    def test_registry_deepest_first(self, ws) -> None:
        state = _build(ws)
        assert [p.root for p in state.registry] == ["/ws/packages/app", "/ws"]

    def test_each_project_sees_its_own_view(self, ws) -> None:
        state = _build(ws)
        app = state.indices["/ws/packages/app"].get("a")
        assert [(r.kind, r.import_path) for r in app] == [(ImportKind.BARE, "@/app_main")]
        assert state.indices["/ws/packages/app"].get("u") == []

        root = state.indices["/ws"]
        assert {r.file_path for r in root} == {
            "/ws/packages/app/src/app_main.ts", "/ws/shared/util.ts",
        }
        assert all(r.kind is ImportKind.RELATIVE for r in root)

    def test_nested_out_dir_excluded_everywhere(self, ws) -> None:
        state = _build(ws)
        for index in state.indices.values():
            assert "/ws/packages/app/build/app_main.ts" not in index.file_paths()

    def test_owner_is_deepest_project(self, ws) -> None:
        state = _build(ws)
        assert state.owners["/ws/packages/app/src/app_main.ts"] == "/ws/packages/app"
        assert state.owners["/ws/shared/util.ts"] == "/ws"


# ── Failures ──────────────────────────────────────────────────────────────────


class TestFailures:
    def test_bad_config_skipped(self, memory_workspace, caplog) -> None:
        ws = memory_workspace(
            {"tsconfig.json": {}, "bad/tsconfig.json": ConfigParseError("boom")},
            ["bad/x.ts"],
        )
        with caplog.at_level(logging.ERROR):
            state = _build(ws)
        assert [p.root for p in state.registry] == ["/ws"]
        assert "/ws/bad/tsconfig.json" in caplog.text

    def test_unreadable_config_skipped(self, memory_workspace) -> None:
        ws = memory_workspace({"tsconfig.json": OSError("gone")}, ["x.ts"])
        state = _build(ws)
        assert len(state.registry) == 0
        assert state.owners == {}

    def test_discovery_failure(self, memory_workspace) -> None:
        ws = memory_workspace({"tsconfig.json": {}}, ["x.ts"])
        ws.fail_discovery = True
        with pytest.raises(WorkspaceBuildError):
            _build(ws)

    def test_listing_failure(self, memory_workspace) -> None:
        ws = memory_workspace({"tsconfig.json": {}}, ["x.ts"])
        ws.fail_listing = True
        with pytest.raises(WorkspaceBuildError):
            _build(ws)

    def test_no_projects(self, memory_workspace) -> None:
        state = _build(memory_workspace({}, ["x.ts"]))
        assert state.indices == {}
        assert state.stats().total_records == 0


# ── Build output inside alias targets ─────────────────────────────────────────


class TestOutDirInsideAliasTarget:
    def test_root_wildcard_alias(self, memory_workspace) -> None:
        ws = memory_workspace(
            {"tsconfig.json": {"compilerOptions": {"paths": {"@/*": ["*"]}, "outDir": "dist"}}},
            ["api.ts", "dist/api.ts", "dist/nested/util.ts"],
        )
        state = _build(ws)
        assert state.indices["/ws"].file_paths() == {"/ws/api.ts"}
        assert [r.import_path for r in state.indices["/ws"]] == ["@/api"]

    def test_out_dir_under_alias_target(self, memory_workspace) -> None:
        ws = memory_workspace(
            {"tsconfig.json": {"compilerOptions": {"paths": {"@/*": ["src/*"]}, "outDir": "src/gen"}}},
            ["src/api.ts", "src/gen/api.ts", "src/generator.ts"],
        )
        state = _build(ws)
        assert state.indices["/ws"].file_paths() == {"/ws/src/api.ts", "/ws/src/generator.ts"}
        assert "/ws/src/gen/api.ts" not in state.owners

    def test_other_projects_alias_into_out_dir(self, memory_workspace) -> None:
        ws = memory_workspace(
            {
                "lib/tsconfig.json": {"compilerOptions": {"outDir": "out"}},
                "app/tsconfig.json": {"compilerOptions": {"paths": {"@lib/*": ["../lib/*"]}}},
            },
            ["lib/util.ts", "lib/out/util.ts", "app/main.ts"],
        )
        state = _build(ws)
        app = state.indices["/ws/app"]
        assert [(r.file_path, r.import_path) for r in app.get("u")] == [("/ws/lib/util.ts", "@lib/util")]
        assert "/ws/lib/out/util.ts" not in state.indices["/ws/lib"].file_paths()
