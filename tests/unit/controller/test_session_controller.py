"""Session controller behavior against an in-memory backend.

Covers scan lifecycle, preview refresh and clearing, config self-repair,
debounced query and workspace persistence, imports, and clipboard flows.
"""

from __future__ import annotations

import unittest

from filesurfer.backend.analysis import FunctionInfo, ProjectType, TodoItem
from filesurfer.config import Config
from filesurfer.controller import SessionController
from filesurfer.errors import (
    AggregationError,
    AnalysisError,
    ClipboardError,
    ConfigLoadError,
    ExportError,
    GitFallbackError,
    ImportResolutionError,
    ScanError,
)
from filesurfer.preview import AggregationRequest
from filesurfer.selection import TRI_FULL, TRI_NONE, TRI_PARTIAL
from filesurfer.state import STATUS_ERROR, STATUS_INFO, STATUS_SUCCESS
from filesurfer.tree_model import Node, all_leaf_paths
from filesurfer.workspace import WorkspaceSnapshot

ROOT = "/proj"


def _project_tree() -> list[Node]:
    return [
        Node.directory(
            "/proj/docs",
            "docs",
            [Node.file("/proj/docs/readme.md", "readme.md", 20)],
        ),
        Node.directory(
            "/proj/src",
            "src",
            [
                Node.directory("/proj/src/util", "util", [Node.file("/proj/src/util/c.py", "c.py", 5)]),
                Node.file("/proj/src/a.py", "a.py", 10),
                Node.file("/proj/src/b.py", "b.py", 10),
            ],
        ),
        Node.file("/proj/main.go", "main.go", 30),
    ]


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeBackend:
    def __init__(self) -> None:
        self.tree = _project_tree()
        self.scan_error: ScanError | None = None
        self.tracked: list[str] | None = None
        self.config: Config | ConfigLoadError = Config()
        self.saved_configs: list[Config] = []
        self.recent_paths: list[str] = []
        self.workspaces: dict[str, WorkspaceSnapshot] = {}
        self.saved_workspaces: list[WorkspaceSnapshot] = []
        self.aggregate_calls: list[AggregationRequest] = []
        self.aggregate_error: AggregationError | None = None
        self.imports: dict[str, list[str] | ImportResolutionError] = {}
        self.clipboard: list[str] = []
        self.clipboard_error: ClipboardError | None = None
        self.history: list[tuple[str, int, str]] = []
        self.scan_calls: list[tuple[str, list[str]]] = []
        self.project_type: ProjectType | AnalysisError = ProjectType("Python", 2 / 13, ("requirements.txt", "pyproject.toml"))
        self.functions: dict[str, list[FunctionInfo] | AnalysisError] = {}
        self.todos: dict[str, list[TodoItem]] = {}
        self.exported: list[tuple[str, str]] = []
        self.export_error: ExportError | None = None

    async def scan(self, root, ignore_patterns=()):
        self.scan_calls.append((root, list(ignore_patterns)))
        if self.scan_error is not None:
            raise self.scan_error
        return list(self.tree)

    async def git_tracked_files(self, root):
        if self.tracked is None:
            raise GitFallbackError("not a git repository")
        return list(self.tracked)

    async def read_aggregate(self, request):
        self.aggregate_calls.append(request)
        if self.aggregate_error is not None:
            raise self.aggregate_error
        return f"{request.format}:" + "|".join(request.files)

    async def resolve_imports(self, file_path):
        found = self.imports.get(file_path, [])
        if isinstance(found, ImportResolutionError):
            raise found
        return list(found)

    async def detect_project_type(self, root):
        if isinstance(self.project_type, AnalysisError):
            raise self.project_type
        return self.project_type

    async def extract_functions(self, file_path):
        found = self.functions.get(file_path, [])
        if isinstance(found, AnalysisError):
            raise found
        return list(found)

    async def extract_todos(self, file_path):
        return list(self.todos.get(file_path, []))

    async def export_to_file(self, path, content):
        if self.export_error is not None:
            raise self.export_error
        self.exported.append((path, content))

    async def load_config(self):
        if isinstance(self.config, ConfigLoadError):
            raise self.config
        return self.config

    async def save_config(self, config):
        self.saved_configs.append(config)
        self.config = config

    async def add_recent_path(self, path):
        self.recent_paths.insert(0, path)

    async def load_workspace(self, path):
        return self.workspaces.get(path)

    async def save_workspace(self, snapshot):
        self.saved_workspaces.append(snapshot)

    async def copy_to_clipboard(self, content):
        if self.clipboard_error is not None:
            raise self.clipboard_error
        self.clipboard.append(content)

    async def record_clipboard_history(self, content, file_count, output_format):
        self.history.append((content, file_count, output_format))


class ControllerTestCase(unittest.IsolatedAsyncioTestCase):
    def setUp(self) -> None:
        self.backend = FakeBackend()
        self.clock = FakeClock()
        self.controller = SessionController(self.backend, monotonic=self.clock)

    async def open(self) -> bool:
        opened = await self.controller.open_project(ROOT)
        await self.controller.drain()
        return opened


class OpenProjectTests(ControllerTestCase):
    async def test_open_scans_and_reports_file_count(self) -> None:
        self.assertTrue(await self.open())

        state = self.controller.state
        self.assertEqual(state.root, ROOT)
        self.assertEqual(len(all_leaf_paths(state.tree)), 5)
        self.assertIs(state.displayed_tree, state.tree)
        self.assertEqual(state.status.kind, STATUS_SUCCESS)
        self.assertEqual(state.status.message, "Scanned 5 files")
        self.assertEqual(self.backend.recent_paths, [ROOT])
        self.assertEqual(self.backend.aggregate_calls, [])

    async def test_custom_ignore_patterns_reach_scan(self) -> None:
        self.backend.config = Config(custom_ignore_patterns=("*.log",))
        await self.open()
        self.assertEqual(self.backend.scan_calls, [(ROOT, ["*.log"])])

    async def test_scan_error_clears_tree_and_keeps_selection(self) -> None:
        await self.open()
        self.controller.select_all()
        await self.controller.drain()

        self.backend.scan_error = ScanError("Directory does not exist")
        with self.assertLogs("filesurfer.controller", level="WARNING"):
            self.assertFalse(await self.controller.rescan())

        state = self.controller.state
        self.assertEqual(state.tree, ())
        self.assertEqual(state.displayed_tree, ())
        self.assertEqual(len(state.selection), 5)
        self.assertEqual(state.status.kind, STATUS_ERROR)
        self.assertEqual(state.status.message, "Error: Directory does not exist")
        self.assertFalse(state.scanning)

    async def test_git_only_mode_prunes_to_tracked_files(self) -> None:
        self.backend.config = Config(git_only_mode=True)
        self.backend.tracked = ["/proj/src/a.py", "/proj/main.go"]
        await self.open()
        self.assertEqual(all_leaf_paths(self.controller.state.tree), ["/proj/src/a.py", "/proj/main.go"])
        self.assertEqual(self.controller.state.status.message, "Scanned 2 files")

    async def test_git_failure_falls_back_to_full_scan(self) -> None:
        self.backend.config = Config(git_only_mode=True)
        with self.assertLogs("filesurfer.controller", level="WARNING"):
            self.assertTrue(await self.open())
        self.assertEqual(len(all_leaf_paths(self.controller.state.tree)), 5)


class ConfigTests(ControllerTestCase):
    async def test_incomplete_config_is_repaired_and_saved_once(self) -> None:
        self.backend.config = ConfigLoadError("missing field(s): show_token_count", document={"theme": "light"})

        with self.assertLogs("filesurfer.controller", level="WARNING"):
            config = await self.controller.load_config()

        self.assertEqual(config, Config(theme="light"))
        self.assertEqual(self.backend.saved_configs, [Config(theme="light")])
        self.assertEqual(self.controller.state.config, config)

    async def test_unparseable_config_yields_defaults(self) -> None:
        self.backend.config = ConfigLoadError("Failed to parse config")
        with self.assertLogs("filesurfer.controller", level="WARNING"):
            config = await self.controller.load_config()
        self.assertEqual(config, Config())
        self.assertEqual(len(self.backend.saved_configs), 1)

    async def test_stored_output_format_becomes_session_format(self) -> None:
        self.backend.config = Config(output_format="xml")
        await self.controller.load_config()
        self.assertEqual(self.controller.state.output_format, "xml")

    async def test_clear_recent_paths(self) -> None:
        self.backend.config = Config(recent_paths=("/a", "/b"))
        await self.controller.load_config()
        self.assertTrue(await self.controller.clear_recent_paths())
        self.assertEqual(self.controller.state.config.recent_paths, ())

    async def test_unknown_output_format_is_rejected(self) -> None:
        with self.assertRaises(ValueError):
            self.controller.set_output_format("yaml")


class PreviewTests(ControllerTestCase):
    async def test_select_all_then_deselect_all(self) -> None:
        await self.open()

        self.assertEqual(self.controller.select_all(), 5)
        await self.controller.drain()
        self.assertEqual(len(self.backend.aggregate_calls), 1)
        self.assertEqual(
            self.controller.preview_content,
            "markdown:/proj/docs/readme.md|/proj/src/util/c.py|/proj/src/a.py|/proj/src/b.py|/proj/main.go",
        )

        self.controller.deselect_all()
        await self.controller.drain()

        self.assertEqual(len(self.controller.state.selection), 0)
        self.assertEqual(self.controller.preview_content, "")
        self.assertEqual(len(self.backend.aggregate_calls), 1)

    async def test_deselect_discards_in_flight_response(self) -> None:
        await self.open()
        self.controller.select_all()
        self.controller.deselect_all()
        await self.controller.drain()
        self.assertEqual(self.controller.preview_content, "")

    async def test_rapid_toggles_apply_only_latest_selection(self) -> None:
        await self.open()
        self.controller.toggle_selection("/proj/src/a.py")
        self.controller.toggle_selection("/proj/main.go")
        self.controller.toggle_selection("/proj/src")
        await self.controller.drain()

        self.assertEqual(len(self.backend.aggregate_calls), 3)
        self.assertEqual(
            self.controller.preview_content,
            "markdown:/proj/src/util/c.py|/proj/src/a.py|/proj/src/b.py|/proj/main.go",
        )

    async def test_toggle_selection_states(self) -> None:
        await self.open()
        self.controller.toggle_selection("/proj/src/a.py")
        self.assertEqual(self.controller.selection_status("/proj/src"), TRI_PARTIAL)
        self.controller.toggle_selection("/proj/src")
        self.assertEqual(self.controller.selection_status("/proj/src"), TRI_FULL)
        self.controller.toggle_selection("/proj/src")
        self.assertEqual(self.controller.selection_status("/proj/src"), TRI_NONE)
        self.assertFalse(self.controller.toggle_selection("/proj/missing"))
        self.assertEqual(self.controller.selection_status("/proj/missing"), TRI_NONE)
        await self.controller.drain()

    async def test_aggregation_failure_reports_error_and_keeps_preview(self) -> None:
        await self.open()
        self.controller.toggle_selection("/proj/main.go")
        await self.controller.drain()

        self.backend.aggregate_error = AggregationError("boom")
        self.controller.toggle_selection("/proj/src/a.py")
        with self.assertLogs("filesurfer.preview", level="WARNING"):
            await self.controller.drain()

        self.assertEqual(self.controller.preview_content, "markdown:/proj/main.go")
        self.assertEqual(self.controller.state.status.kind, STATUS_ERROR)
        self.assertEqual(self.controller.state.status.message, "Error: boom")

    async def test_output_format_change_refreshes_preview(self) -> None:
        await self.open()
        self.controller.toggle_selection("/proj/main.go")
        self.controller.set_output_format("json")
        await self.controller.drain()
        self.assertEqual(self.controller.preview_content, "json:/proj/main.go")

    async def test_inverse_selection_reports_counts(self) -> None:
        await self.open()
        result = self.controller.apply_inverse_selection("*.md\n\n  src/util/  \n")
        await self.controller.drain()

        self.assertEqual(result.kept, 3)
        self.assertEqual(result.excluded_count, 2)
        self.assertEqual(
            self.controller.state.status.message,
            "Inverse selection: 3 files selected (excluded 2)",
        )
        self.assertEqual(self.controller.preview_content, "markdown:/proj/src/a.py|/proj/src/b.py|/proj/main.go")


class QueryDebounceTests(ControllerTestCase):
    async def test_query_applies_after_quiet_period(self) -> None:
        await self.open()
        self.controller.set_query("a")
        self.controller.set_query("a.p")
        self.assertIs(self.controller.state.displayed_tree, self.controller.state.tree)
        self.assertAlmostEqual(self.controller.next_deadline(), 0.3)

        self.clock.advance(0.2)
        await self.controller.poll()
        self.assertIs(self.controller.state.displayed_tree, self.controller.state.tree)

        self.clock.advance(0.2)
        await self.controller.poll()
        self.assertEqual(all_leaf_paths(self.controller.state.displayed_tree), ["/proj/src/a.py"])
        await self.controller.drain()

    async def test_commit_query_now_skips_debounce(self) -> None:
        await self.open()
        self.controller.set_query("main")
        self.assertTrue(self.controller.commit_query_now())
        self.assertEqual(all_leaf_paths(self.controller.state.displayed_tree), ["/proj/main.go"])

    async def test_select_all_under_filter_selects_displayed_files_only(self) -> None:
        await self.open()
        self.controller.set_extensions(["py"])
        self.assertEqual(self.controller.select_all(), 3)
        self.controller.toggle_extension("py")
        self.assertIs(self.controller.state.displayed_tree, self.controller.state.tree)
        await self.controller.drain()

    async def test_selection_survives_refiltering_and_expansion(self) -> None:
        await self.open()
        state = self.controller.state
        self.controller.set_extensions(["py"])
        self.assertEqual(self.controller.select_all(), 3)
        selected = ["/proj/src/a.py", "/proj/src/b.py", "/proj/src/util/c.py"]

        self.controller.toggle_extension("py")
        self.assertIs(state.displayed_tree, state.tree)
        self.assertEqual(sorted(state.selection.paths()), selected)
        self.assertEqual(self.controller.selection_status("/proj/src"), TRI_FULL)
        self.assertEqual(self.controller.selection_status("/proj/docs"), TRI_NONE)

        self.controller.set_query("util")
        self.clock.advance(0.5)
        await self.controller.poll()
        self.assertEqual(all_leaf_paths(state.displayed_tree), ["/proj/src/util/c.py"])
        self.assertEqual(sorted(state.selection.paths()), selected)
        self.assertEqual(self.controller.selection_status("/proj/src"), TRI_FULL)

        self.assertTrue(self.controller.toggle_expanded("/proj/src"))
        self.assertFalse(self.controller.toggle_expanded("/proj/src"))
        self.assertEqual(sorted(state.selection.paths()), selected)
        self.assertEqual(self.controller.selection_status("/proj/src/util"), TRI_FULL)
        await self.controller.drain()

    async def test_opening_another_project_drops_pending_query(self) -> None:
        await self.open()
        self.controller.set_query("main")
        await self.controller.open_project("/other")

        self.clock.advance(1.0)
        await self.controller.poll()
        await self.controller.drain()

        state = self.controller.state
        self.assertEqual(state.query, "")
        self.assertIs(state.displayed_tree, state.tree)
        self.assertEqual(self.backend.saved_workspaces[0].search_query, "main")


class WorkspaceTests(ControllerTestCase):
    async def test_burst_of_changes_saves_once(self) -> None:
        await self.open()
        for path in ("/proj/src/a.py", "/proj/src/b.py", "/proj/main.go"):
            self.controller.toggle_selection(path)
            self.controller.toggle_expanded("/proj/src")
            self.clock.advance(0.5)
            await self.controller.poll()
        await self.controller.drain()
        self.assertEqual(self.backend.saved_workspaces, [])

        self.clock.advance(1.0)
        await self.controller.poll()
        await self.controller.poll()
        await self.controller.drain()

        self.assertEqual(len(self.backend.saved_workspaces), 1)
        saved = self.backend.saved_workspaces[0]
        self.assertEqual(saved.path, ROOT)
        self.assertEqual(saved.selected_files, ("/proj/src/a.py", "/proj/src/b.py", "/proj/main.go"))
        self.assertEqual(saved.expanded_nodes, ("/proj/src",))

    async def test_restore_applies_non_empty_fields_and_refreshes_preview(self) -> None:
        self.backend.workspaces[ROOT] = WorkspaceSnapshot(
            path=ROOT,
            selected_files=("/proj/main.go", "/proj/docs/readme.md"),
            selected_extensions=(".go", ".md"),
        )
        await self.open()

        state = self.controller.state
        self.assertEqual(state.selection.paths(), ["/proj/main.go", "/proj/docs/readme.md"])
        self.assertEqual(state.query, "")
        self.assertEqual(all_leaf_paths(state.displayed_tree), ["/proj/docs/readme.md", "/proj/main.go"])
        self.assertEqual(self.controller.preview_content, "markdown:/proj/docs/readme.md|/proj/main.go")

    async def test_snapshot_for_other_root_is_ignored(self) -> None:
        self.backend.workspaces[ROOT] = WorkspaceSnapshot(path="/elsewhere", selected_files=("/proj/main.go",))
        await self.open()
        self.assertEqual(len(self.controller.state.selection), 0)
        self.assertEqual(self.backend.aggregate_calls, [])

    async def test_opening_another_project_flushes_pending_save(self) -> None:
        await self.open()
        self.controller.toggle_selection("/proj/main.go")
        await self.controller.open_project("/other")
        await self.controller.drain()

        self.assertEqual(self.backend.saved_workspaces[0].path, ROOT)
        self.assertEqual(self.backend.saved_workspaces[0].selected_files, ("/proj/main.go",))
        self.assertEqual(len(self.controller.state.selection), 0)

    async def test_close_writes_pending_save(self) -> None:
        await self.open()
        self.controller.set_query("src")
        await self.controller.close()
        self.assertEqual(len(self.backend.saved_workspaces), 1)
        self.assertEqual(self.backend.saved_workspaces[0].search_query, "src")


class ImportDetectionTests(ControllerTestCase):
    async def test_detected_imports_are_merged(self) -> None:
        await self.open()
        self.controller.toggle_selection("/proj/src/a.py")
        self.controller.toggle_selection("/proj/main.go")
        self.backend.imports = {
            "/proj/src/a.py": ["/proj/src/b.py", "/proj/src/util/c.py"],
            "/proj/main.go": ImportResolutionError("unreadable"),
        }

        with self.assertLogs("filesurfer.controller", level="WARNING"):
            added = await self.controller.detect_imports()
        await self.controller.drain()

        self.assertEqual(added, ["/proj/src/b.py", "/proj/src/util/c.py"])
        self.assertEqual(self.controller.state.status.message, "Added 2 imported files")
        self.assertIn("/proj/src/util/c.py", self.controller.preview_content)

        self.backend.imports["/proj/main.go"] = []
        self.assertEqual(await self.controller.detect_imports(), [])
        self.assertEqual(self.controller.state.status.kind, STATUS_INFO)
        self.assertEqual(self.controller.state.status.message, "No new imports found")

    async def test_empty_selection_detects_nothing(self) -> None:
        await self.open()
        self.assertEqual(await self.controller.detect_imports(), [])
        self.assertEqual(self.controller.state.status.message, "Scanned 5 files")


class ClipboardTests(ControllerTestCase):
    async def test_copy_records_history(self) -> None:
        await self.open()
        self.controller.select_all()
        await self.controller.drain()

        self.assertTrue(await self.controller.copy_to_clipboard())

        self.assertEqual(self.backend.clipboard, [self.controller.preview_content])
        self.assertEqual(self.backend.history, [(self.controller.preview_content, 5, "markdown")])
        self.assertEqual(self.controller.state.status.message, "Copied 5 files!")

    async def test_copy_with_empty_preview_is_noop(self) -> None:
        await self.open()
        self.assertFalse(await self.controller.copy_to_clipboard())
        self.assertEqual(self.backend.clipboard, [])

    async def test_clipboard_failure_sets_error_status(self) -> None:
        await self.open()
        self.controller.select_all()
        await self.controller.drain()
        self.backend.clipboard_error = ClipboardError("no clipboard")

        self.assertFalse(await self.controller.copy_to_clipboard())
        self.assertEqual(self.controller.state.status.kind, STATUS_ERROR)
        self.assertEqual(self.backend.history, [])


class AnalysisAndExportTests(ControllerTestCase):
    async def test_project_type_comes_from_backend(self) -> None:
        self.assertIsNone(await self.controller.detect_project_type())
        await self.open()
        detected = await self.controller.detect_project_type()
        self.assertEqual(detected.detected_type, "Python")
        self.assertEqual(detected.indicators, ("requirements.txt", "pyproject.toml"))

    async def test_project_type_failure_yields_none(self) -> None:
        await self.open()
        self.backend.project_type = AnalysisError("Not a directory: /proj")
        with self.assertLogs("filesurfer.controller", level="WARNING"):
            self.assertIsNone(await self.controller.detect_project_type())

    async def test_analysis_covers_selected_files_and_skips_failures(self) -> None:
        await self.open()
        self.controller.toggle_selection("/proj/src/a.py")
        self.controller.toggle_selection("/proj/main.go")
        function = FunctionInfo("/proj/src/a.py", "run", "def run():", 1, 2, "def run():\n    pass")
        todo = TodoItem("/proj/src/a.py", "TODO", "cache", 4, "# TODO: cache")
        self.backend.functions = {
            "/proj/src/a.py": [function],
            "/proj/main.go": AnalysisError("unreadable"),
        }
        self.backend.todos = {"/proj/src/a.py": [todo]}

        with self.assertLogs("filesurfer.controller", level="WARNING"):
            analysis = await self.controller.analyze_selection()
        await self.controller.drain()

        self.assertEqual(analysis.functions, (function,))
        self.assertEqual(analysis.todos, (todo,))

    async def test_export_writes_preview(self) -> None:
        await self.open()
        self.assertFalse(await self.controller.export_preview("/tmp/out.md"))
        self.controller.toggle_selection("/proj/main.go")
        await self.controller.drain()

        self.assertTrue(await self.controller.export_preview("/tmp/out.md"))
        self.assertEqual(self.backend.exported, [("/tmp/out.md", "markdown:/proj/main.go")])
        self.assertEqual(self.controller.state.status.message, "Exported to /tmp/out.md")

    async def test_export_failure_sets_error_status(self) -> None:
        await self.open()
        self.controller.toggle_selection("/proj/main.go")
        await self.controller.drain()
        self.backend.export_error = ExportError("Failed to export file: read-only")

        self.assertFalse(await self.controller.export_preview("/ro/out.md"))
        self.assertEqual(self.controller.state.status.kind, STATUS_ERROR)
        self.assertEqual(self.controller.state.status.message, "Error: Failed to export file: read-only")


if __name__ == "__main__":
    unittest.main()
