"""Unit tests for the task workspace lifecycle and registry."""

import pytest

from spectasks.errors import DocumentMissingError, WorkspaceNotLoadedError
from spectasks.parser import parse_tasks
from spectasks.workspace import DOCUMENT_TEMPLATE, TaskWorkspace, WorkspaceRegistry


class TestTaskWorkspaceLoading:
    """Test cases for load/replace."""

    def test_load(self, write_tasks, sample_tasks):
        workspace = TaskWorkspace(write_tasks(sample_tasks))
        assert workspace.is_loaded is False

        tasks = workspace.load()

        assert len(tasks) == 5
        assert workspace.is_loaded is True
        assert len(workspace.graph) == 5
        assert workspace.get_task("task-2.2").dependencies == ["task-2.1"]

    def test_queries_before_load(self, tmp_path):
        workspace = TaskWorkspace(tmp_path / "tasks.md")
        with pytest.raises(WorkspaceNotLoadedError):
            workspace.graph
        with pytest.raises(WorkspaceNotLoadedError):
            workspace.engine
        with pytest.raises(WorkspaceNotLoadedError):
            workspace.set_status("task-1", True)

    def test_missing_document(self, tmp_path):
        workspace = TaskWorkspace(tmp_path / "tasks.md")
        assert workspace.exists() is False
        with pytest.raises(DocumentMissingError) as excinfo:
            workspace.load()
        assert isinstance(excinfo.value, FileNotFoundError)
        assert excinfo.value.path == tmp_path / "tasks.md"
        assert workspace.is_loaded is False

    def test_reload_replaces_graph(self, write_tasks, sample_tasks):
        path = write_tasks(sample_tasks)
        workspace = TaskWorkspace(path)
        workspace.load()
        old_graph = workspace.graph

        path.write_text("- [ ] 1. Only task\n", encoding="utf-8")
        workspace.load()

        assert workspace.graph is not old_graph
        assert [t.id for t in workspace.graph] == ["task-1"]
        assert workspace.engine.graph is workspace.graph

    def test_no_automatic_invalidation(self, write_tasks, sample_tasks):
        path = write_tasks(sample_tasks)
        workspace = TaskWorkspace(path)
        workspace.load()
        path.write_text("", encoding="utf-8")
        assert len(workspace.graph) == 5

    def test_replace(self, tmp_path):
        workspace = TaskWorkspace(tmp_path / "tasks.md")
        workspace.replace(parse_tasks("- [x] 1. A\n- [ ] 2. B\n"))
        assert workspace.engine.progress().percentage == 50
        workspace.unload()
        assert workspace.is_loaded is False

    def test_set_status_persists(self, write_tasks, sample_tasks):
        path = write_tasks(sample_tasks)
        workspace = TaskWorkspace(path)
        workspace.load()

        assert workspace.set_status("task-2.1", True) is True
        assert workspace.engine.can_execute("task-2.2") is True

        workspace.load()
        assert workspace.get_task("task-2.1").completed is True


class TestCreateDocument:
    """Test cases for creating a missing document."""

    def test_create_document(self, tmp_path):
        path = tmp_path / ".specs" / "auth" / "tasks.md"
        workspace = TaskWorkspace(path)

        assert workspace.create_document() == path
        assert path.read_text(encoding="utf-8") == DOCUMENT_TEMPLATE
        assert workspace.is_loaded is True
        assert len(workspace.graph) == 0

    def test_create_document_with_content(self, tmp_path):
        workspace = TaskWorkspace(tmp_path / "tasks.md")
        workspace.create_document("- [ ] 1. First\n")
        assert [t.id for t in workspace.graph] == ["task-1"]

    def test_create_document_refuses_overwrite(self, write_tasks, sample_tasks):
        path = write_tasks(sample_tasks)
        with pytest.raises(FileExistsError):
            TaskWorkspace(path).create_document()
        assert path.read_text(encoding="utf-8") == sample_tasks


class TestWorkspaceRegistry:
    """Test cases for the per-document registry."""

    def test_get_returns_same_instance(self, tmp_path):
        registry = WorkspaceRegistry()
        first = registry.get(tmp_path / "tasks.md")
        second = registry.get(str(tmp_path / "." / "tasks.md"))
        assert first is second
        assert len(registry) == 1
        assert tmp_path / "tasks.md" in registry

    def test_separate_documents(self, tmp_path):
        registry = WorkspaceRegistry()
        assert registry.get(tmp_path / "a.md") is not registry.get(tmp_path / "b.md")
        assert len(list(registry)) == 2

    def test_workspaces_start_unloaded(self, write_tasks, sample_tasks):
        path = write_tasks(sample_tasks)
        registry = WorkspaceRegistry()
        workspace = registry.get(path)
        assert workspace.is_loaded is False

        workspace.load()
        assert registry.get(path).is_loaded
        assert 42 not in registry

    def test_collaborators_are_passed_down(self, write_tasks, sample_tasks):
        calls = []

        def confirm(kind):
            calls.append(kind)
            return False

        registry = WorkspaceRegistry(confirm=confirm)
        workspace = registry.get(write_tasks(sample_tasks))
        workspace.load()
        assert workspace.set_status("task-2.1", True) is False
        assert calls == ["complete"]
