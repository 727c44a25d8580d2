"""Unit tests for the workflow facade.

This module tests that engine results come back as JSON-ready dicts and
that every failure is reported as a classified error payload.
"""

from unittest.mock import MagicMock

from spectasks.errors import ErrorKind
from spectasks.storage import FileStorage
from spectasks.workflow import TaskWorkflow
from spectasks.workspace import TaskWorkspace


def workflow_for(path, **kwargs):
    return TaskWorkflow(TaskWorkspace(path, **kwargs))


class TestQueries:
    """Test cases for read-only operations."""

    def test_list_tasks_loads_lazily(self, write_tasks, sample_tasks):
        result = workflow_for(write_tasks(sample_tasks)).list_tasks()
        assert [t["id"] for t in result["tasks"]] == ["task-1", "task-2", "task-2.1", "task-2.2", "task-3"]
        assert result["tasks"][2]["context_files"] == ["user.ts", "validation.ts"]

    def test_progress(self, write_tasks, sample_tasks):
        result = workflow_for(write_tasks(sample_tasks)).progress()
        assert result == {"total": 5, "completed": 2, "remaining": 3, "percentage": 40, "all_completed": False}

    def test_tasks_by_status(self, write_tasks, sample_tasks):
        result = workflow_for(write_tasks(sample_tasks)).tasks_by_status()
        assert [t["id"] for t in result["available"]] == ["task-2.1"]
        assert [t["id"] for t in result["blocked"]] == ["task-1", "task-2.2"]
        assert [t["id"] for t in result["completed"]] == ["task-2", "task-3"]

    def test_hierarchy(self, write_tasks, sample_tasks):
        result = workflow_for(write_tasks(sample_tasks)).hierarchy()
        assert result == {"hierarchy": {"task-2": ["task-2.1", "task-2.2"]}}

    def test_next_task(self, write_tasks, sample_tasks):
        result = workflow_for(write_tasks(sample_tasks)).next_task()
        assert result["task"]["id"] == "task-2.1"
        assert result["message"] == "Recommended: task-2.1"

    def test_next_task_when_everything_blocked(self, write_tasks):
        result = workflow_for(write_tasks("- [ ] 1. A\n  - _Depends on: task-9_\n")).next_task()
        assert result["task"] is None
        assert "No available tasks" in result["message"]

    def test_can_execute(self, write_tasks, sample_tasks):
        workflow = workflow_for(write_tasks(sample_tasks))
        result = workflow.can_execute("task-2.2")
        assert result["can_execute"] is False
        assert result["unmet_dependency_ids"] == ["task-2.1"]
        assert result["status"] == "blocked"
        assert workflow.can_execute("task-2.1")["status"] == "available"
        assert workflow.can_execute("task-3")["status"] == "completed"

    def test_task_context(self, write_tasks, sample_tasks):
        workflow = workflow_for(write_tasks(sample_tasks))
        result = workflow.task_context("task-2.1")
        assert result["task"]["id"] == "task-2.1"
        assert result["dependency_status"]["enables"] == ["task-2.2"]
        assert result["available_prompts"]
        assert result["subtasks"] == []
        assert workflow.task_context("task-2")["subtasks"] == ["task-2.1", "task-2.2"]

    def test_unknown_task_ids(self, write_tasks, sample_tasks):
        workflow = workflow_for(write_tasks(sample_tasks))
        for result in (
            workflow.can_execute("task-77"),
            workflow.task_context("task-77"),
            workflow.update_status("task-77", True),
        ):
            assert result["error_kind"] == ErrorKind.UNKNOWN_TASK_ID.value
            assert result["next_suggested_step"] == "list_tasks"

    def test_missing_document(self, tmp_path):
        result = workflow_for(tmp_path / "tasks.md").list_tasks()
        assert result["error_kind"] == ErrorKind.DOCUMENT_MISSING.value
        assert result["document_missing"] is True
        assert result["next_suggested_step"] == "create_tasks_document"


class TestMutations:
    """Test cases for status updates and document creation."""

    def test_update_status(self, write_tasks, sample_tasks):
        path = write_tasks(sample_tasks)
        result = workflow_for(path).update_status("task-2.1", True)

        assert result["updated"] is True
        assert result["task"]["completed"] is True
        assert result["progress"]["completed"] == 3
        assert result["next_task"]["id"] == "task-2.2"
        assert "- [x] 2.1 Create User model" in path.read_text(encoding="utf-8")

    def test_update_status_declined(self, write_tasks, sample_tasks):
        path = write_tasks(sample_tasks)
        result = workflow_for(path, confirm=lambda kind: False).update_status("task-2.1", True)
        assert result["updated"] is False
        assert result["error_kind"] == ErrorKind.CONFIRMATION_DECLINED.value
        assert path.read_text(encoding="utf-8") == sample_tasks

    def test_update_status_persistence_failure(self, write_tasks, sample_tasks):
        storage = FileStorage()
        storage.write_text = MagicMock(side_effect=PermissionError("denied"))
        workflow = workflow_for(write_tasks(sample_tasks), storage=storage)

        result = workflow.update_status("task-2.1", True)

        assert result["error_kind"] == ErrorKind.PERSISTENCE_FAILURE.value
        assert result["next_suggested_step"] == "reload_tasks"
        # memory is ahead of the document until the next reload
        assert workflow.workspace.get_task("task-2.1").completed is True
        workflow.reload()
        assert workflow.workspace.get_task("task-2.1").completed is False

    def test_complete_task_defaults_to_recommendation(self, write_tasks, sample_tasks):
        workflow = workflow_for(write_tasks(sample_tasks))
        first = workflow.complete_task()
        assert first["task"]["id"] == "task-2.1"
        second = workflow.complete_task()
        assert second["task"]["id"] == "task-2.2"
        third = workflow.complete_task()
        assert third["updated"] is False
        assert third["task"] is None

    def test_create_document(self, tmp_path):
        workflow = workflow_for(tmp_path / "feature" / "tasks.md")
        result = workflow.create_document("- [ ] 1. First\n")
        assert result["task_count"] == 1
        again = workflow.create_document()
        assert "already exists" in again["error"]

    def test_reload(self, write_tasks, sample_tasks):
        path = write_tasks(sample_tasks)
        workflow = workflow_for(path)
        workflow.list_tasks()
        path.write_text("- [x] 1. Only\n", encoding="utf-8")
        result = workflow.reload()
        assert result["task_count"] == 1
        assert result["progress"]["percentage"] == 100
        assert result["next_task"] is None
        assert result["load_seconds"] >= 0

    def test_reload_after_document_deleted(self, write_tasks, sample_tasks):
        path = write_tasks(sample_tasks)
        workflow = workflow_for(path)
        workflow.list_tasks()
        path.unlink()

        result = workflow.reload()

        assert result["document_missing"] is True
        assert workflow.workspace.is_loaded is False
        assert workflow.progress()["error_kind"] == ErrorKind.DOCUMENT_MISSING.value
