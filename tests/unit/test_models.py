"""Unit tests for spectasks data models."""

import json

from spectasks.models import (
    ContextualHelp,
    DependencyStatus,
    GuidanceStep,
    SpecPhase,
    Task,
    TaskExecutionContext,
    TaskProgress,
    TasksByStatus,
)


def make_task(**overrides):
    fields = {"id": "task-1", "number": "1", "title": "Set up", "completed": False}
    fields.update(overrides)
    return Task(**fields)


class TestTask:
    """Test cases for Task."""

    def test_defaults(self):
        task = make_task()
        assert task.description_lines == []
        assert task.requirements == []
        assert task.dependencies == []
        assert task.context_files == []
        assert task.parent_task_id is None
        assert task.line_index == -1
        assert task.status_label == "not_started"

    def test_to_dict_copies_lists(self):
        task = make_task(dependencies=["task-0"], completed=True)
        data = task.to_dict()
        data["dependencies"].append("task-9")
        assert task.dependencies == ["task-0"]
        assert data["completed"] is True
        assert task.status_label == "completed"
        json.dumps(data)


class TestTaskProgress:
    """Test cases for TaskProgress."""

    def test_to_dict(self):
        progress = TaskProgress(total=4, completed=4, percentage=100)
        assert progress.to_dict() == {"total": 4, "completed": 4, "remaining": 0, "percentage": 100}
        assert progress.all_completed is True

    def test_empty_is_not_all_completed(self):
        assert TaskProgress().all_completed is False


class TestSerialization:
    """Test cases for nested to_dict conversions."""

    def test_tasks_by_status(self):
        groups = TasksByStatus(completed=[make_task(completed=True)])
        assert groups.to_dict()["completed"][0]["id"] == "task-1"
        assert groups.to_dict()["available"] == []

    def test_execution_context(self):
        context = TaskExecutionContext(
            task=make_task(),
            dependency_status=DependencyStatus(can_execute=False, unmet_dependency_ids=["task-0"]),
            available_prompts=["Execute task: Set up"],
        )
        data = context.to_dict()
        assert data["dependency_status"] == {
            "can_execute": False,
            "unmet_dependency_ids": ["task-0"],
            "enables": [],
        }
        assert data["contextual_help"] == ""
        json.dumps(data)

    def test_contextual_help(self):
        help = ContextualHelp(
            phase=SpecPhase.EXECUTION,
            steps=[GuidanceStep(id="run-tests", title="Run Tests", description="Verify")],
            tips=["Focus"],
        )
        data = help.to_dict()
        assert data["phase"] == "execution"
        assert data["steps"][0]["priority"] == "medium"
        assert data["tips"] == ["Focus"]
