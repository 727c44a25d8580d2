"""Data models for the task dependency engine.

This module contains the records shared by the parser, the graph store,
the dependency engine and the status writer: tasks parsed from a
``tasks.md`` checklist and the derived progress, status and execution
context views built on top of them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class SpecPhase(str, Enum):
    """Phases of the spec-driven workflow."""

    REQUIREMENTS = "requirements"
    DESIGN = "design"
    TASKS = "tasks"
    EXECUTION = "execution"


class TaskStatus(str, Enum):
    COMPLETED = "completed"
    AVAILABLE = "available"
    BLOCKED = "blocked"


@dataclass(slots=True)
class Task:
    """Representation of a single tasks.md checklist entry."""

    id: str
    number: str
    title: str
    completed: bool
    description_lines: List[str] = field(default_factory=list)
    requirements: List[str] = field(default_factory=list)
    dependencies: List[str] = field(default_factory=list)
    context_files: List[str] = field(default_factory=list)
    parent_task_id: Optional[str] = None
    line_index: int = -1

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "id": self.id,
            "number": self.number,
            "title": self.title,
            "completed": self.completed,
            "description_lines": list(self.description_lines),
            "requirements": list(self.requirements),
            "dependencies": list(self.dependencies),
            "context_files": list(self.context_files),
            "parent_task_id": self.parent_task_id,
            "line_index": self.line_index,
        }

    @property
    def status_label(self) -> str:
        return "completed" if self.completed else "not_started"


@dataclass(slots=True)
class TaskProgress:
    """Completion counts over a loaded task graph."""

    total: int = 0
    completed: int = 0
    percentage: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            "total": self.total,
            "completed": self.completed,
            "remaining": self.remaining,
            "percentage": self.percentage,
        }

    @property
    def remaining(self) -> int:
        return self.total - self.completed

    @property
    def all_completed(self) -> bool:
        return self.total > 0 and self.completed == self.total


@dataclass(slots=True)
class TasksByStatus:
    """Disjoint partition of every task into completed/available/blocked."""

    completed: List[Task] = field(default_factory=list)
    available: List[Task] = field(default_factory=list)
    blocked: List[Task] = field(default_factory=list)

    def to_dict(self) -> Dict[str, List[Dict[str, Any]]]:
        return {
            "completed": [task.to_dict() for task in self.completed],
            "available": [task.to_dict() for task in self.available],
            "blocked": [task.to_dict() for task in self.blocked],
        }

    def status_of(self, task_id: str) -> Optional[TaskStatus]:
        """Return which partition holds *task_id*, if any."""
        for status, tasks in (
            (TaskStatus.COMPLETED, self.completed),
            (TaskStatus.AVAILABLE, self.available),
            (TaskStatus.BLOCKED, self.blocked),
        ):
            if any(task.id == task_id for task in tasks):
                return status
        return None


@dataclass(slots=True)
class DependencyStatus:
    """Whether a task can run, and what blocks or depends on it."""

    can_execute: bool
    unmet_dependency_ids: List[str] = field(default_factory=list)
    enables: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "can_execute": self.can_execute,
            "unmet_dependency_ids": list(self.unmet_dependency_ids),
            "enables": list(self.enables),
        }


@dataclass(slots=True)
class GuidanceStep:
    id: str
    title: str
    description: str
    priority: str = "medium"  # 'high', 'medium', 'low'
    category: str = "suggestion"  # 'next-step', 'suggestion', 'warning', 'tip'

    def to_dict(self) -> Dict[str, str]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "priority": self.priority,
            "category": self.category,
        }


@dataclass(slots=True)
class ContextualHelp:
    """Phase guidance produced by a guidance provider."""

    phase: SpecPhase
    steps: List[GuidanceStep] = field(default_factory=list)
    tips: List[str] = field(default_factory=list)
    common_issues: List[Dict[str, str]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "phase": self.phase.value,
            "steps": [step.to_dict() for step in self.steps],
            "tips": list(self.tips),
            "common_issues": [dict(issue) for issue in self.common_issues],
        }


@dataclass(slots=True)
class TaskExecutionContext:
    """Everything needed to start working on one task."""

    task: Task
    dependency_status: DependencyStatus
    available_prompts: List[str] = field(default_factory=list)
    next_steps: List[str] = field(default_factory=list)
    contextual_help: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "task": self.task.to_dict(),
            "dependency_status": self.dependency_status.to_dict(),
            "available_prompts": list(self.available_prompts),
            "next_steps": list(self.next_steps),
            "contextual_help": self.contextual_help,
        }
