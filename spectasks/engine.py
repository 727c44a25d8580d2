"""Dependency and status queries over a loaded task graph.

Every query here is a pure function of the graph; nothing in this module
mutates a task.
"""

from __future__ import annotations

from typing import Dict, List, Optional

from .graph import TaskGraph
from .guidance import DefaultGuidanceProvider, GuidanceProvider
from .models import (
    DependencyStatus,
    SpecPhase,
    Task,
    TaskExecutionContext,
    TaskProgress,
    TasksByStatus,
)


def percentage(completed: int, total: int) -> int:
    """Whole-number percentage rounded half up; 0 for an empty total."""
    if total <= 0:
        return 0
    return (200 * completed + total) // (2 * total)


class DependencyEngine:
    """Read-only queries: executability, progress, partitions, recommendation."""

    def __init__(self, graph: TaskGraph, guidance: Optional[GuidanceProvider] = None):
        self.graph = graph
        self.guidance = guidance or DefaultGuidanceProvider()

    def unmet_dependencies(self, task: Task) -> List[str]:
        """Dependency ids that are missing from the graph or not completed."""
        unmet = []
        for dep_id in task.dependencies:
            dependency = self.graph.get(dep_id)
            # A dangling id never resolves, so the task stays blocked
            if dependency is None or not dependency.completed:
                unmet.append(dep_id)
        return unmet

    def can_execute(self, task_id: str) -> bool:
        task = self.graph.get(task_id)
        if task is None:
            return False
        return not self.unmet_dependencies(task)

    def dependency_status(self, task_id: str) -> DependencyStatus:
        task = self.graph.get(task_id)
        if task is None:
            return DependencyStatus(can_execute=False)
        unmet = self.unmet_dependencies(task)
        return DependencyStatus(
            can_execute=not unmet,
            unmet_dependency_ids=unmet,
            enables=self.graph.dependents_of(task_id),
        )

    def progress(self) -> TaskProgress:
        total = len(self.graph)
        completed = sum(1 for task in self.graph if task.completed)
        return TaskProgress(total=total, completed=completed, percentage=percentage(completed, total))

    def by_status(self) -> TasksByStatus:
        partition = TasksByStatus()
        for task in self.graph:
            if task.completed:
                partition.completed.append(task)
            elif self.can_execute(task.id):
                partition.available.append(task)
            else:
                partition.blocked.append(task)
        return partition

    def hierarchy(self) -> Dict[str, List[str]]:
        return self.graph.hierarchy

    def recommend_next(self) -> Optional[Task]:
        """The available task that unblocks the most others.

        Ties go to the task appearing first in the document.
        """
        available = self.by_status().available
        if not available:
            return None
        # max() keeps the first of equal keys, which is document order
        return max(available, key=lambda task: len(self.graph.dependents_of(task.id)))

    def execution_context(self, task_id: str) -> Optional[TaskExecutionContext]:
        task = self.graph.get(task_id)
        if task is None:
            return None

        dependency_status = self.dependency_status(task_id)
        progress = self.progress()
        help = self.guidance.guidance(
            SpecPhase.EXECUTION,
            {"completed_tasks": progress.completed, "total_tasks": progress.total},
        )
        return TaskExecutionContext(
            task=task,
            dependency_status=dependency_status,
            available_prompts=self.guidance.task_prompts(task),
            next_steps=self.guidance.task_next_steps(task, dependency_status),
            contextual_help=self.guidance.task_help(task, help),
        )
