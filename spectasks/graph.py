"""In-memory task graph built from one parsed document.

The graph is rebuilt wholesale on every load. Only ``Task.completed`` is
ever mutated afterwards, and only by the status writer.
"""

from __future__ import annotations

from typing import Dict, Iterable, Iterator, List, Optional

from .models import Task


class TaskGraph:
    """Tasks keyed by id in document order, plus the parent/child index."""

    def __init__(self, tasks_by_id: Dict[str, Task], hierarchy: Dict[str, List[str]]):
        self._tasks_by_id = tasks_by_id
        self._hierarchy = hierarchy

    @classmethod
    def from_tasks(cls, tasks: Iterable[Task]) -> "TaskGraph":
        """Index *tasks*; the first task seen for an id wins."""
        tasks_by_id: Dict[str, Task] = {}
        for task in tasks:
            tasks_by_id.setdefault(task.id, task)

        hierarchy: Dict[str, List[str]] = {}
        for task in tasks_by_id.values():
            if task.parent_task_id and task.parent_task_id in tasks_by_id:
                hierarchy.setdefault(task.parent_task_id, []).append(task.id)
        return cls(tasks_by_id, hierarchy)

    @classmethod
    def empty(cls) -> "TaskGraph":
        return cls({}, {})

    def __len__(self) -> int:
        return len(self._tasks_by_id)

    def __iter__(self) -> Iterator[Task]:
        return iter(self._tasks_by_id.values())

    def __contains__(self, task_id: object) -> bool:
        return task_id in self._tasks_by_id

    def get(self, task_id: str) -> Optional[Task]:
        return self._tasks_by_id.get(task_id)

    @property
    def tasks(self) -> List[Task]:
        return list(self._tasks_by_id.values())

    @property
    def hierarchy(self) -> Dict[str, List[str]]:
        """Parent id -> direct child ids, children in document order."""
        return {parent: list(children) for parent, children in self._hierarchy.items()}

    def children_of(self, task_id: str) -> List[str]:
        return list(self._hierarchy.get(task_id, []))

    def dependents_of(self, task_id: str) -> List[str]:
        """Ids of other tasks that list *task_id* in their dependencies."""
        return [
            task.id
            for task in self._tasks_by_id.values()
            if task.id != task_id and task_id in task.dependencies
        ]
