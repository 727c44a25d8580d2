"""spectasks - task dependency and progress engine for spec-driven workflows."""

from .engine import DependencyEngine
from .errors import (
    DocumentMissingError,
    ErrorKind,
    PersistenceError,
    SpecTasksError,
    TaskLineNotFoundError,
    WorkspaceNotLoadedError,
)
from .graph import TaskGraph
from .models import Task, TaskExecutionContext, TaskProgress, TasksByStatus
from .parser import parse_tasks
from .workspace import TaskWorkspace, WorkspaceRegistry
from .writer import StatusWriter

__all__ = [
    "DependencyEngine",
    "DocumentMissingError",
    "ErrorKind",
    "PersistenceError",
    "SpecTasksError",
    "StatusWriter",
    "Task",
    "TaskExecutionContext",
    "TaskGraph",
    "TaskLineNotFoundError",
    "TaskProgress",
    "TaskWorkspace",
    "TasksByStatus",
    "WorkspaceNotLoadedError",
    "WorkspaceRegistry",
    "parse_tasks",
]
