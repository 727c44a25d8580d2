"""Owned task-graph state for tasks documents.

A :class:`TaskWorkspace` wraps one tasks document and holds the graph
parsed from it. ``load`` always re-parses the whole document and replaces
the graph; there is no incremental update and no file watching. A
:class:`WorkspaceRegistry` keeps one workspace per document and is passed
around explicitly by whoever needs it.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional

from .engine import DependencyEngine
from .errors import WorkspaceNotLoadedError
from .graph import TaskGraph
from .guidance import GuidanceProvider
from .models import Task
from .parser import parse_tasks
from .spectasks_logging import log_operation, log_performance, log_tasks_loaded
from .storage import FileStorage, Storage
from .writer import ConfirmCallback, StatusWriter

logger = logging.getLogger("spectasks.workspace")

DOCUMENT_TEMPLATE = "# Implementation Plan\n\n"


class TaskWorkspace:
    """Load/replace lifecycle around one tasks document."""

    def __init__(
        self,
        document_path: Path | str,
        *,
        storage: Optional[Storage] = None,
        guidance: Optional[GuidanceProvider] = None,
        confirm: Optional[ConfirmCallback] = None,
    ):
        self.document_path = Path(document_path)
        self.storage = storage or FileStorage()
        self.guidance = guidance
        self.confirm = confirm
        self._graph: Optional[TaskGraph] = None
        self._engine: Optional[DependencyEngine] = None
        self._writer: Optional[StatusWriter] = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def exists(self) -> bool:
        return self.storage.exists(self.document_path)

    @log_performance("load_tasks")
    def load(self) -> List[Task]:
        """Read and parse the document, replacing any previously loaded graph.

        Raises :class:`DocumentMissingError` when the document does not exist.
        """
        with log_operation("load_tasks", path=str(self.document_path)):
            text = self.storage.read_text(self.document_path)
            tasks = parse_tasks(text)
            self.replace(tasks)

        log_tasks_loaded(str(self.document_path), len(tasks))
        return tasks

    def replace(self, tasks: Iterable[Task]) -> TaskGraph:
        """Install a new graph built from *tasks*."""
        graph = TaskGraph.from_tasks(tasks)
        self._graph = graph
        self._engine = DependencyEngine(graph, self.guidance)
        self._writer = StatusWriter(graph, self.document_path, self.storage, self.confirm)
        return graph

    def unload(self) -> None:
        self._graph = None
        self._engine = None
        self._writer = None

    @property
    def is_loaded(self) -> bool:
        return self._graph is not None

    def create_document(self, content: Optional[str] = None) -> Path:
        """Write a new tasks document and load it.

        Raises ``FileExistsError`` rather than overwriting an existing one.
        """
        if self.exists():
            raise FileExistsError(f"Tasks document already exists at '{self.document_path}'.")
        self.storage.write_text(self.document_path, content if content is not None else DOCUMENT_TEMPLATE)
        logger.info(f"Created tasks document at {self.document_path}")
        self.load()
        return self.document_path

    # ------------------------------------------------------------------
    # Access
    # ------------------------------------------------------------------

    @property
    def graph(self) -> TaskGraph:
        if self._graph is None:
            raise WorkspaceNotLoadedError(f"Tasks for '{self.document_path}' have not been loaded.")
        return self._graph

    @property
    def engine(self) -> DependencyEngine:
        if self._engine is None:
            raise WorkspaceNotLoadedError(f"Tasks for '{self.document_path}' have not been loaded.")
        return self._engine

    def get_task(self, task_id: str) -> Optional[Task]:
        return self.graph.get(task_id)

    def set_status(self, task_id: str, completed: bool, persist: bool = True) -> bool:
        """See :meth:`StatusWriter.set_status`."""
        if self._writer is None:
            raise WorkspaceNotLoadedError(f"Tasks for '{self.document_path}' have not been loaded.")
        return self._writer.set_status(task_id, completed, persist=persist)


class WorkspaceRegistry:
    """One :class:`TaskWorkspace` per document, keyed by resolved path."""

    def __init__(
        self,
        *,
        storage: Optional[Storage] = None,
        guidance: Optional[GuidanceProvider] = None,
        confirm: Optional[ConfirmCallback] = None,
    ):
        self.storage = storage
        self.guidance = guidance
        self.confirm = confirm
        self._workspaces: Dict[Path, TaskWorkspace] = {}

    def get(self, document_path: Path | str) -> TaskWorkspace:
        """Return the workspace for *document_path*, creating it unloaded."""
        key = Path(document_path).resolve()
        workspace = self._workspaces.get(key)
        if workspace is None:
            workspace = TaskWorkspace(
                key,
                storage=self.storage,
                guidance=self.guidance,
                confirm=self.confirm,
            )
            self._workspaces[key] = workspace
        return workspace

    def __contains__(self, document_path: object) -> bool:
        if not isinstance(document_path, (str, Path)):
            return False
        return Path(document_path).resolve() in self._workspaces

    def __len__(self) -> int:
        return len(self._workspaces)

    def __iter__(self) -> Iterator[TaskWorkspace]:
        return iter(list(self._workspaces.values()))
