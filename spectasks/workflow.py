"""Workflow facade over a task workspace.

This module turns engine results into JSON-ready dicts for the MCP
server. Errors never escape: each one is logged, classified with
:class:`ErrorKind` and returned as an ``error`` payload carrying a
suggestion and the next tool to call.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from .errors import SUGGESTIONS, DocumentMissingError, ErrorKind, classify_error
from .spectasks_logging import log_error_with_context, performance_monitor
from .workspace import TaskWorkspace

logger = logging.getLogger("spectasks.workflow")


def error_payload(
    kind: ErrorKind,
    message: str,
    *,
    next_suggested_step: str,
    **extra: Any,
) -> Dict[str, Any]:
    return {
        "error": message,
        "error_kind": kind.value,
        "suggestion": SUGGESTIONS[kind],
        "next_suggested_step": next_suggested_step,
        **extra,
    }


class TaskWorkflow:
    """Dict-returning operations for one tasks document."""

    def __init__(self, workspace: TaskWorkspace):
        self.workspace = workspace

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _ensure_loaded(self) -> None:
        if not self.workspace.is_loaded:
            self.workspace.load()

    def _failure(self, operation: str, error: Exception, **context: Any) -> Dict[str, Any]:
        kind = classify_error(error)
        log_error_with_context(error, {
            "operation": operation,
            "document": str(self.workspace.document_path),
            **context,
        })
        next_step = {
            ErrorKind.DOCUMENT_MISSING: "create_tasks_document",
            ErrorKind.PERSISTENCE_FAILURE: "reload_tasks",
        }.get(kind, "list_tasks")
        return error_payload(
            kind,
            f"Failed to {operation.replace('_', ' ')}: {error}",
            next_suggested_step=next_step,
            document_missing=kind is ErrorKind.DOCUMENT_MISSING,
        )

    def _unknown_task(self, task_id: str) -> Dict[str, Any]:
        return error_payload(
            ErrorKind.UNKNOWN_TASK_ID,
            f"Task '{task_id}' not found in {self.workspace.document_path}",
            next_suggested_step="list_tasks",
            task_id=task_id,
        )

    def _summary(self) -> Dict[str, Any]:
        engine = self.workspace.engine
        recommended = engine.recommend_next()
        return {
            "progress": engine.progress().to_dict(),
            "next_task": recommended.to_dict() if recommended else None,
        }

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def reload(self) -> Dict[str, Any]:
        try:
            tasks = self.workspace.load()
            timings = performance_monitor.get_metrics("load_tasks_duration")["load_tasks_duration"]
            return {
                "tasks_path": str(self.workspace.document_path),
                "task_count": len(tasks),
                "load_seconds": round(timings[-1]["value"], 6) if timings else None,
                **self._summary(),
            }
        except DocumentMissingError as e:
            # a deleted document must not keep serving its old graph
            self.workspace.unload()
            return self._failure("reload_tasks", e)
        except Exception as e:
            return self._failure("reload_tasks", e)

    def list_tasks(self) -> Dict[str, Any]:
        try:
            self._ensure_loaded()
            return {
                "tasks_path": str(self.workspace.document_path),
                "tasks": [task.to_dict() for task in self.workspace.graph],
            }
        except Exception as e:
            return self._failure("list_tasks", e)

    def progress(self) -> Dict[str, Any]:
        try:
            self._ensure_loaded()
            progress = self.workspace.engine.progress()
            return {**progress.to_dict(), "all_completed": progress.all_completed}
        except Exception as e:
            return self._failure("get_progress", e)

    def tasks_by_status(self) -> Dict[str, Any]:
        try:
            self._ensure_loaded()
            return self.workspace.engine.by_status().to_dict()
        except Exception as e:
            return self._failure("group_tasks", e)

    def hierarchy(self) -> Dict[str, Any]:
        try:
            self._ensure_loaded()
            return {"hierarchy": self.workspace.engine.hierarchy()}
        except Exception as e:
            return self._failure("get_hierarchy", e)

    def next_task(self) -> Dict[str, Any]:
        try:
            self._ensure_loaded()
            summary = self._summary()
            message = (
                f"Recommended: {summary['next_task']['id']}"
                if summary["next_task"]
                else "No available tasks. Everything is completed or blocked."
            )
            return {"task": summary["next_task"], "progress": summary["progress"], "message": message}
        except Exception as e:
            return self._failure("recommend_next_task", e)

    def can_execute(self, task_id: str) -> Dict[str, Any]:
        try:
            self._ensure_loaded()
            if task_id not in self.workspace.graph:
                return self._unknown_task(task_id)
            engine = self.workspace.engine
            status = engine.dependency_status(task_id)
            return {
                "task_id": task_id,
                "status": engine.by_status().status_of(task_id).value,
                **status.to_dict(),
            }
        except Exception as e:
            return self._failure("check_task", e, task_id=task_id)

    def task_context(self, task_id: str) -> Dict[str, Any]:
        try:
            self._ensure_loaded()
            context = self.workspace.engine.execution_context(task_id)
            if context is None:
                return self._unknown_task(task_id)
            return {**context.to_dict(), "subtasks": self.workspace.graph.children_of(task_id)}
        except Exception as e:
            return self._failure("build_task_context", e, task_id=task_id)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def update_status(self, task_id: str, completed: bool, persist: bool = True) -> Dict[str, Any]:
        try:
            self._ensure_loaded()
            if task_id not in self.workspace.graph:
                return self._unknown_task(task_id)

            if not self.workspace.set_status(task_id, completed, persist=persist):
                return {
                    "task_id": task_id,
                    "updated": False,
                    "error_kind": ErrorKind.CONFIRMATION_DECLINED.value,
                    "message": SUGGESTIONS[ErrorKind.CONFIRMATION_DECLINED],
                }

            logger.info(f"Task '{task_id}' set to completed={completed} (persist={persist})")
            return {
                "task": self.workspace.get_task(task_id).to_dict(),
                "updated": True,
                "persisted": persist,
                "tasks_path": str(self.workspace.document_path),
                **self._summary(),
            }
        except Exception as e:
            return self._failure("update_task_status", e, task_id=task_id, completed=completed)

    def complete_task(self, task_id: Optional[str] = None) -> Dict[str, Any]:
        """Complete *task_id*, or the recommended task when omitted."""
        if task_id is None:
            try:
                self._ensure_loaded()
                recommended = self.workspace.engine.recommend_next()
            except Exception as e:
                return self._failure("complete_task", e)
            if recommended is None:
                return {
                    "task": None,
                    "updated": False,
                    "message": "No available tasks to complete.",
                    "next_suggested_step": "tasks_by_status",
                }
            task_id = recommended.id
        return self.update_status(task_id, True)

    def create_document(self, content: Optional[str] = None) -> Dict[str, Any]:
        try:
            path = self.workspace.create_document(content)
            return {
                "tasks_path": str(path),
                "task_count": len(self.workspace.graph),
                "next_suggested_step": "list_tasks",
            }
        except FileExistsError as e:
            return {
                "error": str(e),
                "tasks_path": str(self.workspace.document_path),
                "next_suggested_step": "reload_tasks",
            }
        except Exception as e:
            return self._failure("create_tasks_document", e)
