"""MCP server exposing the spectasks dependency and progress engine."""

from __future__ import annotations

from contextvars import ContextVar
from pathlib import Path
from typing import Any, Dict, List, Optional

from mcp.server.fastmcp import FastMCP

from spectasks.config import Settings
from spectasks.spectasks_logging import setup_logging
from spectasks.workflow import TaskWorkflow
from spectasks.workspace import WorkspaceRegistry

mcp = FastMCP("spectasks")

SETTINGS = Settings.from_env()

_confirmed: ContextVar[bool] = ContextVar("spectasks_confirmed", default=True)


def _confirm(prompt_kind: str) -> bool:
    return _confirmed.get()


registry = WorkspaceRegistry(confirm=_confirm)


def _candidate_bases() -> List[Path]:
    cwd = Path.cwd().resolve()
    return [cwd, *cwd.parents]


def _locate_workspace_root() -> Optional[Path]:
    for base in _candidate_bases():
        if (base / SETTINGS.specs_dir).is_dir():
            return base
    return None


def _resolve_root(root: Optional[str]) -> Path:
    if root:
        resolved = Path(root).expanduser().resolve()
        if not resolved.exists():
            raise ValueError(f"Provided root '{root}' does not exist.")
        return resolved

    if SETTINGS.project_root:
        env_path = SETTINGS.project_root.resolve()
        if not env_path.exists():
            raise ValueError(
                f"Environment variable SPECTASKS_PROJECT_ROOT points to '{SETTINGS.project_root}', which does not exist."
            )
        return env_path

    detected_root = _locate_workspace_root()
    if detected_root:
        return detected_root

    raise ValueError(
        "Unable to determine project root automatically. Provide the 'root' argument when calling the tool "
        "or set the SPECTASKS_PROJECT_ROOT environment variable."
    )


def _workflow(feature: str, root: Optional[str]) -> TaskWorkflow:
    if not feature or not feature.strip():
        raise ValueError("Feature name cannot be empty")
    resolved = _resolve_root(root)
    return TaskWorkflow(registry.get(SETTINGS.tasks_path(resolved, feature.strip())))


@mcp.tool()
def list_tasks(feature: str, root: Optional[str] = None) -> Dict[str, Any]:
    """Return every task of a feature's tasks.md in document order, with requirements, dependencies and context files."""

    return {"feature": feature, **_workflow(feature, root).list_tasks()}


@mcp.tool()
def reload_tasks(feature: str, root: Optional[str] = None) -> Dict[str, Any]:
    """Re-read tasks.md from disk, replacing the cached task graph. Use after editing the file by hand."""

    return {"feature": feature, **_workflow(feature, root).reload()}


@mcp.tool()
def task_progress(feature: str, root: Optional[str] = None) -> Dict[str, Any]:
    """Report total, completed and percentage of tasks done."""

    return {"feature": feature, **_workflow(feature, root).progress()}


@mcp.tool()
def tasks_by_status(feature: str, root: Optional[str] = None) -> Dict[str, Any]:
    """Group tasks into completed, available (dependencies met) and blocked."""

    return {"feature": feature, **_workflow(feature, root).tasks_by_status()}


@mcp.tool()
def task_hierarchy(feature: str, root: Optional[str] = None) -> Dict[str, Any]:
    """Map each parent task id to its sub-task ids (task-2 -> task-2.1, task-2.2)."""

    return {"feature": feature, **_workflow(feature, root).hierarchy()}


@mcp.tool()
def next_task(feature: str, root: Optional[str] = None) -> Dict[str, Any]:
    """Recommend the available task that unblocks the most other tasks."""

    return {"feature": feature, **_workflow(feature, root).next_task()}


@mcp.tool()
def can_execute_task(feature: str, task_id: str, root: Optional[str] = None) -> Dict[str, Any]:
    """Check whether every dependency of a task is completed and list what blocks it."""

    return {"feature": feature, **_workflow(feature, root).can_execute(task_id)}


@mcp.tool()
def task_context(feature: str, task_id: str, root: Optional[str] = None) -> Dict[str, Any]:
    """Build the execution context for a task: dependency status, prompts, next steps and help text."""

    return {"feature": feature, **_workflow(feature, root).task_context(task_id)}


@mcp.tool()
def update_task_status(
    feature: str,
    task_id: str,
    completed: bool,
    persist: bool = True,
    confirm: bool = False,
    root: Optional[str] = None,
) -> Dict[str, Any]:
    """Mark a task complete or reopen it, rewriting only its checkbox in tasks.md.

    When the server runs with SPECTASKS_CONFIRM_COMPLETION enabled, pass confirm=true to apply the change.
    Set persist=false for a dry run that only updates the cached graph."""

    token = _confirmed.set(confirm or not SETTINGS.confirm_completion)
    try:
        return {"feature": feature, **_workflow(feature, root).update_status(task_id, completed, persist=persist)}
    finally:
        _confirmed.reset(token)


@mcp.tool()
def complete_task(
    feature: str,
    task_id: Optional[str] = None,
    confirm: bool = False,
    root: Optional[str] = None,
) -> Dict[str, Any]:
    """Mark a task complete; defaults to the recommended next task when task_id is omitted."""

    token = _confirmed.set(confirm or not SETTINGS.confirm_completion)
    try:
        return {"feature": feature, **_workflow(feature, root).complete_task(task_id)}
    finally:
        _confirmed.reset(token)


@mcp.tool()
def create_tasks_document(feature: str, content: Optional[str] = None, root: Optional[str] = None) -> Dict[str, Any]:
    """Create tasks.md for a feature that has none yet. Never overwrites an existing document."""

    return {"feature": feature, **_workflow(feature, root).create_document(content)}


@mcp.resource("spectasks://features")
def resource_features() -> str:
    """Resource view listing features that have a tasks document, with progress."""

    try:
        root = _resolve_root(None)
    except ValueError:
        return "No project root detected. Launch tools with a 'root' argument or set SPECTASKS_PROJECT_ROOT."

    specs_dir = root / SETTINGS.specs_dir
    features = sorted(path.parent.name for path in specs_dir.glob(f"*/{SETTINGS.tasks_file}") if path.is_file())
    if not features:
        return "No features with a tasks document yet."

    lines = ["spectasks features"]
    for feature in features:
        progress = _workflow(feature, str(root)).progress()
        lines.append("")
        if "error" in progress:
            lines.append(f"- {feature}: {progress['error']}")
            continue
        lines.append(f"- {feature}: {progress['completed']}/{progress['total']} tasks ({progress['percentage']}%)")
        lines.append(f"  Tasks: {SETTINGS.tasks_path(root, feature)}")

    return "\n".join(lines)


if __name__ == "__main__":
    setup_logging(SETTINGS.log_level, SETTINGS.log_file)
    mcp.run(transport="stdio")
