"""Logging and observability utilities for spectasks.

This module provides structured logging, performance monitoring,
and observability hooks for the task dependency engine.
"""

from __future__ import annotations

import json
import time
import logging as std_logging
from contextlib import contextmanager
from datetime import datetime, timezone
from functools import wraps
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union


def setup_logging(log_level: Union[str, int] = std_logging.INFO, log_file: Optional[Path] = None) -> None:
    """Setup structured logging for spectasks."""

    logger = std_logging.getLogger("spectasks")
    logger.setLevel(log_level)

    logger.handlers.clear()

    detailed_formatter = std_logging.Formatter(
        fmt="%(asctime)s - %(name)s - %(levelname)s - %(module)s:%(funcName)s:%(lineno)d - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )

    # MCP stdio transport owns stdout, so the console handler writes to stderr
    console_handler = std_logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(detailed_formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = std_logging.FileHandler(log_file)
        file_handler.setLevel(std_logging.DEBUG)
        file_handler.setFormatter(JsonFormatter())
        logger.addHandler(file_handler)

    logger.info("spectasks logging initialized")


def _utcnow() -> str:
    return datetime.now(timezone.utc).isoformat()


class JsonFormatter(std_logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record: std_logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        if hasattr(record, "extra_fields"):
            log_entry.update(record.extra_fields)

        return json.dumps(log_entry, default=str)


class PerformanceMonitor:
    """Collect duration metrics for engine operations."""

    def __init__(self):
        self.metrics: Dict[str, List[Dict[str, Any]]] = {}

    def record_metric(self, name: str, value: Any, tags: Optional[Dict[str, str]] = None) -> None:
        """Record a performance metric."""
        metric = {
            "timestamp": _utcnow(),
            "name": name,
            "value": value,
            "tags": tags or {}
        }
        self.metrics.setdefault(name, []).append(metric)

        logger = std_logging.getLogger("spectasks.performance")
        logger.debug(f"Metric recorded: {name}={value}", extra={"extra_fields": metric})

    def get_metrics(self, name: Optional[str] = None) -> Dict[str, List[Dict[str, Any]]]:
        """Get recorded metrics."""
        if name:
            return {name: self.metrics.get(name, [])}
        return self.metrics.copy()

    def clear(self) -> None:
        self.metrics.clear()


performance_monitor = PerformanceMonitor()


def _failure_fields(error: Exception) -> Dict[str, Any]:
    return {"status": "error", "error_type": type(error).__name__, "error_message": str(error)}


def log_performance(operation_name: str):
    """Decorator recording a ``<operation>_duration`` metric for every call."""
    metric_name = f"{operation_name}_duration"

    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            logger = std_logging.getLogger("spectasks.performance")
            started = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                duration = time.perf_counter() - started
                performance_monitor.record_metric(
                    metric_name, duration, {"status": "error", "error_type": type(e).__name__}
                )
                logger.error(
                    f"{operation_name} failed after {duration:.3f}s: {e}",
                    extra={"extra_fields": {"operation": operation_name, "duration": duration, **_failure_fields(e)}},
                )
                raise

            duration = time.perf_counter() - started
            performance_monitor.record_metric(metric_name, duration, {"status": "success"})
            logger.debug(
                f"{operation_name} took {duration:.3f}s",
                extra={"extra_fields": {"operation": operation_name, "duration": duration, "status": "success"}},
            )
            return result

        return wrapper
    return decorator


@contextmanager
def log_operation(operation_name: str, **extra_fields):
    """Log the start, completion or failure of a block, tagged with *extra_fields*."""
    logger = std_logging.getLogger("spectasks.operations")
    fields = {"operation": operation_name, **extra_fields}
    logger.debug(f"{operation_name} started", extra={"extra_fields": {**fields, "status": "started"}})

    started = time.perf_counter()
    try:
        yield
    except Exception as e:
        duration = time.perf_counter() - started
        logger.error(
            f"{operation_name} failed after {duration:.3f}s: {e}",
            extra={"extra_fields": {**fields, **_failure_fields(e), "status": "failed", "duration": duration}},
        )
        raise

    duration = time.perf_counter() - started
    logger.info(
        f"{operation_name} completed in {duration:.3f}s",
        extra={"extra_fields": {**fields, "status": "completed", "duration": duration}},
    )


class ObservabilityHooks:
    """Callbacks fired on task lifecycle events (load, status change)."""

    def __init__(self):
        self.hooks: Dict[str, List[Callable[..., Any]]] = {}
        self.logger = std_logging.getLogger("spectasks.observability")

    def register_hook(self, event_type: str, callback: Callable[..., Any]) -> None:
        """Register a callback for a specific event type."""
        self.hooks.setdefault(event_type, []).append(callback)
        self.logger.debug(f"Registered hook for event: {event_type}")

    def unregister_hook(self, event_type: str, callback: Callable[..., Any]) -> None:
        callbacks = self.hooks.get(event_type, [])
        if callback in callbacks:
            callbacks.remove(callback)

    def trigger_hooks(self, event_type: str, **data) -> None:
        """Trigger all callbacks for a specific event type."""
        if event_type in self.hooks:
            self.logger.debug(f"Triggering {len(self.hooks[event_type])} hooks for event: {event_type}")
            for hook in self.hooks[event_type]:
                try:
                    hook(**data)
                except Exception as e:
                    # subscribers never abort the event
                    self.logger.error(f"Hook failed for event {event_type}: {e}")

    def log_workflow_event(self, event_type: str, feature: Optional[str] = None, **data) -> None:
        """Log a workflow event and trigger hooks."""
        event_data = {
            "timestamp": _utcnow(),
            "event_type": event_type,
            "feature": feature,
            **data
        }

        self.logger.info(f"Workflow event: {event_type}", extra={"extra_fields": event_data})

        hook_data = {k: v for k, v in event_data.items() if k != "event_type"}
        self.trigger_hooks(event_type, **hook_data)


observability_hooks = ObservabilityHooks()


def log_error_with_context(error: Exception, context: Dict[str, Any], **extra_fields):
    """Log an error with rich context information."""
    logger = std_logging.getLogger("spectasks.errors")

    error_data = {
        "timestamp": _utcnow(),
        "error_type": type(error).__name__,
        "error_message": str(error),
        "context": context,
        **extra_fields
    }

    logger.error(
        f"Error in {context.get('operation', 'unknown operation')}: {error}",
        extra={"extra_fields": error_data},
        exc_info=error
    )


def log_tasks_loaded(document: str, task_count: int, **extra_fields):
    """Log a completed document load."""
    observability_hooks.log_workflow_event(
        "tasks_loaded",
        document=document,
        task_count=task_count,
        **extra_fields
    )


def log_task_update(task_id: str, old_status: str, new_status: str, **extra_fields):
    """Log a task status transition."""
    observability_hooks.log_workflow_event(
        "task_status_changed",
        task_id=task_id,
        old_status=old_status,
        new_status=new_status,
        **extra_fields
    )
