from .config import ConfigError, RunSettings, load_settings
from .executor import (
    Executor,
    Failed,
    Outcome,
    Resolved,
    ResultMap,
    Skipped,
    Status,
    TaskTimeoutError,
    exit_code,
    run_tasks,
    run_tasks_async,
    summarize,
)
from .graph import CycleError, GraphError, MissingDependencyError, Task, TaskGraph

__all__ = [
    "run_tasks",
    "run_tasks_async",
    "Executor",
    "Task",
    "TaskGraph",
    "Resolved",
    "Failed",
    "Skipped",
    "Outcome",
    "ResultMap",
    "Status",
    "summarize",
    "exit_code",
    "RunSettings",
    "load_settings",
    "ConfigError",
    "GraphError",
    "CycleError",
    "MissingDependencyError",
    "TaskTimeoutError",
]
