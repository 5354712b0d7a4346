from .executor import Executor, run_tasks, run_tasks_async
from .results import ResultStore, exit_code, summarize
from .runner import run_task
from .types import (
    ExecutionError,
    Failed,
    Outcome,
    OutcomeConflictError,
    Resolved,
    ResultMap,
    RunSummary,
    Skipped,
    Status,
    TaskTimeoutError,
)

__all__ = [
    "Executor",
    "run_tasks",
    "run_tasks_async",
    "run_task",
    "ResultStore",
    "summarize",
    "exit_code",
    "Resolved",
    "Failed",
    "Skipped",
    "Outcome",
    "ResultMap",
    "RunSummary",
    "Status",
    "ExecutionError",
    "TaskTimeoutError",
    "OutcomeConflictError",
]
