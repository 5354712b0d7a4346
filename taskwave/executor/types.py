from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, TypeAlias


class Status(str, Enum):
    RESOLVED = "resolved"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class Resolved:
    value: Any
    duration_s: float = field(default=0.0, compare=False)
    status: ClassVar[Status] = Status.RESOLVED

    def as_dict(self) -> dict[str, Any]:
        return {"status": self.status.value, "value": self.value}


@dataclass(frozen=True)
class Failed:
    reason: BaseException
    duration_s: float = field(default=0.0, compare=False)
    status: ClassVar[Status] = Status.FAILED

    def as_dict(self) -> dict[str, Any]:
        return {"status": self.status.value, "reason": self.reason}


@dataclass(frozen=True)
class Skipped:
    unresolved_dependencies: frozenset[str]
    status: ClassVar[Status] = Status.SKIPPED

    def as_dict(self) -> dict[str, Any]:
        return {
            "status": self.status.value,
            "unresolved_dependencies": sorted(self.unresolved_dependencies),
        }


Outcome: TypeAlias = Resolved | Failed | Skipped
ResultMap: TypeAlias = dict[str, Outcome]


@dataclass(frozen=True)
class RunSummary:
    order: list[str]
    resolved: list[str]
    failed: list[str]
    skipped: list[str]


class ExecutionError(Exception):
    def __init__(self, *args: object) -> None:
        super().__init__(*args)


class TaskTimeoutError(ExecutionError):
    def __init__(self, task_id: str, timeout_s: float):
        super().__init__(f"Task '{task_id}' timed out after {timeout_s:g}s")
        self.task_id = task_id
        self.timeout_s = timeout_s


class OutcomeConflictError(ExecutionError):
    def __init__(self, task_id: str):
        super().__init__(f"Task '{task_id}' already has a terminal outcome")
        self.task_id = task_id
