from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class Task:
    work: Callable[..., Any] | None
    dependencies: Sequence[str] = field(default_factory=tuple)
    timeout_s: float | None = None
    pass_results: bool = False


class GraphError(Exception):
    def __init__(self, *args: object) -> None:
        super().__init__(*args)


class CycleError(GraphError):
    def __init__(self, cycle: list[str]):
        super().__init__("Cycle detected: " + " -> ".join(cycle))
        self.cycle = cycle


class MissingDependencyError(GraphError):
    def __init__(self, task_id: str, missing: Sequence[str]):
        super().__init__(
            f"Task '{task_id}' has unknown dependencies: {', '.join(missing)}"
        )
        self.task_id = task_id
        self.missing = tuple(missing)
