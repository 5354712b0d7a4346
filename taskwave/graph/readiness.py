from __future__ import annotations

from collections.abc import Iterable

from .dag import TaskGraph


class ReadinessTracker:
    """Tracks which tasks may start as their dependencies reach a terminal outcome.

    Only dependencies present in the graph are counted. A missing dependency
    can never complete, so it is treated as already terminal (and unresolved):
    the dependent becomes ready and the runner skips it citing the missing id.

    Tasks in a cycle, and everything downstream of one, never reach a zero
    count; once no wave is in flight they are reported by ``stalled()``.
    """

    def __init__(self, graph: TaskGraph) -> None:
        self._graph = graph
        self._remaining: dict[str, int] = {}
        self._dependents: dict[str, list[str]] = {tid: [] for tid in graph.task_ids()}
        self._pending: set[str] = set(graph.task_ids())
        self._terminal: set[str] = set()

        for tid in graph.task_ids():
            present = [dep for dep in graph.dependencies(tid) if dep in graph]
            self._remaining[tid] = len(present)
            for dep in present:
                self._dependents[dep].append(tid)

    def initial(self) -> list[str]:
        return sorted(tid for tid in self._pending if self._remaining[tid] == 0)

    def complete(self, task_ids: Iterable[str]) -> list[str]:
        ready: list[str] = []
        for tid in task_ids:
            if tid in self._terminal:
                continue
            self._terminal.add(tid)
            self._pending.discard(tid)
            for dependent in self._dependents[tid]:
                self._remaining[dependent] -= 1
                if self._remaining[dependent] == 0 and dependent in self._pending:
                    ready.append(dependent)
        return sorted(ready)

    def is_terminal(self, task_id: str) -> bool:
        return task_id in self._terminal

    def stalled(self) -> list[str]:
        return sorted(self._pending)
