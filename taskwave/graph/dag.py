from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any

from .types import CycleError, GraphError, MissingDependencyError, Task

logger = logging.getLogger(__name__)


class _Visit(Enum):
    UNVISITED = auto()
    VISITING = auto()
    VISITED = auto()


def _dedupe(deps: Iterable[str]) -> tuple[str, ...]:
    out: list[str] = []
    seen: set[str] = set()
    for dep in deps:
        # Duplicates count once, first occurrence wins
        if dep in seen:
            continue
        out.append(dep)
        seen.add(dep)
    return tuple(out)


def _coerce_task(definition: Any) -> Task:
    if isinstance(definition, Task):
        return definition

    if isinstance(definition, Mapping):
        work = definition.get("work", definition.get("task"))
        deps = definition.get("dependencies", definition.get("deps", ()))
        return Task(
            work=work,
            dependencies=tuple(deps or ()),
            timeout_s=definition.get("timeout_s"),
            pass_results=bool(definition.get("pass_results", False)),
        )

    # A bare callable is a task without dependencies
    return Task(work=definition)


@dataclass(frozen=True)
class TaskGraph:
    tasks: dict[str, Task]
    _deps: dict[str, tuple[str, ...]]

    @classmethod
    def from_tasks(cls, tasks: Mapping[str, Any]) -> TaskGraph:
        built: dict[str, Task] = {}
        deps: dict[str, tuple[str, ...]] = {}
        for task_id, definition in tasks.items():
            task = _coerce_task(definition)
            built[task_id] = task
            deps[task_id] = _dedupe(task.dependencies)

        return cls(built, deps)

    def __len__(self) -> int:
        return len(self._deps)

    def __contains__(self, task_id: object) -> bool:
        return task_id in self._deps

    def task_ids(self) -> list[str]:
        return sorted(self._deps)

    def get_task(self, task_id: str) -> Task:
        return self.tasks[task_id]

    def dependencies(self, task_id: str) -> tuple[str, ...]:
        return self._deps[task_id]

    def dependents(self, task_id: str) -> list[str]:
        return sorted(tid for tid, deps in self._deps.items() if task_id in deps)

    def missing_dependencies(self) -> dict[str, tuple[str, ...]]:
        missing: dict[str, tuple[str, ...]] = {}
        for tid in self.task_ids():
            absent = tuple(dep for dep in self._deps[tid] if dep not in self._deps)
            if absent:
                missing[tid] = absent
        return missing

    def find_cycles(self) -> list[list[str]]:
        """Return every back edge found by a deterministic DFS as a closed path.

        Each cycle is reported once, starting and ending at the task where the
        search re-entered it, e.g. ``["a", "b", "a"]``. A self dependency is
        reported as ``["a", "a"]``.
        """
        cycles: list[list[str]] = []
        state = {tid: _Visit.UNVISITED for tid in self._deps}

        for root in self.task_ids():
            if state[root] != _Visit.UNVISITED:
                continue

            # Explicit stack of (task, iterator over its deps) keeps deep
            # chains off the interpreter stack.
            path: list[str] = [root]
            pos: dict[str, int] = {root: 0}
            stack = [(root, iter(sorted(self._deps[root])))]
            state[root] = _Visit.VISITING

            while stack:
                tid, deps = stack[-1]
                dep = next(deps, None)
                if dep is None:
                    stack.pop()
                    path.pop()
                    pos.pop(tid)
                    state[tid] = _Visit.VISITED
                    continue

                if dep not in state:
                    continue
                if state[dep] == _Visit.VISITING:
                    cycles.append(path[pos[dep]:] + [dep])
                    continue
                if state[dep] == _Visit.VISITED:
                    continue

                state[dep] = _Visit.VISITING
                pos[dep] = len(path)
                path.append(dep)
                stack.append((dep, iter(sorted(self._deps[dep]))))

        return cycles

    def validate(self) -> list[GraphError]:
        errors: list[GraphError] = []
        for tid, missing in self.missing_dependencies().items():
            errors.append(MissingDependencyError(tid, missing))
        for cycle in self.find_cycles():
            errors.append(CycleError(cycle))
        return errors

    def topo_order(self) -> list[str]:
        cycles = self.find_cycles()
        if cycles:
            raise CycleError(cycles[0])
        return self._toposort(set(self._deps))

    def subgraph(self, target: str) -> TaskGraph:
        if target not in self._deps:
            raise KeyError(target)

        needed: set[str] = set()
        worklist: list[str] = [target]

        while worklist:
            task_id = worklist.pop()
            if task_id in needed or task_id not in self._deps:
                continue
            needed.add(task_id)
            for dep in self._deps[task_id]:
                worklist.append(dep)

        logger.debug("Subgraph for %s: %s", target, sorted(needed))
        return TaskGraph(
            {tid: self.tasks[tid] for tid in self._deps if tid in needed},
            {tid: self._deps[tid] for tid in self._deps if tid in needed},
        )

    def _toposort(self, universe: set[str]) -> list[str]:
        state = {tid: _Visit.UNVISITED for tid in universe}
        out: list[str] = []

        for root in sorted(universe):
            if state[root] == _Visit.VISITED:
                continue

            stack = [(root, iter(sorted(self._deps[root])))]
            state[root] = _Visit.VISITING

            while stack:
                tid, deps = stack[-1]
                dep = next(deps, None)
                if dep is None:
                    stack.pop()
                    state[tid] = _Visit.VISITED
                    out.append(tid)
                    continue
                if dep in state and state[dep] == _Visit.UNVISITED:
                    state[dep] = _Visit.VISITING
                    stack.append((dep, iter(sorted(self._deps[dep]))))

        return out
