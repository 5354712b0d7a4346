from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from concurrent.futures import ThreadPoolExecutor
from typing import Any

from taskwave.config import RunSettings
from taskwave.graph import ReadinessTracker, TaskGraph

from .results import ResultStore, summarize
from .runner import run_task
from .types import ExecutionError, Outcome, Resolved, ResultMap, Skipped

logger = logging.getLogger(__name__)


class Executor:
    def __init__(self, graph: TaskGraph, settings: RunSettings | None = None):
        self.graph = graph
        self.settings = settings or RunSettings()

    def _run(self, graph: TaskGraph) -> ResultMap:
        self._report_defects(graph)

        store = ResultStore()
        tracker = ReadinessTracker(graph)
        wave = tracker.initial()
        wave_no = 0

        if wave:
            with ThreadPoolExecutor(
                max_workers=self.settings.max_workers,
                thread_name_prefix="taskwave",
            ) as pool:
                while wave:
                    wave_no += 1
                    logger.debug("Wave %d: %s", wave_no, ", ".join(wave))
                    futures = [
                        pool.submit(self._run_one, graph, tid, store) for tid in wave
                    ]
                    # Every task in the wave must be terminal before the next
                    # one is computed.
                    for future in futures:
                        future.result()
                    wave = tracker.complete(wave)

        # Whatever never became ready sits on or behind a cycle
        for tid in tracker.stalled():
            unresolved = frozenset(
                dep
                for dep in graph.dependencies(tid)
                if not isinstance(store.get(dep), Resolved)
            )
            store.record(tid, Skipped(unresolved))

        results = store.snapshot()
        expected = set(graph.task_ids())
        if set(results) != expected:
            raise ExecutionError(
                f"Result map does not cover the graph: {sorted(expected ^ set(results))}"
            )

        summary = summarize(results)
        logger.info(
            "Run finished in %d waves: %d resolved, %d failed, %d skipped",
            wave_no,
            len(summary.resolved),
            len(summary.failed),
            len(summary.skipped),
        )
        return results

    def _run_one(self, graph: TaskGraph, task_id: str, store: ResultStore) -> None:
        task = graph.get_task(task_id)
        dependency_outcomes: dict[str, Outcome] = {}
        for dep in graph.dependencies(task_id):
            outcome = store.get(dep)
            if outcome is not None:
                dependency_outcomes[dep] = outcome

        outcome = run_task(
            task_id,
            task,
            dependency_outcomes,
            timeout_s=self.settings.task_timeout_s,
        )
        store.record(task_id, outcome)

    def _report_defects(self, graph: TaskGraph) -> None:
        for tid, missing in graph.missing_dependencies().items():
            logger.warning(
                "Task '%s' depends on unknown tasks: %s", tid, ", ".join(missing)
            )
        for cycle in graph.find_cycles():
            logger.warning("Cycle detected: %s", " -> ".join(cycle))

    def run_all(self) -> ResultMap:
        return self._run(self.graph)

    def run_target(self, target: str) -> ResultMap:
        return self._run(self.graph.subgraph(target))


def run_tasks(
    tasks: Mapping[str, Any] | TaskGraph, *, settings: RunSettings | None = None
) -> ResultMap:
    """Run every task in ``tasks`` and return one terminal outcome per task id.

    ``tasks`` maps task ids to ``Task`` instances, to mappings with ``work``
    and ``dependencies`` keys, or to bare callables. Task failures, missing
    dependencies and cycles are all reported through the returned outcomes;
    none of them raise.
    """
    graph = tasks if isinstance(tasks, TaskGraph) else TaskGraph.from_tasks(tasks)
    return Executor(graph, settings).run_all()


async def run_tasks_async(
    tasks: Mapping[str, Any] | TaskGraph, *, settings: RunSettings | None = None
) -> ResultMap:
    return await asyncio.to_thread(run_tasks, tasks, settings=settings)
