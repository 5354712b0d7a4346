from __future__ import annotations

import threading
from collections.abc import Mapping, Sequence

from .types import Outcome, OutcomeConflictError, ResultMap, RunSummary, Status


class ResultStore:
    """Write-once outcome store shared by the workers of a run."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._outcomes: ResultMap = {}

    def record(self, task_id: str, outcome: Outcome) -> None:
        with self._lock:
            if task_id in self._outcomes:
                raise OutcomeConflictError(task_id)
            self._outcomes[task_id] = outcome

    def get(self, task_id: str) -> Outcome | None:
        with self._lock:
            return self._outcomes.get(task_id)

    def __contains__(self, task_id: object) -> bool:
        with self._lock:
            return task_id in self._outcomes

    def __len__(self) -> int:
        with self._lock:
            return len(self._outcomes)

    def snapshot(self) -> ResultMap:
        with self._lock:
            return dict(self._outcomes)


def summarize(results: Mapping[str, Outcome], order: Sequence[str] | None = None) -> RunSummary:
    if order is None:
        order = sorted(results)

    by_status: dict[Status, list[str]] = {status: [] for status in Status}
    for tid in order:
        if tid in results:
            by_status[results[tid].status].append(tid)

    return RunSummary(
        list(order),
        by_status[Status.RESOLVED],
        by_status[Status.FAILED],
        by_status[Status.SKIPPED],
    )


def exit_code(results: Mapping[str, Outcome]) -> int:
    return 0 if all(o.status == Status.RESOLVED for o in results.values()) else 1
