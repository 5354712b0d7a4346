from __future__ import annotations

import asyncio
import sys
import threading

import pytest

from taskwave.executor.runner import run_task
from taskwave.executor.types import (
    Failed,
    Resolved,
    Skipped,
    TaskTimeoutError,
)
from taskwave.graph import Task


def test_no_dependencies_resolves_with_value() -> None:
    outcome = run_task("a", Task(work=lambda: 42), {})
    assert outcome == Resolved(42)


def test_raising_work_is_captured_as_failed() -> None:
    error = ValueError("boom")

    def work() -> None:
        raise error

    outcome = run_task("a", Task(work=work), {})

    assert isinstance(outcome, Failed)
    assert outcome.reason is error


def test_keyboard_interrupt_is_not_swallowed() -> None:
    def work() -> None:
        raise KeyboardInterrupt

    with pytest.raises(KeyboardInterrupt):
        run_task("a", Task(work=work), {})


def test_skips_with_only_the_unresolved_dependencies() -> None:
    calls = []
    task = Task(work=lambda: calls.append("ran"), dependencies=["ok", "bad", "other_ok"])

    outcome = run_task(
        "t",
        task,
        {
            "ok": Resolved(1),
            "bad": Failed(RuntimeError("x")),
            "other_ok": Resolved(2),
        },
    )

    assert outcome == Skipped(frozenset({"bad"}))
    assert calls == []


def test_skipped_dependency_propagates() -> None:
    task = Task(work=lambda: 1, dependencies=["up"])
    outcome = run_task("t", task, {"up": Skipped(frozenset({"root"}))})
    assert outcome == Skipped(frozenset({"up"}))


def test_absent_dependency_outcome_counts_as_unresolved() -> None:
    task = Task(work=lambda: 1, dependencies=["Q"])
    assert run_task("P", task, {}) == Skipped(frozenset({"Q"}))


def test_duplicate_dependencies_are_reported_once() -> None:
    task = Task(work=lambda: 1, dependencies=["a", "a"])
    outcome = run_task("t", task, {"a": Failed(RuntimeError())})
    assert outcome.as_dict() == {"status": "skipped", "unresolved_dependencies": ["a"]}


def test_dependency_values_are_not_passed_by_default() -> None:
    task = Task(work=lambda: "no-args", dependencies=["a"])
    assert run_task("t", task, {"a": Resolved(1)}) == Resolved("no-args")


def test_pass_results_injects_values_in_declared_order() -> None:
    task = Task(
        work=lambda *values: list(values),
        dependencies=["b", "a", "b"],
        pass_results=True,
    )

    outcome = run_task("t", task, {"a": Resolved("A"), "b": Resolved("B")})

    assert outcome == Resolved(["B", "A"])


def test_non_callable_work_fails() -> None:
    outcome = run_task("t", Task(work=None), {})
    assert isinstance(outcome, Failed)
    assert isinstance(outcome.reason, TypeError)


def test_coroutine_work_is_awaited() -> None:
    async def work() -> str:
        return "async"

    assert run_task("t", Task(work=work), {}) == Resolved("async")


def test_coroutine_failure_is_captured() -> None:
    async def work() -> None:
        raise LookupError("missing")

    outcome = run_task("t", Task(work=work), {})

    assert isinstance(outcome, Failed)
    assert isinstance(outcome.reason, LookupError)


def test_timeout_converts_to_failed() -> None:
    release = threading.Event()

    def work() -> None:
        release.wait(5)

    try:
        outcome = run_task("slow", Task(work=work), {}, timeout_s=0.05)
    finally:
        release.set()

    assert isinstance(outcome, Failed)
    assert isinstance(outcome.reason, TaskTimeoutError)
    assert outcome.reason.task_id == "slow"


def test_task_timeout_overrides_default() -> None:
    outcome = run_task("quick", Task(work=lambda: "done", timeout_s=5.0), {}, timeout_s=0.0001)
    assert outcome == Resolved("done")


def test_timeout_path_still_captures_errors() -> None:
    def work() -> None:
        raise ValueError("inside")

    outcome = run_task("t", Task(work=work, timeout_s=5.0), {})

    assert isinstance(outcome, Failed)
    assert isinstance(outcome.reason, ValueError)


def test_resolved_records_duration_without_affecting_equality() -> None:
    outcome = run_task("t", Task(work=lambda: 1), {})
    assert outcome.duration_s >= 0.0
    assert outcome == Resolved(1, duration_s=123.0)


def test_cancelled_coroutine_is_captured_as_failed() -> None:
    async def work() -> None:
        raise asyncio.CancelledError()

    outcome = run_task("t", Task(work=work), {})

    assert isinstance(outcome, Failed)
    assert isinstance(outcome.reason, asyncio.CancelledError)


def test_sys_exit_in_work_is_captured_as_failed() -> None:
    outcome = run_task("t", Task(work=lambda: sys.exit(3)), {})

    assert isinstance(outcome, Failed)
    assert isinstance(outcome.reason, SystemExit)
    assert outcome.reason.code == 3


def test_sys_exit_on_timeout_thread_is_captured_as_failed() -> None:
    outcome = run_task("t", Task(work=lambda: sys.exit(4), timeout_s=5.0), {})

    assert isinstance(outcome, Failed)
    assert isinstance(outcome.reason, SystemExit)


@pytest.mark.parametrize("timeout", [0, -1.5])
def test_non_positive_timeout_fails_without_calling_work(timeout: float) -> None:
    calls = []
    task = Task(work=lambda: calls.append("ran"), timeout_s=timeout)

    outcome = run_task("t", task, {})

    assert isinstance(outcome, Failed)
    assert isinstance(outcome.reason, ValueError)
    assert calls == []


def test_non_positive_default_timeout_fails_without_calling_work() -> None:
    calls = []
    outcome = run_task("t", Task(work=lambda: calls.append("ran")), {}, timeout_s=0)

    assert isinstance(outcome, Failed)
    assert calls == []
