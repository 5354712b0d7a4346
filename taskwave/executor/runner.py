from __future__ import annotations

import asyncio
import inspect
import logging
import threading
import time
from collections.abc import Callable, Mapping
from typing import Any

from taskwave.graph import Task

from .types import Failed, Outcome, Resolved, Skipped, TaskTimeoutError

logger = logging.getLogger(__name__)


def run_task(
    task_id: str,
    task: Task,
    dependency_outcomes: Mapping[str, Outcome],
    *,
    timeout_s: float | None = None,
) -> Outcome:
    """Run a single task whose dependencies already hold terminal outcomes.

    A dependency without an entry in ``dependency_outcomes`` (an id missing
    from the graph, or a cycle member) counts as unresolved. The task's work
    is only called when every dependency resolved, and anything it raises
    other than ``KeyboardInterrupt`` is returned as ``Failed``.

    ``task.timeout_s`` takes precedence over ``timeout_s``.
    """
    deps = list(dict.fromkeys(task.dependencies))
    unresolved = frozenset(
        dep for dep in deps if not isinstance(dependency_outcomes.get(dep), Resolved)
    )
    if unresolved:
        logger.debug("Skipping %s, unresolved: %s", task_id, sorted(unresolved))
        return Skipped(unresolved)

    args: tuple[Any, ...] = ()
    if task.pass_results:
        args = tuple(dependency_outcomes[dep].value for dep in deps)  # type: ignore[union-attr]

    timeout = task.timeout_s if task.timeout_s is not None else timeout_s
    if timeout is not None and timeout <= 0:
        # Rejected before the work starts
        return Failed(ValueError(f"Task '{task_id}' timeout must be positive, got {timeout!r}"))
    call = _bind(task.work, args)

    logger.debug("Starting %s", task_id)
    start = time.monotonic()
    try:
        if timeout is None:
            value = call()
        else:
            value = _call_with_timeout(task_id, call, timeout)
    except KeyboardInterrupt:
        raise
    except BaseException as exc:
        # Includes SystemExit and CancelledError raised by the work
        duration = time.monotonic() - start
        logger.debug("Task %s failed after %.3fs: %r", task_id, duration, exc)
        return Failed(exc, duration)

    duration = time.monotonic() - start
    logger.debug("Task %s resolved in %.3fs", task_id, duration)
    return Resolved(value, duration)


def _bind(work: Callable[..., Any] | None, args: tuple[Any, ...]) -> Callable[[], Any]:
    def call() -> Any:
        if not callable(work):
            raise TypeError(f"Task work must be callable, got {type(work).__name__}")
        value = work(*args)
        if inspect.isawaitable(value):
            return asyncio.run(_await(value))
        return value

    return call


async def _await(awaitable: Any) -> Any:
    return await awaitable


def _call_with_timeout(task_id: str, call: Callable[[], Any], timeout: float) -> Any:
    box: dict[str, Any] = {}
    done = threading.Event()

    def target() -> None:
        try:
            box["value"] = call()
        except BaseException as exc:
            box["error"] = exc
        finally:
            done.set()

    # Daemon so a hung task cannot keep the interpreter alive. It is never
    # restarted, so its side effects still happen at most once.
    thread = threading.Thread(target=target, name=f"taskwave-{task_id}", daemon=True)
    thread.start()

    if not done.wait(timeout):
        logger.warning("Task %s exceeded its %gs timeout", task_id, timeout)
        raise TaskTimeoutError(task_id, timeout)

    if "error" in box:
        raise box["error"]
    return box["value"]
