"""Run the independent map filters side by side with per-task failure capture."""
from __future__ import annotations

import concurrent.futures
import logging
from typing import Callable, Dict, Mapping, Optional, TypeVar, Union


LOGGER = logging.getLogger("albedo_maps.parallel")

R = TypeVar("R")

TaskResult = Union[R, Exception]


def _call_isolated(name: str, task: Callable[[], R]) -> TaskResult:
    try:
        return task()
    except Exception as exc:
        LOGGER.exception("Task %s failed: %s", name, exc)
        return exc


def run_isolated(tasks: Mapping[str, Callable[[], R]], *, max_workers: Optional[int] = None) -> Dict[str, TaskResult]:
    """Run every task in *tasks* and return results keyed by task name.

    A task that raises yields its exception in place of a result, so one
    failure never hides the others. With ``max_workers`` of ``None`` or ``1``
    the tasks run sequentially in the calling thread.
    """

    if not tasks:
        return {}
    if max_workers is None or max_workers <= 1:
        return {name: _call_isolated(name, task) for name, task in tasks.items()}

    workers = min(max_workers, len(tasks))
    LOGGER.debug("Running %s tasks on %s threads", len(tasks), workers)
    with concurrent.futures.ThreadPoolExecutor(max_workers=workers, thread_name_prefix="albedo-maps") as executor:
        futures = {name: executor.submit(_call_isolated, name, task) for name, task in tasks.items()}
        return {name: future.result() for name, future in futures.items()}
