"""Bounded fan-out of independent tasks with a single completion barrier."""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from concurrent.futures import TimeoutError as FuturesTimeout
from typing import Callable, Iterable, Optional, TypeVar

from harvester.pipeline.report import Outcome, PhaseReport, TaskResult

logger = logging.getLogger(__name__)

T = TypeVar("T")


def fan_out(
    worker: Callable[[T], TaskResult],
    items: Iterable[T],
    *,
    phase: str,
    label: Callable[[T], str] = str,
    max_workers: Optional[int] = None,
    deadline: Optional[float] = None,
    on_result: Optional[Callable[[TaskResult], None]] = None,
) -> PhaseReport:
    """Run ``worker(item)`` for every item concurrently and wait for all.

    Args:
        worker: Task body; returns a :class:`TaskResult`.  Exceptions that
            escape it are logged and recorded as :attr:`Outcome.ERROR`.
        items: Work items, one task each.
        phase: Name used in log lines and on the returned report.
        label: Maps an item to the ``target`` string used in reports.
        max_workers: Pool size.  ``None`` or ``0`` starts one worker per item.
        deadline: Seconds after which tasks that have not started yet are
            cancelled.  Running tasks still finish under their own timeout.
        on_result: Called on the calling thread for each result, before it
            is recorded, so calls never overlap.

    Returns:
        The :class:`PhaseReport` holding one result per item.
    """
    items = list(items)
    report = PhaseReport(phase)
    if not items:
        report.close()
        return report

    workers = len(items) if not max_workers or max_workers < 0 else min(max_workers, len(items))
    logger.info("[%s] Starting %d task(s) on %d worker(s)", phase, len(items), workers)

    def collect(future: Future, item: T) -> None:
        try:
            result = future.result()
        except Exception as exc:
            logger.exception("[%s] Unexpected failure for %s", phase, label(item))
            result = TaskResult(label(item), Outcome.ERROR, str(exc))
        if on_result is not None:
            on_result(result)
        report.record(result)

    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix=phase) as pool:
        future_to_item = {pool.submit(worker, item): item for item in items}
        collected: set[Future] = set()
        try:
            for future in as_completed(future_to_item, timeout=deadline):
                collect(future, future_to_item[future])
                collected.add(future)
        except FuturesTimeout:
            remaining = [f for f in future_to_item if f not in collected]
            cancelled = [f for f in remaining if f.cancel()]
            logger.warning(
                "[%s] Deadline of %ss elapsed; cancelled %d pending task(s), "
                "waiting for %d running",
                phase, deadline, len(cancelled), len(remaining) - len(cancelled),
            )
            for future in cancelled:
                report.record(
                    TaskResult(label(future_to_item[future]), Outcome.CANCELLED, "phase deadline elapsed")
                )
            for future in as_completed([f for f in remaining if not f.cancelled()]):
                collect(future, future_to_item[future])

    report.close()
    return report
