"""Bounded async worker pool with input-order result restoration.

Responsibilities:
- Keep at most `concurrency` operations in flight, refilling as each completes.
- Convert recoverable per-item failures into failed `IndexedResult` values.
- Abort the whole run on any other failure, cancelling in-flight work.
- Report progress through a mutex-guarded counter and an optional callback.
"""

from __future__ import annotations

import asyncio
import threading
from typing import Awaitable, Callable, Generic, Iterable, TypeVar

from loguru import logger

from ..models.datatypes import IndexedResult
from ..telemetry.logger import RunLogger

_Item = TypeVar("_Item")
_Value = TypeVar("_Value")

ProgressCallback = Callable[[str, int, int], None]
"""Progress sink receiving `(label, completed, total)` after each finished item."""


class ProgressCounter:
    """Thread-safe completion counter shared by pool tasks."""

    def __init__(self, total: int) -> None:
        """Initialize counter for `total` expected completions."""

        self.total = total
        self._completed = 0
        self._lock = threading.Lock()

    @property
    def completed(self) -> int:
        """Return the number of completions recorded so far."""

        with self._lock:
            return self._completed

    def increment(self) -> int:
        """Record one completion and return the updated count."""

        with self._lock:
            self._completed += 1
            return self._completed


class ExtractionWorkerPool(Generic[_Item, _Value]):
    """Run an async operation over items with a fixed in-flight window."""

    def __init__(
        self,
        concurrency: int = 4,
        recoverable: tuple[type[BaseException], ...] = (),
        progress_callback: ProgressCallback | None = None,
        run_logger: RunLogger | None = None,
        stage: str = "extract",
    ) -> None:
        """Initialize pool limits and failure policy.

        Args:
            concurrency: Maximum number of operations in flight, at least 1.
            recoverable: Exception types that fail only their own item.
            progress_callback: Optional sink invoked after every finished item.
            run_logger: Optional logger for skipped items and callback failures.
            stage: Stage name used in log events.
        """

        if concurrency < 1:
            raise ValueError("concurrency must be at least 1.")
        self.concurrency = concurrency
        self.recoverable = recoverable
        self.progress_callback = progress_callback
        self.run_logger = run_logger
        self.stage = stage

    async def run(
        self,
        items: Iterable[_Item],
        operation: Callable[[_Item], Awaitable[_Value]],
        label: Callable[[_Item], str] = str,
    ) -> list[IndexedResult[_Item, _Value]]:
        """Run `operation` over all items and return results in input order.

        Items start in input order. Whenever one finishes, the next unstarted
        item begins, so the window stays full until the input is exhausted.
        Progress callbacks are scheduled on the event loop after the window is
        refilled, so a slow callback never delays starting the next item. All
        of them have run by the time this method returns.

        Raises:
            BaseException: The first non-recoverable failure, after all
                in-flight operations have been cancelled.
        """

        work = list(items)
        total = len(work)
        counter = ProgressCounter(total)
        results: list[IndexedResult[_Item, _Value]] = []
        in_flight: dict[asyncio.Task[IndexedResult[_Item, _Value]], int] = {}
        next_index = 0

        def refill() -> None:
            nonlocal next_index
            while next_index < total and len(in_flight) < self.concurrency:
                task = asyncio.create_task(
                    self._run_one(next_index, work[next_index], operation, label)
                )
                in_flight[task] = next_index
                next_index += 1

        loop = asyncio.get_running_loop()
        finished: set[asyncio.Task[IndexedResult[_Item, _Value]]] = set()
        refill()
        try:
            while in_flight:
                finished, _ = await asyncio.wait(
                    in_flight.keys(), return_when=asyncio.FIRST_COMPLETED
                )
                completed: list[int] = []
                for task in sorted(finished, key=in_flight.__getitem__):
                    completed.append(in_flight.pop(task))
                    results.append(task.result())
                refill()
                for index in completed:
                    loop.call_soon(
                        self._report_progress, label(work[index]), counter.increment(), total
                    )
        except BaseException:
            for task in in_flight:
                task.cancel()
            await asyncio.gather(*in_flight, return_exceptions=True)
            for task in finished:
                if task.done() and not task.cancelled():
                    task.exception()
            raise

        # Flush progress callbacks scheduled for the last completions.
        await asyncio.sleep(0)
        results.sort(key=lambda result: result.index)
        return results

    async def _run_one(
        self,
        index: int,
        item: _Item,
        operation: Callable[[_Item], Awaitable[_Value]],
        label: Callable[[_Item], str],
    ) -> IndexedResult[_Item, _Value]:
        """Run one operation, recording recoverable failures on the result."""

        try:
            value = await operation(item)
        except self.recoverable as exc:
            if self.run_logger is not None:
                self.run_logger.log_item_skipped(self.stage, label(item), type(exc).__name__)
            return IndexedResult(index=index, item=item, error=exc)
        return IndexedResult(index=index, item=item, value=value)

    def _report_progress(self, label: str, completed: int, total: int) -> None:
        """Invoke the progress callback without letting its failures escape."""

        if self.progress_callback is None:
            return
        try:
            self.progress_callback(label, completed, total)
        except Exception as exc:
            if self.run_logger is not None:
                self.run_logger.log_callback_failure(self.stage, type(exc).__name__)
            else:
                logger.warning("Progress callback failed: {}", type(exc).__name__)
