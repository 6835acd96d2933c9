"""
Progress sinks for per-generation reports.

A sink is any callable accepting a GenerationReport. The driver calls it
once per generation from the loop thread; sinks that do I/O should be
wrapped in a ThreadedProgressSink so the loop never waits on them.
"""

import queue
import threading
from typing import Callable, List, Optional

from .data_models import GenerationReport

ProgressSink = Callable[[GenerationReport], None]


class ConsoleProgressSink:
    """Print a progress line every `report_every` generations."""

    def __init__(self, report_every: int = 100, total: Optional[int] = None):
        if report_every <= 0:
            raise ValueError(f"report_every must be positive, got: {report_every}")
        self.report_every = report_every
        self.total = total

    def should_report(self, generation: int) -> bool:
        if generation % self.report_every == 0:
            return True
        return self.total is not None and generation == self.total

    def __call__(self, report: GenerationReport) -> None:
        if not self.should_report(report.generation):
            return
        if self.total is not None:
            print(f"  Progress: generation {report.generation}/{self.total}, "
                  f"best fitness {report.best_fitness:.6f}")
        else:
            print(f"  Progress: generation {report.generation}, "
                  f"best fitness {report.best_fitness:.6f}")


class BufferedProgressSink:
    """Collect every report in memory."""

    def __init__(self):
        self.reports: List[GenerationReport] = []

    def __call__(self, report: GenerationReport) -> None:
        self.reports.append(report)

    def __len__(self) -> int:
        return len(self.reports)


class ThreadedProgressSink:
    """
    Forward reports to another sink on a background thread.

    Calling the sink only enqueues the report, so a slow downstream sink
    (console, file, network) never delays the next generation. Use as a
    context manager, or call close() to flush pending reports.

    Args:
        sink: Downstream sink invoked on the worker thread
        maxsize: Queue bound; 0 means unbounded
    """

    _SENTINEL = object()

    def __init__(self, sink: ProgressSink, maxsize: int = 0):
        self.sink = sink
        self._queue: "queue.Queue" = queue.Queue(maxsize=maxsize)
        self._closed = False
        self.dropped = 0
        self.errors: List[BaseException] = []
        self._worker = threading.Thread(target=self._drain, name="progress-sink", daemon=True)
        self._worker.start()

    def _drain(self) -> None:
        while True:
            item = self._queue.get()
            try:
                if item is self._SENTINEL:
                    return
                self.sink(item)
            except Exception as e:
                self.errors.append(e)
            finally:
                self._queue.task_done()

    def __call__(self, report: GenerationReport) -> None:
        if self._closed:
            raise RuntimeError("ThreadedProgressSink is closed")
        try:
            self._queue.put_nowait(report)
        except queue.Full:
            self.dropped += 1

    def close(self, timeout: Optional[float] = None) -> None:
        """Flush queued reports and stop the worker thread."""
        if self._closed:
            return
        self._closed = True
        self._queue.put(self._SENTINEL)
        self._worker.join(timeout)

    def __enter__(self) -> "ThreadedProgressSink":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
