"""Hierarchical, thread-safe timers for named code regions."""

from __future__ import annotations

import functools
import sys
import threading
from collections import deque
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Callable, Deque, Dict, Iterator, Optional, TextIO, TypeVar

import numpy as np
from loguru import logger

from .clock import Clock, MonotonicClock
from .context import NestingContext, Path
from .report import ReportConfig, TimerReport, build_report, render_lines

T = TypeVar("T")

# Raw intervals kept per path for percentile queries.
HISTORY_LIMIT = 1 << 15


@dataclass
class AggregateEntry:
    """Accumulated timing for one path.

    ``count`` and ``total`` (nanoseconds) only ever grow. ``intervals`` holds
    the most recent raw measurements and is bounded by its ``maxlen``.
    """

    count: int = 0
    total: int = 0
    intervals: Deque[int] = field(default_factory=lambda: deque(maxlen=HISTORY_LIMIT))

    def update(self, duration: int) -> None:
        self.count += 1
        self.total += duration
        self.intervals.append(duration)

    @property
    def avg(self) -> float:
        return self.total / self.count if self.count else 0.0

    def percentile(self, q: float) -> float:
        """Percentile ``q`` (0-100) over the retained intervals, in nanoseconds."""

        if not self.intervals:
            return 0.0
        return float(np.percentile(np.fromiter(self.intervals, dtype=np.int64), q))

    def copy(self, intervals: bool = True) -> "AggregateEntry":
        history = self.intervals if intervals else ()
        return AggregateEntry(self.count, self.total, deque(history, maxlen=self.intervals.maxlen))


class TimerSet:
    """A set of timers keyed by the path of nested region names.

    Each thread calling :meth:`time` gets its own nesting context; the table
    of aggregates is shared and guarded by a single lock.

    Args:
        clock: Clock used to measure regions. Defaults to
            :class:`~regiontimer.clock.MonotonicClock`.
        history: Number of raw intervals retained per path. ``0`` disables
            retention; counts and totals are always kept.
    """

    def __init__(self, clock: Optional[Clock] = None, history: int = HISTORY_LIMIT):
        if history < 0:
            raise ValueError("history must be non-negative")
        self.clock: Clock = clock or MonotonicClock()
        self.history = history
        self._table: Dict[Path, AggregateEntry] = {}
        self._lock = threading.Lock()
        self._local = threading.local()

    def _context(self) -> NestingContext:
        ctx = getattr(self._local, "context", None)
        if ctx is None:
            ctx = NestingContext()
            self._local.context = ctx
        return ctx

    def depth(self) -> int:
        """Number of regions currently open on the calling thread."""

        return self._context().depth

    @contextmanager
    def track(self, name: str) -> Iterator[None]:
        ctx = self._context()
        ctx.enter(name)
        start = self.clock.now()
        logger.trace("Start timing {} at {}", name, start)
        try:
            yield
        finally:
            end = self.clock.now()
            duration = max(0, self.clock.elapsed(start, end))
            path = ctx.snapshot()
            ctx.exit()
            logger.trace("Stop timing {} at {} ({}us)", "/".join(path), end, duration // 1000)
            self._merge(path, duration)

    def time(self, name: str, body: Callable[..., T], /, *args: Any, **kwargs: Any) -> T:
        """Run ``body`` and record its duration under the current path + ``name``.

        Exceptions raised by ``body`` propagate unchanged once the
        measurement has been merged.
        """

        with self.track(name):
            return body(*args, **kwargs)

    def timed(self, name: Optional[str] = None) -> Callable[[Callable[..., T]], Callable[..., T]]:
        """Decorator timing every call of the wrapped function."""

        def decorator(func: Callable[..., T]) -> Callable[..., T]:
            label = name or func.__qualname__

            @functools.wraps(func)
            def wrapper(*args: Any, **kwargs: Any) -> T:
                with self.track(label):
                    return func(*args, **kwargs)

            return wrapper

        return decorator

    def _merge(self, path: Path, duration: int) -> None:
        with self._lock:
            entry = self._table.get(path)
            if entry is None:
                entry = AggregateEntry(intervals=deque(maxlen=self.history))
                self._table[path] = entry
            entry.update(duration)

    def snapshot(self, intervals: bool = True) -> Dict[Path, AggregateEntry]:
        """Point-in-time copy of every aggregate, in first-merged order.

        With ``intervals=False`` the retained raw intervals are left out of
        the copy, keeping the locked section proportional to the number of
        paths.
        """

        with self._lock:
            return {path: entry.copy(intervals) for path, entry in self._table.items()}

    def _report_snapshot(self, config: Optional[ReportConfig]) -> Dict[Path, AggregateEntry]:
        return self.snapshot(intervals=bool(config is not None and config.percentiles))

    def copy(self) -> "TimerSet":
        """Independent timer set starting from a copy of this table."""

        other = TimerSet(clock=self.clock, history=self.history)
        other._table = self.snapshot()
        return other

    def __len__(self) -> int:
        with self._lock:
            return len(self._table)

    def __contains__(self, path: object) -> bool:
        try:
            key = tuple(path)  # type: ignore[arg-type]
        except TypeError:
            return False
        with self._lock:
            return key in self._table

    def __getitem__(self, path: Path) -> AggregateEntry:
        with self._lock:
            return self._table[tuple(path)].copy()

    def report(self, config: Optional[ReportConfig] = None) -> TimerReport:
        return build_report(self._report_snapshot(config), config)

    def render(self, config: Optional[ReportConfig] = None) -> str:
        return "\n".join(render_lines(self._report_snapshot(config), config))

    def print(self, sink: Optional[TextIO] = None, config: Optional[ReportConfig] = None) -> None:
        """Write the rendered report to ``sink`` (stdout by default)."""

        out = sink if sink is not None else sys.stdout
        for line in render_lines(self._report_snapshot(config), config):
            out.write(line + "\n")

    def log_report(self, level: str = "INFO", config: Optional[ReportConfig] = None) -> None:
        """Emit the rendered report through loguru, one record per line."""

        for line in render_lines(self._report_snapshot(config), config):
            logger.log(level, line)


__all__ = ["AggregateEntry", "TimerSet", "HISTORY_LIMIT"]
