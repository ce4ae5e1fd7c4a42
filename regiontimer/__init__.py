"""Hierarchical wall-clock timers for named code regions."""

from importlib.metadata import version

from .clock import Clock, MonotonicClock, TickClock
from .context import NestingContext, NestingContextError
from .report import ReportConfig, RegionStats, TimerReport
from .timerset import AggregateEntry, TimerSet

__all__ = [
    "AggregateEntry",
    "Clock",
    "MonotonicClock",
    "NestingContext",
    "NestingContextError",
    "RegionStats",
    "ReportConfig",
    "TickClock",
    "TimerReport",
    "TimerSet",
    "__version__",
]


def __getattr__(name: str) -> str:
    if name == "__version__":
        try:
            return version("regiontimer")
        except Exception:  # pragma: no cover - fallback when pkg metadata missing
            return "0.1.0"
    raise AttributeError(name)
