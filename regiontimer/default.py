"""Thread-local default timer set for quick instrumentation."""

from __future__ import annotations

import threading
from typing import Any, Callable, ContextManager, TypeVar

from .timerset import TimerSet

T = TypeVar("T")

_local = threading.local()


def get_timer_set() -> TimerSet:
    """Return the calling thread's default :class:`TimerSet`, creating it on first use."""

    timers = getattr(_local, "timers", None)
    if timers is None:
        timers = TimerSet()
        _local.timers = timers
    return timers


def time(name: str, body: Callable[..., T], /, *args: Any, **kwargs: Any) -> T:
    """Time ``body`` with the thread-local default timer set."""

    return get_timer_set().time(name, body, *args, **kwargs)


def track(name: str) -> ContextManager[None]:
    return get_timer_set().track(name)


def clone() -> TimerSet:
    """Independent copy of the calling thread's default timers."""

    return get_timer_set().copy()


def reset() -> None:
    _local.timers = None


__all__ = ["clone", "get_timer_set", "reset", "time", "track"]
