"""Clock sources and duration helpers."""

from __future__ import annotations

import math
import time
from typing import Callable, Optional, Protocol

UNITS = {"ns": 1, "us": 1_000, "ms": 1_000_000, "s": 1_000_000_000}


class Clock(Protocol):
    def now(self) -> int:
        ...

    def elapsed(self, start: int, end: int) -> int:
        ...


class MonotonicClock:
    """Nanosecond clock backed by :func:`time.perf_counter_ns`."""

    def now(self) -> int:
        return time.perf_counter_ns()

    def elapsed(self, start: int, end: int) -> int:
        # clamp so a misbehaving source cannot push totals backwards
        return max(0, end - start)


def _bexp(x: float, sigdigs: float) -> float:
    return 10.0 ** (math.floor(math.log10(x)) - (sigdigs - 1.0))


def _sround(x: float, nearest: float) -> float:
    # round half up
    return nearest * math.floor(x / nearest + 0.5)


def round_keeping_top_sigdigs(x: int, sigdigs: int) -> int:
    """Round ``x`` to its ``sigdigs`` most significant decimal digits."""

    if x <= 0:
        return 0
    return int(_sround(float(x), _bexp(float(x), float(sigdigs))))


def calc_tps(dc: int, dt: int) -> int:
    """Ticks per second from a tick delta ``dc`` over ``dt`` nanoseconds."""

    if dt <= 0:
        raise ValueError("calibration window must be positive")
    return round_keeping_top_sigdigs((1_000_000_000 * dc) // dt, 2)


class TickClock:
    """Clock over a raw tick counter with a calibrated tick rate.

    Durations are reported in nanoseconds so a ``TickClock`` can be handed to
    :class:`~regiontimer.timerset.TimerSet` in place of the default clock.

    Args:
        read: Callable returning the current tick count. Defaults to
            :func:`time.monotonic_ns`.
        tps: Known ticks per second. If ``None``, it is measured lazily by
            :meth:`ticks_per_second`.
        calibration_s: Sleep used while calibrating.
    """

    def __init__(
        self,
        read: Optional[Callable[[], int]] = None,
        tps: Optional[int] = None,
        calibration_s: float = 1e-4,
    ):
        self.read = read or time.monotonic_ns
        self.calibration_s = calibration_s
        self._tps = tps

    def ticks_per_second(self) -> int:
        if self._tps is None:
            t0 = time.perf_counter_ns()
            c0 = self.read()
            time.sleep(self.calibration_s)
            c1 = self.read()
            t1 = time.perf_counter_ns()
            tps = calc_tps(c1 - c0, t1 - t0)
            if tps <= 0:
                raise RuntimeError("tick counter did not advance during calibration")
            self._tps = tps
        return self._tps

    def to_ns(self, dt: int) -> int:
        return (dt * 1_000_000_000) // self.ticks_per_second()

    def to_us(self, dt: int) -> int:
        return self.to_ns(dt) // 1_000

    def to_ms(self, dt: int) -> int:
        return self.to_us(dt) // 1_000

    def now(self) -> int:
        return self.read()

    def elapsed(self, start: int, end: int) -> int:
        return self.to_ns(max(0, end - start))


def format_duration(ns: float, unit: str = "ms", precision: int = 3) -> str:
    """Format a nanosecond value in ``unit``."""

    if unit not in UNITS:
        raise ValueError(f"unknown unit {unit!r}; expected one of {sorted(UNITS)}")
    return f"{ns / UNITS[unit]:.{precision}f}{unit}"


__all__ = [
    "Clock",
    "MonotonicClock",
    "TickClock",
    "UNITS",
    "calc_tps",
    "format_duration",
    "round_keeping_top_sigdigs",
]
