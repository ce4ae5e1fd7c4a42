"""Per-thread stack of active region names."""

from __future__ import annotations

from typing import List, Tuple

Path = Tuple[str, ...]


class NestingContextError(RuntimeError):
    """Raised when a nesting context is popped without a matching push."""


class NestingContext:
    """Ordered stack of the regions currently open on one thread.

    Instances are never shared between threads, so nothing here locks.
    """

    def __init__(self) -> None:
        self._names: List[str] = []

    def enter(self, name: str) -> None:
        self._names.append(name)

    def exit(self) -> str:
        if not self._names:
            raise NestingContextError("exit() called on an empty nesting context")
        return self._names.pop()

    def snapshot(self) -> Path:
        return tuple(self._names)

    @property
    def depth(self) -> int:
        return len(self._names)

    def __len__(self) -> int:
        return len(self._names)

    def __repr__(self) -> str:
        return f"NestingContext({'/'.join(self._names)!r})"


__all__ = ["NestingContext", "NestingContextError", "Path"]
