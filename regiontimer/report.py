"""Call-tree rendering and structured reports for timer tables."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, List, Mapping, Optional, Tuple

import pandas as pd
from pydantic import BaseModel

from .clock import UNITS, format_duration
from .context import Path

if TYPE_CHECKING:  # pragma: no cover
    from .timerset import AggregateEntry

ORDERS = ("name", "total")


@dataclass
class ReportConfig:
    """Presentation options; none of them affect the aggregates."""

    unit: str = "ms"
    precision: int = 3
    order: str = "name"
    indent: str = "  "
    show_average: bool = True
    percentiles: Tuple[float, ...] = ()
    title: Optional[str] = "Timers"

    def __post_init__(self) -> None:
        if self.unit not in UNITS:
            raise ValueError(f"unknown unit {self.unit!r}; expected one of {sorted(UNITS)}")
        if self.order not in ORDERS:
            raise ValueError(f"unknown order {self.order!r}; expected one of {ORDERS}")
        if self.precision < 0:
            raise ValueError("precision must be non-negative")
        self.percentiles = tuple(float(q) for q in self.percentiles)
        for q in self.percentiles:
            if not 0.0 <= q <= 100.0:
                raise ValueError(f"percentile {q} outside [0, 100]")


class RegionStats(BaseModel):
    path: List[str]
    name: str
    depth: int
    count: int
    total_ns: int
    avg_ns: float
    percentiles: Dict[str, float] = {}
    complete: bool = True


class TimerReport(BaseModel):
    regions: List[RegionStats]

    def to_frame(self) -> pd.DataFrame:
        """One row per region, percentiles spread into ``p<q>_ns`` columns."""

        rows = []
        for region in self.regions:
            row = region.model_dump(exclude={"percentiles"})
            row["path"] = "/".join(region.path)
            row.update({f"{key}_ns": value for key, value in region.percentiles.items()})
            rows.append(row)
        if not rows:
            return pd.DataFrame(columns=["path", "name", "depth", "count", "total_ns", "avg_ns", "complete"])
        return pd.DataFrame(rows)


def _percentile_key(q: float) -> str:
    return f"p{q:g}"


def ordered_paths(table: Mapping[Path, "AggregateEntry"], order: str = "name") -> List[Path]:
    """Every path in ``table`` plus missing ancestors, in call-tree order.

    Paths are listed depth-first so every child sits beneath its parent;
    siblings are sorted by name or by descending total.
    """

    children: Dict[Path, List[Path]] = {}
    seen = set()
    for path in table:
        for i in range(1, len(path) + 1):
            node = path[:i]
            if node not in seen:
                seen.add(node)
                children.setdefault(node[:-1], []).append(node)

    def sort_key(path: Path):
        if order == "total":
            entry = table.get(path)
            return (-(entry.total if entry is not None else 0), path[-1])
        return path[-1]

    result: List[Path] = []
    pending: List[Path] = sorted(children.get((), []), key=sort_key, reverse=True)
    while pending:
        path = pending.pop()
        result.append(path)
        pending.extend(sorted(children.get(path, []), key=sort_key, reverse=True))
    return result


def build_report(table: Mapping[Path, "AggregateEntry"], config: Optional[ReportConfig] = None) -> TimerReport:
    config = config or ReportConfig()
    regions = []
    for path in ordered_paths(table, config.order):
        entry = table.get(path)
        if entry is None:
            regions.append(
                RegionStats(path=list(path), name=path[-1], depth=len(path), count=0, total_ns=0, avg_ns=0.0, complete=False)
            )
            continue
        regions.append(
            RegionStats(
                path=list(path),
                name=path[-1],
                depth=len(path),
                count=entry.count,
                total_ns=entry.total,
                avg_ns=entry.avg,
                percentiles={_percentile_key(q): entry.percentile(q) for q in config.percentiles},
            )
        )
    return TimerReport(regions=regions)


def render_lines(table: Mapping[Path, "AggregateEntry"], config: Optional[ReportConfig] = None) -> List[str]:
    """Render ``table`` as indented text lines, one per path."""

    config = config or ReportConfig()
    lines: List[str] = []
    if config.title:
        lines.append(f"{config.title}:")
    for region in build_report(table, config).regions:
        prefix = config.indent * region.depth + region.name
        if not region.complete:
            lines.append(f"{prefix}: (running)")
            continue
        fields = [
            f"total={format_duration(region.total_ns, config.unit, config.precision)}",
            f"count={region.count}",
        ]
        if config.show_average:
            fields.append(f"avg={format_duration(region.avg_ns, config.unit, config.precision)}")
        for key, value in region.percentiles.items():
            fields.append(f"{key}={format_duration(value, config.unit, config.precision)}")
        lines.append(f"{prefix}: {' '.join(fields)}")
    return lines


__all__ = ["ReportConfig", "RegionStats", "TimerReport", "build_report", "ordered_paths", "render_lines"]
