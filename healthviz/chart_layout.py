"""Geometric placement of records for the three chart kinds.

Purpose
-------
Turns a :class:`~healthviz.chart_records.Dataset` plus scale instances into
plain placement values. Nothing here touches a drawing surface; renderers
consume the entries and emit elements.

Concepts and structure
----------------------
- Scatter layout: one :class:`LayoutEntry` per record, radius from the size
  scale, label anchored ``radius + LABEL_GAP`` above the bubble.
- Line layout: one :class:`SeriesPath` per visible category, vertices sorted
  by x ascending.
- Tile layout: row-major bins per group, with a vertical offset accumulated
  across groups. Sizing and drawing share :func:`_group_geometry`.

Important gotchas
-----------------
- Bubbles and labels are never moved to avoid collisions; overlap is allowed.
- Tile fill height is ``inner * value / 100`` and is not clamped; values
  outside ``[0, 100]`` overflow the tile.
"""

from __future__ import annotations

import math
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Optional

from .chart_config import TileChartConfig
from .chart_records import Dataset, Record

LABEL_GAP = 5.0

ScaleFn = Callable[[float], float]


@dataclass(frozen=True)
class LayoutEntry:
    """Computed placement of one record."""

    x: float
    y: float
    color_key: str
    record: Record
    width: Optional[float] = None
    height: Optional[float] = None
    radius: Optional[float] = None
    label_y: Optional[float] = None


@dataclass(frozen=True)
class TileEntry(LayoutEntry):
    """Placement of one tile within its group's grid."""

    group_key: str = ""
    row: int = 0
    col: int = 0
    fill_height: float = 0.0


@dataclass(frozen=True)
class TileGroup:
    key: str
    y_offset: float
    rows: int
    height: float


@dataclass(frozen=True)
class TileLayout:
    entries: tuple[TileEntry, ...]
    groups: tuple[TileGroup, ...]
    total_height: float


@dataclass(frozen=True)
class SeriesPath:
    """One line series: its vertices in pixels and the records behind them."""

    key: str
    vertices: tuple[tuple[float, float], ...]
    records: tuple[Record, ...]

    @property
    def last(self) -> Record:
        return self.records[-1]


# SECTION: scatter [id: scatter]
# =============================================================================


def scatter_layout(
    dataset: Dataset,
    *,
    x: ScaleFn,
    y: ScaleFn,
    size: ScaleFn,
    label_gap: float = LABEL_GAP,
) -> list[LayoutEntry]:
    """Place every record at ``(x(rec.x), y(rec.y))`` with radius ``size(rec.size)``."""
    out: list[LayoutEntry] = []
    for rec in dataset:
        cx, cy, r = x(rec.x), y(rec.y), size(rec.size)
        out.append(
            LayoutEntry(
                x=cx,
                y=cy,
                radius=r,
                color_key=str(rec.group),
                record=rec,
                label_y=cy - r - label_gap,
            )
        )
    return out


# SECTION: line [id: line]
# =============================================================================


def line_layout(
    dataset: Dataset,
    selection: Iterable[str],
    *,
    x: ScaleFn,
    y: ScaleFn,
) -> list[SeriesPath]:
    """Build one path per selected category, in dataset first-seen order.

    Categories with no records (unknown keys or filtered out) produce no path.
    """
    wanted = set(selection)
    groups = dataset.group_by("category")
    out: list[SeriesPath] = []
    for key, records in groups.items():
        if key not in wanted or not records:
            continue
        ordered = tuple(sorted(records, key=lambda r: r.x))
        vertices = tuple((x(r.x), y(r.y)) for r in ordered)
        out.append(SeriesPath(key=key, vertices=vertices, records=ordered))
    return out


# SECTION: tiles [id: tiles]
# =============================================================================


def tiles_per_row(available_width: float, tile_size: float, padding: float) -> int:
    """Return ``floor(available_width / (tile_size + padding))``, at least 1."""
    return max(1, int(math.floor(available_width / (tile_size + padding))))


def available_tile_width(viewport_width: float, config: TileChartConfig) -> float:
    """Return the width left for tiles between the horizontal margins."""
    return max(0.0, viewport_width - config.margin.left - config.margin.right)


def _group_geometry(count: int, per_row: int, config: TileChartConfig) -> tuple[int, float]:
    rows = math.ceil(count / per_row)
    return rows, rows * (config.tile_size + config.padding) + config.title_offset


def tile_sizing_pass(dataset: Dataset, available_width: float, config: TileChartConfig) -> float:
    """First pass: total surface height needed to draw ``dataset``."""
    per_row = tiles_per_row(available_width, config.tile_size, config.padding)
    total = config.margin.top
    for records in dataset.group_by("group").values():
        total += _group_geometry(len(records), per_row, config)[1]
    return total + config.margin.bottom


def tile_drawing_pass(dataset: Dataset, available_width: float, config: TileChartConfig) -> TileLayout:
    """Second pass: place every tile, accumulating each group's y-offset."""
    per_row = tiles_per_row(available_width, config.tile_size, config.padding)
    cell = config.tile_size + config.padding
    inner = config.tile_size * config.fill_ratio
    y_offset = config.margin.top
    entries: list[TileEntry] = []
    groups: list[TileGroup] = []
    for key, records in dataset.group_by("group").items():
        rows, height = _group_geometry(len(records), per_row, config)
        for i, rec in enumerate(records):
            row, col = divmod(i, per_row)
            entries.append(
                TileEntry(
                    x=config.margin.left + col * cell,
                    y=y_offset + row * cell,
                    width=config.tile_size,
                    height=config.tile_size,
                    color_key=str(key),
                    record=rec,
                    group_key=str(key),
                    row=row,
                    col=col,
                    fill_height=inner * (rec.y / 100.0),
                )
            )
        groups.append(TileGroup(key=str(key), y_offset=y_offset, rows=rows, height=height))
        y_offset += height
    return TileLayout(
        entries=tuple(entries),
        groups=tuple(groups),
        total_height=y_offset + config.margin.bottom,
    )


__all__ = [
    "LABEL_GAP",
    "LayoutEntry",
    "SeriesPath",
    "TileEntry",
    "TileGroup",
    "TileLayout",
    "available_tile_width",
    "line_layout",
    "scatter_layout",
    "tile_drawing_pass",
    "tile_sizing_pass",
    "tiles_per_row",
]
