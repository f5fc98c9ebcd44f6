"""Render engine: scales + layout -> surface elements.

Purpose
-------
Each renderer performs one full clear-and-redraw pass on a
:class:`~healthviz.chart_surface.ChartSurface`:

1. clear every previously rendered element,
2. build scales from the current dataset and viewport,
3. compute the layout,
4. append axes and data elements.

The pass is idempotent: rendering twice with identical inputs yields the same
element count and attribute set. Interaction wiring happens afterwards in
:mod:`healthviz.chart_interaction`, driven by the returned
:class:`RenderResult`.

Important gotchas
-----------------
- Not-ready inputs (empty dataset, zero-width viewport) leave the surface
  empty and return ``None``; they never raise to the caller.
- The line chart's colour scale is keyed on *all* categories of the dataset,
  so a country keeps its colour whatever the selection is.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from .chart_axes import draw_bottom_axis, draw_left_axis
from .chart_config import BubbleChartConfig, LineChartConfig, TileChartConfig
from .chart_errors import GeometryDegenerate
from .chart_layout import (
    LayoutEntry,
    SeriesPath,
    TileLayout,
    available_tile_width,
    line_layout,
    scatter_layout,
    tile_drawing_pass,
    tile_sizing_pass,
)
from .chart_records import Dataset, SelectionState, Viewport
from .chart_scales import (
    CATEGORY10,
    TABLEAU10,
    ColorRampScale,
    OrdinalScale,
    TickFormatter,
    extent_domain,
    linear,
    sqrt,
    zero_based_domain,
)
from .chart_surface import ChartSurface, Element

logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())


@dataclass
class RenderResult:
    """What one render pass produced, for interaction wiring and inspection."""

    kind: str
    scales: dict[str, Any]
    entries: list[LayoutEntry] = field(default_factory=list)
    series: list[SeriesPath] = field(default_factory=list)
    tiles: Optional[TileLayout] = None
    guide: Optional[Element] = None
    tracking: Optional[Element] = None


class ChartRenderer:
    """Base class: owns the clear-then-draw contract."""

    kind = "chart"

    def render(
        self,
        surface: ChartSurface,
        dataset: Dataset,
        viewport: Viewport,
        selection: SelectionState = SelectionState(),
    ) -> Optional[RenderResult]:
        surface.clear()
        try:
            self._require_ready(dataset, viewport)
        except GeometryDegenerate as exc:
            logger.debug("%s render suppressed: %s", self.kind, exc)
            surface.resize(viewport.width, 0)
            return None
        return self._draw(surface, dataset, viewport, selection)

    @staticmethod
    def _require_ready(dataset: Dataset, viewport: Viewport) -> None:
        if not viewport.ready:
            raise GeometryDegenerate("viewport not measured yet (width == 0)")
        if not dataset:
            raise GeometryDegenerate("dataset is empty")

    def _draw(
        self,
        surface: ChartSurface,
        dataset: Dataset,
        viewport: Viewport,
        selection: SelectionState,
    ) -> RenderResult:
        raise NotImplementedError


# SECTION: bubble chart [id: bubble]
# =============================================================================


class BubbleChartRenderer(ChartRenderer):
    """Tax revenue (x) vs. health expenditure (y), radius by population."""

    kind = "bubble"

    def __init__(self, config: BubbleChartConfig = BubbleChartConfig()) -> None:
        self.config = config

    def build_scales(self, dataset: Dataset, width: float) -> dict[str, Any]:
        c = self.config
        m = c.margin
        return {
            "x": linear(zero_based_domain(dataset.values("x"), c.fallback_x_max), (m.left, width - m.right)),
            "y": linear(zero_based_domain(dataset.values("y"), c.fallback_y_max), (c.height - m.bottom, m.top)),
            "size": sqrt(zero_based_domain(dataset.values("size"), c.fallback_size_max), c.radius_range),
            "color": OrdinalScale(TABLEAU10, domain=c.continents),
        }

    def _draw(self, surface, dataset, viewport, selection):
        c = self.config
        m = c.margin
        width = viewport.width
        surface.resize(width, c.height)
        scales = self.build_scales(dataset, width)
        color = scales["color"]

        draw_bottom_axis(surface, scales["x"], y=c.height - m.bottom, title=c.x_title)
        draw_left_axis(surface, scales["y"], x=m.left, title=c.y_title)

        entries = scatter_layout(
            dataset, x=scales["x"], y=scales["y"], size=scales["size"], label_gap=c.label_gap
        )
        for entry in entries:
            surface.append(
                "circle",
                {"cx": entry.x, "cy": entry.y, "r": entry.radius, "fill": color(entry.color_key),
                 "opacity": c.bubble_opacity, "stroke": "none"},
                classes=("bubble",),
                key=entry.color_key,
                datum=entry.record,
            )
        for entry in entries:
            surface.append(
                "text",
                {"x": entry.x, "y": entry.label_y, "text-anchor": "middle", "font-size": 10,
                 "fill": "black", "pointer-events": "none"},
                classes=("bubble-label",),
                key=entry.color_key,
                text=entry.record.category,
            )

        lx, ly = width - m.right + c.legend_offset, m.top
        for i, continent in enumerate(color.domain):
            y_pos = ly + i * c.legend_row_height
            surface.append(
                "rect",
                {"x": lx, "y": y_pos, "width": c.legend_swatch, "height": c.legend_swatch,
                 "fill": color(continent)},
                classes=("legend-swatch",),
                key=continent,
            )
            surface.append(
                "text",
                {"x": lx + c.legend_swatch + 5, "y": y_pos + c.legend_swatch, "font-size": 10,
                 "cursor": "pointer"},
                classes=("legend-label",),
                key=continent,
                text=continent,
            )
        return RenderResult(kind=self.kind, scales=scales, entries=entries)


# SECTION: line chart [id: line]
# =============================================================================


class LineChartRenderer(ChartRenderer):
    """One line per selected country over years."""

    kind = "line"

    def __init__(self, config: LineChartConfig = LineChartConfig()) -> None:
        self.config = config

    def build_scales(self, dataset: Dataset, width: float) -> dict[str, Any]:
        c = self.config
        m = c.margin
        return {
            "x": linear(extent_domain(dataset.values("x"), c.fallback_year_span), (m.left, width - m.right)),
            "y": linear(
                zero_based_domain(dataset.values("y"), c.fallback_y_max), (c.height - m.bottom, m.top), nice=10
            ),
            "color": OrdinalScale(CATEGORY10, domain=dataset.categories()),
        }

    def _draw(self, surface, dataset, viewport, selection):
        c = self.config
        m = c.margin
        width = viewport.width
        surface.resize(width, c.height)
        scales = self.build_scales(dataset, width)
        x, y, color = scales["x"], scales["y"], scales["color"]

        draw_bottom_axis(
            surface,
            x,
            y=c.height - m.bottom,
            formatter=TickFormatter(step=1, integer=True),
            title=c.x_title,
            title_dy=30,
            title_font_size=12,
            title_bold=False,
        )
        draw_left_axis(surface, y, x=m.left)

        series = line_layout(dataset, selection, x=x, y=y)
        for path in series:
            surface.append(
                "path",
                {"points": path.vertices, "fill": "none", "stroke": color(path.key),
                 "stroke-width": c.line_width, "stroke-opacity": 1},
                classes=("country-line",),
                key=path.key,
                datum=path,
            )
        for path in series:
            surface.append(
                "text",
                {"x": width - m.right + c.label_dx, "y": y(path.last.y), "fill": color(path.key),
                 "font-size": 10, "font-weight": "bold", "opacity": 1},
                classes=("country-label",),
                key=path.key,
                datum=path,
                text=path.key,
            )

        guide = surface.append(
            "line",
            {"x1": 0, "x2": 0, "y1": m.top, "y2": c.height - m.bottom, "stroke": "#888",
             "stroke-width": 1, "stroke-dasharray": "4 4", "opacity": 0},
            classes=("hover-line",),
        )
        tracking = surface.append(
            "rect",
            {"x": m.left, "y": m.top, "width": width - m.left - m.right,
             "height": c.height - m.top - m.bottom, "fill": "none", "pointer-events": "all"},
            classes=("tracking-surface",),
        )
        return RenderResult(kind=self.kind, scales=scales, series=series, guide=guide, tracking=tracking)


# SECTION: tile chart [id: tile]
# =============================================================================


class TileChartRenderer(ChartRenderer):
    """Grouped tiles whose inner fill height is proportional to a percentage."""

    kind = "tile"

    def __init__(self, config: TileChartConfig = TileChartConfig()) -> None:
        self.config = config

    def _draw(self, surface, dataset, viewport, selection):
        c = self.config
        available = available_tile_width(viewport.width, c)
        surface.resize(viewport.width, tile_sizing_pass(dataset, available, c))

        layout = tile_drawing_pass(dataset, available, c)
        color = ColorRampScale(zero_based_domain(dataset.values("y"), c.fallback_value_max), c.color_range)
        inner = c.tile_size * c.fill_ratio
        inset = c.tile_size * (1 - c.fill_ratio) / 2

        for group in layout.groups:
            surface.append(
                "text",
                {"x": c.margin.left, "y": group.y_offset - 10, "text-anchor": "start",
                 "font-size": 16, "font-weight": "bold"},
                classes=("group-title",),
                key=group.key,
                text=group.key,
            )
        for entry in layout.entries:
            top = entry.y + c.label_offset
            surface.append(
                "rect",
                {"x": entry.x, "y": top, "width": entry.width, "height": entry.height,
                 "fill": "#fff", "stroke": "#000", "opacity": 1},
                classes=("tile",),
                key=entry.group_key,
                datum=entry.record,
            )
            surface.append(
                "rect",
                {"x": entry.x + inset, "y": top + inset, "width": inner, "height": entry.fill_height,
                 "fill": color(entry.record.y), "opacity": 1, "pointer-events": "none"},
                classes=("tile-fill",),
                key=entry.group_key,
            )
            surface.append(
                "text",
                {"x": entry.x + c.tile_size / 2, "y": entry.y, "text-anchor": "middle", "font-size": 10,
                 "fill": "#000", "pointer-events": "none"},
                classes=("tile-label",),
                key=entry.group_key,
                text=entry.record.category,
            )
            surface.append(
                "text",
                {"x": entry.x + c.tile_size / 2, "y": top + c.tile_size / 2, "text-anchor": "middle",
                 "font-size": 10, "fill": "#000", "pointer-events": "none"},
                classes=("tile-value",),
                key=entry.group_key,
                text=f"{entry.record.y:.1f}%",
            )
        return RenderResult(kind=self.kind, scales={"color": color}, entries=list(layout.entries), tiles=layout)


__all__ = [
    "BubbleChartRenderer",
    "ChartRenderer",
    "LineChartRenderer",
    "RenderResult",
    "TileChartRenderer",
]
