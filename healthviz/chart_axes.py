"""Axis drawing helpers.

Axes are plain surface elements rebuilt on every render pass from the current
scale instance: a domain line, one tick mark and one tick label per tick, and
an optional title. All axis elements carry the ``axis`` class plus
``x-axis``/``y-axis`` so they can be selected (and never highlighted).
"""

from __future__ import annotations

from typing import Callable, Optional

from .chart_scales import LinearScale
from .chart_surface import ChartSurface, Element

TICK_SIZE = 6.0
TICK_PADDING = 3.0
TICK_FONT_SIZE = 10
TITLE_FONT_SIZE = 14
AXIS_COLOR = "#000"


def draw_bottom_axis(
    surface: ChartSurface,
    scale: LinearScale,
    *,
    y: float,
    count: int = 10,
    formatter: Optional[Callable[[float], str]] = None,
    title: Optional[str] = None,
    title_dy: float = 40,
    title_font_size: float = TITLE_FONT_SIZE,
    title_bold: bool = True,
) -> list[Element]:
    """Draw a horizontal axis at pixel row ``y`` and return its elements."""
    fmt = formatter or scale.tick_format(count)
    r0, r1 = scale.range
    out = [
        surface.append(
            "line",
            {"x1": r0, "y1": y, "x2": r1, "y2": y, "stroke": AXIS_COLOR},
            classes=("axis", "x-axis", "domain"),
        )
    ]
    for value in scale.ticks(count):
        px = scale(value)
        out.append(
            surface.append(
                "line",
                {"x1": px, "y1": y, "x2": px, "y2": y + TICK_SIZE, "stroke": AXIS_COLOR},
                classes=("axis", "x-axis", "tick"),
            )
        )
        out.append(
            surface.append(
                "text",
                {"x": px, "y": y + TICK_SIZE + TICK_PADDING + TICK_FONT_SIZE, "text-anchor": "middle",
                 "font-size": TICK_FONT_SIZE, "fill": AXIS_COLOR},
                classes=("axis", "x-axis", "tick-label"),
                text=fmt(float(value)),
            )
        )
    if title:
        attrs = {"x": (r0 + r1) / 2, "y": y + title_dy, "text-anchor": "middle",
                 "font-size": title_font_size, "fill": "black"}
        if title_bold:
            attrs["font-weight"] = "bold"
        out.append(surface.append("text", attrs, classes=("axis", "x-axis", "axis-title"), text=title))
    return out


def draw_left_axis(
    surface: ChartSurface,
    scale: LinearScale,
    *,
    x: float,
    count: int = 10,
    formatter: Optional[Callable[[float], str]] = None,
    title: Optional[str] = None,
    title_dx: float = -60,
) -> list[Element]:
    """Draw a vertical axis at pixel column ``x``; the title is rotated -90 degrees."""
    fmt = formatter or scale.tick_format(count)
    r0, r1 = scale.range
    out = [
        surface.append(
            "line",
            {"x1": x, "y1": r0, "x2": x, "y2": r1, "stroke": AXIS_COLOR},
            classes=("axis", "y-axis", "domain"),
        )
    ]
    for value in scale.ticks(count):
        py = scale(value)
        out.append(
            surface.append(
                "line",
                {"x1": x - TICK_SIZE, "y1": py, "x2": x, "y2": py, "stroke": AXIS_COLOR},
                classes=("axis", "y-axis", "tick"),
            )
        )
        out.append(
            surface.append(
                "text",
                {"x": x - TICK_SIZE - TICK_PADDING, "y": py + TICK_FONT_SIZE / 3, "text-anchor": "end",
                 "font-size": TICK_FONT_SIZE, "fill": AXIS_COLOR},
                classes=("axis", "y-axis", "tick-label"),
                text=fmt(float(value)),
            )
        )
    if title:
        out.append(
            surface.append(
                "text",
                {"x": x + title_dx, "y": (r0 + r1) / 2, "text-anchor": "middle", "rotate": -90,
                 "font-size": TITLE_FONT_SIZE, "font-weight": "bold", "fill": "black"},
                classes=("axis", "y-axis", "axis-title"),
                text=title,
            )
        )
    return out


__all__ = ["draw_bottom_axis", "draw_left_axis"]
