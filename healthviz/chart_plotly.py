"""Plotly display backend for :class:`~healthviz.chart_surface.ChartSurface`.

The element set is drawn as Plotly layout shapes (circle, rect, line, path)
and annotations (text) on hidden axes whose ranges equal the surface size in
pixels, with the y-axis reversed so that element coordinates are used as-is.
Plotly only displays; pointer handling stays in the Python dispatcher.
"""

from __future__ import annotations

import html
from typing import Any, Optional

import plotly.graph_objects as go

from .chart_surface import ChartSurface, Element

TRANSPARENT = "rgba(0,0,0,0)"
_ANCHORS = {"start": "left", "middle": "center", "end": "right"}


def _paint(value: Any) -> str:
    if value in (None, "none"):
        return TRANSPARENT
    return str(value)


def _line(el: Element, *, default_width: float = 1.0) -> dict[str, Any]:
    a = el.attrs
    stroke = a.get("stroke")
    width = float(a.get("stroke-width", default_width)) if stroke not in (None, "none") else 0.0
    out: dict[str, Any] = {"color": _paint(stroke), "width": width}
    if a.get("stroke-dasharray"):
        out["dash"] = "dash"
    return out


def element_to_shape(el: Element) -> Optional[dict[str, Any]]:
    """Return the Plotly shape dict for ``el``, or ``None`` for non-shape tags."""
    a = el.attrs
    base = {"xref": "x", "yref": "y", "layer": "above", "opacity": float(a.get("opacity", 1))}
    if el.tag == "circle":
        cx, cy, r = a["cx"], a["cy"], a["r"]
        return {**base, "type": "circle", "x0": cx - r, "x1": cx + r, "y0": cy - r, "y1": cy + r,
                "fillcolor": _paint(a.get("fill")), "line": _line(el)}
    if el.tag == "rect":
        return {**base, "type": "rect", "x0": a["x"], "x1": a["x"] + a["width"], "y0": a["y"],
                "y1": a["y"] + a["height"], "fillcolor": _paint(a.get("fill")), "line": _line(el)}
    if el.tag == "line":
        return {**base, "type": "line", "x0": a["x1"], "x1": a["x2"], "y0": a["y1"], "y1": a["y2"],
                "line": _line(el)}
    if el.tag == "path":
        points = a.get("points") or ()
        if not points:
            return None
        d = "M " + " L ".join(f"{x:.2f},{y:.2f}" for x, y in points)
        return {**base, "type": "path", "path": d, "opacity": float(a.get("stroke-opacity", 1)),
                "line": _line(el)}
    return None


def element_to_annotation(el: Element) -> Optional[dict[str, Any]]:
    """Return the Plotly annotation dict for a text element."""
    if el.tag != "text" or not el.text:
        return None
    a = el.attrs
    text = html.escape(el.text)
    if a.get("font-weight") == "bold":
        text = f"<b>{text}</b>"
    return {
        "x": a["x"],
        "y": a["y"],
        "xref": "x",
        "yref": "y",
        "text": text,
        "showarrow": False,
        "xanchor": _ANCHORS.get(a.get("text-anchor", "start"), "left"),
        "yanchor": "bottom",
        "textangle": float(a.get("rotate", 0)),
        "opacity": float(a.get("opacity", 1)),
        "font": {"size": float(a.get("font-size", 10)), "color": str(a.get("fill", "black"))},
    }


def _layout(surface: ChartSurface) -> dict[str, Any]:
    w, h = max(surface.width, 1.0), max(surface.height, 1.0)
    return {
        "margin": {"l": 0, "r": 0, "t": 0, "b": 0},
        "xaxis": {"range": [0, w], "visible": False, "fixedrange": True},
        "yaxis": {"range": [h, 0], "visible": False, "fixedrange": True},
        "showlegend": False,
        "hovermode": False,
        "dragmode": False,
        "plot_bgcolor": "white",
        "paper_bgcolor": "white",
        "width": max(w, 10.0),
        "height": max(h, 10.0),
    }


def surface_parts(surface: ChartSurface) -> tuple[list[dict[str, Any]], list[dict[str, Any]]]:
    """Split the surface into ``(shapes, annotations)`` in paint order."""
    shapes: list[dict[str, Any]] = []
    annotations: list[dict[str, Any]] = []
    for el in surface:
        shape = element_to_shape(el)
        if shape is not None:
            shapes.append(shape)
            continue
        ann = element_to_annotation(el)
        if ann is not None:
            annotations.append(ann)
    return shapes, annotations


def surface_to_figure(surface: ChartSurface) -> go.Figure:
    """Build a static Plotly figure showing the current element set."""
    fig = go.Figure()
    sync_figure(fig, surface)
    return fig


def sync_figure(fig: go.Figure, surface: ChartSurface) -> None:
    """Replace ``fig``'s shapes and annotations with the surface contents."""
    shapes, annotations = surface_parts(surface)
    fig.update_layout(overwrite=True, shapes=shapes, annotations=annotations, **_layout(surface))


__all__ = [
    "element_to_annotation",
    "element_to_shape",
    "surface_parts",
    "surface_to_figure",
    "sync_figure",
]
