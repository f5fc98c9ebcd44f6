from __future__ import annotations

import plotly.graph_objects as go

from healthviz import line_chart
from healthviz.chart_plotly import (
    TRANSPARENT,
    element_to_annotation,
    element_to_shape,
    surface_parts,
    surface_to_figure,
    sync_figure,
)
from healthviz.chart_records import Dataset, Record
from healthviz.chart_surface import ChartSurface, Element


def test_circle_becomes_bounding_box_shape() -> None:
    el = Element("circle", {"cx": 100, "cy": 50, "r": 10, "fill": "#4e79a7", "opacity": 0.7, "stroke": "none"})
    shape = element_to_shape(el)
    assert shape["type"] == "circle"
    assert (shape["x0"], shape["x1"], shape["y0"], shape["y1"]) == (90, 110, 40, 60)
    assert shape["opacity"] == 0.7
    assert shape["line"]["width"] == 0.0
    assert shape["line"]["color"] == TRANSPARENT


def test_path_becomes_svg_path_with_stroke_opacity() -> None:
    el = Element(
        "path",
        {"points": ((0, 0), (10.5, 20)), "stroke": "#1f77b4", "stroke-width": 1.5, "stroke-opacity": 0.1},
    )
    shape = element_to_shape(el)
    assert shape["path"] == "M 0.00,0.00 L 10.50,20.00"
    assert shape["opacity"] == 0.1
    assert shape["line"] == {"color": "#1f77b4", "width": 1.5}


def test_empty_path_and_text_are_not_shapes() -> None:
    assert element_to_shape(Element("path", {"points": ()})) is None
    assert element_to_shape(Element("text", {"x": 0, "y": 0}, text="a")) is None


def test_dashed_line_keeps_dash() -> None:
    el = Element("line", {"x1": 5, "x2": 5, "y1": 0, "y2": 100, "stroke": "#888", "stroke-dasharray": "4 4"})
    assert element_to_shape(el)["line"]["dash"] == "dash"


def test_text_becomes_escaped_annotation() -> None:
    el = Element(
        "text",
        {"x": 10, "y": 20, "text-anchor": "end", "font-weight": "bold", "rotate": -90, "font-size": 12},
        text="R&D <share>",
    )
    ann = element_to_annotation(el)
    assert ann["text"] == "<b>R&amp;D &lt;share&gt;</b>"
    assert ann["xanchor"] == "right"
    assert ann["textangle"] == -90
    assert ann["font"]["size"] == 12
    assert element_to_annotation(Element("text", {"x": 0, "y": 0})) is None


def test_surface_parts_preserve_paint_order() -> None:
    surface = ChartSurface(100, 100)
    surface.append("rect", {"x": 0, "y": 0, "width": 5, "height": 5, "fill": "red"})
    surface.append("text", {"x": 1, "y": 1}, text="first")
    surface.append("circle", {"cx": 1, "cy": 1, "r": 1})
    surface.append("text", {"x": 2, "y": 2}, text="second")

    shapes, annotations = surface_parts(surface)

    assert [s["type"] for s in shapes] == ["rect", "circle"]
    assert [a["text"] for a in annotations] == ["first", "second"]


def test_rendered_chart_converts_to_figure() -> None:
    chart = line_chart()
    chart.set_dataset(Dataset([Record("X", x=2000, y=5), Record("X", x=2010, y=8)]))
    chart.set_viewport(800, 500)
    chart.on_selection_change({"X"})

    fig = surface_to_figure(chart.surface)

    shapes, annotations = surface_parts(chart.surface)
    assert isinstance(fig, go.Figure)
    assert len(fig.layout.shapes) == len(shapes)
    assert len(fig.layout.annotations) == len(annotations)
    assert tuple(fig.layout.xaxis.range) == (0, 800)
    assert tuple(fig.layout.yaxis.range) == (500, 0)


def test_sync_figure_replaces_previous_contents() -> None:
    fig = go.Figure()
    surface = ChartSurface(200, 100)
    surface.append("rect", {"x": 0, "y": 0, "width": 5, "height": 5})
    surface.append("rect", {"x": 10, "y": 0, "width": 5, "height": 5})
    sync_figure(fig, surface)
    assert len(fig.layout.shapes) == 2

    surface.clear()
    surface.append("circle", {"cx": 1, "cy": 1, "r": 1})
    sync_figure(fig, surface)

    assert len(fig.layout.shapes) == 1
    assert fig.layout.shapes[0].type == "circle"
    assert fig.layout.annotations == ()
