from __future__ import annotations

import logging

import pytest

from healthviz.chart_config import BubbleChartConfig, LineChartConfig, TileChartConfig
from healthviz.chart_records import Dataset, Record, SelectionState, Viewport
from healthviz.chart_render import BubbleChartRenderer, LineChartRenderer, TileChartRenderer
from healthviz.chart_surface import ChartSurface


def _bubbles() -> Dataset:
    return Dataset(
        [
            Record("Y", x=5000, y=2000, size=10e6, group="Europe"),
            Record("Z", x=1000, y=500, size=1e6, group="Asia"),
            Record("W", x=8000, y=4000, size=40e6, group="Europe"),
        ]
    )


def _lines() -> Dataset:
    return Dataset(
        [
            Record("X", x=2000, y=5),
            Record("X", x=2010, y=8),
            Record("Q", x=2000, y=7),
            Record("Q", x=2010, y=2),
        ]
    )


def _tiles() -> Dataset:
    return Dataset(
        [Record(f"C{i}", y=float(5 + i), size=1e6 * (i + 1), group="Asia") for i in range(5)]
        + [Record("F", y=11.0, size=67e6, group="Europe")]
    )


def test_line_scenario_draws_one_path_with_two_vertices() -> None:
    surface = ChartSurface()
    dataset = Dataset([Record("X", x=2000, y=5), Record("X", x=2010, y=8)])

    result = LineChartRenderer().render(surface, dataset, Viewport(800, 500), SelectionState({"X"}))

    (path,) = surface.select("country-line")
    x, y = result.scales["x"], result.scales["y"]
    assert path.attrs["points"] == ((x(2000), y(5)), (x(2010), y(8)))
    assert path.key == "X"
    assert x(2000) == LineChartConfig().margin.left
    assert x(2010) == 800 - LineChartConfig().margin.right


@pytest.mark.parametrize(
    ("renderer", "dataset", "selection"),
    [
        (BubbleChartRenderer(), _bubbles(), SelectionState()),
        (LineChartRenderer(), _lines(), SelectionState({"X", "Q"})),
        (TileChartRenderer(), _tiles(), SelectionState()),
    ],
)
def test_render_is_idempotent(renderer, dataset, selection) -> None:
    surface = ChartSurface()
    renderer.render(surface, dataset, Viewport(800, 500), selection)
    first = surface.snapshot()

    renderer.render(surface, dataset, Viewport(800, 500), selection)

    assert surface.snapshot() == first
    assert len(surface) == len(first)


def test_selection_round_trip_restores_the_same_series() -> None:
    renderer = LineChartRenderer()
    surface = ChartSurface()
    dataset = _lines()
    viewport = Viewport(800, 500)

    renderer.render(surface, dataset, viewport, SelectionState({"X", "Q"}))
    first = surface.snapshot()
    renderer.render(surface, dataset, viewport, SelectionState())
    assert surface.select("country-line") == []
    renderer.render(surface, dataset, viewport, SelectionState({"Q", "X"}))

    assert surface.snapshot() == first
    assert [el.key for el in surface.select("country-line")] == ["X", "Q"]


def test_empty_selection_still_draws_axes() -> None:
    surface = ChartSurface()
    LineChartRenderer().render(surface, _lines(), Viewport(800, 500), SelectionState())

    assert surface.select("country-line") == []
    assert surface.select("country-label") == []
    assert surface.select("x-axis")
    assert surface.select("y-axis")


def test_line_colours_do_not_depend_on_selection() -> None:
    renderer = LineChartRenderer()
    surface = ChartSurface()
    renderer.render(surface, _lines(), Viewport(800, 500), SelectionState({"Q"}))
    only_q = surface.select("country-line")[0].attrs["stroke"]
    renderer.render(surface, _lines(), Viewport(800, 500), SelectionState({"X", "Q"}))
    both_q = surface.select_key("country-line", "Q")[0].attrs["stroke"]
    assert only_q == both_q


@pytest.mark.parametrize(
    ("dataset", "viewport"),
    [(Dataset.empty(), Viewport(800, 500)), (_bubbles(), Viewport(0, 500))],
)
def test_not_ready_inputs_clear_the_surface(dataset, viewport, caplog) -> None:
    surface = ChartSurface()
    renderer = BubbleChartRenderer()
    renderer.render(surface, _bubbles(), Viewport(800, 500))
    assert len(surface) > 0

    with caplog.at_level(logging.DEBUG, logger="healthviz.chart_render"):
        result = renderer.render(surface, dataset, viewport)

    assert result is None
    assert len(surface) == 0
    assert "render suppressed" in caplog.text


def test_bubble_render_uses_fallback_domains_for_degenerate_data() -> None:
    config = BubbleChartConfig()
    dataset = Dataset([Record("Solo", x=0, y=0, size=0, group="Asia")])
    result = BubbleChartRenderer(config).render(ChartSurface(), dataset, Viewport(800, 500))

    assert result.scales["x"].domain == (0.0, config.fallback_x_max)
    assert result.scales["y"].domain == (0.0, config.fallback_y_max)
    assert result.scales["size"].domain == (0.0, config.fallback_size_max)
    (entry,) = result.entries
    assert entry.radius == config.radius_range[0]


def test_bubble_render_emits_bubbles_labels_and_legend() -> None:
    surface = ChartSurface()
    BubbleChartRenderer().render(surface, _bubbles(), Viewport(800, 500))

    bubbles = surface.select("bubble")
    assert [b.datum.category for b in bubbles] == ["Y", "Z", "W"]
    assert all(b.attrs["opacity"] == 0.7 for b in bubbles)
    assert [t.text for t in surface.select("bubble-label")] == ["Y", "Z", "W"]
    assert [t.text for t in surface.select("legend-label")] == list(BubbleChartConfig().continents)
    assert surface.height == BubbleChartConfig().height


def test_tile_render_sizes_surface_from_the_sizing_pass() -> None:
    config = TileChartConfig()
    surface = ChartSurface()
    result = TileChartRenderer(config).render(surface, _tiles(), Viewport(260, 0))

    assert surface.height == result.tiles.total_height
    assert [t.text for t in surface.select("group-title")] == ["Asia", "Europe"]
    assert len(surface.select("tile")) == 6
    assert surface.select("tile-value")[0].text == "5.0%"
    assert result.scales["color"](0) == config.color_range[0]
