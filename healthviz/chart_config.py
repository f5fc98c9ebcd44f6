"""Per-chart configuration contracts.

Each chart kind is configured by one frozen dataclass whose defaults are the
published constants of that chart (margins, surface height, fallback domain
upper bounds, glyph sizes). Keeping them in one module gives tests a single
place to lock geometry, and keeps renderers free of magic numbers.
"""

from __future__ import annotations

from dataclasses import dataclass

CONTINENTS: tuple[str, ...] = (
    "Africa",
    "Asia",
    "Europe",
    "North America",
    "Oceania",
    "South America",
)


@dataclass(frozen=True)
class Margin:
    """Pixel margins around the plotting area."""

    top: float
    right: float
    bottom: float
    left: float


@dataclass(frozen=True)
class BubbleChartConfig:
    """Tax revenue vs. health expenditure bubble chart.

    Parameters
    ----------
    margin:
        Right margin leaves room for the continent legend.
    height:
        Fixed surface height in pixels; width follows the viewport.
    fallback_x_max, fallback_y_max, fallback_size_max:
        Domain upper bounds used when the dataset is empty or degenerate.
    radius_range:
        Pixel radius interval of the square-root size scale.
    label_gap:
        Distance between a bubble's top edge and its country label.
    """

    margin: Margin = Margin(top=40, right=120, bottom=60, left=80)
    height: float = 500
    fallback_x_max: float = 10000
    fallback_y_max: float = 5000
    fallback_size_max: float = 40_000_000
    radius_range: tuple[float, float] = (5, 40)
    bubble_opacity: float = 0.7
    label_gap: float = 5
    continents: tuple[str, ...] = CONTINENTS
    legend_offset: float = 20
    legend_row_height: float = 20
    legend_swatch: float = 10
    x_title: str = "Tax Revenues per Capita ($)"
    y_title: str = "Public Health Expenditure per Capita ($)"


@dataclass(frozen=True)
class LineChartConfig:
    """Health expenditure share of GDP over time, one line per country."""

    margin: Margin = Margin(top=40, right=80, bottom=40, left=30)
    height: float = 500
    min_year: int = 1880
    fallback_year_span: float = 1
    fallback_y_max: float = 1
    line_width: float = 1.5
    label_dx: float = 5
    x_title: str = "Year"


@dataclass(frozen=True)
class TileChartConfig:
    """Grouped small-multiple tiles, one tile per country, grouped by region.

    ``fill_ratio`` is the share of the tile taken by the inner fill box, whose
    height is further scaled by ``value / 100``.
    """

    margin: Margin = Margin(top=40, right=20, bottom=40, left=20)
    tile_size: float = 50
    padding: float = 20
    title_offset: float = 30
    label_offset: float = 12
    fill_ratio: float = 0.8
    fallback_value_max: float = 100
    color_range: tuple[str, str] = ("#f7e1d7", "#b55a30")


__all__ = [
    "BubbleChartConfig",
    "CONTINENTS",
    "LineChartConfig",
    "Margin",
    "TileChartConfig",
]
