"""Factory helpers for the three published charts."""

from __future__ import annotations

from .Chart import Chart
from .chart_config import BubbleChartConfig, LineChartConfig, TileChartConfig
from .chart_interaction import BubbleInteraction, LineInteraction, TileInteraction
from .chart_loader import BUBBLE_SCHEMA, LINE_SCHEMA, TILE_SCHEMA
from .chart_records import Dataset
from .chart_render import BubbleChartRenderer, LineChartRenderer, TileChartRenderer
from .chart_viewport import DEFAULT_DEBOUNCE_MS


def bubble_chart(config: BubbleChartConfig = BubbleChartConfig(), *, debounce_ms: int = DEFAULT_DEBOUNCE_MS) -> Chart:
    """Tax revenue vs. health expenditure per capita, bubble area by population."""
    return Chart(BubbleChartRenderer(config), BubbleInteraction(), schema=BUBBLE_SCHEMA, debounce_ms=debounce_ms)


def line_chart(config: LineChartConfig = LineChartConfig(), *, debounce_ms: int = DEFAULT_DEBOUNCE_MS) -> Chart:
    """Health expenditure share of GDP over time; series chosen by selection."""
    return Chart(LineChartRenderer(config), LineInteraction(), schema=LINE_SCHEMA, debounce_ms=debounce_ms)


def tile_chart(config: TileChartConfig = TileChartConfig(), *, debounce_ms: int = DEFAULT_DEBOUNCE_MS) -> Chart:
    """Health expenditure percentage tiles grouped by region."""
    return Chart(TileChartRenderer(config), TileInteraction(), schema=TILE_SCHEMA, debounce_ms=debounce_ms)


def category_options(dataset: Dataset) -> list[dict[str, str]]:
    """Multi-select options ``{"value", "label"}`` in first-seen order."""
    return [{"value": key, "label": key} for key in dataset.categories()]


__all__ = ["bubble_chart", "category_options", "line_chart", "tile_chart"]
