"""Top-level public API for the ``healthviz`` package.

Three interactive public-health charts (bubble, multi-line, tile grid) built
on a shared pipeline: record schema, scales, layout, render, interaction.
Everything a notebook needs is re-exported here, for example:

>>> from healthviz import ChartPane, bubble_chart  # doctest: +SKIP
>>> chart = bubble_chart()  # doctest: +SKIP
>>> display(ChartPane(chart).widget)  # doctest: +SKIP

Lower-level building blocks (scales, layout passes, the chart surface) are
exported too, for tests and custom renderers.
"""

from .Chart import Chart
from .chart_api import bubble_chart, category_options, line_chart, tile_chart
from .chart_config import (
    CONTINENTS,
    BubbleChartConfig,
    LineChartConfig,
    Margin,
    TileChartConfig,
)
from .chart_errors import (
    ChartError,
    GeometryDegenerate,
    InteractionBoundsError,
    LoadError,
    RecordParseError,
)
from .chart_interaction import (
    BubbleInteraction,
    HighlightState,
    InteractionController,
    LineInteraction,
    TileInteraction,
)
from .chart_layout import (
    LayoutEntry,
    SeriesPath,
    TileEntry,
    TileLayout,
    line_layout,
    scatter_layout,
    tile_drawing_pass,
    tile_sizing_pass,
    tiles_per_row,
)
from .chart_loader import BUBBLE_SCHEMA, LINE_SCHEMA, TILE_SCHEMA, DatasetLoader, load_dataset
from .chart_plotly import surface_to_figure, sync_figure
from .chart_records import (
    Dataset,
    FieldExtractor,
    Record,
    RecordSchema,
    SelectionState,
    Viewport,
)
from .chart_render import (
    BubbleChartRenderer,
    ChartRenderer,
    LineChartRenderer,
    RenderResult,
    TileChartRenderer,
)
from .chart_scales import ColorRampScale, LinearScale, OrdinalScale, SqrtScale, linear, sqrt
from .chart_surface import ChartSurface, Element, PointerEvent
from .chart_tooltip import TooltipContent, TooltipRow, TooltipState, TooltipSurface, tooltip_surface
from .chart_viewport import ViewportObserver
from .ChartPane import ChartPane, PaneStyle
from .debouncing import TrailingDebouncer

__all__ = [
    "BUBBLE_SCHEMA",
    "BubbleChartConfig",
    "BubbleChartRenderer",
    "BubbleInteraction",
    "CONTINENTS",
    "Chart",
    "ChartError",
    "ChartPane",
    "ChartRenderer",
    "ChartSurface",
    "ColorRampScale",
    "Dataset",
    "DatasetLoader",
    "Element",
    "FieldExtractor",
    "GeometryDegenerate",
    "HighlightState",
    "InteractionBoundsError",
    "InteractionController",
    "LINE_SCHEMA",
    "LayoutEntry",
    "LineChartConfig",
    "LineChartRenderer",
    "LineInteraction",
    "LinearScale",
    "LoadError",
    "Margin",
    "OrdinalScale",
    "PaneStyle",
    "PointerEvent",
    "Record",
    "RecordParseError",
    "RecordSchema",
    "RenderResult",
    "SelectionState",
    "SeriesPath",
    "SqrtScale",
    "TILE_SCHEMA",
    "TileChartConfig",
    "TileChartRenderer",
    "TileEntry",
    "TileInteraction",
    "TileLayout",
    "TooltipContent",
    "TooltipRow",
    "TooltipState",
    "TooltipSurface",
    "TrailingDebouncer",
    "Viewport",
    "ViewportObserver",
    "bubble_chart",
    "category_options",
    "line_chart",
    "linear",
    "load_dataset",
    "scatter_layout",
    "line_layout",
    "sqrt",
    "surface_to_figure",
    "sync_figure",
    "tile_chart",
    "tile_drawing_pass",
    "tile_sizing_pass",
    "tiles_per_row",
    "tooltip_surface",
]
