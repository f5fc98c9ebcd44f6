"""Chart orchestrator: inputs in, render pass out.

Purpose
-------
:class:`Chart` owns the three render inputs (dataset, viewport, selection),
a chart-scoped :class:`~healthviz.chart_surface.ChartSurface`, one renderer
and one interaction controller. It applies the recompute-on-change rule:
whenever any input differs from the inputs of the last pass, run a full
clear-and-redraw.

Render pipeline
---------------
``Scale Builder -> Layout Engine -> Render Engine`` (inside the renderer),
then the interaction controller attaches handlers to the fresh elements,
then surface listeners (the notebook pane) are notified.

Important gotchas
-----------------
- A render pass only ever sees a fully loaded dataset and a settled viewport.
  "Not ready" is an empty dataset or zero width; both draw nothing.
- The dataset is compared by identity (a reload always produces a new
  object), viewport and selection by value.
- The shared tooltip is acquired on :meth:`mount` (or the first render) and
  released on :meth:`unmount`.

Examples
--------
>>> from healthviz import line_chart, Dataset, Record  # doctest: +SKIP
>>> chart = line_chart()  # doctest: +SKIP
>>> chart.set_dataset(Dataset([Record("X", 2000, 5), Record("X", 2010, 8)]))  # doctest: +SKIP
>>> chart.set_viewport(800, 500)  # doctest: +SKIP
>>> chart.on_selection_change({"X"})  # doctest: +SKIP
"""

from __future__ import annotations

import logging
import time
from collections.abc import Iterable
from typing import Any, Optional

from .chart_interaction import HighlightState, InteractionController
from .chart_loader import DatasetLoader, Source
from .chart_records import Dataset, RecordSchema, SelectionState, Viewport
from .chart_render import ChartRenderer, RenderResult
from .chart_surface import ChartSurface, PointerEvent
from .chart_tooltip import TooltipState, TooltipSurface, tooltip_surface
from .chart_viewport import DEFAULT_DEBOUNCE_MS, ViewportObserver

# Module logger
# - Uses a NullHandler so importing this module never configures global logging.
# - Callers can enable logs via standard logging configuration.
logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())


class Chart:
    """One mounted chart instance.

    Parameters
    ----------
    renderer:
        Render engine for the chart kind.
    interaction:
        Interaction controller matching ``renderer``.
    schema:
        Extractor set used by :meth:`reload`. Optional when datasets are
        supplied directly via :meth:`set_dataset`.
    debounce_ms:
        Trailing debounce window of raw resize signals.
    """

    def __init__(
        self,
        renderer: ChartRenderer,
        interaction: InteractionController,
        *,
        schema: Optional[RecordSchema] = None,
        debounce_ms: int = DEFAULT_DEBOUNCE_MS,
    ) -> None:
        self.renderer = renderer
        self.interaction = interaction
        self.surface = ChartSurface()
        self._dataset = Dataset.empty()
        self._viewport = Viewport()
        self._selection = SelectionState()
        self._rendered_inputs: Optional[tuple[Dataset, Viewport, SelectionState]] = None
        self._result: Optional[RenderResult] = None
        self._tooltip: Optional[TooltipSurface] = None
        self._observer = ViewportObserver(self.set_viewport, debounce_ms=debounce_ms)
        self._loader = DatasetLoader(schema, self.set_dataset) if schema is not None else None
        self._render_count = 0
        self._render_info_last_log_t = 0.0

    def __repr__(self) -> str:
        return (
            f"Chart(kind={self.renderer.kind!r}, n={len(self._dataset)}, "
            f"viewport={self._viewport.width:g}x{self._viewport.height:g}, "
            f"selection={len(self._selection)})"
        )

    # --- inputs ---

    @property
    def dataset(self) -> Dataset:
        return self._dataset

    @property
    def viewport(self) -> Viewport:
        return self._viewport

    @property
    def selection(self) -> SelectionState:
        return self._selection

    def set_dataset(self, dataset: Dataset) -> None:
        """Replace the dataset wholesale and re-render if it changed."""
        self._dataset = dataset
        self.update()

    def set_viewport(self, viewport: Viewport | float, height: Optional[float] = None) -> None:
        """Apply a settled viewport (``Viewport`` or ``width, height``)."""
        if not isinstance(viewport, Viewport):
            viewport = Viewport(width=float(viewport), height=float(height or 0))
        self._viewport = viewport
        self.update()

    def on_resize(self, width: float, height: float) -> None:
        """Raw container size signal; settles through the debounced observer."""
        self._observer.notify(width, height)

    def flush_resize(self) -> None:
        """Apply a pending resize immediately."""
        self._observer.flush()

    def on_selection_change(self, keys: Iterable[str]) -> None:
        """Replace the selection (an empty set draws no series)."""
        self._selection = SelectionState(keys)
        self.update()

    async def reload(self, source: Source) -> Optional[Dataset]:
        """Load ``source`` with the chart's schema; stale responses are dropped."""
        if self._loader is None:
            raise RuntimeError("Chart has no RecordSchema; pass schema= to load from a source.")
        return await self._loader.load(source)

    # --- rendering ---

    @property
    def result(self) -> Optional[RenderResult]:
        return self._result

    @property
    def render_count(self) -> int:
        return self._render_count

    def _inputs(self) -> tuple[Dataset, Viewport, SelectionState]:
        return (self._dataset, self._viewport, self._selection)

    def _inputs_changed(self) -> bool:
        last = self._rendered_inputs
        if last is None:
            return True
        dataset, viewport, selection = last
        return dataset is not self._dataset or viewport != self._viewport or selection != self._selection

    def update(self) -> bool:
        """Re-render if any input changed since the last pass; return whether it did."""
        if not self._inputs_changed():
            return False
        self.render(reason="inputs_changed")
        return True

    def render(self, reason: str = "manual") -> Optional[RenderResult]:
        """Run one full clear-and-redraw pass and re-attach interaction handlers."""
        self._log_render(reason)
        if self._tooltip is None:
            self.mount()
        self._result = self.renderer.render(self.surface, self._dataset, self._viewport, self._selection)
        self.interaction.attach(self.surface, self._result)
        self._rendered_inputs = self._inputs()
        self._render_count += 1
        self.surface.notify("render")
        return self._result

    def _log_render(self, reason: str) -> None:
        now = time.monotonic()
        if logger.isEnabledFor(logging.INFO) and (now - self._render_info_last_log_t) > 1.0:
            self._render_info_last_log_t = now
            logger.info(f"render(kind={self.renderer.kind}, reason={reason}) records={len(self._dataset)}")
        logger.debug(
            f"render inputs viewport={self._viewport} selection={sorted(self._selection)}"
        )

    # --- tooltip lifecycle ---

    @property
    def mounted(self) -> bool:
        return self._tooltip is not None

    @property
    def tooltip(self) -> Optional[TooltipSurface]:
        return self._tooltip

    def mount(self) -> None:
        """Acquire the shared tooltip for this chart (idempotent)."""
        if self._tooltip is not None:
            return
        self._tooltip = tooltip_surface()
        self._tooltip.acquire(self)
        self.interaction.bind(self._tooltip, owner=self)
        self.surface.notify("mount")

    def unmount(self) -> None:
        """Release the tooltip, cancel pending resizes and clear the surface."""
        self._observer.cancel()
        if self._tooltip is not None:
            self._tooltip.release(self)
            self._tooltip = None
        self.surface.clear()
        self._rendered_inputs = None
        self._result = None
        self.surface.notify("unmount")

    # --- pointer input ---

    @property
    def highlight_state(self) -> HighlightState:
        return self.interaction.highlight_state

    @property
    def tooltip_state(self) -> TooltipState:
        """Tooltip as seen by this chart (hidden unless this chart owns it)."""
        if self._tooltip is None or self._tooltip.visible_owner is not self:
            return TooltipState()
        return self._tooltip.state

    def pointer_move(
        self,
        x: float,
        y: float,
        page_x: Optional[float] = None,
        page_y: Optional[float] = None,
    ) -> Any:
        """Route a pointer position (surface pixels) to the element under it."""
        return self.surface.dispatch_pointer(PointerEvent(x, y, page_x, page_y))

    def pointer_leave(self) -> None:
        self.surface.dispatch_leave()


__all__ = ["Chart"]
