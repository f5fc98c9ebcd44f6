"""
ChartPane.py — Notebook pane for a :class:`~healthviz.Chart` via anywidget

This module hosts one chart inside an ipywidgets layout. Plotly draws the
chart surface; the browser side only reports what Python cannot see on its
own (container size and pointer position), and Python does everything else:
debouncing, layout, hit-testing, highlight and tooltip state.

Public API
----------

- `ChartEventDriver`
    An `anywidget.AnyWidget` whose frontend attaches a `ResizeObserver` and
    pointer listeners to its host box and forwards them to Python as custom
    messages:

        {"type": "resize", "width": w, "height": h}
        {"type": "pointer", "x": x, "y": y, "page_x": px, "page_y": py}
        {"type": "leave"}

    Pointer coordinates are relative to the Plotly plot element, which is
    also the chart surface origin (the figure has zero margins).

- `TooltipOverlay`
    An `anywidget.AnyWidget` that mirrors the process-wide tooltip into a
    `div` appended to `document.body`, so the tooltip can escape the pane's
    clipping box. The div is removed when the widget is disposed.

- `PaneStyle`
    Frozen dataclass with the wrapper styling (padding, border, radius,
    initial height).

- `ChartPane`
    Assembles a `go.FigureWidget`, the driver and the overlay into a host
    box plus a styled wrapper. Exposes `.widget` and `.reflow()`.

Typical usage
-------------

    from healthviz import ChartPane, line_chart

    chart = line_chart()
    pane = ChartPane(chart)
    display(pane.widget)
    await chart.reload("public-health-expenditure-share-gdp.csv")
    chart.on_selection_change({"France", "Germany"})

Key contract
------------

The pane owns its height: bubble and line charts use their configured
height, the tile chart grows to fit all region groups. Width follows the
container. Closing the pane (`close()`) unmounts the chart, which releases
the shared tooltip.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

import anywidget
import ipywidgets as W
import plotly.graph_objects as go
import traitlets
from IPython.display import display

from .Chart import Chart
from .chart_plotly import sync_figure
from .chart_surface import ChartSurface
from .chart_tooltip import TooltipState, TooltipSurface

logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())


__all__ = ["ChartEventDriver", "TooltipOverlay", "PaneStyle", "ChartPane"]


class ChartEventDriver(anywidget.AnyWidget):
    """
    Frontend size and pointer reporter for a chart host box.

    Traitlets (synced to frontend)
    ------------------------------

    min_delta_px:
        Size changes smaller than this (in both dimensions) are not reported.

    debug_js:
        If True, enables console logging from the frontend driver.

    Public methods
    --------------
    reflow():
        Ask the frontend to report the current host size again.
    """

    min_delta_px = traitlets.Int(1).tag(sync=True)
    debug_js = traitlets.Bool(False).tag(sync=True)

    _esm = r"""
    function safeLog(enabled, ...args) {
      if (enabled) console.log("[ChartEventDriver]", ...args);
    }

    function originOf(host) {
      const plotEl = host.querySelector(".js-plotly-plot");
      return (plotEl || host).getBoundingClientRect();
    }

    export default {
      render({ model, el }) {
        el.style.display = "none";
        const debug = !!model.get("debug_js");

        const host = el.parentElement;
        if (!host) {
          safeLog(debug, "No host found; driver inactive.");
          return;
        }

        let last = { w: -1, h: -1 };
        let frame = null;
        let pending = null;

        function reportSize(force) {
          const r = host.getBoundingClientRect();
          const w = Math.round(r.width), h = Math.round(r.height);
          const minDelta = Number(model.get("min_delta_px")) || 0;
          if (!force && Math.abs(w - last.w) < minDelta && Math.abs(h - last.h) < minDelta) return;
          last = { w, h };
          safeLog(debug, "resize", w, h);
          model.send({ type: "resize", width: w, height: h });
        }

        function flushPointer() {
          frame = null;
          if (!pending) return;
          model.send(pending);
          pending = null;
        }

        const onMove = (ev) => {
          const o = originOf(host);
          pending = {
            type: "pointer",
            x: ev.clientX - o.left,
            y: ev.clientY - o.top,
            page_x: ev.pageX,
            page_y: ev.pageY,
          };
          if (frame === null) frame = requestAnimationFrame(flushPointer);
        };

        const onLeave = () => {
          if (frame !== null) cancelAnimationFrame(frame);
          frame = null;
          pending = null;
          model.send({ type: "leave" });
        };

        host.addEventListener("pointermove", onMove);
        host.addEventListener("pointerleave", onLeave);

        const ro = new ResizeObserver(() => reportSize(false));
        ro.observe(host);

        const onMsg = (msg) => {
          if (msg && msg.type === "reflow") reportSize(true);
        };
        model.on("msg:custom", onMsg);

        reportSize(true);

        return () => {
          try { ro.disconnect(); } catch (e) {}
          try { if (frame !== null) cancelAnimationFrame(frame); } catch (e) {}
          try { host.removeEventListener("pointermove", onMove); } catch (e) {}
          try { host.removeEventListener("pointerleave", onLeave); } catch (e) {}
          try { model.off("msg:custom", onMsg); } catch (e) {}
        };
      }
    };
    """

    def reflow(self) -> None:
        """Request a fresh size report from the frontend."""
        self.send({"type": "reflow"})


class TooltipOverlay(anywidget.AnyWidget):
    """
    Floating tooltip div positioned in document coordinates.

    Traitlets (synced to frontend)
    ------------------------------

    html:
        Inner HTML (already escaped by `TooltipContent.to_html`).
    left, top:
        Page coordinates of the tooltip's top-left corner, in pixels.
    visible:
        Whether the div is shown.
    """

    html = traitlets.Unicode("").tag(sync=True)
    left = traitlets.Float(0.0).tag(sync=True)
    top = traitlets.Float(0.0).tag(sync=True)
    visible = traitlets.Bool(False).tag(sync=True)

    _esm = r"""
    export default {
      render({ model, el }) {
        el.style.display = "none";

        const tip = document.createElement("div");
        tip.className = "healthviz-tooltip";
        Object.assign(tip.style, {
          position: "absolute",
          pointerEvents: "none",
          background: "white",
          border: "1px solid #ccc",
          borderRadius: "4px",
          padding: "6px 8px",
          fontSize: "12px",
          boxShadow: "0 2px 6px rgba(0,0,0,0.15)",
          zIndex: "10000",
          opacity: "0",
        });
        document.body.appendChild(tip);

        function sync() {
          tip.innerHTML = model.get("html") || "";
          tip.style.left = `${model.get("left")}px`;
          tip.style.top = `${model.get("top")}px`;
          tip.style.opacity = model.get("visible") ? "1" : "0";
        }

        model.on("change", sync);
        sync();

        return () => {
          try { model.off("change", sync); } catch (e) {}
          try { tip.remove(); } catch (e) {}
        };
      }
    };
    """


@dataclass(frozen=True)
class PaneStyle:
    """
    Visual styling options for `ChartPane`.

    Parameters
    ----------
    padding_px:
        Inner padding (in pixels) applied by the outer wrapper.
    border:
        CSS border string.
    border_radius_px:
        Corner radius in pixels.
    min_height_px:
        Host height used until the first render decides the chart height.
    """

    padding_px: int = 0
    border: str = "1px solid #ddd"
    border_radius_px: int = 8
    min_height_px: int = 200


class ChartPane:
    """
    Notebook widget hosting one :class:`~healthviz.Chart`.

    Parameters
    ----------
    chart:
        The chart to display. The pane mounts it (acquiring the shared
        tooltip) and unmounts it on :meth:`close`.
    style:
        `PaneStyle` controlling the outer wrapper.
    debug_js:
        Enable frontend console logs for troubleshooting.

    Attributes
    ----------
    figure:
        The `go.FigureWidget` mirroring ``chart.surface``.
    driver:
        The `ChartEventDriver` feeding size and pointer input.
    overlay:
        The `TooltipOverlay` mirroring the shared tooltip.
    """

    def __init__(
        self,
        chart: Chart,
        *,
        style: PaneStyle = PaneStyle(),
        debug_js: bool = False,
    ) -> None:
        self.chart = chart
        self.style = style
        self.figure = go.FigureWidget()
        self.driver = ChartEventDriver(debug_js=debug_js)
        self.overlay = TooltipOverlay()
        self._closed = False

        self._host = W.Box(
            [self.figure, self.driver, self.overlay],
            layout=W.Layout(
                width="100%",
                height=f"{int(style.min_height_px)}px",
                min_width="0",
                display="flex",
                flex_flow="column",
                overflow="hidden",
            ),
        )
        self._wrap = W.Box(
            [self._host],
            layout=W.Layout(
                width="100%",
                min_width="0",
                padding=f"{int(style.padding_px)}px",
                border=style.border,
                border_radius=f"{int(style.border_radius_px)}px",
                overflow="hidden",
                box_sizing="border-box",
            ),
        )

        self.driver.on_msg(self._on_driver_msg)

        self._bound_tooltip: Optional[TooltipSurface] = None
        self._unsubscribe_tooltip: Optional[Callable[[], None]] = None

        chart.mount()
        self._unsubscribe_surface = chart.surface.add_listener(self._on_surface_change)
        self._on_surface_change(chart.surface, "attach")

    @property
    def widget(self) -> W.Widget:
        """The widget to embed in an ipywidgets layout."""
        return self._wrap

    @property
    def closed(self) -> bool:
        return self._closed

    def _ipython_display_(self, **kwargs: Any) -> None:
        """
        Special method called by IPython to display the pane.

        Parameters
        ----------
        **kwargs : Any
            Display keyword arguments forwarded by IPython (unused).
        """
        display(self._wrap)

    def reflow(self) -> None:
        """Re-measure the host and settle the viewport without waiting for the debounce."""
        self.driver.reflow()

    def close(self) -> None:
        """Unmount the chart and detach every listener (idempotent)."""
        if self._closed:
            return
        self._closed = True
        self._unsubscribe_surface()
        self._bind_tooltip(None)
        self.chart.unmount()
        self.overlay.visible = False
        self.overlay.close()
        self.driver.close()

    # --- frontend -> python ---

    def _on_driver_msg(self, _widget: Any, content: Any, _buffers: Optional[list] = None) -> None:
        if self._closed or not isinstance(content, dict):
            return
        kind = content.get("type")
        if kind == "resize":
            self.chart.on_resize(float(content.get("width", 0)), float(content.get("height", 0)))
        elif kind == "pointer":
            x, y = content.get("x"), content.get("y")
            if x is None or y is None:
                logger.debug("ChartPane: pointer message without coordinates %r", content)
                return
            self.chart.pointer_move(float(x), float(y), content.get("page_x"), content.get("page_y"))
        elif kind == "leave":
            self.chart.pointer_leave()
        else:
            logger.debug("ChartPane: ignoring driver message %r", content)

    # --- python -> frontend ---

    def _bind_tooltip(self, tooltip: Optional[TooltipSurface]) -> None:
        # A remounted chart may hold a fresh tooltip instance.
        if tooltip is self._bound_tooltip:
            return
        if self._unsubscribe_tooltip is not None:
            self._unsubscribe_tooltip()
            self._unsubscribe_tooltip = None
        self._bound_tooltip = tooltip
        if tooltip is not None:
            self._unsubscribe_tooltip = tooltip.add_listener(self._on_tooltip_change)

    def _on_surface_change(self, surface: ChartSurface, reason: str) -> None:
        self._bind_tooltip(self.chart.tooltip)
        sync_figure(self.figure, surface)
        if surface.height > 0:
            height = max(int(round(surface.height)), int(self.style.min_height_px))
            self._host.layout.height = f"{height}px"
        logger.debug("ChartPane synced (%s): %d elements", reason, len(surface))

    def _on_tooltip_change(self, state: TooltipState) -> None:
        if state.visible and self.chart.tooltip is not None and self.chart.tooltip.visible_owner is not self.chart:
            self.overlay.visible = False
            return
        if state.content is not None:
            self.overlay.html = state.content.to_html()
        self.overlay.left, self.overlay.top = state.anchor
        self.overlay.visible = state.visible
