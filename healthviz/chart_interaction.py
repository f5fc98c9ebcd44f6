"""Pointer-driven highlight and tooltip state machines.

Purpose
-------
An :class:`InteractionController` attaches pointer handlers to the elements
of a freshly rendered surface and keeps two pieces of derived state:

- :class:`HighlightState` — at most one highlighted key, or none,
- the shared tooltip (:mod:`healthviz.chart_tooltip`), owned by one chart.

State machine
-------------
``Idle -> Hovering(key) -> Idle`` per element, and independently
``TooltipHidden <-> TooltipVisible(content, position)``:

- pointer-enter: clear the previous highlight fully, dim every other element
  of the highlight classes, emphasise same-key siblings, show the tooltip;
- pointer-move: reposition (bubble, tile) or rebuild from the tracked x value
  (line);
- pointer-leave: restore resting attributes, hide tooltip and guide line.

Selection changes never come through here: they replace the selection and
trigger a full re-render in :class:`healthviz.Chart.Chart`.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Optional

from .chart_errors import InteractionBoundsError
from .chart_records import Record
from .chart_render import RenderResult
from .chart_surface import ChartSurface, Element, PointerEvent
from .chart_tooltip import TooltipContent, TooltipRow, TooltipSurface

logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())

DIM_OPACITY = 0.1
FULL_OPACITY = 1.0


@dataclass(frozen=True)
class HighlightState:
    key: Optional[str] = None

    @property
    def active(self) -> bool:
        return self.key is not None


NO_HIGHLIGHT = HighlightState()


@dataclass(frozen=True)
class HighlightTarget:
    """Elements of ``css_class`` take part in highlighting via ``opacity_attr``."""

    css_class: str
    opacity_attr: str = "opacity"
    emphasis: tuple[tuple[str, Any], ...] = ()

    @property
    def touched(self) -> tuple[str, ...]:
        return (self.opacity_attr, *(name for name, _ in self.emphasis))


def locale_number(value: float) -> str:
    """Group thousands and keep up to three decimals (``12345.5`` -> ``12,345.5``)."""
    text = f"{value:,.3f}".rstrip("0").rstrip(".")
    return "0" if text in ("-0", "") else text


def millions(value: float) -> str:
    return f"{value / 1e6:.2f} million"


class InteractionController:
    """Base controller: highlight bookkeeping and tooltip ownership."""

    kind = "chart"
    targets: tuple[HighlightTarget, ...] = ()
    tooltip_offset: tuple[float, float] = (10.0, -20.0)

    def __init__(self) -> None:
        self._surface: Optional[ChartSurface] = None
        self._result: Optional[RenderResult] = None
        self._tooltip: Optional[TooltipSurface] = None
        self._owner: Any = self
        self._highlight = NO_HIGHLIGHT

    # --- wiring ---

    def bind(self, tooltip: TooltipSurface, owner: Any = None) -> None:
        """Attach the shared tooltip; ``owner`` identifies the chart to it."""
        self._tooltip = tooltip
        self._owner = self if owner is None else owner

    def attach(self, surface: ChartSurface, result: Optional[RenderResult]) -> None:
        """Bind handlers to the elements of a fresh render pass.

        Highlight state from the previous pass is dropped: those elements are
        gone, so there is nothing to restore.
        """
        self._surface = surface
        self._result = result
        self._highlight = NO_HIGHLIGHT
        self.hide_tooltip()
        if result is not None:
            self._attach(surface, result)

    def _attach(self, surface: ChartSurface, result: RenderResult) -> None:
        raise NotImplementedError

    # --- state ---

    @property
    def highlight_state(self) -> HighlightState:
        return self._highlight

    @property
    def tooltip(self) -> Optional[TooltipSurface]:
        return self._tooltip

    def highlight(self, key: str) -> None:
        """Highlight ``key``; the previous highlight is fully cleared first."""
        self.clear_highlight()
        if self._surface is None:
            return
        self._highlight = HighlightState(key=key)
        for target in self.targets:
            for el in self._surface.select(target.css_class):
                if el.key == key:
                    el.attrs[target.opacity_attr] = FULL_OPACITY
                    for name, value in target.emphasis:
                        el.attrs[name] = value
                else:
                    el.attrs[target.opacity_attr] = DIM_OPACITY

    def clear_highlight(self) -> None:
        if self._surface is not None:
            for target in self.targets:
                for el in self._surface.select(target.css_class):
                    el.restore(*target.touched)
        self._highlight = NO_HIGHLIGHT

    def show_tooltip(self, content: TooltipContent, event: PointerEvent) -> None:
        if self._tooltip is None:
            return
        px, py = event.page
        dx, dy = self.tooltip_offset
        self._tooltip.show(self._owner, content, (px + dx, py + dy))

    def move_tooltip(self, event: PointerEvent) -> None:
        if self._tooltip is None:
            return
        px, py = event.page
        dx, dy = self.tooltip_offset
        self._tooltip.move(self._owner, (px + dx, py + dy))

    def hide_tooltip(self) -> None:
        if self._tooltip is not None:
            self._tooltip.hide(self._owner)

    # --- generic handlers ---

    def describe(self, el: Element) -> Optional[TooltipContent]:
        """Return tooltip content for ``el``, or ``None`` for no tooltip."""
        return None

    def on_enter(self, el: Element, event: PointerEvent) -> None:
        if el.key is not None:
            self.highlight(el.key)
        content = self.describe(el)
        if content is not None:
            self.show_tooltip(content, event)
        self._changed()

    def on_move(self, el: Element, event: PointerEvent) -> None:
        self.move_tooltip(event)

    def on_leave(self, el: Optional[Element] = None, event: Optional[PointerEvent] = None) -> None:
        self.clear_highlight()
        self.hide_tooltip()
        self._changed()

    def _bind_hover(self, el: Element, *, tooltip: bool = True) -> None:
        el.on("pointerenter", self.on_enter)
        el.on("pointerleave", self.on_leave)
        if tooltip:
            el.on("pointermove", self.on_move)

    def _changed(self) -> None:
        if self._surface is not None:
            self._surface.notify("interaction")


# SECTION: bubble [id: bubble]
# =============================================================================


class BubbleInteraction(InteractionController):
    """Bubble hover highlights its continent; legend labels do the same."""

    kind = "bubble"
    targets = (HighlightTarget("bubble", "opacity", (("stroke", "#333"), ("stroke-width", 1.5))),)
    tooltip_offset = (10.0, -20.0)

    def _attach(self, surface: ChartSurface, result: RenderResult) -> None:
        for el in surface.select("bubble"):
            self._bind_hover(el)
        for el in surface.select("legend-label"):
            self._bind_hover(el, tooltip=False)

    def describe(self, el: Element) -> Optional[TooltipContent]:
        rec = el.datum
        if not el.has_class("bubble") or not isinstance(rec, Record):
            return None
        return TooltipContent(
            title=rec.category,
            rows=(
                TooltipRow("Tax Revenue", f"${locale_number(rec.x)}"),
                TooltipRow("Health Expenditure", f"${locale_number(rec.y)}"),
                TooltipRow("Population", millions(rec.size)),
            ),
        )


# SECTION: line [id: line]
# =============================================================================


class LineInteraction(InteractionController):
    """Label hover highlights a series; the tracking surface drives a year tooltip."""

    kind = "line"
    targets = (
        HighlightTarget("country-line", "stroke-opacity", (("stroke-width", 2.5),)),
        HighlightTarget("country-label", "opacity"),
    )
    tooltip_offset = (10.0, -10.0)

    def _attach(self, surface: ChartSurface, result: RenderResult) -> None:
        for el in surface.select("country-label"):
            self._bind_hover(el)
        if result.tracking is not None:
            result.tracking.on("pointermove", lambda _el, event: self.track(event))
            result.tracking.on("pointerleave", lambda _el, event: self.untrack())

    def describe(self, el: Element) -> Optional[TooltipContent]:
        path = el.datum
        if path is None or not getattr(path, "records", None):
            return None
        last = path.last
        color = self._result.scales["color"](path.key) if self._result else None
        return TooltipContent(
            title=path.key,
            rows=(TooltipRow(f"{int(last.x)}", f"{last.y:.2f}%", color),),
        )

    def track(self, event: PointerEvent) -> bool:
        """Rebuild the tooltip for the year under the pointer.

        Returns ``False`` (and changes nothing) when the pointer is outside
        the tracking rectangle or no render result is attached.
        """
        try:
            self._require_in_bounds(event)
        except InteractionBoundsError as exc:
            logger.debug("pointer ignored: %s", exc)
            return False
        result = self._result
        x_scale, color = result.scales["x"], result.scales["color"]
        year = math.floor(x_scale.invert(event.x) + 0.5)

        hits: list[tuple[str, float]] = []
        for path in result.series:
            match = next((r for r in path.records if r.x == year), None)
            if match is not None:
                hits.append((path.key, match.y))

        if hits:
            hits.sort(key=lambda item: item[1], reverse=True)
            content = TooltipContent(
                title=str(year),
                rows=tuple(TooltipRow(key, f"{value:.2f}%", color(key)) for key, value in hits),
            )
            self.show_tooltip(content, event)
            if result.guide is not None:
                result.guide.set(x1=event.x, x2=event.x, opacity=1)
        else:
            self.hide_tooltip()
            if result.guide is not None:
                result.guide.restore("opacity")
        self._changed()
        return True

    def untrack(self) -> None:
        self.clear_highlight()
        self.hide_tooltip()
        if self._result is not None and self._result.guide is not None:
            self._result.guide.restore("opacity")
        self._changed()

    def _require_in_bounds(self, event: PointerEvent) -> None:
        result = self._result
        if result is None or result.tracking is None:
            raise InteractionBoundsError("no tracking surface attached")
        if not all(math.isfinite(v) for v in (event.x, event.y)):
            raise InteractionBoundsError(f"non-finite pointer ({event.x}, {event.y})")
        if not result.tracking.contains(event.x, event.y):
            raise InteractionBoundsError(f"pointer ({event.x}, {event.y}) outside tracking surface")


# SECTION: tile [id: tile]
# =============================================================================


class TileInteraction(InteractionController):
    """Tile hover highlights its region and summarises the country."""

    kind = "tile"
    targets = (
        HighlightTarget("tile", "opacity", (("stroke-width", 2),)),
        HighlightTarget("tile-fill", "opacity"),
    )
    tooltip_offset = (10.0, -20.0)

    def _attach(self, surface: ChartSurface, result: RenderResult) -> None:
        for el in surface.select("tile"):
            self._bind_hover(el)

    def describe(self, el: Element) -> Optional[TooltipContent]:
        rec = el.datum
        if not isinstance(rec, Record):
            return None
        rows = [TooltipRow("Health Expenditure", f"{rec.y:.1f}% of GDP")]
        if rec.size is not None:
            rows.append(TooltipRow("Population", millions(rec.size)))
        return TooltipContent(title=rec.category, rows=tuple(rows))


__all__ = [
    "BubbleInteraction",
    "DIM_OPACITY",
    "HighlightState",
    "HighlightTarget",
    "InteractionController",
    "LineInteraction",
    "NO_HIGHLIGHT",
    "TileInteraction",
    "locale_number",
    "millions",
]
