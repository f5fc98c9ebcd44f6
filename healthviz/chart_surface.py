"""Chart-scoped drawing surface and pointer dispatch.

Purpose
-------
A :class:`ChartSurface` is the single addressable drawing target of one chart
instance. It holds an ordered list of :class:`Element` values (SVG-like tags
with attributes), which renderers append during a render pass and which the
notebook pane converts to Plotly shapes/annotations for display.

Architecture notes
------------------
- The render engine is the only writer of the element *structure*
  (``append``/``clear``). Interaction controllers only attach handlers and
  mutate attributes of existing elements.
- Every element snapshots its attributes on append (``rest``). Interaction
  code restores from that snapshot instead of guessing defaults.
- Pointer input is routed through :meth:`ChartSurface.dispatch_pointer`,
  which keeps track of the hovered element and emits ``pointerenter``,
  ``pointermove`` and ``pointerleave`` in browser order.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass, field
from typing import Any, Optional

logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())

POINTER_EVENTS = ("pointerenter", "pointermove", "pointerleave")

# Approximate glyph advance as a share of font size, used for text hit boxes.
_GLYPH_WIDTH = 0.6


@dataclass(frozen=True)
class PointerEvent:
    """Pointer position in surface pixels, plus document (page) coordinates."""

    x: float
    y: float
    page_x: Optional[float] = None
    page_y: Optional[float] = None

    @property
    def page(self) -> tuple[float, float]:
        px = self.x if self.page_x is None else self.page_x
        py = self.y if self.page_y is None else self.page_y
        return (px, py)


Handler = Callable[["Element", PointerEvent], None]


@dataclass(eq=False)
class Element:
    """One rendered visual element."""

    tag: str
    attrs: dict[str, Any] = field(default_factory=dict)
    classes: tuple[str, ...] = ()
    key: Optional[str] = None
    datum: Any = None
    text: Optional[str] = None
    rest: dict[str, Any] = field(default_factory=dict, init=False, repr=False)
    handlers: dict[str, Handler] = field(default_factory=dict, init=False, repr=False)

    def __post_init__(self) -> None:
        self.rest = dict(self.attrs)

    def has_class(self, name: str) -> bool:
        return name in self.classes

    def on(self, event: str, handler: Optional[Handler]) -> "Element":
        """Attach (or with ``None`` detach) a pointer handler."""
        if event not in POINTER_EVENTS:
            raise ValueError(f"Unsupported pointer event: {event!r}")
        if handler is None:
            self.handlers.pop(event, None)
        else:
            self.handlers[event] = handler
        return self

    def set(self, **attrs: Any) -> "Element":
        """Update attributes; underscores in names map to dashes (``stroke_width``)."""
        for name, value in attrs.items():
            self.attrs[name.replace("_", "-")] = value
        return self

    def restore(self, *names: str) -> None:
        """Reset ``names`` to their resting values, dropping ones that had none."""
        for name in names:
            if name in self.rest:
                self.attrs[name] = self.rest[name]
            else:
                self.attrs.pop(name, None)

    @property
    def interactive(self) -> bool:
        return bool(self.handlers) and self.attrs.get("pointer-events") != "none"

    def contains(self, x: float, y: float) -> bool:
        """Hit test in surface pixels (circles, rects and text boxes only)."""
        a = self.attrs
        if self.tag == "circle":
            dx, dy = x - a["cx"], y - a["cy"]
            return dx * dx + dy * dy <= a["r"] ** 2
        if self.tag == "rect":
            x0, y0 = a["x"], a["y"]
            x1, y1 = x0 + a["width"], y0 + a["height"]
            return min(x0, x1) <= x <= max(x0, x1) and min(y0, y1) <= y <= max(y0, y1)
        if self.tag == "text" and self.text:
            size = float(a.get("font-size", 10))
            width = len(self.text) * size * _GLYPH_WIDTH
            anchor = a.get("text-anchor", "start")
            x0 = a["x"] - (width / 2 if anchor == "middle" else width if anchor == "end" else 0)
            return x0 <= x <= x0 + width and a["y"] - size <= y <= a["y"] + size * 0.25
        return False


Listener = Callable[["ChartSurface", str], None]


class ChartSurface:
    """Ordered element store owned by one chart instance."""

    def __init__(self, width: float = 0, height: float = 0) -> None:
        self.width = float(width)
        self.height = float(height)
        self._elements: list[Element] = []
        self._hovered: Optional[Element] = None
        self._listeners: list[Listener] = []

    # --- structure (render engine only) ---

    def append(
        self,
        tag: str,
        attrs: Optional[dict[str, Any]] = None,
        *,
        classes: Iterable[str] = (),
        key: Optional[str] = None,
        datum: Any = None,
        text: Optional[str] = None,
    ) -> Element:
        el = Element(tag=tag, attrs=dict(attrs or {}), classes=tuple(classes), key=key, datum=datum, text=text)
        self._elements.append(el)
        return el

    def clear(self) -> None:
        """Remove every element and detach its handlers."""
        for el in self._elements:
            el.handlers.clear()
        self._elements = []
        self._hovered = None

    def resize(self, width: float, height: float) -> None:
        self.width = float(width)
        self.height = float(height)

    # --- queries ---

    def __len__(self) -> int:
        return len(self._elements)

    def __iter__(self) -> Iterator[Element]:
        return iter(self._elements)

    @property
    def elements(self) -> tuple[Element, ...]:
        return tuple(self._elements)

    def select(self, css_class: str) -> list[Element]:
        """Return elements carrying ``css_class``, in paint order."""
        return [el for el in self._elements if css_class in el.classes]

    def select_key(self, css_class: str, key: str) -> list[Element]:
        return [el for el in self._elements if css_class in el.classes and el.key == key]

    def hit_test(self, x: float, y: float) -> Optional[Element]:
        """Return the topmost interactive element under ``(x, y)``."""
        for el in reversed(self._elements):
            if el.interactive and el.contains(x, y):
                return el
        return None

    def snapshot(self) -> tuple[tuple[Any, ...], ...]:
        """Return a hashable description of every element (count + attributes)."""
        return tuple(
            (el.tag, el.classes, el.key, el.text, tuple(sorted(el.attrs.items())))
            for el in self._elements
        )

    # --- pointer dispatch ---

    @property
    def hovered(self) -> Optional[Element]:
        return self._hovered

    def dispatch_pointer(self, event: PointerEvent) -> Optional[Element]:
        """Route one pointer position: leave/enter on target change, then move."""
        target = self.hit_test(event.x, event.y)
        if target is not self._hovered:
            previous, self._hovered = self._hovered, target
            if previous is not None:
                self._fire(previous, "pointerleave", event)
            if target is not None:
                self._fire(target, "pointerenter", event)
        if target is not None:
            self._fire(target, "pointermove", event)
        return target

    def dispatch_leave(self, event: Optional[PointerEvent] = None) -> None:
        """Pointer left the surface entirely."""
        previous, self._hovered = self._hovered, None
        if previous is not None:
            self._fire(previous, "pointerleave", event or PointerEvent(-1.0, -1.0))

    def _fire(self, el: Element, name: str, event: PointerEvent) -> None:
        handler = el.handlers.get(name)
        if handler is not None:
            handler(el, event)

    # --- change notification ---

    def add_listener(self, callback: Listener) -> Callable[[], None]:
        """Register ``callback(surface, reason)``; returns an unsubscribe function."""
        self._listeners.append(callback)

        def _remove() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return _remove

    def notify(self, reason: str) -> None:
        for callback in list(self._listeners):
            try:
                callback(self, reason)
            except Exception:
                logger.exception("ChartSurface listener failed (reason=%s)", reason)


__all__ = ["ChartSurface", "Element", "PointerEvent", "POINTER_EVENTS"]
