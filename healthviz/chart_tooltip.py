"""Process-wide floating tooltip.

Purpose
-------
The tooltip lives outside every chart's own container so it can escape the
chart's clipping box. There is exactly one per process: all mounted charts
share it, and at most one chart owns it as visible at any time.

Lifecycle
---------
- created lazily by the first :func:`tooltip_surface` call,
- ``acquire(owner)`` when a chart mounts, ``release(owner)`` when it unmounts,
- torn down (state reset, listeners dropped) when the last owner releases,
- hidden (never destroyed) between interaction events.

Only interaction controllers call :meth:`TooltipSurface.show` and
:meth:`TooltipSurface.hide`; everyone else reads :attr:`TooltipSurface.state`.
"""

from __future__ import annotations

import html
import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Optional

logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())


@dataclass(frozen=True)
class TooltipRow:
    label: str
    value: str = ""
    color: Optional[str] = None


@dataclass(frozen=True)
class TooltipContent:
    """Structured tooltip summary: a bold title and labelled rows."""

    title: str
    rows: tuple[TooltipRow, ...] = ()

    def to_html(self) -> str:
        parts = [f"<strong>{html.escape(self.title)}</strong>"]
        for row in self.rows:
            swatch = ""
            if row.color:
                swatch = f'<span style="color:{html.escape(row.color)}">&#9679;</span> '
            text = html.escape(row.label)
            if row.value:
                text += f": {html.escape(row.value)}"
            parts.append(swatch + text)
        return "<br>".join(parts)


@dataclass(frozen=True)
class TooltipState:
    visible: bool = False
    content: Optional[TooltipContent] = None
    anchor: tuple[float, float] = (0.0, 0.0)


HIDDEN = TooltipState()

Listener = Callable[[TooltipState], None]


class TooltipSurface:
    """Shared tooltip resource with explicit owner tracking."""

    def __init__(self) -> None:
        self._owners: list[Any] = []
        self._visible_owner: Any = None
        self._state = HIDDEN
        self._listeners: list[Listener] = []
        self._closed = False

    @property
    def state(self) -> TooltipState:
        return self._state

    @property
    def owners(self) -> tuple[Any, ...]:
        return tuple(self._owners)

    @property
    def visible_owner(self) -> Any:
        return self._visible_owner

    @property
    def closed(self) -> bool:
        return self._closed

    def acquire(self, owner: Any) -> None:
        if not any(o is owner for o in self._owners):
            self._owners.append(owner)

    def release(self, owner: Any) -> None:
        self._owners = [o for o in self._owners if o is not owner]
        if self._visible_owner is owner:
            self.hide(owner)
        if not self._owners:
            _teardown(self)

    def show(self, owner: Any, content: TooltipContent, anchor: tuple[float, float]) -> None:
        """Make ``owner`` the visible owner and replace content and position."""
        self._visible_owner = owner
        self._set(TooltipState(visible=True, content=content, anchor=(float(anchor[0]), float(anchor[1]))))

    def move(self, owner: Any, anchor: tuple[float, float]) -> None:
        """Reposition without touching content; ignored unless ``owner`` is visible."""
        if self._visible_owner is not owner or not self._state.visible:
            return
        self._set(TooltipState(visible=True, content=self._state.content, anchor=(float(anchor[0]), float(anchor[1]))))

    def hide(self, owner: Any) -> None:
        """Hide the tooltip if ``owner`` currently shows it."""
        if self._visible_owner is not owner:
            return
        self._visible_owner = None
        if self._state.visible:
            self._set(TooltipState(visible=False, content=self._state.content, anchor=self._state.anchor))

    def add_listener(self, callback: Listener) -> Callable[[], None]:
        self._listeners.append(callback)

        def _remove() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return _remove

    def _set(self, state: TooltipState) -> None:
        self._state = state
        for callback in list(self._listeners):
            try:
                callback(state)
            except Exception:
                logger.exception("Tooltip listener failed")

    def _close(self) -> None:
        self._set(HIDDEN)
        self._listeners.clear()
        self._visible_owner = None
        self._closed = True


_LOCK = threading.Lock()
_INSTANCE: Optional[TooltipSurface] = None


def tooltip_surface() -> TooltipSurface:
    """Return the shared tooltip, creating it on first use."""
    global _INSTANCE
    with _LOCK:
        if _INSTANCE is None or _INSTANCE.closed:
            _INSTANCE = TooltipSurface()
            logger.debug("tooltip surface created")
        return _INSTANCE


def _teardown(instance: TooltipSurface) -> None:
    global _INSTANCE
    with _LOCK:
        instance._close()
        if _INSTANCE is instance:
            _INSTANCE = None
    logger.debug("tooltip surface torn down")


__all__ = [
    "HIDDEN",
    "TooltipContent",
    "TooltipRow",
    "TooltipState",
    "TooltipSurface",
    "tooltip_surface",
]
