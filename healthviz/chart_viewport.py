"""Debounced container-size tracking."""

from __future__ import annotations

import logging
from typing import Callable, Optional

from .chart_records import Viewport
from .debouncing import TrailingDebouncer

logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())

DEFAULT_DEBOUNCE_MS = 200


class ViewportObserver:
    """Turn raw resize signals into settled :class:`Viewport` updates.

    Each :meth:`notify` resets a ``debounce_ms`` deadline. On expiry the last
    reported size is emitted to ``on_change``, unless it equals the last
    emitted viewport.
    """

    def __init__(
        self,
        on_change: Callable[[Viewport], None],
        *,
        debounce_ms: int = DEFAULT_DEBOUNCE_MS,
    ) -> None:
        self._on_change = on_change
        self._last: Optional[Viewport] = None
        self._debouncer = TrailingDebouncer(self._settle, wait_ms=debounce_ms)

    @property
    def last_emitted(self) -> Optional[Viewport]:
        return self._last

    def notify(self, width: float, height: float) -> None:
        """Raw size signal from the container."""
        self._debouncer(max(0.0, float(width)), max(0.0, float(height)))

    def flush(self) -> None:
        self._debouncer.flush()

    def cancel(self) -> None:
        self._debouncer.cancel()

    def _settle(self, width: float, height: float) -> None:
        viewport = Viewport(width=width, height=height)
        if viewport == self._last:
            logger.debug("viewport unchanged at %sx%s; not propagated", width, height)
            return
        self._last = viewport
        self._on_change(viewport)


__all__ = ["DEFAULT_DEBOUNCE_MS", "ViewportObserver"]
