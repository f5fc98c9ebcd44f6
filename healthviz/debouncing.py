"""Trailing-edge debouncing helpers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Optional, Tuple
import asyncio
import functools
import logging
import threading

logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())


@dataclass
class _PendingCall:
    args: Tuple[Any, ...]
    kwargs: dict[str, Any]


class TrailingDebouncer:
    """Collapse bursts of calls into one call after a quiet period.

    Every call replaces the pending arguments and resets the deadline. When
    ``wait_ms`` elapses without a new call, ``callback`` runs once with the
    most recent arguments.

    Parameters
    ----------
    callback:
        Callable to execute after the quiet period.
    wait_ms:
        Quiet period in milliseconds.

    Notes
    -----
    The deadline is scheduled on the running asyncio loop when there is one
    (Jupyter kernels), otherwise on a daemon ``threading.Timer``.
    """

    def __init__(self, callback: Callable[..., Any], *, wait_ms: int) -> None:
        if wait_ms <= 0:
            raise ValueError("wait_ms must be > 0")
        self._callback = callback
        self._wait_s = wait_ms / 1000.0

        self._pending: Optional[_PendingCall] = None
        self._lock = threading.Lock()
        self._timer: Optional[Any] = None
        self._generation = 0

    @property
    def pending(self) -> bool:
        return self._pending is not None

    def __call__(self, *args: Any, **kwargs: Any) -> None:
        with self._lock:
            self._pending = _PendingCall(args=args, kwargs=dict(kwargs))
            self._cancel_timer_locked()
            self._schedule_locked()

    def cancel(self) -> None:
        """Drop the pending call, if any."""
        with self._lock:
            self._pending = None
            self._cancel_timer_locked()
            self._generation += 1

    def flush(self) -> None:
        """Run the pending call now instead of waiting for the deadline."""
        with self._lock:
            self._cancel_timer_locked()
            self._generation += 1
        self._on_deadline(None)

    def _schedule_locked(self) -> None:
        self._generation += 1
        fire = functools.partial(self._on_deadline, self._generation)
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            timer = threading.Timer(self._wait_s, fire)
            timer.daemon = True
            self._timer = timer
            timer.start()
            return

        self._timer = loop.call_later(self._wait_s, fire)

    def _cancel_timer_locked(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _on_deadline(self, generation: Optional[int]) -> None:
        with self._lock:
            # A deadline superseded by a newer call must not touch its timer.
            if generation is not None:
                if generation != self._generation:
                    return
                self._timer = None
            call, self._pending = self._pending, None
        if call is None:
            return

        try:
            self._callback(*call.args, **call.kwargs)
        except Exception:
            logger.exception("TrailingDebouncer callback failed")
