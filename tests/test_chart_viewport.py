from __future__ import annotations

from unittest.mock import patch

from healthviz.chart_records import Viewport
from healthviz.chart_viewport import DEFAULT_DEBOUNCE_MS, ViewportObserver


class _FakeThreadTimer:
    created: list["_FakeThreadTimer"] = []

    def __init__(self, delay: float, callback):
        self.delay = delay
        self.callback = callback
        self.daemon = False
        _FakeThreadTimer.created.append(self)

    def start(self) -> None:
        pass

    def cancel(self) -> None:
        pass


def test_burst_of_resizes_emits_only_the_last_size() -> None:
    emitted: list[Viewport] = []
    _FakeThreadTimer.created.clear()

    with patch("healthviz.debouncing.threading.Timer", _FakeThreadTimer):
        observer = ViewportObserver(emitted.append)
        for width in (300, 420, 512):
            observer.notify(width, 400)
        _FakeThreadTimer.created[-1].callback()

    assert emitted == [Viewport(512, 400)]
    assert observer.last_emitted == Viewport(512, 400)
    assert _FakeThreadTimer.created[-1].delay == DEFAULT_DEBOUNCE_MS / 1000.0


def test_settled_size_equal_to_last_emitted_is_not_propagated() -> None:
    emitted: list[Viewport] = []

    with patch("healthviz.debouncing.threading.Timer", _FakeThreadTimer):
        observer = ViewportObserver(emitted.append, debounce_ms=50)
        observer.notify(640, 480)
        observer.flush()
        observer.notify(700, 480)
        observer.notify(640, 480)
        observer.flush()

    assert emitted == [Viewport(640, 480)]


def test_negative_sizes_clamp_to_not_ready() -> None:
    emitted: list[Viewport] = []

    with patch("healthviz.debouncing.threading.Timer", _FakeThreadTimer):
        observer = ViewportObserver(emitted.append)
        observer.notify(-5, -1)
        observer.flush()

    assert emitted == [Viewport(0, 0)]
    assert not emitted[0].ready


def test_cancel_drops_pending_size() -> None:
    emitted: list[Viewport] = []

    with patch("healthviz.debouncing.threading.Timer", _FakeThreadTimer):
        observer = ViewportObserver(emitted.append)
        observer.notify(640, 480)
        observer.cancel()
        observer.flush()

    assert emitted == []
    assert observer.last_emitted is None
