from __future__ import annotations

from healthviz import bubble_chart
from healthviz.chart_records import Dataset, Record, Viewport
from healthviz.ChartPane import ChartPane, PaneStyle


def _pane() -> ChartPane:
    chart = bubble_chart()
    chart.set_dataset(
        Dataset(
            [
                Record("Y", x=5000, y=2000, size=10e6, group="Europe"),
                Record("Z", x=1000, y=500, size=1e6, group="Asia"),
            ]
        )
    )
    return ChartPane(chart)


def _resize(pane: ChartPane, width: float, height: float) -> None:
    pane._on_driver_msg(pane.driver, {"type": "resize", "width": width, "height": height})
    pane.chart.flush_resize()


def test_chartpane_reflow_delegates_to_driver() -> None:
    pane = _pane()
    called = []
    pane.driver.reflow = lambda: called.append(True)

    pane.reflow()

    assert called == [True]


def test_chartpane_applies_style_to_wrapper() -> None:
    pane = ChartPane(bubble_chart(), style=PaneStyle(padding_px=7, border="1px solid red"))
    assert pane.widget.layout.padding == "7px"
    assert pane.widget.layout.border == "1px solid red"


def test_resize_message_renders_and_syncs_figure() -> None:
    pane = _pane()

    _resize(pane, 800, 500)

    assert pane.chart.viewport == Viewport(800, 500)
    assert len(pane.figure.layout.shapes) > 0
    assert pane._host.layout.height == "500px"


def test_pointer_messages_drive_the_overlay() -> None:
    pane = _pane()
    _resize(pane, 800, 500)
    y = next(e for e in pane.chart.result.entries if e.record.category == "Y")

    pane._on_driver_msg(
        pane.driver, {"type": "pointer", "x": y.x, "y": y.y, "page_x": 100, "page_y": 200}
    )

    assert pane.overlay.visible is True
    assert pane.overlay.html.startswith("<strong>Y</strong>")
    assert (pane.overlay.left, pane.overlay.top) == (110.0, 180.0)
    circles = [s for s in pane.figure.layout.shapes if s.type == "circle"]
    assert sorted(s.opacity for s in circles) == [0.1, 1.0]

    pane._on_driver_msg(pane.driver, {"type": "leave"})

    assert pane.overlay.visible is False


def test_unknown_messages_are_ignored() -> None:
    pane = _pane()
    pane._on_driver_msg(pane.driver, {"type": "wheel"})
    pane._on_driver_msg(pane.driver, "not a dict")
    assert pane.chart.viewport == Viewport()


def test_close_unmounts_chart_and_is_idempotent() -> None:
    pane = _pane()
    tip = pane.chart.tooltip
    _resize(pane, 800, 500)

    pane.close()
    pane.close()

    assert pane.closed
    assert not pane.chart.mounted
    assert tip.closed
    assert len(pane.chart.surface) == 0


def _hover_category(pane: ChartPane, category: str, page=(100, 200)) -> None:
    entry = next(e for e in pane.chart.result.entries if e.record.category == category)
    pane._on_driver_msg(
        pane.driver,
        {"type": "pointer", "x": entry.x, "y": entry.y, "page_x": page[0], "page_y": page[1]},
    )


def test_overlay_follows_tooltip_after_chart_remounts() -> None:
    pane = _pane()
    _resize(pane, 800, 500)
    first_tip = pane.chart.tooltip

    pane.chart.unmount()
    pane.chart.render()
    _hover_category(pane, "Y")

    assert first_tip.closed
    assert pane.chart.tooltip is not first_tip
    assert pane.chart.tooltip_state.visible
    assert pane.overlay.visible is True
    assert pane.overlay.html.startswith("<strong>Y</strong>")


def test_only_the_owning_pane_shows_its_overlay() -> None:
    pane_a, pane_b = _pane(), _pane()
    _resize(pane_a, 800, 500)
    _resize(pane_b, 800, 500)

    _hover_category(pane_a, "Y")
    assert (pane_a.overlay.visible, pane_b.overlay.visible) == (True, False)

    _hover_category(pane_b, "Z", page=(300, 400))

    assert pane_b.chart.tooltip.visible_owner is pane_b.chart
    assert (pane_a.overlay.visible, pane_b.overlay.visible) == (False, True)
    assert pane_b.overlay.html.startswith("<strong>Z</strong>")


def test_pointer_message_without_coordinates_is_ignored() -> None:
    pane = _pane()
    _resize(pane, 800, 500)
    before = pane.chart.surface.snapshot()

    pane._on_driver_msg(pane.driver, {"type": "pointer", "x": 12})
    pane._on_driver_msg(pane.driver, {"type": "pointer"})

    assert pane.overlay.visible is False
    assert pane.chart.surface.snapshot() == before
