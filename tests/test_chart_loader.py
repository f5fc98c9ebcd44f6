from __future__ import annotations

import asyncio
import logging

import pytest

from healthviz import chart_loader, line_chart
from healthviz.chart_errors import LoadError
from healthviz.chart_loader import (
    BUBBLE_SCHEMA,
    LINE_SCHEMA,
    TILE_SCHEMA,
    DatasetLoader,
    load_dataset,
)
from healthviz.chart_records import Dataset, Record


def _write(tmp_path, name: str, text: str):
    path = tmp_path / name
    path.write_text(text, encoding="utf-8")
    return path


def test_line_csv_filters_years_and_drops_bad_rows(tmp_path, caplog) -> None:
    path = _write(
        tmp_path,
        "share.csv",
        "Entity,Code,Year,public_health_expenditure_pc_gdp\n"
        "France,FRA,1870,1.0\n"
        "France,FRA,1900,0.5\n"
        "France,FRA,1950,\n"
        "Germany,DEU,2000,8.1\n",
    )
    with caplog.at_level(logging.DEBUG, logger="healthviz.chart_loader"):
        dataset = load_dataset(path, LINE_SCHEMA)

    assert [(r.category, r.x, r.y) for r in dataset] == [("France", 1900, 0.5), ("Germany", 2000, 8.1)]
    assert dataset.fields == frozenset({"category", "x", "y"})
    assert "dropped 1 of 4 rows" in caplog.text


def test_bubble_csv_reads_long_column_names(tmp_path) -> None:
    header = ",".join(f'"{c}"' for c in BUBBLE_SCHEMA.columns)
    path = _write(tmp_path, "bubbles.csv", f"{header}\nNorway,30000,7000,5400000,Europe\n")

    (record,) = load_dataset(path, BUBBLE_SCHEMA)

    assert record == Record("Norway", x=30000, y=7000, size=5_400_000, group="Europe")


def test_tile_population_keeps_leading_integer(tmp_path) -> None:
    path = _write(
        tmp_path,
        "tiles.csv",
        "Country,HealthExpenditurePercentage,Region,Population\nJapan,10.9,Asia,125.7\n",
    )
    (record,) = load_dataset(path, TILE_SCHEMA)
    assert record.size == 125
    assert record.group == "Asia"


def test_missing_file_raises_load_error(tmp_path) -> None:
    with pytest.raises(LoadError, match="not found") as info:
        load_dataset(tmp_path / "absent.csv", LINE_SCHEMA)
    assert info.value.source == tmp_path / "absent.csv"


def test_empty_file_raises_load_error(tmp_path) -> None:
    path = _write(tmp_path, "empty.csv", "")
    with pytest.raises(LoadError, match="unparseable"):
        load_dataset(path, LINE_SCHEMA)


def test_missing_columns_raise_load_error(tmp_path) -> None:
    path = _write(tmp_path, "wrong.csv", "Entity,Year\nFrance,2000\n")
    with pytest.raises(LoadError, match="public_health_expenditure_pc_gdp"):
        load_dataset(path, LINE_SCHEMA)


def test_loader_delivers_empty_dataset_on_load_error(tmp_path, caplog) -> None:
    delivered: list[Dataset] = []
    loader = DatasetLoader(LINE_SCHEMA, delivered.append)

    with caplog.at_level(logging.ERROR, logger="healthviz.chart_loader"):
        result = asyncio.run(loader.load(tmp_path / "absent.csv"))

    assert result is not None and len(result) == 0
    assert delivered == [result]
    assert "Could not load" in caplog.text


def test_loader_discards_responses_superseded_by_a_newer_request(monkeypatch) -> None:
    datasets = {
        "slow": Dataset([Record("Old", x=2000, y=1)]),
        "fast": Dataset([Record("New", x=2000, y=2)]),
    }
    delays = {"slow": 0.05, "fast": 0.0}

    async def _fake_to_thread(_fn, source, _schema):
        await asyncio.sleep(delays[source])
        return datasets[source]

    monkeypatch.setattr(chart_loader.asyncio, "to_thread", _fake_to_thread)
    delivered: list[Dataset] = []
    loader = DatasetLoader(LINE_SCHEMA, delivered.append)

    async def _both():
        return await asyncio.gather(loader.load("slow"), loader.load("fast"))

    slow, fast = asyncio.run(_both())

    assert slow is None
    assert fast is datasets["fast"]
    assert delivered == [datasets["fast"]]
    assert loader.latest_token == 2


def test_chart_reload_renders_loaded_dataset(tmp_path) -> None:
    path = _write(
        tmp_path,
        "share.csv",
        "Entity,Year,public_health_expenditure_pc_gdp\nFrance,2000,8.0\nFrance,2010,8.5\n",
    )
    chart = line_chart()
    chart.set_viewport(800, 500)
    chart.on_selection_change({"France"})

    asyncio.run(chart.reload(path))

    assert len(chart.dataset) == 2
    assert len(chart.surface.select("country-line")) == 1


def test_source_that_is_not_a_path_or_buffer_raises_load_error() -> None:
    with pytest.raises(LoadError, match="unreadable"):
        load_dataset(12345, LINE_SCHEMA)


def test_loader_falls_back_to_empty_state_for_unreadable_source(caplog) -> None:
    delivered: list[Dataset] = []
    loader = DatasetLoader(LINE_SCHEMA, delivered.append)

    with caplog.at_level(logging.ERROR, logger="healthviz.chart_loader"):
        result = asyncio.run(loader.load(12345))

    assert result is not None and len(result) == 0
    assert delivered == [result]
    assert "unreadable" in caplog.text
