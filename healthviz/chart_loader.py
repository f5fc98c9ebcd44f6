"""Dataset loading: CSV source -> :class:`~healthviz.chart_records.Dataset`.

Purpose
-------
Reads a tabular source with pandas and runs every row through a chart's
:class:`~healthviz.chart_records.RecordSchema`. Three schemas describe the
published datasets (column names as they appear in the CSV exports).

Concurrency
-----------
:class:`DatasetLoader` performs the read in a worker thread and guards each
request with a monotonically increasing token: a response that arrives after
a newer request was issued is discarded, so an out-of-order resolution can
never overwrite a fresher dataset.
"""

from __future__ import annotations

import asyncio
import itertools
import logging
from collections.abc import Callable
from os import PathLike
from typing import Optional, Union

import pandas as pd

from .chart_errors import LoadError
from .chart_records import Dataset, FieldExtractor, Record, RecordSchema

logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())

Source = Union[str, PathLike]

BUBBLE_SCHEMA = RecordSchema(
    {
        "category": FieldExtractor("Entity", "string"),
        "x": FieldExtractor("Tax revenues per capita (current international $)"),
        "y": FieldExtractor(
            "Domestic general government health expenditure per capita, PPP (current international $)"
        ),
        "size": FieldExtractor("Population (historical)"),
        "group": FieldExtractor("World regions according to OWID", "string"),
    }
)


def _from_1880(record: Record) -> bool:
    return record.x >= 1880


LINE_SCHEMA = RecordSchema(
    {
        "category": FieldExtractor("Entity", "string"),
        "x": FieldExtractor("Year"),
        "y": FieldExtractor("public_health_expenditure_pc_gdp"),
    },
    row_filter=_from_1880,
)

TILE_SCHEMA = RecordSchema(
    {
        "category": FieldExtractor("Country", "string"),
        "y": FieldExtractor("HealthExpenditurePercentage"),
        "size": FieldExtractor("Population", "integer"),
        "group": FieldExtractor("Region", "string"),
    }
)


def load_dataset(source: Source, schema: RecordSchema) -> Dataset:
    """Read ``source`` and parse it with ``schema``.

    Raises
    ------
    LoadError
        If the source cannot be read, is not valid CSV, or lacks a column the
        schema needs. Individual bad rows are dropped, not raised.
    """
    try:
        frame = pd.read_csv(source, dtype=str, keep_default_na=False)
    except FileNotFoundError as exc:
        raise LoadError(source, "not found") from exc
    except (pd.errors.EmptyDataError, pd.errors.ParserError, UnicodeDecodeError) as exc:
        raise LoadError(source, f"unparseable ({exc})") from exc
    except ValueError as exc:
        # pandas rejects sources that are neither a path nor a buffer
        raise LoadError(source, f"unreadable ({exc})") from exc
    except OSError as exc:
        raise LoadError(source, f"unreachable ({exc})") from exc

    missing = [col for col in schema.columns if col not in frame.columns]
    if missing:
        raise LoadError(source, f"missing columns {missing}")

    dataset, dropped = schema.parse_rows(frame.to_dict(orient="records"))
    if dropped:
        logger.debug("load(%s): dropped %d of %d rows", source, dropped, len(frame))
    logger.info("load(%s): %d records", source, len(dataset))
    return dataset


class DatasetLoader:
    """Asynchronous loader with a latest-request-wins guard.

    Parameters
    ----------
    schema:
        Extractor set of the chart being fed.
    on_loaded:
        Called with the dataset of the most recent request. A ``LoadError``
        is logged and reported as an empty dataset (empty state).
    """

    def __init__(self, schema: RecordSchema, on_loaded: Callable[[Dataset], None]) -> None:
        self._schema = schema
        self._on_loaded = on_loaded
        self._tokens = itertools.count(1)
        self._latest = 0

    @property
    def latest_token(self) -> int:
        return self._latest

    async def load(self, source: Source) -> Optional[Dataset]:
        """Load ``source``; return the delivered dataset, or ``None`` if superseded."""
        token = next(self._tokens)
        self._latest = token
        try:
            dataset = await asyncio.to_thread(load_dataset, source, self._schema)
        except LoadError as exc:
            logger.error("%s", exc)
            dataset = Dataset.empty()

        if token != self._latest:
            logger.debug("load(%s) token %d superseded by %d; ignored", source, token, self._latest)
            return None
        self._on_loaded(dataset)
        return dataset


__all__ = [
    "BUBBLE_SCHEMA",
    "DatasetLoader",
    "LINE_SCHEMA",
    "TILE_SCHEMA",
    "load_dataset",
]
