"""Typed records, datasets and the per-chart extraction schema.

Purpose
-------
Raw tabular rows enter the engine through a :class:`RecordSchema`, which maps
each record field to a raw column name and a coercion kind. Parsed rows become
immutable :class:`Record` values collected into a :class:`Dataset`.

Concepts and structure
----------------------
- ``Record`` is the single variant shape shared by all charts:
  ``category, x, y, size?, group?``. A chart's schema decides which of the
  optional fields it carries.
- ``Dataset`` is an ordered tuple of records sharing one field set. It is
  replaced wholesale on reload and never mutated in place.
- ``Viewport`` and ``SelectionState`` are the two other render inputs.

Important gotchas
-----------------
- A row whose numeric field does not parse to a finite number is dropped, not
  failed wholesale. ``RecordSchema.parse_rows`` reports how many were dropped.
- An empty ``SelectionState`` means "draw no series", never "draw all".
"""

from __future__ import annotations

import logging
import math
import re
from collections.abc import Callable, Iterable, Iterator, Mapping
from dataclasses import dataclass, fields
from types import MappingProxyType
from typing import Any, Literal, Optional

from .chart_errors import RecordParseError

logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())

FieldKind = Literal["number", "integer", "string"]

RECORD_FIELDS: tuple[str, ...] = ("category", "x", "y", "size", "group")
_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


@dataclass(frozen=True)
class Record:
    """One input row after coercion."""

    category: str
    x: Optional[float] = None
    y: Optional[float] = None
    size: Optional[float] = None
    group: Optional[str] = None

    def present_fields(self) -> frozenset[str]:
        """Return the names of fields that carry a value."""
        return frozenset(f.name for f in fields(self) if getattr(self, f.name) is not None)


@dataclass(frozen=True)
class FieldExtractor:
    """Coerce one raw column into one typed record field."""

    column: str
    kind: FieldKind = "number"

    def __call__(self, field_name: str, raw: Any) -> Any:
        if self.kind == "string":
            return _coerce_string(field_name, raw)
        if self.kind == "integer":
            return _coerce_integer(field_name, raw)
        return _coerce_number(field_name, raw)


def _coerce_string(field_name: str, raw: Any) -> str:
    if raw is None or (isinstance(raw, float) and math.isnan(raw)):
        raise RecordParseError(field_name, raw, "missing value")
    text = str(raw).strip()
    if not text:
        raise RecordParseError(field_name, raw, "empty string")
    return text


def _coerce_number(field_name: str, raw: Any) -> float:
    if isinstance(raw, bool) or raw is None:
        raise RecordParseError(field_name, raw, "not a number")
    if isinstance(raw, str):
        raw = raw.strip()
        if not raw:
            raise RecordParseError(field_name, raw, "empty string")
    try:
        value = float(raw)
    except (TypeError, ValueError) as exc:
        raise RecordParseError(field_name, raw, "not a number") from exc
    if not math.isfinite(value):
        raise RecordParseError(field_name, raw, "not finite")
    return value


def _coerce_integer(field_name: str, raw: Any) -> float:
    """Parse the leading integer of ``raw`` (``"12.7"`` -> 12, ``"3k"`` -> 3)."""
    if isinstance(raw, (int, float)) and not isinstance(raw, bool):
        if not math.isfinite(raw):
            raise RecordParseError(field_name, raw, "not finite")
        return float(math.trunc(raw))
    m = _LEADING_INT.match(str(raw)) if raw is not None else None
    if m is None:
        raise RecordParseError(field_name, raw, "no leading integer")
    return float(int(m.group(1)))


@dataclass(frozen=True)
class RecordSchema:
    """Declared extractor set of one chart: ``{field: column -> typed value}``.

    Parameters
    ----------
    fields:
        Mapping from record field name (``category``, ``x``, ``y``, ``size``,
        ``group``) to the extractor that reads it. ``category`` is required.
    row_filter:
        Optional predicate on the parsed record; rows for which it returns
        ``False`` are excluded without counting as parse failures.
    """

    fields: Mapping[str, FieldExtractor]
    row_filter: Optional[Callable[[Record], bool]] = None

    def __post_init__(self) -> None:
        unknown = set(self.fields) - set(RECORD_FIELDS)
        if unknown:
            raise ValueError(f"Unknown record fields in schema: {sorted(unknown)}")
        if "category" not in self.fields:
            raise ValueError("RecordSchema requires a 'category' extractor.")
        object.__setattr__(self, "fields", MappingProxyType(dict(self.fields)))

    @property
    def field_names(self) -> frozenset[str]:
        """Return the field set every record of this schema carries."""
        return frozenset(self.fields)

    @property
    def columns(self) -> tuple[str, ...]:
        """Return the raw column names this schema reads."""
        return tuple(ex.column for ex in self.fields.values())

    def parse(self, row: Mapping[str, Any]) -> Record:
        """Parse one raw row or raise :class:`RecordParseError`."""
        values = {name: ex(name, row.get(ex.column)) for name, ex in self.fields.items()}
        return Record(**values)

    def parse_rows(self, rows: Iterable[Mapping[str, Any]]) -> tuple["Dataset", int]:
        """Parse ``rows`` into a dataset, dropping rows that fail coercion.

        Returns
        -------
        tuple[Dataset, int]
            The dataset and the number of rows dropped by parse failures.
        """
        records: list[Record] = []
        dropped = 0
        for row in rows:
            try:
                record = self.parse(row)
            except RecordParseError as exc:
                dropped += 1
                logger.debug("dropping row: %s", exc)
                continue
            if self.row_filter is not None and not self.row_filter(record):
                continue
            records.append(record)
        return Dataset(records, fields=self.field_names), dropped


class Dataset:
    """Immutable ordered sequence of records sharing one field set."""

    __slots__ = ("_records", "_fields")

    def __init__(self, records: Iterable[Record] = (), *, fields: Optional[Iterable[str]] = None) -> None:
        recs = tuple(records)
        if fields is None:
            declared = recs[0].present_fields() if recs else frozenset()
        else:
            declared = frozenset(fields)
        for rec in recs:
            if rec.present_fields() != declared:
                raise ValueError(
                    f"Record {rec!r} does not match dataset fields {sorted(declared)}."
                )
        self._records = recs
        self._fields = declared

    @classmethod
    def empty(cls) -> "Dataset":
        """Return the "not ready" dataset."""
        return cls(())

    @property
    def records(self) -> tuple[Record, ...]:
        return self._records

    @property
    def fields(self) -> frozenset[str]:
        return self._fields

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[Record]:
        return iter(self._records)

    def __bool__(self) -> bool:
        return bool(self._records)

    def __repr__(self) -> str:
        return f"Dataset(n={len(self._records)}, fields={sorted(self._fields)})"

    def values(self, attr: str) -> list[float]:
        """Return the non-missing values of one numeric field, in order."""
        return [getattr(r, attr) for r in self._records if getattr(r, attr) is not None]

    def categories(self) -> tuple[str, ...]:
        """Return distinct category keys in first-seen order."""
        return tuple(dict.fromkeys(r.category for r in self._records))

    def group_by(self, attr: str) -> dict[str, list[Record]]:
        """Group records by ``attr``; groups keep first-seen order and record order."""
        groups: dict[str, list[Record]] = {}
        for rec in self._records:
            groups.setdefault(getattr(rec, attr), []).append(rec)
        return groups


@dataclass(frozen=True)
class Viewport:
    """Container size in pixels. ``width == 0`` means "not yet measured"."""

    width: float = 0
    height: float = 0

    def __post_init__(self) -> None:
        if self.width < 0 or self.height < 0:
            raise ValueError(f"Viewport dimensions must be >= 0, got {self.width}x{self.height}.")

    @property
    def ready(self) -> bool:
        return self.width > 0


class SelectionState(frozenset):
    """Set of category keys chosen for display; empty renders no series."""

    __slots__ = ()

    def __new__(cls, keys: Iterable[str] = ()) -> "SelectionState":
        return super().__new__(cls, (str(k) for k in keys))

    def __repr__(self) -> str:
        return f"SelectionState({sorted(self)!r})"


__all__ = [
    "Dataset",
    "FieldExtractor",
    "FieldKind",
    "Record",
    "RecordSchema",
    "SelectionState",
    "Viewport",
]
