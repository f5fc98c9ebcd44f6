from __future__ import annotations

import pytest

from healthviz.chart_errors import RecordParseError
from healthviz.chart_records import (
    Dataset,
    FieldExtractor,
    Record,
    RecordSchema,
    SelectionState,
    Viewport,
)


def _schema(**kwargs) -> RecordSchema:
    return RecordSchema(
        {
            "category": FieldExtractor("Country", "string"),
            "y": FieldExtractor("Value"),
            "size": FieldExtractor("Population", "integer"),
            "group": FieldExtractor("Region", "string"),
        },
        **kwargs,
    )


def test_number_extractor_rejects_non_finite_and_empty_values() -> None:
    extract = FieldExtractor("Value")
    assert extract("y", " 4.25 ") == 4.25
    for raw in ("", "abc", "nan", "inf", None, True):
        with pytest.raises(RecordParseError):
            extract("y", raw)


def test_integer_extractor_reads_leading_integer() -> None:
    extract = FieldExtractor("Population", "integer")
    assert extract("size", "12.7") == 12
    assert extract("size", "3k") == 3
    assert extract("size", 41.9) == 41
    with pytest.raises(RecordParseError):
        extract("size", "n/a")


def test_string_extractor_strips_and_rejects_blank() -> None:
    extract = FieldExtractor("Country", "string")
    assert extract("category", "  France ") == "France"
    with pytest.raises(RecordParseError, match="category"):
        extract("category", "   ")


def test_parse_rows_drops_bad_rows_and_counts_them() -> None:
    rows = [
        {"Country": "India", "Value": "3.3", "Population": "1400000000", "Region": "Asia"},
        {"Country": "Nowhere", "Value": "", "Population": "10", "Region": "Asia"},
        {"Country": "Japan", "Value": "10.9", "Population": "125000000", "Region": "Asia"},
        {"Country": "", "Value": "1", "Population": "1", "Region": "Asia"},
    ]
    dataset, dropped = _schema().parse_rows(rows)

    assert dropped == 2
    assert [r.category for r in dataset] == ["India", "Japan"]
    assert dataset.fields == frozenset({"category", "y", "size", "group"})


def test_row_filter_excludes_without_counting_as_dropped() -> None:
    schema = _schema(row_filter=lambda rec: rec.y >= 5)
    rows = [
        {"Country": "A", "Value": "1", "Population": "1", "Region": "R"},
        {"Country": "B", "Value": "9", "Population": "1", "Region": "R"},
    ]
    dataset, dropped = schema.parse_rows(rows)
    assert dropped == 0
    assert [r.category for r in dataset] == ["B"]


def test_schema_requires_category_and_known_fields() -> None:
    with pytest.raises(ValueError, match="category"):
        RecordSchema({"x": FieldExtractor("X")})
    with pytest.raises(ValueError, match="Unknown"):
        RecordSchema({"category": FieldExtractor("C", "string"), "colour": FieldExtractor("Z")})


def test_schema_lists_columns_in_declaration_order() -> None:
    assert _schema().columns == ("Country", "Value", "Population", "Region")


def test_dataset_rejects_records_with_a_different_field_set() -> None:
    with pytest.raises(ValueError):
        Dataset([Record("A", x=1, y=2), Record("B", x=1, y=2, size=3)])


def test_dataset_categories_and_groups_keep_first_seen_order() -> None:
    dataset = Dataset(
        [
            Record("X", x=2010, y=8),
            Record("Q", x=2000, y=7),
            Record("X", x=2000, y=5),
        ]
    )
    assert dataset.categories() == ("X", "Q")
    groups = dataset.group_by("category")
    assert list(groups) == ["X", "Q"]
    assert [r.x for r in groups["X"]] == [2010, 2000]
    assert dataset.values("y") == [8, 7, 5]


def test_empty_dataset_is_falsy() -> None:
    assert not Dataset.empty()
    assert len(Dataset.empty()) == 0


def test_viewport_readiness_and_validation() -> None:
    assert not Viewport().ready
    assert Viewport(800, 0).ready
    with pytest.raises(ValueError):
        Viewport(-1, 10)


def test_selection_state_is_a_value() -> None:
    assert SelectionState(["A", "B"]) == SelectionState({"B", "A"})
    assert not SelectionState()
    assert repr(SelectionState(["b", "a"])) == "SelectionState(['a', 'b'])"
