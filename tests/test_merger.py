from __future__ import annotations

import polars as pl
import pytest

from content_tiering.domain.models import (
    CATEGORY_SCHEMA,
    THEME_ENTITY_SCHEMA,
    THEME_SCHEMA,
    Classification,
    MetricRow,
)
from content_tiering.merger import MERGED_COLUMNS, merge_frame, merge_rows, rows_to_frame


def test_merge_keeps_row_order_and_count(scenario_rows, scenario_classifications):
    merged = merge_rows(scenario_rows, scenario_classifications, THEME_SCHEMA)

    assert merged.columns == MERGED_COLUMNS
    assert merged.get_column("url").to_list() == ["a", "b", "c"]
    assert merged.get_column("theme").to_list() == ["X", "X", "Y"]
    assert merged.get_column("classified").to_list() == [True, True, True]


def test_theme_schema_leaves_lower_levels_empty(scenario_rows, scenario_classifications):
    merged = merge_rows(scenario_rows, scenario_classifications, THEME_SCHEMA)

    assert merged.get_column("entity").null_count() == merged.height
    assert merged.get_column("sub_entity").null_count() == merged.height


def test_unclassified_url_gets_placeholders():
    rows = [MetricRow(url="a", clicks=1, impressions=2), MetricRow(url="z", clicks=3, impressions=4)]
    classifications = {"a": Classification(theme="News", entity="Local", sub_entity="City")}

    merged = merge_rows(rows, classifications, THEME_ENTITY_SCHEMA).to_dicts()

    assert merged[1]["theme"] == "Uncategorized"
    assert merged[1]["entity"] == "Uncategorized"
    assert merged[1]["sub_entity"] == "N/A"
    assert merged[1]["classified"] is False
    assert merged[0]["sub_entity"] == "City"


def test_category_schema_placeholders():
    rows = [MetricRow(url="a", clicks=1, impressions=2)]

    merged = merge_rows(rows, {}, CATEGORY_SCHEMA).to_dicts()

    assert merged[0]["theme"] == "Uncategorized"
    assert merged[0]["entity"] == "Uncategorized"
    assert merged[0]["sub_entity"] is None


def test_orphan_classifications_are_ignored(scenario_rows, scenario_classifications):
    classifications = dict(scenario_classifications)
    classifications["ghost"] = Classification(theme="Ghost")

    merged = merge_rows(scenario_rows, classifications, THEME_SCHEMA)

    assert merged.height == len(scenario_rows)
    assert "ghost" not in merged.get_column("url").to_list()
    assert "Ghost" not in merged.get_column("theme").to_list()


def test_blank_label_falls_back_to_placeholder():
    record = {"url": "a", "theme": "Tech", "entity": "   ", "subEntity": ""}
    classification = Classification.from_record(record, THEME_ENTITY_SCHEMA)

    merged = merge_rows([MetricRow(url="a", clicks=1, impressions=1)], {"a": classification}, THEME_ENTITY_SCHEMA)

    row = merged.to_dicts()[0]
    assert row["theme"] == "Tech"
    assert row["entity"] == "Uncategorized"
    assert row["sub_entity"] == "N/A"
    assert row["classified"] is True


def test_empty_rows_give_empty_frame(scenario_classifications):
    merged = merge_rows([], scenario_classifications, THEME_SCHEMA)

    assert merged.is_empty()
    assert merged.columns == MERGED_COLUMNS


def test_missing_columns_raise():
    with pytest.raises(ValueError, match="Missing required columns"):
        merge_frame(pl.DataFrame({"url": ["a"]}), {}, THEME_SCHEMA)


def test_rows_to_frame_uses_float_metrics(scenario_rows):
    frame = rows_to_frame(scenario_rows)

    assert frame.schema["clicks"] == pl.Float64
    assert frame.get_column("clicks").to_list() == [10.0, 30.0, 5.0]
