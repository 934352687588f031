"""Infrastructure adapter for CSV/JSON input and Excel workbook output."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Sequence

import polars as pl

from content_tiering.domain.models import (
    Classification,
    EnrichedRow,
    GroupAggregate,
    MetricRow,
    PerformanceTier,
    TaxonomySchema,
)
from content_tiering.ingestion import read_classifications, read_metric_rows, write_output_excel

LABEL_HEADERS: dict[str, str] = {
    "theme": "Theme",
    "entity": "Entity",
    "author": "Author",
}
SUMMARY_SCHEMA: dict[str, Any] = {
    "# of Articles": pl.Int64,
    "Total Clicks": pl.Float64,
    "Total Impressions": pl.Float64,
    "Average Clicks": pl.Float64,
    "Performance Tier": pl.Utf8,
}


def load_inputs(
    rows_path: Path,
    classifications_path: Path,
    schema: TaxonomySchema,
    parse_error_threshold: float,
) -> tuple[list[MetricRow], dict[str, Classification]]:
    rows = read_metric_rows(rows_path, parse_error_threshold=parse_error_threshold)
    classifications = read_classifications(classifications_path, schema)
    return rows, classifications


def _tier_text(tier: PerformanceTier | None) -> str:
    return tier.display_name if tier is not None else ""


def detail_sheet_df(rows: Sequence[EnrichedRow], schema: TaxonomySchema) -> pl.DataFrame:
    records: list[dict[str, Any]] = []
    for row in rows:
        record: dict[str, Any] = {"URL": row.url, "Title": row.title or "", "Author": row.author_name or ""}
        record["Theme"] = row.theme
        if schema.has_entity_level:
            record["Entity"] = row.entity or ""
        if "sub_entity" in schema.columns:
            record["Sub-entity"] = row.sub_entity or ""
        record.update(
            {
                "Clicks": row.clicks,
                "Impressions": row.impressions,
                "Clicks Contribution %": row.clicks_contribution_pct,
                "Impressions Contribution %": row.impressions_contribution_pct,
            }
        )
        records.append(record)
    if not records:
        return pl.DataFrame({"URL": [], "Theme": []}, schema={"URL": pl.Utf8, "Theme": pl.Utf8})
    return pl.DataFrame(records)


def summary_sheet_df(aggregates: Sequence[GroupAggregate], key_columns: Sequence[str]) -> pl.DataFrame:
    label_schema = {LABEL_HEADERS.get(column, column): pl.Utf8 for column in key_columns}
    records: list[dict[str, Any]] = []
    for item in aggregates:
        record: dict[str, Any] = {
            LABEL_HEADERS.get(column, column): label for column, label in zip(item.key_columns, item.key)
        }
        record.update(
            {
                "# of Articles": item.article_count,
                "Total Clicks": item.total_clicks,
                "Total Impressions": item.total_impressions,
                "Average Clicks": item.average_clicks,
                "Performance Tier": _tier_text(item.tier),
            }
        )
        records.append(record)
    return pl.DataFrame(records, schema={**label_schema, **SUMMARY_SCHEMA})


def save_output_workbook(path: Path, sheets: dict[str, pl.DataFrame]) -> tuple[bool, str]:
    try:
        write_output_excel(path, sheets)
    except PermissionError as exc:
        return False, str(exc)
    return True, ""
