"""Row Merger: joins metric rows with per-URL classifications."""

from __future__ import annotations

import logging
from typing import Mapping, Sequence

import polars as pl

from content_tiering.domain.models import LABEL_COLUMNS, Classification, MetricRow, TaxonomySchema

logger = logging.getLogger(__name__)

ROW_SCHEMA: dict[str, pl.DataType] = {
    "url": pl.Utf8,
    "title": pl.Utf8,
    "author": pl.Utf8,
    "clicks": pl.Float64,
    "impressions": pl.Float64,
}
LABEL_SCHEMA: dict[str, pl.DataType] = {
    "url": pl.Utf8,
    "theme": pl.Utf8,
    "entity": pl.Utf8,
    "sub_entity": pl.Utf8,
    "classified": pl.Boolean,
}
MERGED_COLUMNS: list[str] = [
    "url",
    "title",
    "author",
    "clicks",
    "impressions",
    "theme",
    "entity",
    "sub_entity",
    "classified",
]
ROW_INDEX = "__row_nr"


def rows_to_frame(rows: Sequence[MetricRow]) -> pl.DataFrame:
    records = [
        {
            "url": row.url,
            "title": row.title,
            "author": row.author_name,
            "clicks": float(row.clicks),
            "impressions": float(row.impressions),
        }
        for row in rows
    ]
    return pl.DataFrame(records, schema=ROW_SCHEMA)


def classifications_to_frame(classifications: Mapping[str, Classification]) -> pl.DataFrame:
    records = [
        {
            "url": str(url),
            "theme": item.theme,
            "entity": item.entity,
            "sub_entity": item.sub_entity,
            "classified": True,
        }
        for url, item in classifications.items()
    ]
    return pl.DataFrame(records, schema=LABEL_SCHEMA)


def _label_exprs(schema: TaxonomySchema) -> list[pl.Expr]:
    exprs: list[pl.Expr] = []
    for column in LABEL_COLUMNS:
        placeholder = schema.placeholder_for(column)
        if placeholder is None:
            exprs.append(pl.lit(None, dtype=pl.Utf8).alias(column))
        else:
            exprs.append(pl.col(column).fill_null(pl.lit(placeholder)).alias(column))
    return exprs


def _validate_schema(df: pl.DataFrame) -> None:
    missing = sorted(set(ROW_SCHEMA).difference(df.columns))
    if missing:
        raise ValueError(f"Missing required columns: {missing}")


def merge_frame(
    rows_df: pl.DataFrame,
    classifications: Mapping[str, Classification],
    schema: TaxonomySchema,
) -> pl.DataFrame:
    """Attach labels to every row, keeping input order and count.

    URLs without a classification take the schema placeholders; classifications
    for URLs absent from ``rows_df`` are ignored.
    """
    _validate_schema(rows_df)
    labels_df = classifications_to_frame(classifications)

    merged = (
        rows_df.select(list(ROW_SCHEMA))
        .with_row_index(ROW_INDEX)
        .join(labels_df, on="url", how="left")
        .sort(ROW_INDEX)
        .with_columns(_label_exprs(schema))
        .with_columns(pl.col("classified").fill_null(False))
        .select(MERGED_COLUMNS)
    )

    unmatched = merged.height - int(merged.select(pl.col("classified").sum()).item() or 0)
    if unmatched:
        logger.info("%d of %d URLs have no classification; using placeholders", unmatched, merged.height)
    row_urls = set(rows_df.get_column("url").to_list())
    orphans = sum(1 for url in classifications if url not in row_urls)
    if orphans:
        logger.info("Ignoring %d classifications for URLs not present in the input rows", orphans)
    return merged


def merge_rows(
    rows: Sequence[MetricRow],
    classifications: Mapping[str, Classification],
    schema: TaxonomySchema,
) -> pl.DataFrame:
    return merge_frame(rows_to_frame(rows), classifications, schema)
