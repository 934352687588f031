"""Grouping Aggregator and Contribution Normalizer."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import polars as pl

from content_tiering.domain.models import GroupAggregate

METRIC_COLUMNS: list[str] = ["clicks", "impressions"]
AGGREGATE_COLUMNS: list[str] = ["article_count", "total_clicks", "total_impressions", "average_clicks"]
DECIMALS = 2
TIE_PRECISION = 6


def round_half_up_expr(expr: pl.Expr, decimals: int = DECIMALS) -> pl.Expr:
    """Round half-up, treating values within float noise of a tie (1.025 * 100) as the tie."""
    scale = 10**decimals
    return ((expr * scale).round(TIE_PRECISION) + 0.5).floor() / scale


def safe_ratio_expr(num: pl.Expr, den: pl.Expr) -> pl.Expr:
    return pl.when(den > 0).then(num / den).otherwise(pl.lit(0.0))


def contribution_pct_expr(value: pl.Expr, total: pl.Expr) -> pl.Expr:
    return round_half_up_expr(safe_ratio_expr(value, total) * 100)


@dataclass(frozen=True)
class GroupingDimension:
    """Named grouping key. Compound keys stay separate columns, never joined text."""

    name: str
    key_columns: tuple[str, ...]


THEME = GroupingDimension("theme", ("theme",))
ENTITY = GroupingDimension("entity", ("theme", "entity"))
GLOBAL_ENTITY = GroupingDimension("global_entity", ("entity",))
AUTHOR = GroupingDimension("author", ("author",))


def _validate_schema(df: pl.DataFrame, columns: Sequence[str]) -> None:
    required = set(columns) | set(METRIC_COLUMNS)
    missing = sorted(required.difference(df.columns))
    if missing:
        raise ValueError(f"Missing required columns: {missing}")


def _sum_aggregations() -> list[pl.Expr]:
    return [
        pl.len().cast(pl.Int64).alias("article_count"),
        pl.col("clicks").sum().cast(pl.Float64).alias("total_clicks"),
        pl.col("impressions").sum().cast(pl.Float64).alias("total_impressions"),
    ]


def aggregate_frame(df: pl.DataFrame, dimension: GroupingDimension) -> pl.DataFrame:
    """One row per distinct key with article count, sums and average clicks."""
    keys = list(dimension.key_columns)
    _validate_schema(df, keys)
    return (
        df.group_by(keys)
        .agg(_sum_aggregations())
        .with_columns(
            round_half_up_expr(safe_ratio_expr(pl.col("total_clicks"), pl.col("article_count"))).alias(
                "average_clicks"
            )
        )
        .sort(keys)
        .select([*keys, *AGGREGATE_COLUMNS])
    )


def aggregate(df: pl.DataFrame, dimension: GroupingDimension) -> list[GroupAggregate]:
    agg_df = aggregate_frame(df, dimension)
    return [
        GroupAggregate.from_row(row, dimension=dimension.name, key_columns=dimension.key_columns)
        for row in agg_df.to_dicts()
    ]


def with_contributions(df: pl.DataFrame, group_column: str = "theme") -> pl.DataFrame:
    """Add each row's share of its theme group's clicks and impressions, in percent."""
    _validate_schema(df, [group_column])
    return df.with_columns(
        contribution_pct_expr(pl.col("clicks"), pl.col("clicks").sum().over(group_column)).alias(
            "clicks_contribution_pct"
        ),
        contribution_pct_expr(pl.col("impressions"), pl.col("impressions").sum().over(group_column)).alias(
            "impressions_contribution_pct"
        ),
    )
