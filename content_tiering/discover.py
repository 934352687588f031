"""Discover Subset Analyzer: top-K rows by clicks, tiered on total clicks."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

import polars as pl

from content_tiering.aggregation import ENTITY, THEME, aggregate
from content_tiering.domain.models import EnrichedRow, GroupAggregate, RankMetric
from content_tiering.tiering import DEFAULT_ARTICLE_COUNT_THRESHOLD, DEFAULT_TOP_N, TierClassifier

logger = logging.getLogger(__name__)

DEFAULT_SUBSET_SIZE = 100
_POSITION = "__position"


@dataclass(frozen=True)
class DiscoverResult:
    rows: list[EnrichedRow] = field(default_factory=list)
    theme_aggregates: list[GroupAggregate] = field(default_factory=list)
    entity_aggregates: list[GroupAggregate] = field(default_factory=list)

    def to_dict(self) -> dict[str, list[dict]]:
        return {
            "subsetRows": [row.to_dict() for row in self.rows],
            "subsetThemeAggregates": [item.to_dict() for item in self.theme_aggregates],
            "subsetEntityAggregates": [item.to_dict() for item in self.entity_aggregates],
        }


class DiscoverSubsetAnalyzer:
    """Aggregate and tier only the highest-click rows of a dataset."""

    def __init__(
        self,
        subset_size: int = DEFAULT_SUBSET_SIZE,
        article_count_threshold: int = DEFAULT_ARTICLE_COUNT_THRESHOLD,
        top_n: int = DEFAULT_TOP_N,
    ) -> None:
        if subset_size < 1:
            raise ValueError(f"subset_size must be >= 1, got {subset_size}")
        self.subset_size = subset_size
        self.classifier = TierClassifier(
            rank_metric=RankMetric.TOTAL_CLICKS,
            article_count_threshold=article_count_threshold,
            top_n=top_n,
        )

    def select_subset(self, df: pl.DataFrame) -> pl.DataFrame:
        """Highest ``subset_size`` rows by clicks; equal clicks keep input order."""
        return (
            df.with_row_index(_POSITION)
            .sort(["clicks", _POSITION], descending=[True, False])
            .head(self.subset_size)
            .drop(_POSITION)
        )

    def run(self, df: pl.DataFrame, include_entities: bool = True) -> DiscoverResult:
        if df.is_empty():
            return DiscoverResult()

        subset_df = self.select_subset(df)
        logger.debug("Discover subset holds %d of %d rows", subset_df.height, df.height)
        theme_aggregates = self.classifier.classify_ranked(aggregate(subset_df, THEME))
        entity_aggregates: list[GroupAggregate] = []
        if include_entities:
            entity_aggregates = self.classifier.classify_ranked(aggregate(subset_df, ENTITY))
        return DiscoverResult(
            rows=[EnrichedRow.from_row(row) for row in subset_df.to_dicts()],
            theme_aggregates=theme_aggregates,
            entity_aggregates=entity_aggregates,
        )
