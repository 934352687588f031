"""Application service for the content tiering use case."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Sequence

import polars as pl

from content_tiering.aggregation import AUTHOR, ENTITY, GLOBAL_ENTITY, THEME, aggregate, with_contributions
from content_tiering.config import EngineSettings
from content_tiering.discover import DiscoverResult, DiscoverSubsetAnalyzer
from content_tiering.domain.models import (
    THEME_ENTITY_SCHEMA,
    UNKNOWN_AUTHOR,
    Classification,
    EnrichedRow,
    GroupAggregate,
    MetricRow,
    RankMetric,
    TaxonomySchema,
)
from content_tiering.merger import merge_rows
from content_tiering.tiering import TierClassifier

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnalysisResult:
    schema: TaxonomySchema
    rows: list[EnrichedRow]
    theme_aggregates: list[GroupAggregate]
    entity_aggregates: list[GroupAggregate] = field(default_factory=list)
    global_entity_aggregates: list[GroupAggregate] = field(default_factory=list)
    author_aggregates: list[GroupAggregate] = field(default_factory=list)
    discover: DiscoverResult = field(default_factory=DiscoverResult)

    def to_dict(self) -> dict[str, Any]:
        return {
            "schema": self.schema.name,
            "rows": [row.to_dict() for row in self.rows],
            "themeAggregates": [item.to_dict() for item in self.theme_aggregates],
            "entityAggregates": [item.to_dict() for item in self.entity_aggregates],
            "globalEntityAggregates": [item.to_dict() for item in self.global_entity_aggregates],
            "authorAggregates": [item.to_dict() for item in self.author_aggregates],
            "discover": self.discover.to_dict(),
        }


def _has_authors(df: pl.DataFrame) -> bool:
    return df.select(pl.col("author").is_not_null().any()).item() is True


def analyze_frame(
    merged_df: pl.DataFrame,
    schema: TaxonomySchema,
    settings: EngineSettings | None = None,
) -> AnalysisResult:
    """Aggregate and tier an already merged frame along every dimension."""
    settings = settings or EngineSettings()
    classifier = TierClassifier(
        rank_metric=RankMetric.AVERAGE_CLICKS,
        article_count_threshold=settings.article_count_threshold,
        top_n=settings.top_n,
    )
    if merged_df.is_empty():
        logger.warning("No rows to analyze; returning empty aggregates")

    enriched_df = with_contributions(merged_df)
    theme_aggregates = classifier.classify_ranked(aggregate(enriched_df, THEME))

    entity_aggregates: list[GroupAggregate] = []
    global_entity_aggregates: list[GroupAggregate] = []
    if schema.has_entity_level:
        entity_aggregates = classifier.classify_ranked(aggregate(enriched_df, ENTITY))
        global_entity_aggregates = classifier.classify_ranked(aggregate(enriched_df, GLOBAL_ENTITY))

    author_aggregates: list[GroupAggregate] = []
    if not enriched_df.is_empty() and _has_authors(enriched_df):
        author_df = enriched_df.with_columns(pl.col("author").fill_null(pl.lit(UNKNOWN_AUTHOR)))
        author_aggregates = classifier.classify_ranked(aggregate(author_df, AUTHOR))

    discover = DiscoverSubsetAnalyzer(
        subset_size=settings.discover_size,
        article_count_threshold=settings.article_count_threshold,
        top_n=settings.top_n,
    ).run(enriched_df, include_entities=schema.has_entity_level)

    logger.info(
        "Analyzed %d rows into %d themes, %d entities, %d authors",
        enriched_df.height,
        len(theme_aggregates),
        len(entity_aggregates),
        len(author_aggregates),
    )
    return AnalysisResult(
        schema=schema,
        rows=[EnrichedRow.from_row(row) for row in enriched_df.to_dicts()],
        theme_aggregates=theme_aggregates,
        entity_aggregates=entity_aggregates,
        global_entity_aggregates=global_entity_aggregates,
        author_aggregates=author_aggregates,
        discover=discover,
    )


def run_content_analysis(
    rows: Sequence[MetricRow],
    classifications: Mapping[str, Classification],
    schema: TaxonomySchema = THEME_ENTITY_SCHEMA,
    settings: EngineSettings | None = None,
) -> AnalysisResult:
    """Merge rows with their classifications, then aggregate and tier them."""
    merged_df = merge_rows(rows, classifications, schema)
    return analyze_frame(merged_df, schema=schema, settings=settings)
