"""Domain layer package."""

from .models import (
    CATEGORY_SCHEMA,
    THEME_ENTITY_SCHEMA,
    THEME_SCHEMA,
    Classification,
    EnrichedRow,
    GroupAggregate,
    MetricRow,
    PerformanceTier,
    RankMetric,
    TaxonomySchema,
    schema_by_name,
)

__all__ = [
    "MetricRow",
    "Classification",
    "EnrichedRow",
    "GroupAggregate",
    "PerformanceTier",
    "RankMetric",
    "TaxonomySchema",
    "THEME_SCHEMA",
    "CATEGORY_SCHEMA",
    "THEME_ENTITY_SCHEMA",
    "schema_by_name",
]
