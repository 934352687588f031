"""Domain models for content rows, classifications and tiered group aggregates."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Mapping

UNCATEGORIZED = "Uncategorized"
NOT_APPLICABLE = "N/A"
UNKNOWN_AUTHOR = "Unknown Author"

LABEL_COLUMNS: tuple[str, ...] = ("theme", "entity", "sub_entity")


def _to_float(value: Any, default: float = 0.0) -> float:
    if value is None:
        return default
    return float(value)


def _to_optional_text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


class PerformanceTier(str, Enum):
    TOP = "top"
    POTENTIAL = "potential"
    STANDARD = "standard"

    @property
    def display_name(self) -> str:
        return self.value.capitalize()


class RankMetric(str, Enum):
    AVERAGE_CLICKS = "average_clicks"
    TOTAL_CLICKS = "total_clicks"


@dataclass(frozen=True)
class TaxonomyLevel:
    source_field: str
    column: str
    placeholder: str


@dataclass(frozen=True)
class TaxonomySchema:
    """Classifier field layout for one schema version.

    Each level maps a field of the classifier record onto one of the
    canonical label columns and names the placeholder used when the URL
    has no classification or the field is blank.
    """

    name: str
    levels: tuple[TaxonomyLevel, ...]

    @property
    def columns(self) -> tuple[str, ...]:
        return tuple(level.column for level in self.levels)

    @property
    def has_entity_level(self) -> bool:
        return "entity" in self.columns

    def placeholder_for(self, column: str) -> str | None:
        for level in self.levels:
            if level.column == column:
                return level.placeholder
        return None


THEME_SCHEMA = TaxonomySchema(
    name="theme",
    levels=(TaxonomyLevel("theme", "theme", UNCATEGORIZED),),
)
CATEGORY_SCHEMA = TaxonomySchema(
    name="category",
    levels=(
        TaxonomyLevel("category", "theme", UNCATEGORIZED),
        TaxonomyLevel("subcategory", "entity", UNCATEGORIZED),
    ),
)
THEME_ENTITY_SCHEMA = TaxonomySchema(
    name="theme_entity",
    levels=(
        TaxonomyLevel("theme", "theme", UNCATEGORIZED),
        TaxonomyLevel("entity", "entity", UNCATEGORIZED),
        TaxonomyLevel("subEntity", "sub_entity", NOT_APPLICABLE),
    ),
)
SCHEMAS: dict[str, TaxonomySchema] = {
    schema.name: schema for schema in (THEME_SCHEMA, CATEGORY_SCHEMA, THEME_ENTITY_SCHEMA)
}


def schema_by_name(name: str) -> TaxonomySchema:
    key = str(name or "").strip().lower()
    if key not in SCHEMAS:
        raise ValueError(f"Unknown taxonomy schema: {name!r} (expected one of {sorted(SCHEMAS)})")
    return SCHEMAS[key]


@dataclass(frozen=True)
class MetricRow:
    url: str
    clicks: float
    impressions: float
    title: str | None = None
    author_name: str | None = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "MetricRow":
        return cls(
            url=str(row.get("url", "") or "").strip(),
            clicks=_to_float(row.get("clicks")),
            impressions=_to_float(row.get("impressions")),
            title=_to_optional_text(row.get("title")),
            author_name=_to_optional_text(row.get("author")),
        )


@dataclass(frozen=True)
class Classification:
    """Labels assigned to one URL; levels the schema lacks stay ``None``."""

    theme: str | None = None
    entity: str | None = None
    sub_entity: str | None = None

    @classmethod
    def from_record(cls, record: Mapping[str, Any], schema: TaxonomySchema) -> "Classification":
        labels = {level.column: _to_optional_text(record.get(level.source_field)) for level in schema.levels}
        return cls(**labels)


@dataclass(frozen=True)
class EnrichedRow:
    url: str
    clicks: float
    impressions: float
    theme: str
    entity: str | None
    sub_entity: str | None
    clicks_contribution_pct: float
    impressions_contribution_pct: float
    classified: bool = True
    title: str | None = None
    author_name: str | None = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "EnrichedRow":
        return cls(
            url=str(row.get("url", "")),
            clicks=_to_float(row.get("clicks")),
            impressions=_to_float(row.get("impressions")),
            theme=str(row.get("theme") or UNCATEGORIZED),
            entity=row.get("entity"),
            sub_entity=row.get("sub_entity"),
            clicks_contribution_pct=_to_float(row.get("clicks_contribution_pct")),
            impressions_contribution_pct=_to_float(row.get("impressions_contribution_pct")),
            classified=bool(row.get("classified", True)),
            title=row.get("title"),
            author_name=row.get("author"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "url": self.url,
            "title": self.title,
            "authorName": self.author_name,
            "theme": self.theme,
            "entity": self.entity,
            "subEntity": self.sub_entity,
            "clicks": self.clicks,
            "impressions": self.impressions,
            "clicksContributionPct": self.clicks_contribution_pct,
            "impressionsContributionPct": self.impressions_contribution_pct,
        }


@dataclass(frozen=True)
class GroupAggregate:
    """Totals for one distinct grouping key, optionally carrying its tier."""

    dimension: str
    key_columns: tuple[str, ...]
    key: tuple[str, ...]
    article_count: int
    total_clicks: float
    total_impressions: float
    average_clicks: float
    tier: PerformanceTier | None = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any], dimension: str, key_columns: tuple[str, ...]) -> "GroupAggregate":
        return cls(
            dimension=dimension,
            key_columns=key_columns,
            key=tuple(str(row.get(column)) for column in key_columns),
            article_count=int(row.get("article_count") or 0),
            total_clicks=_to_float(row.get("total_clicks")),
            total_impressions=_to_float(row.get("total_impressions")),
            average_clicks=_to_float(row.get("average_clicks")),
        )

    @property
    def label(self) -> str:
        return self.key[-1]

    @property
    def parent_label(self) -> str | None:
        if len(self.key) < 2:
            return None
        return self.key[0]

    def metric(self, rank_metric: RankMetric) -> float:
        return float(getattr(self, rank_metric.value))

    def with_tier(self, tier: PerformanceTier) -> "GroupAggregate":
        return replace(self, tier=tier)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = dict(zip(self.key_columns, self.key))
        payload.update(
            {
                "articleCount": self.article_count,
                "totalClicks": self.total_clicks,
                "totalImpressions": self.total_impressions,
                "averageClicks": self.average_clicks,
                "performanceTier": self.tier.value if self.tier is not None else None,
            }
        )
        return payload
