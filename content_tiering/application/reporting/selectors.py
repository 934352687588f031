"""Tier selection and summary helpers."""

from __future__ import annotations

from typing import Any, Dict, List, Sequence

from content_tiering.application.reporting.metrics import round_half_up, safe_ratio
from content_tiering.domain.models import EnrichedRow, GroupAggregate, PerformanceTier

CHART_TIERS: tuple[PerformanceTier, ...] = (PerformanceTier.TOP, PerformanceTier.POTENTIAL)


def groups_in_tier(aggregates: Sequence[GroupAggregate], tier: PerformanceTier) -> List[GroupAggregate]:
    return [item for item in aggregates if item.tier == tier]


def tier_counts(aggregates: Sequence[GroupAggregate]) -> Dict[str, int]:
    counts = {tier.value: 0 for tier in PerformanceTier}
    for item in aggregates:
        if item.tier is not None:
            counts[item.tier.value] += 1
    return counts


def chart_data(aggregates: Sequence[GroupAggregate]) -> List[Dict[str, Any]]:
    """Top and potential groups as bar-chart records, highest average first."""
    selected = [item for item in aggregates if item.tier in CHART_TIERS]
    selected.sort(key=lambda item: (-item.average_clicks, item.key))
    return [
        {
            "name": item.label,
            "averageClicks": item.average_clicks,
            "performanceTier": item.tier.value if item.tier is not None else None,
        }
        for item in selected
    ]


def overall_summary(rows: Sequence[EnrichedRow], theme_aggregates: Sequence[GroupAggregate]) -> Dict[str, Any]:
    total_clicks = sum(row.clicks for row in rows)
    total_impressions = sum(row.impressions for row in rows)
    return {
        "urlCount": len(rows),
        "classifiedUrlCount": sum(1 for row in rows if row.classified),
        "totalClicks": total_clicks,
        "totalImpressions": total_impressions,
        "overallCtrPct": round_half_up(safe_ratio(total_clicks, total_impressions) * 100),
        "themeCount": len(theme_aggregates),
        "themeTierCounts": tier_counts(theme_aggregates),
    }
