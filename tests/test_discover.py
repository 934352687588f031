from __future__ import annotations

import pytest

from content_tiering.aggregation import with_contributions
from content_tiering.discover import DiscoverSubsetAnalyzer
from content_tiering.domain.models import THEME_ENTITY_SCHEMA, Classification, MetricRow, PerformanceTier
from content_tiering.merger import merge_rows


def _enriched(rows, classifications):
    return with_contributions(merge_rows(rows, classifications, THEME_ENTITY_SCHEMA))


def test_subset_keeps_highest_clicks():
    rows = [MetricRow(url=f"u{idx}", clicks=idx, impressions=idx * 10) for idx in range(150)]
    classifications = {row.url: Classification(theme="T", entity="E") for row in rows}

    result = DiscoverSubsetAnalyzer().run(_enriched(rows, classifications))

    assert len(result.rows) == 100
    assert result.rows[0].url == "u149"
    assert min(row.clicks for row in result.rows) == 50
    [theme] = result.theme_aggregates
    assert theme.article_count == 100
    assert theme.total_clicks == sum(range(50, 150))


def test_subset_smaller_than_limit_keeps_all(site_rows, site_classifications):
    result = DiscoverSubsetAnalyzer().run(_enriched(site_rows, site_classifications))

    assert len(result.rows) == len(site_rows)
    assert sum(item.article_count for item in result.theme_aggregates) == len(site_rows)


def test_ties_at_cutoff_keep_input_order():
    rows = [
        MetricRow(url="first", clicks=5, impressions=1),
        MetricRow(url="second", clicks=5, impressions=1),
        MetricRow(url="third", clicks=5, impressions=1),
        MetricRow(url="best", clicks=9, impressions=1),
    ]

    result = DiscoverSubsetAnalyzer(subset_size=3).run(_enriched(rows, {}))

    assert [row.url for row in result.rows] == ["best", "first", "second"]


def test_groups_outside_subset_do_not_appear():
    rows = [MetricRow(url="hit", clicks=500, impressions=1000)]
    rows += [MetricRow(url=f"tail-{idx}", clicks=1, impressions=5) for idx in range(5)]
    classifications = {"hit": Classification(theme="Viral", entity="Story")}
    classifications.update({f"tail-{idx}": Classification(theme="Tail", entity="Misc") for idx in range(5)})

    result = DiscoverSubsetAnalyzer(subset_size=1).run(_enriched(rows, classifications))

    assert [item.key for item in result.theme_aggregates] == [("Viral",)]
    assert [item.key for item in result.entity_aggregates] == [("Viral", "Story")]


def test_subset_ranks_pools_by_total_clicks():
    rows = [
        MetricRow(url="pair-1", clicks=100, impressions=1),
        MetricRow(url="pair-2", clicks=100, impressions=1),
        MetricRow(url="solo", clicks=150, impressions=1),
    ]
    classifications = {
        "pair-1": Classification(theme="Pair", entity="P"),
        "pair-2": Classification(theme="Pair", entity="P"),
        "solo": Classification(theme="Solo", entity="S"),
    }

    result = DiscoverSubsetAnalyzer(top_n=1).run(_enriched(rows, classifications))

    tiers = {item.label: item.tier for item in result.theme_aggregates}
    assert tiers == {"Pair": PerformanceTier.POTENTIAL, "Solo": PerformanceTier.STANDARD}
    assert [item.label for item in result.theme_aggregates] == ["Pair", "Solo"]


def test_entities_can_be_skipped(site_rows, site_classifications):
    result = DiscoverSubsetAnalyzer().run(_enriched(site_rows, site_classifications), include_entities=False)

    assert result.theme_aggregates
    assert result.entity_aggregates == []


def test_empty_input_returns_empty_result():
    result = DiscoverSubsetAnalyzer().run(_enriched([], {}))

    assert result.rows == []
    assert result.theme_aggregates == []
    assert result.entity_aggregates == []


def test_invalid_subset_size():
    with pytest.raises(ValueError):
        DiscoverSubsetAnalyzer(subset_size=0)
