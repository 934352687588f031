from __future__ import annotations

from typing import Callable

import pytest

from content_tiering.domain.models import Classification, GroupAggregate, MetricRow


@pytest.fixture
def scenario_rows() -> list[MetricRow]:
    return [
        MetricRow(url="a", clicks=10, impressions=100),
        MetricRow(url="b", clicks=30, impressions=200),
        MetricRow(url="c", clicks=5, impressions=50),
    ]


@pytest.fixture
def scenario_classifications() -> dict[str, Classification]:
    return {
        "a": Classification(theme="X"),
        "b": Classification(theme="X"),
        "c": Classification(theme="Y"),
    }


@pytest.fixture
def site_rows() -> list[MetricRow]:
    return [
        MetricRow(url="https://example.com/nba-1", clicks=120, impressions=1000, title="NBA 1", author_name="Ana"),
        MetricRow(url="https://example.com/nba-2", clicks=80, impressions=900, title="NBA 2", author_name="Ana"),
        MetricRow(url="https://example.com/nba-3", clicks=100, impressions=1100, title="NBA 3", author_name="Ben"),
        MetricRow(url="https://example.com/nfl-1", clicks=300, impressions=2500, title="NFL 1", author_name="Ben"),
        MetricRow(url="https://example.com/stocks-1", clicks=40, impressions=800, title="Stocks 1"),
        MetricRow(url="https://example.com/stocks-2", clicks=20, impressions=600, title="Stocks 2"),
        MetricRow(url="https://example.com/stocks-3", clicks=0, impressions=300, title="Stocks 3"),
        MetricRow(url="https://example.com/misc", clicks=7, impressions=70),
    ]


@pytest.fixture
def site_classifications() -> dict[str, Classification]:
    return {
        "https://example.com/nba-1": Classification(theme="Sports", entity="Basketball", sub_entity="NBA"),
        "https://example.com/nba-2": Classification(theme="Sports", entity="Basketball", sub_entity="NBA"),
        "https://example.com/nba-3": Classification(theme="Sports", entity="Basketball", sub_entity="NBA"),
        "https://example.com/nfl-1": Classification(theme="Sports", entity="Football", sub_entity="NFL"),
        "https://example.com/stocks-1": Classification(theme="Finance", entity="Markets", sub_entity="Stocks"),
        "https://example.com/stocks-2": Classification(theme="Finance", entity="Markets", sub_entity="Stocks"),
        "https://example.com/stocks-3": Classification(theme="Finance", entity="Markets", sub_entity="Stocks"),
    }


@pytest.fixture
def make_aggregate() -> Callable[..., GroupAggregate]:
    def _make(
        label: str,
        article_count: int,
        total_clicks: float,
        parent: str | None = None,
        dimension: str = "theme",
    ) -> GroupAggregate:
        key = (parent, label) if parent is not None else (label,)
        key_columns = ("theme", "entity") if parent is not None else ("theme",)
        return GroupAggregate(
            dimension=dimension,
            key_columns=key_columns,
            key=key,
            article_count=article_count,
            total_clicks=float(total_clicks),
            total_impressions=float(total_clicks) * 10,
            average_clicks=round(total_clicks / article_count, 2) if article_count else 0.0,
        )

    return _make
