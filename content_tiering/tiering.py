"""Tier Classifier: top / potential / standard assignment over group aggregates."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from content_tiering.domain.models import GroupAggregate, PerformanceTier, RankMetric

DEFAULT_ARTICLE_COUNT_THRESHOLD = 2
DEFAULT_TOP_N = 5


@dataclass(frozen=True)
class TierClassifier:
    """Rank groups in two pools split on article count.

    Groups with more than ``article_count_threshold`` articles compete for
    ``top``; the rest compete for ``potential``. The best ``top_n`` of each
    pool by ``rank_metric`` win their tier and everything else is
    ``standard``. A short pool is never backfilled from the other one.
    Equal metrics are ordered by key labels so repeated runs agree.
    """

    rank_metric: RankMetric = RankMetric.AVERAGE_CLICKS
    article_count_threshold: int = DEFAULT_ARTICLE_COUNT_THRESHOLD
    top_n: int = DEFAULT_TOP_N

    def __post_init__(self) -> None:
        if self.article_count_threshold < 0:
            raise ValueError(f"article_count_threshold must be >= 0, got {self.article_count_threshold}")
        if self.top_n < 1:
            raise ValueError(f"top_n must be >= 1, got {self.top_n}")

    def _rank_key(self, aggregate: GroupAggregate) -> tuple[float, tuple[str, ...]]:
        return (-aggregate.metric(self.rank_metric), aggregate.key)

    def rank(self, aggregates: Sequence[GroupAggregate]) -> list[GroupAggregate]:
        return sorted(aggregates, key=self._rank_key)

    def classify(self, aggregates: Sequence[GroupAggregate]) -> list[GroupAggregate]:
        """Return ``aggregates`` in their given order, each carrying its tier."""
        ordered = self.rank(aggregates)
        established = [item for item in ordered if item.article_count > self.article_count_threshold]
        emerging = [item for item in ordered if item.article_count <= self.article_count_threshold]
        top_keys = {item.key for item in established[: self.top_n]}
        potential_keys = {item.key for item in emerging[: self.top_n]}

        tiered: list[GroupAggregate] = []
        for item in aggregates:
            if item.key in top_keys:
                tier = PerformanceTier.TOP
            elif item.key in potential_keys:
                tier = PerformanceTier.POTENTIAL
            else:
                tier = PerformanceTier.STANDARD
            tiered.append(item.with_tier(tier))
        return tiered

    def classify_ranked(self, aggregates: Sequence[GroupAggregate]) -> list[GroupAggregate]:
        return self.rank(self.classify(aggregates))
