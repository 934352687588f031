"""Text rendering helpers for the partner email and console summary."""

from __future__ import annotations

from typing import Any, Dict, List, Sequence

from content_tiering.application.reporting.metrics import fmt_number, fmt_pct
from content_tiering.application.reporting.selectors import groups_in_tier
from content_tiering.domain.models import GroupAggregate, PerformanceTier

DEFAULT_PARTNER_NAME = "<Partner Name>"
SIGNATURE = "Best regards,\nThe Content Team\n"


def email_draft(theme_aggregates: Sequence[GroupAggregate], partner_name: str = DEFAULT_PARTNER_NAME) -> str:
    top_groups = groups_in_tier(theme_aggregates, PerformanceTier.TOP)
    if not top_groups:
        return (
            f"Hi {partner_name},\n\n"
            "We've completed the content performance analysis. While we didn't identify any clear "
            "top-performing categories in this batch, the full report and charts are available for review.\n\n"
            "Let's discuss our strategy based on the detailed data.\n\n"
            f"{SIGNATURE}"
        )

    top_list = "\n".join(
        f"- {item.label}: Averaging {fmt_number(item.average_clicks)} clicks across {item.article_count} articles."
        for item in top_groups
    )
    return (
        "Subject: Key Content Performance Insights & Top-Performing Categories\n\n"
        f"Hi {partner_name},\n\n"
        "Following our recent content performance analysis, we've identified our top-performing categories. "
        "These topics are proven winners, consistently driving high engagement and demonstrating what "
        "resonates most with our audience.\n\n"
        "Here are the key top-performing categories:\n"
        f"{top_list}\n\n"
        "Our strategic recommendation is to double down on these themes. By creating more content within "
        "these successful categories, we can capitalize on their proven track record and further solidify "
        "our topical authority.\n\n"
        f"{SIGNATURE}"
    )


def summary_lines(summary: Dict[str, Any], theme_aggregates: Sequence[GroupAggregate]) -> List[str]:
    counts = summary.get("themeTierCounts", {})
    lines = [
        f"URLs analyzed: {summary.get('urlCount', 0)} ({summary.get('classifiedUrlCount', 0)} classified)",
        f"Clicks {fmt_number(summary.get('totalClicks'))}, impressions {fmt_number(summary.get('totalImpressions'))}, "
        f"CTR {fmt_pct(summary.get('overallCtrPct'))}",
        f"Themes: {summary.get('themeCount', 0)} "
        f"(top={counts.get('top', 0)}, potential={counts.get('potential', 0)}, standard={counts.get('standard', 0)})",
    ]
    for item in theme_aggregates:
        if item.tier in (PerformanceTier.TOP, PerformanceTier.POTENTIAL):
            lines.append(
                f"  [{item.tier.display_name}] {item.label}: avg {fmt_number(item.average_clicks)} clicks, "
                f"{item.article_count} articles"
            )
    return lines
