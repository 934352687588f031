"""HTML report generator for tiered theme, entity, author and Discover summaries."""

from __future__ import annotations

from datetime import datetime
from html import escape
from pathlib import Path
from typing import Any, Dict, List, Sequence

from content_tiering.application.reporting.metrics import fmt_number, fmt_pct

SECTIONS: List[tuple[str, str]] = [
    ("themeAggregates", "Theme Summary"),
    ("entityAggregates", "Entity Summary"),
    ("globalEntityAggregates", "Global Entity Summary"),
    ("authorAggregates", "Author Summary"),
]
DISCOVER_SECTIONS: List[tuple[str, str]] = [
    ("subsetThemeAggregates", "Themes"),
    ("subsetEntityAggregates", "Entities"),
]
DEFAULT_DISCOVER_SIZE = 100
LABEL_HEADERS: Dict[str, str] = {
    "theme": "Theme",
    "entity": "Entity",
    "author": "Author",
}


def _tier_css_class(tier: Any) -> str:
    if tier in ("top", "potential"):
        return f"tier-{tier}"
    return "tier-standard"


def _label_columns(rows: Sequence[Dict[str, Any]]) -> List[str]:
    if not rows:
        return []
    return [column for column in LABEL_HEADERS if column in rows[0]]


def _render_aggregate_table(rows: Sequence[Dict[str, Any]]) -> str:
    if not rows:
        return "<p class=\"muted\">No groups.</p>"

    label_columns = _label_columns(rows)
    head = "".join(f"<th>{LABEL_HEADERS[column]}</th>" for column in label_columns)
    body: List[str] = []
    for row in rows:
        tier = row.get("performanceTier")
        labels = "".join(f"<td>{escape(str(row.get(column, '')))}</td>" for column in label_columns)
        body.append(
            f"<tr class=\"{_tier_css_class(tier)}\">{labels}"
            f"<td>{row.get('articleCount', 0)}</td>"
            f"<td>{escape(fmt_number(row.get('totalClicks')))}</td>"
            f"<td>{escape(fmt_number(row.get('totalImpressions')))}</td>"
            f"<td>{escape(fmt_number(row.get('averageClicks')))}</td>"
            f"<td>{escape(str(tier or '').capitalize())}</td></tr>"
        )
    return (
        "<table class=\"metric-table\">"
        f"<thead><tr>{head}<th># of Articles</th><th>Total Clicks</th><th>Total Impressions</th>"
        "<th>Average Clicks</th><th>Performance Tier</th></tr></thead>"
        f"<tbody>{''.join(body)}</tbody></table>"
    )


def _render_section(title: str, rows: Any) -> str:
    if not isinstance(rows, list) or not rows:
        return ""
    return f"<section class=\"panel\"><h2>{escape(title)}</h2>{_render_aggregate_table(rows)}</section>"


def write_html_report(output_path: Path, summary: Dict[str, Any], title: str = "Topical Authority Analysis") -> None:
    overview = summary.get("overview", {})
    analysis = summary.get("analysis", {})
    discover = analysis.get("discover", {}) if isinstance(analysis, dict) else {}
    discover_size = summary.get("settings", {}).get("discoverSize", DEFAULT_DISCOVER_SIZE)
    generated_at = datetime.now().strftime("%Y-%m-%d %H:%M")

    counts = overview.get("themeTierCounts", {})
    overview_items = [
        f"URLs analyzed: {overview.get('urlCount', 0)}",
        f"Total clicks: {fmt_number(overview.get('totalClicks'))}",
        f"Total impressions: {fmt_number(overview.get('totalImpressions'))}",
        f"Overall CTR: {fmt_pct(overview.get('overallCtrPct'))}",
        f"Top themes: {counts.get('top', 0)}, potential themes: {counts.get('potential', 0)}",
    ]
    overview_html = "".join(f"<li class=\"summary-line\">{escape(line)}</li>" for line in overview_items)

    sections_html = "".join(_render_section(name, analysis.get(key)) for key, name in SECTIONS)
    sections_html += "".join(
        _render_section(f"Discover Top {discover_size}: {name}", discover.get(key)) for key, name in DISCOVER_SECTIONS
    )
    if not sections_html:
        sections_html = "<section class=\"panel\"><p class=\"muted\">No data to display.</p></section>"

    html = f"""<!doctype html>
<html lang="en">
<head>
  <meta charset="utf-8" />
  <meta name="viewport" content="width=device-width, initial-scale=1" />
  <title>{escape(title)}</title>
  <style>
    :root {{
      --bg: #f3f6fb;
      --panel: #ffffff;
      --line: #d5dce8;
      --text: #0f172a;
      --sub: #475569;
      --brand: #0f766e;
      --top: #ccfbf1;
      --potential: #fef3c7;
    }}
    * {{ box-sizing: border-box; }}
    body {{
      margin: 0;
      background: var(--bg);
      color: var(--text);
      font-family: "Segoe UI", sans-serif;
    }}
    .wrap {{ max-width: 1400px; margin: 0 auto; padding: 20px; }}
    .panel {{
      background: var(--panel);
      border: 1px solid var(--line);
      border-radius: 14px;
      padding: 14px 18px;
      margin-bottom: 14px;
    }}
    h1 {{ margin: 0 0 8px; color: var(--brand); font-size: 28px; }}
    h2 {{ margin: 0 0 10px; font-size: 20px; }}
    .muted {{ color: var(--sub); }}
    .metric-table {{ width: 100%; border-collapse: collapse; font-size: 14px; }}
    .metric-table th, .metric-table td {{ border-bottom: 1px solid var(--line); padding: 6px 8px; text-align: left; }}
    .tier-top {{ background: var(--top); }}
    .tier-potential {{ background: var(--potential); }}
  </style>
</head>
<body>
  <div class="wrap">
    <section class="panel">
      <h1>{escape(title)}</h1>
      <p class="muted">Generated {generated_at}</p>
      <ul>{overview_html}</ul>
    </section>
    {sections_html}
  </div>
</body>
</html>
"""
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(html, encoding="utf-8")
