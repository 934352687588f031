"""Application service for the end-to-end content report use case."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from time import perf_counter
from typing import Any, Dict

import polars as pl

from content_tiering.aggregation import AUTHOR, ENTITY, GLOBAL_ENTITY, THEME
from content_tiering.application.analysis_service import AnalysisResult, run_content_analysis
from content_tiering.application.reporting.rendering import DEFAULT_PARTNER_NAME, email_draft, summary_lines
from content_tiering.application.reporting.selectors import chart_data, overall_summary
from content_tiering.config import EngineSettings, load_settings
from content_tiering.discover import DEFAULT_SUBSET_SIZE
from content_tiering.domain.models import THEME_ENTITY_SCHEMA, TaxonomySchema
from content_tiering.infrastructure.excel_repository import (
    detail_sheet_df,
    load_inputs,
    save_output_workbook,
    summary_sheet_df,
)
from content_tiering.infrastructure.report_exporter import save_summary_html, save_summary_json, save_text
from content_tiering.ingestion import domain_from_url

logger = logging.getLogger(__name__)

REPORT_PREFIX = "Topical_Authority_Analysis"


@dataclass(frozen=True)
class ReportOutputs:
    json_path: Path
    html_path: Path
    excel_path: Path
    email_path: Path | None
    excel_saved: bool
    excel_error_message: str


def report_basename(domain: str | None) -> str:
    sanitized = domain.replace(".", "_") if domain else "report"
    return f"{REPORT_PREFIX}_{sanitized}"


def build_summary(analysis: AnalysisResult, domain: str | None, settings: EngineSettings) -> Dict[str, Any]:
    return {
        "websiteDomain": domain,
        "settings": {
            "articleCountThreshold": settings.article_count_threshold,
            "topN": settings.top_n,
            "discoverSize": settings.discover_size,
        },
        "overview": overall_summary(analysis.rows, analysis.theme_aggregates),
        "chartData": chart_data(analysis.theme_aggregates),
        "analysis": analysis.to_dict(),
    }


def build_workbook_sheets(analysis: AnalysisResult, discover_size: int = DEFAULT_SUBSET_SIZE) -> Dict[str, pl.DataFrame]:
    schema = analysis.schema
    sheets: Dict[str, pl.DataFrame] = {
        "Detailed Report": detail_sheet_df(analysis.rows, schema),
        "Theme Summary": summary_sheet_df(analysis.theme_aggregates, THEME.key_columns),
    }
    if schema.has_entity_level:
        sheets["Entity Summary"] = summary_sheet_df(analysis.entity_aggregates, ENTITY.key_columns)
        sheets["Global Entity Summary"] = summary_sheet_df(
            analysis.global_entity_aggregates, GLOBAL_ENTITY.key_columns
        )
    if analysis.author_aggregates:
        sheets["Author Summary"] = summary_sheet_df(analysis.author_aggregates, AUTHOR.key_columns)
    sheets[f"Discover Top {discover_size}"] = detail_sheet_df(analysis.discover.rows, schema)
    sheets["Discover Theme Summary"] = summary_sheet_df(analysis.discover.theme_aggregates, THEME.key_columns)
    if schema.has_entity_level:
        sheets["Discover Entity Summary"] = summary_sheet_df(
            analysis.discover.entity_aggregates, ENTITY.key_columns
        )
    return sheets


def run_reporting_pipeline(
    rows_path: Path,
    classifications_path: Path,
    output_dir: Path,
    schema: TaxonomySchema = THEME_ENTITY_SCHEMA,
    settings: EngineSettings | None = None,
    partner_name: str | None = None,
) -> ReportOutputs:
    pipeline_start = perf_counter()
    stage_start = pipeline_start
    stage_timings: list[tuple[str, float]] = []

    def _mark(stage_name: str) -> None:
        nonlocal stage_start
        now = perf_counter()
        stage_timings.append((stage_name, now - stage_start))
        stage_start = now

    settings = settings or load_settings()
    rows, classifications = load_inputs(
        rows_path,
        classifications_path,
        schema=schema,
        parse_error_threshold=settings.parse_error_threshold,
    )
    _mark("load_inputs")
    analysis = run_content_analysis(rows, classifications, schema=schema, settings=settings)
    _mark("run_content_analysis")

    domain = domain_from_url(rows[0].url) if rows else None
    basename = report_basename(domain)
    summary = build_summary(analysis, domain, settings)
    _mark("build_summary")

    json_path = output_dir / f"{basename}.json"
    html_path = output_dir / f"{basename}.html"
    excel_path = output_dir / f"{basename}.xlsx"
    save_summary_json(json_path, summary)
    save_summary_html(html_path, summary, title=f"Topical Authority Analysis: {domain or 'report'}")
    _mark("save_json_html")

    excel_saved, excel_error_message = save_output_workbook(
        excel_path, build_workbook_sheets(analysis, discover_size=settings.discover_size)
    )
    _mark("save_excel")

    email_path: Path | None = None
    if partner_name is not None:
        email_path = output_dir / f"{basename}_email.txt"
        save_text(email_path, email_draft(analysis.theme_aggregates, partner_name or DEFAULT_PARTNER_NAME))
        _mark("save_email")
    total_elapsed = perf_counter() - pipeline_start

    for line in summary_lines(summary["overview"], analysis.theme_aggregates):
        print(line)
    stage_text = ", ".join([f"{name}={seconds:.3f}s" for name, seconds in stage_timings])
    print(f"Stage Timing: {stage_text}")
    print(f"Total Elapsed: {total_elapsed:.3f}s")
    print(f"Saved JSON: {json_path}")
    print(f"Saved HTML: {html_path}")
    if excel_saved:
        print(f"Saved Excel: {excel_path}")
    else:
        logger.warning("Excel save skipped for %s: %s", excel_path, excel_error_message)
        print(f"Excel save skipped (file may be open/locked): {excel_error_message}")
    if email_path is not None:
        print(f"Saved email draft: {email_path}")

    return ReportOutputs(
        json_path=json_path,
        html_path=html_path,
        excel_path=excel_path,
        email_path=email_path,
        excel_saved=excel_saved,
        excel_error_message=excel_error_message,
    )
