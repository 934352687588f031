"""Content tiering report entrypoint."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Sequence

from content_tiering.application.report_service import run_reporting_pipeline
from content_tiering.config import load_settings
from content_tiering.domain.models import SCHEMAS, schema_by_name


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Aggregate classified URL metrics into tiered theme, entity and Discover summaries."
    )
    parser.add_argument("--input", required=True, type=Path, help="CSV with URL, Clicks and Impressions columns")
    parser.add_argument("--classifications", required=True, type=Path, help="JSON list of classifier records")
    parser.add_argument("--schema", default="theme_entity", choices=sorted(SCHEMAS), help="Classification schema")
    parser.add_argument("--output-dir", default=Path("output"), type=Path, help="Directory for report files")
    parser.add_argument("--threshold", type=int, help="Article count threshold separating top and potential pools")
    parser.add_argument("--top-n", type=int, help="Groups per tier")
    parser.add_argument("--discover-size", type=int, help="Rows kept in the Discover subset")
    parser.add_argument("--partner-name", help="Also write a partner email draft addressed to this name")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser


def main(argv: Sequence[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    settings = load_settings().with_overrides(
        article_count_threshold=args.threshold,
        top_n=args.top_n,
        discover_size=args.discover_size,
    )
    run_reporting_pipeline(
        rows_path=args.input,
        classifications_path=args.classifications,
        output_dir=args.output_dir,
        schema=schema_by_name(args.schema),
        settings=settings,
        partner_name=args.partner_name,
    )


if __name__ == "__main__":
    main()
