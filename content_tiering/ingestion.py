"""CSV/JSON ingestion and Excel output helpers with Polars-first and openpyxl fallback."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Sequence
from urllib.parse import urlsplit

import polars as pl
import xlsxwriter

from content_tiering.config import DEFAULT_PARSE_ERROR_THRESHOLD
from content_tiering.domain.models import Classification, MetricRow, TaxonomySchema

logger = logging.getLogger(__name__)

REQUIRED_HEADERS: dict[str, tuple[str, ...]] = {
    "url": ("url",),
    "clicks": ("clicks",),
    "impressions": ("impressions",),
}
OPTIONAL_HEADERS: dict[str, tuple[str, ...]] = {
    "title": ("title",),
    "author": ("author", "author name", "authorname"),
}
METRICS: list[str] = ["clicks", "impressions"]
MISSING_COLUMNS_MESSAGE = "CSV must contain 'URL', 'Clicks', and 'Impressions' columns."


def _import_openpyxl() -> Any:
    try:
        from openpyxl import Workbook
    except Exception as exc:  # pragma: no cover
        raise RuntimeError("openpyxl is required for Excel fallback I/O.") from exc
    return Workbook


def domain_from_url(url: str) -> str | None:
    """Hostname of ``url`` without a leading ``www.``; ``None`` when unparseable."""
    text = str(url or "").strip()
    if not text:
        return None
    full_url = text if text.startswith(("http://", "https://")) else f"https://{text}"
    try:
        hostname = urlsplit(full_url).hostname
    except ValueError:
        logger.warning("Could not parse domain from URL: %s", url)
        return None
    if not hostname or any(char.isspace() for char in hostname):
        logger.warning("Could not parse domain from URL: %s", url)
        return None
    return hostname[4:] if hostname.startswith("www.") else hostname


def _resolve_headers(columns: Sequence[str]) -> dict[str, str]:
    lookup = {str(column).strip().lower(): column for column in columns}
    resolved: dict[str, str] = {}
    for target, aliases in {**REQUIRED_HEADERS, **OPTIONAL_HEADERS}.items():
        for alias in aliases:
            if alias in lookup:
                resolved[target] = lookup[alias]
                break
    if any(target not in resolved for target in REQUIRED_HEADERS):
        raise ValueError(MISSING_COLUMNS_MESSAGE)
    return resolved


def _metric_text_expr(column_name: str) -> pl.Expr:
    return pl.col(column_name).cast(pl.Utf8, strict=False).str.strip_chars()


def _metric_parsed_expr(column_name: str) -> pl.Expr:
    return _metric_text_expr(column_name).str.replace_all(",", "").cast(pl.Float64, strict=False)


def _metric_parse_error_expr(column_name: str) -> pl.Expr:
    text_expr = _metric_text_expr(column_name)
    parsed_expr = _metric_parsed_expr(column_name)
    return (
        (text_expr.is_not_null() & (text_expr != "") & parsed_expr.is_null())
        .cast(pl.UInt32)
        .alias(f"__parse_error_{column_name}")
    )


def _metric_expr(column_name: str) -> pl.Expr:
    text_expr = _metric_text_expr(column_name)
    return (
        pl.when(text_expr.is_null() | (text_expr == ""))
        .then(pl.lit(0.0))
        .otherwise(_metric_parsed_expr(column_name))
        .alias(column_name)
    )


def _validate_metric_parse_errors(
    df: pl.DataFrame,
    metric_columns: Sequence[str],
    context: str,
    threshold: float,
) -> None:
    if df.is_empty():
        return
    checks_df = df.select([_metric_parse_error_expr(column) for column in metric_columns])
    row_count = int(df.height)
    failures: list[str] = []
    for column in metric_columns:
        check_col = f"__parse_error_{column}"
        parse_error_count = int(checks_df.select(pl.col(check_col).sum()).item() or 0)
        parse_error_ratio = parse_error_count / row_count if row_count > 0 else 0.0
        if parse_error_ratio > threshold:
            failures.append(f"{column}={parse_error_ratio:.2%} ({parse_error_count}/{row_count})")

    if failures:
        joined = ", ".join(failures)
        raise ValueError(
            f"Data quality check failed in {context}: metric parse error ratio exceeds {threshold:.2%} ({joined})"
        )


def to_metric_frame(
    raw_df: pl.DataFrame,
    parse_error_threshold: float = DEFAULT_PARSE_ERROR_THRESHOLD,
    context: str = "input",
) -> pl.DataFrame:
    """Normalize a raw string frame into url/title/author/clicks/impressions rows.

    Rows with an empty URL, an unparseable metric or a negative metric are
    dropped; empty metric cells count as zero.
    """
    headers = _resolve_headers(raw_df.columns)
    renamed = raw_df.select([pl.col(source).alias(target) for target, source in headers.items()])
    _validate_metric_parse_errors(renamed, METRICS, context=context, threshold=parse_error_threshold)

    optional = [
        pl.col(name).cast(pl.Utf8).str.strip_chars() if name in renamed.columns else pl.lit(None, dtype=pl.Utf8)
        for name in OPTIONAL_HEADERS
    ]
    frame = renamed.select(
        pl.col("url").cast(pl.Utf8).str.strip_chars().alias("url"),
        *[expr.alias(name) for expr, name in zip(optional, OPTIONAL_HEADERS)],
        *[_metric_expr(column) for column in METRICS],
    ).with_columns(
        [pl.when(pl.col(name) == "").then(None).otherwise(pl.col(name)).alias(name) for name in OPTIONAL_HEADERS]
    )
    valid = (
        pl.col("url").is_not_null()
        & (pl.col("url") != "")
        & pl.col("clicks").is_not_null()
        & pl.col("impressions").is_not_null()
        & (pl.col("clicks") >= 0)
        & (pl.col("impressions") >= 0)
    )
    cleaned = frame.filter(valid)
    dropped = frame.height - cleaned.height
    if dropped:
        logger.warning("Dropped %d of %d rows with a missing URL or invalid metrics in %s", dropped, frame.height, context)
    return cleaned


def read_metric_frame(
    path: str | Path,
    parse_error_threshold: float = DEFAULT_PARSE_ERROR_THRESHOLD,
) -> pl.DataFrame:
    csv_path = Path(path)
    if not csv_path.exists():
        raise FileNotFoundError(f"Input CSV file not found: {csv_path}")
    raw_df = pl.read_csv(csv_path, infer_schema_length=0)
    return to_metric_frame(raw_df, parse_error_threshold=parse_error_threshold, context=csv_path.name)


def read_metric_rows(
    path: str | Path,
    parse_error_threshold: float = DEFAULT_PARSE_ERROR_THRESHOLD,
) -> list[MetricRow]:
    """Read a URL/Clicks/Impressions CSV into validated metric rows."""
    frame = read_metric_frame(path, parse_error_threshold=parse_error_threshold)
    return [MetricRow.from_row(row) for row in frame.to_dicts()]


def parse_classification_records(
    records: Sequence[Any],
    schema: TaxonomySchema,
) -> dict[str, Classification]:
    classifications: dict[str, Classification] = {}
    for record in records:
        if not isinstance(record, dict):
            continue
        url = str(record.get("url", "") or "").strip()
        if not url:
            continue
        classifications[url] = Classification.from_record(record, schema)
    return classifications


def read_classifications(path: str | Path, schema: TaxonomySchema) -> dict[str, Classification]:
    """Read a JSON list of classifier records into a URL -> Classification mapping."""
    json_path = Path(path)
    if not json_path.exists():
        raise FileNotFoundError(f"Classification file not found: {json_path}")
    payload = json.loads(json_path.read_text(encoding="utf-8"))
    if isinstance(payload, dict):
        payload = payload.get("classifications", [])
    if not isinstance(payload, list):
        raise ValueError(f"Expected a JSON list of classification records in {json_path}")
    return parse_classification_records(payload, schema)


def _excel_cell_value(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, (int, bool, str)):
        return value
    if isinstance(value, float):
        if value != value or value in (float("inf"), float("-inf")):
            return None
        return value
    if isinstance(value, (list, dict)):
        return json.dumps(value, ensure_ascii=False)
    return value


def _write_with_polars(path: Path, sheets: Dict[str, pl.DataFrame]) -> bool:
    if not sheets:
        return False

    try:
        with xlsxwriter.Workbook(str(path)) as workbook:
            for sheet_name, frame in sheets.items():
                frame.write_excel(workbook=workbook, worksheet=str(sheet_name)[:31], autofit=True)
        return True
    except Exception:
        logger.debug("Polars Excel writer failed for %s; falling back to openpyxl", path, exc_info=True)
        return False


def _write_with_openpyxl(path: Path, sheets: Dict[str, pl.DataFrame]) -> None:
    Workbook = _import_openpyxl()
    workbook = Workbook()
    default_sheet = workbook.active
    workbook.remove(default_sheet)

    for sheet_name, frame in sheets.items():
        worksheet = workbook.create_sheet(title=str(sheet_name)[:31])
        worksheet.append(frame.columns)
        for row in frame.iter_rows(named=False):
            worksheet.append([_excel_cell_value(value) for value in row])

    path.parent.mkdir(parents=True, exist_ok=True)
    workbook.save(path)


def write_output_excel(path: str | Path, sheets: Dict[str, pl.DataFrame]) -> None:
    """Write output Excel with Polars-first and openpyxl fallback."""
    excel_path = Path(path)
    excel_path.parent.mkdir(parents=True, exist_ok=True)

    if _write_with_polars(excel_path, sheets):
        return
    _write_with_openpyxl(excel_path, sheets)
