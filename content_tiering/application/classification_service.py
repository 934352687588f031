"""Application service that drives an external classifier in URL batches."""

from __future__ import annotations

import logging
from typing import Any, Callable, Mapping, Sequence

from content_tiering.config import EngineSettings, load_settings
from content_tiering.domain.models import Classification, MetricRow, TaxonomySchema

logger = logging.getLogger(__name__)

ClassifyBatch = Callable[[list[dict[str, Any]]], Sequence[Mapping[str, Any]]]
ProgressCallback = Callable[[int, int], None]


class ClassificationError(RuntimeError):
    """A classifier batch failed; no classifications from the attempt are kept."""

    def __init__(self, batch_number: int, total_batches: int) -> None:
        super().__init__(f"Failed to categorize URLs on batch {batch_number} of {total_batches}.")
        self.batch_number = batch_number
        self.total_batches = total_batches


def _batch_payload(rows: Sequence[MetricRow]) -> list[dict[str, Any]]:
    payload: list[dict[str, Any]] = []
    for row in rows:
        item: dict[str, Any] = {"url": row.url}
        if row.title:
            item["title"] = row.title
        payload.append(item)
    return payload


def collect_classifications(
    rows: Sequence[MetricRow],
    classify_batch: ClassifyBatch,
    schema: TaxonomySchema,
    batch_size: int | None = None,
    on_progress: ProgressCallback | None = None,
    settings: EngineSettings | None = None,
) -> dict[str, Classification]:
    """Classify every row's URL and return a URL -> Classification mapping.

    ``classify_batch`` receives ``[{"url": ..., "title": ...}, ...]`` and returns
    one record per URL with the schema's label fields. Later records for the
    same URL overwrite earlier ones. Any batch failure aborts the whole run.
    Without an explicit ``batch_size`` the settings' ``classifier_batch_size``
    is used.
    """
    if batch_size is None:
        batch_size = (settings or load_settings()).classifier_batch_size
    if batch_size < 1:
        raise ValueError(f"batch_size must be >= 1, got {batch_size}")

    total_batches = (len(rows) + batch_size - 1) // batch_size
    classifications: dict[str, Classification] = {}
    for start in range(0, len(rows), batch_size):
        batch_number = start // batch_size + 1
        if on_progress is not None:
            on_progress(batch_number, total_batches)
        batch = _batch_payload(rows[start : start + batch_size])
        try:
            records = classify_batch(batch)
        except Exception as exc:
            logger.error("Classifier batch %d of %d failed: %s", batch_number, total_batches, exc)
            raise ClassificationError(batch_number, total_batches) from exc

        for record in records:
            url = str(record.get("url", "") or "").strip()
            if not url:
                continue
            classifications[url] = Classification.from_record(record, schema)
        logger.debug("Classifier batch %d of %d returned %d records", batch_number, total_batches, len(records))
    return classifications
