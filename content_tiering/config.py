"""Engine settings read from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Any, Mapping

from content_tiering.discover import DEFAULT_SUBSET_SIZE
from content_tiering.tiering import DEFAULT_ARTICLE_COUNT_THRESHOLD, DEFAULT_TOP_N

DEFAULT_CLASSIFIER_BATCH_SIZE = 200
DEFAULT_PARSE_ERROR_THRESHOLD = 0.01


def _int_setting(env: Mapping[str, str], name: str, default: int, minimum: int) -> int:
    raw = env.get(name, str(default))
    try:
        value = int(raw)
    except ValueError as exc:
        raise ValueError(f"Invalid {name}: {raw}") from exc
    if value < minimum:
        raise ValueError(f"{name} must be >= {minimum}, got {value}")
    return value


def _float_setting(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name, str(default))
    try:
        value = float(raw)
    except ValueError as exc:
        raise ValueError(f"Invalid {name}: {raw}") from exc
    if value < 0 or value > 1:
        raise ValueError(f"{name} must be in [0, 1], got {value}")
    return value


@dataclass(frozen=True)
class EngineSettings:
    article_count_threshold: int = DEFAULT_ARTICLE_COUNT_THRESHOLD
    top_n: int = DEFAULT_TOP_N
    discover_size: int = DEFAULT_SUBSET_SIZE
    classifier_batch_size: int = DEFAULT_CLASSIFIER_BATCH_SIZE
    parse_error_threshold: float = DEFAULT_PARSE_ERROR_THRESHOLD

    def with_overrides(self, **overrides: Any) -> "EngineSettings":
        values = {key: value for key, value in overrides.items() if value is not None}
        return replace(self, **values)


def load_settings(env: Mapping[str, str] | None = None) -> EngineSettings:
    source = os.environ if env is None else env
    return EngineSettings(
        article_count_threshold=_int_setting(
            source, "CONTENT_ARTICLE_COUNT_THRESHOLD", DEFAULT_ARTICLE_COUNT_THRESHOLD, minimum=0
        ),
        top_n=_int_setting(source, "CONTENT_TOP_N", DEFAULT_TOP_N, minimum=1),
        discover_size=_int_setting(source, "CONTENT_DISCOVER_SIZE", DEFAULT_SUBSET_SIZE, minimum=1),
        classifier_batch_size=_int_setting(
            source, "CONTENT_CLASSIFIER_BATCH_SIZE", DEFAULT_CLASSIFIER_BATCH_SIZE, minimum=1
        ),
        parse_error_threshold=_float_setting(
            source, "CONTENT_PARSE_ERROR_THRESHOLD", DEFAULT_PARSE_ERROR_THRESHOLD
        ),
    )
