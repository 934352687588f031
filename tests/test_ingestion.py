from __future__ import annotations

import json

import openpyxl
import polars as pl
import pytest

from content_tiering.domain.models import CATEGORY_SCHEMA, THEME_ENTITY_SCHEMA, Classification, MetricRow
from content_tiering.ingestion import (
    domain_from_url,
    read_classifications,
    read_metric_rows,
    write_output_excel,
)


def _write_csv(path, text: str):
    path.write_text(text, encoding="utf-8")
    return path


def test_reads_rows_with_loose_headers(tmp_path):
    csv_path = _write_csv(
        tmp_path / "rows.csv",
        " url ,CLICKS,Impressions,Title,Author Name\n"
        "https://a.test/1, 10 ,\"1,200\",First post,Ana\n"
        "https://a.test/2,,50,,\n",
    )

    rows = read_metric_rows(csv_path)

    assert rows == [
        MetricRow(url="https://a.test/1", clicks=10.0, impressions=1200.0, title="First post", author_name="Ana"),
        MetricRow(url="https://a.test/2", clicks=0.0, impressions=50.0),
    ]


def test_invalid_rows_are_dropped(tmp_path):
    csv_path = _write_csv(
        tmp_path / "rows.csv",
        "URL,Clicks,Impressions\n"
        "https://a.test/ok,5,10\n"
        ",5,10\n"
        "https://a.test/bad,abc,10\n"
        "https://a.test/neg,-1,10\n",
    )

    rows = read_metric_rows(csv_path, parse_error_threshold=0.5)

    assert [row.url for row in rows] == ["https://a.test/ok"]


def test_parse_error_ratio_above_threshold_raises(tmp_path):
    csv_path = _write_csv(tmp_path / "rows.csv", "URL,Clicks,Impressions\nhttps://a.test/1,abc,10\nhttps://a.test/2,1,1\n")

    with pytest.raises(ValueError, match="metric parse error ratio"):
        read_metric_rows(csv_path)


def test_missing_required_columns(tmp_path):
    csv_path = _write_csv(tmp_path / "rows.csv", "URL,Clicks\nhttps://a.test/1,3\n")

    with pytest.raises(ValueError, match="CSV must contain 'URL', 'Clicks', and 'Impressions' columns."):
        read_metric_rows(csv_path)


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        read_metric_rows(tmp_path / "nope.csv")


def test_read_classifications_last_wins(tmp_path):
    json_path = tmp_path / "labels.json"
    json_path.write_text(
        json.dumps(
            [
                {"url": "https://a.test/1", "theme": "Old", "entity": "E"},
                {"url": "https://a.test/1", "theme": "New", "entity": "E", "subEntity": "S"},
                {"url": "", "theme": "Skipped"},
                "not a record",
            ]
        ),
        encoding="utf-8",
    )

    result = read_classifications(json_path, THEME_ENTITY_SCHEMA)

    assert result == {"https://a.test/1": Classification(theme="New", entity="E", sub_entity="S")}


def test_read_classifications_wrapped_payload(tmp_path):
    json_path = tmp_path / "labels.json"
    json_path.write_text(
        json.dumps({"classifications": [{"url": "u", "category": "Tech", "subcategory": "AI"}]}),
        encoding="utf-8",
    )

    assert read_classifications(json_path, CATEGORY_SCHEMA) == {"u": Classification(theme="Tech", entity="AI")}


def test_read_classifications_rejects_non_list(tmp_path):
    json_path = tmp_path / "labels.json"
    json_path.write_text(json.dumps("text"), encoding="utf-8")

    with pytest.raises(ValueError):
        read_classifications(json_path, THEME_ENTITY_SCHEMA)


@pytest.mark.parametrize(
    "url, expected",
    [
        ("https://www.example.com/a/b", "example.com"),
        ("example.org/path", "example.org"),
        ("http://News.Example.co.uk", "news.example.co.uk"),
        ("", None),
        ("not a url", None),
    ],
)
def test_domain_from_url(url, expected):
    assert domain_from_url(url) == expected


def test_write_output_excel(tmp_path):
    path = tmp_path / "out" / "report.xlsx"
    sheets = {
        "Theme Summary": pl.DataFrame({"Theme": ["A", "B"], "Total Clicks": [1.0, 2.0]}),
        "Detailed Report": pl.DataFrame({"URL": ["u"], "Clicks": [1.0]}),
    }

    write_output_excel(path, sheets)

    workbook = openpyxl.load_workbook(path)
    assert workbook.sheetnames == ["Theme Summary", "Detailed Report"]
    assert workbook["Theme Summary"]["A1"].value == "Theme"
    assert workbook["Theme Summary"]["A3"].value == "B"
