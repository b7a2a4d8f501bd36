from __future__ import annotations

import csv
import json
from pathlib import Path

from product_crawler.export.csv_exporter import CSVExporter
from product_crawler.export.json_exporter import JSONExporter

DATA = {
    "shop.com": ["https://shop.com/product/1", "https://shop.com/p/2"],
    "b.com": [],
}


def test_json_is_two_space_indented(tmp_path: Path) -> None:
    out = tmp_path / "deep" / "product_urls.json"
    JSONExporter().export(DATA, str(out))

    text = out.read_text(encoding="utf-8")
    assert json.loads(text) == DATA
    assert text == json.dumps(DATA, indent=2)
    assert '\n  "shop.com": [\n    "https://shop.com/product/1"' in text


def test_json_truncates_existing_file(tmp_path: Path) -> None:
    out = tmp_path / "product_urls.json"
    out.write_text("x" * 10_000)
    JSONExporter().export({"a.com": []}, str(out))
    assert json.loads(out.read_text()) == {"a.com": []}


def test_csv_rows(tmp_path: Path) -> None:
    out = tmp_path / "products.csv"
    CSVExporter().export(DATA, str(out))

    with open(out, newline="", encoding="utf-8") as f:
        rows = list(csv.reader(f))
    assert rows == [
        ["domain", "url"],
        ["shop.com", "https://shop.com/product/1"],
        ["shop.com", "https://shop.com/p/2"],
    ]
