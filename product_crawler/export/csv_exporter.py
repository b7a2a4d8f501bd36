from __future__ import annotations

import csv
from typing import Dict, List
from pathlib import Path


class CSVExporter:
    """
    One ``domain,url`` row per discovered product URL.
    """

    _headers = ["domain", "url"]

    def export(self, data: Dict[str, List[str]], path: str) -> None:
        Path(path).parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8", newline="") as f:
            w = csv.writer(f)
            w.writerow(self._headers)
            for domain, urls in data.items():
                for url in urls:
                    w.writerow([domain, url])
