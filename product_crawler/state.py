from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Dict, List, Set


class DedupStore:
    """
    Set of URLs already committed to a fetch during one crawl run.
    try_claim() tests and records membership under a single lock, so at most
    one caller ever wins a given URL. Entries are never evicted.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._claimed: Set[str] = set()

    def try_claim(self, url: str) -> bool:
        with self._lock:
            if url in self._claimed:
                return False
            self._claimed.add(url)
            return True

    def __len__(self) -> int:
        with self._lock:
            return len(self._claimed)


class ProductIndex:
    """
    Append-only domain -> product URLs mapping shared by all tasks of a run.
    Lists keep arrival order and duplicates.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._products: Dict[str, List[str]] = {}

    def append_product(self, domain: str, url: str) -> None:
        with self._lock:
            self._products.setdefault(domain, []).append(url)

    def snapshot(self) -> Dict[str, List[str]]:
        with self._lock:
            return {domain: list(urls) for domain, urls in self._products.items()}

    def count(self) -> int:
        with self._lock:
            return sum(len(urls) for urls in self._products.values())


@dataclass(frozen=True)
class CrawlFailure:
    url: str
    domain: str
    depth: int
    stage: str  # "fetch", "parse" or "internal"
    error: str


class FailureLog:
    """Collects per-task failures so they never have to be raised to a caller."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._failures: List[CrawlFailure] = []

    def record(self, failure: CrawlFailure) -> None:
        with self._lock:
            self._failures.append(failure)

    def snapshot(self) -> List[CrawlFailure]:
        with self._lock:
            return list(self._failures)

    def __len__(self) -> int:
        with self._lock:
            return len(self._failures)
