from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Protocol

from ..classifier import PatternSet
from ..config import CrawlConfig
from ..state import CrawlFailure, DedupStore, FailureLog, ProductIndex
from ..utils.http import FetchError, Fetcher, create_session
from ..utils.parsing import MarkupError, is_same_site, iter_links, parse_document, seed_url

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CrawlTask:
    url: str
    domain: str
    depth: int

    def child(self, url: str) -> "CrawlTask":
        return CrawlTask(url=url, domain=self.domain, depth=self.depth + 1)


@dataclass
class CrawlReport:
    discovered: Dict[str, List[str]] = field(default_factory=dict)  # domain -> product URLs
    visited_count: int = 0
    failures: List[CrawlFailure] = field(default_factory=list)

    @property
    def product_count(self) -> int:
        return sum(len(v) for v in self.discovered.values())


class PageFetcher(Protocol):
    async def fetch_with_retry(self, url: str, max_retries: int = 3) -> str:
        ...


class CrawlEngine(ABC):
    """
    Abstract engine. Owns the per-task state machine and the crawl lifecycle;
    subclasses only decide how child tasks get scheduled.
    """

    def __init__(self, config: CrawlConfig, fetcher: Optional[PageFetcher] = None) -> None:
        self.config = config
        self.patterns = PatternSet(config.product_patterns)
        logger.debug("Loaded %s product patterns", len(self.patterns))
        self.fetcher = fetcher
        self._reset()

    def _reset(self) -> None:
        self.products = ProductIndex()
        self.failures = FailureLog()
        self._global_dedup = DedupStore()
        self._domain_dedup: Dict[str, DedupStore] = {}

    def dedup_for(self, domain: str) -> DedupStore:
        if self.config.dedup_scope == "global":
            return self._global_dedup
        return self._domain_dedup[domain]

    def visited_count(self) -> int:
        if self.config.dedup_scope == "global":
            return len(self._global_dedup)
        return sum(len(store) for store in self._domain_dedup.values())

    # ---- Orchestration ----

    async def crawl(self) -> CrawlReport:
        """
        Start one depth-0 task per seed domain, run every task tree to
        exhaustion, and report what was found.
        """
        self._reset()
        seeds = [CrawlTask(url=seed_url(d), domain=d, depth=0) for d in self.config.domains]
        # Stores are created up front so tasks never race to create them.
        for seed in seeds:
            self._domain_dedup.setdefault(seed.domain, DedupStore())

        if self.fetcher is not None:
            await self.run(seeds)
        else:
            session = create_session()
            try:
                self.fetcher = Fetcher.from_config(session, self.config)
                await self.run(seeds)
            finally:
                self.fetcher = None
                await session.close()

        report = CrawlReport(
            discovered=self.products.snapshot(),
            visited_count=self.visited_count(),
            failures=self.failures.snapshot(),
        )
        logger.info(
            "Crawl finished: %s pages claimed, %s products, %s failures",
            report.visited_count, self.products.count(), len(report.failures),
        )
        return report

    @abstractmethod
    async def run(self, seeds: List[CrawlTask]) -> None:  # pragma: no cover - interface
        """Process the seeds and every task they spawn; return when all are terminal."""
        ...

    # ---- Per-task state machine ----

    async def visit(self, task: CrawlTask) -> List[CrawlTask]:
        """
        Run one task and return the child tasks it spawns. Never raises:
        unexpected errors are logged and recorded in the failure log.
        """
        try:
            return await self._visit(task)
        except Exception as exc:
            logger.exception("Unexpected error crawling %s", task.url)
            self._record(task, "internal", exc)
            return []

    async def _visit(self, task: CrawlTask) -> List[CrawlTask]:
        cfg = self.config
        if task.depth > cfg.max_depth:
            return []
        if not self.dedup_for(task.domain).try_claim(task.url):
            return []

        if self.fetcher is None:
            raise RuntimeError("no fetcher: visit() called outside crawl()")
        try:
            body = await self.fetcher.fetch_with_retry(task.url, cfg.retries)
        except FetchError as exc:
            logger.warning("Failed to fetch URL %s: %s", task.url, exc)
            self._record(task, "fetch", exc)
            return []

        try:
            document = parse_document(body)
        except MarkupError as exc:
            logger.warning("Failed to parse HTML for URL %s: %s", task.url, exc)
            self._record(task, "parse", exc)
            return []
        logger.info("Crawling items in: %s", task.url)

        children: List[CrawlTask] = []
        for link in iter_links(document, task.url):
            if self.patterns.is_product_url(link):
                self.products.append_product(task.domain, link)
            elif is_same_site(link, task.domain, cfg.same_site):
                children.append(task.child(link))
        return children

    def _record(self, task: CrawlTask, stage: str, exc: BaseException) -> None:
        self.failures.record(
            CrawlFailure(url=task.url, domain=task.domain, depth=task.depth, stage=stage, error=str(exc))
        )
