from __future__ import annotations

import asyncio
import logging
from typing import List

from .base import CrawlEngine, CrawlTask

logger = logging.getLogger(__name__)


class RecursiveCrawlEngine(CrawlEngine):
    """
    Fan-out crawler: every same-site link becomes its own concurrently running
    coroutine as soon as its parent page has been processed.

    There is no cap on in-flight tasks and no queue. Open connections and
    parsed documents scale with the branching factor of the link graph; use
    WorkerPoolCrawlEngine when that has to be bounded.
    """

    async def run(self, seeds: List[CrawlTask]) -> None:
        for seed in seeds:
            logger.info("Starting crawl for %s", seed.domain)
        await asyncio.gather(*(self._crawl_tree(seed) for seed in seeds))

    async def _crawl_tree(self, task: CrawlTask) -> None:
        children = await self.visit(task)
        if children:
            # visit() never raises, so one subtree cannot cancel its siblings.
            await asyncio.gather(*(self._crawl_tree(child) for child in children))
