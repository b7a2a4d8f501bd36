from __future__ import annotations

import asyncio
import logging
from typing import List

from .base import CrawlEngine, CrawlTask

logger = logging.getLogger(__name__)


class WorkerPoolCrawlEngine(CrawlEngine):
    """
    Bounded crawler.
    - New links are enqueued instead of spawned.
    - A fixed pool of ``max_concurrency`` workers drains the queue, so at most
      that many fetches are in flight at once.
    - The queue itself is unbounded: workers are also the producers, and a
      full queue would block every worker on put().
    """

    async def run(self, seeds: List[CrawlTask]) -> None:
        q: asyncio.Queue[CrawlTask] = asyncio.Queue()
        for seed in seeds:
            logger.info("Starting crawl for %s", seed.domain)
            q.put_nowait(seed)

        async def worker() -> None:
            while True:
                task = await q.get()
                try:
                    for child in await self.visit(task):
                        q.put_nowait(child)
                finally:
                    q.task_done()

        workers = [asyncio.create_task(worker()) for _ in range(self.config.max_concurrency)]
        try:
            # join() returns once every enqueued task, seeds and descendants, is done.
            await q.join()
        finally:
            for w in workers:
                w.cancel()
            await asyncio.gather(*workers, return_exceptions=True)
