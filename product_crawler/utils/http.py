from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Dict, Optional

import aiohttp
from aiohttp import ClientSession, ClientTimeout

if TYPE_CHECKING:  # pragma: no cover
    from ..config import CrawlConfig

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
)


def browser_headers(user_agent: str = DEFAULT_USER_AGENT) -> Dict[str, str]:
    """Fixed header set sent with every request."""
    return {
        "User-Agent": user_agent,
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
        "Accept-Language": "en-US,en;q=0.5",
        "Connection": "keep-alive",
    }


class FetchError(Exception):
    """Raised once every attempt to fetch a URL has failed."""

    def __init__(self, url: str, attempts: int, last_error: Optional[BaseException] = None) -> None:
        self.url = url
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(f"failed to fetch {url} after {attempts} attempts: {last_error!r}")


def create_session() -> ClientSession:
    """
    Create the shared aiohttp ClientSession.
    """
    # Caller closes it. limit=0 leaves concurrency entirely to the engine.
    connector = aiohttp.TCPConnector(limit=0)
    return aiohttp.ClientSession(connector=connector)


class Fetcher:
    """
    GET with browser-like headers, bounded timeouts and fixed-backoff retry.
    Only a final status of exactly 200 counts as success; every failure is
    retried the same way.
    """

    def __init__(
        self,
        session: ClientSession,
        *,
        headers: Optional[Dict[str, str]] = None,
        timeout: Optional[ClientTimeout] = None,
        backoff: float = 2.0,
    ) -> None:
        self.session = session
        self.headers = headers if headers is not None else browser_headers()
        self.timeout = timeout or ClientTimeout(total=30.0, connect=10.0)
        self.backoff = backoff

    @classmethod
    def from_config(cls, session: ClientSession, config: "CrawlConfig") -> "Fetcher":
        return cls(
            session,
            headers=browser_headers(config.user_agent),
            # connect covers TCP setup plus the TLS handshake
            timeout=ClientTimeout(total=config.request_timeout, connect=config.handshake_timeout),
            backoff=config.retry_backoff,
        )

    async def fetch(self, url: str) -> str:
        """Single attempt. Raises aiohttp.ClientError on any non-200 status."""
        async with self.session.get(url, headers=self.headers, timeout=self.timeout) as resp:
            if resp.status != 200:
                raise aiohttp.ClientResponseError(
                    resp.request_info,
                    resp.history,
                    status=resp.status,
                    message=resp.reason or "",
                    headers=resp.headers,
                )
            return await resp.text(errors="replace")

    async def fetch_with_retry(self, url: str, max_retries: int = 3) -> str:
        """
        Try up to ``max_retries`` times, sleeping ``backoff`` seconds between
        attempts. Raises FetchError naming the URL and attempt count.
        """
        last_exc: Optional[BaseException] = None
        for attempt in range(1, max_retries + 1):
            try:
                return await self.fetch(url)
            except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
                last_exc = exc
                logger.debug("Retrying (%s/%s) for URL %s: %r", attempt, max_retries, url, exc)
            if attempt < max_retries:
                await asyncio.sleep(self.backoff)
        raise FetchError(url, max_retries, last_exc)
