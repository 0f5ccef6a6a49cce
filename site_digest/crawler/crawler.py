from __future__ import annotations

import asyncio
import time
from collections import Counter
from typing import List, Optional, Protocol

from aiohttp import ClientSession, ClientTimeout

from site_digest.config import CrawlConfig
from site_digest.crawler.fetcher import Fetcher, FetchOutcome, FetchResult
from site_digest.crawler.frontier import Frontier, VisitedSet
from site_digest.crawler.models import Page
from site_digest.crawler.retry import RetryPolicy
from site_digest.logger import logger
from site_digest.utils import extract_domain, is_same_domain, normalize_url

__all__ = ("PageFetcher", "AsyncCrawler")


class PageFetcher(Protocol):
    async def fetch(self, url: str) -> FetchResult: ...


class AsyncCrawler:
    """
    Batch-wise breadth-first crawler confined to the start URL's domain.

    Each round takes up to ``concurrency`` URLs from the frontier and fetches
    them concurrently, then waits for the whole batch. ``max_pages`` is
    checked only between batches, so the last batch may push the total up
    to ``max_pages + concurrency - 1``.
    """

    def __init__(
        self,
        config: CrawlConfig,
        *,
        fetcher: Optional[PageFetcher] = None,
        retry_policy: Optional[RetryPolicy] = None,
    ) -> None:
        self.config = config
        self.start_url = normalize_url(str(config.start_url))
        self.domain = extract_domain(self.start_url)
        self.frontier = Frontier([self.start_url])
        self.visited = VisitedSet()
        self.pages: List[Page] = []
        self.outcomes: Counter[FetchOutcome] = Counter()
        self.session: Optional[ClientSession] = None
        self._fetcher = fetcher
        self._retry_policy = retry_policy

    async def __aenter__(self) -> AsyncCrawler:
        if self._fetcher is None:
            self.session = ClientSession(
                timeout=ClientTimeout(total=self.config.timeout),
                headers={"User-Agent": self.config.user_agent},
                raise_for_status=False,
            )
            self._fetcher = Fetcher(self.session, self.config, self._retry_policy)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self.session and not self.session.closed:
            await self.session.close()

    async def crawl(self) -> List[Page]:
        """Crawl until the frontier drains or ``max_pages`` is reached."""
        if self._fetcher is None:
            raise RuntimeError("Crawler must be used as an async context manager")
        logger.info("Crawl started: %s", self.start_url)
        start = time.monotonic()
        batches = 0
        while self.frontier and len(self.pages) < self.config.max_pages:
            batch = self.frontier.take(self.config.concurrency)
            batches += 1
            results = await asyncio.gather(*(self._visit(url) for url in batch))
            for result in results:
                if result is None or not result.ok:
                    continue
                self._enqueue(result.links)
        duration = time.monotonic() - start
        logger.info(
            "Crawl finished: %d pages in %d batches, %.2f s (%.2f pages/s)",
            len(self.pages), batches, duration, len(self.pages) / duration if duration else 0,
        )
        if self.outcomes[FetchOutcome.BLOCKED] or self.outcomes[FetchOutcome.ABANDONED]:
            logger.info(
                "Skipped %d, blocked %d, abandoned %d URL(s)",
                self.outcomes[FetchOutcome.SKIPPED],
                self.outcomes[FetchOutcome.BLOCKED],
                self.outcomes[FetchOutcome.ABANDONED],
            )
        return list(self.pages)

    async def _visit(self, url: str) -> Optional[FetchResult]:
        # claim before the first await: check-and-insert is one step
        if not self.visited.claim(url):
            return None
        assert self._fetcher is not None
        try:
            result = await self._fetcher.fetch(url)
        except Exception as exc:
            logger.exception("Unexpected error while fetching %s", url)
            result = FetchResult(url, FetchOutcome.ABANDONED, reason=str(exc))
        self.outcomes[result.outcome] += 1
        if result.ok and result.page is not None:
            self.pages.append(result.page)
        return result

    def _enqueue(self, links: List[str]) -> None:
        for link in links:
            if link in self.visited or not is_same_domain(link, self.domain):
                continue
            self.frontier.push(link)

    # alias for compatibility
    run = crawl
