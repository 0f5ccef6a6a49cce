# File: site_digest/engine.py
"""site_digest.engine: синхронный фасад: обход сайта и суммаризация одним вызовом."""

from __future__ import annotations

import asyncio
import time
from typing import Awaitable, Callable, List, Optional

from site_digest.config import CrawlConfig
from site_digest.crawler.models import Page
from site_digest.digest import DigestReport
from site_digest.logger import logger
from site_digest.scanner import crawl_site

__all__ = ["Engine"]


class Engine:
    """Фасад для CLI и тестов: обход, затем (опционально) суммаризация."""

    def __init__(
        self,
        config: CrawlConfig,
        summarize: Optional[Callable[[List[Page]], Awaitable[str]]] = None,
        crawl: Callable[[CrawlConfig], Awaitable[List[Page]]] = crawl_site,
    ) -> None:
        self.config = config
        self._summarize = summarize
        self._crawl = crawl

    async def run_async(self) -> DigestReport:
        t0 = time.monotonic()
        pages = await self._crawl(self.config)
        logger.info("Crawling took %.2f s", time.monotonic() - t0)
        report = DigestReport(start_url=str(self.config.start_url), pages=pages)
        if self._summarize is None or not pages:
            return report

        t1 = time.monotonic()
        report.summary = await self._summarize(pages)
        logger.info("Summary took %.2f s", time.monotonic() - t1)
        return report

    def run(self) -> DigestReport:
        """Запускает обход в новом event loop и возвращает DigestReport."""
        logger.info("Starting crawl…")
        try:
            return asyncio.run(self.run_async())
        except Exception as exc:
            logger.error("Digest failed: %s", exc)
            raise
