# === FILE: site_digest/scanner.py ===
"""
Модуль-обёртка для функции запуска обхода.
"""
from typing import List

from site_digest.config import CrawlConfig
from site_digest.crawler.crawler import AsyncCrawler
from site_digest.crawler.models import Page


async def crawl_site(cfg: CrawlConfig) -> List[Page]:
    """
    Запускает асинхронный краулер в контексте и возвращает список Page.

    Parameters
    ----------
    cfg : CrawlConfig
        Конфигурация обхода.

    Returns
    -------
    List[Page]
        Собранные страницы в порядке завершения загрузок.
    """
    async with AsyncCrawler(cfg) as crawler:
        pages = await crawler.crawl()
    return pages

__all__ = ["crawl_site"]
