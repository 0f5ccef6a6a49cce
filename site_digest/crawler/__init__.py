"""Crawling core: fetcher, frontier, retry policy and the batch coordinator."""
from site_digest.crawler.crawler import AsyncCrawler
from site_digest.crawler.fetcher import Fetcher, FetchOutcome, FetchResult, TransientFetchError
from site_digest.crawler.models import Heading, Page
from site_digest.crawler.retry import RetryExhausted, RetryPolicy

__all__ = [
    "AsyncCrawler",
    "Fetcher",
    "FetchOutcome",
    "FetchResult",
    "Heading",
    "Page",
    "RetryExhausted",
    "RetryPolicy",
    "TransientFetchError",
]
