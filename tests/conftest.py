# File: tests/conftest.py
from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Callable, Dict, List

import pytest
from aiohttp import web

from site_digest.config import CrawlConfig, CrawlOptions, RetryConfig
from site_digest.crawler.fetcher import FetchOutcome, FetchResult
from site_digest.crawler.models import Page


async def serve_app(app: web.Application, port: int) -> AsyncIterator[str]:
    """Start *app* on *port*, yield base URL, ensure cleanup."""
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, "localhost", port)
    await site.start()
    try:
        yield f"http://localhost:{port}"
    finally:
        await runner.cleanup()


def html_page(title: str = "", body: str = "") -> str:
    return f"<html><head><title>{title}</title></head><body>{body}</body></html>"


@pytest.fixture()
def fast_options() -> CrawlOptions:
    """
    Crawl options for tests: no politeness delay, tiny retry budget.
    """
    return CrawlOptions(
        timeout=5.0,
        request_delay=0.0,
        user_agent="TestAgent/1.0",
        retry=RetryConfig(initial_interval=0.01, max_interval=0.02, max_elapsed_time=0.2, max_attempts=3),
    )


@pytest.fixture()
def make_config(fast_options) -> Callable[..., CrawlConfig]:
    def _make(url: str, **overrides) -> CrawlConfig:
        return fast_options.model_copy(update=overrides).for_url(url)

    return _make


class FakeFetcher:
    """
    In-memory fetcher: *graph* maps URL -> outbound links; URLs missing
    from the graph are reported as skipped.
    """

    def __init__(self, graph: Dict[str, List[str]]) -> None:
        self.graph = graph
        self.calls: List[str] = []

    async def fetch(self, url: str) -> FetchResult:
        self.calls.append(url)
        if url not in self.graph:
            return FetchResult(url, FetchOutcome.SKIPPED, reason="HTTP 404")
        return FetchResult(url, FetchOutcome.OK, page=Page(url=url, title=url), links=list(self.graph[url]))


@pytest.fixture()
def sample_page() -> Page:
    return Page(
        url="http://example.com/",
        title="Example",
        meta_description="An example site",
        paragraphs=["First paragraph.", "Second paragraph."],
        extract="An example site",
    )
