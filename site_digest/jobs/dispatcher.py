"""site_digest.jobs.dispatcher: runs crawl + summary in the background and records the outcome."""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, List, Optional, Set

from site_digest.config import CrawlConfig, CrawlOptions
from site_digest.crawler.models import Page
from site_digest.jobs.registry import JobRegistry, JobStatus
from site_digest.logger import logger
from site_digest.scanner import crawl_site

__all__ = ["NO_PAGES_ERROR", "JobDispatcher"]

CrawlFn = Callable[[CrawlConfig], Awaitable[List[Page]]]
SummarizeFn = Callable[[List[Page]], Awaitable[str]]

NO_PAGES_ERROR = "no pages collected"


class JobDispatcher:
    """
    Accepts crawl requests and answers polls without waiting on any I/O.

    ``submit`` must be called from inside the running event loop; it only
    registers the job and schedules the background task.
    """

    def __init__(
        self,
        registry: JobRegistry,
        summarize: SummarizeFn,
        options: Optional[CrawlOptions] = None,
        crawl: CrawlFn = crawl_site,
    ) -> None:
        self.registry = registry
        self.options = options or CrawlOptions()
        self._crawl = crawl
        self._summarize = summarize
        self._tasks: Set[asyncio.Task] = set()

    def submit(self, url: str) -> str:
        """Register a pending job for *url* and start it; returns the job id.

        Raises ``ValueError`` (pydantic ``ValidationError``) for an invalid URL.
        """
        config = self.options.for_url(url)
        job_id = self.registry.create()
        task = asyncio.get_running_loop().create_task(self._run(job_id, config), name=f"job-{job_id}")
        self._tasks.add(task)
        task.add_done_callback(lambda t: self._on_done(job_id, t))
        logger.info("Job %s submitted for %s", job_id, config.start_url)
        return job_id

    def poll(self, job_id: str) -> Optional[JobStatus]:
        return self.registry.get(job_id)

    async def drain(self) -> None:
        """Wait for every outstanding background job."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    @property
    def active(self) -> int:
        return len(self._tasks)

    async def _run(self, job_id: str, config: CrawlConfig) -> None:
        try:
            pages = await self._crawl(config)
        except Exception as exc:
            logger.warning("Job %s failed during crawl: %s", job_id, exc)
            self.registry.fail(job_id, f"crawl error: {exc}")
            return

        if not pages:
            logger.warning("Job %s failed: %s", job_id, NO_PAGES_ERROR)
            self.registry.fail(job_id, NO_PAGES_ERROR)
            return

        try:
            summary = await self._summarize(pages)
        except Exception as exc:
            logger.warning("Job %s failed during summary: %s", job_id, exc)
            self.registry.fail(job_id, f"summarizer error: {exc}")
            return

        self.registry.complete(job_id, summary)
        logger.info("Job %s done (%d pages)", job_id, len(pages))

    def _on_done(self, job_id: str, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        status = self.registry.get(job_id)
        if status is None or status.terminal:
            return
        if task.cancelled():
            reason = "cancelled"
        else:
            exc = task.exception()
            reason = repr(exc) if exc is not None else "finished without a result"
        logger.error("Job %s background task failed: %s", job_id, reason)
        self.registry.fail(job_id, f"background task failed: {reason}")
