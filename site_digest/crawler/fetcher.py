# site_digest/crawler/fetcher.py
"""
Fetcher module: one politeness-delayed GET per attempt, response
classification, and retry/backoff for transport failures.
"""
from __future__ import annotations

import asyncio
import enum
from dataclasses import dataclass, field
from typing import Awaitable, Callable, List, Optional

from aiohttp import ClientConnectionError, ClientError, ClientSession, InvalidURL

from site_digest.config import CrawlConfig
from site_digest.crawler.models import Page
from site_digest.crawler.retry import RetryExhausted, RetryPolicy
from site_digest.logger import logger
from site_digest.parser.html_parser import parse_page

__all__ = ("FetchOutcome", "FetchResult", "TransientFetchError", "Fetcher")


class FetchOutcome(str, enum.Enum):
    OK = "ok"
    SKIPPED = "skipped"
    BLOCKED = "blocked"
    ABANDONED = "abandoned"


@dataclass(slots=True)
class FetchResult:
    """What one URL contributed to the crawl."""

    url: str
    outcome: FetchOutcome
    page: Optional[Page] = None
    links: List[str] = field(default_factory=list)
    reason: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.outcome is FetchOutcome.OK


class TransientFetchError(Exception):
    """Network-level failure (connection, DNS, timeout); eligible for retry."""


class Fetcher:
    """Handles HTTP fetching with a fixed delay, classification and backoff."""

    def __init__(
        self,
        session: ClientSession,
        config: CrawlConfig,
        retry_policy: Optional[RetryPolicy] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.session = session
        self.config = config
        self.retry_policy = retry_policy or RetryPolicy.from_config(config.retry)
        self._sleep = sleep

    async def fetch(self, url: str) -> FetchResult:
        """
        Fetch *url*, retrying transient failures.

        Never raises for per-URL problems: the outcome is encoded in the
        returned :class:`FetchResult`.
        """
        def _log_retry(attempt: int, exc: BaseException, delay: float) -> None:
            logger.debug("Retry %d for %s after %.2f s: %s", attempt, url, delay, exc)

        try:
            return await self.retry_policy.run(
                lambda: self._attempt(url),
                retry_on=(TransientFetchError,),
                on_retry=_log_retry,
            )
        except RetryExhausted as exc:
            logger.warning("Abandoned %s after %d attempt(s): %s", url, exc.attempts, exc.last_error)
            return FetchResult(url, FetchOutcome.ABANDONED, reason=str(exc.last_error))

    async def _attempt(self, url: str) -> FetchResult:
        # politeness delay is paid on every attempt, retries included
        if self.config.request_delay:
            await self._sleep(self.config.request_delay)
        logger.debug("Visiting %s", url)
        try:
            async with self.session.get(url, allow_redirects=True) as resp:
                if not 200 <= resp.status < 300:
                    logger.warning("Skipped %s: HTTP %d", url, resp.status)
                    return FetchResult(url, FetchOutcome.SKIPPED, reason=f"HTTP {resp.status}")

                server = resp.headers.get("Server", "").lower()
                for marker in self.config.blocked_servers:
                    if marker in server:
                        logger.warning("Blocked %s: protected by %s", url, server)
                        return FetchResult(url, FetchOutcome.BLOCKED, reason=f"server: {server}")

                body = await resp.text(errors="replace")
        except InvalidURL as exc:
            logger.warning("Skipped %s: invalid URL (%s)", url, exc)
            return FetchResult(url, FetchOutcome.SKIPPED, reason="invalid URL")
        except (ClientConnectionError, asyncio.TimeoutError) as exc:
            raise TransientFetchError(f"{type(exc).__name__}: {exc}") from exc
        except ClientError as exc:
            # redirect loops and malformed responses are terminal
            logger.warning("Skipped %s: %s", url, type(exc).__name__)
            return FetchResult(url, FetchOutcome.SKIPPED, reason=type(exc).__name__)

        for marker in self.config.challenge_markers:
            if marker in body:
                logger.warning("Blocked %s: bot challenge page (%r)", url, marker)
                return FetchResult(url, FetchOutcome.BLOCKED, reason=f"challenge: {marker}")

        parsed = parse_page(body, url, self.config.max_content_length)
        return FetchResult(url, FetchOutcome.OK, page=parsed.page, links=parsed.links)
