"""site_digest.summarizer: OpenAI-compatible chat client that digests crawled pages."""

from __future__ import annotations

import asyncio
from typing import Any, Dict, List, Sequence

from aiohttp import ClientError, ClientSession, ClientTimeout

from site_digest.config import SummarizerConfig
from site_digest.crawler.models import Page
from site_digest.logger import logger

__all__ = ["SummarizerError", "format_pages", "OpenAISummarizer"]

_NA = "N/A"


class SummarizerError(Exception):
    """The summarization call failed or returned an unusable payload."""


def _format_page(page: Page) -> str:
    headings = ", ".join(f"{h.level}: {h.text}" for h in page.headings)
    return (
        f"URL: {page.url}\n"
        f"Title: {page.title}\n"
        f"Meta: {page.meta_description or _NA}\n"
        f"Author: {page.author or _NA}\n"
        f"Date: {page.published_at.isoformat() if page.published_at else _NA}\n"
        f"Headings: {headings}\n"
        f"Content: {chr(10).join(page.paragraphs)}\n"
        f"Extract: {page.extract or _NA}\n\n"
    )


def format_pages(pages: Sequence[Page]) -> str:
    """Render every page as a plain-text block for the user prompt."""
    return "".join(_format_page(p) for p in pages)


class OpenAISummarizer:
    """
    Thin OpenAI-compatible client via HTTP.

    Instances are awaitable callables, ``await summarizer(pages) -> str``,
    which is the shape the job dispatcher expects.
    """

    def __init__(self, config: SummarizerConfig) -> None:
        self.config = config
        self.url = f"{str(config.base_url).rstrip('/')}/chat/completions"

    def build_payload(self, pages: Sequence[Page]) -> Dict[str, Any]:
        return {
            "model": self.config.model,
            "messages": [
                {"role": "system", "content": self.config.system_prompt},
                {
                    "role": "user",
                    "content": "Analyse the following website content and evaluate the project "
                    f"behind it:\n\n{format_pages(pages)}",
                },
            ],
            "temperature": self.config.temperature,
            "max_tokens": self.config.max_tokens,
        }

    async def __call__(self, pages: List[Page]) -> str:
        if self.config.api_key is None:
            raise SummarizerError("missing API key (set OPENAI_API_KEY)")
        headers = {"Authorization": f"Bearer {self.config.api_key.get_secret_value()}"}
        payload = self.build_payload(pages)
        logger.info("Summarizing %d page(s) with %s", len(pages), self.config.model)
        try:
            async with ClientSession(timeout=ClientTimeout(total=self.config.timeout)) as session:
                async with session.post(self.url, json=payload, headers=headers) as resp:
                    if resp.status >= 400:
                        text = await resp.text()
                        raise SummarizerError(f"HTTP {resp.status}: {text[:200]}")
                    data = await resp.json(content_type=None)
        except (ClientError, asyncio.TimeoutError, ValueError) as exc:
            raise SummarizerError(f"{type(exc).__name__}: {exc}") from exc

        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as exc:
            raise SummarizerError(f"unexpected response shape: {exc!r}") from exc
        if not isinstance(content, str) or not content.strip():
            raise SummarizerError("empty completion")
        return content.strip()
