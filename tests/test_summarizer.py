from __future__ import annotations

from collections.abc import AsyncIterator
from datetime import datetime, timezone

import pytest
import pytest_asyncio
from aiohttp import web

from site_digest.config import SummarizerConfig
from site_digest.crawler.models import Heading, Page
from site_digest.summarizer import OpenAISummarizer, SummarizerError, format_pages

from conftest import serve_app


@pytest_asyncio.fixture
async def fake_openai(unused_tcp_port: int) -> AsyncIterator[tuple[str, list]]:
    """OpenAI-compatible stub; behaviour is chosen by the requested model name."""
    received: list = []
    app = web.Application()

    async def completions(request: web.Request):
        payload = await request.json()
        received.append((request.headers.get("Authorization"), payload))
        model = payload["model"]
        if model == "broken":
            return web.json_response({"error": {"message": "overloaded"}}, status=503)
        if model == "weird":
            return web.json_response({"choices": []})
        return web.json_response({"choices": [{"message": {"role": "assistant", "content": "  Overview: fine.  "}}]})

    app.router.add_post("/v1/chat/completions", completions)
    async for base in serve_app(app, unused_tcp_port):
        yield f"{base}/v1", received


def sample_pages() -> list[Page]:
    return [
        Page(
            url="http://example.com/",
            title="Home",
            meta_description="Meta",
            published_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
            headings=[Heading(1, "Welcome")],
            paragraphs=["one", "two"],
            extract="Meta",
        ),
        Page(url="http://example.com/about", title="About"),
    ]


def test_format_pages_marks_absent_fields():
    text = format_pages(sample_pages())
    assert "URL: http://example.com/\nTitle: Home\nMeta: Meta\nAuthor: N/A\n" in text
    assert "Date: 2024-01-01T00:00:00+00:00" in text
    assert "Headings: 1: Welcome" in text
    assert "Content: one\ntwo" in text
    assert "URL: http://example.com/about\nTitle: About\nMeta: N/A" in text
    assert text.count("Extract: N/A") == 1


@pytest.mark.asyncio()
async def test_successful_completion(fake_openai):
    base_url, received = fake_openai
    summarizer = OpenAISummarizer(SummarizerConfig(base_url=base_url, api_key="sk-test", model="gpt-test"))
    result = await summarizer(sample_pages())
    assert result == "Overview: fine."
    auth, payload = received[0]
    assert auth == "Bearer sk-test"
    assert payload["model"] == "gpt-test"
    assert payload["max_tokens"] == 4000
    assert [m["role"] for m in payload["messages"]] == ["system", "user"]
    assert "URL: http://example.com/about" in payload["messages"][1]["content"]


@pytest.mark.asyncio()
@pytest.mark.parametrize("model", ["broken", "weird"])
async def test_bad_responses_raise(fake_openai, model):
    base_url, _ = fake_openai
    summarizer = OpenAISummarizer(SummarizerConfig(base_url=base_url, api_key="k", model=model))
    with pytest.raises(SummarizerError):
        await summarizer(sample_pages())


@pytest.mark.asyncio()
async def test_missing_api_key(monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    with pytest.raises(SummarizerError, match="API key"):
        await OpenAISummarizer(SummarizerConfig())(sample_pages())


@pytest.mark.asyncio()
async def test_unreachable_service(unused_tcp_port):
    cfg = SummarizerConfig(base_url=f"http://localhost:{unused_tcp_port}/v1", api_key="k", timeout=2)
    with pytest.raises(SummarizerError):
        await OpenAISummarizer(cfg)(sample_pages())
