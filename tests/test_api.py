from __future__ import annotations

import asyncio

import pytest
from aiohttp import ClientSession

from site_digest.api import create_app
from site_digest.crawler.models import Page
from site_digest.jobs import JobDispatcher, JobRegistry

from conftest import serve_app


@pytest.mark.asyncio()
async def test_submit_and_poll_roundtrip(fast_options, unused_tcp_port):
    release = asyncio.Event()

    async def crawl(cfg):
        await release.wait()
        return [Page(url=str(cfg.start_url), title="t")]

    async def summarize(pages):
        return f"{len(pages)} page(s)"

    dispatcher = JobDispatcher(JobRegistry(), summarize, fast_options, crawl=crawl)
    async for base in serve_app(create_app(dispatcher), unused_tcp_port):
        async with ClientSession() as client:
            async with client.post(f"{base}/api/scrape", json={"url": "http://example.com"}) as resp:
                assert resp.status == 202
                job_id = (await resp.json())["job_id"]

            async with client.get(f"{base}/api/jobs/{job_id}") as resp:
                assert resp.status == 200
                assert await resp.json() == {"status": "pending"}

            release.set()
            await dispatcher.drain()

            async with client.get(f"{base}/api/jobs/{job_id}") as resp:
                assert await resp.json() == {"status": "done", "summary": "1 page(s)"}


@pytest.mark.asyncio()
async def test_failed_job_is_reported(fast_options, unused_tcp_port):
    async def crawl(cfg):
        return []

    async def summarize(pages):
        raise AssertionError("must not be called")

    dispatcher = JobDispatcher(JobRegistry(), summarize, fast_options, crawl=crawl)
    async for base in serve_app(create_app(dispatcher), unused_tcp_port):
        async with ClientSession() as client:
            async with client.post(f"{base}/api/scrape", json={"url": "https://example.org/x"}) as resp:
                job_id = (await resp.json())["job_id"]
            await dispatcher.drain()
            async with client.get(f"{base}/api/jobs/{job_id}") as resp:
                assert await resp.json() == {"status": "failed", "error": "no pages collected"}


@pytest.mark.asyncio()
async def test_unknown_job_is_404(fast_options, unused_tcp_port):
    dispatcher = JobDispatcher(JobRegistry(), lambda pages: None, fast_options)
    async for base in serve_app(create_app(dispatcher), unused_tcp_port):
        async with ClientSession() as client:
            async with client.get(f"{base}/api/jobs/does-not-exist") as resp:
                assert resp.status == 404
                assert await resp.json() == {"error": "Job not found"}


@pytest.mark.asyncio()
@pytest.mark.parametrize(
    "body",
    [{"url": "not a url"}, {"url": ""}, {"link": "http://example.com"}, ["http://example.com"]],
)
async def test_bad_submissions_are_400(fast_options, unused_tcp_port, body):
    registry = JobRegistry()
    dispatcher = JobDispatcher(registry, lambda pages: None, fast_options)
    async for base in serve_app(create_app(dispatcher), unused_tcp_port):
        async with ClientSession() as client:
            async with client.post(f"{base}/api/scrape", json=body) as resp:
                assert resp.status == 400
                assert "error" in await resp.json()
    assert len(registry) == 0


@pytest.mark.asyncio()
async def test_non_json_body_is_400(fast_options, unused_tcp_port):
    dispatcher = JobDispatcher(JobRegistry(), lambda pages: None, fast_options)
    async for base in serve_app(create_app(dispatcher), unused_tcp_port):
        async with ClientSession() as client:
            async with client.post(f"{base}/api/scrape", data="url=http://example.com") as resp:
                assert resp.status == 400
