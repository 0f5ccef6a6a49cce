"""site_digest.api: HTTP surface for submitting crawl jobs and polling them (aiohttp.web)."""

from __future__ import annotations

from aiohttp import web

from site_digest.config import ServiceConfig
from site_digest.jobs.dispatcher import JobDispatcher
from site_digest.jobs.registry import JobRegistry
from site_digest.logger import logger
from site_digest.summarizer import OpenAISummarizer

__all__ = ["DISPATCHER_KEY", "create_app", "run_server"]

DISPATCHER_KEY = web.AppKey("dispatcher", JobDispatcher)

routes = web.RouteTableDef()


@routes.post("/api/scrape")
async def submit_job(request: web.Request) -> web.Response:
    try:
        payload = await request.json()
    except ValueError:
        return web.json_response({"error": "request body must be JSON"}, status=400)
    url = payload.get("url") if isinstance(payload, dict) else None
    if not isinstance(url, str) or not url.strip():
        return web.json_response({"error": "field 'url' is required"}, status=400)

    dispatcher = request.app[DISPATCHER_KEY]
    try:
        job_id = dispatcher.submit(url.strip())
    except ValueError as exc:
        logger.info("Rejected submission %r: %s", url, exc)
        return web.json_response({"error": f"invalid url: {url}"}, status=400)
    return web.json_response({"job_id": job_id}, status=202)


@routes.get("/api/jobs/{job_id}")
async def poll_job(request: web.Request) -> web.Response:
    status = request.app[DISPATCHER_KEY].poll(request.match_info["job_id"])
    if status is None:
        return web.json_response({"error": "Job not found"}, status=404)
    return web.json_response(status.to_dict())


async def _drain_jobs(app: web.Application) -> None:
    dispatcher = app[DISPATCHER_KEY]
    if dispatcher.active:
        logger.info("Waiting for %d running job(s)", dispatcher.active)
    await dispatcher.drain()


def create_app(dispatcher: JobDispatcher) -> web.Application:
    app = web.Application()
    app[DISPATCHER_KEY] = dispatcher
    app.add_routes(routes)
    app.on_cleanup.append(_drain_jobs)
    return app


def run_server(config: ServiceConfig) -> None:
    """Build the production dispatcher from *config* and serve forever."""
    dispatcher = JobDispatcher(
        JobRegistry(),
        summarize=OpenAISummarizer(config.summarizer),
        options=config.crawl,
    )
    logger.info("Serving on http://%s:%d", config.host, config.port)
    web.run_app(create_app(dispatcher), host=config.host, port=config.port, print=None)
