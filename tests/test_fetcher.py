"""
Tests for the HTTP fetcher against a local aiohttp server.
"""
import asyncio

from aiohttp import web
from aiohttp.test_utils import TestServer

from jobsift.fetchers.http import HttpFetcher


def _run(app, scenario):
    async def main():
        server = TestServer(app)
        await server.start_server()
        try:
            return await scenario(server)
        finally:
            await server.close()

    return asyncio.run(main())


def _app(routes):
    app = web.Application()
    app.add_routes(routes)
    return app


def test_fetches_html_page():
    async def page(request):
        return web.Response(text="<h2>Hello</h2>", content_type="text/html")

    async def scenario(server):
        async with HttpFetcher(base_delay_ms=1) as fetcher:
            return await fetcher.fetch(str(server.make_url("/jobs")))

    result = _run(_app([web.get("/jobs", page)]), scenario)
    assert result.ok
    assert result.is_html
    assert result.text == "<h2>Hello</h2>"


def test_request_headers_are_sent():
    async def echo(request):
        return web.Response(text=request.headers.get("User-Agent", ""))

    async def scenario(server):
        async with HttpFetcher(user_agent="default-agent") as fetcher:
            url = str(server.make_url("/"))
            return (
                await fetcher.fetch(url),
                await fetcher.fetch(url, headers={"User-Agent": "custom-agent"}),
            )

    default, custom = _run(_app([web.get("/", echo)]), scenario)
    assert default.text == "default-agent"
    assert custom.text == "custom-agent"


def test_retries_server_errors():
    calls = []

    async def flaky(request):
        calls.append(1)
        if len(calls) < 3:
            return web.Response(status=503, headers={"Retry-After": "0"})
        return web.Response(text="finally", content_type="text/html")

    async def scenario(server):
        async with HttpFetcher(max_retries=3, base_delay_ms=1) as fetcher:
            return await fetcher.fetch(str(server.make_url("/")))

    result = _run(_app([web.get("/", flaky)]), scenario)
    assert result.ok
    assert result.text == "finally"
    assert len(calls) == 3


def test_gives_up_after_max_retries():
    calls = []

    async def broken(request):
        calls.append(1)
        return web.Response(status=500)

    async def scenario(server):
        async with HttpFetcher(max_retries=2, base_delay_ms=1) as fetcher:
            return await fetcher.fetch(str(server.make_url("/")))

    result = _run(_app([web.get("/", broken)]), scenario)
    assert not result.ok
    assert result.status == 500
    assert result.error == "HTTP 500"
    assert len(calls) == 2


def test_client_errors_are_not_retried():
    async def scenario(server):
        async with HttpFetcher(max_retries=3, base_delay_ms=1) as fetcher:
            return await fetcher.fetch(str(server.make_url("/missing")))

    result = _run(_app([]), scenario)
    assert result.status == 404
    assert result.error == "HTTP 404"
    assert result.text == ""
