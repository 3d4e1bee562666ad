"""
Single-page crawler: fetch a document, run selectors, fire match callbacks.

Callbacks for one selector run on one worker thread in document order.
Different selectors run concurrently on a thread pool, so their relative
order is not defined.
"""

from __future__ import annotations

import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Protocol

from jobsift.errors import CrawlError, FetchError
from jobsift.extract.html import extract_page_title, parse_html, select_texts
from jobsift.fetchers.http import FetchResult

MatchCallback = Callable[[str], None]
ErrorHook = Callable[[str, Exception], None]


class Fetcher(Protocol):
    async def fetch(self, url: str, headers: Optional[Dict[str, str]] = None) -> FetchResult:
        ...


@dataclass
class CrawlRequest:
    """Outgoing request, mutable by request hooks."""
    url: str
    headers: Dict[str, str] = field(default_factory=dict)

    def set_header(self, key: str, value: str) -> None:
        self.headers[key] = value


@dataclass
class Registration:
    selector: str
    callback: MatchCallback


RequestHook = Callable[[CrawlRequest], None]


class Crawler:
    """
    Fetches one URL and dispatches selector matches to registered callbacks.

    Does not follow links.
    """

    def __init__(
        self,
        fetcher: Fetcher,
        max_workers: int = 4,
        logger: Optional[logging.Logger] = None,
    ):
        self.fetcher = fetcher
        self.max_workers = max(1, max_workers)
        self.logger = logger or logging.getLogger(__name__)
        self._registrations: List[Registration] = []
        self._request_hooks: List[RequestHook] = []
        self._error_hooks: List[ErrorHook] = []

    # ----------------------------- Registration -----------------------------

    def on_html(self, selector: str, callback: MatchCallback) -> None:
        """Call `callback(text)` once per node matching `selector`."""
        self._registrations.append(Registration(selector, callback))

    def on_request(self, hook: RequestHook) -> None:
        """Run `hook(request)` before each request is sent."""
        self._request_hooks.append(hook)

    def on_error(self, hook: ErrorHook) -> None:
        """Run `hook(url, error)` when fetching or dispatching fails."""
        self._error_hooks.append(hook)

    @property
    def selectors(self) -> List[str]:
        return [r.selector for r in self._registrations]

    # ----------------------------- Crawl -----------------------------

    async def visit(self, url: str) -> int:
        """
        Fetch `url` and dispatch all matches.

        Returns the number of callbacks fired.

        Raises:
            FetchError: the page could not be fetched
            CrawlError: a match callback raised
        """
        request = CrawlRequest(url=url)
        for hook in self._request_hooks:
            hook(request)

        result = await self.fetcher.fetch(request.url, headers=request.headers or None)
        if not result.ok:
            error = FetchError(url, result.error or f"HTTP {result.status}", status=result.status)
            self._emit_error(url, error)
            raise error

        return await self.feed(result.text, url)

    async def feed(self, html: str, url: str = "") -> int:
        """Parse an already-fetched document and dispatch all matches."""
        soup = parse_html(html)
        self.logger.debug("parsed %s (%s)", url or "<document>", extract_page_title(soup) or "untitled")

        batches = [(reg, select_texts(soup, reg.selector)) for reg in self._registrations]
        if not batches:
            return 0

        loop = asyncio.get_running_loop()
        workers = min(self.max_workers, len(batches))
        pool = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="jobsift-match")
        try:
            futures = [loop.run_in_executor(pool, self._dispatch, reg, texts) for reg, texts in batches]
            results = await asyncio.gather(*futures, return_exceptions=True)
        finally:
            # a cancelled feed returns at once; running callbacks finish on their own
            pool.shutdown(wait=False, cancel_futures=True)

        for (reg, _), res in zip(batches, results):
            if isinstance(res, BaseException):
                error = CrawlError(f"callback for selector {reg.selector!r} failed: {res}")
                error.__cause__ = res
                self._emit_error(url, error)
                raise error

        fired = sum(results)
        self.logger.debug("dispatched %d matches across %d selectors", fired, len(batches))
        return fired

    def _dispatch(self, reg: Registration, texts: List[str]) -> int:
        for text in texts:
            reg.callback(text)
        return len(texts)

    def _emit_error(self, url: str, error: Exception) -> None:
        for hook in self._error_hooks:
            hook(url, error)
