"""
Async page fetcher with retries and backoff.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

import aiohttp

from jobsift.models import DEFAULT_USER_AGENT

logger = logging.getLogger(__name__)

# Responses worth another attempt
RETRYABLE_STATUS = frozenset({429, 500, 502, 503, 504})


@dataclass
class FetchResult:
    """One fetched page, or why it could not be fetched."""
    url: str
    status: int = 0
    text: str = ""
    content_type: str = ""
    error: str = ""
    elapsed_ms: float = 0

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 400 and not self.error

    @property
    def is_html(self) -> bool:
        return "text/html" in self.content_type.lower()


def _elapsed_ms(started: float) -> float:
    return (time.monotonic() - started) * 1000


class HttpFetcher:
    """
    Page fetcher on a shared aiohttp session.

    A fetch makes up to `max_retries` attempts. Rate limiting (429), server
    errors, timeouts and connection failures are retried with exponential
    backoff, honouring Retry-After; any other response is final.
    """

    def __init__(
        self,
        timeout_s: int = 20,
        max_retries: int = 3,
        base_delay_ms: int = 1000,
        user_agent: str = DEFAULT_USER_AGENT,
    ):
        self.timeout_s = timeout_s
        self.max_retries = max(1, max_retries)
        self.base_delay_ms = base_delay_ms
        self.user_agent = user_agent
        self._session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self) -> "HttpFetcher":
        await self.start()
        return self

    async def __aexit__(self, *args) -> None:
        await self.close()

    async def start(self) -> None:
        if self._session is not None and not self._session.closed:
            return
        self._session = aiohttp.ClientSession(
            headers={
                "User-Agent": self.user_agent,
                "Accept": "text/html,application/xhtml+xml,*/*;q=0.8",
                "Accept-Language": "en-US,en;q=0.9",
            },
            timeout=aiohttp.ClientTimeout(total=self.timeout_s),
        )

    async def close(self) -> None:
        if self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None

    async def fetch(self, url: str, headers: Optional[Dict[str, str]] = None) -> FetchResult:
        """
        Fetch `url`. Request `headers` override the session defaults.

        Never raises for HTTP or network failures; check `result.ok`.
        """
        await self.start()
        started = time.monotonic()
        status, error = 0, ""

        for attempt in range(self.max_retries):
            retry_after = ""
            try:
                status, text, content_type, retry_after = await self._get(url, headers)
            except asyncio.TimeoutError:
                status, error = 0, f"timed out after {self.timeout_s}s"
            except aiohttp.ClientError as e:
                status, error = 0, str(e) or type(e).__name__
            else:
                if status not in RETRYABLE_STATUS:
                    failed = status >= 400
                    return FetchResult(
                        url=url,
                        status=status,
                        text="" if failed else text,
                        content_type=content_type,
                        error=f"HTTP {status}" if failed else "",
                        elapsed_ms=_elapsed_ms(started),
                    )
                error = f"HTTP {status}"

            if attempt + 1 < self.max_retries:
                delay_ms = self._retry_delay_ms(retry_after, attempt)
                logger.debug(
                    "fetch %s failed (%s), attempt %d/%d, retrying in %dms",
                    url, error, attempt + 1, self.max_retries, delay_ms,
                )
                await asyncio.sleep(delay_ms / 1000)

        return FetchResult(url=url, status=status, error=error, elapsed_ms=_elapsed_ms(started))

    async def _get(self, url: str, headers: Optional[Dict[str, str]]) -> Tuple[int, str, str, str]:
        """One attempt: (status, body, content type, Retry-After)."""
        async with self._session.get(url, headers=headers, allow_redirects=True) as resp:
            content_type = resp.headers.get("Content-Type", "")
            if resp.status >= 400:
                return resp.status, "", content_type, resp.headers.get("Retry-After", "")
            text = await resp.text(errors="replace")
            return resp.status, text, content_type, ""

    def _retry_delay_ms(self, retry_after: str, attempt: int) -> int:
        """Retry-After (seconds) when the server sent one, else exponential backoff."""
        if retry_after.strip().isdigit():
            return int(retry_after) * 1000
        return self.base_delay_ms * (2 ** attempt)
