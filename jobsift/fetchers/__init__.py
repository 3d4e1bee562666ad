"""
Fetcher layer for jobsift.

Provides an aiohttp-based fetcher with:
- Retries with exponential backoff
- 429/503 handling with Retry-After
"""

from jobsift.fetchers.http import HttpFetcher, FetchResult

__all__ = ["HttpFetcher", "FetchResult"]
