"""Concurrent fetcher — one GET per source URL, reassembled in URL order.

Every URL gets its own task; a semaphore caps how many run at once. Each
task owns exactly one result slot, and ``asyncio.gather`` returns the slots
in the order the URLs were given, whatever order the requests finish in.
A failing source (timeout, network error, HTTP error status) fills its slot
with an error and never disturbs the others.
"""

from __future__ import annotations

import asyncio
import logging
import os
import time
from collections.abc import Sequence

import httpx

from fedsearch.core.exceptions import ConfigurationError, TransportError
from fedsearch.models.query import DEFAULT_USER_AGENT
from fedsearch.models.response import FetchOutcome, RawResponse

logger = logging.getLogger(__name__)


def default_max_workers() -> int:
    """Default pool size: the number of available CPUs."""
    return os.cpu_count() or 1


def media_type(content_type: str | None) -> str:
    """Strip parameters from a Content-Type header (``a/b; charset=x`` → ``a/b``)."""
    if not content_type:
        return ""
    return content_type.split(";", 1)[0].strip().lower()


def validate_urls(urls: Sequence[str]) -> None:
    """Check that ``urls`` is a non-empty list of absolute http(s) URLs.

    Raises:
        ConfigurationError: On an empty list or a relative/non-HTTP URL.
    """
    if not urls:
        raise ConfigurationError("no urls defined")
    for url in urls:
        try:
            parsed = httpx.URL(url)
        except (httpx.InvalidURL, TypeError) as e:
            raise ConfigurationError(f"Invalid source URL {url!r}: {e}") from e
        if parsed.scheme not in ("http", "https") or not parsed.host:
            raise ConfigurationError(f"Source URL must be an absolute http(s) URL: {url!r}")


class Fetcher:
    """Fetches source URLs concurrently.

    Args:
        timeout: Per-request timeout in seconds (None = no timeout).
        max_workers: Maximum concurrent requests. Defaults to the CPU count.
        user_agent: ``User-Agent`` header sent with every request.
        transport: Optional ``httpx`` transport (used to stub sources in tests).
    """

    def __init__(
        self,
        timeout: float | None = None,
        max_workers: int | None = None,
        user_agent: str = DEFAULT_USER_AGENT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._timeout = timeout
        self._max_workers = max_workers or default_max_workers()
        self._user_agent = user_agent
        self._transport = transport

    @property
    def max_workers(self) -> int:
        return self._max_workers

    async def fetch_all(self, urls: Sequence[str]) -> list[FetchOutcome]:
        """Fetch every URL and return one outcome per URL, in order.

        Raises:
            ConfigurationError: If ``urls`` is empty or invalid. Raised before
                any request is sent.
        """
        validate_urls(urls)

        semaphore = asyncio.Semaphore(self._max_workers)
        async with httpx.AsyncClient(
            timeout=httpx.Timeout(self._timeout),
            headers={"User-Agent": self._user_agent},
            follow_redirects=True,
            transport=self._transport,
        ) as client:

            async def _bounded(url: str) -> FetchOutcome:
                async with semaphore:
                    return await self._fetch(client, url)

            outcomes = await asyncio.gather(*(_bounded(url) for url in urls))

        return list(outcomes)

    async def _fetch(self, client: httpx.AsyncClient, url: str) -> FetchOutcome:
        start = time.monotonic()
        try:
            response = await self._get(client, url)
        except TransportError as e:
            logger.warning("Source %s failed: %s", url, e)
            return FetchOutcome(source_url=url, error=str(e))

        took_ms = int((time.monotonic() - start) * 1000)
        logger.debug("Got response for %s: %d in %d ms", url, response.status_code, took_ms)

        return FetchOutcome(
            source_url=url,
            response=RawResponse(
                source_url=url,
                content_type=media_type(response.headers.get("content-type")),
                body=response.content,
                status_code=response.status_code,
            ),
        )

    @staticmethod
    async def _get(client: httpx.AsyncClient, url: str) -> httpx.Response:
        """GET ``url``, mapping every ``httpx`` failure to ``TransportError``."""
        try:
            response = await client.get(url)
            response.raise_for_status()
        except httpx.TimeoutException as e:
            raise TransportError(url, f"Timed out fetching {url}") from e
        except httpx.HTTPStatusError as e:
            raise TransportError(url, f"HTTP {e.response.status_code} from {url}") from e
        except httpx.HTTPError as e:
            raise TransportError(url, f"Failed to fetch {url}: {e}") from e
        return response
