"""FederatedSearch — fans one search out to many OpenSearch endpoints.

Pipeline::

    urls → [Fetcher]        → FetchOutcome per URL (in URL order)
         → [ResponseParser] → SourceResult per source (or dropped)
         → [aggregate]      → AggregateResult (total + score-sorted records)

Only the fetch stage is concurrent. Parsing and aggregation run after every
request has completed or failed.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Coroutine, Sequence
from typing import TYPE_CHECKING, Any, TypeVar

import httpx

from fedsearch.core.aggregator import aggregate
from fedsearch.core.fetcher import Fetcher
from fedsearch.core.parser import ResponseParser
from fedsearch.models.query import DEFAULT_FIELDS, DEFAULT_USER_AGENT, SearchConfig, UnsupportedContentPolicy
from fedsearch.models.result import AggregateResult, SourceResult

if TYPE_CHECKING:
    from fedsearch.config.settings import Settings

_T = TypeVar("_T")

logger = logging.getLogger(__name__)


class FederatedSearch:
    """Aggregates results from several OpenSearch-style endpoints.

    Each source answers either with the native JSON envelope or with an
    Atom/OpenSearch feed. Results are merged into one list sorted by
    ``score`` and the per-source totals are summed.

    Args:
        urls: Source URLs, queried as-is.
        timeout: Per-request timeout in seconds.
        fields: Fields read off each XML feed entry.
        max_workers: Maximum concurrent requests (default: CPU count).
        unsupported_content: ``"strict"`` (default) fails the search when a
            source answers with an unknown content type; ``"lenient"`` skips
            that source.
        user_agent: ``User-Agent`` header sent to every source.
        transport: Optional ``httpx`` transport, e.g. ``httpx.MockTransport``.

    Example::

        fs = FederatedSearch(
            urls=[
                "http://some-site.org/search?q=foo",
                "http://some-other-site.org/search?q=foo",
            ],
            timeout=10,
        )
        result = await fs.search()
        for r in result.results:
            print(r["title"], r["uri"])
        print(fs.total)
    """

    def __init__(
        self,
        urls: Sequence[str] | None = None,
        *,
        timeout: float | None = None,
        fields: Sequence[str] | None = None,
        max_workers: int | None = None,
        unsupported_content: UnsupportedContentPolicy = "strict",
        user_agent: str = DEFAULT_USER_AGENT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = SearchConfig(
            urls=tuple(urls or ()),
            timeout=timeout,
            fields=DEFAULT_FIELDS if fields is None else tuple(fields),
            max_workers=max_workers,
            unsupported_content=unsupported_content,
            user_agent=user_agent,
        )
        self._transport = transport
        self._total = 0

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> FederatedSearch:
        """Build a FederatedSearch from the ``federation`` settings group."""
        fed = settings.federation
        return cls(
            fed.urls,
            timeout=fed.timeout,
            fields=fed.fields,
            max_workers=fed.max_workers,
            unsupported_content=fed.unsupported_content,
            user_agent=fed.user_agent,
            transport=transport,
        )

    # ── Accessors ────────────────────────────────────────────────────────

    @property
    def config(self) -> SearchConfig:
        return self._config

    @property
    def urls(self) -> tuple[str, ...]:
        return self._config.urls

    @property
    def timeout(self) -> float | None:
        return self._config.timeout

    @property
    def fields(self) -> tuple[str, ...]:
        """Fields read off each XML feed entry."""
        return self._config.fields

    @property
    def total(self) -> int:
        """Total hits from the last successful ``search()`` (0 before the first)."""
        return self._total

    # ── Search ───────────────────────────────────────────────────────────

    async def search(self) -> AggregateResult:
        """Fetch every source, parse the responses and merge them.

        Returns:
            The aggregate total and the score-sorted records.

        Raises:
            ConfigurationError: No (or invalid) URLs configured. Raised before
                any request is sent.
            UnsupportedEncodingError: A source answered with an unknown
                content type (strict policy). No partial result is returned.
            ResponseDecodeError: A source sent an undecodable JSON envelope.
        """
        config = self._config
        start = time.monotonic()

        fetcher = Fetcher(
            timeout=config.timeout,
            max_workers=config.max_workers,
            user_agent=config.user_agent,
            transport=self._transport,
        )
        outcomes = await fetcher.fetch_all(config.urls)

        parser = ResponseParser(config.fields, config.unsupported_content)
        sources: list[SourceResult | None] = []
        for outcome in outcomes:
            if outcome.response is None:
                logger.warning("No response from %s: %s", outcome.source_url, outcome.error)
                sources.append(None)
                continue
            sources.append(parser.parse(outcome.response))

        result = aggregate(sources)
        self._total = result.total

        logger.info(
            "Federated search complete: %d/%d sources, %d results, total %d in %d ms",
            sum(1 for source in sources if source is not None),
            len(sources),
            len(result.results),
            result.total,
            int((time.monotonic() - start) * 1000),
        )
        return result

    def search_sync(self) -> AggregateResult:
        """Blocking variant of ``search()``."""
        return self._run(self.search())

    @staticmethod
    def _run(coro: Coroutine[Any, Any, _T]) -> _T:
        """Run an async coroutine synchronously."""
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None

        if loop and loop.is_running():
            # Already inside an event loop (e.g. Jupyter); run on a worker thread
            import concurrent.futures

            with concurrent.futures.ThreadPoolExecutor(max_workers=1) as pool:
                return pool.submit(asyncio.run, coro).result()
        return asyncio.run(coro)
