"""Tests for the concurrent fetcher."""

from __future__ import annotations

import asyncio
from collections.abc import Callable

import httpx
import pytest

from fedsearch.core.exceptions import ConfigurationError
from fedsearch.core.fetcher import Fetcher, default_max_workers, media_type, validate_urls

# ── Helpers ──────────────────────────────────────────────────────────────────


class TestMediaType:
    def test_strips_parameters(self) -> None:
        assert media_type("application/json; charset=utf-8") == "application/json"

    def test_lowercases(self) -> None:
        assert media_type("Application/XML") == "application/xml"

    def test_missing(self) -> None:
        assert media_type(None) == ""
        assert media_type("") == ""


class TestValidateUrls:
    def test_empty_raises(self) -> None:
        with pytest.raises(ConfigurationError, match="no urls"):
            validate_urls([])

    def test_relative_raises(self) -> None:
        with pytest.raises(ConfigurationError, match="absolute"):
            validate_urls(["/search?q=foo"])

    def test_non_http_raises(self) -> None:
        with pytest.raises(ConfigurationError):
            validate_urls(["ftp://a.example/search"])

    def test_valid(self) -> None:
        validate_urls(["http://a.example/search?q=foo", "https://b.example/"])


class TestDefaults:
    def test_default_workers_is_cpu_count(self) -> None:
        assert Fetcher().max_workers == default_max_workers()
        assert default_max_workers() >= 1

    def test_custom_workers(self) -> None:
        assert Fetcher(max_workers=3).max_workers == 3


# ── Fetching ─────────────────────────────────────────────────────────────────


class TestFetchAll:
    async def test_outcomes_in_url_order(self, make_transport: Callable[..., httpx.MockTransport]) -> None:
        transport = make_transport(
            {
                "a.example": ("application/json", b"{}"),
                "b.example": ("application/xml; charset=utf-8", b"<feed/>"),
            }
        )
        fetcher = Fetcher(transport=transport)
        outcomes = await fetcher.fetch_all(["http://a.example/s", "http://b.example/s"])

        assert [o.source_url for o in outcomes] == ["http://a.example/s", "http://b.example/s"]
        assert all(o.ok for o in outcomes)
        assert outcomes[0].response is not None
        assert outcomes[0].response.content_type == "application/json"
        assert outcomes[1].response is not None
        assert outcomes[1].response.content_type == "application/xml"
        assert outcomes[1].response.body == b"<feed/>"

    async def test_order_independent_of_completion(self) -> None:
        delays = {"a.example": 0.05, "b.example": 0.0, "c.example": 0.02}
        finished: list[str] = []

        async def handler(request: httpx.Request) -> httpx.Response:
            await asyncio.sleep(delays[request.url.host])
            finished.append(request.url.host)
            return httpx.Response(200, headers={"Content-Type": "application/json"}, content=b"{}")

        fetcher = Fetcher(max_workers=3, transport=httpx.MockTransport(handler))
        urls = ["http://a.example/", "http://b.example/", "http://c.example/"]
        outcomes = await fetcher.fetch_all(urls)

        assert finished == ["b.example", "c.example", "a.example"]
        assert [o.source_url for o in outcomes] == urls

    async def test_concurrency_is_bounded(self) -> None:
        active = 0
        peak = 0

        async def handler(request: httpx.Request) -> httpx.Response:
            nonlocal active, peak
            active += 1
            peak = max(peak, active)
            await asyncio.sleep(0.01)
            active -= 1
            return httpx.Response(200, headers={"Content-Type": "application/json"}, content=b"{}")

        fetcher = Fetcher(max_workers=2, transport=httpx.MockTransport(handler))
        outcomes = await fetcher.fetch_all([f"http://s{i}.example/" for i in range(6)])

        assert len(outcomes) == 6
        assert peak == 2

    async def test_sends_user_agent(self) -> None:
        seen: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request.headers["user-agent"])
            return httpx.Response(200, headers={"Content-Type": "application/json"}, content=b"{}")

        await Fetcher(transport=httpx.MockTransport(handler)).fetch_all(["http://a.example/"])
        assert seen == ["apm-fedsearch"]

    async def test_timeout_applies_to_every_request(self) -> None:
        seen: list[dict[str, float | None]] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request.extensions["timeout"])
            return httpx.Response(200, headers={"Content-Type": "application/json"}, content=b"{}")

        urls = ["http://a.example/", "http://b.example/", "http://c.example/"]
        await Fetcher(timeout=0.5, transport=httpx.MockTransport(handler)).fetch_all(urls)

        assert seen == [{"connect": 0.5, "read": 0.5, "write": 0.5, "pool": 0.5}] * 3

    async def test_no_timeout_by_default(self) -> None:
        seen: list[dict[str, float | None]] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request.extensions["timeout"])
            return httpx.Response(200, headers={"Content-Type": "application/json"}, content=b"{}")

        await Fetcher(transport=httpx.MockTransport(handler)).fetch_all(["http://a.example/"])
        assert seen == [{"connect": None, "read": None, "write": None, "pool": None}]

    async def test_failures_are_isolated(self, make_transport: Callable[..., httpx.MockTransport]) -> None:
        transport = make_transport(
            {
                "slow.example": httpx.ReadTimeout("timed out"),
                "down.example": httpx.ConnectError("connection refused"),
                "broken.example": 500,
                "ok.example": ("application/json", b"{}"),
            }
        )
        urls = [
            "http://slow.example/",
            "http://down.example/",
            "http://broken.example/",
            "http://ok.example/",
        ]
        outcomes = await Fetcher(timeout=1, transport=transport).fetch_all(urls)

        assert [o.ok for o in outcomes] == [False, False, False, True]
        assert outcomes[0].error is not None and "Timed out" in outcomes[0].error
        assert outcomes[1].error is not None and "connection refused" in outcomes[1].error
        assert outcomes[2].error is not None and "HTTP 500" in outcomes[2].error
        assert outcomes[3].response is not None

    async def test_empty_urls_sends_nothing(self, make_transport: Callable[..., httpx.MockTransport]) -> None:
        transport = make_transport({})
        with pytest.raises(ConfigurationError):
            await Fetcher(transport=transport).fetch_all([])
        assert transport.calls == []  # type: ignore[attr-defined]
