"""Shared test fixtures and configuration."""

from __future__ import annotations

import json
from collections.abc import Callable
from typing import Any

import httpx
import pytest

from fedsearch.config.settings import Settings

JSON_SOURCE = "http://a.example/search?q=foo"
XML_SOURCE = "http://b.example/search?q=foo"

SAMPLE_FEED = b"""<?xml version="1.0" encoding="UTF-8"?>
<feed xmlns="http://www.w3.org/2005/Atom"
      xmlns:opensearch="http://a9.com/-/spec/opensearch/1.1/">
  <title>search results for foo</title>
  <id>http://b.example/search?q=foo</id>
  <updated>2013-03-01T12:00:00Z</updated>
  <opensearch:totalResults>3</opensearch:totalResults>
  <opensearch:startIndex>0</opensearch:startIndex>
  <opensearch:itemsPerPage>10</opensearch:itemsPerPage>
  <entry>
    <title>Tom &amp; Jerry</title>
    <id>http://b.example/doc/1</id>
    <author><name>Jane &lt;Doe&gt;</name></author>
    <link rel="alternate" href="http://b.example/doc/1?a=1&amp;b=2"/>
    <summary>A &lt;b&gt;bold&lt;/b&gt; summary</summary>
    <category term="cartoons"/>
    <updated>2013-03-01T12:00:00Z</updated>
    <content type="xhtml">
      <div xmlns="http://www.w3.org/1999/xhtml">
        <score>0.95</score>
        <swishdescription>cats &amp; mice</swishdescription>
        <topics><topic>a&lt;b</topic><topic>c</topic></topics>
      </div>
    </content>
  </entry>
</feed>
"""


def json_envelope(total: int, results: list[dict[str, Any]]) -> bytes:
    return json.dumps({"total": total, "results": results}).encode()


@pytest.fixture
def settings() -> Settings:
    """Create a test Settings instance with defaults."""
    return Settings(
        _env_file=None,  # type: ignore[call-arg]
        debug=True,
        federation={"urls": [JSON_SOURCE, XML_SOURCE], "timeout": 5},
    )


@pytest.fixture
def sample_feed() -> bytes:
    return SAMPLE_FEED


@pytest.fixture
def sample_envelope() -> bytes:
    return json_envelope(5, [{"id": "1", "score": 0.9}, {"id": "2", "score": 0.2}])


Route = tuple[str, bytes] | int | Exception
"""A stubbed source: ``(content_type, body)``, an HTTP error status, or an exception to raise."""


@pytest.fixture
def make_transport() -> Callable[..., httpx.MockTransport]:
    """Build an ``httpx.MockTransport`` serving canned responses keyed by host.

    The returned transport exposes ``calls``, the list of requested URLs.
    """

    def _make(routes: dict[str, Route]) -> httpx.MockTransport:
        calls: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(str(request.url))
            route = routes[request.url.host]
            if isinstance(route, Exception):
                raise route
            if isinstance(route, int):
                return httpx.Response(route, text="error")
            content_type, body = route
            return httpx.Response(200, headers={"Content-Type": content_type}, content=body)

        transport = httpx.MockTransport(handler)
        transport.calls = calls  # type: ignore[attr-defined]
        return transport

    return _make
