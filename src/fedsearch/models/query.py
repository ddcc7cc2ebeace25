"""Federation configuration and search request models."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

DEFAULT_FIELDS: tuple[str, ...] = ("title", "id", "author", "link", "summary", "tags", "modified")
DEFAULT_USER_AGENT = "apm-fedsearch"

UnsupportedContentPolicy = Literal["strict", "lenient"]


class SearchConfig(BaseModel):
    """Immutable configuration of one federated search.

    ``urls`` is not validated here: an empty list is reported as a
    ``ConfigurationError`` by ``search()`` so that construction never fails
    on it.
    """

    model_config = {"frozen": True}

    urls: tuple[str, ...] = Field(default=(), description="Ordered source URLs, fetched as-is")
    timeout: float | None = Field(default=None, gt=0, description="Per-request timeout in seconds")
    fields: tuple[str, ...] = Field(default=DEFAULT_FIELDS, description="Fields read off each XML feed entry")
    max_workers: int | None = Field(
        default=None,
        ge=1,
        description="Maximum concurrent requests (None = number of CPUs)",
    )
    unsupported_content: UnsupportedContentPolicy = Field(
        default="strict",
        description="strict: fail the search on an unknown content type; lenient: skip the source",
    )
    user_agent: str = Field(default=DEFAULT_USER_AGENT, description="User-Agent header sent to every source")


class FederatedSearchRequest(BaseModel):
    """Incoming API request. Omitted values fall back to the server configuration."""

    urls: list[str] | None = Field(default=None, description="Source URLs to query")
    timeout: float | None = Field(default=None, gt=0, description="Per-request timeout in seconds")
    fields: list[str] | None = Field(default=None, description="Fields read off each XML feed entry")
