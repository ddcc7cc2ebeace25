"""Raw per-source HTTP responses, as produced by the fetcher."""

from __future__ import annotations

from pydantic import BaseModel, Field


class RawResponse(BaseModel):
    """One successful HTTP response from a source."""

    source_url: str = Field(description="URL the request was sent to")
    content_type: str = Field(default="", description="Media type, lower-cased, without parameters")
    body: bytes = Field(default=b"", description="Raw response body")
    status_code: int = Field(default=200, description="HTTP status code")


class FetchOutcome(BaseModel):
    """Result slot for one source: either a response or a transport error."""

    source_url: str = Field(description="URL the request was sent to")
    response: RawResponse | None = Field(default=None, description="Response, if the fetch succeeded")
    error: str | None = Field(default=None, description="Transport failure message, if the fetch failed")

    @property
    def ok(self) -> bool:
        return self.response is not None
