"""Normalized records and aggregate search results.

Records are plain dicts rather than models: JSON sources pass their result
objects through verbatim and XML sources may add arbitrary fields taken from
each entry's nested content.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field

NormalizedRecord = dict[str, Any]
"""A single search hit. Carries at least ``score``; XML hits also ``uri`` and ``mtime``."""


class FieldValue(BaseModel):
    """A value read off a feed entry, tagged with how it must be normalized.

    - ``text``: plain scalar, escaped once.
    - ``content``: text body of a content construct, escaped once.
    - ``timestamp``: integer epoch seconds, never escaped.
    - ``structured``: nested lists/dicts, every string leaf escaped.
    """

    kind: Literal["text", "content", "timestamp", "structured"]
    value: Any = None


class SourceResult(BaseModel):
    """Parsed contribution of one source."""

    source_url: str = Field(description="URL the records came from")
    records: list[NormalizedRecord] = Field(default_factory=list, description="Records in source order")
    total: int = Field(default=0, description="Total hits reported by the source")


class AggregateResult(BaseModel):
    """Merged result of a federated search."""

    total: int = Field(default=0, description="Sum of per-source totals")
    results: list[NormalizedRecord] = Field(
        default_factory=list,
        description="All records, sorted by score descending (ties keep source order)",
    )
