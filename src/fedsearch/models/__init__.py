"""Data models shared by the fetch, parse and aggregate stages."""

from fedsearch.models.query import DEFAULT_FIELDS, FederatedSearchRequest, SearchConfig
from fedsearch.models.response import FetchOutcome, RawResponse
from fedsearch.models.result import AggregateResult, FieldValue, NormalizedRecord, SourceResult

__all__ = [
    "DEFAULT_FIELDS",
    "AggregateResult",
    "FederatedSearchRequest",
    "FetchOutcome",
    "FieldValue",
    "NormalizedRecord",
    "RawResponse",
    "SearchConfig",
    "SourceResult",
]
