"""Federated search exceptions.

Only ``ConfigurationError``, ``UnsupportedEncodingError`` and
``ResponseDecodeError`` ever reach the caller of ``search()``. Source-level
failures (``SourceParseError``, ``TransportError``) are absorbed by the
pipeline and only degrade the aggregate.
"""


class FederatedSearchError(Exception):
    """Base exception for federated search errors."""


class ConfigurationError(FederatedSearchError):
    """Raised when the federation configuration is invalid (e.g. no URLs)."""


class SourceError(FederatedSearchError):
    """Base class for errors tied to a single source URL."""

    def __init__(self, source_url: str, message: str) -> None:
        super().__init__(message)
        self.source_url = source_url


class UnsupportedEncodingError(SourceError):
    """Raised when a source answers with a content type we cannot parse."""

    def __init__(self, source_url: str, content_type: str) -> None:
        super().__init__(source_url, f"Unsupported response type '{content_type}' for {source_url}")
        self.content_type = content_type


class ResponseDecodeError(SourceError):
    """Raised when a JSON envelope cannot be decoded."""


class SourceParseError(SourceError):
    """Raised when an XML feed (or an entry's nested content) is malformed."""


class TransportError(SourceError):
    """Raised when a source cannot be fetched (timeout, network, HTTP status)."""
