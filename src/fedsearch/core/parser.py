"""Response parser — turns one raw source response into normalized records.

Dispatch is strictly on the declared media type:

- ``application/json``: the native result envelope
  ``{"total": int, "results": [{..., "score": number}]}``; records are used
  verbatim and never escaped.
- ``application/xml``: an Atom/OpenSearch feed; each entry is read field by
  field, merged with the fields found in its nested XML content, escaped, and
  renamed (``id`` → ``uri``, ``modified`` → ``mtime``).

The feed and fragment parsers decode entities on read, so every XML-derived
string is escaped exactly once here to keep it safe for markup redisplay.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from typing import Any

from fedsearch.core.aggregator import score_of
from fedsearch.core.escape import escape, escape_tree
from fedsearch.core.exceptions import ResponseDecodeError, SourceParseError, UnsupportedEncodingError
from fedsearch.core.feed import FeedEntry, parse_feed, parse_fragment
from fedsearch.models.query import DEFAULT_FIELDS, UnsupportedContentPolicy
from fedsearch.models.response import RawResponse
from fedsearch.models.result import FieldValue, NormalizedRecord, SourceResult

logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json"
XML_CONTENT_TYPE = "application/xml"

# Destructive renames applied to every XML-derived record.
FIELD_RENAMES: dict[str, str] = {"modified": "mtime", "id": "uri"}


def normalize_value(field: FieldValue) -> Any:
    """Coerce a tagged feed value into its record representation."""
    if field.value is None:
        return None
    if field.kind == "timestamp":
        return field.value
    if field.kind == "structured":
        return escape_tree(field.value)
    return escape(field.value)


class ResponseParser:
    """Parses raw responses into ``SourceResult``s.

    Args:
        fields: Field names read off each XML feed entry.
        unsupported_content: ``"strict"`` raises ``UnsupportedEncodingError``
            for an unknown content type; ``"lenient"`` logs and skips the
            source.
    """

    def __init__(
        self,
        fields: Sequence[str] = DEFAULT_FIELDS,
        unsupported_content: UnsupportedContentPolicy = "strict",
    ) -> None:
        self._fields = tuple(fields)
        self._unsupported_content = unsupported_content

    @property
    def fields(self) -> tuple[str, ...]:
        return self._fields

    def parse(self, response: RawResponse) -> SourceResult | None:
        """Parse one response.

        Returns:
            The source's records and total, or ``None`` when the source is
            dropped (malformed feed, or unknown content type under the
            lenient policy).

        Raises:
            UnsupportedEncodingError: Unknown content type (strict policy).
            ResponseDecodeError: The JSON envelope cannot be decoded.
        """
        logger.debug("Parsing %s response for %s", response.content_type, response.source_url)

        if response.content_type == JSON_CONTENT_TYPE:
            return self.parse_json(response)

        if response.content_type == XML_CONTENT_TYPE:
            try:
                return self.parse_xml(response)
            except SourceParseError as e:
                logger.warning("Dropping source %s: %s", response.source_url, e)
                return None

        if self._unsupported_content == "lenient":
            logger.warning(
                "Skipping source %s: unsupported response type '%s'",
                response.source_url,
                response.content_type,
            )
            return None
        raise UnsupportedEncodingError(response.source_url, response.content_type)

    # ── JSON ─────────────────────────────────────────────────────────────

    def parse_json(self, response: RawResponse) -> SourceResult:
        """Parse the native JSON envelope. Records pass through unmodified."""
        try:
            payload = json.loads(response.body)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ResponseDecodeError(
                response.source_url,
                f"Invalid JSON from {response.source_url}: {e}",
            ) from e

        if not isinstance(payload, dict):
            raise ResponseDecodeError(
                response.source_url,
                f"Expected a JSON object from {response.source_url}, got {type(payload).__name__}",
            )

        results = payload.get("results")
        records = [r for r in results if isinstance(r, dict)] if isinstance(results, list) else []

        total = payload.get("total")
        if not isinstance(total, int) or isinstance(total, bool):
            total = 0

        return SourceResult(source_url=response.source_url, records=records, total=total)

    # ── XML ──────────────────────────────────────────────────────────────

    def parse_xml(self, response: RawResponse) -> SourceResult:
        """Parse an Atom/OpenSearch feed.

        Raises:
            SourceParseError: The feed itself is malformed. An entry whose
                nested content is malformed keeps its feed fields only.
        """
        feed = parse_feed(response.body, source_url=response.source_url)
        records = [self._entry_to_record(entry, response.source_url) for entry in feed.entries]
        return SourceResult(source_url=response.source_url, records=records, total=feed.total_results)

    def _entry_to_record(self, entry: FeedEntry, source_url: str) -> NormalizedRecord:
        record: NormalizedRecord = {name: normalize_value(entry.get(name)) for name in self._fields}

        try:
            nested = parse_fragment(entry.content_body, source_url=source_url)
        except SourceParseError as e:
            logger.warning("Ignoring nested content of entry %r: %s", entry.get("id").value, e)
            nested = {}
        for name, value in nested.items():
            record[name] = escape_tree(value)

        record["score"] = score_of(record)
        for old, new in FIELD_RENAMES.items():
            record[new] = record.pop(old, None)
        return record
