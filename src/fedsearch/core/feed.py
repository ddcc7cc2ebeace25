"""Atom feed reader with the OpenSearch response extension.

Parses an Atom ``<feed>`` carrying ``opensearch:totalResults`` into
``FeedEntry`` objects. Entry fields are read by name and returned as tagged
``FieldValue``s so callers never need to inspect concrete value types.

Each entry's ``<content>`` is expected to hold an XML fragment of extra
fields; ``parse_fragment()`` turns it into a plain tree of dicts, lists and
strings (attributes are ignored).
"""

from __future__ import annotations

import contextlib
import xml.etree.ElementTree as ET
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

from fedsearch.core.exceptions import SourceParseError
from fedsearch.models.result import FieldValue

ATOM_NS = "http://www.w3.org/2005/Atom"
OPENSEARCH_NS = "http://a9.com/-/spec/opensearch/1.1/"


def _local_name(tag: str) -> str:
    if "}" in tag:
        return tag.split("}", 1)[1]
    return tag


def _children(element: ET.Element, name: str) -> list[ET.Element]:
    return [child for child in element if _local_name(child.tag) == name]


def _first_child(element: ET.Element, name: str) -> ET.Element | None:
    matches = _children(element, name)
    return matches[0] if matches else None


def _inner_markup(element: ET.Element) -> str:
    """Return the element's body: its text, or its serialized children."""
    if len(element) == 0:
        return (element.text or "").strip()
    parts = [element.text or ""]
    parts.extend(ET.tostring(child, encoding="unicode") for child in element)
    return "".join(parts).strip()


def _parse_timestamp(raw: str | None) -> int | None:
    """Parse an RFC 3339 timestamp into integer epoch seconds."""
    if not raw:
        return None
    with contextlib.suppress(ValueError, TypeError):
        parsed = datetime.fromisoformat(raw.strip().replace("Z", "+00:00"))
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=UTC)
        return int(parsed.timestamp())
    return None


class FeedEntry:
    """A single ``<entry>`` of an Atom feed."""

    def __init__(self, element: ET.Element) -> None:
        self._element = element

    def get(self, name: str) -> FieldValue:
        """Read a field by name.

        Well-known Atom fields get dedicated readers (``author`` resolves the
        author name, ``link`` the alternate href, ``modified`` the ``updated``
        timestamp...). Any other name reads the text of the child element
        with that local name. Absent fields come back as ``text`` / ``None``.
        """
        reader = self._READERS.get(name)
        if reader is not None:
            return reader(self)
        return self._text(name)

    @property
    def content_body(self) -> str:
        """Body of the ``<content>`` element, or an empty string."""
        content = _first_child(self._element, "content")
        if content is None:
            return ""
        return _inner_markup(content)

    # ── Readers ──────────────────────────────────────────────────────────

    def _text(self, name: str) -> FieldValue:
        child = _first_child(self._element, name)
        if child is None:
            return FieldValue(kind="text")
        return FieldValue(kind="text", value=_inner_markup(child))

    def _content(self, name: str) -> FieldValue:
        child = _first_child(self._element, name)
        if child is None:
            return FieldValue(kind="content")
        return FieldValue(kind="content", value=_inner_markup(child))

    def _timestamp(self, *names: str) -> FieldValue:
        for name in names:
            child = _first_child(self._element, name)
            if child is not None and child.text:
                return FieldValue(kind="timestamp", value=_parse_timestamp(child.text))
        return FieldValue(kind="timestamp")

    def _author(self) -> FieldValue:
        author = _first_child(self._element, "author")
        if author is None:
            return FieldValue(kind="text")
        name = _first_child(author, "name")
        return FieldValue(kind="text", value=_inner_markup(name if name is not None else author))

    def _link(self) -> FieldValue:
        links = _children(self._element, "link")
        if not links:
            return FieldValue(kind="text")
        for link in links:
            if link.attrib.get("rel", "alternate") == "alternate":
                return FieldValue(kind="text", value=link.attrib.get("href"))
        return FieldValue(kind="text", value=links[0].attrib.get("href"))

    def _tags(self) -> FieldValue:
        terms = [
            category.attrib["term"]
            for category in _children(self._element, "category")
            if category.attrib.get("term")
        ]
        if not terms:
            return FieldValue(kind="text")
        if len(terms) == 1:
            return FieldValue(kind="text", value=terms[0])
        return FieldValue(kind="structured", value=terms)

    _READERS: dict[str, Callable[[FeedEntry], FieldValue]] = {
        "title": lambda self: self._text("title"),
        "id": lambda self: self._text("id"),
        "author": lambda self: self._author(),
        "link": lambda self: self._link(),
        "summary": lambda self: self._content("summary"),
        "content": lambda self: self._content("content"),
        "tags": lambda self: self._tags(),
        "category": lambda self: self._tags(),
        "modified": lambda self: self._timestamp("updated", "published"),
        "updated": lambda self: self._timestamp("updated"),
        "issued": lambda self: self._timestamp("published"),
        "published": lambda self: self._timestamp("published"),
    }


class AtomFeed:
    """A parsed OpenSearch Atom feed.

    Attributes:
        total_results: Value of ``opensearch:totalResults`` (0 if absent).
        entries: Entries in document order.
    """

    def __init__(self, total_results: int, entries: list[FeedEntry]) -> None:
        self.total_results = total_results
        self.entries = entries


def parse_feed(body: bytes, *, source_url: str = "") -> AtomFeed:
    """Parse an Atom feed body.

    Raises:
        SourceParseError: If the body is not well-formed XML or its root is
            not an Atom ``<feed>``.
    """
    try:
        root = ET.fromstring(body)
    except ET.ParseError as e:
        raise SourceParseError(source_url, f"Malformed feed from {source_url}: {e}") from e

    if _local_name(root.tag) != "feed":
        raise SourceParseError(
            source_url,
            f"Expected an Atom <feed> from {source_url}, got <{_local_name(root.tag)}>",
        )

    total = 0
    total_node = root.find(f"{{{OPENSEARCH_NS}}}totalResults")
    if total_node is not None and total_node.text:
        with contextlib.suppress(ValueError):
            total = int(total_node.text.strip())

    entries = [FeedEntry(element) for element in root.findall("{*}entry")]
    return AtomFeed(total_results=total, entries=entries)


def _simplify(element: ET.Element) -> Any:
    children = list(element)
    if not children:
        return (element.text or "").strip()

    node: dict[str, Any] = {}
    for child in children:
        key = _local_name(child.tag)
        value = _simplify(child)
        if key not in node:
            node[key] = value
        elif isinstance(node[key], list):
            node[key].append(value)
        else:
            node[key] = [node[key], value]

    # mixed content
    text = "".join([element.text or "", *(child.tail or "" for child in children)]).strip()
    if text:
        node["content"] = text
    return node


def parse_fragment(body: str, *, source_url: str = "") -> dict[str, Any]:
    """Parse an entry's nested XML content into a dict of fields.

    The children of the fragment's root element become the keys. Leaf
    elements map to their text, elements with children to dicts, and
    repeated names to lists. A body without markup yields no fields.

    Raises:
        SourceParseError: If the body looks like markup but is not well-formed.
    """
    if not body or not body.lstrip().startswith("<"):
        return {}
    try:
        root = ET.fromstring(body)
    except ET.ParseError as e:
        raise SourceParseError(source_url, f"Malformed entry content from {source_url}: {e}") from e

    fields = _simplify(root)
    return fields if isinstance(fields, dict) else {}
